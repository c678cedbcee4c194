from pod_lifecycle.testing.fakes import FakeClock, MemorySink, StaticSnapshotSource

__all__ = ["FakeClock", "MemorySink", "StaticSnapshotSource"]
