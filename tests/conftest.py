from datetime import datetime, timezone
from pathlib import Path

import pytest

from pod_lifecycle.engine.reconciler import EngineState, ReconciliationEngine
from pod_lifecycle.testing import FakeClock, MemorySink, StaticSnapshotSource


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def source() -> StaticSnapshotSource:
    return StaticSnapshotSource()


@pytest.fixture
def engine(
    source: StaticSnapshotSource, sink: MemorySink, clock: FakeClock
) -> ReconciliationEngine:
    return ReconciliationEngine(source, sink, state=EngineState(), clock=clock)
