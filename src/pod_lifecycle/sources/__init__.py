from pod_lifecycle.sources.kubernetes import KubernetesSnapshotSource, load_client_config

__all__ = ["KubernetesSnapshotSource", "load_client_config"]
