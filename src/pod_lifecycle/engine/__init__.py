from pod_lifecycle.engine.active_set import ActiveSet
from pod_lifecycle.engine.archive import RetiredArchive
from pod_lifecycle.engine.digest import MetricsDigest
from pod_lifecycle.engine.driver import TickDriver
from pod_lifecycle.engine.errors import (
    ConsistencyFault,
    InternalFault,
    MalformedInputFault,
    ReconcileFault,
    RetentionMismatch,
    TransportFault,
)
from pod_lifecycle.engine.reconciler import EngineState, ReconciliationEngine, TickResult
from pod_lifecycle.engine.tracker import WorkloadStateTracker

__all__ = [
    "ActiveSet",
    "ConsistencyFault",
    "EngineState",
    "InternalFault",
    "MalformedInputFault",
    "MetricsDigest",
    "ReconcileFault",
    "ReconciliationEngine",
    "RetentionMismatch",
    "RetiredArchive",
    "TickDriver",
    "TickResult",
    "TransportFault",
    "WorkloadStateTracker",
]
