from pod_lifecycle.models.events import EventType, LifecycleEvent
from pod_lifecycle.models.metrics import ContainerUsage, PodMetrics, ResourceUsage
from pod_lifecycle.models.workload import (
    WorkloadObservation,
    WorkloadPhase,
    WorkloadRecord,
)

__all__ = [
    "ContainerUsage",
    "EventType",
    "LifecycleEvent",
    "PodMetrics",
    "ResourceUsage",
    "WorkloadObservation",
    "WorkloadPhase",
    "WorkloadRecord",
]
