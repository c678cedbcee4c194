from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    FIRST_OBSERVED = "first_observed"
    STATUS_CHANGED = "status_changed"
    RETIRED = "retired"
    METRICS_SAMPLE = "metrics_sample"
    FAULT = "fault"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LifecycleEvent:
    """An event emitted by the reconciliation engine about a workload."""

    workload_name: str | None
    event_type: EventType
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def stream(self) -> str:
        return "diagnostic" if self.event_type == EventType.FAULT else "lifecycle"
