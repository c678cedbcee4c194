from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class WorkloadPhase(StrEnum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkloadPhase.SUCCEEDED, WorkloadPhase.FAILED)

    @classmethod
    def parse(cls, value: str | None) -> WorkloadPhase:
        """Map a raw phase string to a member, falling back to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class WorkloadObservation:
    """One entry of a workload snapshot, as listed by the cluster."""

    name: str
    uid: str
    phase: WorkloadPhase


@dataclass
class WorkloadRecord:
    """Mutable bookkeeping for a tracked workload."""

    name: str
    uid: str
    status: WorkloadPhase
    last_change: datetime
    retired_at: datetime | None = None

    @classmethod
    def from_observation(cls, obs: WorkloadObservation, now: datetime) -> WorkloadRecord:
        return cls(name=obs.name, uid=obs.uid, status=obs.phase, last_change=now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict suitable for JSON output."""
        return {
            "name": self.name,
            "uid": self.uid,
            "status": self.status.value,
            "last_change": self.last_change.isoformat(),
            "retired_at": self.retired_at.isoformat() if self.retired_at else None,
        }
