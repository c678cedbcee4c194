"""Protocol definitions for the collaborators around the reconciliation engine.

The engine only talks to these two contracts; ``sources.kubernetes`` and
``sinks.event_log`` are the production implementations and
``pod_lifecycle.testing`` holds in-memory ones.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pod_lifecycle.models.events import LifecycleEvent
from pod_lifecycle.models.workload import WorkloadObservation


@runtime_checkable
class SnapshotSource(Protocol):
    """Point-in-time views of one namespace.

    Every method raises ``TransportFault`` when the call or its decoding fails.
    """

    async def list_workloads(self) -> Sequence[WorkloadObservation]:
        """Return every currently listed workload, in listing order."""
        ...

    async def list_metrics(self) -> Sequence[Mapping[str, Any]]:
        """Return the raw pod metrics items (undecoded)."""
        ...

    async def fetch_detail(self, name: str) -> str:
        """Return the serialized detail of one workload for audit logging."""
        ...


@runtime_checkable
class EventSink(Protocol):
    """Durable destination for lifecycle events and diagnostics."""

    def emit(self, event: LifecycleEvent) -> None:
        ...
