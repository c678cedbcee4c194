"""Typed faults raised and collected during a reconciliation tick."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from pod_lifecycle.models.events import EventType, LifecycleEvent

if TYPE_CHECKING:
    from pod_lifecycle.protocols import EventSink

log = structlog.get_logger()


class ReconcileFault(Exception):
    """Base class. ``kind`` tags the fault in the diagnostic stream."""

    kind = "fault"

    def __init__(self, message: str, workload: str | None = None, **context: Any) -> None:
        self.message = message
        self.workload = workload
        self.context = context
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, **self.context}

    def to_event(self) -> LifecycleEvent:
        return LifecycleEvent(
            workload_name=self.workload,
            event_type=EventType.FAULT,
            payload=self.to_payload(),
        )


class TransportFault(ReconcileFault):
    """A snapshot or detail fetch failed, or its body could not be decoded."""

    kind = "transport"


class ConsistencyFault(ReconcileFault):
    """Internal bookkeeping disagrees with itself. Never expected."""

    kind = "consistency"


class RetentionMismatch(ConsistencyFault):
    """Archive is over its size threshold but holds nothing inside the retention window."""


class MalformedInputFault(ReconcileFault):
    """A metrics entry failed to decode."""

    kind = "malformed_input"


class InternalFault(ReconcileFault):
    """A tick raised something outside the fault hierarchy."""

    kind = "internal"


def report(sink: EventSink, fault: ReconcileFault) -> None:
    """Write a fault to the operational log and the event stream."""
    emit_log = log.error if isinstance(fault, ConsistencyFault) else log.warning
    emit_log("reconcile fault", kind=fault.kind, workload=fault.workload, error=fault.message)
    sink.emit(fault.to_event())
