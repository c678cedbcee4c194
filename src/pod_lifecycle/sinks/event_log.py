"""EventLogger: writes lifecycle events and diagnostics as JSON lines."""

from __future__ import annotations

from typing import TextIO

import structlog

from pod_lifecycle.models.events import LifecycleEvent


class EventLogger:
    """EventSink writing one JSON object per event to ``file``.

    Uses its own structlog pipeline so the event stream stays JSON regardless
    of how the operational logger is configured.
    """

    def __init__(self, file: TextIO) -> None:
        self._file = file
        self._log = structlog.wrap_logger(
            structlog.WriteLogger(file),
            processors=[
                structlog.processors.TimeStamper(fmt="iso", utc=True, key="logged_at"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
        )

    def emit(self, event: LifecycleEvent) -> None:
        self._log.info(
            event.event_type.value,
            stream=event.stream,
            workload=event.workload_name,
            observed_at=event.timestamp.isoformat(),
            **event.payload,
        )

    def close(self) -> None:
        close = getattr(self._file, "close", None)
        if close is not None:
            close()
