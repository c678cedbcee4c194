"""MetricsDigest — per-workload deduplication of metrics samples by timestamp."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError

from pod_lifecycle.engine.errors import MalformedInputFault, report
from pod_lifecycle.models.events import EventType, LifecycleEvent
from pod_lifecycle.models.metrics import PodMetrics
from pod_lifecycle.protocols import EventSink

log = structlog.get_logger()


class MetricsDigest:
    """Logs a metrics sample only when it is strictly newer than the last one logged."""

    def __init__(self, sink: EventSink, freshness: dict[str, datetime] | None = None) -> None:
        self._sink = sink
        self.freshness: dict[str, datetime] = freshness if freshness is not None else {}

    def ingest(self, snapshot: Iterable[Mapping[str, Any] | PodMetrics]) -> set[str]:
        """Digest one metrics snapshot. Returns every workload name present in it."""
        present: set[str] = set()
        for item in snapshot:
            try:
                sample = item if isinstance(item, PodMetrics) else PodMetrics.model_validate(item)
            except ValidationError as e:
                name = _peek_name(item)
                if name:
                    present.add(name)
                report(
                    self._sink,
                    MalformedInputFault(
                        "metrics entry failed to decode", workload=name, error=str(e)
                    ),
                )
                continue

            present.add(sample.name)
            last = self.freshness.get(sample.name)
            if last is not None and sample.timestamp <= last:
                continue

            self.freshness[sample.name] = sample.timestamp
            self._sink.emit(
                LifecycleEvent(
                    workload_name=sample.name,
                    event_type=EventType.METRICS_SAMPLE,
                    payload=sample.to_payload(),
                )
            )
        return present

    def forget(self, names: Iterable[str]) -> None:
        """Drop freshness entries, e.g. for workloads purged from the archive."""
        dropped = 0
        for name in names:
            if self.freshness.pop(name, None) is not None:
                dropped += 1
        if dropped:
            log.debug("metrics freshness evicted", count=dropped)


def _peek_name(item: Any) -> str | None:
    """Best-effort name of an undecodable entry, for diagnostics."""
    if not isinstance(item, Mapping):
        return None
    metadata = item.get("metadata")
    if isinstance(metadata, Mapping) and isinstance(metadata.get("name"), str):
        return metadata["name"]
    return None
