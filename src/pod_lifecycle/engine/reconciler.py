"""ReconciliationEngine runs one tick: archive cleanup, metrics digest, state tracker."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from pod_lifecycle.config.schema import AgentConfig
from pod_lifecycle.engine.active_set import ActiveSet
from pod_lifecycle.engine.archive import RetiredArchive
from pod_lifecycle.engine.digest import MetricsDigest
from pod_lifecycle.engine.errors import ReconcileFault, RetentionMismatch, TransportFault, report
from pod_lifecycle.engine.tracker import WorkloadStateTracker
from pod_lifecycle.models.events import EventType, LifecycleEvent, utcnow
from pod_lifecycle.protocols import EventSink, SnapshotSource

log = structlog.get_logger()


@dataclass
class EngineState:
    """Everything carried from one tick to the next."""

    active: ActiveSet = field(default_factory=ActiveSet)
    retired: RetiredArchive = field(default_factory=RetiredArchive)
    freshness: dict[str, datetime] = field(default_factory=dict)


@dataclass
class TickResult:
    """What a single tick emitted, and whether it ran to completion."""

    started_at: datetime
    finished_at: datetime | None = None
    aborted: bool = False
    events: list[LifecycleEvent] = field(default_factory=list)

    @property
    def faults(self) -> list[LifecycleEvent]:
        return [e for e in self.events if e.event_type == EventType.FAULT]

    def counts(self) -> dict[str, int]:
        return dict(Counter(e.event_type.value for e in self.events))


class _TickRecorder:
    """Forwards events to the real sink and copies them into the current TickResult."""

    def __init__(self, sink: EventSink) -> None:
        self.sink = sink
        self.result: TickResult | None = None

    def emit(self, event: LifecycleEvent) -> None:
        if self.result is not None:
            self.result.events.append(event)
        self.sink.emit(event)


class ReconciliationEngine:
    """Owns the engine state and runs reconciliation ticks against a snapshot source."""

    def __init__(
        self,
        source: SnapshotSource,
        sink: EventSink,
        state: EngineState | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.state = state or EngineState()
        self._source = source
        self._recorder = _TickRecorder(sink)
        self._clock = clock
        self.digest = MetricsDigest(self._recorder, self.state.freshness)
        self.tracker = WorkloadStateTracker(
            self.state.active,
            self.state.retired,
            source,
            self._recorder,
            clock=clock,
        )

    @classmethod
    def from_config(
        cls,
        config: AgentConfig,
        source: SnapshotSource,
        sink: EventSink,
        clock: Callable[[], datetime] = utcnow,
    ) -> ReconciliationEngine:
        state = EngineState(
            retired=RetiredArchive(
                max_entries=config.archive_max_entries,
                retention=config.archive_retention,
            )
        )
        return cls(source, sink, state=state, clock=clock)

    async def tick(self) -> TickResult:
        """Run one reconciliation pass.

        A snapshot transport fault aborts the rest of this tick only; the next
        tick starts from the same state.
        """
        result = TickResult(started_at=self._clock())
        self._recorder.result = result
        try:
            self._cleanup(result.started_at)

            try:
                metrics = await self._source.list_metrics()
                present = self.digest.ingest(metrics)
                workloads = await self._source.list_workloads()
            except TransportFault as fault:
                report(self._recorder, fault)
                result.aborted = True
                return result

            await self.tracker.reconcile(workloads, present)
        finally:
            self._recorder.result = None
            result.finished_at = self._clock()

        log.debug(
            "tick completed",
            active=len(self.state.active),
            retired=len(self.state.retired),
            **result.counts(),
        )
        return result

    def report(self, fault: ReconcileFault) -> None:
        """Report a fault raised outside a tick (e.g. by the driver)."""
        report(self._recorder, fault)

    def _cleanup(self, now: datetime) -> None:
        try:
            evicted = self.state.retired.cleanup(now)
        except RetentionMismatch as fault:
            report(self._recorder, fault)
            return
        if evicted:
            self.digest.forget(evicted)
