"""WorkloadStateTracker — first sightings, phase transitions and retirement."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

import structlog

from pod_lifecycle.engine.active_set import ActiveSet
from pod_lifecycle.engine.archive import RetiredArchive
from pod_lifecycle.engine.errors import ConsistencyFault, TransportFault, report
from pod_lifecycle.models.events import EventType, LifecycleEvent, utcnow
from pod_lifecycle.models.workload import WorkloadObservation, WorkloadRecord
from pod_lifecycle.protocols import EventSink, SnapshotSource

log = structlog.get_logger()


class WorkloadStateTracker:
    """Reconciles a workload snapshot against the active set and the archive."""

    def __init__(
        self,
        active: ActiveSet,
        retired: RetiredArchive,
        source: SnapshotSource,
        sink: EventSink,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.active = active
        self.retired = retired
        self._source = source
        self._sink = sink
        self._clock = clock

    async def reconcile(
        self,
        snapshot: Iterable[WorkloadObservation],
        present_in_metrics: set[str],
    ) -> None:
        """Apply one workload snapshot, in listing order.

        Workloads tracked but missing from the snapshot are left as they are;
        they only leave the active set through retirement.
        """
        for obs in snapshot:
            if obs.name in self.retired:
                continue

            if obs.name not in self.active:
                await self._observe_new(obs)
                continue

            try:
                record = self.active.get(obs.name)
            except ConsistencyFault as fault:
                report(self._sink, fault)
                continue

            if record.status != obs.phase:
                await self._change_status(record, obs)

            if obs.name not in present_in_metrics and record.status.is_terminal:
                self._retire(record)

    async def _observe_new(self, obs: WorkloadObservation) -> None:
        # Detail is fetched before the record is committed, so a tick cancelled
        # mid-fetch leaves the workload unseen and it is observed again next tick.
        detail = await self._fetch_detail(obs.name)
        record = WorkloadRecord.from_observation(obs, self._clock())
        self.active.add(record)
        self._emit(
            record,
            EventType.FIRST_OBSERVED,
            uid=record.uid,
            status=record.status.value,
            detail=detail,
        )

    async def _change_status(self, record: WorkloadRecord, obs: WorkloadObservation) -> None:
        detail = await self._fetch_detail(record.name)
        old_status = record.status
        record.status = obs.phase
        record.last_change = self._clock()
        self._emit(
            record,
            EventType.STATUS_CHANGED,
            uid=record.uid,
            old_status=old_status.value,
            status=record.status.value,
            detail=detail,
        )

    def _retire(self, record: WorkloadRecord) -> None:
        try:
            self.active.remove(record.name)
        except ConsistencyFault as fault:
            report(self._sink, fault)
            return
        record.retired_at = self._clock()
        self.retired.append(record)
        log.debug("workload retired", workload=record.name, status=record.status.value)
        self._emit(record, EventType.RETIRED, uid=record.uid, status=record.status.value)

    async def _fetch_detail(self, name: str) -> str | None:
        try:
            return await self._source.fetch_detail(name)
        except TransportFault as fault:
            if fault.workload is None:
                fault.workload = name
            report(self._sink, fault)
            return None

    def _emit(self, record: WorkloadRecord, event_type: EventType, **payload: object) -> None:
        self._sink.emit(
            LifecycleEvent(
                workload_name=record.name,
                event_type=event_type,
                payload={"name": record.name, **payload},
            )
        )
