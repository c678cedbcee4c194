"""RetiredArchive — chronological store of retired workloads with bulk eviction."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timedelta

import structlog

from pod_lifecycle.engine.errors import ConsistencyFault, RetentionMismatch
from pod_lifecycle.models.workload import WorkloadRecord

log = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_RETENTION = timedelta(hours=24)


class RetiredArchive:
    """Insertion-ordered retired workloads plus a name membership set.

    Eviction only happens in :meth:`cleanup`, as a prefix truncation once the
    archive grows past ``max_entries``.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retention: timedelta = DEFAULT_RETENTION,
    ) -> None:
        self.max_entries = max_entries
        self.retention = retention
        self._records: list[WorkloadRecord] = []
        self._names: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[WorkloadRecord]:
        return iter(list(self._records))

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)

    def append(self, record: WorkloadRecord) -> None:
        if record.name in self._names:
            raise ConsistencyFault("workload already archived", workload=record.name)
        self._records.append(record)
        self._names.add(record.name)

    def cleanup(self, now: datetime) -> list[str]:
        """Drop the prefix of entries retired before the retention window.

        Only runs when the archive holds more than ``max_entries``. Returns the
        names evicted. Raises RetentionMismatch, leaving the archive untouched,
        when no entry falls inside the window.
        """
        if len(self._records) <= self.max_entries:
            return []

        cutoff = now - self.retention
        pos = next(
            (i for i, r in enumerate(self._records) if _retired_time(r) > cutoff),
            None,
        )
        if pos is None:
            raise RetentionMismatch(
                "archive exceeds max_entries with no entry inside the retention window",
                size=len(self._records),
                max_entries=self.max_entries,
                retention_seconds=self.retention.total_seconds(),
            )

        evicted = [r.name for r in self._records[:pos]]
        self._records = self._records[pos:]
        self._names = {r.name for r in self._records}
        if evicted:
            log.info("archive evicted", count=len(evicted), remaining=len(self._records))
        return evicted


def _retired_time(record: WorkloadRecord) -> datetime:
    return record.retired_at or record.last_change
