from __future__ import annotations

from collections.abc import Iterator

from pod_lifecycle.engine.errors import ConsistencyFault
from pod_lifecycle.models.workload import WorkloadRecord


class ActiveSet:
    """Ordered set of tracked workloads, keyed by name.

    ``_records`` keeps insertion order and doubles as the name index;
    ``_names`` is the membership set consulted before every lookup.
    """

    def __init__(self) -> None:
        self._records: dict[str, WorkloadRecord] = {}
        self._names: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[WorkloadRecord]:
        return iter(list(self._records.values()))

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)

    def add(self, record: WorkloadRecord) -> None:
        if record.name in self._names:
            raise ConsistencyFault(
                "workload already in active set", workload=record.name
            )
        self._records[record.name] = record
        self._names.add(record.name)

    def get(self, name: str) -> WorkloadRecord:
        """Return the record for a member name.

        Raises ConsistencyFault when the membership set and the record index disagree.
        """
        record = self._records.get(name)
        if record is None:
            raise ConsistencyFault(
                "active set membership lists a workload with no record", workload=name
            )
        return record

    def remove(self, name: str) -> WorkloadRecord:
        record = self._records.pop(name, None)
        if record is None:
            raise ConsistencyFault(
                "active set membership lists a workload with no record when removing",
                workload=name,
            )
        self._names.discard(name)
        return record
