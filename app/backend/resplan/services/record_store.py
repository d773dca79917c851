"""Canonical in-memory collection of resource assignments."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from resplan.models.records import ResourceAssignment


class RecordStore:
    """Ordered, id-unique record list for the current session.

    Readers get immutable tuple snapshots; every mutation swaps the whole
    tuple under a lock, so a snapshot is never observed mid-replace.
    """

    def __init__(self, records: Iterable[ResourceAssignment] = ()) -> None:
        self._lock = threading.Lock()
        self._records: tuple[ResourceAssignment, ...] = ()
        self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def replace_all(self, records: Iterable[ResourceAssignment]) -> None:
        # Duplicate ids keep the first position and the last value.
        by_id: dict[str, ResourceAssignment] = {}
        for record in records:
            by_id[record.id] = record
        with self._lock:
            self._records = tuple(by_id.values())

    def upsert(self, record: ResourceAssignment) -> ResourceAssignment:
        with self._lock:
            current = list(self._records)
            for index, existing in enumerate(current):
                if existing.id == record.id:
                    current[index] = record
                    break
            else:
                current.append(record)
            self._records = tuple(current)
        return record

    def remove(self, record_id: str) -> bool:
        with self._lock:
            remaining = tuple(record for record in self._records if record.id != record_id)
            removed = len(remaining) != len(self._records)
            self._records = remaining
        return removed

    def get(self, record_id: str) -> ResourceAssignment | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def all(self) -> tuple[ResourceAssignment, ...]:
        return self._records
