from __future__ import annotations

from decimal import Decimal
from itertools import count

from resplan.models.records import ResourceAssignment

_ids = count(1)


def make_record(**overrides: object) -> ResourceAssignment:
    values: dict[str, object] = {
        "id": f"rec-{next(_ids):04d}",
        "name": "Alice",
        "team": "Core",
        "product": "P1",
        "project": "X",
        "hours_per_month": Decimal("40"),
        "hourly_rate": Decimal("1000"),
        "month": "2025-03",
    }
    values.update(overrides)
    return ResourceAssignment(**values)


class BootstrapSpy:
    """Fixed bootstrap dataset that counts how often it was generated."""

    def __init__(self, records: list[ResourceAssignment] | None = None) -> None:
        if records is None:
            records = [
                make_record(id="boot-1", name="Vika", product="GrafBoard", project="GrafBoard - Project", month="2025-01"),
                make_record(id="boot-2", name="Vlad", product="GrafDoc", project="GrafDoc - Project", month="2025-01"),
            ]
        self.records = records
        self.calls = 0

    def __call__(self) -> list[ResourceAssignment]:
        self.calls += 1
        return list(self.records)
