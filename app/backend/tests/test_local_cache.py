from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from resplan.core.errors import CacheCorrupt
from resplan.models.records import ResourceStatus
from resplan.services.local_cache import LocalSnapshotCache

from factories import make_record


def test_missing_slot_reads_as_empty(cache: LocalSnapshotCache) -> None:
    assert cache.read() == []


def test_write_then_read_keeps_records(cache: LocalSnapshotCache) -> None:
    records = [
        make_record(id="a", hours_per_month=Decimal("12.5"), hourly_rate=Decimal("1500")),
        make_record(
            id="b",
            status=ResourceStatus.PLANNED,
            hours_per_week=Decimal("8"),
            start_date=date(2025, 3, 3),
            end_date=date(2025, 3, 28),
            calendar_date=date(2025, 3, 3),
        ),
    ]

    cache.write(records)

    assert cache.read() == records


def test_slot_uses_camel_case_keys(cache: LocalSnapshotCache) -> None:
    cache.write([make_record(id="a", calendar_date=date(2025, 3, 3))])

    [payload] = json.loads(cache.path.read_text(encoding="utf-8"))
    assert payload["hoursPerMonth"] == "40"
    assert payload["hourlyRate"] == "1000"
    assert payload["date"] == "2025-03-03"


def test_reads_legacy_browser_snapshot(cache: LocalSnapshotCache) -> None:
    cache.path.parent.mkdir(parents=True, exist_ok=True)
    cache.path.write_text(
        json.dumps(
            [
                {
                    "id": 1735689600000.5,
                    "name": "Vika",
                    "team": "GrafTech",
                    "product": "GrafBoard",
                    "project": "GrafBoard - Project",
                    "hoursPerMonth": 80,
                    "hourlyRate": 1200,
                    "month": "2025-01",
                    "status": "active",
                },
                {
                    "id": 1735689600001,
                    "name": "GrafTech - GrafDoc",
                    "project": "GrafDoc",
                    "hoursPerWeek": 20,
                    "startDate": "2025-02-03T00:00:00.000Z",
                    "endDate": "2025-02-28T00:00:00.000Z",
                    "status": "planned",
                },
            ]
        ),
        encoding="utf-8",
    )

    active, planned = cache.read()

    assert active.id == "1735689600000.5"
    assert active.monthly_cost == Decimal("96000")
    assert planned.id == "1735689600001"
    assert planned.start_date == date(2025, 2, 3)
    assert planned.status is ResourceStatus.PLANNED


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"id": "a"}',
        '[{"id": "a", "hoursPerMonth": -5}]',
        "[1, 2, 3]",
    ],
)
def test_corrupt_slot_raises_cache_corrupt(cache: LocalSnapshotCache, content: str) -> None:
    cache.path.parent.mkdir(parents=True, exist_ok=True)
    cache.path.write_text(content, encoding="utf-8")

    with pytest.raises(CacheCorrupt):
        cache.read()


def test_write_into_unusable_directory_raises_os_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    cache = LocalSnapshotCache(blocker / "slot.json")

    with pytest.raises(OSError):
        cache.write([make_record()])


def test_clear_removes_slot(cache: LocalSnapshotCache) -> None:
    cache.write([make_record()])

    cache.clear()
    cache.clear()

    assert not cache.path.exists()
    assert cache.read() == []
