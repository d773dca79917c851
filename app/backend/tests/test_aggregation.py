from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from resplan.models.records import ResourceStatus
from resplan.services.aggregation import (
    FALLBACK_MONTH,
    ChartMetric,
    calendar_bucket,
    calendar_month,
    distinct_options,
    filter_by_month,
    group_by_team,
    group_hierarchy,
    hierarchy_rollups,
    month_key,
    planned_records,
    product_project_series,
    rank_projects,
    shift_month,
    summary_stats,
)

from factories import make_record


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2025-03", "2025-03"),
        ("2025-03-17", "2025-03"),
        ("2025-03-01T00:00:00.000Z", "2025-03"),
        (None, FALLBACK_MONTH),
        ("", FALLBACK_MONTH),
        ("March", FALLBACK_MONTH),
        ("2025-13", FALLBACK_MONTH),
    ],
)
def test_month_key_normalizes_to_year_month(raw: str | None, expected: str) -> None:
    key = month_key(make_record(month=raw))

    assert key == expected
    assert len(key) == 7
    assert re.fullmatch(r"\d{4}-\d{2}", key)


def test_month_key_accepts_date_objects() -> None:
    assert month_key(make_record(month=date(2024, 11, 5))) == "2024-11"


def test_filter_by_month_compares_normalized_keys() -> None:
    march_short = make_record(month="2025-03")
    march_long = make_record(month="2025-03-01")
    april = make_record(month="2025-04")
    undated = make_record(month=None)

    assert filter_by_month([march_short, march_long, april, undated], "2025-03") == [march_short, march_long]
    assert filter_by_month([march_short, undated], FALLBACK_MONTH) == [undated]


def test_summary_stats_of_empty_input_is_all_zero() -> None:
    stats = summary_stats([])

    assert stats.total_members == 0
    assert stats.total_projects == 0
    assert stats.total_products == 0
    assert stats.total_hours == 0
    assert stats.total_cost == 0
    assert stats.avg_hourly_rate == 0


def test_summary_stats_totals_and_distinct_counts() -> None:
    records = [
        make_record(name="A", product="P1", project="X", hours_per_month=Decimal("40"), hourly_rate=Decimal("1000")),
        make_record(name="A", product="P1", project="Y", hours_per_month=Decimal("10"), hourly_rate=Decimal("1500")),
        make_record(name="B", product="P2", project="X", hours_per_month=Decimal("12.5"), hourly_rate=Decimal("999")),
    ]

    stats = summary_stats(records)

    expected_cost = sum(record.hours_per_month * record.hourly_rate for record in records)
    assert stats.total_cost == expected_cost == Decimal("67487.5")
    assert stats.total_hours == Decimal("62.5")
    assert stats.total_members == 2
    assert stats.total_projects == 2
    assert stats.total_products == 2
    assert stats.avg_hourly_rate == Decimal("1079.80")


def test_summary_stats_zero_hours_gives_zero_average() -> None:
    stats = summary_stats([make_record(hours_per_month=Decimal("0"), hourly_rate=Decimal("2000"))])

    assert stats.total_hours == 0
    assert stats.avg_hourly_rate == Decimal("0")


def test_group_hierarchy_preserves_first_seen_order() -> None:
    first = make_record(product="Beta", project="b1")
    second = make_record(product="Alpha", project="a1")
    third = make_record(product="Beta", project="b0")
    fourth = make_record(product="Beta", project="b1")

    hierarchy = group_hierarchy([first, second, third, fourth])

    assert list(hierarchy) == ["Beta", "Alpha"]
    assert list(hierarchy["Beta"]) == ["b1", "b0"]
    assert hierarchy["Beta"]["b1"] == [first, fourth]


def test_hierarchy_rollups_sum_hours_cost_and_members() -> None:
    records = [
        make_record(product="P1", project="X", hours_per_month=Decimal("40"), hourly_rate=Decimal("1000")),
        make_record(product="P1", project="X", hours_per_month=Decimal("20"), hourly_rate=Decimal("2000")),
        make_record(product="P1", project="Y", hours_per_month=Decimal("5"), hourly_rate=Decimal("100")),
    ]

    [product] = hierarchy_rollups(group_hierarchy(records))

    assert product.name == "P1"
    assert product.project_count == 2
    assert product.rollup.hours == Decimal("65")
    assert product.rollup.cost == Decimal("80500")
    assert product.rollup.members == 3
    assert [project.rollup.cost for project in product.projects] == [Decimal("80000"), Decimal("500")]


def test_rank_projects_sorted_by_cost_with_stable_ties() -> None:
    records = [
        make_record(project="tie-first", hours_per_month=Decimal("10"), hourly_rate=Decimal("100")),
        make_record(project="big", hours_per_month=Decimal("100"), hourly_rate=Decimal("100")),
        make_record(project="tie-second", hours_per_month=Decimal("20"), hourly_rate=Decimal("50")),
        make_record(project="small", hours_per_month=Decimal("1"), hourly_rate=Decimal("1")),
    ]

    ranked = rank_projects(records, 3)

    assert [group.key for group in ranked] == ["big", "tie-first", "tie-second"]
    costs = [group.rollup.cost for group in ranked]
    assert costs == sorted(costs, reverse=True)


def test_rank_projects_handles_empty_and_non_positive_limits() -> None:
    assert rank_projects([], 5) == []
    assert rank_projects([make_record()], 0) == []


def test_group_by_team_rollups() -> None:
    records = [
        make_record(team="Web", hours_per_month=Decimal("10"), hourly_rate=Decimal("100")),
        make_record(team="Mobile", hours_per_month=Decimal("50"), hourly_rate=Decimal("100")),
        make_record(team="Web", hours_per_month=Decimal("30"), hourly_rate=Decimal("100")),
    ]

    teams = group_by_team(records)

    assert [team.key for team in teams] == ["Mobile", "Web"]
    assert teams[1].rollup.hours == Decimal("40")
    assert teams[1].rollup.members == 2


def test_calendar_bucket_matches_date_only_and_uses_weekly_hours() -> None:
    matching = make_record(
        calendar_date="2025-03-10T15:30:00",
        hours_per_week=Decimal("12"),
        hourly_rate=Decimal("1500"),
    )
    other_day = make_record(calendar_date=date(2025, 3, 11), hours_per_week=Decimal("8"))
    undated = make_record(hours_per_week=Decimal("8"))

    bucket = calendar_bucket([matching, other_day, undated], datetime(2025, 3, 10, 9, 0))

    assert bucket.day == date(2025, 3, 10)
    assert bucket.records == [matching]
    assert bucket.hours == Decimal("12")
    assert bucket.cost == Decimal("18000")


def test_calendar_bucket_empty() -> None:
    bucket = calendar_bucket([], date(2025, 1, 1))

    assert bucket.records == []
    assert bucket.hours == 0
    assert bucket.cost == 0


def test_calendar_month_has_one_bucket_per_day() -> None:
    planned = make_record(calendar_date=date(2024, 2, 29), hours_per_week=Decimal("4"))

    days = calendar_month([planned], 2024, 2)

    assert len(days) == 29
    assert days[-1].records == [planned]
    assert all(not day.records for day in days[:-1])


def test_product_project_series_per_metric() -> None:
    records = [
        make_record(product="P1", project="X", hours_per_month=Decimal("10"), hourly_rate=Decimal("100")),
        make_record(product="P1", project="X", hours_per_month=Decimal("5"), hourly_rate=Decimal("100")),
        make_record(product="P2", project="Y", hours_per_month=Decimal("1"), hourly_rate=Decimal("10")),
    ]

    cost = product_project_series(records, ChartMetric.COST)
    hours = product_project_series(records, ChartMetric.HOURS)
    members = product_project_series(records, ChartMetric.MEMBERS)

    assert cost.labels == ["P1 - X", "P2 - Y"]
    assert cost.values == [Decimal("1500"), Decimal("10")]
    assert hours.values == [Decimal("15"), Decimal("1")]
    assert members.values == [Decimal("2"), Decimal("1")]


def test_planned_records_and_options() -> None:
    active = make_record(product="P1", project="X", team="Web")
    planned = make_record(product="", project="Y", team="Web", status=ResourceStatus.PLANNED)

    assert planned_records([active, planned]) == [planned]
    options = distinct_options([active, planned])
    assert options.products == ["P1"]
    assert options.projects == ["X", "Y"]
    assert options.teams == ["Web"]


@pytest.mark.parametrize(
    ("key", "delta", "expected"),
    [
        ("2025-01", -1, "2024-12"),
        ("2025-12", 1, "2026-01"),
        ("2025-03", 0, "2025-03"),
        ("2025-03", 14, "2026-05"),
    ],
)
def test_shift_month(key: str, delta: int, expected: str) -> None:
    assert shift_month(key, delta) == expected
