"""Pure aggregation helpers turning flat records into dashboard view-models.

Every function here is side-effect free and accepts any iterable of
``ResourceAssignment``. Empty input yields empty or zero results.
"""

from __future__ import annotations

import calendar
import enum
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from resplan.models.records import ResourceAssignment, ResourceStatus

FALLBACK_MONTH = "2025-01"

ZERO = Decimal("0")
Q2 = Decimal("0.01")

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})")


class ChartMetric(str, enum.Enum):
    COST = "cost"
    HOURS = "hours"
    MEMBERS = "members"


@dataclass(slots=True)
class Rollup:
    hours: Decimal = ZERO
    cost: Decimal = ZERO
    members: int = 0

    def add(self, record: ResourceAssignment) -> None:
        self.hours += record.hours_per_month
        self.cost += record.monthly_cost
        self.members += 1


@dataclass(slots=True, frozen=True)
class SummaryStats:
    total_members: int
    total_projects: int
    total_hours: Decimal
    total_cost: Decimal
    total_products: int
    avg_hourly_rate: Decimal


@dataclass(slots=True)
class ProjectNode:
    name: str
    records: list[ResourceAssignment]
    rollup: Rollup


@dataclass(slots=True)
class ProductNode:
    name: str
    projects: list[ProjectNode]
    rollup: Rollup

    @property
    def project_count(self) -> int:
        return len(self.projects)


@dataclass(slots=True)
class GroupTotals:
    key: str
    rollup: Rollup = field(default_factory=Rollup)


@dataclass(slots=True)
class CalendarBucket:
    day: date
    records: list[ResourceAssignment]
    hours: Decimal
    cost: Decimal


@dataclass(slots=True, frozen=True)
class ChartSeries:
    metric: ChartMetric
    labels: list[str]
    values: list[Decimal]


@dataclass(slots=True, frozen=True)
class FormOptions:
    products: list[str]
    projects: list[str]
    teams: list[str]


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def _safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == ZERO:
        return ZERO
    return _q2(numerator / denominator)


def parse_month_key(value: object) -> str | None:
    """Return the ``YYYY-MM`` prefix of ``value`` or ``None`` when it has none."""

    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if not isinstance(value, str):
        return None
    match = _MONTH_RE.match(value.strip())
    if match is None:
        return None
    if not 1 <= int(match.group(2)) <= 12:
        return None
    return f"{match.group(1)}-{match.group(2)}"


def month_key(record: ResourceAssignment) -> str:
    return parse_month_key(record.month) or FALLBACK_MONTH


def shift_month(key: str, delta: int) -> str:
    """Move a ``YYYY-MM`` key by ``delta`` months."""

    normalized = parse_month_key(key) or FALLBACK_MONTH
    year, month = (int(part) for part in normalized.split("-"))
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def filter_by_month(records: Iterable[ResourceAssignment], key: str) -> list[ResourceAssignment]:
    return [record for record in records if month_key(record) == key]


def summary_stats(records: Iterable[ResourceAssignment]) -> SummaryStats:
    names: set[str] = set()
    projects: set[str] = set()
    products: set[str] = set()
    total_hours = ZERO
    total_cost = ZERO
    for record in records:
        names.add(record.name)
        projects.add(record.project)
        products.add(record.product)
        total_hours += record.hours_per_month
        total_cost += record.monthly_cost

    return SummaryStats(
        total_members=len(names),
        total_projects=len(projects),
        total_hours=total_hours,
        total_cost=total_cost,
        total_products=len(products),
        avg_hourly_rate=_safe_div(total_cost, total_hours),
    )


def group_hierarchy(
    records: Iterable[ResourceAssignment],
) -> dict[str, dict[str, list[ResourceAssignment]]]:
    """Group records as product -> project -> records, in first-seen order."""

    hierarchy: dict[str, dict[str, list[ResourceAssignment]]] = {}
    for record in records:
        hierarchy.setdefault(record.product, {}).setdefault(record.project, []).append(record)
    return hierarchy


def hierarchy_rollups(
    hierarchy: dict[str, dict[str, list[ResourceAssignment]]],
) -> list[ProductNode]:
    nodes: list[ProductNode] = []
    for product_name, projects in hierarchy.items():
        product_rollup = Rollup()
        project_nodes: list[ProjectNode] = []
        for project_name, project_records in projects.items():
            project_rollup = Rollup()
            for record in project_records:
                project_rollup.add(record)
                product_rollup.add(record)
            project_nodes.append(
                ProjectNode(name=project_name, records=list(project_records), rollup=project_rollup)
            )
        nodes.append(ProductNode(name=product_name, projects=project_nodes, rollup=product_rollup))
    return nodes


def _group_totals(records: Iterable[ResourceAssignment], attribute: str) -> list[GroupTotals]:
    groups: dict[str, GroupTotals] = {}
    for record in records:
        key = getattr(record, attribute)
        group = groups.get(key)
        if group is None:
            group = groups[key] = GroupTotals(key=key)
        group.rollup.add(record)
    # sorted() is stable, so equal costs keep first-seen order.
    return sorted(groups.values(), key=lambda group: group.rollup.cost, reverse=True)


def rank_projects(records: Iterable[ResourceAssignment], n: int) -> list[GroupTotals]:
    if n <= 0:
        return []
    return _group_totals(records, "project")[:n]


def group_by_team(records: Iterable[ResourceAssignment]) -> list[GroupTotals]:
    return _group_totals(records, "team")


def calendar_bucket(records: Iterable[ResourceAssignment], day: date) -> CalendarBucket:
    if isinstance(day, datetime):
        day = day.date()
    matched = [record for record in records if record.calendar_date == day]
    return CalendarBucket(
        day=day,
        records=matched,
        hours=sum((record.hours_per_week or ZERO for record in matched), ZERO),
        cost=sum((record.weekly_cost for record in matched), ZERO),
    )


def calendar_month(records: Sequence[ResourceAssignment], year: int, month: int) -> list[CalendarBucket]:
    """One bucket per day of the given month."""

    days_in_month = calendar.monthrange(year, month)[1]
    dated = [record for record in records if record.calendar_date is not None]
    return [calendar_bucket(dated, date(year, month, day)) for day in range(1, days_in_month + 1)]


def product_project_series(
    records: Iterable[ResourceAssignment],
    metric: ChartMetric = ChartMetric.COST,
) -> ChartSeries:
    labels: list[str] = []
    values: list[Decimal] = []
    for product in hierarchy_rollups(group_hierarchy(records)):
        for project in product.projects:
            labels.append(f"{product.name} - {project.name}")
            if metric is ChartMetric.COST:
                values.append(project.rollup.cost)
            elif metric is ChartMetric.HOURS:
                values.append(project.rollup.hours)
            else:
                values.append(Decimal(project.rollup.members))
    return ChartSeries(metric=metric, labels=labels, values=values)


def planned_records(records: Iterable[ResourceAssignment]) -> list[ResourceAssignment]:
    return [record for record in records if record.status is ResourceStatus.PLANNED]


def distinct_options(records: Iterable[ResourceAssignment]) -> FormOptions:
    products: dict[str, None] = {}
    projects: dict[str, None] = {}
    teams: dict[str, None] = {}
    for record in records:
        if record.product:
            products.setdefault(record.product)
        if record.project:
            projects.setdefault(record.project)
        if record.team:
            teams.setdefault(record.team)
    return FormOptions(products=list(products), projects=list(projects), teams=list(teams))
