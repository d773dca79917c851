"""Application service owning session state, commands and view-models."""

from __future__ import annotations

import csv
import io
import logging
import re
import threading
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from io import BytesIO

from pydantic import ValidationError

from resplan.core.config import Settings
from resplan.core.errors import ValidationFailed
from resplan.models.records import ResourceAssignment, ResourceStatus, new_record_id
from resplan.services import aggregation
from resplan.services.aggregation import (
    CalendarBucket,
    ChartMetric,
    ChartSeries,
    FormOptions,
    GroupTotals,
    ProductNode,
    SummaryStats,
)
from resplan.services.bootstrap import seeded_generator
from resplan.services.local_cache import LocalSnapshotCache
from resplan.services.persistence_gateway import LoadSource, PersistenceGateway
from resplan.services.record_store import RecordStore
from resplan.services.remote_store import build_remote_store

logger = logging.getLogger(__name__)

PLANNED_STACK = "Planned"
NAME_MAX_LENGTH = 255
STACK_MAX_LENGTH = 128

_MONTH_INPUT_RE = re.compile(r"\d{4}-\d{2}(-\d{2})?")

EXPORT_COLUMNS = (
    "id",
    "month",
    "product",
    "project",
    "name",
    "team",
    "status",
    "stack",
    "hours_per_month",
    "hourly_rate",
    "monthly_cost",
    "hours_per_week",
    "start_date",
    "end_date",
    "date",
)


@dataclass(slots=True)
class RecordInput:
    """User-entered monthly assignment; every field is required on create/edit."""

    product: str | None = None
    project: str | None = None
    name: str | None = None
    team: str | None = None
    hours_per_month: Decimal | None = None
    hourly_rate: Decimal | None = None
    month: str | None = None
    stack: str | None = None


@dataclass(slots=True)
class PlanningInput:
    project: str | None = None
    team: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    hours_per_week: Decimal | None = None
    product: str | None = None
    hourly_rate: Decimal | None = None


@dataclass(slots=True)
class DashboardViewModels:
    month: str | None
    summary: SummaryStats
    hierarchy: list[ProductNode]
    top_projects: list[GroupTotals]
    teams: list[GroupTotals]
    chart: ChartSeries
    calendar_month: str
    calendar: list[CalendarBucket]
    planned: list[ResourceAssignment]
    options: FormOptions


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def _require_text(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailed(f"{field_name} is required.")
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationFailed(f"{field_name} must be at most {NAME_MAX_LENGTH} characters.")
    return value


def _require_positive(value: Decimal | None, field_name: str) -> Decimal:
    if value is None:
        raise ValidationFailed(f"{field_name} is required.")
    if value <= 0:
        raise ValidationFailed(f"{field_name} must be greater than zero.")
    return value


def _require_month(value: str | None) -> str:
    value = _require_text(value, "month").strip()
    key = aggregation.parse_month_key(value)
    if key is None or _MONTH_INPUT_RE.fullmatch(value) is None:
        raise ValidationFailed("month must be in YYYY-MM or YYYY-MM-DD format.")
    if len(value) == 10:
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValidationFailed(f"month {value} is not a valid date.") from exc
    return key


class DashboardService:
    """Explicit application state: record store, persistence, visible month.

    One method per user intent. Mutations are applied to the store first and
    then handed to the persistence gateway; the returned view-models always
    reflect the mutation regardless of remote outcome.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        gateway: PersistenceGateway,
        visible_month: str | None = None,
        top_projects_limit: int = 5,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.visible_month = aggregation.parse_month_key(visible_month) or date.today().strftime("%Y-%m")
        self.top_projects_limit = top_projects_limit
        self.load_source: LoadSource | None = None
        self._mutation_lock = threading.Lock()

    # ---------- Lifecycle ----------
    def load(self) -> LoadSource:
        result = self.gateway.load_initial()
        self.store.replace_all(result.records)
        self.load_source = result.source
        logger.info("Record store populated from %s with %d records", result.source.value, len(self.store))
        return result.source

    def close(self) -> None:
        self.gateway.close()

    # ---------- Commands ----------
    def _build_record(self, record_id: str, data: RecordInput) -> ResourceAssignment:
        product = _require_text(data.product, "product")
        project = _require_text(data.project, "project")
        name = _require_text(data.name, "name")
        team = _require_text(data.team, "team")
        hours = _require_positive(data.hours_per_month, "hours_per_month")
        rate = _require_positive(data.hourly_rate, "hourly_rate")
        month = _require_month(data.month)
        if data.stack is not None and len(data.stack) > STACK_MAX_LENGTH:
            raise ValidationFailed(f"stack must be at most {STACK_MAX_LENGTH} characters.")
        try:
            return ResourceAssignment(
                id=record_id,
                product=product,
                project=project,
                name=name,
                team=team,
                hours_per_month=hours,
                hourly_rate=rate,
                month=month,
                stack=data.stack,
                status=ResourceStatus.ACTIVE,
            )
        except ValidationError as exc:
            raise ValidationFailed(str(exc)) from exc

    def _apply_upsert(self, record: ResourceAssignment, *, existing_only: bool = False) -> ResourceAssignment | None:
        with self._mutation_lock:
            if existing_only and self.store.get(record.id) is None:
                return None
            stored = self.store.upsert(record)
            self.gateway.persist_upsert(stored, self.store.all())
        return stored

    def create_record(self, data: RecordInput) -> ResourceAssignment:
        record = self._build_record(new_record_id(), data)
        stored = self._apply_upsert(record)
        logger.info("Created resource %s (%s / %s)", stored.id, stored.product, stored.project)
        return stored

    def update_record(self, record_id: str, data: RecordInput) -> ResourceAssignment | None:
        """Replace the record with ``record_id``; unknown ids are a no-op."""

        record = self._build_record(record_id, data)
        stored = self._apply_upsert(record, existing_only=True)
        if stored is None:
            logger.info("Update of unknown resource %s ignored", record_id)
            return None
        logger.info("Updated resource %s", stored.id)
        return stored

    def delete_record(self, record_id: str) -> bool:
        with self._mutation_lock:
            removed = self.store.remove(record_id)
            if removed:
                self.gateway.persist_remove(record_id, self.store.all())
        if removed:
            logger.info("Deleted resource %s", record_id)
        return removed

    def create_planning(self, data: PlanningInput) -> ResourceAssignment:
        project = _require_text(data.project, "project")
        team = _require_text(data.team, "team")
        if data.start_date is None:
            raise ValidationFailed("start_date is required.")
        if data.end_date is None:
            raise ValidationFailed("end_date is required.")
        if data.end_date < data.start_date:
            raise ValidationFailed("end_date must not be before start_date.")
        hours = _require_positive(data.hours_per_week, "hours_per_week")
        if data.hourly_rate is not None and data.hourly_rate < 0:
            raise ValidationFailed("hourly_rate must not be negative.")
        if data.product is not None and len(data.product) > NAME_MAX_LENGTH:
            raise ValidationFailed(f"product must be at most {NAME_MAX_LENGTH} characters.")
        name = f"{team} - {project}"
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationFailed(f"team and project together must be at most {NAME_MAX_LENGTH - 3} characters.")

        record = ResourceAssignment(
            id=new_record_id(),
            name=name,
            team=team,
            product=data.product or "",
            project=project,
            stack=PLANNED_STACK,
            hours_per_week=hours,
            hourly_rate=data.hourly_rate or Decimal("0"),
            month=data.start_date,
            start_date=data.start_date,
            end_date=data.end_date,
            calendar_date=data.start_date,
            status=ResourceStatus.PLANNED,
        )
        stored = self._apply_upsert(record)
        logger.info("Created planning entry %s for %s", stored.id, stored.name)
        return stored

    def set_visible_month(self, month: str) -> str:
        self.visible_month = _require_month(month)
        return self.visible_month

    def shift_visible_month(self, delta: int) -> str:
        self.visible_month = aggregation.shift_month(self.visible_month, delta)
        return self.visible_month

    # ---------- Queries ----------
    def records(self, *, month: str | None = None, status: ResourceStatus | None = None) -> list[ResourceAssignment]:
        records = list(self.store.all())
        if month is not None:
            records = aggregation.filter_by_month(records, _require_month(month))
        if status is not None:
            records = [record for record in records if record.status is status]
        return records

    def scoped_records(self, *, month: str | None = None, all_time: bool = False) -> tuple[str | None, list[ResourceAssignment]]:
        return self._scope(self.store.all(), month=month, all_time=all_time)

    def _scope(
        self,
        snapshot: tuple[ResourceAssignment, ...],
        *,
        month: str | None,
        all_time: bool,
    ) -> tuple[str | None, list[ResourceAssignment]]:
        if all_time:
            return None, list(snapshot)
        key = _require_month(month) if month is not None else self.visible_month
        return key, aggregation.filter_by_month(snapshot, key)

    def view_models(
        self,
        *,
        month: str | None = None,
        all_time: bool = False,
        metric: ChartMetric = ChartMetric.COST,
    ) -> DashboardViewModels:
        snapshot = self.store.all()
        key, scoped = self._scope(snapshot, month=month, all_time=all_time)
        calendar_key = key or self.visible_month
        year, month_number = (int(part) for part in calendar_key.split("-"))
        return DashboardViewModels(
            month=key,
            summary=aggregation.summary_stats(scoped),
            hierarchy=aggregation.hierarchy_rollups(aggregation.group_hierarchy(scoped)),
            top_projects=aggregation.rank_projects(scoped, self.top_projects_limit),
            teams=aggregation.group_by_team(scoped),
            chart=aggregation.product_project_series(scoped, metric),
            calendar_month=calendar_key,
            calendar=aggregation.calendar_month(snapshot, year, month_number),
            planned=aggregation.planned_records(snapshot),
            options=aggregation.distinct_options(snapshot),
        )

    # ---------- Serialization ----------
    @staticmethod
    def serialize_record(record: ResourceAssignment) -> dict[str, object]:
        payload = record.model_dump(mode="json")
        payload["date"] = payload.pop("calendar_date")
        payload["month"] = aggregation.month_key(record)
        payload["monthly_cost"] = str(record.monthly_cost)
        return payload

    @staticmethod
    def serialize_rollup(rollup: aggregation.Rollup) -> dict[str, object]:
        return {"hours": str(rollup.hours), "cost": str(rollup.cost), "members": rollup.members}

    @staticmethod
    def serialize_summary(summary: SummaryStats) -> dict[str, object]:
        return {
            "total_members": summary.total_members,
            "total_projects": summary.total_projects,
            "total_hours": str(summary.total_hours),
            "total_cost": str(summary.total_cost),
            "total_products": summary.total_products,
            "avg_hourly_rate": str(summary.avg_hourly_rate),
        }

    def serialize_hierarchy(self, nodes: list[ProductNode]) -> list[dict[str, object]]:
        return [
            {
                "product": node.name,
                "project_count": node.project_count,
                **self.serialize_rollup(node.rollup),
                "projects": [
                    {
                        "project": project.name,
                        **self.serialize_rollup(project.rollup),
                        "resources": [self.serialize_record(record) for record in project.records],
                    }
                    for project in node.projects
                ],
            }
            for node in nodes
        ]

    def serialize_groups(self, groups: list[GroupTotals], key_name: str) -> list[dict[str, object]]:
        return [{key_name: group.key, **self.serialize_rollup(group.rollup)} for group in groups]

    def serialize_calendar(self, buckets: list[CalendarBucket]) -> list[dict[str, object]]:
        return [
            {
                "date": bucket.day.isoformat(),
                "weekday": bucket.day.weekday(),
                "hours": str(bucket.hours),
                "cost": str(bucket.cost),
                "resources": [self.serialize_record(record) for record in bucket.records],
            }
            for bucket in buckets
        ]

    @staticmethod
    def serialize_chart(chart: ChartSeries) -> dict[str, object]:
        return {
            "metric": chart.metric.value,
            "labels": chart.labels,
            "values": [str(value) for value in chart.values],
        }

    @staticmethod
    def serialize_options(options: FormOptions) -> dict[str, list[str]]:
        return {"products": options.products, "projects": options.projects, "teams": options.teams}

    def serialize_view_models(self, models: DashboardViewModels) -> dict[str, object]:
        return {
            "month": models.month,
            "visible_month": self.visible_month,
            "summary": self.serialize_summary(models.summary),
            "hierarchy": self.serialize_hierarchy(models.hierarchy),
            "top_projects": self.serialize_groups(models.top_projects, "project"),
            "teams": self.serialize_groups(models.teams, "team"),
            "chart": self.serialize_chart(models.chart),
            "calendar": {
                "month": models.calendar_month,
                "days": self.serialize_calendar(models.calendar),
            },
            "planned": [self.serialize_record(record) for record in models.planned],
            "options": self.serialize_options(models.options),
        }

    def dashboard_payload(self) -> dict[str, object]:
        return self.serialize_view_models(self.view_models())

    # ---------- Export ----------
    def _export_rows(self, records: list[ResourceAssignment]) -> list[dict[str, object]]:
        rows: list[dict[str, object]] = []
        for record in records:
            serialized = self.serialize_record(record)
            row: dict[str, object] = {}
            for column in EXPORT_COLUMNS:
                value = serialized.get(column)
                row[column] = "" if value is None else value
            rows.append(row)
        return rows

    def export_records(
        self,
        *,
        format_name: str,
        month: str | None = None,
        all_time: bool = False,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise ValidationFailed("format must be one of: csv, xlsx.")

        key, scoped = self.scoped_records(month=month, all_time=all_time)
        rows = self._export_rows(scoped)
        base_filename = f"resources-{key or 'all'}"

        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.DictWriter(sio, fieldnames=EXPORT_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "resources"
        sheet.append(list(EXPORT_COLUMNS))
        for row in rows:
            sheet.append([row[column] for column in EXPORT_COLUMNS])

        output = BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )


def build_dashboard_service(settings: Settings) -> DashboardService:
    """Wire store, cache, remote tier and bootstrap data from settings."""

    gateway = PersistenceGateway(
        cache=LocalSnapshotCache(settings.local_cache_path),
        bootstrap=seeded_generator(settings.bootstrap_seed),
        remote=build_remote_store(settings),
        max_workers=settings.remote_max_workers,
    )
    return DashboardService(
        store=RecordStore(),
        gateway=gateway,
        top_projects_limit=settings.top_projects_limit,
    )
