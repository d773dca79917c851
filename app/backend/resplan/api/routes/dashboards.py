"""Dashboard view-model endpoints consumed by the renderer."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from resplan.api.dependencies import get_dashboard_service
from resplan.services import aggregation
from resplan.services.aggregation import ChartMetric
from resplan.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class VisibleMonthPayload(BaseModel):
    month: str


class MonthShiftPayload(BaseModel):
    delta: int


@router.get("")
def get_dashboard(
    month: str | None = None,
    all_time: bool = False,
    metric: ChartMetric = ChartMetric.COST,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    models = service.view_models(month=month, all_time=all_time, metric=metric)
    return service.serialize_view_models(models)


@router.get("/summary")
def get_summary(
    month: str | None = None,
    all_time: bool = False,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, scoped = service.scoped_records(month=month, all_time=all_time)
    return {"month": key, **service.serialize_summary(aggregation.summary_stats(scoped))}


@router.get("/hierarchy")
def get_hierarchy(
    month: str | None = None,
    all_time: bool = False,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, scoped = service.scoped_records(month=month, all_time=all_time)
    nodes = aggregation.hierarchy_rollups(aggregation.group_hierarchy(scoped))
    return {"month": key, "items": service.serialize_hierarchy(nodes)}


@router.get("/top-projects")
def get_top_projects(
    month: str | None = None,
    all_time: bool = False,
    limit: int | None = Query(default=None, ge=1, le=100),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, scoped = service.scoped_records(month=month, all_time=all_time)
    ranked = aggregation.rank_projects(scoped, limit or service.top_projects_limit)
    return {"month": key, "items": service.serialize_groups(ranked, "project")}


@router.get("/teams")
def get_teams(
    month: str | None = None,
    all_time: bool = False,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, scoped = service.scoped_records(month=month, all_time=all_time)
    return {"month": key, "items": service.serialize_groups(aggregation.group_by_team(scoped), "team")}


@router.get("/chart")
def get_chart(
    month: str | None = None,
    all_time: bool = False,
    metric: ChartMetric = ChartMetric.COST,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, scoped = service.scoped_records(month=month, all_time=all_time)
    return {"month": key, **service.serialize_chart(aggregation.product_project_series(scoped, metric))}


@router.get("/calendar")
def get_calendar(
    month: str | None = None,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    key, _ = service.scoped_records(month=month)
    year, month_number = (int(part) for part in key.split("-"))
    days = aggregation.calendar_month(service.store.all(), year, month_number)
    return {"month": key, "days": service.serialize_calendar(days)}


@router.get("/planning")
def get_planning(service: DashboardService = Depends(get_dashboard_service)) -> dict[str, list[object]]:
    planned = aggregation.planned_records(service.store.all())
    return {"items": [service.serialize_record(record) for record in planned]}


@router.get("/options")
def get_options(service: DashboardService = Depends(get_dashboard_service)) -> dict[str, list[str]]:
    return service.serialize_options(aggregation.distinct_options(service.store.all()))


@router.get("/month")
def get_visible_month(service: DashboardService = Depends(get_dashboard_service)) -> dict[str, str]:
    return {"month": service.visible_month}


@router.put("/month")
def put_visible_month(
    payload: VisibleMonthPayload,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    service.set_visible_month(payload.month)
    return service.dashboard_payload()


@router.post("/month:shift")
def shift_visible_month(
    payload: MonthShiftPayload,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    service.shift_visible_month(payload.delta)
    return service.dashboard_payload()
