"""Resource-assignment CRUD and planning endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resplan.api.dependencies import get_dashboard_service
from resplan.models.records import ResourceStatus
from resplan.services.dashboard_service import DashboardService, PlanningInput, RecordInput

router = APIRouter(tags=["resources"])


class ResourcePayload(BaseModel):
    """Create/replace body; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    product: str | None = Field(default=None, max_length=255)
    project: str | None = Field(default=None, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    team: str | None = Field(default=None, max_length=255)
    hours_per_month: Decimal | None = None
    hourly_rate: Decimal | None = None
    month: str | None = None
    stack: str | None = Field(default=None, max_length=128)

    def to_input(self) -> RecordInput:
        return RecordInput(
            product=self.product,
            project=self.project,
            name=self.name,
            team=self.team,
            hours_per_month=self.hours_per_month,
            hourly_rate=self.hourly_rate,
            month=self.month,
            stack=self.stack,
        )


class PlanningPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    project: str | None = Field(default=None, max_length=255)
    team: str | None = Field(default=None, max_length=255)
    start_date: date | None = None
    end_date: date | None = None
    hours_per_week: Decimal | None = None
    product: str | None = Field(default=None, max_length=255)
    hourly_rate: Decimal | None = None


@router.get("/resources")
def list_resources(
    month: str | None = None,
    status_filter: ResourceStatus | None = Query(default=None, alias="status"),
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, list[object]]:
    items = service.records(month=month, status=status_filter)
    return {"items": [service.serialize_record(record) for record in items]}


@router.post("/resources", status_code=status.HTTP_201_CREATED)
def create_resource(
    payload: ResourcePayload,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    record = service.create_record(payload.to_input())
    return {
        "item": service.serialize_record(record),
        "dashboard": service.dashboard_payload(),
    }


@router.put("/resources/{resource_id}")
def replace_resource(
    resource_id: str,
    payload: ResourcePayload,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    record = service.update_record(resource_id, payload.to_input())
    return {
        "item": service.serialize_record(record) if record is not None else None,
        "updated": record is not None,
        "dashboard": service.dashboard_payload(),
    }


@router.delete("/resources/{resource_id}")
def delete_resource(
    resource_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    deleted = service.delete_record(resource_id)
    return {"deleted": deleted, "dashboard": service.dashboard_payload()}


@router.post("/planning", status_code=status.HTTP_201_CREATED)
def create_planning(
    payload: PlanningPayload,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict[str, object]:
    record = service.create_planning(
        PlanningInput(
            project=payload.project,
            team=payload.team,
            start_date=payload.start_date,
            end_date=payload.end_date,
            hours_per_week=payload.hours_per_week,
            product=payload.product,
            hourly_rate=payload.hourly_rate,
        )
    )
    return {
        "item": service.serialize_record(record),
        "dashboard": service.dashboard_payload(),
    }
