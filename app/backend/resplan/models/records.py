"""In-memory resource-assignment record."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ResourceStatus(str, enum.Enum):
    ACTIVE = "active"
    PLANNED = "planned"


def new_record_id() -> str:
    return uuid.uuid4().hex


class ResourceAssignment(BaseModel):
    """One person on one product/project for a month (or a planning window).

    Instances are immutable; edits replace the whole record by ``id``.
    Field aliases are the camelCase keys used by the cached snapshot.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    id: str = Field(default_factory=new_record_id, min_length=1)
    name: str = ""
    team: str = ""
    product: str = ""
    project: str = ""
    hours_per_month: Decimal = Field(default=Decimal("0"), ge=0)
    hours_per_week: Decimal | None = Field(default=None, ge=0)
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    month: str | None = None
    status: ResourceStatus = ResourceStatus.ACTIVE
    stack: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    calendar_date: date | None = Field(default=None, alias="date")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_legacy_id(cls, value: object) -> object:
        # Older snapshots carry numeric ids.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("month", mode="before")
    @classmethod
    def month_from_date(cls, value: object) -> object:
        if isinstance(value, (date, datetime)):
            return f"{value.year:04d}-{value.month:02d}"
        return value

    @field_validator("start_date", "end_date", "calendar_date", mode="before")
    @classmethod
    def drop_time_of_day(cls, value: object) -> object:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @property
    def monthly_cost(self) -> Decimal:
        return self.hours_per_month * self.hourly_rate

    @property
    def weekly_cost(self) -> Decimal:
        return (self.hours_per_week or Decimal("0")) * self.hourly_rate

    def to_wire(self) -> dict[str, object]:
        """JSON-ready camelCase form used by the local snapshot."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
