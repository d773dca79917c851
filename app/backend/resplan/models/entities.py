"""ORM entities for the remote resource collection."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from resplan.db.base import Base
from resplan.models.records import ResourceStatus


class ResourceRow(Base):
    __tablename__ = "resources"
    __table_args__ = (
        CheckConstraint("hours_per_month >= 0", name="ck_resources_hours_per_month_non_negative"),
        CheckConstraint("hourly_rate >= 0", name="ck_resources_hourly_rate_non_negative"),
        Index("ix_resources_month", "month"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    team: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    product: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    project: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    hours_per_month: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    hours_per_week: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    # First day of the month; the record's YYYY-MM key maps onto it.
    month: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ResourceStatus] = mapped_column(
        SQLEnum(
            ResourceStatus,
            name="resource_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ResourceStatus.ACTIVE,
    )
    stack: Mapped[str | None] = mapped_column(String(128), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    calendar_date: Mapped[date | None] = mapped_column(Date, nullable=True)
