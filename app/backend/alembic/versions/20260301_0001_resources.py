"""resources collection

Revision ID: 20260301_0001
Revises:
Create Date: 2026-03-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


resource_status = postgresql.ENUM("active", "planned", name="resource_status", create_type=False)


def upgrade() -> None:
    resource_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("team", sa.String(length=255), nullable=False),
        sa.Column("product", sa.String(length=255), nullable=False),
        sa.Column("project", sa.String(length=255), nullable=False),
        sa.Column("hours_per_month", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("hours_per_week", sa.Numeric(10, 2), nullable=True),
        sa.Column("hourly_rate", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("status", resource_status, nullable=False, server_default="active"),
        sa.Column("stack", sa.String(length=128), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("calendar_date", sa.Date(), nullable=True),
        sa.CheckConstraint("hours_per_month >= 0", name="ck_resources_hours_per_month_non_negative"),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_resources_hourly_rate_non_negative"),
    )
    op.create_index("ix_resources_month", "resources", ["month"])


def downgrade() -> None:
    op.drop_index("ix_resources_month", table_name="resources")
    op.drop_table("resources")
    resource_status.drop(op.get_bind(), checkfirst=True)
