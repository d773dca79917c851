"""Optional remote tier backed by a SQL database."""

from __future__ import annotations

import logging
from datetime import date

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from resplan.core.config import Settings
from resplan.core.errors import RemoteUnavailable
from resplan.db.base import Base
from resplan.db.session import build_engine, build_session_factory
from resplan.models.entities import ResourceRow
from resplan.models.records import ResourceAssignment
from resplan.repositories.resource_repository import ResourceRepository
from resplan.services.aggregation import month_key

logger = logging.getLogger(__name__)


def record_to_row(record: ResourceAssignment) -> ResourceRow:
    year, month = (int(part) for part in month_key(record).split("-"))
    return ResourceRow(
        id=record.id,
        name=record.name,
        team=record.team,
        product=record.product,
        project=record.project,
        hours_per_month=record.hours_per_month,
        hours_per_week=record.hours_per_week,
        hourly_rate=record.hourly_rate,
        month=date(year, month, 1),
        status=record.status,
        stack=record.stack,
        start_date=record.start_date,
        end_date=record.end_date,
        calendar_date=record.calendar_date,
    )


def row_to_record(row: ResourceRow) -> ResourceAssignment:
    return ResourceAssignment(
        id=row.id,
        name=row.name,
        team=row.team,
        product=row.product,
        project=row.project,
        hours_per_month=row.hours_per_month,
        hours_per_week=row.hours_per_week,
        hourly_rate=row.hourly_rate,
        month=row.month,
        status=row.status,
        stack=row.stack,
        start_date=row.start_date,
        end_date=row.end_date,
        calendar_date=row.calendar_date,
    )


class RemoteResourceStore:
    """List, upsert and delete records in the remote ``resources`` collection.

    Each call runs in its own session and transaction. Any transport or
    decode failure surfaces as ``RemoteUnavailable``.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def list_all(self) -> list[ResourceAssignment]:
        try:
            with self.session_factory() as session:
                rows = ResourceRepository(session).list_all()
                return [row_to_record(row) for row in rows]
        except (SQLAlchemyError, ValidationError) as exc:
            raise RemoteUnavailable(f"Remote list failed: {exc}") from exc

    def upsert(self, record: ResourceAssignment) -> None:
        try:
            with self.session_factory.begin() as session:
                ResourceRepository(session).upsert(record_to_row(record))
        except SQLAlchemyError as exc:
            raise RemoteUnavailable(f"Remote upsert of {record.id} failed: {exc}") from exc

    def delete(self, record_id: str) -> None:
        try:
            with self.session_factory.begin() as session:
                ResourceRepository(session).delete_by_id(record_id)
        except SQLAlchemyError as exc:
            raise RemoteUnavailable(f"Remote delete of {record_id} failed: {exc}") from exc


def build_remote_store(settings: Settings) -> RemoteResourceStore | None:
    """Return the remote store, or ``None`` when it is not configured or cannot be built."""

    if not settings.remote_configured:
        return None

    try:
        engine = build_engine(settings.remote_database_url, settings.remote_access_key)
    except (SQLAlchemyError, ImportError):
        logger.warning("Remote store is configured but unusable; remote persistence disabled", exc_info=True)
        return None
    if settings.remote_create_schema:
        try:
            Base.metadata.create_all(bind=engine, tables=[ResourceRow.__table__])
        except SQLAlchemyError:
            # The first list_all() reports the outage and disables the tier.
            logger.warning("Could not create remote schema", exc_info=True)
    return RemoteResourceStore(build_session_factory(engine))
