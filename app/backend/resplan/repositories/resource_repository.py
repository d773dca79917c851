"""Repository helpers for the remote resource collection."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from resplan.models.entities import ResourceRow


class ResourceRepository:
    """Persistence operations on the ``resources`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_all(self) -> list[ResourceRow]:
        return list(self.db.scalars(select(ResourceRow).order_by(ResourceRow.id.asc())).all())

    def upsert(self, row: ResourceRow) -> ResourceRow:
        # merge() resolves the conflict on primary key by replacing column values.
        merged = self.db.merge(row)
        self.db.flush()
        return merged

    def delete_by_id(self, resource_id: str) -> int:
        result = self.db.execute(delete(ResourceRow).where(ResourceRow.id == resource_id))
        self.db.flush()
        return result.rowcount or 0
