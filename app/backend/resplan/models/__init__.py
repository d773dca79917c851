"""Record and ORM model package."""

from resplan.models.entities import ResourceRow
from resplan.models.records import ResourceAssignment, ResourceStatus, new_record_id

__all__ = [
    "ResourceAssignment",
    "ResourceRow",
    "ResourceStatus",
    "new_record_id",
]
