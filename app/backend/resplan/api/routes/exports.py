"""Export endpoint for resource records."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from resplan.api.dependencies import get_dashboard_service
from resplan.services.dashboard_service import DashboardService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/resources")
def export_resources(
    format: str = Query(default="xlsx"),
    month: str | None = Query(default=None),
    all_time: bool = Query(default=False),
    service: DashboardService = Depends(get_dashboard_service),
) -> Response:
    exported = service.export_records(format_name=format, month=month, all_time=all_time)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
