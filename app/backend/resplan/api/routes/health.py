"""Health check endpoints."""

from fastapi import APIRouter, Depends

from resplan.api.dependencies import get_dashboard_service
from resplan.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Simple liveness endpoint."""

    return {"status": "ok"}


@router.get("/health/persistence")
def persistence_health(service: DashboardService = Depends(get_dashboard_service)) -> dict[str, object]:
    """Which tier populated the store and whether remote writes are active."""

    return {
        "load_source": service.load_source.value if service.load_source else None,
        "remote_enabled": service.gateway.remote_enabled,
        "records": len(service.store),
    }
