"""Dependencies for FastAPI endpoints."""

from fastapi import Request

from resplan.services.dashboard_service import DashboardService


def get_dashboard_service(request: Request) -> DashboardService:
    """Return the application-state object built at startup."""

    return request.app.state.dashboard_service
