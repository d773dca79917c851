"""Top-level API router."""

from fastapi import APIRouter

from resplan.api.routes.dashboards import router as dashboards_router
from resplan.api.routes.exports import router as exports_router
from resplan.api.routes.health import router as health_router
from resplan.api.routes.resources import router as resources_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(resources_router)
api_router.include_router(dashboards_router)
api_router.include_router(exports_router)
