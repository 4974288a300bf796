from __future__ import annotations

from fastapi import APIRouter

from .health import router as health_router
from .location import router as location_router
from .dashboard import router as dashboard_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(location_router)
api_router.include_router(dashboard_router)
