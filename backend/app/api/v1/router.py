"""Aggregate all v1 sub-routers."""

from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.list_display import router as list_display_router
from app.api.v1.number_format import router as number_format_router

api_v1_router = APIRouter()

api_v1_router.include_router(health_router, tags=["health"])
api_v1_router.include_router(
    number_format_router, prefix="/customer/settings/number-format", tags=["number-format"]
)
api_v1_router.include_router(
    list_display_router, prefix="/customer/settings/list-display", tags=["list-display"]
)
