"""Top-level API router."""

from fastapi import APIRouter

from fellowship_reports.api.routes.analytics import router as analytics_router
from fellowship_reports.api.routes.directory import router as directory_router
from fellowship_reports.api.routes.health import router as health_router
from fellowship_reports.api.routes.me import router as me_router
from fellowship_reports.api.routes.reports import (
    activity_router,
    fellowship_outreach_router,
    financial_router,
    outreach_router,
)

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(me_router)
api_router.include_router(directory_router)
api_router.include_router(financial_router)
api_router.include_router(activity_router)
api_router.include_router(fellowship_outreach_router)
api_router.include_router(outreach_router)
api_router.include_router(analytics_router)
