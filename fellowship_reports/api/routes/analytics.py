"""Dashboard analytics over approved reports."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fellowship_reports.core.auth import RequestUserContext, get_current_user_context
from fellowship_reports.db.dependencies import get_db_session
from fellowship_reports.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary")
def analytics_summary(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1900, le=9999),
    fellowship_id: UUID | None = None,
    zone_id: UUID | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Totals of approved reports for one calendar month (defaults to the current month)."""

    return AnalyticsService(db).summary(
        context=context,
        month=month,
        year=year,
        fellowship_id=fellowship_id,
        zone_id=zone_id,
    )


@router.get("/monthly-trends")
def analytics_monthly_trends(
    year: int | None = Query(default=None, ge=1900, le=9999),
    fellowship_id: UUID | None = None,
    zone_id: UUID | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    items = AnalyticsService(db).monthly_trends(
        context=context,
        year=year,
        fellowship_id=fellowship_id,
        zone_id=zone_id,
    )
    return {"items": items}
