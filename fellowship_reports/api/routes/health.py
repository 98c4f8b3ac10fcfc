"""Liveness and readiness probes."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from fellowship_reports.db.dependencies import get_db_session

router = APIRouter(prefix="/health")


@router.get("")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
def readiness(db: Session = Depends(get_db_session)) -> dict[str, str]:
    """Confirm the reporting database answers a trivial query."""

    db.execute(text("SELECT 1"))
    return {"status": "ready", "database": "ok"}
