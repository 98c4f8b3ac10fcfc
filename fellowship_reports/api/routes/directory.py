"""Administration endpoints for zones, fellowships and user accounts."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fellowship_reports.core.auth import (
    AppRole,
    ELEVATED_ROLES,
    FELLOWSHIP_PRESIDENT_ROLES,
    RequestUserContext,
    get_current_user_context,
    require_roles,
)
from fellowship_reports.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from fellowship_reports.db.dependencies import get_db_session
from fellowship_reports.models.entities import Fellowship, User, Zone
from fellowship_reports.repositories.report_repository import ReportRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["directory"])


class ZoneCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    office_address: str | None = Field(default=None, max_length=500)


class FellowshipCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=500)
    zone_id: UUID
    email: str = Field(min_length=3, max_length=320)
    president_phone_number: str = Field(min_length=1, max_length=64)


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)
    role: AppRole
    fellowship_id: UUID | None = None
    zone_id: UUID | None = None


def serialize_zone(zone: Zone) -> dict[str, object]:
    return {
        "id": str(zone.id),
        "name": zone.name,
        "office_address": zone.office_address,
        "created_at": zone.created_at.isoformat(),
        "updated_at": zone.updated_at.isoformat(),
    }


def serialize_fellowship(fellowship: Fellowship) -> dict[str, object]:
    return {
        "id": str(fellowship.id),
        "name": fellowship.name,
        "address": fellowship.address,
        "zone_id": str(fellowship.zone_id),
        "email": fellowship.email,
        "president_phone_number": fellowship.president_phone_number,
        "created_at": fellowship.created_at.isoformat(),
        "updated_at": fellowship.updated_at.isoformat(),
    }


def serialize_user(user: User) -> dict[str, object]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "fellowship_id": str(user.fellowship_id) if user.fellowship_id else None,
        "zone_id": str(user.zone_id) if user.zone_id else None,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }


def _validate_email(value: str, field_name: str = "email") -> str:
    normalized = value.strip().lower()
    if "@" not in normalized or normalized.startswith("@") or normalized.endswith("@"):
        raise ValidationError(f"{field_name} must be a valid email address.")
    return normalized


def _ensure_assignment_scope_valid(role: AppRole, fellowship_id: UUID | None, zone_id: UUID | None) -> None:
    if role in FELLOWSHIP_PRESIDENT_ROLES:
        if fellowship_id is None or zone_id is not None:
            raise ValidationError("Fellowship presidents require fellowship_id and must not include zone_id.")
        return
    if role is AppRole.ZONAL_COORDINATOR:
        if zone_id is None or fellowship_id is not None:
            raise ValidationError("Zonal coordinators require zone_id and must not include fellowship_id.")
        return
    if fellowship_id is not None or zone_id is not None:
        raise ValidationError(f"{role.value} must not include fellowship_id or zone_id.")


def _ensure_actor_can_create_user(
    actor: RequestUserContext,
    repo: ReportRepository,
    *,
    role: AppRole,
    fellowship_id: UUID | None,
) -> None:
    if role is AppRole.SUPER_ADMIN and actor.role is not AppRole.SUPER_ADMIN:
        raise AuthorizationError()

    if actor.is_elevated:
        return

    if not actor.is_zonal_coordinator or role not in FELLOWSHIP_PRESIDENT_ROLES or actor.zone_id is None:
        raise AuthorizationError()
    if repo.zone_of_fellowship(fellowship_id) != actor.zone_id:
        raise AuthorizationError()


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Directory uniqueness violation: %s", exc.orig)
        raise ConflictError(message) from exc


# ---------- Zones ----------
@router.get("/zones")
def list_zones(
    _: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    return {"items": [serialize_zone(zone) for zone in ReportRepository(db).list_zones()]}


@router.post("/zones", status_code=status.HTTP_201_CREATED)
def create_zone(
    payload: ZoneCreate,
    context: RequestUserContext = Depends(require_roles(*ELEVATED_ROLES)),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Create a zone (elevated roles only)."""

    now = datetime.utcnow()
    zone = Zone(
        name=payload.name.strip(),
        office_address=payload.office_address.strip() if payload.office_address else None,
        created_at=now,
        updated_at=now,
    )
    db.add(zone)
    _commit_or_conflict(db, "Zone name already exists.")
    db.refresh(zone)
    logger.info("Zone %s created by %s", zone.id, context.email)
    return serialize_zone(zone)


@router.get("/zones/{zone_id}")
def get_zone(
    zone_id: UUID,
    _: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    zone = ReportRepository(db).get_zone(zone_id)
    if zone is None:
        raise NotFoundError("Zone not found.")
    return serialize_zone(zone)


# ---------- Fellowships ----------
@router.get("/fellowships")
def list_fellowships(
    zone_id: UUID | None = None,
    _: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    fellowships = ReportRepository(db).list_fellowships(zone_id)
    return {"items": [serialize_fellowship(fellowship) for fellowship in fellowships]}


@router.post("/fellowships", status_code=status.HTTP_201_CREATED)
def create_fellowship(
    payload: FellowshipCreate,
    context: RequestUserContext = Depends(require_roles(*ELEVATED_ROLES, AppRole.ZONAL_COORDINATOR)),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Create a fellowship; zonal coordinators may only add to their own zone."""

    if context.is_zonal_coordinator and context.zone_id != payload.zone_id:
        raise AuthorizationError()

    repo = ReportRepository(db)
    if repo.get_zone(payload.zone_id) is None:
        raise NotFoundError("Zone not found.")

    now = datetime.utcnow()
    fellowship = Fellowship(
        name=payload.name.strip(),
        address=payload.address.strip(),
        zone_id=payload.zone_id,
        email=_validate_email(payload.email),
        president_phone_number=payload.president_phone_number.strip(),
        created_at=now,
        updated_at=now,
    )
    db.add(fellowship)
    _commit_or_conflict(db, "Fellowship name or email already exists.")
    db.refresh(fellowship)
    logger.info("Fellowship %s created in zone %s by %s", fellowship.id, fellowship.zone_id, context.email)
    return serialize_fellowship(fellowship)


@router.get("/fellowships/{fellowship_id}")
def get_fellowship(
    fellowship_id: UUID,
    _: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    fellowship = ReportRepository(db).get_fellowship(fellowship_id)
    if fellowship is None:
        raise NotFoundError("Fellowship not found.")
    return serialize_fellowship(fellowship)


# ---------- Users ----------
@router.get("/users")
def list_users(
    _: RequestUserContext = Depends(require_roles(*ELEVATED_ROLES)),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    return {"items": [serialize_user(user) for user in ReportRepository(db).list_users()]}


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    context: RequestUserContext = Depends(require_roles(*ELEVATED_ROLES, AppRole.ZONAL_COORDINATOR)),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Create a user account with its organizational assignment."""

    email = _validate_email(payload.email)
    _ensure_assignment_scope_valid(payload.role, payload.fellowship_id, payload.zone_id)

    repo = ReportRepository(db)
    _ensure_actor_can_create_user(context, repo, role=payload.role, fellowship_id=payload.fellowship_id)

    if payload.fellowship_id is not None and repo.get_fellowship(payload.fellowship_id) is None:
        raise NotFoundError("Fellowship not found.")
    if payload.zone_id is not None and repo.get_zone(payload.zone_id) is None:
        raise NotFoundError("Zone not found.")
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise ConflictError("User already exists with that email.")

    now = datetime.utcnow()
    user = User(
        name=payload.name.strip(),
        email=email,
        role=payload.role,
        fellowship_id=payload.fellowship_id,
        zone_id=payload.zone_id,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    _commit_or_conflict(db, "The fellowship or zone already has an assigned user.")
    db.refresh(user)
    logger.info("User %s (%s) created by %s", user.id, user.role.value, context.email)
    return serialize_user(user)
