"""Authentication context extraction and RBAC guard utilities."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from fellowship_reports.core.config import get_settings
from fellowship_reports.core.errors import AuthorizationError
from fellowship_reports.db.dependencies import get_db_session
from fellowship_reports.models.entities import User, UserRole

AppRole = UserRole

ELEVATED_ROLES: frozenset[AppRole] = frozenset({AppRole.SUPER_ADMIN, AppRole.ADMINISTRATOR})
FELLOWSHIP_PRESIDENT_ROLES: frozenset[AppRole] = frozenset(
    {AppRole.FELLOWSHIP_PRESIDENT_RCF, AppRole.FELLOWSHIP_PRESIDENT_RCCF}
)
ZONE_SCOPED_ROLES: frozenset[AppRole] = frozenset({AppRole.ZONAL_COORDINATOR})


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from headers and DB state."""

    user_id: UUID
    email: str
    name: str
    role: AppRole
    fellowship_id: UUID | None = None
    zone_id: UUID | None = None

    @property
    def is_elevated(self) -> bool:
        """Whether the actor may act across every scope."""

        return self.role in ELEVATED_ROLES

    @property
    def is_fellowship_president(self) -> bool:
        return self.role in FELLOWSHIP_PRESIDENT_ROLES

    @property
    def is_zonal_coordinator(self) -> bool:
        return self.role in ZONE_SCOPED_ROLES


def context_from_user(user: User) -> RequestUserContext:
    return RequestUserContext(
        user_id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        fellowship_id=user.fellowship_id,
        zone_id=user.zone_id,
    )


def _resolve_identity(x_user_email: str | None) -> str:
    if x_user_email and x_user_email.strip():
        return x_user_email.strip().lower()

    settings = get_settings()
    if settings.auth_allow_dev_principal:
        return settings.auth_dev_email.strip().lower()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing identity header. Expected X-USER-EMAIL or enable development principal fallback.",
    )


def get_current_user_context(
    x_user_email: str | None = Header(default=None, alias="X-USER-EMAIL"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve current request user and their role assignment.

    Header strategy: identity is asserted by a trusted fronting proxy; token
    verification happens before requests reach this service.
    """

    email = _resolve_identity(x_user_email)
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown principal.",
        )
    return context_from_user(user)


def has_role(context: RequestUserContext, allowed_roles: set[AppRole] | frozenset[AppRole]) -> bool:
    """Check whether user holds one of the allowed roles."""

    return context.role in allowed_roles


def require_roles(*roles: AppRole):
    """Dependency factory requiring one of the provided roles."""

    allowed = frozenset(roles)

    def dependency(context: RequestUserContext = Depends(get_current_user_context)) -> RequestUserContext:
        if not has_role(context, allowed):
            raise AuthorizationError()
        return context

    return dependency
