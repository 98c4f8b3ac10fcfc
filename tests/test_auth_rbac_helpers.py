from __future__ import annotations

import uuid

import pytest

from fellowship_reports.core.auth import AppRole, RequestUserContext, has_role, require_roles
from fellowship_reports.core.errors import AuthorizationError


def _context(role: AppRole, **kwargs: object) -> RequestUserContext:
    return RequestUserContext(
        user_id=uuid.uuid4(),
        email=f"{role.value}@test.local",
        name=role.value,
        role=role,
        **kwargs,
    )


def test_has_role_matches_expected_roles() -> None:
    context = _context(AppRole.ACCOUNTANT)

    assert has_role(context, {AppRole.ACCOUNTANT}) is True
    assert has_role(context, {AppRole.SUPER_ADMIN, AppRole.ADMINISTRATOR}) is False


def test_role_class_properties() -> None:
    assert _context(AppRole.ADMINISTRATOR).is_elevated is True
    assert _context(AppRole.NATIONAL_COORDINATOR).is_elevated is False

    president = _context(AppRole.FELLOWSHIP_PRESIDENT_RCCF, fellowship_id=uuid.uuid4())
    assert president.is_fellowship_president is True
    assert president.is_zonal_coordinator is False

    zonal = _context(AppRole.ZONAL_COORDINATOR, zone_id=uuid.uuid4())
    assert zonal.is_zonal_coordinator is True


def test_role_values_are_not_prefix_matched() -> None:
    # The outreach assistant must not be treated as a national coordinator.
    outreach = _context(AppRole.ASSISTANT_NATIONAL_COORDINATOR_OUTREACH)

    assert has_role(outreach, {AppRole.NATIONAL_COORDINATOR}) is False


def test_require_roles_dependency_raises_generic_authorization_error() -> None:
    dependency = require_roles(AppRole.SUPER_ADMIN)

    assert dependency(context=_context(AppRole.SUPER_ADMIN)).role is AppRole.SUPER_ADMIN
    with pytest.raises(AuthorizationError) as excinfo:
        dependency(context=_context(AppRole.ZONAL_COORDINATOR))
    assert excinfo.value.message == "Insufficient permissions for this operation."
