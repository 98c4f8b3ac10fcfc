"""Role- and hierarchy-based visibility shared by every report family."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from fellowship_reports.core.auth import RequestUserContext
from fellowship_reports.core.errors import AuthorizationError, ValidationError
from fellowship_reports.models.entities import ReportStatus, ReportWorkflowMixin
from fellowship_reports.repositories.report_repository import ReportRepository
from fellowship_reports.services.report_families import ReportFamily
from fellowship_reports.services.reporting_period import calendar_month_bounds


@dataclass(frozen=True, slots=True)
class ReportVisibility:
    """Which reports of one family an actor may read.

    ``unrestricted`` wins over everything else. Otherwise a report must belong
    to one of ``fellowship_ids`` and, when ``submitted_by_id`` is set, must
    have been submitted by that user.
    """

    unrestricted: bool = False
    fellowship_ids: frozenset[UUID] = field(default_factory=frozenset)
    submitted_by_id: UUID | None = None

    def allows(self, report: ReportWorkflowMixin) -> bool:
        if self.unrestricted:
            return True
        if getattr(report, "fellowship_id", None) not in self.fellowship_ids:
            return False
        if self.submitted_by_id is not None and report.submitted_by_id != self.submitted_by_id:
            return False
        return True


@dataclass(slots=True)
class ReportFilters:
    month: int | None = None
    year: int | None = None
    status: ReportStatus | None = None
    scope_id: UUID | None = None
    zone_id: UUID | None = None

    def month_range(self) -> tuple[date, date] | None:
        if self.month is None and self.year is None:
            return None
        if self.month is None or self.year is None:
            raise ValidationError("month and year must be provided together.")
        if not 1 <= self.month <= 12:
            raise ValidationError("month must be within 1..12.")
        return calendar_month_bounds(self.year, self.month)


def resolve_visibility(
    family: ReportFamily,
    context: RequestUserContext,
    repo: ReportRepository,
) -> ReportVisibility:
    """Compute the actor's read scope for ``family``.

    National roles see everything, zone coordinators see the fellowships of
    their zone and scope owners see their own submissions for their own
    fellowship. Missing assignments and unknown roles are rejected.
    """

    if context.role in family.view_all_roles:
        return ReportVisibility(unrestricted=True)

    if context.role in family.zone_view_roles:
        if context.zone_id is None:
            raise AuthorizationError()
        return ReportVisibility(fellowship_ids=frozenset(repo.list_fellowship_ids_in_zone(context.zone_id)))

    if context.role in family.owner_view_roles:
        if context.fellowship_id is None:
            raise AuthorizationError()
        return ReportVisibility(
            fellowship_ids=frozenset({context.fellowship_id}),
            submitted_by_id=context.user_id,
        )

    raise AuthorizationError()


def list_visible_reports(
    family: ReportFamily,
    context: RequestUserContext,
    repo: ReportRepository,
    filters: ReportFilters,
) -> list[ReportWorkflowMixin]:
    visibility = resolve_visibility(family, context, repo)
    month_range = filters.month_range()

    fellowship_ids: frozenset[UUID] | None = None
    if not visibility.unrestricted:
        fellowship_ids = visibility.fellowship_ids
        if not fellowship_ids:
            return []
    elif filters.zone_id is not None and family.fellowship_scoped:
        fellowship_ids = frozenset(repo.list_fellowship_ids_in_zone(filters.zone_id))
        if not fellowship_ids:
            return []

    return repo.list_reports(
        family.model,
        fellowship_ids=fellowship_ids,
        submitted_by_id=visibility.submitted_by_id,
        scope_column=family.scope_column,
        scope_id=filters.scope_id,
        status=filters.status,
        month_range=month_range,
    )
