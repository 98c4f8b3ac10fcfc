"""Application service for the report submission and approval lifecycle."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy import Integer, Numeric
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fellowship_reports.core.auth import RequestUserContext
from fellowship_reports.core.config import get_settings
from fellowship_reports.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from fellowship_reports.models.entities import ReportStatus, ReportWorkflowMixin
from fellowship_reports.repositories.report_repository import ReportRepository
from fellowship_reports.services.report_families import ReportFamily
from fellowship_reports.services.report_scoping import ReportFilters, list_visible_reports, resolve_visibility
from fellowship_reports.services.report_totals import ZERO, _q2, normalize_visits
from fellowship_reports.services.reporting_period import (
    ReportingPeriod,
    month_start,
    previous_month_start,
    resolve_period_for_month,
)

logger = logging.getLogger(__name__)

DECISIONS = {ReportStatus.APPROVED.value: ReportStatus.APPROVED, ReportStatus.REJECTED.value: ReportStatus.REJECTED}


def _json_value(value: object) -> object:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(_q2(value))
    return value


class ReportWorkflowService:
    """Submit, edit, decide, read and delete the reports of one family."""

    def __init__(self, db: Session, family: ReportFamily) -> None:
        self.db = db
        self.family = family
        self.repo = ReportRepository(db)
        self.settings = get_settings()

    # ---------- Validation ----------
    def _column(self, name: str):
        return self.family.model.__table__.c[name]

    def _clean_value(self, name: str, value: object) -> object:
        column = self._column(name)
        if value is None:
            if not column.nullable:
                raise ValidationError(f"{name} is required.")
            return None

        if name == "details_of_visits":
            return normalize_visits(value)

        if isinstance(column.type, Numeric):
            if isinstance(value, bool):
                raise ValidationError(f"{name} must be a number.")
            try:
                amount = _q2(Decimal(str(value)))
            except InvalidOperation as exc:
                raise ValidationError(f"{name} must be a number.") from exc
            if name in self.family.non_negative_fields and amount < ZERO:
                raise ValidationError(f"{name} must be greater than or equal to 0.")
            return amount

        if isinstance(column.type, Integer):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name} must be an integer.")
            if name in self.family.non_negative_fields and value < 0:
                raise ValidationError(f"{name} must be greater than or equal to 0.")
            return value

        if isinstance(value, str):
            return value.strip() or None
        raise ValidationError(f"{name} must be a string.")

    def _clean_fields(self, payload: Mapping[str, object], *, partial: bool) -> dict[str, object]:
        if not partial:
            missing = [name for name in self.family.required_fields if payload.get(name) is None]
            if missing:
                raise ValidationError(f"Missing required fields: {', '.join(missing)}.")

        values: dict[str, object] = {}
        for name in self.family.editable_fields:
            if name in payload:
                values[name] = self._clean_value(name, payload[name])
        return values

    @staticmethod
    def _reporting_month(value: object) -> date:
        if isinstance(value, str):
            try:
                value = date.fromisoformat(value.strip()[:10])
            except ValueError as exc:
                raise ValidationError("reporting_month must be an ISO date (YYYY-MM-DD).") from exc
        if isinstance(value, datetime):
            value = value.date()
        if not isinstance(value, date):
            raise ValidationError("reporting_month is required.")
        return month_start(value)

    # ---------- Scope + RBAC ----------
    def _resolve_submit_scope(self, context: RequestUserContext, requested_fellowship_id: UUID | None) -> UUID:
        if not self.family.fellowship_scoped:
            return context.user_id

        if context.is_elevated:
            if requested_fellowship_id is None:
                raise ValidationError("fellowship_id is required.")
            fellowship_id = requested_fellowship_id
        else:
            if context.fellowship_id is None:
                raise AuthorizationError()
            if requested_fellowship_id is not None and requested_fellowship_id != context.fellowship_id:
                raise AuthorizationError()
            fellowship_id = context.fellowship_id

        if self.repo.get_fellowship(fellowship_id) is None:
            raise NotFoundError("Fellowship not found.")
        return fellowship_id

    @staticmethod
    def _ensure_can_modify(context: RequestUserContext, report: ReportWorkflowMixin) -> None:
        if context.is_elevated:
            return
        if report.submitted_by_id == context.user_id and report.status is ReportStatus.PENDING:
            return
        raise AuthorizationError()

    def _ensure_can_decide(self, context: RequestUserContext, report: ReportWorkflowMixin) -> None:
        if context.role in self.family.approve_roles:
            return
        if (
            context.role in self.family.zone_approve_roles
            and context.zone_id is not None
            and self.family.fellowship_scoped
            and self.repo.zone_of_fellowship(report.fellowship_id) == context.zone_id
        ):
            return
        raise AuthorizationError()

    def _get_or_404(self, report_id: UUID) -> ReportWorkflowMixin:
        report = self.repo.get_report(self.family.model, report_id)
        if report is None:
            raise NotFoundError(f"{self.family.label} not found.")
        return report

    def _commit(self, report: ReportWorkflowMixin, *, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Uniqueness violation on %s: %s", self.family.key, exc.orig)
            raise ConflictError(conflict_message) from exc
        self.db.refresh(report)

    def _duplicate_message(self) -> str:
        if self.family.fellowship_scoped:
            return f"{self.family.label} already exists for this fellowship and month."
        return f"{self.family.label} already exists for this user and month."

    # ---------- Serialization ----------
    def period_for_month(self, reporting_month: date) -> ReportingPeriod:
        return resolve_period_for_month(reporting_month, self.family.period_rule)

    def period_for(self, report: ReportWorkflowMixin) -> ReportingPeriod:
        return self.period_for_month(report.reporting_month)

    def serialize(self, report: ReportWorkflowMixin) -> dict[str, object]:
        data = {column.key: _json_value(getattr(report, column.key)) for column in report.__table__.columns}
        period = self.period_for(report)
        data["period_start"] = period.period_start.isoformat(timespec="milliseconds")
        data["period_end"] = period.period_end.isoformat(timespec="milliseconds")
        return data

    # ---------- Lifecycle ----------
    def submit_report(self, *, context: RequestUserContext, payload: Mapping[str, object]) -> ReportWorkflowMixin:
        values = self._clean_fields(payload, partial=False)
        reporting_month = self._reporting_month(payload.get("reporting_month"))

        if context.role not in self.family.submit_roles:
            raise AuthorizationError()
        scope_id = self._resolve_submit_scope(context, payload.get("fellowship_id"))

        # Fails before any write when the month has no derivable window.
        self.period_for_month(reporting_month)

        scope_column = self.family.scope_column
        if self.repo.find_report_for_scope_month(self.family.model, scope_column, scope_id, reporting_month):
            raise ConflictError(self._duplicate_message())

        now = datetime.utcnow()
        report = self.family.model(
            reporting_month=reporting_month,
            submitted_by_id=context.user_id,
            status=ReportStatus.PENDING,
            created_at=now,
            updated_at=now,
            **values,
        )
        setattr(report, self.family.scope_field, scope_id)

        if self.family.carries_balance:
            previous_month = previous_month_start(reporting_month)
            brought_down = None
            if previous_month is not None:
                brought_down = self.repo.previous_approved_balance(scope_id, previous_month)
            report.balance_brought_down = _q2(brought_down) if brought_down is not None else ZERO

        self.family.derive_totals(report, self.settings)

        try:
            self.repo.add_report(report)
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Uniqueness violation on %s: %s", self.family.key, exc.orig)
            raise ConflictError(self._duplicate_message()) from exc
        self._commit(report, conflict_message=self._duplicate_message())

        logger.info(
            "%s %s submitted by %s for %s", self.family.label, report.id, context.email, reporting_month.isoformat()
        )
        return report

    def update_report(
        self,
        *,
        context: RequestUserContext,
        report_id: UUID,
        patch: Mapping[str, object],
    ) -> ReportWorkflowMixin:
        report = self._get_or_404(report_id)
        self._ensure_can_modify(context, report)

        values = self._clean_fields(patch, partial=True)
        for name, value in values.items():
            setattr(report, name, value)

        self.family.derive_totals(report, self.settings)
        report.updated_at = datetime.utcnow()
        self._commit(report, conflict_message=self._duplicate_message())

        logger.info("%s %s updated by %s", self.family.label, report.id, context.email)
        return report

    def approve_or_reject(
        self,
        *,
        context: RequestUserContext,
        report_id: UUID,
        decision: str,
        rejection_reason: str | None = None,
    ) -> ReportWorkflowMixin:
        status = DECISIONS.get(decision.strip().lower() if isinstance(decision, str) else decision)
        if status is None:
            raise ValidationError("status must be either 'approved' or 'rejected'.")

        report = self._get_or_404(report_id)
        if report.status is not ReportStatus.PENDING:
            raise ConflictError(f"{self.family.label} has already been {report.status.value}.")

        self._ensure_can_decide(context, report)

        reason = rejection_reason.strip() if rejection_reason else None
        if status is ReportStatus.REJECTED and not reason:
            raise ValidationError("rejection_reason is required when rejecting a report.")

        now = datetime.utcnow()
        report.status = status
        report.rejection_reason = reason if status is ReportStatus.REJECTED else None
        report.approved_by_id = context.user_id
        report.approval_date = now
        report.updated_at = now
        if self.family.tracks_accountant_approval:
            report.approved_by_accountant = status is ReportStatus.APPROVED

        self._commit(report, conflict_message=f"{self.family.label} could not be saved.")

        logger.info("%s %s %s by %s", self.family.label, report.id, status.value, context.email)
        return report

    def list_reports(self, *, context: RequestUserContext, filters: ReportFilters) -> list[ReportWorkflowMixin]:
        return list_visible_reports(self.family, context, self.repo, filters)

    def get_report(self, *, context: RequestUserContext, report_id: UUID) -> ReportWorkflowMixin:
        report = self._get_or_404(report_id)
        if not resolve_visibility(self.family, context, self.repo).allows(report):
            raise AuthorizationError()
        return report

    def delete_report(self, *, context: RequestUserContext, report_id: UUID) -> None:
        if not self.family.allows_delete:
            raise AuthorizationError()

        report = self._get_or_404(report_id)
        self._ensure_can_modify(context, report)

        self.repo.delete_report(report)
        self.db.commit()
        logger.info("%s %s deleted by %s", self.family.label, report_id, context.email)
