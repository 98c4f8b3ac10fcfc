"""Aggregated metrics over approved reports, scoped by the actor's position."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from fellowship_reports.core.auth import AppRole, RequestUserContext
from fellowship_reports.core.errors import AuthorizationError, ValidationError
from fellowship_reports.models.entities import ActivityReport, FellowshipOutreachReport, FinancialReport
from fellowship_reports.repositories.report_repository import ReportRepository
from fellowship_reports.services.report_families import NATIONAL_VIEW_ROLES
from fellowship_reports.services.report_totals import ZERO, _as_decimal, _q2
from fellowship_reports.services.reporting_period import calendar_month_bounds

ANALYTICS_VIEW_ROLES = NATIONAL_VIEW_ROLES | {AppRole.ACCOUNTANT}

ACTIVITY_METRICS = {
    "total_attendance": "total_attendance",
    "total_new_converts": "total_new_converts",
    "total_programs_held": "total_programs_held",
}
FINANCIAL_METRICS = {
    "total_income": "total_income",
    "total_expense": "total_expense",
}
FELLOWSHIP_OUTREACH_METRICS = {
    "total_fellowship_schools_visited": "total_schools_visited",
    "total_fellowship_students_reached": "total_students_reached",
    "total_fellowship_new_converts": "total_new_converts",
    "total_fellowship_materials_distributed": "total_materials_distributed",
}

SOURCES = (
    (ActivityReport, ACTIVITY_METRICS),
    (FinancialReport, FINANCIAL_METRICS),
    (FellowshipOutreachReport, FELLOWSHIP_OUTREACH_METRICS),
)


def _empty_metrics() -> dict[str, object]:
    metrics: dict[str, object] = {name: 0 for name in ACTIVITY_METRICS}
    metrics.update({name: ZERO for name in FINANCIAL_METRICS})
    metrics.update({name: 0 for name in FELLOWSHIP_OUTREACH_METRICS})
    return metrics


def _render(metrics: dict[str, object]) -> dict[str, object]:
    income = _q2(_as_decimal(metrics["total_income"]))
    expense = _q2(_as_decimal(metrics["total_expense"]))
    rendered: dict[str, object] = {name: int(metrics[name]) for name in ACTIVITY_METRICS}
    rendered["total_income"] = str(income)
    rendered["total_expense"] = str(expense)
    rendered["balance"] = str(_q2(income - expense))
    rendered.update({name: int(metrics[name]) for name in FELLOWSHIP_OUTREACH_METRICS})
    return rendered


class AnalyticsService:
    """Service computing summary and trend views for dashboards."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ReportRepository(db)

    def _fellowship_scope(
        self,
        *,
        context: RequestUserContext,
        fellowship_id: UUID | None,
        zone_id: UUID | None,
    ) -> frozenset[UUID] | None:
        """Return the fellowships to aggregate over, or None for all of them."""

        if context.is_fellowship_president:
            if context.fellowship_id is None:
                raise AuthorizationError()
            return frozenset({context.fellowship_id})

        if context.is_zonal_coordinator:
            if context.zone_id is None:
                raise AuthorizationError()
            return frozenset(self.repo.list_fellowship_ids_in_zone(context.zone_id))

        if context.role in ANALYTICS_VIEW_ROLES:
            if fellowship_id is not None:
                return frozenset({fellowship_id})
            if zone_id is not None:
                return frozenset(self.repo.list_fellowship_ids_in_zone(zone_id))
            return None

        raise AuthorizationError()

    def _collect(
        self,
        *,
        from_month: date,
        to_month_exclusive: date,
        fellowship_ids: frozenset[UUID] | None,
    ) -> dict[date, dict[str, object]]:
        by_month: dict[date, dict[str, object]] = {}
        if fellowship_ids is not None and not fellowship_ids:
            return by_month

        for model, metrics in SOURCES:
            rows = self.repo.sum_approved_by_month(
                model,
                list(metrics.values()),
                from_month=from_month,
                to_month_exclusive=to_month_exclusive,
                fellowship_ids=fellowship_ids,
            )
            for reporting_month, sums in rows.items():
                bucket = by_month.setdefault(reporting_month, _empty_metrics())
                for metric_name, column_name in metrics.items():
                    value = sums[column_name]
                    if isinstance(bucket[metric_name], Decimal):
                        bucket[metric_name] = bucket[metric_name] + _as_decimal(value)
                    else:
                        bucket[metric_name] = bucket[metric_name] + int(value or 0)
        return by_month

    def summary(
        self,
        *,
        context: RequestUserContext,
        month: int | None = None,
        year: int | None = None,
        fellowship_id: UUID | None = None,
        zone_id: UUID | None = None,
    ) -> dict[str, object]:
        today = datetime.utcnow().date()
        query_year = year if year is not None else today.year
        query_month = month if month is not None else today.month
        if not 1 <= query_month <= 12:
            raise ValidationError("month must be within 1..12.")

        fellowship_ids = self._fellowship_scope(context=context, fellowship_id=fellowship_id, zone_id=zone_id)
        start, end = calendar_month_bounds(query_year, query_month)
        collected = self._collect(from_month=start, to_month_exclusive=end, fellowship_ids=fellowship_ids)

        metrics = _empty_metrics()
        for bucket in collected.values():
            for name, value in bucket.items():
                metrics[name] = metrics[name] + value

        return {
            **_render(metrics),
            "month": query_month,
            "year": query_year,
            "summary_for": f"{calendar.month_name[query_month]} {query_year}",
        }

    def monthly_trends(
        self,
        *,
        context: RequestUserContext,
        year: int | None = None,
        fellowship_id: UUID | None = None,
        zone_id: UUID | None = None,
    ) -> list[dict[str, object]]:
        query_year = year if year is not None else datetime.utcnow().year
        fellowship_ids = self._fellowship_scope(context=context, fellowship_id=fellowship_id, zone_id=zone_id)
        _, year_end = calendar_month_bounds(query_year, 12)
        collected = self._collect(
            from_month=date(query_year, 1, 1),
            to_month_exclusive=year_end,
            fellowship_ids=fellowship_ids,
        )

        trends: list[dict[str, object]] = []
        for month in range(1, 13):
            bucket = collected.get(date(query_year, month, 1), _empty_metrics())
            trends.append({"month": month, "month_name": calendar.month_abbr[month], **_render(bucket)})
        return trends
