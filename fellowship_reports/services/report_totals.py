"""Pure derivations of report summary figures.

These run explicitly before every create/update so stored totals always
match the current payload.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fellowship_reports.core.config import Settings
from fellowship_reports.core.errors import ValidationError
from fellowship_reports.models.entities import (
    FellowshipOutreachReport,
    FinancialReport,
    OutreachReport,
    ReportWorkflowMixin,
)

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")

VISIT_COUNT_FIELDS = ("students_reached", "new_converts", "materials_distributed")
VISIT_TEXT_FIELDS = ("contact_person", "contact_details", "remarks")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def _as_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True, slots=True)
class VisitTotals:
    total_schools_visited: int
    total_students_reached: int
    total_new_converts: int
    total_materials_distributed: int


@dataclass(frozen=True, slots=True)
class FinancialTotals:
    zonal_levy: Decimal
    national_levy: Decimal
    total_income: Decimal
    total_expense: Decimal
    balance_carried_forward: Decimal


def _parse_visit_date(value: object) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise ValidationError("visit_date must be an ISO date (YYYY-MM-DD).") from exc
    raise ValidationError("Each school visit must have a school_name and visit_date.")


def normalize_visits(raw_visits: object) -> list[dict[str, object]]:
    """Validate a school-visit list and return its JSON-storable form."""

    if not isinstance(raw_visits, list) or not raw_visits:
        raise ValidationError("details_of_visits must be a non-empty list.")

    normalized: list[dict[str, object]] = []
    for raw in raw_visits:
        if not isinstance(raw, Mapping):
            raise ValidationError("Each school visit must be an object.")
        school_name = raw.get("school_name")
        if not isinstance(school_name, str) or not school_name.strip():
            raise ValidationError("Each school visit must have a school_name and visit_date.")
        visit: dict[str, object] = {
            "school_name": school_name.strip(),
            "visit_date": _parse_visit_date(raw.get("visit_date")).isoformat(),
        }
        for field_name in VISIT_COUNT_FIELDS:
            count = raw.get(field_name) or 0
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise ValidationError(f"{field_name} must be a non-negative integer.")
            visit[field_name] = count
        for field_name in VISIT_TEXT_FIELDS:
            visit[field_name] = raw.get(field_name)
        normalized.append(visit)
    return normalized


def summarize_visits(visits: Iterable[Mapping[str, object]]) -> VisitTotals:
    rows = list(visits)
    return VisitTotals(
        total_schools_visited=len(rows),
        total_students_reached=sum(int(row.get("students_reached") or 0) for row in rows),
        total_new_converts=sum(int(row.get("new_converts") or 0) for row in rows),
        total_materials_distributed=sum(int(row.get("materials_distributed") or 0) for row in rows),
    )


def compute_financial_totals(
    *,
    tithe: object,
    offering: object,
    project_donation: object,
    other_income: object,
    fellowship_program_expense: object,
    welfare_expense: object,
    admin_expense: object,
    outreach_expense: object,
    balance_brought_down: object,
    zonal_levy_rate: Decimal,
    national_levy_rate: Decimal,
) -> FinancialTotals:
    tithe_value = _as_decimal(tithe)
    total_income = _q2(
        tithe_value + _as_decimal(offering) + _as_decimal(project_donation) + _as_decimal(other_income)
    )
    base_expense = (
        _as_decimal(fellowship_program_expense)
        + _as_decimal(welfare_expense)
        + _as_decimal(admin_expense)
        + _as_decimal(outreach_expense)
    )
    zonal_levy = _q2(tithe_value * zonal_levy_rate)
    national_levy = _q2(tithe_value * national_levy_rate)
    total_expense = _q2(base_expense + zonal_levy + national_levy)
    return FinancialTotals(
        zonal_levy=zonal_levy,
        national_levy=national_levy,
        total_income=total_income,
        total_expense=total_expense,
        balance_carried_forward=_q2(_as_decimal(balance_brought_down) + total_income - total_expense),
    )


def apply_visit_totals(report: FellowshipOutreachReport | OutreachReport, settings: Settings) -> None:
    totals = summarize_visits(report.details_of_visits or [])
    report.total_schools_visited = totals.total_schools_visited
    report.total_students_reached = totals.total_students_reached
    report.total_new_converts = totals.total_new_converts
    report.total_materials_distributed = totals.total_materials_distributed


def apply_financial_totals(report: FinancialReport, settings: Settings) -> None:
    totals = compute_financial_totals(
        tithe=report.tithe,
        offering=report.offering,
        project_donation=report.project_donation,
        other_income=report.other_income,
        fellowship_program_expense=report.fellowship_program_expense,
        welfare_expense=report.welfare_expense,
        admin_expense=report.admin_expense,
        outreach_expense=report.outreach_expense,
        balance_brought_down=report.balance_brought_down,
        zonal_levy_rate=settings.zonal_levy_rate,
        national_levy_rate=settings.national_levy_rate,
    )
    report.zonal_levy = totals.zonal_levy
    report.national_levy = totals.national_levy
    report.total_income = totals.total_income
    report.total_expense = totals.total_expense
    report.balance_carried_forward = totals.balance_carried_forward


def no_derived_totals(report: ReportWorkflowMixin, settings: Settings) -> None:
    return None
