"""Capability matrix and payload shape of each report family."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.orm import InstrumentedAttribute

from fellowship_reports.core.auth import AppRole, ELEVATED_ROLES, FELLOWSHIP_PRESIDENT_ROLES, ZONE_SCOPED_ROLES
from fellowship_reports.core.config import Settings
from fellowship_reports.models.entities import (
    ActivityReport,
    FellowshipOutreachReport,
    FinancialReport,
    OutreachReport,
    ReportWorkflowMixin,
)
from fellowship_reports.services.report_totals import apply_financial_totals, apply_visit_totals, no_derived_totals
from fellowship_reports.services.reporting_period import PeriodRule

FELLOWSHIP_SCOPE = "fellowship_id"
SUBMITTER_SCOPE = "submitted_by_id"

NATIONAL_VIEW_ROLES = frozenset(
    {
        AppRole.SUPER_ADMIN,
        AppRole.ADMINISTRATOR,
        AppRole.NATIONAL_COORDINATOR,
        AppRole.ASSISTANT_NATIONAL_COORDINATOR_OUTREACH,
    }
)
NATIONAL_APPROVE_ROLES = frozenset({AppRole.SUPER_ADMIN, AppRole.ADMINISTRATOR, AppRole.NATIONAL_COORDINATOR})

VISIT_REPORT_FIELDS = (
    "details_of_visits",
    "testimonies_recorded",
    "challenges_faced",
    "lessons_learned",
    "recommendations",
)


@dataclass(frozen=True, slots=True)
class ReportFamily:
    key: str
    label: str
    model: type[ReportWorkflowMixin]
    scope_field: str
    period_rule: PeriodRule
    submit_roles: frozenset[AppRole]
    view_all_roles: frozenset[AppRole]
    zone_view_roles: frozenset[AppRole]
    owner_view_roles: frozenset[AppRole]
    approve_roles: frozenset[AppRole]
    zone_approve_roles: frozenset[AppRole]
    editable_fields: tuple[str, ...]
    required_fields: tuple[str, ...]
    non_negative_fields: tuple[str, ...]
    derive_totals: Callable[[Any, Settings], None]
    allows_delete: bool = False
    carries_balance: bool = False
    tracks_accountant_approval: bool = False

    @property
    def fellowship_scoped(self) -> bool:
        return self.scope_field == FELLOWSHIP_SCOPE

    @property
    def scope_column(self) -> InstrumentedAttribute[UUID]:
        return getattr(self.model, self.scope_field)


FINANCIAL = ReportFamily(
    key="financial",
    label="Financial report",
    model=FinancialReport,
    scope_field=FELLOWSHIP_SCOPE,
    period_rule=PeriodRule.RULE_C,
    submit_roles=FELLOWSHIP_PRESIDENT_ROLES,
    view_all_roles=NATIONAL_VIEW_ROLES | {AppRole.ACCOUNTANT},
    zone_view_roles=ZONE_SCOPED_ROLES,
    owner_view_roles=FELLOWSHIP_PRESIDENT_ROLES,
    approve_roles=frozenset({AppRole.ACCOUNTANT}),
    zone_approve_roles=frozenset(),
    editable_fields=(
        "tithe",
        "offering",
        "project_donation",
        "other_income",
        "fellowship_program_expense",
        "welfare_expense",
        "admin_expense",
        "outreach_expense",
    ),
    required_fields=("tithe", "offering"),
    non_negative_fields=(
        "tithe",
        "offering",
        "project_donation",
        "other_income",
        "fellowship_program_expense",
        "welfare_expense",
        "admin_expense",
        "outreach_expense",
    ),
    derive_totals=apply_financial_totals,
    carries_balance=True,
    tracks_accountant_approval=True,
)

ACTIVITY = ReportFamily(
    key="activity",
    label="Activity report",
    model=ActivityReport,
    scope_field=FELLOWSHIP_SCOPE,
    period_rule=PeriodRule.CALENDAR_MONTH,
    submit_roles=ELEVATED_ROLES | FELLOWSHIP_PRESIDENT_ROLES,
    view_all_roles=NATIONAL_VIEW_ROLES | {AppRole.ACCOUNTANT},
    zone_view_roles=ZONE_SCOPED_ROLES,
    owner_view_roles=FELLOWSHIP_PRESIDENT_ROLES,
    approve_roles=NATIONAL_APPROVE_ROLES,
    zone_approve_roles=ZONE_SCOPED_ROLES,
    editable_fields=(
        "total_attendance",
        "total_new_converts",
        "total_programs_held",
        "outreach_activities_conducted",
        "basic_outreach_synopsis",
        "challenges",
        "success_stories",
    ),
    required_fields=("total_attendance", "total_new_converts", "total_programs_held"),
    non_negative_fields=(
        "total_attendance",
        "total_new_converts",
        "total_programs_held",
        "outreach_activities_conducted",
    ),
    derive_totals=no_derived_totals,
    allows_delete=True,
)

FELLOWSHIP_OUTREACH = ReportFamily(
    key="fellowship_outreach",
    label="Fellowship outreach report",
    model=FellowshipOutreachReport,
    scope_field=FELLOWSHIP_SCOPE,
    period_rule=PeriodRule.RULE_B,
    submit_roles=ELEVATED_ROLES | FELLOWSHIP_PRESIDENT_ROLES,
    view_all_roles=NATIONAL_VIEW_ROLES,
    zone_view_roles=ZONE_SCOPED_ROLES,
    owner_view_roles=FELLOWSHIP_PRESIDENT_ROLES,
    approve_roles=NATIONAL_APPROVE_ROLES,
    zone_approve_roles=ZONE_SCOPED_ROLES,
    editable_fields=VISIT_REPORT_FIELDS,
    required_fields=("details_of_visits",),
    non_negative_fields=("testimonies_recorded",),
    derive_totals=apply_visit_totals,
    allows_delete=True,
)

OUTREACH = ReportFamily(
    key="outreach",
    label="Outreach report",
    model=OutreachReport,
    scope_field=SUBMITTER_SCOPE,
    period_rule=PeriodRule.RULE_A,
    submit_roles=ELEVATED_ROLES | {AppRole.ASSISTANT_NATIONAL_COORDINATOR_OUTREACH},
    view_all_roles=NATIONAL_VIEW_ROLES | ZONE_SCOPED_ROLES,
    zone_view_roles=frozenset(),
    owner_view_roles=frozenset(),
    approve_roles=NATIONAL_APPROVE_ROLES,
    zone_approve_roles=frozenset(),
    editable_fields=VISIT_REPORT_FIELDS,
    required_fields=("details_of_visits",),
    non_negative_fields=("testimonies_recorded",),
    derive_totals=apply_visit_totals,
)
