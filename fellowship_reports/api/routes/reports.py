"""Submission, approval and listing endpoints for every report family."""

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from fellowship_reports.core.auth import RequestUserContext, get_current_user_context
from fellowship_reports.db.dependencies import get_db_session
from fellowship_reports.models.entities import ReportStatus
from fellowship_reports.services.report_families import (
    ACTIVITY,
    FELLOWSHIP_OUTREACH,
    FINANCIAL,
    OUTREACH,
    ReportFamily,
)
from fellowship_reports.services.report_scoping import ReportFilters
from fellowship_reports.services.report_workflow_service import ReportWorkflowService

Money = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]


class SchoolVisitPayload(BaseModel):
    school_name: str = Field(min_length=1, max_length=255)
    visit_date: date
    students_reached: int = Field(default=0, ge=0)
    new_converts: int = Field(default=0, ge=0)
    materials_distributed: int = Field(default=0, ge=0)
    contact_person: str | None = Field(default=None, max_length=255)
    contact_details: str | None = Field(default=None, max_length=255)
    remarks: str | None = Field(default=None, max_length=2000)


class FinancialReportCreate(BaseModel):
    reporting_month: date
    fellowship_id: UUID | None = None
    tithe: Money
    offering: Money
    project_donation: Money = Decimal("0.00")
    other_income: Money = Decimal("0.00")
    fellowship_program_expense: Money = Decimal("0.00")
    welfare_expense: Money = Decimal("0.00")
    admin_expense: Money = Decimal("0.00")
    outreach_expense: Money = Decimal("0.00")


class FinancialReportUpdate(BaseModel):
    tithe: Money | None = None
    offering: Money | None = None
    project_donation: Money | None = None
    other_income: Money | None = None
    fellowship_program_expense: Money | None = None
    welfare_expense: Money | None = None
    admin_expense: Money | None = None
    outreach_expense: Money | None = None


class ActivityReportCreate(BaseModel):
    reporting_month: date
    fellowship_id: UUID | None = None
    total_attendance: int = Field(ge=0)
    total_new_converts: int = Field(ge=0)
    total_programs_held: int = Field(ge=0)
    outreach_activities_conducted: int = Field(default=0, ge=0)
    basic_outreach_synopsis: str | None = Field(default=None, max_length=5000)
    challenges: str | None = Field(default=None, max_length=5000)
    success_stories: str | None = Field(default=None, max_length=5000)


class ActivityReportUpdate(BaseModel):
    total_attendance: int | None = Field(default=None, ge=0)
    total_new_converts: int | None = Field(default=None, ge=0)
    total_programs_held: int | None = Field(default=None, ge=0)
    outreach_activities_conducted: int | None = Field(default=None, ge=0)
    basic_outreach_synopsis: str | None = Field(default=None, max_length=5000)
    challenges: str | None = Field(default=None, max_length=5000)
    success_stories: str | None = Field(default=None, max_length=5000)


class OutreachReportCreate(BaseModel):
    reporting_month: date
    details_of_visits: list[SchoolVisitPayload] = Field(min_length=1)
    testimonies_recorded: int = Field(default=0, ge=0)
    challenges_faced: str | None = Field(default=None, max_length=5000)
    lessons_learned: str | None = Field(default=None, max_length=5000)
    recommendations: str | None = Field(default=None, max_length=5000)


class FellowshipOutreachReportCreate(OutreachReportCreate):
    fellowship_id: UUID | None = None


class OutreachReportUpdate(BaseModel):
    details_of_visits: list[SchoolVisitPayload] | None = Field(default=None, min_length=1)
    testimonies_recorded: int | None = Field(default=None, ge=0)
    challenges_faced: str | None = Field(default=None, max_length=5000)
    lessons_learned: str | None = Field(default=None, max_length=5000)
    recommendations: str | None = Field(default=None, max_length=5000)


class ReportDecision(BaseModel):
    status: str = Field(min_length=1)
    rejection_reason: str | None = Field(default=None, max_length=2000)


def build_report_router(
    family: ReportFamily,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
    *,
    prefix: str,
) -> APIRouter:
    """Create the CRUD + decision routes of one report family."""

    router = APIRouter(prefix=prefix, tags=[family.key])

    def _service(db: Session) -> ReportWorkflowService:
        return ReportWorkflowService(db, family)

    @router.post("", status_code=status.HTTP_201_CREATED)
    def submit_report(
        payload: create_model,
        context: RequestUserContext = Depends(get_current_user_context),
        db: Session = Depends(get_db_session),
    ) -> dict[str, object]:
        service = _service(db)
        report = service.submit_report(context=context, payload=payload.model_dump())
        return service.serialize(report)

    @router.get("")
    def list_reports(
        month: int | None = Query(default=None, ge=1, le=12),
        year: int | None = Query(default=None, ge=1900, le=9999),
        status_filter: ReportStatus | None = Query(default=None, alias="status"),
        scope_id: UUID | None = None,
        zone_id: UUID | None = None,
        context: RequestUserContext = Depends(get_current_user_context),
        db: Session = Depends(get_db_session),
    ) -> dict[str, list[object]]:
        service = _service(db)
        items = service.list_reports(
            context=context,
            filters=ReportFilters(
                month=month,
                year=year,
                status=status_filter,
                scope_id=scope_id,
                zone_id=zone_id,
            ),
        )
        return {"items": [service.serialize(report) for report in items]}

    @router.get("/{report_id}")
    def get_report(
        report_id: UUID,
        context: RequestUserContext = Depends(get_current_user_context),
        db: Session = Depends(get_db_session),
    ) -> dict[str, object]:
        service = _service(db)
        return service.serialize(service.get_report(context=context, report_id=report_id))

    @router.put("/{report_id}")
    def update_report(
        report_id: UUID,
        payload: update_model,
        context: RequestUserContext = Depends(get_current_user_context),
        db: Session = Depends(get_db_session),
    ) -> dict[str, object]:
        service = _service(db)
        report = service.update_report(
            context=context,
            report_id=report_id,
            patch=payload.model_dump(exclude_unset=True),
        )
        return service.serialize(report)

    @router.put("/{report_id}/approve-reject")
    def approve_or_reject_report(
        report_id: UUID,
        payload: ReportDecision,
        context: RequestUserContext = Depends(get_current_user_context),
        db: Session = Depends(get_db_session),
    ) -> dict[str, object]:
        service = _service(db)
        report = service.approve_or_reject(
            context=context,
            report_id=report_id,
            decision=payload.status,
            rejection_reason=payload.rejection_reason,
        )
        return service.serialize(report)

    if family.allows_delete:

        @router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
        def delete_report(
            report_id: UUID,
            context: RequestUserContext = Depends(get_current_user_context),
            db: Session = Depends(get_db_session),
        ) -> Response:
            _service(db).delete_report(context=context, report_id=report_id)
            return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


financial_router = build_report_router(
    FINANCIAL, FinancialReportCreate, FinancialReportUpdate, prefix="/finance/reports"
)
activity_router = build_report_router(
    ACTIVITY, ActivityReportCreate, ActivityReportUpdate, prefix="/activity/reports"
)
fellowship_outreach_router = build_report_router(
    FELLOWSHIP_OUTREACH,
    FellowshipOutreachReportCreate,
    OutreachReportUpdate,
    prefix="/fellowship-outreach/reports",
)
outreach_router = build_report_router(
    OUTREACH, OutreachReportCreate, OutreachReportUpdate, prefix="/outreach/reports"
)
