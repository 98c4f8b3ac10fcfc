"""ORM entities for the organizational directory and monthly reports."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from fellowship_reports.db.base import Base


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMINISTRATOR = "administrator"
    ACCOUNTANT = "accountant"
    NATIONAL_COORDINATOR = "national_coordinator"
    ASSISTANT_NATIONAL_COORDINATOR_OUTREACH = "assistant_national_coordinator_secondary_school_outreach"
    ZONAL_COORDINATOR = "zonal_coordinator"
    FELLOWSHIP_PRESIDENT_RCF = "fellowship_president_rcf"
    FELLOWSHIP_PRESIDENT_RCCF = "fellowship_president_rccf"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Zone(Base):
    __tablename__ = "zones"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    office_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Fellowship(Base):
    __tablename__ = "fellowships"
    __table_args__ = (Index("ix_fellowships_zone_id", "zone_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    zone_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("zones.id"), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    president_phone_number: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "fellowship_id IS NULL OR zone_id IS NULL",
            name="ck_users_single_scope_assignment",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
    )
    # One president per fellowship, one coordinator per zone.
    fellowship_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("fellowships.id"), unique=True, nullable=True
    )
    zone_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("zones.id"), unique=True, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ReportWorkflowMixin:
    """Columns shared by every report family."""

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reporting_month: Mapped[date] = mapped_column(Date, nullable=False)
    submitted_by_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        SQLEnum(ReportStatus, name="report_status", values_callable=_enum_values),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    approved_by_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True
    )
    approval_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class FinancialReport(ReportWorkflowMixin, Base):
    __tablename__ = "financial_reports"
    __table_args__ = (
        UniqueConstraint("fellowship_id", "reporting_month", name="uq_financial_reports_fellowship_month"),
        Index("ix_financial_reports_month", "reporting_month"),
    )

    fellowship_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("fellowships.id"), nullable=False
    )
    tithe: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    offering: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    project_donation: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    other_income: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    fellowship_program_expense: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    welfare_expense: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    admin_expense: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    outreach_expense: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    zonal_levy: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    national_levy: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_income: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_expense: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    balance_brought_down: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    balance_carried_forward: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    approved_by_accountant: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ActivityReport(ReportWorkflowMixin, Base):
    __tablename__ = "activity_reports"
    __table_args__ = (
        CheckConstraint("total_attendance >= 0", name="ck_activity_reports_attendance_non_negative"),
        CheckConstraint("total_new_converts >= 0", name="ck_activity_reports_converts_non_negative"),
        CheckConstraint("total_programs_held >= 0", name="ck_activity_reports_programs_non_negative"),
        UniqueConstraint("fellowship_id", "reporting_month", name="uq_activity_reports_fellowship_month"),
        Index("ix_activity_reports_month", "reporting_month"),
    )

    fellowship_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("fellowships.id"), nullable=False
    )
    total_attendance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_new_converts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_programs_held: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    outreach_activities_conducted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    basic_outreach_synopsis: Mapped[str | None] = mapped_column(Text, nullable=True)
    challenges: Mapped[str | None] = mapped_column(Text, nullable=True)
    success_stories: Mapped[str | None] = mapped_column(Text, nullable=True)


class FellowshipOutreachReport(ReportWorkflowMixin, Base):
    __tablename__ = "fellowship_outreach_reports"
    __table_args__ = (
        UniqueConstraint(
            "fellowship_id",
            "reporting_month",
            name="uq_fellowship_outreach_reports_fellowship_month",
        ),
        Index("ix_fellowship_outreach_reports_month", "reporting_month"),
    )

    fellowship_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("fellowships.id"), nullable=False
    )
    details_of_visits: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_schools_visited: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_students_reached: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_new_converts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_materials_distributed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    testimonies_recorded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    challenges_faced: Mapped[str | None] = mapped_column(Text, nullable=True)
    lessons_learned: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)


class OutreachReport(ReportWorkflowMixin, Base):
    __tablename__ = "outreach_reports"
    __table_args__ = (
        UniqueConstraint("submitted_by_id", "reporting_month", name="uq_outreach_reports_submitter_month"),
        Index("ix_outreach_reports_month", "reporting_month"),
    )

    details_of_visits: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_schools_visited: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_students_reached: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_new_converts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_materials_distributed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    testimonies_recorded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    challenges_faced: Mapped[str | None] = mapped_column(Text, nullable=True)
    lessons_learned: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
