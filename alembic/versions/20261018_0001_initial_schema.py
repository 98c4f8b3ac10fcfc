"""initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = postgresql.ENUM(
    "super_admin",
    "administrator",
    "accountant",
    "national_coordinator",
    "assistant_national_coordinator_secondary_school_outreach",
    "zonal_coordinator",
    "fellowship_president_rcf",
    "fellowship_president_rccf",
    name="user_role",
    create_type=False,
)
report_status = postgresql.ENUM("pending", "approved", "rejected", name="report_status", create_type=False)


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(14, 2), nullable=False, server_default=sa.text("0"))


def _count(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default=sa.text("0"))


def _workflow_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("reporting_month", sa.Date(), nullable=False),
        sa.Column("submitted_by_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", report_status, nullable=False, server_default="pending"),
        sa.Column("approved_by_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _visit_columns() -> list[sa.Column]:
    return [
        sa.Column("details_of_visits", sa.JSON(), nullable=False),
        _count("total_schools_visited"),
        _count("total_students_reached"),
        _count("total_new_converts"),
        _count("total_materials_distributed"),
        _count("testimonies_recorded"),
        sa.Column("challenges_faced", sa.Text(), nullable=True),
        sa.Column("lessons_learned", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
    ]


def _fellowship_column() -> sa.Column:
    return sa.Column(
        "fellowship_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("fellowships.id"),
        nullable=False,
    )


def upgrade() -> None:
    user_role.create(op.get_bind(), checkfirst=True)
    report_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "zones",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("office_address", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "fellowships",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("zone_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("zones.id"), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("president_phone_number", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_fellowships_zone_id", "fellowships", ["zone_id"])

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column(
            "fellowship_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("fellowships.id"),
            nullable=True,
            unique=True,
        ),
        sa.Column("zone_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("zones.id"), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("fellowship_id IS NULL OR zone_id IS NULL", name="ck_users_single_scope_assignment"),
    )

    op.create_table(
        "financial_reports",
        *_workflow_columns(),
        _fellowship_column(),
        _money("tithe"),
        _money("offering"),
        _money("project_donation"),
        _money("other_income"),
        _money("fellowship_program_expense"),
        _money("welfare_expense"),
        _money("admin_expense"),
        _money("outreach_expense"),
        _money("zonal_levy"),
        _money("national_levy"),
        _money("total_income"),
        _money("total_expense"),
        _money("balance_brought_down"),
        _money("balance_carried_forward"),
        sa.Column("approved_by_accountant", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.UniqueConstraint("fellowship_id", "reporting_month", name="uq_financial_reports_fellowship_month"),
    )
    op.create_index("ix_financial_reports_month", "financial_reports", ["reporting_month"])

    op.create_table(
        "activity_reports",
        *_workflow_columns(),
        _fellowship_column(),
        _count("total_attendance"),
        _count("total_new_converts"),
        _count("total_programs_held"),
        _count("outreach_activities_conducted"),
        sa.Column("basic_outreach_synopsis", sa.Text(), nullable=True),
        sa.Column("challenges", sa.Text(), nullable=True),
        sa.Column("success_stories", sa.Text(), nullable=True),
        sa.CheckConstraint("total_attendance >= 0", name="ck_activity_reports_attendance_non_negative"),
        sa.CheckConstraint("total_new_converts >= 0", name="ck_activity_reports_converts_non_negative"),
        sa.CheckConstraint("total_programs_held >= 0", name="ck_activity_reports_programs_non_negative"),
        sa.UniqueConstraint("fellowship_id", "reporting_month", name="uq_activity_reports_fellowship_month"),
    )
    op.create_index("ix_activity_reports_month", "activity_reports", ["reporting_month"])

    op.create_table(
        "fellowship_outreach_reports",
        *_workflow_columns(),
        _fellowship_column(),
        *_visit_columns(),
        sa.UniqueConstraint(
            "fellowship_id",
            "reporting_month",
            name="uq_fellowship_outreach_reports_fellowship_month",
        ),
    )
    op.create_index("ix_fellowship_outreach_reports_month", "fellowship_outreach_reports", ["reporting_month"])

    op.create_table(
        "outreach_reports",
        *_workflow_columns(),
        *_visit_columns(),
        sa.UniqueConstraint("submitted_by_id", "reporting_month", name="uq_outreach_reports_submitter_month"),
    )
    op.create_index("ix_outreach_reports_month", "outreach_reports", ["reporting_month"])


def downgrade() -> None:
    op.drop_index("ix_outreach_reports_month", table_name="outreach_reports")
    op.drop_table("outreach_reports")

    op.drop_index("ix_fellowship_outreach_reports_month", table_name="fellowship_outreach_reports")
    op.drop_table("fellowship_outreach_reports")

    op.drop_index("ix_activity_reports_month", table_name="activity_reports")
    op.drop_table("activity_reports")

    op.drop_index("ix_financial_reports_month", table_name="financial_reports")
    op.drop_table("financial_reports")

    op.drop_table("users")

    op.drop_index("ix_fellowships_zone_id", table_name="fellowships")
    op.drop_table("fellowships")

    op.drop_table("zones")

    report_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
