"""Repository helpers for the organizational directory and monthly reports."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from fellowship_reports.models.entities import (
    Fellowship,
    FinancialReport,
    ReportStatus,
    ReportWorkflowMixin,
    User,
    Zone,
)


class ReportRepository:
    """Persistence operations used by report workflow and analytics services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Directory ----------
    def get_zone(self, zone_id: UUID) -> Zone | None:
        return self.db.scalar(select(Zone).where(Zone.id == zone_id))

    def list_zones(self) -> list[Zone]:
        return self.db.scalars(select(Zone).order_by(Zone.name.asc())).all()

    def get_fellowship(self, fellowship_id: UUID) -> Fellowship | None:
        return self.db.scalar(select(Fellowship).where(Fellowship.id == fellowship_id))

    def list_fellowships(self, zone_id: UUID | None = None) -> list[Fellowship]:
        stmt = select(Fellowship).order_by(Fellowship.name.asc())
        if zone_id is not None:
            stmt = stmt.where(Fellowship.zone_id == zone_id)
        return self.db.scalars(stmt).all()

    def list_fellowship_ids_in_zone(self, zone_id: UUID) -> list[UUID]:
        return self.db.scalars(select(Fellowship.id).where(Fellowship.zone_id == zone_id)).all()

    def zone_of_fellowship(self, fellowship_id: UUID) -> UUID | None:
        return self.db.scalar(select(Fellowship.zone_id).where(Fellowship.id == fellowship_id))

    def get_user(self, user_id: UUID) -> User | None:
        return self.db.scalar(select(User).where(User.id == user_id))

    def list_users(self) -> list[User]:
        return self.db.scalars(select(User).order_by(User.email.asc())).all()

    # ---------- Reports ----------
    def get_report(self, model: type[ReportWorkflowMixin], report_id: UUID) -> ReportWorkflowMixin | None:
        return self.db.scalar(select(model).where(model.id == report_id))

    def find_report_for_scope_month(
        self,
        model: type[ReportWorkflowMixin],
        scope_column: InstrumentedAttribute[UUID],
        scope_id: UUID,
        reporting_month: date,
    ) -> ReportWorkflowMixin | None:
        return self.db.scalar(
            select(model).where(
                and_(scope_column == scope_id, model.reporting_month == reporting_month)
            )
        )

    def list_reports(
        self,
        model: type[ReportWorkflowMixin],
        *,
        fellowship_ids: Collection[UUID] | None = None,
        submitted_by_id: UUID | None = None,
        scope_column: InstrumentedAttribute[UUID] | None = None,
        scope_id: UUID | None = None,
        status: ReportStatus | None = None,
        month_range: tuple[date, date] | None = None,
    ) -> list[ReportWorkflowMixin]:
        stmt = select(model)
        if fellowship_ids is not None:
            stmt = stmt.where(model.fellowship_id.in_(list(fellowship_ids)))
        if submitted_by_id is not None:
            stmt = stmt.where(model.submitted_by_id == submitted_by_id)
        if scope_column is not None and scope_id is not None:
            stmt = stmt.where(scope_column == scope_id)
        if status is not None:
            stmt = stmt.where(model.status == status)
        if month_range is not None:
            range_start, range_end = month_range
            stmt = stmt.where(
                and_(model.reporting_month >= range_start, model.reporting_month < range_end)
            )
        return self.db.scalars(stmt.order_by(model.reporting_month.desc(), model.created_at.desc())).all()

    def add_report(self, report: ReportWorkflowMixin) -> ReportWorkflowMixin:
        self.db.add(report)
        self.db.flush()
        return report

    def delete_report(self, report: ReportWorkflowMixin) -> None:
        self.db.delete(report)
        self.db.flush()

    def previous_approved_balance(self, fellowship_id: UUID, reporting_month: date) -> Decimal | None:
        return self.db.scalar(
            select(FinancialReport.balance_carried_forward).where(
                and_(
                    FinancialReport.fellowship_id == fellowship_id,
                    FinancialReport.reporting_month == reporting_month,
                    FinancialReport.status == ReportStatus.APPROVED,
                )
            )
        )

    # ---------- Aggregates ----------
    def sum_approved_by_month(
        self,
        model: type[ReportWorkflowMixin],
        columns: Sequence[str],
        *,
        from_month: date,
        to_month_exclusive: date,
        fellowship_ids: Collection[UUID] | None = None,
    ) -> dict[date, dict[str, object]]:
        """Sum ``columns`` of approved reports grouped by ``reporting_month``."""

        sums = [func.coalesce(func.sum(getattr(model, name)), 0).label(name) for name in columns]
        stmt = (
            select(model.reporting_month, *sums)
            .where(
                and_(
                    model.status == ReportStatus.APPROVED,
                    model.reporting_month >= from_month,
                    model.reporting_month < to_month_exclusive,
                )
            )
            .group_by(model.reporting_month)
        )
        if fellowship_ids is not None:
            stmt = stmt.where(model.fellowship_id.in_(list(fellowship_ids)))

        output: dict[date, dict[str, object]] = {}
        for row in self.db.execute(stmt).all():
            mapping = row._mapping
            output[mapping["reporting_month"]] = {name: mapping[name] for name in columns}
        return output
