"""ORM model package."""

from fellowship_reports.models.entities import (
    ActivityReport,
    FellowshipOutreachReport,
    Fellowship,
    FinancialReport,
    OutreachReport,
    ReportStatus,
    User,
    UserRole,
    Zone,
)

__all__ = [
    "ActivityReport",
    "FellowshipOutreachReport",
    "Fellowship",
    "FinancialReport",
    "OutreachReport",
    "ReportStatus",
    "User",
    "UserRole",
    "Zone",
]
