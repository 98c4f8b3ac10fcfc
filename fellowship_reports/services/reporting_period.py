"""Reporting-window arithmetic for monthly reports.

Reports are stored against a calendar month (its first day), while the
organization's reporting meetings follow recurring Sundays. The window shown
next to a report is derived here from the stored month and never persisted.

Weekdays use ``0 = Sunday .. 6 = Saturday``; month indexes are ``0..11``.
"""

from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta

from fellowship_reports.core.errors import PeriodResolutionError, ValidationError

SUNDAY = 0

START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)


class PeriodRule(str, enum.Enum):
    # 3rd Sunday of previous month .. 2nd Sunday of month (outreach).
    RULE_A = "rule_a"
    # Monday after 2nd Sunday of previous month .. 3rd Sunday of month (fellowship outreach).
    RULE_B = "rule_b"
    # Same bounds as RULE_A (financial).
    RULE_C = "rule_c"
    # 1st .. last day of the month (activity).
    CALENDAR_MONTH = "calendar_month"


@dataclass(frozen=True, slots=True)
class ReportingPeriod:
    period_start: datetime
    period_end: datetime


def month_start(value: date) -> date:
    """Normalize any date to the first day of its calendar month."""

    return date(value.year, value.month, 1)


def previous_month_start(value: date) -> date | None:
    """First day of the month before ``value``; None before year 1."""

    if value.month == 1:
        if value.year == MINYEAR:
            return None
        return date(value.year - 1, 12, 1)
    return date(value.year, value.month - 1, 1)


def _weekday_index(value: date) -> int:
    # date.weekday() is Monday=0; shift so Sunday=0.
    return (value.weekday() + 1) % 7


def nth_weekday(year: int, month_index: int, weekday: int, occurrence: int) -> date | None:
    """Return the ``occurrence``-th ``weekday`` of the month, or None when absent."""

    if not MINYEAR <= year <= MAXYEAR:
        return None
    if not 0 <= month_index <= 11 or not 0 <= weekday <= 6 or occurrence < 1:
        return None

    month = month_index + 1
    _, days_in_month = calendar.monthrange(year, month)
    count = 0
    for day in range(1, days_in_month + 1):
        candidate = date(year, month, day)
        if _weekday_index(candidate) == weekday:
            count += 1
            if count == occurrence:
                return candidate
    return None


def _previous_month(year: int, month_index: int) -> tuple[int, int]:
    if month_index == 0:
        return year - 1, 11
    return year, month_index - 1


def _require(value: date | None, description: str, year: int, month_index: int) -> date:
    if value is None:
        raise PeriodResolutionError(
            f"Could not determine {description} for reporting month {year}-{month_index + 1:02d}."
        )
    return value


def resolve_period(year: int, month_index: int, rule: PeriodRule) -> ReportingPeriod:
    """Derive the closed reporting window for a calendar month under ``rule``."""

    if not 0 <= month_index <= 11:
        raise PeriodResolutionError(f"Month index must be within 0..11, got {month_index}.")
    if not MINYEAR <= year <= MAXYEAR:
        raise PeriodResolutionError(f"Year must be within {MINYEAR}..{MAXYEAR}, got {year}.")

    prev_year, prev_month_index = _previous_month(year, month_index)

    if rule is PeriodRule.CALENDAR_MONTH:
        _, days_in_month = calendar.monthrange(year, month_index + 1)
        start_date = date(year, month_index + 1, 1)
        end_date = date(year, month_index + 1, days_in_month)
    elif rule in (PeriodRule.RULE_A, PeriodRule.RULE_C):
        start_date = _require(
            nth_weekday(prev_year, prev_month_index, SUNDAY, 3),
            "the third Sunday of the previous month",
            year,
            month_index,
        )
        end_date = _require(
            nth_weekday(year, month_index, SUNDAY, 2),
            "the second Sunday of the month",
            year,
            month_index,
        )
    elif rule is PeriodRule.RULE_B:
        second_sunday = _require(
            nth_weekday(prev_year, prev_month_index, SUNDAY, 2),
            "the second Sunday of the previous month",
            year,
            month_index,
        )
        start_date = second_sunday + timedelta(days=1)
        end_date = _require(
            nth_weekday(year, month_index, SUNDAY, 3),
            "the third Sunday of the month",
            year,
            month_index,
        )
    else:
        raise PeriodResolutionError(f"Unsupported period rule {rule!r}.")

    return ReportingPeriod(
        period_start=datetime.combine(start_date, START_OF_DAY),
        period_end=datetime.combine(end_date, END_OF_DAY),
    )


def resolve_period_for_month(reporting_month: date, rule: PeriodRule) -> ReportingPeriod:
    """Resolve the window for a stored ``reporting_month`` key."""

    return resolve_period(reporting_month.year, reporting_month.month - 1, rule)


def calendar_month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return ``[first day, first day of next month)`` for a 1-based month."""

    if not 1 <= month <= 12:
        raise ValidationError("month must be within 1..12.")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"year must be within {MINYEAR}..{MAXYEAR}.")
    if month == 12 and year == MAXYEAR:
        raise ValidationError(f"December {MAXYEAR} has no following month to bound it.")
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)
