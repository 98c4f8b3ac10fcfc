from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fellowship_reports.core.errors import ValidationError
from fellowship_reports.services.report_totals import (
    compute_financial_totals,
    normalize_visits,
    summarize_visits,
)


def test_normalize_visits_fills_defaults_and_stores_iso_dates() -> None:
    visits = normalize_visits(
        [
            {"school_name": "  Hill School ", "visit_date": date(2025, 3, 4), "students_reached": 40},
            {"school_name": "Lake School", "visit_date": "2025-03-11", "new_converts": 3, "remarks": "Good"},
        ]
    )

    assert visits[0]["school_name"] == "Hill School"
    assert visits[0]["visit_date"] == "2025-03-04"
    assert visits[0]["new_converts"] == 0
    assert visits[1]["visit_date"] == "2025-03-11"
    assert visits[1]["remarks"] == "Good"
    assert visits[1]["contact_person"] is None


@pytest.mark.parametrize(
    "raw",
    [
        [],
        None,
        [{"visit_date": "2025-03-04"}],
        [{"school_name": "A"}],
        [{"school_name": "A", "visit_date": "not-a-date"}],
        [{"school_name": "A", "visit_date": "2025-03-04", "students_reached": -1}],
        ["not-an-object"],
    ],
)
def test_normalize_visits_rejects_malformed_line_items(raw: object) -> None:
    with pytest.raises(ValidationError):
        normalize_visits(raw)


def test_summarize_visits_sums_every_line_item() -> None:
    totals = summarize_visits(
        [
            {"students_reached": 40, "new_converts": 2, "materials_distributed": 10},
            {"students_reached": 25, "new_converts": 1, "materials_distributed": 0},
            {"students_reached": 0, "new_converts": 0, "materials_distributed": 5},
        ]
    )

    assert totals.total_schools_visited == 3
    assert totals.total_students_reached == 65
    assert totals.total_new_converts == 3
    assert totals.total_materials_distributed == 15


def test_financial_totals_apply_levies_on_tithe() -> None:
    totals = compute_financial_totals(
        tithe=Decimal("1000"),
        offering=Decimal("500"),
        project_donation=None,
        other_income=Decimal("25.50"),
        fellowship_program_expense=Decimal("200"),
        welfare_expense=Decimal("100"),
        admin_expense=0,
        outreach_expense=None,
        balance_brought_down=Decimal("300"),
        zonal_levy_rate=Decimal("0.10"),
        national_levy_rate=Decimal("0.05"),
    )

    assert totals.zonal_levy == Decimal("100.00")
    assert totals.national_levy == Decimal("50.00")
    assert totals.total_income == Decimal("1525.50")
    assert totals.total_expense == Decimal("450.00")
    assert totals.balance_carried_forward == Decimal("1375.50")
