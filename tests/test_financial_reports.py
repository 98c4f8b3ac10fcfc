from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import SeededOrg

FINANCE_URL = "/api/v1/finance/reports"


def _financial_payload(month: str, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "reporting_month": month,
        "tithe": "1000.00",
        "offering": "500.00",
        "fellowship_program_expense": "200.00",
        "welfare_expense": "100.00",
    }
    payload.update(overrides)
    return payload


def test_financial_totals_and_accountant_approval(client: TestClient, org: SeededOrg) -> None:
    created = client.post(FINANCE_URL, headers=org.headers("president_a1"), json=_financial_payload("2025-02-10"))
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["reporting_month"] == "2025-02-01"
    assert body["zonal_levy"] == "100.00"
    assert body["national_levy"] == "50.00"
    assert body["total_income"] == "1500.00"
    assert body["total_expense"] == "450.00"
    assert body["balance_brought_down"] == "0.00"
    assert body["balance_carried_forward"] == "1050.00"
    assert body["approved_by_accountant"] is False
    # February 2025: third Sunday of January (19th) to second Sunday of February (9th).
    assert body["period_start"] == "2025-01-19T00:00:00.000"
    assert body["period_end"] == "2025-02-09T23:59:59.999"

    national = client.put(
        f"{FINANCE_URL}/{body['id']}/approve-reject",
        headers=org.headers("national"),
        json={"status": "approved"},
    )
    assert national.status_code == 403

    approved = client.put(
        f"{FINANCE_URL}/{body['id']}/approve-reject",
        headers=org.headers("accountant"),
        json={"status": "approved"},
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["approved_by_accountant"] is True
    assert approved.json()["approved_by_id"] == str(org.users["accountant"].id)


def test_balance_brought_down_uses_previous_approved_month(client: TestClient, org: SeededOrg) -> None:
    february = client.post(FINANCE_URL, headers=org.headers("president_b1"), json=_financial_payload("2025-02-01"))
    client.put(
        f"{FINANCE_URL}/{february.json()['id']}/approve-reject",
        headers=org.headers("accountant"),
        json={"status": "approved"},
    )

    march = client.post(
        FINANCE_URL,
        headers=org.headers("president_b1"),
        json=_financial_payload("2025-03-01", tithe="200.00", offering="100.00", welfare_expense="0.00"),
    )
    assert march.status_code == 201
    body = march.json()
    assert body["balance_brought_down"] == "1050.00"
    # income 300, expense 200 + 20 + 10 = 230
    assert body["total_expense"] == "230.00"
    assert body["balance_carried_forward"] == "1120.00"

    # A pending previous month is not carried.
    other = client.post(FINANCE_URL, headers=org.headers("president_b2"), json=_financial_payload("2025-02-01"))
    assert other.status_code == 201
    other_march = client.post(FINANCE_URL, headers=org.headers("president_b2"), json=_financial_payload("2025-03-01"))
    assert other_march.json()["balance_brought_down"] == "0.00"


def test_financial_update_recomputes_totals(client: TestClient, org: SeededOrg) -> None:
    created = client.post(FINANCE_URL, headers=org.headers("president_a2"), json=_financial_payload("2025-06-01"))
    report_id = created.json()["id"]

    updated = client.put(
        f"{FINANCE_URL}/{report_id}",
        headers=org.headers("president_a2"),
        json={"tithe": "2000.00", "admin_expense": "50.00"},
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["zonal_levy"] == "200.00"
    assert body["national_levy"] == "100.00"
    assert body["total_income"] == "2500.00"
    assert body["total_expense"] == "650.00"
    assert body["balance_carried_forward"] == "1850.00"

    negative = client.put(f"{FINANCE_URL}/{report_id}", headers=org.headers("president_a2"), json={"tithe": "-1"})
    assert negative.status_code == 422

    cleared = client.put(f"{FINANCE_URL}/{report_id}", headers=org.headers("president_a2"), json={"tithe": None})
    assert cleared.status_code == 422


def test_financial_submission_and_visibility_roles(client: TestClient, org: SeededOrg) -> None:
    elevated = client.post(
        FINANCE_URL,
        headers=org.headers("super_admin"),
        json=_financial_payload("2025-02-01", fellowship_id=str(org.fellowships["a1"].id)),
    )
    assert elevated.status_code == 403

    missing_offering = client.post(
        FINANCE_URL,
        headers=org.headers("president_a1"),
        json={"reporting_month": "2025-02-01", "tithe": "10.00"},
    )
    assert missing_offering.status_code == 422

    created = client.post(FINANCE_URL, headers=org.headers("president_a1"), json=_financial_payload("2025-02-01"))
    assert created.status_code == 201

    for alias in ("accountant", "national", "outreach", "zonal_a", "president_a1"):
        response = client.get(FINANCE_URL, headers=org.headers(alias))
        assert response.status_code == 200
        assert len(response.json()["items"]) == 1, alias

    for alias in ("zonal_b", "president_a2"):
        response = client.get(FINANCE_URL, headers=org.headers(alias))
        assert response.status_code == 200
        assert response.json()["items"] == [], alias

    no_delete = client.delete(f"{FINANCE_URL}/{created.json()['id']}", headers=org.headers("super_admin"))
    assert no_delete.status_code == 405


def test_first_representable_month_is_a_period_error(client: TestClient, org: SeededOrg) -> None:
    response = client.post(FINANCE_URL, headers=org.headers("president_a1"), json=_financial_payload("0001-01-15"))

    assert response.status_code == 400
    assert response.json()["code"] == "period_resolution_error"
