from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import SeededOrg

ACTIVITY_URL = "/api/v1/activity/reports"
FELLOWSHIP_OUTREACH_URL = "/api/v1/fellowship-outreach/reports"


def _submit_activity(client: TestClient, org: SeededOrg, fellowship_key: str, month: str = "2025-03-01") -> dict:
    response = client.post(
        ACTIVITY_URL,
        headers=org.headers(f"president_{fellowship_key}"),
        json={
            "reporting_month": month,
            "total_attendance": 100,
            "total_new_converts": 4,
            "total_programs_held": 6,
            "success_stories": f"Story from {fellowship_key}",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _seed_all_fellowships(client: TestClient, org: SeededOrg) -> dict[str, dict]:
    return {key: _submit_activity(client, org, key) for key in ("a1", "a2", "b1", "b2")}


def _fellowship_ids(response) -> set[str]:
    assert response.status_code == 200, response.text
    return {item["fellowship_id"] for item in response.json()["items"]}


def test_zone_coordinator_sees_exactly_their_zone(client: TestClient, org: SeededOrg) -> None:
    _seed_all_fellowships(client, org)

    zone_a = _fellowship_ids(client.get(ACTIVITY_URL, headers=org.headers("zonal_a")))
    zone_b = _fellowship_ids(client.get(ACTIVITY_URL, headers=org.headers("zonal_b")))

    assert zone_a == {str(org.fellowships["a1"].id), str(org.fellowships["a2"].id)}
    assert zone_b == {str(org.fellowships["b1"].id), str(org.fellowships["b2"].id)}


def test_zone_coordinator_cannot_read_other_zone_report(client: TestClient, org: SeededOrg) -> None:
    reports = _seed_all_fellowships(client, org)

    own = client.get(f"{ACTIVITY_URL}/{reports['a2']['id']}", headers=org.headers("zonal_a"))
    assert own.status_code == 200
    assert own.json()["period_start"] == "2025-03-01T00:00:00.000"
    assert own.json()["period_end"] == "2025-03-31T23:59:59.999"

    foreign = client.get(f"{ACTIVITY_URL}/{reports['b1']['id']}", headers=org.headers("zonal_a"))
    assert foreign.status_code == 403


def test_unrestricted_viewers_and_filters(client: TestClient, org: SeededOrg) -> None:
    reports = _seed_all_fellowships(client, org)
    _submit_activity(client, org, "a1", month="2025-04-01")

    everything = client.get(ACTIVITY_URL, headers=org.headers("national"))
    assert len(everything.json()["items"]) == 5
    months = [item["reporting_month"] for item in everything.json()["items"]]
    assert months == sorted(months, reverse=True)

    accountant = client.get(ACTIVITY_URL, headers=org.headers("accountant"))
    assert len(accountant.json()["items"]) == 5

    by_zone = _fellowship_ids(
        client.get(ACTIVITY_URL, headers=org.headers("national"), params={"zone_id": str(org.zones["b"].id)})
    )
    assert by_zone == {str(org.fellowships["b1"].id), str(org.fellowships["b2"].id)}

    by_month = client.get(ACTIVITY_URL, headers=org.headers("super_admin"), params={"month": 4, "year": 2025})
    assert [item["reporting_month"] for item in by_month.json()["items"]] == ["2025-04-01"]

    by_scope = client.get(
        ACTIVITY_URL,
        headers=org.headers("super_admin"),
        params={"scope_id": str(org.fellowships["a1"].id), "month": 3, "year": 2025},
    )
    assert [item["id"] for item in by_scope.json()["items"]] == [reports["a1"]["id"]]

    client.put(
        f"{ACTIVITY_URL}/{reports['b2']['id']}/approve-reject",
        headers=org.headers("national"),
        json={"status": "approved"},
    )
    approved = client.get(ACTIVITY_URL, headers=org.headers("national"), params={"status": "approved"})
    assert [item["id"] for item in approved.json()["items"]] == [reports["b2"]["id"]]

    month_without_year = client.get(ACTIVITY_URL, headers=org.headers("national"), params={"month": 3})
    assert month_without_year.status_code == 422


def test_president_sees_only_own_submissions(client: TestClient, org: SeededOrg) -> None:
    reports = _seed_all_fellowships(client, org)

    # An administrator files for fellowship a1 in another month.
    admin_report = client.post(
        ACTIVITY_URL,
        headers=org.headers("admin"),
        json={
            "reporting_month": "2025-05-01",
            "fellowship_id": str(org.fellowships["a1"].id),
            "total_attendance": 1,
            "total_new_converts": 0,
            "total_programs_held": 1,
        },
    )
    assert admin_report.status_code == 201

    own = client.get(ACTIVITY_URL, headers=org.headers("president_a1"))
    assert [item["id"] for item in own.json()["items"]] == [reports["a1"]["id"]]

    other = client.get(f"{ACTIVITY_URL}/{reports['a2']['id']}", headers=org.headers("president_a1"))
    assert other.status_code == 403


def test_roles_outside_the_family_matrix_are_rejected(client: TestClient, org: SeededOrg) -> None:
    response = client.get(FELLOWSHIP_OUTREACH_URL, headers=org.headers("accountant"))

    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions for this operation."


def test_activity_delete_rules(client: TestClient, org: SeededOrg) -> None:
    reports = _seed_all_fellowships(client, org)

    other_president = client.delete(f"{ACTIVITY_URL}/{reports['a1']['id']}", headers=org.headers("president_a2"))
    assert other_president.status_code == 403

    pending_owner = client.delete(f"{ACTIVITY_URL}/{reports['a1']['id']}", headers=org.headers("president_a1"))
    assert pending_owner.status_code == 204
    assert client.get(f"{ACTIVITY_URL}/{reports['a1']['id']}", headers=org.headers("national")).status_code == 404

    client.put(
        f"{ACTIVITY_URL}/{reports['a2']['id']}/approve-reject",
        headers=org.headers("zonal_a"),
        json={"status": "approved"},
    )
    decided_owner = client.delete(f"{ACTIVITY_URL}/{reports['a2']['id']}", headers=org.headers("president_a2"))
    assert decided_owner.status_code == 403

    elevated = client.delete(f"{ACTIVITY_URL}/{reports['a2']['id']}", headers=org.headers("super_admin"))
    assert elevated.status_code == 204

    missing = client.delete(f"{ACTIVITY_URL}/{reports['a2']['id']}", headers=org.headers("super_admin"))
    assert missing.status_code == 404


def test_last_representable_december_filter_is_rejected(client: TestClient, org: SeededOrg) -> None:
    response = client.get(ACTIVITY_URL, headers=org.headers("national"), params={"month": 12, "year": 9999})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"

    november = client.get(ACTIVITY_URL, headers=org.headers("national"), params={"month": 11, "year": 9999})
    assert november.status_code == 200
    assert november.json()["items"] == []
