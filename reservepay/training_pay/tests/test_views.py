import pytest
from unittest.mock import patch

from rest_framework.test import APIClient

from training_pay.models import CompensationRow, GeoReferenceLocation, TransportRecord

BASE = "/api/pay"


@pytest.fixture
def api():
    return APIClient()


# ---- ledger ----

@pytest.mark.django_db
def test_ledger_sync_override_and_totals(api, batch, assignment, present_everywhere):
    res = api.post(f"{BASE}/ledger/batches/{batch.id}/sync/", {"actor_id": 1}, format="json")
    assert res.status_code == 200
    assert res.data["synced"] == 2
    assert all(r["error"] == "" for r in res.data["rows"])

    session = present_everywhere["weekday"]
    res = api.put(f"{BASE}/ledger/override/",
                  {"trainee_id": assignment.trainee_id, "session_id": session.id, "amount": 90_000},
                  format="json")
    assert res.status_code == 200
    assert res.data["final_rate"] == 90_000 and res.data["is_overridden"]

    res = api.get(f"{BASE}/ledger/batches/{batch.id}/totals/")
    assert res.data["total"] == 90_000 + 112_500
    assert res.data["by_trainee"] == [{"trainee_id": assignment.trainee_id, "total": 202_500}]


@pytest.mark.django_db
def test_ledger_rows_and_overview(api, batch, assignment, present_everywhere):
    api.post(f"{BASE}/ledger/batches/{batch.id}/sync/", {}, format="json")

    rows = api.get(f"{BASE}/ledger/batches/{batch.id}/").data
    assert len(rows) == 1 and rows[0]["total"] == 200_000
    assert len(rows[0]["rows"]) == 2

    overview = api.get(f"{BASE}/ledger/batches/{batch.id}/overview/").data
    assert [s["total"] for s in overview] == [87_500, 112_500]
    assert [s["is_weekend"] for s in overview] == [False, True]


@pytest.mark.django_db
def test_override_rejects_negative(api, batch, assignment, present_everywhere):
    api.post(f"{BASE}/ledger/batches/{batch.id}/sync/", {}, format="json")
    res = api.put(f"{BASE}/ledger/override/",
                  {"trainee_id": assignment.trainee_id, "session_id": present_everywhere["weekday"].id, "amount": -5},
                  format="json")
    assert res.status_code == 400
    assert CompensationRow.objects.get(session=present_everywhere["weekday"]).override_rate is None


@pytest.mark.django_db
def test_missing_batch_is_404(api, db):
    for url in (f"{BASE}/ledger/batches/999/", f"{BASE}/transport/batches/999/",
                f"{BASE}/settlement/batches/999/", f"{BASE}/attendance/batches/999/summary/"):
        res = api.get(url)
        assert res.status_code == 404, url
        assert res.data["code"] == "not_found"


# ---- settlement ----

@pytest.mark.django_db
def test_settlement_create_advance_and_conflict(api, batch, sessions):
    res = api.post(f"{BASE}/settlement/disbursement/", {"batch_id": batch.id, "title": "March"}, format="json")
    assert res.status_code == 201
    pid = res.data["id"]
    assert res.data["status"] == "DOC_DRAFT" and res.data["kind"] == "DISBURSEMENT"

    res = api.post(f"{BASE}/settlement/clawback/", {"batch_id": batch.id}, format="json")
    assert res.status_code == 409 and res.data["code"] == "precursor_not_terminal"

    for _ in range(3):
        res = api.post(f"{BASE}/settlement/disbursement/{pid}/advance/", {"actor_id": 5}, format="json")
        assert res.status_code == 200
    assert res.data["status"] == "CMS_APPROVED" and res.data["is_terminal"]

    res = api.post(f"{BASE}/settlement/disbursement/{pid}/advance/", {}, format="json")
    assert res.status_code == 409 and res.data["code"] == "terminal_state"

    res = api.post(f"{BASE}/settlement/clawback/",
                   {"batch_id": batch.id, "reason": "left on day 1", "transport_refund": 4_000}, format="json")
    assert res.status_code == 201 and res.data["refund_total"] == 4_000

    summary = api.get(f"{BASE}/settlement/batches/{batch.id}/").data
    assert summary["refund_total"] == 4_000 and summary["net"] == -4_000


@pytest.mark.django_db
def test_settlement_revert_at_initial_and_patch(api, batch, sessions):
    pid = api.post(f"{BASE}/settlement/disbursement/", {"batch_id": batch.id}, format="json").data["id"]
    res = api.post(f"{BASE}/settlement/disbursement/{pid}/revert/", {}, format="json")
    assert res.status_code == 409 and res.data["code"] == "initial_state"

    res = api.patch(f"{BASE}/settlement/disbursement/{pid}/", {"bank_info": "KB 123-45"}, format="json")
    assert res.status_code == 200 and res.data["bank_info"] == "KB 123-45"

    res = api.patch(f"{BASE}/settlement/disbursement/{pid}/", {"reason": "n/a"}, format="json")
    assert res.status_code == 400

    assert api.get(f"{BASE}/settlement/refund/{pid}/").status_code == 400
    assert api.get(f"{BASE}/settlement/clawback/{pid}/").status_code == 404


# ---- transport ----

@pytest.mark.django_db
def test_transport_calculate_commit_and_manual(api, batch, assignment, fake_maps, home_point, route_km):
    client = fake_maps(points={assignment.trainee.address: home_point}, default_route=route_km("18.4"))
    with patch("training_pay.services.transport_service.get_maps_client", return_value=client):
        res = api.post(f"{BASE}/transport/batches/{batch.id}/calculate/")
    assert res.status_code == 200
    item = res.data["results"][0]
    assert item["status"] == "OK" and item["amount"] == 4_000 and item["saved_amount"] is None
    assert not TransportRecord.objects.exists()

    res = api.post(f"{BASE}/transport/batches/{batch.id}/commit/",
                   {"records": [{k: item[k] for k in ("trainee_id", "amount", "status", "distance_km")}]},
                   format="json")
    assert res.status_code == 200 and len(res.data["saved"]) == 1

    res = api.put(f"{BASE}/transport/batches/{batch.id}/manual/",
                  {"trainee_id": assignment.trainee_id, "amount": 6_500, "note": "taxi receipt"}, format="json")
    assert res.status_code == 200 and res.data["is_manual"]

    records = api.get(f"{BASE}/transport/batches/{batch.id}/").data
    assert [r["amount"] for r in records] == [6_500]


@pytest.mark.django_db
def test_transport_manual_requires_assignment(api, batch, trainee):
    res = api.put(f"{BASE}/transport/batches/{batch.id}/manual/",
                  {"trainee_id": trainee.id, "amount": 1_000}, format="json")
    assert res.status_code == 400 and res.data["code"] == "validation_error"


# ---- commuting ----

@pytest.mark.django_db
def test_commuting_capture_and_sequence_conflict(api, assignment, location):
    payload = {"trainee_id": assignment.trainee_id, "latitude": 37.4, "longitude": 127.1, "type": "CHECK_IN"}
    res = api.post(f"{BASE}/commuting/capture/", payload, format="json")
    assert res.status_code == 201
    assert res.data["location"]["id"] == location.id

    res = api.post(f"{BASE}/commuting/capture/", payload, format="json")
    assert res.status_code == 409 and res.data["code"] == "sequence_error"

    res = api.get(f"{BASE}/commuting/records/", {"trainee_id": assignment.trainee_id})
    assert len(res.data) == 1


@pytest.mark.django_db
def test_commuting_capture_out_of_range(api, assignment, location):
    payload = {"trainee_id": assignment.trainee_id, "latitude": 37.5, "longitude": 127.1, "type": "CHECK_IN"}
    res = api.post(f"{BASE}/commuting/capture/", payload, format="json")
    assert res.status_code == 400 and res.data["code"] == "out_of_range"


@pytest.mark.django_db
def test_commuting_manual_and_summary(api, batch, assignment):
    res = api.post(f"{BASE}/commuting/manual/", {
        "trainee_id": assignment.trainee_id, "date": "2025-03-07",
        "check_in": "2025-03-07T08:50:00+09:00", "check_out": "2025-03-07T17:05:00+09:00",
    }, format="json")
    assert res.status_code == 200 and res.data["is_manual"]

    rows = api.get(f"{BASE}/commuting/batches/{batch.id}/summary/").data
    assert len(rows) == 1 and rows[0]["counted"]

    assert api.get(f"{BASE}/commuting/records/", {"date": "07-03-2025"}).status_code == 400


@pytest.mark.django_db
def test_location_crud(api, db):
    res = api.post(f"{BASE}/commuting/locations/",
                   {"name": "Main gate", "latitude": "37.400000", "longitude": "127.100000", "radius_m": 250},
                   format="json")
    assert res.status_code == 201
    pk = res.data["id"]

    res = api.patch(f"{BASE}/commuting/locations/{pk}/", {"radius_m": 300}, format="json")
    assert res.status_code == 200 and res.data["radius_m"] == 300

    assert api.post(f"{BASE}/commuting/locations/{pk}/deactivate/").data["is_active"] is False
    assert api.get(f"{BASE}/commuting/locations/", {"active": "true"}).data == []
    assert api.post(f"{BASE}/commuting/locations/{pk}/activate/").data["is_active"] is True
    assert len(api.get(f"{BASE}/commuting/locations/").data) == 1

    assert api.delete(f"{BASE}/commuting/locations/{pk}/").status_code == 204
    assert not GeoReferenceLocation.objects.exists()
    assert api.get(f"{BASE}/commuting/locations/{pk}/").status_code == 404


# ---- attendance ----

@pytest.mark.django_db
def test_attendance_summary(api, batch, assignment, sessions):
    from training_pay.models import AttendanceOutcome

    AttendanceOutcome.objects.create(trainee=assignment.trainee, session=sessions["weekday"], status="PRESENT")
    AttendanceOutcome.objects.create(trainee=assignment.trainee, session=sessions["weekend"], status="ABSENT")

    res = api.get(f"{BASE}/attendance/batches/{batch.id}/summary/")
    assert res.status_code == 200
    row = res.data["by_trainee"][0]
    assert (row["present"], row["absent"], row["total"], row["rate"]) == (1, 1, 2, 50)
    assert [s["rate"] for s in res.data["by_session"]] == [100, 0]
