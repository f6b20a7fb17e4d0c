from datetime import date
from zoneinfo import ZoneInfo

from clinic.services.appointments import day_window


def _book(client, patient_id, when, **fields):
    payload = {"patientId": patient_id, "date": when}
    payload.update(fields)
    response = client.post("/api/appointments", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_defaults_to_pending(client, patient):
    body = _book(client, patient["id"], "2026-10-19T09:30:00", notes="Regular checkup")
    assert body["status"] == "Pending"
    assert body["patientId"] == patient["id"]
    assert body["date"] == "2026-10-19T09:30:00"
    assert body["notes"] == "Regular checkup"


def test_aware_dates_are_stored_as_utc(client, patient):
    body = _book(client, patient["id"], "2026-10-19T16:00:00+06:30")
    assert body["date"] == "2026-10-19T09:30:00"


def test_any_status_transition_is_allowed(client, patient):
    appointment = _book(client, patient["id"], "2026-10-19T09:30:00")
    url = f"/api/appointments/{appointment['id']}"

    for status in ("Completed", "Pending", "Cancelled", "Completed"):
        response = client.put(url, json={"status": status})
        assert response.status_code == 200
        assert response.json()["status"] == status


def test_unknown_status_is_rejected(client, patient):
    response = client.post(
        "/api/appointments",
        json={"patientId": patient["id"], "date": "2026-10-19T09:30:00", "status": "Done"},
    )
    assert response.status_code == 400
    assert response.json()["field"] == "status"


def test_missing_date_is_rejected(client, patient):
    response = client.post("/api/appointments", json={"patientId": patient["id"]})
    assert response.status_code == 400
    assert response.json()["field"] == "date"


def test_reschedule_keeps_other_fields(client, patient):
    appointment = _book(client, patient["id"], "2026-10-19T09:30:00", notes="Bring x-ray")
    body = client.put(
        f"/api/appointments/{appointment['id']}", json={"date": "2026-10-21T11:00:00"}
    ).json()
    assert body["date"] == "2026-10-21T11:00:00"
    assert body["notes"] == "Bring x-ray"
    assert body["status"] == "Pending"


def test_list_is_latest_date_first(client, patient):
    early = _book(client, patient["id"], "2026-10-18T09:00:00")
    late = _book(client, patient["id"], "2026-10-20T09:00:00")
    middle = _book(client, patient["id"], "2026-10-19T09:00:00")

    ids = [row["id"] for row in client.get("/api/appointments").json()]
    assert ids == [late["id"], middle["id"], early["id"]]


def test_list_filters_by_calendar_day(client, patient):
    _book(client, patient["id"], "2026-10-18T23:59:00")
    target = _book(client, patient["id"], "2026-10-19T00:00:00")
    _book(client, patient["id"], "2026-10-20T00:00:00")

    rows = client.get("/api/appointments", params={"date": "2026-10-19"}).json()
    assert [row["id"] for row in rows] == [target["id"]]


def test_invalid_date_filter_is_400(client):
    response = client.get("/api/appointments", params={"date": "19/10/2026"})
    assert response.status_code == 400
    assert response.json()["field"] == "date"


def test_update_unknown_appointment_returns_404(client):
    response = client.put("/api/appointments/3", json={"status": "Cancelled"})
    assert response.status_code == 404
    assert response.json() == {"message": "Appointment not found"}


def test_day_window_uses_local_midnight():
    start, end = day_window(date(2026, 10, 19), ZoneInfo("Asia/Yangon"))
    assert start.isoformat() == "2026-10-18T17:30:00"
    assert end.isoformat() == "2026-10-19T17:30:00"
    assert start.tzinfo is None
