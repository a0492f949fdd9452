"""Dentist console endpoints."""

from helpers import future_date


def test_list_dentists_is_public(client, dr_a, dr_b, patient) -> None:
    """Anyone can list dentists."""

    response = client.get("/api/dentist/all")
    assert response.status_code == 200
    assert [d["name"] for d in response.json()["dentists"]] == ["Dr. A", "Dr. B"]


def test_console_requires_owner_or_admin(client, admin, dr_a, dr_b, patient, auth) -> None:
    """Console routes belong to that dentist or an admin."""

    url = f"/api/dentist/appointments/{dr_a.id}"
    assert client.get(url, headers=auth(dr_b)).status_code == 403
    assert client.get(url, headers=auth(dr_a)).status_code == 200
    assert client.get(url, headers=auth(admin)).status_code == 200

    not_dentist = client.get(f"/api/dentist/appointments/{patient.id}", headers=auth(admin))
    assert not_dentist.status_code == 403


def test_dentist_sees_held_appointments(
    client, patient, dr_a, dr_b, make_appointment, auth
) -> None:
    """The console lists the appointments the dentist holds."""

    mine = make_appointment(patient, dr_a, future_date(2))
    make_appointment(patient, dr_b, future_date(2))

    response = client.get(f"/api/dentist/appointments/{dr_a.id}", headers=auth(dr_a))
    assert [a["id"] for a in response.json()["appointments"]] == [mine]


def test_working_window_is_replaced_per_date(client, dr_a, auth) -> None:
    """One working window per date; saving again replaces it."""

    url = f"/api/dentist/availability/{dr_a.id}"
    on_date = future_date(3).isoformat()

    created = client.post(
        url,
        json={"date": on_date, "timeStart": "09:00", "timeEnd": "17:00"},
        headers=auth(dr_a),
    )
    assert created.status_code == 200
    assert created.json()["availability"]["time_start"] == "09:00"

    client.post(
        url,
        json={"date": on_date, "timeStart": "10:00", "timeEnd": "15:00"},
        headers=auth(dr_a),
    )
    windows = client.get(url, headers=auth(dr_a)).json()["availability"]
    assert len(windows) == 1
    assert windows[0]["time_start"] == "10:00"
    assert windows[0]["time_end"] == "15:00"


def test_working_window_validation(client, dr_a, auth) -> None:
    """The window must start before it ends."""

    url = f"/api/dentist/availability/{dr_a.id}"
    backwards = client.post(
        url,
        json={"date": future_date(3).isoformat(), "timeStart": "17:00", "timeEnd": "09:00"},
        headers=auth(dr_a),
    )
    assert backwards.status_code == 400
    assert backwards.json()["message"] == "Start time must be before end time"

    missing = client.post(url, json={"date": future_date(3).isoformat()}, headers=auth(dr_a))
    assert missing.status_code == 400


def test_weekly_unavailability_adds_without_clearing(client, dr_a, auth) -> None:
    """Weekly days off accumulate."""

    url = f"/api/dentist/unavailability/{dr_a.id}/permanent"
    client.post(url, json={"daysOfWeek": [1]}, headers=auth(dr_a))
    response = client.post(url, json={"daysOfWeek": [3, 1], "reason": "Teaching"}, headers=auth(dr_a))

    days = response.json()["unavailability"]
    assert [(d["day_of_week"], d["reason"]) for d in days] == [(1, "Teaching"), (3, "Teaching")]

    invalid = client.post(url, json={"daysOfWeek": [8]}, headers=auth(dr_a))
    assert invalid.status_code == 400
    empty = client.post(url, json={"daysOfWeek": []}, headers=auth(dr_a))
    assert empty.status_code == 400

    removed = client.delete(f"{url}/{days[0]['id']}", headers=auth(dr_a))
    assert removed.status_code == 200
    assert client.delete(f"{url}/{days[0]['id']}", headers=auth(dr_a)).status_code == 404
    assert [d["day_of_week"] for d in client.get(url, headers=auth(dr_a)).json()["unavailability"]] == [3]


def test_dentists_cannot_delete_each_others_records(client, dr_a, dr_b, auth) -> None:
    """Records are scoped to their dentist."""

    url = f"/api/dentist/unavailability/{dr_a.id}/temporary"
    record = client.post(
        url,
        json={"startDate": future_date(4).isoformat()},
        headers=auth(dr_a),
    ).json()["unavailability"]
    assert record["end_date"] is None

    other = client.delete(
        f"/api/dentist/unavailability/{dr_b.id}/temporary/{record['id']}",
        headers=auth(dr_b),
    )
    assert other.status_code == 404
    assert len(client.get(url, headers=auth(dr_a)).json()["unavailability"]) == 1


def test_patient_notes_upsert_per_visit(
    client, patient, dr_a, make_appointment, auth
) -> None:
    """One note per patient visit, updated in place."""

    appointment_id = make_appointment(patient, dr_a, future_date(2), service="Cleaning")
    url = f"/api/dentist/notes/{dr_a.id}"

    general = client.post(
        url,
        json={"patientId": patient.id, "notes": "Sensitive to cold"},
        headers=auth(dr_a),
    )
    assert general.status_code == 200

    first = client.post(
        url,
        json={"patientId": patient.id, "appointmentId": appointment_id, "notes": "Plaque"},
        headers=auth(dr_a),
    ).json()["note"]
    second = client.post(
        url,
        json={"patientId": patient.id, "appointmentId": appointment_id, "notes": "Plaque removed"},
        headers=auth(dr_a),
    ).json()["note"]
    assert second["id"] == first["id"]

    notes = client.get(f"{url}/{patient.id}", headers=auth(dr_a)).json()["notes"]
    assert len(notes) == 2
    visit = next(n for n in notes if n["appointment_id"] == appointment_id)
    assert visit["notes"] == "Plaque removed"
    assert visit["service"] == "Cleaning"
    assert visit["appointment_time"] == "09:00"


def test_patient_notes_validation(client, patient, dr_a, auth) -> None:
    """Notes need a known patient and a matching visit."""

    url = f"/api/dentist/notes/{dr_a.id}"
    assert client.post(url, json={"notes": "x"}, headers=auth(dr_a)).status_code == 400
    assert client.post(
        url, json={"patientId": 9999, "notes": "x"}, headers=auth(dr_a)
    ).status_code == 404
    assert client.post(
        url,
        json={"patientId": patient.id, "appointmentId": 9999, "notes": "x"},
        headers=auth(dr_a),
    ).status_code == 404
