"""Booking, rescheduling, status and booked-slot behaviour."""

from bastadental.repositories.appointments import AppointmentRepository
from bastadental.services.availability import CLINIC_TEMPORARY_REASON
from helpers import future_date, next_day_of_week


def _book(client, headers, **overrides):
    payload = {
        "service": "General Checkup",
        "dentist": "Dr. A",
        "date": future_date(1).isoformat(),
        "time": "09:00",
    }
    payload.update(overrides)
    return client.post("/api/appointments", json=payload, headers=headers)


def test_book_then_rebook_same_slot_conflicts(client, patient, dr_a, auth) -> None:
    """A second booking of the same slot is a 409."""

    headers = auth(patient)

    first = _book(client, headers, userId=patient.id)
    assert first.status_code == 201
    appointment = first.json()["appointment"]
    assert appointment["status"] == "pending"
    assert appointment["transfer_status"] == "pending"
    assert appointment["dentist"] == "Dr. A"
    assert appointment["downpayment_status"] == "unpaid"
    assert appointment["downpayment_amount"] == 500.0
    assert appointment["time"] == "09:00"

    second = _book(client, headers, userId=patient.id)
    assert second.status_code == 409
    assert second.json() == {
        "success": False,
        "message": "This time slot is already booked",
    }


def test_cancelled_slot_can_be_booked_again(client, patient, make_user, dr_a, auth) -> None:
    """Cancelling frees the slot for another patient."""

    first = _book(client, auth(patient)).json()["appointment"]
    cancel = client.put(f"/api/appointments/{first['id']}/cancel", headers=auth(patient))
    assert cancel.status_code == 200
    assert cancel.json()["appointment"]["status"] == "cancelled"

    other = make_user("Olive Other")
    assert _book(client, auth(other)).status_code == 201


def test_booking_validation(client, patient, dr_a, auth) -> None:
    """Missing fields, bad dates and unknown dentists are rejected."""

    headers = auth(patient)

    missing = client.post("/api/appointments", json={"service": "Cleaning"}, headers=headers)
    assert missing.status_code == 400
    assert missing.json()["message"] == "All fields are required"

    bad_date = _book(client, headers, date="next tuesday")
    assert bad_date.status_code == 400
    assert bad_date.json()["message"] == "Invalid date format"

    past = _book(client, headers, date=future_date(-1).isoformat())
    assert past.status_code == 400
    assert past.json()["message"] == "Appointment date cannot be in the past"

    bad_time = _book(client, headers, time="9am")
    assert bad_time.status_code == 400

    unknown = _book(client, headers, dentist="Dr. Nobody")
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Dentist not found"


def test_booking_accepts_single_digit_hour_and_iso_timestamp(client, patient, dr_a, auth) -> None:
    """Loose date and time formats are normalized."""

    on_date = future_date(3)
    response = _book(
        client,
        auth(patient),
        date=f"{on_date.isoformat()}T00:00:00.000Z",
        time="9:30",
    )
    assert response.status_code == 201
    body = response.json()["appointment"]
    assert body["date"] == on_date.isoformat()
    assert body["time"] == "09:30"


def test_patient_cannot_book_for_someone_else(client, patient, make_user, dr_a, auth) -> None:
    """Patients book only for themselves."""

    other = make_user("Olive Other")
    response = _book(client, auth(patient), userId=other.id)
    assert response.status_code == 403


def test_dentist_cannot_book(client, dr_a, auth) -> None:
    """Dentists are not allowed to book."""

    response = _book(client, auth(dr_a))
    assert response.status_code == 403


def test_admin_books_for_patient(client, admin, patient, dr_a, auth) -> None:
    """Admins may book on a patient's behalf."""

    response = _book(client, auth(admin), userId=patient.id)
    assert response.status_code == 201
    assert response.json()["appointment"]["user_id"] == patient.id
    assert response.json()["appointment"]["user_name"] == "Pat Patient"


def test_booked_slots_excludes_cancelled(
    client, patient, dr_a, make_appointment, tomorrow
) -> None:
    """Cancelled appointments do not occupy a slot."""

    make_appointment(patient, dr_a, tomorrow, "10:00", status="confirmed")
    make_appointment(patient, dr_a, tomorrow, "11:00", status="cancelled")

    response = client.get(
        "/api/appointments/booked-slots",
        params={"date": tomorrow.isoformat(), "dentist": "Dr. A"},
    )
    assert response.status_code == 200
    assert response.json()["bookedSlots"] == ["10:00"]


def test_booked_slots_after_cancel(client, patient, dr_a, auth, tomorrow) -> None:
    """A cancelled booking disappears from booked slots."""

    booked = _book(client, auth(patient), date=tomorrow.isoformat()).json()["appointment"]
    params = {"date": tomorrow.isoformat(), "dentist": "Dr. A"}
    assert client.get("/api/appointments/booked-slots", params=params).json()[
        "bookedSlots"
    ] == ["09:00"]

    client.put(f"/api/appointments/{booked['id']}/cancel", headers=auth(patient))
    assert client.get("/api/appointments/booked-slots", params=params).json()[
        "bookedSlots"
    ] == []


def test_booked_slots_requires_params(client) -> None:
    """Date and dentist are both required."""

    response = client.get("/api/appointments/booked-slots", params={"date": "2030-01-01"})
    assert response.status_code == 400


def test_booked_slots_unknown_dentist_is_empty(client) -> None:
    """An unknown dentist has no booked slots."""

    response = client.get(
        "/api/appointments/booked-slots",
        params={"date": future_date(2).isoformat(), "dentist": "Dr. Nobody"},
    )
    assert response.status_code == 200
    assert response.json()["bookedSlots"] == []


def test_reschedule_moves_slot(client, patient, dr_a, auth) -> None:
    """Rescheduling changes date and time only."""

    headers = auth(patient)
    booked = _book(client, headers).json()["appointment"]
    new_date = future_date(5)

    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": new_date.isoformat(), "time": "14:00"},
        headers=headers,
    )
    assert response.status_code == 200
    moved = response.json()["appointment"]
    assert moved["date"] == new_date.isoformat()
    assert moved["time"] == "14:00"
    assert moved["status"] == "pending"
    assert moved["transfer_status"] == "pending"


def test_reschedule_into_own_slot_is_allowed(client, patient, dr_a, auth) -> None:
    """An appointment does not conflict with itself."""

    headers = auth(patient)
    booked = _book(client, headers).json()["appointment"]
    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": booked["date"], "time": booked["time"]},
        headers=headers,
    )
    assert response.status_code == 200


def test_reschedule_into_occupied_slot_conflicts(
    client, patient, dr_a, make_appointment, auth
) -> None:
    """Moving into a taken slot is a 409."""

    on_date = future_date(4)
    make_appointment(patient, dr_a, on_date, "15:00", status="confirmed")
    booked = _book(client, auth(patient)).json()["appointment"]

    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": on_date.isoformat(), "time": "15:00"},
        headers=auth(patient),
    )
    assert response.status_code == 409


def test_reschedule_rejects_terminal_and_missing(
    client, patient, dr_a, make_appointment, auth
) -> None:
    """Closed or unknown appointments cannot be rescheduled."""

    done = make_appointment(patient, dr_a, future_date(2), status="completed")
    response = client.put(
        f"/api/appointments/{done}/reschedule",
        json={"date": future_date(6).isoformat(), "time": "10:00"},
        headers=auth(patient),
    )
    assert response.status_code == 400

    missing = client.put(
        "/api/appointments/4040/reschedule",
        json={"date": future_date(6).isoformat(), "time": "10:00"},
        headers=auth(patient),
    )
    assert missing.status_code == 404


def test_status_changes(client, patient, dr_a, make_appointment, auth) -> None:
    """Clinical staff change status and terminal states stick."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))
    url = f"/api/appointments/{appointment_id}/status"

    assert client.put(url, json={"status": "confirmed"}, headers=auth(patient)).status_code == 403

    invalid = client.put(url, json={"status": "teleported"}, headers=auth(dr_a))
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Valid status is required"

    done = client.put(url, json={"status": "completed"}, headers=auth(dr_a))
    assert done.status_code == 200
    assert done.json()["appointment"]["status"] == "completed"

    reopened = client.put(url, json={"status": "pending"}, headers=auth(dr_a))
    assert reopened.status_code == 400


def test_patients_only_see_their_own(client, patient, make_user, dr_a, make_appointment, auth) -> None:
    """Patients cannot read or change other patients' visits."""

    other = make_user("Olive Other")
    appointment_id = make_appointment(patient, dr_a, future_date(2))

    assert client.get(f"/api/appointments/{appointment_id}", headers=auth(other)).status_code == 403
    assert client.put(
        f"/api/appointments/{appointment_id}/cancel", headers=auth(other)
    ).status_code == 403
    assert client.get(f"/api/appointments/user/{patient.id}", headers=auth(other)).status_code == 403

    own = client.get(f"/api/appointments/user/{patient.id}", headers=auth(patient))
    assert [a["id"] for a in own.json()["appointments"]] == [appointment_id]


def test_admin_lists_all(client, admin, patient, dr_a, make_appointment, auth) -> None:
    """Only admins list every appointment, newest first."""

    first = make_appointment(patient, dr_a, future_date(2), "09:00")
    second = make_appointment(patient, dr_a, future_date(3), "09:00")

    assert client.get("/api/appointments", headers=auth(patient)).status_code == 403
    response = client.get("/api/appointments", headers=auth(admin))
    assert [a["id"] for a in response.json()["appointments"]] == [second, first]


def test_assign_to_other_dentist(client, admin, patient, dr_a, dr_b, make_appointment, auth) -> None:
    """Admin reassignment records the original dentist."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))
    response = client.put(
        f"/api/appointments/{appointment_id}/assign",
        json={"dentistName": "Dr. B"},
        headers=auth(admin),
    )
    assert response.status_code == 200
    body = response.json()["appointment"]
    assert body["dentist"] == "Dr. B"
    assert body["original_dentist"] == "Dr. A"
    assert body["transfer_status"] == "accepted"


def test_assign_into_busy_slot_conflicts(
    client, admin, patient, dr_a, dr_b, make_appointment, auth
) -> None:
    """The new dentist must be free at that time."""

    on_date = future_date(2)
    make_appointment(patient, dr_b, on_date, "09:00")
    appointment_id = make_appointment(patient, dr_a, on_date, "09:00")

    response = client.put(
        f"/api/appointments/{appointment_id}/assign",
        json={"dentistName": "Dr. B"},
        headers=auth(admin),
    )
    assert response.status_code == 409


def test_database_rejects_double_booking_missed_by_precheck(
    client, patient, make_user, dr_a, auth, monkeypatch
) -> None:
    """Two bookings racing past the slot check still end in a single 409."""

    monkeypatch.setattr(AppointmentRepository, "slot_taken", lambda self, *a, **kw: False)

    assert _book(client, auth(patient)).status_code == 201
    second = _book(client, auth(make_user("Olive Other")))
    assert second.status_code == 409
    assert second.json() == {
        "success": False,
        "message": "This time slot is already booked",
    }


def test_database_rejects_reschedule_into_taken_slot(
    client, patient, dr_a, make_appointment, auth, monkeypatch
) -> None:
    """The live-slot index also guards rescheduling."""

    on_date = future_date(4)
    make_appointment(patient, dr_a, on_date, "15:00", status="confirmed")
    booked = _book(client, auth(patient)).json()["appointment"]

    monkeypatch.setattr(AppointmentRepository, "slot_taken", lambda self, *a, **kw: False)
    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": on_date.isoformat(), "time": "15:00"},
        headers=auth(patient),
    )
    assert response.status_code == 409

    unchanged = client.get(f"/api/appointments/{booked['id']}", headers=auth(patient))
    assert unchanged.json()["appointment"]["time"] == "09:00"


def test_reschedule_onto_dentist_day_off_is_rejected(client, patient, dr_a, auth) -> None:
    """Rescheduling re-checks the dentist's weekly days off."""

    tuesday = next_day_of_week(2)
    booked = _book(client, auth(patient), date=future_date(1).isoformat()).json()["appointment"]
    client.post(
        f"/api/dentist/unavailability/{dr_a.id}/permanent",
        json={"daysOfWeek": [2]},
        headers=auth(dr_a),
    )

    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": tuesday.isoformat(), "time": "10:00"},
        headers=auth(patient),
    )
    assert response.status_code == 400
    assert "permanently unavailable" in response.json()["message"]


def test_reschedule_into_clinic_closure_is_rejected(client, admin, patient, dr_a, auth) -> None:
    """Rescheduling re-checks clinic closures."""

    booked = _book(client, auth(patient)).json()["appointment"]
    client.post(
        "/api/clinic/unavailability/temporary",
        json={"startDate": future_date(10).isoformat(), "endDate": future_date(11).isoformat()},
        headers=auth(admin),
    )

    response = client.put(
        f"/api/appointments/{booked['id']}/reschedule",
        json={"date": future_date(10).isoformat(), "time": "10:00"},
        headers=auth(patient),
    )
    assert response.status_code == 400
    assert response.json()["message"] == CLINIC_TEMPORARY_REASON
