"""Smoke tests for FastAPI application."""


def test_health_endpoint(client) -> None:
    """Health endpoint should return status ok."""

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_version_endpoint(client, settings) -> None:
    """Version endpoint should expose application version."""

    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": settings.app_version}


def test_startup_seeds_admin(client) -> None:
    """Startup should create the configured admin account."""

    response = client.post(
        "/api/login",
        json={"email": "admin@bastadental.com", "password": "admin-secret"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_unknown_appointment_uses_error_envelope(client, patient, auth) -> None:
    """Domain errors should use the success/message envelope."""

    response = client.get("/api/appointments/999", headers=auth(patient))
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Appointment not found"}


def test_malformed_body_is_a_400(client, patient, auth) -> None:
    """Unparseable JSON should be reported as a 400 envelope."""

    response = client.put(
        "/api/appointments/1/status",
        headers={**auth(patient), "Content-Type": "application/json"},
        content="not json",
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_envelopes_are_camel_case_and_records_snake_case(client, dr_a, auth) -> None:
    """Envelope keys use camelCase; the records nested inside keep column names."""

    response = client.post(
        f"/api/dentist/availability/{dr_a.id}",
        json={"date": "2030-01-07", "timeStart": "09:00", "timeEnd": "17:00"},
        headers=auth(dr_a),
    )
    window = response.json()["availability"]
    assert set(window) == {"id", "dentist_id", "date", "time_start", "time_end"}

    slots = client.get(
        "/api/appointments/booked-slots",
        params={"date": "2030-01-07", "dentist": "Dr. A"},
    ).json()
    assert "bookedSlots" in slots
