"""Trusted-patient rules and downpayment handling."""

from bastadental.services.appointments import AppointmentService
from helpers import future_date


def test_new_patient_is_not_trusted(client, patient, auth) -> None:
    """First-time patients must pay the downpayment online."""

    response = client.get(
        f"/api/appointments/user/{patient.id}/payment-options",
        headers=auth(patient),
    )
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": None,
        "trusted": False,
        "paymentMethods": ["card", "gcash", "bank"],
        "downpaymentAmount": 500.0,
    }


def test_completed_visit_makes_patient_trusted(
    client, db, settings, patient, dr_a, make_appointment, auth
) -> None:
    """A completed visit unlocks paying at the clinic."""

    make_appointment(patient, dr_a, future_date(-10), status="completed")

    assert AppointmentService(db, settings).is_trusted_patient(patient.id) is True
    options = client.get(
        f"/api/appointments/user/{patient.id}/payment-options",
        headers=auth(patient),
    ).json()
    assert options["trusted"] is True
    assert "clinic" in options["paymentMethods"]


def test_cancelled_visits_do_not_count(db, settings, patient, dr_a, make_appointment) -> None:
    """Cancelled visits do not build trust."""

    make_appointment(patient, dr_a, future_date(-3), status="cancelled")
    make_appointment(patient, dr_a, future_date(-2), status="confirmed")
    assert AppointmentService(db, settings).is_trusted_patient(patient.id) is False


def test_paid_downpayment_confirms_pending(client, patient, dr_a, make_appointment, auth) -> None:
    """Paying the downpayment confirms the appointment."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))

    response = client.put(
        f"/api/appointments/{appointment_id}/payment",
        json={"downpaymentStatus": "paid", "paymentMethod": "gcash"},
        headers=auth(patient),
    )
    assert response.status_code == 200
    body = response.json()["appointment"]
    assert body["downpayment_status"] == "paid"
    assert body["payment_method"] == "gcash"
    assert body["status"] == "confirmed"


def test_payment_validation(client, patient, dr_a, make_appointment, auth) -> None:
    """Unknown payment statuses and methods are rejected."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))
    url = f"/api/appointments/{appointment_id}/payment"

    assert client.put(url, json={"downpaymentStatus": "maybe"}, headers=auth(patient)).status_code == 400
    assert client.put(
        url,
        json={"downpaymentStatus": "paid", "paymentMethod": "barter"},
        headers=auth(patient),
    ).status_code == 400


def test_pay_at_clinic_requires_trust(client, patient, dr_a, make_appointment, auth) -> None:
    """New patients cannot choose to pay at the clinic."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))
    url = f"/api/appointments/{appointment_id}/payment-method"

    refused = client.put(url, json={"paymentMethod": "clinic"}, headers=auth(patient))
    assert refused.status_code == 403

    make_appointment(patient, dr_a, future_date(-5), status="completed")
    allowed = client.put(url, json={"paymentMethod": "clinic"}, headers=auth(patient))
    assert allowed.status_code == 200
    assert allowed.json()["appointment"]["payment_method"] == "clinic"


def test_payment_is_owner_or_admin(client, make_user, patient, dr_a, make_appointment, auth) -> None:
    """Only the patient or an admin records payments."""

    appointment_id = make_appointment(patient, dr_a, future_date(2))
    other = make_user("Olive Other")
    response = client.put(
        f"/api/appointments/{appointment_id}/payment-method",
        json={"paymentMethod": "card"},
        headers=auth(other),
    )
    assert response.status_code == 403
