"""Appointment booking, lifecycle, transfer and payment endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bastadental.errors import PermissionDenied, ValidationFailed
from bastadental.models import User
from bastadental.models.user import ROLE_ADMIN, ROLE_DENTIST, ROLE_PATIENT
from bastadental.routers.deps import ensure_self_or_admin, get_current_user, require_roles
from bastadental.routers.responses import (
    AppointmentEnvelope,
    AppointmentListEnvelope,
    AppointmentOut,
    BookedSlotsEnvelope,
    CamelModel,
    PaymentOptionsEnvelope,
)
from bastadental.services.appointments import AppointmentService
from bastadental.services.db import get_db
from bastadental.utils.config import Settings, get_settings

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class BookingRequest(CamelModel):
    """Booking form; ``user_id`` defaults to the caller for patients."""

    user_id: Optional[int] = None
    service: Optional[str] = None
    dentist: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None


class RescheduleRequest(CamelModel):
    date: Optional[str] = None
    time: Optional[str] = None


class StatusRequest(CamelModel):
    status: Optional[str] = None


class AssignRequest(CamelModel):
    dentist_name: Optional[str] = None


class AcceptTransferRequest(CamelModel):
    dentist_name: Optional[str] = None
    dentist_id: Optional[int] = None


class PaymentRequest(CamelModel):
    downpayment_status: Optional[str] = None
    payment_method: Optional[str] = None


class PaymentMethodRequest(CamelModel):
    payment_method: Optional[str] = None


def _service(db: Session, settings: Settings) -> AppointmentService:
    return AppointmentService(db, settings)


def _envelope(appointment, message: Optional[str] = None) -> AppointmentEnvelope:
    return AppointmentEnvelope(
        message=message,
        appointment=AppointmentOut.from_model(appointment),
    )


@router.post("", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def book_appointment(
    payload: BookingRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    """Book for yourself, or (admins) for any patient."""

    if actor.role == ROLE_DENTIST:
        raise PermissionDenied("Dentists cannot book appointments")

    user_id = payload.user_id
    if actor.role == ROLE_PATIENT:
        if user_id is not None and user_id != actor.id:
            raise PermissionDenied("You can only book appointments for yourself")
        user_id = actor.id

    appointment = _service(db, settings).book(
        user_id=user_id,
        service=payload.service,
        dentist_name=payload.dentist,
        raw_date=payload.date,
        raw_time=payload.time,
        notes=payload.notes,
    )
    return _envelope(appointment, "Appointment booked successfully")


@router.get("", response_model=AppointmentListEnvelope)
def list_appointments(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> AppointmentListEnvelope:
    return AppointmentListEnvelope.of(_service(db, settings).list_all())


@router.get("/transferable", response_model=AppointmentListEnvelope)
def list_transferable(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(require_roles(ROLE_DENTIST, ROLE_ADMIN)),
) -> AppointmentListEnvelope:
    return AppointmentListEnvelope.of(_service(db, settings).list_transferable())


@router.get("/booked-slots", response_model=BookedSlotsEnvelope)
def booked_slots(
    date: Optional[str] = Query(default=None),
    dentist: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> BookedSlotsEnvelope:
    """Times already taken for a dentist on a date (public, used by the booking form)."""

    return BookedSlotsEnvelope(
        booked_slots=_service(db, settings).booked_slots(date, dentist)
    )


@router.get("/user/{user_id}", response_model=AppointmentListEnvelope)
def list_user_appointments(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentListEnvelope:
    ensure_self_or_admin(actor, user_id)
    return AppointmentListEnvelope.of(_service(db, settings).list_for_user(user_id))


@router.get("/user/{user_id}/payment-options", response_model=PaymentOptionsEnvelope)
def payment_options(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> PaymentOptionsEnvelope:
    ensure_self_or_admin(actor, user_id)
    options = _service(db, settings).payment_options(user_id)
    return PaymentOptionsEnvelope(**options)


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    appointment = service.get(appointment_id)
    service.authorize_view(actor, appointment)
    return _envelope(appointment)


@router.put("/{appointment_id}/cancel", response_model=AppointmentEnvelope)
def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_change(actor, service.get(appointment_id))
    appointment = service.cancel(appointment_id)
    LOGGER.info("Appointment id=%s cancelled by user_id=%s", appointment_id, actor.id)
    return _envelope(appointment, "Appointment cancelled successfully")


@router.put("/{appointment_id}/reschedule", response_model=AppointmentEnvelope)
def reschedule_appointment(
    appointment_id: int,
    payload: RescheduleRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_change(actor, service.get(appointment_id))
    appointment = service.reschedule(appointment_id, payload.date, payload.time)
    return _envelope(appointment, "Appointment rescheduled successfully")


@router.put("/{appointment_id}/status", response_model=AppointmentEnvelope)
def update_status(
    appointment_id: int,
    payload: StatusRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_clinical(actor, service.get(appointment_id))
    appointment = service.set_status(appointment_id, payload.status)
    return _envelope(appointment, "Appointment status updated")


@router.put("/{appointment_id}/assign", response_model=AppointmentEnvelope)
def assign_appointment(
    appointment_id: int,
    payload: AssignRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> AppointmentEnvelope:
    appointment = _service(db, settings).assign(appointment_id, payload.dentist_name)
    return _envelope(appointment, "Appointment assigned successfully")


@router.put("/{appointment_id}/mark-transferable", response_model=AppointmentEnvelope)
def mark_transferable(
    appointment_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(require_roles(ROLE_DENTIST, ROLE_ADMIN)),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_clinical(actor, service.get(appointment_id))
    appointment = service.mark_transferable(appointment_id)
    return _envelope(appointment, "Appointment is now available for transfer")


@router.put("/{appointment_id}/accept-transfer", response_model=AppointmentEnvelope)
def accept_transfer(
    appointment_id: int,
    payload: Optional[AcceptTransferRequest] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(require_roles(ROLE_DENTIST, ROLE_ADMIN)),
) -> AppointmentEnvelope:
    """Claim an offered appointment.

    Dentists always claim for themselves; admins name the claiming dentist.
    """

    service = _service(db, settings)
    if actor.role == ROLE_DENTIST:
        claimant = service.users.get_dentist_by_user(actor.id)
    else:
        dentist_name = payload.dentist_name if payload else None
        if not dentist_name:
            raise ValidationFailed("Dentist name is required")
        claimant = service.users.find_dentist_by_name(dentist_name)

    appointment = service.accept_transfer(appointment_id, claimant)
    return _envelope(appointment, "Transfer accepted successfully")


@router.put("/{appointment_id}/payment", response_model=AppointmentEnvelope)
def record_payment(
    appointment_id: int,
    payload: PaymentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_payment(actor, service.get(appointment_id))
    appointment = service.record_payment(
        appointment_id,
        payload.downpayment_status,
        payload.payment_method,
    )
    return _envelope(appointment, "Payment updated successfully")


@router.put("/{appointment_id}/payment-method", response_model=AppointmentEnvelope)
def set_payment_method(
    appointment_id: int,
    payload: PaymentMethodRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> AppointmentEnvelope:
    service = _service(db, settings)
    service.authorize_payment(actor, service.get(appointment_id))
    appointment = service.set_payment_method(appointment_id, payload.payment_method)
    return _envelope(appointment, "Payment method updated successfully")
