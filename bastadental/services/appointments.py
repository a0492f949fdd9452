"""Appointment booking, rescheduling, status, transfer and payment workflows."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bastadental.errors import (
    NotFound,
    PermissionDenied,
    SlotConflict,
    TransitionError,
    ValidationFailed,
)
from bastadental.models import Appointment, Dentist, User
from bastadental.models.appointment import (
    DOWNPAYMENT_PAID,
    DOWNPAYMENT_STATUSES,
    DOWNPAYMENT_UNPAID,
    PAYMENT_METHOD_CLINIC,
    PAYMENT_METHODS,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    TRANSFER_PENDING,
)
from bastadental.models.user import ROLE_ADMIN, ROLE_DENTIST
from bastadental.repositories.appointments import AppointmentRepository
from bastadental.services import appointment_state as lifecycle
from bastadental.services.availability import AvailabilityService
from bastadental.services.users import UserService
from bastadental.utils.config import Settings
from bastadental.utils.dates import clinic_today, normalize_time, parse_date

LOGGER = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked"


class AppointmentService:
    """Business rules for appointments; every write commits before returning."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.appointments = AppointmentRepository(session)
        self.users = UserService(session, settings)
        self.availability = AvailabilityService(session)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFound("Appointment not found")
        return appointment

    def list_all(self) -> List[Appointment]:
        return self.appointments.list_all()

    def list_for_user(self, user_id: int) -> List[Appointment]:
        return self.appointments.list_for_user(user_id)

    def list_for_dentist(self, dentist: Dentist) -> List[Appointment]:
        return self.appointments.list_for_dentist(dentist.id)

    def list_transferable(self) -> List[Appointment]:
        return self.appointments.list_transferable()

    def booked_slots(self, raw_date: Any, dentist_name: Optional[str]) -> List[str]:
        """Times already held on a date; unknown dentists simply have none."""

        if not raw_date or not dentist_name:
            raise ValidationFailed("Date and dentist parameters are required")
        on_date = parse_date(raw_date)

        user = self.users.users.find_dentist_user_by_name(dentist_name)
        if user is None:
            return []
        dentist = self.users.dentists.get_by_user_id(user.id)
        if dentist is None:
            return []
        return self.appointments.booked_times(dentist.id, on_date)

    # ------------------------------------------------------------------
    # Access rules
    # ------------------------------------------------------------------
    @staticmethod
    def holds(actor: User, appointment: Appointment) -> bool:
        """Whether the actor is the dentist currently holding the appointment."""

        return actor.role == ROLE_DENTIST and appointment.dentist.user_id == actor.id

    def authorize_view(self, actor: User, appointment: Appointment) -> None:
        if actor.role in (ROLE_ADMIN, ROLE_DENTIST) or appointment.user_id == actor.id:
            return
        raise PermissionDenied("You do not have access to this appointment")

    def authorize_change(self, actor: User, appointment: Appointment) -> None:
        """Patients may change their own appointments, dentists those they hold."""

        if actor.role == ROLE_ADMIN or appointment.user_id == actor.id:
            return
        if self.holds(actor, appointment):
            return
        raise PermissionDenied("You do not have access to this appointment")

    def authorize_clinical(self, actor: User, appointment: Appointment) -> None:
        """Only admins and the holding dentist manage status and transfers."""

        if actor.role == ROLE_ADMIN or self.holds(actor, appointment):
            return
        raise PermissionDenied("Only the assigned dentist or an admin can do this")

    def authorize_payment(self, actor: User, appointment: Appointment) -> None:
        if actor.role == ROLE_ADMIN or appointment.user_id == actor.id:
            return
        raise PermissionDenied("You do not have access to this appointment")

    # ------------------------------------------------------------------
    # Booking and rescheduling
    # ------------------------------------------------------------------
    def _parse_slot(self, raw_date: Any, raw_time: Any) -> Tuple[date, str]:
        on_date = parse_date(raw_date)
        if on_date < clinic_today(self.settings.clinic_timezone):
            raise ValidationFailed("Appointment date cannot be in the past")
        return on_date, normalize_time(raw_time)

    def _ensure_dentist_open(self, dentist: Dentist, on_date: date) -> None:
        result = self.availability.check(on_date, dentist)
        if not result.available:
            raise ValidationFailed(result.reason or "The selected date is unavailable")

    def _commit_slot_change(self) -> None:
        """Commit, mapping a lost race on the live-slot index to a conflict."""

        try:
            self.session.flush()
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise SlotConflict(SLOT_TAKEN_MESSAGE) from None

    def _reload(self, appointment_id: int) -> Appointment:
        self.session.expire_all()
        return self.get(appointment_id)

    def book(
        self,
        *,
        user_id: Optional[int],
        service: Optional[str],
        dentist_name: Optional[str],
        raw_date: Any,
        raw_time: Any,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Validate and create a pending appointment."""

        if not user_id or not (service or "").strip() or not (dentist_name or "").strip():
            raise ValidationFailed("All fields are required")
        if not raw_date or not raw_time:
            raise ValidationFailed("All fields are required")

        on_date, time = self._parse_slot(raw_date, raw_time)
        patient = self.users.get_user(user_id)
        dentist = self.users.find_dentist_by_name(dentist_name)
        self._ensure_dentist_open(dentist, on_date)

        if self.appointments.slot_taken(dentist.id, on_date, time):
            raise SlotConflict(SLOT_TAKEN_MESSAGE)

        appointment = Appointment(
            user_id=patient.id,
            service=service.strip(),
            dentist_id=dentist.id,
            date=on_date,
            time=time,
            status=STATUS_PENDING,
            notes=notes or "",
            transfer_status=TRANSFER_PENDING,
            downpayment_amount=self.settings.downpayment_amount,
            downpayment_status=DOWNPAYMENT_UNPAID,
        )
        try:
            self.appointments.add(appointment)
        except IntegrityError:
            self.session.rollback()
            raise SlotConflict(SLOT_TAKEN_MESSAGE) from None
        self._commit_slot_change()

        LOGGER.info(
            "Booked appointment id=%s user=%s dentist=%s %s %s",
            appointment.id,
            patient.id,
            dentist.id,
            on_date,
            time,
        )
        return self._reload(appointment.id)

    def reschedule(self, appointment_id: int, raw_date: Any, raw_time: Any) -> Appointment:
        """Move an appointment; status and transfer position stay as they are."""

        if not raw_date or not raw_time:
            raise ValidationFailed("New date and time are required")

        appointment = self.get(appointment_id)
        if lifecycle.is_terminal(lifecycle.state_of(appointment)):
            raise TransitionError(
                f"Cannot reschedule a {appointment.status} appointment"
            )

        on_date, time = self._parse_slot(raw_date, raw_time)
        self._ensure_dentist_open(appointment.dentist, on_date)

        if self.appointments.slot_taken(
            appointment.dentist_id,
            on_date,
            time,
            exclude_appointment_id=appointment.id,
        ):
            raise SlotConflict("The requested time slot is already booked")

        appointment.date = on_date
        appointment.time = time
        self._commit_slot_change()
        LOGGER.info("Rescheduled appointment id=%s to %s %s", appointment.id, on_date, time)
        return self._reload(appointment.id)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def set_status(self, appointment_id: int, status: Optional[str]) -> Appointment:
        appointment = self.get(appointment_id)
        new_state = lifecycle.change_status(lifecycle.state_of(appointment), status)
        lifecycle.apply_state(appointment, new_state)
        self._commit_slot_change()
        LOGGER.info("Appointment id=%s status -> %s", appointment.id, appointment.status)
        return self._reload(appointment.id)

    def cancel(self, appointment_id: int) -> Appointment:
        return self.set_status(appointment_id, STATUS_CANCELLED)

    # ------------------------------------------------------------------
    # Reassignment and transfers
    # ------------------------------------------------------------------
    def _ensure_can_take(self, dentist: Dentist, appointment: Appointment) -> None:
        self._ensure_dentist_open(dentist, appointment.date)
        if self.appointments.slot_taken(
            dentist.id,
            appointment.date,
            appointment.time,
            exclude_appointment_id=appointment.id,
        ):
            raise SlotConflict(
                f"{dentist.name} already has an appointment at this time"
            )

    def assign(self, appointment_id: int, dentist_name: Optional[str]) -> Appointment:
        """Admin reassignment to another dentist."""

        appointment = self.get(appointment_id)
        dentist = self.users.find_dentist_by_name(dentist_name)
        new_state = lifecycle.assign(lifecycle.state_of(appointment), dentist.id)
        if new_state.dentist_id != appointment.dentist_id:
            self._ensure_can_take(dentist, appointment)
        lifecycle.apply_state(appointment, new_state)
        self._commit_slot_change()
        LOGGER.info("Assigned appointment id=%s to dentist=%s", appointment.id, dentist.id)
        return self._reload(appointment.id)

    def mark_transferable(self, appointment_id: int) -> Appointment:
        appointment = self.get(appointment_id)
        new_state = lifecycle.offer(lifecycle.state_of(appointment))
        lifecycle.apply_state(appointment, new_state)
        self.session.commit()
        LOGGER.info(
            "Appointment id=%s offered for transfer by dentist=%s",
            appointment.id,
            new_state.original_dentist_id,
        )
        return self._reload(appointment.id)

    def accept_transfer(self, appointment_id: int, claimant: Dentist) -> Appointment:
        """Claim an offered appointment for ``claimant``.

        The legality check runs on the loaded row; the write itself is a
        conditional update so a concurrent claim that got there first leaves
        this one with zero rows and a conflict.
        """

        appointment = self.get(appointment_id)
        state = lifecycle.state_of(appointment)
        new_state = lifecycle.claim(state, claimant.id)
        self._ensure_can_take(claimant, appointment)

        try:
            changed = self.appointments.claim_transfer(
                appointment.id,
                state.original_dentist_id,
                new_state.dentist_id,
            )
        except IntegrityError:
            self.session.rollback()
            raise SlotConflict(
                f"{claimant.name} already has an appointment at this time"
            ) from None
        if changed == 0:
            self.session.rollback()
            raise SlotConflict("Transfer is no longer available")

        self.session.commit()
        LOGGER.info(
            "Appointment id=%s transferred from dentist=%s to dentist=%s",
            appointment.id,
            state.original_dentist_id,
            claimant.id,
        )
        return self._reload(appointment.id)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------
    def is_trusted_patient(self, user_id: int) -> bool:
        """Returning patients (one completed visit) may pay at the clinic."""

        return self.appointments.has_completed(user_id)

    def payment_options(self, user_id: int) -> Dict[str, Any]:
        self.users.get_user(user_id)
        trusted = self.is_trusted_patient(user_id)
        methods = [method for method in PAYMENT_METHODS if method != PAYMENT_METHOD_CLINIC]
        if trusted:
            methods.append(PAYMENT_METHOD_CLINIC)
        return {
            "trusted": trusted,
            "payment_methods": methods,
            "downpayment_amount": self.settings.downpayment_amount,
        }

    def _validate_method(self, appointment: Appointment, method: Optional[str]) -> None:
        if method not in PAYMENT_METHODS:
            raise ValidationFailed("Valid payment method is required")
        if method == PAYMENT_METHOD_CLINIC and not self.is_trusted_patient(
            appointment.user_id
        ):
            raise PermissionDenied(
                "Pay at clinic is only available for returning patients"
            )

    def record_payment(
        self,
        appointment_id: int,
        downpayment_status: Optional[str],
        payment_method: Optional[str],
    ) -> Appointment:
        """Store the downpayment outcome; a paid pending booking is confirmed."""

        appointment = self.get(appointment_id)
        if downpayment_status not in DOWNPAYMENT_STATUSES:
            raise ValidationFailed("Valid downpayment status is required")
        if appointment.status == STATUS_CANCELLED:
            raise TransitionError("Cannot record a payment for a cancelled appointment")
        if payment_method is not None:
            self._validate_method(appointment, payment_method)
            appointment.payment_method = payment_method

        appointment.downpayment_status = downpayment_status
        if downpayment_status == DOWNPAYMENT_PAID and appointment.status == STATUS_PENDING:
            new_state = lifecycle.change_status(
                lifecycle.state_of(appointment),
                STATUS_CONFIRMED,
            )
            lifecycle.apply_state(appointment, new_state)

        self.session.commit()
        LOGGER.info(
            "Payment recorded appointment id=%s downpayment=%s method=%s",
            appointment.id,
            downpayment_status,
            appointment.payment_method,
        )
        return self._reload(appointment.id)

    def set_payment_method(self, appointment_id: int, payment_method: Optional[str]) -> Appointment:
        appointment = self.get(appointment_id)
        self._validate_method(appointment, payment_method)
        appointment.payment_method = payment_method
        self.session.commit()
        return self._reload(appointment.id)
