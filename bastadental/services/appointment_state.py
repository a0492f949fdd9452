"""Combined lifecycle state for an appointment.

An appointment carries both a visit status and a transfer position. Instead of
letting callers flip the ``status`` and ``transfer_status`` columns
independently, every change goes through the transition functions below,
which take the current state value and return the next one (or raise
``TransitionError``). ``apply_state`` is the only place that writes the
columns back.

States:

* ``Scheduled``: held by its dentist, never offered (transfer ``pending``).
* ``Offered``: the holding dentist has made it available to colleagues
  (transfer ``available``), remembering who offered it.
* ``Claimed``: another dentist took it over, through a transfer or an admin
  reassignment (transfer ``accepted``, or ``completed`` once the visit is
  completed).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from bastadental.errors import TransitionError
from bastadental.models.appointment import (
    APPOINTMENT_STATUSES,
    STATUS_COMPLETED,
    TERMINAL_STATUSES,
    TRANSFER_ACCEPTED,
    TRANSFER_AVAILABLE,
    TRANSFER_COMPLETED,
    TRANSFER_PENDING,
    Appointment,
)


@dataclass(frozen=True)
class Scheduled:
    status: str
    dentist_id: int
    original_dentist_id: Optional[int] = None


@dataclass(frozen=True)
class Offered:
    status: str
    dentist_id: int
    original_dentist_id: int


@dataclass(frozen=True)
class Claimed:
    status: str
    dentist_id: int
    original_dentist_id: Optional[int]


AppointmentState = Union[Scheduled, Offered, Claimed]


def state_of(appointment: Appointment) -> AppointmentState:
    """Read the combined state from an appointment row."""

    transfer_status = appointment.transfer_status or TRANSFER_PENDING
    if transfer_status == TRANSFER_AVAILABLE:
        return Offered(
            status=appointment.status,
            dentist_id=appointment.dentist_id,
            original_dentist_id=appointment.original_dentist_id or appointment.dentist_id,
        )
    if transfer_status in (TRANSFER_ACCEPTED, TRANSFER_COMPLETED):
        return Claimed(
            status=appointment.status,
            dentist_id=appointment.dentist_id,
            original_dentist_id=appointment.original_dentist_id,
        )
    return Scheduled(
        status=appointment.status,
        dentist_id=appointment.dentist_id,
        original_dentist_id=appointment.original_dentist_id,
    )


def transfer_status_of(state: AppointmentState) -> str:
    if isinstance(state, Offered):
        return TRANSFER_AVAILABLE
    if isinstance(state, Claimed):
        if state.status == STATUS_COMPLETED:
            return TRANSFER_COMPLETED
        return TRANSFER_ACCEPTED
    return TRANSFER_PENDING


def apply_state(appointment: Appointment, state: AppointmentState) -> None:
    """Write a state value back onto the appointment columns."""

    appointment.status = state.status
    appointment.dentist_id = state.dentist_id
    appointment.original_dentist_id = state.original_dentist_id
    appointment.transfer_status = transfer_status_of(state)


def is_terminal(state: AppointmentState) -> bool:
    return state.status in TERMINAL_STATUSES


def change_status(state: AppointmentState, new_status: Optional[str]) -> AppointmentState:
    """Move to another visit status.

    Any non-terminal status may move to any other status; the order
    pending, confirmed, completed is not enforced. Cancelled and completed
    appointments are final, and reaching either withdraws an open offer.
    """

    if new_status not in APPOINTMENT_STATUSES:
        raise TransitionError("Valid status is required")
    if new_status == state.status:
        return state
    if is_terminal(state):
        raise TransitionError(
            f"Cannot change a {state.status} appointment to {new_status}"
        )
    if isinstance(state, Offered) and new_status in TERMINAL_STATUSES:
        return Scheduled(status=new_status, dentist_id=state.dentist_id)
    return replace(state, status=new_status)


def offer(state: AppointmentState) -> Offered:
    """Make the appointment available for another dentist to claim."""

    if is_terminal(state):
        raise TransitionError(
            "Cancelled or completed appointments cannot be marked transferable"
        )
    if isinstance(state, Offered):
        raise TransitionError("Appointment is already available for transfer")
    return Offered(
        status=state.status,
        dentist_id=state.dentist_id,
        original_dentist_id=state.dentist_id,
    )


def claim(state: AppointmentState, claimant_id: int) -> Claimed:
    """Hand an offered appointment over to ``claimant_id``."""

    if not isinstance(state, Offered):
        raise TransitionError("Appointment is not available for transfer")
    if is_terminal(state):
        raise TransitionError(
            "Cancelled or completed appointments cannot be transferred"
        )
    if claimant_id == state.original_dentist_id:
        raise TransitionError("You cannot accept your own transfer request")
    return Claimed(
        status=state.status,
        dentist_id=claimant_id,
        original_dentist_id=state.original_dentist_id,
    )


def assign(state: AppointmentState, dentist_id: int) -> AppointmentState:
    """Reassign the appointment directly, bypassing the offer step."""

    if is_terminal(state):
        raise TransitionError(
            "Cancelled or completed appointments cannot be reassigned"
        )
    if dentist_id == state.dentist_id:
        return state
    return Claimed(
        status=state.status,
        dentist_id=dentist_id,
        original_dentist_id=state.dentist_id,
    )
