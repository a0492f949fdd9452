"""Appointment database access."""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import exists, func, select, update
from sqlalchemy.orm import Session, selectinload

from bastadental.models import Appointment, Dentist
from bastadental.models.appointment import (
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    TRANSFER_ACCEPTED,
    TRANSFER_AVAILABLE,
)
from bastadental.models.base import utc_now


def _with_people():
    """Eager-load every relationship the JSON form of an appointment reads."""

    return (
        selectinload(Appointment.patient),
        selectinload(Appointment.dentist).selectinload(Dentist.user),
        selectinload(Appointment.original_dentist).selectinload(Dentist.user),
    )


class AppointmentRepository:
    """Database operations for appointments."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, appointment_id: int) -> Optional[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .options(*_with_people())
        )
        return self.session.scalars(stmt).first()

    def list_all(self) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .options(*_with_people())
            .order_by(Appointment.date.desc(), Appointment.time.asc())
        )
        return list(self.session.scalars(stmt))

    def list_for_user(self, user_id: int) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.user_id == user_id)
            .options(*_with_people())
            .order_by(Appointment.date.asc(), Appointment.time.asc())
        )
        return list(self.session.scalars(stmt))

    def list_for_dentist(self, dentist_id: int) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.dentist_id == dentist_id)
            .options(*_with_people())
            .order_by(Appointment.date.asc(), Appointment.time.asc())
        )
        return list(self.session.scalars(stmt))

    def list_transferable(self) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(
                Appointment.transfer_status == TRANSFER_AVAILABLE,
                Appointment.status.not_in((STATUS_CANCELLED, STATUS_COMPLETED)),
            )
            .options(*_with_people())
            .order_by(Appointment.date.asc(), Appointment.time.asc())
        )
        return list(self.session.scalars(stmt))

    def slot_taken(
        self,
        dentist_id: int,
        on_date: date,
        time: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        """Whether a non-cancelled appointment already holds the slot."""

        conditions = [
            Appointment.dentist_id == dentist_id,
            Appointment.date == on_date,
            Appointment.time == time,
            Appointment.status != STATUS_CANCELLED,
        ]
        if exclude_appointment_id is not None:
            conditions.append(Appointment.id != exclude_appointment_id)
        return bool(self.session.scalar(select(exists().where(*conditions))))

    def booked_times(self, dentist_id: int, on_date: date) -> List[str]:
        stmt = (
            select(Appointment.time)
            .where(
                Appointment.dentist_id == dentist_id,
                Appointment.date == on_date,
                Appointment.status != STATUS_CANCELLED,
            )
            .order_by(Appointment.time)
        )
        return list(self.session.scalars(stmt))

    def has_completed(self, user_id: int) -> bool:
        stmt = select(
            exists().where(
                Appointment.user_id == user_id,
                Appointment.status == STATUS_COMPLETED,
            )
        )
        return bool(self.session.scalar(stmt))

    def add(self, appointment: Appointment) -> Appointment:
        self.session.add(appointment)
        self.session.flush()
        return appointment

    def claim_transfer(
        self,
        appointment_id: int,
        original_dentist_id: int,
        claimant_id: int,
    ) -> int:
        """Conditionally hand an offered appointment to ``claimant_id``.

        The row only changes while it is still offered by the same dentist,
        so of two concurrent claims exactly one updates a row. Returns the
        number of rows changed.
        """

        stmt = (
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.transfer_status == TRANSFER_AVAILABLE,
                Appointment.original_dentist_id == original_dentist_id,
                Appointment.status.not_in((STATUS_CANCELLED, STATUS_COMPLETED)),
            )
            .values(
                dentist_id=claimant_id,
                transfer_status=TRANSFER_ACCEPTED,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount or 0

    def count_between(
        self,
        start: date,
        end: date,
        status: Optional[str] = None,
    ) -> int:
        stmt = select(func.count(Appointment.id)).where(
            Appointment.date >= start,
            Appointment.date <= end,
        )
        if status is not None:
            stmt = stmt.where(Appointment.status == status)
        return int(self.session.scalar(stmt) or 0)

    def count_by_status(self, start: date, end: date) -> Dict[str, int]:
        stmt = (
            select(Appointment.status, func.count(Appointment.id))
            .where(Appointment.date >= start, Appointment.date <= end)
            .group_by(Appointment.status)
        )
        return {status: int(count) for status, count in self.session.execute(stmt)}

    def count_by_service(self, start: date, end: date) -> Dict[str, int]:
        stmt = (
            select(Appointment.service, func.count(Appointment.id))
            .where(Appointment.date >= start, Appointment.date <= end)
            .group_by(Appointment.service)
            .order_by(func.count(Appointment.id).desc())
        )
        return {service: int(count) for service, count in self.session.execute(stmt)}
