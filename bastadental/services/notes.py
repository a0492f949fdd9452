"""Dentist notes about patients."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from bastadental.errors import NotFound, ValidationFailed
from bastadental.models import Dentist, PatientNote
from bastadental.repositories.appointments import AppointmentRepository
from bastadental.repositories.notes import PatientNoteRepository
from bastadental.repositories.users import UserRepository

LOGGER = logging.getLogger(__name__)


class PatientNoteService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.notes = PatientNoteRepository(session)
        self.users = UserRepository(session)
        self.appointments = AppointmentRepository(session)

    def save(
        self,
        dentist: Dentist,
        patient_id: Optional[int],
        notes: Optional[str],
        appointment_id: Optional[int] = None,
    ) -> PatientNote:
        """Create the note, or overwrite the one already kept for the same visit."""

        if not patient_id or not (notes or "").strip():
            raise ValidationFailed("Patient ID and notes are required")
        if self.users.get(patient_id) is None:
            raise NotFound("Patient not found")
        if appointment_id is not None:
            appointment = self.appointments.get(appointment_id)
            if appointment is None:
                raise NotFound("Appointment not found")
            if appointment.user_id != patient_id:
                raise ValidationFailed("Appointment does not belong to this patient")

        note = self.notes.find(dentist.id, patient_id, appointment_id)
        if note is None:
            note = self.notes.add(
                PatientNote(
                    dentist_id=dentist.id,
                    patient_id=patient_id,
                    appointment_id=appointment_id,
                    notes=notes.strip(),
                )
            )
        else:
            note.notes = notes.strip()
        self.session.commit()
        LOGGER.info(
            "Saved note id=%s dentist=%s patient=%s appointment=%s",
            note.id,
            dentist.id,
            patient_id,
            appointment_id,
        )
        return note

    def list_for_patient(self, dentist: Dentist, patient_id: int) -> List[PatientNote]:
        return self.notes.list_for_patient(dentist.id, patient_id)
