"""Patient note database access."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bastadental.models import PatientNote


class PatientNoteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find(
        self,
        dentist_id: int,
        patient_id: int,
        appointment_id: Optional[int],
    ) -> Optional[PatientNote]:
        """The note for an appointment, or the general note when none is given."""

        stmt = select(PatientNote).where(
            PatientNote.dentist_id == dentist_id,
            PatientNote.patient_id == patient_id,
        )
        if appointment_id is None:
            stmt = stmt.where(PatientNote.appointment_id.is_(None))
        else:
            stmt = stmt.where(PatientNote.appointment_id == appointment_id)
        return self.session.scalars(stmt).first()

    def list_for_patient(self, dentist_id: int, patient_id: int) -> List[PatientNote]:
        stmt = (
            select(PatientNote)
            .where(
                PatientNote.dentist_id == dentist_id,
                PatientNote.patient_id == patient_id,
            )
            .options(selectinload(PatientNote.appointment))
            .order_by(PatientNote.created_at.desc(), PatientNote.id.desc())
        )
        return list(self.session.scalars(stmt))

    def add(self, note: PatientNote) -> PatientNote:
        self.session.add(note)
        self.session.flush()
        return note
