"""Working windows and closures for dentists and the clinic."""

from datetime import date
from typing import List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from bastadental.models import (
    ClinicPermanentUnavailability,
    ClinicTemporaryUnavailability,
    DentistAvailability,
    DentistPermanentUnavailability,
    DentistTemporaryUnavailability,
)


class DentistScheduleRepository:
    """Database operations for one dentist's availability and closures."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_windows(self, dentist_id: int) -> List[DentistAvailability]:
        stmt = (
            select(DentistAvailability)
            .where(DentistAvailability.dentist_id == dentist_id)
            .order_by(DentistAvailability.date)
        )
        return list(self.session.scalars(stmt))

    def get_window(self, dentist_id: int, on_date: date) -> Optional[DentistAvailability]:
        stmt = select(DentistAvailability).where(
            DentistAvailability.dentist_id == dentist_id,
            DentistAvailability.date == on_date,
        )
        return self.session.scalars(stmt).first()

    def list_permanent(self, dentist_id: int) -> List[DentistPermanentUnavailability]:
        stmt = (
            select(DentistPermanentUnavailability)
            .where(DentistPermanentUnavailability.dentist_id == dentist_id)
            .order_by(DentistPermanentUnavailability.day_of_week)
        )
        return list(self.session.scalars(stmt))

    def permanent_for_day(
        self,
        dentist_id: int,
        day_of_week: int,
    ) -> Optional[DentistPermanentUnavailability]:
        stmt = select(DentistPermanentUnavailability).where(
            DentistPermanentUnavailability.dentist_id == dentist_id,
            DentistPermanentUnavailability.day_of_week == day_of_week,
        )
        return self.session.scalars(stmt).first()

    def get_permanent(
        self,
        dentist_id: int,
        record_id: int,
    ) -> Optional[DentistPermanentUnavailability]:
        stmt = select(DentistPermanentUnavailability).where(
            DentistPermanentUnavailability.id == record_id,
            DentistPermanentUnavailability.dentist_id == dentist_id,
        )
        return self.session.scalars(stmt).first()

    def list_temporary(self, dentist_id: int) -> List[DentistTemporaryUnavailability]:
        stmt = (
            select(DentistTemporaryUnavailability)
            .where(DentistTemporaryUnavailability.dentist_id == dentist_id)
            .order_by(DentistTemporaryUnavailability.start_date)
        )
        return list(self.session.scalars(stmt))

    def temporary_covering(
        self,
        dentist_id: int,
        on_date: date,
    ) -> Optional[DentistTemporaryUnavailability]:
        stmt = (
            select(DentistTemporaryUnavailability)
            .where(
                DentistTemporaryUnavailability.dentist_id == dentist_id,
                DentistTemporaryUnavailability.start_date <= on_date,
                or_(
                    DentistTemporaryUnavailability.end_date.is_(None),
                    DentistTemporaryUnavailability.end_date >= on_date,
                ),
            )
            .order_by(DentistTemporaryUnavailability.start_date)
        )
        return self.session.scalars(stmt).first()

    def get_temporary(
        self,
        dentist_id: int,
        record_id: int,
    ) -> Optional[DentistTemporaryUnavailability]:
        stmt = select(DentistTemporaryUnavailability).where(
            DentistTemporaryUnavailability.id == record_id,
            DentistTemporaryUnavailability.dentist_id == dentist_id,
        )
        return self.session.scalars(stmt).first()

    def add(self, record):
        self.session.add(record)
        self.session.flush()
        return record

    def delete(self, record) -> None:
        self.session.delete(record)
        self.session.flush()


class ClinicClosureRepository:
    """Database operations for clinic-wide closures."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_permanent(self) -> List[ClinicPermanentUnavailability]:
        stmt = select(ClinicPermanentUnavailability).order_by(
            ClinicPermanentUnavailability.day_of_week
        )
        return list(self.session.scalars(stmt))

    def permanent_for_day(self, day_of_week: int) -> Optional[ClinicPermanentUnavailability]:
        stmt = select(ClinicPermanentUnavailability).where(
            ClinicPermanentUnavailability.day_of_week == day_of_week
        )
        return self.session.scalars(stmt).first()

    def get_permanent(self, record_id: int) -> Optional[ClinicPermanentUnavailability]:
        return self.session.get(ClinicPermanentUnavailability, record_id)

    def clear_permanent(self) -> None:
        self.session.execute(delete(ClinicPermanentUnavailability))

    def list_temporary(self) -> List[ClinicTemporaryUnavailability]:
        stmt = select(ClinicTemporaryUnavailability).order_by(
            ClinicTemporaryUnavailability.start_date
        )
        return list(self.session.scalars(stmt))

    def temporary_covering(self, on_date: date) -> Optional[ClinicTemporaryUnavailability]:
        stmt = (
            select(ClinicTemporaryUnavailability)
            .where(
                ClinicTemporaryUnavailability.start_date <= on_date,
                or_(
                    ClinicTemporaryUnavailability.end_date.is_(None),
                    ClinicTemporaryUnavailability.end_date >= on_date,
                ),
            )
            .order_by(ClinicTemporaryUnavailability.start_date)
        )
        return self.session.scalars(stmt).first()

    def get_temporary(self, record_id: int) -> Optional[ClinicTemporaryUnavailability]:
        return self.session.get(ClinicTemporaryUnavailability, record_id)

    def add(self, record):
        self.session.add(record)
        self.session.flush()
        return record

    def delete(self, record) -> None:
        self.session.delete(record)
        self.session.flush()
