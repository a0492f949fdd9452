"""Dentist working windows and unavailability, and clinic-wide closures."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from bastadental.errors import NotFound, ValidationFailed
from bastadental.models import (
    ClinicPermanentUnavailability,
    ClinicTemporaryUnavailability,
    Dentist,
    DentistAvailability,
    DentistPermanentUnavailability,
    DentistTemporaryUnavailability,
)
from bastadental.repositories.schedules import (
    ClinicClosureRepository,
    DentistScheduleRepository,
)
from bastadental.utils.dates import normalize_time, parse_date, parse_optional_date

LOGGER = logging.getLogger(__name__)

DAYS_IN_WEEK = range(7)


def _clean_reason(reason: Optional[str]) -> Optional[str]:
    reason = (reason or "").strip()
    return reason or None


def _coerce_day(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        day = int(value)
    except (TypeError, ValueError):
        return None
    return day if day in DAYS_IN_WEEK else None


def parse_date_range(raw_start: Any, raw_end: Any) -> Tuple[date, Optional[date]]:
    """Start date is required; an end date, when given, may not precede it."""

    if not raw_start:
        raise ValidationFailed("Start date is required")
    start = parse_date(raw_start, "startDate")
    end = parse_optional_date(raw_end, "endDate")
    if end is not None and end < start:
        raise ValidationFailed("End date cannot be before start date")
    return start, end


class DentistScheduleService:
    """Per-dentist working windows and unavailability records."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.schedules = DentistScheduleRepository(session)

    def list_windows(self, dentist: Dentist) -> List[DentistAvailability]:
        return self.schedules.list_windows(dentist.id)

    def set_window(
        self,
        dentist: Dentist,
        raw_date: Any,
        raw_start: Any,
        raw_end: Any,
    ) -> DentistAvailability:
        """Create or replace the working window for one date."""

        if not raw_date or not raw_start or not raw_end:
            raise ValidationFailed("Date, start time, and end time are required")
        on_date = parse_date(raw_date)
        time_start = normalize_time(raw_start)
        time_end = normalize_time(raw_end)
        if time_start >= time_end:
            raise ValidationFailed("Start time must be before end time")

        window = self.schedules.get_window(dentist.id, on_date)
        if window is None:
            window = self.schedules.add(
                DentistAvailability(
                    dentist_id=dentist.id,
                    date=on_date,
                    time_start=time_start,
                    time_end=time_end,
                )
            )
        else:
            window.time_start = time_start
            window.time_end = time_end
        self.session.commit()
        LOGGER.info(
            "Dentist=%s window %s %s-%s",
            dentist.id,
            on_date,
            time_start,
            time_end,
        )
        return window

    # Weekly unavailability
    def list_permanent(self, dentist: Dentist) -> List[DentistPermanentUnavailability]:
        return self.schedules.list_permanent(dentist.id)

    def add_permanent(
        self,
        dentist: Dentist,
        days_of_week: Optional[Iterable[Any]],
        reason: Optional[str] = None,
    ) -> List[DentistPermanentUnavailability]:
        """Mark weekdays as unavailable; existing days keep their row, reason updated."""

        days = list(days_of_week or [])
        if not days:
            raise ValidationFailed("Days of week are required")
        parsed = [_coerce_day(day) for day in days]
        if any(day is None for day in parsed):
            raise ValidationFailed("Days of week must be numbers from 0 to 6")

        reason = _clean_reason(reason)
        for day in sorted(set(parsed)):
            record = self.schedules.permanent_for_day(dentist.id, day)
            if record is None:
                self.schedules.add(
                    DentistPermanentUnavailability(
                        dentist_id=dentist.id,
                        day_of_week=day,
                        reason=reason,
                    )
                )
            else:
                record.reason = reason
        self.session.commit()
        LOGGER.info("Dentist=%s weekly unavailability %s", dentist.id, sorted(set(parsed)))
        return self.schedules.list_permanent(dentist.id)

    def remove_permanent(self, dentist: Dentist, record_id: int) -> None:
        record = self.schedules.get_permanent(dentist.id, record_id)
        if record is None:
            raise NotFound("Unavailability record not found")
        self.schedules.delete(record)
        self.session.commit()

    # Date-range unavailability
    def list_temporary(self, dentist: Dentist) -> List[DentistTemporaryUnavailability]:
        return self.schedules.list_temporary(dentist.id)

    def add_temporary(
        self,
        dentist: Dentist,
        raw_start: Any,
        raw_end: Any,
        reason: Optional[str] = None,
    ) -> DentistTemporaryUnavailability:
        start, end = parse_date_range(raw_start, raw_end)
        record = self.schedules.add(
            DentistTemporaryUnavailability(
                dentist_id=dentist.id,
                start_date=start,
                end_date=end,
                reason=_clean_reason(reason),
            )
        )
        self.session.commit()
        LOGGER.info("Dentist=%s unavailable from %s to %s", dentist.id, start, end)
        return record

    def remove_temporary(self, dentist: Dentist, record_id: int) -> None:
        record = self.schedules.get_temporary(dentist.id, record_id)
        if record is None:
            raise NotFound("Unavailability record not found")
        self.schedules.delete(record)
        self.session.commit()


class ClinicClosureService:
    """Clinic-wide weekly and date-range closures."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.closures = ClinicClosureRepository(session)

    def list_permanent(self) -> List[ClinicPermanentUnavailability]:
        return self.closures.list_permanent()

    def replace_permanent(
        self,
        days_of_week: Optional[Iterable[Any]],
        reason: Optional[str] = None,
    ) -> List[ClinicPermanentUnavailability]:
        """Replace the weekly closure set; values outside 0-6 are skipped."""

        days = list(days_of_week or [])
        if not days:
            raise ValidationFailed("Days of week are required")

        valid_days = sorted({day for day in map(_coerce_day, days) if day is not None})
        skipped = len(days) - len([d for d in days if _coerce_day(d) is not None])
        if skipped:
            LOGGER.warning("Skipped %s invalid day(s) of week in clinic closure", skipped)

        reason = _clean_reason(reason)
        self.closures.clear_permanent()
        for day in valid_days:
            self.closures.add(ClinicPermanentUnavailability(day_of_week=day, reason=reason))
        self.session.commit()
        LOGGER.info("Clinic weekly closures set to %s", valid_days)
        return self.closures.list_permanent()

    def remove_permanent(self, record_id: int) -> None:
        record = self.closures.get_permanent(record_id)
        if record is None:
            raise NotFound("Unavailability record not found")
        self.closures.delete(record)
        self.session.commit()

    def list_temporary(self) -> List[ClinicTemporaryUnavailability]:
        return self.closures.list_temporary()

    def add_temporary(
        self,
        raw_start: Any,
        raw_end: Any,
        reason: Optional[str] = None,
    ) -> ClinicTemporaryUnavailability:
        start, end = parse_date_range(raw_start, raw_end)
        record = self.closures.add(
            ClinicTemporaryUnavailability(
                start_date=start,
                end_date=end,
                reason=_clean_reason(reason),
            )
        )
        self.session.commit()
        LOGGER.info("Clinic closed from %s to %s", start, end)
        return record

    def remove_temporary(self, record_id: int) -> None:
        record = self.closures.get_temporary(record_id)
        if record is None:
            raise NotFound("Unavailability record not found")
        self.closures.delete(record)
        self.session.commit()
