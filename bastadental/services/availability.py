"""Availability resolution for a date, at clinic and dentist level."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from bastadental.models import Dentist
from bastadental.repositories.schedules import (
    ClinicClosureRepository,
    DentistScheduleRepository,
)
from bastadental.utils.dates import day_of_week

LOGGER = logging.getLogger(__name__)

CLINIC_PERMANENT_REASON = "This day of the week the clinic is permanently closed"
CLINIC_TEMPORARY_REASON = "The clinic is temporarily closed on this date"
DENTIST_PERMANENT_REASON = (
    "The dentist is permanently unavailable on this day of the week"
)
DENTIST_TEMPORARY_REASON = "The dentist is temporarily unavailable on this date"


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: Optional[str] = None


AVAILABLE = AvailabilityResult(available=True)


class AvailabilityService:
    """Applies closure rules in precedence order; the first match wins.

    Order: clinic weekly closure, clinic date-range closure, dentist weekly
    unavailability, dentist date-range unavailability. Booked slots are only
    relevant once all four pass, and are handled by the caller.
    """

    def __init__(self, session: Session) -> None:
        self.clinic = ClinicClosureRepository(session)
        self.schedules = DentistScheduleRepository(session)

    def check_clinic(self, on_date: date) -> AvailabilityResult:
        weekday = day_of_week(on_date)
        if self.clinic.permanent_for_day(weekday) is not None:
            return AvailabilityResult(False, CLINIC_PERMANENT_REASON)

        closure = self.clinic.temporary_covering(on_date)
        if closure is not None:
            return AvailabilityResult(False, closure.reason or CLINIC_TEMPORARY_REASON)

        return AVAILABLE

    def check_dentist(self, dentist: Dentist, on_date: date) -> AvailabilityResult:
        weekday = day_of_week(on_date)
        permanent = self.schedules.permanent_for_day(dentist.id, weekday)
        if permanent is not None:
            reason = DENTIST_PERMANENT_REASON
            if permanent.reason:
                reason = f"{reason}: {permanent.reason}"
            return AvailabilityResult(False, reason)

        closure = self.schedules.temporary_covering(dentist.id, on_date)
        if closure is not None:
            return AvailabilityResult(False, closure.reason or DENTIST_TEMPORARY_REASON)

        return AVAILABLE

    def check(self, on_date: date, dentist: Optional[Dentist] = None) -> AvailabilityResult:
        """Resolve availability for the clinic and, when given, one dentist."""

        result = self.check_clinic(on_date)
        if result.available and dentist is not None:
            result = self.check_dentist(dentist, on_date)

        LOGGER.debug(
            "Availability date=%s dentist=%s available=%s reason=%s",
            on_date,
            dentist.id if dentist else None,
            result.available,
            result.reason,
        )
        return result
