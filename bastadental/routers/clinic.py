"""Clinic-wide closures."""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bastadental.errors import ValidationFailed
from bastadental.models import User
from bastadental.models.user import ROLE_ADMIN
from bastadental.routers.deps import require_roles
from bastadental.routers.responses import (
    AvailabilityEnvelope,
    CamelModel,
    DateRangeEnvelope,
    DateRangeListEnvelope,
    DateRangeOut,
    Envelope,
    PermanentDayOut,
    PermanentListEnvelope,
)
from bastadental.services.availability import AvailabilityService
from bastadental.services.db import get_db
from bastadental.services.schedules import ClinicClosureService
from bastadental.utils.dates import parse_date

router = APIRouter()


class WeeklyClosureRequest(CamelModel):
    days_of_week: Optional[List[Any]] = None
    reason: Optional[str] = None


class ClosureRangeRequest(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: Optional[str] = None


@router.post("/unavailability/permanent", response_model=PermanentListEnvelope)
def replace_weekly_closures(
    payload: WeeklyClosureRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> PermanentListEnvelope:
    """Replace the set of weekdays the clinic is closed."""

    records = ClinicClosureService(db).replace_permanent(payload.days_of_week, payload.reason)
    return PermanentListEnvelope(
        message="Clinic permanent unavailability updated",
        unavailability=[PermanentDayOut.from_model(r) for r in records],
    )


@router.get("/unavailability/permanent", response_model=PermanentListEnvelope)
def list_weekly_closures(db: Session = Depends(get_db)) -> PermanentListEnvelope:
    records = ClinicClosureService(db).list_permanent()
    return PermanentListEnvelope(
        unavailability=[PermanentDayOut.from_model(r) for r in records]
    )


@router.delete("/unavailability/permanent/{day_id}", response_model=Envelope)
def delete_weekly_closure(
    day_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> Envelope:
    ClinicClosureService(db).remove_permanent(day_id)
    return Envelope(message="Clinic permanent unavailability removed")


@router.post("/unavailability/temporary", response_model=DateRangeEnvelope)
def add_closure_range(
    payload: ClosureRangeRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> DateRangeEnvelope:
    record = ClinicClosureService(db).add_temporary(
        payload.start_date,
        payload.end_date,
        payload.reason,
    )
    return DateRangeEnvelope(
        message="Clinic temporary unavailability saved",
        unavailability=DateRangeOut.from_model(record),
    )


@router.get("/unavailability/temporary", response_model=DateRangeListEnvelope)
def list_closure_ranges(db: Session = Depends(get_db)) -> DateRangeListEnvelope:
    records = ClinicClosureService(db).list_temporary()
    return DateRangeListEnvelope(
        unavailability=[DateRangeOut.from_model(r) for r in records]
    )


@router.delete("/unavailability/temporary/{closure_id}", response_model=Envelope)
def delete_closure_range(
    closure_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> Envelope:
    ClinicClosureService(db).remove_temporary(closure_id)
    return Envelope(message="Clinic temporary unavailability removed")


@router.get("/check-availability", response_model=AvailabilityEnvelope)
def check_clinic_availability(
    date: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> AvailabilityEnvelope:
    if not date:
        raise ValidationFailed("Date is required")
    result = AvailabilityService(db).check_clinic(parse_date(date))
    return AvailabilityEnvelope(available=result.available, reason=result.reason)
