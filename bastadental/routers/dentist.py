"""Dentist console: schedule, unavailability, patient notes and availability checks."""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bastadental.errors import ValidationFailed
from bastadental.models import Dentist, User
from bastadental.routers.deps import ensure_self_or_admin, get_current_user
from bastadental.routers.responses import (
    AppointmentListEnvelope,
    AvailabilityEnvelope,
    CamelModel,
    DateRangeEnvelope,
    DateRangeListEnvelope,
    DateRangeOut,
    DentistListEnvelope,
    DentistOut,
    Envelope,
    NoteEnvelope,
    NoteListEnvelope,
    NoteOut,
    PermanentDayOut,
    PermanentListEnvelope,
    WindowEnvelope,
    WindowListEnvelope,
    WindowOut,
)
from bastadental.services.appointments import AppointmentService
from bastadental.services.availability import AvailabilityService
from bastadental.services.db import get_db
from bastadental.services.notes import PatientNoteService
from bastadental.services.schedules import DentistScheduleService
from bastadental.services.users import UserService
from bastadental.utils.config import Settings, get_settings
from bastadental.utils.dates import parse_date

router = APIRouter()


class WindowRequest(CamelModel):
    date: Optional[str] = None
    time_start: Optional[str] = None
    time_end: Optional[str] = None


class NoteRequest(CamelModel):
    patient_id: Optional[int] = None
    appointment_id: Optional[int] = None
    notes: Optional[str] = None


class WeeklyUnavailabilityRequest(CamelModel):
    days_of_week: Optional[List[Any]] = None
    reason: Optional[str] = None


class DateRangeRequest(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: Optional[str] = None


def console_dentist(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> Dentist:
    """The dentist addressed by ``{user_id}``, reachable by that dentist or an admin."""

    ensure_self_or_admin(actor, user_id)
    return UserService(db, settings).get_dentist_by_user(user_id)


@router.get("/all", response_model=DentistListEnvelope)
def list_dentists(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DentistListEnvelope:
    dentists = UserService(db, settings).list_dentists()
    return DentistListEnvelope(dentists=[DentistOut.from_model(d) for d in dentists])


@router.get("/check-availability", response_model=AvailabilityEnvelope)
def check_availability(
    date: Optional[str] = Query(default=None),
    dentist_name: Optional[str] = Query(default=None, alias="dentistName"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AvailabilityEnvelope:
    """Full resolution for one dentist: clinic closures first, then the dentist's own."""

    if not date or not dentist_name:
        raise ValidationFailed("Date and dentist name are required")
    on_date = parse_date(date)
    dentist = UserService(db, settings).find_dentist_by_name(dentist_name)

    result = AvailabilityService(db).check(on_date, dentist)
    if not result.available:
        return AvailabilityEnvelope(available=False, reason=result.reason)

    booked = AppointmentService(db, settings).appointments.booked_times(dentist.id, on_date)
    return AvailabilityEnvelope(available=True, booked_slots=booked)


@router.get("/appointments/{user_id}", response_model=AppointmentListEnvelope)
def dentist_appointments(
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AppointmentListEnvelope:
    return AppointmentListEnvelope.of(
        AppointmentService(db, settings).list_for_dentist(dentist)
    )


# ----------------------------------------------------------------------
# Working windows
# ----------------------------------------------------------------------
@router.get("/availability/{user_id}", response_model=WindowListEnvelope)
def list_windows(
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> WindowListEnvelope:
    windows = DentistScheduleService(db).list_windows(dentist)
    return WindowListEnvelope(availability=[WindowOut.from_model(w) for w in windows])


@router.post("/availability/{user_id}", response_model=WindowEnvelope)
def set_window(
    payload: WindowRequest,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> WindowEnvelope:
    window = DentistScheduleService(db).set_window(
        dentist,
        payload.date,
        payload.time_start,
        payload.time_end,
    )
    return WindowEnvelope(
        message="Availability updated successfully",
        availability=WindowOut.from_model(window),
    )


# ----------------------------------------------------------------------
# Patient notes
# ----------------------------------------------------------------------
@router.post("/notes/{user_id}", response_model=NoteEnvelope)
def save_note(
    payload: NoteRequest,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> NoteEnvelope:
    note = PatientNoteService(db).save(
        dentist,
        payload.patient_id,
        payload.notes,
        payload.appointment_id,
    )
    return NoteEnvelope(message="Notes saved successfully", note=NoteOut.from_model(note))


@router.get("/notes/{user_id}/{patient_id}", response_model=NoteListEnvelope)
def list_notes(
    patient_id: int,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> NoteListEnvelope:
    notes = PatientNoteService(db).list_for_patient(dentist, patient_id)
    return NoteListEnvelope(notes=[NoteOut.from_model(n) for n in notes])


# ----------------------------------------------------------------------
# Unavailability
# ----------------------------------------------------------------------
@router.post("/unavailability/{user_id}/permanent", response_model=PermanentListEnvelope)
def add_weekly_unavailability(
    payload: WeeklyUnavailabilityRequest,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> PermanentListEnvelope:
    records = DentistScheduleService(db).add_permanent(
        dentist,
        payload.days_of_week,
        payload.reason,
    )
    return PermanentListEnvelope(
        message="Permanent unavailability saved",
        unavailability=[PermanentDayOut.from_model(r) for r in records],
    )


@router.get("/unavailability/{user_id}/permanent", response_model=PermanentListEnvelope)
def list_weekly_unavailability(
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> PermanentListEnvelope:
    records = DentistScheduleService(db).list_permanent(dentist)
    return PermanentListEnvelope(
        unavailability=[PermanentDayOut.from_model(r) for r in records]
    )


@router.delete("/unavailability/{user_id}/permanent/{day_id}", response_model=Envelope)
def delete_weekly_unavailability(
    day_id: int,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> Envelope:
    DentistScheduleService(db).remove_permanent(dentist, day_id)
    return Envelope(message="Permanent unavailability removed")


@router.post("/unavailability/{user_id}/temporary", response_model=DateRangeEnvelope)
def add_date_range_unavailability(
    payload: DateRangeRequest,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> DateRangeEnvelope:
    record = DentistScheduleService(db).add_temporary(
        dentist,
        payload.start_date,
        payload.end_date,
        payload.reason,
    )
    return DateRangeEnvelope(
        message="Temporary unavailability saved",
        unavailability=DateRangeOut.from_model(record),
    )


@router.get("/unavailability/{user_id}/temporary", response_model=DateRangeListEnvelope)
def list_date_range_unavailability(
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> DateRangeListEnvelope:
    records = DentistScheduleService(db).list_temporary(dentist)
    return DateRangeListEnvelope(
        unavailability=[DateRangeOut.from_model(r) for r in records]
    )


@router.delete(
    "/unavailability/{user_id}/temporary/{unavailability_id}",
    response_model=Envelope,
)
def delete_date_range_unavailability(
    unavailability_id: int,
    dentist: Dentist = Depends(console_dentist),
    db: Session = Depends(get_db),
) -> Envelope:
    DentistScheduleService(db).remove_temporary(dentist, unavailability_id)
    return Envelope(message="Temporary unavailability removed")
