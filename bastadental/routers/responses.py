"""Response contracts shared by the API routers."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from bastadental.models import (
    Appointment,
    Dentist,
    DentistAvailability,
    PatientNote,
    User,
)


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input and serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel):
    success: bool = True
    message: Optional[str] = None


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------
class UserOut(BaseModel):
    """Public user fields; the password hash never leaves the service."""

    id: int
    name: str
    email: str
    dob: Optional[dt.date] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    role: str
    created_at: Optional[dt.datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            dob=user.dob,
            phone=user.phone,
            gender=user.gender,
            address=user.address,
            role=user.role,
            created_at=user.created_at,
        )


class DentistOut(BaseModel):
    id: int
    user_id: int
    name: str
    email: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_model(cls, dentist: Dentist) -> "DentistOut":
        return cls(
            id=dentist.id,
            user_id=dentist.user_id,
            name=dentist.name,
            email=dentist.user.email if dentist.user else None,
            specialization=dentist.specialization,
            bio=dentist.bio,
            phone=dentist.phone,
        )


class LoginEnvelope(Envelope):
    user: UserOut
    token: str


class SignupEnvelope(Envelope):
    user_id: int


class UserEnvelope(Envelope):
    user: UserOut


class UserListEnvelope(Envelope):
    users: List[UserOut]


class DentistEnvelope(Envelope):
    dentist: DentistOut


class DentistListEnvelope(Envelope):
    dentists: List[DentistOut]


# ----------------------------------------------------------------------
# Appointments
# ----------------------------------------------------------------------
class AppointmentOut(BaseModel):
    """Appointment with dentist references resolved to display names."""

    id: int
    user_id: int
    user_name: Optional[str] = None
    service: str
    dentist: str
    date: dt.date
    time: str
    status: str
    notes: str = ""
    transfer_status: str
    original_dentist: Optional[str] = None
    downpayment_amount: Decimal
    downpayment_status: str
    payment_method: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_serializer("downpayment_amount")
    def _amount(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentOut":
        original = appointment.original_dentist
        return cls(
            id=appointment.id,
            user_id=appointment.user_id,
            user_name=appointment.patient.name if appointment.patient else None,
            service=appointment.service,
            dentist=appointment.dentist.name,
            date=appointment.date,
            time=appointment.time,
            status=appointment.status,
            notes=appointment.notes or "",
            transfer_status=appointment.transfer_status,
            original_dentist=original.name if original else None,
            downpayment_amount=appointment.downpayment_amount,
            downpayment_status=appointment.downpayment_status,
            payment_method=appointment.payment_method,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )


class AppointmentEnvelope(Envelope):
    appointment: AppointmentOut


class AppointmentListEnvelope(Envelope):
    appointments: List[AppointmentOut]

    @classmethod
    def of(cls, appointments: List[Appointment]) -> "AppointmentListEnvelope":
        return cls(appointments=[AppointmentOut.from_model(a) for a in appointments])


class BookedSlotsEnvelope(Envelope):
    booked_slots: List[str]


class PaymentOptionsEnvelope(Envelope):
    trusted: bool
    payment_methods: List[str]
    downpayment_amount: float


# ----------------------------------------------------------------------
# Schedules and closures
# ----------------------------------------------------------------------
class AvailabilityEnvelope(Envelope):
    available: bool
    reason: Optional[str] = None
    booked_slots: Optional[List[str]] = None


class WindowOut(BaseModel):
    id: int
    dentist_id: int
    date: dt.date
    time_start: str
    time_end: str

    @classmethod
    def from_model(cls, window: DentistAvailability) -> "WindowOut":
        return cls(
            id=window.id,
            dentist_id=window.dentist_id,
            date=window.date,
            time_start=window.time_start,
            time_end=window.time_end,
        )


class PermanentDayOut(BaseModel):
    id: int
    dentist_id: Optional[int] = None
    day_of_week: int
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, record) -> "PermanentDayOut":
        return cls(
            id=record.id,
            dentist_id=getattr(record, "dentist_id", None),
            day_of_week=record.day_of_week,
            reason=record.reason,
        )


class DateRangeOut(BaseModel):
    id: int
    dentist_id: Optional[int] = None
    start_date: dt.date
    end_date: Optional[dt.date] = None
    reason: Optional[str] = None

    @classmethod
    def from_model(cls, record) -> "DateRangeOut":
        return cls(
            id=record.id,
            dentist_id=getattr(record, "dentist_id", None),
            start_date=record.start_date,
            end_date=record.end_date,
            reason=record.reason,
        )


class WindowEnvelope(Envelope):
    availability: WindowOut


class WindowListEnvelope(Envelope):
    availability: List[WindowOut]


class PermanentListEnvelope(Envelope):
    unavailability: List[PermanentDayOut]


class DateRangeEnvelope(Envelope):
    unavailability: DateRangeOut


class DateRangeListEnvelope(Envelope):
    unavailability: List[DateRangeOut]


# ----------------------------------------------------------------------
# Notes, contact, analytics
# ----------------------------------------------------------------------
class NoteOut(BaseModel):
    id: int
    dentist_id: int
    patient_id: int
    appointment_id: Optional[int] = None
    notes: str
    appointment_date: Optional[dt.date] = None
    appointment_time: Optional[str] = None
    service: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @classmethod
    def from_model(cls, note: PatientNote) -> "NoteOut":
        appointment = note.appointment
        return cls(
            id=note.id,
            dentist_id=note.dentist_id,
            patient_id=note.patient_id,
            appointment_id=note.appointment_id,
            notes=note.notes,
            appointment_date=appointment.date if appointment else None,
            appointment_time=appointment.time if appointment else None,
            service=appointment.service if appointment else None,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


class NoteEnvelope(Envelope):
    note: NoteOut


class NoteListEnvelope(Envelope):
    notes: List[NoteOut]


class ContactEnvelope(Envelope):
    test_mode: Optional[bool] = None


class AnalyticsEnvelope(Envelope):
    total_appointments: int
    new_users: int
    completion_rate: int
    cancellation_rate: int
    status_breakdown: Dict[str, int]
    service_breakdown: Dict[str, int]
