"""Admin reporting over a date range."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from bastadental.errors import ValidationFailed
from bastadental.models.appointment import STATUS_CANCELLED, STATUS_COMPLETED
from bastadental.repositories.appointments import AppointmentRepository
from bastadental.repositories.users import UserRepository
from bastadental.utils.dates import parse_date


def _percentage(part: int, total: int) -> int:
    if not total:
        return 0
    return round(part * 100 / total)


def build_report(session: Session, raw_start: Any, raw_end: Any) -> Dict[str, Any]:
    """Appointment and signup figures for the inclusive range ``[start, end]``.

    Appointments are counted by their visit date, new users by their
    creation timestamp (UTC days).
    """

    if not raw_start or not raw_end:
        raise ValidationFailed("Start date and end date are required")
    start = parse_date(raw_start, "startDate")
    end = parse_date(raw_end, "endDate")
    if end < start:
        raise ValidationFailed("End date cannot be before start date")

    appointments = AppointmentRepository(session)
    users = UserRepository(session)

    total = appointments.count_between(start, end)
    by_status = appointments.count_by_status(start, end)
    range_start = datetime.combine(start, time.min, tzinfo=timezone.utc)
    range_end = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)

    return {
        "total_appointments": total,
        "new_users": users.count_created_between(range_start, range_end),
        "completion_rate": _percentage(by_status.get(STATUS_COMPLETED, 0), total),
        "cancellation_rate": _percentage(by_status.get(STATUS_CANCELLED, 0), total),
        "status_breakdown": by_status,
        "service_breakdown": appointments.count_by_service(start, end),
    }
