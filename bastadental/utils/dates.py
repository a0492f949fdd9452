"""Date and time parsing shared by the booking and availability code."""

import re
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from bastadental.errors import ValidationFailed

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def clinic_today(timezone: str) -> date:
    """Current date in the clinic's timezone."""

    return datetime.now(ZoneInfo(timezone)).date()


def parse_date(value: Any, field: str = "date") -> date:
    """Parse ``YYYY-MM-DD`` (or an ISO datetime) into a date.

    Raises:
        ValidationFailed: when the value is empty or not a valid date.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value or "").strip()
    if not raw:
        raise ValidationFailed(f"{field} is required")

    # Browsers sometimes send a full timestamp; only the date part matters.
    raw = raw.split("T", 1)[0]
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationFailed("Invalid date format") from None


def parse_optional_date(value: Any, field: str = "date") -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value, field)


def normalize_time(value: Any) -> str:
    """Return a 24-hour ``HH:MM`` string, accepting ``H:MM`` and ``HH:MM:SS``."""

    match = _TIME_PATTERN.match(str(value or "").strip())
    if not match:
        raise ValidationFailed("Invalid time format, expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationFailed("Invalid time format, expected HH:MM")
    return f"{hours:02d}:{minutes:02d}"


def day_of_week(value: date) -> int:
    """Weekday number with Sunday as 0, matching the stored closure rows."""

    return (value.weekday() + 1) % 7
