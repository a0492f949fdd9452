"""Date helpers for tests; bookings must land after today in the clinic timezone."""

from datetime import date, timedelta

from bastadental.utils.dates import clinic_today, day_of_week

CLINIC_TZ = "Asia/Manila"


def future_date(days: int = 7) -> date:
    return clinic_today(CLINIC_TZ) + timedelta(days=days)


def next_day_of_week(target: int) -> date:
    """First date after today whose Sunday-based weekday equals ``target``."""

    candidate = clinic_today(CLINIC_TZ) + timedelta(days=1)
    while day_of_week(candidate) != target:
        candidate += timedelta(days=1)
    return candidate
