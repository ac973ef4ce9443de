"""Day-granular calendar helpers.

Every interval comparison in the scheduling domain happens on
``datetime.date`` values. Timestamps are folded to their local calendar day
first, so the time-of-day part of a stored value never affects the result.
"""

from datetime import date, datetime, time, timedelta

from django.utils import timezone


def to_day(value: date | datetime) -> date:
    """Return the local calendar day of a date or datetime."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def today() -> date:
    return timezone.localdate()


def start_of_day(value: date | datetime) -> datetime:
    return timezone.make_aware(datetime.combine(to_day(value), time.min))


def end_of_day(value: date | datetime) -> datetime:
    return timezone.make_aware(datetime.combine(to_day(value), time.max))


def add_days(value: date | datetime, days: int) -> date:
    return to_day(value) + timedelta(days=days)


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole days from ``start`` to ``end`` (negative when end is earlier)."""
    return (to_day(end) - to_day(start)).days


def parse_day(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp into a calendar day."""
    if "T" in value or " " in value.strip():
        return to_day(datetime.fromisoformat(value.strip()))
    return date.fromisoformat(value.strip())
