"""Wall-clock helpers.

All instants handled by the engine are naive local datetimes, matching what
``datetime.now()`` returns; calendar-day comparisons use the local day.
"""

from datetime import date, datetime, time


def local_now() -> datetime:
    return datetime.now()


def at_time_of_day(day: date, when: time) -> datetime:
    """Instant for ``when`` on ``day``, seconds and below zeroed."""
    return datetime.combine(day, when.replace(second=0, microsecond=0))


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
