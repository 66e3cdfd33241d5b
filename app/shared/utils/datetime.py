"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def day_of_next_month(reference: date, day: int) -> date:
    """
    Return the given day of the month following reference.

    Used for bill due dates (e.g. rent due on the 5th of next month).
    Day must be valid for every month (1-28).
    """
    if not 1 <= day <= 28:
        raise ValueError(f"day must be between 1 and 28, got {day}")
    if reference.month == 12:
        return date(reference.year + 1, 1, day)
    return date(reference.year, reference.month + 1, day)
