"""
Calendar helpers shared by the functional core.

All stored timestamps are UTC. Naive datetimes are treated as UTC.
Trial and membership cutoffs are compared as calendar dates so that the
same member resolves identically on any server or client timezone.
"""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime (naive values are assumed UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_date(dt: datetime | date) -> date:
    """Reduce a timestamp to its UTC calendar date."""
    if isinstance(dt, datetime):
        return ensure_utc(dt).date()
    return dt


def add_months(d: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the end of the target month.

    Feb 29 + 12 months -> Feb 28; Jan 31 + 1 month -> Feb 28/29.
    """
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_calendar_date(after: date, month: int, day: int) -> date:
    """First occurrence of month/day strictly after the given date."""
    candidate = date(after.year, month, day)
    if candidate <= after:
        candidate = date(after.year + 1, month, day)
    return candidate
