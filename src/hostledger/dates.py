# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Date arithmetic shared by the calendar layout and reporting engines.

Only naive ``datetime.date`` values are handled: every record of the
application is a calendar day, never a timestamp, so no timezone
conversion can shift a booking by one day.
"""

from calendar import monthrange
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from typing import Optional, Union

from .models import ValidationError

ONE_DAY = timedelta(days=1)

WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a date given as ``YYYY-MM-DD`` or ``DD/MM/YYYY``.

    ``date`` and ``datetime`` instances are returned as dates, and None or
    an empty string yields None.

    Raises:
        ValidationError: if the string matches neither format.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    if not raw:
        return None

    # Timestamps such as "2026-03-10T00:00:00Z" keep only their date part.
    raw = raw.split("T")[0]

    fmt = "%d/%m/%Y" if "/" in raw else "%Y-%m-%d"
    try:
        return datetime.strptime(raw, fmt).date()
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=days_in_month(d.year, d.month))


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(d.day, days_in_month(year, month)))


def month_key(d: date) -> str:
    """Bucket key used by monthly series, e.g. ``'2026-03'``."""
    return f"{d.year:04d}-{d.month:02d}"


def iter_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month from ``start`` to ``end`` inclusive."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day of the closed interval ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += ONE_DAY


def week_start(d: date, first_weekday: int = 6) -> date:
    """First day of the grid week containing ``d`` (Sunday by default)."""
    offset = (d.weekday() - first_weekday) % 7
    return d - timedelta(days=offset)


def week_end(d: date, first_weekday: int = 6) -> date:
    return week_start(d, first_weekday) + timedelta(days=6)


def overlap_days(
    start_a: date, end_a: date, start_b: date, end_b: date
) -> int:
    """Number of days shared by two closed intervals (0 when disjoint)."""
    lo = max(start_a, start_b)
    hi = min(end_a, end_b)
    if hi < lo:
        return 0
    return (hi - lo).days + 1
