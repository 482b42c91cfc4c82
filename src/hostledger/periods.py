# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for HostLedger.

This module defines the Period value object, the ReportQuery configuration
struct passed to the reporting engine, and the resolution of a period type
(month, quarter, year, custom, all) into concrete inclusive bounds.

Resolution rules
----------------
- ``month``:   first to last day of the current month.
- ``quarter``: first day of the month two months prior through the last day
               of the current month (three calendar months).
- ``year``:    1 January to 31 December of the current year.
- ``custom``:  the explicit ``start_date`` / ``end_date`` bounds. When only
               one bound is supplied, the period falls back to unbounded
               (same result as ``all``) and a warning is logged.
- ``all``:     unbounded on both sides.

"Current" always refers to ``ReportQuery.today`` when set, otherwise to the
local date (see ``_today``), so reports can be reproduced in tests.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional, TypeVar, Union

import pandas as pd

from .dates import add_months, month_end, month_start, parse_date
from .models import ValidationError

logger = logging.getLogger(__name__)

PeriodType = Literal["month", "quarter", "year", "custom", "all"]

PERIOD_TYPES: tuple[str, ...] = ("month", "quarter", "year", "custom", "all")

T = TypeVar("T")


@dataclass(frozen=True)
class Period:
    """
    Reporting period with inclusive bounds and a human-readable label.

    A missing bound means the period is open on that side.
    """

    start: Optional[date]
    end: Optional[date]
    label: str

    def contains(self, d: date) -> bool:
        if self.start is not None and d < self.start:
            return False
        if self.end is not None and d > self.end:
            return False
        return True


@dataclass(frozen=True)
class ReportQuery:
    """
    Explicit filter configuration for one report computation.

    Attributes
    ----------
    period_type:
        One of ``month``, ``quarter``, ``year``, ``custom``, ``all``.
    start_date, end_date:
        Custom bounds, as ``date`` objects or ``YYYY-MM-DD`` /
        ``DD/MM/YYYY`` strings. Only used when ``period_type`` is custom.
    today:
        Reference date for relative periods and forecasts. None means the
        current local date.
    """

    period_type: str = "month"
    start_date: Union[date, str, None] = None
    end_date: Union[date, str, None] = None
    today: Optional[date] = None


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def reference_date(query: ReportQuery) -> date:
    return query.today if query.today is not None else _today()


def period_month(today: date) -> Period:
    return Period(
        start=month_start(today),
        end=month_end(today),
        label=f"Month {today:%Y-%m}",
    )


def period_quarter(today: date) -> Period:
    """Current month and the two months before it."""
    start = add_months(month_start(today), -2)
    return Period(start=start, end=month_end(today), label="Last 3 months")


def period_year(today: date) -> Period:
    return Period(
        start=date(today.year, 1, 1),
        end=date(today.year, 12, 31),
        label=f"Year {today.year}",
    )


def period_all() -> Period:
    return Period(start=None, end=None, label="All periods")


def resolve_period(query: ReportQuery) -> Period:
    """
    Resolve a ReportQuery into a concrete Period.

    Raises:
        ValidationError: if a custom bound is not a valid date, or if the
            custom end date is before the custom start date.
        ValueError: if the period type is unknown.
    """
    p = query.period_type
    today = reference_date(query)

    if p == "month":
        return period_month(today)
    if p == "quarter":
        return period_quarter(today)
    if p == "year":
        return period_year(today)
    if p == "all":
        return period_all()
    if p == "custom":
        # Parse both bounds first so that a malformed string always fails.
        start = parse_date(query.start_date)
        end = parse_date(query.end_date)

        if start is None or end is None:
            logger.warning(
                "Custom period with a single bound (start=%s, end=%s); "
                "falling back to an unbounded period.",
                start,
                end,
            )
            return period_all()

        if end < start:
            raise ValidationError(
                "Custom period end date cannot be before start date."
            )

        return Period(start=start, end=end, label=f"Custom period ({start} → {end})")

    raise ValueError(f"Unknown period: {p!r}")


def filter_by_period(
    records: Iterable[T], period: Period, attr: str = "due_date"
) -> list[T]:
    """Keep records whose ``attr`` date falls within the period (inclusive)."""
    return [r for r in records if period.contains(getattr(r, attr))]


def filter_frame_by_period(
    frame: pd.DataFrame, period: Period, column: str = "due_date"
) -> pd.DataFrame:
    """
    Filter a DataFrame to rows whose ``column`` lies within the period.

    The column is expected to be of type datetime64[ns] (as produced by the
    readers in ``io.py``). Open bounds do not filter.
    """
    mask = pd.Series(True, index=frame.index)
    if period.start is not None:
        mask &= frame[column] >= pd.Timestamp(period.start)
    if period.end is not None:
        mask &= frame[column] <= pd.Timestamp(period.end)
    return frame.loc[mask].copy()
