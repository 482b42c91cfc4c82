# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for HostLedger.

This module turns raw transaction and rental records plus a resolved Period
into the figures shown on dashboards, report tabs and exported documents.
Every function is pure: records are read, never mutated, and each call
returns freshly built result objects.

The engine covers two families of computations:

1. Ledger (transactions)
   ----------------------
   - ``cash_flow()``: PAID income and PAID expense per calendar month of
     the due date. Every month of the range appears, with zeros when it has
     no data.
   - ``category_status_breakdown()``: EXPENSE totals per category split by
     status (paid / pending / overdue), used by detailed tables and
     exports.
   - ``category_distribution()``: EXPENSE totals per category with display
     name and colour, sorted by value (pie chart).

2. Rentals
   --------
   - ``occupancy_by_month()``: share of days of each month (restricted to
     the range) covered by a booked night. Nights are half-open: the
     check-out day is not occupied.
   - ``financial_summary()``, ``guest_stats()``, ``source_performance()``:
     revenue and guest figures over the rentals attributed to the range
     (see ``rentals_in_period``).
   - ``forecast()``: confirmed future bookings and low-occupancy months.

Money and rounding
------------------
Amounts are integers in minor units (cents) and are summed as integers.
Averages of money are rounded half-up to whole cents, percentages to whole
points, and guest/stay averages to two decimals. A zero count yields 0,
never NaN.

Unbounded periods
-----------------
When a period is open on one or both sides, month series are enumerated
from the earliest to the latest relevant record. No records means an empty
series. Occupancy still counts every listed month in full.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import pandas as pd

from .dates import ONE_DAY, iter_days, iter_months, month_end, month_key, overlap_days
from .models import (
    Category,
    RentalRecord,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    ValidationError,
)
from .periods import Period, filter_by_period, filter_frame_by_period

logger = logging.getLogger(__name__)

UNCATEGORIZED_LABEL = "Sem Categoria"
UNCATEGORIZED_COLOR = "#6B7280"
LOW_OCCUPANCY_THRESHOLD = 30


# ---------------------------------------------------------------------------
# Result structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CashFlowPoint:
    """PAID income and expense (minor units) for one month."""

    month: str
    income: int
    expense: int

    @property
    def net(self) -> int:
        return self.income - self.expense


@dataclass(frozen=True)
class CategoryStatusBreakdown:
    """EXPENSE totals of one category split by status."""

    category_id: Optional[int]
    name: str
    color: str
    paid: int
    pending: int
    overdue: int

    @property
    def total(self) -> int:
        return self.paid + self.pending + self.overdue


@dataclass(frozen=True)
class CategorySlice:
    """One slice of the expense distribution chart."""

    category_id: Optional[int]
    name: str
    value: int
    color: str


@dataclass(frozen=True)
class OccupancyPoint:
    """
    Occupancy of one month.

    ``total`` is the number of days of the month inside the range and
    ``occupied`` the number of those days covered by a booked night.
    """

    month: str
    occupied: int
    total: int
    percent: int


@dataclass(frozen=True)
class FinancialSummary:
    total: int = 0
    average: int = 0
    by_source: dict[str, int] = field(default_factory=dict)
    taxes_total: int = 0
    count: int = 0


@dataclass(frozen=True)
class GuestStats:
    recurring_guest_count: int = 0
    avg_guests: float = 0.0
    avg_stay_days: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class SourcePerformance:
    source: str
    count: int
    revenue: int
    avg_ticket: int


@dataclass(frozen=True)
class Forecast:
    confirmed_count: int = 0
    confirmed_revenue: int = 0
    low_occupancy_months: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Rounding helpers
# ---------------------------------------------------------------------------


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer quotient rounded half-up; 0 when the denominator is 0."""
    if denominator == 0:
        return 0
    q = Decimal(numerator) / Decimal(denominator)
    return int(q.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _ratio_2dp(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    q = Decimal(numerator) / Decimal(denominator)
    return float(q.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


def transactions_frame(transactions: Sequence[TransactionRecord]) -> pd.DataFrame:
    """
    Build a DataFrame view of transaction records.

    Columns: id, type (str), amount (int64), due_date (datetime64[ns]),
    status (str), category_id (object, None when missing).
    """
    return pd.DataFrame(
        {
            "id": pd.Series([t.id for t in transactions], dtype="object"),
            "type": pd.Series(
                [TransactionType(t.type).value for t in transactions], dtype="object"
            ),
            "amount": pd.Series([int(t.amount) for t in transactions], dtype="int64"),
            "due_date": pd.to_datetime(
                pd.Series([t.due_date for t in transactions], dtype="object")
            ),
            "status": pd.Series(
                [TransactionStatus(t.status).value for t in transactions],
                dtype="object",
            ),
            "category_id": pd.Series(
                [t.category_id for t in transactions], dtype="object"
            ),
        }
    )


def _month_bounds(
    period: Period, data_min: Optional[date], data_max: Optional[date]
) -> Optional[tuple[date, date]]:
    """Close an open period with the data range; None when nothing to span."""
    lo = period.start if period.start is not None else data_min
    hi = period.end if period.end is not None else data_max
    if lo is None and hi is None:
        return None
    if lo is None:
        lo = hi
    if hi is None:
        hi = lo
    if hi < lo:
        return None
    return lo, hi


def cash_flow(
    transactions: Sequence[TransactionRecord], period: Period
) -> list[CashFlowPoint]:
    """
    Monthly PAID income and expense over the period.

    Transactions are bucketed by the month of their due date. Months are
    enumerated from the period start to the period end, so months without
    any transaction are reported with zeros.
    """
    frame = filter_frame_by_period(transactions_frame(transactions), period)

    data_min = data_max = None
    if not frame.empty:
        data_min = frame["due_date"].min().date()
        data_max = frame["due_date"].max().date()

    bounds = _month_bounds(period, data_min, data_max)
    if bounds is None:
        return []

    paid = frame[frame["status"] == TransactionStatus.PAID.value]
    sums: dict[tuple[str, str], int] = {}
    if not paid.empty:
        grouped = paid.groupby(
            [paid["due_date"].dt.strftime("%Y-%m"), paid["type"]]
        )["amount"].sum()
        sums = {(str(m), str(t)): int(v) for (m, t), v in grouped.items()}

    points = []
    for first in iter_months(*bounds):
        key = month_key(first)
        points.append(
            CashFlowPoint(
                month=key,
                income=sums.get((key, TransactionType.INCOME.value), 0),
                expense=sums.get((key, TransactionType.EXPENSE.value), 0),
            )
        )

    logger.debug("Cash flow: %d months from %d transactions", len(points), len(frame))
    return points


def category_status_breakdown(
    transactions: Sequence[TransactionRecord],
    period: Period,
    categories: Optional[Mapping[int, Category]] = None,
    uncategorized_label: str = UNCATEGORIZED_LABEL,
    uncategorized_color: str = UNCATEGORIZED_COLOR,
) -> list[CategoryStatusBreakdown]:
    """
    EXPENSE totals per category and status within the period.

    Transactions without a category, or whose category is unknown, are
    grouped under the uncategorized bucket. Rows are sorted by total
    descending, then by name.
    """
    categories = categories or {}

    # category key -> status -> amount
    buckets: dict[Optional[int], dict[str, int]] = {}
    for t in transactions:
        if TransactionType(t.type) != TransactionType.EXPENSE:
            continue
        if not period.contains(t.due_date):
            continue
        key = t.category_id if t.category_id in categories else None
        by_status = buckets.setdefault(key, {s.value: 0 for s in TransactionStatus})
        by_status[TransactionStatus(t.status).value] += int(t.amount)

    rows = []
    for key, by_status in buckets.items():
        if key is None:
            name, color = uncategorized_label, uncategorized_color
        else:
            name, color = categories[key].name, categories[key].color
        rows.append(
            CategoryStatusBreakdown(
                category_id=key,
                name=name,
                color=color,
                paid=by_status[TransactionStatus.PAID.value],
                pending=by_status[TransactionStatus.PENDING.value],
                overdue=by_status[TransactionStatus.OVERDUE.value],
            )
        )

    rows.sort(key=lambda r: (-r.total, r.name))
    return rows


def category_distribution(
    transactions: Sequence[TransactionRecord],
    period: Period,
    categories: Optional[Mapping[int, Category]] = None,
    uncategorized_label: str = UNCATEGORIZED_LABEL,
    uncategorized_color: str = UNCATEGORIZED_COLOR,
) -> list[CategorySlice]:
    """EXPENSE totals per category, sorted by value descending."""
    breakdown = category_status_breakdown(
        transactions,
        period,
        categories,
        uncategorized_label=uncategorized_label,
        uncategorized_color=uncategorized_color,
    )
    return [
        CategorySlice(
            category_id=row.category_id,
            name=row.name,
            value=row.total,
            color=row.color,
        )
        for row in breakdown
    ]


# ---------------------------------------------------------------------------
# Rentals
# ---------------------------------------------------------------------------


def validate_rentals(rentals: Sequence[RentalRecord]) -> None:
    """Reject rentals whose check-out is before their check-in."""
    for r in rentals:
        if r.end_date < r.start_date:
            raise ValidationError(
                f"Rental {r.id!r} ends ({r.end_date}) before it starts "
                f"({r.start_date})."
            )


def rentals_in_period(
    rentals: Sequence[RentalRecord], period: Period
) -> list[RentalRecord]:
    """Rentals whose competency date (check-in or check-out) is in the period."""
    validate_rentals(rentals)
    return filter_by_period(rentals, period, attr="competency_date")


def _last_night(rental: RentalRecord) -> Optional[date]:
    if rental.end_date <= rental.start_date:
        return None
    return rental.end_date - ONE_DAY


def occupancy_by_month(
    rentals: Sequence[RentalRecord], period: Period
) -> list[OccupancyPoint]:
    """
    Occupancy percentage for each month overlapping the period.

    For every month, ``total`` counts the days of the month inside the
    period and ``occupied`` the days among them covered by at least one
    booked night ``[start_date, end_date)``. Overlapping rentals count a
    day once, so the percentage stays within 0..100.

    An open period lists the months spanned by the booked nights, but an
    open bound never shortens a month: each listed month counts in full.
    """
    validate_rentals(rentals)

    nights = [(r.start_date, _last_night(r)) for r in rentals]
    nights = [(start, last) for start, last in nights if last is not None]

    data_min = min((start for start, _ in nights), default=None)
    data_max = max((last for _, last in nights), default=None)
    bounds = _month_bounds(period, data_min, data_max)
    if bounds is None:
        return []
    lo, hi = bounds

    occupied_days: set[date] = set()
    for start, last in nights:
        first = max(start, lo)
        final = min(last, hi)
        occupied_days.update(iter_days(first, final))

    points = []
    for first in iter_months(lo, hi):
        last_day = month_end(first)
        total = overlap_days(
            first,
            last_day,
            period.start if period.start is not None else first,
            period.end if period.end is not None else last_day,
        )
        occupied = sum(1 for d in occupied_days if first <= d <= last_day)
        points.append(
            OccupancyPoint(
                month=month_key(first),
                occupied=occupied,
                total=total,
                percent=round_half_up(occupied * 100, total),
            )
        )
    return points


def financial_summary(rentals: Sequence[RentalRecord]) -> FinancialSummary:
    """Revenue totals, average ticket, revenue by source and extra fees."""
    validate_rentals(rentals)

    total = 0
    taxes_total = 0
    by_source: dict[str, int] = {}
    for r in rentals:
        amount = int(r.total_amount or 0)
        total += amount
        by_source[r.source.value] = by_source.get(r.source.value, 0) + amount
        taxes_total += int(r.extra_fee_amount or 0)

    return FinancialSummary(
        total=total,
        average=round_half_up(total, len(rentals)),
        by_source=by_source,
        taxes_total=taxes_total,
        count=len(rentals),
    )


def guest_stats(rentals: Sequence[RentalRecord]) -> GuestStats:
    """
    Guest statistics.

    - recurring_guest_count: distinct guest names seen in more than one
      rental (rentals without a guest name are ignored here),
    - avg_guests: mean number of guests (a missing count counts as 1),
    - avg_stay_days: mean number of nights.
    """
    validate_rentals(rentals)

    visits: dict[str, int] = {}
    guests = 0
    nights = 0
    for r in rentals:
        if r.guest_name:
            visits[r.guest_name] = visits.get(r.guest_name, 0) + 1
        guests += r.number_of_guests or 1
        nights += (r.end_date - r.start_date).days

    count = len(rentals)
    return GuestStats(
        recurring_guest_count=sum(1 for n in visits.values() if n > 1),
        avg_guests=_ratio_2dp(guests, count),
        avg_stay_days=_ratio_2dp(nights, count),
        count=count,
    )


def source_performance(rentals: Sequence[RentalRecord]) -> list[SourcePerformance]:
    """Bookings count, revenue and average ticket per source."""
    validate_rentals(rentals)
    if not rentals:
        return []

    frame = pd.DataFrame(
        {
            "source": [r.source.value for r in rentals],
            "total_amount": pd.Series(
                [int(r.total_amount or 0) for r in rentals], dtype="int64"
            ),
        }
    )
    grouped = frame.groupby("source", sort=False)["total_amount"].agg(["size", "sum"])

    return [
        SourcePerformance(
            source=str(source),
            count=int(row["size"]),
            revenue=int(row["sum"]),
            avg_ticket=round_half_up(int(row["sum"]), int(row["size"])),
        )
        for source, row in grouped.iterrows()
    ]


def forecast(
    rentals: Sequence[RentalRecord],
    occupancy: Sequence[OccupancyPoint],
    today: date,
    threshold: int = LOW_OCCUPANCY_THRESHOLD,
) -> Forecast:
    """
    Confirmed future bookings and months below the occupancy threshold.

    ``today`` is injected so the result is reproducible.
    """
    validate_rentals(rentals)

    upcoming = [r for r in rentals if r.start_date >= today]
    return Forecast(
        confirmed_count=len(upcoming),
        confirmed_revenue=sum(int(r.total_amount or 0) for r in upcoming),
        low_occupancy_months=tuple(p.month for p in occupancy if p.percent < threshold),
    )
