# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report orchestration.

``build_report()`` resolves the query period once and runs every engine
computation against it, so all sections of a report (dashboard cards,
charts, exported tables) describe exactly the same range.

Rental sections use two scopes:

- financial summary, guest statistics and source performance cover the
  rentals whose competency date falls in the period,
- occupancy covers every booked night inside the period, whichever rental
  it belongs to, and the forecast looks at all rentals relative to today.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import ReportingConfig
from .engine import (
    CashFlowPoint,
    CategorySlice,
    CategoryStatusBreakdown,
    FinancialSummary,
    Forecast,
    GuestStats,
    OccupancyPoint,
    SourcePerformance,
    cash_flow,
    category_distribution,
    category_status_breakdown,
    financial_summary,
    forecast,
    guest_stats,
    occupancy_by_month,
    rentals_in_period,
    source_performance,
)
from .models import Category, RentalRecord, TransactionRecord
from .periods import Period, ReportQuery, reference_date, resolve_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateReport:
    """Every section of a report, computed over one resolved period."""

    period: Period
    today: date
    cash_flow: list[CashFlowPoint]
    category_distribution: list[CategorySlice]
    category_breakdown: list[CategoryStatusBreakdown]
    occupancy: list[OccupancyPoint]
    financial_summary: FinancialSummary
    guest_stats: GuestStats
    source_performance: list[SourcePerformance]
    forecast: Forecast


def build_report(
    query: ReportQuery,
    transactions: Sequence[TransactionRecord],
    rentals: Sequence[RentalRecord],
    categories: Optional[Mapping[int, Category]] = None,
    config: Optional[ReportingConfig] = None,
) -> AggregateReport:
    """
    Compute a full report for the query.

    Args:
        query: Period selection and reference date.
        transactions: Ledger records of the entity.
        rentals: Rental bookings of the property.
        categories: Known categories by id, for names and colours.
        config: Reporting options (threshold, uncategorized bucket). Defaults
            to ``ReportingConfig()``.

    Raises:
        ValidationError: on malformed custom bounds or inverted rentals.
        ValueError: if the period type is unknown.
    """
    config = config or ReportingConfig()
    today = reference_date(query)
    period = resolve_period(query)

    scoped_rentals = rentals_in_period(rentals, period)
    occupancy = occupancy_by_month(rentals, period)

    report = AggregateReport(
        period=period,
        today=today,
        cash_flow=cash_flow(transactions, period),
        category_distribution=category_distribution(
            transactions,
            period,
            categories,
            uncategorized_label=config.uncategorized_label,
            uncategorized_color=config.uncategorized_color,
        ),
        category_breakdown=category_status_breakdown(
            transactions,
            period,
            categories,
            uncategorized_label=config.uncategorized_label,
            uncategorized_color=config.uncategorized_color,
        ),
        occupancy=occupancy,
        financial_summary=financial_summary(scoped_rentals),
        guest_stats=guest_stats(scoped_rentals),
        source_performance=source_performance(scoped_rentals),
        forecast=forecast(
            rentals, occupancy, today, threshold=config.low_occupancy_threshold
        ),
    )

    logger.debug(
        "Report %s: %d transactions, %d rentals (%d in period)",
        period.label,
        len(transactions),
        len(rentals),
        len(scoped_rentals),
    )
    return report
