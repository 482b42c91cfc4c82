# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for HostLedger.

This module turns engine results into pandas DataFrames ready for display
(``DataFrame.to_string``) or CSV export (``DataFrame.to_csv``). It never
computes figures itself: every number comes from ``engine``, ``reports``,
``transactions_service`` or ``calendar_layout``.

Monetary values are converted from minor units (cents) to major units with
two decimals. Column orders are fixed so that exported files stay stable
from one run to the next.

The calendar layout has two views:

- ``layout_to_frame``: one row per (item, visible day) span, for export,
- ``render_calendar_text``: a plain-text month grid for the console.
"""

from collections.abc import Hashable, Mapping, Sequence
from typing import Optional

import pandas as pd

from .calendar_layout import LayoutResult
from .engine import (
    CashFlowPoint,
    CategorySlice,
    CategoryStatusBreakdown,
    FinancialSummary,
    Forecast,
    GuestStats,
    OccupancyPoint,
    SourcePerformance,
)
from .reports import AggregateReport
from .transactions_service import DashboardMetrics, TransactionSummary

WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def to_major_units(cents: int) -> float:
    """Convert an amount in minor units to major units, rounded to 2 decimals."""
    return round(int(cents) / 100, 2)


def _frame(rows: list[dict[str, object]], columns: list[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


def cash_flow_to_frame(points: Sequence[CashFlowPoint]) -> pd.DataFrame:
    """Columns: month, income, expense, net."""
    rows = [
        {
            "month": p.month,
            "income": to_major_units(p.income),
            "expense": to_major_units(p.expense),
            "net": to_major_units(p.net),
        }
        for p in points
    ]
    return _frame(rows, ["month", "income", "expense", "net"])


def category_distribution_to_frame(slices: Sequence[CategorySlice]) -> pd.DataFrame:
    """Columns: category_id, name, color, value."""
    rows = [
        {
            "category_id": s.category_id,
            "name": s.name,
            "color": s.color,
            "value": to_major_units(s.value),
        }
        for s in slices
    ]
    return _frame(rows, ["category_id", "name", "color", "value"])


def category_breakdown_to_frame(
    breakdown: Sequence[CategoryStatusBreakdown],
) -> pd.DataFrame:
    """Columns: category_id, name, paid, pending, overdue, total."""
    rows = [
        {
            "category_id": b.category_id,
            "name": b.name,
            "paid": to_major_units(b.paid),
            "pending": to_major_units(b.pending),
            "overdue": to_major_units(b.overdue),
            "total": to_major_units(b.total),
        }
        for b in breakdown
    ]
    return _frame(
        rows, ["category_id", "name", "paid", "pending", "overdue", "total"]
    )


def occupancy_to_frame(points: Sequence[OccupancyPoint]) -> pd.DataFrame:
    """Columns: month, occupied, total, percent."""
    rows = [
        {
            "month": p.month,
            "occupied": p.occupied,
            "total": p.total,
            "percent": p.percent,
        }
        for p in points
    ]
    return _frame(rows, ["month", "occupied", "total", "percent"])


def source_performance_to_frame(
    performance: Sequence[SourcePerformance],
) -> pd.DataFrame:
    """Columns: source, count, revenue, avg_ticket."""
    rows = [
        {
            "source": p.source,
            "count": p.count,
            "revenue": to_major_units(p.revenue),
            "avg_ticket": to_major_units(p.avg_ticket),
        }
        for p in performance
    ]
    return _frame(rows, ["source", "count", "revenue", "avg_ticket"])


def rental_summary_to_frame(
    summary: FinancialSummary,
    guests: GuestStats,
    outlook: Forecast,
) -> pd.DataFrame:
    """
    Key figures of the rental reports in long format.

    The resulting DataFrame has the following columns:
        - key:   Internal identifier (e.g. "total_revenue").
        - label: Human-readable label to display.
        - value: Numeric value (money in major units) or text.
        - unit:  Unit hint ("amount", "count", "days", "guests", "months").
    """
    rows: list[dict[str, object]] = [
        {"key": "total_revenue", "label": "Total revenue",
         "value": to_major_units(summary.total), "unit": "amount"},
        {"key": "average_ticket", "label": "Average per rental",
         "value": to_major_units(summary.average), "unit": "amount"},
        {"key": "extra_fees_total", "label": "Extra fees",
         "value": to_major_units(summary.taxes_total), "unit": "amount"},
        {"key": "rental_count", "label": "Rentals",
         "value": summary.count, "unit": "count"},
    ]

    for source, amount in summary.by_source.items():
        rows.append(
            {
                "key": f"revenue_{source.lower()}",
                "label": f"Revenue ({source})",
                "value": to_major_units(amount),
                "unit": "amount",
            }
        )

    rows.extend(
        [
            {"key": "recurring_guests", "label": "Recurring guests",
             "value": guests.recurring_guest_count, "unit": "count"},
            {"key": "avg_guests", "label": "Average guests",
             "value": guests.avg_guests, "unit": "guests"},
            {"key": "avg_stay_days", "label": "Average stay",
             "value": guests.avg_stay_days, "unit": "days"},
            {"key": "confirmed_bookings", "label": "Confirmed upcoming bookings",
             "value": outlook.confirmed_count, "unit": "count"},
            {"key": "confirmed_revenue", "label": "Confirmed upcoming revenue",
             "value": to_major_units(outlook.confirmed_revenue), "unit": "amount"},
            {"key": "low_occupancy_months", "label": "Low occupancy months",
             "value": ", ".join(outlook.low_occupancy_months), "unit": "months"},
        ]
    )

    return _frame(rows, ["key", "label", "value", "unit"])


def report_to_frames(report: AggregateReport) -> dict[str, pd.DataFrame]:
    """
    All sections of a report as DataFrames, keyed by a file-friendly name.

    The insertion order is the display order used by the CLI.
    """
    return {
        "cash_flow": cash_flow_to_frame(report.cash_flow),
        "expenses_by_category": category_distribution_to_frame(
            report.category_distribution
        ),
        "expenses_by_status": category_breakdown_to_frame(report.category_breakdown),
        "occupancy": occupancy_to_frame(report.occupancy),
        "rental_summary": rental_summary_to_frame(
            report.financial_summary, report.guest_stats, report.forecast
        ),
        "source_performance": source_performance_to_frame(report.source_performance),
    }


def dashboard_to_frame(metrics: DashboardMetrics) -> pd.DataFrame:
    rows = [
        {"key": "current_balance", "label": "Current balance",
         "value": to_major_units(metrics.current_balance)},
        {"key": "month_income", "label": "Income this month",
         "value": to_major_units(metrics.month_income)},
        {"key": "month_expenses", "label": "Expenses this month",
         "value": to_major_units(metrics.month_expenses)},
        {"key": "pending_expenses", "label": "Pending expenses",
         "value": to_major_units(metrics.pending_expenses)},
    ]
    return _frame(rows, ["key", "label", "value"])


def transaction_summary_to_frame(summary: TransactionSummary) -> pd.DataFrame:
    """One row per transaction type, plus a balance row."""
    rows = []
    for label, total, breakdown in (
        ("income", summary.total_income, summary.income_breakdown),
        ("expenses", summary.total_expenses, summary.expenses_breakdown),
    ):
        rows.append(
            {
                "type": label,
                "total": to_major_units(total),
                "paid": to_major_units(breakdown.paid),
                "pending": to_major_units(breakdown.pending),
                "overdue": to_major_units(breakdown.overdue),
            }
        )
    rows.append(
        {
            "type": "balance",
            "total": to_major_units(summary.balance),
            "paid": None,
            "pending": None,
            "overdue": None,
        }
    )
    return _frame(rows, ["type", "total", "paid", "pending", "overdue"])


# ---------------------------------------------------------------------------
# Calendar layout
# ---------------------------------------------------------------------------


def layout_to_frame(result: LayoutResult) -> pd.DataFrame:
    """Columns: day, item_id, row, is_start, is_end, columns_spanned."""
    rows = [
        {
            "day": s.day.isoformat(),
            "item_id": s.item_id,
            "row": s.row,
            "is_start": s.is_start,
            "is_end": s.is_end,
            "columns_spanned": s.columns_spanned,
        }
        for s in result.spans
    ]
    return _frame(
        rows, ["day", "item_id", "row", "is_start", "is_end", "columns_spanned"]
    )


def _bar(label: str, width: int) -> str:
    inner = width - 2
    return "[" + label[:inner].ljust(inner, "-") + "]"


def render_calendar_text(
    result: LayoutResult,
    labels: Optional[Mapping[Hashable, str]] = None,
    cell_width: int = 10,
) -> str:
    """
    Render a layout as a plain-text grid.

    Each week prints a line of day numbers followed by one line per display
    row holding at least one bar. A bar is drawn as ``[label----]`` over the
    cells it spans; labels default to the item id.
    """
    labels = labels or {}
    window = result.window
    sep = " "

    header = sep.join(
        WEEKDAY_ABBR[(window.first_weekday + i) % 7].ljust(cell_width)
        for i in range(7)
    )
    lines = [header.rstrip()]

    segments = result.segments()
    for week in window.weeks():
        week_days = set(week)
        lines.append(
            sep.join(f"{d.day:>2}".ljust(cell_width) for d in week).rstrip()
        )

        in_week = [s for s in segments if s.day in week_days]
        for row in sorted({s.row for s in in_week}):
            cells: list[Optional[str]] = [" " * cell_width] * len(week)
            for s in in_week:
                if s.row != row:
                    continue
                col = window.column(s.day)
                width = s.columns_spanned * cell_width + (s.columns_spanned - 1) * len(sep)
                cells[col] = _bar(str(labels.get(s.item_id, s.item_id)), width)
                for covered in range(col + 1, col + s.columns_spanned):
                    cells[covered] = None
            lines.append(sep.join(c for c in cells if c is not None).rstrip())

    return "\n".join(lines)
