# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Calendar layout engine.

Given date-ranged items (agenda tasks or rental bookings) and a visible
calendar window, this module assigns every item a display row so that two
items sharing at least one day never share a row, and computes how each
item's bar is drawn across the week rows of the grid.

1. Calendar window
   ----------------
   A CalendarWindow is a run of whole grid weeks. ``month_window()`` builds
   the window for a month: from the start of the week containing the 1st to
   the end of the week containing the last day, optionally padded to six
   weeks (42 cells) so every month renders with the same height.

2. Row assignment
   ---------------
   Items are sorted by (start date ascending, duration descending) and
   placed first-fit: each item takes the lowest row whose last occupant
   ends before the item starts. Items with the same start and duration keep
   their input order, so the assignment is fully deterministic. Processing
   intervals by start date makes first-fit optimal: the number of rows
   equals the largest number of items sharing a single day.

3. Per-day spans
   --------------
   For every visible day covered by an item a DaySpan is produced. A bar is
   drawn from a cell when the day is the item's start date, or the first
   column of a week row (bars restart at each week boundary), or the first
   visible day. Such cells carry ``columns_spanned`` > 0; other covered
   cells carry 0 and are painted by the bar of a previous cell.

Rentals are laid out by booked nights: the check-out day is free for the
next check-in, matching the half-open convention of the occupancy report.
"""

import logging
from collections.abc import Hashable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from .dates import ONE_DAY, iter_days, month_end, month_start, week_end, week_start
from .models import (
    RentalRecord,
    ScheduledItem,
    TaskRecord,
    TaskStatus,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarWindow:
    """
    Visible range of a calendar grid.

    ``start`` must be the first day of a grid week. When ``end`` does not
    close a full week, the last row is simply shorter.
    """

    start: date
    end: date
    first_weekday: int = 6

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("Calendar window end cannot be before start.")

    def days(self) -> list[date]:
        return list(iter_days(self.start, self.end))

    def weeks(self) -> list[list[date]]:
        days = self.days()
        return [days[i : i + 7] for i in range(0, len(days), 7)]

    def column(self, d: date) -> int:
        """Zero-based grid column of a visible day."""
        return (d - self.start).days % 7


def month_window(
    year: int,
    month: int,
    first_weekday: int = 6,
    fixed_weeks: bool = False,
) -> CalendarWindow:
    """
    Build the grid window for a month.

    Args:
        year, month: Month to display.
        first_weekday: Weekday starting each grid row (Monday=0 ... Sunday=6).
        fixed_weeks: Pad the grid to exactly six weeks.
    """
    first = date(year, month, 1)
    start = week_start(month_start(first), first_weekday)
    if fixed_weeks:
        end = start + timedelta(days=41)
    else:
        end = week_end(month_end(first), first_weekday)
    return CalendarWindow(start=start, end=end, first_weekday=first_weekday)


@dataclass(frozen=True)
class DaySpan:
    """
    Rendering descriptor of one item on one visible day.

    Attributes
    ----------
    item_id:
        Identifier of the ScheduledItem.
    day:
        Visible day described.
    row:
        Display row assigned to the item.
    is_start, is_end:
        Whether ``day`` is the item's first / last day.
    columns_spanned:
        Number of grid cells the bar drawn from this cell covers, or 0 when
        the cell is covered by a bar started on a previous cell.
    """

    item_id: Hashable
    day: date
    row: int
    is_start: bool
    is_end: bool
    columns_spanned: int

    @property
    def draws_bar(self) -> bool:
        return self.columns_spanned > 0


@dataclass(frozen=True)
class LayoutResult:
    """Row assignment and per-day spans for one calendar window."""

    window: CalendarWindow
    rows: dict[Hashable, int]
    spans: tuple[DaySpan, ...] = field(default_factory=tuple)

    @property
    def row_count(self) -> int:
        return max(self.rows.values()) + 1 if self.rows else 0

    def segments(self) -> list[DaySpan]:
        """Spans that start a bar, in display order."""
        return [s for s in self.spans if s.draws_bar]

    def spans_on(self, d: date) -> list[DaySpan]:
        return sorted(
            (s for s in self.spans if s.day == d), key=lambda s: s.row
        )


def validate_items(items: Iterable[ScheduledItem]) -> None:
    """Reject items that end before they start or that repeat an id."""
    seen: set[Hashable] = set()
    for item in items:
        if item.id in seen:
            raise ValidationError(f"Duplicate item id {item.id!r}.")
        seen.add(item.id)
        if item.end_date < item.start_date:
            raise ValidationError(
                f"Item {item.id!r} ends ({item.end_date}) before it starts "
                f"({item.start_date})."
            )


def task_item(task: TaskRecord) -> ScheduledItem:
    """Adapt an agenda task to a calendar item (priority drives the colour)."""
    return ScheduledItem(
        id=f"task-{task.id}",
        start_date=task.due_date,
        end_date=task.end_date or task.due_date,
        tag=task.priority.value,
        completed=task.status == TaskStatus.COMPLETED,
    )


def rental_item(rental: RentalRecord) -> ScheduledItem:
    """
    Adapt a rental to a calendar item covering its booked nights.

    A rental from the 1st to the 5th occupies the 1st through the 4th; a
    same-day rental occupies its single day. Inverted rentals are passed
    through unchanged so that layout validation rejects them.

    Ids are prefixed with ``rental-`` (``task-`` for tasks) because the two
    record kinds number their ids independently.
    """
    end = rental.end_date
    if end > rental.start_date:
        end = end - ONE_DAY
    return ScheduledItem(
        id=f"rental-{rental.id}",
        start_date=rental.start_date,
        end_date=end,
        tag=rental.source.value,
    )


def _sort_key(item: ScheduledItem) -> tuple[date, int]:
    return (item.start_date, -item.duration_days)


def assign_rows(items: Sequence[ScheduledItem]) -> dict[Hashable, int]:
    """
    Assign each item the lowest row free on its start date.

    Returns:
        Mapping item id -> zero-based row index.

    Raises:
        ValidationError: if an item ends before it starts or repeats an id.
    """
    validate_items(items)

    rows: dict[Hashable, int] = {}
    # Last end date occupying each row index.
    row_ends: list[date] = []

    for item in sorted(items, key=_sort_key):
        row = 0
        while row < len(row_ends) and row_ends[row] >= item.start_date:
            row += 1
        if row == len(row_ends):
            row_ends.append(item.end_date)
        else:
            row_ends[row] = item.end_date
        rows[item.id] = row

    return rows


def _iter_spans(
    item: ScheduledItem, row: int, window: CalendarWindow
) -> Iterator[DaySpan]:
    first = max(item.start_date, window.start)
    last = min(item.end_date, window.end)

    for d in iter_days(first, last):
        column = window.column(d)
        starts_bar = d == item.start_date or column == 0 or d == window.start
        columns = 0
        if starts_bar:
            remaining_in_week = 6 - column
            until_item_end = (item.end_date - d).days
            until_window_end = (window.end - d).days
            columns = min(remaining_in_week, until_item_end, until_window_end) + 1

        yield DaySpan(
            item_id=item.id,
            day=d,
            row=row,
            is_start=d == item.start_date,
            is_end=d == item.end_date,
            columns_spanned=columns,
        )


def layout_items(
    items: Sequence[ScheduledItem],
    window: CalendarWindow,
) -> LayoutResult:
    """
    Compute the calendar layout of items for a visible window.

    Every item is validated first, then items that do not intersect the
    window are dropped (an item that merely touches an edge is kept). Rows
    are assigned over the remaining items and spans are produced day by day.

    Raises:
        ValidationError: if any item ends before it starts or repeats an id.
    """
    validate_items(items)

    visible = [
        item
        for item in items
        if item.end_date >= window.start and item.start_date <= window.end
    ]
    rows = assign_rows(visible)

    spans: list[DaySpan] = []
    for item in visible:
        spans.extend(_iter_spans(item, rows[item.id], window))
    spans.sort(key=lambda s: (s.day, s.row))

    logger.debug(
        "Calendar layout %s → %s: %d of %d items visible, %d rows",
        window.start,
        window.end,
        len(visible),
        len(items),
        max(rows.values()) + 1 if rows else 0,
    )

    return LayoutResult(window=window, rows=rows, spans=tuple(spans))


def layout_month(
    items: Sequence[ScheduledItem],
    year: int,
    month: int,
    first_weekday: int = 6,
    fixed_weeks: bool = False,
) -> LayoutResult:
    """Convenience wrapper: layout of ``items`` on the grid of a month."""
    window = month_window(year, month, first_weekday, fixed_weeks)
    return layout_items(items, window)
