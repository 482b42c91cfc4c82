# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ledger operations over transaction records.

This module gathers the transaction-level operations used by dashboards and
scheduled jobs:

- ``generate_recurring_transactions``: expand a transaction template into
  dated instances (daily, weekly, monthly or yearly),
- ``mark_overdue``: the nightly status update turning due PENDING
  transactions into OVERDUE ones,
- ``dashboard_metrics``: headline figures of an entity dashboard,
- ``transaction_summary``: totals and per-status breakdowns for a period.

Like the engines, every function is pure. Persisting generated or updated
records is the job of the data layer.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional

from .dates import add_months, month_end, month_start
from .models import (
    Frequency,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    ValidationError,
)
from .periods import Period, filter_by_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusBreakdown:
    paid: int = 0
    pending: int = 0
    overdue: int = 0


@dataclass(frozen=True)
class TransactionSummary:
    """
    Totals of a set of transactions.

    ``total_income`` and ``total_expenses`` honour every filter, while the
    breakdowns ignore the status filter so that all three statuses are
    always reported.
    """

    total_income: int = 0
    total_expenses: int = 0
    income_breakdown: StatusBreakdown = field(default_factory=StatusBreakdown)
    expenses_breakdown: StatusBreakdown = field(default_factory=StatusBreakdown)

    @property
    def balance(self) -> int:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class DashboardMetrics:
    current_balance: int = 0
    month_income: int = 0
    month_expenses: int = 0
    pending_expenses: int = 0


def _shift(d: date, frequency: Frequency, steps: int) -> date:
    if frequency == Frequency.DAY:
        return d + timedelta(days=steps)
    if frequency == Frequency.WEEK:
        return d + timedelta(weeks=steps)
    if frequency == Frequency.MONTH:
        return add_months(d, steps)
    if frequency == Frequency.YEAR:
        return add_months(d, 12 * steps)
    raise ValueError(f"Unknown frequency: {frequency!r}")


def generate_recurring_transactions(
    template: TransactionRecord,
    count: int,
    frequency: Frequency,
) -> list[TransactionRecord]:
    """
    Expand ``template`` into ``count`` dated instances.

    Instance ``i`` (0-based) is due ``i`` steps after the template due date
    and is described as ``"<description> (i+1/count)"``. Monthly and yearly
    steps keep the template day of month, clamped to shorter months
    (31 January → 28/29 February → 31 March). Generated records have no id.

    Raises:
        ValidationError: if ``count`` is lower than 1.
    """
    if count < 1:
        raise ValidationError("Recurrence count must be at least 1.")
    frequency = Frequency(frequency)

    instances = []
    for i in range(count):
        instances.append(
            replace(
                template,
                id=None,
                due_date=_shift(template.due_date, frequency, i),
                description=f"{template.description} ({i + 1}/{count})".strip(),
            )
        )
    return instances


def mark_overdue(
    transactions: Sequence[TransactionRecord], today: date
) -> list[TransactionRecord]:
    """
    Return transactions with due PENDING entries switched to OVERDUE.

    A PENDING transaction is overdue once its due date is reached
    (``due_date <= today``). Other records are returned unchanged.
    """
    updated = []
    changed = 0
    for t in transactions:
        if TransactionStatus(t.status) == TransactionStatus.PENDING and t.due_date <= today:
            updated.append(replace(t, status=TransactionStatus.OVERDUE))
            changed += 1
        else:
            updated.append(t)
    logger.info("%d transactions marked as OVERDUE", changed)
    return updated


def dashboard_metrics(
    transactions: Sequence[TransactionRecord], today: date
) -> DashboardMetrics:
    """
    Headline figures of an entity dashboard.

    - current_balance: all-time PAID income minus PAID expenses,
    - month_income / month_expenses: PAID amounts whose payment date falls
      in the current month,
    - pending_expenses: EXPENSE transactions still PENDING.
    """
    first = month_start(today)
    last = month_end(today)

    balance = month_income = month_expenses = pending = 0
    for t in transactions:
        kind = TransactionType(t.type)
        status = TransactionStatus(t.status)
        amount = int(t.amount)

        if status == TransactionStatus.PAID:
            balance += amount if kind == TransactionType.INCOME else -amount
            if t.payment_date is not None and first <= t.payment_date <= last:
                if kind == TransactionType.INCOME:
                    month_income += amount
                else:
                    month_expenses += amount
        elif status == TransactionStatus.PENDING and kind == TransactionType.EXPENSE:
            pending += amount

    return DashboardMetrics(
        current_balance=balance,
        month_income=month_income,
        month_expenses=month_expenses,
        pending_expenses=pending,
    )


def _breakdown(transactions: Sequence[TransactionRecord]) -> StatusBreakdown:
    sums = {s: 0 for s in TransactionStatus}
    for t in transactions:
        sums[TransactionStatus(t.status)] += int(t.amount)
    return StatusBreakdown(
        paid=sums[TransactionStatus.PAID],
        pending=sums[TransactionStatus.PENDING],
        overdue=sums[TransactionStatus.OVERDUE],
    )


def transaction_summary(
    transactions: Sequence[TransactionRecord],
    period: Period,
    status: Optional[TransactionStatus] = None,
    category_id: Optional[int] = None,
) -> TransactionSummary:
    """Income, expenses and status breakdowns for transactions due in the period."""
    scoped = [
        t
        for t in filter_by_period(transactions, period)
        if category_id is None or t.category_id == category_id
    ]
    incomes = [t for t in scoped if TransactionType(t.type) == TransactionType.INCOME]
    expenses = [t for t in scoped if TransactionType(t.type) == TransactionType.EXPENSE]

    def _total(items: Sequence[TransactionRecord]) -> int:
        return sum(
            int(t.amount)
            for t in items
            if status is None or TransactionStatus(t.status) == TransactionStatus(status)
        )

    return TransactionSummary(
        total_income=_total(incomes),
        total_expenses=_total(expenses),
        income_breakdown=_breakdown(incomes),
        expenses_breakdown=_breakdown(expenses),
    )
