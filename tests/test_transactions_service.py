from datetime import date

import pytest

from hostledger.models import (
    Frequency,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    ValidationError,
)
from hostledger.periods import Period
from hostledger.transactions_service import (
    StatusBreakdown,
    dashboard_metrics,
    generate_recurring_transactions,
    mark_overdue,
    transaction_summary,
)

PAID = TransactionStatus.PAID
PENDING = TransactionStatus.PENDING
OVERDUE = TransactionStatus.OVERDUE
INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def tx(kind, amount, due, status=PENDING, paid_on=None, category_id=None, id=1):
    return TransactionRecord(
        id=id,
        type=kind,
        amount=amount,
        due_date=date.fromisoformat(due),
        payment_date=date.fromisoformat(paid_on) if paid_on else None,
        status=status,
        category_id=category_id,
    )


# ---------------------------------------------------------------------------
# Recurring transactions
# ---------------------------------------------------------------------------


def test_monthly_recurrence_clamps_month_end() -> None:
    template = TransactionRecord(
        id=10,
        type=EXPENSE,
        amount=150000,
        due_date=date(2026, 1, 31),
        description="Rent",
    )
    instances = generate_recurring_transactions(template, 3, Frequency.MONTH)

    assert [t.due_date for t in instances] == [
        date(2026, 1, 31),
        date(2026, 2, 28),
        date(2026, 3, 31),
    ]
    assert [t.description for t in instances] == ["Rent (1/3)", "Rent (2/3)", "Rent (3/3)"]
    assert all(t.id is None for t in instances)
    assert all(t.amount == 150000 for t in instances)


@pytest.mark.parametrize(
    "frequency, expected",
    [
        ("DAY", [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]),
        ("WEEK", [date(2024, 2, 28), date(2024, 3, 6), date(2024, 3, 13)]),
        ("YEAR", [date(2024, 2, 28), date(2025, 2, 28), date(2026, 2, 28)]),
    ],
)
def test_other_frequencies(frequency, expected) -> None:
    template = tx(INCOME, 100, "2024-02-28")
    instances = generate_recurring_transactions(template, 3, frequency)
    assert [t.due_date for t in instances] == expected


def test_recurrence_without_description() -> None:
    instances = generate_recurring_transactions(tx(INCOME, 100, "2026-03-01"), 2, Frequency.WEEK)
    assert [t.description for t in instances] == ["(1/2)", "(2/2)"]


def test_recurrence_requires_positive_count() -> None:
    with pytest.raises(ValidationError):
        generate_recurring_transactions(tx(INCOME, 100, "2026-03-01"), 0, Frequency.DAY)


# ---------------------------------------------------------------------------
# Overdue marking
# ---------------------------------------------------------------------------


def test_mark_overdue_switches_due_pending_only() -> None:
    records = [
        tx(EXPENSE, 100, "2026-03-14", id=1),
        tx(EXPENSE, 100, "2026-03-15", id=2),
        tx(EXPENSE, 100, "2026-03-16", id=3),
        tx(EXPENSE, 100, "2026-03-01", status=PAID, id=4),
    ]

    updated = mark_overdue(records, today=date(2026, 3, 15))

    assert [t.status for t in updated] == [OVERDUE, OVERDUE, PENDING, PAID]
    # Inputs are left untouched.
    assert records[0].status == PENDING


# ---------------------------------------------------------------------------
# Dashboard and summaries
# ---------------------------------------------------------------------------


def test_dashboard_metrics() -> None:
    records = [
        tx(INCOME, 50000, "2026-01-10", status=PAID, paid_on="2026-01-10"),
        tx(INCOME, 20000, "2026-03-05", status=PAID, paid_on="2026-03-06"),
        tx(EXPENSE, 8000, "2026-02-25", status=PAID, paid_on="2026-03-02"),
        tx(EXPENSE, 3000, "2026-03-20", status=PENDING),
        tx(EXPENSE, 999, "2026-03-01", status=OVERDUE),
        tx(INCOME, 4000, "2026-03-25", status=PENDING),
    ]

    m = dashboard_metrics(records, today=date(2026, 3, 15))

    assert m.current_balance == 50000 + 20000 - 8000
    assert m.month_income == 20000
    assert m.month_expenses == 8000
    assert m.pending_expenses == 3000


def test_transaction_summary_status_filter_keeps_breakdowns() -> None:
    march = Period(date(2026, 3, 1), date(2026, 3, 31), "March")
    records = [
        tx(INCOME, 10000, "2026-03-02", status=PAID),
        tx(INCOME, 2000, "2026-03-03", status=PENDING),
        tx(EXPENSE, 4000, "2026-03-04", status=PAID, category_id=1),
        tx(EXPENSE, 1500, "2026-03-05", status=OVERDUE, category_id=2),
        tx(EXPENSE, 7000, "2026-04-01", status=PAID),
    ]

    summary = transaction_summary(records, march, status=PAID)

    assert summary.total_income == 10000
    assert summary.total_expenses == 4000
    assert summary.balance == 6000
    assert summary.income_breakdown == StatusBreakdown(paid=10000, pending=2000, overdue=0)
    assert summary.expenses_breakdown == StatusBreakdown(paid=4000, pending=0, overdue=1500)

    by_category = transaction_summary(records, march, category_id=2)
    assert by_category.total_income == 0
    assert by_category.total_expenses == 1500
