from datetime import date

import pytest

from hostledger.engine import (
    FinancialSummary,
    GuestStats,
    OccupancyPoint,
    cash_flow,
    category_distribution,
    category_status_breakdown,
    financial_summary,
    forecast,
    guest_stats,
    occupancy_by_month,
    rentals_in_period,
    round_half_up,
    source_performance,
)
from hostledger.models import (
    Category,
    Competency,
    RentalRecord,
    RentalSource,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    ValidationError,
)
from hostledger.periods import Period

MARCH_2026 = Period(date(2026, 3, 1), date(2026, 3, 31), "March 2026")
ALL = Period(None, None, "All periods")

CATEGORIES = {
    1: Category(1, "Limpeza", "#3B82F6"),
    2: Category(2, "Manutenção", "#F59E0B"),
}


def tx(kind, amount, due, status=TransactionStatus.PAID, category_id=None, id=1):
    """Helper to build a TransactionRecord."""
    return TransactionRecord(
        id=id,
        type=kind,
        amount=amount,
        due_date=date.fromisoformat(due),
        status=status,
        category_id=category_id,
    )


def rental(
    start,
    end,
    source=RentalSource.AIRBNB,
    total=0,
    fee=None,
    guest=None,
    guests=1,
    competency=Competency.CHECK_IN,
    id=1,
):
    return RentalRecord(
        id=id,
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        source=source,
        total_amount=total,
        extra_fee_amount=fee,
        guest_name=guest,
        number_of_guests=guests,
        competency=competency,
    )


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "num, den, expected",
    [(5, 2, 3), (1, 2, 1), (1, 3, 0), (2, 3, 1), (10, 0, 0), (0, 0, 0)],
)
def test_round_half_up(num, den, expected) -> None:
    assert round_half_up(num, den) == expected


# ---------------------------------------------------------------------------
# Cash flow
# ---------------------------------------------------------------------------


def test_cash_flow_single_month() -> None:
    points = cash_flow(
        [
            tx(INCOME, 10000, "2026-03-15"),
            tx(EXPENSE, 4000, "2026-03-20"),
        ],
        MARCH_2026,
    )
    assert len(points) == 1
    assert points[0].month == "2026-03"
    assert points[0].income == 10000
    assert points[0].expense == 4000
    assert points[0].net == 6000


def test_cash_flow_ignores_unpaid_and_out_of_range() -> None:
    points = cash_flow(
        [
            tx(INCOME, 10000, "2026-03-15", status=TransactionStatus.PENDING),
            tx(EXPENSE, 4000, "2026-03-20", status=TransactionStatus.OVERDUE),
            tx(INCOME, 999, "2026-04-01"),
        ],
        MARCH_2026,
    )
    assert [(p.income, p.expense) for p in points] == [(0, 0)]


def test_cash_flow_enumerates_empty_months() -> None:
    period = Period(date(2026, 1, 1), date(2026, 3, 31), "Q1")
    points = cash_flow([tx(INCOME, 500, "2026-03-02")], period)

    assert [p.month for p in points] == ["2026-01", "2026-02", "2026-03"]
    assert [p.income for p in points] == [0, 0, 500]


def test_cash_flow_unbounded_uses_data_range() -> None:
    points = cash_flow(
        [tx(INCOME, 100, "2026-01-10"), tx(EXPENSE, 50, "2026-03-05")], ALL
    )
    assert [p.month for p in points] == ["2026-01", "2026-02", "2026-03"]
    assert cash_flow([], ALL) == []


def test_cash_flow_is_additive() -> None:
    records = [
        tx(INCOME, 1000, "2026-01-05"),
        tx(INCOME, 2500, "2026-02-11"),
        tx(INCOME, 700, "2026-02-12", status=TransactionStatus.PENDING),
        tx(EXPENSE, 300, "2026-01-20"),
        tx(EXPENSE, 450, "2026-03-31"),
        tx(EXPENSE, 800, "2026-04-01"),
    ]
    period = Period(date(2026, 1, 1), date(2026, 3, 31), "Q1")
    points = cash_flow(records, period)

    paid_in_range = [
        r for r in records if r.status == TransactionStatus.PAID and period.contains(r.due_date)
    ]
    assert sum(p.income for p in points) == sum(r.amount for r in paid_in_range if r.type == INCOME)
    assert sum(p.expense for p in points) == sum(
        r.amount for r in paid_in_range if r.type == EXPENSE
    )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def expense_records():
    return [
        tx(EXPENSE, 3000, "2026-03-01", category_id=1),
        tx(EXPENSE, 1000, "2026-03-02", status=TransactionStatus.PENDING, category_id=1),
        tx(EXPENSE, 5000, "2026-03-03", status=TransactionStatus.OVERDUE, category_id=2),
        tx(EXPENSE, 2000, "2026-03-04"),
        tx(EXPENSE, 500, "2026-03-05", category_id=99),
        tx(INCOME, 90000, "2026-03-06", category_id=1),
        tx(EXPENSE, 7777, "2026-04-06", category_id=1),
    ]


def test_category_distribution_sorted_with_uncategorized_bucket() -> None:
    slices = category_distribution(expense_records(), MARCH_2026, CATEGORIES)

    assert [(s.name, s.value) for s in slices] == [
        ("Manutenção", 5000),
        ("Limpeza", 4000),
        ("Sem Categoria", 2500),
    ]
    assert slices[-1].color == "#6B7280"
    assert slices[-1].category_id is None


def test_category_status_breakdown_totals() -> None:
    rows = category_status_breakdown(expense_records(), MARCH_2026, CATEGORIES)
    by_name = {r.name: r for r in rows}

    limpeza = by_name["Limpeza"]
    assert (limpeza.paid, limpeza.pending, limpeza.overdue) == (3000, 1000, 0)
    assert limpeza.total == 4000
    assert by_name["Manutenção"].overdue == 5000
    assert by_name["Sem Categoria"].paid == 2500


def test_category_ties_are_ordered_by_name() -> None:
    records = [
        tx(EXPENSE, 100, "2026-03-01", category_id=2),
        tx(EXPENSE, 100, "2026-03-01", category_id=1),
    ]
    slices = category_distribution(records, MARCH_2026, CATEGORIES)
    assert [s.name for s in slices] == ["Limpeza", "Manutenção"]


def test_category_distribution_custom_label() -> None:
    slices = category_distribution(
        [tx(EXPENSE, 100, "2026-03-01")],
        MARCH_2026,
        uncategorized_label="Uncategorized",
        uncategorized_color="#000000",
    )
    assert slices[0].name == "Uncategorized"
    assert slices[0].color == "#000000"


def test_category_distribution_empty() -> None:
    assert category_distribution([], MARCH_2026, CATEGORIES) == []


# ---------------------------------------------------------------------------
# Occupancy
# ---------------------------------------------------------------------------


def test_occupancy_fifteen_of_thirty_one_days() -> None:
    points = occupancy_by_month(
        [rental("2026-03-01", "2026-03-11"), rental("2026-03-20", "2026-03-25")],
        MARCH_2026,
    )
    assert points == [OccupancyPoint(month="2026-03", occupied=15, total=31, percent=48)]


def test_occupancy_counts_overlapping_days_once() -> None:
    points = occupancy_by_month(
        [rental("2026-03-01", "2026-03-11"), rental("2026-03-05", "2026-03-08")],
        MARCH_2026,
    )
    assert points[0].occupied == 10
    assert points[0].percent == 32


def test_occupancy_partial_months() -> None:
    period = Period(date(2026, 3, 15), date(2026, 4, 10), "custom")
    points = occupancy_by_month([rental("2026-03-30", "2026-04-03")], period)

    assert [(p.month, p.occupied, p.total, p.percent) for p in points] == [
        ("2026-03", 2, 17, 12),
        ("2026-04", 2, 10, 20),
    ]


def test_checkout_day_is_not_occupied() -> None:
    april = Period(date(2026, 4, 1), date(2026, 4, 30), "April")
    points = occupancy_by_month([rental("2026-03-31", "2026-04-01")], april)
    assert points[0].occupied == 0
    assert points[0].percent == 0


def test_occupancy_stays_within_bounds() -> None:
    rentals = [
        rental("2026-02-20", "2026-03-10"),
        rental("2026-03-01", "2026-03-31"),
        rental("2026-03-15", "2026-04-15"),
        rental("2026-03-15", "2026-03-15"),
    ]
    period = Period(date(2026, 2, 1), date(2026, 4, 30), "custom")
    for p in occupancy_by_month(rentals, period):
        assert 0 <= p.percent <= 100
        assert 0 <= p.occupied <= p.total


def test_occupancy_unbounded_without_rentals_is_empty() -> None:
    assert occupancy_by_month([], ALL) == []


def test_occupancy_unbounded_counts_whole_months() -> None:
    rentals = [rental("2026-03-20", "2026-03-25")]

    points = occupancy_by_month(rentals, ALL)

    assert points == [OccupancyPoint(month="2026-03", occupied=5, total=31, percent=16)]
    low = forecast(rentals, points, today=date(2026, 3, 1)).low_occupancy_months
    assert low == ("2026-03",)


def test_occupancy_unbounded_spans_every_booked_month() -> None:
    points = occupancy_by_month([rental("2026-03-30", "2026-04-03")], ALL)

    assert [(p.month, p.occupied, p.total, p.percent) for p in points] == [
        ("2026-03", 2, 31, 6),
        ("2026-04", 2, 30, 7),
    ]


def test_occupancy_rejects_inverted_rental() -> None:
    with pytest.raises(ValidationError):
        occupancy_by_month([rental("2026-03-10", "2026-03-01")], MARCH_2026)


# ---------------------------------------------------------------------------
# Rental summaries
# ---------------------------------------------------------------------------


def test_financial_summary_empty() -> None:
    assert financial_summary([]) == FinancialSummary(
        total=0, average=0, by_source={}, taxes_total=0, count=0
    )


def test_financial_summary_values() -> None:
    summary = financial_summary(
        [
            rental("2026-03-01", "2026-03-03", RentalSource.AIRBNB, total=10000, fee=500),
            rental("2026-03-05", "2026-03-09", RentalSource.DIRECT, total=20001),
            rental("2026-03-10", "2026-03-12", RentalSource.BLOCKED, total=0),
        ]
    )
    assert summary.total == 30001
    assert summary.average == 10000
    assert summary.by_source == {"AIRBNB": 10000, "DIRECT": 20001, "BLOCKED": 0}
    assert summary.taxes_total == 500
    assert summary.count == 3


def test_guest_stats() -> None:
    stats = guest_stats(
        [
            rental("2026-03-01", "2026-03-05", guest="Ana", guests=2),
            rental("2026-03-10", "2026-03-12", guest="Ana", guests=None),
            rental("2026-03-13", "2026-03-20", guest="Bruno", guests=4),
            rental("2026-03-21", "2026-03-22", guests=3),
        ]
    )
    assert stats.recurring_guest_count == 1
    assert stats.avg_guests == 2.5
    assert stats.avg_stay_days == 3.5
    assert stats.count == 4


def test_guest_stats_round_to_two_decimals() -> None:
    stats = guest_stats(
        [
            rental("2026-03-01", "2026-03-02"),
            rental("2026-03-03", "2026-03-04"),
            rental("2026-03-05", "2026-03-07"),
        ]
    )
    assert stats.avg_stay_days == 1.33


def test_guest_stats_empty() -> None:
    assert guest_stats([]) == GuestStats()


def test_source_performance() -> None:
    perf = source_performance(
        [
            rental("2026-03-01", "2026-03-03", RentalSource.AIRBNB, total=10000),
            rental("2026-03-04", "2026-03-06", RentalSource.DIRECT, total=5000),
            rental("2026-03-07", "2026-03-09", RentalSource.AIRBNB, total=10001),
        ]
    )
    assert [(p.source, p.count, p.revenue, p.avg_ticket) for p in perf] == [
        ("AIRBNB", 2, 20001, 10001),
        ("DIRECT", 1, 5000, 5000),
    ]
    assert source_performance([]) == []


def test_rentals_in_period_uses_competency_date() -> None:
    by_check_out = rental("2026-02-27", "2026-03-02", competency=Competency.CHECK_OUT, id=1)
    by_check_in = rental("2026-02-27", "2026-03-02", id=2)

    scoped = rentals_in_period([by_check_out, by_check_in], MARCH_2026)

    assert [r.id for r in scoped] == [1]


def test_forecast_with_injected_today() -> None:
    rentals = [
        rental("2026-03-10", "2026-03-12", total=1000),
        rental("2026-03-15", "2026-03-18", total=2000),
        rental("2026-04-01", "2026-04-05", total=3000),
    ]
    occupancy = [
        OccupancyPoint("2026-03", 10, 31, 32),
        OccupancyPoint("2026-04", 4, 30, 13),
        OccupancyPoint("2026-05", 0, 31, 0),
    ]

    result = forecast(rentals, occupancy, today=date(2026, 3, 15))

    assert result.confirmed_count == 2
    assert result.confirmed_revenue == 5000
    assert result.low_occupancy_months == ("2026-04", "2026-05")

    stricter = forecast(rentals, occupancy, today=date(2026, 3, 15), threshold=50)
    assert stricter.low_occupancy_months == ("2026-03", "2026-04", "2026-05")
