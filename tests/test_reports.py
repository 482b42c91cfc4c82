from datetime import date

from hostledger.config import ReportingConfig
from hostledger.models import (
    Category,
    Competency,
    RentalRecord,
    RentalSource,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
)
from hostledger.periods import ReportQuery
from hostledger.reports import build_report

TODAY = date(2026, 3, 15)


def sample_transactions() -> list[TransactionRecord]:
    return [
        TransactionRecord(1, TransactionType.INCOME, 10000, date(2026, 3, 15), status=TransactionStatus.PAID),
        TransactionRecord(2, TransactionType.EXPENSE, 4000, date(2026, 3, 20), status=TransactionStatus.PAID, category_id=1),
        TransactionRecord(3, TransactionType.EXPENSE, 2500, date(2026, 1, 5), status=TransactionStatus.PENDING),
    ]


def sample_rentals() -> list[RentalRecord]:
    return [
        RentalRecord(1, date(2026, 2, 26), date(2026, 3, 3), RentalSource.AIRBNB, total_amount=60000, guest_name="Ana"),
        RentalRecord(2, date(2026, 3, 10), date(2026, 3, 14), RentalSource.DIRECT, total_amount=40000, guest_name="Ana"),
        RentalRecord(
            3,
            date(2026, 3, 28),
            date(2026, 4, 2),
            RentalSource.AIRBNB,
            total_amount=50000,
            competency=Competency.CHECK_OUT,
        ),
    ]


CATEGORIES = {1: Category(1, "Limpeza", "#3B82F6")}


def test_month_report_sections_share_one_period() -> None:
    report = build_report(
        ReportQuery(period_type="month", today=TODAY),
        sample_transactions(),
        sample_rentals(),
        categories=CATEGORIES,
    )

    assert (report.period.start, report.period.end) == (date(2026, 3, 1), date(2026, 3, 31))
    assert report.today == TODAY
    assert [(p.month, p.income, p.expense) for p in report.cash_flow] == [("2026-03", 10000, 4000)]
    assert [(s.name, s.value) for s in report.category_distribution] == [("Limpeza", 4000)]
    assert [p.month for p in report.occupancy] == ["2026-03"]

    # Rental 1 checks in during February, rental 3 checks out in April.
    assert report.financial_summary.count == 1
    assert report.financial_summary.total == 40000
    # Occupancy still counts the March nights of every rental:
    # 1-2 March, 10-13 March, 28-31 March.
    assert report.occupancy[0].occupied == 10


def test_report_forecast_uses_all_rentals() -> None:
    report = build_report(
        ReportQuery(period_type="month", today=TODAY),
        [],
        sample_rentals(),
    )
    assert report.forecast.confirmed_count == 1
    assert report.forecast.confirmed_revenue == 50000
    assert report.forecast.low_occupancy_months == ()


def test_report_threshold_and_labels_come_from_config() -> None:
    config = ReportingConfig(
        low_occupancy_threshold=50,
        uncategorized_label="Other",
        uncategorized_color="#111111",
    )
    report = build_report(
        ReportQuery(period_type="month", today=TODAY),
        sample_transactions(),
        sample_rentals(),
        config=config,
    )
    assert report.forecast.low_occupancy_months == ("2026-03",)
    assert report.category_distribution[0].name == "Other"
    assert report.category_breakdown[0].color == "#111111"


def test_custom_query_with_single_bound_reports_all_data() -> None:
    report = build_report(
        ReportQuery(period_type="custom", start_date="2026-03-01", today=TODAY),
        sample_transactions(),
        sample_rentals(),
    )

    assert report.period.start is None and report.period.end is None
    assert [p.month for p in report.cash_flow] == ["2026-01", "2026-02", "2026-03"]
    assert report.financial_summary.count == 3
    assert report.guest_stats.recurring_guest_count == 1
    # Open bounds never shorten the first or last booked month.
    assert [(p.month, p.occupied, p.total) for p in report.occupancy] == [
        ("2026-02", 3, 28),
        ("2026-03", 10, 31),
        ("2026-04", 1, 30),
    ]


def test_report_on_empty_data_is_all_zero() -> None:
    report = build_report(ReportQuery(period_type="all", today=TODAY), [], [])

    assert report.cash_flow == []
    assert report.occupancy == []
    assert report.financial_summary.average == 0
    assert report.guest_stats.avg_guests == 0
    assert report.forecast.confirmed_count == 0


def test_report_is_idempotent() -> None:
    query = ReportQuery(period_type="quarter", today=TODAY)
    first = build_report(query, sample_transactions(), sample_rentals(), CATEGORIES)
    second = build_report(query, sample_transactions(), sample_rentals(), CATEGORIES)
    assert first == second
