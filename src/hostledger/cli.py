# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for HostLedger.

This module wires together the main building blocks of HostLedger:

- application configuration (reporting, calendar, data paths, display),
- CSV readers for transactions, rentals, categories and tasks,
- the reporting engine (``reports.build_report``),
- ledger operations (``transactions_service``),
- the calendar layout engine,
- view helpers (pandas tables and text calendar).

The CLI is intentionally thin: it does not compute any figure itself.


Commands
--------

report
    Full report for a period: cash flow, expenses by category and status,
    occupancy, rental summary and source performance.

calendar
    Month grid of agenda tasks and/or rental bookings, with each item
    assigned a display row.

ledger
    Dashboard metrics and the income / expense summary of a period,
    optionally after marking due PENDING transactions as OVERDUE.


Period selection
----------------
``--period`` selects month, quarter, year, custom or all. Passing
``--from-date`` / ``--to-date`` without ``--period`` selects a custom
period. ``--today`` fixes the reference date (default: the local date).


Output
------
Depending on ``display.mode`` (or ``--display-mode``):

- table: tables printed to stdout (``DataFrame.to_string``),
- csv:   CSV files written to the output directory with timestamped names,
- both:  both of the above.


Examples
--------
    hostledger --transactions data/transactions.csv report --period year
    hostledger --rentals data/rentals.csv calendar --month 2024-03
    hostledger --config hostledger_config.toml ledger --mark-overdue
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .calendar_layout import layout_month, rental_item, task_item
from .config import DEFAULT_CONFIG_FILE, DISPLAY_MODES, AppConfig, load_app_config
from .dates import parse_date
from .io import read_categories, read_rentals, read_tasks, read_transactions
from .models import TransactionStatus
from .periods import PERIOD_TYPES, ReportQuery, reference_date, resolve_period
from .reports import build_report
from .transactions_service import dashboard_metrics, mark_overdue, transaction_summary
from .views import (
    dashboard_to_frame,
    layout_to_frame,
    render_calendar_text,
    report_to_frames,
    transaction_summary_to_frame,
)

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    "cash_flow": "Cash flow",
    "expenses_by_category": "Expenses by category",
    "expenses_by_status": "Expenses by category and status",
    "occupancy": "Occupancy",
    "rental_summary": "Rental summary",
    "source_performance": "Performance by source",
    "dashboard": "Dashboard",
    "transaction_summary": "Transactions summary",
    "calendar_layout": "Calendar layout",
}


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="hostledger",
        description=(
            "HostLedger - Bookkeeping & Short-Term Rental Reporting. "
            "Reads transactions, rentals and tasks from CSV files and renders "
            "reports, ledger summaries and calendar layouts."
        ),
    )

    ap.add_argument(
        "--version",
        action="version",
        version=f"hostledger version {__version__}",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when "
            "present, otherwise built-in defaults apply."
        ),
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging (overrides [logging] level).",
    )

    # Data overrides (optional, override the [data] section)
    ap.add_argument("--transactions", help="Transactions CSV file.")
    ap.add_argument("--rentals", help="Rentals CSV file.")
    ap.add_argument("--categories", help="Categories CSV file.")
    ap.add_argument("--tasks", help="Agenda tasks CSV file.")

    # Period selection
    ap.add_argument(
        "--period",
        choices=list(PERIOD_TYPES),
        help=(
            "Reporting period. If omitted, reporting.default_period from the "
            "configuration is used, or 'custom' when --from-date/--to-date "
            "are given."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD or DD/MM/YYYY).",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD or DD/MM/YYYY).",
    )
    ap.add_argument(
        "--today",
        help="Reference date for relative periods and forecasts (YYYY-MM-DD).",
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. Defaults to display.output_dir."
        ),
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command", required=True)

    subparsers.add_parser(
        "report",
        help="Cash flow, expenses, occupancy and rental figures for a period.",
    )

    calendar_parser = subparsers.add_parser(
        "calendar",
        help="Month grid layout of tasks and rental bookings.",
    )
    calendar_parser.add_argument(
        "--month",
        help="Month to display (YYYY-MM). Defaults to the month of --today.",
    )
    calendar_parser.add_argument(
        "--fixed-weeks",
        dest="fixed_weeks",
        action="store_true",
        default=None,
        help="Always render six weeks (overrides calendar.fixed_weeks).",
    )

    ledger_parser = subparsers.add_parser(
        "ledger",
        help="Dashboard metrics and period summary of the transactions.",
    )
    ledger_parser.add_argument(
        "--mark-overdue",
        dest="mark_overdue",
        action="store_true",
        help="Mark PENDING transactions due on or before today as OVERDUE first.",
    )
    ledger_parser.add_argument(
        "--status",
        choices=[s.value for s in TransactionStatus],
        help="Only count transactions with this status in the totals.",
    )
    ledger_parser.add_argument(
        "--category",
        type=int,
        help="Only count transactions of this category id.",
    )

    return ap


def _load_config(args: argparse.Namespace) -> AppConfig:
    """Load the configuration file, or defaults when none is available."""
    if args.config_path:
        return load_app_config(args.config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config(DEFAULT_CONFIG_FILE)
    return AppConfig()


def _configure_logging(args: argparse.Namespace, config: AppConfig) -> None:
    level = logging.DEBUG if args.verbose else config.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _input_path(cli_value: Optional[str], configured: Optional[Path]) -> Optional[Path]:
    if cli_value:
        return Path(cli_value)
    return configured


def _reference_today(args: argparse.Namespace) -> date:
    return reference_date(ReportQuery(today=parse_date(args.today)))


def _build_query(args: argparse.Namespace, config: AppConfig, today: date) -> ReportQuery:
    period_type = args.period
    if period_type is None:
        if args.from_date or args.to_date:
            period_type = "custom"
        else:
            period_type = config.reporting.default_period
    return ReportQuery(
        period_type=period_type,
        start_date=args.from_date,
        end_date=args.to_date,
        today=today,
    )


def _handle_report(
    args: argparse.Namespace, config: AppConfig, today: date
) -> tuple[list[str], dict[str, pd.DataFrame]]:
    transactions_path = _input_path(args.transactions, config.data.transactions)
    rentals_path = _input_path(args.rentals, config.data.rentals)
    categories_path = _input_path(args.categories, config.data.categories)
    if transactions_path is None and rentals_path is None:
        raise ValueError(
            "No input data: provide --transactions and/or --rentals, or set "
            "them in the [data] section of the configuration."
        )

    transactions = read_transactions(transactions_path) if transactions_path else []
    rentals = read_rentals(rentals_path) if rentals_path else []
    categories = read_categories(categories_path) if categories_path else {}

    report = build_report(
        _build_query(args, config, today),
        transactions,
        rentals,
        categories=categories,
        config=config.reporting,
    )
    header = [
        f"Period: {report.period.label}",
        f"Currency: {config.reporting.currency}",
    ]
    return header, report_to_frames(report)


def _handle_ledger(
    args: argparse.Namespace, config: AppConfig, today: date
) -> tuple[list[str], dict[str, pd.DataFrame]]:
    transactions_path = _input_path(args.transactions, config.data.transactions)
    if transactions_path is None:
        raise ValueError(
            "No transactions file: provide --transactions or set data.transactions "
            "in the configuration."
        )
    transactions = read_transactions(transactions_path)

    header = []
    if args.mark_overdue:
        before = sum(1 for t in transactions if t.status == TransactionStatus.OVERDUE)
        transactions = mark_overdue(transactions, today)
        after = sum(1 for t in transactions if t.status == TransactionStatus.OVERDUE)
        header.append(f"Marked {after - before} transaction(s) as OVERDUE.")

    period = resolve_period(_build_query(args, config, today))
    summary = transaction_summary(
        transactions,
        period,
        status=TransactionStatus(args.status) if args.status else None,
        category_id=args.category,
    )
    header.append(f"Period: {period.label}")
    return header, {
        "dashboard": dashboard_to_frame(dashboard_metrics(transactions, today)),
        "transaction_summary": transaction_summary_to_frame(summary),
    }


def _parse_month(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise ValueError(f"Invalid month: {value!r}. Expected YYYY-MM.") from exc
    return parsed.year, parsed.month


def _handle_calendar(
    args: argparse.Namespace, config: AppConfig, today: date
) -> tuple[list[str], dict[str, pd.DataFrame], str]:
    tasks_path = _input_path(args.tasks, config.data.tasks)
    rentals_path = _input_path(args.rentals, config.data.rentals)
    if tasks_path is None and rentals_path is None:
        raise ValueError(
            "No calendar data: provide --tasks and/or --rentals, or set them in "
            "the [data] section of the configuration."
        )

    items = []
    labels = {}
    if tasks_path:
        for task in read_tasks(tasks_path):
            item = task_item(task)
            items.append(item)
            labels[item.id] = task.title
    if rentals_path:
        for rental in read_rentals(rentals_path):
            item = rental_item(rental)
            items.append(item)
            labels[item.id] = rental.guest_name or rental.source.value

    year, month = _parse_month(args.month) if args.month else (today.year, today.month)
    fixed_weeks = (
        args.fixed_weeks if args.fixed_weeks is not None else config.calendar.fixed_weeks
    )
    layout = layout_month(
        items,
        year,
        month,
        first_weekday=config.calendar.first_weekday,
        fixed_weeks=fixed_weeks,
    )

    header = [
        f"Calendar {year:04d}-{month:02d}: {len(layout.rows)} item(s), "
        f"{layout.row_count} row(s)"
    ]
    grid = render_calendar_text(layout, labels)
    return header, {"calendar_layout": layout_to_frame(layout)}, grid


def _print_tables(frames: dict[str, pd.DataFrame]) -> None:
    for name, df in frames.items():
        print()
        print(f"=== {SECTION_TITLES.get(name, name)} ===")
        if df.empty:
            print("(no data)")
        else:
            print(df.to_string(index=False))


def _write_csv(frames: dict[str, pd.DataFrame], output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    for name, df in frames.items():
        path = output_dir / f"{name}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def main() -> None:
    """Entry point for the HostLedger CLI.

    This function parses command-line arguments, loads the configuration,
    reads the CSV inputs needed by the selected command, runs the engines,
    and renders the results as console tables and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args()

    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    _configure_logging(args, config)

    try:
        today = _reference_today(args)
        grid = None
        if args.command == "report":
            header, frames = _handle_report(args, config, today)
        elif args.command == "ledger":
            header, frames = _handle_ledger(args, config, today)
        else:
            header, frames, grid = _handle_calendar(args, config, today)
    except (FileNotFoundError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        raise SystemExit(f"Error: {exc}") from exc

    display_mode = args.display_mode or config.display.mode

    if display_mode in {"table", "both"}:
        for line in header:
            print(line)
        if grid is not None:
            print()
            print(grid)
        else:
            _print_tables(frames)

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else config.display.output_dir
        _write_csv(frames, output_dir)


if __name__ == "__main__":
    main()
