# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for HostLedger.

This module reads transactions, rentals, categories and agenda tasks from
CSV files and normalizes them into the record types of ``models.py``.
Column names are case-insensitive and surrounding spaces are ignored.

Expected columns
----------------

Transactions
    id, type, due_date, amount | amount_cents
    optional: payment_date, status (default PENDING), category_id,
    description

Rentals
    id, start_date, end_date, source, total_amount | total_amount_cents
    optional: extra_fee_amount | extra_fee_amount_cents, guest_name,
    number_of_guests, competency (default CHECK_IN)

Categories
    id, name
    optional: color

Tasks
    id, title, due_date
    optional: end_date, priority (default MEDIUM), status (default PENDING)

Amounts
-------
Monetary columns come in two flavours:

- ``<name>_cents``: integer amount in minor units, used as is,
- ``<name>``: decimal amount in major units (e.g. ``150.25``), converted to
  cents with half-up rounding.

When both are present, the ``_cents`` column wins.

Dates
-----
Dates are ``YYYY-MM-DD`` or ``DD/MM/YYYY``. Invalid dates raise
``ValidationError``; structural problems (missing columns, invalid numbers
or enumeration values) raise ``ValueError`` with the offending row.
"""

import logging
import os
from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, TypeVar, Union

import pandas as pd

from .dates import parse_date
from .models import (
    Category,
    Competency,
    RentalRecord,
    RentalSource,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    ValidationError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

T = TypeVar("T")


def _read_csv(path: PathLike, required: Iterable[str], kind: str) -> pd.DataFrame:
    """Read a CSV as strings, normalize headers and check required columns."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.lower().strip() for c in df.columns]

    missing = sorted(set(required) - set(df.columns))
    if missing:
        raise ValueError(
            f"Invalid {kind} structure in {path}: missing column(s) "
            f"{', '.join(missing)}."
        )

    for column in df.columns:
        df[column] = df[column].astype(str).str.strip()
    return df


def _opt(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column, "")
    return value if value != "" else None


def _to_int(value: Optional[str], column: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer in column '{column}': {value!r}") from exc


def to_cents(value: Union[str, float, int]) -> int:
    """Convert a major-unit amount (``'150.25'``) to minor units (15025)."""
    try:
        amount = Decimal(str(value).replace(",", "."))
        cents = (amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not cents.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return int(cents)


def _money(row: pd.Series, column: str) -> Optional[int]:
    cents = _opt(row, f"{column}_cents")
    if cents is not None:
        return _to_int(cents, f"{column}_cents")
    major = _opt(row, column)
    if major is not None:
        return to_cents(major)
    return None


def _enum(enum_cls: Callable[[str], T], value: Optional[str], default: T) -> T:
    if value is None:
        return default
    try:
        return enum_cls(value.upper())
    except ValueError as exc:
        raise ValueError(f"Invalid value {value!r} for {enum_cls.__name__}") from exc


def _required_date(row: pd.Series, column: str):
    d = parse_date(_opt(row, column))
    if d is None:
        raise ValidationError(f"Missing date in column '{column}'.")
    return d


def _convert_rows(
    df: pd.DataFrame, convert: Callable[[pd.Series], T], kind: str
) -> list[T]:
    records = []
    for idx, row in df.iterrows():
        try:
            records.append(convert(row))
        except ValueError as exc:
            # ValidationError keeps its type so callers can tell bad dates apart.
            raise type(exc)(f"{kind} row {idx + 1}: {exc}") from exc
    logger.debug("Read %d %s records", len(records), kind)
    return records


def _has_money_column(df: pd.DataFrame, column: str) -> bool:
    return column in df.columns or f"{column}_cents" in df.columns


def read_transactions(path: PathLike) -> list[TransactionRecord]:
    """Read ledger transactions from a CSV file."""
    df = _read_csv(path, {"id", "type", "due_date"}, "transactions")
    if not _has_money_column(df, "amount"):
        raise ValueError(
            f"Invalid transactions structure in {path}: expected an 'amount' "
            "or 'amount_cents' column."
        )

    def convert(row: pd.Series) -> TransactionRecord:
        return TransactionRecord(
            id=_to_int(_opt(row, "id"), "id"),
            type=_enum(TransactionType, _opt(row, "type"), TransactionType.EXPENSE),
            amount=_money(row, "amount") or 0,
            due_date=_required_date(row, "due_date"),
            payment_date=parse_date(_opt(row, "payment_date")),
            status=_enum(
                TransactionStatus, _opt(row, "status"), TransactionStatus.PENDING
            ),
            category_id=_to_int(_opt(row, "category_id"), "category_id"),
            description=row.get("description", ""),
        )

    return _convert_rows(df, convert, "transactions")


def read_rentals(path: PathLike) -> list[RentalRecord]:
    """Read rental bookings from a CSV file."""
    df = _read_csv(path, {"id", "start_date", "end_date", "source"}, "rentals")

    def convert(row: pd.Series) -> RentalRecord:
        return RentalRecord(
            id=_to_int(_opt(row, "id"), "id"),
            start_date=_required_date(row, "start_date"),
            end_date=_required_date(row, "end_date"),
            source=_enum(RentalSource, _opt(row, "source"), RentalSource.DIRECT),
            total_amount=_money(row, "total_amount") or 0,
            extra_fee_amount=_money(row, "extra_fee_amount"),
            guest_name=_opt(row, "guest_name"),
            number_of_guests=_to_int(_opt(row, "number_of_guests"), "number_of_guests"),
            competency=_enum(Competency, _opt(row, "competency"), Competency.CHECK_IN),
        )

    return _convert_rows(df, convert, "rentals")


def read_categories(path: PathLike) -> dict[int, Category]:
    """Read categories from a CSV file, keyed by id."""
    df = _read_csv(path, {"id", "name"}, "categories")

    def convert(row: pd.Series) -> Category:
        fields = {"id": _to_int(_opt(row, "id"), "id"), "name": row["name"]}
        color = _opt(row, "color")
        if color is not None:
            fields["color"] = color
        return Category(**fields)

    return {c.id: c for c in _convert_rows(df, convert, "categories")}


def read_tasks(path: PathLike) -> list[TaskRecord]:
    """Read agenda tasks from a CSV file."""
    df = _read_csv(path, {"id", "title", "due_date"}, "tasks")

    def convert(row: pd.Series) -> TaskRecord:
        return TaskRecord(
            id=_to_int(_opt(row, "id"), "id"),
            title=row["title"],
            due_date=_required_date(row, "due_date"),
            end_date=parse_date(_opt(row, "end_date")),
            priority=_enum(TaskPriority, _opt(row, "priority"), TaskPriority.MEDIUM),
            status=_enum(TaskStatus, _opt(row, "status"), TaskStatus.PENDING),
        )

    return _convert_rows(df, convert, "tasks")
