# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Record types shared by the calendar layout and reporting engines.

All records are frozen dataclasses. They are built by a data-fetch layer
(CSV readers in ``io.py``, or any database layer) and consumed read-only by
the engines. Monetary values are always integers in minor units (cents).

Enumerations
------------
String-valued enumerations mirror the values stored upstream (for example
``"INCOME"``, ``"PAID"``, ``"AIRBNB"``), so records can be built directly
from raw rows with ``TransactionType(row["type"])``.

Errors
------
``ValidationError`` is raised when an interval is inverted or a date string
cannot be parsed. It subclasses ``ValueError`` so callers that already guard
against ``ValueError`` keep working.
"""

from collections.abc import Hashable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class ValidationError(ValueError):
    """Raised for invalid intervals and malformed date inputs."""


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class RentalSource(str, Enum):
    AIRBNB = "AIRBNB"
    DIRECT = "DIRECT"
    BLOCKED = "BLOCKED"


class Competency(str, Enum):
    """Date a rental's revenue is attributed to."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Frequency(str, Enum):
    """Step used when expanding a recurring transaction."""

    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"


@dataclass(frozen=True)
class Category:
    """Transaction category (name and chart colour)."""

    id: int
    name: str
    color: str = "#6B7280"


@dataclass(frozen=True)
class TransactionRecord:
    """
    Income or expense entry of an entity ledger.

    Attributes
    ----------
    id:
        Identifier, or None for instances that are not persisted yet
        (e.g. generated by ``generate_recurring_transactions``).
    type:
        INCOME or EXPENSE.
    amount:
        Positive amount in minor units (cents).
    due_date:
        Date the transaction is due. Period filters apply to this date.
    payment_date:
        Date the transaction was paid, if any.
    status:
        PENDING, PAID or OVERDUE.
    category_id:
        Optional category identifier.
    description:
        Free text label.
    """

    id: Optional[int]
    type: TransactionType
    amount: int
    due_date: date
    payment_date: Optional[date] = None
    status: TransactionStatus = TransactionStatus.PENDING
    category_id: Optional[int] = None
    description: str = ""


@dataclass(frozen=True)
class RentalRecord:
    """
    Short-term rental booking (or a blocked date range).

    ``start_date`` is the check-in day and ``end_date`` the check-out day.
    Occupied nights are the half-open interval ``[start_date, end_date)``.
    """

    id: int
    start_date: date
    end_date: date
    source: RentalSource
    total_amount: int = 0
    extra_fee_amount: Optional[int] = None
    guest_name: Optional[str] = None
    number_of_guests: Optional[int] = 1
    competency: Competency = Competency.CHECK_IN

    @property
    def competency_date(self) -> date:
        if self.competency == Competency.CHECK_OUT:
            return self.end_date
        return self.start_date


@dataclass(frozen=True)
class TaskRecord:
    """Agenda task. Single-day tasks have no ``end_date``."""

    id: int
    title: str
    due_date: date
    end_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING


@dataclass(frozen=True)
class ScheduledItem:
    """
    Date-ranged item placed on the calendar grid.

    Both bounds are inclusive; single-day items have ``end_date ==
    start_date``. ``tag`` only drives rendering (priority or rental source)
    and never affects layout.
    """

    id: Hashable
    start_date: date
    end_date: date
    tag: Optional[str] = None
    completed: bool = False

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1
