# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
HostLedger
----------

Bookkeeping and short-term rental reporting for small hosts. The package
provides two pure computation engines and a thin command-line interface:

- a calendar layout engine placing date-ranged items (agenda tasks, rental
  bookings) on a month grid without visual collisions,
- an aggregation engine producing cash flow, expense distribution,
  occupancy, revenue, guest and forecast figures for a reporting period,
- ledger operations (recurring transactions, overdue marking, dashboard
  metrics, period summaries),
- CSV readers, TOML configuration, and pandas views for tables and exports.

HostLedger separates computation (engines), configuration (TOML), and
presentation (CLI), so the engines can be reused behind any data layer.


Version: 0.1.0

Usage:
    python -m hostledger.cli --help
"""

__all__ = ["calendar_layout", "engine", "reports", "views", "io"]

__version__ = "0.1.0"
