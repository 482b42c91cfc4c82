# HostLedger - Bookkeeping & Short-Term Rental Reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for HostLedger.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating reporting, calendar, display and logging options,
- exposing typed dataclasses used by the rest of the application.

Every section is optional: a missing section or key falls back to the
defaults below, so an empty file is a valid configuration.

Example
-------
    [reporting]
    currency = "BRL"
    default_period = "month"
    low_occupancy_threshold = 30
    uncategorized_label = "Sem Categoria"
    uncategorized_color = "#6B7280"

    [calendar]
    week_starts_on = "sunday"
    fixed_weeks = true

    [data]
    transactions = "data/transactions.csv"
    rentals = "data/rentals.csv"
    categories = "data/categories.csv"
    tasks = "data/tasks.csv"

    [display]
    mode = "table"
    output_dir = "data/output"

    [logging]
    level = "WARNING"
"""

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .dates import WEEKDAYS
from .engine import LOW_OCCUPANCY_THRESHOLD, UNCATEGORIZED_COLOR, UNCATEGORIZED_LABEL
from .periods import PERIOD_TYPES

DEFAULT_CONFIG_FILE = "hostledger_config.toml"

DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class ReportingConfig:
    """Options of the aggregation / reporting engine."""

    currency: str = "BRL"
    default_period: str = "month"
    low_occupancy_threshold: int = LOW_OCCUPANCY_THRESHOLD
    uncategorized_label: str = UNCATEGORIZED_LABEL
    uncategorized_color: str = UNCATEGORIZED_COLOR


@dataclass(frozen=True)
class CalendarConfig:
    """Options of the calendar layout engine."""

    first_weekday: int = WEEKDAYS["sunday"]
    fixed_weeks: bool = False


@dataclass(frozen=True)
class DataPaths:
    """Default CSV inputs, resolved relative to the configuration file."""

    transactions: Optional[Path] = None
    rentals: Optional[Path] = None
    categories: Optional[Path] = None
    tasks: Optional[Path] = None


@dataclass(frozen=True)
class DisplayConfig:
    mode: str = "table"
    output_dir: Path = Path("data/output")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for HostLedger.

    This aggregates:
    - reporting options (currency, default period, thresholds, labels),
    - calendar grid options,
    - default data file locations,
    - display options for the CLI,
    - the logging level.
    """

    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    data: DataPaths = field(default_factory=DataPaths)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = "WARNING"


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _parse_reporting(section: Mapping[str, Any]) -> ReportingConfig:
    defaults = ReportingConfig()

    default_period = str(section.get("default_period", defaults.default_period))
    if default_period not in PERIOD_TYPES:
        raise ValueError(
            f"Invalid reporting.default_period {default_period!r}. "
            f"Expected one of: {', '.join(PERIOD_TYPES)}."
        )

    raw_threshold = section.get(
        "low_occupancy_threshold", defaults.low_occupancy_threshold
    )
    try:
        threshold = int(raw_threshold)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'reporting.low_occupancy_threshold'. "
            "Expected an integer percentage."
        ) from exc
    if not 0 <= threshold <= 100:
        raise ValueError("reporting.low_occupancy_threshold must be within 0..100.")

    return ReportingConfig(
        currency=str(section.get("currency", defaults.currency)),
        default_period=default_period,
        low_occupancy_threshold=threshold,
        uncategorized_label=str(
            section.get("uncategorized_label", defaults.uncategorized_label)
        ),
        uncategorized_color=str(
            section.get("uncategorized_color", defaults.uncategorized_color)
        ),
    )


def _parse_calendar(section: Mapping[str, Any]) -> CalendarConfig:
    raw_weekday = str(section.get("week_starts_on", "sunday")).strip().lower()
    if raw_weekday not in WEEKDAYS:
        raise ValueError(
            f"Invalid calendar.week_starts_on {raw_weekday!r}. "
            "Expected a weekday name such as 'sunday' or 'monday'."
        )
    return CalendarConfig(
        first_weekday=WEEKDAYS[raw_weekday],
        fixed_weeks=bool(section.get("fixed_weeks", False)),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the HostLedger application configuration from a TOML file.

    Parameters
    ----------
    config_path:
        Path to the TOML file. Defaults to ``hostledger_config.toml`` in the
        current working directory.

    Returns
    -------
    AppConfig
        Parsed and validated configuration. All relative paths are resolved
        against the directory of the TOML file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed or holds invalid values.
    """
    config_file = Path(config_path or DEFAULT_CONFIG_FILE).resolve()
    raw = _load_toml(config_file)
    base_dir = config_file.parent

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    reporting = _parse_reporting(_section(raw, "reporting"))
    calendar = _parse_calendar(_section(raw, "calendar"))

    data_section = _section(raw, "data")
    data = DataPaths(
        transactions=_resolve_optional(data_section.get("transactions")),
        rentals=_resolve_optional(data_section.get("rentals")),
        categories=_resolve_optional(data_section.get("categories")),
        tasks=_resolve_optional(data_section.get("tasks")),
    )

    display_section = _section(raw, "display")
    mode = str(display_section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display.mode {mode!r}. Expected one of: table, csv, both."
        )
    output_dir = (base_dir / str(display_section.get("output_dir", "data/output"))).resolve()

    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ValueError(f"Invalid logging.level {log_level!r}.")

    return AppConfig(
        reporting=reporting,
        calendar=calendar,
        data=data,
        display=DisplayConfig(mode=mode, output_dir=output_dir),
        log_level=log_level,
    )
