# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FinBoard.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the CLI and other I/O layers.

The computation modules never read configuration themselves: the values
loaded here are passed explicitly to them.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .periods import INTERVALS

DISPLAY_MODES: tuple[str, ...] = ("markdown", "json", "table", "both")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DataConfig:
    """Location of the input files (resolved relative to the TOML file)."""

    balance_sheets: Optional[Path]
    transactions: Optional[Path]


@dataclass(frozen=True)
class ReportingConfig:
    """
    Reporting defaults.

    Each call site keeps its own default interval: reports and the
    processing pipeline use ``report_interval``, chart series use
    ``chart_interval`` and dashboard transaction series use
    ``dashboard_interval``.
    """

    currency: str
    report_interval: str
    chart_interval: str
    dashboard_interval: str


@dataclass(frozen=True)
class NormalizerConfig:
    """Normalization policy (fallback behaviour and ratio denominators)."""

    strict: bool
    substitute_zero_totals: bool


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for FinBoard.

    This aggregates:
    - the input data locations,
    - reporting defaults (currency, per-call-site intervals),
    - the normalization policy,
    - display options (mode, ratio decimals, output directory),
    - the logging level.
    """

    data: DataConfig
    reporting: ReportingConfig
    normalizer: NormalizerConfig
    display_mode: str
    ratio_decimals: int
    output_dir: Optional[Path]
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _interval(section: Mapping[str, Any], key: str, default: str) -> str:
    value = str(section.get(key) or default)
    if value not in INTERVALS:
        raise ValueError(
            f"Invalid interval {value!r} for 'reporting.{key}'. "
            f"Expected one of: {', '.join(INTERVALS)}."
        )
    return value


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file is available."""
    return AppConfig(
        data=DataConfig(balance_sheets=None, transactions=None),
        reporting=ReportingConfig(
            currency="USD",
            report_interval="quarterToDate",
            chart_interval="allDates",
            dashboard_interval="last30days",
        ),
        normalizer=NormalizerConfig(strict=False, substitute_zero_totals=True),
        display_mode="markdown",
        ratio_decimals=2,
        output_dir=None,
        log_level="WARNING",
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the FinBoard application configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    -----------------------------------------------------------
    [data]
        ``balance_sheets`` and ``transactions``: paths to the input files.

    [reporting]
        ``currency`` (default "USD"), ``report_interval`` (default
        "quarterToDate"), ``chart_interval`` (default "allDates") and
        ``dashboard_interval`` (default "last30days").

    [normalizer]
        ``strict`` (default false): fail on unrecognized balance sheets
        instead of substituting the default statement.
        ``substitute_zero_totals`` (default true): replace zero totals by 1
        so that every ratio is defined.

    [display]
        ``mode`` ("markdown", "json", "table" or "both"),
        ``ratio_decimals`` (default 2), ``output_dir``.

    [logging]
        ``level`` (default "WARNING").

    All file paths are resolved relative to the directory of the TOML file.

    Parameters
    ----------
    config_path :
        Path to the TOML configuration file. Defaults to
        ``finboard_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path("finboard_config.toml").resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent
    defaults = default_app_config()

    def _resolve_optional(rel: Any) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    # 1) Data section
    data_section = _section(raw, "data")
    data = DataConfig(
        balance_sheets=_resolve_optional(data_section.get("balance_sheets")),
        transactions=_resolve_optional(data_section.get("transactions")),
    )

    # 2) Reporting section
    reporting_section = _section(raw, "reporting")
    reporting = ReportingConfig(
        currency=str(
            reporting_section.get("currency") or defaults.reporting.currency
        ).upper(),
        report_interval=_interval(
            reporting_section, "report_interval", defaults.reporting.report_interval
        ),
        chart_interval=_interval(
            reporting_section, "chart_interval", defaults.reporting.chart_interval
        ),
        dashboard_interval=_interval(
            reporting_section,
            "dashboard_interval",
            defaults.reporting.dashboard_interval,
        ),
    )

    # 3) Normalizer section
    normalizer_section = _section(raw, "normalizer")
    normalizer = NormalizerConfig(
        strict=bool(normalizer_section.get("strict", False)),
        substitute_zero_totals=bool(
            normalizer_section.get("substitute_zero_totals", True)
        ),
    )

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", defaults.display_mode))
    if display_mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid value for 'display.mode': {display_mode!r}. "
            f"Expected one of: {', '.join(DISPLAY_MODES)}."
        )
    try:
        ratio_decimals = int(display_section.get("ratio_decimals", 2))
    except (TypeError, ValueError):
        ratio_decimals = 2
    output_dir = _resolve_optional(display_section.get("output_dir"))

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", defaults.log_level)).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid value for 'logging.level': {log_level!r}. "
            f"Expected one of: {', '.join(LOG_LEVELS)}."
        )

    return AppConfig(
        data=data,
        reporting=reporting,
        normalizer=normalizer,
        display_mode=display_mode,
        ratio_decimals=ratio_decimals,
        output_dir=output_dir,
        log_level=log_level,
    )
