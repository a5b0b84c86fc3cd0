# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FinBoard.

This module wires together the building blocks of FinBoard:

- application configuration (input files, reporting defaults, display),
- input files (balance sheets and transactions),
- statement normalization and ratios,
- nearest-date lookup and interval filtering,
- chart series and the markdown report.

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and configuration.


Configuration and overrides
---------------------------

By default, the CLI reads ``finboard_config.toml`` from the current
working directory when it exists, and falls back to built-in defaults
otherwise. You can point to another file with:

    --config PATH

The following arguments override the configuration for the current run
only:

- ``--balance-sheets PATH`` / ``--transactions PATH``: input files,
- ``--display-mode markdown|json|table|both``,
- ``--output DIR``: directory for files written in ``both`` mode,
- ``--strict``: fail on unrecognized balance sheets,
- ``--log-level LEVEL``.


Commands
--------

``dates``
    List the available statement dates, newest first.

``nearest DATE``
    Show the statement nearest to DATE (totals, breakdowns, ratios).

``charts [--interval TOKEN]``
    Build the chart series (major financials, ratios, revenue, expense,
    profit). The interval defaults to ``reporting.chart_interval``
    (``allDates``).

``report [--date DATE] [--interval TOKEN]``
    Render the markdown report for the statement nearest to DATE (the
    most recent statement when DATE is omitted). The interval defaults to
    ``reporting.report_interval`` (``quarterToDate``).

``process [--date DATE] [--interval TOKEN]``
    Run the full pipeline (available dates, charts, target statement,
    report, related transactions).


Display modes
-------------

- ``markdown`` (default): reports as markdown, other results as tables,
- ``json``: JSON on stdout,
- ``table``: pandas text tables on stdout,
- ``both``: markdown/tables on stdout, and JSON (plus the markdown
  report when there is one) written to the output directory with a
  timestamp-based name, e.g. ``report_YYYY-MM-DD-HH-MM-SS.md``.


Examples
--------

    python -m finboard.cli --balance-sheets data/balance_sheets.json dates
    python -m finboard.cli report --date 2023-08-01 --interval yearToDate
    python -m finboard.cli --display-mode json charts --interval 5years
"""

import argparse
import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from . import __version__
from .config import (
    DISPLAY_MODES,
    LOG_LEVELS,
    AppConfig,
    default_app_config,
    load_app_config,
)
from .date_index import available_dates, find_nearest_statement
from .io import read_balance_sheets, read_transactions
from .periods import INTERVALS
from .pipeline import ProcessResult, process_financial_data
from .report import build_report, format_currency, ratios_to_dataframe
from .series import ChartBundle, build_series, build_transaction_series
from .statements import Statement, normalize_statements

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m finboard.cli",
        description=(
            "FinBoard - Financial reporting dashboard core. Normalizes balance "
            "sheets, computes ratios, builds chart series and renders "
            "markdown reports."
        ),
    )
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the FinBoard version and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help="Path to the TOML configuration file (default: finboard_config.toml).",
    )
    ap.add_argument(
        "--balance-sheets",
        dest="balance_sheets",
        help="JSON file with balance sheets (overrides data.balance_sheets).",
    )
    ap.add_argument(
        "--transactions",
        dest="transactions",
        help="JSON or CSV file with transactions (overrides data.transactions).",
    )
    ap.add_argument(
        "--display-mode",
        choices=DISPLAY_MODES,
        help="Output mode (overrides display.mode).",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Directory for files written in 'both' mode (default: data/output).",
    )
    ap.add_argument(
        "--strict",
        action="store_true",
        help="Fail on unrecognized balance sheets instead of using defaults.",
    )
    ap.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level (overrides logging.level).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("dates", help="List available statement dates.")

    nearest = subparsers.add_parser(
        "nearest", help="Show the statement nearest to a date."
    )
    nearest.add_argument("date", help="Target date (YYYY-MM-DD).")

    charts = subparsers.add_parser("charts", help="Build chart series.")
    charts.add_argument("--interval", choices=INTERVALS)

    report = subparsers.add_parser("report", help="Render the markdown report.")
    report.add_argument("--date", dest="target_date", help="Target date (YYYY-MM-DD).")
    report.add_argument("--interval", choices=INTERVALS)

    process = subparsers.add_parser("process", help="Run the full pipeline.")
    process.add_argument("--date", dest="target_date", help="Target date (YYYY-MM-DD).")
    process.add_argument("--interval", choices=INTERVALS)

    return ap


def _load_config(config_path: Optional[str]) -> AppConfig:
    if config_path:
        return load_app_config(config_path)
    if Path("finboard_config.toml").is_file():
        return load_app_config()
    return default_app_config()


def _resolve_input(
    cli_value: Optional[str],
    configured: Optional[Path],
) -> Optional[Path]:
    if cli_value:
        return Path(cli_value)
    return configured


def _emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _write_outputs(
    output_dir: Path,
    name: str,
    payload: Any,
    markdown: Optional[str] = None,
) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    path = output_dir / f"{name}_{timestamp}.json"
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote {path}")

    if markdown:
        md_path = output_dir / f"{name}_{timestamp}.md"
        md_path.write_text(markdown, encoding="utf-8")
        print(f"Wrote {md_path}")


def _statement_tables(statement: Statement, currency: str, decimals: int) -> str:
    totals = pd.DataFrame(
        [
            {"item": label, "amount": format_currency(value, currency)}
            for label, value in (
                ("Total Assets", statement.total_asset),
                ("Total Liabilities", statement.total_liability),
                ("Total Equity", statement.total_equity),
                ("Net Income", statement.net_income),
            )
        ]
    )
    ratios = ratios_to_dataframe(statement.ratios, decimals=decimals)
    return (
        f"=== Statement {statement.date} ===\n"
        f"{totals.to_string(index=False)}\n\n"
        f"=== Ratios ===\n"
        f"{ratios.to_string(index=False)}"
    )


def _chart_tables(bundle: ChartBundle) -> str:
    blocks = [("Major financials", bundle.major_financials)]
    blocks.extend((key, series) for key, series in bundle.ratios.items())
    blocks.extend(
        [
            ("Revenue", bundle.revenue),
            ("Expense", bundle.expense),
            ("Profit", bundle.profit),
        ]
    )

    out: list[str] = []
    for title, series in blocks:
        frame = series.to_frame()
        body = frame.to_string(index=False) if not frame.empty else "(no data)"
        out.append(f"=== {title} ===\n{body}")
    return "\n\n".join(out)


def _handle_dates(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
) -> None:
    dates = available_dates(sheets)
    if config.display_mode == "json":
        _emit_json(dates)
        return
    if not dates:
        print("No dated balance sheets found.")
    for value in dates:
        print(value)
    if config.display_mode == "both":
        _write_outputs(config.output_dir or Path("data/output"), "dates", dates)


def _handle_nearest(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
) -> None:
    statements = normalize_statements(
        sheets,
        strict=config.normalizer.strict,
        substitute_zero_totals=config.normalizer.substitute_zero_totals,
    )
    statement = find_nearest_statement(statements, args.date)
    if statement is None:
        print("No balance sheets available.")
        return

    if config.display_mode == "json":
        _emit_json(statement.as_raw())
        return

    print(
        _statement_tables(statement, config.reporting.currency, config.ratio_decimals)
    )
    if config.display_mode == "both":
        _write_outputs(
            config.output_dir or Path("data/output"), "statement", statement.as_raw()
        )


def _handle_charts(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
    transactions: Optional[list[Any]],
) -> None:
    interval = args.interval or config.reporting.chart_interval
    statements = normalize_statements(
        sheets,
        strict=config.normalizer.strict,
        substitute_zero_totals=config.normalizer.substitute_zero_totals,
    )
    bundle = build_series(statements, interval=interval, transactions=transactions)

    # Without an explicit --interval, the transaction charts follow the
    # dashboard window rather than the statement one.
    if transactions is not None and not args.interval:
        tx_series = build_transaction_series(
            transactions,
            statements=statements,
            interval=config.reporting.dashboard_interval,
        )
        bundle = ChartBundle(
            major_financials=bundle.major_financials,
            ratios=bundle.ratios,
            revenue=tx_series["revenue"],
            expense=tx_series["expense"],
            profit=tx_series["profit"],
        )

    if config.display_mode == "json":
        _emit_json(bundle.to_dict())
        return

    print(f"Applied interval: {interval}")
    print(_chart_tables(bundle))
    if config.display_mode == "both":
        _write_outputs(
            config.output_dir or Path("data/output"), "charts", bundle.to_dict()
        )


def _run_pipeline(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
    transactions: Optional[list[Any]],
) -> ProcessResult:
    interval = args.interval or config.reporting.report_interval
    target_date = args.target_date
    if not target_date:
        dates = available_dates(sheets)
        target_date = dates[0] if dates else None

    return process_financial_data(
        sheets,
        transactions=transactions,
        target_date=target_date,
        interval=interval,
        strict=config.normalizer.strict,
        substitute_zero_totals=config.normalizer.substitute_zero_totals,
        currency=config.reporting.currency,
    )


def _handle_report(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
    transactions: Optional[list[Any]],
) -> None:
    result = _run_pipeline(args, config, sheets, transactions)
    report = result.markdown_report
    if not report and result.target_statement is None:
        # No dated sheet at all: report on the first normalized statement.
        statements = normalize_statements(
            sheets,
            strict=config.normalizer.strict,
            substitute_zero_totals=config.normalizer.substitute_zero_totals,
        )
        report = build_report(
            statements[0],
            interval=result.interval,
            currency=config.reporting.currency,
        )

    if config.display_mode == "json":
        _emit_json({"interval": result.interval, "markdownReport": report})
        return

    print(report)
    if config.display_mode == "both":
        _write_outputs(
            config.output_dir or Path("data/output"),
            "report",
            {"interval": result.interval, "markdownReport": report},
            markdown=report,
        )


def _handle_process(
    args: argparse.Namespace,
    config: AppConfig,
    sheets: list[Any],
    transactions: Optional[list[Any]],
) -> None:
    result = _run_pipeline(args, config, sheets, transactions)

    if config.display_mode == "json":
        _emit_json(result.to_dict())
        return

    print(f"Available dates: {', '.join(result.available_dates) or '(none)'}")
    print(f"Applied interval: {result.interval}")
    if result.related_transactions is not None:
        print(f"Related transactions: {len(result.related_transactions)}")
    for warning in result.warnings:
        print(f"Warning [{warning.code}]: {warning.message}")
    print()

    if config.display_mode == "table":
        if result.target_statement is not None:
            print(
                _statement_tables(
                    result.target_statement,
                    config.reporting.currency,
                    config.ratio_decimals,
                )
            )
            print()
        print(_chart_tables(result.chart_data))
        return

    print(result.markdown_report)
    if config.display_mode == "both":
        _write_outputs(
            config.output_dir or Path("data/output"),
            "process",
            result.to_dict(),
            markdown=result.markdown_report,
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FinBoard CLI.

    This function parses command-line arguments, loads the configuration,
    applies CLI overrides, configures logging, reads the input files and
    dispatches to the requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"finboard version {__version__}")
        return

    if not args.command:
        parser.error("a command is required (dates, nearest, charts, report, process).")

    # 1) Load configuration (TOML file or built-in defaults)
    try:
        config = _load_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Apply CLI overrides
    overrides: dict[str, Any] = {}
    if args.display_mode:
        overrides["display_mode"] = args.display_mode
    if args.output_dir:
        overrides["output_dir"] = Path(args.output_dir)
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.strict:
        overrides["normalizer"] = replace(config.normalizer, strict=True)
    if overrides:
        config = replace(config, **overrides)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 3) Read input files
    sheets_path = _resolve_input(args.balance_sheets, config.data.balance_sheets)
    if sheets_path is None:
        parser.error(
            "No balance sheets file configured. "
            "Either set data.balance_sheets in the config or provide --balance-sheets."
        )
    tx_path = _resolve_input(args.transactions, config.data.transactions)

    try:
        sheets = read_balance_sheets(sheets_path)
        transactions = read_transactions(tx_path) if tx_path is not None else None
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logger.debug(
        "Loaded %d balance sheets and %s transactions",
        len(sheets),
        "no" if transactions is None else len(transactions),
    )

    # 4) Dispatch
    try:
        if args.command == "dates":
            _handle_dates(args, config, sheets)
        elif args.command == "nearest":
            _handle_nearest(args, config, sheets)
        elif args.command == "charts":
            _handle_charts(args, config, sheets, transactions)
        elif args.command == "report":
            _handle_report(args, config, sheets, transactions)
        elif args.command == "process":
            _handle_process(args, config, sheets, transactions)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
