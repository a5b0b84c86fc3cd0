# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
End-to-end processing of balance sheets and transactions.

``process_financial_data()`` is the single entry point used by the I/O
layer (CLI, web handlers). In one pass it:

1. validates that at least one balance sheet was supplied;
2. normalizes every balance sheet (collecting normalization warnings);
3. lists the available statement dates, newest first;
4. if a target date is given:
   - finds the statement nearest to it,
   - selects the transactions related to it, using the target-anchored
     window of ``periods.transaction_range_for_target()``;
5. builds the chart bundle over all statements and transactions for the
   interval;
6. renders the markdown report for the target statement.

Defaults
--------
The interval defaults to ``quarterToDate`` here, as in the report, while
``series.build_series()`` defaults to ``allDates``. Both are kept.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from .date_index import available_dates, find_nearest_statement
from .periods import transaction_range_for_target
from .report import build_report
from .series import ChartBundle, build_series
from .statements import (
    NormalizationWarning,
    Statement,
    normalize_statements_with_warnings,
)
from .transactions import Transaction, filter_by_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """
    Result of ``process_financial_data()``.

    Attributes
    ----------
    available_dates :
        Distinct balance sheet dates, newest first.
    chart_data :
        Chart series over all statements for the interval.
    target_statement :
        Statement nearest to the target date, or None without target date.
    markdown_report :
        Markdown report of the target statement ('' without target).
    related_transactions :
        Transactions within the target-anchored window, or None when no
        target date or no transactions were supplied.
    interval :
        Interval token actually used.
    warnings :
        Normalization diagnostics for all balance sheets.
    """

    available_dates: list[str]
    chart_data: ChartBundle
    target_statement: Optional[Statement]
    markdown_report: str
    related_transactions: Optional[list[Transaction]]
    interval: str
    warnings: list[NormalizationWarning] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "availableDates": list(self.available_dates),
            "chartData": self.chart_data.to_dict(),
            "targetSheet": (
                self.target_statement.as_raw()
                if self.target_statement is not None
                else None
            ),
            "markdownReport": self.markdown_report,
            "relatedTransactions": (
                [tx.as_raw() for tx in self.related_transactions]
                if self.related_transactions is not None
                else None
            ),
            "interval": self.interval,
            "warnings": [
                {"code": w.code, "message": w.message} for w in self.warnings
            ],
        }


def process_financial_data(
    balance_sheets: Optional[Iterable[Any]],
    transactions: Optional[Iterable[Any]] = None,
    target_date: Optional[str] = None,
    interval: str = "quarterToDate",
    now: Optional[pd.Timestamp] = None,
    strict: bool = False,
    substitute_zero_totals: bool = True,
    currency: str = "USD",
) -> ProcessResult:
    """
    Normalize balance sheets and build charts and report in a single pass.

    Parameters
    ----------
    balance_sheets :
        Raw balance sheet records (any supported shape).
    transactions :
        Optional raw transaction records.
    target_date :
        Optional ISO date selecting the statement to report on.
    interval :
        Interval token; defaults to 'quarterToDate'.
    now :
        Reference time for now-anchored windows (charts).
    strict :
        Raise on unrecognized balance sheet shapes instead of substituting
        the default statement.
    substitute_zero_totals :
        Replace zero totals by 1 so that every ratio is defined.
    currency :
        ISO currency code used in the report.

    Returns
    -------
    ProcessResult

    Raises
    ------
    ValueError
        If no balance sheet is supplied.
    """
    sheets = list(balance_sheets or [])
    if not sheets:
        raise ValueError("Invalid or missing balance sheets data.")
    tx_records = list(transactions) if transactions is not None else None

    statements, warnings = normalize_statements_with_warnings(
        sheets,
        strict=strict,
        substitute_zero_totals=substitute_zero_totals,
    )
    dates = available_dates(sheets)

    target_statement: Optional[Statement] = None
    related: Optional[list[Transaction]] = None

    if target_date:
        target_statement = find_nearest_statement(statements, target_date)

        if tx_records is not None:
            window = transaction_range_for_target(interval, target_date)
            if window is None:
                logger.warning(
                    "Unparsable target date %r; no related transactions.", target_date
                )
                related = []
            else:
                related = filter_by_range(tx_records, window.start, window.end)

    chart_data = build_series(
        statements, interval=interval, transactions=tx_records, now=now
    )
    markdown_report = (
        build_report(target_statement, interval=interval, currency=currency)
        if target_statement is not None
        else ""
    )

    logger.info(
        "Processed %d balance sheets (%d warnings), interval=%s, target=%s",
        len(statements),
        len(warnings),
        interval,
        target_statement.date if target_statement is not None else None,
    )

    return ProcessResult(
        available_dates=dates,
        chart_data=chart_data,
        target_statement=target_statement,
        markdown_report=markdown_report,
        related_transactions=related,
        interval=interval,
        warnings=warnings,
    )
