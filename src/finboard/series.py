# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Chart-ready time series for FinBoard.

This module turns canonical statements and transactions into the series
consumed by the dashboard charts. It does not draw anything: colours and
styling belong to the rendering layer.

Overview
--------
``build_series()`` is the high-level entry point. For a list of
statements and an interval token, it:

1. filters the statements to the interval window (``date_index``) and
   sorts them by ascending date;

2. builds the ``majorFinancials`` series, with four datasets (Total
   Assets, Total Liabilities, Total Equity, Net Income) and one label per
   statement formatted as ``"Mon YYYY"``;

3. builds one single-dataset series per ratio (currentRatio,
   debtToEquityRatio, returnOnEquity, equityMultiplier, debtRatio,
   netProfitMargin) over the same labels;

4. builds the transaction-derived ``revenue``, ``expense`` and ``profit``
   series through ``build_transaction_series()``.

Transaction series
------------------
Transactions are grouped per calendar day. ``revenue`` sums the
``credit`` amounts and ``expense`` the ``debit`` amounts. ``profit`` is
taken from the statements' net income when at least one statement falls
in the window, otherwise it is the daily credit-minus-debit balance of
the transactions. Labels are ISO days in ascending order.

Data model
----------
``Series`` mirrors the structure expected by the charting layer:

    {"labels": [...], "datasets": [{"label": ..., "data": [...]}]}

``ChartBundle.to_dict()`` exposes the wire keys used by the dashboard
(``majorFinancials``, ``ratios``, ``revenue``, ``expense``, ``profit``).

Empty inputs produce series with empty labels and data, never an error.

Interval defaults
-----------------
Chart series default to ``allDates`` (no filtering) while the dashboard
transaction series default to ``last30days``. Both defaults are kept as
they are.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from .date_index import filter_by_interval, sort_by_date
from .periods import interval_window
from .ratios import RATIO_KEYS, RATIO_LABELS
from .statements import Statement, normalize_statement
from .transactions import (
    Transaction,
    daily_expense,
    daily_profit,
    daily_revenue,
    parse_transactions,
)

logger = logging.getLogger(__name__)

# Wire key of each ratio series, in display order.
RATIO_SERIES_KEYS: dict[str, str] = {
    "current_ratio": "currentRatio",
    "debt_to_equity_ratio": "debtToEquityRatio",
    "return_on_equity": "returnOnEquity",
    "equity_multiplier": "equityMultiplier",
    "debt_ratio": "debtRatio",
    "net_profit_margin": "netProfitMargin",
}

MAJOR_FINANCIALS: tuple[tuple[str, str], ...] = (
    ("Total Assets", "total_asset"),
    ("Total Liabilities", "total_liability"),
    ("Total Equity", "total_equity"),
    ("Net Income", "net_income"),
)


@dataclass(frozen=True)
class Dataset:
    """One line of a chart: a label and one value per series label."""

    label: str
    data: tuple[Optional[float], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "data": list(self.data)}


@dataclass(frozen=True)
class Series:
    """
    Labelled, ordered sequence of numeric points.

    Attributes
    ----------
    labels :
        X-axis labels (e.g. 'Jun 2023' or '2023-06-30').
    datasets :
        One or more Dataset instances, each holding exactly one value per
        label.
    """

    labels: tuple[str, ...] = ()
    datasets: tuple[Dataset, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": list(self.labels),
            "datasets": [dataset.to_dict() for dataset in self.datasets],
        }

    def to_frame(self) -> pd.DataFrame:
        """Return a wide DataFrame: one 'label' column plus one column per dataset."""
        data: dict[str, list[Any]] = {"label": list(self.labels)}
        for dataset in self.datasets:
            data[dataset.label] = list(dataset.data)
        return pd.DataFrame(data)


@dataclass(frozen=True)
class ChartBundle:
    """
    All series needed by the dashboard charts.

    Attributes
    ----------
    major_financials :
        Totals and net income per statement.
    ratios :
        One series per ratio, keyed by wire key (currentRatio, ...).
    revenue, expense, profit :
        Daily transaction-derived series.
    """

    major_financials: Series
    ratios: dict[str, Series] = field(default_factory=dict)
    revenue: Series = field(default_factory=Series)
    expense: Series = field(default_factory=Series)
    profit: Series = field(default_factory=Series)

    def to_dict(self) -> dict[str, Any]:
        return {
            "majorFinancials": self.major_financials.to_dict(),
            "ratios": {key: series.to_dict() for key, series in self.ratios.items()},
            "revenue": self.revenue.to_dict(),
            "expense": self.expense.to_dict(),
            "profit": self.profit.to_dict(),
        }


def format_month_label(statement: Statement) -> str:
    """Format a statement date as 'Mon YYYY' (e.g. 'Jun 2023')."""
    ts = statement.timestamp
    if ts is None:
        return str(statement.date)
    return ts.strftime("%b %Y")


def _frame_to_series(frame: pd.DataFrame, label: str) -> Series:
    return Series(
        labels=tuple(frame["day"].tolist()),
        datasets=(
            Dataset(label=label, data=tuple(frame["amount"].astype(float).tolist())),
        ),
    )


def build_statement_series(
    statements: Sequence[Statement],
) -> tuple[Series, dict[str, Series]]:
    """
    Build the majorFinancials series and the ratio series.

    ``statements`` must already be filtered and sorted.
    """
    labels = tuple(format_month_label(statement) for statement in statements)

    major = Series(
        labels=labels,
        datasets=tuple(
            Dataset(
                label=label,
                data=tuple(float(getattr(statement, attr)) for statement in statements),
            )
            for label, attr in MAJOR_FINANCIALS
        ),
    )

    ratios: dict[str, Series] = {}
    for key in RATIO_KEYS:
        ratios[RATIO_SERIES_KEYS[key]] = Series(
            labels=labels,
            datasets=(
                Dataset(
                    label=RATIO_LABELS[key],
                    data=tuple(
                        getattr(statement.ratios, key) for statement in statements
                    ),
                ),
            ),
        )

    return major, ratios


def build_transaction_series(
    transactions: Optional[Iterable[Any]],
    statements: Iterable[Any] = (),
    interval: str = "last30days",
    now: Optional[pd.Timestamp] = None,
) -> dict[str, Series]:
    """
    Build the daily revenue, expense and profit series.

    Both transactions and statements are restricted to the interval window
    ending now (``allDates`` keeps everything). Profit uses the statements'
    net income when any statement is left after filtering, otherwise the
    daily credit-minus-debit balance of the transactions.

    Returns:
        A dict with keys 'revenue', 'expense' and 'profit'.
    """
    parsed: list[Transaction] = parse_transactions(transactions)
    window = interval_window(interval, now=now)

    if window is not None:
        in_window: list[Transaction] = []
        for transaction in parsed:
            ts = transaction.timestamp
            if ts is None:
                logger.warning("Found transaction without date: %r", transaction)
                continue
            if window.contains(ts):
                in_window.append(transaction)
        parsed = in_window

    normalized = [normalize_statement(item) for item in statements or []]
    in_range = sort_by_date(filter_by_interval(normalized, interval, now=now))

    logger.debug(
        "Filtered data for interval %s: %d transactions, %d balance sheets",
        interval,
        len(parsed),
        len(in_range),
    )

    revenue = _frame_to_series(daily_revenue(parsed), "Revenue")
    expense = _frame_to_series(daily_expense(parsed), "Expense")

    if in_range:
        profit = Series(
            labels=tuple(statement.date or "" for statement in in_range),
            datasets=(
                Dataset(
                    label="Profit",
                    data=tuple(float(statement.net_income) for statement in in_range),
                ),
            ),
        )
    else:
        profit = _frame_to_series(daily_profit(parsed), "Profit")

    return {"revenue": revenue, "expense": expense, "profit": profit}


def build_series(
    statements: Iterable[Any],
    interval: str = "allDates",
    transactions: Optional[Iterable[Any]] = None,
    now: Optional[pd.Timestamp] = None,
) -> ChartBundle:
    """
    Build every chart series for ``statements`` within ``interval``.

    Args:
        statements: Canonical statements (raw records are normalized).
        interval: Interval token; defaults to 'allDates' (no filtering).
        transactions: Optional raw transactions or Transaction instances
            for the revenue/expense/profit series.
        now: Reference time for the interval window; defaults to now.

    Returns:
        A ChartBundle. Empty inputs yield series with empty labels/data.
    """
    normalized = [normalize_statement(item) for item in statements or []]
    ordered = sort_by_date(filter_by_interval(normalized, interval, now=now))

    major, ratios = build_statement_series(ordered)
    tx_series = build_transaction_series(
        transactions, statements=ordered, interval=interval, now=now
    )

    return ChartBundle(
        major_financials=major,
        ratios=ratios,
        revenue=tx_series["revenue"],
        expense=tx_series["expense"],
        profit=tx_series["profit"],
    )
