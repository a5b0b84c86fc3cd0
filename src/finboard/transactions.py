# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction handling for FinBoard.

Transactions are only used for time-bucketed aggregation: they are never
turned into statements. This module parses raw transaction records,
filters them by date range and aggregates them per calendar day into
revenue (``credit``), expense (``debit``) and profit (credits minus all
other amounts) buckets.

Output schema of the daily helpers
----------------------------------
``daily_revenue()``, ``daily_expense()`` and ``daily_profit()`` return a
pandas DataFrame with exactly these columns, sorted by ascending day:

    - ``day``    (str, YYYY-MM-DD)
    - ``amount`` (float)

Malformed input never raises: an amount is read from its leading number
("12.5 USD" counts as 12.5), a transaction with a non-numeric amount
counts as 0, and a transaction without a usable date is dropped with a
logged warning.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .periods import parse_date

logger = logging.getLogger(__name__)

CREDIT = "credit"
DEBIT = "debit"

_NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class Transaction:
    """A single money movement used for revenue/expense bucketing."""

    date: Optional[str]
    amount: float
    type: str
    description: str = ""

    @property
    def timestamp(self) -> Optional[pd.Timestamp]:
        """Parsed date of the transaction, or None if missing/unparsable."""
        return parse_date(self.date)

    def as_raw(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "amount": self.amount,
            "type": self.type,
            "description": self.description,
        }


def _coerce_amount(value: Any) -> float:
    """
    Parse ``value`` as a float.

    Strings are read up to the end of their leading number ("12.5 USD"
    gives 12.5). Anything without a leading number, and NaN, becomes 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        match = _NUMERIC_PREFIX.match(value) if isinstance(value, str) else None
        if match is None:
            logger.warning("Non-numeric transaction amount %r; using 0.", value)
            return 0.0
        amount = float(match.group())
    if pd.isna(amount):
        return 0.0
    return amount


def parse_transaction(raw: Any) -> Optional[Transaction]:
    """
    Build a Transaction from a raw record.

    The ``date`` field is used, falling back to ``created_at``. Returns
    None if ``raw`` is not a mapping.
    """
    if isinstance(raw, Transaction):
        return raw
    if not isinstance(raw, Mapping):
        return None

    raw_date = raw.get("date") or raw.get("created_at")
    description = raw.get("description")
    return Transaction(
        date=None if raw_date is None else str(raw_date),
        amount=_coerce_amount(raw.get("amount")),
        type="" if raw.get("type") is None else str(raw.get("type")),
        description="" if description is None else str(description),
    )


def parse_transactions(raws: Optional[Iterable[Any]]) -> list[Transaction]:
    """Parse every raw record, skipping (and logging) non-mapping items."""
    transactions: list[Transaction] = []
    for raw in raws or []:
        transaction = parse_transaction(raw)
        if transaction is None:
            logger.warning("Ignoring malformed transaction %r.", raw)
            continue
        transactions.append(transaction)
    return transactions


def filter_by_range(
    transactions: Iterable[Any],
    start: Any,
    end: Any,
) -> list[Transaction]:
    """
    Keep the transactions dated within [start, end] (inclusive).

    Transactions with a missing or unparsable date are dropped. If either
    bound cannot be parsed, nothing is kept.
    """
    start_ts = parse_date(start)
    end_ts = parse_date(end)
    if start_ts is None or end_ts is None:
        logger.warning(
            "Invalid transaction range %r → %r; keeping nothing.", start, end
        )
        return []

    kept: list[Transaction] = []
    for transaction in parse_transactions(transactions):
        ts = transaction.timestamp
        if ts is None:
            logger.warning(
                "Transaction missing both date and created_at fields: %r", transaction
            )
            continue
        if start_ts <= ts <= end_ts:
            kept.append(transaction)
    return kept


def transactions_frame(transactions: Iterable[Any]) -> pd.DataFrame:
    """
    Convert transactions into a DataFrame with columns date, day, amount, type.

    ``date`` is datetime64[ns], ``day`` the ISO calendar day used for
    bucketing. Undated transactions are dropped.
    """
    rows: list[dict[str, Any]] = []
    for transaction in parse_transactions(transactions):
        ts = transaction.timestamp
        if ts is None:
            logger.warning("Transaction missing date: %r", transaction)
            continue
        rows.append(
            {
                "date": ts,
                "day": ts.date().isoformat(),
                "amount": transaction.amount,
                "type": transaction.type,
            }
        )

    if not rows:
        return pd.DataFrame(
            {
                "date": pd.Series(dtype="datetime64[ns]"),
                "day": pd.Series(dtype=str),
                "amount": pd.Series(dtype=float),
                "type": pd.Series(dtype=str),
            }
        )
    return pd.DataFrame(rows, columns=["date", "day", "amount", "type"])


def _sum_by_day(frame: pd.DataFrame, amounts: pd.Series) -> pd.DataFrame:
    if frame.empty:
        return pd.DataFrame(
            {"day": pd.Series(dtype=str), "amount": pd.Series(dtype=float)}
        )
    out = (
        pd.DataFrame({"day": frame["day"], "amount": amounts.astype(float)})
        .groupby("day", as_index=False, sort=True)["amount"]
        .sum()
    )
    return out.reset_index(drop=True)


def daily_revenue(transactions: Iterable[Any]) -> pd.DataFrame:
    """Sum of ``credit`` amounts per day."""
    frame = transactions_frame(transactions)
    credits = frame[frame["type"] == CREDIT]
    return _sum_by_day(credits, credits["amount"])


def daily_expense(transactions: Iterable[Any]) -> pd.DataFrame:
    """Sum of ``debit`` amounts per day."""
    frame = transactions_frame(transactions)
    debits = frame[frame["type"] == DEBIT]
    return _sum_by_day(debits, debits["amount"])


def daily_profit(transactions: Iterable[Any]) -> pd.DataFrame:
    """Credits minus every other amount, per day."""
    frame = transactions_frame(transactions)
    signed = frame["amount"].where(frame["type"] == CREDIT, -frame["amount"])
    return _sum_by_day(frame, signed)
