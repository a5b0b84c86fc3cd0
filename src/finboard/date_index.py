# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Date-based lookups over collections of statements.

- ``find_nearest_statement()``: the statement closest to a target date.
- ``filter_by_interval()``: statements within an interval window.
- ``sort_by_date()``: chronological ordering.
- ``available_dates()``: distinct statement dates, newest first.

Statements without a usable date are never an error here: they are left
out of filtered or sorted results and a warning is logged.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

import pandas as pd

from .periods import interval_window, parse_date
from .statements import Statement, normalize_statement

logger = logging.getLogger(__name__)


def find_nearest_statement(
    statements: Iterable[Any],
    target_date: Any,
) -> Optional[Statement]:
    """
    Return the statement whose date is closest to ``target_date``.

    Every item is normalized first (a no-op for Statement instances).
    An exact date match wins outright. Otherwise the first statement with
    the strictly smallest absolute distance wins, so ties go to the item
    that comes first in input order.

    Items without a parsable date are skipped. If no item is comparable,
    or if the target date cannot be parsed, the first statement is
    returned.

    Returns:
        The nearest Statement, or None if ``statements`` is empty.
    """
    normalized = [normalize_statement(item) for item in statements or []]
    if not normalized:
        return None

    target_ts = parse_date(target_date)
    if target_ts is None:
        logger.warning(
            "Unparsable target date %r; returning the first statement.", target_date
        )
        return normalized[0]

    timestamps = [statement.timestamp for statement in normalized]

    for statement, ts in zip(normalized, timestamps):
        if ts is not None and ts == target_ts:
            return statement

    nearest: Optional[Statement] = None
    min_distance: Optional[pd.Timedelta] = None
    for statement, ts in zip(normalized, timestamps):
        if ts is None:
            continue
        distance = abs(ts - target_ts)
        if min_distance is None or distance < min_distance:
            min_distance = distance
            nearest = statement

    if nearest is None:
        logger.warning("No statement has a usable date; returning the first one.")
        return normalized[0]

    return nearest


def filter_by_interval(
    statements: Iterable[Statement],
    interval: str,
    now: Optional[pd.Timestamp] = None,
) -> list[Statement]:
    """
    Keep the statements dated within the interval window ending now.

    ``all`` and ``allDates`` return every statement unchanged. For any other
    token the window comes from ``interval_window()`` and both bounds are
    inclusive.
    Statements with a missing or unparsable date are then dropped.
    """
    items = list(statements or [])
    window = interval_window(interval, now=now)
    if window is None:
        return items

    kept: list[Statement] = []
    for statement in items:
        ts = statement.timestamp
        if ts is None:
            logger.warning(
                "Dropping statement with missing or invalid date %r.", statement.date
            )
            continue
        if window.contains(ts):
            kept.append(statement)
    return kept


def sort_by_date(statements: Iterable[Statement]) -> list[Statement]:
    """Return the dated statements in ascending date order (stable)."""
    dated: list[tuple[pd.Timestamp, Statement]] = []
    for statement in statements:
        ts = statement.timestamp
        if ts is None:
            logger.warning(
                "Dropping statement with missing or invalid date %r.", statement.date
            )
            continue
        dated.append((ts, statement))
    dated.sort(key=lambda pair: pair[0])
    return [statement for _, statement in dated]


def available_dates(balance_sheets: Iterable[Any]) -> list[str]:
    """
    Return the distinct calendar dates (YYYY-MM-DD) of ``balance_sheets``,
    newest first.

    Items may be raw mappings or Statement instances. Dates falling on the
    same calendar day count once. Items without a parsable date are left
    out.
    """
    seen: set[str] = set()
    dated: list[tuple[pd.Timestamp, str]] = []
    for sheet in balance_sheets or []:
        if isinstance(sheet, Statement):
            raw_date = sheet.date
        elif isinstance(sheet, Mapping):
            raw_date = sheet.get("date")
        else:
            raw_date = None

        if not raw_date:
            continue

        ts = parse_date(raw_date)
        if ts is None:
            logger.warning("Ignoring unparsable balance sheet date %r.", raw_date)
            continue

        key = ts.date().isoformat()
        if key in seen:
            continue
        seen.add(key)
        dated.append((ts, key))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [value for _, value in dated]
