# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for FinBoard.

This module defines a Period value object, date parsing shared by the
whole package, and the mapping from interval tokens (``last30days``,
``quarterToDate``, ``5years``, ...) to concrete date windows.

Two conventions coexist:

- ``interval_window()`` anchors the window on *now*. It is used to filter
  statements for charts and transactions for the dashboard. ``all`` and
  ``allDates`` both mean "no filtering".
- ``transaction_range_for_target()`` anchors the window on a *target
  date* and is used to select the transactions related to a report.
  There, ``all`` and ``allDates`` both mean "5 years before the target".
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

INTERVALS: tuple[str, ...] = (
    "last30days",
    "lastQuarter",
    "quarterToDate",
    "ytd",
    "yearToDate",
    "lastYear",
    "3years",
    "5years",
    "10years",
    "all",
    "allDates",
)

_YEARS_BACK = {"lastYear": 1, "3years": 3, "5years": 5, "10years": 10}


@dataclass(frozen=True)
class Period:
    """Represents a [start, end] window (inclusive) with a human-readable label."""

    start: pd.Timestamp
    end: pd.Timestamp
    label: str

    def contains(self, ts: pd.Timestamp) -> bool:
        """Return True if ``ts`` falls within the window, bounds included."""
        return self.start <= ts <= self.end


def _now() -> pd.Timestamp:
    """Return the current local time (isolated for easier testing)."""
    return pd.Timestamp.now()


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a date or datetime value into a naive pandas Timestamp.

    Strings (ISO dates or datetimes), ``date`` and ``datetime`` objects are
    accepted. Timezone-aware values keep their wall-clock time and lose the
    timezone, so that "2023-04-01T23:00:00-05:00" falls on 2023-04-01.

    Returns None for missing, empty or unparsable values.
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (str, date, datetime)):
        return None
    if isinstance(value, str) and not value.strip():
        return None

    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None

    if ts is None or pd.isna(ts):
        return None

    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def to_calendar_date(value: Any) -> Optional[str]:
    """Return the ISO calendar date (YYYY-MM-DD) of ``value``, or None."""
    ts = parse_date(value)
    if ts is None:
        return None
    return ts.date().isoformat()


def interval_window(
    interval: str,
    now: Optional[pd.Timestamp] = None,
) -> Optional[Period]:
    """
    Map an interval token to a [start, now] window anchored on now.

    Mapping:

        last30days               now - 30 days
        lastQuarter/quarterToDate now - 3 months
        ytd/yearToDate           1 January of the current year
        lastYear                 now - 1 year
        3years/5years/10years    now - N years
        all/allDates             None (no filtering at all)
        anything else            now - 30 days

    Args:
        interval: Interval token.
        now: Reference time; defaults to the current time.

    Returns:
        A Period, or None for ``all`` and ``allDates``.
    """
    if interval in ("all", "allDates"):
        return None

    if now is None:
        now = _now()

    if interval in ("lastQuarter", "quarterToDate"):
        start = now - pd.DateOffset(months=3)
        label = "Last 3 months"
    elif interval in ("ytd", "yearToDate"):
        start = pd.Timestamp(year=now.year, month=1, day=1)
        label = "Year to date"
    elif interval in _YEARS_BACK:
        years = _YEARS_BACK[interval]
        start = now - pd.DateOffset(years=years)
        label = f"Last {years} year{'s' if years > 1 else ''}"
    else:
        # last30days and unknown tokens
        start = now - pd.Timedelta(days=30)
        label = "Last 30 days"

    return Period(start=start, end=now, label=label)


def transaction_range_for_target(interval: str, target: Any) -> Optional[Period]:
    """
    Map an interval token to a [start, target] window anchored on a target date.

    Mapping:

        last30days               target - 30 days
        lastQuarter/quarterToDate first day of the target's quarter
        yearToDate               1 January of the target's year
        lastYear                 target - 1 year
        3years/5years/10years    target - N years
        all/allDates             target - 5 years
        anything else            target - 1 month

    Returns None if the target date cannot be parsed.
    """
    target_ts = parse_date(target)
    if target_ts is None:
        return None

    if interval == "last30days":
        start = target_ts - pd.Timedelta(days=30)
    elif interval in ("lastQuarter", "quarterToDate"):
        quarter_start_month = ((target_ts.month - 1) // 3) * 3 + 1
        start = pd.Timestamp(year=target_ts.year, month=quarter_start_month, day=1)
    elif interval == "yearToDate":
        start = pd.Timestamp(year=target_ts.year, month=1, day=1)
    elif interval in _YEARS_BACK:
        start = target_ts - pd.DateOffset(years=_YEARS_BACK[interval])
    elif interval in ("all", "allDates"):
        start = target_ts - pd.DateOffset(years=5)
    else:
        start = target_ts - pd.DateOffset(months=1)

    label = f"{interval} ({start.date()} → {target_ts.date()})"
    return Period(start=start, end=target_ts, label=label)
