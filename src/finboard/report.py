# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Markdown report and presentation helpers for FinBoard.

This module renders a single canonical statement into a fixed markdown
template:

- a title keyed by the interval (e.g. "Q2 2023 Financial Report"),
- ``## Balance Sheet Summary``: totals and net income,
- ``## Financial Ratios``: a table with one interpretation per ratio,
- ``## Asset Breakdown``: the asset line items as a bullet list,
- ``## Summary``: a short narrative built from ratio thresholds.

It also holds the formatting helpers shared with the CLI
(``format_currency``, ``format_ratio``) and ``ratios_to_dataframe`` for
tabular output. Rounding happens here and nowhere else.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import pandas as pd

from .ratios import RATIO_KEYS, RATIO_LABELS, Ratios
from .statements import Statement

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
}

# Ratios rendered in the report table, with their row label.
REPORT_RATIOS: tuple[tuple[str, str], ...] = (
    ("current_ratio", "Current Ratio"),
    ("debt_to_equity_ratio", "Debt to Equity"),
    ("return_on_equity", "Return on Equity"),
    ("debt_ratio", "Debt Ratio"),
)

NEUTRAL_SUMMARY = (
    "The company shows balanced financial performance with no significant "
    "concerns or exceptional strengths."
)


def _round_2(value: float) -> Decimal:
    """Round half away from zero to 2 decimals, on the exact binary value."""
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_currency(value: Any, currency: str = "USD") -> str:
    """
    Format ``value`` as an en-US currency string with 2 decimals.

    Examples: 1234.5 -> '$1,234.50', -42 -> '-$42.00'. Missing values are
    formatted as 0.
    """
    try:
        number = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        number = 0.0

    code = (currency or "USD").upper()
    symbol = _CURRENCY_SYMBOLS.get(code, f"{code} ")

    try:
        amount = _round_2(abs(number))
    except (InvalidOperation, ValueError):
        return f"{symbol}{number}"

    sign = "-" if number < 0 else ""
    return f"{sign}{symbol}{amount:,.2f}"


def format_ratio(value: Optional[float]) -> str:
    """Format a ratio with exactly 2 decimals; None gives 'N/A'."""
    if value is None:
        return "N/A"
    try:
        rounded = _round_2(abs(value))
    except (InvalidOperation, ValueError):
        return str(value)
    sign = "-" if value < 0 else ""
    return f"{sign}{rounded:.2f}"


def interpret_ratio(ratio_name: str, value: Optional[float]) -> str:
    """
    Return a one-sentence qualitative reading of a ratio.

    Thresholds are checked in ascending order and the first match wins.
    """
    if value is None:
        return "No interpretation available"

    if ratio_name == "current_ratio":
        if value < 1:
            return "Poor liquidity position"
        if value < 1.5:
            return "Acceptable liquidity"
        if value < 3:
            return "Good liquidity position"
        return "Excellent liquidity, possibly underutilized assets"

    if ratio_name == "debt_to_equity_ratio":
        if value < 0.3:
            return "Low leverage, conservative financing"
        if value < 1:
            return "Moderate and sustainable leverage"
        if value < 2:
            return "High leverage, potential risk"
        return "Very high leverage, significant financial risk"

    if ratio_name == "return_on_equity":
        if value < 0.05:
            return "Poor return for shareholders"
        if value < 0.1:
            return "Acceptable return"
        if value < 0.2:
            return "Good return on equity"
        return "Excellent return for shareholders"

    if ratio_name == "debt_ratio":
        if value < 0.3:
            return "Low debt level, conservative"
        if value < 0.5:
            return "Moderate debt level"
        if value < 0.7:
            return "High debt level, monitor carefully"
        return "Very high debt level, potential risk"

    return "No interpretation available"


def interval_description(interval: str) -> str:
    """Adjective describing the time span covered by an interval token."""
    if interval == "last30days":
        return "short-term (30-day)"
    if interval in ("lastQuarter", "quarterToDate"):
        return "quarterly"
    if interval == "yearToDate":
        return "year-to-date"
    if interval == "lastYear":
        return "annual"
    if interval in ("3years", "5years", "10years"):
        return f"{interval[:-5]}-year"
    if interval in ("all", "allDates"):
        return "comprehensive"
    return "monthly"


def report_title(statement_ts: pd.Timestamp, interval: str) -> str:
    """Title of the report for a statement date and an interval token."""
    month = statement_ts.strftime("%B")
    as_of = f"{month} {statement_ts.day}, {statement_ts.year}"
    quarter = (statement_ts.month - 1) // 3 + 1

    if interval == "last30days":
        return f"Last 30 Days (as of {as_of})"
    if interval == "quarterToDate":
        return f"Q{quarter} {statement_ts.year} Financial Report"
    if interval == "yearToDate":
        return f"Year-to-Date Financial Report (as of {as_of})"
    if interval == "allDates":
        return f"Comprehensive Financial Report (as of {as_of})"
    return f"{month} {statement_ts.year} Financial Report"


def summarize_ratios(ratios: Ratios) -> str:
    """
    Build the closing narrative from ratio thresholds.

    Strengths: current ratio > 2, ROE > 0.15, debt/equity < 0.5.
    Concerns:  current ratio < 1.2, debt/equity > 1.5, ROE < 0.08.
    Ratios that are None trigger nothing.
    """
    current = ratios.current_ratio
    leverage = ratios.debt_to_equity_ratio
    roe = ratios.return_on_equity

    concerns: list[str] = []
    strengths: list[str] = []

    if current is not None and current < 1.2:
        concerns.append("liquidity position may require attention")
    if leverage is not None and leverage > 1.5:
        concerns.append("high leverage level could pose financial risk")
    if roe is not None and roe < 0.08:
        concerns.append("return on equity is below optimal levels")

    if current is not None and current > 2:
        strengths.append("strong liquidity position")
    if roe is not None and roe > 0.15:
        strengths.append("excellent return on shareholder investment")
    if leverage is not None and leverage < 0.5:
        strengths.append("conservative debt management")

    summary = ""
    if strengths:
        summary += f"The company demonstrates {', and '.join(strengths)}."

    if concerns:
        if summary:
            summary += " However, "
        else:
            summary += "The company should address several concerns: "
        summary += ", and ".join(concerns) + "."

    return summary or NEUTRAL_SUMMARY


def build_report(
    statement: Optional[Statement],
    interval: str = "quarterToDate",
    currency: str = "USD",
) -> str:
    """
    Render a statement into the markdown report template.

    Args:
        statement: Canonical statement to render. None gives ''.
        interval: Interval token used for the title and the narrative.
        currency: ISO currency code used for amounts.

    Returns:
        The markdown report.
    """
    if statement is None:
        return ""

    ts = statement.timestamp
    if ts is None:
        ts = pd.Timestamp.now()

    def money(value: Any) -> str:
        return format_currency(value, currency)

    ratio_rows = "\n".join(
        f"| {label} | {format_ratio(getattr(statement.ratios, key))} "
        f"| {interpret_ratio(key, getattr(statement.ratios, key))} |"
        for key, label in REPORT_RATIOS
    )
    asset_lines = "\n".join(
        f"- **{item.name}**: {money(item.value)}" for item in statement.asset_breakdown
    )

    return f"""# {report_title(ts, interval)}

## Balance Sheet Summary

**Total Assets:** {money(statement.total_asset)}
**Total Liabilities:** {money(statement.total_liability)}
**Total Equity:** {money(statement.total_equity)}
**Net Income:** {money(statement.net_income)}

## Financial Ratios

| Ratio | Value | Interpretation |
|-------|-------|----------------|
{ratio_rows}

## Asset Breakdown

{asset_lines}

## Summary

This report provides a {interval_description(interval)} snapshot of the \
company's financial position. The company has total assets of \
{money(statement.total_asset)}, with liabilities of \
{money(statement.total_liability)} and equity of \
{money(statement.total_equity)}.

{summarize_ratios(statement.ratios)}

For a more detailed analysis, please consult the AI-generated insights.
"""


def ratios_to_dataframe(ratios: Ratios, decimals: int = 2) -> pd.DataFrame:
    """
    Convert Ratios into a pandas DataFrame for display or CSV export.

    The resulting DataFrame has the following columns:
        - key:            Internal ratio identifier (e.g. "current_ratio").
        - label:          Human-readable label to display.
        - value:          Numeric value rounded to ``decimals``, or NaN if the
                          ratio is not applicable.
        - interpretation: Qualitative reading of the value.

    Rows follow the standard ratio order.
    """
    rows: list[dict[str, object]] = []
    for key in RATIO_KEYS:
        raw_value = getattr(ratios, key)
        value = float("nan") if raw_value is None else round(raw_value, decimals)
        rows.append(
            {
                "key": key,
                "label": RATIO_LABELS[key],
                "value": value,
                "interpretation": interpret_ratio(key, raw_value),
            }
        )
    return pd.DataFrame(rows, columns=["key", "label", "value", "interpretation"])
