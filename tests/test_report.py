import math

import pandas as pd
import pytest

from finboard.ratios import Ratios
from finboard.report import (
    NEUTRAL_SUMMARY,
    build_report,
    format_currency,
    format_ratio,
    interpret_ratio,
    ratios_to_dataframe,
    report_title,
    summarize_ratios,
)
from finboard.statements import default_statement


def make_ratios(current=None, leverage=None, roe=None) -> Ratios:
    """Helper to build Ratios with only the values the summary reads."""
    return Ratios(
        current_ratio=current,
        debt_to_equity_ratio=leverage,
        return_on_equity=roe,
        equity_multiplier=None,
        debt_ratio=None,
        net_profit_margin=None,
    )


@pytest.mark.parametrize(
    "value, currency, expected",
    [
        (1234.5, "USD", "$1,234.50"),
        (-42, "USD", "-$42.00"),
        (0, "USD", "$0.00"),
        (None, "USD", "$0.00"),
        ("1500000", "USD", "$1,500,000.00"),
        (1000, "eur", "€1,000.00"),
        (10, "CHF", "CHF 10.00"),
    ],
)
def test_format_currency(value, currency, expected) -> None:
    assert format_currency(value, currency) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, "2.50"), (0.6666, "0.67"), (-0.125, "-0.13"), (None, "N/A")],
)
def test_format_ratio(value, expected) -> None:
    assert format_ratio(value) == expected


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("current_ratio", 0.9, "Poor liquidity position"),
        ("current_ratio", 1.0, "Acceptable liquidity"),
        ("current_ratio", 1.5, "Good liquidity position"),
        ("current_ratio", 3.0, "Excellent liquidity, possibly underutilized assets"),
        ("debt_to_equity_ratio", 0.2, "Low leverage, conservative financing"),
        ("debt_to_equity_ratio", 0.3, "Moderate and sustainable leverage"),
        ("debt_to_equity_ratio", 1.9, "High leverage, potential risk"),
        ("debt_to_equity_ratio", 2.0, "Very high leverage, significant financial risk"),
        ("return_on_equity", 0.01, "Poor return for shareholders"),
        ("return_on_equity", 0.05, "Acceptable return"),
        ("return_on_equity", 0.1, "Good return on equity"),
        ("return_on_equity", 0.2, "Excellent return for shareholders"),
        ("debt_ratio", 0.29, "Low debt level, conservative"),
        ("debt_ratio", 0.3, "Moderate debt level"),
        ("debt_ratio", 0.5, "High debt level, monitor carefully"),
        ("debt_ratio", 0.7, "Very high debt level, potential risk"),
        ("current_ratio", None, "No interpretation available"),
        ("equity_multiplier", 2.0, "No interpretation available"),
    ],
)
def test_interpret_ratio_ladders(name, value, expected) -> None:
    assert interpret_ratio(name, value) == expected


@pytest.mark.parametrize(
    "interval, expected",
    [
        ("last30days", "Last 30 Days (as of June 30, 2023)"),
        ("quarterToDate", "Q2 2023 Financial Report"),
        ("yearToDate", "Year-to-Date Financial Report (as of June 30, 2023)"),
        ("allDates", "Comprehensive Financial Report (as of June 30, 2023)"),
        ("lastYear", "June 2023 Financial Report"),
    ],
)
def test_report_title(interval, expected) -> None:
    assert report_title(pd.Timestamp("2023-06-30"), interval) == expected


def test_summary_strengths_only() -> None:
    summary = summarize_ratios(make_ratios(current=2.5, leverage=0.667, roe=0.167))

    assert summary == (
        "The company demonstrates strong liquidity position, and excellent "
        "return on shareholder investment."
    )


def test_summary_concerns_only() -> None:
    summary = summarize_ratios(make_ratios(current=1.0, leverage=2.0, roe=0.05))

    assert summary == (
        "The company should address several concerns: liquidity position may "
        "require attention, and high leverage level could pose financial risk, "
        "and return on equity is below optimal levels."
    )


def test_summary_strengths_and_concerns() -> None:
    summary = summarize_ratios(make_ratios(current=2.5, leverage=2.0, roe=0.2))

    assert summary == (
        "The company demonstrates strong liquidity position, and excellent "
        "return on shareholder investment. However, high leverage level could "
        "pose financial risk."
    )


def test_summary_neutral_when_nothing_triggers() -> None:
    assert summarize_ratios(make_ratios(current=1.5, leverage=1.0, roe=0.1)) == (
        NEUTRAL_SUMMARY
    )
    assert summarize_ratios(make_ratios()) == NEUTRAL_SUMMARY


def test_report_for_default_statement() -> None:
    report = build_report(default_statement("2023-06-30"), interval="quarterToDate")

    assert report.startswith("# Q2 2023 Financial Report\n")
    for header in (
        "## Balance Sheet Summary",
        "## Financial Ratios",
        "## Asset Breakdown",
        "## Summary",
    ):
        assert header in report
    assert "**Total Assets:** $150,000.00" in report
    assert "**Net Income:** $15,000.00" in report
    assert "| Current Ratio | 2.50 | Good liquidity position |" in report
    assert "| Debt to Equity | 0.67 | Moderate and sustainable leverage |" in report
    assert "- **Cash**: $50,000.00" in report
    assert "This report provides a quarterly snapshot" in report
    assert report.endswith(
        "For a more detailed analysis, please consult the AI-generated insights.\n"
    )


def test_report_without_statement_is_empty() -> None:
    assert build_report(None) == ""


def test_ratios_to_dataframe() -> None:
    df = ratios_to_dataframe(make_ratios(current=2.4567))

    assert list(df.columns) == ["key", "label", "value", "interpretation"]
    assert len(df) == 6
    assert df.loc[0, "value"] == pytest.approx(2.46)
    assert df.loc[0, "interpretation"] == "Good liquidity position"
    assert math.isnan(df.loc[1, "value"])
