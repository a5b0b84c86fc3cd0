# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinBoard
--------

The computation core of a small-business financial reporting dashboard.
It turns loosely-shaped balance sheets and transactions into canonical
statements, ratios, chart series and a markdown report.

Main capabilities:
- balance sheet normalization from several input shapes, with warnings,
- financial ratios with explicit handling of undefined denominators,
- nearest-date lookup and interval filtering of statements,
- chart series (major financials, ratios, revenue, expense, profit),
- a fixed-template markdown report with ratio interpretations,
- a single-pass processing pipeline and a command-line interface.

FinBoard separates computation (core modules), configuration (TOML) and
presentation (CLI), so the core can be driven from scripts or a web layer.


Version: 0.1.0

Usage:
    python -m finboard.cli --help
"""

__all__ = [
    "ratios",
    "statements",
    "periods",
    "date_index",
    "transactions",
    "series",
    "report",
    "pipeline",
]

__version__ = "0.1.0"
