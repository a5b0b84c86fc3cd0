# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Balance-sheet normalization for FinBoard.

Balance sheets reach FinBoard in several loosely structured shapes. This
module turns any of them into a canonical, immutable ``Statement`` that the
rest of the package can rely on.

1. Shape classification
   --------------------
   ``classify_statement()`` inspects a raw record and returns one of:

   - ``CANONICAL``:   totals and the three ``*_breakdown`` arrays are
                      already present;
   - ``REPORT_JSON``: a nested ``report_json`` object holding ``assets``,
                      ``liabilities`` and ``equity`` arrays, each with a
                      totals node (``value``) and ``sub_items``. Any
                      non-empty ``report_json`` selects this shape; a
                      malformed one falls back to the top-level totals;
   - ``BREAKDOWN``:   flat ``asset_breakdown`` / ``liability_breakdown`` /
                      ``equity_breakdown`` arrays with optional totals;
   - ``UNRECOGNIZED``: anything else (including None).

2. Normalization
   -------------
   ``normalize_statement()`` dispatches on the shape. Missing or zero
   totals fall back to other fields, then to ``1`` so that ratios stay
   defined. Non-numeric values become ``0``. An unrecognized record is
   replaced by a fixed demonstration statement, so that callers always get
   something renderable.

3. Diagnostics
   -----------
   Every fallback is logged and recorded as a ``NormalizationWarning``.
   ``normalize_statement_with_warnings()`` returns them alongside the
   statement. With ``strict=True`` an unrecognized shape raises
   ``StatementShapeError`` instead of degrading to the default statement.

Normalization is pure: raw records are never modified.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

import pandas as pd

from .periods import parse_date, to_calendar_date
from .ratios import Ratios, compute_ratios

logger = logging.getLogger(__name__)

TOTAL_KEYS: tuple[str, ...] = ("total_asset", "total_liability", "total_equity")
BREAKDOWN_KEYS: tuple[str, ...] = (
    "asset_breakdown",
    "liability_breakdown",
    "equity_breakdown",
)
NET_INCOME_ITEM = "Net Income"


class StatementShape(str, Enum):
    """Known shapes of raw balance-sheet records."""

    CANONICAL = "canonical"
    REPORT_JSON = "report_json"
    BREAKDOWN = "breakdown"
    UNRECOGNIZED = "unrecognized"


class StatementShapeError(ValueError):
    """Raised in strict mode when a raw statement has an unrecognized shape."""


@dataclass(frozen=True)
class BreakdownItem:
    """Named line item of a statement (e.g. 'Cash', 50000.0)."""

    name: str
    value: float


@dataclass(frozen=True)
class NormalizationWarning:
    """
    Diagnostic emitted when normalization had to fall back to a default.

    Attributes:
        code: Machine-readable code ('unrecognized_shape', 'missing_date',
            'invalid_date', 'non_numeric_value', 'total_substituted',
            'ratios_computed', 'null_statement', 'malformed_report_json').
        message: Human-readable description.
    """

    code: str
    message: str


@dataclass(frozen=True)
class Statement:
    """
    Canonical balance-sheet statement.

    Totals and breakdowns are always present and ``ratios`` is always
    populated. ``date`` is an ISO calendar date (YYYY-MM-DD) when it could
    be parsed, the raw string when it could not, and None only when a
    canonical record carried no date at all.
    """

    date: Optional[str]
    total_asset: float
    total_liability: float
    total_equity: float
    net_income: float
    asset_breakdown: tuple[BreakdownItem, ...] = field(default_factory=tuple)
    liability_breakdown: tuple[BreakdownItem, ...] = field(default_factory=tuple)
    equity_breakdown: tuple[BreakdownItem, ...] = field(default_factory=tuple)
    ratios: Ratios = field(
        default_factory=lambda: compute_ratios(1.0, 1.0, 1.0, 0.0)
    )

    @property
    def timestamp(self) -> Optional[pd.Timestamp]:
        """Parsed date of the statement, or None if missing/unparsable."""
        return parse_date(self.date)

    def as_raw(self) -> dict[str, Any]:
        """Return the canonical mapping form of this statement."""
        return {
            "date": self.date,
            "total_asset": self.total_asset,
            "asset_breakdown": [
                {"name": item.name, "value": item.value}
                for item in self.asset_breakdown
            ],
            "total_liability": self.total_liability,
            "liability_breakdown": [
                {"name": item.name, "value": item.value}
                for item in self.liability_breakdown
            ],
            "total_equity": self.total_equity,
            "equity_breakdown": [
                {"name": item.name, "value": item.value}
                for item in self.equity_breakdown
            ],
            "net_income": self.net_income,
            "ratios": self.ratios.as_dict(),
        }


def _today() -> str:
    """Return today's ISO date (isolated for easier testing)."""
    return date.today().isoformat()


def _record(
    warnings: list[NormalizationWarning],
    code: str,
    message: str,
    level: int = logging.WARNING,
) -> None:
    logger.log(level, message)
    warnings.append(NormalizationWarning(code=code, message=message))


def _to_number(
    value: Any,
    warnings: list[NormalizationWarning],
    field_name: str,
) -> float:
    """Coerce ``value`` to float; missing or non-numeric values become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        _record(
            warnings,
            "non_numeric_value",
            f"Non-numeric value {value!r} for {field_name}; using 0.",
        )
        return 0.0
    if pd.isna(number):
        return 0.0
    return number


def _pick_total(
    field_name: str,
    candidates: Iterable[float],
    substitute: bool,
    warnings: list[NormalizationWarning],
) -> float:
    """Return the first non-zero candidate, else 1.0 (or 0.0 without substitution)."""
    for candidate in candidates:
        if candidate:
            return candidate
    if not substitute:
        return 0.0
    _record(
        warnings,
        "total_substituted",
        f"{field_name} is zero or missing; using 1 to keep ratios defined.",
    )
    return 1.0


def _map_breakdown(
    items: Any,
    warnings: list[NormalizationWarning],
    field_name: str,
) -> tuple[BreakdownItem, ...]:
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        return ()

    mapped: list[BreakdownItem] = []
    for item in items:
        if not isinstance(item, Mapping):
            _record(
                warnings,
                "non_numeric_value",
                f"Ignoring malformed {field_name} item {item!r}.",
            )
            continue
        name = item.get("name")
        mapped.append(
            BreakdownItem(
                name="" if name is None else str(name),
                value=_to_number(item.get("value"), warnings, f"{field_name}.value"),
            )
        )
    return tuple(mapped)


def _find_item(items: Iterable[BreakdownItem], name: str) -> float:
    for item in items:
        if item.name == name:
            return item.value
    return 0.0


def _resolve_date(
    raw: Mapping[str, Any],
    warnings: list[NormalizationWarning],
    default_to_today: bool,
) -> Optional[str]:
    raw_date = raw.get("date")
    if raw_date is None or raw_date == "":
        if not default_to_today:
            _record(warnings, "missing_date", "Statement has no date.")
            return None
        today = _today()
        _record(
            warnings,
            "missing_date",
            f"Statement has no date; using today ({today}).",
        )
        return today

    calendar_date = to_calendar_date(raw_date)
    if calendar_date is None:
        _record(warnings, "invalid_date", f"Unparsable statement date {raw_date!r}.")
        return str(raw_date)
    return calendar_date


def _ratios_for(
    raw: Any,
    total_asset: float,
    total_liability: float,
    total_equity: float,
    net_income: float,
    substitute: bool,
    warnings: list[NormalizationWarning],
) -> Ratios:
    """Carry over ``raw['ratios']`` when present, computing whatever is missing."""
    if substitute:
        computed = compute_ratios(
            total_asset or 1.0,
            total_liability or 1.0,
            total_equity or 1.0,
            net_income,
        )
    else:
        computed = compute_ratios(
            total_asset, total_liability, total_equity, net_income
        )

    raw_ratios = raw.get("ratios") if isinstance(raw, Mapping) else None
    if isinstance(raw_ratios, Mapping) and raw_ratios:
        return Ratios.from_mapping(raw_ratios, fallback=computed)

    _record(
        warnings,
        "ratios_computed",
        "Ratios missing from statement; computed from totals.",
        level=logging.DEBUG,
    )
    return computed


def _build_default(statement_date: Optional[str]) -> Statement:
    total_asset = 150000.0
    total_liability = 60000.0
    total_equity = 90000.0
    net_income = 15000.0
    return Statement(
        date=statement_date or _today(),
        total_asset=total_asset,
        total_liability=total_liability,
        total_equity=total_equity,
        net_income=net_income,
        asset_breakdown=(
            BreakdownItem("Cash", 50000.0),
            BreakdownItem("Accounts Receivable", 25000.0),
            BreakdownItem("Inventory", 45000.0),
            BreakdownItem("Property & Equipment", 30000.0),
        ),
        liability_breakdown=(
            BreakdownItem("Accounts Payable", 20000.0),
            BreakdownItem("Short-term Debt", 15000.0),
            BreakdownItem("Long-term Debt", 25000.0),
        ),
        equity_breakdown=(
            BreakdownItem("Common Stock", 50000.0),
            BreakdownItem("Retained Earnings", 25000.0),
            BreakdownItem(NET_INCOME_ITEM, 15000.0),
        ),
        ratios=compute_ratios(total_asset, total_liability, total_equity, net_income),
    )


def default_statement(statement_date: Optional[str] = None) -> Statement:
    """
    Return the fixed demonstration statement used for unrecognized input.

    Figures: assets 150,000, liabilities 60,000, equity 90,000, net income
    15,000. Dated ``statement_date`` or today.
    """
    return _build_default(statement_date)


def classify_statement(raw: Any) -> StatementShape:
    """
    Classify a raw balance-sheet record into one of the known shapes.

    The checks are ordered: canonical first, then ``report_json``, then
    flat breakdown arrays. Anything else is UNRECOGNIZED.
    """
    if not isinstance(raw, Mapping):
        return StatementShape.UNRECOGNIZED

    has_totals = all(raw.get(key) is not None for key in TOTAL_KEYS)
    has_all_breakdowns = all(
        isinstance(raw.get(key), (list, tuple)) for key in BREAKDOWN_KEYS
    )
    if has_totals and has_all_breakdowns:
        return StatementShape.CANONICAL

    report_json = raw.get("report_json")
    if isinstance(report_json, Mapping) or report_json:
        return StatementShape.REPORT_JSON

    if any(isinstance(raw.get(key), list) for key in BREAKDOWN_KEYS):
        return StatementShape.BREAKDOWN

    return StatementShape.UNRECOGNIZED


def _from_canonical(
    raw: Mapping[str, Any],
    substitute: bool,
    warnings: list[NormalizationWarning],
) -> Statement:
    total_asset = _to_number(raw.get("total_asset"), warnings, "total_asset")
    total_liability = _to_number(
        raw.get("total_liability"), warnings, "total_liability"
    )
    total_equity = _to_number(raw.get("total_equity"), warnings, "total_equity")
    net_income = _to_number(raw.get("net_income"), warnings, "net_income")

    return Statement(
        date=_resolve_date(raw, warnings, default_to_today=False),
        total_asset=total_asset,
        total_liability=total_liability,
        total_equity=total_equity,
        net_income=net_income,
        asset_breakdown=_map_breakdown(
            raw["asset_breakdown"], warnings, "asset_breakdown"
        ),
        liability_breakdown=_map_breakdown(
            raw["liability_breakdown"], warnings, "liability_breakdown"
        ),
        equity_breakdown=_map_breakdown(
            raw["equity_breakdown"], warnings, "equity_breakdown"
        ),
        ratios=_ratios_for(
            raw,
            total_asset,
            total_liability,
            total_equity,
            net_income,
            substitute,
            warnings,
        ),
    )


def _first_group(report: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    groups = report.get(key)
    if isinstance(groups, list) and groups and isinstance(groups[0], Mapping):
        return groups[0]
    return {}


def _from_report_json(
    raw: Mapping[str, Any],
    substitute: bool,
    warnings: list[NormalizationWarning],
) -> Statement:
    report = raw["report_json"]
    if not isinstance(report, Mapping):
        _record(
            warnings,
            "malformed_report_json",
            f"report_json is not an object ({type(report).__name__}); "
            "using the top-level totals.",
        )
        report = {}
    assets = _first_group(report, "assets")
    liabilities = _first_group(report, "liabilities")
    equity = _first_group(report, "equity")

    asset_breakdown = _map_breakdown(assets.get("sub_items") or [], warnings, "assets")
    liability_breakdown = _map_breakdown(
        liabilities.get("sub_items") or [], warnings, "liabilities"
    )
    equity_breakdown = _map_breakdown(equity.get("sub_items") or [], warnings, "equity")

    # Group value first, then the top-level total, then 1.
    totals: dict[str, float] = {}
    for key, group in zip(TOTAL_KEYS, (assets, liabilities, equity)):
        totals[key] = _pick_total(
            key,
            (
                _to_number(group.get("value"), warnings, f"report_json.{key}"),
                _to_number(raw.get(key), warnings, key),
            ),
            substitute,
            warnings,
        )

    net_income = _find_item(equity_breakdown, NET_INCOME_ITEM) or _to_number(
        raw.get("net_income"), warnings, "net_income"
    )

    return Statement(
        date=_resolve_date(raw, warnings, default_to_today=True),
        total_asset=totals["total_asset"],
        total_liability=totals["total_liability"],
        total_equity=totals["total_equity"],
        net_income=net_income,
        asset_breakdown=asset_breakdown,
        liability_breakdown=liability_breakdown,
        equity_breakdown=equity_breakdown,
        ratios=_ratios_for(
            raw,
            totals["total_asset"],
            totals["total_liability"],
            totals["total_equity"],
            net_income,
            substitute,
            warnings,
        ),
    )


def _from_breakdowns(
    raw: Mapping[str, Any],
    substitute: bool,
    warnings: list[NormalizationWarning],
) -> Statement:
    breakdowns = {
        key: _map_breakdown(raw.get(key) or [], warnings, key) for key in BREAKDOWN_KEYS
    }

    # Top-level total first, then the sum of the breakdown, then 1.
    totals: dict[str, float] = {}
    for total_key, breakdown_key in zip(TOTAL_KEYS, BREAKDOWN_KEYS):
        totals[total_key] = _pick_total(
            total_key,
            (
                _to_number(raw.get(total_key), warnings, total_key),
                sum(item.value for item in breakdowns[breakdown_key]),
            ),
            substitute,
            warnings,
        )

    net_income = _to_number(
        raw.get("net_income"), warnings, "net_income"
    ) or _find_item(breakdowns["equity_breakdown"], NET_INCOME_ITEM)

    return Statement(
        date=_resolve_date(raw, warnings, default_to_today=True),
        total_asset=totals["total_asset"],
        total_liability=totals["total_liability"],
        total_equity=totals["total_equity"],
        net_income=net_income,
        asset_breakdown=breakdowns["asset_breakdown"],
        liability_breakdown=breakdowns["liability_breakdown"],
        equity_breakdown=breakdowns["equity_breakdown"],
        ratios=_ratios_for(
            raw,
            totals["total_asset"],
            totals["total_liability"],
            totals["total_equity"],
            net_income,
            substitute,
            warnings,
        ),
    )


def _from_unrecognized(
    raw: Any,
    warnings: list[NormalizationWarning],
) -> Statement:
    if raw is None:
        _record(
            warnings,
            "null_statement",
            "Null balance sheet provided; using the default statement.",
        )
        return _build_default(None)

    _record(
        warnings,
        "unrecognized_shape",
        "Unrecognized balance sheet structure; using the default statement.",
    )
    statement_date = None
    if isinstance(raw, Mapping) and raw.get("date"):
        statement_date = to_calendar_date(raw["date"]) or str(raw["date"])
    return _build_default(statement_date)


def normalize_statement_with_warnings(
    raw: Any,
    *,
    strict: bool = False,
    substitute_zero_totals: bool = True,
) -> tuple[Statement, list[NormalizationWarning]]:
    """
    Normalize a raw balance-sheet record and report the fallbacks taken.

    Args:
        raw: Raw record (any of the supported shapes), an existing
            Statement (returned unchanged), or anything else.
        strict: If True, raise StatementShapeError for an unrecognized
            shape instead of returning the default statement.
        substitute_zero_totals: If True (default), zero or missing totals
            are replaced by 1 so that every ratio is defined. If False,
            totals keep their value and ratios with a zero denominator
            are None.

    Returns:
        A (Statement, warnings) tuple.
    """
    if isinstance(raw, Statement):
        return raw, []

    warnings: list[NormalizationWarning] = []
    shape = classify_statement(raw)
    logger.debug("Normalizing balance sheet with shape %s", shape.value)

    if shape is StatementShape.CANONICAL:
        statement = _from_canonical(raw, substitute_zero_totals, warnings)
    elif shape is StatementShape.REPORT_JSON:
        statement = _from_report_json(raw, substitute_zero_totals, warnings)
    elif shape is StatementShape.BREAKDOWN:
        statement = _from_breakdowns(raw, substitute_zero_totals, warnings)
    else:
        if strict:
            raise StatementShapeError(
                f"Unrecognized balance sheet structure: {type(raw).__name__}"
            )
        statement = _from_unrecognized(raw, warnings)

    return statement, warnings


def normalize_statement(
    raw: Any,
    *,
    strict: bool = False,
    substitute_zero_totals: bool = True,
) -> Statement:
    """Normalize a raw balance-sheet record into a canonical Statement."""
    statement, _ = normalize_statement_with_warnings(
        raw,
        strict=strict,
        substitute_zero_totals=substitute_zero_totals,
    )
    return statement


def normalize_statements(
    raws: Optional[Iterable[Any]],
    *,
    strict: bool = False,
    substitute_zero_totals: bool = True,
) -> list[Statement]:
    """Normalize every record of ``raws``, preserving input order."""
    if not raws:
        return []
    return [
        normalize_statement(
            raw,
            strict=strict,
            substitute_zero_totals=substitute_zero_totals,
        )
        for raw in raws
    ]


def normalize_statements_with_warnings(
    raws: Optional[Iterable[Any]],
    *,
    strict: bool = False,
    substitute_zero_totals: bool = True,
) -> tuple[list[Statement], list[NormalizationWarning]]:
    """Normalize every record of ``raws`` and collect all warnings."""
    statements: list[Statement] = []
    all_warnings: list[NormalizationWarning] = []
    for raw in raws or []:
        statement, warnings = normalize_statement_with_warnings(
            raw,
            strict=strict,
            substitute_zero_totals=substitute_zero_totals,
        )
        statements.append(statement)
        all_warnings.extend(warnings)
    return statements, all_warnings
