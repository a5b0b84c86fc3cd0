# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Computation of the standard balance-sheet ratios for FinBoard.

Six ratios are derived from the totals of a canonical statement:

    current_ratio         = total_asset     / total_liability
    debt_to_equity_ratio  = total_liability / total_equity
    return_on_equity      = net_income      / total_equity
    equity_multiplier     = total_asset     / total_equity
    debt_ratio            = total_liability / total_asset
    net_profit_margin     = net_income      / total_asset

Values are plain floating-point divisions. No rounding is applied here:
rounding and formatting belong to the presentation layer (report.py).

Division by zero
----------------
The normalizer (statements.py) substitutes ``1`` for a zero or missing
total before calling this module, so in the default configuration every
ratio is a number. When that substitution is disabled, a ratio whose
denominator is zero cannot be computed and its value is ``None``.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Optional

# Display order of the ratios, shared by the series builder and the report.
RATIO_KEYS: tuple[str, ...] = (
    "current_ratio",
    "debt_to_equity_ratio",
    "return_on_equity",
    "equity_multiplier",
    "debt_ratio",
    "net_profit_margin",
)

RATIO_LABELS: dict[str, str] = {
    "current_ratio": "Current Ratio",
    "debt_to_equity_ratio": "Debt to Equity Ratio",
    "return_on_equity": "Return on Equity",
    "equity_multiplier": "Equity Multiplier",
    "debt_ratio": "Debt Ratio",
    "net_profit_margin": "Net Profit Margin",
}


@dataclass(frozen=True)
class Ratios:
    """
    Ratios computed for one canonical statement.

    Attributes:
        current_ratio: total assets / total liabilities.
        debt_to_equity_ratio: total liabilities / total equity.
        return_on_equity: net income / total equity.
        equity_multiplier: total assets / total equity.
        debt_ratio: total liabilities / total assets.
        net_profit_margin: net income / total assets.

    Each value is a float, or None when the ratio is not applicable
    (zero denominator).
    """

    current_ratio: Optional[float]
    debt_to_equity_ratio: Optional[float]
    return_on_equity: Optional[float]
    equity_multiplier: Optional[float]
    debt_ratio: Optional[float]
    net_profit_margin: Optional[float]

    def as_dict(self) -> dict[str, Optional[float]]:
        """Return the ratios as a plain dictionary keyed by ratio name."""
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], fallback: "Ratios") -> "Ratios":
        """
        Build Ratios from a (possibly partial) mapping.

        Keys missing from ``data``, or whose value is not numeric, are taken
        from ``fallback``.
        """
        values: dict[str, Optional[float]] = {}
        for key in RATIO_KEYS:
            raw = data.get(key)
            try:
                values[key] = float(raw) if raw is not None else getattr(fallback, key)
            except (TypeError, ValueError):
                values[key] = getattr(fallback, key)
        return cls(**values)


def _divide(numerator: float, denominator: float) -> Optional[float]:
    try:
        return float(numerator) / float(denominator)
    except ZeroDivisionError:
        return None


def compute_ratios(
    total_asset: float,
    total_liability: float,
    total_equity: float,
    net_income: float,
) -> Ratios:
    """
    Compute the six standard ratios from statement totals.

    Args:
        total_asset: Total assets of the statement.
        total_liability: Total liabilities of the statement.
        total_equity: Total equity of the statement.
        net_income: Net income of the statement.

    Returns:
        A Ratios instance. A ratio whose denominator is zero has value None.
    """
    return Ratios(
        current_ratio=_divide(total_asset, total_liability),
        debt_to_equity_ratio=_divide(total_liability, total_equity),
        return_on_equity=_divide(net_income, total_equity),
        equity_multiplier=_divide(total_asset, total_equity),
        debt_ratio=_divide(total_liability, total_asset),
        net_profit_margin=_divide(net_income, total_asset),
    )
