"""
Risk-based position sizing.

How many shares can be bought so that a stop-out between entry and stop
loses at most max_risk_pct of the account. Pure function; the result's
position_size_shares is what gets passed to the ledger as order quantity.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class PositionInputs:
    account_size: float
    max_risk_pct: float
    entry_price: float
    stop_price: float


@dataclass(frozen=True)
class PositionResult:
    """Sizing outcome. When is_valid is False the numeric fields are 0 and error says why."""

    max_dollar_risk: float
    position_size_shares: int
    risk_per_share: float
    summary: str
    is_valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["error"] is None:
            del data["error"]
        return data


def _invalid(summary: str, error: str) -> PositionResult:
    return PositionResult(
        max_dollar_risk=0.0,
        position_size_shares=0,
        risk_per_share=0.0,
        summary=summary,
        is_valid=False,
        error=error,
    )


def calculate_position_size(inputs: PositionInputs) -> PositionResult:
    """
    Size a position from account, risk %, entry and stop.

    Shares are floored to a whole number; dollar figures are rounded to cents.
    Works for shorts too (stop above entry) since risk per share is absolute.
    """
    account = inputs.account_size
    entry = inputs.entry_price
    stop = inputs.stop_price
    if entry <= 0 or stop <= 0 or account <= 0:
        return _invalid("Prices and account size must be positive numbers.", "Values must be positive.")

    max_dollar_risk = account * (inputs.max_risk_pct / 100.0)
    risk_per_share = abs(entry - stop)
    if risk_per_share == 0:
        return _invalid("Entry and stop price cannot be the same.", "Invalid spread.")

    shares = max(0, math.floor(max_dollar_risk / risk_per_share))
    summary = (
        f"With a ${account:.2f} account and {inputs.max_risk_pct:.2f}% max risk, "
        f"you can risk up to ${max_dollar_risk:.2f}. At an entry of ${entry:.2f} "
        f"and stop at ${stop:.2f}, risk per share is ${risk_per_share:.2f}, "
        f"so you can buy {shares} shares."
    )
    return PositionResult(
        max_dollar_risk=round(max_dollar_risk, 2),
        position_size_shares=shares,
        risk_per_share=round(risk_per_share, 2),
        summary=summary,
        is_valid=True,
    )
