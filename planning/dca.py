"""
Dollar-cost-averaging planner: what a new buy does to the average price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class DCAInputs:
    current_shares: int
    current_avg_price: float
    new_price: float
    invest_amount: float


@dataclass(frozen=True)
class DCAResult:
    new_total_shares: int
    new_avg_price: float
    total_invested: float
    new_shares: int
    summary: str


def calculate_dca(inputs: DCAInputs) -> DCAResult:
    """
    Buy as many whole shares of invest_amount as new_price allows and
    return the resulting position. Leftover cash is not invested.
    """
    if inputs.new_price <= 0:
        raise ValueError(f"new_price must be positive, got {inputs.new_price}")
    if inputs.current_shares < 0 or inputs.invest_amount < 0:
        raise ValueError("current_shares and invest_amount must be non-negative")

    new_shares = math.floor(inputs.invest_amount / inputs.new_price)
    total_shares = inputs.current_shares + new_shares
    total_invested = inputs.current_shares * inputs.current_avg_price + new_shares * inputs.new_price
    new_avg = total_invested / total_shares if total_shares > 0 else 0.0

    return DCAResult(
        new_total_shares=total_shares,
        new_avg_price=round(new_avg, 2),
        total_invested=round(total_invested, 2),
        new_shares=new_shares,
        summary=(
            f"Buying {new_shares} shares at ${inputs.new_price:.2f} brings your average "
            f"from ${inputs.current_avg_price:.2f} to ${new_avg:.2f}."
        ),
    )
