"""
Read-only view of the ledger for external consumers (UI, reports, chat tools).

Holds no state of its own; every call goes to the ledger.
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from paperdesk.ledger import PortfolioLedger
from paperdesk.portfolio import Portfolio

HOLDING_COLUMNS = [
    "symbol",
    "shares",
    "avg_price",
    "current_price",
    "market_value",
    "cost_basis",
    "unrealized_pnl",
    "weight",
]


class PortfolioQuery:
    """Snapshot and export accessors over a PortfolioLedger."""

    def __init__(self, ledger: PortfolioLedger) -> None:
        self._ledger = ledger

    async def get_portfolio(self) -> Portfolio:
        return await self._ledger.get_portfolio()

    def snapshot(self) -> Portfolio:
        return self._ledger.snapshot()

    def holdings_frame(self) -> pd.DataFrame:
        """
        One row per holding. weight is market value as a fraction of total
        equity (0 when equity is 0).
        """
        p = self._ledger.snapshot()
        rows = [
            {
                "symbol": h.symbol,
                "shares": h.shares,
                "avg_price": h.avg_price,
                "current_price": h.current_price,
                "market_value": h.market_value,
                "cost_basis": h.cost_basis,
                "unrealized_pnl": h.unrealized_pnl,
                "weight": h.market_value / p.total_equity if p.total_equity else 0.0,
            }
            for h in p.holdings
        ]
        return pd.DataFrame(rows, columns=HOLDING_COLUMNS)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready export of the current snapshot."""
        p = self._ledger.snapshot()
        return {
            "cash": p.cash,
            "holdings_value": p.holdings_value,
            "total_equity": p.total_equity,
            "holdings": [
                {
                    "symbol": h.symbol,
                    "shares": h.shares,
                    "avg_price": h.avg_price,
                    "current_price": h.current_price,
                }
                for h in p.holdings
            ],
        }
