"""
Portfolio: cash, holdings and equity as handed to callers.

Snapshots only. The ledger owns the live state and builds a new Portfolio
after every read or mutation; nothing here can write back into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Holding:
    """One position. avg_price is the cost basis of shares bought since the position was last closed."""

    symbol: str
    shares: int
    avg_price: float
    current_price: float

    @property
    def market_value(self) -> float:
        return self.shares * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.shares * self.avg_price

    @property
    def unrealized_pnl(self) -> float:
        return self.market_value - self.cost_basis


@dataclass(frozen=True)
class Portfolio:
    """
    Immutable portfolio snapshot. total_equity is cash plus the marked value
    of every holding, computed by the ledger when the snapshot was taken.
    """

    cash: float = 0.0
    holdings: tuple[Holding, ...] = field(default_factory=tuple)
    total_equity: float = 0.0

    def holding(self, symbol: str) -> Holding | None:
        """Holding for symbol, or None if not held."""
        for h in self.holdings:
            if h.symbol == symbol:
                return h
        return None

    def position(self, symbol: str) -> int:
        """Shares held in symbol. 0 if not present."""
        h = self.holding(symbol)
        return h.shares if h is not None else 0

    def symbols(self) -> list[str]:
        return [h.symbol for h in self.holdings]

    @property
    def holdings_value(self) -> float:
        return sum(h.market_value for h in self.holdings)
