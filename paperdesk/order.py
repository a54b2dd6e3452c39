"""
Order side and trade records for the paper ledger.

Immutable. Only immediate market orders exist: an order carries its
execution price and either applies in full or is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from paperdesk.errors import InvalidInput


class Side(Enum):
    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, value: "Side | str") -> "Side":
        """Accept a Side or a case-insensitive name ("BUY", "sell")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidInput(f"Unknown order side: {value!r}")


@dataclass(frozen=True)
class ExecutedTrade:
    """Record of an order that was applied to the ledger."""

    symbol: str
    side: Side
    quantity: int
    price: float
    timestamp: datetime
    order_id: str | None = None

    @property
    def notional(self) -> float:
        return self.quantity * self.price
