"""
Ledger errors: every rejection of an order is one of these.

Raised synchronously from the order call with no state change; callers
(session, UI) decide how to present them.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base type for all portfolio ledger rejections."""


class InsufficientFunds(LedgerError):
    """BUY cost exceeds available cash."""

    def __init__(self, symbol: str, required: float, available: float) -> None:
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient buying power for {symbol}: cost {required:,.2f} > cash {available:,.2f}"
        )


class InsufficientShares(LedgerError):
    """SELL quantity exceeds held shares, or the symbol is not held."""

    def __init__(self, symbol: str, requested: int, held: int) -> None:
        self.symbol = symbol
        self.requested = requested
        self.held = held
        super().__init__(f"Insufficient shares to sell {symbol}: requested {requested}, held {held}")


class InvalidInput(LedgerError, ValueError):
    """Malformed order or seed data (non-positive quantity/price, empty symbol, bad side)."""
