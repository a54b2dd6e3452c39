"""
Trading session: wires the price feed to the ledger.

Keeps the feed watching exactly the held symbols, marks the ledger to every
price batch, and places orders (optionally sized by planning.sizing).
Rejected orders are logged and re-raised; fills go to observers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from paperdesk.errors import InvalidInput, LedgerError
from paperdesk.feed import PriceFeed
from paperdesk.ledger import PortfolioLedger
from paperdesk.order import ExecutedTrade, Side
from paperdesk.portfolio import Portfolio
from planning.sizing import PositionInputs, calculate_position_size

logger = logging.getLogger(__name__)


class FillObserver(Protocol):
    """Post-trade callback with the fill and the resulting snapshot."""

    def __call__(self, trade: ExecutedTrade, portfolio: Portfolio) -> None:
        ...


@dataclass
class RejectedOrderLog:
    """One rejected order as submitted (side may be the raw unparsed value) and why."""

    reason: str
    timestamp: datetime
    symbol: str
    side: Side | str
    quantity: int
    price: float | None


class TradingSession:
    """
    Owns the subscription that keeps a PortfolioLedger marked to a PriceFeed.
    Flow: start() → feed ticks → on_prices → ledger.update_live_prices;
    place_order → ledger → (holdings changed) resync watched symbols → observers.
    """

    def __init__(
        self,
        ledger: PortfolioLedger,
        feed: PriceFeed,
        *,
        observers: Sequence[FillObserver] = (),
    ) -> None:
        self.ledger = ledger
        self.feed = feed
        self.observers: list[FillObserver] = list(observers)
        self._rejected_log: list[RejectedOrderLog] = []
        self._equity_curve: list[tuple[datetime, float]] = []

    @property
    def equity_curve(self) -> list[tuple[datetime, float]]:
        return list(self._equity_curve)

    def get_rejected_log(self) -> list[RejectedOrderLog]:
        return list(self._rejected_log)

    def start(self) -> None:
        """Connect the feed and subscribe to the held symbols. Needs a running event loop."""
        self.feed.connect()
        self.sync_watched_symbols()

    def stop(self) -> None:
        self.feed.unsubscribe(self.on_prices)
        self.feed.disconnect()

    def sync_watched_symbols(self) -> None:
        """Point the feed at the current holdings and resubscribe (delivers a baseline batch)."""
        symbols = self.ledger.snapshot().symbols()
        self.feed.set_watched_symbols(symbols)
        self.feed.unsubscribe(self.on_prices)
        if symbols:
            self.feed.subscribe(symbols, self.on_prices)
        logger.info("Watching %s", symbols)

    def on_prices(self, batch: Mapping[str, float]) -> None:
        if self.ledger.update_live_prices(batch):
            self._equity_curve.append((datetime.now(), self.ledger.total_equity))

    async def place_order(
        self,
        symbol: str,
        side: Side | str,
        quantity: int,
        price: float | None = None,
    ) -> Portfolio:
        """
        Place a market order. price defaults to the feed's last price for
        symbol. Ledger errors are recorded in the rejected log and re-raised.
        """
        before = set(self.ledger.snapshot().symbols())
        try:
            side = Side.parse(side)
            if price is None:
                price = self.feed.get_or_create_price(symbol)
            trade, portfolio = await self.ledger.submit_order(symbol, side, quantity, price)
        except LedgerError as e:
            self._rejected_log.append(
                RejectedOrderLog(
                    reason=str(e),
                    timestamp=datetime.now(),
                    symbol=symbol,
                    side=side,
                    quantity=quantity,
                    price=price,
                )
            )
            raise

        self._equity_curve.append((trade.timestamp, portfolio.total_equity))
        if set(portfolio.symbols()) != before:
            self.sync_watched_symbols()
        for obs in self.observers:
            obs(trade, portfolio)
        return portfolio

    async def buy_sized(self, symbol: str, inputs: PositionInputs) -> Portfolio:
        """BUY the risk-sized share count at the entry price."""
        result = calculate_position_size(inputs)
        if not result.is_valid:
            raise InvalidInput(f"Cannot size position: {result.error}")
        if result.position_size_shares <= 0:
            raise InvalidInput("Risk budget is smaller than the risk of one share")
        logger.info("%s", result.summary)
        return await self.place_order(symbol, Side.BUY, result.position_size_shares, inputs.entry_price)
