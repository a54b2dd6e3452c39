"""
Paper portfolio ledger: the single owner of cash, holdings and equity.

Simulates fills at the price given with the order; no broker connection.
Every mutation (order or price sync) is one critical section with no await
inside, so feed callbacks and order placement never interleave. Callers get
immutable Portfolio snapshots, never the internal state.
"""

from __future__ import annotations

import asyncio
import logging
import math
import numbers
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from paperdesk.errors import InsufficientFunds, InsufficientShares, InvalidInput
from paperdesk.order import ExecutedTrade, Side
from paperdesk.portfolio import Holding, Portfolio

logger = logging.getLogger(__name__)


@dataclass
class _Position:
    shares: int
    avg_price: float
    current_price: float


def _check_symbol(symbol: str) -> str:
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidInput(f"Invalid symbol: {symbol!r}")
    return symbol


def _check_quantity(quantity: float) -> int:
    """Whole, positive share count. 10.0 and numpy integers are accepted; 10.5 is not."""
    if isinstance(quantity, bool) or not isinstance(quantity, numbers.Real):
        raise InvalidInput(f"Quantity must be a number, got {quantity!r}")
    if not isinstance(quantity, numbers.Integral) and not float(quantity).is_integer():
        raise InvalidInput(f"Quantity must be a whole number of shares, got {quantity}")
    if quantity <= 0:
        raise InvalidInput(f"Quantity must be positive, got {quantity}")
    return int(quantity)


def _check_price(price: float) -> float:
    if isinstance(price, bool) or not isinstance(price, numbers.Real):
        raise InvalidInput(f"Price must be a number, got {price!r}")
    if not math.isfinite(price) or price <= 0:
        raise InvalidInput(f"Price must be positive, got {price}")
    return float(price)


class PortfolioLedger:
    """
    Paper trading ledger. Maintains cash and holdings; get_portfolio and
    place_order simulate backend latency (read_latency, order_latency
    seconds) before touching state. snapshot/execute are the same operations
    without the delay.
    """

    def __init__(
        self,
        initial_cash: float = 100_000.0,
        holdings: Iterable[Holding] | None = None,
        *,
        read_latency: float = 0.5,
        order_latency: float = 0.8,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if not math.isfinite(initial_cash) or initial_cash < 0:
            raise InvalidInput(f"Initial cash must be non-negative, got {initial_cash}")
        self._cash = float(initial_cash)
        self._holdings: dict[str, _Position] = {}
        for h in holdings or ():
            symbol = _check_symbol(h.symbol)
            if symbol in self._holdings:
                raise InvalidInput(f"Duplicate holding for {symbol}")
            if h.current_price < 0:
                raise InvalidInput(f"Current price must be non-negative, got {h.current_price}")
            self._holdings[symbol] = _Position(
                shares=_check_quantity(h.shares),
                avg_price=_check_price(h.avg_price),
                current_price=float(h.current_price),
            )
        self.read_latency = read_latency
        self.order_latency = order_latency
        self._clock = clock
        self._order_log: list[ExecutedTrade] = []
        self._lock = threading.Lock()
        self._total_equity = 0.0
        self._recompute_equity()

    # --- reads ---

    @property
    def cash(self) -> float:
        with self._lock:
            return self._cash

    @property
    def total_equity(self) -> float:
        with self._lock:
            return self._total_equity

    def _recompute_equity(self) -> None:
        holdings_value = sum(p.shares * p.current_price for p in self._holdings.values())
        self._total_equity = self._cash + holdings_value

    def _snapshot_locked(self) -> Portfolio:
        return Portfolio(
            cash=self._cash,
            holdings=tuple(
                Holding(symbol=sym, shares=p.shares, avg_price=p.avg_price, current_price=p.current_price)
                for sym, p in self._holdings.items()
            ),
            total_equity=self._total_equity,
        )

    def snapshot(self) -> Portfolio:
        """Immutable copy of current state with equity recomputed."""
        with self._lock:
            self._recompute_equity()
            return self._snapshot_locked()

    async def get_portfolio(self) -> Portfolio:
        """Snapshot after the simulated read round-trip."""
        await asyncio.sleep(self.read_latency)
        return self.snapshot()

    def get_order_log(self) -> list[ExecutedTrade]:
        """All applied orders, oldest first."""
        with self._lock:
            return list(self._order_log)

    # --- mutations ---

    async def place_order(self, symbol: str, side: Side | str, quantity: int, price: float) -> Portfolio:
        """Execute a market order after the simulated execution delay. Returns the post-trade snapshot."""
        _, snapshot = await self.submit_order(symbol, side, quantity, price)
        return snapshot

    async def submit_order(
        self, symbol: str, side: Side | str, quantity: int, price: float
    ) -> tuple[ExecutedTrade, Portfolio]:
        """Like place_order, but also returns this order's own fill record."""
        await asyncio.sleep(self.order_latency)
        return self.fill(symbol, side, quantity, price)

    def execute(self, symbol: str, side: Side | str, quantity: int, price: float) -> Portfolio:
        """Synchronous place_order: apply the order now and return the post-trade snapshot."""
        _, snapshot = self.fill(symbol, side, quantity, price)
        return snapshot

    def fill(self, symbol: str, side: Side | str, quantity: int, price: float) -> tuple[ExecutedTrade, Portfolio]:
        """
        Apply a market order at `price`, all or nothing.

        BUY: cost must not exceed cash; the cost basis becomes the weighted
        average of old and new shares. SELL: shares must be held; cost basis
        is unchanged and a position sold down to zero is removed. Either way
        the execution price becomes the holding's current price.

        Returns the fill record and the post-trade snapshot. Raises
        InvalidInput, InsufficientFunds or InsufficientShares with the
        ledger untouched.
        """
        symbol = _check_symbol(symbol)
        side = Side.parse(side)
        qty = _check_quantity(quantity)
        px = _check_price(price)

        with self._lock:
            pos = self._holdings.get(symbol)
            if side == Side.BUY:
                cost = qty * px
                if cost > self._cash:
                    logger.info("Order rejected: BUY %s %s @ %.2f, cost %.2f > cash %.2f", qty, symbol, px, cost, self._cash)
                    raise InsufficientFunds(symbol, required=cost, available=self._cash)
                self._cash -= cost
                if pos is not None:
                    total_cost = pos.shares * pos.avg_price + cost
                    pos.shares += qty
                    pos.avg_price = total_cost / pos.shares
                    pos.current_price = px
                else:
                    self._holdings[symbol] = _Position(shares=qty, avg_price=px, current_price=px)
            else:
                held = pos.shares if pos is not None else 0
                if pos is None or held < qty:
                    logger.info("Order rejected: SELL %s %s, held %s", qty, symbol, held)
                    raise InsufficientShares(symbol, requested=qty, held=held)
                self._cash += qty * px
                pos.shares -= qty
                pos.current_price = px
                if pos.shares == 0:
                    del self._holdings[symbol]

            self._recompute_equity()
            trade = ExecutedTrade(
                symbol=symbol,
                side=side,
                quantity=qty,
                price=px,
                timestamp=self._clock(),
                order_id=f"paper-{uuid.uuid4().hex[:12]}",
            )
            self._order_log.append(trade)
            snapshot = self._snapshot_locked()

        logger.info(
            "FILL %s %s %s @ %.2f (order_id=%s), cash=%.2f equity=%.2f",
            side.value, qty, symbol, px, trade.order_id, snapshot.cash, snapshot.total_equity,
        )
        return trade, snapshot

    def update_live_prices(self, updates: Mapping[str, float]) -> int:
        """
        Mark held symbols to the latest feed prices. Prices for symbols not
        held are dropped, not remembered for a later BUY. Returns how many
        holdings changed.
        """
        touched = 0
        with self._lock:
            for symbol, pos in self._holdings.items():
                price = updates.get(symbol)
                if price is None or price <= 0:
                    continue
                pos.current_price = float(price)
                touched += 1
            if touched:
                self._recompute_equity()
        return touched
