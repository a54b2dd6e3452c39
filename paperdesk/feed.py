"""
Simulated market data feed: a bounded random walk for watched symbols.

No external data. Prices live here (the canonical last price per symbol);
ticks run on an asyncio task started by connect() and stopped by disconnect().
The random source is injected so tests can replay exact sequences.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Protocol

import numpy as np
import pandas as pd

from paperdesk.hub import PriceListener, SubscriptionHub

logger = logging.getLogger(__name__)

QUOTE_COLUMNS = ["symbol", "open", "high", "low", "close", "volume"]


class RandomSource(Protocol):
    """What the feed needs from a random generator (numpy Generator satisfies it)."""

    def random(self) -> float:
        ...

    def uniform(self, low: float, high: float) -> float:
        ...


class PriceFeed:
    """
    Mock real-time feed. Each tick, every watched symbol moves with
    probability move_probability; a move is up with probability
    up_probability by a uniform fraction in [0, volatility] of the current
    price, floored at price_floor. Only moved symbols are published.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        *,
        interval: float = 1.5,
        volatility: float = 0.0015,
        up_probability: float = 0.52,
        move_probability: float = 0.5,
        price_floor: float = 0.01,
        seed_range: tuple[float, float] = (100.0, 150.0),
        seed_prices: Mapping[str, float] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if price_floor <= 0:
            raise ValueError("price_floor must be positive")
        self._rng: RandomSource = rng if rng is not None else np.random.default_rng()
        self.interval = interval
        self.volatility = volatility
        self.up_probability = up_probability
        self.move_probability = move_probability
        self.price_floor = price_floor
        self.seed_range = seed_range
        self._prices: dict[str, float] = {}
        self._prices_lock = threading.Lock()
        for sym, price in (seed_prices or {}).items():
            self._prices[sym] = max(price_floor, float(price))
        self._hub = SubscriptionHub(self.get_or_create_price)
        self._task: asyncio.Task | None = None

    @property
    def hub(self) -> SubscriptionHub:
        return self._hub

    @property
    def watched_symbols(self) -> frozenset[str]:
        return self._hub.watched

    @property
    def is_connected(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- lifecycle ---

    def connect(self) -> None:
        """Start ticking every `interval` seconds. No-op if already running. Needs a running event loop."""
        if self.is_connected:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())
        logger.info("Price feed connected (simulated, interval=%ss)", self.interval)

    def disconnect(self) -> None:
        """Stop ticking. A tick already in progress completes; none starts after this returns."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            logger.info("Price feed disconnected")

    async def _run(self) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self.interval)
            if self._task is not me:
                return
            self.tick()

    # --- prices ---

    def get_or_create_price(self, symbol: str) -> float:
        """Last known price; an unseen symbol is seeded uniformly in seed_range and remembered."""
        with self._prices_lock:
            price = self._prices.get(symbol)
            if price is None:
                low, high = self.seed_range
                price = float(self._rng.uniform(low, high))
                self._prices[symbol] = price
                logger.debug("Seeded %s at %.2f", symbol, price)
            return price

    def get_price(self, symbol: str) -> float:
        """Last known price, or 0.0 if the symbol was never seen. Never seeds."""
        with self._prices_lock:
            return self._prices.get(symbol, 0.0)

    def _step(self, price: float) -> float:
        direction = 1.0 if self._rng.random() < self.up_probability else -1.0
        change_pct = float(self._rng.random()) * self.volatility * direction
        return max(self.price_floor, price + price * change_pct)

    def tick(self) -> dict[str, float]:
        """
        Run one update cycle over the watched set. Publishes the moved
        symbols (if any) and returns them.
        """
        updates: dict[str, float] = {}
        for symbol in sorted(self._hub.watched):
            if self._rng.random() >= self.move_probability:
                continue
            current = self.get_or_create_price(symbol)
            new_price = self._step(current)
            with self._prices_lock:
                self._prices[symbol] = new_price
            updates[symbol] = new_price
        if updates:
            logger.debug("Tick: %s", updates)
            self._hub.publish(updates)
        return updates

    # --- subscriptions ---

    def set_watched_symbols(self, symbols: Iterable[str]) -> None:
        """Replace the watched set. Symbols left out stop moving even if a listener still wants them."""
        self._hub.replace_watched(symbols)

    update_watched_symbols = set_watched_symbols

    def subscribe(self, symbols: Iterable[str], listener: PriceListener) -> None:
        self._hub.subscribe(symbols, listener)

    def unsubscribe(self, listener: PriceListener) -> None:
        self._hub.unsubscribe(listener)

    def get_market_data(self, symbols: list[str]) -> pd.DataFrame:
        """One quote row per known symbol (open = high = low = close = last price). Unseen symbols are left out."""
        with self._prices_lock:
            prices = {s: self._prices[s] for s in symbols if s in self._prices}
        rows = [{"symbol": s, "open": p, "high": p, "low": p, "close": p, "volume": 0} for s, p in prices.items()]
        return pd.DataFrame(rows, columns=QUOTE_COLUMNS)
