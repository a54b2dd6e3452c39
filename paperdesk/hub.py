"""
Subscription hub: registered price listeners and the watched symbol set.

Listeners are called synchronously in registration order; each one receives
the same read-only batch. The listener set is guarded by a re-entrant lock
because subscribe/unsubscribe may race with a dispatch running on another
thread, and listeners may call back into the hub.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

logger = logging.getLogger(__name__)

PriceBatch = Mapping[str, float]
PriceListener = Callable[[PriceBatch], None]


class SubscriptionHub:
    """
    Fan-out of price batches to listeners, plus the set of symbols the feed
    should move. price_source is the feed's lazy getter: it returns the last
    known price and seeds unseen symbols.
    """

    def __init__(self, price_source: Callable[[str], float]) -> None:
        self._price_source = price_source
        self._listeners: dict[PriceListener, None] = {}
        self._watched: set[str] = set()
        self._lock = threading.RLock()

    @property
    def watched(self) -> frozenset[str]:
        """Copy of the watched set."""
        with self._lock:
            return frozenset(self._watched)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def watch(self, symbols: Iterable[str]) -> None:
        """Add symbols to the watched set, seeding any unseen ones."""
        symbols = list(symbols)
        for s in symbols:
            self._price_source(s)
        with self._lock:
            self._watched.update(symbols)

    def replace_watched(self, symbols: Iterable[str]) -> None:
        """Swap the whole watched set in one step. Not additive."""
        symbols = set(symbols)
        for s in symbols:
            self._price_source(s)
        with self._lock:
            self._watched = symbols

    def subscribe(self, symbols: Iterable[str], listener: PriceListener) -> None:
        """
        Watch symbols and register listener. Before returning, the listener
        gets one batch with the current price of every symbol passed here,
        moved or not. Earlier subscriptions are left alone.
        """
        symbols = list(symbols)
        self.watch(symbols)
        # Registration and baseline delivery share the lock so a concurrent
        # publish cannot reach this listener ahead of its baseline.
        with self._lock:
            self._listeners[listener] = None
            initial = MappingProxyType({s: self._price_source(s) for s in symbols})
            logger.debug("Listener subscribed for %s", symbols)
            listener(initial)

    def unsubscribe(self, listener: PriceListener) -> None:
        """Remove listener. Unknown listeners are ignored."""
        with self._lock:
            self._listeners.pop(listener, None)

    def publish(self, batch: Mapping[str, float]) -> None:
        """Deliver one complete batch to every registered listener."""
        frozen = MappingProxyType(dict(batch))
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(frozen)
            except Exception:  # noqa: BLE001
                logger.exception("Price listener %r failed", listener)
