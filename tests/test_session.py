"""
Tests for paperdesk.session: TradingSession wiring of feed and ledger.
"""

import asyncio
from contextlib import contextmanager

import numpy as np
import pytest

from paperdesk import Holding, InsufficientFunds, InvalidInput, PortfolioLedger, PriceFeed, Side
from paperdesk.session import TradingSession
from planning import PositionInputs


def _session(cash: float = 100_000.0, holdings=None, seed_prices=None, observers=()):
    ledger = PortfolioLedger(cash, holdings, read_latency=0, order_latency=0)
    feed = PriceFeed(np.random.default_rng(3), interval=60.0, move_probability=1.0, seed_prices=seed_prices)
    return TradingSession(ledger, feed, observers=observers)


@contextmanager
def _started(session: TradingSession):
    """Run the session for the body of a with-block; needs a running loop."""
    session.start()
    try:
        yield session
    finally:
        session.stop()


AAPL = Holding(symbol="AAPL", shares=50, avg_price=150.0, current_price=175.0)


# --- start / stop ---


@pytest.mark.asyncio
async def test_start_watches_holdings_and_marks_ledger():
    session = _session(holdings=[AAPL], seed_prices={"AAPL": 180.0})
    with _started(session):
        assert session.feed.is_connected
        assert session.feed.watched_symbols == frozenset({"AAPL"})
        p = session.ledger.snapshot()
    assert p.holding("AAPL").current_price == 180.0
    assert not session.feed.is_connected
    assert session.feed.hub.listener_count == 0


@pytest.mark.asyncio
async def test_tick_marks_ledger_and_records_equity():
    session = _session(holdings=[AAPL], seed_prices={"AAPL": 180.0})
    with _started(session):
        updates = session.feed.tick()
        p = session.ledger.snapshot()
    assert p.holding("AAPL").current_price == updates["AAPL"]
    assert session.equity_curve[-1][1] == pytest.approx(p.total_equity)


# --- orders ---


@pytest.mark.asyncio
async def test_buy_new_symbol_adds_to_watched_set():
    session = _session(holdings=[AAPL])
    with _started(session):
        p = await session.place_order("NVDA", "BUY", 2, 850.0)
        watched = session.feed.watched_symbols
    assert p.position("NVDA") == 2
    assert watched == frozenset({"AAPL", "NVDA"})


@pytest.mark.asyncio
async def test_full_sell_drops_symbol_from_watched_set():
    session = _session(holdings=[AAPL])
    with _started(session):
        await session.place_order("AAPL", Side.SELL, 50, 170.0)
        assert session.feed.watched_symbols == frozenset()


@pytest.mark.asyncio
async def test_price_defaults_to_feed_price():
    session = _session(seed_prices={"MSFT": 410.0})
    with _started(session):
        p = await session.place_order("MSFT", "BUY", 1)
    assert p.holding("MSFT").avg_price == 410.0


@pytest.mark.asyncio
async def test_rejected_order_logged_and_raised():
    session = _session(cash=100.0)
    with _started(session):
        with pytest.raises(InsufficientFunds):
            await session.place_order("AAA", "BUY", 10, 50.0)
    log = session.get_rejected_log()
    assert len(log) == 1
    assert (log[0].symbol, log[0].side, log[0].quantity, log[0].price) == ("AAA", Side.BUY, 10, 50.0)
    assert "Insufficient" in log[0].reason


@pytest.mark.asyncio
async def test_invalid_side_logged_with_raw_value():
    session = _session()
    with _started(session):
        with pytest.raises(InvalidInput):
            await session.place_order("AAA", "HOLD", 1, 10.0)
    log = session.get_rejected_log()
    assert len(log) == 1
    assert log[0].side == "HOLD"
    assert session.ledger.get_order_log() == []


@pytest.mark.asyncio
async def test_observers_receive_fill_and_snapshot():
    seen = []
    session = _session(observers=[lambda trade, portfolio: seen.append((trade, portfolio))])
    with _started(session):
        await session.place_order("AAA", "BUY", 3, 20.0)
    trade, portfolio = seen[0]
    assert (trade.symbol, trade.side, trade.quantity, trade.price) == ("AAA", Side.BUY, 3, 20.0)
    assert portfolio.position("AAA") == 3


@pytest.mark.asyncio
async def test_observers_get_their_own_fill_when_orders_overlap():
    seen = []
    session = _session(observers=[lambda trade, portfolio: seen.append(trade)])
    session.ledger.order_latency = 0.01
    with _started(session):
        await asyncio.gather(
            session.place_order("AAA", "BUY", 1, 10.0),
            session.place_order("BBB", "BUY", 2, 20.0),
            session.place_order("CCC", "BUY", 3, 30.0),
        )
    assert sorted((t.symbol, t.quantity) for t in seen) == [("AAA", 1), ("BBB", 2), ("CCC", 3)]
    assert {t.order_id for t in seen} == {t.order_id for t in session.ledger.get_order_log()}


@pytest.mark.asyncio
async def test_concurrent_orders_apply_atomically():
    session = _session(cash=1_000.0)
    with _started(session):
        results = await asyncio.gather(
            *(session.place_order("AAA", "BUY", 1, 100.0) for _ in range(15)),
            return_exceptions=True,
        )
    failures = [r for r in results if isinstance(r, InsufficientFunds)]
    assert len(failures) == 5
    p = session.ledger.snapshot()
    assert p.cash == 0.0
    assert p.position("AAA") == 10


# --- buy_sized ---


@pytest.mark.asyncio
async def test_buy_sized_uses_position_size_and_entry():
    session = _session(cash=10_000.0)
    with _started(session):
        p = await session.buy_sized("AAA", PositionInputs(10_000.0, 1.0, 50.0, 48.0))
    h = p.holding("AAA")
    assert h.shares == 50
    assert h.avg_price == 50.0
    assert p.cash == 10_000.0 - 50 * 50.0


@pytest.mark.asyncio
async def test_buy_sized_rejects_invalid_sizing():
    session = _session()
    with _started(session):
        with pytest.raises(InvalidInput):
            await session.buy_sized("AAA", PositionInputs(10_000.0, 1.0, 50.0, 50.0))
        with pytest.raises(InvalidInput):
            await session.buy_sized("AAA", PositionInputs(100.0, 1.0, 500.0, 100.0))
    assert session.ledger.get_order_log() == []
