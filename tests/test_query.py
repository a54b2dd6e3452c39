"""
Tests for paperdesk.query: PortfolioQuery snapshots and exports.
"""

import numpy as np
import pytest

from paperdesk import Holding, PortfolioLedger, PortfolioQuery
from paperdesk.query import HOLDING_COLUMNS


def _query():
    ledger = PortfolioLedger(
        1_000.0,
        [Holding("AAPL", 10, 150.0, 200.0), Holding("TSLA", 5, 220.0, 200.0)],
        read_latency=0,
        order_latency=0,
    )
    return ledger, PortfolioQuery(ledger)


@pytest.mark.asyncio
async def test_get_portfolio_delegates():
    ledger, query = _query()
    assert await query.get_portfolio() == ledger.snapshot()
    assert query.snapshot() == ledger.snapshot()


def test_query_sees_later_mutations():
    ledger, query = _query()
    ledger.execute("AAPL", "SELL", 10, 210.0)
    assert query.snapshot().holding("AAPL") is None


def test_holdings_frame():
    _, query = _query()
    df = query.holdings_frame()
    assert list(df.columns) == HOLDING_COLUMNS
    assert list(df["symbol"]) == ["AAPL", "TSLA"]
    aapl = df[df["symbol"] == "AAPL"].iloc[0]
    assert aapl["market_value"] == 2_000.0
    assert aapl["unrealized_pnl"] == 500.0
    assert aapl["weight"] == pytest.approx(2_000.0 / 4_000.0)
    assert df["weight"].sum() == pytest.approx(3_000.0 / 4_000.0)


def test_holdings_frame_quantity_can_be_sold_back():
    ledger, query = _query()
    frame = query.holdings_frame().set_index("symbol")
    shares = frame.loc["TSLA", "shares"]
    assert isinstance(shares, np.integer)
    p = ledger.execute("TSLA", "SELL", shares, frame.loc["TSLA", "current_price"])
    assert p.holding("TSLA") is None
    assert p.cash == 2_000.0


def test_holdings_frame_empty():
    query = PortfolioQuery(PortfolioLedger(0.0, read_latency=0, order_latency=0))
    df = query.holdings_frame()
    assert df.empty
    assert list(df.columns) == HOLDING_COLUMNS


def test_to_dict():
    _, query = _query()
    data = query.to_dict()
    assert data["cash"] == 1_000.0
    assert data["holdings_value"] == 3_000.0
    assert data["total_equity"] == 4_000.0
    assert data["holdings"][1] == {"symbol": "TSLA", "shares": 5, "avg_price": 220.0, "current_price": 200.0}
