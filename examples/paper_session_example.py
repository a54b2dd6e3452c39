"""
Paper trading example: live-marked portfolio with risk-sized orders.

Shows: PriceFeed ticking in the background, TradingSession keeping the
ledger marked to it, a sized BUY, a DCA plan, a rejected order, and the
holdings table from PortfolioQuery.
"""

from __future__ import annotations

import asyncio
import logging

from paperdesk import InsufficientFunds, PortfolioQuery
from paperdesk.config import Settings, build_feed, build_ledger
from paperdesk.order import ExecutedTrade
from paperdesk.portfolio import Portfolio
from paperdesk.session import TradingSession
from planning import TOOL_DECLARATIONS, DCAInputs, PositionInputs, calculate_dca, run_tool


def print_fill_observer(trade: ExecutedTrade, portfolio: Portfolio) -> None:
    print(f"  [Observer] FILL {trade.side.value} {trade.quantity} {trade.symbol} @ {trade.price:.2f}"
          f" -> equity {portfolio.total_equity:,.2f}")


async def main() -> None:
    settings = Settings.from_env()
    ledger = build_ledger(settings)
    feed = build_feed(settings)
    session = TradingSession(ledger, feed, observers=[print_fill_observer])
    query = PortfolioQuery(ledger)

    session.start()
    portfolio = await query.get_portfolio()
    print(f"Start: cash={portfolio.cash:,.2f}, equity={portfolio.total_equity:,.2f}")

    print(f"\n--- Chat tools: {[t['name'] for t in TOOL_DECLARATIONS]} ---")
    sized = run_tool("size_position", {"account_size": portfolio.total_equity, "max_risk_pct": 1.0,
                                       "entry_price": 850.0, "stop_price": 820.0})
    print(sized["result"]["summary"])

    print("\n--- Risk-sized BUY ---")
    await session.buy_sized("NVDA", PositionInputs(portfolio.total_equity, 1.0, 850.0, 820.0))

    print("\n--- DCA plan for AAPL ---")
    aapl = ledger.snapshot().holding("AAPL")
    plan = calculate_dca(DCAInputs(aapl.shares, aapl.avg_price, feed.get_price("AAPL"), 2_000.0))
    print(plan.summary)
    await session.place_order("AAPL", "BUY", plan.new_shares)

    print("\n--- Oversized BUY (rejected) ---")
    try:
        await session.place_order("MSFT", "BUY", 10_000)
    except InsufficientFunds as e:
        print(f"  Rejected: {e}")

    await asyncio.sleep(settings.tick_interval * 3)
    session.stop()

    print("\n--- Holdings ---")
    print(query.holdings_frame().to_string(index=False))
    print(f"Equity points recorded: {len(session.equity_curve)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(main())
