"""
paperdesk: paper-trading portfolio ledger driven by a simulated price feed.

No broker connectivity, no persistence. One ledger per process, owned
explicitly and passed to whoever needs it.
"""

__version__ = "0.1.0"

from paperdesk.errors import InsufficientFunds, InsufficientShares, InvalidInput, LedgerError
from paperdesk.feed import PriceFeed
from paperdesk.hub import SubscriptionHub
from paperdesk.ledger import PortfolioLedger
from paperdesk.order import ExecutedTrade, Side
from paperdesk.portfolio import Holding, Portfolio
from paperdesk.query import PortfolioQuery

__all__ = [
    "InsufficientFunds",
    "InsufficientShares",
    "InvalidInput",
    "LedgerError",
    "PriceFeed",
    "SubscriptionHub",
    "PortfolioLedger",
    "ExecutedTrade",
    "Side",
    "Holding",
    "Portfolio",
    "PortfolioQuery",
]
