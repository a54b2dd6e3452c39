"""
Runtime settings from environment variables.

Defaults match the reference simulation: 100k paper cash, 1.5s ticks,
0.15% max move per tick, 0.5s / 0.8s simulated read / order latency.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

import numpy as np

from paperdesk.feed import PriceFeed
from paperdesk.ledger import PortfolioLedger
from paperdesk.portfolio import Holding

ENV_PREFIX = "PAPERDESK_"

# Last prices the demo feed starts from.
DEFAULT_SEED_PRICES: dict[str, float] = {
    "AAPL": 175.00,
    "TSLA": 200.00,
    "NVDA": 850.00,
    "AMD": 160.00,
    "MSFT": 410.00,
    "GOOGL": 170.00,
}

DEFAULT_HOLDINGS: tuple[Holding, ...] = (
    Holding(symbol="AAPL", shares=50, avg_price=150.00, current_price=175.00),
    Holding(symbol="TSLA", shares=10, avg_price=220.00, current_price=200.00),
)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


def _env_int(name: str) -> int | None:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Tunables for the default feed and ledger."""

    initial_cash: float = 100_000.0
    tick_interval: float = 1.5
    volatility: float = 0.0015
    read_latency: float = 0.5
    order_latency: float = 0.8
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Read PAPERDESK_* variables; unset ones keep their defaults."""
        defaults = cls()
        return cls(
            initial_cash=_env_float("INITIAL_CASH", defaults.initial_cash),
            tick_interval=_env_float("TICK_INTERVAL", defaults.tick_interval),
            volatility=_env_float("VOLATILITY", defaults.volatility),
            read_latency=_env_float("READ_LATENCY", defaults.read_latency),
            order_latency=_env_float("ORDER_LATENCY", defaults.order_latency),
            seed=_env_int("SEED"),
        )


def build_feed(settings: Settings | None = None) -> PriceFeed:
    settings = settings or Settings()
    return PriceFeed(
        np.random.default_rng(settings.seed),
        interval=settings.tick_interval,
        volatility=settings.volatility,
        seed_prices=DEFAULT_SEED_PRICES,
    )


def build_ledger(settings: Settings | None = None) -> PortfolioLedger:
    """Demo ledger: starting cash plus the AAPL and TSLA seed positions."""
    settings = settings or Settings()
    return PortfolioLedger(
        settings.initial_cash,
        DEFAULT_HOLDINGS,
        read_latency=settings.read_latency,
        order_latency=settings.order_latency,
    )
