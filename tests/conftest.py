"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
from prometheus_client import CollectorRegistry

from avellaneda.domain.market_data import MarketTick
from avellaneda.monitoring.metrics import MetricsCollector
from avellaneda.strategy.config import StrategyConfig


@pytest.fixture
def strategy_config() -> StrategyConfig:
    """Typical model parameters: γ=0.1, k=1.5, one hour horizon, no minimum spread."""
    return StrategyConfig.create(
        risk_aversion=Decimal("0.1"),
        order_intensity=Decimal("1.5"),
        terminal_time=3_600_000,
        min_spread=Decimal("0"),
    )


@pytest.fixture
def registry() -> CollectorRegistry:
    """Private prometheus registry so collectors don't clash."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> MetricsCollector:
    """Metrics collector bound to a private registry."""
    return MetricsCollector(prefix="test", registry=registry)


@pytest.fixture
def sample_prices() -> list[Decimal]:
    """Short mid price history with both up and down moves."""
    return [
        Decimal("100.0"),
        Decimal("101.0"),
        Decimal("100.5"),
        Decimal("102.0"),
        Decimal("101.5"),
        Decimal("103.0"),
        Decimal("102.0"),
    ]


@pytest.fixture
def make_tick():
    """Factory for ticks with equal sizes on both sides."""

    def _make(timestamp: int, bid: str, ask: str, size: str = "10") -> MarketTick:
        return MarketTick(
            timestamp=timestamp,
            bid_price=Decimal(bid),
            bid_size=Decimal(size),
            ask_price=Decimal(ask),
            ask_size=Decimal(size),
        )

    return _make
