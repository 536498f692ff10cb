"""Prometheus metrics for quoting sessions.

Provides metrics for:
- Quote generation (counts, fallbacks, spreads, latency)
- Inventory and PnL
- Market inputs (mid price, volatility)
- Errors by type

The collector is a passive observer: sessions push values into it and it
never influences pricing.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics.

    Metrics register with the global prometheus registry unless a private
    registry is passed, which lets several collectors coexist (e.g. in tests).
    """

    def __init__(
        self,
        prefix: str = "avellaneda",
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize metrics collector.

        Args:
            prefix: Metric name prefix
            registry: Registry to register metrics with (default: global)
        """
        self._prefix = prefix
        self._registry = registry if registry is not None else REGISTRY

        # Quote metrics
        self._quotes_generated = Counter(
            f"{prefix}_quotes_generated_total",
            "Total quotes generated",
            ["market_id"],
            registry=self._registry,
        )

        self._fallback_quotes = Counter(
            f"{prefix}_fallback_quotes_total",
            "Quotes replaced by the fixed-percentage fallback",
            ["market_id"],
            registry=self._registry,
        )

        self._quote_spread = Gauge(
            f"{prefix}_quote_spread",
            "Current quote spread",
            ["market_id"],
            registry=self._registry,
        )

        self._quote_spread_bps = Histogram(
            f"{prefix}_quote_spread_bps",
            "Quote spread in basis points of quote mid",
            ["market_id"],
            buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
            registry=self._registry,
        )

        self._quote_latency = Histogram(
            f"{prefix}_quote_latency_seconds",
            "Quote generation latency",
            ["market_id"],
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
            registry=self._registry,
        )

        # Fill metrics
        self._fills = Counter(
            f"{prefix}_fills_total",
            "Total fills",
            ["market_id", "side"],
            registry=self._registry,
        )

        self._fill_volume = Counter(
            f"{prefix}_fill_volume_total",
            "Total fill volume",
            ["market_id", "side"],
            registry=self._registry,
        )

        # Position metrics
        self._position = Gauge(
            f"{prefix}_position",
            "Signed inventory (positive = long)",
            ["market_id"],
            registry=self._registry,
        )

        # PnL metrics
        self._realized_pnl = Gauge(
            f"{prefix}_realized_pnl",
            "Realized PnL",
            ["market_id"],
            registry=self._registry,
        )

        self._unrealized_pnl = Gauge(
            f"{prefix}_unrealized_pnl",
            "Unrealized PnL",
            ["market_id"],
            registry=self._registry,
        )

        self._total_pnl = Gauge(
            f"{prefix}_total_pnl",
            "Total PnL (realized + unrealized)",
            ["market_id"],
            registry=self._registry,
        )

        # Market input metrics
        self._mid_price = Gauge(
            f"{prefix}_mid_price",
            "Current mid price",
            ["market_id"],
            registry=self._registry,
        )

        self._volatility = Gauge(
            f"{prefix}_volatility",
            "Annualized volatility used for quoting",
            ["market_id"],
            registry=self._registry,
        )

        # Error metrics
        self._errors = Counter(
            f"{prefix}_errors_total",
            "Total errors",
            ["error_type"],
            registry=self._registry,
        )

    @property
    def prefix(self) -> str:
        """Return the metric name prefix."""
        return self._prefix

    @property
    def registry(self) -> CollectorRegistry:
        """Return the registry metrics are registered with."""
        return self._registry

    # --- Quote Metrics ---

    def inc_quotes_generated(self, market_id: str) -> None:
        """Increment quotes generated counter."""
        self._quotes_generated.labels(market_id=market_id).inc()

    def inc_fallback_quotes(self, market_id: str) -> None:
        """Increment fallback quotes counter."""
        self._fallback_quotes.labels(market_id=market_id).inc()

    def set_quote_spread(self, market_id: str, spread: float) -> None:
        """Update quote spread gauge."""
        self._quote_spread.labels(market_id=market_id).set(spread)

    def observe_quote_spread_bps(self, market_id: str, spread_bps: float) -> None:
        """Record a quote spread in basis points."""
        self._quote_spread_bps.labels(market_id=market_id).observe(spread_bps)

    def observe_quote_latency(self, market_id: str, seconds: float) -> None:
        """Record quote generation latency."""
        self._quote_latency.labels(market_id=market_id).observe(seconds)

    @contextmanager
    def time_quote(self, market_id: str) -> Generator[None, None, None]:
        """Context manager to time quote generation."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe_quote_latency(market_id, time.perf_counter() - start)

    # --- Fill Metrics ---

    def inc_fills(self, market_id: str, side: str, volume: float) -> None:
        """Count a fill and add its size to the volume counter.

        Args:
            market_id: Market label
            side: "buy" or "sell"
            volume: Absolute fill size
        """
        self._fills.labels(market_id=market_id, side=side).inc()
        self._fill_volume.labels(market_id=market_id, side=side).inc(volume)

    # --- Position / PnL Metrics ---

    def set_position(self, market_id: str, quantity: float) -> None:
        """Update position gauge."""
        self._position.labels(market_id=market_id).set(quantity)

    def set_pnl(
        self,
        market_id: str,
        realized: float,
        unrealized: float,
        total: float,
    ) -> None:
        """Update PnL gauges."""
        self._realized_pnl.labels(market_id=market_id).set(realized)
        self._unrealized_pnl.labels(market_id=market_id).set(unrealized)
        self._total_pnl.labels(market_id=market_id).set(total)

    # --- Market Input Metrics ---

    def set_market_inputs(self, market_id: str, mid_price: float, volatility: float) -> None:
        """Update mid price and volatility gauges."""
        self._mid_price.labels(market_id=market_id).set(mid_price)
        self._volatility.labels(market_id=market_id).set(volatility)

    # --- Error Metrics ---

    def inc_error(self, error_type: str) -> None:
        """Increment error counter."""
        self._errors.labels(error_type=error_type).inc()

    # --- Export ---

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format.

        Returns:
            Metrics as bytes in Prometheus exposition format
        """
        return generate_latest(self._registry)

    def start_server(self, port: int = 9090, host: str = "0.0.0.0") -> None:
        """Expose metrics over HTTP for scraping.

        Args:
            port: Port to listen on
            host: Address to bind
        """
        start_http_server(port, addr=host, registry=self._registry)
        logger.info(f"Metrics server listening on {host}:{port}")


# Global metrics collector instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector.

    Returns:
        Global MetricsCollector instance
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def init_metrics(
    prefix: str = "avellaneda",
    registry: CollectorRegistry | None = None,
) -> MetricsCollector:
    """Initialize global metrics collector.

    Args:
        prefix: Metric name prefix
        registry: Registry to register metrics with (default: global)

    Returns:
        Initialized MetricsCollector
    """
    global _metrics
    _metrics = MetricsCollector(prefix=prefix, registry=registry)
    return _metrics
