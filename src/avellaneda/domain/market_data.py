"""Market data domain models.

MarketState is the snapshot the quoting formulas read. MarketTick and
OHLCVBar describe historical data used for backtesting and volatility
estimation. Quote is the output of a quoting session. All models are
immutable.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic.dataclasses import dataclass

from avellaneda.domain.types import TWO, ZERO

BPS_MULTIPLIER = Decimal("10000")


@dataclass(frozen=True)
class MarketState:
    """Observable state of the market at a point in time.

    Replaced wholesale on each market update; the quoting formulas validate
    that mid_price and volatility are positive when they use them.
    """

    mid_price: Decimal
    volatility: Decimal  # Annualized
    timestamp: int  # Milliseconds since epoch

    def with_mid_price(self, mid_price: Decimal, timestamp: int) -> MarketState:
        """Return a new snapshot with an updated mid price."""
        return MarketState(
            mid_price=mid_price,
            volatility=self.volatility,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class MarketTick:
    """Top-of-book observation from a historical data source.

    Optionally carries the last trade printed at this timestamp.
    """

    timestamp: int
    bid_price: Decimal
    bid_size: Decimal
    ask_price: Decimal
    ask_size: Decimal
    last_price: Decimal | None = None
    last_size: Decimal | None = None

    @classmethod
    def with_last_trade(
        cls,
        timestamp: int,
        bid_price: Decimal,
        bid_size: Decimal,
        ask_price: Decimal,
        ask_size: Decimal,
        last_price: Decimal,
        last_size: Decimal,
    ) -> MarketTick:
        """Create a tick that includes the last trade."""
        return cls(
            timestamp=timestamp,
            bid_price=bid_price,
            bid_size=bid_size,
            ask_price=ask_price,
            ask_size=ask_size,
            last_price=last_price,
            last_size=last_size,
        )

    def mid_price(self) -> Decimal:
        """Return the midpoint between best bid and best ask."""
        return (self.bid_price + self.ask_price) / TWO

    def spread(self) -> Decimal:
        """Return the quoted spread (ask - bid)."""
        return self.ask_price - self.bid_price

    def spread_bps(self) -> Decimal:
        """Return the spread in basis points of mid, or 0 for a zero mid."""
        mid = self.mid_price()
        if mid > ZERO:
            return (self.spread() / mid) * BPS_MULTIPLIER
        return ZERO

    def total_liquidity(self) -> Decimal:
        """Return bid size plus ask size."""
        return self.bid_size + self.ask_size

    def imbalance(self) -> Decimal:
        """Return (bid_size - ask_size) / total, or 0 for an empty book."""
        total = self.total_liquidity()
        if total > ZERO:
            return (self.bid_size - self.ask_size) / total
        return ZERO


@dataclass(frozen=True)
class OHLCVBar:
    """Open/high/low/close/volume bar for one period."""

    timestamp: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    def range(self) -> Decimal:
        """Return high - low."""
        return self.high - self.low

    def body(self) -> Decimal:
        """Return the absolute distance between open and close."""
        return abs(self.close - self.open)

    def is_bullish(self) -> bool:
        """Return True if the bar closed above its open."""
        return self.close > self.open

    def is_bearish(self) -> bool:
        """Return True if the bar closed below its open."""
        return self.close < self.open

    def typical_price(self) -> Decimal:
        """Return (high + low + close) / 3."""
        return (self.high + self.low + self.close) / Decimal("3")

    def vwap(self) -> Decimal:
        """Approximate the bar VWAP with its typical price."""
        return self.typical_price()


@dataclass(frozen=True)
class Quote:
    """Two-sided quote produced by a quoting session.

    is_fallback is set when the model rejected its inputs and the session
    quoted a fixed percentage around mid instead.
    """

    bid: Decimal
    ask: Decimal
    timestamp: int
    reservation_price: Decimal
    is_fallback: bool = False

    @property
    def spread(self) -> Decimal:
        """Return ask - bid."""
        return self.ask - self.bid

    @property
    def mid(self) -> Decimal:
        """Return the quote midpoint."""
        return (self.bid + self.ask) / TWO

    def spread_bps(self) -> Decimal:
        """Return the quote spread in basis points of its midpoint."""
        mid = self.mid
        if mid > ZERO:
            return (self.spread / mid) * BPS_MULTIPLIER
        return ZERO

    def __repr__(self) -> str:
        return f"Quote({self.bid} @ {self.ask})"
