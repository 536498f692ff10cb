"""Types for backtest module."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class BacktestFill:
    """A simulated execution against a standing quote.

    Attributes:
        timestamp: Tick time at which the quote was crossed
        quantity: Signed fill size (positive = buy)
        price: Our quoted price
        realized_pnl: PnL realized by this fill
    """

    timestamp: int
    quantity: Decimal
    price: Decimal
    realized_pnl: Decimal

    @property
    def side(self) -> str:
        """Return "buy" or "sell"."""
        return "buy" if self.quantity > 0 else "sell"


@dataclass(frozen=True)
class BacktestResult:
    """Results from a backtest run.

    Attributes:
        total_ticks: Number of ticks processed
        fills: List of all fills
        final_position: Signed inventory at the end
        realized_pnl: Total realized PnL
        unrealized_pnl: Unrealized PnL at the last mid
        total_pnl: Realized + unrealized PnL
        max_drawdown: Largest peak-to-trough fall in total PnL
        quotes_generated: Total number of quotes generated
        fallback_quotes: Quotes replaced by the fixed-percentage fallback
    """

    total_ticks: int
    fills: list[BacktestFill]
    final_position: Decimal
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    max_drawdown: Decimal
    quotes_generated: int
    fallback_quotes: int

    @property
    def total_fills(self) -> int:
        """Number of fills executed."""
        return len(self.fills)

    @property
    def fill_rate(self) -> float:
        """Fraction of quotes that resulted in fills."""
        if self.quotes_generated == 0:
            return 0.0
        return self.total_fills / self.quotes_generated

    @property
    def fallback_rate(self) -> float:
        """Fraction of quotes that were fallbacks."""
        if self.quotes_generated == 0:
            return 0.0
        return self.fallback_quotes / self.quotes_generated
