"""Domain models for the quoting core.

This package contains the error taxonomy, Decimal math helpers, market
data snapshots and the inventory/PnL ledgers. All prices use Decimal.
"""

from avellaneda.domain.errors import (
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    MarketMakerError,
    NumericalError,
)
from avellaneda.domain.market_data import MarketState, MarketTick, OHLCVBar, Quote
from avellaneda.domain.positions import InventoryPosition, PnL, closing_pnl

__all__ = [
    # Market Data
    "MarketState",
    "MarketTick",
    "OHLCVBar",
    "Quote",
    # Positions
    "InventoryPosition",
    "PnL",
    "closing_pnl",
    # Errors
    "InvalidConfiguration",
    "InvalidMarketState",
    "InvalidQuoteGeneration",
    "MarketMakerError",
    "NumericalError",
]
