"""Strategy module for Avellaneda-Stoikov quote generation.

This package contains:
- Closed-form reservation price, spread and quote formulas
- VolatilityEstimator: simple, EWMA and Parkinson estimators
- StrategyConfig: validated model parameters
- Strategy interfaces (blocking and async) and wrapping implementations
"""

from avellaneda.strategy.avellaneda_stoikov import (
    calculate_optimal_quotes,
    calculate_optimal_spread,
    calculate_reservation_price,
)
from avellaneda.strategy.config import StrategyConfig
from avellaneda.strategy.interface import (
    AsyncAvellanedaStoikov,
    AsyncDefaultAvellanedaStoikov,
    AvellanedaStoikov,
    DefaultAvellanedaStoikov,
)
from avellaneda.strategy.volatility import VolatilityEstimator
from avellaneda.strategy.wrappers import ExternalVolatilityStrategy, MinimumSpreadStrategy

__all__ = [
    "AsyncAvellanedaStoikov",
    "AsyncDefaultAvellanedaStoikov",
    "AvellanedaStoikov",
    "DefaultAvellanedaStoikov",
    "ExternalVolatilityStrategy",
    "MinimumSpreadStrategy",
    "StrategyConfig",
    "VolatilityEstimator",
    "calculate_optimal_quotes",
    "calculate_optimal_spread",
    "calculate_reservation_price",
]
