"""Backtesting against historical market data."""

from avellaneda.backtest.data import HistoricalDataSource, VecDataSource
from avellaneda.backtest.engine import BacktestEngine
from avellaneda.backtest.loader import load_bars, load_ticks
from avellaneda.backtest.types import BacktestFill, BacktestResult

__all__ = [
    "BacktestEngine",
    "BacktestFill",
    "BacktestResult",
    "HistoricalDataSource",
    "VecDataSource",
    "load_bars",
    "load_ticks",
]
