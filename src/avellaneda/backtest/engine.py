"""Backtest engine - replays historical ticks through a quoting session."""

from __future__ import annotations

import logging
from decimal import Decimal

from avellaneda.backtest.data import HistoricalDataSource
from avellaneda.backtest.types import BacktestFill, BacktestResult
from avellaneda.core.session import QuotingSession
from avellaneda.domain.errors import InvalidConfiguration, InvalidMarketState
from avellaneda.domain.market_data import MarketTick, Quote
from avellaneda.domain.types import ZERO

logger = logging.getLogger(__name__)


class BacktestEngine:
    """Runs a quoting session against historical market data.

    For each tick the engine:
    1. Fills the standing quote if the tick trades through it
    2. Feeds the tick mid price to the session
    3. Replaces the standing quote with a fresh one

    Fill model: a tick whose best ask is at or below our bid fills our bid
    (we buy); a tick whose best bid is at or above our ask fills our ask
    (we sell). Each crossing fills fill_size at our quoted price. Queue
    position and partial fills are not modelled.
    """

    def __init__(self, session: QuotingSession, fill_size: Decimal = Decimal("1")) -> None:
        """Initialize the backtest engine.

        Args:
            session: Quoting session to drive (its inventory and PnL are
                mutated by the run)
            fill_size: Quantity filled on each quote crossing

        Raises:
            InvalidConfiguration: If fill_size is not positive
        """
        if fill_size <= ZERO:
            raise InvalidConfiguration(
                "fill_size must be positive",
                field="fill_size",
                context={"value": str(fill_size)},
            )

        self._session = session
        self._fill_size = fill_size
        self._reset_tracking()

    @property
    def session(self) -> QuotingSession:
        """Return the session being driven."""
        return self._session

    def run(self, source: HistoricalDataSource) -> BacktestResult:
        """Run the backtest over every remaining tick in source.

        Fills, drawdown and quote counts start fresh on each run. The
        session is not reset, so inventory and PnL carry over.

        Args:
            source: Historical data to replay

        Returns:
            BacktestResult with statistics and fills
        """
        logger.info(f"Starting backtest on {self._session.market_id}: {source.remaining()} ticks")
        self._reset_tracking()

        total_ticks = 0
        for tick in source:
            total_ticks += 1
            self._process_tick(tick)

        pnl = self._session.pnl
        result = BacktestResult(
            total_ticks=total_ticks,
            fills=list(self._fills),
            final_position=self._session.inventory.quantity,
            realized_pnl=pnl.realized,
            unrealized_pnl=pnl.unrealized,
            total_pnl=pnl.total,
            max_drawdown=self._max_drawdown,
            quotes_generated=self._quotes_generated,
            fallback_quotes=self._fallback_quotes,
        )

        logger.info(
            f"Backtest complete: {total_ticks} ticks, {result.total_fills} fills, "
            f"{result.quotes_generated} quotes ({result.fallback_quotes} fallback), "
            f"total PnL {result.total_pnl}, max drawdown {result.max_drawdown}"
        )
        return result

    def _reset_tracking(self) -> None:
        self._fills: list[BacktestFill] = []
        self._standing_quote: Quote | None = None
        self._peak_pnl = self._session.pnl.total
        self._max_drawdown = ZERO
        self._quotes_generated = 0
        self._fallback_quotes = 0

    def _process_tick(self, tick: MarketTick) -> None:
        if self._standing_quote is not None:
            self._apply_fills(tick, self._standing_quote)

        try:
            self._session.on_market_update(tick.mid_price(), tick.timestamp)
        except InvalidMarketState as e:
            logger.warning(f"Skipping tick at {tick.timestamp}: {e}")
            return

        quote = self._session.generate_quote(tick.timestamp)
        self._standing_quote = quote
        self._quotes_generated += 1
        if quote.is_fallback:
            self._fallback_quotes += 1

        self._update_drawdown()

    def _apply_fills(self, tick: MarketTick, quote: Quote) -> None:
        if tick.ask_price <= quote.bid:
            quantity, price = self._fill_size, quote.bid
        elif tick.bid_price >= quote.ask:
            quantity, price = -self._fill_size, quote.ask
        else:
            return

        realized = self._session.on_fill(quantity, price, tick.timestamp)
        self._fills.append(
            BacktestFill(
                timestamp=tick.timestamp,
                quantity=quantity,
                price=price,
                realized_pnl=realized,
            )
        )
        # A filled quote is consumed
        self._standing_quote = None

    def _update_drawdown(self) -> None:
        """Update max drawdown tracking."""
        current_pnl = self._session.pnl.total

        if current_pnl > self._peak_pnl:
            self._peak_pnl = current_pnl

        drawdown = self._peak_pnl - current_pnl
        if drawdown > self._max_drawdown:
            self._max_drawdown = drawdown
