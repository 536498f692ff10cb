"""Quoting session - the per-market quoting loop state.

A session ties the pure Avellaneda-Stoikov formulas to the mutable state
they need: the latest market snapshot, a rolling window of mid prices for
volatility estimation, inventory and PnL. It is single-writer: callers
feed it market updates and fills in order and ask it for quotes.

Two variants are provided:
- QuotingSession: drives a blocking AvellanedaStoikov strategy
- AsyncQuotingSession: drives an AsyncAvellanedaStoikov strategy
"""

from __future__ import annotations

import contextlib
import logging
from collections import deque
from decimal import Decimal
from typing import TYPE_CHECKING

from avellaneda.domain.errors import (
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    MarketMakerError,
)
from avellaneda.domain.market_data import MarketState, Quote
from avellaneda.domain.positions import InventoryPosition, PnL, closing_pnl
from avellaneda.domain.types import ONE, TWO, ZERO
from avellaneda.strategy import avellaneda_stoikov
from avellaneda.strategy.config import StrategyConfig
from avellaneda.strategy.interface import (
    AsyncAvellanedaStoikov,
    AsyncDefaultAvellanedaStoikov,
    AvellanedaStoikov,
    DefaultAvellanedaStoikov,
)
from avellaneda.strategy.volatility import VolatilityEstimator

if TYPE_CHECKING:
    from avellaneda.core.config import AppConfig
    from avellaneda.monitoring.metrics import MetricsCollector

logger = logging.getLogger(__name__)

VOLATILITY_METHODS = ("simple", "ewma")
MIN_VOLATILITY_SAMPLES = 3  # Sample variance needs 2 returns


class _BaseQuotingSession:
    """State and bookkeeping shared by the blocking and async sessions."""

    def __init__(
        self,
        config: StrategyConfig,
        estimator: VolatilityEstimator | None = None,
        *,
        market_id: str = "default",
        volatility_method: str = "ewma",
        ewma_lambda: Decimal = Decimal("0.94"),
        window_size: int = 50,
        min_samples: int = MIN_VOLATILITY_SAMPLES,
        initial_volatility: Decimal = Decimal("0.2"),
        fallback_spread_pct: Decimal = Decimal("0.01"),
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Validated model parameters
            estimator: Volatility estimator (default: sqrt(252) annualization)
            market_id: Label used in logs and metrics
            volatility_method: "simple" or "ewma"
            ewma_lambda: Decay factor for the EWMA estimator
            window_size: Number of recent mids kept for estimation
            min_samples: Mids required before estimating volatility
            initial_volatility: Volatility used until enough mids are held
            fallback_spread_pct: Half-width of the fallback quote, as a
                fraction of mid
            metrics: Optional metrics collector to publish to

        Raises:
            InvalidConfiguration: If a session parameter is out of domain
        """
        if volatility_method not in VOLATILITY_METHODS:
            raise InvalidConfiguration(
                f"unknown volatility method: {volatility_method}",
                field="volatility_method",
                context={"allowed": list(VOLATILITY_METHODS)},
            )

        if min_samples < MIN_VOLATILITY_SAMPLES:
            raise InvalidConfiguration(
                f"min_samples must be at least {MIN_VOLATILITY_SAMPLES}",
                field="min_samples",
                context={"value": min_samples},
            )

        if window_size < min_samples:
            raise InvalidConfiguration(
                "window_size must be >= min_samples",
                field="window_size",
                context={"window_size": window_size, "min_samples": min_samples},
            )

        if initial_volatility <= ZERO:
            raise InvalidConfiguration(
                "initial_volatility must be positive",
                field="initial_volatility",
                context={"value": str(initial_volatility)},
            )

        if fallback_spread_pct <= ZERO or fallback_spread_pct >= ONE:
            raise InvalidConfiguration(
                "fallback_spread_pct must be between 0 and 1",
                field="fallback_spread_pct",
                context={"value": str(fallback_spread_pct)},
            )

        self._config = config
        self._estimator = estimator or VolatilityEstimator()
        self._market_id = market_id
        self._volatility_method = volatility_method
        self._ewma_lambda = ewma_lambda
        self._min_samples = min_samples
        self._initial_volatility = initial_volatility
        self._fallback_spread_pct = fallback_spread_pct
        self._metrics = metrics

        self._mids: deque[Decimal] = deque(maxlen=window_size)
        self._market_state: MarketState | None = None
        self._start_time: int | None = None

        self.inventory = InventoryPosition()
        self.pnl = PnL()

        # Session tracking
        self._quote_count = 0
        self._fallback_count = 0
        self._fill_count = 0

    @classmethod
    def from_app_config(
        cls,
        app_config: AppConfig,
        strategy: AvellanedaStoikov | AsyncAvellanedaStoikov | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """Build a session from the application configuration.

        Args:
            app_config: Loaded application configuration
            strategy: Pricing strategy matching the session variant
            metrics: Optional metrics collector

        Raises:
            InvalidConfiguration: If a parameter is out of domain
        """
        volatility = app_config.volatility
        return cls(
            app_config.strategy.to_strategy_config(),
            strategy,
            VolatilityEstimator(volatility.annualization_factor),
            market_id=app_config.session.market_id,
            volatility_method=volatility.method,
            ewma_lambda=volatility.ewma_lambda,
            window_size=volatility.window_size,
            min_samples=volatility.min_samples,
            initial_volatility=volatility.initial_volatility,
            fallback_spread_pct=app_config.session.fallback_spread_pct,
            metrics=metrics,
        )

    @property
    def config(self) -> StrategyConfig:
        """Return the model parameters."""
        return self._config

    @property
    def market_id(self) -> str:
        """Return the market label."""
        return self._market_id

    @property
    def market_state(self) -> MarketState | None:
        """Return the latest market snapshot, if any."""
        return self._market_state

    @property
    def start_time(self) -> int | None:
        """Return the timestamp of the first market update."""
        return self._start_time

    @property
    def quote_count(self) -> int:
        """Return the number of quotes generated (including fallbacks)."""
        return self._quote_count

    @property
    def fallback_count(self) -> int:
        """Return the number of fallback quotes generated."""
        return self._fallback_count

    @property
    def fill_count(self) -> int:
        """Return the number of fills applied."""
        return self._fill_count

    def on_market_update(
        self,
        mid_price: Decimal,
        timestamp: int,
        volatility: Decimal | None = None,
    ) -> MarketState:
        """Record a new mid price and refresh the market snapshot.

        Volatility is taken, in order of preference, from the explicit
        argument, from the configured estimator once min_samples mids are
        held, or from the previous snapshot (initial_volatility before
        the first one). An estimator failure keeps the previous value.

        Args:
            mid_price: Observed mid price (must be positive)
            timestamp: Observation time in milliseconds
            volatility: Externally supplied annualized volatility

        Returns:
            The new MarketState

        Raises:
            InvalidMarketState: If mid_price is not positive, or mid_price or
                an explicit volatility is NaN or infinite
        """
        if not mid_price.is_finite() or mid_price <= ZERO:
            raise InvalidMarketState(
                "mid_price must be positive and finite",
                field="mid_price",
                context={"value": str(mid_price), "market_id": self._market_id},
            )

        if volatility is not None and not volatility.is_finite():
            raise InvalidMarketState(
                "volatility must be finite",
                field="volatility",
                context={"value": str(volatility), "market_id": self._market_id},
            )

        if self._start_time is None:
            self._start_time = timestamp
            logger.info(f"Quoting session started for {self._market_id} at {timestamp}")

        self._mids.append(mid_price)

        if volatility is None:
            volatility = self._estimate_volatility()

        self._market_state = MarketState(
            mid_price=mid_price,
            volatility=volatility,
            timestamp=timestamp,
        )
        self.pnl.set_unrealized(self.inventory.unrealized_pnl(mid_price))

        if self._metrics is not None:
            self._metrics.set_market_inputs(self._market_id, float(mid_price), float(volatility))
            self._publish_pnl()

        return self._market_state

    def _previous_volatility(self) -> Decimal:
        if self._market_state is not None:
            return self._market_state.volatility
        return self._initial_volatility

    def _estimate_volatility(self) -> Decimal:
        if len(self._mids) < self._min_samples:
            return self._previous_volatility()

        prices = list(self._mids)
        try:
            if self._volatility_method == "simple":
                estimate = self._estimator.calculate_simple(prices)
            else:
                estimate = self._estimator.calculate_ewma(prices, self._ewma_lambda)
        except MarketMakerError as e:
            logger.warning(f"Volatility estimate failed for {self._market_id}, keeping previous: {e}")
            self._record_error(e)
            return self._previous_volatility()

        # Flat price history
        if estimate <= ZERO:
            return self._previous_volatility()

        return estimate

    def time_remaining_ms(self, timestamp: int) -> int:
        """Milliseconds left until the terminal horizon.

        The horizon starts at the first market update; before that the
        full terminal time remains. Never negative and never more than the
        terminal time, even for timestamps before the first update.
        """
        if self._start_time is None:
            return self._config.terminal_time
        elapsed = max(timestamp - self._start_time, 0)
        return max(self._config.terminal_time - elapsed, 0)

    def on_fill(self, quantity: Decimal, price: Decimal, timestamp: int) -> Decimal:
        """Apply an execution to inventory and PnL.

        Args:
            quantity: Signed fill size (positive = buy, negative = sell)
            price: Execution price
            timestamp: Fill time in milliseconds

        Returns:
            Realized PnL produced by this fill

        Raises:
            InvalidMarketState: If quantity is zero, price is not positive, or
                either is NaN or infinite
        """
        if not quantity.is_finite() or quantity == ZERO:
            raise InvalidMarketState(
                "fill quantity must be non-zero and finite",
                field="quantity",
                context={"market_id": self._market_id},
            )

        if not price.is_finite() or price <= ZERO:
            raise InvalidMarketState(
                "fill price must be positive and finite",
                field="price",
                context={"value": str(price), "market_id": self._market_id},
            )

        realized = closing_pnl(self.inventory, quantity, price)
        self.pnl.add_realized(realized)
        self.inventory.update_fill(quantity, price, timestamp)

        mark_price = self._market_state.mid_price if self._market_state is not None else price
        self.pnl.set_unrealized(self.inventory.unrealized_pnl(mark_price))
        self._fill_count += 1

        side = "buy" if quantity > ZERO else "sell"
        logger.info(
            f"Fill {self._market_id}: {side} {abs(quantity)} @ {price}, "
            f"position={self.inventory.quantity}, realized={realized}"
        )

        if self._metrics is not None:
            self._metrics.inc_fills(self._market_id, side, float(abs(quantity)))
            self._publish_pnl()

        return realized

    def _require_market_state(self) -> MarketState:
        if self._market_state is None:
            raise InvalidMarketState(
                "no market data received yet",
                field="market_state",
                context={"market_id": self._market_id},
            )
        return self._market_state

    def _build_quote(self, bid: Decimal, ask: Decimal, timestamp: int) -> Quote:
        """Turn model prices into a Quote, enforcing min_spread.

        A spread narrower than min_spread is widened symmetrically around
        the quote centre.

        Raises:
            InvalidQuoteGeneration: If a price is NaN or infinite, or widening
                pushes the bid to zero or below
        """
        if not bid.is_finite() or not ask.is_finite():
            raise InvalidQuoteGeneration("quote prices must be finite", bid=bid, ask=ask)

        centre = (bid + ask) / TWO
        bid, ask = avellaneda_stoikov.apply_min_spread(bid, ask, self._config.min_spread)
        return Quote(bid=bid, ask=ask, timestamp=timestamp, reservation_price=centre)

    def _fallback_quote(self, state: MarketState, timestamp: int, error: MarketMakerError) -> Quote:
        logger.warning(f"Quote generation failed for {self._market_id}, using fallback: {error}")
        self._record_error(error)
        self._fallback_count += 1
        if self._metrics is not None:
            self._metrics.inc_fallback_quotes(self._market_id)

        mid = state.mid_price
        return Quote(
            bid=mid * (ONE - self._fallback_spread_pct),
            ask=mid * (ONE + self._fallback_spread_pct),
            timestamp=timestamp,
            reservation_price=mid,
            is_fallback=True,
        )

    def _record_quote(self, quote: Quote) -> None:
        self._quote_count += 1
        logger.debug(
            f"Quote {self._market_id}: {quote.bid} @ {quote.ask} "
            f"(reservation={quote.reservation_price}, inventory={self.inventory.quantity})"
        )
        if self._metrics is not None:
            self._metrics.inc_quotes_generated(self._market_id)
            self._metrics.set_quote_spread(self._market_id, float(quote.spread))
            self._metrics.observe_quote_spread_bps(self._market_id, float(quote.spread_bps()))

    def _record_error(self, error: MarketMakerError) -> None:
        if self._metrics is not None:
            self._metrics.inc_error(type(error).__name__)

    def _publish_pnl(self) -> None:
        if self._metrics is None:
            return
        self._metrics.set_position(self._market_id, float(self.inventory.quantity))
        self._metrics.set_pnl(
            self._market_id,
            float(self.pnl.realized),
            float(self.pnl.unrealized),
            float(self.pnl.total),
        )

    def _timed(self) -> contextlib.AbstractContextManager[None]:
        if self._metrics is not None:
            return self._metrics.time_quote(self._market_id)
        return contextlib.nullcontext()


class QuotingSession(_BaseQuotingSession):
    """Quoting session driving a blocking strategy.

    Usage:
        session = QuotingSession(StrategyConfig.create(...))
        session.on_market_update(Decimal("100"), timestamp)
        quote = session.generate_quote()
        session.on_fill(Decimal("1"), quote.bid, timestamp)
    """

    def __init__(
        self,
        config: StrategyConfig,
        strategy: AvellanedaStoikov | None = None,
        estimator: VolatilityEstimator | None = None,
        **kwargs,
    ) -> None:
        """Initialize the session.

        Args:
            config: Validated model parameters
            strategy: Pricing strategy (default: DefaultAvellanedaStoikov)
            estimator: Volatility estimator
            **kwargs: Session options, see _BaseQuotingSession
        """
        super().__init__(config, estimator, **kwargs)
        self._strategy = strategy or DefaultAvellanedaStoikov()

    @property
    def strategy(self) -> AvellanedaStoikov:
        """Return the pricing strategy."""
        return self._strategy

    def generate_quote(self, timestamp: int | None = None) -> Quote:
        """Generate a two-sided quote for the current market state.

        Any MarketMakerError raised by the strategy is absorbed: the
        session logs it and returns a fallback quote around mid.

        Args:
            timestamp: Quote time in milliseconds (default: last update time)

        Returns:
            Quote with bid < ask

        Raises:
            InvalidMarketState: If no market update has been received
        """
        state = self._require_market_state()
        quote_time = timestamp if timestamp is not None else state.timestamp

        with self._timed():
            try:
                bid, ask = self._strategy.calculate_optimal_quotes(
                    state.mid_price,
                    self.inventory.quantity,
                    self._config.risk_aversion,
                    state.volatility,
                    self.time_remaining_ms(quote_time),
                    self._config.order_intensity,
                )
                quote = self._build_quote(bid, ask, quote_time)
            except MarketMakerError as e:
                quote = self._fallback_quote(state, quote_time, e)

        self._record_quote(quote)
        return quote


class AsyncQuotingSession(_BaseQuotingSession):
    """Quoting session driving an async strategy.

    Market updates and fills are applied synchronously; only quote
    generation awaits, so strategies can fetch external inputs.
    """

    def __init__(
        self,
        config: StrategyConfig,
        strategy: AsyncAvellanedaStoikov | None = None,
        estimator: VolatilityEstimator | None = None,
        **kwargs,
    ) -> None:
        """Initialize the session.

        Args:
            config: Validated model parameters
            strategy: Pricing strategy (default: AsyncDefaultAvellanedaStoikov)
            estimator: Volatility estimator
            **kwargs: Session options, see _BaseQuotingSession
        """
        super().__init__(config, estimator, **kwargs)
        self._strategy = strategy or AsyncDefaultAvellanedaStoikov()

    @property
    def strategy(self) -> AsyncAvellanedaStoikov:
        """Return the pricing strategy."""
        return self._strategy

    async def generate_quote(self, timestamp: int | None = None) -> Quote:
        """Generate a two-sided quote for the current market state.

        See QuotingSession.generate_quote.
        """
        state = self._require_market_state()
        quote_time = timestamp if timestamp is not None else state.timestamp

        with self._timed():
            try:
                bid, ask = await self._strategy.calculate_optimal_quotes(
                    state.mid_price,
                    self.inventory.quantity,
                    self._config.risk_aversion,
                    state.volatility,
                    self.time_remaining_ms(quote_time),
                    self._config.order_intensity,
                )
                quote = self._build_quote(bid, ask, quote_time)
            except MarketMakerError as e:
                quote = self._fallback_quote(state, quote_time, e)

        self._record_quote(quote)
        return quote
