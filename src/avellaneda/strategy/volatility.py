"""Volatility estimation from price history.

Provides three interchangeable estimators that turn a price series into
an annualized volatility figure for the quoting formulas:

- Simple: sample standard deviation of close-to-close log returns
- EWMA: exponentially weighted variance of log returns (RiskMetrics style)
- Parkinson: range-based estimator using per-period highs and lows

All estimators are pure functions of their inputs and safe to call
concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from avellaneda.domain import decimal_math
from avellaneda.domain.errors import InvalidConfiguration, InvalidMarketState
from avellaneda.domain.types import ONE, ZERO

logger = logging.getLogger(__name__)

# Trading days per year used for the default annualization factor
TRADING_DAYS_PER_YEAR = Decimal("252")

# Number of leading returns used to seed the EWMA variance
EWMA_SEED_RETURNS = 5


class VolatilityEstimator:
    """Converts a price history into annualized volatility.

    The per-period standard deviation is multiplied by an annualization
    factor, sqrt(252) unless a custom factor is configured.
    """

    def __init__(self, annualization_factor: Decimal | None = None) -> None:
        """Initialize the estimator.

        Args:
            annualization_factor: Multiplier applied to per-period standard
                deviation. None uses sqrt(252).
        """
        self._annualization_factor = annualization_factor

    @classmethod
    def with_annualization_factor(cls, factor: Decimal) -> VolatilityEstimator:
        """Create an estimator with a custom annualization factor."""
        return cls(annualization_factor=factor)

    @property
    def annualization_factor(self) -> Decimal | None:
        """Return the configured factor (None means sqrt(252))."""
        return self._annualization_factor

    def _get_annualization_factor(self) -> Decimal:
        if self._annualization_factor is not None:
            return self._annualization_factor
        return decimal_math.sqrt(TRADING_DAYS_PER_YEAR)

    def calculate_simple(self, prices: Sequence[Decimal]) -> Decimal:
        """Calculate close-to-close volatility.

        Uses the sample variance (n-1 denominator) of log returns.

        Args:
            prices: Ordered price series (oldest first)

        Returns:
            Annualized volatility

        Raises:
            InvalidMarketState: If fewer than 2 prices, a non-positive
                price, or too few returns for a sample variance
        """
        if len(prices) < 2:
            raise InvalidMarketState(
                "need at least 2 prices to calculate volatility",
                field="prices",
                context={"count": len(prices)},
            )

        log_returns = _log_returns(prices)
        variance = _sample_variance(log_returns)
        std_dev = decimal_math.sqrt(variance)
        volatility = std_dev * self._get_annualization_factor()

        logger.debug(f"Simple volatility over {len(prices)} prices: {volatility}")
        return volatility

    def calculate_ewma(self, prices: Sequence[Decimal], lambda_: Decimal) -> Decimal:
        """Calculate exponentially weighted volatility.

        The variance is seeded with the sample variance of the first five
        returns (or all returns if fewer), then updated with
        σ²_t = λ * σ²_{t-1} + (1-λ) * r²_t over every return in order,
        including the ones used for the seed.

        Args:
            prices: Ordered price series (oldest first)
            lambda_: Decay factor, 0 < λ < 1 (higher = slower decay)

        Returns:
            Annualized volatility

        Raises:
            InvalidMarketState: If fewer than 2 prices or a non-positive price
            InvalidConfiguration: If lambda_ is not in (0, 1)
        """
        if len(prices) < 2:
            raise InvalidMarketState(
                "need at least 2 prices for EWMA",
                field="prices",
                context={"count": len(prices)},
            )

        if not lambda_.is_finite() or lambda_ <= ZERO or lambda_ >= ONE:
            raise InvalidConfiguration(
                "lambda must be between 0 and 1",
                field="lambda",
                context={"lambda": str(lambda_)},
            )

        log_returns = _log_returns(prices)
        variance = _sample_variance(log_returns[:EWMA_SEED_RETURNS])

        one_minus_lambda = ONE - lambda_
        for log_return in log_returns:
            variance = lambda_ * variance + one_minus_lambda * log_return * log_return

        std_dev = decimal_math.sqrt(variance)
        volatility = std_dev * self._get_annualization_factor()

        logger.debug(
            f"EWMA volatility over {len(prices)} prices (lambda={lambda_}): {volatility}"
        )
        return volatility

    def calculate_parkinson(
        self,
        high_prices: Sequence[Decimal],
        low_prices: Sequence[Decimal],
    ) -> Decimal:
        """Calculate range-based volatility.

        σ = sqrt(Σ ln(H_i/L_i)² / (4 * n * ln 2))

        Args:
            high_prices: Per-period highs
            low_prices: Per-period lows, same length as high_prices

        Returns:
            Annualized volatility

        Raises:
            InvalidMarketState: If lengths differ, series are empty, a price
                is not positive, or a high is below its low
        """
        if len(high_prices) != len(low_prices):
            raise InvalidMarketState(
                "high and low price vectors must have same length",
                field="high_prices",
                context={"highs": len(high_prices), "lows": len(low_prices)},
            )

        if not high_prices:
            raise InvalidMarketState(
                "need at least 1 price pair for Parkinson estimator",
                field="high_prices",
            )

        sum_squared_ratios = ZERO
        for i, (high, low) in enumerate(zip(high_prices, low_prices)):
            if not _is_valid_price(high) or not _is_valid_price(low):
                raise InvalidMarketState(
                    "prices must be positive",
                    field="low_prices" if _is_valid_price(high) else "high_prices",
                    context={"index": i},
                )
            if high < low:
                raise InvalidMarketState(
                    "high price must be >= low price",
                    field="high_prices",
                    context={"index": i, "high": str(high), "low": str(low)},
                )
            log_ratio = decimal_math.ln(high / low)
            sum_squared_ratios += log_ratio * log_ratio

        ln_2 = decimal_math.ln(Decimal("2"))
        n = Decimal(len(high_prices))
        variance = sum_squared_ratios / (Decimal("4") * n * ln_2)
        std_dev = decimal_math.sqrt(variance)
        volatility = std_dev * self._get_annualization_factor()

        logger.debug(f"Parkinson volatility over {len(high_prices)} bars: {volatility}")
        return volatility


def _is_valid_price(price: Decimal) -> bool:
    return price.is_finite() and price > ZERO


def _log_returns(prices: Sequence[Decimal]) -> list[Decimal]:
    """Compute consecutive log returns, rejecting non-positive prices."""
    log_returns = []
    for i in range(1, len(prices)):
        previous, current = prices[i - 1], prices[i]
        if not _is_valid_price(current) or not _is_valid_price(previous):
            raise InvalidMarketState(
                "prices must be positive",
                field="prices",
                context={"index": i - 1 if _is_valid_price(current) else i},
            )
        log_returns.append(decimal_math.ln(current / previous))
    return log_returns


def _sample_variance(values: Sequence[Decimal]) -> Decimal:
    """Sample variance with an n-1 denominator.

    A single observation has no sample variance; that case is reported as
    an InvalidMarketState since it means the price history is too short.
    """
    if len(values) < 2:
        raise InvalidMarketState(
            "need at least 2 returns (3 prices) for a sample variance",
            field="prices",
            context={"returns": len(values)},
        )

    mean = sum(values, ZERO) / Decimal(len(values))
    squared_deviations = sum(((value - mean) ** 2 for value in values), ZERO)
    return squared_deviations / Decimal(len(values) - 1)
