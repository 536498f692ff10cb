"""Strategy implementations that wrap another strategy.

Provides decorators over the AvellanedaStoikov interfaces that change one
input or output and delegate everything else.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from decimal import Decimal

from avellaneda.domain.errors import InvalidConfiguration
from avellaneda.domain.types import ZERO
from avellaneda.strategy.avellaneda_stoikov import quotes_from_spread
from avellaneda.strategy.interface import (
    AsyncAvellanedaStoikov,
    AsyncDefaultAvellanedaStoikov,
    AvellanedaStoikov,
    DefaultAvellanedaStoikov,
)

logger = logging.getLogger(__name__)

VolatilitySource = Callable[[], Awaitable[Decimal]]


class MinimumSpreadStrategy(AvellanedaStoikov):
    """Adds a fixed amount on top of the base strategy's spread.

    Formula:
        δ' = δ_base + extra_spread

    The reservation price is taken unchanged from the base strategy and
    the wider spread is placed symmetrically around it.
    """

    def __init__(
        self,
        extra_spread: Decimal,
        base: AvellanedaStoikov | None = None,
    ) -> None:
        """Initialize with spread padding.

        Args:
            extra_spread: Amount added to every computed spread (>= 0)
            base: Strategy to delegate to (default: DefaultAvellanedaStoikov)

        Raises:
            InvalidConfiguration: If extra_spread is negative
        """
        if not extra_spread.is_finite() or extra_spread < ZERO:
            raise InvalidConfiguration(
                "extra_spread must be non-negative",
                field="extra_spread",
                context={"value": str(extra_spread)},
            )
        self._extra_spread = extra_spread
        self._base = base or DefaultAvellanedaStoikov()

    @property
    def extra_spread(self) -> Decimal:
        """Return the spread padding."""
        return self._extra_spread

    def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
    ) -> Decimal:
        return self._base.calculate_reservation_price(
            mid_price,
            inventory,
            risk_aversion,
            volatility,
            time_to_terminal_ms,
        )

    def calculate_optimal_spread(
        self,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> Decimal:
        base_spread = self._base.calculate_optimal_spread(
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )
        return base_spread + self._extra_spread

    def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        reservation = self.calculate_reservation_price(
            mid_price,
            inventory,
            risk_aversion,
            volatility,
            time_to_terminal_ms,
        )
        spread = self.calculate_optimal_spread(
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )
        return quotes_from_spread(reservation, spread)


class ExternalVolatilityStrategy(AsyncAvellanedaStoikov):
    """Prices with volatility fetched from an external source.

    Every call awaits volatility_source() and substitutes its result for
    the volatility argument before delegating. Timeouts and retries are
    the source's responsibility; errors it raises propagate unchanged.
    """

    def __init__(
        self,
        volatility_source: VolatilitySource,
        base: AsyncAvellanedaStoikov | None = None,
    ) -> None:
        """Initialize with a volatility source.

        Args:
            volatility_source: Zero-argument coroutine function returning
                annualized volatility
            base: Strategy to delegate to (default: AsyncDefaultAvellanedaStoikov)
        """
        self._volatility_source = volatility_source
        self._base = base or AsyncDefaultAvellanedaStoikov()

    async def _fetch_volatility(self) -> Decimal:
        volatility = await self._volatility_source()
        logger.debug(f"Fetched external volatility: {volatility}")
        return volatility

    async def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,  # noqa: ARG002
        time_to_terminal_ms: int,
    ) -> Decimal:
        external_volatility = await self._fetch_volatility()
        return await self._base.calculate_reservation_price(
            mid_price,
            inventory,
            risk_aversion,
            external_volatility,
            time_to_terminal_ms,
        )

    async def calculate_optimal_spread(
        self,
        risk_aversion: Decimal,
        volatility: Decimal,  # noqa: ARG002
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> Decimal:
        external_volatility = await self._fetch_volatility()
        return await self._base.calculate_optimal_spread(
            risk_aversion,
            external_volatility,
            time_to_terminal_ms,
            order_intensity,
        )

    async def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,  # noqa: ARG002
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        external_volatility = await self._fetch_volatility()
        return await self._base.calculate_optimal_quotes(
            mid_price,
            inventory,
            risk_aversion,
            external_volatility,
            time_to_terminal_ms,
            order_intensity,
        )
