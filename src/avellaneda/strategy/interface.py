"""Abstract interfaces for pricing strategies.

These define the capability surface that calling code programs against,
so the default Avellaneda-Stoikov formulas can be swapped or wrapped
(e.g. to inject externally fetched volatility, or to pad the spread)
without touching the formulas themselves.

Two variants are provided:
- AvellanedaStoikov: blocking calls
- AsyncAvellanedaStoikov: coroutine calls, for implementations that must
  await an external data source before delegating to the pure formulas
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from avellaneda.strategy import avellaneda_stoikov


class AvellanedaStoikov(ABC):
    """Blocking pricing strategy.

    Signatures mirror the functions in avellaneda.strategy.avellaneda_stoikov.
    """

    @abstractmethod
    def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
    ) -> Decimal:
        """Calculate the inventory-adjusted reservation price.

        Args:
            mid_price: Current mid price
            inventory: Signed position (positive = long)
            risk_aversion: γ
            volatility: Annualized σ
            time_to_terminal_ms: Time remaining to the horizon in milliseconds

        Returns:
            Reservation price
        """

    @abstractmethod
    def calculate_optimal_spread(
        self,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> Decimal:
        """Calculate the total bid-ask spread.

        Args:
            risk_aversion: γ
            volatility: Annualized σ
            time_to_terminal_ms: Time remaining to the horizon in milliseconds
            order_intensity: k

        Returns:
            Total spread (ask - bid)
        """

    @abstractmethod
    def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """Calculate bid and ask prices.

        Returns:
            Tuple of (bid, ask)
        """


class AsyncAvellanedaStoikov(ABC):
    """Suspend-capable pricing strategy.

    Same operations as AvellanedaStoikov, as coroutines.
    """

    @abstractmethod
    async def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
    ) -> Decimal:
        """Calculate the inventory-adjusted reservation price."""

    @abstractmethod
    async def calculate_optimal_spread(
        self,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> Decimal:
        """Calculate the total bid-ask spread."""

    @abstractmethod
    async def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        """Calculate bid and ask prices."""


class DefaultAvellanedaStoikov(AvellanedaStoikov):
    """Forwards every call to the closed-form formulas.

    Stateless; a single instance can be shared freely.
    """

    def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
    ) -> Decimal:
        return avellaneda_stoikov.calculate_reservation_price(
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
        return avellaneda_stoikov.calculate_optimal_spread(
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )

    def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        return avellaneda_stoikov.calculate_optimal_quotes(
            mid_price,
            inventory,
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )


class AsyncDefaultAvellanedaStoikov(AsyncAvellanedaStoikov):
    """Async facade over a blocking strategy.

    The wrapped strategy runs inline on the event loop; the formulas are
    cheap and never block on I/O, so no executor is used.
    """

    def __init__(self, strategy: AvellanedaStoikov | None = None) -> None:
        """Initialize with the strategy to delegate to.

        Args:
            strategy: Blocking strategy (default: DefaultAvellanedaStoikov)
        """
        self._strategy = strategy or DefaultAvellanedaStoikov()

    @property
    def strategy(self) -> AvellanedaStoikov:
        """Return the wrapped blocking strategy."""
        return self._strategy

    async def calculate_reservation_price(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
    ) -> Decimal:
        return self._strategy.calculate_reservation_price(
            mid_price,
            inventory,
            risk_aversion,
            volatility,
            time_to_terminal_ms,
        )

    async def calculate_optimal_spread(
        self,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> Decimal:
        return self._strategy.calculate_optimal_spread(
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )

    async def calculate_optimal_quotes(
        self,
        mid_price: Decimal,
        inventory: Decimal,
        risk_aversion: Decimal,
        volatility: Decimal,
        time_to_terminal_ms: int,
        order_intensity: Decimal,
    ) -> tuple[Decimal, Decimal]:
        return self._strategy.calculate_optimal_quotes(
            mid_price,
            inventory,
            risk_aversion,
            volatility,
            time_to_terminal_ms,
            order_intensity,
        )
