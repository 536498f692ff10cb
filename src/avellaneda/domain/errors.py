"""Exception hierarchy for quoting errors.

All quoting-related errors inherit from MarketMakerError, allowing code to
catch broad categories of errors. Each error type includes relevant context
for debugging and logging.

Error categories:
- InvalidConfiguration: Strategy or estimator parameters out of domain
- InvalidMarketState: Bad price, volatility or price history
- InvalidQuoteGeneration: Computed bid/ask violate ordering or positivity
- NumericalError: A transcendental computation produced a non-finite value
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class MarketMakerError(Exception):
    """Base exception for all quoting errors.

    Every error raised by the quoting core inherits from this class, so
    callers can apply a single fallback policy when they need one.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional structured data for logging/debugging
        """
        super().__init__(message)
        self.context = context or {}


class InvalidConfiguration(MarketMakerError):
    """Invalid strategy or estimator parameter.

    Raised when:
    - risk_aversion or order_intensity is not positive
    - min_spread is negative
    - EWMA lambda is outside (0, 1)
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Human-readable error description
            field: Name of the parameter with the issue
            context: Additional structured data
        """
        super().__init__(message, context)
        self.field = field


class InvalidMarketState(MarketMakerError):
    """Market inputs cannot be priced.

    Raised when:
    - mid price or volatility is not positive
    - a price history has too few samples or non-positive prices
    - high/low series have mismatched lengths or high < low
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Human-readable error description
            field: Name of the market input with the issue
            context: Additional structured data
        """
        super().__init__(message, context)
        self.field = field


class InvalidQuoteGeneration(MarketMakerError):
    """Computed quotes are not tradeable.

    Raised when the bid is not strictly below the ask, or when the bid
    is not strictly positive.
    """

    def __init__(
        self,
        message: str,
        bid: Decimal | None = None,
        ask: Decimal | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected quote.

        Args:
            message: Human-readable error description
            bid: The computed bid price
            ask: The computed ask price
            context: Additional structured data
        """
        super().__init__(message, context)
        self.bid = bid
        self.ask = ask


class NumericalError(MarketMakerError):
    """A numerical operation produced an unusable value.

    Raised when a float-mediated ln/sqrt/pow receives an operand outside its
    domain, overflows, or returns a non-finite result.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the failing operation.

        Args:
            message: Human-readable error description
            operation: Name of the operation that failed (e.g., "ln")
            context: Additional structured data
        """
        super().__init__(message, context)
        self.operation = operation
