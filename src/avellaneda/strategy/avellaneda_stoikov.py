"""Avellaneda-Stoikov model calculations.

Implements the closed-form solutions from Avellaneda & Stoikov (2008),
"High-frequency trading in a limit order book".

Reservation price:
    r = s - q * γ * σ² * (T - t)

Optimal spread:
    δ = γ * σ² * (T - t) + (2/γ) * ln(1 + γ/k)

Where:
    - s is the mid price
    - q is the signed inventory
    - γ (gamma) is the risk aversion parameter
    - σ is the annualized volatility
    - T - t is the time to the terminal horizon, in years
    - k is the order intensity parameter

Quotes are placed symmetrically around the reservation price:
    bid = r - δ/2, ask = r + δ/2

Every function here is pure: no shared state, safe to call concurrently.
"""

from __future__ import annotations

from decimal import Decimal

from avellaneda.domain import decimal_math
from avellaneda.domain.errors import (
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    NumericalError,
)
from avellaneda.domain.types import ONE, TWO, ZERO

SECONDS_PER_MILLISECOND = Decimal("0.001")
SECONDS_PER_YEAR = Decimal("31536000")  # 365 days, no leap-year adjustment


def _is_positive(value: Decimal) -> bool:
    # NaN and infinities fail here instead of raising on comparison
    return value.is_finite() and value > ZERO


def time_to_terminal_years(time_to_terminal_ms: int) -> Decimal:
    """Convert a millisecond horizon to years.

    Raises:
        InvalidConfiguration: If the horizon is negative
    """
    if time_to_terminal_ms < 0:
        raise InvalidConfiguration(
            "time_to_terminal_ms must be non-negative",
            field="time_to_terminal_ms",
            context={"value": time_to_terminal_ms},
        )
    return (Decimal(time_to_terminal_ms) * SECONDS_PER_MILLISECOND) / SECONDS_PER_YEAR


def calculate_reservation_price(
    mid_price: Decimal,
    inventory: Decimal,
    risk_aversion: Decimal,
    volatility: Decimal,
    time_to_terminal_ms: int,
) -> Decimal:
    """Calculate the inventory-adjusted reservation price.

    Long inventory pushes the reservation price below mid (encouraging
    sells), short inventory pushes it above. Flat inventory returns mid
    exactly.

    Args:
        mid_price: Current mid price (must be positive)
        inventory: Signed position (positive = long)
        risk_aversion: γ (must be positive)
        volatility: Annualized σ (must be positive)
        time_to_terminal_ms: Time remaining to the horizon in milliseconds

    Returns:
        Reservation price

    Raises:
        InvalidMarketState: If mid_price or volatility is not positive, or
            any market input is NaN or infinite
        InvalidConfiguration: If risk_aversion is not positive
        NumericalError: If σ² cannot be computed
    """
    if not _is_positive(mid_price):
        raise InvalidMarketState(
            "mid_price must be positive and finite",
            field="mid_price",
            context={"value": str(mid_price)},
        )

    if not _is_positive(volatility):
        raise InvalidMarketState(
            "volatility must be positive and finite",
            field="volatility",
            context={"value": str(volatility)},
        )

    if not _is_positive(risk_aversion):
        raise InvalidConfiguration(
            "risk_aversion must be positive and finite",
            field="risk_aversion",
            context={"value": str(risk_aversion)},
        )

    if not inventory.is_finite():
        raise InvalidMarketState(
            "inventory must be finite",
            field="inventory",
            context={"value": str(inventory)},
        )

    time_years = time_to_terminal_years(time_to_terminal_ms)
    volatility_squared = decimal_math.pow_int(volatility, 2)
    adjustment = inventory * risk_aversion * volatility_squared * time_years

    return mid_price - adjustment


def calculate_optimal_spread(
    risk_aversion: Decimal,
    volatility: Decimal,
    time_to_terminal_ms: int,
    order_intensity: Decimal,
) -> Decimal:
    """Calculate the optimal total bid-ask spread.

    The first term compensates inventory risk and shrinks to zero at the
    horizon; the second compensates adverse selection and depends only on
    γ and k.

    Args:
        risk_aversion: γ (must be positive)
        volatility: Annualized σ (must be positive)
        time_to_terminal_ms: Time remaining to the horizon in milliseconds
        order_intensity: k (must be positive)

    Returns:
        Total spread δ (ask - bid)

    Raises:
        InvalidConfiguration: If γ, σ or k is not positive
        NumericalError: If the computation fails or the spread is negative
    """
    if not _is_positive(risk_aversion):
        raise InvalidConfiguration(
            "risk_aversion must be positive and finite",
            field="risk_aversion",
            context={"value": str(risk_aversion)},
        )

    if not _is_positive(volatility):
        raise InvalidConfiguration(
            "volatility must be positive and finite",
            field="volatility",
            context={"value": str(volatility)},
        )

    if not _is_positive(order_intensity):
        raise InvalidConfiguration(
            "order_intensity must be positive and finite",
            field="order_intensity",
            context={"value": str(order_intensity)},
        )

    time_years = time_to_terminal_years(time_to_terminal_ms)
    volatility_squared = decimal_math.pow_int(volatility, 2)
    inventory_risk_term = risk_aversion * volatility_squared * time_years

    adverse_selection_ln = decimal_math.ln(ONE + risk_aversion / order_intensity)
    adverse_selection_term = (TWO / risk_aversion) * adverse_selection_ln

    spread = inventory_risk_term + adverse_selection_term

    if spread < ZERO:
        raise NumericalError(
            "spread calculation resulted in negative value",
            operation="optimal_spread",
            context={"spread": str(spread)},
        )

    return spread


def quotes_from_spread(reservation_price: Decimal, spread: Decimal) -> tuple[Decimal, Decimal]:
    """Place bid and ask symmetrically around a reservation price.

    Args:
        reservation_price: Center of the quote
        spread: Total width (ask - bid)

    Returns:
        Tuple of (bid, ask)

    Raises:
        InvalidQuoteGeneration: If bid >= ask or bid <= 0
    """
    half_spread = spread / TWO
    bid_price = reservation_price - half_spread
    ask_price = reservation_price + half_spread

    if bid_price >= ask_price:
        raise InvalidQuoteGeneration(
            "bid price must be less than ask price",
            bid=bid_price,
            ask=ask_price,
        )

    if bid_price <= ZERO:
        raise InvalidQuoteGeneration(
            "bid price must be positive",
            bid=bid_price,
            ask=ask_price,
        )

    return bid_price, ask_price


def apply_min_spread(bid: Decimal, ask: Decimal, min_spread: Decimal) -> tuple[Decimal, Decimal]:
    """Widen a quote narrower than min_spread symmetrically around its centre.

    Quotes already at least min_spread wide are returned unchanged.

    Raises:
        InvalidQuoteGeneration: If widening pushes the bid to zero or below
    """
    if ask - bid >= min_spread:
        return bid, ask

    centre = (bid + ask) / TWO
    half_spread = min_spread / TWO
    bid_price = centre - half_spread
    ask_price = centre + half_spread

    if bid_price <= ZERO:
        raise InvalidQuoteGeneration(
            "bid price must be positive after min_spread widening",
            bid=bid_price,
            ask=ask_price,
        )

    return bid_price, ask_price


def calculate_optimal_quotes(
    mid_price: Decimal,
    inventory: Decimal,
    risk_aversion: Decimal,
    volatility: Decimal,
    time_to_terminal_ms: int,
    order_intensity: Decimal,
) -> tuple[Decimal, Decimal]:
    """Calculate optimal bid and ask prices.

    This is the entry point for quote generation: it combines the
    reservation price and optimal spread and validates the result.

    Args:
        mid_price: Current mid price
        inventory: Signed position (positive = long)
        risk_aversion: γ
        volatility: Annualized σ
        time_to_terminal_ms: Time remaining to the horizon in milliseconds
        order_intensity: k

    Returns:
        Tuple of (bid, ask)

    Raises:
        InvalidMarketState: If mid_price or volatility is not positive
        InvalidConfiguration: If γ or k is not positive
        InvalidQuoteGeneration: If bid >= ask or bid <= 0
        NumericalError: If an intermediate computation fails
    """
    reservation_price = calculate_reservation_price(
        mid_price,
        inventory,
        risk_aversion,
        volatility,
        time_to_terminal_ms,
    )

    spread = calculate_optimal_spread(
        risk_aversion,
        volatility,
        time_to_terminal_ms,
        order_intensity,
    )

    return quotes_from_spread(reservation_price, spread)
