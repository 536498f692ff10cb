"""Transcendental helpers for Decimal values.

Decimal has no general logarithm, real power or square root that the
quoting formulas can share, so these helpers bridge through float: the
operand is converted to a finite float, the operation is applied with
``math``, and the result is converted back with ``Decimal(str(result))``.

Results therefore carry float precision (about 15-17 significant digits),
not full Decimal precision. Domain violations surface as NumericalError:
``ln`` of a non-positive value and ``sqrt`` of a negative value are
rejected, as is any operand or result that is not a finite float.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from decimal import Decimal

from avellaneda.domain.errors import NumericalError


def _to_float(value: Decimal, operation: str) -> float:
    """Convert a Decimal operand to a finite float."""
    try:
        float_value = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise NumericalError(
            f"{operation}: invalid value {value!r}",
            operation=operation,
        ) from e

    if not math.isfinite(float_value):
        raise NumericalError(
            f"{operation}: value {value} is not representable as a finite float",
            operation=operation,
            context={"value": str(value)},
        )
    return float_value


def _to_decimal(result: float, operation: str) -> Decimal:
    """Convert a float result back to Decimal, rejecting NaN and infinities."""
    if not math.isfinite(result):
        raise NumericalError(
            f"{operation}: result is not finite",
            operation=operation,
            context={"result": repr(result)},
        )
    return Decimal(str(result))


def _apply(operation: str, func: Callable[[float], float], value: Decimal) -> Decimal:
    float_value = _to_float(value, operation)
    try:
        result = func(float_value)
    except (ValueError, OverflowError, ZeroDivisionError) as e:
        raise NumericalError(
            f"{operation}: {e} for value {value}",
            operation=operation,
            context={"value": str(value)},
        ) from e
    return _to_decimal(result, operation)


def ln(value: Decimal) -> Decimal:
    """Calculate the natural logarithm of a Decimal.

    Args:
        value: Value to take the logarithm of (must be positive)

    Returns:
        ln(value)

    Raises:
        NumericalError: If value is not positive or not a finite float
    """
    return _apply("ln", math.log, value)


def pow_int(value: Decimal, exponent: int) -> Decimal:
    """Raise a Decimal to an integer power.

    Args:
        value: The base
        exponent: Integer exponent (may be negative or zero)

    Returns:
        value ** exponent

    Raises:
        NumericalError: If the base is not a finite float or the result
            overflows
    """
    return _apply("pow_int", lambda base: math.pow(base, exponent), value)


def sqrt(value: Decimal) -> Decimal:
    """Calculate the square root of a Decimal.

    Args:
        value: Value to take the square root of (must be non-negative)

    Returns:
        sqrt(value)

    Raises:
        NumericalError: If value is negative or not a finite float
    """
    return _apply("sqrt", math.sqrt, value)
