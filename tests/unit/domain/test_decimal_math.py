"""Tests for float-bridged Decimal math helpers."""

import math
from decimal import Decimal

import pytest

from avellaneda.domain import decimal_math
from avellaneda.domain.errors import NumericalError


class TestLn:
    """Tests for ln()."""

    def test_ln_of_one_is_zero(self) -> None:
        """ln(1) == 0."""
        assert decimal_math.ln(Decimal("1")) == Decimal("0")

    def test_ln_of_e(self) -> None:
        """ln(e) ≈ 1."""
        result = decimal_math.ln(Decimal(str(math.e)))
        assert abs(result - Decimal("1")) < Decimal("1e-12")

    def test_returns_decimal(self) -> None:
        """Result is a Decimal built from the float's repr."""
        result = decimal_math.ln(Decimal("2"))
        assert isinstance(result, Decimal)
        assert result == Decimal(str(math.log(2.0)))

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_non_positive_rejected(self, value: str) -> None:
        """ln of a non-positive value raises NumericalError."""
        with pytest.raises(NumericalError) as exc_info:
            decimal_math.ln(Decimal(value))
        assert exc_info.value.operation == "ln"

    def test_nan_rejected(self) -> None:
        """NaN operand raises NumericalError."""
        with pytest.raises(NumericalError):
            decimal_math.ln(Decimal("NaN"))


class TestSqrt:
    """Tests for sqrt()."""

    def test_perfect_square(self) -> None:
        """sqrt(4) == 2."""
        assert decimal_math.sqrt(Decimal("4")) == Decimal("2.0")

    def test_zero(self) -> None:
        """sqrt(0) == 0."""
        assert decimal_math.sqrt(Decimal("0")) == Decimal("0")

    def test_negative_rejected(self) -> None:
        """sqrt of a negative value raises NumericalError."""
        with pytest.raises(NumericalError) as exc_info:
            decimal_math.sqrt(Decimal("-4"))
        assert exc_info.value.operation == "sqrt"


class TestPowInt:
    """Tests for pow_int()."""

    def test_square(self) -> None:
        """3² == 9."""
        assert decimal_math.pow_int(Decimal("3"), 2) == Decimal("9.0")

    def test_zero_exponent(self) -> None:
        """x⁰ == 1."""
        assert decimal_math.pow_int(Decimal("7.5"), 0) == Decimal("1.0")

    def test_negative_exponent(self) -> None:
        """2⁻² == 0.25."""
        assert decimal_math.pow_int(Decimal("2"), -2) == Decimal("0.25")

    def test_overflow_rejected(self) -> None:
        """Overflowing result raises NumericalError."""
        with pytest.raises(NumericalError) as exc_info:
            decimal_math.pow_int(Decimal("1e200"), 5)
        assert exc_info.value.operation == "pow_int"

    def test_infinite_operand_rejected(self) -> None:
        """Operand beyond float range raises NumericalError."""
        with pytest.raises(NumericalError):
            decimal_math.pow_int(Decimal("1e400"), 1)
