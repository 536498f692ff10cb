"""Tests for domain error types."""

from decimal import Decimal

from avellaneda.domain.errors import (
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    MarketMakerError,
    NumericalError,
)


class TestMarketMakerError:
    """Tests for base MarketMakerError."""

    def test_is_exception(self) -> None:
        """MarketMakerError inherits from Exception."""
        assert isinstance(MarketMakerError("boom"), Exception)

    def test_message(self) -> None:
        """MarketMakerError stores message."""
        assert str(MarketMakerError("Test message")) == "Test message"

    def test_context(self) -> None:
        """MarketMakerError can include context dictionary."""
        error = MarketMakerError("failed", context={"value": "1"})
        assert error.context == {"value": "1"}

    def test_default_context(self) -> None:
        """MarketMakerError has empty context by default."""
        assert MarketMakerError("Test").context == {}


class TestSubclasses:
    """Tests for the specific error categories."""

    def test_all_inherit_from_base(self) -> None:
        """Every category is catchable as MarketMakerError."""
        errors = [
            InvalidConfiguration("bad"),
            InvalidMarketState("bad"),
            InvalidQuoteGeneration("bad"),
            NumericalError("bad"),
        ]
        assert all(isinstance(error, MarketMakerError) for error in errors)

    def test_invalid_configuration_field(self) -> None:
        """InvalidConfiguration stores the offending field."""
        error = InvalidConfiguration("risk_aversion must be positive", field="risk_aversion")
        assert error.field == "risk_aversion"
        assert "risk_aversion" in str(error)

    def test_invalid_market_state_field(self) -> None:
        """InvalidMarketState stores the offending field and context."""
        error = InvalidMarketState("bad mid", field="mid_price", context={"value": "-1"})
        assert error.field == "mid_price"
        assert error.context == {"value": "-1"}

    def test_invalid_quote_generation_prices(self) -> None:
        """InvalidQuoteGeneration stores the rejected bid and ask."""
        error = InvalidQuoteGeneration("crossed", bid=Decimal("101"), ask=Decimal("100"))
        assert error.bid == Decimal("101")
        assert error.ask == Decimal("100")

    def test_numerical_error_operation(self) -> None:
        """NumericalError stores the failing operation."""
        error = NumericalError("ln failed", operation="ln")
        assert error.operation == "ln"
