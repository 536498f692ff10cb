"""Tests for wrapping strategy implementations."""

from decimal import Decimal

import pytest

from avellaneda.domain.errors import InvalidConfiguration, InvalidMarketState
from avellaneda.strategy.interface import AsyncDefaultAvellanedaStoikov, DefaultAvellanedaStoikov
from avellaneda.strategy.wrappers import ExternalVolatilityStrategy, MinimumSpreadStrategy

GAMMA = Decimal("0.1")
K = Decimal("1.5")
HORIZON_MS = 3_600_000


class TestMinimumSpreadStrategy:
    """Tests for MinimumSpreadStrategy."""

    def test_adds_extra_spread(self) -> None:
        """Spread is the base spread plus the padding."""
        base = DefaultAvellanedaStoikov()
        strategy = MinimumSpreadStrategy(Decimal("0.5"), base)

        base_spread = base.calculate_optimal_spread(GAMMA, Decimal("0.2"), HORIZON_MS, K)
        spread = strategy.calculate_optimal_spread(GAMMA, Decimal("0.2"), HORIZON_MS, K)

        assert spread == base_spread + Decimal("0.5")

    def test_reservation_unchanged(self) -> None:
        """Reservation price is delegated unchanged."""
        strategy = MinimumSpreadStrategy(Decimal("0.5"))
        args = (Decimal("100"), Decimal("4"), GAMMA, Decimal("0.2"), HORIZON_MS)
        assert strategy.calculate_reservation_price(*args) == DefaultAvellanedaStoikov().calculate_reservation_price(
            *args
        )

    def test_quotes_are_wider(self) -> None:
        """Quotes widen by half the padding on each side."""
        args = (Decimal("100"), Decimal("0"), GAMMA, Decimal("0.2"), HORIZON_MS, K)
        base_bid, base_ask = DefaultAvellanedaStoikov().calculate_optimal_quotes(*args)
        bid, ask = MinimumSpreadStrategy(Decimal("1")).calculate_optimal_quotes(*args)

        assert ask - bid == pytest.approx(base_ask - base_bid + Decimal("1"))
        assert bid < base_bid
        assert ask > base_ask

    def test_negative_padding_rejected(self) -> None:
        """Negative padding raises InvalidConfiguration."""
        with pytest.raises(InvalidConfiguration):
            MinimumSpreadStrategy(Decimal("-0.1"))

    def test_nan_padding_rejected(self) -> None:
        """NaN padding raises InvalidConfiguration."""
        with pytest.raises(InvalidConfiguration):
            MinimumSpreadStrategy(Decimal("NaN"))

    def test_extra_spread_property(self) -> None:
        """extra_spread exposes the padding."""
        assert MinimumSpreadStrategy(Decimal("0.25")).extra_spread == Decimal("0.25")


class TestExternalVolatilityStrategy:
    """Tests for ExternalVolatilityStrategy."""

    @pytest.mark.asyncio
    async def test_substitutes_fetched_volatility(self) -> None:
        """The passed volatility is ignored in favour of the fetched one."""
        calls = []

        async def source() -> Decimal:
            calls.append(1)
            return Decimal("0.5")

        strategy = ExternalVolatilityStrategy(source)
        spread = await strategy.calculate_optimal_spread(GAMMA, Decimal("0.01"), HORIZON_MS, K)
        expected = await AsyncDefaultAvellanedaStoikov().calculate_optimal_spread(
            GAMMA, Decimal("0.5"), HORIZON_MS, K
        )

        assert spread == expected
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_fetches_on_every_call(self) -> None:
        """Each operation awaits the source once."""
        calls = []

        async def source() -> Decimal:
            calls.append(1)
            return Decimal("0.3")

        strategy = ExternalVolatilityStrategy(source)
        await strategy.calculate_reservation_price(Decimal("100"), Decimal("1"), GAMMA, Decimal("1"), HORIZON_MS)
        await strategy.calculate_optimal_quotes(Decimal("100"), Decimal("1"), GAMMA, Decimal("1"), HORIZON_MS, K)

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_quotes_use_fetched_volatility(self) -> None:
        """Quotes equal the default strategy's quotes at the fetched volatility."""

        async def source() -> Decimal:
            return Decimal("0.4")

        args = (Decimal("100"), Decimal("2"), GAMMA)
        quotes = await ExternalVolatilityStrategy(source).calculate_optimal_quotes(
            *args, Decimal("9"), HORIZON_MS, K
        )
        expected = DefaultAvellanedaStoikov().calculate_optimal_quotes(*args, Decimal("0.4"), HORIZON_MS, K)

        assert quotes == expected

    @pytest.mark.asyncio
    async def test_source_errors_propagate(self) -> None:
        """Errors from the source surface unchanged."""

        async def source() -> Decimal:
            raise TimeoutError("volatility feed timed out")

        with pytest.raises(TimeoutError):
            await ExternalVolatilityStrategy(source).calculate_optimal_spread(GAMMA, Decimal("0.2"), HORIZON_MS, K)

    @pytest.mark.asyncio
    async def test_invalid_fetched_volatility_rejected(self) -> None:
        """A non-positive fetched volatility is validated downstream."""

        async def source() -> Decimal:
            return Decimal("0")

        with pytest.raises(InvalidMarketState):
            await ExternalVolatilityStrategy(source).calculate_reservation_price(
                Decimal("100"), Decimal("0"), GAMMA, Decimal("0.2"), HORIZON_MS
            )
