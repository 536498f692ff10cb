"""Tests for volatility estimators."""

import math
from decimal import Decimal

import pytest

from avellaneda.domain.errors import InvalidConfiguration, InvalidMarketState
from avellaneda.strategy.volatility import VolatilityEstimator


def _log_returns(prices: list[float]) -> list[float]:
    return [math.log(b / a) for a, b in zip(prices, prices[1:])]


def _sample_std(values: list[float]) -> float:
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / (len(values) - 1))


class TestAnnualization:
    """Tests for the annualization factor."""

    def test_default_is_none(self) -> None:
        """Default estimator reports no explicit factor."""
        assert VolatilityEstimator().annualization_factor is None

    def test_with_annualization_factor(self) -> None:
        """with_annualization_factor stores the factor."""
        estimator = VolatilityEstimator.with_annualization_factor(Decimal("1"))
        assert estimator.annualization_factor == Decimal("1")

    def test_default_scales_by_sqrt_252(self, sample_prices: list[Decimal]) -> None:
        """Default result is the per-period result times sqrt(252)."""
        raw = VolatilityEstimator.with_annualization_factor(Decimal("1")).calculate_simple(sample_prices)
        annualized = VolatilityEstimator().calculate_simple(sample_prices)
        assert float(annualized) == pytest.approx(float(raw) * math.sqrt(252), rel=1e-12)


class TestSimpleVolatility:
    """Tests for calculate_simple()."""

    def test_matches_sample_std(self, sample_prices: list[Decimal]) -> None:
        """Result is the sample std dev of log returns."""
        estimator = VolatilityEstimator.with_annualization_factor(Decimal("1"))
        result = estimator.calculate_simple(sample_prices)

        expected = _sample_std(_log_returns([float(p) for p in sample_prices]))
        assert float(result) == pytest.approx(expected, rel=1e-9)

    def test_constant_prices_zero(self) -> None:
        """Constant prices have zero volatility."""
        prices = [Decimal("100")] * 5
        assert VolatilityEstimator().calculate_simple(prices) == Decimal("0")

    def test_single_price_rejected(self) -> None:
        """One price raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_simple([Decimal("100")])

    def test_two_prices_rejected(self) -> None:
        """Two prices give one return, which has no sample variance."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_simple([Decimal("100"), Decimal("101")])

    def test_non_positive_price_rejected(self) -> None:
        """A zero price raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_simple([Decimal("100"), Decimal("0"), Decimal("101")])

    def test_nan_price_rejected(self) -> None:
        """A NaN price raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState) as exc_info:
            VolatilityEstimator().calculate_simple([Decimal("100"), Decimal("NaN"), Decimal("101")])
        assert exc_info.value.context["index"] == 1


class TestEwmaVolatility:
    """Tests for calculate_ewma()."""

    def test_matches_reference_recursion(self, sample_prices: list[Decimal]) -> None:
        """Seeded with the first five returns, then recursed over all returns."""
        estimator = VolatilityEstimator.with_annualization_factor(Decimal("1"))
        result = estimator.calculate_ewma(sample_prices, Decimal("0.94"))

        returns = _log_returns([float(p) for p in sample_prices])
        variance = _sample_std(returns[:5]) ** 2
        for r in returns:
            variance = 0.94 * variance + 0.06 * r * r

        assert float(result) == pytest.approx(math.sqrt(variance), rel=1e-9)

    def test_positive(self, sample_prices: list[Decimal]) -> None:
        """Moving prices give positive volatility."""
        assert VolatilityEstimator().calculate_ewma(sample_prices, Decimal("0.94")) > 0

    @pytest.mark.parametrize("lambda_", ["0", "1", "-0.5", "1.5", "NaN"])
    def test_lambda_out_of_range(self, sample_prices: list[Decimal], lambda_: str) -> None:
        """λ outside (0, 1) raises InvalidConfiguration."""
        with pytest.raises(InvalidConfiguration) as exc_info:
            VolatilityEstimator().calculate_ewma(sample_prices, Decimal(lambda_))
        assert exc_info.value.field == "lambda"

    def test_single_price_rejected(self) -> None:
        """One price raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_ewma([Decimal("100")], Decimal("0.94"))

    def test_two_prices_rejected(self) -> None:
        """A single return cannot seed the variance."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_ewma([Decimal("100"), Decimal("101")], Decimal("0.94"))


class TestParkinsonVolatility:
    """Tests for calculate_parkinson()."""

    def test_matches_formula(self) -> None:
        """σ = sqrt(Σ ln(H/L)² / (4 n ln 2))."""
        highs = [Decimal("102"), Decimal("103"), Decimal("101")]
        lows = [Decimal("99"), Decimal("100"), Decimal("98")]
        estimator = VolatilityEstimator.with_annualization_factor(Decimal("1"))

        result = estimator.calculate_parkinson(highs, lows)

        total = sum(math.log(float(h) / float(l)) ** 2 for h, l in zip(highs, lows))
        expected = math.sqrt(total / (4 * 3 * math.log(2)))
        assert float(result) == pytest.approx(expected, rel=1e-9)

    def test_equal_high_low_zero(self) -> None:
        """No intraperiod range means zero volatility."""
        prices = [Decimal("100"), Decimal("100")]
        assert VolatilityEstimator().calculate_parkinson(prices, prices) == Decimal("0")

    def test_length_mismatch(self) -> None:
        """Different series lengths raise InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_parkinson([Decimal("101")], [Decimal("99"), Decimal("98")])

    def test_empty(self) -> None:
        """Empty series raise InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_parkinson([], [])

    def test_high_below_low(self) -> None:
        """A high below its low raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_parkinson([Decimal("98")], [Decimal("99")])

    def test_non_positive(self) -> None:
        """A zero low raises InvalidMarketState."""
        with pytest.raises(InvalidMarketState):
            VolatilityEstimator().calculate_parkinson([Decimal("101")], [Decimal("0")])
