"""Tests for StrategyConfig."""

from decimal import Decimal

import pytest

from avellaneda.domain.errors import InvalidConfiguration
from avellaneda.strategy.config import StrategyConfig


class TestCreate:
    """Tests for StrategyConfig.create()."""

    def test_valid(self) -> None:
        """Valid parameters are stored as given."""
        config = StrategyConfig.create(
            risk_aversion=Decimal("0.1"),
            order_intensity=Decimal("1.5"),
            terminal_time=3_600_000,
            min_spread=Decimal("0.01"),
        )
        assert config.risk_aversion == Decimal("0.1")
        assert config.order_intensity == Decimal("1.5")
        assert config.terminal_time == 3_600_000
        assert config.min_spread == Decimal("0.01")

    def test_is_immutable(self, strategy_config: StrategyConfig) -> None:
        """StrategyConfig should be immutable."""
        with pytest.raises((AttributeError, TypeError, ValueError)):
            strategy_config.risk_aversion = Decimal("1")  # type: ignore[misc]

    def test_zero_min_spread_allowed(self) -> None:
        """A zero minimum spread is valid."""
        config = StrategyConfig.create(Decimal("0.1"), Decimal("1.5"), 1000, Decimal("0"))
        assert config.min_spread == Decimal("0")

    @pytest.mark.parametrize(
        ("gamma", "k", "min_spread", "field"),
        [
            ("0", "1.5", "0", "risk_aversion"),
            ("-0.1", "1.5", "0", "risk_aversion"),
            ("0.1", "0", "0", "order_intensity"),
            ("0.1", "1.5", "-0.01", "min_spread"),
            ("NaN", "1.5", "0", "risk_aversion"),
            ("0.1", "Infinity", "0", "order_intensity"),
            ("0.1", "1.5", "NaN", "min_spread"),
        ],
    )
    def test_invalid(self, gamma: str, k: str, min_spread: str, field: str) -> None:
        """Out-of-domain parameters raise InvalidConfiguration naming the field."""
        with pytest.raises(InvalidConfiguration) as exc_info:
            StrategyConfig.create(Decimal(gamma), Decimal(k), 1000, Decimal(min_spread))
        assert exc_info.value.field == field


class TestFromDict:
    """Tests for StrategyConfig.from_dict()."""

    def test_from_yaml_style_floats(self) -> None:
        """Floats keep their written precision."""
        config = StrategyConfig.from_dict(
            {
                "risk_aversion": 0.1,
                "order_intensity": 1.5,
                "terminal_time": 3600000,
                "min_spread": 0.01,
            }
        )
        assert config.risk_aversion == Decimal("0.1")
        assert config.min_spread == Decimal("0.01")

    def test_min_spread_defaults_to_zero(self) -> None:
        """min_spread may be omitted."""
        config = StrategyConfig.from_dict(
            {"risk_aversion": "0.1", "order_intensity": "1.5", "terminal_time": 1000}
        )
        assert config.min_spread == Decimal("0")

    def test_missing_key(self) -> None:
        """Missing parameter raises InvalidConfiguration naming it."""
        with pytest.raises(InvalidConfiguration) as exc_info:
            StrategyConfig.from_dict({"order_intensity": "1.5", "terminal_time": 1000})
        assert exc_info.value.field == "risk_aversion"

    def test_malformed_value(self) -> None:
        """Non-numeric value raises InvalidConfiguration."""
        with pytest.raises(InvalidConfiguration):
            StrategyConfig.from_dict(
                {"risk_aversion": "abc", "order_intensity": "1.5", "terminal_time": 1000}
            )
