"""Strategy configuration parameters.

StrategyConfig bundles the Avellaneda-Stoikov model parameters. It is
immutable and should be built through the validating factories, which
reject out-of-domain parameters before any quote is produced.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic.dataclasses import dataclass

from avellaneda.domain.errors import InvalidConfiguration
from avellaneda.domain.types import ZERO


@dataclass(frozen=True)
class StrategyConfig:
    """Avellaneda-Stoikov model parameters.

    min_spread is a pass-through value: the quoting formulas never apply
    it. Callers (such as QuotingSession) enforce it by widening the
    computed spread.
    """

    risk_aversion: Decimal  # γ
    order_intensity: Decimal  # k
    terminal_time: int  # Horizon in milliseconds
    min_spread: Decimal

    @classmethod
    def create(
        cls,
        risk_aversion: Decimal,
        order_intensity: Decimal,
        terminal_time: int,
        min_spread: Decimal,
    ) -> StrategyConfig:
        """Create a validated strategy configuration.

        Args:
            risk_aversion: Risk aversion γ (must be positive)
            order_intensity: Order arrival intensity k (must be positive)
            terminal_time: Trading horizon in milliseconds
            min_spread: Minimum quoted spread (must be non-negative)

        Returns:
            StrategyConfig instance

        Raises:
            InvalidConfiguration: If a parameter is out of domain
        """
        if not risk_aversion.is_finite() or risk_aversion <= ZERO:
            raise InvalidConfiguration(
                "risk_aversion must be positive",
                field="risk_aversion",
                context={"value": str(risk_aversion)},
            )

        if not order_intensity.is_finite() or order_intensity <= ZERO:
            raise InvalidConfiguration(
                "order_intensity must be positive",
                field="order_intensity",
                context={"value": str(order_intensity)},
            )

        if not min_spread.is_finite() or min_spread < ZERO:
            raise InvalidConfiguration(
                "min_spread must be non-negative",
                field="min_spread",
                context={"value": str(min_spread)},
            )

        return cls(
            risk_aversion=risk_aversion,
            order_intensity=order_intensity,
            terminal_time=terminal_time,
            min_spread=min_spread,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StrategyConfig:
        """Create a validated config from a dictionary (e.g., parsed YAML).

        Numeric values are read through str() so floats from YAML keep
        their written precision.

        Expected format:
        {
            "risk_aversion": 0.1,
            "order_intensity": 1.5,
            "terminal_time": 3600000,
            "min_spread": 0.01,
        }

        Raises:
            InvalidConfiguration: If a key is missing or a value is invalid
        """
        try:
            return cls.create(
                risk_aversion=Decimal(str(data["risk_aversion"])),
                order_intensity=Decimal(str(data["order_intensity"])),
                terminal_time=int(data["terminal_time"]),
                min_spread=Decimal(str(data.get("min_spread", "0"))),
            )
        except KeyError as e:
            raise InvalidConfiguration(
                f"missing strategy parameter: {e.args[0]}",
                field=str(e.args[0]),
            ) from e
        except (InvalidOperation, ValueError) as e:
            raise InvalidConfiguration(
                f"malformed strategy parameter: {e}",
                context={"data": {key: str(value) for key, value in data.items()}},
            ) from e
