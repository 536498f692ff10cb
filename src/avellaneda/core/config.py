"""Configuration models for the quoting application.

Loads and validates configuration from YAML files using pydantic.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from avellaneda.strategy.config import StrategyConfig


class StrategySettings(BaseModel):
    """Avellaneda-Stoikov model parameters."""

    risk_aversion: Decimal = Decimal("0.1")
    order_intensity: Decimal = Decimal("1.5")
    terminal_time_ms: int = 3_600_000  # 1 hour horizon
    min_spread: Decimal = Decimal("0.01")

    def to_strategy_config(self) -> StrategyConfig:
        """Build the validated model configuration.

        Raises:
            InvalidConfiguration: If a parameter is out of domain
        """
        return StrategyConfig.create(
            risk_aversion=self.risk_aversion,
            order_intensity=self.order_intensity,
            terminal_time=self.terminal_time_ms,
            min_spread=self.min_spread,
        )


class VolatilitySettings(BaseModel):
    """Rolling volatility estimation."""

    method: Literal["simple", "ewma"] = "ewma"
    ewma_lambda: Decimal = Field(default=Decimal("0.94"), gt=0, lt=1)
    window_size: int = Field(default=50, ge=3)
    min_samples: int = Field(default=3, ge=3)
    initial_volatility: Decimal = Field(default=Decimal("0.2"), gt=0)
    annualization_factor: Decimal | None = None  # None = sqrt(252)


class SessionSettings(BaseModel):
    """Quoting session behaviour."""

    market_id: str = "default"
    fallback_spread_pct: Decimal = Field(default=Decimal("0.01"), gt=0, lt=1)


class MetricsSettings(BaseModel):
    """Prometheus exporter configuration."""

    enabled: bool = False
    prefix: str = "avellaneda"
    port: int = 9090
    host: str = "0.0.0.0"


class BacktestSettings(BaseModel):
    """Backtest simulation parameters."""

    fill_size: Decimal = Field(default=Decimal("1"), gt=0)


class AppConfig(BaseModel):
    """Root configuration for the quoting application."""

    strategy: StrategySettings = Field(default_factory=StrategySettings)
    volatility: VolatilitySettings = Field(default_factory=VolatilitySettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    backtest: BacktestSettings = Field(default_factory=BacktestSettings)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Validated AppConfig

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValidationError: If the config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.model_validate(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """Load configuration from a dictionary."""
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to write the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load application configuration.

    Looks for config in the following order:
    1. Provided path argument
    2. ./config/avellaneda.yaml
    3. ./config/config.yaml
    4. ./avellaneda.yaml
    5. Default configuration

    Args:
        path: Optional explicit path to config file

    Returns:
        Validated AppConfig
    """
    if path:
        return AppConfig.from_yaml(path)

    default_paths = [
        Path("./config/avellaneda.yaml"),
        Path("./config/config.yaml"),
        Path("./avellaneda.yaml"),
    ]

    for default_path in default_paths:
        if default_path.exists():
            return AppConfig.from_yaml(default_path)

    return AppConfig()
