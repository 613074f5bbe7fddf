"""CoinScout configuration.

Indicator periods, scoring weights and thresholds, batch filters and planner
settings live in one typed ``ScannerConfig`` value that is passed to the
engine explicitly. ``load_config`` reads overrides from a TOML file.
"""

from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator


DEFAULT_CONFIG_PATH = Path.home() / ".config" / "coinscout" / "config.toml"

STABLECOINS = ("USDT", "USDC", "BUSD", "DAI", "TUSD", "USDP", "USDD", "FRAX")


class ConfigurationError(ValueError):
    """Raised when a configuration value is invalid."""


class IndicatorPeriods(BaseModel):
    """Look-back windows for every indicator."""

    rsi: int = Field(default=14, ge=1)
    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=1)
    macd_signal: int = Field(default=9, ge=1)
    sma: int = Field(default=20, ge=1)
    adx: int = Field(default=14, ge=1)
    volume_window: int = Field(default=4, ge=1)
    trend_window: int = Field(default=20, ge=2)
    liquidity_window: int = Field(default=10, ge=2)
    resistance_lookback: int = Field(default=50, ge=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _fast_below_slow(self) -> "IndicatorPeriods":
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be below macd_slow ({self.macd_slow})"
            )
        return self


class ScoringWeights(BaseModel):
    """Points awarded per triggered signal."""

    rsi_breakout: float = Field(default=20, ge=0)
    rsi_overbought: float = Field(
        default=10, ge=0, description="Set to 0 to stop rewarding RSI at or above the overbought level"
    )
    macd_signal: float = Field(default=20, ge=0)
    sma_breakout: float = Field(default=15, ge=0)
    resistance_break: float = Field(default=15, ge=0)
    liquidity_cross: float = Field(default=10, ge=0)
    volume_increase: float = Field(default=10, ge=0)
    trend_strength: float = Field(default=10, ge=0)

    model_config = {"frozen": True}


class ScoringThresholds(BaseModel):
    """Trigger levels for the scoring signals."""

    rsi_breakout: float = Field(default=50, ge=0, le=100)
    rsi_overbought: float = Field(default=70, ge=0, le=100)
    resistance_proximity_pct: float = Field(default=2.0, ge=0, lt=100)
    volume_increase_pct: float = Field(default=20.0)
    trend_strength_min: float = Field(default=60.0, ge=0, le=100)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _breakout_below_overbought(self) -> "ScoringThresholds":
        if self.rsi_breakout >= self.rsi_overbought:
            raise ValueError("rsi_breakout must be below rsi_overbought")
        return self


class FilterSettings(BaseModel):
    """Batch filters applied by the ranking pipeline."""

    min_volume: float = Field(default=0.0, ge=0, description="Minimum 24h quote volume")
    excluded_symbols: tuple[str, ...] = STABLECOINS
    quote_currency: Optional[str] = Field(default=None, description="Only keep this quote")
    min_score: float = Field(default=50.0, ge=0, le=100)
    max_results: int = Field(default=100, ge=0)

    model_config = {"frozen": True}

    @field_validator("excluded_symbols", mode="before")
    @classmethod
    def _upper_symbols(cls, value):
        if isinstance(value, (list, tuple)):
            return tuple(str(s).upper() for s in value)
        return value


class PlannerSettings(BaseModel):
    """Target and risk planner parameters."""

    risk_reward_target: float = Field(default=2.0, gt=0)
    take_profit_percents: tuple[float, float, float, float] = (5.0, 10.0, 15.0, 25.0)
    target_percents: tuple[float, float, float] = (5.0, 10.0, 15.0)
    stop_loss_caps: tuple[float, float, float] = (8.0, 12.0, 15.0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_ladders(self) -> "PlannerSettings":
        for name in ("take_profit_percents", "target_percents", "stop_loss_caps"):
            values = getattr(self, name)
            if any(v <= 0 for v in values):
                raise ValueError(f"{name} must be positive")
            if list(values) != sorted(set(values)):
                raise ValueError(f"{name} must be strictly increasing")
        if self.stop_loss_caps[-1] >= 100:
            raise ValueError("stop_loss_caps must stay below 100%")
        return self


class ScannerConfig(BaseModel):
    """Complete engine configuration with documented defaults."""

    indicators: IndicatorPeriods = Field(default_factory=IndicatorPeriods)
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    filters: FilterSettings = Field(default_factory=FilterSettings)
    planner: PlannerSettings = Field(default_factory=PlannerSettings)
    simulated_mode: bool = Field(
        default=False, description="Use random pseudo-indicators when candles are missing"
    )
    workers: int = Field(default=4, ge=1, description="Threads used to evaluate a batch")

    model_config = {"frozen": True}


def build_config(data: Optional[dict] = None) -> ScannerConfig:
    """Validate a raw mapping into a ``ScannerConfig``.

    Raises:
        ConfigurationError: naming every invalid field.
    """
    try:
        return ScannerConfig.model_validate(data or {})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


def load_config(path: Optional[Path] = None) -> ScannerConfig:
    """Load configuration from a TOML file.

    When *path* is None the default location is used, and a missing default
    file simply yields the built-in defaults. An explicit path must exist.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if path is not None:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return ScannerConfig()

    try:
        data = toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e

    return build_config(data)
