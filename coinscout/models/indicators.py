"""Indicator result models."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class MACDResult(BaseModel):
    """Latest MACD reading with its classification."""

    value: float = Field(default=0.0, description="MACD line (fast EMA - slow EMA)")
    signal: Literal["bullish", "bearish", "neutral"] = Field(
        default="neutral", description="Classification of the latest bar"
    )
    histogram: float = Field(default=0.0, description="MACD line - signal line")
    signal_line: float = Field(default=0.0, description="EMA of the MACD line")
    crossover: bool = Field(
        default=False, description="MACD crossed its signal line on the latest bar"
    )

    model_config = {"frozen": True}


class TrendStrength(BaseModel):
    """Direction and strength of the recent trend."""

    direction: Literal["up", "down", "neutral"] = Field(default="neutral")
    strength: float = Field(default=0.0, ge=0, le=100, description="Dominance of moves (0-100)")

    model_config = {"frozen": True}


class VolumeChange(BaseModel):
    """Change of recent traded volume against the preceding window."""

    increase: float = Field(default=0.0, description="Percent change of the recent window")
    trend: Literal["increasing", "decreasing", "flat"] = Field(default="flat")
    current: float = Field(default=0.0, ge=0, description="Volume of the recent window")
    previous: float = Field(default=0.0, ge=0, description="Volume of the preceding window")

    model_config = {"frozen": True}


class IndicatorSet(BaseModel):
    """All indicator readings used to score one asset."""

    rsi: float = Field(default=50.0, ge=0, le=100)
    macd: MACDResult = Field(default_factory=MACDResult)
    sma: float = Field(default=0.0, ge=0)
    trend: TrendStrength = Field(default_factory=TrendStrength)
    volume: VolumeChange = Field(default_factory=VolumeChange)
    liquidity: float = Field(default=0.0, ge=-1, le=1, description="Price/volume correlation index")
    resistance: float = Field(default=0.0, ge=0, description="Resistance used for proximity")
    adx: Optional[float] = Field(default=None, description="Simplified ADX, when computed")
    volatility: float = Field(default=0.0, ge=0, description="Snapshot volatility score")

    model_config = {"frozen": True}
