"""Scoring and per-asset analysis record models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from coinscout.models.indicators import IndicatorSet
from coinscout.models.levels import LevelSet
from coinscout.models.plan import EntryExitPlan, TargetSet


class AssetState(str, Enum):
    """Lifecycle of one asset inside a ranking run."""

    PENDING = "pending"
    EVALUATED = "evaluated"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Signal(BaseModel):
    """A triggered scoring signal."""

    name: str = Field(..., min_length=1, description="Signal key (e.g. 'macd_signal')")
    points: float = Field(..., ge=0, description="Points contributed to the score")
    description: str = Field(default="", description="Human readable explanation")

    model_config = {"frozen": True}


class ScoreResult(BaseModel):
    """Composite score and the signals that produced it."""

    score: float = Field(default=0.0, ge=0, le=100)
    signals: tuple[Signal, ...] = ()
    checked: int = Field(default=0, ge=0, description="Number of signals evaluated")

    model_config = {"frozen": True}

    def fired(self, name: str) -> bool:
        return any(s.name == name for s in self.signals)


class AnalysisRecord(BaseModel):
    """The full analysis of one asset for one cycle."""

    symbol: str
    price: float = Field(..., ge=0)
    change24h: float = 0.0
    volume24h: float = Field(default=0.0, ge=0)
    high24h: float = Field(default=0.0, ge=0)
    low24h: float = Field(default=0.0, ge=0)
    score: float = Field(default=0.0, ge=0, le=100)
    signals: tuple[Signal, ...] = ()
    indicators: IndicatorSet = Field(default_factory=IndicatorSet)
    levels: LevelSet = Field(default_factory=LevelSet)
    targets: TargetSet = Field(default_factory=TargetSet)
    plan: EntryExitPlan = Field(default_factory=EntryExitPlan)
    analysis: str = ""
    candle_count: int = Field(default=0, ge=0)
    simulated: bool = Field(default=False, description="Indicators came from the random source")
    error: Optional[str] = Field(default=None, description="Set on degraded records only")

    model_config = {"frozen": True}

    @property
    def confidence(self) -> float:
        return self.plan.confidence
