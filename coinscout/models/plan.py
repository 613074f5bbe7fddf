"""Price target and entry/exit plan models."""

from typing import Literal

from pydantic import BaseModel, Field


class TargetSet(BaseModel):
    """Ordered price targets, strictly increasing above the current price."""

    immediate: float = 0.0
    target1: float = 0.0
    target2: float = 0.0
    target3: float = 0.0
    long_term: float = 0.0

    model_config = {"frozen": True}

    def as_list(self) -> list[float]:
        return [self.immediate, self.target1, self.target2, self.target3, self.long_term]


class StopLossTiers(BaseModel):
    """Candidate stop-loss prices by risk appetite."""

    conservative: float = 0.0
    moderate: float = 0.0
    aggressive: float = 0.0

    model_config = {"frozen": True}


class TakeProfitLadder(BaseModel):
    """Take-profit prices at fixed percentage gains from the entry."""

    tp1: float = 0.0
    tp2: float = 0.0
    tp3: float = 0.0
    tp4: float = 0.0

    model_config = {"frozen": True}


class EntryExitPlan(BaseModel):
    """Entry point, stops, take-profits and risk assessment."""

    entry_point: float = 0.0
    stop_loss: float = 0.0
    stop_loss_tier: Literal["conservative", "moderate", "aggressive"] = "conservative"
    stop_loss_tiers: StopLossTiers = Field(default_factory=StopLossTiers)
    take_profit: TakeProfitLadder = Field(default_factory=TakeProfitLadder)
    risk_reward_ratio: float = Field(default=0.0, ge=0)
    meets_target: bool = Field(default=False, description="Ratio reaches the configured target")
    strategy: str = "avoid - unfavorable ratio"
    risk_level: Literal["low", "medium", "high"] = "low"
    position_size_advice: str = ""
    volatility: float = Field(default=0.0, ge=0)
    confidence: float = Field(default=5.0, ge=5, le=95, description="Signal agreement (%)")

    model_config = {"frozen": True}
