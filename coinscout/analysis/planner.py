"""Target, entry/exit and risk planning - pure math, no I/O.

Entry is RSI-conditioned, the stop-loss tier is picked by snapshot
volatility, take-profits follow a fixed percentage ladder and the
risk/reward ratio is measured to the second take-profit.
"""

from typing import Optional

from coinscout.analysis.scoring import family_of
from coinscout.config import PlannerSettings, ScoringThresholds
from coinscout.indicators.technical import calculate_volatility
from coinscout.models.candle import TickerSnapshot
from coinscout.models.indicators import IndicatorSet
from coinscout.models.levels import LevelSet
from coinscout.models.plan import EntryExitPlan, StopLossTiers, TakeProfitLadder, TargetSet
from coinscout.models.record import ScoreResult


# Entry as a fraction of the current price
ENTRY_BELOW_BREAKOUT = 0.998
ENTRY_NEUTRAL = 0.995
ENTRY_OVERBOUGHT = 0.985

# Volatility boundaries between conservative/moderate/aggressive stops
LOW_VOLATILITY = 5.0
HIGH_VOLATILITY = 10.0

MIN_CONFIDENCE = 5.0
MAX_CONFIDENCE = 95.0

POSITION_ADVICE = {
    "low": "Standard position size (up to 5% of capital)",
    "medium": "Reduced position size (2-3% of capital)",
    "high": "Small position size (1% of capital or less)",
}


def select_entry_point(price: float, rsi: float, breakout: float = 50, overbought: float = 70) -> float:
    """Pick the entry price from the RSI regime.

    Below the breakout level the current price is accepted almost as is;
    above overbought the entry waits for a 1.5% pullback.
    """
    if rsi < breakout:
        return price * ENTRY_BELOW_BREAKOUT
    if rsi > overbought:
        return price * ENTRY_OVERBOUGHT
    return price * ENTRY_NEUTRAL


def calculate_stop_loss_tiers(
    entry: float,
    levels: LevelSet,
    caps: tuple[float, float, float] = (8.0, 12.0, 15.0),
) -> StopLossTiers:
    """Calculate conservative/moderate/aggressive stops.

    Each tier is the higher of its support level (support1..3) and the
    price at its maximum loss percentage. A stop that would sit at or
    above the entry falls back to the maximum-loss price.
    """
    stops = []
    for support, cap in zip(levels.supports, caps):
        floor = entry * (1 - cap / 100)
        stop = max(support, floor)
        if stop >= entry:
            stop = floor
        stops.append(stop)

    return StopLossTiers(conservative=stops[0], moderate=stops[1], aggressive=stops[2])


def select_stop_tier(volatility: float) -> str:
    """Map volatility to the stop-loss tier that tolerates it."""
    if volatility < LOW_VOLATILITY:
        return "conservative"
    if volatility < HIGH_VOLATILITY:
        return "moderate"
    return "aggressive"


def calculate_take_profits(
    entry: float,
    percents: tuple[float, float, float, float] = (5.0, 10.0, 15.0, 25.0),
) -> TakeProfitLadder:
    """Take-profit prices at fixed percentage gains from the entry."""
    tp1, tp2, tp3, tp4 = (entry * (1 + p / 100) for p in percents)
    return TakeProfitLadder(tp1=tp1, tp2=tp2, tp3=tp3, tp4=tp4)


def calculate_risk_reward(entry: float, stop_loss: float, take_profit: float) -> float:
    """Reward to *take_profit* per unit of risk to *stop_loss*; 0.0 when risk is not positive."""
    risk = entry - stop_loss
    if risk <= 0:
        return 0.0
    return max(0.0, (take_profit - entry) / risk)


def classify_strategy(ratio: float) -> str:
    """Recommend a strategy label from the risk/reward ratio."""
    if ratio >= 3:
        return "aggressive - favorable ratio"
    if ratio >= 2:
        return "balanced"
    if ratio >= 1.5:
        return "conservative"
    return "avoid - unfavorable ratio"


def classify_risk(volatility: float) -> str:
    """Qualitative risk level from volatility."""
    if volatility < LOW_VOLATILITY:
        return "low"
    if volatility < HIGH_VOLATILITY:
        return "medium"
    return "high"


def calculate_confidence(
    result: ScoreResult,
    indicators: IndicatorSet,
    thresholds: Optional[ScoringThresholds] = None,
) -> float:
    """Estimate how well the signals agree, in percent.

    40% weight on the share of indicators that fired, 35% on the
    normalised score, a 15-point bonus when RSI and MACD point the same
    way and a 10-point bonus for a volume surge. Clamped to [5, 95].
    """
    thresholds = thresholds or ScoringThresholds()

    fired = {family_of(s.name) for s in result.signals}
    fraction = len(fired) / result.checked if result.checked else 0.0

    confidence = 40 * fraction + 35 * (result.score / 100)

    macd = indicators.macd.signal
    if (indicators.rsi > 50 and macd == "bullish") or (indicators.rsi < 50 and macd == "bearish"):
        confidence += 15

    if indicators.volume.increase > thresholds.volume_increase_pct:
        confidence += 10

    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


def sanitize_targets(price: float, targets: list[float]) -> list[float]:
    """Make targets strictly increasing, starting above *price*.

    A target not above its predecessor (the price for the first one)
    becomes ``predecessor * 1.05``. A non-positive price gives all zeros.
    """
    clean: list[float] = []
    floor = price
    for target in targets:
        if target <= floor or floor <= 0:
            target = floor * 1.05
        clean.append(target)
        floor = target
    return clean


def calculate_targets(
    price: float,
    levels: LevelSet,
    percents: tuple[float, float, float] = (5.0, 10.0, 15.0),
) -> TargetSet:
    """Calculate the immediate, percentage and long-term price targets."""
    target1, target2, target3 = (price * (1 + p / 100) for p in percents)
    immediate = min(levels.resistance1, price * 1.03)
    long_term = max(
        price * 1.35,
        target3 * 1.20,
        levels.resistance2,
        levels.fibonacci.extension1618,
    )

    values = sanitize_targets(price, [immediate, target1, target2, target3, long_term])
    return TargetSet(
        immediate=values[0],
        target1=values[1],
        target2=values[2],
        target3=values[3],
        long_term=values[4],
    )


class TradePlanner:
    """Builds targets and the entry/exit plan for a scored asset."""

    def __init__(
        self,
        settings: Optional[PlannerSettings] = None,
        thresholds: Optional[ScoringThresholds] = None,
    ):
        self.settings = settings or PlannerSettings()
        self.thresholds = thresholds or ScoringThresholds()

    def targets(self, snapshot: TickerSnapshot, levels: LevelSet) -> TargetSet:
        return calculate_targets(snapshot.price, levels, self.settings.target_percents)

    def plan(
        self,
        snapshot: TickerSnapshot,
        indicators: IndicatorSet,
        levels: LevelSet,
        result: ScoreResult,
    ) -> EntryExitPlan:
        """Assemble entry, stops, take-profits, ratio and confidence."""
        entry = select_entry_point(
            snapshot.price,
            indicators.rsi,
            self.thresholds.rsi_breakout,
            self.thresholds.rsi_overbought,
        )

        volatility = calculate_volatility(snapshot)
        tiers = calculate_stop_loss_tiers(entry, levels, self.settings.stop_loss_caps)
        tier = select_stop_tier(volatility)
        stop_loss = getattr(tiers, tier)

        take_profit = calculate_take_profits(entry, self.settings.take_profit_percents)
        ratio = calculate_risk_reward(entry, stop_loss, take_profit.tp2)
        risk_level = classify_risk(volatility)

        return EntryExitPlan(
            entry_point=entry,
            stop_loss=stop_loss,
            stop_loss_tier=tier,
            stop_loss_tiers=tiers,
            take_profit=take_profit,
            risk_reward_ratio=ratio,
            meets_target=ratio >= self.settings.risk_reward_target,
            strategy=classify_strategy(ratio),
            risk_level=risk_level,
            position_size_advice=POSITION_ADVICE[risk_level],
            volatility=volatility,
            confidence=calculate_confidence(result, indicators, self.thresholds),
        )
