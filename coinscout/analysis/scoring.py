"""Composite opportunity scoring.

The engine walks a fixed list of signal checks, adds the configured points
of every check that fires and clamps the total to [0, 100].
"""

import logging
from typing import Callable, Optional

from coinscout.config import ScoringThresholds, ScoringWeights
from coinscout.models.candle import TickerSnapshot
from coinscout.models.indicators import IndicatorSet
from coinscout.models.record import ScoreResult, Signal

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0
MIN_SCORE = 0.0

# Returns a description when the signal fires, None otherwise
SignalCheck = Callable[[TickerSnapshot, IndicatorSet], Optional[str]]


def family_of(signal_name: str) -> str:
    """Indicator a signal belongs to (``rsi`` for ``rsi_breakout``)."""
    return signal_name.split("_", 1)[0]


class ScoringEngine:
    """Scores one asset from its snapshot and indicator readings."""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        thresholds: Optional[ScoringThresholds] = None,
    ):
        self.weights = weights or ScoringWeights()
        self.thresholds = thresholds or ScoringThresholds()
        self._checks: list[tuple[str, SignalCheck]] = [
            ("rsi_breakout", self._rsi_breakout),
            ("rsi_overbought", self._rsi_overbought),
            ("macd_signal", self._macd_signal),
            ("sma_breakout", self._sma_breakout),
            ("resistance_break", self._resistance_break),
            ("liquidity_cross", self._liquidity_cross),
            ("volume_increase", self._volume_increase),
            ("trend_strength", self._trend_strength),
        ]

    @property
    def signal_names(self) -> list[str]:
        return [name for name, _ in self._checks]

    @property
    def indicator_families(self) -> list[str]:
        """Distinct indicators behind the signals (both RSI checks count once)."""
        return list(dict.fromkeys(family_of(name) for name, _ in self._checks))

    def score(self, snapshot: TickerSnapshot, indicators: IndicatorSet) -> ScoreResult:
        """Compute the clamped composite score and the list of fired signals."""
        total = 0.0
        signals: list[Signal] = []

        for name, check in self._checks:
            description = check(snapshot, indicators)
            if description is None:
                continue
            points = getattr(self.weights, name)
            total += points
            signals.append(Signal(name=name, points=points, description=description))

        clamped = max(MIN_SCORE, min(MAX_SCORE, total))
        if clamped != total:
            logger.debug("%s: raw score %.1f clamped to %.1f", snapshot.symbol, total, clamped)

        return ScoreResult(
            score=clamped,
            signals=tuple(signals),
            checked=len(self.indicator_families),
        )

    # RSI/MACD checks

    def _rsi_breakout(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        t = self.thresholds
        if t.rsi_breakout < ind.rsi < t.rsi_overbought:
            return f"RSI {ind.rsi:.1f} in bullish breakout zone"
        return None

    def _rsi_overbought(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.rsi >= self.thresholds.rsi_overbought:
            return f"RSI {ind.rsi:.1f} shows strong but overbought momentum"
        return None

    def _macd_signal(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.macd.signal == "bullish" or ind.macd.histogram > 0:
            if ind.macd.crossover:
                return "MACD bullish crossover"
            return "MACD bullish"
        return None

    # Price location checks

    def _sma_breakout(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.sma > 0 and snapshot.price > ind.sma:
            return "Price above moving average"
        return None

    def _resistance_break(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.resistance <= 0 or snapshot.price <= 0:
            return None
        proximity = 1 - self.thresholds.resistance_proximity_pct / 100
        if snapshot.price >= ind.resistance * proximity:
            return "Price approaching resistance"
        return None

    # Volume and trend checks

    def _liquidity_cross(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.liquidity > 0:
            return "Rising price on rising volume"
        return None

    def _volume_increase(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.volume.increase > self.thresholds.volume_increase_pct:
            return f"Volume up {ind.volume.increase:.1f}%"
        return None

    def _trend_strength(self, snapshot: TickerSnapshot, ind: IndicatorSet) -> Optional[str]:
        if ind.trend.strength > self.thresholds.trend_strength_min:
            return f"Strong {ind.trend.direction} trend ({ind.trend.strength:.0f}%)"
        return None
