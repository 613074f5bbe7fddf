"""Tests for the target and risk planner.

**Feature: coinscout**
"""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from coinscout.analysis.levels import calculate_levels
from coinscout.analysis.planner import (
    TradePlanner,
    calculate_confidence,
    calculate_risk_reward,
    calculate_stop_loss_tiers,
    calculate_take_profits,
    calculate_targets,
    classify_risk,
    classify_strategy,
    sanitize_targets,
    select_entry_point,
    select_stop_tier,
)
from coinscout.config import PlannerSettings
from coinscout.models import (
    FibonacciLevels,
    IndicatorSet,
    LevelSet,
    MACDResult,
    ScoreResult,
    Signal,
    TickerSnapshot,
    VolumeChange,
)


LEVELS = LevelSet(
    pivot=100.0,
    support1=97.0,
    support2=90.0,
    support3=80.0,
    resistance1=102.0,
    resistance2=110.0,
    resistance3=120.0,
    fibonacci=FibonacciLevels(extension1618=130.0),
)


def signals(*names: str) -> tuple[Signal, ...]:
    return tuple(Signal(name=name, points=10) for name in names)


class TestEntryAndStops:
    """RSI-conditioned entry and tiered stop-loss."""

    @pytest.mark.parametrize("rsi,expected", [
        (40.0, 99.8),
        (49.9, 99.8),
        (50.0, 99.5),
        (70.0, 99.5),
        (80.0, 98.5),
    ])
    def test_entry_point(self, rsi: float, expected: float):
        assert math.isclose(select_entry_point(100.0, rsi), expected)

    def test_stop_tiers_use_closer_support(self):
        tiers = calculate_stop_loss_tiers(99.5, LEVELS)
        assert tiers.conservative == 97.0
        assert tiers.moderate == 90.0
        assert math.isclose(tiers.aggressive, 99.5 * 0.85)

    def test_stop_at_or_above_entry_falls_back_to_cap(self):
        levels = LEVELS.model_copy(update={"support1": 100.0})
        tiers = calculate_stop_loss_tiers(99.5, levels)
        assert math.isclose(tiers.conservative, 99.5 * 0.92)

    @pytest.mark.parametrize("volatility,tier,risk", [
        (0.0, "conservative", "low"),
        (4.9, "conservative", "low"),
        (5.0, "moderate", "medium"),
        (9.9, "moderate", "medium"),
        (10.0, "aggressive", "high"),
        (42.0, "aggressive", "high"),
    ])
    def test_volatility_gates(self, volatility: float, tier: str, risk: str):
        assert select_stop_tier(volatility) == tier
        assert classify_risk(volatility) == risk


class TestRiskReward:
    """Take-profit ladder, ratio and strategy label."""

    def test_take_profit_ladder(self):
        ladder = calculate_take_profits(200.0)
        assert [ladder.tp1, ladder.tp2, ladder.tp3, ladder.tp4] == pytest.approx([210.0, 220.0, 230.0, 250.0])

    def test_ratio(self):
        assert math.isclose(calculate_risk_reward(100.0, 95.0, 110.0), 2.0)

    def test_ratio_guard(self):
        assert calculate_risk_reward(100.0, 100.0, 110.0) == 0.0
        assert calculate_risk_reward(100.0, 105.0, 110.0) == 0.0
        assert calculate_risk_reward(0.0, 0.0, 0.0) == 0.0

    @pytest.mark.parametrize("ratio,label", [
        (3.0, "aggressive - favorable ratio"),
        (2.5, "balanced"),
        (2.0, "balanced"),
        (1.5, "conservative"),
        (1.49, "avoid - unfavorable ratio"),
        (0.0, "avoid - unfavorable ratio"),
    ])
    def test_strategy_labels(self, ratio: float, label: str):
        assert classify_strategy(ratio) == label


class TestConfidence:
    """
    **Feature: coinscout, Property 6: Confidence Range**

    *For any* score result and indicator readings, confidence stays in
    [5, 95].
    """

    @given(
        score=st.floats(min_value=0, max_value=100),
        fired=st.lists(st.sampled_from([
            "rsi_breakout", "rsi_overbought", "macd_signal", "sma_breakout",
            "resistance_break", "liquidity_cross", "volume_increase", "trend_strength",
        ]), unique=True),
        rsi=st.floats(min_value=0, max_value=100),
        macd=st.sampled_from(["bullish", "bearish", "neutral"]),
        volume=st.floats(min_value=-100, max_value=300),
    )
    @settings(max_examples=200, deadline=None)
    def test_confidence_in_range(self, score, fired, rsi, macd, volume):
        result = ScoreResult(score=score, signals=signals(*fired), checked=7)
        indicators = IndicatorSet(
            rsi=rsi,
            macd=MACDResult(signal=macd),
            volume=VolumeChange(increase=volume),
        )
        assert 5.0 <= calculate_confidence(result, indicators) <= 95.0

    def test_weighted_sum(self):
        result = ScoreResult(score=70, signals=signals("rsi_breakout", "macd_signal", "sma_breakout"), checked=7)
        indicators = IndicatorSet(rsi=60.0, macd=MACDResult(signal="bullish"))
        expected = 40 * 3 / 7 + 35 * 0.7 + 15
        assert math.isclose(calculate_confidence(result, indicators), expected)

    def test_both_rsi_signals_count_once(self):
        one = ScoreResult(score=0, signals=signals("rsi_breakout"), checked=7)
        both = ScoreResult(score=0, signals=signals("rsi_breakout", "rsi_overbought"), checked=7)
        indicators = IndicatorSet()
        assert calculate_confidence(one, indicators) == calculate_confidence(both, indicators)

    def test_clamped(self):
        assert calculate_confidence(ScoreResult(), IndicatorSet()) == 5.0

        everything = ScoreResult(
            score=100,
            signals=signals("rsi_breakout", "macd_signal", "sma_breakout", "resistance_break",
                            "liquidity_cross", "volume_increase", "trend_strength"),
            checked=7,
        )
        indicators = IndicatorSet(
            rsi=65.0,
            macd=MACDResult(signal="bullish"),
            volume=VolumeChange(increase=50.0),
        )
        assert calculate_confidence(everything, indicators) == 95.0

    def test_bearish_agreement(self):
        result = ScoreResult(score=0, checked=7)
        agree = IndicatorSet(rsi=30.0, macd=MACDResult(signal="bearish"))
        disagree = IndicatorSet(rsi=30.0, macd=MACDResult(signal="bullish"))
        assert calculate_confidence(result, agree) == 15.0
        assert calculate_confidence(result, disagree) == 5.0


class TestTargets:
    """
    **Feature: coinscout, Property 7: Target Ordering**

    *For any* positive price, targets are strictly increasing above it.
    """

    def test_targets(self):
        targets = calculate_targets(100.0, LEVELS)
        assert targets.immediate == 102.0
        assert targets.as_list()[1:4] == pytest.approx([105.0, 110.0, 115.0])
        assert math.isclose(targets.long_term, 138.0)

    def test_long_term_uses_fibonacci_extension(self):
        levels = LEVELS.model_copy(update={"fibonacci": FibonacciLevels(extension1618=500.0)})
        assert calculate_targets(100.0, levels).long_term == 500.0

    def test_sanitize_targets(self):
        assert sanitize_targets(100.0, [100.0, 99.0, 120.0]) == pytest.approx([105.0, 110.25, 120.0])

    def test_zero_price(self):
        targets = calculate_targets(0.0, LevelSet())
        assert targets.as_list() == [0.0] * 5

    def test_zero_price_ignores_absolute_levels(self):
        assert calculate_targets(0.0, LEVELS).as_list() == [0.0] * 5
        assert sanitize_targets(0.0, [0.0, 10.0, 20.0]) == [0.0, 0.0, 0.0]

    @given(
        price=st.floats(min_value=1e-4, max_value=1e6),
        high_pct=st.floats(min_value=0, max_value=50),
        low_pct=st.floats(min_value=0, max_value=50),
    )
    @settings(max_examples=200, deadline=None)
    def test_strictly_increasing(self, price: float, high_pct: float, low_pct: float):
        snapshot = TickerSnapshot(
            symbol="BTC-USDT",
            price=price,
            high24h=price * (1 + high_pct / 100),
            low24h=price * (1 - low_pct / 100),
        )
        values = calculate_targets(price, calculate_levels(snapshot)).as_list()

        assert values[0] > price
        assert all(b > a for a, b in zip(values, values[1:]))


class TestTradePlanner:
    """Full entry/exit plans."""

    def test_low_volatility_plan(self):
        snapshot = TickerSnapshot(symbol="BTC-USDT", price=100, change24h=2, high24h=103, low24h=98)
        indicators = IndicatorSet(rsi=60.0, macd=MACDResult(signal="bullish"))
        result = ScoreResult(score=70, signals=signals("rsi_breakout", "macd_signal", "sma_breakout"), checked=7)

        plan = TradePlanner().plan(snapshot, indicators, LEVELS, result)

        assert math.isclose(plan.volatility, 4.5)
        assert plan.stop_loss_tier == "conservative"
        assert math.isclose(plan.entry_point, 99.5)
        assert plan.stop_loss == 97.0
        assert math.isclose(plan.take_profit.tp2, 109.45)
        assert math.isclose(plan.risk_reward_ratio, 3.98)
        assert plan.strategy == "aggressive - favorable ratio"
        assert plan.meets_target is True
        assert plan.risk_level == "low"
        assert "5%" in plan.position_size_advice

    def test_high_volatility_uses_aggressive_stop(self):
        snapshot = TickerSnapshot(symbol="PEPE-USDT", price=100, change24h=8, high24h=110, low24h=102)
        plan = TradePlanner().plan(snapshot, IndicatorSet(), LEVELS, ScoreResult(checked=7))

        assert math.isclose(plan.volatility, 12.0)
        assert plan.stop_loss_tier == "aggressive"
        assert plan.risk_level == "high"
        assert plan.stop_loss == plan.stop_loss_tiers.aggressive

    def test_custom_risk_reward_target(self):
        snapshot = TickerSnapshot(symbol="BTC-USDT", price=100, change24h=2, high24h=103, low24h=98)
        planner = TradePlanner(PlannerSettings(risk_reward_target=5))
        plan = planner.plan(snapshot, IndicatorSet(rsi=60.0), LEVELS, ScoreResult(checked=7))
        assert plan.meets_target is False

    def test_zero_price_plan(self):
        plan = TradePlanner().plan(TickerSnapshot(price=0), IndicatorSet(), LevelSet(), ScoreResult())
        assert plan.entry_point == 0.0
        assert plan.stop_loss == 0.0
        assert plan.risk_reward_ratio == 0.0
        assert plan.strategy == "avoid - unfavorable ratio"
        assert plan.confidence == 5.0
