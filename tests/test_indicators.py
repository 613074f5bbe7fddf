"""Property-based tests for technical indicators.

Moving averages and RSI are cross-checked against pandas rolling/ewm
reference calculations.
"""

import math

import pandas as pd
from hypothesis import given, settings
from hypothesis import strategies as st

from coinscout.indicators import (
    calculate_ema,
    calculate_liquidity,
    calculate_macd,
    calculate_recent_resistance,
    calculate_rsi,
    calculate_simplified_adx,
    calculate_sma,
    calculate_trend_strength,
    calculate_volatility,
    calculate_volume_change,
)
from coinscout.models import Candle, TickerSnapshot


HOUR_MS = 3_600_000


def make_candles(closes: list[float], volumes: list[float] | None = None) -> list[Candle]:
    """Build hourly candles with a 0.1% band around each close."""
    volumes = volumes or [1000.0] * len(closes)
    return [
        Candle(
            timestamp=i * HOUR_MS,
            open=close,
            high=close * 1.001,
            low=close * 0.999,
            close=close,
            volume=volume,
        )
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


# Strategy for generating realistic price series
@st.composite
def price_series(draw, min_length: int = 50, max_length: int = 200):
    """Generate a realistic price series with positive values and varied movements."""
    length = draw(st.integers(min_value=min_length, max_value=max_length))

    base_price = draw(st.floats(min_value=0.5, max_value=50000.0))

    changes = draw(st.lists(
        st.sampled_from([-0.05, -0.04, -0.03, -0.02, -0.01, -0.005,
                         0.005, 0.01, 0.02, 0.03, 0.04, 0.05]),
        min_size=length - 1,
        max_size=length - 1
    ))

    prices = [base_price]
    for change in changes:
        prices.append(max(0.01, prices[-1] * (1 + change)))

    return prices


def is_close(a: float, b: float, rel_tolerance: float = 1e-9, abs_tolerance: float = 1e-9) -> bool:
    """Check if two values are close within tolerance."""
    if math.isnan(a) and math.isnan(b):
        return True
    return math.isclose(a, b, rel_tol=rel_tolerance, abs_tol=abs_tolerance)


class TestEMARecurrence:
    """
    **Feature: coinscout, Property 1: EMA Recurrence**

    *For any* price series, EMA[period-1] is the mean of the first *period*
    prices and every later value follows price*k + previous*(1-k).
    """

    @given(prices=price_series(min_length=30, max_length=120), period=st.integers(min_value=2, max_value=26))
    @settings(max_examples=100, deadline=None)
    def test_seed_and_recurrence(self, prices: list[float], period: int):
        ema = calculate_ema(prices, period)
        k = 2 / (period + 1)

        assert len(ema) == len(prices)
        assert all(math.isnan(v) for v in ema[:period - 1])
        assert is_close(ema[period - 1], sum(prices[:period]) / period)

        for i in range(period, len(prices)):
            assert is_close(ema[i], prices[i] * k + ema[i - 1] * (1 - k))

    @given(prices=price_series(min_length=30, max_length=120), period=st.integers(min_value=2, max_value=26))
    @settings(max_examples=50, deadline=None)
    def test_matches_pandas_ewm(self, prices: list[float], period: int):
        """EMA should match pandas ewm(adjust=False) seeded with the SMA."""
        ema = calculate_ema(prices, period)

        seeded = pd.Series([sum(prices[:period]) / period] + prices[period:])
        reference = seeded.ewm(span=period, adjust=False).mean().tolist()

        for ours, ref in zip(ema[period - 1:], reference):
            assert is_close(ours, ref, rel_tolerance=1e-7)

    def test_short_series_is_all_nan(self):
        assert all(math.isnan(v) for v in calculate_ema([1.0, 2.0, 3.0], 5))


class TestRSIBounds:
    """
    **Feature: coinscout, Property 2: RSI Range and Degenerate Cases**

    *For any* valid candle sequence, RSI lies in [0, 100]; it is 100 when
    no close ever fell and neutral when history is too short.
    """

    @given(prices=price_series(min_length=15, max_length=150))
    @settings(max_examples=100, deadline=None)
    def test_rsi_in_range(self, prices: list[float]):
        rsi = calculate_rsi(make_candles(prices), 14)
        assert 0.0 <= rsi <= 100.0

    @given(prices=price_series(min_length=30, max_length=150))
    @settings(max_examples=50, deadline=None)
    def test_rsi_matches_pandas_wilder(self, prices: list[float]):
        """Wilder smoothing is an ewm with alpha=1/period seeded by the mean."""
        period = 14
        changes = pd.Series(prices).diff().dropna().tolist()
        gains = [max(c, 0.0) for c in changes]
        losses = [max(-c, 0.0) for c in changes]

        avg_gain = pd.Series([sum(gains[:period]) / period] + gains[period:]).ewm(
            alpha=1 / period, adjust=False
        ).mean().iloc[-1]
        avg_loss = pd.Series([sum(losses[:period]) / period] + losses[period:]).ewm(
            alpha=1 / period, adjust=False
        ).mean().iloc[-1]

        ours = calculate_rsi(make_candles(prices), period)
        if avg_loss == 0:
            assert ours == 100.0
        else:
            expected = 100 - 100 / (1 + avg_gain / avg_loss)
            assert is_close(ours, expected, rel_tolerance=1e-6, abs_tolerance=1e-6)

    def test_rising_series_is_overbought(self):
        candles = make_candles([100 + i for i in range(30)])
        assert calculate_rsi(candles) > 70

    def test_no_losses_gives_100(self):
        candles = make_candles([100, 101, 101, 102, 103, 103, 104, 105, 106, 106, 107, 108, 109, 110, 111, 112])
        assert calculate_rsi(candles, 14) == 100.0

    def test_falling_series_is_oversold(self):
        candles = make_candles([200 - i for i in range(30)])
        assert calculate_rsi(candles) < 30

    def test_insufficient_history_is_neutral(self):
        assert calculate_rsi(make_candles([100.0] * 14), 14) == 50.0
        assert calculate_rsi([], 14) == 50.0


class TestMACDConsistency:
    """
    **Feature: coinscout, Property 3: MACD Histogram and Label**

    *For any* price series long enough for MACD, the histogram equals the
    MACD line minus the signal line, and the label follows the histogram
    sign unless a crossover fired on the latest bar.
    """

    @given(prices=price_series(min_length=35, max_length=200))
    @settings(max_examples=100, deadline=None)
    def test_histogram_and_label(self, prices: list[float]):
        macd = calculate_macd(make_candles(prices))

        assert is_close(macd.histogram, macd.value - macd.signal_line)

        if macd.histogram > 0:
            assert macd.signal == "bullish"
        elif macd.histogram < 0:
            assert macd.signal == "bearish"

    @given(prices=price_series(min_length=35, max_length=200))
    @settings(max_examples=50, deadline=None)
    def test_macd_line_is_ema_difference(self, prices: list[float]):
        macd = calculate_macd(make_candles(prices))
        fast = calculate_ema(prices, 12)[-1]
        slow = calculate_ema(prices, 26)[-1]
        assert is_close(macd.value, fast - slow, rel_tolerance=1e-9, abs_tolerance=1e-9)

    def test_geometric_rise_is_bullish(self):
        prices = [100 * 1.5 ** (i / 99) for i in range(100)]
        macd = calculate_macd(make_candles(prices))
        assert macd.signal == "bullish"
        assert macd.histogram > 0
        assert macd.value > 0

    def test_insufficient_history_is_neutral(self):
        macd = calculate_macd(make_candles([100.0 + i for i in range(34)]))
        assert macd.signal == "neutral"
        assert macd.value == 0.0
        assert macd.histogram == 0.0
        assert macd.crossover is False


class TestSMA:
    """Simple moving average and its fallbacks."""

    @given(prices=price_series(min_length=20, max_length=100), period=st.integers(min_value=1, max_value=20))
    @settings(max_examples=50, deadline=None)
    def test_matches_pandas_rolling(self, prices: list[float], period: int):
        expected = pd.Series(prices).rolling(period).mean().iloc[-1]
        assert is_close(calculate_sma(make_candles(prices), period), expected, rel_tolerance=1e-9)

    def test_short_history_returns_last_close(self):
        assert calculate_sma(make_candles([10.0, 11.0, 12.0]), 20) == 12.0

    def test_empty_returns_zero(self):
        assert calculate_sma([], 20) == 0.0


class TestTrendStrength:
    """Up/down move counting with the volume boost."""

    def test_steady_rise_is_full_strength(self):
        trend = calculate_trend_strength(make_candles([100 * 1.01 ** i for i in range(20)]))
        assert trend.direction == "up"
        assert trend.strength == 100.0

    def test_steady_fall_is_down(self):
        trend = calculate_trend_strength(make_candles([100 * 0.99 ** i for i in range(20)]))
        assert trend.direction == "down"
        assert trend.strength == 100.0

    def test_tie_is_neutral(self):
        closes = [100.0 if i % 2 == 0 else 102.0 for i in range(21)]
        trend = calculate_trend_strength(make_candles(closes), window=21)
        assert trend.direction == "neutral"
        assert trend.strength == 50.0

    def test_flat_is_zero(self):
        trend = calculate_trend_strength(make_candles([100.0] * 30))
        assert trend.direction == "neutral"
        assert trend.strength == 0.0

    def test_short_history_is_zero(self):
        assert calculate_trend_strength(make_candles([1.0, 2.0, 3.0])).strength == 0.0

    def test_volume_boost(self):
        closes = [100.0]
        for i in range(19):
            closes.append(closes[-1] * (1.01 if i % 3 else 0.99))

        flat = calculate_trend_strength(make_candles(closes, [1000.0] * 20))
        boosted = calculate_trend_strength(make_candles(closes, [1000.0] * 15 + [5000.0] * 5))

        assert flat.direction == boosted.direction == "up"
        assert math.isclose(boosted.strength, min(flat.strength * 1.2, 100.0))


class TestVolumeChange:
    """Recent window volume against the preceding window."""

    def test_increase(self):
        change = calculate_volume_change(make_candles([1.0] * 8, [100.0] * 4 + [150.0] * 4))
        assert math.isclose(change.increase, 50.0)
        assert change.trend == "increasing"
        assert change.current == 600.0
        assert change.previous == 400.0

    def test_decrease(self):
        change = calculate_volume_change(make_candles([1.0] * 8, [200.0] * 4 + [100.0] * 4))
        assert math.isclose(change.increase, -50.0)
        assert change.trend == "decreasing"

    def test_zero_previous_volume(self):
        change = calculate_volume_change(make_candles([1.0] * 8, [0.0] * 4 + [100.0] * 4))
        assert change.increase == 0.0
        assert change.trend == "flat"

    def test_short_history(self):
        change = calculate_volume_change(make_candles([1.0] * 7))
        assert change.increase == 0.0
        assert change.trend == "flat"


class TestSimplifiedADX:
    """Single-window directional movement index."""

    def test_insufficient_history_default(self):
        assert calculate_simplified_adx(make_candles([1.0] * 10), 14) == 25.0

    def test_one_sided_rise_is_100(self):
        assert math.isclose(
            calculate_simplified_adx(make_candles([100 * 1.01 ** i for i in range(30)])), 100.0
        )

    def test_no_range_is_zero(self):
        candles = [
            Candle(timestamp=i, open=10.0, high=10.0, low=10.0, close=10.0, volume=1.0)
            for i in range(20)
        ]
        assert calculate_simplified_adx(candles) == 0.0

    @given(prices=price_series(min_length=15, max_length=100))
    @settings(max_examples=50, deadline=None)
    def test_in_range(self, prices: list[float]):
        assert 0.0 <= calculate_simplified_adx(make_candles(prices)) <= 100.0


class TestLiquidityAndResistance:
    """Price/volume correlation index and the top-highs resistance."""

    def test_rising_price_on_rising_volume(self):
        candles = make_candles([100.0 + i for i in range(10)], [1000.0 + 100 * i for i in range(10)])
        assert calculate_liquidity(candles) == 1.0

    def test_falling_price_on_rising_volume(self):
        candles = make_candles([100.0 - i for i in range(10)], [1000.0 + 100 * i for i in range(10)])
        assert calculate_liquidity(candles) == -1.0

    def test_flat_volume_is_zero(self):
        assert calculate_liquidity(make_candles([100.0 + i for i in range(10)])) == 0.0

    def test_short_history_is_zero(self):
        assert calculate_liquidity(make_candles([1.0, 2.0])) == 0.0

    def test_resistance_is_mean_of_top_highs(self):
        candles = [
            Candle(timestamp=i, open=h, high=float(h), low=h - 0.5, close=h, volume=1.0)
            for i, h in enumerate(range(1, 11))
        ]
        assert calculate_recent_resistance(candles) == 8.0

    def test_resistance_empty(self):
        assert calculate_recent_resistance([]) == 0.0


class TestVolatility:
    """Snapshot volatility blend."""

    def test_change_plus_half_range(self):
        snapshot = TickerSnapshot(symbol="ETH-USDT", price=100, change24h=-4, high24h=110, low24h=90)
        assert math.isclose(calculate_volatility(snapshot), 14.0)

    def test_zero_price_uses_change_only(self):
        snapshot = TickerSnapshot(symbol="ETH-USDT", price=0, change24h=3, high24h=110, low24h=90)
        assert calculate_volatility(snapshot) == 3.0
