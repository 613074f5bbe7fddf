"""Technical indicator calculations for opportunity scoring.

This module provides pure functions over candle sequences ordered
oldest-first. None of them raise on short or degenerate input: each
documents the neutral value it returns instead, so a single thin
instrument cannot abort a batch.
"""

from coinscout.models.candle import Candle, TickerSnapshot
from coinscout.models.indicators import MACDResult, TrendStrength, VolumeChange


NEUTRAL_RSI = 50.0
DEFAULT_ADX = 25.0

# Moves smaller than this percentage are treated as noise by trend strength
TREND_NOISE_PCT = 0.1
TREND_VOLUME_BOOST = 1.2


def calculate_ema(prices: list[float], period: int) -> list[float]:
    """Calculate Exponential Moving Average.

    The seed value is the simple average of the first *period* prices,
    placed at index ``period - 1``. Later values follow
    ``ema[i] = price[i] * k + ema[i - 1] * (1 - k)`` with ``k = 2 / (period + 1)``.

    Args:
        prices: List of price values
        period: Number of periods for the EMA

    Returns:
        List of EMA values, same length as *prices*. Entries before
        ``period - 1`` are NaN; all entries are NaN when there are fewer
        than *period* prices.
    """
    if len(prices) < period or period < 1:
        return [float('nan')] * len(prices)

    multiplier = 2 / (period + 1)
    result = [float('nan')] * len(prices)
    result[period - 1] = sum(prices[:period]) / period

    for i in range(period, len(prices)):
        result[i] = prices[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result


def calculate_rsi(candles: list[Candle], period: int = 14) -> float:
    """Calculate Wilder's Relative Strength Index of the latest candle.

    Average gain/loss are seeded with the mean of the first *period*
    close-to-close changes and then smoothed through the remaining ones:
    ``avg = (avg * (period - 1) + current) / period``.

    Args:
        candles: Candles ordered oldest-first
        period: RSI period (default 14)

    Returns:
        RSI in [0, 100]. 50.0 when fewer than ``period + 1`` candles are
        available, 100.0 when the average loss is zero.
    """
    if period < 1 or len(candles) < period + 1:
        return NEUTRAL_RSI

    changes = [candles[i].close - candles[i - 1].close for i in range(1, len(candles))]
    gains = [c if c > 0 else 0.0 for c in changes]
    losses = [-c if c < 0 else 0.0 for c in changes]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def calculate_macd(
    candles: list[Candle],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9
) -> MACDResult:
    """Calculate MACD (Moving Average Convergence Divergence) of the latest candle.

    The MACD line is ``EMA(fast) - EMA(slow)`` over the tail where both
    EMAs exist; the signal line is the EMA of that line.

    Classification: a crossover on the latest bar (the MACD/signal
    difference changed sign against the prior bar) wins; otherwise the
    histogram sign decides, and a flat histogram falls back to the sign
    of the MACD line.

    Args:
        candles: Candles ordered oldest-first
        fast: Fast EMA period (default 12)
        slow: Slow EMA period (default 26)
        signal: Signal line period (default 9)

    Returns:
        MACDResult. Neutral zeros when fewer than ``slow + signal``
        candles are available.
    """
    if len(candles) < slow + signal or fast < 1 or signal < 1:
        return MACDResult()

    closes = [c.close for c in candles]
    fast_ema = calculate_ema(closes, fast)
    slow_ema = calculate_ema(closes, slow)

    macd_line = [fast_ema[i] - slow_ema[i] for i in range(slow - 1, len(closes))]
    signal_line = calculate_ema(macd_line, signal)

    current_macd = macd_line[-1]
    current_signal = signal_line[-1]
    histogram = current_macd - current_signal
    prev_diff = macd_line[-2] - signal_line[-2]

    crossover = False
    if histogram > 0 and prev_diff <= 0:
        label, crossover = "bullish", True
    elif histogram < 0 and prev_diff >= 0:
        label, crossover = "bearish", True
    elif histogram > 0:
        label = "bullish"
    elif histogram < 0:
        label = "bearish"
    elif current_macd > 0:
        label = "bullish"
    elif current_macd < 0:
        label = "bearish"
    else:
        label = "neutral"

    return MACDResult(
        value=current_macd,
        signal=label,
        histogram=histogram,
        signal_line=current_signal,
        crossover=crossover,
    )


def calculate_sma(candles: list[Candle], period: int = 20) -> float:
    """Calculate the Simple Moving Average of the last *period* closes.

    Returns:
        The mean close, the last close when fewer than *period* candles
        exist, or 0.0 for an empty sequence.
    """
    if not candles:
        return 0.0
    if period < 1 or len(candles) < period:
        return candles[-1].close

    recent = candles[-period:]
    return sum(c.close for c in recent) / period


def calculate_trend_strength(
    candles: list[Candle],
    window: int = 20,
    volume_window: int = 5,
) -> TrendStrength:
    """Measure how one-sided the recent close-to-close moves are.

    Over the last *window* candles, moves larger than 0.1% are counted as
    up or down. Strength is the dominant side's share of all counted moves
    (0-100), boosted by 20% when the trailing *volume_window* average
    volume exceeds the window average, and capped at 100.

    Args:
        candles: Candles ordered oldest-first
        window: Number of candles to inspect (default 20)
        volume_window: Trailing candles for the volume boost (default 5)

    Returns:
        TrendStrength. Neutral with strength 0 when fewer than *window*
        candles exist or no move clears the noise threshold.
    """
    if len(candles) < window:
        return TrendStrength()

    recent = candles[-window:]
    up_moves = 0
    down_moves = 0

    for i in range(1, len(recent)):
        prev_close = recent[i - 1].close
        if prev_close <= 0:
            continue
        change = recent[i].close - prev_close
        if abs(change / prev_close) * 100 > TREND_NOISE_PCT:
            if change > 0:
                up_moves += 1
            else:
                down_moves += 1

    total_moves = up_moves + down_moves
    if total_moves == 0:
        return TrendStrength()

    if up_moves > down_moves:
        direction = "up"
    elif down_moves > up_moves:
        direction = "down"
    else:
        direction = "neutral"

    strength = max(up_moves, down_moves) / total_moves * 100

    avg_volume = sum(c.volume for c in recent) / len(recent)
    tail = recent[-volume_window:]
    recent_volume = sum(c.volume for c in tail) / len(tail)
    if recent_volume > avg_volume:
        strength *= TREND_VOLUME_BOOST

    return TrendStrength(direction=direction, strength=min(strength, 100.0))


def calculate_volume_change(candles: list[Candle], window: int = 4) -> VolumeChange:
    """Compare the volume of the last *window* candles with the window before.

    Returns:
        VolumeChange with the percent increase. The increase is 0% when
        fewer than ``2 * window`` candles exist or the earlier window
        traded nothing.
    """
    if window < 1 or len(candles) < 2 * window:
        return VolumeChange()

    current = sum(c.volume for c in candles[-window:])
    previous = sum(c.volume for c in candles[-2 * window:-window])

    increase = (current - previous) / previous * 100 if previous > 0 else 0.0

    if increase > 0:
        trend = "increasing"
    elif increase < 0:
        trend = "decreasing"
    else:
        trend = "flat"

    return VolumeChange(increase=increase, trend=trend, current=current, previous=previous)


def calculate_simplified_adx(candles: list[Candle], period: int = 14) -> float:
    """Calculate a single-window Directional Movement Index.

    +DM/-DM and true range are summed over the trailing *period* bars
    (no Wilder smoothing), giving ``+DI``/``-DI`` and
    ``DX = |+DI - -DI| / (+DI + -DI) * 100``.

    Returns:
        DX in [0, 100]; 25.0 when fewer than ``period + 1`` candles exist;
        0.0 when the window has no range or no directional movement.
    """
    if period < 1 or len(candles) < period + 1:
        return DEFAULT_ADX

    plus_dm = 0.0
    minus_dm = 0.0
    true_range = 0.0

    for i in range(len(candles) - period, len(candles)):
        cur, prev = candles[i], candles[i - 1]
        up_move = cur.high - prev.high
        down_move = prev.low - cur.low

        if up_move > down_move and up_move > 0:
            plus_dm += up_move
        if down_move > up_move and down_move > 0:
            minus_dm += down_move

        true_range += max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close)
        )

    if true_range == 0:
        return 0.0

    plus_di = plus_dm / true_range * 100
    minus_di = minus_dm / true_range * 100
    di_sum = plus_di + minus_di
    if di_sum == 0:
        return 0.0

    return abs(plus_di - minus_di) / di_sum * 100


def calculate_volatility(snapshot: TickerSnapshot) -> float:
    """Blend the 24h change with the 24h range into one volatility score.

    ``|change24h| + 0.5 * ((high24h - low24h) / price * 100)``; the range
    term is dropped when the price is zero or the range is inverted.
    """
    volatility = abs(snapshot.change24h)
    day_range = snapshot.high24h - snapshot.low24h
    if snapshot.price > 0 and day_range > 0:
        volatility += 0.5 * (day_range / snapshot.price * 100)
    return volatility


def calculate_liquidity(candles: list[Candle], window: int = 10) -> float:
    """Calculate the price/volume correlation index over *window* candles.

    Each step scores +1 when the close rises on rising volume and -1 when
    it falls on rising volume; the sum is averaged over the steps.

    Returns:
        Index in [-1, 1], or 0.0 when fewer than *window* candles exist.
    """
    if window < 2 or len(candles) < window:
        return 0.0

    recent = candles[-window:]
    liquidity_score = 0

    for i in range(1, len(recent)):
        prev_volume = recent[i - 1].volume
        if prev_volume <= 0:
            continue
        price_change = recent[i].close - recent[i - 1].close
        volume_ratio = recent[i].volume / prev_volume

        if volume_ratio > 1:
            if price_change > 0:
                liquidity_score += 1
            elif price_change < 0:
                liquidity_score -= 1

    return liquidity_score / (len(recent) - 1)


def calculate_recent_resistance(
    candles: list[Candle],
    lookback: int = 50,
    top: int = 5,
) -> float:
    """Average of the *top* highest highs within the last *lookback* candles.

    Returns:
        The resistance estimate, or 0.0 for an empty sequence.
    """
    if not candles or top < 1:
        return 0.0

    highs = sorted((c.high for c in candles[-lookback:]), reverse=True)[:top]
    return sum(highs) / len(highs)
