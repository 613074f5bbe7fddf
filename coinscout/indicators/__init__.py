"""Technical indicators module."""

from coinscout.indicators.technical import (
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

__all__ = [
    "calculate_ema",
    "calculate_liquidity",
    "calculate_macd",
    "calculate_recent_resistance",
    "calculate_rsi",
    "calculate_simplified_adx",
    "calculate_sma",
    "calculate_trend_strength",
    "calculate_volatility",
    "calculate_volume_change",
]
