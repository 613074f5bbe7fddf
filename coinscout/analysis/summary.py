"""Plain-text analysis summary for a scored asset."""

from typing import Iterable

from coinscout.models.indicators import IndicatorSet
from coinscout.models.record import Signal


HEADLINES = (
    (80, "Very strong buy signal. Multiple technical breakouts with high trading volume."),
    (65, "Good buy signal. Technical indicators support the uptrend."),
    (50, "Moderate signal. Watch and enter once the signals confirm."),
)
WEAK_HEADLINE = "Weak signal. Entry is not advised right now."


def build_summary(score: float, indicators: IndicatorSet, signals: Iterable[Signal]) -> str:
    """Build the tiered headline plus RSI, MACD and volume details.

    Args:
        score: Composite score (0-100)
        indicators: Indicator readings behind the score
        signals: Fired signals

    Returns:
        One paragraph of text.
    """
    summary = next((text for floor, text in HEADLINES if score >= floor), WEAK_HEADLINE)

    fired = {s.name: s for s in signals}

    rsi_signal = fired.get("rsi_breakout") or fired.get("rsi_overbought")
    if rsi_signal:
        summary += f" {rsi_signal.description}."

    if "macd_signal" in fired:
        summary += f" {fired['macd_signal'].description}."

    if "volume_increase" in fired:
        summary += f" Trading volume is rising ({indicators.volume.increase:+.1f}%)."

    return summary
