"""Pseudo-indicators for assets without candle history.

Only used when ``ScannerConfig.simulated_mode`` is on. Readings are derived
from the ticker snapshot with random noise from an injectable
``random.Random``, so a seeded source reproduces the same batch.
Records built from them are flagged ``simulated=True``.
"""

import random
from typing import Optional

from coinscout.indicators.technical import calculate_volatility
from coinscout.models.candle import TickerSnapshot
from coinscout.models.indicators import IndicatorSet, MACDResult, TrendStrength, VolumeChange


class SimulatedIndicatorSource:
    """Generates an IndicatorSet from a snapshot and a random source."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _rsi(self, snapshot: TickerSnapshot) -> float:
        rsi = 50 + snapshot.change24h * 1.5 + self.rng.uniform(-10, 10)
        return max(0.0, min(100.0, rsi))

    def _macd(self, snapshot: TickerSnapshot) -> MACDResult:
        value = snapshot.price * snapshot.change24h / 1000 + self.rng.gauss(0, snapshot.price * 0.001)
        histogram = value * self.rng.uniform(0.2, 0.6)
        if histogram > 0:
            label = "bullish"
        elif histogram < 0:
            label = "bearish"
        else:
            label = "neutral"
        return MACDResult(
            value=value,
            signal=label,
            histogram=histogram,
            signal_line=value - histogram,
            crossover=self.rng.random() < 0.1,
        )

    def _trend(self, snapshot: TickerSnapshot) -> TrendStrength:
        if snapshot.change24h > 0:
            direction = "up"
        elif snapshot.change24h < 0:
            direction = "down"
        else:
            direction = "neutral"
        return TrendStrength(direction=direction, strength=self.rng.uniform(30, 90))

    def _volume(self, snapshot: TickerSnapshot) -> VolumeChange:
        increase = self.rng.uniform(-30, 60)
        previous = snapshot.volume24h / 2
        current = previous * (1 + increase / 100)
        if increase > 0:
            trend = "increasing"
        elif increase < 0:
            trend = "decreasing"
        else:
            trend = "flat"
        return VolumeChange(increase=increase, trend=trend, current=current, previous=previous)

    def indicators(self, snapshot: TickerSnapshot) -> IndicatorSet:
        """Draw one pseudo IndicatorSet for *snapshot*."""
        price = snapshot.price
        sma = max(0.0, price * (1 - snapshot.change24h / 200 + self.rng.uniform(-0.01, 0.01)))

        if snapshot.high24h > price:
            resistance = snapshot.high24h
        else:
            resistance = price * self.rng.uniform(1.01, 1.06)

        return IndicatorSet(
            rsi=self._rsi(snapshot),
            macd=self._macd(snapshot),
            sma=sma,
            trend=self._trend(snapshot),
            volume=self._volume(snapshot),
            liquidity=self.rng.uniform(-1, 1),
            resistance=resistance,
            adx=self.rng.uniform(10, 50),
            volatility=calculate_volatility(snapshot),
        )
