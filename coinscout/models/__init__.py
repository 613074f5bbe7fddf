"""Data models for CoinScout."""

from coinscout.models.candle import Candle, TickerSnapshot, parse_candles
from coinscout.models.indicators import IndicatorSet, MACDResult, TrendStrength, VolumeChange
from coinscout.models.levels import DynamicLevel, FibonacciLevels, LevelSet
from coinscout.models.plan import EntryExitPlan, StopLossTiers, TakeProfitLadder, TargetSet
from coinscout.models.record import AnalysisRecord, AssetState, ScoreResult, Signal

__all__ = [
    "Candle",
    "TickerSnapshot",
    "parse_candles",
    "IndicatorSet",
    "MACDResult",
    "TrendStrength",
    "VolumeChange",
    "DynamicLevel",
    "FibonacciLevels",
    "LevelSet",
    "EntryExitPlan",
    "StopLossTiers",
    "TakeProfitLadder",
    "TargetSet",
    "AnalysisRecord",
    "AssetState",
    "ScoreResult",
    "Signal",
]
