"""Level calculation, scoring and trade planning."""

from coinscout.analysis.levels import calculate_fibonacci_levels, calculate_levels, calculate_pivot_points
from coinscout.analysis.planner import TradePlanner, calculate_targets
from coinscout.analysis.scoring import ScoringEngine
from coinscout.analysis.simulated import SimulatedIndicatorSource
from coinscout.analysis.summary import build_summary

__all__ = [
    "calculate_fibonacci_levels",
    "calculate_levels",
    "calculate_pivot_points",
    "TradePlanner",
    "calculate_targets",
    "ScoringEngine",
    "SimulatedIndicatorSource",
    "build_summary",
]
