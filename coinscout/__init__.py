"""CoinScout - technical indicator scoring and ranking for crypto assets."""

from coinscout.config import ConfigurationError, ScannerConfig, load_config
from coinscout.pipeline import RankingPipeline, RankingStats, evaluate, rank, summarize

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ScannerConfig",
    "load_config",
    "RankingPipeline",
    "RankingStats",
    "evaluate",
    "rank",
    "summarize",
]
