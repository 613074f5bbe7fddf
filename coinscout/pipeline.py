"""Ranking pipeline: evaluate a batch of assets and rank them by score.

Each asset moves through ``PENDING -> EVALUATED -> ACCEPTED | REJECTED``.
Evaluation is independent per asset and runs on a thread pool; the
accepted records are stable-sorted by score, so ties keep input order.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from coinscout.analysis.levels import calculate_levels
from coinscout.analysis.planner import TradePlanner
from coinscout.analysis.scoring import ScoringEngine
from coinscout.analysis.simulated import SimulatedIndicatorSource
from coinscout.analysis.summary import build_summary
from coinscout.config import ConfigurationError, ScannerConfig, build_config
from coinscout.indicators.technical import (
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
from coinscout.models.candle import Candle, TickerSnapshot, parse_candles
from coinscout.models.indicators import IndicatorSet
from coinscout.models.record import AnalysisRecord, AssetState

logger = logging.getLogger(__name__)

STRONG_SCORE = 80.0
GOOD_SCORE = 65.0

Asset = Union[tuple, list, dict, TickerSnapshot]


class RankingStats(BaseModel):
    """Aggregate numbers for one ranked batch."""

    total: int = Field(default=0, ge=0)
    average_score: float = Field(default=0.0, ge=0, le=100)
    top_symbol: Optional[str] = None
    strong: int = Field(default=0, ge=0, description=f"Records scoring >= {STRONG_SCORE:.0f}")
    good: int = Field(default=0, ge=0, description=f"Records scoring {GOOD_SCORE:.0f}-{STRONG_SCORE:.0f}")

    model_config = {"frozen": True}


def summarize(records: list[AnalysisRecord]) -> RankingStats:
    """Compute batch statistics; the top symbol is the first record's."""
    if not records:
        return RankingStats()

    scores = [r.score for r in records]
    return RankingStats(
        total=len(records),
        average_score=sum(scores) / len(scores),
        top_symbol=records[0].symbol,
        strong=sum(1 for s in scores if s >= STRONG_SCORE),
        good=sum(1 for s in scores if GOOD_SCORE <= s < STRONG_SCORE),
    )


def _split_asset(asset: Asset) -> tuple[Any, Any]:
    """Return (snapshot, candles) from the accepted asset shapes."""
    if isinstance(asset, dict) and "snapshot" in asset:
        return asset["snapshot"], asset.get("candles")
    if isinstance(asset, (tuple, list)):
        snapshot, candles = asset
        return snapshot, candles
    return asset, None


def _to_snapshot(snapshot: Any) -> TickerSnapshot:
    if isinstance(snapshot, TickerSnapshot):
        return snapshot
    return TickerSnapshot.model_validate(snapshot or {})


class RankingPipeline:
    """Evaluates and ranks assets with one fixed configuration.

    Args:
        config: ScannerConfig, a raw mapping, or None for defaults
        engine: Scoring engine; built from the config when omitted
        rng: Random source for simulated mode
    """

    def __init__(
        self,
        config: Union[ScannerConfig, dict, None] = None,
        engine: Optional[ScoringEngine] = None,
        rng: Optional[random.Random] = None,
    ):
        if isinstance(config, ScannerConfig):
            self.config = config
        else:
            self.config = build_config(config)

        self.engine = engine or ScoringEngine(self.config.weights, self.config.thresholds)
        self.planner = TradePlanner(self.config.planner, self.config.thresholds)
        self.rng = rng or random.Random()

    def compute_indicators(self, snapshot: TickerSnapshot, candles: list[Candle]) -> IndicatorSet:
        """Run every indicator over the candle history."""
        periods = self.config.indicators
        return IndicatorSet(
            rsi=calculate_rsi(candles, periods.rsi),
            macd=calculate_macd(candles, periods.macd_fast, periods.macd_slow, periods.macd_signal),
            sma=calculate_sma(candles, periods.sma),
            trend=calculate_trend_strength(candles, periods.trend_window),
            volume=calculate_volume_change(candles, periods.volume_window),
            liquidity=calculate_liquidity(candles, periods.liquidity_window),
            resistance=calculate_recent_resistance(candles, periods.resistance_lookback),
            adx=calculate_simplified_adx(candles, periods.adx),
            volatility=calculate_volatility(snapshot),
        )

    def _analyze(
        self,
        snapshot: TickerSnapshot,
        candles: list[Candle],
        rng: Optional[random.Random],
    ) -> AnalysisRecord:
        if snapshot.price == 0 and candles:
            snapshot = snapshot.model_copy(update={"price": candles[-1].close})

        simulated = False
        if candles:
            indicators = self.compute_indicators(snapshot, candles)
        elif self.config.simulated_mode:
            indicators = SimulatedIndicatorSource(rng or self.rng).indicators(snapshot)
            simulated = True
        else:
            indicators = IndicatorSet(volatility=calculate_volatility(snapshot))

        levels = calculate_levels(snapshot, candles, self.config.indicators.resistance_lookback)
        result = self.engine.score(snapshot, indicators)

        return AnalysisRecord(
            symbol=snapshot.symbol,
            price=snapshot.price,
            change24h=snapshot.change24h,
            volume24h=snapshot.volume24h,
            high24h=snapshot.high24h,
            low24h=snapshot.low24h,
            score=result.score,
            signals=result.signals,
            indicators=indicators,
            levels=levels,
            targets=self.planner.targets(snapshot, levels),
            plan=self.planner.plan(snapshot, indicators, levels, result),
            analysis=build_summary(result.score, indicators, result.signals),
            candle_count=len(candles),
            simulated=simulated,
        )

    def evaluate(
        self,
        snapshot: Any,
        candles: Optional[Iterable[Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> AnalysisRecord:
        """Analyse one asset.

        Never raises for bad asset data: a failure is logged and returned
        as a neutral record with score 0 and ``error`` set.
        """
        try:
            snapshot = _to_snapshot(snapshot)
        except ValidationError as e:
            logger.warning("Unusable snapshot %r: %s", snapshot, e)
            return AnalysisRecord(symbol="UNKNOWN", price=0.0, error=str(e))

        try:
            record = self._analyze(snapshot, parse_candles(candles), rng)
        except Exception as e:
            logger.warning("%s: evaluation failed: %s", snapshot.symbol, e)
            return AnalysisRecord(
                symbol=snapshot.symbol,
                price=snapshot.price,
                change24h=snapshot.change24h,
                volume24h=snapshot.volume24h,
                high24h=snapshot.high24h,
                low24h=snapshot.low24h,
                error=str(e),
            )

        logger.debug("%s: %s -> %s (score %.1f)", record.symbol, AssetState.PENDING.value,
                     AssetState.EVALUATED.value, record.score)
        return record

    def _passes_filters(self, snapshot: TickerSnapshot) -> bool:
        filters = self.config.filters
        if snapshot.base_currency in filters.excluded_symbols:
            return False
        if snapshot.volume24h < filters.min_volume:
            return False
        if filters.quote_currency and snapshot.quote_currency != filters.quote_currency.upper():
            return False
        return True

    def rank(
        self,
        assets: Iterable[Asset],
        min_score: Optional[float] = None,
        max_results: Optional[int] = None,
    ) -> list[AnalysisRecord]:
        """Filter, evaluate, accept and sort a batch.

        Args:
            assets: ``(snapshot, candles)`` tuples, ``{"snapshot", "candles"}``
                mappings or bare snapshots
            min_score: Minimum accepted score (config default when None)
            max_results: Result cap (config default when None)

        Returns:
            Accepted records, highest score first, at most *max_results*.

        Raises:
            ConfigurationError: If *max_results* is negative.
        """
        if max_results is not None and max_results < 0:
            raise ConfigurationError(f"max_results must not be negative, got {max_results}")
        if min_score is None:
            min_score = self.config.filters.min_score
        if max_results is None:
            max_results = self.config.filters.max_results

        candidates: list[tuple[TickerSnapshot, Any]] = []
        for asset in assets:
            try:
                raw_snapshot, candles = _split_asset(asset)
                snapshot = _to_snapshot(raw_snapshot)
            except (ValueError, TypeError) as e:
                logger.warning("Skipping unusable asset %r: %s", asset, e)
                continue
            if self._passes_filters(snapshot):
                candidates.append((snapshot, candles))
            else:
                logger.debug("%s: filtered out before evaluation", snapshot.symbol)

        if not candidates:
            logger.info("No assets left to evaluate")
            return []

        # Seeds are drawn up front so simulated runs do not depend on thread timing
        rngs = [random.Random(self.rng.getrandbits(64)) for _ in candidates]

        workers = min(self.config.workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            records = list(executor.map(
                lambda item: self.evaluate(item[0][0], item[0][1], item[1]),
                zip(candidates, rngs),
            ))

        accepted = []
        for record in records:
            state = AssetState.ACCEPTED if record.score >= min_score else AssetState.REJECTED
            logger.debug("%s: %s -> %s", record.symbol, AssetState.EVALUATED.value, state.value)
            if state is AssetState.ACCEPTED:
                accepted.append(record)

        accepted.sort(key=lambda r: r.score, reverse=True)
        ranked = accepted[:max_results]

        logger.info(
            "Ranked %d of %d assets (min score %.0f)", len(ranked), len(candidates), min_score
        )
        return ranked


def evaluate(
    snapshot: Any,
    candles: Optional[Iterable[Any]] = None,
    config: Union[ScannerConfig, dict, None] = None,
) -> AnalysisRecord:
    """Analyse one asset with a fresh pipeline."""
    return RankingPipeline(config).evaluate(snapshot, candles)


def rank(
    assets: Iterable[Asset],
    min_score: Optional[float] = None,
    max_results: Optional[int] = None,
    config: Union[ScannerConfig, dict, None] = None,
) -> list[AnalysisRecord]:
    """Rank a batch of assets with a fresh pipeline."""
    return RankingPipeline(config).rank(assets, min_score, max_results)
