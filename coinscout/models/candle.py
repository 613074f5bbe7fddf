"""Candle (OHLCV) and ticker snapshot data models."""

import logging
import math
from typing import Any, Iterable

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _finite_or_zero(value: Any) -> float:
    """Coerce a raw numeric value to a finite float, using 0.0 otherwise."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class Candle(BaseModel):
    """Represents a single OHLCV candle."""

    timestamp: int = Field(..., ge=0, description="Candle open time (ms epoch)")
    open: float = Field(..., ge=0, description="Opening price")
    high: float = Field(..., ge=0, description="High price")
    low: float = Field(..., ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: float = Field(..., ge=0, description="Traded volume (base units)")

    model_config = {"frozen": True}

    @field_validator("open", "high", "low", "close", "volume")
    @classmethod
    def _reject_non_finite(cls, value: float) -> float:
        if math.isnan(value) or math.isinf(value):
            raise ValueError("must be a finite number")
        return value

    @classmethod
    def from_row(cls, row: Any) -> "Candle":
        """Build a candle from a model, a mapping or an exchange row.

        Exchange rows are sequences ``[ts, open, high, low, close, volume, ...]``
        where every item may be a numeric string; extra columns are ignored.
        """
        if isinstance(row, Candle):
            return row
        if isinstance(row, dict):
            return cls.model_validate(row)
        ts, open_, high, low, close, volume = list(row)[:6]
        return cls(
            timestamp=int(float(ts)),
            open=float(open_),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume),
        )


def parse_candles(rows: Iterable[Any] | None) -> list[Candle]:
    """Parse raw candle rows into candles ordered oldest-first.

    Rows that fail validation are dropped. The result is sorted by
    timestamp; rows sharing a timestamp keep their input order.
    """
    if not rows:
        return []

    candles: list[Candle] = []
    for row in rows:
        try:
            candles.append(Candle.from_row(row))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Dropping malformed candle row %r: %s", row, e)

    candles.sort(key=lambda c: c.timestamp)
    return candles


class TickerSnapshot(BaseModel):
    """Instantaneous 24h ticker statistics for one instrument.

    Numeric fields are sanitised before validation: missing, NaN or
    unparsable values become 0.0, and so do negative prices and volumes.
    """

    symbol: str = Field(default="UNKNOWN", description="Instrument symbol (e.g. BTC-USDT)")
    price: float = Field(default=0.0, ge=0, description="Last traded price")
    change24h: float = Field(default=0.0, description="24h price change in percent")
    volume24h: float = Field(default=0.0, ge=0, description="24h quote-currency volume")
    high24h: float = Field(default=0.0, ge=0, description="24h high")
    low24h: float = Field(default=0.0, ge=0, description="24h low")

    model_config = {"frozen": True}

    @field_validator("symbol", mode="before")
    @classmethod
    def _clean_symbol(cls, value: Any) -> str:
        if value is None:
            return "UNKNOWN"
        text = str(value).strip().upper()
        return text or "UNKNOWN"

    @field_validator("price", "volume24h", "high24h", "low24h", mode="before")
    @classmethod
    def _clean_non_negative(cls, value: Any) -> float:
        number = _finite_or_zero(value)
        return number if number > 0 else 0.0

    @field_validator("change24h", mode="before")
    @classmethod
    def _clean_change(cls, value: Any) -> float:
        return _finite_or_zero(value)

    @property
    def base_currency(self) -> str:
        """Base currency of the symbol (``BTC`` for ``BTC-USDT``)."""
        return self.symbol.replace("/", "-").split("-")[0]

    @property
    def quote_currency(self) -> str | None:
        """Quote currency of the symbol, or None for a bare symbol."""
        parts = self.symbol.replace("/", "-").split("-")
        return parts[1] if len(parts) > 1 else None
