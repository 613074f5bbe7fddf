"""Support/resistance and Fibonacci level calculation.

Static levels start from classic pivot points over the 24h range and are
refined with local extrema from the candle history. Extrema are also ranked
by touch count into "dynamic" levels. Every LevelSet passes through
``sanitize_levels`` so supports sit below and resistances above the price.
"""

from typing import Optional

from coinscout.models.candle import Candle, TickerSnapshot
from coinscout.models.levels import DynamicLevel, FibonacciLevels, LevelSet


SUPPORT_FALLBACK = 0.95
RESISTANCE_FALLBACK = 1.05

FIB_RETRACEMENTS = {
    "level236": 0.236,
    "level382": 0.382,
    "level500": 0.5,
    "level618": 0.618,
    "level786": 0.786,
}
FIB_EXTENSIONS = {
    "extension1272": 1.272,
    "extension1618": 1.618,
    "extension2000": 2.0,
    "extension2618": 2.618,
}


def calculate_pivot_points(high: float, low: float, close: float) -> dict[str, float]:
    """Calculate standard pivot points with support and resistance levels.

    Args:
        high: 24h high
        low: 24h low
        close: Current price

    Returns:
        Dictionary with pivot, r1-r3 and s1-s3.
    """
    pivot = (high + low + close) / 3

    return {
        "pivot": pivot,
        "r1": (2 * pivot) - low,
        "r2": pivot + (high - low),
        "r3": high + 2 * (pivot - low),
        "s1": (2 * pivot) - high,
        "s2": pivot - (high - low),
        "s3": low - 2 * (high - pivot),
    }


def find_local_extrema(
    candles: list[Candle],
    window: int = 2,
) -> tuple[list[float], list[float]]:
    """Find swing lows and swing highs.

    A low is a support candidate when it is the lowest low (ties allowed)
    within *window* candles on each side; highs analogously.

    Returns:
        Tuple of (support candidates, resistance candidates) in candle order.
    """
    supports: list[float] = []
    resistances: list[float] = []

    for i in range(window, len(candles) - window):
        neighbours = [j for j in range(i - window, i + window + 1) if j != i]

        low = candles[i].low
        if all(low <= candles[j].low for j in neighbours):
            supports.append(low)

        high = candles[i].high
        if all(high >= candles[j].high for j in neighbours):
            resistances.append(high)

    return supports, resistances


def count_touches(level: float, candles: list[Candle], tolerance: float = 0.01) -> int:
    """Count candles whose high or low falls within +-tolerance of *level*."""
    lower = level * (1 - tolerance)
    upper = level * (1 + tolerance)
    return sum(
        1 for c in candles
        if lower <= c.high <= upper or lower <= c.low <= upper
    )


def rank_dynamic_levels(
    candidates: list[float],
    candles: list[Candle],
    price: float,
    tolerance: float = 0.01,
    top: int = 3,
) -> tuple[DynamicLevel, ...]:
    """Rank candidate prices by touch count and keep the strongest.

    Ties are broken by distance to *price*, then by first appearance.
    """
    unique = list(dict.fromkeys(candidates))
    ranked = [
        DynamicLevel(price=level, touches=count_touches(level, candles, tolerance))
        for level in unique
    ]
    ranked.sort(key=lambda d: (-d.touches, abs(d.price - price)))
    return tuple(ranked[:top])


def calculate_fibonacci_levels(high: float, low: float, price: float) -> FibonacciLevels:
    """Calculate Fibonacci retracements of the range and extensions above price.

    Retracements are measured down from *high*; extensions are
    ``price + range * ratio``.
    """
    diff = high - low

    values = {name: high - ratio * diff for name, ratio in FIB_RETRACEMENTS.items()}
    values.update({name: price + ratio * diff for name, ratio in FIB_EXTENSIONS.items()})

    return FibonacciLevels(**values)


def sanitize_levels(
    price: float,
    supports: list[float],
    resistances: list[float],
) -> tuple[list[float], list[float]]:
    """Force supports below and resistances above the price.

    A first support at/above the price (or non-positive) becomes
    ``price * 0.95``; each later support not strictly below its
    predecessor becomes ``predecessor * 0.95``. Resistances mirror this
    with ``* 1.05``. A non-positive price sends every level to 0.
    """
    clean_supports: list[float] = []
    ceiling = price
    for level in supports:
        if level >= ceiling or level <= 0:
            level = ceiling * SUPPORT_FALLBACK
        clean_supports.append(level)
        ceiling = level

    clean_resistances: list[float] = []
    floor = price
    for level in resistances:
        if level <= floor or floor <= 0:
            level = floor * RESISTANCE_FALLBACK
        clean_resistances.append(level)
        floor = level

    return clean_supports, clean_resistances


def _day_range(snapshot: TickerSnapshot, candles: list[Candle]) -> tuple[float, float]:
    """Return the 24h (high, low), using the last 24 candles when the snapshot lacks it."""
    high, low = snapshot.high24h, snapshot.low24h
    if (high <= 0 or low <= 0) and candles:
        recent = candles[-24:]
        high = max(c.high for c in recent)
        low = min(c.low for c in recent)
    if high <= 0 or low <= 0 or high < low:
        high = low = snapshot.price
    return high, low


def calculate_levels(
    snapshot: TickerSnapshot,
    candles: Optional[list[Candle]] = None,
    lookback: int = 50,
    tolerance: float = 0.01,
) -> LevelSet:
    """Calculate the sanitised LevelSet for one asset.

    Args:
        snapshot: Ticker snapshot providing price and 24h range
        candles: Optional candle history, oldest-first
        lookback: Number of recent candles scanned for extrema (default 50)
        tolerance: Touch band for dynamic levels (default 1%)

    Returns:
        LevelSet with supports below and resistances above the price.
    """
    candles = candles or []
    price = snapshot.price
    high, low = _day_range(snapshot, candles)

    pivots = calculate_pivot_points(high, low, price)
    supports = [pivots["s1"], pivots["s2"], pivots["s3"]]
    resistances = [pivots["r1"], pivots["r2"], pivots["r3"]]

    dynamic_supports: tuple[DynamicLevel, ...] = ()
    dynamic_resistances: tuple[DynamicLevel, ...] = ()

    if candles:
        recent = candles[-lookback:]
        swing_lows, swing_highs = find_local_extrema(recent)

        below = sorted({s for s in swing_lows if s < price}, reverse=True)
        above = sorted({r for r in swing_highs if r > price})
        for k, level in enumerate(below[:3]):
            supports[k] = level
        for k, level in enumerate(above[:3]):
            resistances[k] = level

        dynamic_supports = rank_dynamic_levels(swing_lows, recent, price, tolerance)
        dynamic_resistances = rank_dynamic_levels(swing_highs, recent, price, tolerance)

    supports, resistances = sanitize_levels(price, supports, resistances)

    return LevelSet(
        pivot=pivots["pivot"],
        support1=supports[0],
        support2=supports[1],
        support3=supports[2],
        resistance1=resistances[0],
        resistance2=resistances[1],
        resistance3=resistances[2],
        fibonacci=calculate_fibonacci_levels(high, low, price),
        dynamic_supports=dynamic_supports,
        dynamic_resistances=dynamic_resistances,
    )
