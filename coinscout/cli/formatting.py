"""Number formatting for terminal output."""


def format_price(price: float) -> str:
    """Format a price with more decimals the smaller it is.

    4 decimals from 1 upward, 6 from 0.01, 8 below that.
    """
    if price >= 1:
        return f"{price:.4f}"
    if price >= 0.01:
        return f"{price:.6f}"
    return f"{price:.8f}"


def format_volume(volume: float) -> str:
    """Abbreviate a volume with a B/M/K suffix."""
    for divisor, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if volume >= divisor:
            return f"{volume / divisor:.2f}{suffix}"
    return f"{volume:.2f}"


def format_change(change: float) -> str:
    """Rich markup for a signed percentage change."""
    style = "green" if change >= 0 else "red"
    return f"[{style}]{change:+.2f}%[/{style}]"


def score_style(score: float) -> str:
    """Rich style for a score: green when strong, yellow when good."""
    if score >= 80:
        return "bold green"
    if score >= 65:
        return "green"
    if score >= 50:
        return "yellow"
    return "dim"
