"""Trend metrics from a market's price-history ring - change, direction, volatility."""

from __future__ import annotations

from collections.abc import Sequence

from predictx.models.market import MarketTrend


def price_change(history: Sequence[int]) -> int:
    """Newest minus oldest sample, in cents."""
    if len(history) < 2:
        return 0
    return history[-1] - history[0]


def direction(history: Sequence[int]) -> str:
    change = price_change(history)
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "flat"


def volatility_proxy(history: Sequence[int]) -> float | None:
    """Sample std dev of the history (if enough points)."""
    if len(history) < 2:
        return None
    mean = sum(history) / len(history)
    var = sum((p - mean) ** 2 for p in history) / (len(history) - 1)
    return var ** 0.5


def sparkline(history: Sequence[int]) -> str:
    """Unicode block sparkline for terminal display."""
    blocks = "▁▂▃▄▅▆▇█"
    if not history:
        return ""
    lo, hi = min(history), max(history)
    span = hi - lo
    if span == 0:
        return blocks[3] * len(history)
    return "".join(blocks[(p - lo) * (len(blocks) - 1) // span] for p in history)


def market_trend(market_id: int, history: Sequence[int]) -> MarketTrend:
    vol = volatility_proxy(history)
    return MarketTrend(
        market_id=market_id,
        change=price_change(history),
        direction=direction(history),
        volatility=round(vol, 4) if vol is not None else None,
        high=max(history) if history else None,
        low=min(history) if history else None,
    )
