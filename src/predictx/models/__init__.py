"""Canonical schema (Pydantic) - markets, trades, account views."""

from predictx.models.account import (
    BuyResult,
    ExchangeStats,
    LeaderboardEntry,
    Portfolio,
    PortfolioPosition,
    PositionView,
    SellResult,
    UserProfile,
)
from predictx.models.market import Category, MarketSnapshot, MarketSummary, MarketTrend, Side
from predictx.models.trade import Trade

__all__ = [
    "Side",
    "Category",
    "MarketSummary",
    "MarketSnapshot",
    "MarketTrend",
    "Trade",
    "PositionView",
    "UserProfile",
    "PortfolioPosition",
    "Portfolio",
    "LeaderboardEntry",
    "ExchangeStats",
    "BuyResult",
    "SellResult",
]
