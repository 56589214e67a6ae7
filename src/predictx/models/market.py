"""Side, Category, market views - canonical entities."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from predictx.money import Money

PRICE_MIN = 1
PRICE_MAX = 99


class Side(str, Enum):
    """Binary outcome a contract refers to."""

    YES = "YES"
    NO = "NO"


class Category(BaseModel):
    """Market category descriptor."""

    id: str
    name: str
    icon: str = ""
    color: str = ""


class MarketSummary(BaseModel):
    """Market row for listings (no history)."""

    id: int
    title: str
    category: str
    category_name: str
    yes_price: int = Field(..., ge=PRICE_MIN, le=PRICE_MAX, description="YES price in cents")
    no_price: int = Field(..., ge=PRICE_MIN, le=PRICE_MAX, description="NO price in cents (100 - yes)")
    volume: Money
    participants: int
    days: int


class MarketSnapshot(MarketSummary):
    """Point-in-time view of one market, including price history (oldest first)."""

    history: list[int] = Field(default_factory=list)
    last_update: int | None = None  # ms epoch


class MarketTrend(BaseModel):
    """Trend statistics over a market's price-history ring."""

    market_id: int
    change: int = 0
    direction: str = Field("flat", pattern="^(up|down|flat)$")
    volatility: float | None = None
    high: int | None = None
    low: int | None = None
