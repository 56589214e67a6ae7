"""User-facing views: profile, positions, portfolio, leaderboard, results."""

from __future__ import annotations

from pydantic import BaseModel, Field

from predictx.models.market import Side
from predictx.models.trade import Trade
from predictx.money import Money


class PositionView(BaseModel):
    """Open position as stored (cost basis, no live price)."""

    id: str
    market_id: int
    title: str
    side: Side
    shares: int
    avg_cost: Money
    opened_at: int  # ms epoch


class UserProfile(BaseModel):
    id: str
    username: str
    email: str
    balance: Money
    wins: int = 0
    losses: int = 0
    created_at: int
    positions: list[PositionView] = Field(default_factory=list)


class PortfolioPosition(PositionView):
    """Open position marked to the current market price."""

    current_price: int
    value: Money
    pnl_pct: float


class Portfolio(BaseModel):
    """Wallet view: cash, mark-to-market position value, total."""

    user_id: str
    cash: Money
    positions_value: Money
    total: Money
    positions: list[PortfolioPosition] = Field(default_factory=list)


class LeaderboardEntry(BaseModel):
    rank: int = Field(..., ge=1)
    username: str
    net_worth: Money
    wins: int
    losses: int
    win_rate: float = Field(..., ge=0, le=1)


class ExchangeStats(BaseModel):
    total_markets: int
    total_users: int
    total_volume: Money
    total_trades: int


class BuyResult(BaseModel):
    balance: Money
    shares: int
    price: int
    position_id: str | None = None
    trade: Trade


class SellResult(BaseModel):
    balance: Money
    payout: Money
    price: int
    won: bool
