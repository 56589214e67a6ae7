"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from predictx.models import (
    Category,
    LeaderboardEntry,
    MarketSummary,
    UserProfile,
)
from predictx.money import Money


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    ticks: int = 0
    ticks_per_sec: float = 0
    uptime_sec: float = 0


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. INVALID_SIDE, MARKET_NOT_FOUND")


# --- Accounts ---
class RegisterRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    user: UserProfile


class NetWorthResponse(BaseModel):
    user_id: str
    net_worth: Money
    rank: int | None = None


# --- Markets ---
class CategoriesResponse(BaseModel):
    categories: list[Category]


class MarketsListResponse(BaseModel):
    markets: list[MarketSummary]
    total: int


# --- Trading ---
class TradeRequest(BaseModel):
    market_id: int
    side: str = Field(..., description="YES or NO")
    amount: Decimal = Field(..., description="Cash to spend")


class TradeResponse(BaseModel):
    balance: Money
    shares: int
    price: int
    position_id: str | None = None


class SellRequest(BaseModel):
    position_id: str


class SellResponse(BaseModel):
    balance: Money
    payout: Money
    price: int
    won: bool


# --- Leaderboard / stats ---
class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntry]
