"""Mutable ledger rows: markets, users, positions."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal
from threading import Lock

from predictx.models.account import PositionView, UserProfile
from predictx.models.market import PRICE_MAX, PRICE_MIN, MarketSnapshot, MarketSummary, Side

TITLE_SNIPPET_LEN = 40


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class MarketRecord:
    """One market row. Only yes_price is stored; no_price is derived on read.

    Price/history are written by the price process, volume/participants by the
    trading engine, each under the row lock.
    """

    id: int
    title: str
    category: str
    category_name: str
    yes_price: int
    history: deque[int]
    volume: Decimal = Decimal(0)
    participants: int = 0
    days: int = 0
    last_update: int | None = None
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        assert PRICE_MIN <= self.yes_price <= PRICE_MAX, self.yes_price

    @property
    def no_price(self) -> int:
        return 100 - self.yes_price

    def price_for(self, side: Side) -> int:
        """Current price of `side` in cents. Single read of yes_price."""
        yes = self.yes_price
        return yes if side is Side.YES else 100 - yes

    def apply_price(self, yes_price: int, ts: int | None = None) -> None:
        """Set a new YES price and push it onto the history ring (oldest evicted)."""
        assert PRICE_MIN <= yes_price <= PRICE_MAX, yes_price
        with self._lock:
            self.yes_price = yes_price
            self.history.append(yes_price)
            self.last_update = ts if ts is not None else now_ms()

    def record_fill(self, amount: Decimal) -> None:
        """Add a trade's cash amount to volume and count one participant."""
        with self._lock:
            self.volume += amount
            self.participants += 1

    def summary(self) -> MarketSummary:
        with self._lock:
            yes = self.yes_price
            return MarketSummary(
                id=self.id,
                title=self.title,
                category=self.category,
                category_name=self.category_name,
                yes_price=yes,
                no_price=100 - yes,
                volume=self.volume,
                participants=self.participants,
                days=self.days,
            )

    def snapshot(self) -> MarketSnapshot:
        with self._lock:
            yes = self.yes_price
            return MarketSnapshot(
                id=self.id,
                title=self.title,
                category=self.category,
                category_name=self.category_name,
                yes_price=yes,
                no_price=100 - yes,
                volume=self.volume,
                participants=self.participants,
                days=self.days,
                history=list(self.history),
                last_update=self.last_update,
            )


@dataclass
class UserRecord:
    """Registered user. balance >= 0 at all times."""

    id: str
    username: str
    email: str
    password_hash: str
    balance: Decimal
    wins: int = 0
    losses: int = 0
    created_at: int = field(default_factory=now_ms)

    def profile(self, positions: list[PositionRecord] | None = None) -> UserProfile:
        return UserProfile(
            id=self.id,
            username=self.username,
            email=self.email,
            balance=self.balance,
            wins=self.wins,
            losses=self.losses,
            created_at=self.created_at,
            positions=[p.view() for p in positions or []],
        )

    @property
    def win_rate(self) -> float:
        decided = self.wins + self.losses
        return self.wins / decided if decided > 0 else 0.0


@dataclass
class PositionRecord:
    """Open holding on (market, side). shares > 0 while open."""

    id: str
    user_id: str
    market_id: int
    side: Side
    shares: int
    avg_cost: Decimal  # cents per share
    title: str = ""
    opened_at: int = field(default_factory=now_ms)

    def view(self) -> PositionView:
        return PositionView(
            id=self.id,
            market_id=self.market_id,
            title=self.title,
            side=self.side,
            shares=self.shares,
            avg_cost=self.avg_cost,
            opened_at=self.opened_at,
        )
