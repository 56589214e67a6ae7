"""Exchange - wires ledger, price process, trading, valuation and accounts.

This is the surface the API, CLI and TUI talk to.
"""

from __future__ import annotations

import random
from decimal import Decimal
from typing import Any

import structlog

from predictx.accounts.service import AccountService
from predictx.catalog.generator import CATEGORIES, generate_markets
from predictx.config.settings import Settings
from predictx.errors import MarketNotFoundError
from predictx.ledger.records import MarketRecord
from predictx.ledger.store import LedgerStore
from predictx.metrics.trend import market_trend
from predictx.models.account import BuyResult, LeaderboardEntry, SellResult
from predictx.models.market import Category, MarketSnapshot, MarketSummary, MarketTrend, Side
from predictx.pricing.process import PriceProcess
from predictx.trading.engine import TradingEngine
from predictx.valuation.service import ValuationService

log = structlog.get_logger(__name__)


class Exchange:
    """One in-memory exchange. State lives for the lifetime of the process."""

    def __init__(
        self,
        markets: list[MarketRecord],
        *,
        starting_balance: Decimal = Decimal(10000),
        tick_interval_sec: float = 0.5,
        max_step: float = 1.5,
        leaderboard_limit: int = 100,
        bcrypt_rounds: int = 12,
        rng: random.Random | None = None,
    ) -> None:
        self.store = LedgerStore(markets)
        self.engine = TradingEngine(self.store)
        self.valuation = ValuationService(self.store)
        self.accounts = AccountService(self.store, starting_balance=starting_balance, bcrypt_rounds=bcrypt_rounds)
        self.prices = PriceProcess(self.store, interval_sec=tick_interval_sec, max_step=max_step, rng=rng)
        self.leaderboard_limit = leaderboard_limit

    @classmethod
    def from_settings(cls, settings: Settings, rng: random.Random | None = None) -> Exchange:
        """Seed the catalog and build an exchange from config."""
        rng = rng or random.Random(settings.catalog_seed)
        markets = generate_markets(
            rng,
            per_category=settings.markets_per_category,
            history_length=settings.history_length,
        )
        log.info("exchange_created", markets=len(markets), categories=len(CATEGORIES))
        return cls(
            markets,
            starting_balance=settings.starting_balance,
            tick_interval_sec=settings.tick_interval_sec,
            max_step=settings.max_step,
            leaderboard_limit=settings.leaderboard_limit,
            bcrypt_rounds=settings.bcrypt_rounds,
            rng=rng,
        )

    # --- Trading ---

    def buy(self, user_id: str, market_id: int, side: Side | str, amount: Any) -> BuyResult:
        return self.engine.buy(user_id, market_id, side, amount)

    def sell(self, user_id: str, position_id: str) -> SellResult:
        return self.engine.sell(user_id, position_id)

    # --- Valuation ---

    def net_worth(self, user_id: str) -> Decimal:
        return self.valuation.net_worth(user_id)

    def leaderboard(self, limit: int | None = None) -> list[LeaderboardEntry]:
        return self.valuation.leaderboard(self.leaderboard_limit if limit is None else limit)

    # --- Markets ---

    def _market(self, market_id: int) -> MarketRecord:
        market = self.store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def market_snapshot(self, market_id: int) -> MarketSnapshot:
        return self._market(market_id).snapshot()

    def market_trend(self, market_id: int) -> MarketTrend:
        snap = self.market_snapshot(market_id)
        return market_trend(snap.id, snap.history)

    def list_markets(
        self,
        category: str | None = None,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[MarketSummary]]:
        """Filter by category ('all' or None = every category) and title substring. Returns (total, page)."""
        markets = self.store.markets()
        if category and category != "all":
            markets = [m for m in markets if m.category == category]
        if query:
            q = query.lower()
            markets = [m for m in markets if q in m.title.lower()]
        page = markets[offset : offset + limit]
        return len(markets), [m.summary() for m in page]

    def categories(self) -> list[Category]:
        return list(CATEGORIES)
