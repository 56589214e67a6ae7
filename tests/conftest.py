"""Shared fixtures: small deterministic markets, ledgers and exchanges."""

from __future__ import annotations

import random
import uuid
from collections import deque
from decimal import Decimal

import pytest

from predictx.exchange import Exchange
from predictx.ledger.records import MarketRecord, UserRecord
from predictx.ledger.store import LedgerStore
from predictx.trading.engine import TradingEngine
from predictx.valuation.service import ValuationService


def _market(market_id: int, yes: int, title: str | None = None, category: str = "crypto") -> MarketRecord:
    return MarketRecord(
        id=market_id,
        title=title or f"Will market {market_id} resolve YES by 2025?",
        category=category,
        category_name=category.title(),
        yes_price=yes,
        history=deque([yes] * 5, maxlen=5),
        volume=Decimal(1000),
        participants=10,
        days=30,
    )


@pytest.fixture
def make_market():
    return _market


@pytest.fixture
def store():
    """Ledger with market 0 at YES 40 and market 1 at YES 75."""
    return LedgerStore([_market(0, 40), _market(1, 75, category="sports")])


@pytest.fixture
def make_user():
    def _add(store: LedgerStore, username: str = "alice", balance: Decimal | int = 10000) -> UserRecord:
        user = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            balance=Decimal(balance),
        )
        assert store.add_user(user)
        return user

    return _add


@pytest.fixture
def engine(store):
    return TradingEngine(store)


@pytest.fixture
def valuation(store):
    return ValuationService(store)


@pytest.fixture
def exchange():
    """Exchange over four fixed markets; cheap bcrypt for fast registration."""
    markets = [
        _market(0, 40, "Will Bitcoin exceed $120K by 2025?", "crypto"),
        _market(1, 75, "Will Lakers win Finals by 2025?", "sports"),
        _market(2, 50, "Will Ethereum reach $900K by 2025?", "crypto"),
        _market(3, 10, "Will GPT-512 release by 2025?", "tech"),
    ]
    return Exchange(markets, bcrypt_rounds=4, rng=random.Random(1))
