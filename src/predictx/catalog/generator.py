"""Random market catalog - question titles per category, seeded once at startup."""

from __future__ import annotations

import random
from collections import deque
from decimal import Decimal

from predictx.ledger.records import MarketRecord, now_ms
from predictx.models.market import Category

CATEGORIES: list[Category] = [
    Category(id="crypto", name="Crypto", icon="₿", color="#F7931A"),
    Category(id="economy", name="Economy", icon="📈", color="#00CED1"),
    Category(id="sports", name="Sports", icon="🏈", color="#30D158"),
    Category(id="tech", name="Tech", icon="💻", color="#AF52DE"),
    Category(id="politics", name="Politics", icon="🏛️", color="#FF6B6B"),
    Category(id="entertainment", name="Entertainment", icon="🎬", color="#FF9500"),
]

# "%d" is replaced with a random 3-digit number
TITLE_TEMPLATES: dict[str, list[str]] = {
    "crypto": [
        "Bitcoin exceed $%dK",
        "Ethereum reach $%dK",
        "Solana hit $%d",
        "BTC dominance above %d%",
        "Crypto market cap $%dT",
    ],
    "economy": [
        "Fed cut rates %d times",
        "Inflation below %d%",
        "S&P 500 reach %d",
        "Gold reach $%dK",
        "Oil above $%d",
    ],
    "sports": [
        "Chiefs win Super Bowl",
        "Lakers win Finals",
        "World Cup winner %d goals",
        "Olympics %d golds",
        "UFC PPV record",
    ],
    "tech": [
        "GPT-%d release",
        "Apple foldable launch",
        "Tesla FSD level %d",
        "SpaceX Starship success",
        "AI regulations %d countries",
    ],
    "politics": [
        "Election turnout %d%",
        "Senate flip",
        "Trade deal signed",
        "Climate accord %d nations",
        "Infrastructure $%dB",
    ],
    "entertainment": [
        "Movie gross $%dB",
        "Album %dM sales",
        "Netflix hit %dM",
        "Streaming record",
        "Concert $%dM tour",
    ],
}


def make_title(template: str, number: int) -> str:
    return "Will " + template.replace("%d", str(number), 1) + " by 2025?"


def generate_markets(
    rng: random.Random | None = None,
    per_category: int = 100,
    history_length: int = 30,
) -> list[MarketRecord]:
    """Create `per_category` markets for every category, ids sequential from 0."""
    rng = rng or random.Random()
    ts = now_ms()
    markets: list[MarketRecord] = []
    for cat in CATEGORIES:
        templates = TITLE_TEMPLATES[cat.id]
        for _ in range(per_category):
            title = make_title(rng.choice(templates), rng.randint(100, 999))
            markets.append(
                MarketRecord(
                    id=len(markets),
                    title=title,
                    category=cat.id,
                    category_name=cat.name,
                    yes_price=rng.randint(10, 89),
                    history=deque(
                        (rng.randint(20, 79) for _ in range(history_length)),
                        maxlen=history_length,
                    ),
                    volume=Decimal(rng.randint(100_000, 5_099_999)),
                    participants=rng.randint(100, 10_099),
                    days=rng.randint(30, 329),
                    last_update=ts,
                )
            )
    return markets


def get_category(category_id: str) -> Category | None:
    return next((c for c in CATEGORIES if c.id == category_id), None)
