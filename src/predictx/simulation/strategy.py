"""Bot strategy protocol - decides one order per tick from a read-only view."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from predictx.models.account import Portfolio
from predictx.models.market import MarketSnapshot, Side


@dataclass(frozen=True)
class BuyOrder:
    market_id: int
    side: Side
    amount: Decimal


@dataclass(frozen=True)
class SellOrder:
    position_id: str


Order = BuyOrder | SellOrder


class Strategy(ABC):
    """Base for bots. Sees its own portfolio and a sample of market snapshots."""

    @abstractmethod
    def decide(
        self,
        portfolio: Portfolio,
        markets: list[MarketSnapshot],
        rng: random.Random,
    ) -> Order | None:
        """Return at most one order for this tick."""
        ...
