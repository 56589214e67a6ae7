"""Random trader: buys a random side with a slice of cash, or dumps a random position."""

from __future__ import annotations

import random
from decimal import Decimal

from predictx.models.account import Portfolio
from predictx.models.market import MarketSnapshot, Side
from predictx.simulation.strategy import BuyOrder, Order, SellOrder, Strategy


class RandomTrader(Strategy):
    def __init__(self, sell_prob: float = 0.3, max_fraction: float = 0.05) -> None:
        self.sell_prob = sell_prob
        self.max_fraction = max_fraction

    def decide(self, portfolio: Portfolio, markets: list[MarketSnapshot], rng: random.Random) -> Order | None:
        if portfolio.positions and rng.random() < self.sell_prob:
            return SellOrder(rng.choice(portfolio.positions).id)
        if not markets or portfolio.cash <= 0:
            return None
        fraction = Decimal(str(round(rng.uniform(0.001, self.max_fraction), 4)))
        amount = (portfolio.cash * fraction).quantize(Decimal("0.01"))
        if amount <= 0:
            return None
        return BuyOrder(rng.choice(markets).id, rng.choice([Side.YES, Side.NO]), amount)
