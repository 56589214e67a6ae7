"""Momentum trader: buy the side that has been rising, take profit above cost."""

from __future__ import annotations

import random
from decimal import Decimal

from predictx.metrics.trend import price_change
from predictx.models.account import Portfolio
from predictx.models.market import MarketSnapshot, Side
from predictx.simulation.strategy import BuyOrder, Order, SellOrder, Strategy


class MomentumTrader(Strategy):
    def __init__(self, min_change: int = 3, take_profit_pct: float = 5.0, stake: Decimal = Decimal(50)) -> None:
        self.min_change = min_change
        self.take_profit_pct = take_profit_pct
        self.stake = stake

    def decide(self, portfolio: Portfolio, markets: list[MarketSnapshot], rng: random.Random) -> Order | None:
        for pos in portfolio.positions:
            if pos.pnl_pct >= self.take_profit_pct:
                return SellOrder(pos.id)
        ranked = sorted(markets, key=lambda m: abs(price_change(m.history)), reverse=True)
        for m in ranked:
            change = price_change(m.history)
            if abs(change) < self.min_change:
                break
            amount = min(self.stake, portfolio.cash)
            if amount <= 0:
                return None
            return BuyOrder(m.id, Side.YES if change > 0 else Side.NO, amount)
        return None
