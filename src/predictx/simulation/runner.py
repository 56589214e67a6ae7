"""Bot load runner: register bots, interleave price ticks with bot orders, check conservation."""

from __future__ import annotations

import random
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from threading import Lock

import structlog

from predictx.errors import PredictXError
from predictx.exchange import Exchange
from predictx.models.account import LeaderboardEntry
from predictx.simulation.strategy import BuyOrder, SellOrder, Strategy

log = structlog.get_logger(__name__)


@dataclass
class BotLedger:
    """Cash flows seen by the runner for one bot, for the conservation check."""

    user_id: str
    strategy_name: str
    spent: Decimal = Decimal(0)
    received: Decimal = Decimal(0)


@dataclass
class RunResult:
    """Result of a simulation run."""

    run_id: str
    ticks: int
    buys: int
    sells: int
    rejected: int
    consistent: bool
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)
    params: dict = field(default_factory=dict)


class Counters:
    """Thread-safe order counters."""

    def __init__(self) -> None:
        self.buys = 0
        self.sells = 0
        self.rejected = 0
        self._lock = Lock()

    def hit(self, name: str) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)


def step_bot(
    exchange: Exchange,
    bot: BotLedger,
    strategy: Strategy,
    rng: random.Random,
    sample_size: int,
    counters: Counters,
) -> None:
    """Let one bot decide and place at most one order. Rejections are counted, not raised."""
    portfolio = exchange.valuation.portfolio(bot.user_id)
    markets = [m.snapshot() for m in rng.sample(exchange.store.markets(), sample_size)]
    order = strategy.decide(portfolio, markets, rng)
    if order is None:
        return
    try:
        if isinstance(order, BuyOrder):
            exchange.buy(bot.user_id, order.market_id, order.side, order.amount)
            bot.spent += order.amount
            counters.hit("buys")
        elif isinstance(order, SellOrder):
            result = exchange.sell(bot.user_id, order.position_id)
            bot.received += result.payout
            counters.hit("sells")
    except PredictXError as e:
        counters.hit("rejected")
        log.debug("bot_order_rejected", user_id=bot.user_id, code=e.code)


def check_conservation(exchange: Exchange, bots: list[BotLedger], starting_balance: Decimal) -> bool:
    """Every bot's cash equals start - spent + received, and no balance is negative."""
    ok = True
    for bot in bots:
        user = exchange.store.get_user(bot.user_id)
        expected = starting_balance - bot.spent + bot.received
        if user is None or user.balance != expected or user.balance < 0:
            log.error(
                "conservation_violated",
                user_id=bot.user_id,
                balance=str(user.balance if user else None),
                expected=str(expected),
            )
            ok = False
    return ok


def run_simulation(
    exchange: Exchange,
    strategies: list[Strategy],
    bots_per_strategy: int = 5,
    ticks: int = 100,
    sample_size: int = 10,
    workers: int = 1,
    rng: random.Random | None = None,
) -> RunResult:
    """Each tick advances prices once, then every bot gets one decision.

    With workers > 1 bots of a tick run on a thread pool, racing each other on
    shared market rows.
    """
    rng = rng or random.Random()
    run_id = str(uuid.uuid4())[:8]
    starting_balance = exchange.accounts.starting_balance
    bots: list[tuple[BotLedger, Strategy]] = []
    for strategy in strategies:
        name = type(strategy).__name__
        for i in range(bots_per_strategy):
            user = exchange.accounts.register(
                f"{name.lower()}_{run_id}_{i}",
                f"{name.lower()}_{run_id}_{i}@bots.local",
                uuid.uuid4().hex,
            )
            bots.append((BotLedger(user.id, name), strategy))
    sample_size = min(sample_size, len(exchange.store.markets()))
    counters = Counters()
    log.info("sim_started", run_id=run_id, bots=len(bots), ticks=ticks, workers=workers)

    with ThreadPoolExecutor(max_workers=max(workers, 1)) as pool:
        for _ in range(ticks):
            exchange.prices.tick()
            # one Random per bot per tick keeps threads off a shared generator
            seeds = [rng.random() for _ in bots]
            jobs = [
                pool.submit(step_bot, exchange, bot, strategy, random.Random(seed), sample_size, counters)
                for (bot, strategy), seed in zip(bots, seeds)
            ]
            for job in jobs:
                job.result()

    ledgers = [bot for bot, _ in bots]
    consistent = check_conservation(exchange, ledgers, starting_balance)
    log.info(
        "sim_finished",
        run_id=run_id,
        buys=counters.buys,
        sells=counters.sells,
        rejected=counters.rejected,
        consistent=consistent,
    )
    return RunResult(
        run_id=run_id,
        ticks=ticks,
        buys=counters.buys,
        sells=counters.sells,
        rejected=counters.rejected,
        consistent=consistent,
        leaderboard=exchange.leaderboard(),
        params={
            "strategies": [type(s).__name__ for s in strategies],
            "bots_per_strategy": bots_per_strategy,
            "workers": workers,
        },
    )
