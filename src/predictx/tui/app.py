"""Textual TUI dashboard - live market board, leaderboard, engine health."""

from __future__ import annotations

import asyncio
import random
import uuid
from typing import Any

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from predictx.exchange import Exchange
from predictx.metrics.trend import direction, sparkline
from predictx.money import money_display
from predictx.simulation.runner import BotLedger, Counters, step_bot
from predictx.simulation.strategies.random_trader import RandomTrader


class HealthPanel(Static):
    """Price process and ledger counters."""

    ticks = reactive(0)
    rate = reactive(0.0)
    users = reactive(0)
    trades = reactive(0)

    def render(self) -> str:
        return (
            f"[bold]Ticks[/] {self.ticks} ({self.rate}/s)  |  "
            f"Users: {self.users}  |  "
            f"Trades: {self.trades}"
        )


class MarketTable(DataTable):
    """Top markets by volume with live prices and history sparkline."""

    def __init__(self, exchange: Exchange, rows: int = 20, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._exchange = exchange
        self._rows = rows

    def on_mount(self) -> None:
        self.add_columns("#", "Market", "YES", "NO", "Trend", "Volume")

    def refresh_rows(self) -> None:
        self.clear()
        markets = sorted(self._exchange.store.markets(), key=lambda m: m.volume, reverse=True)[: self._rows]
        for m in markets:
            snap = m.snapshot()
            arrow = {"up": "↗", "down": "↘"}.get(direction(snap.history), "→")
            self.add_row(
                str(snap.id),
                snap.title[:40] + "..." if len(snap.title) > 40 else snap.title,
                f"{snap.yes_price}¢",
                f"{snap.no_price}¢",
                f"{sparkline(snap.history[-12:])} {arrow}",
                f"{snap.volume:,.0f}",
            )


class LeaderboardTable(DataTable):
    """Net-worth ranking, recomputed on every refresh."""

    def __init__(self, exchange: Exchange, rows: int = 10, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._exchange = exchange
        self._rows = rows

    def on_mount(self) -> None:
        self.add_columns("Rank", "User", "Net worth", "Win rate")

    def refresh_rows(self) -> None:
        self.clear()
        for e in self._exchange.leaderboard(self._rows):
            self.add_row(str(e.rank), e.username[:24], money_display(e.net_worth), f"{e.win_rate:.0%}")


class PredictXTUI(App[None]):
    """PredictX TUI - live prices and rankings."""

    TITLE = "PredictX"
    BINDINGS = [("q", "quit", "Quit")]

    def __init__(self, exchange: Exchange, bots: int = 0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._exchange = exchange
        self._stop_event = asyncio.Event()
        self._price_task: asyncio.Task[None] | None = None
        self._rng = random.Random()
        self._strategy = RandomTrader()
        self._counters = Counters()
        self._bots = [
            BotLedger(self._register_bot(i), "RandomTrader")
            for i in range(bots)
        ]

    def _register_bot(self, i: int) -> str:
        tag = uuid.uuid4().hex[:6]
        user = self._exchange.accounts.register(f"bot_{tag}_{i}", f"bot_{tag}_{i}@bots.local", uuid.uuid4().hex)
        return user.id

    def compose(self) -> ComposeResult:
        yield Header()
        yield HealthPanel(id="health")
        with Horizontal():
            yield MarketTable(self._exchange, id="markets")
            yield LeaderboardTable(self._exchange, id="leaderboard")
        yield Footer()

    def on_mount(self) -> None:
        self._price_task = asyncio.create_task(self._exchange.prices.run(stop_event=self._stop_event))
        self.set_interval(0.5, self._refresh)

    def _refresh(self) -> None:
        sample = min(10, len(self._exchange.store.markets()))
        for bot in self._bots:
            step_bot(self._exchange, bot, self._strategy, self._rng, sample, self._counters)
        health = self.query_one(HealthPanel)
        status = self._exchange.prices.get_status()
        health.ticks = status["tick_count"]
        health.rate = status["ticks_per_sec"]
        health.users = self._exchange.store.user_count()
        health.trades = self._exchange.store.trade_count()
        self.query_one(MarketTable).refresh_rows()
        self.query_one(LeaderboardTable).refresh_rows()

    def on_unmount(self) -> None:
        self._stop_event.set()
        if self._price_task and not self._price_task.done():
            self._price_task.cancel()


def run_tui(settings: Any, bots: int = 0) -> None:
    """Entry point: seed an exchange and run the TUI."""
    exchange = Exchange.from_settings(settings)
    app = PredictXTUI(exchange, bots=bots)
    app.run()
