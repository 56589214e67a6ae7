"""Price process - bounded random walk on every market's YES price, on a fixed cadence."""

from __future__ import annotations

import asyncio
import math
import random
import time

import structlog

from predictx.ledger.records import now_ms
from predictx.ledger.store import LedgerStore
from predictx.models.market import PRICE_MAX, PRICE_MIN

log = structlog.get_logger(__name__)


def next_price(yes_price: int, delta: float) -> int:
    """Apply delta, round half up to the nearest cent, clamp to [1, 99]."""
    moved = math.floor(yes_price + delta + 0.5)
    return max(PRICE_MIN, min(PRICE_MAX, moved))


class PriceProcess:
    """Advances all market prices every `interval_sec`. The only writer of price/history."""

    def __init__(
        self,
        store: LedgerStore,
        interval_sec: float = 0.5,
        max_step: float = 1.5,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.interval_sec = interval_sec
        self.max_step = max_step
        self.rng = rng or random.Random()
        self.tick_count = 0
        self._start_ts: float | None = None

    def tick(self) -> int:
        """One step for every market. Returns the number of markets updated."""
        ts = now_ms()
        markets = self.store.markets()
        for m in markets:
            delta = self.rng.uniform(-self.max_step, self.max_step)
            m.apply_price(next_price(m.yes_price, delta), ts)
        self.tick_count += 1
        return len(markets)

    def run_ticks(self, n: int) -> None:
        """Advance n ticks synchronously (no sleeping)."""
        for _ in range(n):
            self.tick()

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Tick every interval until stop_event is set. Never waits on readers."""
        stop = stop_event or asyncio.Event()
        self._start_ts = time.time()
        log.info("price_process_started", markets=len(self.store.markets()), interval_sec=self.interval_sec)
        while not stop.is_set():
            self.tick()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_sec)
            except asyncio.TimeoutError:
                pass
        log.info("price_process_stopped", ticks=self.tick_count)

    def get_status(self) -> dict[str, float | int]:
        """Return tick_count, elapsed_sec, ticks_per_sec."""
        elapsed = (time.time() - self._start_ts) if self._start_ts else 0
        return {
            "tick_count": self.tick_count,
            "elapsed_sec": round(elapsed, 1),
            "ticks_per_sec": round(self.tick_count / elapsed, 2) if elapsed > 0 else 0,
        }
