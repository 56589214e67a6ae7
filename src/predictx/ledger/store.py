"""In-memory ledger: users, open positions, append-only trade log, market table.

Accessors are atomic per call. Business rules live in the trading engine; the
store only guards its containers. Readers get snapshot copies. A trade writes
balance and positions under the commit lock, so a reader holding it never sees
one without the other.
"""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock

from predictx.ledger.records import MarketRecord, PositionRecord, UserRecord
from predictx.models.market import Side
from predictx.models.trade import Trade


class LedgerStore:
    """Single shared mutable state for the exchange."""

    def __init__(self, markets: Iterable[MarketRecord] = ()) -> None:
        self._users: dict[str, UserRecord] = {}
        self._positions: dict[str, list[PositionRecord]] = {}
        self._user_locks: dict[str, Lock] = {}
        self._trades: list[Trade] = []
        self._markets: dict[int, MarketRecord] = {}
        self._lock = Lock()
        self._commit_lock = Lock()
        self.add_markets(markets)

    # --- Markets ---

    def add_markets(self, markets: Iterable[MarketRecord]) -> None:
        with self._lock:
            for m in markets:
                if m.id in self._markets:
                    raise ValueError(f"duplicate market id {m.id}")
                self._markets[m.id] = m

    def get_market(self, market_id: int) -> MarketRecord | None:
        return self._markets.get(market_id)

    def markets(self) -> list[MarketRecord]:
        """Markets in id order."""
        with self._lock:
            return list(self._markets.values())

    # --- Users ---

    def add_user(self, user: UserRecord) -> bool:
        """Insert a new user. False (nothing inserted) if the username or email is taken."""
        with self._lock:
            if user.id in self._users:
                raise ValueError(f"duplicate user id {user.id}")
            for u in self._users.values():
                if u.username == user.username or u.email == user.email:
                    return False
            self._users[user.id] = user
            self._positions[user.id] = []
            self._user_locks[user.id] = Lock()
            return True

    def get_user(self, user_id: str) -> UserRecord | None:
        return self._users.get(user_id)

    def find_user_by_email(self, email: str) -> UserRecord | None:
        return next((u for u in self.users() if u.email == email), None)

    def users(self) -> list[UserRecord]:
        """Users in registration order."""
        with self._lock:
            return list(self._users.values())

    def user_count(self) -> int:
        return len(self._users)

    def commit_lock(self) -> Lock:
        """Held while a trade writes balance and positions, and while a reader copies them.

        Taken after the user lock, never before it.
        """
        return self._commit_lock

    def user_lock(self, user_id: str) -> Lock:
        """Per-user lock serializing balance/position read-modify-write."""
        lock = self._user_locks.get(user_id)
        if lock is None:
            raise KeyError(user_id)
        return lock

    # --- Positions ---

    def positions(self, user_id: str) -> list[PositionRecord]:
        """Open positions for a user (oldest first), as a snapshot list."""
        with self._lock:
            return list(self._positions.get(user_id, ()))

    def find_position(self, user_id: str, position_id: str) -> PositionRecord | None:
        return next((p for p in self.positions(user_id) if p.id == position_id), None)

    def find_open_position(self, user_id: str, market_id: int, side: Side) -> PositionRecord | None:
        return next(
            (p for p in self.positions(user_id) if p.market_id == market_id and p.side is side),
            None,
        )

    def upsert_position(self, position: PositionRecord) -> None:
        with self._lock:
            held = self._positions.setdefault(position.user_id, [])
            if not any(p.id == position.id for p in held):
                held.append(position)

    def remove_position(self, user_id: str, position_id: str) -> PositionRecord | None:
        with self._lock:
            held = self._positions.get(user_id, [])
            for i, p in enumerate(held):
                if p.id == position_id:
                    return held.pop(i)
        return None

    # --- Trades ---

    def append_trade(self, trade: Trade) -> None:
        with self._lock:
            self._trades.append(trade)

    def trades(self, user_id: str | None = None) -> list[Trade]:
        with self._lock:
            if user_id is None:
                return list(self._trades)
            return [t for t in self._trades if t.user_id == user_id]

    def trade_count(self) -> int:
        return len(self._trades)
