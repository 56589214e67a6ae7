"""Valuation service - read-only mark-to-market aggregation over the ledger.

Always re-reads live prices; nothing is cached because prices move on every
tick. Never takes user locks. A user's cash and positions are copied together
under the store's commit lock, so a trade is either fully reflected in a
valuation or not at all.
"""

from __future__ import annotations

from decimal import Decimal

from predictx.errors import UserNotFoundError
from predictx.ledger.records import UserRecord
from predictx.ledger.store import LedgerStore
from predictx.models.account import (
    ExchangeStats,
    LeaderboardEntry,
    Portfolio,
    PortfolioPosition,
    PositionView,
)
from predictx.money import position_value


class ValuationService:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def _user(self, user_id: str) -> UserRecord:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _holdings(self, user: UserRecord) -> tuple[Decimal, list[PositionView]]:
        """Consistent (cash, positions) copy for one user."""
        with self.store.commit_lock():
            return user.balance, [p.view() for p in self.store.positions(user.id)]

    def _current_price(self, position: PositionView) -> int:
        market = self.store.get_market(position.market_id)
        assert market is not None, position.market_id
        return market.price_for(position.side)

    def _marked(self, positions: list[PositionView]) -> Decimal:
        return sum(
            (position_value(p.shares, self._current_price(p)) for p in positions),
            Decimal(0),
        )

    def positions_value(self, user_id: str) -> Decimal:
        """Sum of shares x current side price / 100 over open positions."""
        _, positions = self._holdings(self._user(user_id))
        return self._marked(positions)

    def net_worth(self, user_id: str) -> Decimal:
        """Cash plus mark-to-market value of open positions."""
        cash, positions = self._holdings(self._user(user_id))
        return cash + self._marked(positions)

    def _ranked(self) -> list[tuple[UserRecord, Decimal]]:
        """All users by net worth, descending; ties keep registration order."""
        valued = []
        for u in self.store.users():
            cash, positions = self._holdings(u)
            valued.append((u, cash + self._marked(positions)))
        return sorted(valued, key=lambda item: item[1], reverse=True)

    def leaderboard(self, limit: int = 100) -> list[LeaderboardEntry]:
        """Public ranking. Entries carry usernames only, never account ids."""
        return [
            LeaderboardEntry(
                rank=i + 1,
                username=u.username,
                net_worth=worth,
                wins=u.wins,
                losses=u.losses,
                win_rate=u.win_rate,
            )
            for i, (u, worth) in enumerate(self._ranked()[: max(limit, 0)])
        ]

    def rank_of(self, user_id: str) -> int:
        """1-based rank of a user on the full leaderboard."""
        user = self._user(user_id)
        return next(i + 1 for i, (u, _) in enumerate(self._ranked()) if u is user)

    def portfolio(self, user_id: str) -> Portfolio:
        """Wallet view: cash, each open position marked to market, totals."""
        user = self._user(user_id)
        cash, positions = self._holdings(user)
        rows: list[PortfolioPosition] = []
        for p in positions:
            current = self._current_price(p)
            rows.append(
                PortfolioPosition(
                    **p.model_dump(),
                    current_price=current,
                    value=position_value(p.shares, current),
                    pnl_pct=round(float((current - p.avg_cost) / p.avg_cost * 100), 1),
                )
            )
        held = sum((r.value for r in rows), Decimal(0))
        return Portfolio(user_id=user.id, cash=cash, positions_value=held, total=cash + held, positions=rows)

    def stats(self) -> ExchangeStats:
        markets = self.store.markets()
        return ExchangeStats(
            total_markets=len(markets),
            total_users=self.store.user_count(),
            total_volume=sum((m.volume for m in markets), Decimal(0)),
            total_trades=self.store.trade_count(),
        )
