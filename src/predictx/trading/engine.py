"""Trading engine - instant fills against the synthetic market-maker price.

No order book, no price impact, no partial fills. Every buy/sell validates all
preconditions before its first write and runs under the caller's user lock, so
two orders for the same user never interleave their balance read-modify-write.
Orders from different users only meet on the market row lock.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import structlog

from predictx.errors import (
    InvalidAmountError,
    InvalidSideError,
    MarketNotFoundError,
    PositionNotFoundError,
    UserNotFoundError,
)
from predictx.ledger.records import (
    TITLE_SNIPPET_LEN,
    MarketRecord,
    PositionRecord,
    UserRecord,
    now_ms,
)
from predictx.ledger.store import LedgerStore
from predictx.models.account import BuyResult, SellResult
from predictx.models.market import Side
from predictx.models.trade import Trade
from predictx.money import position_value, shares_for, to_cents, weighted_avg_cost

log = structlog.get_logger(__name__)


def parse_side(side: object) -> Side:
    """'YES'/'NO' (or Side) -> Side. Case-sensitive, like the wire format."""
    if isinstance(side, Side):
        return side
    try:
        return Side(side)
    except (TypeError, ValueError):
        raise InvalidSideError(side) from None


class TradingEngine:
    """Executes buy/sell against the ledger. The only writer of balances and positions."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def _user(self, user_id: str) -> UserRecord:
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _market(self, market_id: object) -> MarketRecord:
        market = None
        if isinstance(market_id, int) and not isinstance(market_id, bool):
            market = self.store.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def buy(self, user_id: str, market_id: int, side: Side | str, amount: object) -> BuyResult:
        """Spend `amount` cash on `side` of `market_id` at the current price.

        `amount` must be whole cents. shares = floor(amount / (price / 100)). The
        full amount is debited even when that truncates to zero shares.
        """
        side = parse_side(side)
        user = self._user(user_id)
        cash = to_cents(amount)
        if cash is None or cash <= 0:
            log.warning("buy_rejected", code=InvalidAmountError.code, user_id=user_id, amount=str(amount))
            raise InvalidAmountError(amount)
        market = self._market(market_id)

        with self.store.user_lock(user.id):
            if cash > user.balance:
                log.warning("buy_rejected", code=InvalidAmountError.code, user_id=user_id, amount=str(cash))
                raise InvalidAmountError(cash, user.balance)
            price = market.price_for(side)
            shares = shares_for(cash, price)

            with self.store.commit_lock():
                user.balance -= cash
                market.record_fill(cash)

                position = self.store.find_open_position(user.id, market.id, side)
                if position is not None:
                    if shares > 0:
                        position.avg_cost = weighted_avg_cost(position.avg_cost, position.shares, price, shares)
                        position.shares += shares
                elif shares > 0:
                    position = PositionRecord(
                        id=str(uuid.uuid4()),
                        user_id=user.id,
                        market_id=market.id,
                        side=side,
                        shares=shares,
                        avg_cost=Decimal(price),
                        title=market.title[:TITLE_SNIPPET_LEN],
                    )
                    self.store.upsert_position(position)

            trade = Trade(
                id=str(uuid.uuid4()),
                user_id=user.id,
                market_id=market.id,
                side=side,
                shares=shares,
                price=price,
                amount=cash,
                timestamp=now_ms(),
            )
            self.store.append_trade(trade)
            balance = user.balance

        log.info(
            "trade_executed",
            user_id=user.id,
            market_id=market.id,
            side=side.value,
            price=price,
            amount=str(cash),
            shares=shares,
        )
        return BuyResult(
            balance=balance,
            shares=shares,
            price=price,
            position_id=position.id if position is not None else None,
            trade=trade,
        )

    def sell(self, user_id: str, position_id: str) -> SellResult:
        """Close a whole position at the side's current price.

        A sell above average cost counts as a win; at or below it, a loss.
        """
        user = self._user(user_id)
        with self.store.user_lock(user.id):
            position = self.store.find_position(user.id, position_id)
            if position is None:
                log.warning("sell_rejected", code=PositionNotFoundError.code, user_id=user_id, position_id=position_id)
                raise PositionNotFoundError(position_id)
            market = self._market(position.market_id)
            price = market.price_for(position.side)
            payout = position_value(position.shares, price)

            won = price > position.avg_cost
            with self.store.commit_lock():
                user.balance += payout
                if won:
                    user.wins += 1
                else:
                    user.losses += 1
                self.store.remove_position(user.id, position.id)
            balance = user.balance

        log.info(
            "position_closed",
            user_id=user.id,
            position_id=position.id,
            market_id=position.market_id,
            side=position.side.value,
            price=price,
            avg_cost=str(position.avg_cost),
            payout=str(payout),
            won=won,
        )
        return SellResult(balance=balance, payout=payout, price=price, won=won)
