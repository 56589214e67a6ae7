"""Trading engine: fills, cost basis, win/loss policy, rejections."""

from decimal import Decimal

import pytest

from predictx.errors import (
    InvalidAmountError,
    InvalidSideError,
    MarketNotFoundError,
    PositionNotFoundError,
    UserNotFoundError,
)
from predictx.models.market import Side


def test_buy_then_sell_after_price_move(store, engine, valuation, make_user):
    """Balance 10000, buy YES at 40 with 20, price moves to 60, sell."""
    user = make_user(store)
    result = engine.buy(user.id, 0, "YES", 20)
    assert result.shares == 50
    assert result.price == 40
    assert result.balance == Decimal(9980)

    store.get_market(0).apply_price(60)
    assert valuation.net_worth(user.id) == Decimal(10010)

    sold = engine.sell(user.id, result.position_id)
    assert sold.payout == Decimal(30)
    assert sold.balance == Decimal(10010)
    assert sold.won is True
    assert user.wins == 1 and user.losses == 0
    assert store.positions(user.id) == []


def test_buy_one_dollar_at_99_cents(store, engine, make_user):
    user = make_user(store)
    store.get_market(0).apply_price(99)
    result = engine.buy(user.id, 0, Side.YES, 1)
    assert result.shares == 1
    assert user.balance == Decimal(9999)


def test_no_side_priced_as_complement(store, engine, make_user):
    user = make_user(store)
    result = engine.buy(user.id, 0, "NO", 30)
    assert result.price == 60
    assert result.shares == 50
    pos = store.find_position(user.id, result.position_id)
    assert pos.side is Side.NO
    assert pos.avg_cost == Decimal(60)


def test_shares_truncate_never_round_up(store, engine, make_user):
    user = make_user(store)
    result = engine.buy(user.id, 1, "YES", 10)  # 10 / 0.75 = 13.33
    assert result.shares == 13
    assert user.balance == Decimal(9990)


def test_dust_trade_debits_without_opening_position(store, engine, make_user):
    user = make_user(store)
    market = store.get_market(1)
    volume, participants = market.volume, market.participants
    result = engine.buy(user.id, 1, "YES", Decimal("0.5"))  # 0.5 / 0.75 -> 0 shares
    assert result.shares == 0
    assert result.position_id is None
    assert user.balance == Decimal("9999.5")
    assert store.positions(user.id) == []
    assert market.volume == volume + Decimal("0.5")
    assert market.participants == participants + 1
    assert store.trades()[-1].shares == 0


def test_repeat_buy_merges_with_weighted_average(store, engine, make_user):
    user = make_user(store)
    first = engine.buy(user.id, 0, "YES", 20)  # 50 @ 40
    store.get_market(0).apply_price(50)
    second = engine.buy(user.id, 0, "YES", 25)  # 50 @ 50
    assert second.position_id == first.position_id
    positions = store.positions(user.id)
    assert len(positions) == 1
    assert positions[0].shares == 100
    assert positions[0].avg_cost == Decimal(45)


def test_weighted_average_independent_of_order(store, engine, make_user):
    a = make_user(store, "alice")
    b = make_user(store, "bob")
    market = store.get_market(0)

    engine.buy(a.id, 0, "YES", 20)  # 50 @ 40
    market.apply_price(70)
    engine.buy(a.id, 0, "YES", 70)  # 100 @ 70
    engine.buy(b.id, 0, "YES", 70)  # 100 @ 70
    market.apply_price(40)
    engine.buy(b.id, 0, "YES", 20)  # 50 @ 40

    pa, pb = store.positions(a.id)[0], store.positions(b.id)[0]
    assert pa.shares == pb.shares == 150
    assert pa.avg_cost == pb.avg_cost == Decimal(60)


def test_dust_fill_leaves_existing_position_unchanged(store, engine, make_user):
    user = make_user(store)
    engine.buy(user.id, 1, "YES", 15)  # 20 @ 75
    engine.buy(user.id, 1, "YES", Decimal("0.10"))
    pos = store.positions(user.id)[0]
    assert pos.shares == 20
    assert pos.avg_cost == Decimal(75)


def test_yes_and_no_on_same_market_are_separate_positions(store, engine, make_user):
    user = make_user(store)
    engine.buy(user.id, 0, "YES", 20)
    engine.buy(user.id, 0, "NO", 30)
    assert {p.side for p in store.positions(user.id)} == {Side.YES, Side.NO}


def test_spending_entire_balance_is_allowed(store, engine, make_user):
    user = make_user(store, balance=100)
    engine.buy(user.id, 0, "YES", 100)
    assert user.balance == 0


def test_buy_records_trade_and_market_activity(store, engine, make_user):
    user = make_user(store)
    market = store.get_market(0)
    engine.buy(user.id, 0, "YES", 20)
    engine.buy(user.id, 0, "YES", 20)
    trades = store.trades(user.id)
    assert [t.shares for t in trades] == [50, 50]
    assert all(t.price == 40 and t.amount == Decimal(20) for t in trades)
    assert market.volume == Decimal(1040)
    # counted per trade, not per distinct user
    assert market.participants == 12


def test_sell_at_equal_price_counts_as_loss(store, engine, make_user):
    user = make_user(store)
    result = engine.buy(user.id, 0, "YES", 20)
    sold = engine.sell(user.id, result.position_id)
    assert sold.payout == Decimal(20)
    assert sold.won is False
    assert user.losses == 1 and user.wins == 0


def test_sell_below_cost_counts_as_loss(store, engine, make_user):
    user = make_user(store)
    result = engine.buy(user.id, 0, "YES", 20)
    store.get_market(0).apply_price(30)
    sold = engine.sell(user.id, result.position_id)
    assert sold.payout == Decimal(15)
    assert user.balance == Decimal(9995)
    assert user.losses == 1


def test_buy_then_sell_at_same_price_loses_only_truncation(store, engine, valuation, make_user):
    user = make_user(store)
    before = valuation.net_worth(user.id)
    store.get_market(0).apply_price(30)
    result = engine.buy(user.id, 0, "YES", 10)  # 33 shares, 0.10 truncated away
    engine.sell(user.id, result.position_id)
    after = valuation.net_worth(user.id)
    assert before - after == Decimal("0.1")
    assert before - after < Decimal("0.30")


@pytest.mark.parametrize("side", ["MAYBE", "yes", "", None, 1])
def test_invalid_side_rejected(store, engine, make_user, side):
    user = make_user(store)
    with pytest.raises(InvalidSideError):
        engine.buy(user.id, 0, side, 20)
    assert user.balance == Decimal(10000)


@pytest.mark.parametrize(
    "amount",
    [0, -5, "abc", float("nan"), Decimal("Infinity"), None, True, 10000.01, Decimal("1e-28"), Decimal("0.001"), "20.005"],
)
def test_invalid_amount_rejected_without_mutation(store, engine, make_user, amount):
    user = make_user(store)
    market = store.get_market(0)
    with pytest.raises(InvalidAmountError):
        engine.buy(user.id, 0, "YES", amount)
    assert user.balance == Decimal(10000)
    assert store.trades() == []
    assert market.volume == Decimal(1000)
    assert market.participants == 10


@pytest.mark.parametrize("market_id", [999, -1, "0", None])
def test_unknown_market_rejected(store, engine, make_user, market_id):
    user = make_user(store)
    with pytest.raises(MarketNotFoundError):
        engine.buy(user.id, market_id, "YES", 20)
    assert user.balance == Decimal(10000)
    assert store.trades() == []


def test_unknown_user_rejected(engine):
    with pytest.raises(UserNotFoundError):
        engine.buy("nobody", 0, "YES", 20)
    with pytest.raises(UserNotFoundError):
        engine.sell("nobody", "pos")


def test_sell_unknown_position(store, engine, make_user):
    user = make_user(store)
    with pytest.raises(PositionNotFoundError):
        engine.sell(user.id, "missing")


def test_cannot_sell_another_users_position(store, engine, make_user):
    alice = make_user(store, "alice")
    mallory = make_user(store, "mallory")
    result = engine.buy(alice.id, 0, "YES", 20)
    with pytest.raises(PositionNotFoundError):
        engine.sell(mallory.id, result.position_id)
    assert len(store.positions(alice.id)) == 1
    assert mallory.balance == Decimal(10000)


def test_sold_position_cannot_be_sold_twice(store, engine, make_user):
    user = make_user(store)
    result = engine.buy(user.id, 0, "YES", 20)
    engine.sell(user.id, result.position_id)
    with pytest.raises(PositionNotFoundError):
        engine.sell(user.id, result.position_id)
    assert user.balance == Decimal(10000)


def test_cent_amounts_debit_exactly(store, engine, make_user):
    user = make_user(store)
    market = store.get_market(0)
    result = engine.buy(user.id, 0, "YES", "20.25")
    assert result.shares == 50
    assert user.balance == Decimal("9979.75")
    assert market.volume == Decimal("1020.25")
    assert result.trade.amount == Decimal("20.25")
