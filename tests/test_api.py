"""HTTP API over an in-memory exchange."""

import pytest
from fastapi.testclient import TestClient

from predictx.api.main import create_app


@pytest.fixture
def client(exchange):
    with TestClient(create_app(exchange, run_price_process=False)) as c:
        yield c


def _register(client, username="alice"):
    resp = client.post(
        "/users",
        json={"username": username, "email": f"{username}@example.com", "password": "secret1"},
    )
    assert resp.status_code == 201
    return resp.json()["user"]


def _auth(user):
    return {"X-User-Id": user["id"]}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_and_login(client):
    user = _register(client)
    assert user["balance"] == 10000
    assert "password_hash" not in user
    resp = client.post("/login", json={"email": "alice@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == user["id"]

    resp = client.post("/login", json={"email": "alice@example.com", "password": "wrong!!"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_CREDENTIALS"


def test_register_errors(client):
    _register(client)
    resp = client.post("/users", json={"username": "alice", "email": "x@example.com", "password": "secret1"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "USER_EXISTS"
    resp = client.post("/users", json={"username": "al", "email": "al@example.com", "password": "secret1"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_REGISTRATION"


def test_me_requires_caller(client):
    assert client.get("/me").status_code == 401
    resp = client.get("/me", headers={"X-User-Id": "ghost"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_trade_sell_flow(client, exchange):
    user = _register(client)
    resp = client.post("/trade", json={"market_id": 0, "side": "YES", "amount": 20}, headers=_auth(user))
    assert resp.status_code == 200
    body = resp.json()
    assert body["shares"] == 50
    assert body["price"] == 40
    assert body["balance"] == 9980

    exchange.store.get_market(0).apply_price(60)
    resp = client.get("/me/net_worth", headers=_auth(user))
    assert resp.json()["net_worth"] == 10010
    assert resp.json()["rank"] == 1

    portfolio = client.get("/me/portfolio", headers=_auth(user)).json()
    assert portfolio["positions"][0]["current_price"] == 60
    assert portfolio["total"] == 10010

    resp = client.post("/sell", json={"position_id": body["position_id"]}, headers=_auth(user))
    assert resp.status_code == 200
    assert resp.json() == {"balance": 10010.0, "payout": 30.0, "price": 60, "won": True}

    me = client.get("/me", headers=_auth(user)).json()["user"]
    assert me["wins"] == 1
    assert me["positions"] == []


@pytest.mark.parametrize(
    "payload,status,code",
    [
        ({"market_id": 0, "side": "MAYBE", "amount": 20}, 400, "INVALID_SIDE"),
        ({"market_id": 0, "side": "YES", "amount": -5}, 400, "INVALID_AMOUNT"),
        ({"market_id": 0, "side": "YES", "amount": "lots"}, 400, "INVALID_AMOUNT"),
        ({"market_id": 0, "side": "YES", "amount": 20000}, 400, "INVALID_AMOUNT"),
        ({"market_id": 999, "side": "YES", "amount": 20}, 404, "MARKET_NOT_FOUND"),
    ],
)
def test_trade_errors(client, exchange, payload, status, code):
    user = _register(client)
    resp = client.post("/trade", json=payload, headers=_auth(user))
    assert resp.status_code == status
    assert resp.json()["code"] == code
    assert exchange.store.get_user(user["id"]).balance == 10000


def test_sell_unknown_position(client):
    user = _register(client)
    resp = client.post("/sell", json={"position_id": "nope"}, headers=_auth(user))
    assert resp.status_code == 404
    assert resp.json()["code"] == "POSITION_NOT_FOUND"


def test_markets_listing_and_detail(client):
    body = client.get("/markets", params={"cat": "crypto"}).json()
    assert body["total"] == 2
    assert {m["id"] for m in body["markets"]} == {0, 2}

    body = client.get("/markets", params={"q": "lakers"}).json()
    assert [m["id"] for m in body["markets"]] == [1]

    body = client.get("/markets", params={"cat": "all", "limit": 2, "offset": 1}).json()
    assert body["total"] == 4
    assert [m["id"] for m in body["markets"]] == [1, 2]

    detail = client.get("/markets/3").json()
    assert (detail["yes_price"], detail["no_price"]) == (10, 90)
    assert detail["history"] == [10] * 5

    trend = client.get("/markets/3/trend").json()
    assert trend["direction"] == "flat"

    resp = client.get("/markets/99")
    assert resp.status_code == 404
    assert resp.json()["code"] == "MARKET_NOT_FOUND"


def test_categories(client):
    cats = client.get("/categories").json()["categories"]
    assert [c["id"] for c in cats][:2] == ["crypto", "economy"]


def test_leaderboard_and_stats(client, exchange):
    alice = _register(client, "alice")
    bob = _register(client, "bob")
    client.post("/trade", json={"market_id": 3, "side": "YES", "amount": 10}, headers=_auth(bob))
    exchange.store.get_market(3).apply_price(20)

    board = client.get("/leaderboard").json()["leaderboard"]
    assert [e["username"] for e in board] == ["bob", "alice"]
    assert board[0]["net_worth"] == 10010
    # ids authenticate requests, so the public board must not carry them
    assert all("user_id" not in e for e in board)
    assert alice["id"] not in client.get("/leaderboard").text
    assert len(client.get("/leaderboard", params={"limit": 1}).json()["leaderboard"]) == 1

    stats = client.get("/stats").json()
    assert stats["total_users"] == 2
    assert stats["total_trades"] == 1
    assert stats["total_markets"] == 4


def test_health_reports_price_process_status(client, exchange):
    exchange.prices.run_ticks(3)
    body = client.get("/health").json()
    assert body["ticks"] == 3
    assert body["ticks_per_sec"] >= 0
    assert body["uptime_sec"] >= 0


def test_leaderboard_username_is_not_a_caller_id(client):
    _register(client, "alice")
    board = client.get("/leaderboard").json()["leaderboard"]
    resp = client.post(
        "/trade",
        json={"market_id": 0, "side": "YES", "amount": 9000},
        headers={"X-User-Id": board[0]["username"]},
    )
    assert resp.status_code == 401
