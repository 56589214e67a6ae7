"""FastAPI app exposing the exchange. Caller identity comes from the X-User-Id header."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from predictx.api.schemas import (
    CategoriesResponse,
    ErrorResponse,
    HealthResponse,
    LeaderboardResponse,
    LoginRequest,
    MarketsListResponse,
    NetWorthResponse,
    RegisterRequest,
    SellRequest,
    SellResponse,
    TradeRequest,
    TradeResponse,
    UserResponse,
)
from predictx.config import get_settings
from predictx.errors import PredictXError
from predictx.exchange import Exchange
from predictx.models import ExchangeStats, MarketSnapshot, MarketTrend, Portfolio

log = structlog.get_logger(__name__)

# Set by run_api() so the lifespan can build the exchange from the chosen profile.
_config_profile: str | None = None

_ERRORS = {
    400: {"description": "Validation error", "model": ErrorResponse},
    401: {"description": "Missing or unknown caller", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
}


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def create_app(exchange: Exchange | None = None, run_price_process: bool = True) -> FastAPI:
    """Build the app. Without an exchange one is created from config at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.exchange is None:
            app.state.exchange = Exchange.from_settings(get_settings(_config_profile))
        price_task = None
        price_stop = None
        if run_price_process:
            price_stop = asyncio.Event()
            price_task = asyncio.create_task(app.state.exchange.prices.run(stop_event=price_stop))
        log.info("api_ready", markets=len(app.state.exchange.store.markets()), price_process=run_price_process)

        yield

        if price_task is not None and price_stop is not None:
            price_stop.set()
            await price_task

    app = FastAPI(title="PredictX API", version="0.1.0", lifespan=lifespan)
    app.state.exchange = exchange
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(PredictXError)
    async def _on_app_error(request: Request, exc: PredictXError) -> JSONResponse:
        return _error_json(exc.code, exc.message, exc.http_status)

    @app.exception_handler(RequestValidationError)
    async def _on_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        code = "INVALID_AMOUNT" if field == "amount" else "VALIDATION_ERROR"
        return _error_json(code, f"{field}: {first.get('msg', 'invalid request')}", 400)

    _register_routes(app)
    return app


class _Unauthorized(PredictXError):
    code = "UNAUTHORIZED"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("Unauthorized")


def _exchange(request: Request) -> Exchange:
    return request.app.state.exchange


def _caller(
    request: Request,
    x_user_id: str | None = Header(None, description="Registered user id"),
) -> str:
    """Resolve the caller. Session tokens are handled upstream; here only the id is checked."""
    if not x_user_id or _exchange(request).store.get_user(x_user_id) is None:
        raise _Unauthorized()
    return x_user_id


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        status = _exchange(request).prices.get_status()
        return HealthResponse(
            status="ok",
            ticks=status["tick_count"],
            ticks_per_sec=status["ticks_per_sec"],
            uptime_sec=status["elapsed_sec"],
        )

    # --- Accounts ---

    @app.post("/users", response_model=UserResponse, status_code=201, responses=_ERRORS)
    def register(body: RegisterRequest, request: Request) -> UserResponse:
        ex = _exchange(request)
        user = ex.accounts.register(body.username, body.email, body.password)
        return UserResponse(user=user.profile())

    @app.post("/login", response_model=UserResponse, responses=_ERRORS)
    def login(body: LoginRequest, request: Request) -> UserResponse:
        ex = _exchange(request)
        user = ex.accounts.authenticate(body.email, body.password)
        return UserResponse(user=ex.accounts.profile(user.id))

    @app.get("/me", response_model=UserResponse, responses=_ERRORS)
    def me(request: Request, user_id: str = Depends(_caller)) -> UserResponse:
        return UserResponse(user=_exchange(request).accounts.profile(user_id))

    @app.get("/me/portfolio", response_model=Portfolio, responses=_ERRORS)
    def portfolio(request: Request, user_id: str = Depends(_caller)) -> Portfolio:
        return _exchange(request).valuation.portfolio(user_id)

    @app.get("/me/net_worth", response_model=NetWorthResponse, responses=_ERRORS)
    def net_worth(request: Request, user_id: str = Depends(_caller)) -> NetWorthResponse:
        ex = _exchange(request)
        return NetWorthResponse(
            user_id=user_id,
            net_worth=ex.net_worth(user_id),
            rank=ex.valuation.rank_of(user_id),
        )

    # --- Markets ---

    @app.get("/categories", response_model=CategoriesResponse)
    def categories(request: Request) -> CategoriesResponse:
        return CategoriesResponse(categories=_exchange(request).categories())

    @app.get("/markets", response_model=MarketsListResponse)
    def markets_list(
        request: Request,
        cat: str | None = Query(None, description="Category id, or 'all'"),
        q: str | None = Query(None, description="Case-insensitive title search"),
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
    ) -> MarketsListResponse:
        total, markets = _exchange(request).list_markets(category=cat, query=q, limit=limit, offset=offset)
        return MarketsListResponse(markets=markets, total=total)

    @app.get("/markets/{market_id}", response_model=MarketSnapshot, responses=_ERRORS)
    def market_detail(market_id: int, request: Request) -> MarketSnapshot:
        return _exchange(request).market_snapshot(market_id)

    @app.get("/markets/{market_id}/trend", response_model=MarketTrend, responses=_ERRORS)
    def market_trend(market_id: int, request: Request) -> MarketTrend:
        return _exchange(request).market_trend(market_id)

    # --- Trading ---

    @app.post("/trade", response_model=TradeResponse, responses=_ERRORS)
    def trade(body: TradeRequest, request: Request, user_id: str = Depends(_caller)) -> TradeResponse:
        result = _exchange(request).buy(user_id, body.market_id, body.side, body.amount)
        return TradeResponse(
            balance=result.balance,
            shares=result.shares,
            price=result.price,
            position_id=result.position_id,
        )

    @app.post("/sell", response_model=SellResponse, responses=_ERRORS)
    def sell(body: SellRequest, request: Request, user_id: str = Depends(_caller)) -> SellResponse:
        result = _exchange(request).sell(user_id, body.position_id)
        return SellResponse(balance=result.balance, payout=result.payout, price=result.price, won=result.won)

    # --- Leaderboard / stats ---

    @app.get("/leaderboard", response_model=LeaderboardResponse)
    def leaderboard(
        request: Request,
        limit: int | None = Query(None, ge=1, le=1000),
    ) -> LeaderboardResponse:
        return LeaderboardResponse(leaderboard=_exchange(request).leaderboard(limit))

    @app.get("/stats", response_model=ExchangeStats)
    def stats(request: Request) -> ExchangeStats:
        return _exchange(request).valuation.stats()


app = create_app()


def run_api(
    host: str = "127.0.0.1",
    port: int = 3000,
    profile: str | None = None,
) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn

    uvicorn.run("predictx.api.main:app", host=host, port=port, reload=False)
