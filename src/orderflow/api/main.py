"""FastAPI read-only API over the trade file tree and its analytics."""

from __future__ import annotations

from pathlib import Path

import structlog
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orderflow.analysis import (
    aggregate_by_price,
    compute_wallet_stats,
    lookup_price_stats,
    rank_wallets_by_profit,
    rank_wallets_by_trade_count,
    rank_wallets_by_volume,
    track_price_by_interval,
    track_price_by_timestamp,
)
from orderflow.analysis.profit import compute_wallet_profit, parse_current_prices
from orderflow.api.schemas import (
    ErrorResponse,
    HealthResponse,
    IntervalHistoryResponse,
    PriceLevelsResponse,
    SessionsListResponse,
    TimestampHistoryResponse,
    TopWalletProfitResponse,
    TopWalletStatsResponse,
    TradesResponse,
    WalletsListResponse,
)
from orderflow.config import get_settings
from orderflow.models import PriceLookup, TradeEvent, WalletProfit, WalletStats
from orderflow.storage.loader import list_sessions, list_wallet_files, load_trades

log = structlog.get_logger(__name__)

# Set by run_api() so request handlers read the same profile and data dir as the CLI.
_config_profile: str | None = None
_data_dir: Path | None = None

app = FastAPI(title="Orderflow API", version="0.1.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


def _get_data_dir() -> Path:
    if _data_dir is not None:
        return _data_dir
    return get_settings(_config_profile).data_dir


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _session_trades(slug: str) -> list[TradeEvent]:
    return load_trades(slug, _get_data_dir())


def _no_trades(slug: str) -> JSONResponse:
    return _error_json("no_trades", f"No trades found for session: {slug}")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/sessions", response_model=SessionsListResponse)
def sessions_list() -> SessionsListResponse:
    sessions = list_sessions(_get_data_dir())
    return SessionsListResponse(sessions=sessions, total=len(sessions))


@app.get("/wallets", response_model=WalletsListResponse)
def wallets_list() -> WalletsListResponse:
    wallets = list_wallet_files(_get_data_dir())
    return WalletsListResponse(wallets=wallets, total=len(wallets))


@app.get("/sessions/{slug}/trades", response_model=TradesResponse, responses=_NOT_FOUND)
def session_trades(
    slug: str,
    limit: int = Query(500, ge=1, le=5000),
    offset: int = Query(0, ge=0),
):
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    return TradesResponse(slug=slug, total=len(trades), trades=trades[offset : offset + limit])


@app.get("/sessions/{slug}/wallets/{wallet}/stats", response_model=WalletStats, responses=_NOT_FOUND)
def wallet_stats(slug: str, wallet: str):
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    stats = compute_wallet_stats(trades, wallet)
    if stats.total_trades == 0:
        return _error_json("not_found", f"Wallet {wallet} has no trades in session {slug}")
    return stats


@app.get("/sessions/{slug}/wallets/{wallet}/profit", response_model=WalletProfit, responses=_NOT_FOUND)
def wallet_profit(
    slug: str,
    wallet: str,
    price: list[str] = Query([], description="Current price per outcome as OUTCOME_INDEX:PRICE"),
):
    try:
        current_prices = parse_current_prices(price)
    except ValueError as e:
        return _error_json("invalid_price", str(e), status_code=422)
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    return compute_wallet_profit(trades, wallet, current_prices)


@app.get("/sessions/{slug}/top/profit", response_model=TopWalletProfitResponse, responses=_NOT_FOUND)
def top_wallets_by_profit(
    slug: str,
    limit: int = Query(10, ge=1, le=500),
    price: list[str] = Query([], description="Current price per outcome as OUTCOME_INDEX:PRICE"),
):
    try:
        current_prices = parse_current_prices(price)
    except ValueError as e:
        return _error_json("invalid_price", str(e), status_code=422)
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    return TopWalletProfitResponse(slug=slug, wallets=rank_wallets_by_profit(trades, limit, current_prices))


@app.get("/sessions/{slug}/top/{by}", response_model=TopWalletStatsResponse, responses=_NOT_FOUND)
def top_wallets(slug: str, by: str, limit: int = Query(10, ge=1, le=500)):
    rankers = {"trades": rank_wallets_by_trade_count, "volume": rank_wallets_by_volume}
    if by not in rankers:
        return _error_json("not_found", f"Unknown ranking: {by} (use trades, volume or profit)")
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    return TopWalletStatsResponse(slug=slug, by=by, wallets=rankers[by](trades, limit))


@app.get("/sessions/{slug}/prices", response_model=PriceLevelsResponse, responses=_NOT_FOUND)
def price_levels(slug: str, outcome_index: int | None = Query(None)):
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    levels = aggregate_by_price(trades, outcome_index)
    return PriceLevelsResponse(slug=slug, outcome_index=outcome_index, levels=list(levels.values()))


@app.get("/sessions/{slug}/prices/{price}", response_model=PriceLookup, responses=_NOT_FOUND)
def price_lookup(slug: str, price: float, outcome_index: int | None = Query(None)):
    """Exact price stats; when absent, found=false with the closest traded prices."""
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    closest_limit = get_settings(_config_profile).closest_limit
    return lookup_price_stats(trades, price, outcome_index, closest_limit=closest_limit)


@app.get("/sessions/{slug}/history/interval", response_model=IntervalHistoryResponse, responses=_NOT_FOUND)
def history_by_interval(
    slug: str,
    interval: int = Query(60, ge=1, description="Bucket width in seconds"),
    outcome_index: int | None = Query(None),
):
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    snapshots = track_price_by_interval(trades, interval, outcome_index)
    return IntervalHistoryResponse(slug=slug, interval=interval, outcome_index=outcome_index, snapshots=snapshots)


@app.get("/sessions/{slug}/history/timestamps", response_model=TimestampHistoryResponse, responses=_NOT_FOUND)
def history_by_timestamp(slug: str, outcome_index: int | None = Query(None)):
    trades = _session_trades(slug)
    if not trades:
        return _no_trades(slug)
    snapshots = track_price_by_timestamp(trades, outcome_index)
    return TimestampHistoryResponse(slug=slug, outcome_index=outcome_index, snapshots=snapshots)


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    data_dir: Path | None = None,
) -> None:
    global _config_profile, _data_dir
    _config_profile = profile
    _data_dir = data_dir
    log.info("api_starting", host=host, port=port, data_dir=str(_get_data_dir()))
    import uvicorn
    uvicorn.run("orderflow.api.main:app", host=host, port=port, reload=False)
