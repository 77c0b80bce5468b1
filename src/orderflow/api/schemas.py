"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from orderflow.models import (
    DetailedPriceSnapshot,
    PriceLevelStats,
    PriceSnapshot,
    RankedWalletProfit,
    TradeEvent,
    WalletStats,
)


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. no_trades, not_found")


# --- File tree ---
class SessionItem(BaseModel):
    slug: str
    files: int
    updated_at: str | None = None


class SessionsListResponse(BaseModel):
    sessions: list[SessionItem]
    total: int


class WalletFileItem(BaseModel):
    wallet: str
    file: str
    updated_at: str | None = None


class WalletsListResponse(BaseModel):
    wallets: list[WalletFileItem]
    total: int


class TradesResponse(BaseModel):
    slug: str
    total: int
    trades: list[TradeEvent]


# --- Analytics ---
class TopWalletStatsResponse(BaseModel):
    slug: str
    by: str
    wallets: list[WalletStats]


class TopWalletProfitResponse(BaseModel):
    slug: str
    wallets: list[RankedWalletProfit]


class PriceLevelsResponse(BaseModel):
    slug: str
    outcome_index: int | None = None
    levels: list[PriceLevelStats]


class IntervalHistoryResponse(BaseModel):
    slug: str
    interval: int
    outcome_index: int | None = None
    snapshots: list[PriceSnapshot]


class TimestampHistoryResponse(BaseModel):
    slug: str
    outcome_index: int | None = None
    snapshots: list[DetailedPriceSnapshot]
