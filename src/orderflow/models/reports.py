"""Derived reports - wallet stats, FIFO profit, price levels, price history."""

from __future__ import annotations

from pydantic import BaseModel, Field


class WalletStats(BaseModel):
    """Trade counts and volumes for one wallet, split by side."""

    wallet: str
    total_trades: int = 0
    buy_count: int = 0
    sell_count: int = 0
    total_buy_volume: float = 0.0
    total_sell_volume: float = 0.0
    average_buy_price: float = 0.0
    average_sell_price: float = 0.0
    total_volume: float = 0.0


class OpenLot(BaseModel):
    """Unconsumed remainder of a BUY in the FIFO queue."""

    size: float
    price: float


class OutcomeProfit(BaseModel):
    outcome_index: int
    outcome: str | None = None
    realized_profit: float = 0.0
    unrealized_profit: float = 0.0
    open_position: float = Field(0.0, description="Positive = long, negative = unmatched sells")
    # Historical averages over every buy/sell seen, independent of the FIFO queue
    average_buy_price: float = 0.0
    average_sell_price: float = 0.0
    total_cost: float = 0.0
    total_revenue: float = 0.0
    # FIFO basis: remaining lots, head first
    open_lots: list[OpenLot] = Field(default_factory=list)
    average_open_lot_price: float = 0.0


class WalletProfit(BaseModel):
    wallet: str
    total_cost: float = 0.0
    total_revenue: float = 0.0
    realized_profit: float = 0.0
    unrealized_profit: float = 0.0
    total_profit: float = 0.0
    open_position: float = 0.0
    profit_by_outcome: list[OutcomeProfit] = Field(default_factory=list)

    def outcome(self, outcome_index: int) -> OutcomeProfit | None:
        for entry in self.profit_by_outcome:
            if entry.outcome_index == outcome_index:
                return entry
        return None


class RankedWalletProfit(WalletProfit):
    rank: int


class PriceLevelStats(BaseModel):
    """Activity at one exact price."""

    price: float
    buy_wallets: int = 0
    sell_wallets: int = 0
    buy_volume: float = 0.0
    sell_volume: float = 0.0
    buy_trades: int = 0
    sell_trades: int = 0
    total_volume: float = 0.0
    total_trades: int = 0
    wallets: list[str] = Field(default_factory=list)
    outcome_index: int | None = None


class ClosestPrice(BaseModel):
    price: float
    diff: float
    stats: PriceLevelStats


class PriceLookup(BaseModel):
    """Exact price lookup. When not found, closest holds the nearest traded prices."""

    price: float
    outcome_index: int | None = None
    found: bool
    stats: PriceLevelStats | None = None
    closest: list[ClosestPrice] = Field(default_factory=list)


class PriceSnapshot(BaseModel):
    """Volume-weighted price over one fixed-width time bucket."""

    timestamp: int  # bucket start, seconds
    price: float
    outcome_index: int | None = None
    outcome: str | None = None
    volume: float
    trades: int


class DetailedPriceSnapshot(BaseModel):
    """Buy and sell activity at one exact on-chain timestamp."""

    timestamp: int
    outcome_index: int | None = None
    outcome: str | None = None
    buy_price: float = 0.0
    buy_records: int = 0
    buy_wallets: int = 0
    buy_volume: float = 0.0
    sell_price: float = 0.0
    sell_records: int = 0
    sell_wallets: int = 0
    sell_volume: float = 0.0
    total_records: int = 0
    total_wallets: int = 0
    total_volume: float = 0.0
