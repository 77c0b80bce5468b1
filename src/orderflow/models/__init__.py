"""Canonical schema (Pydantic) - TradeEvent and derived reports."""

from orderflow.models.reports import (
    ClosestPrice,
    DetailedPriceSnapshot,
    OpenLot,
    OutcomeProfit,
    PriceLevelStats,
    PriceLookup,
    PriceSnapshot,
    RankedWalletProfit,
    WalletProfit,
    WalletStats,
)
from orderflow.models.trade import Side, TradeEvent, normalize_wallet

__all__ = [
    "Side",
    "TradeEvent",
    "normalize_wallet",
    "WalletStats",
    "OpenLot",
    "OutcomeProfit",
    "WalletProfit",
    "RankedWalletProfit",
    "PriceLevelStats",
    "ClosestPrice",
    "PriceLookup",
    "PriceSnapshot",
    "DetailedPriceSnapshot",
]
