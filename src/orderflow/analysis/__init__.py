"""Trade log analytics: wallet stats, FIFO profit, price levels, price history."""

from orderflow.analysis.price_history import (
    price_change,
    track_price_by_interval,
    track_price_by_timestamp,
)
from orderflow.analysis.price_levels import aggregate_by_price, closest_prices, lookup_price_stats
from orderflow.analysis.profit import compute_wallet_profit, rank_wallets_by_profit
from orderflow.analysis.wallets import (
    compute_all_wallet_stats,
    compute_wallet_stats,
    list_wallets,
    rank_wallets_by_trade_count,
    rank_wallets_by_volume,
)

__all__ = [
    "aggregate_by_price",
    "closest_prices",
    "compute_all_wallet_stats",
    "compute_wallet_profit",
    "compute_wallet_stats",
    "list_wallets",
    "lookup_price_stats",
    "price_change",
    "rank_wallets_by_profit",
    "rank_wallets_by_trade_count",
    "rank_wallets_by_volume",
    "track_price_by_interval",
    "track_price_by_timestamp",
]
