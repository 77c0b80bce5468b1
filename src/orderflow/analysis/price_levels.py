"""Price-level aggregation - who bought and sold at each exact price."""

from __future__ import annotations

from typing import Iterable, Mapping

from orderflow.models import ClosestPrice, PriceLevelStats, PriceLookup, Side, TradeEvent


class _LevelAccumulator:
    __slots__ = ("buy_wallets", "sell_wallets", "wallets", "buy_volume", "sell_volume", "buy_trades", "sell_trades")

    def __init__(self) -> None:
        self.buy_wallets: set[str] = set()
        self.sell_wallets: set[str] = set()
        self.wallets: set[str] = set()
        self.buy_volume = 0.0
        self.sell_volume = 0.0
        self.buy_trades = 0
        self.sell_trades = 0

    def add(self, trade: TradeEvent) -> None:
        wallet = trade.wallet_key
        self.wallets.add(wallet)
        if trade.side == Side.BUY:
            self.buy_volume += trade.quantity
            self.buy_trades += 1
            self.buy_wallets.add(wallet)
        else:
            self.sell_volume += trade.quantity
            self.sell_trades += 1
            self.sell_wallets.add(wallet)

    def to_stats(self, price: float, outcome_index: int | None) -> PriceLevelStats:
        return PriceLevelStats(
            price=price,
            buy_wallets=len(self.buy_wallets),
            sell_wallets=len(self.sell_wallets),
            buy_volume=self.buy_volume,
            sell_volume=self.sell_volume,
            buy_trades=self.buy_trades,
            sell_trades=self.sell_trades,
            total_volume=self.buy_volume + self.sell_volume,
            total_trades=self.buy_trades + self.sell_trades,
            wallets=sorted(self.wallets),
            outcome_index=outcome_index,
        )


def filter_outcome(trades: Iterable[TradeEvent], outcome_index: int | None) -> list[TradeEvent]:
    """Keep trades for one outcome; None keeps everything."""
    if outcome_index is None:
        return list(trades)
    return [t for t in trades if t.outcome_index == outcome_index]


def aggregate_by_price(
    trades: Iterable[TradeEvent],
    outcome_index: int | None = None,
) -> dict[float, PriceLevelStats]:
    """Group trades by exact price (no rounding). Result is ordered by ascending price.

    Trades without a price or wallet are left out.
    """
    levels: dict[float, _LevelAccumulator] = {}
    for trade in filter_outcome(trades, outcome_index):
        if trade.price is None or not trade.wallet_key:
            continue
        acc = levels.get(trade.price)
        if acc is None:
            acc = levels[trade.price] = _LevelAccumulator()
        acc.add(trade)
    return {price: levels[price].to_stats(price, outcome_index) for price in sorted(levels)}


def closest_prices(
    levels: Mapping[float, PriceLevelStats],
    price: float,
    limit: int = 5,
) -> list[ClosestPrice]:
    """Traded prices nearest to price by absolute difference (lower price wins ties)."""
    ranked = sorted(levels, key=lambda p: (abs(p - price), p))[:limit]
    return [ClosestPrice(price=p, diff=abs(p - price), stats=levels[p]) for p in ranked]


def lookup_price_stats(
    trades: Iterable[TradeEvent],
    price: float,
    outcome_index: int | None = None,
    closest_limit: int = 5,
) -> PriceLookup:
    """Stats at an exact price, or not-found with the closest traded prices."""
    levels = aggregate_by_price(trades, outcome_index)
    stats = levels.get(price)
    if stats is not None:
        return PriceLookup(price=price, outcome_index=outcome_index, found=True, stats=stats)
    return PriceLookup(
        price=price,
        outcome_index=outcome_index,
        found=False,
        closest=closest_prices(levels, price, limit=closest_limit),
    )
