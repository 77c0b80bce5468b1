"""Per-wallet trade counts and volumes, and rankings over them."""

from __future__ import annotations

from typing import Iterable

from orderflow.models import Side, TradeEvent, WalletStats, normalize_wallet


class _SideTally:
    __slots__ = ("count", "volume", "value")

    def __init__(self) -> None:
        self.count = 0
        self.volume = 0.0
        self.value = 0.0

    def add(self, trade: TradeEvent) -> None:
        self.count += 1
        self.volume += trade.quantity
        self.value += trade.notional

    @property
    def average_price(self) -> float:
        return self.value / self.volume if self.volume > 0 else 0.0


def _stats_from_tallies(wallet: str, buys: _SideTally, sells: _SideTally) -> WalletStats:
    return WalletStats(
        wallet=wallet,
        total_trades=buys.count + sells.count,
        buy_count=buys.count,
        sell_count=sells.count,
        total_buy_volume=buys.volume,
        total_sell_volume=sells.volume,
        average_buy_price=buys.average_price,
        average_sell_price=sells.average_price,
        total_volume=buys.volume + sells.volume,
    )


def list_wallets(trades: Iterable[TradeEvent]) -> list[str]:
    """Distinct canonical wallet keys, sorted."""
    return sorted({t.wallet_key for t in trades if t.wallet_key})


def compute_wallet_stats(trades: Iterable[TradeEvent], wallet: str) -> WalletStats:
    """Counts, volumes and volume-weighted average prices for one wallet (case-insensitive)."""
    key = normalize_wallet(wallet)
    buys, sells = _SideTally(), _SideTally()
    for trade in trades:
        if not key or trade.wallet_key != key:
            continue
        (buys if trade.side == Side.BUY else sells).add(trade)
    return _stats_from_tallies(key, buys, sells)


def compute_all_wallet_stats(trades: Iterable[TradeEvent]) -> dict[str, WalletStats]:
    """WalletStats for every wallet in one pass, keyed and ordered by wallet key."""
    tallies: dict[str, tuple[_SideTally, _SideTally]] = {}
    for trade in trades:
        key = trade.wallet_key
        if not key:
            continue
        if key not in tallies:
            tallies[key] = (_SideTally(), _SideTally())
        buys, sells = tallies[key]
        (buys if trade.side == Side.BUY else sells).add(trade)
    return {key: _stats_from_tallies(key, *tallies[key]) for key in sorted(tallies)}


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")


def rank_wallets_by_trade_count(trades: Iterable[TradeEvent], limit: int = 10) -> list[WalletStats]:
    """Top wallets by number of trades. Ties keep wallet-key order."""
    _check_limit(limit)
    stats = compute_all_wallet_stats(trades).values()
    return sorted(stats, key=lambda s: s.total_trades, reverse=True)[:limit]


def rank_wallets_by_volume(trades: Iterable[TradeEvent], limit: int = 10) -> list[WalletStats]:
    """Top wallets by total (buy + sell) volume. Ties keep wallet-key order."""
    _check_limit(limit)
    stats = compute_all_wallet_stats(trades).values()
    return sorted(stats, key=lambda s: s.total_volume, reverse=True)[:limit]
