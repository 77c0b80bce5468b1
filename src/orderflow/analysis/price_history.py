"""Price history - fixed-interval VWAP buckets and per-timestamp buy/sell snapshots."""

from __future__ import annotations

from typing import Iterable

from orderflow.analysis.price_levels import filter_outcome
from orderflow.models import DetailedPriceSnapshot, PriceSnapshot, Side, TradeEvent


def _timed(trades: Iterable[TradeEvent], outcome_index: int | None) -> list[TradeEvent]:
    """Trades with an on-chain timestamp, ascending (stable). Untimed trades are dropped."""
    timed = [t for t in filter_outcome(trades, outcome_index) if t.onchain_ts is not None]
    timed.sort(key=lambda t: t.onchain_ts)
    return timed


def _vwap(trades: list[TradeEvent]) -> tuple[float, float]:
    """(volume-weighted price, volume). Price is 0 when volume is 0."""
    volume = sum(t.quantity for t in trades)
    value = sum(t.notional for t in trades)
    return (value / volume if volume > 0 else 0.0), volume


def track_price_by_interval(
    trades: Iterable[TradeEvent],
    interval_seconds: int = 60,
    outcome_index: int | None = None,
) -> list[PriceSnapshot]:
    """VWAP per half-open window [start, start + interval), windows anchored at the first trade.

    Empty windows are omitted.
    """
    if interval_seconds <= 0:
        raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
    timed = _timed(trades, outcome_index)
    if not timed:
        return []
    first_ts = timed[0].onchain_ts
    buckets: dict[int, list[TradeEvent]] = {}
    for trade in timed:
        bucket = (trade.onchain_ts - first_ts) // interval_seconds
        buckets.setdefault(bucket, []).append(trade)

    snapshots = []
    for bucket in sorted(buckets):
        bucket_trades = buckets[bucket]
        price, volume = _vwap(bucket_trades)
        snapshots.append(
            PriceSnapshot(
                timestamp=first_ts + bucket * interval_seconds,
                price=price,
                outcome_index=outcome_index,
                outcome=bucket_trades[0].outcome,
                volume=volume,
                trades=len(bucket_trades),
            )
        )
    return snapshots


def track_price_by_timestamp(
    trades: Iterable[TradeEvent],
    outcome_index: int | None = None,
) -> list[DetailedPriceSnapshot]:
    """One snapshot per distinct on-chain timestamp, buy and sell sides reported separately.

    A side with no trades reports price 0 and zero counts.
    """
    grouped: dict[int, list[TradeEvent]] = {}
    for trade in _timed(trades, outcome_index):
        grouped.setdefault(trade.onchain_ts, []).append(trade)

    snapshots = []
    for ts in sorted(grouped):
        group = grouped[ts]
        buys = [t for t in group if t.side == Side.BUY]
        sells = [t for t in group if t.side == Side.SELL]
        buy_price, buy_volume = _vwap(buys)
        sell_price, sell_volume = _vwap(sells)
        snapshots.append(
            DetailedPriceSnapshot(
                timestamp=ts,
                outcome_index=outcome_index,
                outcome=group[0].outcome,
                buy_price=buy_price,
                buy_records=len(buys),
                buy_wallets=len({t.wallet_key for t in buys if t.wallet_key}),
                buy_volume=buy_volume,
                sell_price=sell_price,
                sell_records=len(sells),
                sell_wallets=len({t.wallet_key for t in sells if t.wallet_key}),
                sell_volume=sell_volume,
                total_records=len(group),
                total_wallets=len({t.wallet_key for t in group if t.wallet_key}),
                total_volume=buy_volume + sell_volume,
            )
        )
    return snapshots


def price_change(first: float, last: float) -> tuple[float, float]:
    """(absolute change, percent change). Percent is 0 when first is 0."""
    change = last - first
    pct = change / first * 100 if first > 0 else 0.0
    return change, pct
