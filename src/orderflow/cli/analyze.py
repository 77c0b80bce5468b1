"""Analyze subcommand: summary, price, wallet."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import typer

from orderflow.analysis import (
    aggregate_by_price,
    compute_wallet_profit,
    compute_wallet_stats,
    list_wallets,
    lookup_price_stats,
    price_change,
    rank_wallets_by_profit,
    rank_wallets_by_trade_count,
    rank_wallets_by_volume,
    track_price_by_interval,
    track_price_by_timestamp,
)
from orderflow.analysis.profit import parse_current_prices
from orderflow.models import PriceLookup, PriceSnapshot, TradeEvent
from orderflow.storage.export import (
    price_history_filename,
    price_history_report_path,
    write_price_history_csv,
)
from orderflow.storage.loader import load_trades, read_jsonl_trades

app = typer.Typer(help="Wallet PnL, price levels and price history for a session")

_SAMPLE_WALLETS = 10
_HISTORY_ROWS = 10


def _iso(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _signed(value: float, places: int) -> str:
    return f"{'+' if value >= 0 else ''}{value:.{places}f}"


def _load_or_exit(settings, session: str, fallback_jsonl: bool = False) -> list[TradeEvent]:
    trades = load_trades(session, settings.data_dir)
    if not trades and fallback_jsonl and settings.orders_matched_path.is_file():
        typer.echo(f"No session trades, reading {settings.orders_matched_path}")
        trades = read_jsonl_trades(settings.orders_matched_path)
    if not trades:
        typer.echo(f"No trades found for {session}")
        raise typer.Exit(1)
    typer.echo(f"Loaded {len(trades)} trades")
    return trades


def _echo_lookup(lookup: PriceLookup, places: int = 2, sample_wallets: bool = False) -> None:
    if lookup.found and lookup.stats is not None:
        s = lookup.stats
        typer.echo(f"Price: {s.price}")
        typer.echo(f"Buy wallets: {s.buy_wallets}")
        typer.echo(f"Sell wallets: {s.sell_wallets}")
        typer.echo(f"Buy volume: {s.buy_volume:.{places}f}")
        typer.echo(f"Sell volume: {s.sell_volume:.{places}f}")
        typer.echo(f"Buy trades: {s.buy_trades}")
        typer.echo(f"Sell trades: {s.sell_trades}")
        typer.echo(f"Total volume: {s.total_volume:.{places}f}")
        typer.echo(f"Total trades: {s.total_trades}")
        if sample_wallets and s.wallets:
            typer.echo(f"Wallets: {len(s.wallets)}")
            for i, wallet in enumerate(s.wallets[:_SAMPLE_WALLETS], start=1):
                typer.echo(f"  {i}. {wallet}")
            if len(s.wallets) > _SAMPLE_WALLETS:
                typer.echo(f"  ... and {len(s.wallets) - _SAMPLE_WALLETS} more")
        return
    typer.echo(f"No trades at price {lookup.price}")
    if lookup.closest:
        typer.echo("Closest prices:")
        for c in lookup.closest:
            typer.echo(
                f"  {c.price:.2f} (diff {c.diff:.2f}) | "
                f"buy: {c.stats.buy_wallets} wallets, sell: {c.stats.sell_wallets} wallets | "
                f"volume {c.stats.total_volume:.2f}"
            )


def _echo_snapshots(snapshots: list[PriceSnapshot]) -> None:
    for s in snapshots:
        typer.echo(f"  {_iso(s.timestamp)} | price {s.price:.2f} | volume {s.volume:.2f} | trades {s.trades}")


@app.command("summary")
def summary(
    ctx: typer.Context,
    session: str = typer.Argument(..., help="Session slug, wallet address or trade file path"),
    wallet: str | None = typer.Option(None, "--wallet", "-w", help="Wallet to report (default: first wallet)"),
    top: int | None = typer.Option(None, "--top", "-n", help="Rows per ranking (default: analysis.top_limit)"),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Price history bucket in seconds (default: analysis.interval_sec)"
    ),
    target_price: float | None = typer.Option(None, "--target-price", help="Show stats at this exact price"),
) -> None:
    """Full session report: price levels, price history, wallet stats and rankings."""
    settings = ctx.obj["settings"]
    top = top if top is not None else settings.top_limit
    interval = interval if interval is not None else settings.default_interval_sec
    if interval <= 0:
        typer.echo(f"Invalid interval: {interval}")
        raise typer.Exit(1)
    if top < 0:
        typer.echo(f"Invalid --top: {top}")
        raise typer.Exit(1)
    trades = _load_or_exit(settings, session, fallback_jsonl=True)

    levels = aggregate_by_price(trades)
    typer.echo("\n=== Price levels ===")
    typer.echo(f"Distinct prices: {len(levels)}")
    typer.echo(f"Top {top} by volume:")
    by_volume = sorted(levels.values(), key=lambda s: s.total_volume, reverse=True)[:top]
    for i, s in enumerate(by_volume, start=1):
        typer.echo(
            f"  {i}. price {s.price:.2f} | buy: {s.buy_wallets} wallets, {s.buy_volume:.2f} volume | "
            f"sell: {s.sell_wallets} wallets, {s.sell_volume:.2f} volume | "
            f"total: {s.total_volume:.2f} volume, {s.total_trades} trades"
        )

    if target_price is not None:
        typer.echo(f"\n=== Price {target_price} ===")
        _echo_lookup(lookup_price_stats(trades, target_price, closest_limit=settings.closest_limit))

    typer.echo(f"\n=== Price history ({interval}s buckets) ===")
    history = track_price_by_interval(trades, interval)
    if history:
        typer.echo(f"Buckets: {len(history)}")
        typer.echo(f"First {_HISTORY_ROWS}:")
        _echo_snapshots(history[:_HISTORY_ROWS])
        if len(history) > _HISTORY_ROWS:
            typer.echo(f"Last {_HISTORY_ROWS}:")
            _echo_snapshots(history[-_HISTORY_ROWS:])
        if len(history) > 1:
            first, last = history[0].price, history[-1].price
            change, pct = price_change(first, last)
            typer.echo(f"Price change: {first:.2f} -> {last:.2f} ({_signed(change, 2)}, {_signed(pct, 2)}%)")
    else:
        typer.echo("No timed trades (missing onChainTimestamp)")

    wallet = wallet or next(iter(list_wallets(trades)), None)
    if wallet:
        typer.echo(f"\n=== Wallet {wallet} ===")
        typer.echo(compute_wallet_stats(trades, wallet).model_dump_json(indent=2))

    typer.echo(f"\n=== Top {top} wallets by trade count ===")
    for i, s in enumerate(rank_wallets_by_trade_count(trades, top), start=1):
        typer.echo(f"  {i}. {s.wallet}: {s.total_trades} trades (BUY: {s.buy_count}, SELL: {s.sell_count})")

    typer.echo(f"\n=== Top {top} wallets by volume ===")
    for i, s in enumerate(rank_wallets_by_volume(trades, top), start=1):
        typer.echo(
            f"  {i}. {s.wallet}: {s.total_volume:.2f} volume "
            f"(BUY: {s.total_buy_volume:.2f}, SELL: {s.total_sell_volume:.2f})"
        )

    typer.echo(f"\n=== Top {top} wallets by realized profit ===")
    for p in rank_wallets_by_profit(trades, top):
        typer.echo(
            f"  {p.rank}. {p.wallet}: {p.realized_profit:.4f} profit "
            f"(cost: {p.total_cost:.4f}, revenue: {p.total_revenue:.4f})"
        )


@app.command("price")
def price(
    ctx: typer.Context,
    session: str = typer.Argument(..., help="Session slug, wallet address or trade file path"),
    target_price: float | None = typer.Argument(None, help="Exact price to inspect"),
    outcome: int | None = typer.Option(None, "--outcome", "-o", help="Filter by outcome index"),
    save: bool = typer.Option(True, "--save/--no-save", help="Write per-timestamp history CSV"),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", help="Where to write the CSV (default: beside the trade source)"
    ),
) -> None:
    """Stats at one price (or the closest prices) plus per-timestamp buy/sell history."""
    settings = ctx.obj["settings"]
    trades = _load_or_exit(settings, session)

    if target_price is not None:
        header = f"\n=== Price {target_price}"
        if outcome is not None:
            header += f", outcome {outcome}"
        typer.echo(header + " ===")
        lookup = lookup_price_stats(trades, target_price, outcome, closest_limit=settings.closest_limit)
        _echo_lookup(lookup, places=4, sample_wallets=True)

    history = track_price_by_timestamp(trades, outcome)
    if not history:
        typer.echo("No timed trades (missing onChainTimestamp)")
        return
    typer.echo(f"\n=== Price by timestamp: {len(history)} points ===")
    for s in history:
        buy = (
            f"buy {s.buy_price:.2f}, {s.buy_records} records, {s.buy_wallets} wallets, volume {s.buy_volume:.2f}"
            if s.buy_price > 0
            else "no buys"
        )
        sell = (
            f"sell {s.sell_price:.2f}, {s.sell_records} records, {s.sell_wallets} wallets, volume {s.sell_volume:.2f}"
            if s.sell_price > 0
            else "no sells"
        )
        typer.echo(f"  time {s.timestamp}, {buy}, {sell}")

    if save:
        if output_dir is not None:
            out_path = output_dir / price_history_filename(outcome)
        else:
            out_path = price_history_report_path(settings.data_dir, session, outcome)
        path = write_price_history_csv(history, out_path)
        typer.echo(f"Saved price history to {path}")

    if len(history) > 1:
        first, last = history[0], history[-1]
        typer.echo("\nPrice change:")
        if first.buy_price > 0 and last.buy_price > 0:
            change, pct = price_change(first.buy_price, last.buy_price)
            typer.echo(
                f"  Buy: {first.buy_price:.4f} -> {last.buy_price:.4f} ({_signed(change, 4)}, {_signed(pct, 2)}%)"
            )
        if first.sell_price > 0 and last.sell_price > 0:
            change, pct = price_change(first.sell_price, last.sell_price)
            typer.echo(
                f"  Sell: {first.sell_price:.4f} -> {last.sell_price:.4f} ({_signed(change, 4)}, {_signed(pct, 2)}%)"
            )


@app.command("wallet")
def wallet(
    ctx: typer.Context,
    session: str = typer.Argument(..., help="Session slug, wallet address or trade file path"),
    address: str = typer.Argument(..., help="Wallet address (case-insensitive)"),
    current_price: list[str] = typer.Option(
        [], "--price", help="Current price for unrealized PnL, as OUTCOME_INDEX:PRICE (repeatable)"
    ),
) -> None:
    """FIFO profit report for one wallet, per outcome."""
    settings = ctx.obj["settings"]
    try:
        prices = parse_current_prices(current_price)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    trades = _load_or_exit(settings, session)
    profit = compute_wallet_profit(trades, address, prices)
    typer.echo(f"\n=== Wallet {profit.wallet} ===")
    typer.echo(f"Total cost: {profit.total_cost:.4f}")
    typer.echo(f"Total revenue: {profit.total_revenue:.4f}")
    typer.echo(f"Realized profit: {profit.realized_profit:.4f}")
    typer.echo(f"Unrealized profit: {profit.unrealized_profit:.4f}")
    typer.echo(f"Total profit: {profit.total_profit:.4f}")
    typer.echo(f"Open position: {profit.open_position:.4f}")
    for o in profit.profit_by_outcome:
        label = f" ({o.outcome})" if o.outcome else ""
        typer.echo(f"\nOutcome {o.outcome_index}{label}")
        typer.echo(f"  realized {o.realized_profit:.4f} | unrealized {o.unrealized_profit:.4f}")
        typer.echo(f"  open position {o.open_position:.4f} in {len(o.open_lots)} lots @ {o.average_open_lot_price:.4f}")
        typer.echo(f"  avg buy {o.average_buy_price:.4f} | avg sell {o.average_sell_price:.4f}")
