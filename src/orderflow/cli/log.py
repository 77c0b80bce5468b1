"""Log subcommand: export, stats."""

from __future__ import annotations

import typer

from orderflow.storage.export import export_trades_to_parquet, trade_log_stats
from orderflow.storage.loader import load_trades

app = typer.Typer(help="Trade log export and statistics")


@app.command("export")
def export(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Session slug, wallet address or trade file path"),
    output: str = typer.Option("trades.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export a session's trades to Parquet."""
    settings = ctx.obj["settings"]
    trades = load_trades(source, settings.data_dir)
    if not trades:
        typer.echo(f"No trades found for {source}")
        raise typer.Exit(1)
    count = export_trades_to_parquet(trades, output)
    typer.echo(f"Exported {count} trades to {output}")


@app.command("stats")
def stats(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Session slug, wallet address or trade file path"),
) -> None:
    """Show trade log statistics (counts, on-chain time range, by outcome)."""
    settings = ctx.obj["settings"]
    trades = load_trades(source, settings.data_dir)
    s = trade_log_stats(trades)
    typer.echo(f"Total trades: {s['total_trades']}")
    typer.echo(f"Wallets: {s['wallets']}")
    typer.echo(f"Min onchain_ts: {s.get('min_onchain_ts')}")
    typer.echo(f"Max onchain_ts: {s.get('max_onchain_ts')}")
    if s.get("by_outcome"):
        typer.echo("By outcome:")
        for row in s["by_outcome"]:
            label = row["outcome"] or "-"
            typer.echo(f"  {row['outcome_index']}  {label}  {row['count']} trades  {row['volume']:.2f} volume")
