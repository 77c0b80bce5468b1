"""Export trades to Parquet (DuckDB) and price history to CSV."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Sequence

import duckdb

from orderflow.models import DetailedPriceSnapshot, TradeEvent
from orderflow.storage.loader import resolve_source

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

TRADES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS trades (
    received_at      VARCHAR,
    session_id       VARCHAR,
    wallet           VARCHAR,
    side             VARCHAR NOT NULL,
    size             DOUBLE,
    price            DOUBLE,
    outcome          VARCHAR,
    outcome_index    INTEGER,
    onchain_ts       BIGINT,
    transaction_hash VARCHAR,
    condition_id     VARCHAR
)
"""

PRICE_HISTORY_HEADER = [
    "timestamp",
    "datetime",
    "buyPrice",
    "buyRecords",
    "buyWallets",
    "buyVolume",
    "sellPrice",
    "sellRecords",
    "sellWallets",
    "sellVolume",
    "totalRecords",
    "totalWallets",
    "totalVolume",
    "outcomeIndex",
    "outcome",
]


def load_trades_into_duckdb(conn: DuckDBPyConnection, trades: Iterable[TradeEvent]) -> int:
    """Create the trades table if needed and append trades. Wallets are stored lowercased."""
    conn.execute(TRADES_TABLE_SQL)
    rows = [
        (
            t.received_at,
            t.session_id,
            t.wallet_key or None,
            t.side.value,
            t.size,
            t.price,
            t.outcome,
            t.outcome_index,
            t.onchain_ts,
            t.transaction_hash,
            t.condition_id,
        )
        for t in trades
    ]
    if rows:
        conn.executemany("INSERT INTO trades VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", rows)
    return len(rows)


def export_trades_to_parquet(trades: Sequence[TradeEvent], output_path: str | Path) -> int:
    """Write trades to a Parquet file via an in-memory DuckDB. Returns row count."""
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path_str = str(path).replace("\\", "\\\\").replace("'", "''")
    conn = duckdb.connect(":memory:")
    try:
        count = load_trades_into_duckdb(conn, trades)
        conn.execute(f"COPY (SELECT * FROM trades ORDER BY onchain_ts NULLS FIRST) TO '{path_str}' (FORMAT PARQUET)")
    finally:
        conn.close()
    return count


def trade_log_stats(trades: Sequence[TradeEvent]) -> dict[str, Any]:
    """Trade count, on-chain time range, distinct wallets and count per outcome."""
    conn = duckdb.connect(":memory:")
    try:
        load_trades_into_duckdb(conn, trades)
        total, min_ts, max_ts, wallets = conn.execute(
            "SELECT COUNT(*), MIN(onchain_ts), MAX(onchain_ts), COUNT(DISTINCT wallet) FROM trades"
        ).fetchone()
        by_outcome = conn.execute(
            """
            SELECT outcome_index, ANY_VALUE(outcome), COUNT(*) AS cnt, SUM(size)
            FROM trades GROUP BY outcome_index ORDER BY outcome_index NULLS LAST
            """
        ).fetchall()
    finally:
        conn.close()
    return {
        "total_trades": total,
        "min_onchain_ts": min_ts,
        "max_onchain_ts": max_ts,
        "wallets": wallets,
        "by_outcome": [
            {"outcome_index": r[0], "outcome": r[1], "count": r[2], "volume": r[3] or 0.0}
            for r in by_outcome
        ],
    }


def price_history_filename(outcome_index: int | None = None, source: str | None = None) -> str:
    """Report file name. Always starts with "price-history" so loaders skip it."""
    name = "price-history"
    if source:
        name += f"-{source}"
    if outcome_index is not None:
        name += f"-outcome-{outcome_index}"
    return f"{name}.csv"


def price_history_report_path(
    data_dir: str | Path,
    identifier: str,
    outcome_index: int | None = None,
) -> Path | None:
    """Default location for a price-history report, or None when the identifier has no trades.

    A session directory (or a directory given as a path) gets the plain file name.
    A single trade file (flat session CSV, wallet log or explicit path) gets a
    report beside it, named after the file so sibling sources do not collide.
    """
    files = resolve_source(data_dir, identifier)
    if not files:
        return None
    parent = files[0].parent
    session_dir = Path(data_dir) / "sessions" / identifier
    direct = Path(identifier)
    if direct.is_dir() or (session_dir.is_dir() and parent == session_dir):
        return parent / price_history_filename(outcome_index)
    return parent / price_history_filename(outcome_index, source=files[0].stem)


def _fmt_price(value: float) -> str:
    return f"{value:.4f}" if value > 0 else ""


def write_price_history_csv(snapshots: Iterable[DetailedPriceSnapshot], path: str | Path) -> Path:
    """Write per-timestamp snapshots as CSV. Sides without trades get a blank price."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(PRICE_HISTORY_HEADER)
        for s in snapshots:
            writer.writerow(
                [
                    s.timestamp,
                    datetime.fromtimestamp(s.timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z"),
                    _fmt_price(s.buy_price),
                    s.buy_records,
                    s.buy_wallets,
                    f"{s.buy_volume:.4f}",
                    _fmt_price(s.sell_price),
                    s.sell_records,
                    s.sell_wallets,
                    f"{s.sell_volume:.4f}",
                    s.total_records,
                    s.total_wallets,
                    f"{s.total_volume:.4f}",
                    "" if s.outcome_index is None else s.outcome_index,
                    s.outcome or "",
                ]
            )
    return path
