"""Trade file loader - session CSVs and wallet/orders_matched JSONL -> TradeEvent.

File tree under data_dir:
    sessions/<slug>.csv or sessions/<slug>/*.csv   per-session trade CSVs
    wallets/<wallet>.jsonl                          per-wallet trade log
    orders_matched.jsonl                            every matched order seen

Bad records are logged and skipped; a load never fails because of one line.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from orderflow.models import TradeEvent

log = structlog.get_logger(__name__)

CSV_HEADER = [
    "receivedAt",
    "eventSlug",
    "wallet",
    "side",
    "size",
    "price",
    "outcome",
    "outcomeIndex",
    "onChainTimestamp",
    "transactionHash",
]

# Report files written next to session data; never trade input
_REPORT_PREFIX = "price-history"


class MalformedRecordError(ValueError):
    """A single trade record could not be parsed."""


def parse_trade_record(record: Any) -> TradeEvent:
    """Validate one raw record (camelCase or snake_case keys) into a TradeEvent."""
    if not isinstance(record, dict):
        raise MalformedRecordError(f"expected object, got {type(record).__name__}")
    side = record.get("side")
    if isinstance(side, str):
        record = {**record, "side": side.strip().upper()}
    try:
        return TradeEvent.model_validate(record)
    except ValidationError as e:
        raise MalformedRecordError(str(e)) from e


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_csv_row(row: list[str]) -> TradeEvent | None:
    """Parse one session CSV row. Returns None for rows without a positive price or a size."""
    if len(row) < len(CSV_HEADER):
        raise MalformedRecordError(f"expected {len(CSV_HEADER)} columns, got {len(row)}")
    record = {name: _blank_to_none(value) for name, value in zip(CSV_HEADER, row)}
    record["receivedAt"] = record["receivedAt"] or ""
    event = parse_trade_record(record)
    if event.price is None or event.price <= 0 or event.size is None:
        return None
    return event


def read_jsonl_trades(path: str | Path) -> list[TradeEvent]:
    """Read a line-delimited JSON trade log. Malformed lines are logged and skipped."""
    path = Path(path)
    trades: list[TradeEvent] = []
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                trades.append(parse_trade_record(json.loads(line)))
            except (json.JSONDecodeError, MalformedRecordError) as e:
                log.warning("trade_record_malformed", path=str(path), line=line_no, error=str(e)[:200])
    return trades


def read_csv_trades(path: str | Path) -> list[TradeEvent]:
    """Read a session trade CSV (header optional). Malformed rows are logged and skipped."""
    path = Path(path)
    trades: list[TradeEvent] = []
    dropped = 0
    with open(path, encoding="utf-8", newline="") as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            if not row or not any(cell.strip() for cell in row):
                continue
            if row[0].strip() == CSV_HEADER[0]:
                continue
            try:
                event = parse_csv_row(row)
            except MalformedRecordError as e:
                log.warning("trade_record_malformed", path=str(path), line=line_no, error=str(e)[:200])
                continue
            if event is None:
                dropped += 1
                continue
            trades.append(event)
    if dropped:
        log.debug("trade_rows_without_price", path=str(path), dropped=dropped)
    return trades


def read_trade_file(path: str | Path) -> list[TradeEvent]:
    path = Path(path)
    if path.suffix == ".csv":
        return read_csv_trades(path)
    return read_jsonl_trades(path)


def _trade_files_in(directory: Path) -> list[Path]:
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix in (".csv", ".jsonl") and not p.name.startswith(_REPORT_PREFIX)
    )


def resolve_source(data_dir: str | Path, identifier: str) -> list[Path]:
    """Map a file path, directory, session slug or wallet address to trade files.

    Lookup order: existing path, sessions/<id>/ (when it holds trade files),
    sessions/<id>.csv, wallets/<id>.jsonl.
    """
    data_dir = Path(data_dir)
    direct = Path(identifier)
    if direct.is_file():
        return [direct]
    if direct.is_dir():
        return _trade_files_in(direct)
    sessions_dir = data_dir / "sessions"
    if (sessions_dir / identifier).is_dir():
        files = _trade_files_in(sessions_dir / identifier)
        # A directory holding only reports does not shadow the flat CSV or wallet log
        if files:
            return files
    if (sessions_dir / f"{identifier}.csv").is_file():
        return [sessions_dir / f"{identifier}.csv"]
    for name in (identifier, identifier.lower()):
        wallet_file = data_dir / "wallets" / f"{name}.jsonl"
        if wallet_file.is_file():
            return [wallet_file]
    return []


def load_trades(identifier: str, data_dir: str | Path = "data") -> list[TradeEvent]:
    """Load every trade for a session slug, wallet or file path. Unknown identifier -> []."""
    files = resolve_source(data_dir, identifier)
    if not files:
        log.warning("trade_source_not_found", identifier=identifier, data_dir=str(data_dir))
        return []
    trades: list[TradeEvent] = []
    for path in files:
        trades.extend(read_trade_file(path))
    log.info("trades_loaded", identifier=identifier, files=len(files), trades=len(trades))
    return trades


def _mtime_iso(path: Path) -> str:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).isoformat()


def list_sessions(data_dir: str | Path) -> list[dict[str, Any]]:
    """Sessions present under data_dir/sessions, sorted by slug."""
    sessions_dir = Path(data_dir) / "sessions"
    if not sessions_dir.is_dir():
        return []
    out = []
    for entry in sorted(sessions_dir.iterdir()):
        if entry.is_dir():
            files = _trade_files_in(entry)
            if files:
                out.append({"slug": entry.name, "files": len(files), "updated_at": _mtime_iso(entry)})
        elif entry.suffix == ".csv" and not entry.name.startswith(_REPORT_PREFIX):
            out.append({"slug": entry.stem, "files": 1, "updated_at": _mtime_iso(entry)})
    return out


def list_wallet_files(data_dir: str | Path) -> list[dict[str, Any]]:
    """Wallet trade logs present under data_dir/wallets, sorted by wallet."""
    wallets_dir = Path(data_dir) / "wallets"
    if not wallets_dir.is_dir():
        return []
    return [
        {"wallet": p.stem.lower(), "file": p.name, "updated_at": _mtime_iso(p)}
        for p in sorted(wallets_dir.glob("*.jsonl"))
    ]
