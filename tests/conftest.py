"""Shared fixtures: trade factory and a temporary data tree."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import structlog

from orderflow.models import TradeEvent

SESSION = "btc-updown-15m-1766141100"

SESSION_CSV = """receivedAt,eventSlug,wallet,side,size,price,outcome,outcomeIndex,onChainTimestamp,transactionHash
2025-12-19T10:45:01.000Z,btc-updown-15m-1766141100,0xAAA,BUY,10,0.40,Up,0,1766141100,0xt1
2025-12-19T10:45:31.000Z,btc-updown-15m-1766141100,0xbbb,BUY,5,0.45,Up,0,1766141130,0xt2
2025-12-19T10:46:41.000Z,btc-updown-15m-1766141100,0xaaa,SELL,4,0.70,Up,0,1766141200,0xt3
2025-12-19T10:46:41.000Z,btc-updown-15m-1766141100,0xbbb,SELL,5,0.70,Up,0,1766141200,0xt4
2025-12-19T10:47:00.000Z,btc-updown-15m-1766141100,0xccc,BUY,8,0.30,Down,1,1766141220,0xt5
"""


def trade(
    side: str = "BUY",
    size: float | None = 1.0,
    price: float | None = 0.5,
    wallet: str | None = "0xabc",
    outcome_index: int | None = 0,
    ts: int | None = None,
    outcome: str | None = None,
) -> TradeEvent:
    return TradeEvent(
        wallet=wallet,
        side=side,
        size=size,
        price=price,
        outcome_index=outcome_index,
        onchain_ts=ts,
        outcome=outcome,
    )


@pytest.fixture(autouse=True)
def _reset_structlog():
    # CLI runs configure structlog against the runner's stderr, which closes afterwards
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_trade():
    return trade


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """data/ tree with one session directory, a wallet log and orders_matched.jsonl."""
    root = tmp_path / "data"
    session_dir = root / "sessions" / SESSION
    session_dir.mkdir(parents=True)
    (session_dir / f"{SESSION}.csv").write_text(SESSION_CSV, encoding="utf-8")

    wallets_dir = root / "wallets"
    wallets_dir.mkdir()
    records = [
        {"receivedAt": "r1", "eventSlug": SESSION, "wallet": "0xDDD", "side": "BUY", "size": 2, "price": 0.5,
         "outcome": "Up", "outcomeIndex": 0, "onChainTimestamp": 100},
        {"receivedAt": "r2", "eventSlug": SESSION, "wallet": "0xddd", "side": "SELL", "size": 2, "price": 0.6,
         "outcome": "Up", "outcomeIndex": 0, "onChainTimestamp": 200},
    ]
    (wallets_dir / "0xddd.jsonl").write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    (root / "orders_matched.jsonl").write_text(json.dumps(records[0]) + "\n", encoding="utf-8")
    return root
