"""Trade file loader tests."""

import json

import pytest
from pydantic import ValidationError

from orderflow.models import Side
from orderflow.storage.loader import (
    MalformedRecordError,
    list_sessions,
    list_wallet_files,
    load_trades,
    parse_trade_record,
    read_csv_trades,
    read_jsonl_trades,
    resolve_source,
)

from conftest import SESSION


def test_load_session_directory(data_dir):
    trades = load_trades(SESSION, data_dir)
    assert len(trades) == 5
    first = trades[0]
    assert first.wallet == "0xAAA"
    assert first.wallet_key == "0xaaa"
    assert first.side == Side.BUY
    assert first.size == 10
    assert first.price == 0.40
    assert first.outcome == "Up"
    assert first.outcome_index == 0
    assert first.onchain_ts == 1766141100
    assert first.session_id == SESSION
    assert first.transaction_hash == "0xt1"


def test_load_wallet_log_case_insensitive(data_dir):
    trades = load_trades("0xDDD", data_dir)
    assert [t.side for t in trades] == [Side.BUY, Side.SELL]


def test_load_flat_session_csv(data_dir):
    src = data_dir / "sessions" / SESSION / f"{SESSION}.csv"
    (data_dir / "sessions" / "eth-updown.csv").write_text(src.read_text(), encoding="utf-8")
    assert len(load_trades("eth-updown", data_dir)) == 5


def test_load_unknown_source_is_empty(data_dir):
    assert load_trades("no-such-session", data_dir) == []
    assert resolve_source(data_dir, "no-such-session") == []


def test_price_history_report_not_loaded(data_dir):
    session_dir = data_dir / "sessions" / SESSION
    (session_dir / "price-history.csv").write_text("timestamp,datetime\n1,x\n", encoding="utf-8")
    assert [p.name for p in resolve_source(data_dir, SESSION)] == [f"{SESSION}.csv"]


def test_jsonl_malformed_lines_skipped(tmp_path):
    path = tmp_path / "orders.jsonl"
    good = {"wallet": "0xa", "side": "buy", "size": 1, "price": 0.5, "outcomeIndex": 1, "onChainTimestamp": 7}
    lines = [
        json.dumps(good),
        "{not json",
        json.dumps({"wallet": "0xa", "side": "HOLD", "size": 1}),
        json.dumps({"wallet": "0xa", "side": "SELL", "size": -1}),
        json.dumps([1, 2, 3]),
        "",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")
    trades = read_jsonl_trades(path)
    assert len(trades) == 1
    assert trades[0].side == Side.BUY
    assert trades[0].outcome_index == 1
    assert trades[0].onchain_ts == 7


def test_csv_rows_dropped_without_price(tmp_path):
    path = tmp_path / "s.csv"
    path.write_text(
        "receivedAt,eventSlug,wallet,side,size,price,outcome,outcomeIndex,onChainTimestamp,transactionHash\n"
        'r1,s,0xa,BUY,1,0.5,"Up, maybe",1,10,0xh\n'
        "r2,s,0xa,BUY,1,,Up,1,11,0xh\n"
        "r3,s,0xa,BUY,1,0,Up,1,12,0xh\n"
        "r4,s,0xa,BUY,,0.5,Up,1,13,0xh\n"
        "r5,s,0xa,BUY,1\n"
        "r6,s,0xa,BUY,one,0.5,Up,1,14,0xh\n"
        "r7,s,0xa,SELL,2,0.6,,,,\n",
        encoding="utf-8",
    )
    trades = read_csv_trades(path)
    assert len(trades) == 2
    assert trades[0].outcome == "Up, maybe"
    assert trades[1].outcome_index is None
    assert trades[1].onchain_ts is None


def test_parse_trade_record_snake_case():
    t = parse_trade_record({"wallet": "0xa", "side": "SELL", "outcome_index": 2, "onchain_ts": 5})
    assert t.outcome_index == 2
    assert t.order_key == 5
    assert t.quantity == 0
    with pytest.raises(MalformedRecordError):
        parse_trade_record({"wallet": "0xa"})
    with pytest.raises(MalformedRecordError):
        parse_trade_record("BUY")


def test_trade_event_is_immutable():
    t = parse_trade_record({"wallet": "0xa", "side": "BUY"})
    with pytest.raises(ValidationError):
        t.size = 5


def test_list_sessions_and_wallets(data_dir):
    (data_dir / "sessions" / "eth-updown.csv").write_text("", encoding="utf-8")
    (data_dir / "sessions" / "price-history.csv").write_text("", encoding="utf-8")
    (data_dir / "sessions" / "empty-dir").mkdir()
    sessions = list_sessions(data_dir)
    assert [s["slug"] for s in sessions] == [SESSION, "eth-updown"]
    assert sessions[0]["files"] == 1
    wallets = list_wallet_files(data_dir)
    assert [w["wallet"] for w in wallets] == ["0xddd"]


def test_list_on_missing_tree(tmp_path):
    assert list_sessions(tmp_path) == []
    assert list_wallet_files(tmp_path) == []


def test_report_only_session_dir_does_not_shadow_flat_csv(data_dir):
    src = data_dir / "sessions" / SESSION / f"{SESSION}.csv"
    (data_dir / "sessions" / "eth-updown.csv").write_text(src.read_text(), encoding="utf-8")
    reports = data_dir / "sessions" / "eth-updown"
    reports.mkdir()
    (reports / "price-history.csv").write_text("timestamp,datetime\n", encoding="utf-8")
    assert resolve_source(data_dir, "eth-updown") == [data_dir / "sessions" / "eth-updown.csv"]
    assert len(load_trades("eth-updown", data_dir)) == 5


def test_report_only_dir_falls_through_to_wallet_log(data_dir):
    (data_dir / "sessions" / "0xddd").mkdir()
    assert [p.name for p in resolve_source(data_dir, "0xddd")] == ["0xddd.jsonl"]
