"""CLI tests via typer's CliRunner against a temporary data tree."""

import pytest
from typer.testing import CliRunner

from orderflow.cli.app import app

from conftest import SESSION

runner = CliRunner()


@pytest.fixture
def invoke(data_dir):
    def _invoke(*args):
        return runner.invoke(app, ["--data-dir", str(data_dir), *args])

    return _invoke


def test_summary_report(invoke):
    result = invoke("analyze", "summary", SESSION, "--interval", "60", "--target-price", "0.7")
    assert result.exit_code == 0, result.output
    assert "Loaded 5 trades" in result.output
    assert "Distinct prices: 4" in result.output
    assert "Buckets: 3" in result.output
    assert "Sell wallets: 2" in result.output
    assert "1. 0xbbb: 1.2500 profit" in result.output
    assert "1. 0xaaa: 14.00 volume" in result.output


def test_summary_falls_back_to_orders_matched(invoke):
    result = invoke("analyze", "summary", "no-such-session")
    assert result.exit_code == 0, result.output
    assert "orders_matched.jsonl" in result.output
    assert "Loaded 1 trades" in result.output


def test_price_lookup_and_csv(invoke, tmp_path):
    out_dir = tmp_path / "reports"
    result = invoke("analyze", "price", SESSION, "0.5", "--outcome", "0", "--output-dir", str(out_dir))
    assert result.exit_code == 0, result.output
    assert "No trades at price 0.5" in result.output
    assert "0.45 (diff 0.05)" in result.output
    assert "Price by timestamp: 3 points" in result.output
    assert (out_dir / "price-history-outcome-0.csv").is_file()


def test_price_defaults_to_session_dir(invoke, data_dir):
    result = invoke("analyze", "price", SESSION)
    assert result.exit_code == 0, result.output
    assert (data_dir / "sessions" / SESSION / "price-history.csv").is_file()
    # the saved report is not picked up as trade data on the next load
    again = invoke("analyze", "price", SESSION, "--no-save")
    assert "Loaded 5 trades" in again.output


def test_wallet_profit(invoke):
    result = invoke("analyze", "wallet", SESSION, "0xAAA", "--price", "0:0.5")
    assert result.exit_code == 0, result.output
    assert "Realized profit: 1.2000" in result.output
    assert "Unrealized profit: 0.6000" in result.output
    assert "Outcome 0 (Up)" in result.output


def test_wallet_bad_price(invoke):
    result = invoke("analyze", "wallet", SESSION, "0xaaa", "--price", "half")
    assert result.exit_code == 1


def test_unknown_session_exits(invoke):
    result = invoke("analyze", "wallet", "no-such-session", "0xaaa")
    assert result.exit_code == 1
    assert "No trades found for no-such-session" in result.output


def test_log_stats_and_export(invoke, tmp_path):
    result = invoke("log", "stats", SESSION)
    assert result.exit_code == 0, result.output
    assert "Total trades: 5" in result.output
    assert "Wallets: 3" in result.output

    out = tmp_path / "trades.parquet"
    result = invoke("log", "export", SESSION, "-o", str(out))
    assert result.exit_code == 0, result.output
    assert "Exported 5 trades" in result.output
    assert out.is_file()


def test_summary_rejects_zero_interval(invoke):
    result = invoke("analyze", "summary", SESSION, "--interval", "0")
    assert result.exit_code == 1
    assert "Invalid interval: 0" in result.output


def test_summary_top_zero_is_kept(invoke):
    result = invoke("analyze", "summary", SESSION, "--top", "0")
    assert result.exit_code == 0, result.output
    assert "Top 0 by volume" in result.output
    assert invoke("analyze", "summary", SESSION, "--top", "-1").exit_code == 1


def test_price_report_beside_flat_session_csv(invoke, data_dir):
    src = data_dir / "sessions" / SESSION / f"{SESSION}.csv"
    (data_dir / "sessions" / "eth-updown.csv").write_text(src.read_text(), encoding="utf-8")
    result = invoke("analyze", "price", "eth-updown")
    assert result.exit_code == 0, result.output
    assert (data_dir / "sessions" / "price-history-eth-updown.csv").is_file()
    assert not (data_dir / "sessions" / "eth-updown").exists()
    again = invoke("analyze", "wallet", "eth-updown", "0xaaa")
    assert again.exit_code == 0, again.output
    assert "Loaded 5 trades" in again.output


def test_price_report_beside_wallet_log(invoke, data_dir):
    result = invoke("analyze", "price", "0xddd")
    assert result.exit_code == 0, result.output
    assert (data_dir / "wallets" / "price-history-0xddd.csv").is_file()
    again = invoke("analyze", "wallet", "0xddd", "0xddd")
    assert again.exit_code == 0, again.output
    assert "Realized profit: 0.2000" in again.output


def test_price_report_for_file_path(invoke, data_dir, tmp_path):
    path = tmp_path / "logs" / "trades.jsonl"
    path.parent.mkdir()
    path.write_text((data_dir / "wallets" / "0xddd.jsonl").read_text(), encoding="utf-8")
    result = invoke("analyze", "price", str(path), "--outcome", "0")
    assert result.exit_code == 0, result.output
    assert (path.parent / "price-history-trades-outcome-0.csv").is_file()
    again = invoke("analyze", "price", str(path), "--no-save")
    assert "Loaded 2 trades" in again.output
