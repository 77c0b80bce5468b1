"""Config loading and profile overlay tests."""

from orderflow.config import get_settings, load_config


def test_defaults_without_config(tmp_path):
    assert load_config(config_dir=tmp_path) == {}
    s = get_settings(config_dir=tmp_path)
    assert str(s.data_dir) == "data"
    assert s.default_interval_sec == 60
    assert s.top_limit == 10
    assert s.closest_limit == 5
    assert s.api_port == 8000
    assert s.logging_format == "console"


def test_profile_overlay(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[storage]\ndata_dir = "data"\n[analysis]\ninterval_sec = 60\ntop_limit = 10\n[logging]\nlevel = "info"\n',
        encoding="utf-8",
    )
    (tmp_path / "dev.toml").write_text('[analysis]\ninterval_sec = 15\n[logging]\nlevel = "debug"\n', encoding="utf-8")
    s = get_settings("dev", tmp_path)
    assert s.default_interval_sec == 15
    assert s.top_limit == 10
    assert s.logging_level == "DEBUG"
    assert s.sessions_dir.as_posix() == "data/sessions"
    assert s.orders_matched_path.name == "orders_matched.jsonl"
    # unknown profile falls back to defaults
    assert get_settings("missing", tmp_path).default_interval_sec == 60
