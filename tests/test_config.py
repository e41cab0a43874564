"""Tests for settings persistence."""

import json

from shift.config import (
    Settings,
    default_db_path,
    get_config_dir,
    get_data_dir,
    read_settings,
    save_settings,
)


def test_xdg_directories(cli_env):
    assert get_config_dir() == cli_env / "config" / "st"
    assert get_data_dir() == cli_env / "data" / "st"
    assert default_db_path() == str(cli_env / "data" / "st" / "events.db")


def test_home_fallback(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert get_config_dir() == tmp_path / ".config" / "st"


def test_defaults_without_file(cli_env):
    settings = read_settings()
    assert settings.default_count == 10
    assert settings.reject_switch_to_current is True
    assert settings.db_path == default_db_path()


def test_save_and_load(cli_env):
    save_settings(Settings(default_count=4, reject_switch_to_current=False))
    settings = read_settings()
    assert settings.default_count == 4
    assert settings.reject_switch_to_current is False


def test_explicit_path(tmp_path):
    path = tmp_path / "nested" / "st.json"
    save_settings(Settings(db_path="/tmp/x.db"), path)
    assert json.loads(path.read_text())["db_path"] == "/tmp/x.db"
    assert read_settings(path).db_path == "/tmp/x.db"


def test_broken_file_falls_back_to_defaults(cli_env):
    path = get_config_dir() / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json")
    assert read_settings().default_count == 10


def test_invalid_values_fall_back_to_defaults(cli_env):
    path = get_config_dir() / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"default_count": 0}))
    assert read_settings().default_count == 10


def test_read_ignores_db_env(cli_env, monkeypatch):
    save_settings(Settings(db_path="/from/file.db"))
    monkeypatch.setenv("ST_DB_PATH", "/from/env.db")
    assert read_settings().db_path == "/from/file.db"
