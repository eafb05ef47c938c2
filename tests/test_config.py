"""Tests for Settings.from_env."""

from __future__ import annotations

import os

import pytest

from lapsync.config import Settings

_VARS = ("LAPSYNC_LOG_LEVEL", "LAPSYNC_MAX_MATCH_DISTANCE_M", "LAPSYNC_SEARCH_WINDOW_S")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings.from_env(load_env_file=False)
    assert s == Settings()
    assert (s.log_level, s.max_match_distance_m, s.search_window_s) == ("INFO", 50.0, 20.0)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("LAPSYNC_LOG_LEVEL", "debug")
    monkeypatch.setenv("LAPSYNC_MAX_MATCH_DISTANCE_M", "25")
    monkeypatch.setenv("LAPSYNC_SEARCH_WINDOW_S", "7.5")
    s = Settings.from_env(load_env_file=False)
    assert s.log_level == "DEBUG"
    assert s.max_match_distance_m == 25.0
    assert s.search_window_s == 7.5


def test_bad_number_raises(monkeypatch):
    monkeypatch.setenv("LAPSYNC_SEARCH_WINDOW_S", "wide")
    with pytest.raises(ValueError):
        Settings.from_env(load_env_file=False)


def test_dotenv_file_is_loaded(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text("LAPSYNC_MAX_MATCH_DISTANCE_M=12.5\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    try:
        assert Settings.from_env().max_match_distance_m == 12.5
    finally:
        os.environ.pop("LAPSYNC_MAX_MATCH_DISTANCE_M", None)
