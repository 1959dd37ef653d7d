"""
Tests for Settings loading and validation from the environment.
"""

from __future__ import annotations

import pytest

from backend_beantrace.config import Settings, get_settings
from backend_beantrace.config.env import DEFAULT_INDEXER_URL, parse_account_list
from backend_beantrace.core.exceptions import ConfigError

ENV_NAMES = (
    "DATABASE_URL",
    "TRACKED_ACCOUNTS",
    "INDEXER_URL",
    "INDEXER_API_TOKEN",
    "SYNC_PAGE_SIZE",
    "BACKFILL_PACING_DELAY_MS",
    "INDEXER_TIMEOUT_SEC",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("backend_beantrace.config.settings.load_beantrace_env", lambda: None)


def test_defaults(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("TRACKED_ACCOUNTS", "A1, A2 ,A1,,A3")
    settings = get_settings()
    assert settings.database_url == "sqlite:///x.db"
    assert settings.tracked_accounts == ("A1", "A2", "A3")
    assert settings.indexer_url == DEFAULT_INDEXER_URL
    assert settings.indexer_api_token is None
    assert settings.page_size == 100
    assert settings.pacing_delay_ms == 100
    assert settings.request_timeout_sec == 30.0


def test_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://u:p@db/trace")
    monkeypatch.setenv("TRACKED_ACCOUNTS", "A1")
    monkeypatch.setenv("INDEXER_URL", "https://idx.example")
    monkeypatch.setenv("INDEXER_API_TOKEN", "tok")
    monkeypatch.setenv("SYNC_PAGE_SIZE", "500")
    monkeypatch.setenv("BACKFILL_PACING_DELAY_MS", "0")
    monkeypatch.setenv("INDEXER_TIMEOUT_SEC", "5.5")
    settings = Settings.from_env()
    assert settings.indexer_url == "https://idx.example"
    assert settings.indexer_api_token == "tok"
    assert settings.page_size == 500
    assert settings.pacing_delay_ms == 0
    assert settings.request_timeout_sec == 5.5


def test_missing_database_url(monkeypatch):
    monkeypatch.setenv("TRACKED_ACCOUNTS", "A1")
    with pytest.raises(ConfigError, match="DATABASE_URL"):
        get_settings()


def test_missing_tracked_accounts(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("TRACKED_ACCOUNTS", " , ")
    with pytest.raises(ConfigError, match="TRACKED_ACCOUNTS"):
        get_settings()


@pytest.mark.parametrize(
    "name, value",
    [
        ("SYNC_PAGE_SIZE", "0"),
        ("SYNC_PAGE_SIZE", "1001"),
        ("SYNC_PAGE_SIZE", "many"),
        ("BACKFILL_PACING_DELAY_MS", "-1"),
        ("INDEXER_TIMEOUT_SEC", "0"),
        ("INDEXER_TIMEOUT_SEC", "soon"),
    ],
)
def test_invalid_tuning_values(monkeypatch, name, value):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("TRACKED_ACCOUNTS", "A1")
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError, match=name):
        get_settings()


def test_parse_account_list_keeps_order():
    assert parse_account_list("B, A, B") == ("B", "A")
    assert parse_account_list("") == ()
