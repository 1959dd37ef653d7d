"""
Application settings.

Settings are validated once at construction; a missing DATABASE_URL or an
empty TRACKED_ACCOUNTS list fails here instead of deep inside a sync run.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_beantrace.config.env import (
    DEFAULT_INDEXER_URL,
    DEFAULT_PACING_DELAY_MS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TIMEOUT_SEC,
    env_str,
    load_beantrace_env,
    parse_account_list,
)
from backend_beantrace.core.exceptions import ConfigError

MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class Settings:
    """Validated runtime configuration."""

    database_url: str
    tracked_accounts: tuple[str, ...]
    indexer_url: str = DEFAULT_INDEXER_URL
    indexer_api_token: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    pacing_delay_ms: int = DEFAULT_PACING_DELAY_MS
    request_timeout_sec: float = DEFAULT_TIMEOUT_SEC

    def __post_init__(self) -> None:
        if not self.database_url.strip():
            raise ConfigError("DATABASE_URL is not set")
        if not self.tracked_accounts:
            raise ConfigError("TRACKED_ACCOUNTS must list at least one account address")
        if not self.indexer_url.strip():
            raise ConfigError("INDEXER_URL must be non-empty")
        if not (1 <= self.page_size <= MAX_PAGE_SIZE):
            raise ConfigError(f"SYNC_PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
        if self.pacing_delay_ms < 0:
            raise ConfigError("BACKFILL_PACING_DELAY_MS must be >= 0")
        if self.request_timeout_sec <= 0:
            raise ConfigError("INDEXER_TIMEOUT_SEC must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and .env when present)."""
        load_beantrace_env()
        return cls(
            database_url=env_str("DATABASE_URL"),
            tracked_accounts=parse_account_list(env_str("TRACKED_ACCOUNTS")),
            indexer_url=env_str("INDEXER_URL") or DEFAULT_INDEXER_URL,
            indexer_api_token=env_str("INDEXER_API_TOKEN") or None,
            page_size=_env_int("SYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            pacing_delay_ms=_env_int("BACKFILL_PACING_DELAY_MS", DEFAULT_PACING_DELAY_MS),
            request_timeout_sec=_env_float("INDEXER_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC),
        )


def get_settings() -> Settings:
    """Return settings for the current environment. Raises ConfigError when invalid."""
    return Settings.from_env()


def _env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
