"""
Environment variable loading for BeanTrace.

- DATABASE_URL: SQLAlchemy URL of the relational store (required)
- TRACKED_ACCOUNTS: comma-separated ledger addresses to ingest (required)
- INDEXER_URL: Algorand indexer base URL (default: AlgoNode mainnet indexer)
- INDEXER_API_TOKEN: optional indexer API token
- SYNC_PAGE_SIZE, BACKFILL_PACING_DELAY_MS, INDEXER_TIMEOUT_SEC: sync tuning
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_beantrace/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_INDEXER_URL = "https://mainnet-idx.algonode.cloud"
DEFAULT_PAGE_SIZE = 100
DEFAULT_PACING_DELAY_MS = 100
DEFAULT_TIMEOUT_SEC = 30.0


def load_beantrace_env() -> None:
    """Load .env from project root. Existing environment variables win."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str) -> str:
    """Return a stripped env value, or '' when unset."""
    return (os.getenv(name) or "").strip()


def parse_account_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated address list; drop blanks and later duplicates."""
    seen: set[str] = set()
    accounts: list[str] = []
    for part in raw.split(","):
        address = part.strip()
        if not address or address in seen:
            continue
        seen.add(address)
        accounts.append(address)
    return tuple(accounts)
