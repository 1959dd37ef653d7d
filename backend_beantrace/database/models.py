"""
Domain models for stored rows.

Returned by the repository and checkpoint store so callers never hold ORM
instances bound to a closed session.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StoredTransaction:
    """Single ledger transaction row."""

    id: int
    """Internal key; referenced by extracted records."""
    tx_id: str
    account: str
    round: int
    round_time: int | None
    sender: str | None
    receiver: str | None
    amount: int | None
    fee: int | None
    tx_type: str | None
    note_raw: str | None
    note_decoded: str | None
    raw_json: str
    created_at: int


@dataclass
class SyncCheckpoint:
    """Per-account sync cursor."""

    account: str
    last_round: int | None
    """Highest fully processed round; None until a sync has seen a transaction."""
    last_synced_at: int
    """Unix timestamp (seconds) of the most recent sync attempt."""
    created_at: int
