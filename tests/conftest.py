"""
Pytest fixtures for BeanTrace tests. Uses a temporary SQLite file per test and a
scripted in-memory ledger client; nothing touches the network.
"""

from __future__ import annotations

import base64
import json

import pytest

from backend_beantrace.database.repositories import TransactionRepository
from backend_beantrace.database.store import TraceStore
from backend_beantrace.ledger_client.models import LedgerPage, LedgerTransaction
from backend_beantrace.sync.checkpoints import CheckpointStore

ACCOUNT_A = "ACCOUNTAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
ACCOUNT_B = "ACCOUNTBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB"


class FakeClock:
    """Callable clock returning a settable Unix time."""

    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float = 1) -> None:
        self.now += seconds


class FakeLedgerClient:
    """
    Scripted LedgerClient: each account has a queue of pages (or exceptions)
    returned one per fetch_page call. An exhausted queue returns an empty page.
    """

    def __init__(self, script: dict[str, list] | None = None) -> None:
        self.script = {account: list(steps) for account, steps in (script or {}).items()}
        self.calls: list[dict] = []

    def fetch_page(self, account, *, cursor=None, min_sequence=None, limit=100):
        self.calls.append(
            {"account": account, "cursor": cursor, "min_sequence": min_sequence, "limit": limit}
        )
        steps = self.script.get(account) or []
        if not steps:
            return LedgerPage(records=())
        step = steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def calls_for(self, account: str) -> list[dict]:
        return [c for c in self.calls if c["account"] == account]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    """TraceStore on a temporary SQLite file with the schema created."""
    trace_store = TraceStore(f"sqlite:///{tmp_path / 'beantrace.db'}")
    trace_store.ensure_schema()
    yield trace_store
    trace_store.dispose()


@pytest.fixture
def repository(store, clock):
    return TransactionRepository(store, clock=clock)


@pytest.fixture
def checkpoints(store, clock):
    return CheckpointStore(store, clock=clock)


@pytest.fixture
def make_tx():
    """Factory for LedgerTransaction with an optional plain-text note."""

    def _make(
        tx_id: str,
        round: int = 100,
        *,
        account: str = ACCOUNT_A,
        note: str | None = None,
    ) -> LedgerTransaction:
        note_raw = base64.b64encode(note.encode("utf-8")).decode("ascii") if note else None
        item = {"id": tx_id, "confirmed-round": round, "note": note_raw, "tx-type": "pay"}
        return LedgerTransaction(
            tx_id=tx_id,
            account=account,
            round=round,
            round_time=1_690_000_000 + round,
            sender="SENDER",
            receiver=account,
            amount=0,
            fee=1000,
            tx_type="pay",
            note_raw=note_raw,
            note_decoded=note,
            raw_json=json.dumps(item, sort_keys=True),
        )

    return _make


@pytest.fixture
def make_page(make_tx):
    """Factory for LedgerPage from (tx_id, round) pairs."""

    def _make(pairs, *, next_cursor=None, account=ACCOUNT_A, note=None) -> LedgerPage:
        records = tuple(make_tx(tx_id, rnd, account=account, note=note) for tx_id, rnd in pairs)
        return LedgerPage(records=records, next_cursor=next_cursor)

    return _make
