"""
Tests for the run entry points, wired end to end against a temporary SQLite
store and a mocked indexer.
"""

from __future__ import annotations

import base64

import httpx
import pytest

from backend_beantrace.config import Settings
from backend_beantrace.ledger_client import IndexerClient
from backend_beantrace.sync import (
    RunStatus,
    get_sync_status,
    run_backfill,
    run_incremental_sync,
    run_reparse,
)

ACCOUNT = "TRACKED1"
OTHER = "TRACKED2"
NOTE = "PARENT COMPANY ID: 4521\nZONE 1\nCoffee Species: Arabica\n"


def _item(tx_id: str, rnd: int) -> dict:
    return {
        "id": tx_id,
        "confirmed-round": rnd,
        "tx-type": "pay",
        "note": base64.b64encode(NOTE.encode("utf-8")).decode("ascii"),
    }


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'service.db'}",
        tracked_accounts=(ACCOUNT, OTHER),
        indexer_url="https://indexer.example",
        pacing_delay_ms=0,
    )


@pytest.fixture
def indexer(monkeypatch):
    """Serve canned pages: ACCOUNT has two pages, OTHER always fails with 503."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if OTHER in request.url.path:
            return httpx.Response(503, text="unavailable")
        if request.url.params.get("next") == "page2":
            return httpx.Response(200, json={"transactions": [_item("TX3", 30)]})
        return httpx.Response(
            200,
            json={"transactions": [_item("TX1", 10), _item("TX2", 20)], "next-token": "page2"},
        )

    def from_settings(cls, settings):
        http = httpx.Client(transport=httpx.MockTransport(handler))
        return cls(settings.indexer_url, http_client=http)

    monkeypatch.setattr(IndexerClient, "from_settings", classmethod(from_settings))
    return requests


def test_incremental_sync_end_to_end(settings, indexer):
    result = run_incremental_sync(settings)

    assert result.status is RunStatus.PARTIAL
    assert result.processed_count == 2
    assert OTHER in result.per_account_errors
    status = {row["account"]: row for row in get_sync_status(settings)}
    assert status[ACCOUNT]["last_round"] == 20
    assert status[OTHER]["last_round"] is None
    assert status[OTHER]["last_synced_at"] is None


def test_backfill_end_to_end(settings, indexer):
    result = run_backfill(page_size=2, settings=settings)

    assert result.status is RunStatus.PARTIAL
    assert result.total_records == 3
    assert result.pages_processed == 2
    status = {row["account"]: row for row in get_sync_status(settings)}
    assert status[ACCOUNT]["last_round"] == 30
    limits = {r.url.params["limit"] for r in indexer}
    assert limits == {"2"}


def test_reparse_after_sync(settings, indexer):
    run_incremental_sync(settings)
    result = run_reparse(settings)
    assert result.scanned == 2
    assert result.updated == 2


def test_store_unreachable_at_start_reports_failed(tmp_path, indexer):
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'missing-dir' / 'service.db'}",
        tracked_accounts=(ACCOUNT, OTHER),
        indexer_url="https://indexer.example",
        pacing_delay_ms=0,
    )

    sync = run_incremental_sync(settings)
    backfill = run_backfill(settings=settings)

    for result in (sync, backfill):
        assert result.status is RunStatus.FAILED
        assert set(result.per_account_errors) == {ACCOUNT, OTHER}
        assert all("unavailable" in msg.lower() for msg in result.per_account_errors.values())
    assert indexer == []
