"""
Tests for IndexerClient against httpx.MockTransport (no network).
"""

from __future__ import annotations

import base64

import httpx
import pytest

from backend_beantrace.core.exceptions import TransportError
from backend_beantrace.ledger_client import IndexerClient, LedgerPage

BASE_URL = "https://indexer.example"
ACCOUNT = "TRACKEDACCOUNT"
NOTE_TEXT = "PARENT COMPANY ID: 4521"


def _item(tx_id: str, rnd: int, note: str | None = None) -> dict:
    item = {
        "id": tx_id,
        "confirmed-round": rnd,
        "round-time": 1_690_000_000,
        "sender": "SENDER",
        "fee": 1000,
        "tx-type": "pay",
        "payment-transaction": {"receiver": ACCOUNT, "amount": 5},
    }
    if note is not None:
        item["note"] = base64.b64encode(note.encode("utf-8")).decode("ascii")
    return item


def _client(handler, **kwargs) -> IndexerClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return IndexerClient(BASE_URL, http_client=http, **kwargs)


def test_fetch_page_maps_items_and_cursor():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"transactions": [_item("TX1", 10, NOTE_TEXT), _item("TX2", 12)], "next-token": "abc"},
        )

    page = _client(handler).fetch_page(ACCOUNT, limit=2)
    assert isinstance(page, LedgerPage)
    assert page.next_cursor == "abc"
    assert page.has_more is True
    assert page.max_round == 12
    first, second = page.records
    assert first.tx_id == "TX1"
    assert first.account == ACCOUNT
    assert first.round == 10
    assert first.receiver == ACCOUNT
    assert first.amount == 5
    assert first.note_decoded == NOTE_TEXT
    assert second.note_raw is None
    assert second.note_decoded is None
    assert seen[0].url.path == f"/v2/accounts/{ACCOUNT}/transactions"
    assert seen[0].url.params["limit"] == "2"
    assert "next" not in seen[0].url.params
    assert "min-round" not in seen[0].url.params


def test_min_sequence_and_cursor_params():
    params: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append(dict(request.url.params))
        return httpx.Response(200, json={"transactions": []})

    client = _client(handler)
    client.fetch_page(ACCOUNT, min_sequence=101, limit=50)
    client.fetch_page(ACCOUNT, cursor="tok", limit=50)
    assert params[0] == {"limit": "50", "min-round": "101"}
    assert params[1] == {"limit": "50", "next": "tok"}


def test_empty_page_with_cursor_has_no_more():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"transactions": [], "next-token": "x"})

    page = _client(handler).fetch_page(ACCOUNT)
    assert page.records == ()
    assert page.has_more is False
    assert page.max_round is None


def test_api_token_header_is_sent():
    headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get("X-Indexer-API-Token"))
        return httpx.Response(200, json={"transactions": []})

    _client(handler, api_token="secret").fetch_page(ACCOUNT)
    assert headers == ["secret"]


def test_cursor_and_min_sequence_together_rejected():
    client = _client(lambda request: httpx.Response(200, json={"transactions": []}))
    with pytest.raises(ValueError):
        client.fetch_page(ACCOUNT, cursor="tok", min_sequence=5)
    with pytest.raises(ValueError):
        client.fetch_page(ACCOUNT, limit=0)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(429, json={"message": "rate limited"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"message": "no transactions key"}),
    ],
)
def test_upstream_failures_raise_transport_error(response):
    client = _client(lambda request: response)
    with pytest.raises(TransportError):
        client.fetch_page(ACCOUNT)


def test_network_error_raises_transport_error_with_cause():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        _client(handler).fetch_page(ACCOUNT)
    assert isinstance(exc_info.value.cause, httpx.ConnectError)


def test_malformed_items_are_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"transactions": [{"id": "BAD"}, "junk", _item("OK", 7)]},
        )

    page = _client(handler).fetch_page(ACCOUNT)
    assert [r.tx_id for r in page.records] == ["OK"]
    assert page.skipped == 2
    assert page.item_count == 3


def test_page_of_only_unmapped_items_still_has_more():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"transactions": [{"id": "TXBAD"}], "next-token": "p2"})

    page = _client(handler).fetch_page(ACCOUNT)
    assert page.records == ()
    assert page.skipped == 1
    assert page.has_more is True
    assert page.max_round is None


def test_invalid_note_does_not_drop_transaction():
    def handler(request: httpx.Request) -> httpx.Response:
        item = _item("TX9", 9)
        item["note"] = "%%%not-base64%%%"
        return httpx.Response(200, json={"transactions": [item]})

    page = _client(handler).fetch_page(ACCOUNT)
    assert page.records[0].tx_id == "TX9"
    assert page.records[0].note_raw == "%%%not-base64%%%"
    assert page.records[0].note_decoded is None
