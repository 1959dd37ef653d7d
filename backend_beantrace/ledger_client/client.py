"""
Algorand indexer client: one paginated read per call.

Responsibilities:
- Fetch account transactions, bounded by min-round (incremental sync) or
  continued by the indexer's next-token (backfill).
- Map raw indexer items to LedgerTransaction.
- Surface every transport / upstream failure as TransportError. No retries here:
  retry-by-rerun is the recovery mechanism, pacing is the caller's concern.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from backend_beantrace.core.exceptions import TransportError
from backend_beantrace.ledger_client.models import LedgerPage, LedgerTransaction
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_TIMEOUT_SEC = 30.0
API_TOKEN_HEADER = "X-Indexer-API-Token"


class LedgerClient(Protocol):
    """What the orchestrator needs from an upstream ledger."""

    def fetch_page(
        self,
        account: str,
        *,
        cursor: str | None = None,
        min_sequence: int | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> LedgerPage: ...


class IndexerClient:
    """
    HTTP client for GET /v2/accounts/{account}/transactions.

    Owns an httpx.Client unless one is passed in (tests pass a client built on
    httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._base_url = base_url.rstrip("/")
        self._headers = {API_TOKEN_HEADER: api_token} if api_token else {}
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout_sec)
        )

    @classmethod
    def from_settings(cls, settings: Any) -> "IndexerClient":
        return cls(
            settings.indexer_url,
            api_token=settings.indexer_api_token,
            timeout_sec=settings.request_timeout_sec,
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "IndexerClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def fetch_page(
        self,
        account: str,
        *,
        cursor: str | None = None,
        min_sequence: int | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> LedgerPage:
        """
        Fetch one page of transactions for account.

        Pass cursor to continue a backfill or min_sequence for an incremental
        read; neither returns the most recent `limit` transactions.

        Raises:
            ValueError: both cursor and min_sequence given, or limit < 1.
            TransportError: network failure, non-2xx status or malformed body.
        """
        if cursor and min_sequence is not None:
            raise ValueError("pass either cursor or min_sequence, not both")
        if limit < 1:
            raise ValueError("limit must be positive")
        params: dict[str, Any] = {"limit": limit}
        if cursor:
            params["next"] = cursor
        elif min_sequence is not None:
            params["min-round"] = min_sequence

        url = f"{self._base_url}/v2/accounts/{account}/transactions"
        try:
            resp = self._http.get(url, params=params, headers=self._headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"indexer returned HTTP {e.response.status_code} for {account}", cause=e
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"indexer request failed for {account}: {e}", cause=e) from e
        except ValueError as e:
            raise TransportError(f"indexer returned invalid JSON for {account}", cause=e) from e

        items = data.get("transactions") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise TransportError(f"indexer response for {account} has no transactions list")

        records = tuple(self._parse_items(account, items))
        skipped = len(items) - len(records)
        next_cursor = data.get("next-token") or None
        logger.info(
            "indexer_page_fetched",
            account=account,
            record_count=len(records),
            skipped=skipped,
            has_cursor=next_cursor is not None,
            min_round=min_sequence,
        )
        return LedgerPage(records=records, next_cursor=next_cursor, skipped=skipped)

    @staticmethod
    def _parse_items(account: str, items: list[Any]) -> list[LedgerTransaction]:
        records: list[LedgerTransaction] = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(
                    "indexer_item_skipped",
                    account=account,
                    error=f"expected object, got {type(item).__name__}",
                )
                continue
            try:
                records.append(LedgerTransaction.from_indexer_item(item, account))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "indexer_item_skipped",
                    account=account,
                    tx_id=item.get("id"),
                    error=str(e),
                )
        return records
