"""
Data models for ledger client output.

LedgerTransaction mirrors the indexer's account-transaction fields; LedgerPage
is one page of results plus the opaque continuation cursor.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from backend_beantrace.ledger_client.decoder import decode_note


@dataclass(frozen=True)
class LedgerTransaction:
    """
    One ledger entry observed for a tracked account.

    Immutable; tx_id is globally unique across accounts.
    """

    tx_id: str
    account: str
    """Tracked account the transaction was observed under."""
    round: int
    """Confirmed round (ledger sequence number)."""
    round_time: int | None
    """Unix timestamp (seconds) of the round; None if not available."""
    sender: str | None
    receiver: str | None
    amount: int | None
    """Payment amount in microAlgos; None for non-payment transactions."""
    fee: int | None
    tx_type: str | None
    note_raw: str | None
    """Base64 note exactly as delivered by the indexer."""
    note_decoded: str | None
    raw_json: str
    """Canonical JSON of the full indexer item, for forensic replay."""

    @classmethod
    def from_indexer_item(cls, item: dict[str, Any], account: str) -> "LedgerTransaction":
        """Build from a single /v2/accounts/{account}/transactions item."""
        tx_id = item["id"]
        payment = item.get("payment-transaction") or {}
        note_raw = item.get("note") or None
        return cls(
            tx_id=str(tx_id),
            account=account,
            round=int(item["confirmed-round"]),
            round_time=_optional_int(item.get("round-time")),
            sender=item.get("sender"),
            receiver=payment.get("receiver"),
            amount=_optional_int(payment.get("amount")),
            fee=_optional_int(item.get("fee")),
            tx_type=item.get("tx-type"),
            note_raw=note_raw,
            note_decoded=decode_note(note_raw, tx_id=str(tx_id)),
            raw_json=json.dumps(item, sort_keys=True),
        )


@dataclass(frozen=True)
class LedgerPage:
    """One page of transactions for an account."""

    records: tuple[LedgerTransaction, ...]
    next_cursor: str | None = None
    skipped: int = 0
    """Items the upstream returned that could not be mapped to a transaction."""

    @property
    def item_count(self) -> int:
        """Items the upstream returned, mapped or not."""
        return len(self.records) + self.skipped

    @property
    def has_more(self) -> bool:
        """An empty page ends pagination even when the upstream still returns a cursor."""
        return bool(self.next_cursor) and self.item_count > 0

    @property
    def max_round(self) -> int | None:
        return max((r.round for r in self.records), default=None)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)
