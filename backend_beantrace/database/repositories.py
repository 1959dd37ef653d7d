"""
Idempotent writers and readers for transactions and extracted records.

save_transaction is the single de-duplication boundary: a second sighting of a
tx_id (another tracked account, an overlapping sync range, a concurrent run)
is a no-op plus lookup. save_extracted inserts-or-ignores in steady-state
ingestion and upserts in the re-parse flow.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Iterator

from sqlalchemy import func, select

from backend_beantrace.core.exceptions import PersistenceError
from backend_beantrace.database.models import StoredTransaction
from backend_beantrace.database.schema import KIND_TABLES, LedgerTransactionRow
from backend_beantrace.database.store import TraceStore
from backend_beantrace.extraction.records import RECORD_TYPES, ExtractedRecord, RecordKind
from backend_beantrace.ledger_client.models import LedgerTransaction
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)


class WriteMode(str, Enum):
    INSERT_IGNORE = "insert_ignore"
    UPSERT = "upsert"


class TransactionRepository:
    """Persistence for ledger transactions and their extracted records."""

    def __init__(self, store: TraceStore, *, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def save_transaction(self, tx: LedgerTransaction) -> int:
        """Insert-or-ignore by tx_id; return the internal key of the (new or existing) row."""
        now = int(self._clock())
        stmt = (
            self._store.insert(LedgerTransactionRow)
            .values(
                tx_id=tx.tx_id,
                account=tx.account,
                round=tx.round,
                round_time=tx.round_time,
                sender=tx.sender,
                receiver=tx.receiver,
                amount=tx.amount,
                fee=tx.fee,
                tx_type=tx.tx_type,
                note_raw=tx.note_raw,
                note_decoded=tx.note_decoded,
                raw_json=tx.raw_json,
                created_at=now,
            )
            .on_conflict_do_nothing(index_elements=["tx_id"])
        )
        with self._store.session_scope() as session:
            inserted = session.execute(stmt).rowcount == 1
            key = session.execute(
                select(LedgerTransactionRow.id).where(LedgerTransactionRow.tx_id == tx.tx_id)
            ).scalar_one_or_none()
        if key is None:
            raise PersistenceError(f"transaction {tx.tx_id} missing after insert")
        if not inserted:
            logger.debug("transaction_already_stored", tx_id=tx.tx_id, account=tx.account)
        return key

    def save_extracted(
        self,
        internal_key: int,
        tx_id: str,
        record: ExtractedRecord,
        raw_text: str,
        *,
        mode: WriteMode = WriteMode.INSERT_IGNORE,
    ) -> bool:
        """
        Write one extracted record keyed by (transaction, kind).

        INSERT_IGNORE leaves an existing record untouched; UPSERT overwrites its
        fields in place. Returns True when a row was inserted or updated.
        """
        table = KIND_TABLES[record.kind]
        now = int(self._clock())
        values = record.values()
        stmt = self._store.insert(table).values(
            transaction_key=internal_key,
            tx_id=tx_id,
            raw_text=raw_text,
            created_at=now,
            updated_at=now,
            **values,
        )
        if mode is WriteMode.UPSERT:
            stmt = stmt.on_conflict_do_update(
                index_elements=["transaction_key"],
                set_={**values, "raw_text": raw_text, "updated_at": now},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["transaction_key"])
        with self._store.session_scope() as session:
            written = session.execute(stmt).rowcount == 1
        logger.debug(
            "extracted_record_saved",
            kind=record.kind.value,
            tx_id=tx_id,
            mode=mode.value,
            written=written,
        )
        return written

    def get_transaction(self, tx_id: str) -> StoredTransaction | None:
        with self._store.session_scope() as session:
            row = session.execute(
                select(LedgerTransactionRow).where(LedgerTransactionRow.tx_id == tx_id)
            ).scalar_one_or_none()
            return _to_stored(row) if row is not None else None

    def get_extracted(self, internal_key: int, kind: RecordKind) -> ExtractedRecord | None:
        table = KIND_TABLES[kind]
        record_type = RECORD_TYPES[kind]
        with self._store.session_scope() as session:
            row = session.execute(
                select(table).where(table.transaction_key == internal_key)
            ).scalar_one_or_none()
            if row is None:
                return None
            return record_type(**{name: getattr(row, name) for name in record_type.field_names()})

    def count_transactions(self) -> int:
        with self._store.session_scope() as session:
            return session.execute(select(func.count(LedgerTransactionRow.id))).scalar_one()

    def count_extracted(self, kind: RecordKind) -> int:
        table = KIND_TABLES[kind]
        with self._store.session_scope() as session:
            return session.execute(select(func.count(table.id))).scalar_one()

    def iter_transactions_with_notes(self, batch_size: int = 500) -> Iterator[StoredTransaction]:
        """Yield stored transactions that have decoded text, by internal key, in batches."""
        last_id = 0
        while True:
            with self._store.session_scope() as session:
                rows = session.execute(
                    select(LedgerTransactionRow)
                    .where(
                        LedgerTransactionRow.id > last_id,
                        LedgerTransactionRow.note_decoded.is_not(None),
                    )
                    .order_by(LedgerTransactionRow.id)
                    .limit(batch_size)
                ).scalars().all()
                batch = [_to_stored(row) for row in rows]
            if not batch:
                return
            yield from batch
            last_id = batch[-1].id


def _to_stored(row: LedgerTransactionRow) -> StoredTransaction:
    return StoredTransaction(
        id=row.id,
        tx_id=row.tx_id,
        account=row.account,
        round=row.round,
        round_time=row.round_time,
        sender=row.sender,
        receiver=row.receiver,
        amount=row.amount,
        fee=row.fee,
        tx_type=row.tx_type,
        note_raw=row.note_raw,
        note_decoded=row.note_decoded,
        raw_json=row.raw_json,
        created_at=row.created_at,
    )
