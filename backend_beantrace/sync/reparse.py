"""
Re-parse maintenance flow.

Re-runs every extractor over every stored transaction that has decoded text
and writes the results in upsert mode, so records written by an older pattern
set are overwritten in place. Not used by steady-state ingestion.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from backend_beantrace.core.exceptions import PersistenceError, StoreUnavailableError
from backend_beantrace.database.repositories import TransactionRepository, WriteMode
from backend_beantrace.extraction import extract_all
from backend_beantrace.trace_logging import bind_transaction, get_logger, run_context

logger = get_logger(__name__)


@dataclass
class ReparseResult:
    scanned: int = 0
    """Transactions with decoded text that were examined."""
    updated: int = 0
    """Extracted records inserted or overwritten."""
    skipped: int = 0
    """Transactions where no extractor matched."""
    failed: int = 0
    """Extracted-record writes that raised PersistenceError."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def reparse_transactions(
    repository: TransactionRepository, *, batch_size: int = 500
) -> ReparseResult:
    """Re-extract all stored notes. StoreUnavailableError propagates."""
    result = ReparseResult()
    with run_context("reparse"):
        logger.info("reparse_started", batch_size=batch_size)
        for stored in repository.iter_transactions_with_notes(batch_size=batch_size):
            result.scanned += 1
            records = extract_all(stored.note_decoded, tx_id=stored.tx_id)
            if not records:
                result.skipped += 1
                continue
            for record in records:
                try:
                    written = repository.save_extracted(
                        stored.id,
                        stored.tx_id,
                        record,
                        stored.note_decoded or "",
                        mode=WriteMode.UPSERT,
                    )
                except StoreUnavailableError:
                    raise
                except PersistenceError as e:
                    bind_transaction(stored.tx_id, kind=record.kind.value).error(
                        "reparse_save_failed", error=str(e)
                    )
                    result.failed += 1
                    continue
                if written:
                    result.updated += 1
        logger.info("reparse_finished", **result.to_dict())
    return result
