"""
Trigger surface: the entry points a scheduler or request handler calls.

Each call builds its collaborators from Settings (store handle, ledger client,
repository, checkpoint store), runs, and releases them. Callers that already
hold collaborators should use IngestionOrchestrator directly.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from typing import Any, Iterator

from backend_beantrace.config import Settings, get_settings
from backend_beantrace.core.exceptions import StoreUnavailableError
from backend_beantrace.database.repositories import TransactionRepository
from backend_beantrace.database.store import TraceStore
from backend_beantrace.ledger_client.client import IndexerClient
from backend_beantrace.sync.checkpoints import CheckpointStore
from backend_beantrace.sync.orchestrator import IngestionOrchestrator
from backend_beantrace.sync.reparse import ReparseResult, reparse_transactions
from backend_beantrace.sync.results import AccountOutcome, BackfillResult, SyncResult
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)


@contextmanager
def _open_store(settings: Settings) -> Iterator[TraceStore]:
    store = TraceStore.from_settings(settings)
    try:
        store.ensure_schema()
        yield store
    finally:
        store.dispose()


@contextmanager
def _orchestrator(settings: Settings) -> Iterator[IngestionOrchestrator]:
    with _open_store(settings) as store, IndexerClient.from_settings(settings) as client:
        yield IngestionOrchestrator(
            client,
            TransactionRepository(store),
            CheckpointStore(store),
            settings.tracked_accounts,
            page_size=settings.page_size,
            pacing_delay_ms=settings.pacing_delay_ms,
        )


def _store_down(settings: Settings, run: str, error: StoreUnavailableError) -> list[AccountOutcome]:
    """Every tracked account fails with the store error, as when the store drops mid-run."""
    logger.error(
        "run_aborted_store_unavailable",
        run=run,
        error=str(error),
        remaining=len(settings.tracked_accounts),
    )
    return [
        AccountOutcome(account=account, error=str(error))
        for account in settings.tracked_accounts
    ]


def run_incremental_sync(settings: Settings | None = None) -> SyncResult:
    """One incremental pass over all tracked accounts."""
    settings = settings or get_settings()
    try:
        with _orchestrator(settings) as orchestrator:
            return orchestrator.sync_all()
    except StoreUnavailableError as e:
        return SyncResult.from_outcomes(_store_down(settings, "sync", e))


def run_backfill(
    page_size: int | None = None,
    pacing_delay_ms: int | None = None,
    settings: Settings | None = None,
) -> BackfillResult:
    """Full historical backfill; page size and pacing default to Settings."""
    settings = settings or get_settings()
    try:
        with _orchestrator(settings) as orchestrator:
            return orchestrator.backfill_all(page_size=page_size, pacing_delay_ms=pacing_delay_ms)
    except StoreUnavailableError as e:
        return BackfillResult.from_outcomes(_store_down(settings, "backfill", e))


def run_reparse(settings: Settings | None = None) -> ReparseResult:
    settings = settings or get_settings()
    with _open_store(settings) as store:
        return reparse_transactions(TransactionRepository(store))


def get_sync_status(settings: Settings | None = None) -> list[dict[str, Any]]:
    """Checkpoint per tracked account; accounts never synced report None fields."""
    settings = settings or get_settings()
    with _open_store(settings) as store:
        stored = {cp.account: cp for cp in CheckpointStore(store).list_all()}
    status: list[dict[str, Any]] = []
    for account in settings.tracked_accounts:
        checkpoint = stored.get(account)
        if checkpoint is None:
            status.append(
                {"account": account, "last_round": None, "last_synced_at": None, "created_at": None}
            )
        else:
            status.append(asdict(checkpoint))
    return status
