"""
Ingestion orchestrator: incremental sync and historical backfill.

Sequential: one account at a time and one page at a time. The ledger
service is the bottleneck and is paced rather than saturated. Correctness under
overlapping runs comes from idempotent writes and the monotonic checkpoint,
not from locking.

Failure handling:
  - TransportError: the account's attempt ends, its checkpoint is not advanced,
    other accounts continue.
  - PersistenceError on one record, or an upstream item that could not be
    mapped: counted, logged, the page continues.
  - PersistenceError reading the checkpoint, or any unexpected error: that
    account fails, other accounts continue.
  - StoreUnavailableError: the run stops; the current and remaining accounts
    are reported failed.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from backend_beantrace.core.exceptions import (
    PersistenceError,
    StoreUnavailableError,
    TransportError,
)
from backend_beantrace.database.repositories import TransactionRepository
from backend_beantrace.extraction import extract_all
from backend_beantrace.ledger_client.client import LedgerClient
from backend_beantrace.ledger_client.models import LedgerPage, LedgerTransaction
from backend_beantrace.sync.checkpoints import CheckpointStore
from backend_beantrace.sync.results import AccountOutcome, BackfillResult, SyncResult
from backend_beantrace.trace_logging import (
    bind_account,
    bind_transaction,
    get_logger,
    run_context,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_PACING_DELAY_MS = 100


class IngestionOrchestrator:
    """Drives sync_all / backfill_all across the tracked accounts."""

    def __init__(
        self,
        client: LedgerClient,
        repository: TransactionRepository,
        checkpoints: CheckpointStore,
        accounts: Sequence[str],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        pacing_delay_ms: int = DEFAULT_PACING_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._repository = repository
        self._checkpoints = checkpoints
        self._accounts = tuple(accounts)
        self._page_size = page_size
        self._pacing_delay_ms = pacing_delay_ms
        self._sleep = sleep

    @property
    def accounts(self) -> tuple[str, ...]:
        return self._accounts

    # ------------------------------------------------------------------
    # Incremental sync
    # ------------------------------------------------------------------

    def sync_all(self) -> SyncResult:
        """One page per account, starting just past its checkpoint."""
        with run_context("sync"):
            logger.info("sync_started", accounts=len(self._accounts), page_size=self._page_size)
            outcomes = self._run(self._sync_account)
            result = SyncResult.from_outcomes(outcomes)
            logger.info(
                "sync_finished",
                status=result.status.value,
                processed_count=result.processed_count,
                failed_count=result.failed_count,
                failed_accounts=len(result.per_account_errors),
            )
        return result

    def _sync_account(self, account: str) -> AccountOutcome:
        log = bind_account(account)
        outcome = AccountOutcome(account=account)
        try:
            checkpoint = self._checkpoints.get(account)
        except StoreUnavailableError:
            raise
        except PersistenceError as e:
            log.error("checkpoint_read_failed", error=str(e))
            outcome.error = str(e)
            return outcome
        min_sequence = None
        if checkpoint is not None and checkpoint.last_round is not None:
            min_sequence = checkpoint.last_round + 1
        try:
            page = self._client.fetch_page(
                account, min_sequence=min_sequence, limit=self._page_size
            )
        except TransportError as e:
            log.warning("sync_fetch_failed", error=str(e), min_round=min_sequence)
            outcome.error = str(e)
            return outcome
        outcome.pages = 1
        self._process_page(page, outcome)
        outcome.max_round = page.max_round
        self._advance(account, outcome)
        log.info(
            "account_synced",
            min_round=min_sequence,
            records=len(page.records),
            processed=outcome.processed,
            failed=outcome.failed,
            max_round=outcome.max_round,
        )
        return outcome

    # ------------------------------------------------------------------
    # Backfill
    # ------------------------------------------------------------------

    def backfill_all(
        self,
        page_size: int | None = None,
        pacing_delay_ms: int | None = None,
    ) -> BackfillResult:
        """Cursor-paginate every account to exhaustion, pacing between pages."""
        size = page_size if page_size is not None else self._page_size
        delay_ms = pacing_delay_ms if pacing_delay_ms is not None else self._pacing_delay_ms
        if size < 1:
            raise ValueError("page_size must be >= 1")
        if delay_ms < 0:
            raise ValueError("pacing_delay_ms must be >= 0")
        with run_context("backfill"):
            logger.info(
                "backfill_started",
                accounts=len(self._accounts),
                page_size=size,
                pacing_delay_ms=delay_ms,
            )
            outcomes = self._run(lambda account: self._backfill_account(account, size, delay_ms))
            result = BackfillResult.from_outcomes(outcomes)
            logger.info(
                "backfill_finished",
                status=result.status.value,
                total_records=result.total_records,
                pages_processed=result.pages_processed,
                failed_count=result.failed_count,
                failed_accounts=len(result.per_account_errors),
            )
        return result

    def _backfill_account(self, account: str, page_size: int, delay_ms: int) -> AccountOutcome:
        log = bind_account(account)
        outcome = AccountOutcome(account=account)
        cursor: str | None = None
        while True:
            if outcome.pages and delay_ms:
                self._sleep(delay_ms / 1000.0)
            try:
                page = self._client.fetch_page(account, cursor=cursor, limit=page_size)
            except TransportError as e:
                # Pages already processed stay stored; the checkpoint does not move.
                log.warning(
                    "backfill_fetch_failed",
                    error=str(e),
                    pages=outcome.pages,
                    processed=outcome.processed,
                )
                outcome.error = str(e)
                return outcome
            outcome.pages += 1
            self._process_page(page, outcome)
            page_max = page.max_round
            if page_max is not None and (outcome.max_round is None or page_max > outcome.max_round):
                outcome.max_round = page_max
            log.debug(
                "backfill_page_processed",
                page=outcome.pages,
                records=len(page.records),
                has_more=page.has_more,
            )
            if not page.has_more:
                break
            cursor = page.next_cursor
        self._advance(account, outcome)
        log.info(
            "account_backfilled",
            pages=outcome.pages,
            processed=outcome.processed,
            failed=outcome.failed,
            max_round=outcome.max_round,
        )
        return outcome

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _run(self, handle: Callable[[str], AccountOutcome]) -> list[AccountOutcome]:
        outcomes: list[AccountOutcome] = []
        for index, account in enumerate(self._accounts):
            try:
                outcomes.append(handle(account))
            except StoreUnavailableError as e:
                logger.error(
                    "run_aborted_store_unavailable",
                    account=account,
                    error=str(e),
                    remaining=len(self._accounts) - index - 1,
                )
                message = str(e)
                outcomes.extend(
                    AccountOutcome(account=rest, error=message)
                    for rest in self._accounts[index:]
                )
                break
            except Exception as e:
                logger.error("account_run_failed", account=account, error=str(e), exc_info=True)
                outcomes.append(AccountOutcome(account=account, error=str(e)))
        return outcomes

    def _advance(self, account: str, outcome: AccountOutcome) -> None:
        try:
            self._checkpoints.advance(account, outcome.max_round)
        except StoreUnavailableError:
            raise
        except PersistenceError as e:
            bind_account(account).error("checkpoint_advance_failed", error=str(e))
            outcome.error = str(e)

    def _process_page(self, page: LedgerPage, outcome: AccountOutcome) -> None:
        # Unmapped upstream items count as record failures.
        outcome.failed += page.skipped
        for record in page.records:
            if self._process_record(record):
                outcome.processed += 1
            else:
                outcome.failed += 1

    def _process_record(self, record: LedgerTransaction) -> bool:
        """Persist one transaction and its extracted records. False on a per-record failure."""
        log = bind_transaction(record.tx_id, account=record.account)
        try:
            key = self._repository.save_transaction(record)
        except StoreUnavailableError:
            raise
        except PersistenceError as e:
            log.error("transaction_save_failed", error=str(e))
            return False
        if not record.note_decoded:
            return True
        ok = True
        for extracted in extract_all(record.note_decoded, tx_id=record.tx_id):
            try:
                self._repository.save_extracted(key, record.tx_id, extracted, record.note_decoded)
            except StoreUnavailableError:
                raise
            except PersistenceError as e:
                log.error("extracted_save_failed", kind=extracted.kind.value, error=str(e))
                ok = False
        return ok
