"""
Sync: checkpoints, ingestion orchestrator, re-parse flow and run entry points.
"""

from backend_beantrace.sync.checkpoints import CheckpointStore
from backend_beantrace.sync.orchestrator import IngestionOrchestrator
from backend_beantrace.sync.reparse import ReparseResult, reparse_transactions
from backend_beantrace.sync.results import (
    AccountOutcome,
    BackfillResult,
    RunStatus,
    SyncResult,
)
from backend_beantrace.sync.service import (
    get_sync_status,
    run_backfill,
    run_incremental_sync,
    run_reparse,
)

__all__ = [
    "AccountOutcome",
    "BackfillResult",
    "CheckpointStore",
    "IngestionOrchestrator",
    "ReparseResult",
    "RunStatus",
    "SyncResult",
    "get_sync_status",
    "run_backfill",
    "run_incremental_sync",
    "run_reparse",
    "reparse_transactions",
]
