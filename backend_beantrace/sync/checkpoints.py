"""
Per-account sync checkpoints.

advance() is a single upsert: the stored round only ever moves forward, and
last_synced_at is refreshed on every call, including no-op syncs. Overlapping
runs therefore cannot regress each other's progress.
"""

from __future__ import annotations

import time
from typing import Callable

from sqlalchemy import case, select

from backend_beantrace.database.models import SyncCheckpoint
from backend_beantrace.database.schema import SyncCheckpointRow
from backend_beantrace.database.store import TraceStore
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)


class CheckpointStore:
    def __init__(self, store: TraceStore, *, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def get(self, account: str) -> SyncCheckpoint | None:
        with self._store.session_scope() as session:
            row = session.execute(
                select(SyncCheckpointRow).where(SyncCheckpointRow.account == account)
            ).scalar_one_or_none()
            return _to_checkpoint(row) if row is not None else None

    def advance(self, account: str, sequence: int | None) -> SyncCheckpoint:
        """
        Record a sync attempt for account.

        sequence=None only refreshes freshness (nothing observed). A sequence
        lower than the stored one is ignored; equal is a freshness-only no-op.
        """
        now = int(self._clock())
        stmt = self._store.insert(SyncCheckpointRow).values(
            account=account,
            last_round=sequence,
            last_synced_at=now,
            created_at=now,
        )
        current = SyncCheckpointRow.__table__.c.last_round
        incoming = stmt.excluded.last_round
        stmt = stmt.on_conflict_do_update(
            index_elements=["account"],
            set_={
                "last_round": case(
                    (current.is_(None), incoming),
                    (incoming > current, incoming),
                    else_=current,
                ),
                "last_synced_at": now,
            },
        )
        with self._store.session_scope() as session:
            session.execute(stmt)
            row = session.execute(
                select(SyncCheckpointRow).where(SyncCheckpointRow.account == account)
            ).scalar_one()
            checkpoint = _to_checkpoint(row)
        if sequence is not None and checkpoint.last_round != sequence:
            logger.info(
                "checkpoint_regression_ignored",
                account=account,
                requested=sequence,
                last_round=checkpoint.last_round,
            )
        return checkpoint

    def list_all(self) -> list[SyncCheckpoint]:
        with self._store.session_scope() as session:
            rows = session.execute(
                select(SyncCheckpointRow).order_by(SyncCheckpointRow.account)
            ).scalars().all()
            return [_to_checkpoint(row) for row in rows]


def _to_checkpoint(row: SyncCheckpointRow) -> SyncCheckpoint:
    return SyncCheckpoint(
        account=row.account,
        last_round=row.last_round,
        last_synced_at=row.last_synced_at,
        created_at=row.created_at,
    )
