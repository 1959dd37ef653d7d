"""
Database layer: store handle, schema, repository for transactions and extracted records.

SQLite or PostgreSQL through SQLAlchemy; every write is idempotent.
"""

from backend_beantrace.database.models import StoredTransaction, SyncCheckpoint
from backend_beantrace.database.repositories import TransactionRepository, WriteMode
from backend_beantrace.database.store import TraceStore

__all__ = [
    "StoredTransaction",
    "SyncCheckpoint",
    "TraceStore",
    "TransactionRepository",
    "WriteMode",
]
