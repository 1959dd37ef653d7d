"""
Store handle: engine, sessions and dialect-aware conflict-safe inserts.

Constructed once at startup (from Settings or an explicit URL) and injected
into the repository and checkpoint store. SQLite and PostgreSQL are supported;
both provide INSERT ... ON CONFLICT, which every idempotent write relies on.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker

from backend_beantrace.core.exceptions import (
    ConfigError,
    PersistenceError,
    StoreUnavailableError,
)
from backend_beantrace.database.schema import Base
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)

SUPPORTED_DIALECTS = ("sqlite", "postgresql")


class TraceStore:
    """Explicit store handle; one per process."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        url = (url or "").strip()
        if not url:
            raise ConfigError("DATABASE_URL is not set")
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        try:
            self._engine = create_engine(
                url, connect_args=connect_args, pool_pre_ping=True, echo=echo
            )
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise ConfigError(f"Invalid DATABASE_URL: {e}") from e
        if self._engine.dialect.name not in SUPPORTED_DIALECTS:
            raise ConfigError(
                f"Unsupported database dialect {self._engine.dialect.name!r}; "
                f"use one of {', '.join(SUPPORTED_DIALECTS)}"
            )
        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False
        )
        logger.info(
            "store_engine_created",
            dialect=self._engine.dialect.name,
            url=url.split("?")[0].split("@")[-1],
        )

    @classmethod
    def from_settings(cls, settings: Any) -> "TraceStore":
        return cls(settings.database_url)

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        try:
            Base.metadata.create_all(self._engine)
        except (OperationalError, InterfaceError, DisconnectionError) as e:
            raise StoreUnavailableError(f"Store unavailable: {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Schema creation failed: {e}") from e

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back on error; translate SQLAlchemy errors."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except (OperationalError, InterfaceError, DisconnectionError) as e:
            session.rollback()
            raise StoreUnavailableError(f"Store unavailable: {e}") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Store operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, model: type) -> Any:
        """Dialect-specific INSERT supporting on_conflict_do_nothing / on_conflict_do_update."""
        if self.dialect_name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert
        return insert(getattr(model, "__table__", model))


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()
