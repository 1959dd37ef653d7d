"""
Application-level exceptions.

DecodeError and ExtractionError are recovered where they occur and only ever
logged. TransportError aborts one account's sync attempt. PersistenceError is
counted per record; StoreUnavailableError aborts the whole run.
"""

from __future__ import annotations


class BeanTraceError(Exception):
    """Base exception for all BeanTrace failures."""


class ConfigError(BeanTraceError):
    """Raised when required runtime configuration is missing or invalid."""


class TransportError(BeanTraceError):
    """Raised when the upstream indexer is unreachable or rejects a request."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DecodeError(BeanTraceError):
    """Annotation bytes present but not valid text."""


class ExtractionError(BeanTraceError):
    """Pattern engine failure while extracting one record kind."""


class PersistenceError(BeanTraceError):
    """Store write or read failed for a reason other than the expected duplicate key."""


class StoreUnavailableError(PersistenceError):
    """Store connection lost or unreachable; remaining work should not be attempted."""
