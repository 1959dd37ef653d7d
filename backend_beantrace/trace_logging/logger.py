"""
Structured logging for ingestion runs.

Every line is one JSON object (or a console line with LOG_FORMAT=console) with
an ISO timestamp, level and event_type. Modules log a snake_case event name
with keyword fields; the common keys are account, tx_id, kind and error.

Run scope: run_context("sync" | "backfill" | "reparse") binds run and run_id
into contextvars for the duration of one orchestrator run, so every line that
run emits (client, extractors, repository) can be grouped without passing a
logger around. Fields logged as None are dropped.

Uses only stdlib logging and structlog; no other backend_beantrace imports, to
avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json for deployed runs, console for local work
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

RUN_KEYS = ("run", "run_id")


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _drop_none_fields(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Optional context (tx_id outside a transaction, min_round on a first sync) is omitted, not null."""
    return {key: value for key, value in event_dict.items() if value is not None}


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _drop_none_fields,
        _add_timestamp,
        _normalize_event,
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module.

        logger = get_logger(__name__)
        logger.info("indexer_page_fetched", account=addr, record_count=100)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_account(account: str) -> structlog.BoundLogger:
    """Logger with account bound to all subsequent calls."""
    return get_logger("backend_beantrace").bind(account=account)


def bind_transaction(
    tx_id: str | None,
    *,
    account: str | None = None,
    kind: str | None = None,
) -> structlog.BoundLogger:
    """Logger for work on one transaction; kind is the record kind being extracted or written."""
    return get_logger("backend_beantrace").bind(tx_id=tx_id, account=account, kind=kind)


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def run_context(run: str, run_id: str | None = None) -> Iterator[str]:
    """Bind run and run_id for every log line emitted inside the block; yields the run_id."""
    run_id = run_id or new_run_id()
    with structlog.contextvars.bound_contextvars(run=run, run_id=run_id):
        yield run_id
