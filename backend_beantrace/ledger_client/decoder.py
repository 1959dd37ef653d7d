"""
Transaction note decoding.

The indexer returns notes as base64 text; stored rows may carry raw bytes.
Malformed notes never abort ingestion of the owning transaction: failures are
logged and the decoded text is simply absent.
"""

from __future__ import annotations

import base64
import binascii

from backend_beantrace.core.exceptions import DecodeError
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)


def decode_note(raw: str | bytes | None, *, tx_id: str | None = None) -> str | None:
    """Decode a base64 (str) or raw (bytes) note to UTF-8 text; None when absent or malformed."""
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            data = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as e:
            _log_failure(DecodeError(f"invalid base64 note: {e}"), tx_id)
            return None
    else:
        data = bytes(raw)
    if not data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        _log_failure(DecodeError(f"note is not valid UTF-8: {e}"), tx_id)
        return None


def _log_failure(error: DecodeError, tx_id: str | None) -> None:
    logger.warning("note_decode_failed", tx_id=tx_id, error=str(error))
