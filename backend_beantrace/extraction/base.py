"""
Shared extraction algorithm.

An extractor walks its ordered pattern table over the full text. Kinds that
need more than single-valued fields (roasting zones, harvest field sections)
override _collect and add their own values. Any failure inside one kind is
logged and that kind yields no record; other kinds are unaffected.
"""

from __future__ import annotations

from abc import ABC
from typing import ClassVar

from backend_beantrace.core.exceptions import ExtractionError
from backend_beantrace.extraction.patterns import FieldPattern
from backend_beantrace.extraction.records import ExtractedRecord, RecordKind
from backend_beantrace.trace_logging import bind_transaction


class KindExtractor(ABC):
    """Extractor for one record kind."""

    kind: ClassVar[RecordKind]
    record_type: ClassVar[type[ExtractedRecord]]
    patterns: ClassVar[tuple[FieldPattern, ...]] = ()

    def extract(self, text: str | None, *, tx_id: str | None = None) -> ExtractedRecord | None:
        """Return the record found in text, or None when no field of this kind matches."""
        if not text or not text.strip():
            return None
        try:
            collected = self._collect(text)
        except Exception as e:
            error = ExtractionError(f"{self.kind.value} extraction failed: {e}")
            bind_transaction(tx_id, kind=self.kind.value).warning(
                "extraction_failed", error=str(error)
            )
            return None
        values = {name: value for name, value in collected.items() if value is not None}
        if not values:
            return None
        record = self.record_type(**values)
        bind_transaction(tx_id, kind=self.kind.value).debug(
            "extraction_matched", fields=record.present_fields()
        )
        return record

    def _collect(self, text: str) -> dict[str, str | None]:
        return {pattern.name: pattern.search(text) for pattern in self.patterns}
