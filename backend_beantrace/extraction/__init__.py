"""
Field extraction: roasting, processing and harvest records from decoded notes.

Each kind is independent: one note may yield zero, one or several records.
"""

from __future__ import annotations

from backend_beantrace.extraction.base import KindExtractor
from backend_beantrace.extraction.harvest import HarvestExtractor
from backend_beantrace.extraction.processing import ProcessingExtractor
from backend_beantrace.extraction.records import (
    RECORD_TYPES,
    ExtractedRecord,
    HarvestRecord,
    ProcessingRecord,
    RecordKind,
    RoastingRecord,
)
from backend_beantrace.extraction.roasting import RoastingExtractor, split_zones

EXTRACTORS: tuple[KindExtractor, ...] = (
    RoastingExtractor(),
    ProcessingExtractor(),
    HarvestExtractor(),
)


def extract_all(text: str | None, *, tx_id: str | None = None) -> list[ExtractedRecord]:
    """Run every extractor; return the records that matched, in extractor order."""
    records: list[ExtractedRecord] = []
    for extractor in EXTRACTORS:
        record = extractor.extract(text, tx_id=tx_id)
        if record is not None:
            records.append(record)
    return records


def extract_roasting(text: str | None) -> RoastingRecord | None:
    return EXTRACTORS[0].extract(text)  # type: ignore[return-value]


def extract_processing(text: str | None) -> ProcessingRecord | None:
    return EXTRACTORS[1].extract(text)  # type: ignore[return-value]


def extract_harvest(text: str | None) -> HarvestRecord | None:
    return EXTRACTORS[2].extract(text)  # type: ignore[return-value]


__all__ = [
    "EXTRACTORS",
    "RECORD_TYPES",
    "ExtractedRecord",
    "HarvestRecord",
    "KindExtractor",
    "ProcessingRecord",
    "RecordKind",
    "RoastingRecord",
    "extract_all",
    "extract_harvest",
    "extract_processing",
    "extract_roasting",
    "split_zones",
]
