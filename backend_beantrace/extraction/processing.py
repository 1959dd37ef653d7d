"""
Processing note extraction (reception / post-hull lots, sorting, harvest window).
"""

from __future__ import annotations

from backend_beantrace.extraction.base import KindExtractor
from backend_beantrace.extraction.patterns import (
    date_field,
    line_field,
    quantity_field,
    span_field,
)
from backend_beantrace.extraction.records import ProcessingRecord, RecordKind

RECEPTION_IDS = r"Reception IDs"
POST_HULL_IDS = r"Post[- ]?hull IDs"
SIZE_OF_BEANS = r"Size of beans"
QTY_GREEN_COFFEE = r"Qty of green coffee[^:\n]*"
SORT_ENTRY = r"Sort entry"
SORT_EXIT = r"Sort exit"
HARVEST_BEGIN = r"Harvest begin"
HARVEST_END = r"Harvest end"

PROCESSING_LABELS = [
    RECEPTION_IDS,
    POST_HULL_IDS,
    SIZE_OF_BEANS,
    QTY_GREEN_COFFEE,
    SORT_ENTRY,
    SORT_EXIT,
    HARVEST_BEGIN,
    HARVEST_END,
]
# Boundaries from other note sections that also end an ID list
SECTION_BOUNDARIES = [r"Process IDs:", r"Child_TX", r"ZONE \d+"]


def _stops(label: str) -> list[str]:
    return [f"{other}:" for other in PROCESSING_LABELS if other != label] + SECTION_BOUNDARIES


class ProcessingExtractor(KindExtractor):
    kind = RecordKind.PROCESSING
    record_type = ProcessingRecord
    patterns = (
        span_field("reception_ids", RECEPTION_IDS, _stops(RECEPTION_IDS)),
        span_field("post_hull_ids", POST_HULL_IDS, _stops(POST_HULL_IDS)),
        line_field("size_of_beans", SIZE_OF_BEANS),
        quantity_field("qty_green_coffee", QTY_GREEN_COFFEE),
        date_field("sort_entry", SORT_ENTRY),
        date_field("sort_exit", SORT_EXIT),
        date_field("harvest_begin", HARVEST_BEGIN),
        date_field("harvest_end", HARVEST_END),
    )
