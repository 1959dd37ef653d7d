"""
Note corpus analysis.

Counts how often each known label appears across decoded notes, how many notes
carry 1..5+ zones, how many match each record kind, and which `Label:` names
appear at line starts. Used to spot vocabulary the extractors do not cover yet.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from backend_beantrace.extraction import EXTRACTORS
from backend_beantrace.extraction.roasting import split_zones

FLAGS = re.IGNORECASE

LABEL_PROBES: dict[str, re.Pattern[str]] = {
    "parent_company_id": re.compile(r"PARENT COMPANY ID:", FLAGS),
    "production_batch_id": re.compile(r"Production_Batch_ID:", FLAGS),
    "roasting_keyword": re.compile(r"ROASTING", FLAGS),
    "processing_keyword": re.compile(r"PROCESSING", FLAGS),
    "type_of_roast": re.compile(r"Type of roast:", FLAGS),
    "location_of_roasting_plant": re.compile(r"Location of roasting plant:", FLAGS),
    "kg_coffee_roasted": re.compile(r"Kg of coffee roasted:", FLAGS),
    "roast_date": re.compile(r"Roast date:", FLAGS),
    "coffee_species": re.compile(r"Coffee Species:", FLAGS),
    "coffee_species_and_process": re.compile(r"Coffee Species\s*&\s*Process:", FLAGS),
    "harvest_begin": re.compile(r"Harvest begin:", FLAGS),
    "harvest_end": re.compile(r"Harvest end:", FLAGS),
    "child_tx": re.compile(r"Child_TX", FLAGS),
    "reception_ids": re.compile(r"Reception IDs:", FLAGS),
    "farm_id": re.compile(r"Farm ID:", FLAGS),
}
LINE_LABEL_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9\s_&]+):", re.MULTILINE)
ZONE_BUCKETS = ("1", "2", "3", "4", "5+")


@dataclass
class NoteAnalysis:
    total_notes: int = 0
    label_counts: dict[str, int] = field(default_factory=lambda: {k: 0 for k in LABEL_PROBES})
    zone_counts: dict[str, int] = field(default_factory=lambda: {k: 0 for k in ZONE_BUCKETS})
    kind_counts: dict[str, int] = field(
        default_factory=lambda: {e.kind.value: 0 for e in EXTRACTORS}
    )
    field_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def analyze_notes(texts: Iterable[str | None]) -> NoteAnalysis:
    """Aggregate label / zone / kind statistics over non-blank notes."""
    analysis = NoteAnalysis()
    names: set[str] = set()
    for text in texts:
        if not text or not text.strip():
            continue
        analysis.total_notes += 1
        for key, probe in LABEL_PROBES.items():
            if probe.search(text):
                analysis.label_counts[key] += 1
        zone_count = len(split_zones(text))
        if zone_count:
            bucket = str(zone_count) if zone_count < 5 else "5+"
            analysis.zone_counts[bucket] += 1
        for extractor in EXTRACTORS:
            if extractor.extract(text) is not None:
                analysis.kind_counts[extractor.kind.value] += 1
        names.update(m.group(1).strip() for m in LINE_LABEL_PATTERN.finditer(text))
    analysis.field_names = sorted(names)
    return analysis
