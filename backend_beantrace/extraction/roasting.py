"""
Roasting note extraction, including repeating ZONE sections.

A roasting note may list any number of "ZONE <n>" sections, each ending at the
next zone label, a terminal label (Child_TX, Process IDs:, Reception IDs:) or
end of text. Zones are taken in document order, not by their numeric label;
only the first two fill the zone1 / zone2 slots.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from backend_beantrace.extraction.base import KindExtractor
from backend_beantrace.extraction.patterns import (
    DATE,
    FLAGS,
    FieldPattern,
    date_field,
    digits_field,
    line_field,
    quantity_field,
    token_field,
)
from backend_beantrace.extraction.records import RecordKind, RoastingRecord
from backend_beantrace.trace_logging import get_logger

logger = get_logger(__name__)

ZONE_SLOTS = 2
SPECIES_SEPARATOR = ", "

ZONE_PATTERN = re.compile(
    r"ZONE (\d+)(.*?)(?=ZONE \d+|Child_TX|Process IDs:|Reception IDs:|\Z)",
    FLAGS | re.DOTALL,
)
SPECIES = FieldPattern(
    "coffee_species",
    re.compile(r"Coffee Species(?:\s*&\s*Process)?:[ \t]*([^\n]+)", FLAGS),
)
HARVEST_BEGIN = date_field("harvest_begin", "Harvest begin")
HARVEST_END = date_field("harvest_end", "Harvest end")


@dataclass(frozen=True)
class ZoneSpan:
    """One ZONE section: its numeric label and the text up to the next boundary."""

    label: int
    body: str

    def species(self) -> str | None:
        found = SPECIES.find_all(self.body)
        return SPECIES_SEPARATOR.join(found) if found else None

    def harvest_begin(self) -> str | None:
        return HARVEST_BEGIN.search(self.body)

    def harvest_end(self) -> str | None:
        return HARVEST_END.search(self.body)


def split_zones(text: str) -> list[ZoneSpan]:
    """Return every ZONE section in document order."""
    return [ZoneSpan(int(m.group(1)), m.group(2)) for m in ZONE_PATTERN.finditer(text)]


class RoastingExtractor(KindExtractor):
    kind = RecordKind.ROASTING
    record_type = RoastingRecord
    patterns = (
        digits_field("parent_company_id", "PARENT COMPANY ID"),
        token_field("production_batch_id", "Production_Batch_ID"),
        line_field("type_of_roast", "Type of roast"),
        line_field("location_of_roasting_plant", "Location of roasting plant"),
        quantity_field("kg_coffee_roasted", "Kg of coffee roasted"),
        FieldPattern("roast_date", re.compile(r"Roast date:\s*" + DATE, FLAGS)),
        FieldPattern("child_tx", re.compile(r'Child_TX\s*->\s*"([^"]+)"', FLAGS)),
    )

    def _collect(self, text: str) -> dict[str, str | None]:
        values = super()._collect(text)
        zones = split_zones(text)
        if len(zones) > ZONE_SLOTS:
            logger.info(
                "roasting_zones_dropped",
                zone_count=len(zones),
                dropped_labels=[z.label for z in zones[ZONE_SLOTS:]],
            )
        for slot, zone in enumerate(zones[:ZONE_SLOTS], start=1):
            values[f"zone{slot}_coffee_species"] = zone.species()
            values[f"zone{slot}_harvest_begin"] = zone.harvest_begin()
            values[f"zone{slot}_harvest_end"] = zone.harvest_end()
        return values
