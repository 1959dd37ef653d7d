"""
Extracted record shapes, one dataclass per kind.

Every field is optional text: partial field sets are valid, and an all-None
record is never produced by an extractor.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, ClassVar


class RecordKind(str, Enum):
    ROASTING = "roasting"
    PROCESSING = "processing"
    HARVEST = "harvest"


@dataclass(frozen=True)
class ExtractedRecord:
    """Base for per-kind records; `kind` tags the variant."""

    kind: ClassVar[RecordKind]

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def values(self) -> dict[str, str | None]:
        return asdict(self)

    def present_fields(self) -> list[str]:
        return [name for name, value in self.values().items() if value is not None]


@dataclass(frozen=True)
class RoastingRecord(ExtractedRecord):
    kind: ClassVar[RecordKind] = RecordKind.ROASTING

    parent_company_id: str | None = None
    production_batch_id: str | None = None
    type_of_roast: str | None = None
    location_of_roasting_plant: str | None = None
    kg_coffee_roasted: str | None = None
    roast_date: str | None = None
    zone1_coffee_species: str | None = None
    zone1_harvest_begin: str | None = None
    zone1_harvest_end: str | None = None
    zone2_coffee_species: str | None = None
    zone2_harvest_begin: str | None = None
    zone2_harvest_end: str | None = None
    child_tx: str | None = None


@dataclass(frozen=True)
class ProcessingRecord(ExtractedRecord):
    kind: ClassVar[RecordKind] = RecordKind.PROCESSING

    reception_ids: str | None = None
    post_hull_ids: str | None = None
    size_of_beans: str | None = None
    qty_green_coffee: str | None = None
    sort_entry: str | None = None
    sort_exit: str | None = None
    harvest_begin: str | None = None
    harvest_end: str | None = None


@dataclass(frozen=True)
class HarvestRecord(ExtractedRecord):
    kind: ClassVar[RecordKind] = RecordKind.HARVEST

    farm_id: str | None = None
    farm_anagraphic: str | None = None
    farm_location: str | None = None
    fields_data: str | None = None
    """JSON array of per-field mappings (one per FIELD <n> section)."""

    def field_sections(self) -> list[dict[str, Any]]:
        if not self.fields_data:
            return []
        return json.loads(self.fields_data)


RECORD_TYPES: dict[RecordKind, type[ExtractedRecord]] = {
    RecordKind.ROASTING: RoastingRecord,
    RecordKind.PROCESSING: ProcessingRecord,
    RecordKind.HARVEST: HarvestRecord,
}
