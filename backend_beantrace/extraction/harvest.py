"""
Harvest / farm note extraction.

Besides the farm identity fields, a harvest note may describe several fields
("FIELD 1", "FIELD 2", ...). Each section's `Label: value` lines become one
mapping with snake_cased keys; the list is stored as JSON text.
"""

from __future__ import annotations

import json
import re
from typing import Any

from backend_beantrace.extraction.base import KindExtractor
from backend_beantrace.extraction.patterns import (
    FLAGS,
    collapse_whitespace,
    line_field,
    token_field,
)
from backend_beantrace.extraction.records import HarvestRecord, RecordKind

FIELD_SECTION_PATTERN = re.compile(r"FIELD (\d+)(.*?)(?=FIELD \d+|\Z)", FLAGS | re.DOTALL)
LABELED_LINE_PATTERN = re.compile(
    r"^[ \t]*([A-Za-z][A-Za-z0-9 _&/-]*?)[ \t]*:[ \t]*(\S[^\n]*)$",
    re.MULTILINE,
)


def snake_label(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", label.strip().lower()).strip("_")


def parse_field_sections(text: str) -> list[dict[str, Any]]:
    """Return one mapping per FIELD section, in document order; empty sections are skipped."""
    sections: list[dict[str, Any]] = []
    for match in FIELD_SECTION_PATTERN.finditer(text):
        entry: dict[str, Any] = {}
        for line in LABELED_LINE_PATTERN.finditer(match.group(2)):
            key = snake_label(line.group(1))
            value = collapse_whitespace(line.group(2))
            if key and value and key not in entry:
                entry[key] = value
        if entry:
            sections.append({"field": int(match.group(1)), **entry})
    return sections


class HarvestExtractor(KindExtractor):
    kind = RecordKind.HARVEST
    record_type = HarvestRecord
    patterns = (
        token_field("farm_id", "Farm ID"),
        line_field("farm_anagraphic", "Farm anagraphic"),
        line_field("farm_location", "Farm location"),
    )

    def _collect(self, text: str) -> dict[str, str | None]:
        values = super()._collect(text)
        sections = parse_field_sections(text)
        values["fields_data"] = json.dumps(sections) if sections else None
        return values
