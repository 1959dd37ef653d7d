"""
Labeled field patterns.

Each field is a (name, compiled pattern) pair whose first group is the value.
All patterns are case-insensitive and searched over the full note text; the
first match wins. Values are kept as matched text with whitespace collapsed,
never parsed into numbers or dates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

FLAGS = re.IGNORECASE
DATE = r"(\d{2}/\d{2}/\d{4})"
QUANTITY = r"([\d,.]+\s*Kg)\b"


def collapse_whitespace(value: str | None) -> str | None:
    """Trim and collapse internal whitespace runs to single spaces; '' -> None."""
    if value is None:
        return None
    collapsed = " ".join(value.split())
    return collapsed or None


@dataclass(frozen=True)
class FieldPattern:
    """One named field and the pattern that captures its value in group 1."""

    name: str
    pattern: re.Pattern[str]

    def search(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if match is None:
            return None
        return collapse_whitespace(match.group(1))

    def find_all(self, text: str) -> list[str]:
        values = (collapse_whitespace(m.group(1)) for m in self.pattern.finditer(text))
        return [v for v in values if v]


def line_field(name: str, label: str) -> FieldPattern:
    """`Label: <value until newline>`."""
    return FieldPattern(name, re.compile(label + r":[ \t]*([^\n]+)", FLAGS))


def token_field(name: str, label: str) -> FieldPattern:
    """`Label: <first non-space token>`."""
    return FieldPattern(name, re.compile(label + r":\s*(\S+)", FLAGS))


def digits_field(name: str, label: str) -> FieldPattern:
    return FieldPattern(name, re.compile(label + r":\s*(\d+)", FLAGS))


def date_field(name: str, label: str) -> FieldPattern:
    """`Label: DD/MM/YYYY`."""
    return FieldPattern(name, re.compile(label + r":\s*" + DATE, FLAGS))


def quantity_field(name: str, label: str) -> FieldPattern:
    """`Label: 1,250.5 Kg`."""
    return FieldPattern(name, re.compile(label + r":\s*" + QUANTITY, FLAGS))


def span_field(name: str, label: str, stop_patterns: list[str]) -> FieldPattern:
    """`Label: <value until the next known label or end of text>` (may span lines).

    stop_patterns are complete regexes, trailing colon included where the label has one.
    """
    stops = "|".join(f"(?:{stop})" for stop in stop_patterns)
    lookahead = f"(?={stops}|\\Z)" if stops else r"(?=\Z)"
    return FieldPattern(
        name,
        re.compile(label + r":\s*(.+?)\s*" + lookahead, FLAGS | re.DOTALL),
    )
