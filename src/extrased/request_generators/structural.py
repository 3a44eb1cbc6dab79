"""Structural request generation for Google Docs batchUpdate.

Structural attributes act on the document around the edited text rather
than on its characters:
- ``cols=N``: section column layout (updateSectionStyle)
- ``check``: checkbox bullets (createParagraphBullets)
- ``@=name``: bookmarks (createNamedRange)
- ``u=chip://...``: smart chips

These run in their own batch after a re-fetch, because the section
range and final text positions are only known once the text edits land.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import quote_plus

from extrased.request_generators.text import create_bullets, doc_range, location
from extrased.types import AttributeSet

CHIP_PREFIX = "chip://"
COLUMN_GAP_PT = 36.0

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
)
_CHIP_KINDS = frozenset(
    {"person", "date", "file", "place", "dropdown", "chart", "bookmark"}
)


@dataclass(frozen=True)
class ChipSpec:
    """A parsed ``chip://kind/value`` URI."""

    kind: str
    value: str
    options: tuple[str, ...] = field(default=())

    @property
    def link(self) -> str:
        """Link target standing in for chips the API cannot create."""
        if self.kind == "bookmark":
            return "#" + self.value
        if self.kind == "file":
            return "https://docs.google.com/document/d/" + self.value
        if self.kind == "place":
            return "https://maps.google.com/?q=" + quote_plus(self.value)
        return ""

    @property
    def fallback_text(self) -> str:
        """Text inserted in place of the chip, or "" to keep the match text."""
        if self.kind == "date":
            return format_chip_date(self.value)
        if self.kind == "place":
            return self.value
        if self.kind == "dropdown":
            return " / ".join(self.options)
        return ""


def parse_chip(uri: str) -> ChipSpec | None:
    """Parse ``chip://person/a@b.com`` and friends; None if not a chip URI."""
    if not uri.startswith(CHIP_PREFIX):
        return None
    kind, sep, value = uri[len(CHIP_PREFIX) :].partition("/")
    kind = kind.lower()
    if not sep or kind not in _CHIP_KINDS:
        return None
    options = tuple(value.split("|")) if kind == "dropdown" else ()
    return ChipSpec(kind, value, options)


def format_chip_date(value: str) -> str:
    """Normalize a date to ``YYYY-MM-DD``; unparseable values pass through."""
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return value


# --- Requests ---


def columns_request(
    section_start: int, section_end: int, cols: int
) -> dict[str, Any]:
    gap = {"magnitude": COLUMN_GAP_PT, "unit": "PT"}
    columns = [{"paddingEnd": dict(gap)} for _ in range(cols)]
    return {
        "updateSectionStyle": {
            "range": doc_range(section_start, section_end),
            "sectionStyle": {
                "columnProperties": columns,
                "columnSeparatorStyle": "NONE",
            },
            "fields": "columnProperties,columnSeparatorStyle",
        }
    }


def checkbox_request(start: int, end: int) -> dict[str, Any]:
    return create_bullets(start, end + 1, "BULLET_CHECKBOX")


def bookmark_request(name: str, start: int, end: int) -> dict[str, Any]:
    return {"createNamedRange": {"name": name, "range": doc_range(start, end)}}


def person_request(email: str, index: int) -> dict[str, Any]:
    return {
        "insertPerson": {
            "location": location(index),
            "personProperties": {"email": email},
        }
    }


def structural_requests(
    attrs: AttributeSet,
    start: int,
    end: int,
    section: tuple[int, int] | None = None,
) -> list[dict[str, Any]]:
    """Requests for the structural attributes of ``attrs``.

    Args:
        attrs: The attribute set of a rich match
        start: Start index of the edited text in the current document
        end: End index of the edited text
        section: Range of the section containing the text (for ``cols``)

    Returns:
        Column, checkbox, bookmark and chip requests, in that order.
        Comments and TOC markers produce nothing.
    """
    requests: list[dict[str, Any]] = []
    if attrs.cols is not None and section is not None:
        requests.append(columns_request(section[0], section[1], attrs.cols))
    if attrs.check is not None:
        requests.append(checkbox_request(start, end))
    if attrs.bookmark and end > start:
        requests.append(bookmark_request(attrs.bookmark, start, end))
    chip = parse_chip(attrs.url)
    if chip is not None and chip.kind == "person" and chip.value:
        requests.append(person_request(chip.value, start))
    return requests

