"""Read-only view over a fetched Google Docs document.

Every component that needs to find something in a document (the
matcher, the table and image resolvers, the commands, the nested
bullet pass) goes through :class:`DocumentView`, which walks the body
once and exposes flat, document-ordered lists:

- ``paragraphs``: every paragraph, including those inside table cells
- ``tables``: every table, nested tables included, in document order
- ``images``: inline and positioned images in document order; a
  positioned image sits at the start of the paragraph it is anchored to,
  and unanchored ones come last

Indexes are Google Docs indexes (UTF-16 code units).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from extrased.api_types import Document, Paragraph, StructuralElement, Table, TableCell


def utf16_len(text: str) -> int:
    """Length of ``text`` in UTF-16 code units."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


# --- Flattened nodes ---


@dataclass(frozen=True)
class RunSpan:
    """One text run of a paragraph: its offset in the joined text and its index."""

    offset: int
    index: int
    text: str


@dataclass
class ParagraphText:
    """A paragraph flattened to its text plus an offset map.

    Attributes:
        start: Paragraph start index
        end: Paragraph end index (exclusive, after the trailing newline)
        text: Concatenated content of the paragraph's text runs
        runs: Runs in order, used to map text offsets to indexes
        paragraph: The underlying API paragraph
        depth: 0 for body paragraphs, 1+ inside (nested) table cells
    """

    start: int
    end: int
    text: str
    runs: tuple[RunSpan, ...]
    paragraph: Paragraph
    depth: int = 0

    @property
    def line(self) -> str:
        """Text without the trailing newline."""
        return self.text.rstrip("\n")

    @property
    def has_bullet(self) -> bool:
        return self.paragraph.bullet is not None

    @property
    def list_id(self) -> str | None:
        bullet = self.paragraph.bullet
        return bullet.list_id if bullet else None

    @property
    def starts_with_tab(self) -> bool:
        return bool(self.runs) and self.runs[0].text.startswith("\t")

    def index_at(self, offset: int) -> int:
        """Document index of the code point at ``offset`` in :attr:`text`."""
        if not self.runs:
            return self.start
        for run in reversed(self.runs):
            if offset >= run.offset:
                local = min(offset - run.offset, len(run.text))
                return run.index + utf16_len(run.text[:local])
        return self.runs[0].index


@dataclass
class TableNode:
    """A table with its position. ``depth`` is 0 for body-level tables."""

    table: Table
    start: int
    end: int
    depth: int = 0

    @property
    def rows(self) -> int:
        return len(self.table.table_rows or [])

    @property
    def cols(self) -> int:
        rows = self.table.table_rows or []
        if not rows:
            return 0
        return len(rows[0].table_cells or [])

    def cell(self, row: int, col: int) -> TableCell:
        """Cell at 1-based ``row`` / ``col`` (already range checked)."""
        rows = self.table.table_rows or []
        return (rows[row - 1].table_cells or [])[col - 1]

    def row_cells(self, row: int) -> list[TableCell]:
        rows = self.table.table_rows or []
        return list(rows[row - 1].table_cells or [])


@dataclass(frozen=True)
class ImageNode:
    """An image in the document. Positioned images have no body index."""

    object_id: str
    index: int
    alt: str = ""
    positioned: bool = False


@dataclass
class CellText:
    """Text of a table cell and the index range it occupies."""

    text: str
    start: int
    end: int

    @property
    def content_end(self) -> int:
        """End of the editable content, before the cell's final newline."""
        if self.text.endswith("\n"):
            return self.end - 1
        return self.end

    @property
    def stripped(self) -> str:
        return self.text.rstrip("\n")


# --- View ---


@dataclass
class DocumentView:
    """Flattened, document-ordered view of a :class:`Document`."""

    document: Document
    paragraphs: list[ParagraphText] = field(default_factory=list)
    tables: list[TableNode] = field(default_factory=list)
    images: list[ImageNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentView:
        return cls.from_document(Document.model_validate(data))

    @classmethod
    def from_document(cls, document: Document) -> DocumentView:
        view = cls(document=document)
        content = document.body.content if document.body else None
        view._walk(content or [], depth=0)
        placed = {image.object_id for image in view.images if image.positioned}
        for object_id in document.positioned_objects or {}:
            if object_id not in placed:
                view._add_positioned(object_id, 0)
        return view

    def _add_positioned(self, object_id: str, index: int) -> None:
        obj = (self.document.positioned_objects or {}).get(object_id)
        if obj is None:
            return
        props = obj.positioned_object_properties
        embedded = props.embedded_object if props else None
        self.images.append(
            ImageNode(
                object_id=object_id,
                index=index,
                alt=_alt_text(embedded),
                positioned=True,
            )
        )

    def _walk(self, content: list[StructuralElement], depth: int) -> None:
        inline = self.document.inline_objects or {}
        for elem in content:
            if elem.paragraph is not None:
                self._add_paragraph(elem, depth, inline)
            elif elem.table is not None:
                self.tables.append(
                    TableNode(
                        table=elem.table,
                        start=elem.start_index or 0,
                        end=elem.end_index or 0,
                        depth=depth,
                    )
                )
                for row in elem.table.table_rows or []:
                    for cell in row.table_cells or []:
                        self._walk(cell.content or [], depth + 1)

    def _add_paragraph(
        self, elem: StructuralElement, depth: int, inline: dict[str, Any]
    ) -> None:
        paragraph = elem.paragraph
        assert paragraph is not None
        runs: list[RunSpan] = []
        parts: list[str] = []
        offset = 0
        for object_id in paragraph.positioned_object_ids or []:
            self._add_positioned(object_id, elem.start_index or 0)
        for pe in paragraph.elements or []:
            if pe.text_run is not None and pe.text_run.content:
                content = pe.text_run.content
                runs.append(RunSpan(offset, pe.start_index or 0, content))
                parts.append(content)
                offset += len(content)
            elif pe.inline_object_element is not None:
                object_id = pe.inline_object_element.inline_object_id or ""
                obj = inline.get(object_id)
                props = obj.inline_object_properties if obj else None
                embedded = props.embedded_object if props else None
                self.images.append(
                    ImageNode(
                        object_id=object_id,
                        index=pe.start_index or 0,
                        alt=_alt_text(embedded),
                    )
                )
        self.paragraphs.append(
            ParagraphText(
                start=elem.start_index or 0,
                end=elem.end_index or 0,
                text="".join(parts),
                runs=tuple(runs),
                paragraph=paragraph,
                depth=depth,
            )
        )

    # --- Queries ---

    @property
    def body_paragraphs(self) -> list[ParagraphText]:
        """Top-level paragraphs only (not inside tables)."""
        return [p for p in self.paragraphs if p.depth == 0]

    @property
    def body_tables(self) -> list[TableNode]:
        return [t for t in self.tables if t.depth == 0]

    @property
    def body_end(self) -> int:
        """End index of the last body element (at least 2)."""
        body = self.document.body
        if body and body.content:
            return max(body.content[-1].end_index or 0, 2)
        return 2

    @property
    def is_empty(self) -> bool:
        """True when the body holds only whitespace and no tables."""
        if self.tables:
            return False
        return all(not p.text.strip() for p in self.paragraphs)

    def section_range(self, start: int, end: int) -> tuple[int, int]:
        """Index range of the section containing ``[start, end)``.

        Sections are delimited by section breaks; a document without
        any is a single section starting at index 1.
        """
        section_start = 1
        section_end = end + 1
        body = self.document.body
        for elem in (body.content if body else None) or []:
            elem_start = elem.start_index or 0
            elem_end = elem.end_index or 0
            if elem.section_break is not None:
                if elem_end <= start:
                    section_start = elem_end
                if elem_start > end and section_end == end + 1:
                    section_end = elem_start
                    break
            section_end = max(section_end, elem_end)
        if section_end <= section_start:
            section_end = section_start + 1
        return section_start, section_end

    def bullet_preset(self, list_id: str | None) -> str:
        """Bullet preset matching an existing list's first nesting level."""
        lists = self.document.lists or {}
        lst = lists.get(list_id or "")
        props = lst.list_properties if lst else None
        levels = props.nesting_levels if props else None
        if levels and levels[0].glyph_type in _NUMBERED_GLYPHS:
            return "NUMBERED_DECIMAL_NESTED"
        return "BULLET_DISC_CIRCLE_SQUARE"


_NUMBERED_GLYPHS = frozenset(
    {"DECIMAL", "ZERO_DECIMAL", "UPPER_ALPHA", "ALPHA", "UPPER_ROMAN", "ROMAN"}
)


def _alt_text(embedded: Any) -> str:
    if embedded is None:
        return ""
    return embedded.title or embedded.description or ""


def cell_text(cell: TableCell) -> CellText:
    """Concatenated text of a cell's paragraphs with its run index range."""
    parts: list[str] = []
    start = 0
    end = 0
    for elem in cell.content or []:
        if elem.paragraph is None:
            continue
        for pe in elem.paragraph.elements or []:
            if pe.text_run is None:
                continue
            parts.append(pe.text_run.content or "")
            if start == 0 and (pe.start_index or 0) > 0:
                start = pe.start_index or 0
            end = pe.end_index or 0
    if start == 0 and cell.content:
        start = cell.content[0].start_index or 0
        end = end or start
    return CellText("".join(parts), start, end)


def first_cell_index(cell: TableCell) -> int:
    """Index of the first paragraph in a cell (where inserted text goes)."""
    if cell.content:
        return cell.content[0].start_index or 0
    return cell.start_index or 0
