"""Data types shared by the parser, matcher, compiler and engine.

Defines the enums and dataclasses of the directive language and of the
matches found in a document. Offsets are Google Docs indexes (UTF-16
code units, absolute within the body segment).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING

from extrased.errors import ParseError

if TYPE_CHECKING:
    from extrased.template import ReplacementTemplate

# --- Enums ---


class CommandKind(Enum):
    """Directive kinds, keyed by their command letter."""

    SUBSTITUTE = "s"
    DELETE = "d"
    APPEND = "a"
    INSERT = "i"
    TRANSLITERATE = "y"


class RowColOpKind(Enum):
    """Structural row/column edits addressed by ``[row:K]`` style cells."""

    DELETE = "delete"
    INSERT = "insert"
    APPEND = "append"


class BreakKind(Enum):
    """Structural break inserted after an edit by ``{+}`` / ``{+=X}``."""

    RULE = "rule"
    PAGE = "p"
    COLUMN = "c"
    SECTION = "s"


class MatchKind(Enum):
    """How a match is turned into edit operations."""

    TEXT = "text"
    RICH = "rich"
    IMAGE = "image"
    FOOTNOTE = "footnote"


# --- Address axes ---


@dataclass(frozen=True)
class Specific:
    """A single 1-based position; negative values count from the end."""

    index: int


@dataclass(frozen=True)
class Wildcard:
    """Every position along the axis (``*``)."""


@dataclass(frozen=True)
class AllFromEnd:
    """One past the last position (``$+``, append)."""


Axis = Specific | Wildcard | AllFromEnd


@dataclass(frozen=True)
class RowColOp:
    """Insert, append or delete a whole row or column."""

    axis: str  # "row" or "col"
    kind: RowColOpKind
    target: Axis


@dataclass(frozen=True)
class CellAddress:
    """A ``|N|[...]`` cell address.

    Attributes:
        table: Table position (tables are numbered in document order,
            nested tables included)
        row: Row axis; ``None`` when the address is a row/column op
        col: Column axis
        end_row: Last row of a merge range, ``None`` for a single cell
        end_col: Last column of a merge range
        op: Row/column operation, if any
        subpattern: Regex matched inside the cell; empty for whole-cell edits
    """

    table: Axis
    row: Axis | None = None
    col: Axis | None = None
    end_row: int | None = None
    end_col: int | None = None
    op: RowColOp | None = None
    subpattern: str = ""

    @property
    def is_range(self) -> bool:
        return self.end_row is not None and self.end_col is not None

    @property
    def is_wildcard(self) -> bool:
        return isinstance(self.row, Wildcard) or isinstance(self.col, Wildcard)


@dataclass(frozen=True)
class ImageAddress:
    """Existing images addressed by position or by alt-text regex."""

    position: Axis | None = None
    alt_pattern: str | None = None


@dataclass(frozen=True)
class ImageSpec:
    """An image to insert, from ``![alt](url "title"){width=W height=H}``."""

    url: str
    alt: str = ""
    title: str = ""
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class TableCreateSpec:
    """A table to create in place of a match.

    ``cells`` is filled only for pipe-table literals.
    """

    rows: int
    cols: int
    header: bool = False
    cells: tuple[tuple[str, ...], ...] = ()


# --- Attribute blocks ---

# Boolean toggles, keyed by every spelling accepted inside ``{...}``
BOOL_FLAGS: dict[str, str] = {
    "b": "bold",
    "bold": "bold",
    "i": "italic",
    "italic": "italic",
    "_": "underline",
    "underline": "underline",
    "-": "strike",
    "strike": "strike",
    "#": "code",
    "code": "code",
    "^": "superscript",
    "sup": "superscript",
    ",": "subscript",
    "sub": "subscript",
    "w": "small_caps",
    "smallcaps": "small_caps",
}

# Short flag used when describing a set for display
_BOOL_SHORT: dict[str, str] = {
    "bold": "b",
    "italic": "i",
    "underline": "_",
    "strike": "-",
    "code": "#",
    "superscript": "^",
    "subscript": ",",
    "small_caps": "w",
}


@dataclass
class AttributeSet:
    """Parsed form of one ``{...}`` attribute block.

    Boolean toggles are tri-state: ``None`` (unset), ``True`` or ``False``.
    Value attributes use ``None`` / empty string for unset.
    """

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strike: bool | None = None
    code: bool | None = None
    superscript: bool | None = None
    subscript: bool | None = None
    small_caps: bool | None = None

    text: str = ""
    color: str = ""
    bg: str | None = None
    font: str = ""
    size: float | None = None
    url: str = ""
    heading: str = ""
    leading: float | None = None
    align: str = ""
    opacity: int | None = None
    indent: int | None = None
    kerning: float | None = None
    width: int | None = None
    height: int | None = None
    spacing_above: float | None = None
    spacing_below: float | None = None
    spacing_set: bool = False
    effect: str = ""
    cols: int | None = None
    break_kind: BreakKind | None = None
    comment: str = ""
    bookmark: str = ""
    check: bool | None = None
    toc: int | None = None
    image_ref: str = ""
    table_ref: str = ""

    reset: bool = False
    no_reset: bool = False

    # (text, flags) pairs from ``flag=text`` tokens
    inline_texts: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)

    def set_flag(self, name: str, value: bool) -> None:
        """Set a boolean toggle by any accepted spelling."""
        setattr(self, BOOL_FLAGS[name], value)

    def has_text_format(self) -> bool:
        return (
            any(getattr(self, f) is not None for f in _BOOL_SHORT)
            or bool(self.color)
            or self.bg is not None
            or bool(self.font)
            or self.size is not None
            or bool(self.url)
        )

    def has_paragraph_format(self) -> bool:
        return (
            bool(self.heading)
            or bool(self.align)
            or self.indent is not None
            or self.leading is not None
            or self.spacing_set
        )

    def has_structural(self) -> bool:
        return (
            self.cols is not None
            or self.check is not None
            or self.toc is not None
            or bool(self.comment)
            or bool(self.bookmark)
            or self.url.startswith("chip://")
        )

    def has_any_format(self) -> bool:
        return (
            self.reset
            or self.has_text_format()
            or self.has_paragraph_format()
            or self.has_structural()
            or self.break_kind is not None
        )

    def merge(self, other: AttributeSet) -> None:
        """Copy every field ``other`` sets onto this set."""
        blank = AttributeSet()
        for f in fields(self):
            if f.name == "inline_texts":
                continue
            value = getattr(other, f.name)
            if value != getattr(blank, f.name):
                setattr(self, f.name, value)

    def describe(self) -> str:
        """Compact flag listing, e.g. ``0 b !i c=#FF0000``."""
        parts: list[str] = []
        if self.reset:
            parts.append("0")
        if self.no_reset:
            parts.append("!0")
        for name, short in _BOOL_SHORT.items():
            value = getattr(self, name)
            if value is True:
                parts.append(short)
            elif value is False:
                parts.append("!" + short)
        for label, value in (
            ("c", self.color),
            ("z", self.bg),
            ("f", self.font),
            ("u", self.url),
            ("h", self.heading),
            ("a", self.align),
        ):
            if value:
                parts.append(f"{label}={value}")
        if self.size is not None:
            parts.append(f"s={self.size:g}")
        if self.indent is not None:
            parts.append(f"n={self.indent}")
        if self.break_kind is not None:
            parts.append(
                "+"
                if self.break_kind is BreakKind.RULE
                else f"+={self.break_kind.value}"
            )
        if self.cols is not None:
            parts.append(f"cols={self.cols}")
        if self.check is not None:
            parts.append("check=y" if self.check else "check")
        if self.bookmark:
            parts.append(f"@={self.bookmark}")
        if self.image_ref:
            parts.append(f"img={self.image_ref}")
        return " ".join(parts)


@dataclass(frozen=True)
class InlineSpan:
    """Attributes scoped to ``[start, end)`` of one replacement's text.

    Offsets are code-point positions in the replacement text.
    """

    text: str
    start: int
    end: int
    attributes: AttributeSet

    @property
    def flags(self) -> tuple[str, ...]:
        return tuple(
            name for name in _BOOL_SHORT if getattr(self.attributes, name) is True
        )


# --- Directives ---


@dataclass(frozen=True)
class EditInstruction:
    """One parsed directive. Never mutated after parsing.

    Attributes:
        kind: Directive kind
        pattern: Regex source (flags are kept separately in ``regex_flags``)
        replacement: Replacement text with attribute blocks removed
        template: Parsed replacement template
        is_global: ``g`` flag
        nth: Nth-match selector, 0 when unset
        regex_flags: ``re`` flags from ``i`` / ``m``
        cell: Cell address from a ``|N|[...]`` or ``{T=N!...}`` pattern
        table_ref: Bare table reference (``|N|``, ``|*|``, ``{T=N}``)
        image_ref: Image address (``!(N)``, ``![regex]``, ``{img=...}``)
        table_create: Table to create from the replacement
        attributes: Attribute set applying to the whole match
        spans: Inline-scoped attribute spans
        raw: The directive as written
    """

    kind: CommandKind
    pattern: str = ""
    replacement: str = ""
    template: ReplacementTemplate | None = None
    is_global: bool = False
    nth: int = 0
    regex_flags: int = 0
    cell: CellAddress | None = None
    table_ref: Axis | None = None
    image_ref: ImageAddress | None = None
    table_create: TableCreateSpec | None = None
    attributes: AttributeSet | None = None
    spans: tuple[InlineSpan, ...] = ()
    raw: str = ""

    @cached_property
    def regex(self) -> re.Pattern[str]:
        """The compiled pattern.

        Raises:
            ParseError: If the pattern is not a valid regular expression
        """
        try:
            return re.compile(self.pattern, self.regex_flags)
        except re.error as e:
            raise ParseError(f"invalid pattern {self.pattern!r}: {e}") from e

    @property
    def is_positional(self) -> bool:
        return (
            self.kind is CommandKind.SUBSTITUTE
            and self.cell is None
            and self.table_ref is None
            and self.pattern in ("^", "$", "^$")
        )


# --- Matches ---


@dataclass
class Match:
    """One located occurrence of a pattern plus its computed replacement.

    Attributes:
        start: Absolute start index of the matched text
        end: Absolute end index (exclusive)
        original_text: Matched text
        replacement_text: Text to insert (markup already stripped)
        kind: Classification driving how the match is compiled
        formats: Format tags from the markdown layer (``bold``, ``heading2``)
        image: Image to insert for IMAGE matches
        attributes: Attribute set for RICH matches
        spans: Inline spans for RICH matches
    """

    start: int
    end: int
    original_text: str
    replacement_text: str = ""
    kind: MatchKind = MatchKind.TEXT
    formats: list[str] = field(default_factory=list)
    image: ImageSpec | None = None
    attributes: AttributeSet | None = None
    spans: tuple[InlineSpan, ...] = ()
