"""Directive parser: one directive string in, one EditInstruction out.

Grammar::

    s<D>pattern<D>replacement<D>[flags]     substitute (flags: g i m N)
    d<D>pattern<D>[flags]                   delete matching paragraphs
    a<D>pattern<D>text<D>                   append a paragraph after matches
    i<D>pattern<D>text<D>                   insert a paragraph before matches
    y<D>source<D>dest<D>                    transliterate characters

``<D>`` is the character after the command letter; ``\\<D>`` inside a
part is a literal delimiter.
"""

from __future__ import annotations

import logging
import re

from extrased.addressing import (
    parse_brace_pattern,
    parse_brace_table,
    parse_cell_address,
    parse_image_address,
    parse_table_create,
    parse_table_ref,
)
from extrased.attributes import (
    find_attribute_blocks,
    has_attribute_blocks,
    inline_spans,
    merge_global_spans,
)
from extrased.errors import ParseError
from extrased.template import parse_template
from extrased.types import (
    AttributeSet,
    CellAddress,
    CommandKind,
    EditInstruction,
    ImageAddress,
    InlineSpan,
    TableCreateSpec,
)

logger = logging.getLogger(__name__)

_COMMAND_LETTERS = {
    "d": CommandKind.DELETE,
    "a": CommandKind.APPEND,
    "i": CommandKind.INSERT,
    "y": CommandKind.TRANSLITERATE,
}
_NTH_RE = re.compile(r"[0-9]+")


def split_by_delimiter(text: str, delim: str) -> list[str]:
    """Split on unescaped ``delim``; ``\\<delim>`` becomes the delimiter."""
    parts: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] == delim:
            current.append(delim)
            i += 2
            continue
        if ch == delim:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _strip_flag_attrs(flags: str) -> str:
    idx = flags.find("{")
    return flags[:idx] if idx >= 0 else flags


def regex_flags(flags: str) -> int:
    """``i`` -> IGNORECASE, ``m`` -> MULTILINE."""
    flags = _strip_flag_attrs(flags)
    value = 0
    if "i" in flags:
        value |= re.IGNORECASE
    if "m" in flags:
        value |= re.MULTILINE
    return value


def nth_flag(flags: str) -> int:
    """The first positive digit run in the flags, or 0."""
    m = _NTH_RE.search(_strip_flag_attrs(flags))
    if not m:
        return 0
    value = int(m.group(0))
    return value if value > 0 else 0


def _part(parts: list[str], idx: int) -> str:
    return parts[idx] if idx < len(parts) else ""


def parse_expression(raw: str) -> EditInstruction:
    """Parse one directive.

    Raises:
        ParseError: If the directive is malformed
    """
    if not raw:
        raise ParseError("empty expression")
    if len(raw) >= 2 and not raw[1].isalnum() and raw[0] in _COMMAND_LETTERS:
        kind = _COMMAND_LETTERS[raw[0]]
        if kind is CommandKind.DELETE:
            return _parse_delete(raw)
        if kind is CommandKind.TRANSLITERATE:
            return _parse_transliterate(raw)
        return _parse_append_insert(raw, kind)
    return _parse_substitute(raw)


def _parse_delete(raw: str) -> EditInstruction:
    parts = split_by_delimiter(raw[2:], raw[1])
    if not parts[0]:
        raise ParseError("invalid delete command (empty pattern)")
    return EditInstruction(
        kind=CommandKind.DELETE,
        pattern=parts[0],
        regex_flags=regex_flags(_part(parts, 1)),
        raw=raw,
    )


def _parse_append_insert(raw: str, kind: CommandKind) -> EditInstruction:
    parts = split_by_delimiter(raw[2:], raw[1])
    if len(parts) < 2:
        raise ParseError(
            f"invalid {kind.value} command (expected {kind.value}/pattern/text/)"
        )
    return EditInstruction(
        kind=kind,
        pattern=parts[0],
        replacement=parts[1],
        regex_flags=regex_flags(_part(parts, 2)),
        raw=raw,
    )


def _parse_transliterate(raw: str) -> EditInstruction:
    parts = split_by_delimiter(raw[2:], raw[1])
    if len(parts) < 2:
        raise ParseError("invalid transliterate command (expected y/source/dest/)")
    source, dest = parts[0], parts[1]
    if len(source) != len(dest):
        raise ParseError(
            "transliterate: source and dest must have same length "
            f"({len(source)} vs {len(dest)})"
        )
    if not source:
        raise ParseError("transliterate: empty source")
    return EditInstruction(
        kind=CommandKind.TRANSLITERATE, pattern=source, replacement=dest, raw=raw
    )


def _parse_substitute(raw: str) -> EditInstruction:
    if len(raw) < 4 or raw[0] != "s":
        raise ParseError(
            "invalid sed expression (expected s/pattern/replacement/[flags])"
        )
    parts = split_by_delimiter(raw[2:], raw[1])
    if len(parts) < 2:
        raise ParseError("invalid sed expression (missing replacement)")
    pattern, replacement = parts[0], parts[1]
    flags = _part(parts, 2)

    cell: CellAddress | None = parse_cell_address(pattern)
    table_ref = None
    table_create: TableCreateSpec | None = None
    image_ref: ImageAddress | None = None

    if cell is not None:
        pattern = cell.subpattern
    elif pattern.startswith("{"):
        try:
            address = parse_brace_pattern(pattern)
        except ParseError as e:
            raise ParseError(f"brace pattern: {e}") from e
        if address is not None:
            pattern = address.remaining
            cell = address.cell
            table_ref = address.table_ref
            table_create = address.table_create
            image_ref = address.image

    if cell is None and table_ref is None and image_ref is None:
        table_ref = parse_table_ref(pattern)
        if table_ref is not None:
            pattern = ""
        else:
            image_ref = parse_image_address(pattern)

    attributes: AttributeSet | None = None
    spans: tuple[InlineSpan, ...] = ()
    if has_attribute_blocks(replacement):
        cleaned, blocks = find_attribute_blocks(replacement)
        if blocks:
            replacement = cleaned
            if len(blocks) == 1 and blocks[0].is_global:
                attributes = blocks[0].attributes
            else:
                attributes = merge_global_spans(blocks)
            spans = inline_spans(cleaned, blocks)
            if attributes.table_ref:
                created = parse_brace_table(attributes.table_ref).table_create
                if created is not None:
                    table_create = created
                    replacement = ""
                    attributes = None
                    spans = ()

    if (
        table_create is None
        and cell is None
        and table_ref is None
        and image_ref is None
        and attributes is None
    ):
        table_create = parse_table_create(replacement)

    instruction = EditInstruction(
        kind=CommandKind.SUBSTITUTE,
        pattern=pattern,
        replacement=replacement,
        template=parse_template(replacement),
        is_global="g" in _strip_flag_attrs(flags),
        nth=nth_flag(flags),
        regex_flags=regex_flags(flags),
        cell=cell,
        table_ref=table_ref,
        image_ref=image_ref,
        table_create=table_create,
        attributes=attributes,
        spans=spans,
        raw=raw,
    )
    logger.debug("Parsed %r -> %s", raw, instruction)
    return instruction


def parse_expressions(raws: list[str]) -> list[EditInstruction]:
    """Parse a list of directives, prefixing errors with the 1-based index."""
    parsed = []
    for i, raw in enumerate(raws, start=1):
        try:
            parsed.append(parse_expression(raw))
        except ParseError as e:
            raise ParseError(f"expression {i} ({raw!r}): {e}") from e
    return parsed


def parse_expression_lines(text: str) -> list[str]:
    """Directives from a script: one per line, ``#`` comments, blanks skipped."""
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line and not line.startswith("#"):
            lines.append(line)
    return lines
