"""Group the directives of one invocation by how they execute.

Every directive falls into exactly one :class:`Category`. The category
decides which engine path runs it and what it may share a round trip
with; it never changes the resulting document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from extrased.errors import ParseError
from extrased.markdown import is_plain_text
from extrased.parser import parse_expression
from extrased.types import (
    AllFromEnd,
    Axis,
    CommandKind,
    EditInstruction,
    Specific,
    Wildcard,
)

UNMERGE_WORDS = frozenset({"unmerge", "split"})

_COMMAND_LABELS = {
    CommandKind.DELETE: "delete",
    CommandKind.APPEND: "append-after",
    CommandKind.INSERT: "insert-before",
    CommandKind.TRANSLITERATE: "transliterate",
}


class Category(Enum):
    """Execution path of one directive, in classification priority order."""

    POSITIONAL = "positional"
    COMMAND = "command"
    CELL = "cell"
    IMAGE = "image"
    TABLE_CREATE = "table_create"
    IMAGE_PATTERN = "image_pattern"
    NATIVE = "native"
    MANUAL = "manual"


def classify_instruction(instruction: EditInstruction) -> Category:
    """Pick the execution path for ``instruction``."""
    if instruction.is_positional:
        return Category.POSITIONAL
    if instruction.kind is not CommandKind.SUBSTITUTE:
        return Category.COMMAND
    if instruction.cell is not None or instruction.table_ref is not None:
        return Category.CELL
    attributes = instruction.attributes
    if instruction.replacement.lstrip().startswith("![") or (
        attributes is not None and attributes.image_ref
    ):
        return Category.IMAGE
    if instruction.table_create is not None:
        return Category.TABLE_CREATE
    if instruction.image_ref is not None:
        return Category.IMAGE_PATTERN
    if is_native(instruction):
        return Category.NATIVE
    return Category.MANUAL


def is_native(instruction: EditInstruction) -> bool:
    """True when the service's own find-and-replace gives the same result.

    That holds for a global substitute whose replacement is literal
    plain text: no back-references, markup, attributes or nth selector.
    """
    template = instruction.template
    return (
        instruction.kind is CommandKind.SUBSTITUTE
        and instruction.is_global
        and instruction.nth == 0
        and instruction.attributes is None
        and not instruction.spans
        and bool(instruction.pattern)
        and template is not None
        and template.is_literal
        and is_plain_text(template.literal_text)
    )


def can_batch_cell(instruction: EditInstruction) -> bool:
    """Whole-cell replacements of one specific cell can share a round trip."""
    cell = instruction.cell
    return (
        cell is not None
        and isinstance(cell.table, Specific)
        and cell.op is None
        and not cell.is_range
        and not cell.is_wildcard
        and not cell.subpattern
        and instruction.replacement.strip().lower() not in UNMERGE_WORDS
    )


def batch_key(instruction: EditInstruction) -> int | None:
    """Table index shared by batchable cell directives, else None."""
    if not can_batch_cell(instruction):
        return None
    assert instruction.cell is not None
    table = instruction.cell.table
    assert isinstance(table, Specific)
    return table.index


# --- Dry run ---


def format_axis(axis: Axis | None) -> str:
    if isinstance(axis, Specific):
        return str(axis.index)
    if isinstance(axis, Wildcard):
        return "*"
    if isinstance(axis, AllFromEnd):
        return "$+"
    return ""


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def describe_kind(instruction: EditInstruction) -> str:
    """Short label for the dry-run listing."""
    category = classify_instruction(instruction)
    if category is Category.COMMAND:
        return _COMMAND_LABELS[instruction.kind]
    if category is Category.CELL:
        if instruction.table_ref is not None:
            return f"delete table {format_axis(instruction.table_ref)}"
        cell = instruction.cell
        assert cell is not None
        table = format_axis(cell.table)
        if cell.op is not None:
            return f"table {table} {cell.op.kind.value} {cell.op.axis}"
        if instruction.replacement.strip().lower() in UNMERGE_WORDS:
            return f"table {table} unmerge"
        if cell.is_range:
            return f"table {table} merge"
        label = f"cell |{table}|[{format_axis(cell.row)},{format_axis(cell.col)}]"
        if cell.is_wildcard:
            label += " (wildcard)"
        return label
    if category is Category.TABLE_CREATE:
        return "create table"
    if category in (Category.IMAGE, Category.IMAGE_PATTERN):
        return "image"
    if category is Category.POSITIONAL:
        return "positional"
    if category is Category.NATIVE:
        return "native"
    if instruction.attributes is not None or instruction.spans:
        return "brace"
    return "manual"


@dataclass
class DryRunLine:
    """One directive's dry-run verdict."""

    number: int
    raw: str
    kind: str = ""
    error: str = ""
    summary: str = ""
    flags: str = ""

    def render(self) -> str:
        status = f"ERROR: {self.error}" if self.error else "ok"
        kind = self.kind or "-"
        line = f"{self.number}\t{kind}\t{status}\t{self.summary or self.raw}"
        if self.flags:
            line += f"\t{{{self.flags}}}"
        return line


def dry_run_line(number: int, raw: str) -> DryRunLine:
    """Parse one directive (and compile its pattern) without touching a document."""
    line = DryRunLine(number=number, raw=raw)
    try:
        instruction = parse_expression(raw)
    except ParseError as e:
        line.error = str(e)
        return line

    line.kind = describe_kind(instruction)
    flags = ""
    if instruction.is_global:
        flags += "g"
    if instruction.nth:
        flags += str(instruction.nth)
    if instruction.regex_flags & re.IGNORECASE:
        flags += "i"
    if instruction.regex_flags & re.MULTILINE:
        flags += "m"
    line.summary = (
        f"{instruction.kind.value}/{instruction.pattern}/"
        f"{truncate(instruction.replacement, 40)}/{flags}"
    )
    if instruction.attributes is not None:
        line.flags = instruction.attributes.describe()

    if instruction.pattern and not instruction.is_positional:
        try:
            instruction.regex  # noqa: B018
        except ParseError as e:
            line.error = str(e)
    return line


def dry_run_report(raws: list[str]) -> list[str]:
    """Lines printed by ``--dry-run``: one per directive plus a footer."""
    lines = [dry_run_line(i, raw).render() for i, raw in enumerate(raws, start=1)]
    lines.append("---")
    lines.append(f"dry-run: {len(raws)} expressions parsed, no changes made")
    return lines
