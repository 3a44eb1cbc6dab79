"""Table, cell and image addresses found in the pattern position.

Pipe forms::

    |2|            second table         |-1|   last table    |*|  all tables
    |1|[2,3]       row 2, column 3      |1|[B2]  same cell, spreadsheet style
    |1|[*,2]       every cell of column 2
    |1|[1,1:2,3]   merge range          |1|[A1]:foo  regex inside the cell
    |1|[row:+2]    insert a row before row 2 (``$+`` appends, ``N`` deletes)

Brace forms::

    {T=1}  {T=-1}  {T=*}  {T=3x4}  {T=3x4:header}
    {T=1!A1}  {T=1!2,3}  {T=1!2,*}  {T=1!*,3}  {T=1!*}  {T=1!A1:C3}
    {T=1!row=+2}  {T=1!col=$+}
    {img=1}  {img=-1}  {img=*}  {img=alt-regex}

Image patterns: ``!(1)``, ``!(*)``, ``![](2)``, ``![alt-regex]``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from extrased.attributes import find_matching_brace
from extrased.errors import ParseError
from extrased.types import (
    AllFromEnd,
    Axis,
    CellAddress,
    ImageAddress,
    ImageSpec,
    RowColOp,
    RowColOpKind,
    Specific,
    TableCreateSpec,
    Wildcard,
)

MAX_TABLE_ROWS = 100
MAX_TABLE_COLS = 26

_EXCEL_RE = re.compile(r"^([A-Za-z]+)([0-9]+)$")


@dataclass(frozen=True)
class PatternAddress:
    """What a pattern-position address resolved to.

    Exactly one of the address fields is set. ``remaining`` is the regex
    left after the address (used as a within-cell subpattern).
    """

    remaining: str = ""
    cell: CellAddress | None = None
    table_ref: Axis | None = None
    table_create: TableCreateSpec | None = None
    image: ImageAddress | None = None


# --- Primitives ---


def parse_excel_ref(text: str) -> tuple[int, int] | None:
    """``B3`` -> ``(3, 2)``; columns are base-26 letters."""
    m = _EXCEL_RE.match(text.strip())
    if not m:
        return None
    row = int(m.group(2))
    if row < 1:
        return None
    col = 0
    for ch in m.group(1).upper():
        col = col * 26 + (ord(ch) - ord("A") + 1)
    return row, col


def _parse_int(text: str, what: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise ParseError(f"invalid {what} {text!r}") from None


def _parse_coord(text: str) -> tuple[int, int]:
    """A single ``R,C`` or ``A1`` cell coordinate."""
    if "," in text:
        row, col = text.split(",", 1)
        return _parse_int(row, "row"), _parse_int(col, "col")
    ref = parse_excel_ref(text)
    if ref is None:
        raise ParseError(f"invalid cell reference {text!r}")
    return ref


def _table_axis(text: str) -> Axis:
    text = text.strip()
    if text == "*":
        return Wildcard()
    index = _parse_int(text, "table index")
    if index == 0:
        raise ParseError("table index cannot be 0; use * for all tables")
    return Specific(index)


def _row_col_op(axis: str, value: str) -> RowColOp:
    """``+K`` inserts before K, ``$+`` appends, ``N`` / ``-N`` deletes."""
    value = value.strip()
    if not value:
        raise ParseError(f"empty {axis} operation")
    if value == "$+":
        return RowColOp(axis, RowColOpKind.APPEND, AllFromEnd())
    if value.startswith("+"):
        target = _parse_int(value[1:], axis)
        if target < 1:
            raise ParseError(f"invalid {axis} insert position {value!r}")
        return RowColOp(axis, RowColOpKind.INSERT, Specific(target))
    target = _parse_int(value, axis)
    if target == 0:
        raise ParseError(f"{axis} index cannot be 0")
    return RowColOp(axis, RowColOpKind.DELETE, Specific(target))


def _cell_body(table: Axis, body: str, subpattern: str = "") -> CellAddress:
    """Parse what sits between the brackets of ``|N|[...]``."""
    body = body.strip()
    if isinstance(table, Wildcard):
        raise ParseError("cell addresses need a specific table, not |*|")

    for axis in ("row", "col"):
        for sep in (":", "="):
            if body.startswith(axis + sep):
                op = _row_col_op(axis, body[4:])
                return CellAddress(table=table, op=op)

    if body == "*":
        return CellAddress(table, Wildcard(), Wildcard(), subpattern=subpattern)

    if ":" in body:
        start, end = body.split(":", 1)
        row, col = _parse_coord(start)
        end_row, end_col = _parse_coord(end)
        return CellAddress(
            table, Specific(row), Specific(col), end_row, end_col, subpattern=subpattern
        )

    if "," in body:
        row_text, col_text = (p.strip() for p in body.split(",", 1))
        # +K / $+ in either slot is a row or column insert
        if row_text.startswith("+") or row_text == "$+":
            return CellAddress(table=table, op=_row_col_op("row", row_text))
        if col_text.startswith("+") or col_text == "$+":
            return CellAddress(table=table, op=_row_col_op("col", col_text))
        row: Axis = (
            Wildcard() if row_text == "*" else Specific(_parse_int(row_text, "row"))
        )
        col: Axis = (
            Wildcard() if col_text == "*" else Specific(_parse_int(col_text, "col"))
        )
        return CellAddress(table, row, col, subpattern=subpattern)

    ref = parse_excel_ref(body)
    if ref is None:
        raise ParseError(f"invalid cell spec {body!r}")
    return CellAddress(table, Specific(ref[0]), Specific(ref[1]), subpattern=subpattern)


# --- Pipe forms ---


def parse_cell_address(pattern: str) -> CellAddress | None:
    """Parse ``|N|[...]`` with an optional ``:subpattern`` tail.

    Returns None when the pattern is not a cell address at all.
    """
    if not pattern.startswith("|"):
        return None
    close = pattern.find("|", 1)
    if close < 0:
        return None
    table_text = pattern[1:close]
    rest = pattern[close + 1 :]
    if not rest.startswith("["):
        return None
    bracket = rest.find("]")
    if bracket < 0:
        return None
    if table_text == "*":
        raise ParseError("cell addresses need a specific table, not |*|")
    try:
        table = Specific(int(table_text))
    except ValueError:
        return None
    if table.index == 0:
        raise ParseError("table index cannot be 0")
    after = rest[bracket + 1 :]
    subpattern = after[1:] if after.startswith(":") else ""
    return _cell_body(table, rest[1:bracket], subpattern)


def parse_table_ref(pattern: str) -> Axis | None:
    """Parse a bare ``|N|``, ``|-N|`` or ``|*|`` table reference."""
    text = pattern.strip()
    if len(text) < 3 or text[0] != "|" or text[-1] != "|":
        return None
    inner = text[1:-1]
    if "x" in inner or "X" in inner:
        return None
    if inner == "*":
        return Wildcard()
    try:
        index = int(inner)
    except ValueError:
        return None
    return Specific(index) if index != 0 else None


# --- Table creation ---


def _create_spec(text: str) -> TableCreateSpec | None:
    """``RxC`` or ``RxC:header``; None if the text is not that shape."""
    header = False
    if ":" in text:
        text, suffix = text.split(":", 1)
        if suffix.strip().lower() != "header":
            return None
        header = True
    parts = text.lower().split("x", 1)
    if len(parts) != 2:
        return None
    try:
        rows, cols = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (1 <= rows <= MAX_TABLE_ROWS and 1 <= cols <= MAX_TABLE_COLS):
        return None
    return TableCreateSpec(rows, cols, header)


def parse_table_create(replacement: str) -> TableCreateSpec | None:
    """Parse ``|RxC|`` / ``|RxC:header|`` or a markdown pipe table."""
    text = replacement.strip()
    if len(text) >= 4 and text[0] == "|" and text[-1] == "|":
        spec = _create_spec(text[1:-1])
        if spec is not None:
            return spec
    return parse_pipe_table(replacement)


def parse_pipe_table(replacement: str) -> TableCreateSpec | None:
    """Parse ``| a | b |\\n| c | d |`` into a filled table spec.

    Separator rows (``|---|:--:|``) are skipped; rows are padded or cut
    to the width of the first row.
    """
    text = replacement.replace("\\n", "\n").strip()
    if not text.startswith("|"):
        return None
    rows: list[tuple[str, ...]] = []
    width = 0
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        if not line.startswith("|"):
            return None
        cells = [p.strip() for p in line.split("|") if p.strip()]
        if any(not c.strip("-: ") for c in cells):
            continue
        if not cells:
            return None
        if not width:
            width = len(cells)
        cells = (cells + [""] * width)[:width]
        rows.append(tuple(cells))
    if not rows:
        return None
    return TableCreateSpec(len(rows), width, cells=tuple(rows))


# --- Brace forms ---


def parse_brace_table(spec: str) -> PatternAddress:
    """Parse the value of ``{T=...}``."""
    spec = spec.strip()
    if not spec:
        raise ParseError("empty table spec")
    if "!" not in spec and spec[0].isdigit() and "x" in spec.lower():
        create = _create_spec(spec)
        if create is None:
            raise ParseError(
                f"invalid table create spec {spec!r} "
                f"(rows 1-{MAX_TABLE_ROWS}, cols 1-{MAX_TABLE_COLS})"
            )
        return PatternAddress(table_create=create)

    table_text, _, cell_text = spec.partition("!")
    table = _table_axis(table_text)
    if not cell_text.strip():
        return PatternAddress(table_ref=table)
    return PatternAddress(cell=_cell_body(table, cell_text))


def parse_brace_image(spec: str) -> ImageAddress:
    """Parse the value of ``{img=...}``."""
    spec = spec.strip()
    if not spec:
        raise ParseError("empty image spec")
    if spec == "*":
        return ImageAddress(position=Wildcard())
    try:
        return ImageAddress(position=Specific(int(spec)))
    except ValueError:
        pass
    try:
        re.compile(spec)
    except re.error as e:
        raise ParseError(f"invalid image pattern {spec!r}: {e}") from e
    return ImageAddress(alt_pattern=spec)


def parse_brace_pattern(pattern: str) -> PatternAddress | None:
    """Detect a leading ``{T=...}`` or ``{img=...}`` in a pattern.

    Returns None if the pattern does not start with one.
    """
    text = pattern.strip()
    if not text.startswith("{"):
        return None
    close = find_matching_brace(text, 0)
    if close < 0:
        return None
    content = text[1:close]
    remaining = text[close + 1 :].strip()
    if content.startswith("T="):
        address = parse_brace_table(content[2:])
        if address.cell is not None and remaining:
            cell = address.cell
            address = PatternAddress(
                cell=CellAddress(
                    cell.table,
                    cell.row,
                    cell.col,
                    cell.end_row,
                    cell.end_col,
                    cell.op,
                    remaining,
                )
            )
        return PatternAddress(
            remaining=remaining,
            cell=address.cell,
            table_ref=address.table_ref,
            table_create=address.table_create,
        )
    if content.startswith("img="):
        return PatternAddress(remaining=remaining, image=parse_brace_image(content[4:]))
    return None


# --- Images ---


def _image_position(inner: str) -> ImageAddress | None:
    if inner == "*":
        return ImageAddress(position=Wildcard())
    try:
        return ImageAddress(position=Specific(int(inner)))
    except ValueError:
        return None


def parse_image_address(pattern: str) -> ImageAddress | None:
    """Parse ``!(N)``, ``!(*)``, ``![](N)`` or ``![alt-regex]``."""
    if pattern.startswith("![](") and pattern.endswith(")"):
        return _image_position(pattern[4:-1])
    if pattern.startswith("!(") and pattern.endswith(")"):
        return _image_position(pattern[2:-1])
    if pattern.startswith("![") and pattern.endswith("]") and "](" not in pattern:
        alt = pattern[2:-1]
        if not alt:
            return None
        try:
            re.compile(alt)
        except re.error:
            return None
        return ImageAddress(alt_pattern=alt)
    return None


def _dimension(value: str) -> int:
    value = value.removesuffix("px").removesuffix("%")
    try:
        return int(value)
    except ValueError:
        return 0


def parse_image_literal(text: str) -> ImageSpec | None:
    """Parse ``![alt](url "title"){width=W height=H}`` or ``!(https://...)``."""
    if text.startswith("!(") and text.endswith(")"):
        inner = text[2:-1]
        if inner.startswith(("http://", "https://")):
            return ImageSpec(url=inner)
        return None
    if not text.startswith("!["):
        return None
    alt_end = text.find("](")
    if alt_end < 0:
        return None
    alt = text[2:alt_end]
    rest = text[alt_end + 2 :]

    url_end = next((i for i, ch in enumerate(rest) if ch in '"){'), -1)
    if url_end < 0:
        return None
    url = rest[:url_end].strip()
    rest = rest[url_end:]

    title = ""
    stripped = rest.lstrip(" ")
    if stripped.startswith('"'):
        end = stripped.find('"', 1)
        if end > 0:
            title = stripped[1:end]
            rest = stripped[end + 1 :]
    rest = rest.removeprefix(")")

    width = height = 0
    if rest.startswith("{") and "}" in rest:
        for part in rest[1 : rest.index("}")].split():
            key, _, value = part.partition("=")
            if key in ("width", "w"):
                width = _dimension(value)
            elif key in ("height", "h"):
                height = _dimension(value)
    if not url:
        return None
    return ImageSpec(url=url, alt=alt, title=title, width=width, height=height)
