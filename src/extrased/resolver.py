"""Resolve parsed addresses against a live document.

Parsing an address (:mod:`extrased.addressing`) needs no document;
resolving it does. Everything here turns a 1-based, possibly negative
or wildcard position into concrete tables, cells and images of a
:class:`~extrased.document.DocumentView`, raising
:class:`~extrased.errors.AddressError` with the valid range when a
position does not exist.
"""

from __future__ import annotations

import re

from extrased.document import DocumentView, ImageNode, TableNode
from extrased.errors import AddressError, ParseError
from extrased.types import (
    Axis,
    CellAddress,
    ImageAddress,
    Specific,
    Wildcard,
)


def resolve_position(index: int, count: int, kind: str) -> int:
    """0-based offset of a 1-based ``index``; negative counts from the end."""
    if index > 0 and index <= count:
        return index - 1
    if index < 0 and -index <= count:
        return count + index
    raise AddressError(kind, index, (1, count))


def resolve_table(view: DocumentView, axis: Axis) -> TableNode:
    """The single table an axis names; nested tables count in document order."""
    if not isinstance(axis, Specific):
        raise ParseError("a single table is required here, not |*|")
    return view.tables[resolve_position(axis.index, len(view.tables), "table")]


def resolve_tables(view: DocumentView, axis: Axis) -> list[TableNode]:
    """Tables named by ``|N|`` / ``|*|``; ``*`` means every body-level table."""
    if isinstance(axis, Wildcard):
        return view.body_tables
    return [resolve_table(view, axis)]


def _axis_values(axis: Axis | None, count: int, kind: str) -> list[int]:
    if isinstance(axis, Wildcard):
        return list(range(1, count + 1))
    if isinstance(axis, Specific):
        return [resolve_position(axis.index, count, kind) + 1]
    raise ParseError(f"{kind} position required in a cell address")


def resolve_cells(node: TableNode, cell: CellAddress) -> list[tuple[int, int]]:
    """1-based ``(row, col)`` pairs a cell address covers, in document order.

    Rows of a table can be ragged after merges, so the column range is
    checked against each row separately.
    """
    cells: list[tuple[int, int]] = []
    for row in _axis_values(cell.row, node.rows, "row"):
        width = len(node.row_cells(row))
        if isinstance(cell.col, Wildcard):
            cols = list(range(1, width + 1))
        else:
            cols = _axis_values(cell.col, width, "col")
        cells.extend((row, col) for col in cols)
    return cells


def resolve_merge_range(node: TableNode, cell: CellAddress) -> tuple[int, int, int, int]:
    """0-based ``(row, col, row_span, col_span)`` of a merge or unmerge target."""
    row = resolve_position(_specific(cell.row, "row"), node.rows, "row")
    col = resolve_position(_specific(cell.col, "col"), node.cols, "col")
    if not cell.is_range:
        return row, col, 1, 1
    assert cell.end_row is not None and cell.end_col is not None
    end_row = resolve_position(cell.end_row, node.rows, "row")
    end_col = resolve_position(cell.end_col, node.cols, "col")
    if end_row < row or end_col < col:
        raise ParseError("merge range must run from top-left to bottom-right")
    return row, col, end_row - row + 1, end_col - col + 1


def _specific(axis: Axis | None, kind: str) -> int:
    if not isinstance(axis, Specific):
        raise ParseError(f"merge ranges need a specific {kind}")
    return axis.index


def resolve_images(
    images: list[ImageNode], address: ImageAddress, is_global: bool
) -> list[ImageNode]:
    """Images an address selects.

    A position picks one image (``*`` picks all); an alt-text regex
    picks the first match, or every match with ``g``.
    """
    position = address.position
    if isinstance(position, Wildcard):
        return list(images)
    if isinstance(position, Specific):
        return [images[resolve_position(position.index, len(images), "image")]]
    regex = re.compile(address.alt_pattern or "")
    found = [image for image in images if regex.search(image.alt)]
    return found if is_global else found[:1]
