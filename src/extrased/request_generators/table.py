"""Table request generation for Google Docs batchUpdate.

Generates requests for table operations including:
- Table creation and header pinning
- Table structure (insert/delete rows and columns, delete whole tables)
- Cell merging and unmerging

Row and column indexes passed here are 0-based, as the API expects.
"""

from __future__ import annotations

from typing import Any

from extrased.request_generators.text import delete_range


def table_cell_location(
    table_start_index: int, row_index: int = 0, col_index: int = 0
) -> dict[str, Any]:
    return {
        "tableStartLocation": {"index": table_start_index},
        "rowIndex": row_index,
        "columnIndex": col_index,
    }


def generate_insert_table_request(
    rows: int,
    cols: int,
    insert_index: int,
) -> dict[str, Any]:
    """Generate an insertTable request.

    Args:
        rows: Number of rows
        cols: Number of columns
        insert_index: Index to insert at

    Returns:
        An insertTable request dict
    """
    return {
        "insertTable": {
            "rows": rows,
            "columns": cols,
            "location": {"index": insert_index},
        }
    }


def generate_pin_header_request(table_start_index: int, rows: int = 1) -> dict[str, Any]:
    """Pin the first ``rows`` rows of a table as repeating header rows."""
    return {
        "pinTableHeaderRows": {
            "tableStartLocation": {"index": table_start_index},
            "pinnedHeaderRowsCount": rows,
        }
    }


def generate_delete_table_request(start: int, end: int) -> dict[str, Any]:
    """Delete a whole table occupying ``[start, end)``."""
    return delete_range(start, end)


def generate_insert_table_row_request(
    table_start_index: int,
    row_index: int,
    insert_below: bool = True,
) -> dict[str, Any]:
    """Generate an insertTableRow request.

    Args:
        table_start_index: Start index of the table
        row_index: Reference row index
        insert_below: If True, insert below the reference row; if False, above

    Returns:
        An insertTableRow request dict
    """
    return {
        "insertTableRow": {
            "tableCellLocation": table_cell_location(table_start_index, row_index),
            "insertBelow": insert_below,
        }
    }


def generate_delete_table_row_request(
    table_start_index: int, row_index: int
) -> dict[str, Any]:
    return {
        "deleteTableRow": {
            "tableCellLocation": table_cell_location(table_start_index, row_index),
        }
    }


def generate_insert_table_column_request(
    table_start_index: int,
    col_index: int,
    insert_right: bool = True,
) -> dict[str, Any]:
    """Generate an insertTableColumn request.

    Args:
        table_start_index: Start index of the table
        col_index: Reference column index
        insert_right: If True, insert right of the reference column; if False, left

    Returns:
        An insertTableColumn request dict
    """
    return {
        "insertTableColumn": {
            "tableCellLocation": table_cell_location(table_start_index, 0, col_index),
            "insertRight": insert_right,
        }
    }


def generate_delete_table_column_request(
    table_start_index: int, col_index: int
) -> dict[str, Any]:
    return {
        "deleteTableColumn": {
            "tableCellLocation": table_cell_location(table_start_index, 0, col_index),
        }
    }


def _table_range(
    table_start_index: int, row_index: int, col_index: int, row_span: int, col_span: int
) -> dict[str, Any]:
    return {
        "tableCellLocation": table_cell_location(
            table_start_index, row_index, col_index
        ),
        "rowSpan": row_span,
        "columnSpan": col_span,
    }


def generate_merge_cells_request(
    table_start_index: int,
    row_index: int,
    col_index: int,
    row_span: int,
    col_span: int,
) -> dict[str, Any]:
    """Merge the ``row_span`` x ``col_span`` block anchored at (row, col)."""
    return {
        "mergeTableCells": {
            "tableRange": _table_range(
                table_start_index, row_index, col_index, row_span, col_span
            )
        }
    }


def generate_unmerge_cells_request(
    table_start_index: int,
    row_index: int,
    col_index: int,
    row_span: int = 1,
    col_span: int = 1,
) -> dict[str, Any]:
    return {
        "unmergeTableCells": {
            "tableRange": _table_range(
                table_start_index, row_index, col_index, row_span, col_span
            )
        }
    }
