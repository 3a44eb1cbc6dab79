"""Request generators for Google Docs batchUpdate.

This package contains modules for generating batchUpdate requests:
- text: Text insertion/deletion, text and paragraph styles, breaks
- structural: Columns, checkboxes, bookmarks and smart chips
- table: Table creation, row/column operations and cell merging
"""

from extrased.request_generators.structural import (
    ChipSpec,
    parse_chip,
    structural_requests,
)
from extrased.request_generators.table import (
    generate_delete_table_column_request,
    generate_delete_table_request,
    generate_delete_table_row_request,
    generate_insert_table_column_request,
    generate_insert_table_request,
    generate_insert_table_row_request,
    generate_merge_cells_request,
    generate_pin_header_request,
    generate_unmerge_cells_request,
)
from extrased.request_generators.text import (
    attribute_paragraph_requests,
    attribute_text_style_requests,
    break_requests,
    delete_range,
    insert_text,
    markdown_paragraph_requests,
    markdown_text_style_requests,
)

__all__ = [
    "ChipSpec",
    "attribute_paragraph_requests",
    "attribute_text_style_requests",
    "break_requests",
    "delete_range",
    "generate_delete_table_column_request",
    "generate_delete_table_request",
    "generate_delete_table_row_request",
    "generate_insert_table_column_request",
    "generate_insert_table_request",
    "generate_insert_table_row_request",
    "generate_merge_cells_request",
    "generate_pin_header_request",
    "generate_unmerge_cells_request",
    "insert_text",
    "markdown_paragraph_requests",
    "markdown_text_style_requests",
    "parse_chip",
    "structural_requests",
]
