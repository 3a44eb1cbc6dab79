"""Google Docs API Pydantic models.

Re-exports the types the rest of the package works with. The full set
lives in ``extrased.api_types._models``.
"""

from extrased.api_types._models import (
    BatchUpdateDocumentResponse,
    Document,
    Paragraph,
    ParagraphElement,
    Response,
    StructuralElement,
    Table,
    TableCell,
)

__all__ = [
    "BatchUpdateDocumentResponse",
    "Document",
    "Paragraph",
    "ParagraphElement",
    "Response",
    "StructuralElement",
    "Table",
    "TableCell",
]
