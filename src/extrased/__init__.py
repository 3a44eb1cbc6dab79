"""extrased - sed-style find/replace and structural edits for Google Docs.

Directives such as ``s/draft/**final**/g`` or ``s/|1|[2,3]/Done/`` are
parsed into edit instructions, matched against a fetched document and
compiled into Google Docs batchUpdate requests.
"""

__version__ = "0.1.0"

from extrased.compiler import EditPlan, compile_insert, compile_matches
from extrased.document import DocumentView, utf16_len
from extrased.engine import Engine, Outcome, RunResult
from extrased.errors import (
    AddressError,
    ExpressionError,
    ParseError,
    PhaseError,
    SedError,
)
from extrased.markdown import parse_markdown
from extrased.matcher import find_matches
from extrased.parser import parse_expression, parse_expression_lines, parse_expressions
from extrased.planner import Category, classify_instruction, dry_run_report
from extrased.retry import RetryPolicy, with_retry
from extrased.transport import (
    APIError,
    AuthenticationError,
    GoogleDocsTransport,
    NotFoundError,
    PermanentServiceError,
    TransientServiceError,
    Transport,
    TransportError,
    extract_document_id,
)
from extrased.types import EditInstruction, Match, MatchKind

__all__ = [
    # Parsing
    "EditInstruction",
    "parse_expression",
    "parse_expression_lines",
    "parse_expressions",
    "parse_markdown",
    # Matching and compilation
    "DocumentView",
    "EditPlan",
    "Match",
    "MatchKind",
    "compile_insert",
    "compile_matches",
    "find_matches",
    "utf16_len",
    # Planning and execution
    "Category",
    "Engine",
    "Outcome",
    "RetryPolicy",
    "RunResult",
    "classify_instruction",
    "dry_run_report",
    "with_retry",
    # Errors
    "AddressError",
    "ExpressionError",
    "ParseError",
    "PhaseError",
    "SedError",
    # Transport
    "APIError",
    "AuthenticationError",
    "GoogleDocsTransport",
    "NotFoundError",
    "PermanentServiceError",
    "TransientServiceError",
    "Transport",
    "TransportError",
    "extract_document_id",
]
