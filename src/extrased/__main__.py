"""CLI entry point for extrased.

Usage:
    python -m extrased <document_id_or_url> 's/old/new/g'
    python -m extrased <document> -e 's/a/b/' -e 'd/^DRAFT/'
    python -m extrased <document> -f edits.sed [--dry-run]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from extrased.engine import Engine, RunResult
from extrased.errors import ExpressionError, SedError
from extrased.parser import parse_expression_lines, parse_expressions
from extrased.planner import dry_run_report
from extrased.transport import (
    DEFAULT_TIMEOUT,
    GoogleDocsTransport,
    TransportError,
    extract_document_id,
)

# Environment variables checked for an access token, in order
TOKEN_ENV_VARS = ("EXTRASED_ACCESS_TOKEN", "GOOGLE_ACCESS_TOKEN")


def resolve_access_token(flag: str | None) -> str | None:
    """The ``--access-token`` value, else the first token found in the environment."""
    if flag:
        return flag
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def collect_expressions(args: argparse.Namespace) -> list[str]:
    """Directives from the positional argument, ``-e`` flags and ``-f`` script, in that order."""
    raws: list[str] = []
    if args.expression:
        raws.append(args.expression)
    raws.extend(args.expressions or [])
    if args.file:
        if args.file == "-":
            text = sys.stdin.read()
        else:
            text = Path(args.file).read_text(encoding="utf-8")
        raws.extend(parse_expression_lines(text))
    return raws


def format_result(result: RunResult) -> list[str]:
    """Lines printed after a run: one per directive, then the total."""
    lines = []
    if len(result.outcomes) > 1:
        for outcome in result.outcomes:
            line = f"{outcome.number}\t{outcome.changed}"
            if outcome.message:
                line += f"\t{outcome.message}"
            lines.append(line)
    elif result.outcomes and result.outcomes[0].message:
        lines.append(result.outcomes[0].message)
    lines.append(f"replaced\t{result.changed}")
    return lines


async def cmd_run(args: argparse.Namespace) -> int:
    """Run the directives against the document."""
    try:
        raws = collect_expressions(args)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not raws:
        print("Error: no expressions given", file=sys.stderr)
        return 1

    if args.dry_run:
        for line in dry_run_report(raws):
            print(line)
        return 0

    try:
        instructions = parse_expressions(raws)
    except SedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    token = resolve_access_token(args.access_token)
    if not token:
        print(
            "Error: no access token; pass --access-token or set "
            + " / ".join(TOKEN_ENV_VARS),
            file=sys.stderr,
        )
        return 1

    document_id = extract_document_id(args.document)
    transport = GoogleDocsTransport(access_token=token, timeout=args.timeout)
    try:
        result = await Engine(transport).run(document_id, instructions)
    except ExpressionError as e:
        for outcome in e.completed:
            print(f"{outcome.number}\t{outcome.changed}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (SedError, TransportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await transport.close()

    for line in format_result(result):
        print(line)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extrased",
        description="Apply sed-style edit directives to a Google Doc",
    )
    parser.add_argument(
        "document",
        help="Document ID or full Google Docs URL",
    )
    parser.add_argument(
        "expression",
        nargs="?",
        default=None,
        help="Directive, e.g. 's/old/new/g'",
    )
    parser.add_argument(
        "-e",
        "--expression",
        dest="expressions",
        action="append",
        metavar="EXPR",
        help="Additional directive (repeatable)",
    )
    parser.add_argument(
        "-f",
        "--file",
        default=None,
        help="Read directives from a file, one per line ('-' for stdin)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and classify directives without touching the document",
    )
    parser.add_argument(
        "--access-token",
        default=None,
        help="OAuth access token (defaults to $EXTRASED_ACCESS_TOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds (default {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests and phases to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    result: int = asyncio.run(cmd_run(args))
    return result


if __name__ == "__main__":
    sys.exit(main())
