"""Replacement templates: parse once, expand per match.

A replacement string is parsed into a flat sequence of literal text,
numbered back-references and whole-match references. Expansion never
goes back to the raw string, so escaping rules are applied exactly once.

Syntax:
    ``&``, ``${0}``         whole match
    ``\\1``..``\\9``, ``$1``..``$9``, ``${N}``   capture group N
    ``\\&``, ``\\$``, ``$$``   literal ``&`` / ``$``
    ``\\.`` ``\\(`` etc.      the regex metacharacter itself

Any other escape (``\\n``, ``\\*``, ``\\\\``) is kept as written; the
markdown layer resolves those.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Escapes that just drop the backslash
_META_ESCAPES = frozenset(".^[](){}+?|")


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Backreference:
    group: int


@dataclass(frozen=True)
class WholeMatch:
    pass


TemplateNode = Literal | Backreference | WholeMatch


class ReplacementTemplate:
    """A parsed replacement string."""

    def __init__(self, nodes: list[TemplateNode], source: str = "") -> None:
        self.nodes = tuple(nodes)
        self.source = source

    def __repr__(self) -> str:
        return f"ReplacementTemplate({self.source!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReplacementTemplate):
            return NotImplemented
        return self.nodes == other.nodes

    def __hash__(self) -> int:
        return hash(self.nodes)

    @property
    def is_literal(self) -> bool:
        """True when the template contains no references."""
        return all(isinstance(n, Literal) for n in self.nodes)

    @property
    def literal_text(self) -> str:
        """Concatenated literal text (references are skipped)."""
        return "".join(n.text for n in self.nodes if isinstance(n, Literal))

    @property
    def is_whole_match(self) -> bool:
        """True when the template is exactly ``&`` or ``${0}``."""
        return len(self.nodes) == 1 and isinstance(self.nodes[0], WholeMatch)

    def render(self, whole: str, groups: tuple[str | None, ...] = ()) -> str:
        """Expand against a whole-match string and its capture groups.

        Groups that did not participate (or do not exist) expand to "".
        """
        out: list[str] = []
        for node in self.nodes:
            if isinstance(node, Literal):
                out.append(node.text)
            elif isinstance(node, WholeMatch):
                out.append(whole)
            elif 0 < node.group <= len(groups):
                out.append(groups[node.group - 1] or "")
        return "".join(out)

    def expand(self, match: re.Match[str]) -> str:
        """Expand against a live regex match."""
        return self.render(match.group(0), match.groups())


def parse_template(source: str) -> ReplacementTemplate:
    """Parse a replacement string into a :class:`ReplacementTemplate`."""
    nodes: list[TemplateNode] = []
    buf: list[str] = []

    def flush() -> None:
        if buf:
            nodes.append(Literal("".join(buf)))
            buf.clear()

    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == "\\":
            if i + 1 >= n:
                buf.append("\\")
                break
            nxt = source[i + 1]
            if nxt.isdigit() and nxt != "0":
                flush()
                nodes.append(Backreference(int(nxt)))
            elif nxt in "&$" or nxt in _META_ESCAPES:
                buf.append(nxt)
            else:
                # Unknown escapes (\n, \t, \*) are kept for later layers
                buf.append(ch + nxt)
            i += 2
            continue
        if ch == "&":
            flush()
            nodes.append(WholeMatch())
            i += 1
            continue
        if ch == "$" and i + 1 < n:
            nxt = source[i + 1]
            if nxt == "$":
                buf.append("$")
                i += 2
                continue
            if nxt.isdigit() and nxt != "0":
                flush()
                nodes.append(Backreference(int(nxt)))
                i += 2
                continue
            if nxt == "{":
                close = source.find("}", i + 2)
                number = source[i + 2 : close] if close != -1 else ""
                if number.isdigit():
                    flush()
                    group = int(number)
                    nodes.append(WholeMatch() if group == 0 else Backreference(group))
                    i = close + 1
                    continue
        buf.append(ch)
        i += 1
    flush()
    return ReplacementTemplate(nodes, source)
