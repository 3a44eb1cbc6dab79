"""Markdown-lite replacement syntax.

A replacement without attribute blocks may use a small set of markdown
markers. :func:`parse_markdown` strips the markup and reports what it
found as format tags:

    **x** -> bold          *x* -> italic        ***x*** -> bold, italic
    ~~x~~ -> strikethrough `x` -> code           [t](url) -> link:url
    # x   -> heading1      - x -> bullet         1. x -> numbered
    > x   -> blockquote    [^x] -> footnote      --- -> hrule
    ```...``` -> codeblock

Two leading spaces per nesting level before a list marker become tab
characters, which Google Docs turns into nesting levels when bullets
are applied.

Backslash escapes (``\\*``, ``\\#``, ``\\~``, ``\\```, ``\\-``, ``\\+``,
``\\\\``) make a marker literal; ``\\n`` is a newline.
"""

from __future__ import annotations

import re

# Private-use placeholders for escaped markers
_ESCAPES: dict[str, str] = {
    "\\\\": "\ue000",
    "\\*": "\ue001",
    "\\#": "\ue002",
    "\\~": "\ue003",
    "\\`": "\ue004",
    "\\-": "\ue005",
    "\\+": "\ue006",
}
_ESCAPE_RE = re.compile(r"\\\\|\\[*#~`+\-]|\\n")
_RESTORE = {placeholder: raw[1] for raw, placeholder in _ESCAPES.items()}
_RESTORE_RE = re.compile("[\ue000-\ue006]")

_NUMBERED_RE = re.compile(r"^[0-9]\. ")

TEXT_FORMATS = frozenset(
    {
        "bold",
        "italic",
        "strikethrough",
        "code",
        "underline",
        "superscript",
        "subscript",
        "smallcaps",
    }
)


def _escape(text: str) -> str:
    return _ESCAPE_RE.sub(
        lambda m: "\n" if m.group(0) == "\\n" else _ESCAPES[m.group(0)], text
    )


def _restore(text: str) -> str:
    return _RESTORE_RE.sub(lambda m: _RESTORE[m.group(0)], text)


def unescape(text: str) -> str:
    """Resolve backslash escapes without interpreting any markup."""
    return _restore(_escape(text))


def is_hrule(text: str) -> bool:
    return text.strip() in ("---", "***", "___")


def parse_markdown(replacement: str) -> tuple[str, list[str]]:
    """Strip markdown markers from a replacement.

    Returns:
        Tuple of (plain text, format tags)
    """
    text, formats = _parse(_escape(replacement))
    return _restore(text), formats


def _parse(text: str) -> tuple[str, list[str]]:
    formats: list[str] = []

    if is_hrule(text):
        return "\n", ["hrule"]

    if text.startswith("```") and text.endswith("```") and len(text) > 6:
        inner = text[3:-3]
        # Drop the language hint line
        if "\n" in inner:
            inner = inner.split("\n", 1)[1]
        return inner, ["codeblock"]

    if text.startswith("> "):
        return text[2:], ["blockquote"]

    if text.startswith("[^") and text.endswith("]") and len(text) > 3:
        return text[2:-1], ["footnote"]

    level = 0
    body = text
    while body.startswith("  "):
        level += 1
        body = body[2:]
    list_format = ""
    if body.startswith("- "):
        list_format, text = "bullet", body[2:]
    elif body.startswith("* ") and not body.endswith("*"):
        list_format, text = "bullet", body[2:]
    elif _NUMBERED_RE.match(body):
        list_format, text = "numbered", body[3:]
    if list_format:
        formats.append(list_format)
        text = "\t" * level + text

    if text.startswith("***") and text.endswith("***") and len(text) > 6:
        return text[3:-3], formats + ["bold", "italic"]
    if text.startswith("**") and text.endswith("**") and len(text) > 4:
        return text[2:-2], formats + ["bold"]
    if text.startswith("*") and text.endswith("*") and len(text) > 2:
        return text[1:-1], formats + ["italic"]
    if text.startswith("~~") and text.endswith("~~") and len(text) > 4:
        return text[2:-2], formats + ["strikethrough"]
    if text.startswith("`") and text.endswith("`") and len(text) > 2:
        return text[1:-1], formats + ["code"]

    if text.startswith("["):
        idx = text.find("](")
        close = text.rfind(")")
        if idx > 0 and close > idx + 2:
            url = text[idx + 2 : close].replace("\\/", "/")
            return text[1:idx], formats + ["link:" + url]

    if text.startswith("#"):
        level = len(text) - len(text.lstrip("#"))
        if level <= 6:
            stripped = text[level:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
            return stripped, formats + [f"heading{level}"]

    return text, formats


# Markers that force the per-match edit path
_NATIVE_BLOCKERS = (
    "**", "*", "~~", "`",
    "# ", "## ", "### ", "#### ", "##### ", "###### ",
    "- ", "+ ", "> ", "[^", "](",
)  # fmt: skip


def is_plain_text(text: str) -> bool:
    """True when inserting ``text`` verbatim is equivalent to the edit path.

    Plain text carries no markdown markers, no image literal and no
    backslash escapes.
    """
    if "\\" in text or "\n" in text:
        return False
    if text.startswith("!["):
        return False
    if text.startswith("!(") and text.endswith(")"):
        if text[2:-1].startswith(("http://", "https://")):
            return False
    if any(marker in text for marker in _NATIVE_BLOCKERS):
        return False
    if is_hrule(text):
        return False
    return not _NUMBERED_RE.match(text)
