"""Attribute blocks: the ``{...}`` formatting language inside replacements.

An attribute block is a whitespace-separated list of tokens::

    {b i c=red}          bold, italic, red text
    {0 h=2}              reset formatting, then Heading 2
    {!b}                 explicitly not bold
    {b=Warning}          insert "Warning" in bold at this position
    {+=p}                page break after the edit
    {@=intro "=note}     bookmark "intro", comment "note"

:func:`parse_attribute_block` parses the text between the braces.
:func:`find_attribute_blocks` locates every block in a replacement string
and returns the cleaned text plus positioned spans.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from extrased.errors import ParseError
from extrased.types import BOOL_FLAGS, AttributeSet, BreakKind, InlineSpan

logger = logging.getLogger(__name__)

NAMED_COLORS: dict[str, str] = {
    "black": "#000000",
    "white": "#FFFFFF",
    "red": "#FF0000",
    "green": "#00FF00",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "cyan": "#00FFFF",
    "magenta": "#FF00FF",
    "orange": "#FF8C00",
    "purple": "#800080",
    "pink": "#FF69B4",
    "brown": "#8B4513",
    "gray": "#808080",
    "grey": "#808080",
    "lightgray": "#D3D3D3",
    "darkgray": "#404040",
    "navy": "#000080",
    "teal": "#008080",
}

HEADING_STYLES: dict[str, str] = {
    "t": "TITLE",
    "s": "SUBTITLE",
    "0": "NORMAL_TEXT",
    **{str(n): f"HEADING_{n}" for n in range(1, 7)},
}

ALIGNMENTS: dict[str, str] = {
    "left": "START",
    "center": "CENTER",
    "right": "END",
    "justify": "JUSTIFIED",
}

# Substrings that mark a brace group as an attribute block rather than text
_VALUE_KEYS = (
    "t=", "text=", "c=", "color=", "z=", "bg=", "f=", "font=",
    "s=", "size=", "u=", "url=", "h=", "heading=", "l=", "leading=",
    "a=", "align=", "o=", "opacity=", "n=", "indent=", "k=", "kerning=",
    "x=", "width=", "y=", "height=", "p=", "spacing=", "e=", "effect=",
    "cols=", "check", "toc", "img=", "T=", "@=", '"=',
)  # fmt: skip

_BREAKS = {"": BreakKind.RULE, "p": BreakKind.PAGE, "c": BreakKind.COLUMN, "s": BreakKind.SECTION}


# --- Value resolution ---


def resolve_color(value: str) -> str:
    """Named colour to hex; anything else passes through unchanged."""
    return NAMED_COLORS.get(value.lower(), value)


def resolve_heading(value: str) -> str:
    return HEADING_STYLES.get(value, value)


def resolve_align(value: str) -> str:
    return ALIGNMENTS.get(value.lower(), value)


def parse_hex_color(value: str) -> tuple[float, float, float] | None:
    """Parse ``#RGB`` / ``#RRGGBB`` into 0..1 RGB components."""
    if not value.startswith("#"):
        return None
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        return None
    try:
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None
    return r / 255.0, g / 255.0, b / 255.0


# --- Block parsing ---


def _tokenize(content: str) -> list[str]:
    """Split on spaces and tabs, keeping quoted runs together."""
    tokens: list[str] = []
    current: list[str] = []
    quote = ""
    for ch in content:
        if quote:
            if ch == quote:
                quote = ""
            current.append(ch)
        elif ch in "\"'":
            quote = ch
            current.append(ch)
        elif ch in " \t":
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def parse_attribute_block(content: str) -> AttributeSet:
    """Parse the text between ``{`` and ``}`` into an :class:`AttributeSet`.

    Raises:
        ParseError: On an unknown key, flag or negated flag
    """
    attrs = AttributeSet()
    content = content.strip()
    if not content:
        return attrs

    # A comment swallows the rest of the block
    idx = content.find('"=')
    if idx >= 0:
        attrs.comment = content[idx + 2 :]
        content = content[:idx].strip()

    if content.startswith("0"):
        attrs.reset = True
        content = content[1:].strip()

    for token in _tokenize(content):
        _apply_token(attrs, token)
    return attrs


def _apply_token(attrs: AttributeSet, token: str) -> None:
    if token == "+" or token.startswith("+="):
        value = token[2:]
        if value not in _BREAKS:
            raise ParseError(f"unknown break type: {value}")
        attrs.break_kind = _BREAKS[value]
        return
    if token.startswith("@="):
        attrs.bookmark = token[2:]
        return
    if token.startswith("!"):
        name = token[1:]
        if name == "0":
            attrs.no_reset = True
        elif name in BOOL_FLAGS:
            attrs.set_flag(name, False)
        else:
            raise ParseError(f"unknown negated flag: {name}")
        return
    if "=" in token:
        key, _, value = token.partition("=")
        _apply_key_value(attrs, key, _unquote(value))
        return
    _apply_bare_flag(attrs, token)


def _apply_key_value(attrs: AttributeSet, key: str, value: str) -> None:
    if key in BOOL_FLAGS:
        attrs.inline_texts.append((value, (BOOL_FLAGS[key],)))
        return

    if key in ("t", "text"):
        attrs.text = value
    elif key in ("c", "color"):
        attrs.color = resolve_color(value)
    elif key in ("z", "bg"):
        attrs.bg = resolve_color(value)
    elif key in ("f", "font"):
        attrs.font = value
    elif key in ("s", "size"):
        size = _float(value)
        if size is not None and size > 0:
            attrs.size = size
    elif key in ("u", "url"):
        attrs.url = value
    elif key in ("h", "heading"):
        attrs.heading = value
    elif key in ("l", "leading"):
        leading = _float(value)
        if leading is not None and leading > 0:
            attrs.leading = leading
    elif key in ("a", "align"):
        attrs.align = value.lower()
    elif key in ("o", "opacity"):
        opacity = _int(value)
        if opacity is not None and 0 <= opacity <= 100:
            attrs.opacity = opacity
    elif key in ("n", "indent"):
        indent = _int(value)
        if indent is not None and indent >= 0:
            attrs.indent = indent
    elif key in ("k", "kerning"):
        attrs.kerning = _float(value)
    elif key in ("x", "width"):
        width = _int(value)
        if width is not None and width > 0:
            attrs.width = width
    elif key in ("y", "height"):
        height = _int(value)
        if height is not None and height > 0:
            attrs.height = height
    elif key in ("p", "spacing"):
        attrs.spacing_set = True
        above, sep, below = value.partition(",")
        if sep:
            attrs.spacing_above = _float(above)
            attrs.spacing_below = _float(below)
        else:
            attrs.spacing_above = attrs.spacing_below = _float(value)
    elif key in ("e", "effect"):
        attrs.effect = value
    elif key == "cols":
        cols = _int(value)
        if cols is not None and cols >= 1:
            attrs.cols = cols
    elif key == "check":
        lowered = value.lower()
        if lowered in ("y", "yes", "true", "1"):
            attrs.check = True
        elif lowered in ("n", "no", "false", "0"):
            attrs.check = False
    elif key == "toc":
        depth = _int(value)
        attrs.toc = depth if depth is not None and depth >= 0 else -1
    elif key == "img":
        attrs.image_ref = value
    elif key == "T":
        attrs.table_ref = value
    else:
        raise ParseError(f"unknown key: {key}")


def _apply_bare_flag(attrs: AttributeSet, token: str) -> None:
    if token in BOOL_FLAGS:
        attrs.set_flag(token, True)
    elif token == "check":
        attrs.check = False
    elif token == "toc":
        attrs.toc = -1
    # Bare value keys reset to their defaults
    elif token in ("t", "text"):
        attrs.text = "$0"
    elif token in ("c", "color"):
        attrs.color = "#000000"
    elif token in ("z", "bg"):
        attrs.bg = ""
    elif token in ("f", "font"):
        attrs.font = "Arial"
    elif token in ("s", "size"):
        attrs.size = 11.0
    elif token in ("h", "heading"):
        attrs.heading = "1"
    elif token in ("p", "spacing"):
        attrs.spacing_set = True
    elif token == "cols":
        attrs.cols = 1
    else:
        raise ParseError(f"unknown flag: {token}")


# --- Locating blocks in a replacement ---


@dataclass
class BlockSpan:
    """A positioned attribute block found in a replacement string.

    ``start`` / ``end`` are code-point offsets into the cleaned text.
    Global spans apply to the whole match and have ``end == -1``.
    """

    attributes: AttributeSet
    start: int
    end: int
    is_global: bool = False
    raw: str = ""


def find_matching_brace(text: str, pos: int) -> int:
    """Index of the ``}`` closing the ``{`` at ``pos``, or -1."""
    if pos >= len(text) or text[pos] != "{":
        return -1
    depth = 1
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def looks_like_attribute_block(content: str) -> bool:
    """Heuristic telling ``{b c=red}`` apart from literal braces."""
    content = content.strip()
    if not content:
        return False
    if content == "0" or content.startswith("0 "):
        return True
    for flag in BOOL_FLAGS:
        if content == flag or content.startswith((flag + " ", flag + "=")):
            return True
        if content == "!" + flag or content.startswith("!" + flag + " "):
            return True
    if any(key in content for key in _VALUE_KEYS):
        return True
    return content == "+" or content.startswith("+=")


def has_attribute_blocks(replacement: str) -> bool:
    """True if the replacement carries at least one unescaped attribute block."""
    for i, ch in enumerate(replacement):
        if ch != "{" or (i > 0 and replacement[i - 1] == "\\"):
            continue
        close = find_matching_brace(replacement, i)
        if close > i + 1 and looks_like_attribute_block(replacement[i + 1 : close]):
            return True
    return False


def _is_global_position(text: str, open_idx: int, close_idx: int) -> bool:
    """Standalone, leading and trailing blocks apply to the whole match."""
    before = text[:open_idx].strip()
    after = text[close_idx + 1 :].strip()
    return not before or not after


def find_attribute_blocks(replacement: str) -> tuple[str, list[BlockSpan]]:
    """Strip attribute blocks from a replacement.

    Returns the cleaned text and the blocks in order. ``\\{`` / ``\\}``
    produce literal braces; a brace group that fails to parse is kept
    as literal text.
    """
    if "{" not in replacement:
        return replacement, []

    spans: list[BlockSpan] = []
    out: list[str] = []
    pos = 0
    i = 0
    n = len(replacement)
    while i < n:
        ch = replacement[i]
        if ch == "\\" and i + 1 < n:
            if replacement[i + 1] in "{}":
                out.append(replacement[i + 1])
                pos += 1
                i += 2
            else:
                out.append(ch)
                pos += 1
                i += 1
            continue

        if ch != "{":
            out.append(ch)
            pos += 1
            i += 1
            continue

        close = find_matching_brace(replacement, i)
        if close < 0:
            out.append("{")
            pos += 1
            i += 1
            continue
        raw = replacement[i : close + 1]
        try:
            attrs = parse_attribute_block(replacement[i + 1 : close])
        except ParseError as e:
            logger.debug("Treating %s as literal text: %s", raw, e)
            out.append("{")
            pos += 1
            i += 1
            continue

        if attrs.inline_texts:
            for text, flags in attrs.inline_texts:
                start = pos
                out.append(text)
                pos += len(text)
                inline = AttributeSet()
                for flag in flags:
                    setattr(inline, flag, True)
                spans.append(BlockSpan(inline, start, pos, raw=raw))
        elif attrs.text and attrs.text != "$0":
            start = pos
            out.append(attrs.text)
            pos += len(attrs.text)
            spans.append(BlockSpan(attrs, start, pos, raw=raw))
        else:
            is_global = _is_global_position(replacement, i, close)
            spans.append(
                BlockSpan(attrs, pos, -1 if is_global else pos, is_global, raw)
            )
        i = close + 1

    return "".join(out), spans


def merge_global_spans(spans: list[BlockSpan]) -> AttributeSet:
    """Merge every whole-match block into one attribute set."""
    merged = AttributeSet()
    for span in spans:
        if span.is_global:
            merged.merge(span.attributes)
    return merged


def inline_spans(cleaned: str, spans: list[BlockSpan]) -> tuple[InlineSpan, ...]:
    """The position-scoped blocks as :class:`InlineSpan` values."""
    return tuple(
        InlineSpan(cleaned[s.start : s.end], s.start, s.end, s.attributes)
        for s in spans
        if not s.is_global and s.end > s.start
    )
