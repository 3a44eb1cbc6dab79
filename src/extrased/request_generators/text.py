"""Text, paragraph and break request generation for Google Docs batchUpdate.

Two inputs describe formatting:
- markdown format tags (``bold``, ``heading2``, ``link:url``) from
  :func:`extrased.markdown.parse_markdown`
- attribute sets parsed from ``{...}`` blocks

Both are turned into updateTextStyle / updateParagraphStyle /
createParagraphBullets request dicts over explicit index ranges.
"""

from __future__ import annotations

from typing import Any

from extrased.attributes import parse_hex_color, resolve_align, resolve_heading
from extrased.types import AttributeSet, BreakKind

# Every field a reset clears
RESET_FIELDS = (
    "bold,italic,underline,strikethrough,smallCaps,baselineOffset,"
    "foregroundColor,backgroundColor,fontSize,weightedFontFamily,link"
)

CODE_FONT = "Courier New"
DEFAULT_FONT = "Arial"
INDENT_STEP_PT = 36.0

BULLET_PRESETS = {
    "bullet": "BULLET_DISC_CIRCLE_SQUARE",
    "checkbox": "BULLET_CHECKBOX",
    "numbered": "NUMBERED_DECIMAL_NESTED",
}


# --- Primitives ---


def doc_range(start: int, end: int, segment_id: str | None = None) -> dict[str, Any]:
    rng: dict[str, Any] = {"startIndex": start, "endIndex": end}
    if segment_id:
        rng["segmentId"] = segment_id
    return rng


def location(index: int, segment_id: str | None = None) -> dict[str, Any]:
    loc: dict[str, Any] = {"index": index}
    if segment_id:
        loc["segmentId"] = segment_id
    return loc


def insert_text(index: int, text: str, segment_id: str | None = None) -> dict[str, Any]:
    return {"insertText": {"location": location(index, segment_id), "text": text}}


def delete_range(start: int, end: int, segment_id: str | None = None) -> dict[str, Any]:
    return {"deleteContentRange": {"range": doc_range(start, end, segment_id)}}


def replace_all_text(
    text: str, replacement: str, match_case: bool = True, by_regex: bool = False
) -> dict[str, Any]:
    """The service's own find-and-replace over the whole document."""
    return {
        "replaceAllText": {
            "containsText": {
                "text": text,
                "matchCase": match_case,
                "searchByRegex": by_regex,
            },
            "replaceText": replacement,
        }
    }


def rgb(red: float, green: float, blue: float) -> dict[str, Any]:
    return {"color": {"rgbColor": {"red": red, "green": green, "blue": blue}}}


def _grey(level: float) -> dict[str, Any]:
    return rgb(level, level, level)


def _hex_color(value: str) -> dict[str, Any] | None:
    parsed = parse_hex_color(value)
    if parsed is None:
        return None
    return rgb(*parsed)


def _pt(magnitude: float) -> dict[str, Any]:
    return {"magnitude": magnitude, "unit": "PT"}


def _link(target: str) -> dict[str, Any]:
    if target.startswith("#"):
        return {"bookmarkId": target[1:]}
    return {"url": target}


def update_text_style(
    start: int,
    end: int,
    style: dict[str, Any],
    fields: list[str] | str,
    segment_id: str | None = None,
) -> dict[str, Any]:
    if not isinstance(fields, str):
        fields = ",".join(fields)
    return {
        "updateTextStyle": {
            "range": doc_range(start, end, segment_id),
            "textStyle": style,
            "fields": fields,
        }
    }


def update_paragraph_style(
    start: int, end: int, style: dict[str, Any], fields: list[str] | str
) -> dict[str, Any]:
    if not isinstance(fields, str):
        fields = ",".join(fields)
    return {
        "updateParagraphStyle": {
            "range": doc_range(start, end),
            "paragraphStyle": style,
            "fields": fields,
        }
    }


def create_bullets(start: int, end: int, preset: str) -> dict[str, Any]:
    return {
        "createParagraphBullets": {
            "range": doc_range(start, end),
            "bulletPreset": preset,
        }
    }


def delete_bullets(start: int, end: int) -> dict[str, Any]:
    return {"deleteParagraphBullets": {"range": doc_range(start, end)}}


# --- Markdown formats ---


def markdown_text_style(formats: list[str]) -> tuple[dict[str, Any], list[str]]:
    """Text style and field mask for the text-level tags in ``formats``."""
    style: dict[str, Any] = {}
    fields: list[str] = []

    def put(name: str, value: Any) -> None:
        style[name] = value
        if name not in fields:
            fields.append(name)

    for fmt in formats:
        if fmt == "bold":
            put("bold", True)
        elif fmt == "italic":
            put("italic", True)
        elif fmt == "strikethrough":
            put("strikethrough", True)
        elif fmt == "underline":
            put("underline", True)
        elif fmt == "smallcaps":
            put("smallCaps", True)
        elif fmt in ("code", "codeblock"):
            put("weightedFontFamily", {"fontFamily": CODE_FONT})
            put("backgroundColor", _grey(0.95))
        elif fmt == "superscript":
            put("baselineOffset", "SUPERSCRIPT")
        elif fmt == "subscript":
            put("baselineOffset", "SUBSCRIPT")
        elif fmt.startswith("link:"):
            put("link", _link(fmt[5:]))
        elif fmt.startswith("font:"):
            put("weightedFontFamily", {"fontFamily": fmt[5:]})
        elif fmt.startswith("size:"):
            try:
                put("fontSize", _pt(float(fmt[5:])))
            except ValueError:
                continue
        elif fmt.startswith("color:"):
            color = _hex_color(fmt[6:])
            if color:
                put("foregroundColor", color)
        elif fmt.startswith("bg:"):
            color = _hex_color(fmt[3:])
            if color:
                put("backgroundColor", color)
    return style, fields


def markdown_text_style_requests(
    formats: list[str], start: int, end: int, segment_id: str | None = None
) -> list[dict[str, Any]]:
    if end <= start:
        return []
    style, fields = markdown_text_style(formats)
    if not fields:
        return []
    return [update_text_style(start, end, style, fields, segment_id)]


def hrule_border_request(
    start: int, end: int, padding: float = 6.0, width: float = 1.0
) -> dict[str, Any]:
    """A bottom border drawn under the paragraph at ``[start, end)``."""
    border = {
        "color": _grey(0.8),
        "width": _pt(width),
        "dashStyle": "SOLID",
        "padding": _pt(padding),
    }
    return update_paragraph_style(start, end, {"borderBottom": border}, "borderBottom")


def markdown_paragraph_requests(
    formats: list[str], start: int, end: int
) -> list[dict[str, Any]]:
    """Paragraph-level requests for ``formats`` over ``[start, end)``."""
    requests: list[dict[str, Any]] = []
    for fmt in formats:
        if fmt.startswith("heading") and fmt[7:].isdigit():
            requests.append(
                update_paragraph_style(
                    start,
                    end,
                    {"namedStyleType": f"HEADING_{fmt[7:]}"},
                    "namedStyleType",
                )
            )
        elif fmt in BULLET_PRESETS:
            requests.append(create_bullets(start, end, BULLET_PRESETS[fmt]))
        elif fmt == "blockquote":
            border = {
                "color": _grey(0.8),
                "width": _pt(3),
                "dashStyle": "SOLID",
                "padding": _pt(12),
            }
            requests.append(
                update_paragraph_style(
                    start,
                    end,
                    {"indentStart": _pt(INDENT_STEP_PT), "borderLeft": border},
                    "indentStart,borderLeft",
                )
            )
    return requests


def has_paragraph_format(formats: list[str]) -> bool:
    return any(
        (f.startswith("heading") and f[7:].isdigit())
        or f in BULLET_PRESETS
        or f == "blockquote"
        for f in formats
    )


def has_list_format(formats: list[str]) -> bool:
    return any(f in BULLET_PRESETS for f in formats)


# --- Attribute sets ---


def attribute_text_style(attrs: AttributeSet) -> tuple[dict[str, Any], list[str]]:
    """Text style and field mask for an attribute set's character flags."""
    style: dict[str, Any] = {}
    fields: list[str] = []

    def put(name: str, value: Any) -> None:
        style[name] = value
        if name not in fields:
            fields.append(name)

    for attr, api_name in (
        ("bold", "bold"),
        ("italic", "italic"),
        ("underline", "underline"),
        ("strike", "strikethrough"),
        ("small_caps", "smallCaps"),
    ):
        value = getattr(attrs, attr)
        if value is not None:
            put(api_name, value)

    if attrs.superscript:
        put("baselineOffset", "SUPERSCRIPT")
    elif attrs.subscript:
        put("baselineOffset", "SUBSCRIPT")
    elif attrs.superscript is False or attrs.subscript is False:
        put("baselineOffset", "NONE")

    if attrs.code:
        put("weightedFontFamily", {"fontFamily": CODE_FONT})
        put("backgroundColor", _grey(0.95))
    elif attrs.code is False:
        put("weightedFontFamily", {"fontFamily": DEFAULT_FONT})
        put("backgroundColor", {})

    if attrs.font:
        put("weightedFontFamily", {"fontFamily": attrs.font})
    if attrs.size is not None:
        put("fontSize", _pt(attrs.size))
    if attrs.color:
        color = _hex_color(attrs.color)
        if color:
            put("foregroundColor", color)
    if attrs.bg is not None:
        if attrs.bg == "":
            put("backgroundColor", {})
        else:
            color = _hex_color(attrs.bg)
            if color:
                put("backgroundColor", color)
    if attrs.url and not attrs.url.startswith("chip://"):
        put("link", _link(attrs.url))
    return style, fields


def attribute_text_style_requests(
    attrs: AttributeSet,
    start: int,
    end: int,
    implicit_reset: bool = True,
    link: str = "",
) -> list[dict[str, Any]]:
    """Reset (unless ``!0``) then apply ``attrs`` over ``[start, end)``.

    Args:
        attrs: Attribute set to apply
        start: Range start index
        end: Range end index
        implicit_reset: Clear inherited formatting first unless the set
            carries ``!0``
        link: Resolved link target overriding ``attrs.url`` (chip links)
    """
    if end <= start:
        return []
    requests: list[dict[str, Any]] = []
    style, fields = attribute_text_style(attrs)
    if link:
        style["link"] = _link(link)
        if "link" not in fields:
            fields.append("link")
    if attrs.reset or (implicit_reset and not attrs.no_reset):
        requests.append(update_text_style(start, end, {}, RESET_FIELDS))
    if fields:
        requests.append(update_text_style(start, end, style, fields))
    return requests


def attribute_paragraph_style(
    attrs: AttributeSet,
) -> tuple[dict[str, Any], list[str]]:
    style: dict[str, Any] = {}
    fields: list[str] = []
    if attrs.heading:
        style["namedStyleType"] = resolve_heading(attrs.heading)
        fields.append("namedStyleType")
    if attrs.align:
        style["alignment"] = resolve_align(attrs.align)
        fields.append("alignment")
    if attrs.indent is not None:
        style["indentStart"] = _pt(attrs.indent * INDENT_STEP_PT)
        fields.append("indentStart")
    if attrs.leading is not None:
        style["lineSpacing"] = attrs.leading * 100
        fields.append("lineSpacing")
    if attrs.spacing_set:
        style["spaceAbove"] = _pt(attrs.spacing_above or 0)
        style["spaceBelow"] = _pt(attrs.spacing_below or 0)
        fields.extend(["spaceAbove", "spaceBelow"])
    return style, fields


def attribute_paragraph_requests(
    attrs: AttributeSet, start: int, end: int
) -> list[dict[str, Any]]:
    style, fields = attribute_paragraph_style(attrs)
    if not fields:
        return []
    return [update_paragraph_style(start, end, style, fields)]


# --- Breaks ---


def break_requests(kind: BreakKind, index: int) -> list[dict[str, Any]]:
    """Requests inserting a break of ``kind`` at ``index``."""
    if kind is BreakKind.PAGE:
        return [{"insertPageBreak": {"location": location(index)}}]
    if kind is BreakKind.COLUMN:
        return [insert_text(index, "\v")]
    if kind is BreakKind.SECTION:
        return [
            {
                "insertSectionBreak": {
                    "location": location(index),
                    "sectionType": "NEXT_PAGE",
                }
            }
        ]
    return [insert_text(index, "\n"), hrule_border_request(index, index + 1)]
