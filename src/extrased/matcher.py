"""Find pattern matches in a document and classify them.

Matching is per paragraph, sed style: without ``g`` each paragraph
contributes at most its first match. With an nth selector every match
in the document is collected first and only the Nth is kept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from extrased.addressing import parse_image_literal
from extrased.document import DocumentView, ParagraphText
from extrased.markdown import parse_markdown, unescape
from extrased.template import parse_template
from extrased.types import (
    AttributeSet,
    EditInstruction,
    ImageSpec,
    InlineSpan,
    Match,
    MatchKind,
)

logger = logging.getLogger(__name__)


def find_matches(view: DocumentView, instruction: EditInstruction) -> list[Match]:
    """Every match of ``instruction`` in ``view``, in document order.

    Raises:
        ParseError: If the instruction's pattern does not compile
    """
    regex = instruction.regex
    limit = 0 if instruction.is_global or instruction.nth else 1
    matches: list[Match] = []
    for paragraph in view.paragraphs:
        matches.extend(_paragraph_matches(paragraph, regex, instruction, limit))

    if instruction.nth:
        if len(matches) < instruction.nth:
            logger.debug(
                "Only %d matches for %r, wanted #%d",
                len(matches),
                instruction.pattern,
                instruction.nth,
            )
            return []
        return [matches[instruction.nth - 1]]
    return matches


def _paragraph_matches(
    paragraph: ParagraphText,
    regex: re.Pattern[str],
    instruction: EditInstruction,
    limit: int,
) -> list[Match]:
    found: list[Match] = []
    for m in regex.finditer(paragraph.text):
        found.append(
            classify(
                instruction,
                m,
                paragraph.index_at(m.start()),
                paragraph.index_at(m.end()),
            )
        )
        if limit and len(found) >= limit:
            break
    return found


def first_match(view: DocumentView, instruction: EditInstruction) -> Match | None:
    """First match in document order, ignoring ``g`` and nth."""
    regex = instruction.regex
    for paragraph in view.paragraphs:
        m = regex.search(paragraph.text)
        if m:
            return Match(
                start=paragraph.index_at(m.start()),
                end=paragraph.index_at(m.end()),
                original_text=m.group(0),
            )
    return None


# --- Classification ---


def classify(
    instruction: EditInstruction, m: re.Match[str], start: int, end: int
) -> Match:
    """Build the :class:`Match` for one regex hit, computing its replacement."""
    match = Match(start=start, end=end, original_text=m.group(0))
    template = instruction.template or parse_template(instruction.replacement)
    expanded = template.expand(m)
    attributes = instruction.attributes

    image = parse_image_literal(unescape(expanded).strip())
    if image is not None:
        match.kind = MatchKind.IMAGE
        match.image = _sized(image, attributes)
        return match

    if attributes is not None and attributes.image_ref:
        match.kind = MatchKind.IMAGE
        match.image = _sized(ImageSpec(url=attributes.image_ref), attributes)
        return match

    if attributes is not None:
        match.kind = MatchKind.RICH
        match.attributes = attributes
        text = unescape(expanded)
        if attributes.text == "$0" or (
            not text and not instruction.spans and attributes.has_any_format()
        ):
            # Formatting only: the match keeps its own text
            text = m.group(0)
        match.replacement_text = text
        match.spans = rebase_spans(instruction, m)
        return match

    text, formats = parse_markdown(expanded)
    match.replacement_text = text
    match.formats = formats
    if "footnote" in formats:
        match.kind = MatchKind.FOOTNOTE
    return match


def _sized(image: ImageSpec, attributes: AttributeSet | None) -> ImageSpec:
    if attributes is None:
        return image
    return replace(
        image,
        width=attributes.width or image.width,
        height=attributes.height or image.height,
    )


def rebase_spans(
    instruction: EditInstruction, m: re.Match[str]
) -> tuple[InlineSpan, ...]:
    """Move inline spans from template offsets to expanded-text offsets.

    Span positions are recorded against the replacement before
    back-references are expanded; expanding the prefix in front of each
    span gives its position in the final text.
    """
    if not instruction.spans:
        return ()
    source = instruction.replacement
    whole, groups = m.group(0), m.groups()

    def position(offset: int) -> int:
        prefix = parse_template(source[:offset]).render(whole, groups)
        return len(unescape(prefix))

    rebased = []
    for span in instruction.spans:
        start = position(span.start)
        end = position(span.end)
        rebased.append(InlineSpan(span.text, start, end, span.attributes))
    return tuple(rebased)
