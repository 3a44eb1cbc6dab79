"""Compile classified matches into batchUpdate requests.

Matches are split three ways, each needing a different request shape:

- image matches: one delete batch and one insertInlineImage batch per
  image, because the API does not reliably fetch an image URL when the
  insert shares a batch with other mutations
- regular matches: delete + insert pairs, then text styles, all in one
  batch; paragraph styles in a second batch
- footnote matches: createFootnote, read back the footnote id, then
  insert the footnote text, one match at a time

Every group is emitted last-to-first. Each edit is recorded in an
:class:`~extrased.offsets.OffsetTracker`, so style ranges, footnote
positions and break positions are always expressed in the coordinates
of the document as it will be when their batch runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from extrased.document import DocumentView, utf16_len
from extrased.offsets import OffsetTracker
from extrased.request_generators.structural import parse_chip, structural_requests
from extrased.request_generators.text import (
    attribute_paragraph_requests,
    attribute_text_style_requests,
    break_requests,
    delete_bullets,
    delete_range,
    has_list_format,
    hrule_border_request,
    insert_text,
    markdown_paragraph_requests,
    markdown_text_style_requests,
    update_paragraph_style,
)
from extrased.types import (
    AttributeSet,
    BreakKind,
    ImageSpec,
    InlineSpan,
    Match,
    MatchKind,
)

logger = logging.getLogger(__name__)

# Characters each break kind adds to the body
_BREAK_LENGTHS = {
    BreakKind.RULE: 1,
    BreakKind.PAGE: 2,
    BreakKind.COLUMN: 1,
    BreakKind.SECTION: 2,
}


# --- Plan types ---


@dataclass
class FormatRange:
    """Text inserted by one match that still needs styling.

    ``start`` / ``end`` are in the coordinates right after the match's
    own edit; ``checkpoint`` is the tracker position at that moment.
    """

    start: int
    end: int
    checkpoint: int
    text: str
    formats: list[str] = field(default_factory=list)
    attributes: AttributeSet | None = None
    spans: tuple[InlineSpan, ...] = ()
    link: str = ""

    @property
    def has_tab(self) -> bool:
        return self.text.startswith("\t")


@dataclass
class FootnoteEdit:
    """A footnote to create at ``start`` after deleting ``[start, end)``."""

    start: int
    end: int
    text: str

    def create_requests(self) -> list[dict[str, Any]]:
        requests = []
        if self.end > self.start:
            requests.append(delete_range(self.start, self.end))
        requests.append({"createFootnote": {"location": {"index": self.start}}})
        return requests

    def populate_requests(self, footnote_id: str) -> list[dict[str, Any]]:
        if not self.text:
            return []
        return [insert_text(1, self.text, segment_id=footnote_id)]


@dataclass
class EditPlan:
    """Everything one substitute directive sends, grouped by phase."""

    tracker: OffsetTracker = field(default_factory=OffsetTracker)
    image_batches: list[list[dict[str, Any]]] = field(default_factory=list)
    text_requests: list[dict[str, Any]] = field(default_factory=list)
    ranges: list[FormatRange] = field(default_factory=list)
    footnotes: list[FootnoteEdit] = field(default_factory=list)
    break_kind: BreakKind | None = None
    text_phase_end: int = 0
    match_count: int = 0

    def _styled_range(self, fr: FormatRange) -> tuple[int, int]:
        return self.tracker.map_range(
            fr.start, fr.end, since=fr.checkpoint, until=self.text_phase_end
        )

    def text_phase_requests(self) -> list[dict[str, Any]]:
        """Deletes and inserts, followed by the text styles over the result."""
        requests = list(self.text_requests)
        for fr in self.ranges:
            start, end = self._styled_range(fr)
            if fr.attributes is not None:
                requests.extend(
                    attribute_text_style_requests(
                        fr.attributes, start, end, link=fr.link
                    )
                )
                requests.extend(_span_requests(fr, start))
            else:
                requests.extend(markdown_text_style_requests(fr.formats, start, end))
        return requests

    def paragraph_requests(self) -> list[dict[str, Any]]:
        """Paragraph styles, leaving out nested bullets.

        Bullets over tab-led text are left to the nested-bullet pass,
        which re-creates each list in one request so the tabs turn into
        nesting levels.
        """
        requests: list[dict[str, Any]] = []
        for fr in self.ranges:
            start, end = self._styled_range(fr)
            if fr.attributes is not None:
                if fr.attributes.has_paragraph_format():
                    requests.extend(
                        attribute_paragraph_requests(fr.attributes, start, end + 1)
                    )
                continue
            for req in markdown_paragraph_requests(fr.formats, start, end + 1):
                if "createParagraphBullets" in req and fr.has_tab:
                    continue
                requests.append(req)
        return requests

    def break_request_list(self, view: DocumentView) -> list[dict[str, Any]]:
        """Break after the first edited range, placed in the re-fetched ``view``.

        Records the inserted break so later structural requests stay aligned.
        """
        if self.break_kind is None or not self.ranges:
            return []
        fr = self.ranges[-1]
        end = self.tracker.map(fr.end, since=fr.checkpoint)
        index = min(end + 1, view.body_end - 1)
        self.tracker.replace(index, index, _BREAK_LENGTHS[self.break_kind])
        return break_requests(self.break_kind, index)

    def structural_request_list(self, view: DocumentView) -> list[dict[str, Any]]:
        requests: list[dict[str, Any]] = []
        for fr in self.ranges:
            attrs = fr.attributes
            if attrs is None or not attrs.has_structural():
                continue
            start, end = self.tracker.map_range(fr.start, fr.end, since=fr.checkpoint)
            section = view.section_range(start, end) if attrs.cols else None
            requests.extend(structural_requests(attrs, start, end, section))
        return requests

    @property
    def has_deferred_bullets(self) -> bool:
        return any(
            fr.attributes is None and fr.has_tab and has_list_format(fr.formats)
            for fr in self.ranges
        )

    @property
    def needs_structural(self) -> bool:
        return any(
            fr.attributes is not None and fr.attributes.has_structural()
            for fr in self.ranges
        )


def _span_requests(fr: FormatRange, start: int) -> list[dict[str, Any]]:
    requests: list[dict[str, Any]] = []
    for span in fr.spans:
        if span.end > len(fr.text):
            continue
        span_start = start + utf16_len(fr.text[: span.start])
        span_end = start + utf16_len(fr.text[: span.end])
        requests.extend(
            attribute_text_style_requests(
                span.attributes, span_start, span_end, implicit_reset=False
            )
        )
    return requests


# --- Compilation ---


def image_request(image: ImageSpec, index: int) -> dict[str, Any]:
    """An insertInlineImage request, sized when the image has a size."""
    req: dict[str, Any] = {
        "insertInlineImage": {"uri": image.url, "location": {"index": index}}
    }
    size: dict[str, Any] = {}
    if image.width:
        size["width"] = {"magnitude": image.width, "unit": "PT"}
    if image.height:
        size["height"] = {"magnitude": image.height, "unit": "PT"}
    if size:
        req["insertInlineImage"]["objectSize"] = size
    return req


def compile_matches(
    matches: list[Match], attributes: AttributeSet | None = None
) -> EditPlan:
    """Build the :class:`EditPlan` for one directive's matches.

    Args:
        matches: Classified matches in document order
        attributes: The directive's whole-match attribute set, if any

    Returns:
        The plan; ``ranges`` and the request lists are in reverse
        document order
    """
    plan = EditPlan(match_count=len(matches))
    if attributes is not None:
        plan.break_kind = attributes.break_kind
    tracker = plan.tracker

    footnotes = [m for m in matches if m.kind is MatchKind.FOOTNOTE]
    images = [m for m in matches if m.kind is MatchKind.IMAGE]
    regular = [m for m in matches if m.kind in (MatchKind.TEXT, MatchKind.RICH)]

    for m in reversed(images):
        assert m.image is not None
        start, end = tracker.map_range(m.start, m.end)
        if end > start:
            plan.image_batches.append([delete_range(start, end)])
        plan.image_batches.append([image_request(m.image, start)])
        tracker.replace(start, end, 1)

    for m in reversed(regular):
        _compile_regular(plan, m)
    plan.text_phase_end = tracker.checkpoint()

    for m in reversed(footnotes):
        start, end = tracker.map_range(m.start, m.end)
        plan.footnotes.append(FootnoteEdit(start, end, m.replacement_text))
        tracker.replace(start, end, 1)

    logger.debug(
        "Compiled %d matches: %d image, %d regular, %d footnote",
        len(matches),
        len(images),
        len(regular),
        len(footnotes),
    )
    return plan


def _compile_regular(plan: EditPlan, m: Match) -> None:
    tracker = plan.tracker
    start, end = tracker.map_range(m.start, m.end)
    text = m.replacement_text
    spans = m.spans
    link = ""
    chip = parse_chip(m.attributes.url) if m.attributes is not None else None
    if chip is not None:
        if chip.kind == "person":
            text = ""
        elif chip.fallback_text:
            text = chip.fallback_text
            spans = ()
        link = chip.link

    if end > start:
        plan.text_requests.append(delete_range(start, end))

    if "hrule" in m.formats:
        plan.text_requests.append(insert_text(start, "\n"))
        plan.text_requests.append(hrule_border_request(start, start + 1))
        tracker.replace(start, end, 1)
        return

    length = utf16_len(text)
    if text:
        plan.text_requests.append(insert_text(start, text))
    checkpoint = tracker.replace(start, end, length)

    formats = list(m.formats)
    if "codeblock" in formats:
        formats.append("code")
    attrs = m.attributes
    if (text and (formats or attrs is not None)) or (
        attrs is not None and attrs.has_structural()
    ):
        plan.ranges.append(
            FormatRange(
                start=start,
                end=start + length,
                checkpoint=checkpoint,
                text=text,
                formats=formats,
                attributes=attrs,
                spans=spans,
                link=link,
            )
        )


def compile_insert(
    index: int,
    text: str,
    formats: list[str],
    attributes: AttributeSet | None = None,
    spans: tuple[InlineSpan, ...] = (),
) -> list[dict[str, Any]]:
    """Insert ``text`` as fresh paragraph content at ``index``.

    The paragraph is normalized (NORMAL_TEXT, no bullets) before the
    requested styles apply, so an insert at a heading or list item does
    not inherit its style.
    """
    if not text:
        return []
    end = index + utf16_len(text)
    requests = [insert_text(index, text)]
    if attributes is not None:
        requests.extend(attribute_text_style_requests(attributes, index, end))
        fr = FormatRange(index, end, 0, text, spans=spans)
        requests.extend(_span_requests(fr, index))
    else:
        requests.extend(markdown_text_style_requests(formats, index, end))
    requests.append(
        update_paragraph_style(
            index, end + 1, {"namedStyleType": "NORMAL_TEXT"}, "namedStyleType"
        )
    )
    requests.append(delete_bullets(index, end + 1))
    if attributes is not None:
        requests.extend(attribute_paragraph_requests(attributes, index, end + 1))
    else:
        requests.extend(markdown_paragraph_requests(formats, index, end + 1))
    return requests

