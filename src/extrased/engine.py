"""Execute parsed directives against a document.

:class:`Engine` runs a whole invocation: it groups directives by
:class:`~extrased.planner.Category`, fetches the document whenever a
step needs fresh offsets, and sends batchUpdate requests through the
retry policy.

A substitute directive runs in phases, each one round trip (or one per
item), in this order::

    image       delete + insertInlineImage per image match
    text        deletes, inserts and text styles
    paragraph   headings, alignment, lists, quotes
    footnote    createFootnote, then the footnote text, per match
    break       re-fetch, then the page/column/section/rule break
    structural  re-fetch, then columns, checkboxes, bookmarks, chips

A failing phase raises :class:`~extrased.errors.PhaseError` naming it.
Phases that already ran stay applied.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from extrased.api_types import BatchUpdateDocumentResponse, TableCell
from extrased.compiler import EditPlan, compile_insert, compile_matches, image_request
from extrased.document import (
    DocumentView,
    ParagraphText,
    TableNode,
    cell_text,
    first_cell_index,
    utf16_len,
)
from extrased.errors import (
    AddressError,
    ExpressionError,
    ParseError,
    PhaseError,
    SedError,
)
from extrased.markdown import parse_markdown
from extrased.matcher import classify, find_matches, first_match
from extrased.planner import UNMERGE_WORDS, Category, batch_key, classify_instruction
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
    BULLET_PRESETS,
    attribute_text_style_requests,
    create_bullets,
    delete_bullets,
    delete_range,
    insert_text,
    markdown_text_style_requests,
    replace_all_text,
)
from extrased.resolver import (
    resolve_cells,
    resolve_images,
    resolve_merge_range,
    resolve_position,
    resolve_table,
    resolve_tables,
)
from extrased.retry import RetryPolicy, with_retry
from extrased.transport import PermanentServiceError, Transport, TransportError
from extrased.types import (
    AttributeSet,
    CommandKind,
    EditInstruction,
    Match,
    MatchKind,
    RowColOp,
    RowColOpKind,
    Specific,
    TableCreateSpec,
)

logger = logging.getLogger(__name__)

# Placeholders for two-pass transliteration (private use area)
_PLACEHOLDER_BASE = 0xE100

# A created table's first cell starts a few indexes after the insert point
_TABLE_SEARCH_WINDOW = 10


# --- Results ---


@dataclass
class Outcome:
    """What one directive did."""

    changed: int = 0
    message: str = ""
    number: int = 0
    expression: str = ""
    category: Category | None = None


@dataclass
class RunResult:
    """Result of :meth:`Engine.run`."""

    document_id: str
    outcomes: list[Outcome] = field(default_factory=list)
    request_count: int = 0

    @property
    def changed(self) -> int:
        return sum(o.changed for o in self.outcomes)


@dataclass(frozen=True)
class BulletGroup:
    """Adjacent list paragraphs to re-bullet in one request."""

    start: int
    end: int
    preset: str


def bullet_groups(view: DocumentView) -> list[BulletGroup]:
    """Runs of bulleted or tab-led body paragraphs that need re-bulleting.

    A run continues while paragraphs share one list preset (tab-led
    paragraphs without a bullet fit any preset) and is kept only if it
    holds a tab-led paragraph.
    """
    runs: list[tuple[list[ParagraphText], str | None]] = []
    current: list[ParagraphText] = []
    preset: str | None = None
    for paragraph in view.body_paragraphs:
        if not (paragraph.has_bullet or paragraph.starts_with_tab):
            if current:
                runs.append((current, preset))
            current, preset = [], None
            continue
        own = view.bullet_preset(paragraph.list_id) if paragraph.has_bullet else None
        if own and preset and own != preset:
            runs.append((current, preset))
            current, preset = [], None
        current.append(paragraph)
        preset = preset or own
    if current:
        runs.append((current, preset))

    groups = []
    for paragraphs, run_preset in runs:
        if not any(p.starts_with_tab for p in paragraphs):
            continue
        start = paragraphs[0].start
        end = min(paragraphs[-1].end - 1, view.body_end - 1)
        if end > start:
            groups.append(BulletGroup(start, end, run_preset or BULLET_PRESETS["bullet"]))
    return groups


def _whole_text_match(text: str) -> re.Match[str]:
    """A match object spanning all of ``text`` with no groups."""
    m = re.fullmatch(r"(?s).*", text)
    assert m is not None
    return m


def _footnote_id(response: BatchUpdateDocumentResponse) -> str | None:
    for reply in reversed(response.replies or []):
        if reply.create_footnote is not None:
            return reply.create_footnote.footnote_id
    return None


def _occurrences(response: BatchUpdateDocumentResponse) -> list[int]:
    counts = []
    for reply in response.replies or []:
        changed = reply.replace_all_text.occurrences_changed if reply.replace_all_text else 0
        counts.append(changed or 0)
    return counts


def _check_cell_attributes(attrs: AttributeSet | None) -> None:
    """Reject attributes that need body structure a table cell cannot hold."""
    if attrs is None:
        return
    names = []
    if attrs.cols is not None:
        names.append("cols")
    if attrs.check is not None:
        names.append("check")
    if attrs.bookmark:
        names.append("@ (bookmark)")
    if attrs.break_kind is not None:
        names.append("+ (break)")
    if attrs.url.startswith("chip://person/"):
        names.append("person chip")
    if names:
        raise ParseError(f"{', '.join(names)} not supported in table cells")


def _text_requests(match: Match, start: int) -> list[dict[str, Any]]:
    """Insert a classified match's text at ``start`` with its character styles."""
    text = match.replacement_text
    if not text:
        return []
    end = start + utf16_len(text)
    requests = [insert_text(start, text)]
    if match.attributes is not None:
        requests.extend(attribute_text_style_requests(match.attributes, start, end))
    else:
        requests.extend(markdown_text_style_requests(match.formats, start, end))
    return requests


class Engine:
    """Runs directives against one document through a :class:`Transport`.

    Example:
        engine = Engine(GoogleDocsTransport(access_token=token))
        result = await engine.run(document_id, parse_expressions(raws))
    """

    IMAGE_SETTLE_DELAY = 0.5
    IMAGE_RETRY_DELAY = 2.0

    def __init__(
        self, transport: Transport, retry_policy: RetryPolicy | None = None
    ) -> None:
        self._transport = transport
        self._policy = retry_policy or RetryPolicy()
        self._bullets_pending = False
        self.request_count = 0

    # --- Invocation ---

    async def run(
        self, document_id: str, instructions: list[EditInstruction]
    ) -> RunResult:
        """Execute ``instructions`` in planner order.

        Order: positional anchors, the native find-and-replace batch,
        commands / image patterns / manual substitutes (as written),
        nested bullets, table creations, cell edits, image edits.

        Raises:
            ExpressionError: The first directive that failed, wrapping
                its ParseError, AddressError, PhaseError or TransportError
            PhaseError: The nested-bullet pass failed
        """
        result = RunResult(document_id=document_id)
        first_request = self.request_count
        self._bullets_pending = False
        planned = [
            (number, instruction, classify_instruction(instruction))
            for number, instruction in enumerate(instructions, start=1)
        ]

        def of(*categories: Category) -> list[tuple[int, EditInstruction, Category]]:
            return [p for p in planned if p[2] in categories]

        try:
            for number, instruction, category in of(Category.POSITIONAL):
                await self._attempt(
                    result, number, instruction, category,
                    self._run_positional(document_id, instruction),
                )  # fmt: skip

            native = of(Category.NATIVE)
            if native:
                outcomes = await self._run_native(document_id, native)
                result.outcomes.extend(outcomes)

            for number, instruction, category in of(
                Category.COMMAND, Category.IMAGE_PATTERN, Category.MANUAL
            ):
                if category is Category.COMMAND:
                    step = self._run_command(document_id, instruction)
                elif category is Category.IMAGE_PATTERN:
                    step = self._run_image_address(document_id, instruction)
                else:
                    step = self._run_substitute(document_id, instruction)
                await self._attempt(result, number, instruction, category, step)

            if self._bullets_pending:
                await self.apply_deferred_bullets(document_id)

            for number, instruction, category in of(Category.TABLE_CREATE):
                await self._attempt(
                    result, number, instruction, category,
                    self._run_table_create(document_id, instruction),
                )  # fmt: skip

            await self._run_cells(document_id, of(Category.CELL), result)

            for number, instruction, category in of(Category.IMAGE):
                await self._attempt(
                    result, number, instruction, category,
                    self._run_image(document_id, instruction),
                )  # fmt: skip
        except ExpressionError as e:
            e.completed = list(result.outcomes)
            raise
        finally:
            result.request_count = self.request_count - first_request

        logger.info(
            "Ran %d expressions: %d changes, %d requests",
            len(instructions),
            result.changed,
            result.request_count,
        )
        return result

    async def _attempt(
        self,
        result: RunResult,
        number: int,
        instruction: EditInstruction,
        category: Category,
        step: Any,
    ) -> None:
        try:
            outcome: Outcome = await step
        except (SedError, TransportError) as e:
            raise ExpressionError(number, e) from e
        outcome.number = number
        outcome.expression = instruction.raw
        outcome.category = category
        logger.debug("Expression %d (%s): %s", number, category.value, outcome)
        result.outcomes.append(outcome)

    # --- Network ---

    async def fetch(self, document_id: str) -> DocumentView:
        """Fetch the document and build a fresh :class:`DocumentView`."""
        data = await with_retry(
            lambda: self._transport.get_document(document_id), self._policy
        )
        return DocumentView.from_dict(data.raw)

    async def send(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> BatchUpdateDocumentResponse:
        """Send one batchUpdate; an empty request list is not sent."""
        if not requests:
            return BatchUpdateDocumentResponse()
        self.request_count += len(requests)
        logger.debug("Sending batch of %d requests", len(requests))
        raw = await with_retry(
            lambda: self._transport.batch_update(document_id, requests), self._policy
        )
        return BatchUpdateDocumentResponse.model_validate(raw)

    async def _send_images(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> BatchUpdateDocumentResponse:
        """Send an image batch after a short pause, retrying once on rejection.

        The service fetches image URLs itself and sometimes rejects an
        image it fetches a moment later without trouble.
        """
        await self._policy.sleep(self.IMAGE_SETTLE_DELAY)
        try:
            return await self.send(document_id, requests)
        except PermanentServiceError as e:
            logger.warning(
                "Image request rejected, retrying in %.1fs: %s",
                self.IMAGE_RETRY_DELAY,
                e,
            )
            await self._policy.sleep(self.IMAGE_RETRY_DELAY)
            return await self.send(document_id, requests)

    @asynccontextmanager
    async def _phase(self, name: str) -> AsyncIterator[None]:
        logger.debug("Phase %s", name)
        try:
            yield
        except PhaseError:
            raise
        except (SedError, TransportError) as e:
            raise PhaseError(name, e) from e

    # --- Substitute ---

    async def _run_substitute(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        view = await self.fetch(document_id)
        matches = find_matches(view, instruction)
        if not matches:
            return Outcome(message="no matches")
        plan = compile_matches(matches, instruction.attributes)
        await self.execute_plan(document_id, plan)
        if plan.has_deferred_bullets:
            self._bullets_pending = True
        return Outcome(changed=plan.match_count)

    async def execute_plan(self, document_id: str, plan: EditPlan) -> None:
        """Send a compiled plan, phase by phase."""
        if plan.image_batches:
            async with self._phase("image"):
                for batch in plan.image_batches:
                    if any("insertInlineImage" in req for req in batch):
                        await self._send_images(document_id, batch)
                    else:
                        await self.send(document_id, batch)

        async with self._phase("text"):
            await self.send(document_id, plan.text_phase_requests())

        async with self._phase("paragraph"):
            await self.send(document_id, plan.paragraph_requests())

        if plan.footnotes:
            async with self._phase("footnote"):
                for footnote in plan.footnotes:
                    response = await self.send(document_id, footnote.create_requests())
                    footnote_id = _footnote_id(response)
                    if footnote_id is None:
                        raise SedError("createFootnote returned no footnote id")
                    await self.send(document_id, footnote.populate_requests(footnote_id))

        if plan.break_kind is not None and plan.ranges:
            async with self._phase("break"):
                view = await self.fetch(document_id)
                await self.send(document_id, plan.break_request_list(view))

        if plan.needs_structural:
            async with self._phase("structural"):
                view = await self.fetch(document_id)
                await self.send(document_id, plan.structural_request_list(view))

    async def _run_native(
        self,
        document_id: str,
        batch: list[tuple[int, EditInstruction, Category]],
    ) -> list[Outcome]:
        """All native substitutes in one replaceAllText round trip."""
        requests = []
        for number, instruction, _ in batch:
            try:
                instruction.regex  # noqa: B018
            except ParseError as e:
                raise ExpressionError(number, e) from e
            assert instruction.template is not None
            pattern = instruction.pattern
            if instruction.regex_flags & re.MULTILINE:
                pattern = "(?m)" + pattern
            requests.append(
                replace_all_text(
                    pattern,
                    instruction.template.literal_text,
                    match_case=not instruction.regex_flags & re.IGNORECASE,
                    by_regex=True,
                )
            )
        try:
            async with self._phase("native"):
                response = await self.send(document_id, requests)
        except PhaseError as e:
            raise ExpressionError(batch[0][0], e) from e

        counts = _occurrences(response) + [0] * len(batch)
        return [
            Outcome(
                changed=counts[i],
                message="" if counts[i] else "no matches",
                number=number,
                expression=instruction.raw,
                category=category,
            )
            for i, (number, instruction, category) in enumerate(batch)
        ]

    # --- Positional anchors ---

    async def _run_positional(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        view = await self.fetch(document_id)
        if instruction.pattern == "^$" and not view.is_empty:
            if instruction.replacement or instruction.table_create is not None:
                return Outcome(message="document is not empty")
            end = view.body_end - 1
            if end < 2:
                return Outcome(message="document is already empty")
            async with self._phase("positional"):
                await self.send(document_id, [delete_range(1, end)])
            return Outcome(changed=1, message="cleared document")

        index = view.body_end - 1 if instruction.pattern == "$" else 1
        spec = instruction.table_create
        if spec is not None:
            async with self._phase("positional"):
                await self.send(
                    document_id,
                    [generate_insert_table_request(spec.rows, spec.cols, index)],
                )
                await self._fill_table(document_id, spec, index)
            return Outcome(changed=1)

        match = classify(instruction, _whole_text_match(""), index, index)
        if match.kind is MatchKind.IMAGE:
            assert match.image is not None
            requests = [image_request(match.image, index)]
        else:
            requests = compile_insert(
                index,
                match.replacement_text,
                match.formats,
                match.attributes,
                match.spans,
            )
        if not requests:
            return Outcome(message="nothing to insert")
        async with self._phase("positional"):
            if match.kind is MatchKind.IMAGE:
                await self._send_images(document_id, requests)
            else:
                await self.send(document_id, requests)
        return Outcome(changed=1)

    # --- Commands ---

    async def _run_command(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        if instruction.kind is CommandKind.TRANSLITERATE:
            return await self._run_transliterate(document_id, instruction)

        regex = instruction.regex
        view = await self.fetch(document_id)
        paragraphs = view.body_paragraphs
        targets = [p for p in paragraphs if regex.search(p.line)]
        if not targets:
            return Outcome(message="no matches")

        requests = []
        if instruction.kind is CommandKind.DELETE:
            hit = {p.start for p in targets}
            for p in reversed(targets):
                requests.extend(_paragraph_delete(p, paragraphs, hit, view.body_end))
            phase = "delete"
        else:
            text = instruction.replacement.replace("\\n", "\n")
            if not text.endswith("\n"):
                text += "\n"
            for p in reversed(targets):
                if instruction.kind is CommandKind.APPEND:
                    # Before the matched paragraph's newline, so the body end works too
                    requests.append(insert_text(p.end - 1, "\n" + text[:-1]))
                else:
                    requests.append(insert_text(p.start, text))
            phase = instruction.kind.name.lower()

        async with self._phase(phase):
            await self.send(document_id, requests)
        return Outcome(changed=len(targets))

    async def _run_transliterate(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        pairs = [
            (src, dst)
            for src, dst in zip(instruction.pattern, instruction.replacement)
            if src != dst
        ]
        if not pairs:
            return Outcome(message="nothing to transliterate")
        sources = {src for src, _ in pairs}
        if any(dst in sources for _, dst in pairs):
            # a->b then b->a in one pass would undo itself; go through placeholders
            marks = [chr(_PLACEHOLDER_BASE + i) for i in range(len(pairs))]
            requests = [replace_all_text(src, mark) for (src, _), mark in zip(pairs, marks)]
            requests += [replace_all_text(mark, dst) for (_, dst), mark in zip(pairs, marks)]
        else:
            requests = [replace_all_text(src, dst) for src, dst in pairs]

        async with self._phase("transliterate"):
            response = await self.send(document_id, requests)
        changed = sum(_occurrences(response)[: len(pairs)])
        return Outcome(changed=changed)

    # --- Tables ---

    async def _run_table_create(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        spec = instruction.table_create
        assert spec is not None
        view = await self.fetch(document_id)
        match = first_match(view, instruction)
        if match is None:
            return Outcome(message="no matches")

        requests = []
        if match.end > match.start:
            requests.append(delete_range(match.start, match.end))
        requests.append(generate_insert_table_request(spec.rows, spec.cols, match.start))
        async with self._phase("table"):
            await self.send(document_id, requests)
            filled = await self._fill_table(document_id, spec, match.start)
        message = "" if filled else "table created, but not found to fill"
        return Outcome(changed=1, message=message)

    async def _fill_table(
        self, document_id: str, spec: TableCreateSpec, near: int
    ) -> bool:
        """Pin the header and fill pipe-table cells of a table just created."""
        if not spec.cells and not spec.header:
            return True
        view = await self.fetch(document_id)
        node = _created_table(view, near)
        if node is None:
            logger.warning("Created table near index %d not found", near)
            return False

        requests: list[dict[str, Any]] = []
        if spec.header:
            requests.append(generate_pin_header_request(node.start))
        for r in reversed(range(min(len(spec.cells), node.rows))):
            row = spec.cells[r]
            for c in reversed(range(min(len(row), node.cols))):
                text, formats = parse_markdown(row[c])
                if not text:
                    continue
                index = first_cell_index(node.cell(r + 1, c + 1))
                requests.append(insert_text(index, text))
                requests.extend(
                    markdown_text_style_requests(
                        formats, index, index + utf16_len(text)
                    )
                )
        await self.send(document_id, requests)
        return True

    async def _run_cells(
        self,
        document_id: str,
        planned: list[tuple[int, EditInstruction, Category]],
        result: RunResult,
    ) -> None:
        """Cell directives; consecutive whole-cell edits of one table share a batch."""
        i = 0
        while i < len(planned):
            key = batch_key(planned[i][1])
            group = [planned[i]]
            while (
                key is not None
                and i + len(group) < len(planned)
                and batch_key(planned[i + len(group)][1]) == key
            ):
                group.append(planned[i + len(group)])
            i += len(group)

            if len(group) == 1:
                number, instruction, category = group[0]
                await self._attempt(
                    result, number, instruction, category,
                    self._run_cell(document_id, instruction),
                )  # fmt: skip
            else:
                result.outcomes.extend(await self._run_cell_batch(document_id, group))

    async def _run_cell(self, document_id: str, instruction: EditInstruction) -> Outcome:
        view = await self.fetch(document_id)

        if instruction.table_ref is not None:
            if instruction.replacement.strip() or instruction.attributes is not None:
                raise ParseError("a bare table reference only supports deletion")
            nodes = resolve_tables(view, instruction.table_ref)
            if not nodes:
                return Outcome(message="no tables")
            requests = [
                generate_delete_table_request(node.start, node.end)
                for node in sorted(nodes, key=lambda n: n.start, reverse=True)
            ]
            async with self._phase("table"):
                await self.send(document_id, requests)
            return Outcome(changed=len(nodes))

        cell = instruction.cell
        assert cell is not None
        node = resolve_table(view, cell.table)

        if cell.op is not None:
            request = _row_col_request(node, cell.op)
            async with self._phase("table"):
                await self.send(document_id, [request])
            return Outcome(changed=1)

        unmerge = instruction.replacement.strip().lower() in UNMERGE_WORDS
        if unmerge or cell.is_range:
            row, col, row_span, col_span = resolve_merge_range(node, cell)
            generate = (
                generate_unmerge_cells_request if unmerge else generate_merge_cells_request
            )
            async with self._phase("table"):
                await self.send(
                    document_id, [generate(node.start, row, col, row_span, col_span)]
                )
            return Outcome(changed=1)

        requests = []
        changed = 0
        for row, col in reversed(resolve_cells(node, cell)):
            cell_requests, count = self._cell_requests(
                view, instruction, node.cell(row, col)
            )
            requests.extend(cell_requests)
            changed += count
        if not changed:
            return Outcome(message="no matches")
        async with self._phase("cell"):
            await self.send(document_id, requests)
        return Outcome(changed=changed)

    async def _run_cell_batch(
        self,
        document_id: str,
        group: list[tuple[int, EditInstruction, Category]],
    ) -> list[Outcome]:
        view = await self.fetch(document_id)
        edits: list[tuple[int, list[dict[str, Any]]]] = []
        outcomes = []
        for number, instruction, category in group:
            cell = instruction.cell
            assert cell is not None
            try:
                node = resolve_table(view, cell.table)
                row, col = resolve_cells(node, cell)[0]
                target = node.cell(row, col)
                requests, count = self._cell_requests(view, instruction, target)
            except SedError as e:
                raise ExpressionError(number, e) from e
            edits.append((target.start_index or 0, requests))
            outcomes.append(
                Outcome(
                    changed=count,
                    number=number,
                    expression=instruction.raw,
                    category=category,
                )
            )

        requests = []
        for _, cell_requests in sorted(edits, key=lambda e: e[0], reverse=True):
            requests.extend(cell_requests)
        try:
            async with self._phase("cell"):
                await self.send(document_id, requests)
        except PhaseError as e:
            raise ExpressionError(group[0][0], e) from e
        return outcomes

    def _cell_requests(
        self, view: DocumentView, instruction: EditInstruction, target: TableCell
    ) -> tuple[list[dict[str, Any]], int]:
        """Requests for one cell, and how many edits they make."""
        cell = instruction.cell
        assert cell is not None
        _check_cell_attributes(instruction.attributes)
        if cell.subpattern:
            return self._cell_pattern_requests(view, instruction, target)

        text = cell_text(target)
        match = classify(
            instruction,
            _whole_text_match(text.stripped.strip()),
            text.start,
            text.content_end,
        )
        if match.kind is MatchKind.IMAGE:
            assert match.image is not None
            requests = []
            if match.end > match.start:
                requests.append(delete_range(match.start, match.end))
            requests.append(image_request(match.image, match.start))
            return requests, 1
        if match.kind is MatchKind.FOOTNOTE:
            match.kind = MatchKind.TEXT
        plan = compile_matches([match], instruction.attributes)
        return plan.text_phase_requests() + plan.paragraph_requests(), 1

    def _cell_pattern_requests(
        self, view: DocumentView, instruction: EditInstruction, target: TableCell
    ) -> tuple[list[dict[str, Any]], int]:
        start = target.start_index or 0
        end = target.end_index or 0
        regex = instruction.regex
        matches: list[Match] = []
        for paragraph in view.paragraphs:
            if not start <= paragraph.start < end:
                continue
            for m in regex.finditer(paragraph.text):
                matches.append(
                    classify(
                        instruction,
                        m,
                        paragraph.index_at(m.start()),
                        paragraph.index_at(m.end()),
                    )
                )
        if not instruction.is_global:
            matches = matches[:1]
        regular = [m for m in matches if m.kind in (MatchKind.TEXT, MatchKind.RICH)]
        if len(regular) < len(matches):
            logger.warning(
                "Image and footnote replacements are not supported inside cells; "
                "skipped %d",
                len(matches) - len(regular),
            )
        if not regular:
            return [], 0
        plan = compile_matches(regular, instruction.attributes)
        return plan.text_phase_requests() + plan.paragraph_requests(), len(regular)

    # --- Images ---

    async def _run_image(self, document_id: str, instruction: EditInstruction) -> Outcome:
        if instruction.image_ref is not None:
            return await self._run_image_address(document_id, instruction)
        return await self._run_substitute(document_id, instruction)

    async def _run_image_address(
        self, document_id: str, instruction: EditInstruction
    ) -> Outcome:
        """Replace, delete or swap for text the images an address selects."""
        assert instruction.image_ref is not None
        view = await self.fetch(document_id)
        if not view.images:
            return Outcome(message="no images in document")
        targets = resolve_images(view.images, instruction.image_ref, instruction.is_global)
        if not targets:
            return Outcome(message="no matching images")

        replacement = classify(instruction, _whole_text_match(""), 0, 0)
        image = replacement.image
        requests: list[dict[str, Any]] = []
        for node in sorted(targets, key=lambda n: n.index, reverse=True):
            if node.positioned:
                requests.append({"deletePositionedObject": {"objectId": node.object_id}})
                if image is not None or replacement.replacement_text:
                    logger.warning(
                        "Positioned image %s has no text position; deleted only",
                        node.object_id,
                    )
            elif image is not None:
                requests.append(
                    {
                        "replaceImage": {
                            "imageObjectId": node.object_id,
                            "uri": image.url,
                            "imageReplaceMethod": "CENTER_CROP",
                        }
                    }
                )
            else:
                requests.append(delete_range(node.index, node.index + 1))
                requests.extend(_text_requests(replacement, node.index))

        async with self._phase("image"):
            if image is not None:
                await self._send_images(document_id, requests)
            else:
                await self.send(document_id, requests)
        return Outcome(changed=len(targets))

    # --- Nested bullets ---

    async def apply_deferred_bullets(self, document_id: str) -> int:
        """Re-bullet lists whose tab-led items were left unbulleted.

        One group per round trip: re-creating a group's bullets removes
        its leading tabs and shifts everything after it, so the next
        group is found on a fresh fetch. Returns the groups re-bulleted.
        """
        self._bullets_pending = False
        async with self._phase("bullets"):
            view = await self.fetch(document_id)
            if not any(
                p.starts_with_tab and not p.has_bullet for p in view.body_paragraphs
            ):
                return 0
            groups = bullet_groups(view)
            applied = 0
            for _ in range(len(groups)):
                if not groups:
                    break
                group = groups[0]
                await self.send(
                    document_id,
                    [
                        delete_bullets(group.start, group.end),
                        create_bullets(group.start, group.end, group.preset),
                    ],
                )
                applied += 1
                view = await self.fetch(document_id)
                groups = bullet_groups(view)
        logger.debug("Re-bulleted %d list groups", applied)
        return applied


# --- Helpers ---


def _paragraph_delete(
    paragraph: ParagraphText,
    paragraphs: list[ParagraphText],
    hit: set[int],
    body_end: int,
) -> list[dict[str, Any]]:
    """Delete one body paragraph; the body's final newline always stays."""
    start = max(paragraph.start, 1)
    if paragraph.end < body_end:
        return [delete_range(start, paragraph.end)]
    previous = next((p for p in paragraphs if p.end == paragraph.start), None)
    if previous is not None and previous.start not in hit:
        # Take the previous paragraph's newline instead of the final one
        return [delete_range(start - 1, paragraph.end - 1)]
    if paragraph.end - 1 > start:
        return [delete_range(start, paragraph.end - 1)]
    return []


def _created_table(view: DocumentView, near: int) -> TableNode | None:
    for node in view.tables:
        if not node.rows or not node.cols:
            continue
        first = first_cell_index(node.cell(1, 1))
        if near <= first <= near + _TABLE_SEARCH_WINDOW:
            return node
    return None


def _row_col_request(node: TableNode, op: RowColOp) -> dict[str, Any]:
    """The insert/append/delete request for a ``[row:K]`` / ``[col:K]`` address."""
    size = node.rows if op.axis == "row" else node.cols
    is_row = op.axis == "row"

    if op.kind is RowColOpKind.DELETE:
        assert isinstance(op.target, Specific)
        index = resolve_position(op.target.index, size, op.axis)
        if size <= 1:
            noun = "row" if is_row else "column"
            raise AddressError(
                op.axis,
                op.target.index,
                (1, size),
                message=f"cannot delete the only {noun} in a table",
            )
        if is_row:
            return generate_delete_table_row_request(node.start, index)
        return generate_delete_table_column_request(node.start, index)

    if op.kind is RowColOpKind.APPEND:
        index, after = size - 1, True
    else:
        assert isinstance(op.target, Specific)
        if op.target.index == size + 1:
            index, after = size - 1, True
        else:
            index, after = resolve_position(op.target.index, size, op.axis), False
    if is_row:
        return generate_insert_table_row_request(node.start, index, insert_below=after)
    return generate_insert_table_column_request(node.start, index, insert_right=after)
