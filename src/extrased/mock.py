"""In-memory Google Docs transport for tests.

:class:`MockDocsTransport` keeps a document as a raw dict and applies
batchUpdate requests to it, re-indexing after every request the way
the real service does. It models what the edit engine relies on:

- text: insertText, deleteContentRange, replaceAllText
- elements: insertInlineImage, replaceImage, deletePositionedObject,
  createFootnote, insertPerson, insertPageBreak, insertSectionBreak
- tables: insertTable, insertTableRow/Column, deleteTableRow/Column
- styles: updateTextStyle, updateParagraphStyle,
  createParagraphBullets (leading tabs become nesting levels),
  deleteParagraphBullets, createNamedRange

updateSectionStyle, mergeTableCells, unmergeTableCells and
pinTableHeaderRows are validated and recorded but change nothing.

Batches are atomic: an invalid request raises
:class:`~extrased.transport.PermanentServiceError` (HTTP 400) and the
document is left as it was. Indexes are UTF-16 code units.
"""

from __future__ import annotations

import copy
import re
from typing import Any

from extrased.transport import (
    DocumentData,
    NotFoundError,
    PermanentServiceError,
    Transport,
)


class MockRequestError(PermanentServiceError):
    """A request the real API would reject with HTTP 400."""

    def __init__(self, message: str) -> None:
        super().__init__(f"API error (400): {message}", 400)
        self.detail = message


# --- UTF-16 helpers ---


def _u16len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _u16slice(text: str, start: int, end: int | None = None) -> str:
    data = text.encode("utf-16-le")
    stop = None if end is None else 2 * end
    return data[2 * start : stop].decode("utf-16-le")


# --- Element constructors ---


def text_run(content: str, style: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"textRun": {"content": content, "textStyle": dict(style or {})}}


def paragraph(
    *runs: str, style: dict[str, Any] | None = None, bullet: dict[str, Any] | None = None
) -> dict[str, Any]:
    """A paragraph structural element; the last run should end with "\\n"."""
    para: dict[str, Any] = {
        "elements": [text_run(r) for r in runs],
        "paragraphStyle": dict(style or {"namedStyleType": "NORMAL_TEXT"}),
    }
    if bullet is not None:
        para["bullet"] = bullet
    return {"paragraph": para}


def table(rows: int, cols: int, cells: list[list[str]] | None = None) -> dict[str, Any]:
    """A table structural element; ``cells`` gives each cell's text."""
    table_rows = []
    for r in range(rows):
        table_cells = []
        for c in range(cols):
            text = cells[r][c] if cells else ""
            table_cells.append({"content": [paragraph(text + "\n")]})
        table_rows.append({"tableCells": table_cells})
    return {"table": {"rows": rows, "columns": cols, "tableRows": table_rows}}


def make_document(
    *content: dict[str, Any], document_id: str = "doc1", **extra: Any
) -> dict[str, Any]:
    """A document dict whose body holds a section break plus ``content``."""
    body = [{"sectionBreak": {"sectionStyle": {"sectionType": "CONTINUOUS"}}}]
    body.extend(copy.deepcopy(list(content)))
    doc: dict[str, Any] = {
        "documentId": document_id,
        "title": "Mock document",
        "body": {"content": body},
    }
    doc.update(extra)
    reindex(doc)
    return doc


# --- Re-indexing ---


def _element_length(pe: dict[str, Any]) -> int:
    if "textRun" in pe:
        return _u16len(pe["textRun"].get("content", ""))
    return 1


def _reindex_content(content: list[dict[str, Any]], index: int) -> int:
    for elem in content:
        if "sectionBreak" in elem:
            if index > 0:
                elem["startIndex"] = index
            index += 1
        elif "paragraph" in elem:
            elem["startIndex"] = index
            for pe in elem["paragraph"].get("elements", []):
                pe["startIndex"] = index
                index += _element_length(pe)
                pe["endIndex"] = index
        elif "table" in elem:
            elem["startIndex"] = index
            index += 1
            tbl = elem["table"]
            for row in tbl.get("tableRows", []):
                row["startIndex"] = index
                index += 1
                for cell in row.get("tableCells", []):
                    cell["startIndex"] = index
                    index += 1
                    index = _reindex_content(cell.setdefault("content", []), index)
                    cell["endIndex"] = index
                row["endIndex"] = index
            index += 1
            tbl["rows"] = len(tbl.get("tableRows", []))
            rows = tbl.get("tableRows") or [{}]
            tbl["columns"] = len(rows[0].get("tableCells", []))
        elif "tableOfContents" in elem:
            elem["startIndex"] = index
            index = _reindex_content(elem["tableOfContents"].get("content", []), index + 1)
            index += 1
        elem["endIndex"] = index
    return index


def _consolidate(content: list[dict[str, Any]]) -> None:
    """Merge adjacent text runs with identical styles; drop empty runs."""
    for elem in content:
        if "paragraph" in elem:
            merged: list[dict[str, Any]] = []
            for pe in elem["paragraph"].get("elements", []):
                if "textRun" in pe:
                    if not pe["textRun"].get("content"):
                        continue
                    prev = merged[-1] if merged else None
                    if (
                        prev is not None
                        and "textRun" in prev
                        and prev["textRun"].get("textStyle", {})
                        == pe["textRun"].get("textStyle", {})
                    ):
                        prev["textRun"]["content"] += pe["textRun"]["content"]
                        continue
                merged.append(pe)
            elem["paragraph"]["elements"] = merged
        elif "table" in elem:
            for row in elem["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    _consolidate(cell.get("content", []))


def reindex(document: dict[str, Any]) -> None:
    """Recompute every start/end index in the body and footnotes."""
    body = document.setdefault("body", {}).setdefault("content", [])
    _consolidate(body)
    _reindex_content(body, 0 if body and "sectionBreak" in body[0] else 1)
    for footnote in document.get("footnotes", {}).values():
        _consolidate(footnote.setdefault("content", []))
        _reindex_content(footnote["content"], 1)


# --- Navigation ---


def _paragraph_text(para: dict[str, Any]) -> str:
    return "".join(
        pe["textRun"].get("content", "")
        for pe in para.get("elements", [])
        if "textRun" in pe
    )


def _find_paragraph(
    content: list[dict[str, Any]], index: int
) -> tuple[list[dict[str, Any]], int] | None:
    """The content list and position of the paragraph holding ``index``."""
    for pos, elem in enumerate(content):
        start, end = elem.get("startIndex", 0), elem.get("endIndex", 0)
        if not start <= index < end:
            continue
        if "paragraph" in elem:
            return content, pos
        if "table" in elem:
            for row in elem["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    found = _find_paragraph(cell.get("content", []), index)
                    if found is not None:
                        return found
        return None
    return None


def _iter_paragraphs(content: list[dict[str, Any]]) -> Any:
    for elem in content:
        if "paragraph" in elem:
            yield elem
        elif "table" in elem:
            for row in elem["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    yield from _iter_paragraphs(cell.get("content", []))


def _iter_tables(content: list[dict[str, Any]]) -> Any:
    for elem in content:
        if "table" in elem:
            yield elem
            for row in elem["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    yield from _iter_tables(cell.get("content", []))


def _split_paragraph(container: list[dict[str, Any]], pos: int) -> None:
    """Split the paragraph at ``container[pos]`` on embedded newlines."""
    elem = container[pos]
    para = elem["paragraph"]
    groups: list[list[dict[str, Any]]] = []
    current: list[dict[str, Any]] = []
    for pe in para.get("elements", []):
        if "textRun" not in pe:
            current.append(pe)
            continue
        text = pe["textRun"].get("content", "")
        style = pe["textRun"].get("textStyle", {})
        while "\n" in text:
            head, _, text = text.partition("\n")
            current.append(text_run(head + "\n", style))
            groups.append(current)
            current = []
        if text:
            current.append(text_run(text, style))
    if current:
        groups.append(current)
    if len(groups) <= 1:
        return
    new_elems = []
    for group in groups:
        clone = copy.deepcopy({k: v for k, v in para.items() if k != "elements"})
        clone["elements"] = group
        new_elems.append({"paragraph": clone})
    container[pos : pos + 1] = new_elems


def _merge_open_paragraphs(content: list[dict[str, Any]]) -> None:
    """Join paragraphs that lost their trailing newline with the next one."""
    i = 0
    while i < len(content):
        elem = content[i]
        if "paragraph" in elem and not _paragraph_text(elem["paragraph"]).endswith(
            "\n"
        ):
            if not elem["paragraph"].get("elements"):
                del content[i]
                continue
            if i + 1 < len(content) and "paragraph" in content[i + 1]:
                nxt = content[i + 1]["paragraph"]
                elem["paragraph"]["elements"].extend(nxt.get("elements", []))
                del content[i + 1]
                continue
        i += 1


class MockDocsTransport(Transport):
    """In-memory transport applying batchUpdate requests to a dict document.

    Attributes:
        batches: Every batch received, including failed ones
        fetch_count: Number of get_document calls
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
        reindex(self._document)
        self.batches: list[list[dict[str, Any]]] = []
        self.fetch_count = 0
        self._batch_failures: list[Exception] = []
        self._fetch_failures: list[Exception] = []
        self._counter = 0

    # --- Test controls ---

    def fail_next_batch(self, *errors: Exception) -> None:
        """Raise ``errors`` from the next batch_update calls, one per call."""
        self._batch_failures.extend(errors)

    def fail_next_fetch(self, *errors: Exception) -> None:
        self._fetch_failures.extend(errors)

    @property
    def document(self) -> dict[str, Any]:
        return copy.deepcopy(self._document)

    @property
    def requests(self) -> list[dict[str, Any]]:
        """All requests received, flattened across batches."""
        return [req for batch in self.batches for req in batch]

    def body_text(self) -> str:
        """Concatenated text of the top-level body paragraphs."""
        return "".join(
            _paragraph_text(elem["paragraph"])
            for elem in self._document["body"]["content"]
            if "paragraph" in elem
        )

    # --- Transport ---

    async def get_document(self, document_id: str) -> DocumentData:
        self.fetch_count += 1
        if self._fetch_failures:
            raise self._fetch_failures.pop(0)
        if document_id != self._document.get("documentId", document_id):
            raise NotFoundError(
                "Document not found. Check the ID and sharing permissions."
            )
        raw = copy.deepcopy(self._document)
        return DocumentData(
            document_id=raw.get("documentId", document_id),
            title=raw.get("title", ""),
            raw=raw,
        )

    async def batch_update(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        self.batches.append(copy.deepcopy(requests))
        if self._batch_failures:
            raise self._batch_failures.pop(0)

        backup = copy.deepcopy(self._document)
        replies: list[dict[str, Any]] = []
        try:
            for i, request in enumerate(requests):
                kind, body = next(iter(request.items()))
                handler = getattr(self, f"_op_{kind}", None)
                if handler is None:
                    raise MockRequestError(f"requests[{i}]: unsupported request {kind}")
                try:
                    replies.append(handler(body) or {})
                except MockRequestError as e:
                    raise MockRequestError(f"requests[{i}].{kind}: {e.detail}") from e
                reindex(self._document)
        except MockRequestError:
            self._document = backup
            raise
        return {"documentId": document_id, "replies": replies}

    async def close(self) -> None:
        """Nothing to close."""

    # --- Helpers ---

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}.{self._counter}"

    def _segment(self, segment_id: str | None) -> list[dict[str, Any]]:
        if not segment_id:
            return self._document["body"]["content"]
        footnotes = self._document.get("footnotes", {})
        if segment_id not in footnotes:
            raise MockRequestError(f"segment {segment_id} not found")
        return footnotes[segment_id]["content"]

    def _segment_end(self, content: list[dict[str, Any]]) -> int:
        return content[-1].get("endIndex", 1) if content else 1

    def _check_range(self, rng: dict[str, Any]) -> tuple[int, int, list[dict[str, Any]]]:
        content = self._segment(rng.get("segmentId"))
        start, end = rng.get("startIndex", 0), rng.get("endIndex", 0)
        if start >= end:
            raise MockRequestError(f"invalid range [{start}, {end})")
        if start < 1 or end > self._segment_end(content):
            raise MockRequestError(
                f"range [{start}, {end}) outside segment "
                f"[1, {self._segment_end(content)})"
            )
        return start, end, content

    def _locate(
        self, location: dict[str, Any]
    ) -> tuple[list[dict[str, Any]], int, int]:
        content = self._segment(location.get("segmentId"))
        index = location.get("index", 0)
        found = _find_paragraph(content, index)
        if found is None:
            raise MockRequestError(f"index {index} is not inside a paragraph")
        container, pos = found
        return container, pos, index

    def _insert_elements(
        self, location: dict[str, Any], new: list[dict[str, Any]]
    ) -> None:
        """Insert paragraph elements at a location, splitting a run if needed."""
        container, pos, index = self._locate(location)
        elements = container[pos]["paragraph"].setdefault("elements", [])
        for i, pe in enumerate(elements):
            if pe["startIndex"] <= index < pe["endIndex"]:
                if "textRun" in pe and index > pe["startIndex"]:
                    content = pe["textRun"]["content"]
                    offset = index - pe["startIndex"]
                    style = pe["textRun"].get("textStyle", {})
                    head = text_run(_u16slice(content, 0, offset), style)
                    tail = text_run(_u16slice(content, offset), style)
                    elements[i : i + 1] = [head, *new, tail]
                else:
                    elements[i:i] = new
                break
        else:
            elements.extend(new)
        _split_paragraph(container, pos)

    def _insert_block(self, location: dict[str, Any], block: dict[str, Any]) -> None:
        """Insert a newline at the location, then ``block`` after the first half."""
        container, pos, index = self._locate(location)
        self._insert_elements(location, [text_run("\n")])
        container.insert(pos + 1, block)

    def _find_table(self, location: dict[str, Any]) -> dict[str, Any]:
        index = location.get("index")
        for elem in _iter_tables(self._document["body"]["content"]):
            if elem.get("startIndex") == index:
                return elem["table"]
        raise MockRequestError(f"no table starts at index {index}")

    def _cell_location(self, loc: dict[str, Any]) -> tuple[dict[str, Any], int, int]:
        tbl = self._find_table(loc.get("tableStartLocation", {}))
        row, col = loc.get("rowIndex", 0), loc.get("columnIndex", 0)
        rows = tbl.get("tableRows", [])
        if not 0 <= row < len(rows):
            raise MockRequestError(f"row {row} out of range")
        if not 0 <= col < len(rows[row].get("tableCells", [])):
            raise MockRequestError(f"column {col} out of range")
        return tbl, row, col

    def _paragraphs_in(self, start: int, end: int) -> list[dict[str, Any]]:
        return [
            elem["paragraph"]
            for elem in _iter_paragraphs(self._document["body"]["content"])
            if elem["startIndex"] < end and elem["endIndex"] > start
        ]

    # --- Text ---

    def _op_insertText(self, body: dict[str, Any]) -> None:
        text = body.get("text", "")
        if not text:
            raise MockRequestError("text must not be empty")
        self._insert_elements(body["location"], [text_run(text)])

    def _op_deleteContentRange(self, body: dict[str, Any]) -> None:
        start, end, content = self._check_range(body["range"])
        self._delete(content, start, end)

    def _delete(self, content: list[dict[str, Any]], start: int, end: int) -> None:
        kept: list[dict[str, Any]] = []
        for elem in content:
            s, e = elem.get("startIndex", 0), elem.get("endIndex", 0)
            if e <= start or s >= end:
                kept.append(elem)
                continue
            if "table" in elem:
                if start <= s and e <= end:
                    continue
                for row in elem["table"].get("tableRows", []):
                    for cell in row.get("tableCells", []):
                        self._delete(cell.get("content", []), start, end)
                kept.append(elem)
            elif "paragraph" in elem:
                elements = []
                for pe in elem["paragraph"].get("elements", []):
                    ps, pe_end = pe["startIndex"], pe["endIndex"]
                    if pe_end <= start or ps >= end:
                        elements.append(pe)
                    elif "textRun" in pe:
                        text = pe["textRun"]["content"]
                        a, b = max(start, ps) - ps, min(end, pe_end) - ps
                        pe["textRun"]["content"] = _u16slice(text, 0, a) + _u16slice(
                            text, b
                        )
                        elements.append(pe)
                elem["paragraph"]["elements"] = elements
                kept.append(elem)
            elif not (start <= s and e <= end):
                kept.append(elem)
        content[:] = kept
        _merge_open_paragraphs(content)

    def _op_replaceAllText(self, body: dict[str, Any]) -> dict[str, Any]:
        criteria = body.get("containsText", {})
        pattern = criteria.get("text", "")
        if not pattern:
            raise MockRequestError("containsText.text must not be empty")
        if not criteria.get("searchByRegex"):
            pattern = re.escape(pattern)
        flags = 0 if criteria.get("matchCase") else re.IGNORECASE
        try:
            regex = re.compile(pattern, flags)
        except re.error as e:
            raise MockRequestError(f"invalid regex: {e}") from e
        replacement = body.get("replaceText", "")
        changed = 0
        for elem in list(_iter_paragraphs(self._document["body"]["content"])):
            for pe in elem["paragraph"].get("elements", []):
                if "textRun" not in pe:
                    continue
                text = pe["textRun"]["content"]
                newline = text.endswith("\n")
                stem = text[:-1] if newline else text
                stem, count = regex.subn(lambda _m: replacement, stem)
                if count:
                    pe["textRun"]["content"] = stem + ("\n" if newline else "")
                    changed += count
        return {"replaceAllText": {"occurrencesChanged": changed}}

    # --- Elements ---

    def _op_insertInlineImage(self, body: dict[str, Any]) -> dict[str, Any]:
        uri = body.get("uri", "")
        if not uri.startswith(("http://", "https://")):
            raise MockRequestError(f"invalid image uri {uri!r}")
        object_id = self._next_id("kix.image")
        self._insert_elements(
            body["location"], [{"inlineObjectElement": {"inlineObjectId": object_id}}]
        )
        embedded: dict[str, Any] = {"imageProperties": {"contentUri": uri}}
        if "objectSize" in body:
            embedded["size"] = body["objectSize"]
        self._document.setdefault("inlineObjects", {})[object_id] = {
            "objectId": object_id,
            "inlineObjectProperties": {"embeddedObject": embedded},
        }
        return {"insertInlineImage": {"objectId": object_id}}

    def _op_replaceImage(self, body: dict[str, Any]) -> None:
        object_id = body.get("imageObjectId", "")
        obj = self._document.get("inlineObjects", {}).get(object_id)
        if obj is None:
            raise MockRequestError(f"inline object {object_id} not found")
        embedded = obj.setdefault("inlineObjectProperties", {}).setdefault(
            "embeddedObject", {}
        )
        embedded.setdefault("imageProperties", {})["contentUri"] = body.get("uri", "")

    def _op_deletePositionedObject(self, body: dict[str, Any]) -> None:
        object_id = body.get("objectId", "")
        objects = self._document.get("positionedObjects", {})
        if object_id not in objects:
            raise MockRequestError(f"positioned object {object_id} not found")
        del objects[object_id]
        for elem in _iter_paragraphs(self._document["body"]["content"]):
            anchored = elem["paragraph"].get("positionedObjectIds")
            if anchored and object_id in anchored:
                anchored.remove(object_id)

    def _op_createFootnote(self, body: dict[str, Any]) -> dict[str, Any]:
        footnote_id = self._next_id("kix.footnote")
        self._insert_elements(
            body["location"], [{"footnoteReference": {"footnoteId": footnote_id}}]
        )
        self._document.setdefault("footnotes", {})[footnote_id] = {
            "footnoteId": footnote_id,
            "content": [paragraph("\n")],
        }
        return {"createFootnote": {"footnoteId": footnote_id}}

    def _op_insertPerson(self, body: dict[str, Any]) -> None:
        props = body.get("personProperties", {})
        if not props.get("email"):
            raise MockRequestError("personProperties.email is required")
        self._insert_elements(
            body["location"], [{"person": {"personProperties": dict(props)}}]
        )

    def _op_insertPageBreak(self, body: dict[str, Any]) -> None:
        location = body["location"]
        self._insert_elements(location, [{"pageBreak": {}}, text_run("\n")])

    def _op_insertSectionBreak(self, body: dict[str, Any]) -> None:
        block = {
            "sectionBreak": {
                "sectionStyle": {"sectionType": body.get("sectionType", "NEXT_PAGE")}
            }
        }
        self._insert_block(body["location"], block)

    # --- Tables ---

    def _op_insertTable(self, body: dict[str, Any]) -> None:
        rows, cols = body.get("rows", 0), body.get("columns", 0)
        if rows < 1 or cols < 1:
            raise MockRequestError("a table needs at least one row and column")
        self._insert_block(body["location"], table(rows, cols))

    def _empty_cell(self) -> dict[str, Any]:
        return {"content": [paragraph("\n")]}

    def _op_insertTableRow(self, body: dict[str, Any]) -> None:
        tbl, row, _ = self._cell_location(body["tableCellLocation"])
        width = len(tbl["tableRows"][row]["tableCells"])
        new_row = {"tableCells": [self._empty_cell() for _ in range(width)]}
        tbl["tableRows"].insert(row + 1 if body.get("insertBelow") else row, new_row)

    def _op_insertTableColumn(self, body: dict[str, Any]) -> None:
        tbl, _, col = self._cell_location(body["tableCellLocation"])
        at = col + 1 if body.get("insertRight") else col
        for row in tbl["tableRows"]:
            row["tableCells"].insert(at, self._empty_cell())

    def _op_deleteTableRow(self, body: dict[str, Any]) -> None:
        tbl, row, _ = self._cell_location(body["tableCellLocation"])
        if len(tbl["tableRows"]) == 1:
            raise MockRequestError("cannot delete the only row of a table")
        del tbl["tableRows"][row]

    def _op_deleteTableColumn(self, body: dict[str, Any]) -> None:
        tbl, _, col = self._cell_location(body["tableCellLocation"])
        if len(tbl["tableRows"][0]["tableCells"]) == 1:
            raise MockRequestError("cannot delete the only column of a table")
        for row in tbl["tableRows"]:
            del row["tableCells"][col]

    def _op_mergeTableCells(self, body: dict[str, Any]) -> None:
        self._cell_location(body["tableRange"]["tableCellLocation"])

    def _op_unmergeTableCells(self, body: dict[str, Any]) -> None:
        self._cell_location(body["tableRange"]["tableCellLocation"])

    def _op_pinTableHeaderRows(self, body: dict[str, Any]) -> None:
        self._find_table(body.get("tableStartLocation", {}))

    # --- Styles ---

    def _op_updateTextStyle(self, body: dict[str, Any]) -> None:
        start, end, content = self._check_range(body["range"])
        style = body.get("textStyle", {})
        fields = [f for f in body.get("fields", "").split(",") if f]
        for elem in _iter_paragraphs(content):
            para = elem["paragraph"]
            if elem["startIndex"] >= end or elem["endIndex"] <= start:
                continue
            elements = []
            for pe in para.get("elements", []):
                ps, pe_end = pe["startIndex"], pe["endIndex"]
                if "textRun" not in pe or pe_end <= start or ps >= end:
                    elements.append(pe)
                    continue
                text = pe["textRun"]["content"]
                old = pe["textRun"].get("textStyle", {})
                a, b = max(start, ps) - ps, min(end, pe_end) - ps
                styled = dict(old)
                for name in fields:
                    if name in style:
                        styled[name] = style[name]
                    else:
                        styled.pop(name, None)
                elements.append(text_run(_u16slice(text, 0, a), old))
                elements.append(text_run(_u16slice(text, a, b), styled))
                elements.append(text_run(_u16slice(text, b), old))
            para["elements"] = elements

    def _op_updateParagraphStyle(self, body: dict[str, Any]) -> None:
        start, end, _ = self._check_range(body["range"])
        style = body.get("paragraphStyle", {})
        fields = [f for f in body.get("fields", "").split(",") if f]
        for para in self._paragraphs_in(start, end):
            current = para.setdefault("paragraphStyle", {})
            for name in fields:
                if name in style:
                    current[name] = style[name]
                else:
                    current.pop(name, None)

    def _op_createParagraphBullets(self, body: dict[str, Any]) -> None:
        start, end, _ = self._check_range(body["range"])
        preset = body.get("bulletPreset", "BULLET_DISC_CIRCLE_SQUARE")
        list_id = self._next_id("kix.list")
        glyph: dict[str, Any] = (
            {"glyphType": "DECIMAL"}
            if preset.startswith("NUMBERED")
            else {"glyphSymbol": "●"}
        )
        self._document.setdefault("lists", {})[list_id] = {
            "listProperties": {"nestingLevels": [glyph]}
        }
        for para in self._paragraphs_in(start, end):
            level = 0
            for pe in para.get("elements", []):
                if "textRun" in pe:
                    content = pe["textRun"]["content"]
                    stripped = content.lstrip("\t")
                    level = len(content) - len(stripped)
                    pe["textRun"]["content"] = stripped
                break
            para["bullet"] = {"listId": list_id, "nestingLevel": level}

    def _op_deleteParagraphBullets(self, body: dict[str, Any]) -> None:
        start, end, _ = self._check_range(body["range"])
        for para in self._paragraphs_in(start, end):
            para.pop("bullet", None)

    def _op_updateSectionStyle(self, body: dict[str, Any]) -> None:
        self._check_range(body["range"])

    def _op_createNamedRange(self, body: dict[str, Any]) -> dict[str, Any]:
        if not body.get("name"):
            raise MockRequestError("named range needs a name")
        start, end, _ = self._check_range(body["range"])
        range_id = self._next_id("kix.range")
        named = self._document.setdefault("namedRanges", {})
        entry = named.setdefault(body["name"], {"name": body["name"], "namedRanges": []})
        entry["namedRanges"].append(
            {
                "namedRangeId": range_id,
                "name": body["name"],
                "ranges": [{"startIndex": start, "endIndex": end}],
            }
        )
        return {"createNamedRange": {"namedRangeId": range_id}}
