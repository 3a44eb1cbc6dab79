"""Tests for the in-memory Docs transport the engine tests run against."""

import pytest

from extrased.document import DocumentView
from extrased.mock import MockDocsTransport, MockRequestError, make_document, paragraph
from extrased.transport import NotFoundError, TransientServiceError


def transport_with(*lines: str) -> MockDocsTransport:
    return MockDocsTransport(make_document(*(paragraph(line + "\n") for line in lines)))


async def view_of(transport: MockDocsTransport) -> DocumentView:
    data = await transport.get_document("doc1")
    return DocumentView.from_dict(data.raw)


class TestText:
    @pytest.mark.asyncio
    async def test_delete_then_insert(self):
        transport = transport_with("Hello world")
        await transport.batch_update(
            "doc1",
            [
                {"deleteContentRange": {"range": {"startIndex": 7, "endIndex": 12}}},
                {"insertText": {"location": {"index": 7}, "text": "there"}},
            ],
        )
        assert transport.body_text() == "Hello there\n"

    @pytest.mark.asyncio
    async def test_inserted_newline_splits_paragraph(self):
        transport = transport_with("Hello world")
        await transport.batch_update(
            "doc1", [{"insertText": {"location": {"index": 6}, "text": "\n"}}]
        )
        view = await view_of(transport)
        assert [p.text for p in view.paragraphs] == ["Hello\n", " world\n"]

    @pytest.mark.asyncio
    async def test_delete_across_paragraphs_joins_them(self):
        transport = transport_with("ab", "cd")
        await transport.batch_update(
            "doc1",
            [{"deleteContentRange": {"range": {"startIndex": 2, "endIndex": 5}}}],
        )
        view = await view_of(transport)
        assert [p.text for p in view.paragraphs] == ["ad\n"]

    @pytest.mark.asyncio
    async def test_replace_all_text_counts(self):
        transport = transport_with("a cat", "cat cat")
        result = await transport.batch_update(
            "doc1",
            [
                {
                    "replaceAllText": {
                        "containsText": {"text": "cat", "matchCase": True},
                        "replaceText": "dog",
                    }
                }
            ],
        )
        assert result["replies"][0]["replaceAllText"]["occurrencesChanged"] == 3
        assert transport.body_text() == "a dog\ndog dog\n"

    @pytest.mark.asyncio
    async def test_text_style_splits_runs(self):
        transport = transport_with("Hello world")
        await transport.batch_update(
            "doc1",
            [
                {
                    "updateTextStyle": {
                        "range": {"startIndex": 7, "endIndex": 12},
                        "textStyle": {"bold": True},
                        "fields": "bold",
                    }
                }
            ],
        )
        elements = transport.document["body"]["content"][1]["paragraph"]["elements"]
        assert [(e["textRun"]["content"], e["textRun"]["textStyle"]) for e in elements] == [
            ("Hello ", {}),
            ("world", {"bold": True}),
            ("\n", {}),
        ]


class TestBatches:
    @pytest.mark.asyncio
    async def test_invalid_request_rolls_back_the_batch(self):
        transport = transport_with("Hello")
        with pytest.raises(MockRequestError) as exc:
            await transport.batch_update(
                "doc1",
                [
                    {"insertText": {"location": {"index": 1}, "text": "X"}},
                    {"deleteContentRange": {"range": {"startIndex": 50, "endIndex": 60}}},
                ],
            )
        assert exc.value.status_code == 400
        assert str(exc.value).startswith("API error (400): requests[1].deleteContentRange")
        assert transport.body_text() == "Hello\n"
        assert len(transport.batches) == 1

    @pytest.mark.asyncio
    async def test_unsupported_request(self):
        transport = transport_with("Hello")
        with pytest.raises(MockRequestError, match="unsupported request"):
            await transport.batch_update("doc1", [{"teleport": {}}])

    @pytest.mark.asyncio
    async def test_injected_failures(self):
        transport = transport_with("Hello")
        transport.fail_next_batch(TransientServiceError("busy", 503))
        transport.fail_next_fetch(TransientServiceError("busy", 503))
        with pytest.raises(TransientServiceError):
            await transport.batch_update("doc1", [])
        with pytest.raises(TransientServiceError):
            await transport.get_document("doc1")
        assert (await transport.get_document("doc1")).document_id == "doc1"
        assert transport.fetch_count == 2

    @pytest.mark.asyncio
    async def test_unknown_document(self):
        with pytest.raises(NotFoundError):
            await transport_with("x").get_document("other")


class TestStructure:
    @pytest.mark.asyncio
    async def test_insert_table_after_newline(self):
        transport = transport_with("Hello")
        await transport.batch_update(
            "doc1",
            [{"insertTable": {"rows": 2, "columns": 3, "location": {"index": 6}}}],
        )
        view = await view_of(transport)
        (node,) = view.tables
        assert (node.rows, node.cols) == (2, 3)
        assert node.start == 7
        assert [p.line for p in view.body_paragraphs] == ["Hello", ""]

    @pytest.mark.asyncio
    async def test_table_row_ops(self):
        transport = transport_with("Hello")
        await transport.batch_update(
            "doc1",
            [{"insertTable": {"rows": 1, "columns": 2, "location": {"index": 6}}}],
        )
        location = {"tableStartLocation": {"index": 7}, "rowIndex": 0, "columnIndex": 0}
        await transport.batch_update(
            "doc1",
            [{"insertTableRow": {"tableCellLocation": location, "insertBelow": True}}],
        )
        assert (await view_of(transport)).tables[0].rows == 2
        await transport.batch_update(
            "doc1", [{"deleteTableColumn": {"tableCellLocation": location}}]
        )
        assert (await view_of(transport)).tables[0].cols == 1
        with pytest.raises(MockRequestError, match="only column"):
            await transport.batch_update(
                "doc1", [{"deleteTableColumn": {"tableCellLocation": location}}]
            )

    @pytest.mark.asyncio
    async def test_bullets_turn_tabs_into_levels(self):
        transport = transport_with("a", "\tb")
        await transport.batch_update(
            "doc1",
            [
                {
                    "createParagraphBullets": {
                        "range": {"startIndex": 1, "endIndex": 6},
                        "bulletPreset": "BULLET_DISC_CIRCLE_SQUARE",
                    }
                }
            ],
        )
        content = transport.document["body"]["content"]
        second = content[2]["paragraph"]
        assert second["bullet"]["nestingLevel"] == 1
        assert second["elements"][0]["textRun"]["content"] == "b\n"
        assert content[1]["paragraph"]["bullet"]["listId"] == second["bullet"]["listId"]

    @pytest.mark.asyncio
    async def test_footnote_segment(self):
        transport = transport_with("Hello")
        result = await transport.batch_update(
            "doc1", [{"createFootnote": {"location": {"index": 6}}}]
        )
        footnote_id = result["replies"][0]["createFootnote"]["footnoteId"]
        await transport.batch_update(
            "doc1",
            [
                {
                    "insertText": {
                        "location": {"index": 1, "segmentId": footnote_id},
                        "text": "note",
                    }
                }
            ],
        )
        footnote = transport.document["footnotes"][footnote_id]
        text = footnote["content"][0]["paragraph"]["elements"][0]["textRun"]["content"]
        assert text == "note\n"
        assert transport.body_text() == "Hello\n"
