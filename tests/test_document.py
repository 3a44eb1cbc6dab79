"""Tests for the flattened DocumentView."""

from extrased.document import DocumentView, cell_text, first_cell_index, utf16_len
from extrased.mock import make_document, paragraph, table, text_run
from extrased.resolver import resolve_images
from extrased.types import ImageAddress, Specific


def view_of(*content, **extra) -> DocumentView:
    return DocumentView.from_dict(make_document(*content, **extra))


def test_utf16_len():
    assert utf16_len("abc") == 3
    assert utf16_len("a\U0001f600") == 3


class TestParagraphs:
    def test_indexes(self):
        view = view_of(paragraph("Hello world\n"))
        p = view.paragraphs[0]
        assert (p.start, p.end) == (1, 13)
        assert p.text == "Hello world\n"
        assert p.line == "Hello world"
        assert view.body_end == 13

    def test_index_at_spans_runs(self):
        view = view_of(paragraph("Hello ", "world\n"))
        p = view.paragraphs[0]
        assert p.index_at(0) == 1
        assert p.index_at(6) == 7
        assert p.index_at(8) == 9

    def test_index_at_counts_surrogate_pairs(self):
        view = view_of(paragraph("\U0001f600 hi\n"))
        assert view.paragraphs[0].index_at(2) == 4

    def test_tab_and_bullet_flags(self):
        view = view_of(
            paragraph("\tchild\n"),
            paragraph("item\n", bullet={"listId": "l1"}),
        )
        first, second = view.paragraphs
        assert first.starts_with_tab and not first.has_bullet
        assert second.has_bullet and second.list_id == "l1"

    def test_empty_document(self):
        assert view_of(paragraph("\n")).is_empty
        assert view_of(paragraph("  \n")).is_empty
        assert not view_of(paragraph("x\n")).is_empty


class TestTables:
    def setup_method(self):
        self.view = view_of(
            paragraph("Intro\n"),
            table(2, 2, [["a", "b"], ["c", "d"]]),
            paragraph("\n"),
        )

    def test_table_position(self):
        node = self.view.tables[0]
        assert node.start == 7
        assert (node.rows, node.cols) == (2, 2)
        assert self.view.body_tables == [node]

    def test_cell_text(self):
        node = self.view.tables[0]
        text = cell_text(node.cell(2, 1))
        assert text.text == "c\n"
        assert text.stripped == "c"
        assert text.content_end == text.start + 1
        assert first_cell_index(node.cell(1, 1)) == 10

    def test_body_paragraphs_skip_cells(self):
        assert len(self.view.paragraphs) == 6
        assert [p.line for p in self.view.body_paragraphs] == ["Intro", ""]
        assert not self.view.is_empty

    def test_nested_tables_count_in_document_order(self):
        outer = table(1, 2)
        inner = table(1, 1, [["deep"]])
        outer["table"]["tableRows"][0]["tableCells"][0]["content"].append(inner)
        view = view_of(outer, table(1, 1, [["last"]]), paragraph("\n"))
        assert [t.depth for t in view.tables] == [0, 1, 0]
        assert len(view.body_tables) == 2


class TestImages:
    def test_inline_and_positioned(self):
        para = {
            "paragraph": {
                "elements": [
                    text_run("a"),
                    {"inlineObjectElement": {"inlineObjectId": "img1"}},
                    text_run("b\n"),
                ]
            }
        }
        view = view_of(
            para,
            inlineObjects={
                "img1": {
                    "inlineObjectProperties": {"embeddedObject": {"title": "Logo"}}
                }
            },
            positionedObjects={
                "pos1": {
                    "positionedObjectProperties": {
                        "embeddedObject": {"description": "Banner"}
                    }
                }
            },
        )
        inline, positioned = view.images
        assert (inline.object_id, inline.index, inline.alt) == ("img1", 2, "Logo")
        assert not inline.positioned
        assert positioned.positioned and positioned.alt == "Banner"
        assert view.paragraphs[0].text == "ab\n"
        assert view.paragraphs[0].index_at(1) == 3

    def test_positioned_images_follow_their_anchor(self):
        anchored = paragraph("one\n")
        anchored["paragraph"]["positionedObjectIds"] = ["pos1"]
        later = {
            "paragraph": {
                "elements": [
                    {"inlineObjectElement": {"inlineObjectId": "img1"}},
                    text_run("two\n"),
                ]
            }
        }
        view = view_of(
            anchored,
            later,
            inlineObjects={"img1": {"inlineObjectProperties": {"embeddedObject": {}}}},
            positionedObjects={
                "pos1": {"positionedObjectProperties": {"embeddedObject": {}}}
            },
        )
        assert [(i.object_id, i.index) for i in view.images] == [
            ("pos1", 1),
            ("img1", 5),
        ]
        assert view.images[-1].positioned is False
        last = resolve_images(view.images, ImageAddress(position=Specific(-1)), False)
        assert [i.object_id for i in last] == ["img1"]


class TestLists:
    def test_bullet_preset_from_glyph(self):
        view = view_of(
            paragraph("x\n"),
            lists={
                "num": {"listProperties": {"nestingLevels": [{"glyphType": "DECIMAL"}]}},
                "dot": {"listProperties": {"nestingLevels": [{"glyphSymbol": "●"}]}},
            },
        )
        assert view.bullet_preset("num") == "NUMBERED_DECIMAL_NESTED"
        assert view.bullet_preset("dot") == "BULLET_DISC_CIRCLE_SQUARE"
        assert view.bullet_preset(None) == "BULLET_DISC_CIRCLE_SQUARE"


def test_section_range_without_breaks_covers_body():
    view = view_of(paragraph("one\n"), paragraph("two\n"))
    assert view.section_range(5, 7) == (1, 9)
