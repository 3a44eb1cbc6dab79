"""Tests for table, cell and image address parsing."""

import pytest

from extrased.addressing import (
    parse_brace_pattern,
    parse_cell_address,
    parse_excel_ref,
    parse_image_address,
    parse_image_literal,
    parse_pipe_table,
    parse_table_create,
    parse_table_ref,
)
from extrased.errors import ParseError
from extrased.types import AllFromEnd, RowColOpKind, Specific, Wildcard


@pytest.mark.parametrize(
    "ref,expected",
    [("A1", (1, 1)), ("B3", (3, 2)), ("z10", (10, 26)), ("AA2", (2, 27))],
)
def test_excel_refs(ref, expected):
    assert parse_excel_ref(ref) == expected


@pytest.mark.parametrize("ref", ["", "1A", "A0", "A-1"])
def test_invalid_excel_refs(ref):
    assert parse_excel_ref(ref) is None


class TestCellAddress:
    def test_not_a_cell(self):
        assert parse_cell_address("hello") is None
        assert parse_cell_address("|1|") is None
        assert parse_cell_address("|x|[1,1]") is None

    def test_negative_indexes(self):
        cell = parse_cell_address("|-1|[-1,-2]")
        assert cell is not None
        assert cell.table == Specific(-1)
        assert (cell.row, cell.col) == (Specific(-1), Specific(-2))

    def test_all_cells(self):
        cell = parse_cell_address("|2|[*]")
        assert cell is not None
        assert (cell.row, cell.col) == (Wildcard(), Wildcard())

    def test_row_ops(self):
        delete = parse_cell_address("|1|[row:-1]")
        assert delete is not None and delete.op is not None
        assert delete.op.kind is RowColOpKind.DELETE
        append = parse_cell_address("|1|[col=$+]")
        assert append is not None and append.op is not None
        assert append.op.kind is RowColOpKind.APPEND
        assert append.op.target == AllFromEnd()

    def test_row_insert_in_row_slot(self):
        cell = parse_cell_address("|1|[+3,1]")
        assert cell is not None and cell.op is not None
        assert (cell.op.axis, cell.op.kind) == ("row", RowColOpKind.INSERT)

    @pytest.mark.parametrize("pattern", ["|1|[row:0]", "|1|[row:+0]", "|1|[Q]", "|1|[1,x]"])
    def test_invalid(self, pattern):
        with pytest.raises(ParseError):
            parse_cell_address(pattern)


def test_table_refs():
    assert parse_table_ref("|-2|") == Specific(-2)
    assert parse_table_ref("|3x3|") is None
    assert parse_table_ref("|0|") is None
    assert parse_table_ref("plain") is None


class TestTableCreate:
    def test_dimensions(self):
        spec = parse_table_create("|4x5|")
        assert spec is not None
        assert (spec.rows, spec.cols, spec.header) == (4, 5, False)

    def test_pipe_rows_are_padded_and_cut(self):
        spec = parse_pipe_table("| a | b |\n| c |\n| d | e | f |")
        assert spec is not None
        assert spec.cells == (("a", "b"), ("c", ""), ("d", "e"))

    def test_not_a_table(self):
        assert parse_table_create("hello") is None
        assert parse_pipe_table("| a |\nnot a row") is None


class TestBracePattern:
    def test_table_create(self):
        address = parse_brace_pattern("{T=3x4:header}")
        assert address is not None and address.table_create is not None
        assert address.table_create.header

    def test_cell_with_remaining_subpattern(self):
        address = parse_brace_pattern("{T=1!2,*} foo")
        assert address is not None and address.cell is not None
        assert address.cell.col == Wildcard()
        assert address.cell.subpattern == "foo"

    def test_table_ref(self):
        address = parse_brace_pattern("{T=*}")
        assert address is not None
        assert address.table_ref == Wildcard()

    def test_image_regex(self):
        address = parse_brace_pattern("{img=^chart}")
        assert address is not None and address.image is not None
        assert address.image.alt_pattern == "^chart"

    def test_other_braces(self):
        assert parse_brace_pattern("{b}") is None
        assert parse_brace_pattern("plain") is None


class TestImages:
    def test_addresses(self):
        assert parse_image_address("!(3)").position == Specific(3)
        assert parse_image_address("![](-1)").position == Specific(-1)
        assert parse_image_address("!(*)").position == Wildcard()
        assert parse_image_address("![]") is None
        assert parse_image_address("![(]") is None

    def test_literal_full(self):
        image = parse_image_literal(
            '![Logo](https://example.com/logo.png "Company"){width=200px height=50}'
        )
        assert image is not None
        assert image.url == "https://example.com/logo.png"
        assert image.alt == "Logo"
        assert image.title == "Company"
        assert (image.width, image.height) == (200, 50)

    def test_literal_short(self):
        image = parse_image_literal("!(https://example.com/a.png)")
        assert image is not None
        assert image.url == "https://example.com/a.png"
        assert parse_image_literal("!(not-a-url)") is None
        assert parse_image_literal("![alt]()") is None
