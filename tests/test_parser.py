"""Tests for directive parsing."""

import re

import pytest

from extrased.errors import ParseError
from extrased.parser import (
    nth_flag,
    parse_expression,
    parse_expression_lines,
    parse_expressions,
    regex_flags,
    split_by_delimiter,
)
from extrased.types import CommandKind, RowColOpKind, Specific, Wildcard


class TestSubstitute:
    def test_basic(self):
        instr = parse_expression("s/foo/bar/")
        assert instr.kind is CommandKind.SUBSTITUTE
        assert instr.pattern == "foo"
        assert instr.replacement == "bar"
        assert not instr.is_global
        assert instr.nth == 0
        assert instr.raw == "s/foo/bar/"

    def test_flags(self):
        instr = parse_expression("s/foo/bar/gim")
        assert instr.is_global
        assert instr.regex_flags == re.IGNORECASE | re.MULTILINE

    def test_nth(self):
        assert parse_expression("s/foo/bar/3").nth == 3
        assert parse_expression("s/foo/bar/0").nth == 0

    def test_alternate_delimiter(self):
        instr = parse_expression("s#a/b#c/d#g")
        assert instr.pattern == "a/b"
        assert instr.replacement == "c/d"
        assert instr.is_global

    def test_escaped_delimiter(self):
        instr = parse_expression(r"s/a\/b/c/")
        assert instr.pattern == "a/b"

    def test_missing_trailing_delimiter(self):
        instr = parse_expression("s/foo/bar")
        assert instr.replacement == "bar"

    def test_global_attribute_block(self):
        instr = parse_expression("s/TODO/{b c=red}/g")
        assert instr.replacement == ""
        assert instr.attributes is not None
        assert instr.attributes.bold is True
        assert instr.attributes.color == "#FF0000"

    def test_inline_spans(self):
        instr = parse_expression("s/x/say {b=hi} now/")
        assert instr.replacement == "say hi now"
        assert len(instr.spans) == 1
        assert (instr.spans[0].start, instr.spans[0].end) == (4, 6)

    def test_literal_braces_are_not_attributes(self):
        instr = parse_expression("s/x/{name}/")
        assert instr.attributes is None
        assert instr.replacement == "{name}"

    def test_invalid_regex_is_reported_lazily(self):
        instr = parse_expression("s/(/x/")
        with pytest.raises(ParseError, match="invalid pattern"):
            instr.regex  # noqa: B018

    @pytest.mark.parametrize("raw", ["", "s", "s/", "q/a/b/", "s/only"])
    def test_malformed(self, raw):
        with pytest.raises(ParseError):
            parse_expression(raw)


class TestTables:
    def test_table_create(self):
        instr = parse_expression("s/PLACEHOLDER/|2x3|/")
        assert instr.table_create is not None
        assert (instr.table_create.rows, instr.table_create.cols) == (2, 3)
        assert not instr.table_create.header

    def test_table_create_with_header(self):
        instr = parse_expression("s/X/|3x2:header|/")
        assert instr.table_create is not None
        assert instr.table_create.header

    def test_table_create_from_brace(self):
        instr = parse_expression("s/X/{T=2x2}/")
        assert instr.table_create is not None
        assert instr.attributes is None
        assert instr.replacement == ""

    def test_brace_table_create_out_of_range(self):
        with pytest.raises(ParseError, match="invalid table create spec"):
            parse_expression("s/X/{T=2x27}/")

    def test_pipe_table_literal(self):
        instr = parse_expression(r"s/X/| a | b |\n|---|---|\n| 1 | 2 |/")
        spec = instr.table_create
        assert spec is not None
        assert (spec.rows, spec.cols) == (2, 2)
        assert spec.cells == (("a", "b"), ("1", "2"))

    def test_cell_address(self):
        instr = parse_expression("s/|1|[2,3]/Done/")
        assert instr.cell is not None
        assert instr.cell.table == Specific(1)
        assert instr.cell.row == Specific(2)
        assert instr.cell.col == Specific(3)
        assert instr.pattern == ""

    def test_cell_excel_reference_with_subpattern(self):
        instr = parse_expression("s/|1|[B3]:old/new/")
        assert instr.cell is not None
        assert (instr.cell.row, instr.cell.col) == (Specific(3), Specific(2))
        assert instr.pattern == "old"

    def test_brace_cell_address(self):
        instr = parse_expression("s/{T=-1!A1}/x/")
        assert instr.cell is not None
        assert instr.cell.table == Specific(-1)
        assert (instr.cell.row, instr.cell.col) == (Specific(1), Specific(1))

    def test_wildcard_row(self):
        instr = parse_expression("s/|1|[*,2]/x/")
        assert instr.cell is not None
        assert instr.cell.row == Wildcard()
        assert instr.cell.is_wildcard

    def test_row_insert(self):
        instr = parse_expression("s/|1|[row:+2]//")
        assert instr.cell is not None and instr.cell.op is not None
        assert instr.cell.op.kind is RowColOpKind.INSERT
        assert instr.cell.op.target == Specific(2)

    def test_col_append_in_col_slot(self):
        instr = parse_expression("s/|1|[1,$+]//")
        assert instr.cell is not None and instr.cell.op is not None
        assert instr.cell.op.axis == "col"
        assert instr.cell.op.kind is RowColOpKind.APPEND

    def test_merge_range(self):
        instr = parse_expression("s/|1|[1,1:2,3]//")
        assert instr.cell is not None
        assert instr.cell.is_range
        assert (instr.cell.end_row, instr.cell.end_col) == (2, 3)

    def test_table_reference(self):
        assert parse_expression("s/|2|//").table_ref == Specific(2)
        assert parse_expression("s/|*|//").table_ref == Wildcard()

    @pytest.mark.parametrize("raw", ["s/|*|[1,1]/x/", "s/{T=*!A1}/x/", "s/|0|[1,1]/x/"])
    def test_bad_table_addresses(self, raw):
        with pytest.raises(ParseError):
            parse_expression(raw)


class TestImages:
    def test_position(self):
        instr = parse_expression("s/!(2)/![new](https:\\/\\/example.com\\/a.png)/")
        assert instr.image_ref is not None
        assert instr.image_ref.position == Specific(2)

    def test_alt_regex(self):
        instr = parse_expression("s/![logo.*]//")
        assert instr.image_ref is not None
        assert instr.image_ref.alt_pattern == "logo.*"

    def test_brace_image(self):
        instr = parse_expression("s/{img=*}//")
        assert instr.image_ref is not None
        assert instr.image_ref.position == Wildcard()


class TestCommands:
    def test_delete(self):
        instr = parse_expression("d/^DRAFT/i")
        assert instr.kind is CommandKind.DELETE
        assert instr.pattern == "^DRAFT"
        assert instr.regex_flags == re.IGNORECASE

    def test_delete_needs_pattern(self):
        with pytest.raises(ParseError):
            parse_expression("d//")

    def test_append_and_insert(self):
        assert parse_expression("a/foo/bar/").kind is CommandKind.APPEND
        instr = parse_expression("i/foo/bar/")
        assert instr.kind is CommandKind.INSERT
        assert instr.replacement == "bar"

    def test_append_needs_text_part(self):
        with pytest.raises(ParseError):
            parse_expression("a/foo")

    def test_transliterate(self):
        instr = parse_expression("y/abc/xyz/")
        assert instr.kind is CommandKind.TRANSLITERATE
        assert (instr.pattern, instr.replacement) == ("abc", "xyz")

    @pytest.mark.parametrize("raw", ["y/ab/x/", "y///"])
    def test_transliterate_errors(self, raw):
        with pytest.raises(ParseError):
            parse_expression(raw)


class TestHelpers:
    def test_split_by_delimiter(self):
        assert split_by_delimiter(r"a\/b/c/", "/") == ["a/b", "c", ""]

    def test_flag_attrs_are_ignored(self):
        assert nth_flag("g{n=2}") == 0
        assert regex_flags("{i}") == 0

    def test_parse_expressions_numbers_errors(self):
        with pytest.raises(ParseError, match="expression 2"):
            parse_expressions(["s/a/b/", "nonsense"])

    def test_expression_lines(self):
        text = "# header\n\ns/a/b/\n  d/x/  \n# trailing\n"
        assert parse_expression_lines(text) == ["s/a/b/", "d/x/"]
