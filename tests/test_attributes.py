"""Tests for attribute block parsing."""

import pytest

from extrased.attributes import (
    find_attribute_blocks,
    has_attribute_blocks,
    looks_like_attribute_block,
    merge_global_spans,
    parse_attribute_block,
    parse_hex_color,
    resolve_color,
)
from extrased.errors import ParseError
from extrased.types import AttributeSet, BreakKind


class TestParseAttributeBlock:
    def test_flags_and_values(self):
        attrs = parse_attribute_block("b i c=red")
        assert attrs.bold is True
        assert attrs.italic is True
        assert attrs.color == "#FF0000"

    def test_long_names(self):
        attrs = parse_attribute_block("bold underline size=14 font=Georgia")
        assert attrs.bold is True
        assert attrs.underline is True
        assert attrs.size == 14.0
        assert attrs.font == "Georgia"

    def test_reset_prefix(self):
        attrs = parse_attribute_block("0 h=2")
        assert attrs.reset
        assert attrs.heading == "2"

    def test_negated_flag(self):
        attrs = parse_attribute_block("!b")
        assert attrs.bold is False

    def test_no_implicit_reset(self):
        attrs = parse_attribute_block("!0 b")
        assert attrs.no_reset
        assert attrs.bold is True

    def test_breaks(self):
        assert parse_attribute_block("+").break_kind is BreakKind.RULE
        assert parse_attribute_block("+=p").break_kind is BreakKind.PAGE
        assert parse_attribute_block("+=c").break_kind is BreakKind.COLUMN
        assert parse_attribute_block("+=s").break_kind is BreakKind.SECTION

    def test_unknown_break_kind(self):
        with pytest.raises(ParseError, match="unknown break type"):
            parse_attribute_block("+=x")

    def test_comment_swallows_rest(self):
        attrs = parse_attribute_block('@=intro "=a note b=ignored')
        assert attrs.bookmark == "intro"
        assert attrs.comment == "a note b=ignored"
        assert attrs.bold is None

    def test_bare_value_keys_reset_to_defaults(self):
        attrs = parse_attribute_block("z f s c t")
        assert attrs.bg == ""
        assert attrs.font == "Arial"
        assert attrs.size == 11.0
        assert attrs.color == "#000000"
        assert attrs.text == "$0"

    def test_spacing_pair(self):
        attrs = parse_attribute_block("p=6,12")
        assert attrs.spacing_set
        assert (attrs.spacing_above, attrs.spacing_below) == (6.0, 12.0)

    def test_invalid_numbers_are_ignored(self):
        attrs = parse_attribute_block("s=-3 x=abc o=200")
        assert attrs.size is None
        assert attrs.width is None
        assert attrs.opacity is None

    def test_quoted_value(self):
        attrs = parse_attribute_block("u='https://example.com/a b'")
        assert attrs.url == "https://example.com/a b"

    def test_inline_text_flag(self):
        attrs = parse_attribute_block("b=Warning")
        assert attrs.inline_texts == [("Warning", ("bold",))]

    def test_check_values(self):
        assert parse_attribute_block("check").check is False
        assert parse_attribute_block("check=y").check is True

    @pytest.mark.parametrize("content", ["foo", "q=1", "!zz"])
    def test_unknown_tokens(self, content):
        with pytest.raises(ParseError):
            parse_attribute_block(content)


class TestFindAttributeBlocks:
    def test_standalone_block_is_global(self):
        cleaned, spans = find_attribute_blocks("{b}")
        assert cleaned == ""
        assert len(spans) == 1
        assert spans[0].is_global
        assert spans[0].attributes.bold is True

    def test_trailing_block_is_global(self):
        cleaned, spans = find_attribute_blocks("Done {c=green}")
        assert cleaned == "Done "
        assert spans[0].is_global

    def test_inline_text_span(self):
        cleaned, spans = find_attribute_blocks("hello {b=world} again")
        assert cleaned == "hello world again"
        assert (spans[0].start, spans[0].end) == (6, 11)
        assert spans[0].attributes.bold is True
        assert not spans[0].is_global

    def test_unparsable_block_stays_literal(self):
        cleaned, spans = find_attribute_blocks("a {x y} b")
        assert cleaned == "a {x y} b"
        assert spans == []

    def test_escaped_braces(self):
        cleaned, spans = find_attribute_blocks(r"\{b\}")
        assert cleaned == "{b}"
        assert spans == []

    def test_merge_global_later_wins(self):
        _, spans = find_attribute_blocks("{c=red}x{c=blue b}")
        merged = merge_global_spans(spans)
        assert merged.color == "#0000FF"
        assert merged.bold is True


class TestDetection:
    @pytest.mark.parametrize("content", ["b", "b c=red", "0", "!i", "+", "+=p", "T=3x3"])
    def test_attribute_like(self, content):
        assert looks_like_attribute_block(content)

    @pytest.mark.parametrize("content", ["", "hello", "name"])
    def test_plain_braces(self, content):
        assert not looks_like_attribute_block(content)

    def test_has_attribute_blocks(self):
        assert has_attribute_blocks("x {b}")
        assert not has_attribute_blocks("x {hello}")
        assert not has_attribute_blocks(r"x \{b}")


class TestColors:
    def test_named(self):
        assert resolve_color("Red") == "#FF0000"
        assert resolve_color("#123456") == "#123456"

    def test_hex(self):
        assert parse_hex_color("#F00") == (1.0, 0.0, 0.0)
        assert parse_hex_color("#000000") == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize("value", ["red", "#GGGGGG", "#1234"])
    def test_invalid_hex(self, value):
        assert parse_hex_color(value) is None


def test_merge_copies_set_fields_only():
    base = AttributeSet(bold=True, color="#FF0000")
    base.merge(AttributeSet(italic=True))
    assert base.bold is True
    assert base.italic is True
    assert base.color == "#FF0000"
