"""Tests for the markdown-lite replacement syntax."""

import pytest

from extrased.markdown import is_plain_text, parse_markdown, unescape


class TestParseMarkdown:
    @pytest.mark.parametrize(
        "source,text,formats",
        [
            ("**bold**", "bold", ["bold"]),
            ("*it*", "it", ["italic"]),
            ("***both***", "both", ["bold", "italic"]),
            ("~~gone~~", "gone", ["strikethrough"]),
            ("`x = 1`", "x = 1", ["code"]),
            ("[site](https://example.com)", "site", ["link:https://example.com"]),
            ("# Title", "Title", ["heading1"]),
            ("### Deep", "Deep", ["heading3"]),
            ("- item", "item", ["bullet"]),
            ("1. first", "first", ["numbered"]),
            ("> quoted", "quoted", ["blockquote"]),
            ("[^a note]", "a note", ["footnote"]),
            ("plain", "plain", []),
        ],
    )
    def test_formats(self, source, text, formats):
        assert parse_markdown(source) == (text, formats)

    def test_hrule(self):
        assert parse_markdown("---") == ("\n", ["hrule"])
        assert parse_markdown("***") == ("\n", ["hrule"])

    def test_code_block_drops_language_line(self):
        text, formats = parse_markdown("```python\nprint(1)```")
        assert text == "print(1)"
        assert formats == ["codeblock"]

    def test_nested_list_levels_become_tabs(self):
        assert parse_markdown("  - child") == ("\tchild", ["bullet"])
        assert parse_markdown("    1. grandchild") == ("\t\tgrandchild", ["numbered"])

    def test_list_item_keeps_inline_format(self):
        assert parse_markdown("- **hot**") == ("hot", ["bullet", "bold"])

    def test_seven_hashes_is_not_a_heading(self):
        text, formats = parse_markdown("####### x")
        assert formats == []
        assert text == "####### x"

    def test_empty_pairs_are_literal(self):
        assert parse_markdown("**") == ("**", [])
        assert parse_markdown("``") == ("``", [])

    def test_escaped_markers_stay_literal(self):
        assert parse_markdown(r"\*\*not bold\*\*") == ("**not bold**", [])
        assert parse_markdown(r"\# not a heading") == ("# not a heading", [])

    def test_newline_escape(self):
        assert parse_markdown(r"one\ntwo") == ("one\ntwo", [])


def test_unescape_ignores_markup():
    assert unescape(r"**x** \* \\") == "**x** * \\"


class TestIsPlainText:
    @pytest.mark.parametrize("text", ["hello", "a-b", "a+b", "x_y", "", "100%"])
    def test_plain(self, text):
        assert is_plain_text(text)

    @pytest.mark.parametrize(
        "text",
        [
            "**b**",
            "# h",
            "- item",
            "> q",
            "[t](u)",
            "[^n]",
            "---",
            "1. one",
            "a\\nb",
            "![a](https://x/y.png)",
            "!(https://x/y.png)",
        ],
    )
    def test_not_plain(self, text):
        assert not is_plain_text(text)
