"""Tests for directive classification and the dry-run listing."""

import pytest

from extrased.parser import parse_expression
from extrased.planner import (
    Category,
    batch_key,
    can_batch_cell,
    classify_instruction,
    describe_kind,
    dry_run_line,
    dry_run_report,
    is_native,
    truncate,
)


@pytest.mark.parametrize(
    "raw,category",
    [
        ("s/^/Hello/", Category.POSITIONAL),
        ("s/^$/x/", Category.POSITIONAL),
        ("d/x/", Category.COMMAND),
        ("y/ab/cd/", Category.COMMAND),
        ("s/|1|[1,1]/x/", Category.CELL),
        ("s/|2|//", Category.CELL),
        (r"s/x/![a](https:\/\/e.com\/a.png)/", Category.IMAGE),
        (r"s/x/{img=https:\/\/e.com\/a.png}/", Category.IMAGE),
        ("s/x/|2x2|/", Category.TABLE_CREATE),
        ("s/!(1)//", Category.IMAGE_PATTERN),
        ("s/foo/bar/g", Category.NATIVE),
        ("s/foo/bar/", Category.MANUAL),
        ("s/foo/**bar**/g", Category.MANUAL),
    ],
)
def test_classify_instruction(raw, category):
    assert classify_instruction(parse_expression(raw)) is category


class TestNative:
    def test_plain_global_replacement(self):
        assert is_native(parse_expression("s/colou?r/shade/g"))

    @pytest.mark.parametrize(
        "raw",
        [
            r"s/(a)/\1/g",
            "s/a/b/2",
            "s/a/{b}/g",
            "s/a/# Title/g",
            "s/a/1. item/g",
        ],
    )
    def test_needs_manual_path(self, raw):
        assert not is_native(parse_expression(raw))


class TestCellBatching:
    def test_specific_whole_cell(self):
        instr = parse_expression("s/|-1|[1,1]/x/")
        assert can_batch_cell(instr)
        assert batch_key(instr) == -1

    @pytest.mark.parametrize(
        "raw",
        [
            "s/|1|[*,1]/x/",
            "s/|1|[1,1]/unmerge/",
            "s/|1|[1,1]:a/b/",
            "s/|1|[row:2]//",
            "s/|1|[1,1:2,2]//",
        ],
    )
    def test_not_batchable(self, raw):
        instr = parse_expression(raw)
        assert not can_batch_cell(instr)
        assert batch_key(instr) is None


@pytest.mark.parametrize(
    "raw,label",
    [
        ("d/x/", "delete"),
        ("a/x/y/", "append-after"),
        ("s/|1|[row:2]//", "table 1 delete row"),
        ("s/|1|[col=$+]//", "table 1 append col"),
        ("s/|1|[1,1:2,2]//", "table 1 merge"),
        ("s/|1|[1,1]/split/", "table 1 unmerge"),
        ("s/|1|[2,3]/x/", "cell |1|[2,3]"),
        ("s/|1|[*]/x/", "cell |1|[*,*] (wildcard)"),
        ("s/|2|//", "delete table 2"),
        ("s/x/|2x2|/", "create table"),
        ("s/x/{b}/", "brace"),
        ("s/x/y/", "manual"),
    ],
)
def test_describe_kind(raw, label):
    assert describe_kind(parse_expression(raw)) == label


class TestDryRun:
    def test_native_line(self):
        assert dry_run_line(1, "s/foo/bar/gi").render() == "1\tnative\tok\ts/foo/bar/gi"

    def test_attribute_flags_are_listed(self):
        assert dry_run_line(3, "s/x/{b}/").render() == "3\tbrace\tok\ts/x//\t{b}"

    def test_parse_error(self):
        line = dry_run_line(2, "nonsense")
        assert line.error
        assert line.render().startswith("2\t-\tERROR: ")

    def test_bad_regex_is_reported(self):
        line = dry_run_line(1, "s/(/x/")
        assert line.kind == "manual"
        assert "invalid pattern" in line.error

    def test_report_footer(self):
        lines = dry_run_report(["s/a/b/", "d/c/"])
        assert len(lines) == 4
        assert lines[-2] == "---"
        assert lines[-1] == "dry-run: 2 expressions parsed, no changes made"


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a" * 50, 10) == "aaaaaaa..."
