"""Tests for resolving addresses against a document."""

import pytest

from extrased.document import DocumentView, ImageNode
from extrased.errors import AddressError, ParseError
from extrased.mock import make_document, paragraph, table
from extrased.resolver import (
    resolve_cells,
    resolve_images,
    resolve_merge_range,
    resolve_position,
    resolve_table,
    resolve_tables,
)
from extrased.types import CellAddress, ImageAddress, Specific, Wildcard


def two_tables() -> DocumentView:
    return DocumentView.from_dict(
        make_document(
            paragraph("Intro\n"),
            table(2, 3),
            paragraph("\n"),
            table(1, 1),
            paragraph("\n"),
        )
    )


class TestResolvePosition:
    def test_positive_and_negative(self):
        assert resolve_position(1, 3, "row") == 0
        assert resolve_position(3, 3, "row") == 2
        assert resolve_position(-1, 3, "row") == 2
        assert resolve_position(-3, 3, "row") == 0

    def test_out_of_range_reports_valid_range(self):
        with pytest.raises(AddressError) as exc:
            resolve_position(4, 3, "col")
        assert exc.value.kind == "col"
        assert exc.value.valid_range == (1, 3)
        assert str(exc.value) == "col 4 out of range (valid 1..3)"

    def test_nothing_to_address(self):
        with pytest.raises(AddressError, match="no tables available"):
            resolve_position(1, 0, "table")


class TestTables:
    def test_specific_and_negative(self):
        view = two_tables()
        assert resolve_table(view, Specific(1)).rows == 2
        assert resolve_table(view, Specific(-1)).rows == 1

    def test_wildcard_is_every_body_table(self):
        view = two_tables()
        assert len(resolve_tables(view, Wildcard())) == 2

    def test_single_table_needs_specific(self):
        with pytest.raises(ParseError):
            resolve_table(two_tables(), Wildcard())


class TestCells:
    def setup_method(self):
        self.node = two_tables().tables[0]

    def test_single_cell(self):
        cell = CellAddress(table=Specific(1), row=Specific(-1), col=Specific(2))
        assert resolve_cells(self.node, cell) == [(2, 2)]

    def test_wildcard_row(self):
        cell = CellAddress(table=Specific(1), row=Wildcard(), col=Specific(3))
        assert resolve_cells(self.node, cell) == [(1, 3), (2, 3)]

    def test_all_cells_in_document_order(self):
        cell = CellAddress(table=Specific(1), row=Wildcard(), col=Wildcard())
        assert resolve_cells(self.node, cell) == [
            (1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3),
        ]  # fmt: skip

    def test_column_out_of_range(self):
        cell = CellAddress(table=Specific(1), row=Specific(1), col=Specific(4))
        with pytest.raises(AddressError, match="col 4"):
            resolve_cells(self.node, cell)

    def test_merge_range(self):
        cell = CellAddress(
            table=Specific(1), row=Specific(1), col=Specific(1), end_row=2, end_col=2
        )
        assert resolve_merge_range(self.node, cell) == (0, 0, 2, 2)

    def test_merge_range_backwards(self):
        cell = CellAddress(
            table=Specific(1), row=Specific(2), col=Specific(2), end_row=1, end_col=1
        )
        with pytest.raises(ParseError, match="top-left"):
            resolve_merge_range(self.node, cell)


class TestImages:
    images = [
        ImageNode("a", 3, "Company logo"),
        ImageNode("b", 9, "Revenue chart"),
        ImageNode("c", 20, "Cost chart"),
    ]

    def test_by_position(self):
        address = ImageAddress(position=Specific(-1))
        assert [i.object_id for i in resolve_images(self.images, address, False)] == ["c"]

    def test_wildcard(self):
        address = ImageAddress(position=Wildcard())
        assert len(resolve_images(self.images, address, False)) == 3

    def test_alt_regex_first_or_all(self):
        address = ImageAddress(alt_pattern="chart$")
        assert [i.object_id for i in resolve_images(self.images, address, False)] == ["b"]
        assert [i.object_id for i in resolve_images(self.images, address, True)] == [
            "b",
            "c",
        ]

    def test_position_out_of_range(self):
        with pytest.raises(AddressError, match="image 5"):
            resolve_images(self.images, ImageAddress(position=Specific(5)), False)
