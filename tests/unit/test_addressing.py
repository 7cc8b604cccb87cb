"""
Unit Tests for A1 Addressing
"""
import pytest

from roi_engine.addressing import (
    CellAddress,
    column_to_index,
    index_to_column,
    normalize,
    to_a1,
    to_row_col,
)
from roi_engine.errors import AddressError


class TestColumns:
    """Column letter conversion."""

    def test_single_letters(self):
        assert column_to_index("A") == 0
        assert column_to_index("Z") == 25

    def test_multi_letters(self):
        assert column_to_index("AA") == 26
        assert column_to_index("AN") == 39
        assert column_to_index("ZZZ") == 18277

    def test_lowercase(self):
        assert column_to_index("an") == 39

    def test_index_to_column(self):
        assert index_to_column(0) == "A"
        assert index_to_column(26) == "AA"

    @pytest.mark.parametrize("letters", ["", "A1", "É", "AAAA"])
    def test_invalid_column(self, letters):
        with pytest.raises(AddressError):
            column_to_index(letters)

    def test_negative_index(self):
        with pytest.raises(AddressError):
            index_to_column(-1)


class TestA1:
    """A1 <-> (row, col)."""

    def test_parse(self):
        assert to_row_col("B12") == (11, 1)
        assert to_row_col("A1") == (0, 0)

    def test_parse_is_lenient_on_case_and_blanks(self):
        assert to_row_col("  b12 ") == (11, 1)
        assert normalize(" aa3") == "AA3"

    def test_format(self):
        assert to_a1(11, 1) == "B12"
        assert to_a1(0, 39) == "AN1"

    @pytest.mark.parametrize("ref", ["B12", "AN1", "C30", "ZZ999"])
    def test_round_trip(self, ref):
        assert to_a1(*to_row_col(ref)) == ref

    @pytest.mark.parametrize("ref", ["", "12", "B", "B0", "1B", "B-1", "B1.5"])
    def test_malformed(self, ref):
        with pytest.raises(AddressError):
            to_row_col(ref)

    def test_address_error_is_value_error(self):
        with pytest.raises(ValueError):
            to_row_col("nope")


class TestCellAddress:
    """Sheet-qualified addresses."""

    def test_parse_qualified(self):
        address = CellAddress.parse("MODEL_INPUTS!B8")
        assert address == CellAddress("MODEL_INPUTS", 7, 1)
        assert address.a1 == "B8"
        assert address.qualified == "MODEL_INPUTS!B8"
        assert str(address) == "MODEL_INPUTS!B8"

    def test_parse_quoted_sheet(self):
        assert CellAddress.parse("'ROI_CALCULATOR'!C4").sheet == "ROI_CALCULATOR"

    def test_missing_sheet(self):
        with pytest.raises(AddressError):
            CellAddress.parse("B8")

    def test_hashable(self):
        assert len({CellAddress.parse("S!A1"), CellAddress("S", 0, 0)}) == 1
