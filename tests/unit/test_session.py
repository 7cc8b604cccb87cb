"""
Unit Tests for the Formula Evaluation Session
"""
import math
from types import MappingProxyType

import pytest

from roi_engine.addressing import CellAddress
from roi_engine.errors import CalculationError
from roi_engine.models import WorkbookModel
from roi_engine.session import NUM_ERROR, FormulaEvaluationSession, as_number, to_cell_value


def _model(rows):
    return WorkbookModel(sheets=MappingProxyType({"S": tuple(tuple(r) for r in rows)}))


@pytest.fixture
def session():
    return FormulaEvaluationSession(_model([
        [2, 3, "=A1*B1"],
        ["=1/0", "abc", "=C1+1"],
        ["12.5", None, True],
    ]))


def cell(a1):
    return CellAddress.from_a1("S", a1)


class TestAsNumber:
    """Coercion of evaluated values."""

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        (2.5, 2.5),
        ("12.5", 12.5),
        (" 7 ", 7.0),
    ])
    def test_numbers(self, value, expected):
        assert as_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, False, "abc", "#DIV/0!", math.inf, math.nan, "inf", [1]])
    def test_fallback(self, value):
        assert as_number(value, fallback=-1.0) == -1.0


class TestToCellValue:
    """Numbers a cell cannot hold become #NUM!."""

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan, 1e308, -1e308, 10 ** 400])
    def test_unrepresentable(self, value):
        assert to_cell_value(value) == NUM_ERROR

    @pytest.mark.parametrize("value", [0, -3, 2.5, 1e307, True, "text", None])
    def test_kept(self, value):
        assert to_cell_value(value) == value


class TestReads:
    """Numeric reads with fallback."""

    def test_formula(self, session):
        assert session.read_number(cell("C1")) == 6.0
        assert session.read_number(cell("C2")) == 7.0

    def test_numeric_string(self, session):
        assert session.read_number(cell("A3")) == 12.5

    def test_error_marker_falls_back(self, session):
        assert session.read_number(cell("A2")) == 0.0
        assert session.read_number(cell("A2"), default=5.0) == 5.0
        assert session.fallback_count == 2

    def test_text_and_bool_fall_back(self, session):
        assert session.read_number(cell("B2")) == 0.0
        assert session.read_number(cell("C3")) == 0.0

    def test_empty_cell(self, session):
        assert session.read_number(cell("B3")) == 0.0
        assert session.read_number(cell("B3"), default=4.0) == 4.0


class TestWrites:
    """Write then recompute."""

    def test_dependents_update(self, session):
        assert session.read_number(cell("C2")) == 7.0
        session.write(cell("A1"), 10)
        session.recalculate()
        assert session.read_number(cell("C1")) == 30.0
        assert session.read_number(cell("C2")) == 31.0

    def test_sessions_are_independent(self):
        model = _model([[1, "=A1*2"]])
        first = FormulaEvaluationSession(model)
        second = FormulaEvaluationSession(model)
        first.write(cell("A1"), 5)
        first.recalculate()
        assert first.read_number(cell("B1")) == 10.0
        assert second.read_number(cell("B1")) == 2.0

    @pytest.mark.parametrize("value", [math.inf, math.nan, 1e308])
    def test_unrepresentable_write(self, session, value):
        assert session.read_number(cell("C2")) == 7.0
        session.write(cell("A1"), value)
        session.recalculate()
        assert session.read_raw(cell("A1")) == NUM_ERROR
        assert session.read_number(cell("C1")) == 0.0
        assert session.read_number(cell("C2"), default=-1.0) == -1.0
        assert session.fallback_count >= 2

    def test_overflow_settles_and_recovers(self):
        session = FormulaEvaluationSession(_model([[1e300, "=A1*A1", "=B1+1", "=C1+1"]]))
        session.recalculate()
        assert session.read_number(cell("D1")) == 0.0
        assert session.read_number(cell("B1")) == 0.0
        session.write(cell("A1"), 2)
        session.recalculate()
        assert session.read_number(cell("D1")) == 6.0

    def test_write_to_unknown_sheet(self, session):
        with pytest.raises(CalculationError) as exc_info:
            session.write(CellAddress("NOPE", 0, 0), 1)
        assert "NOPE" in str(exc_info.value)
