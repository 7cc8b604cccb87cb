"""
Formula Evaluation Session

Wraps a loaded workbook in a live pycel evaluation context.

The session is mutable and has a single-writer contract: it is owned by one
engine facade and must not be written from two callers at once. Writes are
not transactional; callers perform every write before reading outputs.
"""
from __future__ import annotations

import logging
import math
import tempfile
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from pycel import ExcelCompiler
from pycel.excelutil import AddressCell

from roi_engine.addressing import CellAddress, to_a1
from roi_engine.errors import CalculationError
from roi_engine.models import CellContent, WorkbookModel, is_formula


logger = logging.getLogger(__name__)

NUM_ERROR = "#NUM!"

# Largest magnitude an Excel cell can hold
EXCEL_MAX_NUMBER = 9.99999999999999e307


def as_number(value: Any, fallback: float = 0.0) -> float:
    """
    Coerce an evaluated cell value to a finite float.

    Numbers and numeric strings convert; booleans, blanks, Excel error
    markers ("#DIV/0!", "#VALUE!", ...) and non-finite values yield fallback.
    """
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else fallback
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return fallback
        return number if math.isfinite(number) else fallback
    return fallback


def to_cell_value(value: CellContent) -> CellContent:
    """
    Content as a cell can store it.

    Numbers Excel cannot hold (inf, nan, beyond EXCEL_MAX_NUMBER) become the
    #NUM! error, which formulas propagate as a value instead of raising.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, float) and not math.isfinite(value):
        return NUM_ERROR
    if abs(value) > EXCEL_MAX_NUMBER:
        return NUM_ERROR
    return value


def build_openpyxl_workbook(model: WorkbookModel) -> Workbook:
    """Materialize a WorkbookModel as an in-memory openpyxl workbook."""
    wb = Workbook()
    wb.remove(wb.active)
    for sheet_name, matrix in model.sheets.items():
        ws = wb.create_sheet(title=sheet_name)
        for r, row in enumerate(matrix, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    return wb


def cell_ref(sheet: str, row: int, col: int) -> str:
    """pycel's canonical "SHEET!A1" key for a zero-based cell."""
    return AddressCell(f"'{sheet}'!{to_a1(row, col)}").address


class FormulaEvaluationSession:
    """Live evaluation context over one workbook."""

    def __init__(self, model: WorkbookModel):
        self.model = model
        # pycel compiles from a file and keeps the parsed workbook in memory
        with tempfile.TemporaryDirectory(prefix="roi-session-") as workdir:
            path = Path(workdir) / "model.xlsx"
            build_openpyxl_workbook(model).save(path)
            self._compiler = ExcelCompiler(filename=str(path))
        self._formula_refs = tuple(
            cell_ref(sheet, r, c)
            for sheet, matrix in model.sheets.items()
            for r, row in enumerate(matrix)
            for c, value in enumerate(row)
            if is_formula(value)
        )
        self.fallback_count = 0

    @staticmethod
    def _ref(address: CellAddress) -> str:
        return cell_ref(address.sheet, address.row, address.col)

    def _evaluate(self, ref: str) -> Any:
        """
        Evaluated value of one cell.

        pycel does not cache a formula that raises, so every dependent would
        evaluate it again. A failing cell is pinned to #NUM! instead and
        dependents see an ordinary error value. The pin lasts until the next
        recalculate().
        """
        try:
            return self._compiler.evaluate(ref)
        except Exception as e:
            logger.debug("Evaluation of %s failed (%s)", ref, e)
        if ref in self._compiler.cell_map:
            self._compiler.set_value(ref, NUM_ERROR)
        return NUM_ERROR

    def read_raw(self, address: CellAddress) -> Any:
        """Evaluated value of a cell as the formula engine reports it."""
        return self._evaluate(self._ref(address))

    def read_number(self, address: CellAddress, default: float = 0.0) -> float:
        """
        Numeric value of a cell.

        Falls back to default when the value is missing, non-numeric, an
        error marker, or the engine raises while evaluating this cell, so
        one bad cell never aborts a whole read pass.
        """
        ref = self._ref(address)
        try:
            value = self._evaluate(ref)
        except Exception as e:
            self.fallback_count += 1
            logger.debug("Evaluation of %s failed (%s); using %s", ref, e, default)
            return default
        number = as_number(value, fallback=math.nan)
        if math.isnan(number):
            if value is not None:
                self.fallback_count += 1
                logger.debug("Non-numeric value %r at %s; using %s", value, ref, default)
            return default
        return number

    def write(self, address: CellAddress, value: CellContent) -> None:
        """
        Replace a cell's content and invalidate everything depending on it.

        Non-finite and out-of-range numbers are stored as #NUM!.
        """
        ref = self._ref(address)
        try:
            if ref not in self._compiler.cell_map:
                # pycel only accepts writes to cells it has already seen
                self._compiler.evaluate(ref)
            self._compiler.set_value(ref, to_cell_value(value))
        except Exception as e:
            raise CalculationError(f"Could not write {ref}: {e}", ref) from e

    def recalculate(self) -> None:
        """
        Force every formula cell to settle against the current inputs.

        Cells whose formula raises settle to #NUM! rather than aborting the pass.
        """
        try:
            for ref in self._formula_refs:
                if ref in self._compiler.cell_map:
                    self._compiler.set_value(ref, None)
            for ref in self._formula_refs:
                self._evaluate(ref)
        except Exception as e:
            raise CalculationError(f"Workbook recalculation failed: {e}") from e
