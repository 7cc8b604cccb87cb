"""Workbook conformance checks against a field schema."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from openpyxl import load_workbook

from roi_engine.addressing import CellAddress
from roi_engine.models import is_formula
from roi_engine.schema import FieldSchema


@dataclass(frozen=True)
class CellCheck:
    sheet: str
    cells: Iterable[str]


@dataclass
class SchemaReport:
    missing_sheets: list[str]
    missing_formulas: list[str]
    formula_inputs: list[str]

    @property
    def ok(self) -> bool:
        return not (self.missing_sheets or self.missing_formulas or self.formula_inputs)


def load_workbook_formulas(path: str | Path):
    return load_workbook(path, data_only=False)


def _group(addresses: Iterable[CellAddress]) -> list[CellCheck]:
    by_sheet: dict[str, list[str]] = {}
    for address in addresses:
        by_sheet.setdefault(address.sheet, []).append(address.a1)
    return [CellCheck(sheet, cells) for sheet, cells in by_sheet.items()]


def find_missing_formulas(wb, checks: Iterable[CellCheck]) -> list[str]:
    missing: list[str] = []
    for check in checks:
        ws = wb[check.sheet]
        for cell in check.cells:
            if not is_formula(ws[cell].value):
                missing.append(f"{check.sheet}!{cell}")
    return missing


def find_formula_cells(wb, checks: Iterable[CellCheck]) -> list[str]:
    found: list[str] = []
    for check in checks:
        ws = wb[check.sheet]
        for cell in check.cells:
            if is_formula(ws[cell].value):
                found.append(f"{check.sheet}!{cell}")
    return found


def check_schema_cells(wb, schema: FieldSchema) -> SchemaReport:
    """
    Check a workbook against a schema.

    Output and cumulative ROI cells must hold formulas; bound fields must
    hold plain values so calculate() can overwrite them.
    """
    missing_sheets = [name for name in schema.marker_sheets if name not in wb.sheetnames]
    if missing_sheets:
        return SchemaReport(missing_sheets, [], [])

    output_cells = []
    for binding in schema.outputs:
        output_cells.extend([binding.hours, binding.dollars])
    output_cells.extend(schema.monthly.roi_cell(col) for col in schema.monthly.columns())

    return SchemaReport(
        missing_sheets=[],
        missing_formulas=find_missing_formulas(wb, _group(output_cells)),
        formula_inputs=find_formula_cells(wb, _group(b.address for b in schema.fields)),
    )
