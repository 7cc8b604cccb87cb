"""
Unit Tests for Workbook Conformance Checks
"""
from roi_engine.schema import SCHEMA_V1, SCHEMA_V2
from roi_io.template import build_reference_workbook
from roi_io.xlsx_validation import check_schema_cells


class TestSchemaCells:
    """Reference workbooks conform; edited ones do not."""

    def test_reference_v1(self):
        assert check_schema_cells(build_reference_workbook("v1"), SCHEMA_V1).ok

    def test_reference_v2(self):
        assert check_schema_cells(build_reference_workbook("v2"), SCHEMA_V2).ok

    def test_hardcoded_output(self):
        wb = build_reference_workbook("v1", cell_overrides={"MODEL_OUTPUTS!B2": 450})
        report = check_schema_cells(wb, SCHEMA_V1)
        assert report.missing_formulas == ["MODEL_OUTPUTS!B2"]

    def test_formula_in_field(self):
        wb = build_reference_workbook("v2", cell_overrides={"ROI_CALCULATOR!C4": "=10*5"})
        report = check_schema_cells(wb, SCHEMA_V2)
        assert report.formula_inputs == ["ROI_CALCULATOR!C4"]
        assert not report.ok

    def test_wrong_layout(self):
        report = check_schema_cells(build_reference_workbook("v2"), SCHEMA_V1)
        assert report.missing_sheets == ["MODEL_INPUTS", "MODEL_OUTPUTS"]
