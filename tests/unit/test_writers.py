"""
Unit Tests for Result Writers and Charts
"""
import json

import pytest
from openpyxl import load_workbook

from roi_engine.models import (
    CATEGORY_ORDER,
    CalculationResult,
    MonthlyPoint,
    RoiAssumptions,
    UseCaseResult,
)
from roi_io.template import DEFAULT_ASSUMPTIONS
from roi_io.writers import export_csv, export_json, export_xlsx, format_tables
from roi_ui_cli.charts import create_roi_timeline, payback_crossing, save_charts


def _result(roi_values):
    breakdown = {
        category: UseCaseResult(hours_saved=10.0 * (i + 1), dollars_saved=100.0 * (i + 1))
        for i, category in enumerate(CATEGORY_ORDER)
    }
    return CalculationResult(
        totals=UseCaseResult(hours_saved=100.0, dollars_saved=1000.0),
        breakdown=breakdown,
        monthly=tuple(MonthlyPoint(month=i + 1, roi=v) for i, v in enumerate(roi_values)),
        assumptions=RoiAssumptions(**DEFAULT_ASSUMPTIONS),
    )


@pytest.fixture
def result():
    return _result([-300.0 + 100.0 * i for i in range(36)])


class TestPayback:
    """Payback month and crossing."""

    def test_payback_month(self, result):
        assert result.payback_month == 4

    def test_never_pays_back(self):
        assert _result([-1.0] * 36).payback_month is None
        assert payback_crossing(_result([-1.0] * 36)) is None

    def test_interpolated_crossing(self):
        crossing = payback_crossing(_result([-100.0, -50.0, 50.0] + [100.0] * 33))
        assert crossing == pytest.approx(2.5)

    def test_crossing_at_start(self):
        assert payback_crossing(_result([10.0] * 36)) == 1.0


class TestTables:
    """DataFrame formatting."""

    def test_table_names(self, result):
        assert list(format_tables(result)) == ["1_Totals", "2_Breakdown", "3_Monthly_ROI", "4_Assumptions"]

    def test_breakdown_rows(self, result):
        df = format_tables(result)["2_Breakdown"]
        assert len(df) == 4
        assert df["Dollars Saved"].sum() == pytest.approx(1000.0)

    def test_monthly_rows(self, result):
        df = format_tables(result)["3_Monthly_ROI"]
        assert len(df) == 36
        assert list(df.columns) == ["Month", "Cumulative ROI"]


class TestExports:
    """Files on disk."""

    def test_csv(self, result, tmp_path):
        files = export_csv(result, tmp_path / "csv")
        assert len(files) == 4
        assert all(f.exists() for f in files)

    def test_json_camel_case(self, result, tmp_path):
        path = export_json(result, tmp_path / "result.json")
        data = json.loads(path.read_text())
        assert set(data) == {"totals", "breakdown", "monthly", "assumptions"}
        assert data["totals"] == {"hoursSaved": 100.0, "dollarsSaved": 1000.0}
        assert data["assumptions"]["licenseCost"] == 100000
        assert len(data["monthly"]) == 36

    def test_xlsx(self, result, tmp_path):
        path = export_xlsx(result, tmp_path / "result.xlsx")
        wb = load_workbook(path)
        assert wb.sheetnames == ["1_Totals", "2_Breakdown", "3_Monthly_ROI", "4_Assumptions"]
        assert wb["3_Monthly_ROI"].max_row == 37

    def test_charts(self, result, tmp_path):
        files = save_charts(result, tmp_path / "charts")
        assert [f.name for f in files] == ["roi_timeline.html", "savings_breakdown.html"]
        assert all(f.exists() for f in files)

    def test_timeline_trace(self, result):
        fig = create_roi_timeline(result)
        assert len(fig.data[0].x) == 36
