"""
ROI I/O Writers

Export calculation results to CSV, JSON and XLSX formats.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from roi_engine.models import CATEGORY_ORDER, CalculationResult
from roi_engine.validation import ASSUMPTION_LABELS


CATEGORY_LABELS = {
    "ticketops": "Ticket Operations",
    "onboarding": "Onboarding",
    "efficiency": "Developer Efficiency",
    "agentic": "Agentic Workflows",
}


def _create_totals_table(result: CalculationResult) -> pd.DataFrame:
    """Create headline totals table."""
    payback = result.payback_month
    data = [
        ["Hours Saved (annual)", result.totals.hours_saved],
        ["Dollars Saved (annual)", result.totals.dollars_saved],
        ["Month 36 Cumulative ROI", result.monthly[-1].roi if result.monthly else 0.0],
        ["Payback Month", payback if payback is not None else "n/a"],
    ]
    return pd.DataFrame(data, columns=["Metric", "Value"])


def _create_breakdown_table(result: CalculationResult) -> pd.DataFrame:
    """Create per-category savings table."""
    rows = []
    for category in CATEGORY_ORDER:
        item = result.breakdown[category]
        rows.append({
            "Category": CATEGORY_LABELS[category],
            "Hours Saved": item.hours_saved,
            "Dollars Saved": item.dollars_saved,
        })
    return pd.DataFrame(rows)


def _create_monthly_table(result: CalculationResult) -> pd.DataFrame:
    """Create cumulative ROI series table."""
    return pd.DataFrame(
        [{"Month": p.month, "Cumulative ROI": p.roi} for p in result.monthly]
    )


def _create_assumptions_table(result: CalculationResult) -> pd.DataFrame:
    """Create echoed assumptions table."""
    values = result.assumptions.model_dump()
    data = [[ASSUMPTION_LABELS[name], value] for name, value in values.items()]
    return pd.DataFrame(data, columns=["Assumption", "Value"])


def format_tables(result: CalculationResult) -> dict[str, pd.DataFrame]:
    """
    Convert a calculation result to display-ready DataFrames.

    Returns:
        Dict mapping table name to DataFrame
    """
    return {
        "1_Totals": _create_totals_table(result),
        "2_Breakdown": _create_breakdown_table(result),
        "3_Monthly_ROI": _create_monthly_table(result),
        "4_Assumptions": _create_assumptions_table(result),
    }


def _style_xlsx_sheet(ws) -> None:
    """Apply styling to Excel worksheet."""
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="2E75B6", end_color="2E75B6", fill_type="solid")
    thin_border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )

    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin_border
        cell.alignment = Alignment(horizontal="center")

    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, max_col=ws.max_column):
        for cell in row:
            cell.border = thin_border
            if isinstance(cell.value, float):
                cell.number_format = "#,##0.00"

    for col in range(1, ws.max_column + 1):
        max_length = 0
        for row in ws.iter_rows(min_col=col, max_col=col, max_row=ws.max_row):
            value = row[0].value
            if value is not None:
                max_length = max(max_length, len(str(value)))
        ws.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 40)


def export_xlsx(result: CalculationResult, path: str | Path) -> Path:
    """
    Export result tables to an Excel file, one sheet per table.

    Values only; the source workbook keeps the formulas.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    wb.remove(wb.active)
    for table_name, df in format_tables(result).items():
        ws = wb.create_sheet(title=table_name)
        for row in dataframe_to_rows(df, index=False, header=True):
            ws.append(row)
        _style_xlsx_sheet(ws)
    wb.save(path)
    return path


def export_csv(result: CalculationResult, output_dir: str | Path) -> list[Path]:
    """
    Export a calculation result to CSV files (one per table).

    Args:
        result: Calculation result to export
        output_dir: Directory to write CSV files

    Returns:
        List of created file paths
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    tables = format_tables(result)
    created_files = []

    for table_name, df in tables.items():
        file_path = output_dir / f"{table_name}.csv"
        df.to_csv(file_path, index=False)
        created_files.append(file_path)

    return created_files


def export_json(result: CalculationResult, path: str | Path) -> Path:
    """Write the result as camelCase JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(by_alias=True, indent=2))
    return path
