"""
Reference ROI Workbook

Authors the formula-driven ROI model in either supported layout. The
engine never depends on these formulas; any workbook that follows a
registered schema works. This module supplies the shipped model and test
fixtures.
"""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Mapping, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from roi_engine.addressing import CellAddress, index_to_column
from roi_engine.models import CellContent
from roi_engine.schema import SCHEMA_V1, SCHEMA_V2, FieldSchema
from roi_engine.validation import ASSUMPTION_LABELS, INPUT_LABELS


# Shipped defaults in UI units (percentages 0-100)
DEFAULT_INPUTS: dict[str, float] = {
    "developers": 50,
    "avg_yearly_loaded_cost": 200000,
    "tickets_per_dev_per_month": 4,
    "avg_handling_time_hours": 0.75,
    "pct_tickets_migrated": 25,
    "devs_onboarded_per_year": 12,
    "time_to_onboard_weeks": 2,
    "onboarding_efficiency_gain_pct": 30,
    "senior_engineer_time_per_new_dev_hours": 10,
    "non_core_time_per_dev_per_month_hours": 16,
    "efficiency_gain_pct": 10,
    "agentic_workflows_live": 5,
    "time_saved_per_workflow_trigger_hours": 0.25,
    "workflow_triggers_per_dev_per_month": 8,
}

DEFAULT_ASSUMPTIONS: dict[str, float] = {
    "license_cost": 100000,
    "port_fte": 1,
    "launch_offset": 2,
    "adoption_months": 6,
}

HOURS_PER_YEAR = 2080
HOURS_PER_WEEK = 40

LAYOUTS: dict[str, FieldSchema] = {"v1": SCHEMA_V1, "v2": SCHEMA_V2}

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="2E75B6", end_color="2E75B6", fill_type="solid")
_INPUT_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
_SECTION_FONT = Font(bold=True)
_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


def _style_header(ws, cells: list[str]) -> None:
    for ref in cells:
        cell = ws[ref]
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _BORDER
        cell.alignment = Alignment(horizontal="center")


def _write_bound_fields(
    ws,
    schema: FieldSchema,
    values: Mapping[str, float],
    percent_scale: float,
) -> None:
    """Write labels (one column left) and default values of every bound field."""
    for binding in schema.fields:
        if binding.address.sheet != ws.title:
            continue
        value = values[binding.name]
        if binding.percent:
            value = value / percent_scale
        cell = ws.cell(row=binding.address.row + 1, column=binding.address.col + 1, value=value)
        cell.fill = _INPUT_FILL
        cell.border = _BORDER
        label = INPUT_LABELS.get(binding.name) or ASSUMPTION_LABELS[binding.name]
        ws.cell(row=binding.address.row + 1, column=binding.address.col, value=label)


def _write_monthly_series(ws, schema: FieldSchema, net_formula) -> None:
    """
    Month labels, net monthly benefit and cumulative return rows.

    net_formula(col_letter) returns the net benefit formula of one month.
    """
    layout = schema.monthly
    month_row = layout.month_row + 1
    roi_row = layout.roi_row + 1
    net_row = roi_row + 1
    label_col = layout.start_col
    ws.cell(row=month_row, column=label_col, value="Month")
    ws.cell(row=roi_row, column=label_col, value="Cumulative ROI")
    ws.cell(row=net_row, column=label_col, value="Net monthly benefit")

    previous = None
    for col in layout.columns():
        letter = index_to_column(col)
        if previous is None:
            ws[f"{letter}{month_row}"] = 1
            ws[f"{letter}{roi_row}"] = f"={letter}{net_row}"
        else:
            ws[f"{letter}{month_row}"] = f"={previous}{month_row}+1"
            ws[f"{letter}{roi_row}"] = f"={previous}{roi_row}+{letter}{net_row}"
        ws[f"{letter}{net_row}"] = net_formula(letter)
        ws[f"{letter}{roi_row}"].number_format = "#,##0"
        previous = letter


def _build_v1(wb: Workbook, inputs: Mapping[str, float], assumptions: Mapping[str, float]) -> None:
    schema = SCHEMA_V1
    ws_in = wb.create_sheet("MODEL_INPUTS")
    ws_out = wb.create_sheet("MODEL_OUTPUTS")

    ws_in["A1"] = "Parameter"
    ws_in["B1"] = "Value"
    ws_in["D1"] = "Assumption"
    ws_in["E1"] = "Value"
    ws_in["G1"] = "Applied"
    _style_header(ws_in, ["A1", "B1", "D1", "E1", "G1"])

    _write_bound_fields(ws_in, schema, {**inputs, **assumptions}, percent_scale=100)
    ws_in["A4"] = "Hourly loaded cost ($)"
    ws_in["B4"] = f"=B3/{HOURS_PER_YEAR}"
    ws_in["A5"] = "from ticketops to Self Service"
    ws_in["A9"] = "Developer onboarding"
    ws_in["A14"] = "Developer Efficiency Gains"
    ws_in["A18"] = "Manual tasks to Agentic Workflows"
    for ref in ("A5", "A9", "A14", "A18"):
        ws_in[ref].font = _SECTION_FONT

    # Assumptions as the model applies them
    ws_in["G2"] = "=MAX(0,E2)"
    ws_in["G3"] = "=MAX(0,E3)"
    ws_in["G4"] = "=ROUND(MAX(0,E4),0)"
    ws_in["G5"] = "=MAX(1,ROUND(E5,0))"

    inp = "MODEL_INPUTS!"
    ws_out["A1"] = "Use case"
    ws_out["B1"] = "Annual"
    _style_header(ws_out, ["A1", "B1"])
    rows = [
        ("A2", "TicketOps hours saved", "B2",
         f"={inp}B2*{inp}B6*12*{inp}B7*{inp}B8"),
        ("A3", "TicketOps $ saved", "B3", f"=B2*{inp}B4"),
        ("A5", "Onboarding hours saved", "B5",
         f"={inp}B10*({inp}B11*{HOURS_PER_WEEK}+{inp}B13)*{inp}B12"),
        ("A6", "Onboarding $ saved", "B6", f"=B5*{inp}B4"),
        ("A8", "Efficiency hours saved", "B8",
         f"={inp}B2*{inp}B15*12*{inp}B16"),
        ("A9", "Efficiency $ saved", "B9", f"=B8*{inp}B4"),
        ("A11", "Agentic hours saved", "B11",
         f"=IF({inp}B19>0,{inp}B2*{inp}B21*{inp}B20*12,0)"),
        ("A12", "Agentic $ saved", "B12", f"=B11*{inp}B4"),
        ("A14", "Total $ saved", "B14", "=B3+B6+B9+B12"),
        ("A15", "Monthly platform cost", "B15", f"=({inp}G2+{inp}G3*{inp}B3)/12"),
    ]
    for label_ref, label, value_ref, formula in rows:
        ws_out[label_ref] = label
        ws_out[value_ref] = formula
        ws_out[value_ref].number_format = "#,##0.00"

    def net(letter: str) -> str:
        return (
            f"=$B$14/12*IF({letter}$1<={inp}$G$4,0,"
            f"MIN(1,({letter}$1-{inp}$G$4)/{inp}$G$5))-$B$15"
        )

    _write_monthly_series(ws_out, schema, net)


def _build_v2(wb: Workbook, inputs: Mapping[str, float], assumptions: Mapping[str, float]) -> None:
    schema = SCHEMA_V2
    ws = wb.create_sheet("ROI_CALCULATOR")
    ws["A1"] = "Port ROI Calculator"
    ws["A1"].font = Font(bold=True, size=14)

    ws["B3"] = "Input"
    ws["C3"] = "Value"
    ws["E3"] = "Assumption"
    ws["F3"] = "Value"
    ws["H3"] = "Output"
    ws["I3"] = "Annual"
    ws["J3"] = "Model"
    ws["K3"] = "Value"
    _style_header(ws, ["B3", "C3", "E3", "F3", "H3", "I3", "J3", "K3"])

    # Percent fields are authored on a 0-100 scale in this layout
    _write_bound_fields(ws, schema, {**inputs, **assumptions}, percent_scale=1)

    calc = [
        ("J4", "Hourly loaded cost ($)", "K4", f"=C5/{HOURS_PER_YEAR}"),
        ("J5", "Applied license cost", "K5", "=MAX(0,F4)"),
        ("J6", "Applied FTE", "K6", "=MAX(0,F5)"),
        ("J7", "Applied launch offset", "K7", "=ROUND(MAX(0,F6),0)"),
        ("J8", "Applied adoption months", "K8", "=MAX(1,ROUND(F7,0))"),
        ("J9", "Total $ saved", "K9", "=I5+I7+I9+I11"),
        ("J10", "Monthly platform cost", "K10", "=(K5+K6*C5)/12"),
    ]
    outputs = [
        ("H4", "TicketOps hours saved", "I4", "=C4*C6*12*C7*C8/100"),
        ("H5", "TicketOps $ saved", "I5", "=I4*K4"),
        ("H6", "Onboarding hours saved", "I6", f"=C9*(C10*{HOURS_PER_WEEK}+C12)*C11/100"),
        ("H7", "Onboarding $ saved", "I7", "=I6*K4"),
        ("H8", "Efficiency hours saved", "I8", "=C4*C13*12*C14/100"),
        ("H9", "Efficiency $ saved", "I9", "=I8*K4"),
        ("H10", "Agentic hours saved", "I10", "=IF(C15>0,C4*C17*C16*12,0)"),
        ("H11", "Agentic $ saved", "I11", "=I10*K4"),
    ]
    for label_ref, label, value_ref, formula in calc + outputs:
        ws[label_ref] = label
        ws[value_ref] = formula
        ws[value_ref].number_format = "#,##0.00"

    def net(letter: str) -> str:
        row = schema.monthly.month_row + 1
        return f"=$K$9/12*IF({letter}${row}<=$K$7,0,MIN(1,({letter}${row}-$K$7)/$K$8))-$K$10"

    _write_monthly_series(ws, schema, net)


def build_reference_workbook(
    layout: str = "v1",
    *,
    inputs: Optional[Mapping[str, float]] = None,
    assumptions: Optional[Mapping[str, float]] = None,
    cell_overrides: Optional[Mapping[str, CellContent]] = None,
) -> Workbook:
    """
    Build the reference ROI model.

    Args:
        layout: "v1" (MODEL_INPUTS/MODEL_OUTPUTS) or "v2" (ROI_CALCULATOR)
        inputs: Default input overrides in UI units
        assumptions: Default assumption overrides
        cell_overrides: Raw content for sheet-qualified cells ("MODEL_OUTPUTS!G2"),
            applied last

    Returns:
        openpyxl Workbook
    """
    if layout not in LAYOUTS:
        raise ValueError(f"layout must be one of {sorted(LAYOUTS)}")

    input_values = {**DEFAULT_INPUTS, **(inputs or {})}
    assumption_values = {**DEFAULT_ASSUMPTIONS, **(assumptions or {})}

    wb = Workbook()
    wb.remove(wb.active)
    if layout == "v1":
        _build_v1(wb, input_values, assumption_values)
    else:
        _build_v2(wb, input_values, assumption_values)

    for ref, value in (cell_overrides or {}).items():
        address = CellAddress.parse(ref)
        wb[address.sheet].cell(row=address.row + 1, column=address.col + 1, value=value)

    for ws in wb.worksheets:
        ws.column_dimensions["A"].width = 48 if ws.title != "ROI_CALCULATOR" else 28
    return wb


def save_reference_workbook(path: str | Path, layout: str = "v1", **kwargs) -> Path:
    """Write the reference ROI model to an .xlsx file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_reference_workbook(layout, **kwargs).save(path)
    return path


def reference_workbook_bytes(layout: str = "v1", **kwargs) -> bytes:
    """The reference ROI model serialized to .xlsx bytes."""
    buffer = BytesIO()
    build_reference_workbook(layout, **kwargs).save(buffer)
    return buffer.getvalue()
