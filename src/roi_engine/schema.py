"""
ROI Workbook Field Schemas

Versioned, fixed bindings from logical field names to workbook cells.
A schema is selected once per workbook by its marker sheets; exactly one
registered schema may match.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from roi_engine.addressing import CellAddress, column_to_index
from roi_engine.errors import LoadError
from roi_engine.models import FieldRole, PercentMode


MONTHS = 36


@dataclass(frozen=True)
class FieldBinding:
    """A user-editable field bound to one workbook cell."""
    name: str
    address: CellAddress
    role: FieldRole = FieldRole.INPUT
    percent: bool = False
    # Explicit storage mode; None means infer from the shipped default
    percent_mode: Optional[PercentMode] = None


@dataclass(frozen=True)
class OutputBinding:
    """Hours and dollars output cells of one breakdown category."""
    category: str
    hours: CellAddress
    dollars: CellAddress


@dataclass(frozen=True)
class MonthlySeriesLayout:
    """Contiguous column range holding month labels and cumulative return."""
    sheet: str
    month_row: int
    roi_row: int
    start_col: int
    width: int = MONTHS

    def columns(self) -> range:
        return range(self.start_col, self.start_col + self.width)

    def month_cell(self, col: int) -> CellAddress:
        return CellAddress(self.sheet, self.month_row, col)

    def roi_cell(self, col: int) -> CellAddress:
        return CellAddress(self.sheet, self.roi_row, col)


@dataclass(frozen=True)
class FieldSchema:
    """Complete cell map of one workbook layout version."""
    version: str
    marker_sheets: tuple[str, ...]
    fields: tuple[FieldBinding, ...]
    outputs: tuple[OutputBinding, ...]
    monthly: MonthlySeriesLayout

    def matches(self, sheet_names: Iterable[str]) -> bool:
        names = set(sheet_names)
        return all(marker in names for marker in self.marker_sheets)

    @property
    def inputs(self) -> tuple[FieldBinding, ...]:
        return tuple(f for f in self.fields if f.role == FieldRole.INPUT)

    @property
    def assumptions(self) -> tuple[FieldBinding, ...]:
        return tuple(f for f in self.fields if f.role == FieldRole.ASSUMPTION)

    @property
    def percent_fields(self) -> tuple[FieldBinding, ...]:
        return tuple(f for f in self.fields if f.percent)

    def field(self, name: str) -> FieldBinding:
        for binding in self.fields:
            if binding.name == name:
                return binding
        raise KeyError(f"Schema {self.version} has no field {name!r}")

    def output(self, category: str) -> OutputBinding:
        for binding in self.outputs:
            if binding.category == category:
                return binding
        raise KeyError(f"Schema {self.version} has no category {category!r}")


def _bind(sheet: str, role: FieldRole, rows: list[tuple[str, str, bool]]) -> list[FieldBinding]:
    return [
        FieldBinding(name=name, address=CellAddress.from_a1(sheet, a1), role=role, percent=percent)
        for name, a1, percent in rows
    ]


def _outputs(sheet: str, rows: list[tuple[str, str, str]]) -> tuple[OutputBinding, ...]:
    return tuple(
        OutputBinding(
            category=category,
            hours=CellAddress.from_a1(sheet, hours),
            dollars=CellAddress.from_a1(sheet, dollars),
        )
        for category, hours, dollars in rows
    )


# ============================================================================
# V1: MODEL_INPUTS / MODEL_OUTPUTS
# ============================================================================

V1_INPUTS_SHEET = "MODEL_INPUTS"
V1_OUTPUTS_SHEET = "MODEL_OUTPUTS"

SCHEMA_V1 = FieldSchema(
    version="v1",
    marker_sheets=(V1_INPUTS_SHEET, V1_OUTPUTS_SHEET),
    fields=tuple(
        _bind(V1_INPUTS_SHEET, FieldRole.INPUT, [
            ("developers", "B2", False),
            ("avg_yearly_loaded_cost", "B3", False),
            ("tickets_per_dev_per_month", "B6", False),
            ("avg_handling_time_hours", "B7", False),
            ("pct_tickets_migrated", "B8", True),
            ("devs_onboarded_per_year", "B10", False),
            # Weeks, see MODEL_INPUTS!A11
            ("time_to_onboard_weeks", "B11", False),
            ("onboarding_efficiency_gain_pct", "B12", True),
            ("senior_engineer_time_per_new_dev_hours", "B13", False),
            ("non_core_time_per_dev_per_month_hours", "B15", False),
            ("efficiency_gain_pct", "B16", True),
            ("agentic_workflows_live", "B19", False),
            ("time_saved_per_workflow_trigger_hours", "B20", False),
            ("workflow_triggers_per_dev_per_month", "B21", False),
        ])
        + _bind(V1_INPUTS_SHEET, FieldRole.ASSUMPTION, [
            ("license_cost", "E2", False),
            ("port_fte", "E3", False),
            ("launch_offset", "E4", False),
            ("adoption_months", "E5", False),
        ])
    ),
    outputs=_outputs(V1_OUTPUTS_SHEET, [
        ("ticketops", "B2", "B3"),
        ("onboarding", "B5", "B6"),
        ("efficiency", "B8", "B9"),
        ("agentic", "B11", "B12"),
    ]),
    monthly=MonthlySeriesLayout(
        sheet=V1_OUTPUTS_SHEET,
        month_row=0,
        roi_row=1,
        start_col=column_to_index("E"),
    ),
)


# ============================================================================
# V2: single ROI_CALCULATOR sheet
# ============================================================================

V2_SHEET = "ROI_CALCULATOR"

SCHEMA_V2 = FieldSchema(
    version="v2",
    marker_sheets=(V2_SHEET,),
    fields=tuple(
        _bind(V2_SHEET, FieldRole.INPUT, [
            ("developers", "C4", False),
            ("avg_yearly_loaded_cost", "C5", False),
            ("tickets_per_dev_per_month", "C6", False),
            ("avg_handling_time_hours", "C7", False),
            ("pct_tickets_migrated", "C8", True),
            ("devs_onboarded_per_year", "C9", False),
            ("time_to_onboard_weeks", "C10", False),
            ("onboarding_efficiency_gain_pct", "C11", True),
            ("senior_engineer_time_per_new_dev_hours", "C12", False),
            ("non_core_time_per_dev_per_month_hours", "C13", False),
            ("efficiency_gain_pct", "C14", True),
            ("agentic_workflows_live", "C15", False),
            ("time_saved_per_workflow_trigger_hours", "C16", False),
            ("workflow_triggers_per_dev_per_month", "C17", False),
        ])
        + _bind(V2_SHEET, FieldRole.ASSUMPTION, [
            ("license_cost", "F4", False),
            ("port_fte", "F5", False),
            ("launch_offset", "F6", False),
            ("adoption_months", "F7", False),
        ])
    ),
    outputs=_outputs(V2_SHEET, [
        ("ticketops", "I4", "I5"),
        ("onboarding", "I6", "I7"),
        ("efficiency", "I8", "I9"),
        ("agentic", "I10", "I11"),
    ]),
    monthly=MonthlySeriesLayout(
        sheet=V2_SHEET,
        month_row=29,
        roi_row=30,
        start_col=column_to_index("C"),
    ),
)


SCHEMAS: tuple[FieldSchema, ...] = (SCHEMA_V1, SCHEMA_V2)


def detect_schema(sheet_names: Iterable[str], schemas: Iterable[FieldSchema] = SCHEMAS) -> FieldSchema:
    """
    Select the single schema whose marker sheets are present.

    Raises:
        LoadError: if no schema, or more than one, matches
    """
    names = list(sheet_names)
    matching = [schema for schema in schemas if schema.matches(names)]
    if not matching:
        raise LoadError(
            f"Workbook does not contain a recognised ROI model (sheets found: {names})"
        )
    if len(matching) > 1:
        versions = ", ".join(schema.version for schema in matching)
        raise LoadError(f"Workbook matches more than one ROI model layout ({versions})")
    return matching[0]

