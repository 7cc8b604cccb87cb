"""
ROI Engine Core Data Models

Pydantic models for calculator inputs, assumptions and results, plus the
immutable workbook snapshot the evaluation session is built from.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


CellContent = Union[float, int, bool, str, None]

CATEGORY_ORDER = ["ticketops", "onboarding", "efficiency", "agentic"]


class PercentMode(str, Enum):
    """How a percentage field is stored in the workbook."""
    FRACTION = "fraction"   # 0-1
    PERCENT = "percent"     # 0-100


class EngineState(str, Enum):
    """Lifecycle of an engine facade."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    CALCULATING = "calculating"
    LOAD_FAILED = "load_failed"


class FieldRole(str, Enum):
    """Which user-facing group a bound field belongs to."""
    INPUT = "input"
    ASSUMPTION = "assumption"


# ============================================================================
# WORKBOOK SNAPSHOT
# ============================================================================

def is_formula(value: CellContent) -> bool:
    return isinstance(value, str) and value.startswith("=")


@dataclass(frozen=True)
class WorkbookModel:
    """
    Sheet name -> rectangular matrix of cell contents.

    Formula cells hold their source text prefixed with "=", never a cached
    value. Every row of a sheet has the same length.
    """
    sheets: Mapping[str, tuple[tuple[CellContent, ...], ...]]

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def dimensions(self, sheet: str) -> tuple[int, int]:
        """(rows, cols) of a sheet's matrix."""
        matrix = self.sheets[sheet]
        return len(matrix), len(matrix[0]) if matrix else 0

    def cell(self, sheet: str, row: int, col: int) -> CellContent:
        """Content at a zero-based location; None outside the used range."""
        matrix = self.sheets[sheet]
        if row >= len(matrix) or col >= len(matrix[row]):
            return None
        return matrix[row][col]


# ============================================================================
# INPUT MODELS
# ============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoiInputs(_CamelModel):
    """User-editable business parameters, in UI units (percentages 0-100)."""
    developers: float = Field(..., description="Number of developers")
    avg_yearly_loaded_cost: float = Field(..., description="Average developer loaded cost per year ($)")

    # TicketOps / self-service
    tickets_per_dev_per_month: float = Field(..., description="Tickets opened per dev per month")
    avg_handling_time_hours: float = Field(..., description="Average handling time per ticket (hours)")
    pct_tickets_migrated: float = Field(..., description="% tickets migrated to self-service (0-100)")

    # Onboarding
    devs_onboarded_per_year: float = Field(..., description="Devs onboarded per year")
    time_to_onboard_weeks: float = Field(..., description="Time required to onboard a new developer (weeks)")
    onboarding_efficiency_gain_pct: float = Field(..., description="Onboarding efficiency gain (0-100)")
    senior_engineer_time_per_new_dev_hours: float = Field(..., description="Senior engineer time per new dev (hours)")

    # Efficiency
    non_core_time_per_dev_per_month_hours: float = Field(..., description="Non-core time per dev per month (hours)")
    efficiency_gain_pct: float = Field(..., description="Efficiency gain with the platform (0-100)")

    # Agentic workflows
    agentic_workflows_live: float = Field(..., description="Number of agentic workflows live")
    time_saved_per_workflow_trigger_hours: float = Field(..., description="Time saved per workflow trigger (hours)")
    workflow_triggers_per_dev_per_month: float = Field(..., description="Workflow triggers per dev per month")


class RoiAssumptions(_CamelModel):
    """Editable model assumptions."""
    license_cost: float = Field(..., description="Yearly license cost ($)")
    port_fte: float = Field(..., description="Full time engineers dedicated to the platform")
    launch_offset: float = Field(..., description="Launch month offset")
    adoption_months: float = Field(..., description="Months to reach 100% adoption")


class InitialState(BaseModel):
    """Workbook-authored defaults used to seed a form."""
    inputs: RoiInputs
    assumptions: RoiAssumptions


# ============================================================================
# OUTPUT MODELS
# ============================================================================

class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class UseCaseResult(_FrozenCamelModel):
    """Annual savings of one breakdown category."""
    hours_saved: float
    dollars_saved: float


class MonthlyPoint(_FrozenCamelModel):
    """One month of the cumulative return series."""
    month: float
    roi: float


class CalculationResult(_FrozenCamelModel):
    """Outcome of one calculate() call."""
    totals: UseCaseResult
    breakdown: dict[str, UseCaseResult]
    monthly: tuple[MonthlyPoint, ...]
    assumptions: RoiAssumptions

    @property
    def payback_month(self) -> Optional[float]:
        """First month whose cumulative return is non-negative, if any."""
        for point in self.monthly:
            if point.roi >= 0:
                return point.month
        return None
