"""
ROI Workbook Engine

Spreadsheet-backed savings calculator:
- Schema-driven binding of named fields to fixed workbook cells
- Percent storage calibration per workbook
- Formula re-evaluation through pycel
- Category totals and a 36-month cumulative return series
"""
from roi_engine.engine import RoiEngine, run_calculation
from roi_engine.errors import (
    AddressError,
    CalculationError,
    EngineStateError,
    LoadCancelled,
    LoadError,
    RoiEngineError,
    ValidationError,
)
from roi_engine.models import (
    CalculationResult,
    EngineState,
    InitialState,
    MonthlyPoint,
    PercentMode,
    RoiAssumptions,
    RoiInputs,
    UseCaseResult,
)
from roi_engine.validation import validate_assumptions, validate_inputs

__all__ = [
    "RoiEngine",
    "run_calculation",
    "RoiEngineError",
    "AddressError",
    "LoadError",
    "LoadCancelled",
    "ValidationError",
    "CalculationError",
    "EngineStateError",
    "CalculationResult",
    "EngineState",
    "InitialState",
    "MonthlyPoint",
    "PercentMode",
    "RoiAssumptions",
    "RoiInputs",
    "UseCaseResult",
    "validate_inputs",
    "validate_assumptions",
]
