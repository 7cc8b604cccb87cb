"""
ROI Input Validation

Range and finiteness checks run before a calculation ever reaches the
workbook. Every failure is collected as a human-readable message.
"""
from __future__ import annotations

import math

from roi_engine.errors import ValidationError
from roi_engine.models import RoiAssumptions, RoiInputs


INPUT_LABELS = {
    "developers": "Number of developers",
    "avg_yearly_loaded_cost": "Average developer loaded cost (yearly) ($)",
    "tickets_per_dev_per_month": "Tickets opened per dev per month",
    "avg_handling_time_hours": "Average handling time per ticket (hours)",
    "pct_tickets_migrated": "% tickets migrated to self-service",
    "devs_onboarded_per_year": "Devs onboarded per year",
    "time_to_onboard_weeks": "Time required to onboard a new developer (weeks)",
    "onboarding_efficiency_gain_pct": "Accelerated developer onboarding gain (%)",
    "senior_engineer_time_per_new_dev_hours": "Senior engineer time per new dev (hours)",
    "non_core_time_per_dev_per_month_hours": "Non-core time per dev per month (hrs)",
    "efficiency_gain_pct": "Efficiency gain with Port (%)",
    "agentic_workflows_live": "# agentic workflows live",
    "time_saved_per_workflow_trigger_hours": "Time saved per workflow trigger (hrs)",
    "workflow_triggers_per_dev_per_month": "Workflow triggers per dev per month",
}

ASSUMPTION_LABELS = {
    "license_cost": "Yearly license cost",
    "port_fte": "Full Time Engineers dedicated to IDP",
    "launch_offset": "Launch offset (months)",
    "adoption_months": "Months to reach 100% adoption",
}

# field -> (upper bound, message)
PERCENT_BOUNDS = {
    "pct_tickets_migrated": (100, "% tickets migrated must be between 0 and 100."),
    "onboarding_efficiency_gain_pct": (90, "Accelerated developer onboarding gain must be between 0 and 90."),
    "efficiency_gain_pct": (100, "Efficiency gain must be between 0 and 100."),
}


def _check_non_negative(value: float, label: str, errors: list[str]) -> bool:
    if not math.isfinite(value):
        errors.append(f"{label} must be a number.")
        return False
    if value < 0:
        errors.append(f"{label} must be ≥ 0.")
    return True


def validate_inputs(inputs: RoiInputs) -> list[str]:
    """Return every problem with the inputs; empty when valid."""
    errors: list[str] = []
    for name, label in INPUT_LABELS.items():
        value = getattr(inputs, name)
        finite = _check_non_negative(value, label, errors)
        if finite and name in PERCENT_BOUNDS:
            upper, message = PERCENT_BOUNDS[name]
            if value < 0 or value > upper:
                errors.append(message)
    return errors


def validate_assumptions(assumptions: RoiAssumptions) -> list[str]:
    """Return every problem with the assumptions; empty when valid."""
    errors: list[str] = []
    for name, label in ASSUMPTION_LABELS.items():
        _check_non_negative(getattr(assumptions, name), label, errors)
    return errors


def ensure_valid(inputs: RoiInputs, assumptions: RoiAssumptions) -> None:
    """
    Raise ValidationError listing all input and assumption problems.
    """
    errors = validate_inputs(inputs) + validate_assumptions(assumptions)
    if errors:
        raise ValidationError(errors)


def clamp_number(value: float, minimum: float = -math.inf, maximum: float = math.inf) -> float:
    """Clamp into [minimum, maximum]; non-finite values become minimum."""
    if not math.isfinite(value):
        return minimum
    return min(maximum, max(minimum, value))
