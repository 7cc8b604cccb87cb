"""
ROI I/O Readers

YAML and JSON scenario file parsing. A scenario is a partial override of
the workbook's authored defaults:

    inputs:
      developers: 120
      pctTicketsMigrated: 40
    assumptions:
      licenseCost: 150000
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from roi_engine.models import InitialState, RoiAssumptions, RoiInputs


class Scenario(BaseModel):
    """Field overrides keyed by snake_case field name."""
    inputs: dict[str, float] = Field(default_factory=dict)
    assumptions: dict[str, float] = Field(default_factory=dict)


def _key_map(model: type[BaseModel]) -> dict[str, str]:
    """Accepted key (snake_case name or camelCase alias) -> field name."""
    keys = {}
    for name, info in model.model_fields.items():
        keys[name] = name
        if info.alias:
            keys[info.alias] = name
    return keys


_INPUT_KEYS = _key_map(RoiInputs)
_ASSUMPTION_KEYS = _key_map(RoiAssumptions)


def _resolve_section(data: dict | None, keys: dict[str, str], section: str) -> dict[str, float]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Scenario section '{section}' must be a mapping")
    resolved = {}
    for key, value in data.items():
        if key not in keys:
            raise ValueError(f"Unknown {section} field: {key}")
        resolved[keys[key]] = value
    return resolved


def parse_scenario_dict(data: dict[str, Any] | None) -> Scenario:
    """
    Parse a raw scenario dictionary.

    Raises:
        ValueError: on a non-mapping document, unknown sections or field names
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Scenario must be a mapping, not {type(data).__name__}")
    unknown = set(data) - {"inputs", "assumptions"}
    if unknown:
        raise ValueError(f"Unknown scenario sections: {sorted(unknown)}")
    return Scenario(
        inputs=_resolve_section(data.get("inputs"), _INPUT_KEYS, "inputs"),
        assumptions=_resolve_section(data.get("assumptions"), _ASSUMPTION_KEYS, "assumptions"),
    )


def parse_assignment(text: str) -> tuple[str, str, float]:
    """
    Parse a command-line override such as "pctTicketsMigrated=40".

    Returns:
        (section, field name, value) with section "inputs" or "assumptions"
    """
    key, sep, raw = text.partition("=")
    key = key.strip()
    if not sep:
        raise ValueError(f"Expected key=value, got {text!r}")
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"Value for {key} is not a number: {raw!r}") from e
    if key in _INPUT_KEYS:
        return "inputs", _INPUT_KEYS[key], value
    if key in _ASSUMPTION_KEYS:
        return "assumptions", _ASSUMPTION_KEYS[key], value
    raise ValueError(f"Unknown field: {key}")


def apply_scenario(initial: InitialState, scenario: Scenario) -> tuple[RoiInputs, RoiAssumptions]:
    """Overlay scenario overrides on the workbook defaults."""
    inputs = RoiInputs(**{**initial.inputs.model_dump(), **scenario.inputs})
    assumptions = RoiAssumptions(**{**initial.assumptions.model_dump(), **scenario.assumptions})
    return inputs, assumptions


def read_yaml(path: str | Path) -> Scenario:
    """
    Read a scenario from a YAML file.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    return parse_scenario_dict(data)


def read_json(path: str | Path) -> Scenario:
    """
    Read a scenario from a JSON file.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = json.load(f)
    return parse_scenario_dict(data)


def read_scenario_file(path: str | Path) -> Scenario:
    """
    Read a scenario from a file (auto-detects format).

    Args:
        path: Path to scenario file (YAML or JSON)

    Returns:
        Scenario
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return read_yaml(path)
    elif suffix == ".json":
        return read_json(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")
