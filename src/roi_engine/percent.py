"""
Percent Normalization

The UI always expresses percentages as 0-100. Workbooks store them either
as fractions (0-1) or as percents (0-100). The storage mode of each percent
field is decided once, right after load, from the workbook's shipped default:
a default <= 1 means fraction-stored. A default of exactly 0 cannot be told
apart from a fraction and is reported as ambiguous.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from roi_engine.models import PercentMode
from roi_engine.schema import FieldSchema
from roi_engine.session import FormulaEvaluationSession


logger = logging.getLogger(__name__)


def infer_percent_mode(default_raw: float) -> PercentMode:
    """Classify a shipped default value as fraction- or percent-stored."""
    return PercentMode.FRACTION if default_raw <= 1 else PercentMode.PERCENT


class PercentNormalizer:
    """Per-field percent storage modes, fixed for the lifetime of a session."""

    def __init__(self, modes: Mapping[str, PercentMode], ambiguous_fields: tuple[str, ...] = ()):
        self._modes = MappingProxyType(dict(modes))
        self.ambiguous_fields = tuple(ambiguous_fields)

    @classmethod
    def calibrate(cls, session: FormulaEvaluationSession, schema: FieldSchema) -> "PercentNormalizer":
        """Read each percent field's shipped default and fix its mode."""
        modes: dict[str, PercentMode] = {}
        ambiguous: list[str] = []
        for binding in schema.percent_fields:
            if binding.percent_mode is not None:
                modes[binding.name] = binding.percent_mode
                continue
            default_raw = session.read_number(binding.address)
            modes[binding.name] = infer_percent_mode(default_raw)
            if default_raw == 0:
                ambiguous.append(binding.name)
                logger.warning(
                    "Default of %s at %s is 0; assuming %s storage",
                    binding.name, binding.address, modes[binding.name].value,
                )
        logger.info(
            "Percent calibration: %s",
            ", ".join(f"{name}={mode.value}" for name, mode in modes.items()),
        )
        return cls(modes, tuple(ambiguous))

    @property
    def modes(self) -> Mapping[str, PercentMode]:
        return self._modes

    def to_raw(self, field: str, ui_value: float) -> float:
        """UI value (0-100) -> value to store in the workbook."""
        if self._modes[field] == PercentMode.FRACTION:
            return ui_value / 100
        return ui_value

    def to_ui(self, field: str, raw_value: float) -> float:
        """Workbook value -> UI value (0-100)."""
        if self._modes[field] == PercentMode.FRACTION:
            return raw_value * 100
        return raw_value
