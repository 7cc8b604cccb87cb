"""
Result Extraction

Reads the schema's fixed output cells into a CalculationResult.
"""
from __future__ import annotations

from roi_engine.models import MonthlyPoint, RoiAssumptions, CalculationResult, UseCaseResult
from roi_engine.schema import FieldSchema
from roi_engine.session import FormulaEvaluationSession


class ResultExtractor:
    """Builds results from a settled session; never infers addresses."""

    def __init__(self, schema: FieldSchema):
        self.schema = schema

    def read_breakdown(self, session: FormulaEvaluationSession) -> dict[str, UseCaseResult]:
        return {
            binding.category: UseCaseResult(
                hours_saved=session.read_number(binding.hours),
                dollars_saved=session.read_number(binding.dollars),
            )
            for binding in self.schema.outputs
        }

    @staticmethod
    def sum_totals(breakdown: dict[str, UseCaseResult]) -> UseCaseResult:
        """Totals are the plain sum of the categories, not a workbook cell."""
        return UseCaseResult(
            hours_saved=sum(item.hours_saved for item in breakdown.values()),
            dollars_saved=sum(item.dollars_saved for item in breakdown.values()),
        )

    def read_monthly(self, session: FormulaEvaluationSession) -> tuple[MonthlyPoint, ...]:
        """Exactly layout.width points, whatever the formulas evaluate to."""
        layout = self.schema.monthly
        points = []
        for idx, col in enumerate(layout.columns()):
            points.append(MonthlyPoint(
                month=session.read_number(layout.month_cell(col), default=idx + 1),
                roi=session.read_number(layout.roi_cell(col)),
            ))
        return tuple(points)

    def extract(self, session: FormulaEvaluationSession, assumptions: RoiAssumptions) -> CalculationResult:
        breakdown = self.read_breakdown(session)
        return CalculationResult(
            totals=self.sum_totals(breakdown),
            breakdown=breakdown,
            monthly=self.read_monthly(session),
            assumptions=assumptions,
        )
