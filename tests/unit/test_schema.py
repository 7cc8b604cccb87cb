"""
Unit Tests for Field Schemas
"""
import pytest

from roi_engine.errors import LoadError
from roi_engine.models import CATEGORY_ORDER, FieldRole, RoiAssumptions, RoiInputs
from roi_engine.schema import (
    MONTHS,
    SCHEMA_V1,
    SCHEMA_V2,
    SCHEMAS,
    detect_schema,
)


@pytest.fixture(params=SCHEMAS, ids=lambda s: s.version)
def schema(request):
    return request.param


class TestSchemaCoverage:
    """Every model field is bound exactly once."""

    def test_inputs_bound(self, schema):
        assert {b.name for b in schema.inputs} == set(RoiInputs.model_fields)

    def test_assumptions_bound(self, schema):
        assert {b.name for b in schema.assumptions} == set(RoiAssumptions.model_fields)

    def test_addresses_unique(self, schema):
        addresses = [b.address for b in schema.fields]
        assert len(addresses) == len(set(addresses))

    def test_all_categories_bound(self, schema):
        assert [o.category for o in schema.outputs] == CATEGORY_ORDER

    def test_percent_fields(self, schema):
        assert {b.name for b in schema.percent_fields} == {
            "pct_tickets_migrated",
            "onboarding_efficiency_gain_pct",
            "efficiency_gain_pct",
        }

    def test_monthly_width(self, schema):
        assert schema.monthly.width == MONTHS == 36
        assert len(schema.monthly.columns()) == 36

    def test_unknown_field(self, schema):
        with pytest.raises(KeyError):
            schema.field("nope")


class TestV1Addresses:
    """Split-sheet layout."""

    def test_inputs(self):
        assert SCHEMA_V1.field("developers").address.qualified == "MODEL_INPUTS!B2"
        assert SCHEMA_V1.field("pct_tickets_migrated").address.qualified == "MODEL_INPUTS!B8"
        assert SCHEMA_V1.field("workflow_triggers_per_dev_per_month").address.qualified == "MODEL_INPUTS!B21"

    def test_assumptions(self):
        binding = SCHEMA_V1.field("adoption_months")
        assert binding.role == FieldRole.ASSUMPTION
        assert binding.address.qualified == "MODEL_INPUTS!E5"

    def test_outputs(self):
        agentic = SCHEMA_V1.output("agentic")
        assert agentic.hours.qualified == "MODEL_OUTPUTS!B11"
        assert agentic.dollars.qualified == "MODEL_OUTPUTS!B12"

    def test_monthly(self):
        layout = SCHEMA_V1.monthly
        first = layout.columns()[0]
        assert layout.month_cell(first).qualified == "MODEL_OUTPUTS!E1"
        assert layout.roi_cell(first).qualified == "MODEL_OUTPUTS!E2"


class TestV2Addresses:
    """Single-sheet layout."""

    def test_inputs(self):
        assert SCHEMA_V2.field("developers").address.qualified == "ROI_CALCULATOR!C4"
        assert SCHEMA_V2.field("efficiency_gain_pct").address.qualified == "ROI_CALCULATOR!C14"

    def test_assumptions(self):
        assert SCHEMA_V2.field("license_cost").address.qualified == "ROI_CALCULATOR!F4"

    def test_monthly(self):
        layout = SCHEMA_V2.monthly
        first = layout.columns()[0]
        last = layout.columns()[-1]
        assert layout.month_cell(first).qualified == "ROI_CALCULATOR!C30"
        assert layout.roi_cell(first).qualified == "ROI_CALCULATOR!C31"
        assert layout.roi_cell(last).qualified == "ROI_CALCULATOR!AL31"


class TestDetection:
    """Schema selection by marker sheets."""

    def test_detect_v1(self):
        assert detect_schema(["MODEL_INPUTS", "MODEL_OUTPUTS", "Notes"]) is SCHEMA_V1

    def test_detect_v2(self):
        assert detect_schema(["Cover", "ROI_CALCULATOR"]) is SCHEMA_V2

    def test_partial_marker(self):
        with pytest.raises(LoadError):
            detect_schema(["MODEL_INPUTS"])

    def test_no_marker(self):
        with pytest.raises(LoadError, match="recognised"):
            detect_schema(["Sheet1"])

    def test_ambiguous(self):
        with pytest.raises(LoadError, match="more than one"):
            detect_schema(["MODEL_INPUTS", "MODEL_OUTPUTS", "ROI_CALCULATOR"])
