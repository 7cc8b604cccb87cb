"""
Shared fixtures: reference workbooks authored in both layouts.
"""
import pytest

from roi_engine.engine import RoiEngine
from roi_io.template import reference_workbook_bytes, save_reference_workbook


@pytest.fixture(scope="session")
def v1_bytes():
    return reference_workbook_bytes("v1")


@pytest.fixture(scope="session")
def v2_bytes():
    return reference_workbook_bytes("v2")


@pytest.fixture
def v1_path(tmp_path):
    return save_reference_workbook(tmp_path / "roi_v1.xlsx", "v1")


@pytest.fixture
def v2_path(tmp_path):
    return save_reference_workbook(tmp_path / "roi_v2.xlsx", "v2")


@pytest.fixture(params=["v1", "v2"])
def engine(request, v1_bytes, v2_bytes):
    """A ready engine over each shipped layout."""
    data = v1_bytes if request.param == "v1" else v2_bytes
    return RoiEngine().load_bytes(data, url=f"memory://{request.param}")
