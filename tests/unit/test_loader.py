"""
Unit Tests for the Workbook Loader
"""
import asyncio
import datetime
from io import BytesIO

import httpx
import pytest
from openpyxl import Workbook

from roi_engine.errors import LoadError
from roi_engine.loader import fetch_workbook_bytes, load_workbook_model, read_workbook
from roi_engine.schema import SCHEMA_V1, SCHEMA_V2


def _xlsx_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def sparse_bytes():
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    ws["A1"] = 1
    ws["C2"] = "=A1*2"
    ws["B3"] = "text"
    ws["D4"] = True
    ws["A5"] = datetime.date(2024, 1, 31)
    other = wb.create_sheet("Other")
    other["B2"] = 2.5
    return _xlsx_bytes(wb)


class TestReadWorkbook:
    """Materialization into rectangular matrices."""

    def test_sheets(self, sparse_bytes):
        model = read_workbook(sparse_bytes)
        assert model.sheet_names == ["Data", "Other"]

    def test_rectangular(self, sparse_bytes):
        model = read_workbook(sparse_bytes)
        assert model.dimensions("Data") == (5, 4)
        assert all(len(row) == 4 for row in model.sheets["Data"])
        assert model.dimensions("Other") == (2, 2)

    def test_cell_types(self, sparse_bytes):
        model = read_workbook(sparse_bytes)
        assert model.cell("Data", 0, 0) == 1
        assert model.cell("Data", 1, 2) == "=A1*2"
        assert model.cell("Data", 2, 1) == "text"
        assert model.cell("Data", 3, 3) is True
        assert model.cell("Other", 1, 1) == 2.5

    def test_empty_cells_are_none(self, sparse_bytes):
        model = read_workbook(sparse_bytes)
        assert model.cell("Data", 0, 1) is None
        assert model.cell("Other", 0, 0) is None

    def test_other_types_stringified(self, sparse_bytes):
        model = read_workbook(sparse_bytes)
        assert isinstance(model.cell("Data", 4, 0), str)
        assert model.cell("Data", 4, 0).startswith("2024-01-31")

    def test_outside_range(self, sparse_bytes):
        assert read_workbook(sparse_bytes).cell("Data", 40, 40) is None

    def test_formulas_keep_source(self, v1_bytes):
        model = read_workbook(v1_bytes)
        assert model.cell("MODEL_INPUTS", 3, 1) == "=B3/2080"

    def test_not_a_workbook(self):
        with pytest.raises(LoadError):
            read_workbook(b"definitely not a zip")


class TestLoadWorkbookModel:
    """Parsing plus schema selection."""

    def test_v1(self, v1_bytes):
        _, schema = load_workbook_model(v1_bytes)
        assert schema is SCHEMA_V1

    def test_v2(self, v2_bytes):
        _, schema = load_workbook_model(v2_bytes)
        assert schema is SCHEMA_V2

    def test_unrecognised(self, sparse_bytes):
        with pytest.raises(LoadError):
            load_workbook_model(sparse_bytes)


class TestFetch:
    """Byte retrieval from disk and over HTTP."""

    def test_local_path(self, v1_path, v1_bytes):
        assert asyncio.run(fetch_workbook_bytes(str(v1_path))) == v1_path.read_bytes()

    def test_file_url(self, v1_path):
        assert asyncio.run(fetch_workbook_bytes(v1_path.as_uri())) == v1_path.read_bytes()

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            asyncio.run(fetch_workbook_bytes(str(tmp_path / "missing.xlsx")))

    def test_unsupported_scheme(self):
        with pytest.raises(LoadError, match="scheme"):
            asyncio.run(fetch_workbook_bytes("ftp://example.com/roi.xlsx"))

    def test_http(self, v1_bytes):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, content=v1_bytes)

        async def fetch():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_workbook_bytes("https://assets.test/roi_model.xlsx", client=client)

        assert asyncio.run(fetch()) == v1_bytes
        assert seen == ["https://assets.test/roi_model.xlsx"]

    def test_http_status(self):
        async def fetch():
            transport = httpx.MockTransport(lambda request: httpx.Response(404))
            async with httpx.AsyncClient(transport=transport) as client:
                return await fetch_workbook_bytes("https://assets.test/roi_model.xlsx", client=client)

        with pytest.raises(LoadError) as exc_info:
            asyncio.run(fetch())
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "https://assets.test/roi_model.xlsx"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def fetch():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fetch_workbook_bytes("https://assets.test/roi_model.xlsx", client=client)

        with pytest.raises(LoadError):
            asyncio.run(fetch())

    @pytest.mark.parametrize("url", [
        "http://[invalid/roi.xlsx",
        "roi\x00model.xlsx",
    ])
    def test_malformed_location(self, url):
        with pytest.raises(LoadError) as exc_info:
            asyncio.run(fetch_workbook_bytes(url))
        assert exc_info.value.url == url
