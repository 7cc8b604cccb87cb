"""
Workbook Loader

Fetches a binary .xlsx asset and materializes every sheet as a rectangular
matrix of typed cell contents.
"""
from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from pathlib import Path
from types import MappingProxyType
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
from openpyxl import load_workbook
from openpyxl.worksheet.formula import ArrayFormula

from roi_engine.config import settings
from roi_engine.errors import LoadError
from roi_engine.models import CellContent, WorkbookModel
from roi_engine.schema import FieldSchema, detect_schema


logger = logging.getLogger(__name__)


def _local_path(url: str) -> Optional[Path]:
    """Path for file:// URLs and plain paths; None for remote URLs."""
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    # A single-letter scheme is a Windows drive, not a URL
    if not parsed.scheme or len(parsed.scheme) == 1:
        return Path(url)
    return None


async def fetch_workbook_bytes(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Retrieve the raw workbook bytes.

    Args:
        url: http(s) URL, file:// URL or local path
        client: Optional shared AsyncClient (the caller keeps ownership)
        timeout: Request timeout in seconds (defaults to settings.HTTP_TIMEOUT)

    Raises:
        LoadError: on any transport, HTTP status or filesystem failure
    """
    try:
        path = _local_path(url)
        parsed = urlparse(url)
    except ValueError as e:
        raise LoadError(f"Invalid workbook URL {url!r} ({e})", url) from e

    if path is not None:
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (OSError, ValueError) as e:
            raise LoadError(f"Failed to load workbook from {url!r} ({e})", url) from e

    if parsed.scheme not in ("http", "https"):
        raise LoadError(f"Unsupported workbook URL scheme: {parsed.scheme}", url)

    timeout = settings.HTTP_TIMEOUT if timeout is None else timeout
    try:
        if client is not None:
            response = await client.get(url, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                response = await own_client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise LoadError(f"Failed to load workbook from {url} ({e})", url) from e

    if response.status_code >= 400:
        raise LoadError(
            f"Failed to load workbook from {url} (HTTP {response.status_code})",
            url,
            status_code=response.status_code,
        )
    return response.content


def _cell_content(value) -> CellContent:
    """Typed content of one openpyxl cell value."""
    if value is None:
        return None
    if isinstance(value, ArrayFormula):
        text = value.text or ""
        return text if text.startswith("=") else f"={text}"
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value
    return str(value)


def read_workbook(data: bytes) -> WorkbookModel:
    """
    Parse workbook bytes into a WorkbookModel.

    Formula cells keep their "="-prefixed source; unpopulated cells inside
    each sheet's used range are explicit None.

    Raises:
        LoadError: if the bytes are not a readable .xlsx workbook
    """
    try:
        wb = load_workbook(BytesIO(data), data_only=False)
    except Exception as e:
        raise LoadError(f"Could not parse workbook ({e})") from e

    sheets = {}
    for ws in wb.worksheets:
        rows = []
        for row in ws.iter_rows(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
            rows.append(tuple(_cell_content(cell.value) for cell in row))
        sheets[ws.title] = tuple(rows)
    return WorkbookModel(sheets=MappingProxyType(sheets))


def load_workbook_model(data: bytes) -> tuple[WorkbookModel, FieldSchema]:
    """
    Parse workbook bytes and select the field schema it was authored for.

    Raises:
        LoadError: on parse failure or when no schema marker is present
    """
    model = read_workbook(data)
    schema = detect_schema(model.sheet_names)
    logger.info("Workbook matches layout %s (sheets: %s)", schema.version, ", ".join(model.sheet_names))
    return model, schema
