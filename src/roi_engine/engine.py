"""
ROI Engine Facade

Coordinates loading, percent calibration, initial-state reads and
calculations over one workbook. This is the only object the CLI and other
callers talk to.

State machine:
    unloaded -> loading -> ready <-> calculating
    loading -> load_failed   (terminal; build a new engine to retry)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

import httpx

from roi_engine.config import settings
from roi_engine.errors import (
    CalculationError,
    EngineStateError,
    LoadCancelled,
    LoadError,
)
from roi_engine.extractor import ResultExtractor
from roi_engine.loader import fetch_workbook_bytes, load_workbook_model
from roi_engine.models import (
    CalculationResult,
    EngineState,
    InitialState,
    PercentMode,
    RoiAssumptions,
    RoiInputs,
)
from roi_engine.percent import PercentNormalizer
from roi_engine.schema import FieldBinding, FieldSchema
from roi_engine.session import FormulaEvaluationSession
from roi_engine.validation import ensure_valid


logger = logging.getLogger(__name__)


class RoiEngine:
    """
    Spreadsheet-backed ROI calculator.

    The evaluation session is owned exclusively by this instance. There is
    no locking: callers must not run two calculate() calls at once.
    """

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            client: Optional AsyncClient used for http(s) workbook URLs
            timeout: Fetch timeout in seconds (defaults to settings.HTTP_TIMEOUT)
        """
        self._client = client
        self._timeout = timeout
        self._state = EngineState.UNLOADED
        self._cancelled = False
        self.url: Optional[str] = None
        self.load_error: Optional[LoadError] = None

        self._schema: Optional[FieldSchema] = None
        self._session: Optional[FormulaEvaluationSession] = None
        self._normalizer: Optional[PercentNormalizer] = None
        self._extractor: Optional[ResultExtractor] = None

    @classmethod
    async def open(cls, url: Optional[str] = None, **kwargs) -> "RoiEngine":
        """Create an engine and load it; returns a ready engine or raises LoadError."""
        engine = cls(**kwargs)
        await engine.load(url)
        return engine

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def schema(self) -> FieldSchema:
        self._require_loaded()
        return self._schema

    @property
    def session(self) -> FormulaEvaluationSession:
        self._require_loaded()
        return self._session

    @property
    def percent_modes(self) -> Mapping[str, PercentMode]:
        self._require_loaded()
        return self._normalizer.modes

    @property
    def ambiguous_percent_fields(self) -> tuple[str, ...]:
        self._require_loaded()
        return self._normalizer.ambiguous_fields

    def _require_loaded(self) -> None:
        if self._state not in (EngineState.READY, EngineState.CALCULATING):
            raise EngineStateError(f"Engine is not loaded (state: {self._state.value})")

    def _require_ready(self) -> None:
        if self._state != EngineState.READY:
            raise EngineStateError(f"Engine is not ready (state: {self._state.value})")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """
        Discard the result of an in-flight load.

        The network request itself is not aborted; the load notices the flag
        once the fetch resolves, before touching any engine state.
        """
        if self._state == EngineState.LOADING:
            self._cancelled = True

    async def load(self, url: Optional[str] = None) -> "RoiEngine":
        """
        Fetch the workbook, build the evaluation session and calibrate it.

        Raises:
            LoadError: on fetch, parse, schema or calibration failure
            LoadCancelled: if cancel() was called while fetching
        """
        if self._state != EngineState.UNLOADED:
            raise EngineStateError(f"Engine cannot load from state {self._state.value}")

        url = url or settings.WORKBOOK_URL
        self._state = EngineState.LOADING
        self._cancelled = False
        self.url = url
        logger.info("Loading ROI workbook from %s", url)

        try:
            data = await fetch_workbook_bytes(url, client=self._client, timeout=self._timeout)
        except LoadError as e:
            if self._cancelled:
                self._discard()
                raise LoadCancelled(f"Load of {url} was cancelled") from e
            self._fail(e)
            raise
        except Exception as e:
            if self._cancelled:
                self._discard()
                raise LoadCancelled(f"Load of {url} was cancelled") from e
            error = LoadError(f"Failed to load workbook from {url!r} ({e})", url)
            self._fail(error)
            raise error from e

        if self._cancelled:
            self._discard()
            raise LoadCancelled(f"Load of {url} was cancelled")

        self._initialise(data, url)
        return self

    def load_bytes(self, data: bytes, url: Optional[str] = None) -> "RoiEngine":
        """Synchronous load from workbook bytes already in memory."""
        if self._state != EngineState.UNLOADED:
            raise EngineStateError(f"Engine cannot load from state {self._state.value}")
        self._state = EngineState.LOADING
        self.url = url
        self._initialise(data, url)
        return self

    def _initialise(self, data: bytes, url: Optional[str]) -> None:
        try:
            model, schema = load_workbook_model(data)
            session = FormulaEvaluationSession(model)
            normalizer = PercentNormalizer.calibrate(session, schema)
        except LoadError as e:
            self._fail(e)
            raise
        except Exception as e:
            error = LoadError(f"Could not initialise workbook model ({e})", url)
            self._fail(error)
            raise error from e

        self._schema = schema
        self._session = session
        self._normalizer = normalizer
        self._extractor = ResultExtractor(schema)
        self._state = EngineState.READY
        logger.info("ROI workbook ready (layout %s)", schema.version)

    def _fail(self, error: LoadError) -> None:
        if error.url is None:
            error.url = self.url
        self.load_error = error
        self._state = EngineState.LOAD_FAILED
        logger.info("ROI workbook load failed: %s", error)

    def _discard(self) -> None:
        self._cancelled = False
        self.url = None
        self._state = EngineState.UNLOADED
        logger.info("ROI workbook load cancelled")

    # ------------------------------------------------------------------
    # Reads and calculation
    # ------------------------------------------------------------------

    def _read_field(self, binding: FieldBinding) -> float:
        raw = self._session.read_number(binding.address)
        if binding.percent:
            return self._normalizer.to_ui(binding.name, raw)
        return raw

    def _write_field(self, binding: FieldBinding, ui_value: float) -> None:
        value = self._normalizer.to_raw(binding.name, ui_value) if binding.percent else ui_value
        self._session.write(binding.address, value)

    def _read_assumptions(self) -> RoiAssumptions:
        return RoiAssumptions(**{b.name: self._read_field(b) for b in self._schema.assumptions})

    def get_initial_state(self) -> InitialState:
        """Workbook-authored defaults of every field, in UI units."""
        self._require_ready()
        inputs = RoiInputs(**{b.name: self._read_field(b) for b in self._schema.inputs})
        return InitialState(inputs=inputs, assumptions=self._read_assumptions())

    def calculate(self, inputs: RoiInputs, assumptions: RoiAssumptions) -> CalculationResult:
        """
        Write every field, recompute and extract results.

        Inputs are not validated here. Assumptions are re-read after the
        recompute and echoed back, since workbook formulas may adjust them.

        Raises:
            CalculationError: if the formula engine fails; the engine stays usable
        """
        self._require_ready()
        self._state = EngineState.CALCULATING
        logger.debug("Calculating with inputs=%s assumptions=%s", inputs, assumptions)
        try:
            for binding in self._schema.inputs:
                self._write_field(binding, getattr(inputs, binding.name))
            for binding in self._schema.assumptions:
                self._write_field(binding, getattr(assumptions, binding.name))
            self._session.recalculate()
            return self._extractor.extract(self._session, self._read_assumptions())
        except CalculationError:
            raise
        except Exception as e:
            raise CalculationError(f"Calculation failed: {e}") from e
        finally:
            self._state = EngineState.READY


async def run_calculation(
    engine: RoiEngine,
    inputs: RoiInputs,
    assumptions: RoiAssumptions,
) -> CalculationResult:
    """
    Validate, yield once to the event loop, then calculate.

    Raises:
        ValidationError: before the workbook is touched
        CalculationError: from the engine
    """
    ensure_valid(inputs, assumptions)
    await asyncio.sleep(0)
    return engine.calculate(inputs, assumptions)
