"""
ROI Engine Errors

Exception taxonomy shared by the engine, the loader and the CLI.
"""
from __future__ import annotations


class RoiEngineError(Exception):
    """Base exception for all ROI engine errors."""
    pass


class AddressError(RoiEngineError, ValueError):
    """Raised when an A1 address or (row, col) pair is malformed."""

    def __init__(self, message: str, address: str | None = None):
        super().__init__(message)
        self.address = address


class LoadError(RoiEngineError):
    """Raised when the workbook cannot be fetched, parsed or recognised."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class LoadCancelled(RoiEngineError):
    """Raised by an in-flight load whose result was discarded via cancel()."""
    pass


class ValidationError(RoiEngineError):
    """Raised when user inputs fail range or finiteness checks."""

    def __init__(self, messages: list[str]):
        super().__init__(" ".join(messages))
        self.messages = list(messages)


class CalculationError(RoiEngineError):
    """Raised when the formula engine fails during write or recompute."""

    def __init__(self, message: str, address: str | None = None):
        super().__init__(message)
        self.address = address


class EngineStateError(RoiEngineError):
    """Raised when an engine operation is invoked in the wrong state."""
    pass
