# src/shacl_engine/exceptions.py
"""
Custom exceptions for shacl_engine.

All exceptions inherit from ShaclEngineError so that callers can catch
engine-specific errors without grabbing unrelated built-in exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union


class ShaclEngineError(Exception):
    """Base class for all shacl_engine exceptions."""

    pass


class ShapeParseError(ShaclEngineError):
    """Raised when a shapes graph cannot be parsed into shapes."""

    pass


class UnresolvedShapeError(ShaclEngineError):
    """Raised when a referenced shape id is missing from the shape map."""

    pass


class ReportParseError(ShaclEngineError):
    """Raised when a graph does not contain a validation report."""

    pass


class FileReadError(ShaclEngineError):
    """
    Raised when a data or shapes file cannot be read or parsed.

    Attributes
    ----------
    kind : str
        Which input failed, "data" or "shapes".
    path : Path
        The offending file path.
    reason : str
        Description of the underlying failure.
    """

    def __init__(self, kind: str, path: Union[str, Path], reason: str) -> None:
        self.kind = kind
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {kind} file {self.path}: {reason}")
