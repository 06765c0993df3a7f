# src/shacl_engine/__init__.py
"""
shacl_engine: SHACL-style validation of RDF graphs.

This package provides:
- A shape reader turning a shapes graph into typed shape descriptors.
- A validator running cardinality, value type, string, value, qualified,
  logical and SPARQL constraints, optionally in parallel.
- A report writer and reader for SHACL validation report graphs.
"""

from __future__ import annotations

from .api import validate, validate_file
from .config import ValidationOptions, load_config
from .exceptions import (
    FileReadError,
    ReportParseError,
    ShaclEngineError,
    ShapeParseError,
    UnresolvedShapeError,
)
from .model import Diagnostic, DiagnosticKind, Severity, ValidationReport, ValidationResult
from .report_parser import parse_report
from .writer import to_graph, to_text

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "validate",
    "validate_file",
    "ValidationOptions",
    "load_config",
    "ValidationReport",
    "ValidationResult",
    "Severity",
    "Diagnostic",
    "DiagnosticKind",
    "ShaclEngineError",
    "ShapeParseError",
    "UnresolvedShapeError",
    "FileReadError",
    "ReportParseError",
    "to_graph",
    "to_text",
    "parse_report",
]
