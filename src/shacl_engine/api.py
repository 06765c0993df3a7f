# src/shacl_engine/api.py
"""
Public entry points.

Provides:
- validate: validate an in-memory data graph against a shapes graph
- validate_file: read both graphs from files first
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from rdflib import Graph

from .config import ValidationOptions
from .exceptions import FileReadError
from .graph import read_graph
from .model import ValidationReport
from .validator import run

LOG = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _resolve_options(
    options: Optional[ValidationOptions], overrides: dict
) -> ValidationOptions:
    if options is None:
        options = ValidationOptions()
    elif not isinstance(options, ValidationOptions):
        raise TypeError(
            f"options must be ValidationOptions, got {type(options).__name__}"
        )
    return options.with_overrides(**overrides)


def validate(
    data_graph: Graph,
    shapes_graph: Graph,
    options: Optional[ValidationOptions] = None,
    **overrides: Any,
) -> ValidationReport:
    """
    Validate a data graph against the shapes in a shapes graph.

    Parameters
    ----------
    data_graph : Graph
        Graph to validate.
    shapes_graph : Graph
        Graph holding the shapes.
    options : ValidationOptions or None
        Base run options; defaults when None.
    **overrides
        Individual options (parallel, timeout_ms, max_concurrency, ...)
        replacing the matching fields of options.

    Returns
    -------
    ValidationReport
        The report. A non-conforming report is not an error.

    Raises
    ------
    TypeError
        If a graph is not an rdflib Graph or an override is unknown.
    ValueError
        If an option value is out of range.
    ShapeParseError
        If the shapes graph cannot be parsed.
    """
    return run(data_graph, shapes_graph, _resolve_options(options, overrides))


def _load(kind: str, path: PathLike, format: Optional[str]) -> Graph:
    try:
        return read_graph(path, format=format)
    except Exception as e:
        raise FileReadError(kind, path, f"{type(e).__name__}: {e}") from e


def validate_file(
    data_path: PathLike,
    shapes_path: PathLike,
    options: Optional[ValidationOptions] = None,
    *,
    data_format: Optional[str] = None,
    shapes_format: Optional[str] = None,
    **overrides: Any,
) -> ValidationReport:
    """
    Read a data file and a shapes file, then validate.

    Formats are guessed from the file extensions when not given, with Turtle
    as the fallback.

    Raises
    ------
    FileReadError
        If either file cannot be read or parsed; kind tells which one.
    ShapeParseError
        If the shapes graph cannot be parsed into shapes.
    """
    resolved = _resolve_options(options, overrides)
    data_graph = _load("data", data_path, data_format)
    shapes_graph = _load("shapes", shapes_path, shapes_format)
    LOG.debug(
        "Loaded %d data triple(s) from %s and %d shape triple(s) from %s",
        len(data_graph),
        data_path,
        len(shapes_graph),
        shapes_path,
    )
    return run(data_graph, shapes_graph, resolved)
