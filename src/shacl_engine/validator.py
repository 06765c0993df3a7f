# src/shacl_engine/validator.py
"""
Validation orchestrator.

Parses the shapes graph, selects target nodes for every top-level shape and
validates each shape as one task, either on worker threads with a bound
on how many run at once, or sequentially. A task that raises or runs past its timeout is logged,
recorded as a diagnostic and contributes no results; the run carries on.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from rdflib import Graph

from .config import ValidationOptions
from .engine import ValidationContext
from .graph import ShapeId, Term, instances_of, unique
from .model import (
    Diagnostic,
    DiagnosticKind,
    NodeShape,
    ValidationReport,
    ValidationResult,
)
from .reader import parse_shapes
from .shape_map import ShapeMap, build_shape_map

LOG = logging.getLogger(__name__)

__all__ = ["run", "select_target_nodes", "validate_shape", "ShapeOutcome"]

# How often the parallel collector wakes up to look for expired tasks.
_POLL_SECONDS = 0.05


@dataclass
class ShapeOutcome:
    """Results and diagnostics produced by one shape task."""

    shape_id: ShapeId
    results: List[ValidationResult] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def select_target_nodes(data_graph: Graph, shape: NodeShape) -> List[Term]:
    """
    Target nodes of a shape, without duplicates.

    The union of the direct instances of each target class, the explicit
    target nodes, and the direct instances of the shape itself when the shape
    is also a class.
    """
    candidates: List[Term] = []
    for cls in shape.target_classes:
        candidates.extend(instances_of(data_graph, cls))
    candidates.extend(shape.target_nodes)
    if shape.implicit_class_target is not None:
        candidates.extend(instances_of(data_graph, shape.implicit_class_target))
    return unique(candidates)


def validate_shape(
    data_graph: Graph,
    shape: NodeShape,
    shape_map: ShapeMap,
    options: ValidationOptions,
) -> ShapeOutcome:
    """
    Validate every target node of one shape.

    This is the unit of parallel work; it runs in a single thread with its
    own ValidationContext.
    """
    context = ValidationContext(
        data_graph, shape_map, max_depth=options.max_recursion_depth
    )
    targets = select_target_nodes(data_graph, shape)
    LOG.debug("Validating shape %s against %d target(s)", shape.id.n3(), len(targets))

    results: List[ValidationResult] = []
    for focus_node in targets:
        results.extend(context.validate_focus_node(focus_node, shape))
    return ShapeOutcome(shape.id, results, context.diagnostics)


def run(
    data_graph: Graph,
    shapes_graph: Graph,
    options: Optional[ValidationOptions] = None,
) -> ValidationReport:
    """
    Validate a data graph against a shapes graph.

    Parameters
    ----------
    data_graph : Graph
        Graph to validate.
    shapes_graph : Graph
        Graph holding the shapes.
    options : ValidationOptions or None
        Run options; defaults when None.

    Returns
    -------
    ValidationReport
        Aggregated results of every shape task.

    Raises
    ------
    TypeError
        If either graph is not an rdflib Graph, or options is not a
        ValidationOptions.
    ShapeParseError
        If the shapes graph cannot be parsed.
    """
    if not isinstance(data_graph, Graph):
        raise TypeError(f"data_graph must be rdflib.Graph, got {type(data_graph).__name__}")
    if not isinstance(shapes_graph, Graph):
        raise TypeError(
            f"shapes_graph must be rdflib.Graph, got {type(shapes_graph).__name__}"
        )
    if options is None:
        options = ValidationOptions()
    elif not isinstance(options, ValidationOptions):
        raise TypeError(
            f"options must be ValidationOptions, got {type(options).__name__}"
        )

    shapes = parse_shapes(shapes_graph, max_list_depth=options.max_list_depth)
    shape_map = build_shape_map(shapes)
    top_level = [s for s in shapes if s.top_level and not s.deactivated]
    LOG.debug(
        "Parsed %d shape(s), %d top-level; parallel=%s",
        len(shapes),
        len(top_level),
        options.parallel,
    )

    if options.parallel:
        outcomes = _run_parallel(data_graph, top_level, shape_map, options)
    else:
        outcomes = _run_sequential(data_graph, top_level, shape_map, options)

    results: List[ValidationResult] = []
    diagnostics: List[Diagnostic] = []
    for outcome in outcomes:
        results.extend(outcome.results)
        diagnostics.extend(outcome.diagnostics)
    return ValidationReport.from_results(results, diagnostics)


# ------------------------------------------------------------------------------
# scheduling
# ------------------------------------------------------------------------------


def _failed(shape: NodeShape, exc: BaseException) -> ShapeOutcome:
    LOG.error("Validation of shape %s failed: %s", shape.id.n3(), exc)
    return ShapeOutcome(
        shape.id,
        diagnostics=[
            Diagnostic(
                DiagnosticKind.SHAPE_ERROR,
                shape.id,
                f"Shape task failed: {type(exc).__name__}: {exc}",
            )
        ],
    )


def _timed_out(shape: NodeShape, timeout: float) -> ShapeOutcome:
    LOG.warning("Validation of shape %s timed out after %.3fs", shape.id.n3(), timeout)
    return ShapeOutcome(
        shape.id,
        diagnostics=[
            Diagnostic(
                DiagnosticKind.SHAPE_TIMEOUT,
                shape.id,
                f"Shape task timed out after {timeout:g}s",
            )
        ],
    )


def _run_sequential(
    data_graph: Graph,
    shapes: Sequence[NodeShape],
    shape_map: ShapeMap,
    options: ValidationOptions,
) -> List[ShapeOutcome]:
    outcomes = []
    for shape in shapes:
        try:
            outcomes.append(validate_shape(data_graph, shape, shape_map, options))
        except Exception as e:
            outcomes.append(_failed(shape, e))
    return outcomes


def _run_parallel(
    data_graph: Graph,
    shapes: Sequence[NodeShape],
    shape_map: ShapeMap,
    options: ValidationOptions,
) -> List[ShapeOutcome]:
    """
    Run one task per shape, at most options.workers at a time.

    Each task gets its own single-thread executor, started when a slot frees
    up, so its timeout is measured from the moment it starts. A timed-out
    task gives up its slot immediately: its thread is abandoned, finishes in
    the background, and its late result is ignored.
    """
    timeout = options.timeout_seconds
    queued = deque(shapes)
    running: Dict[Future, Tuple[NodeShape, float]] = {}
    outcomes: List[ShapeOutcome] = []

    while queued or running:
        while queued and len(running) < options.workers:
            shape = queued.popleft()
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="shacl-shape")
            future = executor.submit(validate_shape, data_graph, shape, shape_map, options)
            executor.shutdown(wait=False)
            running[future] = (shape, time.monotonic())

        done, _ = wait(
            running,
            timeout=None if timeout is None else _POLL_SECONDS,
            return_when=FIRST_COMPLETED,
        )
        for future in done:
            shape, _ = running.pop(future)
            try:
                outcomes.append(future.result())
            except Exception as e:
                outcomes.append(_failed(shape, e))

        if timeout is None:
            continue
        now = time.monotonic()
        for future, (shape, began) in list(running.items()):
            if now - began > timeout:
                del running[future]
                outcomes.append(_timed_out(shape, timeout))
    return outcomes
