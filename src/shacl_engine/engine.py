# src/shacl_engine/engine.py
"""
Focus-node evaluation.

A ValidationContext belongs to one shape task. It runs the registered
constraint families over a focus node and resolves shape references for
logical and qualified constraints through the shape map, threading a depth
counter through every nested evaluation.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from rdflib import Graph

from .config import DEFAULT_MAX_RECURSION_DEPTH
from .exceptions import UnresolvedShapeError
from .graph import ShapeId, Term
from .model import Diagnostic, DiagnosticKind, NodeShape, ValidationResult
from .shape_map import ShapeMap
from .validators import load_all
from .validators.base import ShapeScope
from .validators.registry import validators_for

LOG = logging.getLogger(__name__)

load_all()


class ValidationContext:
    """
    Evaluation state for one shape task.

    Parameters
    ----------
    data_graph : Graph
        Graph being validated. Never modified.
    shape_map : Mapping[ShapeId, NodeShape]
        Every parsed shape by id. Never modified.
    max_depth : int, default=50
        Deepest shape-reference nesting followed before a branch is cut off.
    """

    def __init__(
        self,
        data_graph: Graph,
        shape_map: ShapeMap,
        max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
    ) -> None:
        self.data_graph = data_graph
        self.shape_map = shape_map
        self.max_depth = max_depth
        self.diagnostics: List[Diagnostic] = []
        self._node_validators = validators_for(ShapeScope.NODE)
        self._property_validators = validators_for(ShapeScope.PROPERTY)
        self._conformance: Dict[Tuple[Term, ShapeId], bool] = {}

    def record(
        self,
        kind: DiagnosticKind,
        shape_id: ShapeId,
        message: str,
        focus_node: Optional[Term] = None,
    ) -> None:
        """Record an absorbed soft failure."""
        self.diagnostics.append(Diagnostic(kind, shape_id, message, focus_node))

    def validate_focus_node(
        self, focus_node: Term, shape: NodeShape, depth: int = 0
    ) -> List[ValidationResult]:
        """
        Validate focus_node against shape and all of its property shapes.

        Parameters
        ----------
        focus_node : Term
            Node under test.
        shape : NodeShape
            Shape to validate against.
        depth : int, default=0
            Shape-reference nesting depth of this evaluation.

        Returns
        -------
        List[ValidationResult]
            Results of every constraint on the shape. Empty when the shape is
            deactivated or depth exceeds max_depth.
        """
        if depth > self.max_depth:
            LOG.error(
                "Maximum recursion depth %d exceeded validating %s against %s",
                self.max_depth,
                focus_node.n3(),
                shape.id.n3(),
            )
            self.record(
                DiagnosticKind.RECURSION_LIMIT,
                shape.id,
                f"Maximum recursion depth {self.max_depth} exceeded; "
                f"branch treated as conforming",
                focus_node,
            )
            return []
        if shape.deactivated:
            return []

        results: List[ValidationResult] = []
        for validator in self._node_validators:
            results.extend(validator.validate(self, focus_node, shape, depth))
        for prop in shape.property_shapes:
            if prop.deactivated:
                continue
            for validator in self._property_validators:
                results.extend(validator.validate(self, focus_node, prop, depth))
        return results

    def conforms(self, focus_node: Term, shape_id: ShapeId, depth: int) -> bool:
        """
        True if focus_node produces no results against the referenced shape.

        Outcomes are memoized per (focus_node, shape_id) for the lifetime of
        the context.

        Raises
        ------
        UnresolvedShapeError
            If shape_id is not in the shape map.
        """
        key = (focus_node, shape_id)
        cached = self._conformance.get(key)
        if cached is not None:
            return cached

        shape = self.shape_map.get(shape_id)
        if shape is None:
            raise UnresolvedShapeError(f"Shape {shape_id.n3()} is not in the shape map")

        outcome = not self.validate_focus_node(focus_node, shape, depth)
        self._conformance[key] = outcome
        return outcome
