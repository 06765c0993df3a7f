# src/shacl_engine/validators/common.py
"""
Helpers shared by the constraint family validators.
"""

from __future__ import annotations

from typing import Any, List, Optional

from rdflib import Graph, URIRef

from ..graph import Term, objects
from ..model import PropertyShape, ValidationResult
from .base import Shape


def value_nodes(graph: Graph, focus_node: Term, shape: Shape) -> List[Term]:
    """
    Nodes a constraint is checked against.

    A property shape constrains the values reached through its path; a node
    shape constrains the focus node itself.
    """
    if isinstance(shape, PropertyShape):
        return objects(graph, focus_node, shape.path)
    return [focus_node]


def result_path(shape: Shape) -> Optional[URIRef]:
    return shape.path if isinstance(shape, PropertyShape) else None


def make_result(
    focus_node: Term,
    shape: Shape,
    component: URIRef,
    default_message: str,
    value: Optional[Term] = None,
    **extra: Any,
) -> ValidationResult:
    """
    Build a result attributed to shape.

    The shape's own sh:message, when set, replaces default_message.
    """
    return ValidationResult(
        severity=shape.severity,
        focus_node=focus_node,
        path=result_path(shape),
        source_shape=shape.id,
        message=shape.message or default_message,
        details={"constraint_component": component, "value": value, **extra},
    )
