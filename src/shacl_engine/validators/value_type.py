# src/shacl_engine/validators/value_type.py
"""
Value type constraints: sh:datatype, sh:class and sh:nodeKind.
"""

from __future__ import annotations

from typing import List

from rdflib import Literal

from ..graph import Term, effective_datatype, is_instance_of
from ..model import ValidationResult
from ..vocabulary import CLASS, DATATYPE, NODE_KIND
from .base import ConstraintFamily, Shape, ShapeScope
from .common import make_result, value_nodes
from .registry import register


def has_datatype(value: Term, datatype) -> bool:
    """True for a well-formed literal whose datatype is exactly datatype."""
    if not isinstance(value, Literal):
        return False
    if getattr(value, "ill_typed", False):
        return False
    return effective_datatype(value) == datatype


@register(ConstraintFamily.VALUE_TYPE)
class ValueTypeValidator:
    family = ConstraintFamily.VALUE_TYPE
    scopes = frozenset({ShapeScope.NODE, ShapeScope.PROPERTY})

    def validate(
        self, context, focus_node: Term, shape: Shape, depth: int = 0
    ) -> List[ValidationResult]:
        if shape.datatype is None and shape.class_ is None and shape.node_kind is None:
            return []

        graph = context.data_graph
        results: List[ValidationResult] = []
        for value in value_nodes(graph, focus_node, shape):
            if shape.datatype is not None and not has_datatype(value, shape.datatype):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        DATATYPE,
                        f"Value does not have required datatype {shape.datatype}",
                        value,
                    )
                )
            if shape.class_ is not None and not is_instance_of(graph, value, shape.class_):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        CLASS,
                        f"Value is not an instance of class {shape.class_}",
                        value,
                    )
                )
            if shape.node_kind is not None and not shape.node_kind.matches(value):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        NODE_KIND,
                        f"Value does not have required node kind {shape.node_kind.value}",
                        value,
                    )
                )
        return results
