# src/shacl_engine/validators/cardinality.py
"""
Cardinality constraints: sh:minCount and sh:maxCount.
"""

from __future__ import annotations

from typing import List

from ..graph import Term, objects
from ..model import PropertyShape, ValidationResult
from ..vocabulary import MAX_COUNT, MIN_COUNT
from .base import ConstraintFamily, ShapeScope
from .common import make_result
from .registry import register


@register(ConstraintFamily.CARDINALITY)
class CardinalityValidator:
    family = ConstraintFamily.CARDINALITY
    scopes = frozenset({ShapeScope.PROPERTY})

    def validate(
        self, context, focus_node: Term, shape: PropertyShape, depth: int = 0
    ) -> List[ValidationResult]:
        if shape.min_count is None and shape.max_count is None:
            return []

        count = len(objects(context.data_graph, focus_node, shape.path))
        results: List[ValidationResult] = []

        if shape.min_count is not None and count < shape.min_count:
            results.append(
                make_result(
                    focus_node,
                    shape,
                    MIN_COUNT,
                    f"Property has too few values (expected at least "
                    f"{shape.min_count}, found {count})",
                    count=count,
                )
            )
        if shape.max_count is not None and count > shape.max_count:
            results.append(
                make_result(
                    focus_node,
                    shape,
                    MAX_COUNT,
                    f"Property has too many values (expected at most "
                    f"{shape.max_count}, found {count})",
                    count=count,
                )
            )
        return results
