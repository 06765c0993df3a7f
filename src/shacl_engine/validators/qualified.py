# src/shacl_engine/validators/qualified.py
"""
Qualified value shape constraints: sh:qualifiedValueShape with
sh:qualifiedMinCount / sh:qualifiedMaxCount.
"""

from __future__ import annotations

from typing import List

from ..graph import Term, objects
from ..model import PropertyShape, ValidationResult
from ..vocabulary import QUALIFIED_MAX_COUNT, QUALIFIED_MIN_COUNT
from .base import ConstraintFamily, ShapeScope
from .common import make_result
from .registry import register


@register(ConstraintFamily.QUALIFIED)
class QualifiedValidator:
    """
    Count the values that conform to the qualified shape.

    Each value is validated in full against the qualified shape; only
    whether it conforms matters, its own results are discarded.
    """

    family = ConstraintFamily.QUALIFIED
    scopes = frozenset({ShapeScope.PROPERTY})

    def validate(
        self, context, focus_node: Term, shape: PropertyShape, depth: int = 0
    ) -> List[ValidationResult]:
        if shape.qualified_shape is None:
            return []
        if shape.qualified_min_count is None and shape.qualified_max_count is None:
            return []

        values = objects(context.data_graph, focus_node, shape.path)
        conforming = sum(
            1
            for value in values
            if context.conforms(value, shape.qualified_shape, depth + 1)
        )

        results: List[ValidationResult] = []
        if shape.qualified_min_count is not None and conforming < shape.qualified_min_count:
            results.append(
                make_result(
                    focus_node,
                    shape,
                    QUALIFIED_MIN_COUNT,
                    f"Property has too few values of required type "
                    f"{shape.qualified_shape} (expected at least "
                    f"{shape.qualified_min_count}, found {conforming})",
                    qualified_shape=shape.qualified_shape,
                    conforming_count=conforming,
                )
            )
        if shape.qualified_max_count is not None and conforming > shape.qualified_max_count:
            results.append(
                make_result(
                    focus_node,
                    shape,
                    QUALIFIED_MAX_COUNT,
                    f"Property has too many values of required type "
                    f"{shape.qualified_shape} (expected at most "
                    f"{shape.qualified_max_count}, found {conforming})",
                    qualified_shape=shape.qualified_shape,
                    conforming_count=conforming,
                )
            )
        return results
