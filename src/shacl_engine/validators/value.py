# src/shacl_engine/validators/value.py
"""
Value constraints: sh:in, sh:hasValue and the four numeric range bounds.
"""

from __future__ import annotations

import math
import operator
from typing import List

from ..graph import Term, numeric_value
from ..model import PropertyShape, ValidationResult
from ..vocabulary import (
    HAS_VALUE,
    IN,
    MAX_EXCLUSIVE,
    MAX_INCLUSIVE,
    MIN_EXCLUSIVE,
    MIN_INCLUSIVE,
)
from .base import ConstraintFamily, Shape, ShapeScope
from .common import make_result, value_nodes
from .registry import register

# (shape field, comparison the value must satisfy, component, message prefix, symbol)
_RANGE_CHECKS = (
    ("min_inclusive", operator.ge, MIN_INCLUSIVE, "Value is below minimum", ">="),
    ("min_exclusive", operator.gt, MIN_EXCLUSIVE, "Value is below minimum", ">"),
    ("max_inclusive", operator.le, MAX_INCLUSIVE, "Value exceeds maximum", "<="),
    ("max_exclusive", operator.lt, MAX_EXCLUSIVE, "Value exceeds maximum", "<"),
)


def _comparable(number) -> bool:
    # NaN satisfies no bound, and ordering it against a Decimal raises
    if number is None:
        return False
    return not (isinstance(number, float) and math.isnan(number))


@register(ConstraintFamily.VALUE)
class ValueValidator:
    family = ConstraintFamily.VALUE
    scopes = frozenset({ShapeScope.NODE, ShapeScope.PROPERTY})

    def validate(
        self, context, focus_node: Term, shape: Shape, depth: int = 0
    ) -> List[ValidationResult]:
        values = value_nodes(context.data_graph, focus_node, shape)
        results: List[ValidationResult] = []

        if shape.in_values is not None:
            allowed = set(shape.in_values)
            for value in values:
                if value not in allowed:
                    results.append(
                        make_result(
                            focus_node,
                            shape,
                            IN,
                            "Value is not one of the allowed values",
                            value,
                        )
                    )

        if shape.has_value is not None and shape.has_value not in values:
            results.append(
                make_result(
                    focus_node,
                    shape,
                    HAS_VALUE,
                    f"Required value {shape.has_value} is missing"
                    if isinstance(shape, PropertyShape)
                    else f"Value must be {shape.has_value}",
                    shape.has_value,
                )
            )

        for field_name, satisfied, component, text, symbol in _RANGE_CHECKS:
            bound = getattr(shape, field_name)
            if bound is None:
                continue
            for value in values:
                number = numeric_value(value)
                if _comparable(number) and _comparable(bound) and satisfied(number, bound):
                    continue
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        component,
                        f"{text} (expected {symbol} {bound}, found {value})",
                        value,
                    )
                )
        return results
