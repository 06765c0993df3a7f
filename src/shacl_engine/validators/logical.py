# src/shacl_engine/validators/logical.py
"""
Logical constraints: sh:and, sh:or, sh:xone and sh:not.

These apply to node shapes only. Each referenced shape is resolved through
the shape map and the focus node is validated against it in full, one level
deeper than the referencing shape.
"""

from __future__ import annotations

from typing import List

from ..graph import Term
from ..model import NodeShape, ValidationResult
from ..vocabulary import AND, NOT, OR, XONE
from .base import ConstraintFamily, ShapeScope
from .common import make_result
from .registry import register


@register(ConstraintFamily.LOGICAL)
class LogicalValidator:
    family = ConstraintFamily.LOGICAL
    scopes = frozenset({ShapeScope.NODE})

    def validate(
        self, context, focus_node: Term, shape: NodeShape, depth: int = 0
    ) -> List[ValidationResult]:
        results: List[ValidationResult] = []
        next_depth = depth + 1

        for ref in shape.and_shapes:
            if not context.conforms(focus_node, ref, next_depth):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        AND,
                        "AND constraint failed: not all shapes conform",
                        focus_node,
                        failing_shape=ref,
                    )
                )
                break

        if shape.or_shapes:
            if not any(
                context.conforms(focus_node, ref, next_depth) for ref in shape.or_shapes
            ):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        OR,
                        "OR constraint failed: no shape conforms",
                        focus_node,
                        tested_shapes=list(shape.or_shapes),
                    )
                )

        if shape.xone_shapes:
            # Repeated ids are separate slots and each passing slot counts
            passes = sum(
                1
                for ref in shape.xone_shapes
                if context.conforms(focus_node, ref, next_depth)
            )
            if passes != 1:
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        XONE,
                        f"XONE constraint failed: {passes} shapes conform "
                        f"(expected exactly 1)",
                        focus_node,
                        conforming_count=passes,
                        tested_shapes=list(shape.xone_shapes),
                    )
                )

        if shape.not_shape is not None:
            if context.conforms(focus_node, shape.not_shape, next_depth):
                results.append(
                    make_result(
                        focus_node,
                        shape,
                        NOT,
                        "NOT constraint failed: negated shape conforms",
                        focus_node,
                        negated_shape=shape.not_shape,
                    )
                )

        return results
