# src/shacl_engine/validators/base.py
"""
Validator protocol for constraint families.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Protocol, Union, runtime_checkable

from ..graph import Term
from ..model import NodeShape, PropertyShape, ValidationResult

if TYPE_CHECKING:
    from ..engine import ValidationContext

__all__ = ["ConstraintFamily", "ShapeScope", "ConstraintValidator", "Shape"]

Shape = Union[NodeShape, PropertyShape]


class ConstraintFamily(Enum):
    """
    Closed set of constraint families.

    Declaration order is dispatch order.
    """

    CARDINALITY = "cardinality"
    VALUE_TYPE = "value_type"
    STRING = "string"
    VALUE = "value"
    QUALIFIED = "qualified"
    LOGICAL = "logical"
    SPARQL = "sparql"


class ShapeScope(Enum):
    """Where a family applies: to node shapes, property shapes, or both."""

    NODE = "node"
    PROPERTY = "property"


@runtime_checkable
class ConstraintValidator(Protocol):
    """
    Interface for constraint family validators.

    Implementations declare their family and the shape scopes they apply to,
    and check one focus node against the constraint parameters of one shape.
    """

    family: ConstraintFamily
    scopes: FrozenSet[ShapeScope]

    def validate(
        self,
        context: "ValidationContext",
        focus_node: Term,
        shape: Shape,
        depth: int = 0,
    ) -> List[ValidationResult]:
        """
        Check focus_node against the family's parameters on shape.

        Parameters
        ----------
        context : ValidationContext
            Data graph, shape map and recursion bookkeeping for this task.
        focus_node : Term
            Node under test. For property shapes, values are reached from it
            through the shape's path.
        shape : NodeShape or PropertyShape
            Shape carrying the constraint parameters.
        depth : int, default=0
            Current shape-reference nesting depth.

        Returns
        -------
        List[ValidationResult]
            Empty when the parameters are unset or satisfied.
        """
        ...
