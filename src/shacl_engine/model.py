# src/shacl_engine/model.py
"""
Shape descriptors and validation results.

Shapes are immutable once the reader has built them; results are appended by
validators and assembled into a ValidationReport exactly once per run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from rdflib import BNode, Literal, URIRef
from rdflib.term import Node

from .graph import Number, ShapeId, Term
from .vocabulary import SH

__all__ = [
    "Severity",
    "NodeKind",
    "SparqlConstraint",
    "NodeShape",
    "PropertyShape",
    "ValidationResult",
    "DiagnosticKind",
    "Diagnostic",
    "ValidationReport",
]


class Severity(Enum):
    """SHACL result severity levels."""

    VIOLATION = SH.Violation
    WARNING = SH.Warning
    INFO = SH.Info

    @classmethod
    def from_iri(cls, iri: Node) -> "Severity":
        for member in cls:
            if member.value == iri:
                return member
        raise ValueError(f"Unknown severity: {iri}")


class NodeKind(Enum):
    """Term kinds and pairwise unions accepted by sh:nodeKind."""

    IRI = SH.IRI
    BLANK_NODE = SH.BlankNode
    LITERAL = SH.Literal
    BLANK_NODE_OR_IRI = SH.BlankNodeOrIRI
    BLANK_NODE_OR_LITERAL = SH.BlankNodeOrLiteral
    IRI_OR_LITERAL = SH.IRIOrLiteral

    @classmethod
    def from_iri(cls, iri: Node) -> "NodeKind":
        for member in cls:
            if member.value == iri:
                return member
        raise ValueError(f"Unknown node kind: {iri}")

    def matches(self, term: Node) -> bool:
        if isinstance(term, URIRef):
            tag = "IRI"
        elif isinstance(term, BNode):
            tag = "BLANK_NODE"
        elif isinstance(term, Literal):
            tag = "LITERAL"
        else:
            return False
        return tag in _NODE_KIND_TAGS[self]


_NODE_KIND_TAGS = {
    NodeKind.IRI: {"IRI"},
    NodeKind.BLANK_NODE: {"BLANK_NODE"},
    NodeKind.LITERAL: {"LITERAL"},
    NodeKind.BLANK_NODE_OR_IRI: {"BLANK_NODE", "IRI"},
    NodeKind.BLANK_NODE_OR_LITERAL: {"BLANK_NODE", "LITERAL"},
    NodeKind.IRI_OR_LITERAL: {"IRI", "LITERAL"},
}


# ------------------------------------------------------------------------------
# shapes
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class SparqlConstraint:
    """
    A SPARQL-based constraint attached to a node shape.

    The query is a SELECT in which $this stands for the focus node; every
    solution is reported as one violation.
    """

    query_text: str
    message: Optional[str] = None
    prefixes: Mapping[str, str] = field(default_factory=dict)
    deactivated: bool = False


@dataclass(frozen=True, kw_only=True)
class ShapeConstraints:
    """
    Constraint parameters shared by node and property shapes.

    Every field is optional; an unset field means the constraint is absent.
    """

    id: ShapeId
    datatype: Optional[URIRef] = None
    class_: Optional[URIRef] = None
    node_kind: Optional[NodeKind] = None
    min_inclusive: Optional[Number] = None
    min_exclusive: Optional[Number] = None
    max_inclusive: Optional[Number] = None
    max_exclusive: Optional[Number] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    in_values: Optional[Tuple[Term, ...]] = None
    has_value: Optional[Term] = None
    language_in: Optional[Tuple[str, ...]] = None
    message: Optional[str] = None
    severity: Severity = Severity.VIOLATION
    deactivated: bool = False


@dataclass(frozen=True, kw_only=True)
class PropertyShape(ShapeConstraints):
    """Constraints on the values reached from a focus node through path."""

    path: URIRef
    min_count: Optional[int] = None
    max_count: Optional[int] = None
    qualified_shape: Optional[ShapeId] = None
    qualified_min_count: Optional[int] = None
    qualified_max_count: Optional[int] = None


@dataclass(frozen=True, kw_only=True)
class NodeShape(ShapeConstraints):
    """
    Constraints on a focus node, with target selection.

    top_level is False for shapes discovered only through references from
    other shapes; those are resolved through the shape map and never
    targeted directly.
    """

    target_classes: Tuple[URIRef, ...] = ()
    target_nodes: Tuple[Term, ...] = ()
    implicit_class_target: Optional[URIRef] = None
    property_shapes: Tuple[PropertyShape, ...] = ()
    and_shapes: Tuple[ShapeId, ...] = ()
    or_shapes: Tuple[ShapeId, ...] = ()
    xone_shapes: Tuple[ShapeId, ...] = ()
    not_shape: Optional[ShapeId] = None
    sparql_constraints: Tuple[SparqlConstraint, ...] = ()
    top_level: bool = True

    def referenced_shapes(self) -> List[ShapeId]:
        """Ids of every shape this shape (or one of its properties) refers to."""
        refs: List[ShapeId] = [*self.and_shapes, *self.or_shapes, *self.xone_shapes]
        if self.not_shape is not None:
            refs.append(self.not_shape)
        for prop in self.property_shapes:
            if prop.qualified_shape is not None:
                refs.append(prop.qualified_shape)
        return refs


# ------------------------------------------------------------------------------
# results
# ------------------------------------------------------------------------------


def _term_key(term: Optional[Node]) -> str:
    return "" if term is None else term.n3()


@dataclass(frozen=True)
class ValidationResult:
    """
    A single constraint failure.

    Attributes
    ----------
    severity : Severity
        Severity of the source shape.
    focus_node : Term
        Node that was validated.
    path : URIRef or None
        Property path for property-level results, None for node-level ones.
    source_shape : URIRef or BNode
        Shape that declared the failing constraint.
    message : str or None
        Human-readable description.
    details : dict
        Diagnostics; always has "constraint_component" and "value".
    """

    severity: Severity
    focus_node: Term
    path: Optional[URIRef]
    source_shape: ShapeId
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def constraint_component(self) -> Optional[URIRef]:
        return self.details.get("constraint_component")

    @property
    def value(self) -> Optional[Term]:
        return self.details.get("value")

    def sort_key(self) -> Tuple[str, str, str]:
        return (
            _term_key(self.focus_node),
            _term_key(self.path),
            _term_key(self.source_shape),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name.lower(),
            "focus_node": str(self.focus_node),
            "path": str(self.path) if self.path is not None else None,
            "source_shape": str(self.source_shape),
            "message": self.message,
            "constraint_component": (
                str(self.constraint_component)
                if self.constraint_component is not None
                else None
            ),
            "value": str(self.value) if self.value is not None else None,
        }


class DiagnosticKind(Enum):
    """Soft failures absorbed during a run."""

    SHAPE_TIMEOUT = "shape_timeout"
    SHAPE_ERROR = "shape_error"
    QUERY_ERROR = "query_error"
    RECURSION_LIMIT = "recursion_limit"


@dataclass(frozen=True)
class Diagnostic:
    """A soft failure that did not abort the run."""

    kind: DiagnosticKind
    shape_id: ShapeId
    message: str
    focus_node: Optional[Term] = None


@dataclass(frozen=True)
class ValidationReport:
    """
    Outcome of a validation run.

    conforms is derived from the results: a report conforms when none of its
    results is a violation. Diagnostics record absorbed soft failures and
    never affect conformance.
    """

    results: Tuple[ValidationResult, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @classmethod
    def from_results(
        cls,
        results: Sequence[ValidationResult],
        diagnostics: Sequence[Diagnostic] = (),
    ) -> "ValidationReport":
        return cls(results=tuple(results), diagnostics=tuple(diagnostics))

    @property
    def conforms(self) -> bool:
        return not any(r.severity is Severity.VIOLATION for r in self.results)

    def violations(self) -> List[ValidationResult]:
        return [r for r in self.results if r.severity is Severity.VIOLATION]

    def warnings(self) -> List[ValidationResult]:
        return [r for r in self.results if r.severity is Severity.WARNING]

    def infos(self) -> List[ValidationResult]:
        return [r for r in self.results if r.severity is Severity.INFO]

    def sorted_results(self) -> List[ValidationResult]:
        """Results ordered by (focus_node, path, source_shape)."""
        return sorted(self.results, key=ValidationResult.sort_key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conforms": self.conforms,
            "results_count": len(self.results),
            "violations_count": len(self.violations()),
            "warnings_count": len(self.warnings()),
            "infos_count": len(self.infos()),
            "results": [r.to_dict() for r in self.sorted_results()],
            "diagnostics": [
                {
                    "kind": d.kind.value,
                    "shape_id": str(d.shape_id),
                    "message": d.message,
                }
                for d in self.diagnostics
            ],
        }
