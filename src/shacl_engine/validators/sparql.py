# src/shacl_engine/validators/sparql.py
"""
SPARQL-based constraints (sh:sparql with sh:select).

Every solution of the SELECT query is reported as a result for the focus
node. Query failures are absorbed: they are logged, recorded as a
diagnostic, and the constraint contributes no results.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Tuple

from rdflib import BNode
from rdflib.term import Node

from ..graph import Term
from ..model import DiagnosticKind, NodeShape, SparqlConstraint, ValidationResult
from ..vocabulary import SPARQL
from .base import ConstraintFamily, ShapeScope
from .registry import register

LOG = logging.getLogger(__name__)

_THIS = re.compile(r"[$?]this\b")
_PROJECTION = re.compile(
    r"\bSELECT\b(?P<vars>[^{]*?)(?=\bWHERE\b|\{)", re.IGNORECASE | re.DOTALL
)


def substitute_this(query_text: str, focus_node: Term) -> Tuple[str, Dict[str, Node]]:
    """
    Put the focus node in place of $this (or ?this, the same variable).

    IRIs and literals are written into the query text. When $this is
    projected it becomes ?this and is bound at the start of the WHERE block.
    Blank node labels are local to a graph and cannot be written into a
    query, so a blank focus node is pre-bound to $this instead.

    Parameters
    ----------
    query_text : str
        SELECT query using $this or ?this.
    focus_node : Term
        Node under test.

    Returns
    -------
    tuple of (str, dict)
        The query text to run and the initial bindings to run it with.
    """
    if isinstance(focus_node, BNode):
        return query_text, {"this": focus_node}

    serialized = focus_node.n3()
    projection = _PROJECTION.search(query_text)
    if projection is None or not _THIS.search(projection.group("vars")):
        return _THIS.sub(lambda _: serialized, query_text), {}

    start, end = projection.span("vars")
    head = query_text[:start] + _THIS.sub("?this", query_text[start:end])
    body = _THIS.sub(lambda _: serialized, query_text[end:])
    brace = body.find("{")
    if brace != -1:
        body = body[: brace + 1] + f" BIND({serialized} AS ?this) ." + body[brace + 1 :]
    return head + body, {}


@register(ConstraintFamily.SPARQL)
class SparqlValidator:
    family = ConstraintFamily.SPARQL
    scopes = frozenset({ShapeScope.NODE})

    def validate(
        self, context, focus_node: Term, shape: NodeShape, depth: int = 0
    ) -> List[ValidationResult]:
        results: List[ValidationResult] = []
        for constraint in shape.sparql_constraints:
            if constraint.deactivated:
                continue
            try:
                rows = self._run_query(context.data_graph, constraint, focus_node)
            except Exception as e:
                LOG.warning(
                    "SPARQL constraint on shape %s failed for %s: %s",
                    shape.id.n3(),
                    focus_node.n3(),
                    e,
                )
                context.record(
                    DiagnosticKind.QUERY_ERROR,
                    shape.id,
                    f"SPARQL constraint failed: {e}",
                    focus_node,
                )
                continue

            for bindings in rows:
                results.append(
                    ValidationResult(
                        severity=shape.severity,
                        focus_node=focus_node,
                        path=None,
                        source_shape=shape.id,
                        message=constraint.message
                        or shape.message
                        or "SPARQL constraint violated",
                        details={
                            "constraint_component": SPARQL,
                            "value": bindings.get("value"),
                            "bindings": bindings,
                        },
                    )
                )
        return results

    @staticmethod
    def _run_query(graph, constraint: SparqlConstraint, focus_node: Term) -> List[Dict]:
        text, bindings = substitute_this(constraint.query_text, focus_node)
        result = graph.query(
            text, initNs=dict(constraint.prefixes), initBindings=bindings
        )
        if result.type != "SELECT":
            raise ValueError(f"expected a SELECT query, got {result.type}")
        # Solutions are materialized here so evaluation errors surface inside
        # the caller's error handling
        return [
            {str(name): value for name, value in row.asdict().items()}
            for row in result
        ]
