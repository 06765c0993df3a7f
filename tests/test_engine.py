# tests/test_engine.py
"""
Tests for shacl_engine.engine.ValidationContext.
"""

import logging

import pytest
from rdflib import Graph, Namespace

from shacl_engine.engine import ValidationContext
from shacl_engine.exceptions import UnresolvedShapeError
from shacl_engine.model import DiagnosticKind, NodeShape
from shacl_engine.reader import parse_shapes
from shacl_engine.shape_map import build_shape_map

EX = Namespace("http://example.org/")


def _context(data, shapes, **kwargs):
    return ValidationContext(data, build_shape_map(parse_shapes(shapes)), **kwargs)


def test_validate_focus_node_runs_node_and_property_constraints(ttl):
    shapes = ttl(
        """
        ex:S a sh:NodeShape ;
            sh:nodeKind sh:IRI ;
            sh:property [ sh:path ex:name ; sh:minCount 1 ] .
        """
    )
    ctx = _context(ttl("ex:x ex:other 1 ."), shapes)
    results = ctx.validate_focus_node(EX.x, ctx.shape_map[EX.S])

    assert len(results) == 1
    assert results[0].path == EX.name


def test_deactivated_shapes_and_properties_produce_nothing(ttl):
    shapes = ttl(
        """
        ex:Off a sh:NodeShape ; sh:deactivated true ; sh:nodeKind sh:Literal .
        ex:On a sh:NodeShape ;
            sh:property [ sh:path ex:name ; sh:minCount 1 ; sh:deactivated true ] .
        """
    )
    ctx = _context(Graph(), shapes)
    assert ctx.validate_focus_node(EX.x, ctx.shape_map[EX.Off]) == []
    assert ctx.validate_focus_node(EX.x, ctx.shape_map[EX.On]) == []


def test_conforms_is_memoized_per_focus_node_and_shape(ttl, monkeypatch):
    shapes = ttl("ex:S a sh:NodeShape ; sh:nodeKind sh:IRI .")
    ctx = _context(Graph(), shapes)
    calls = []
    real = ctx.validate_focus_node

    def counting(focus_node, shape, depth=0):
        calls.append((focus_node, shape.id))
        return real(focus_node, shape, depth)

    monkeypatch.setattr(ctx, "validate_focus_node", counting)

    assert ctx.conforms(EX.x, EX.S, 1) is True
    assert ctx.conforms(EX.x, EX.S, 3) is True
    assert calls == [(EX.x, EX.S)]


def test_conforms_raises_for_unknown_shape():
    ctx = ValidationContext(Graph(), build_shape_map([NodeShape(id=EX.S)]))
    with pytest.raises(UnresolvedShapeError, match=r"is not in the shape map$"):
        ctx.conforms(EX.x, EX.Unknown, 1)


def test_depth_over_limit_returns_no_results_and_records_diagnostic(ttl, caplog):
    shapes = ttl("ex:S a sh:NodeShape ; sh:nodeKind sh:Literal .")
    ctx = _context(Graph(), shapes, max_depth=2)

    with caplog.at_level(logging.ERROR, logger="shacl_engine"):
        assert ctx.validate_focus_node(EX.x, ctx.shape_map[EX.S], depth=2) != []
        assert ctx.validate_focus_node(EX.x, ctx.shape_map[EX.S], depth=3) == []

    (diag,) = ctx.diagnostics
    assert diag.kind is DiagnosticKind.RECURSION_LIMIT
    assert diag.shape_id == EX.S
    assert diag.focus_node == EX.x
    assert "Maximum recursion depth 2 exceeded" in caplog.text
