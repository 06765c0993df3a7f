# tests/test_validator.py
"""
Tests for shacl_engine.validator (the orchestrator).
"""

import logging
import time

import pytest
from rdflib import Graph, Literal, Namespace

from shacl_engine import (
    DiagnosticKind,
    ShapeParseError,
    ValidationOptions,
    validator,
)
from shacl_engine.reader import parse_shapes
from shacl_engine.validator import run, select_target_nodes

EX = Namespace("http://example.org/")

DATA = """
ex:alice a ex:Person ; ex:name "Alice" ; ex:age 30 .
ex:bob a ex:Person ; ex:age "old" .
ex:carol a ex:Person, ex:Employee ; ex:name "C" .
ex:acme a ex:Company .
"""

SHAPES = """
ex:PersonShape a sh:NodeShape ;
    sh:targetClass ex:Person ;
    sh:property [ sh:path ex:name ; sh:minCount 1 ; sh:minLength 2 ] ;
    sh:property [ sh:path ex:age ; sh:datatype xsd:integer ] .

ex:EmployeeShape a sh:NodeShape ;
    sh:targetClass ex:Employee ;
    sh:property [ sh:path ex:employer ; sh:minCount 1 ] .

ex:Company a rdfs:Class, sh:NodeShape ;
    sh:property [ sh:path ex:name ; sh:minCount 1 ; sh:severity sh:Warning ] .

ex:NodeTargets a sh:NodeShape ;
    sh:targetNode ex:alice, ex:nobody ;
    sh:nodeKind sh:IRI ;
    sh:not [ sh:property [ sh:path ex:name ; sh:minCount 1 ] ] .
"""


def _key(result):
    return (
        result.focus_node,
        result.path,
        result.source_shape,
        result.constraint_component,
        result.value,
    )


# ------------------------------------------------------------------------------
# target selection
# ------------------------------------------------------------------------------


def test_targets_are_deduplicated_union(ttl):
    shapes = parse_shapes(
        ttl(
            """
            ex:Person a rdfs:Class, sh:NodeShape ;
                sh:targetClass ex:Person, ex:Employee ;
                sh:targetNode ex:alice, "lit" .
            """
        )
    )
    targets = select_target_nodes(ttl(DATA), shapes[0])
    assert sorted(targets, key=str) == sorted(
        [EX.alice, EX.bob, EX.carol, Literal("lit")], key=str
    )
    assert len(targets) == len(set(targets))


def test_shape_without_targets_selects_nothing(ttl):
    (shape,) = parse_shapes(ttl("ex:S a sh:NodeShape ; sh:nodeKind sh:IRI ."))
    assert select_target_nodes(ttl(DATA), shape) == []


# ------------------------------------------------------------------------------
# runs
# ------------------------------------------------------------------------------


def test_empty_shapes_graph_conforms(ttl):
    report = run(ttl(DATA), Graph())
    assert report.conforms is True
    assert report.results == ()


def test_full_run_results(ttl):
    report = run(ttl(DATA), ttl(SHAPES), ValidationOptions(parallel=False))
    keys = {(r.focus_node, r.source_shape if r.path is None else r.path) for r in report.results}

    assert (EX.bob, EX.name) in keys  # missing name
    assert (EX.bob, EX.age) in keys  # "old" is not an integer
    assert (EX.carol, EX.name) in keys  # name too short
    assert (EX.carol, EX.employer) in keys
    assert (EX.acme, EX.name) in keys  # implicit class target, warning
    assert (EX.alice, EX.NodeTargets) in keys  # has a name, so sh:not fails
    assert len(report.results) == 6
    assert not report.conforms
    assert len(report.warnings()) == 1
    assert len(report.violations()) == 5


def test_conforms_ignores_warnings_and_infos(ttl):
    shapes = """
    ex:S a sh:NodeShape ; sh:targetNode ex:x ; sh:severity sh:Warning ; sh:nodeKind sh:Literal .
    ex:T a sh:NodeShape ; sh:targetNode ex:x ; sh:severity sh:Info ; sh:nodeKind sh:Literal .
    """
    report = run(ttl("ex:x ex:p 1 ."), ttl(shapes))
    assert len(report.results) == 2
    assert report.conforms is True
    assert report.conforms == (not report.violations())


def test_parallel_and_sequential_give_the_same_result_set(ttl):
    data, shapes = ttl(DATA), ttl(SHAPES)
    sequential = run(data, shapes, ValidationOptions(parallel=False))
    parallel = run(data, shapes, ValidationOptions(parallel=True, max_concurrency=2))

    assert sorted(map(_key, sequential.results), key=str) == sorted(
        map(_key, parallel.results), key=str
    )
    assert sequential.conforms == parallel.conforms


def test_deactivated_top_level_shape_is_skipped(ttl):
    shapes = "ex:S a sh:NodeShape ; sh:targetNode ex:x ; sh:nodeKind sh:Literal ; sh:deactivated true ."
    assert run(ttl("ex:x ex:p 1 ."), ttl(shapes)).results == ()


def test_sorted_results_order(ttl):
    report = run(ttl(DATA), ttl(SHAPES))
    ordered = report.sorted_results()
    assert [r.sort_key() for r in ordered] == sorted(r.sort_key() for r in report.results)


# ------------------------------------------------------------------------------
# hard failures
# ------------------------------------------------------------------------------


def test_parse_failure_aborts_the_run(ttl):
    with pytest.raises(ShapeParseError, match=r"^Invalid sh:pattern"):
        run(ttl(DATA), ttl('ex:S a sh:NodeShape ; sh:targetNode ex:x ; sh:pattern "(" .'))


def test_rejects_non_graph_inputs(ttl):
    with pytest.raises(TypeError, match=r"^data_graph must be rdflib.Graph, got str"):
        run("ex:a ex:b ex:c .", Graph())
    with pytest.raises(TypeError, match=r"^shapes_graph must be rdflib.Graph, got NoneType"):
        run(Graph(), None)
    with pytest.raises(TypeError, match=r"^options must be ValidationOptions, got dict"):
        run(Graph(), Graph(), {"parallel": False})


# ------------------------------------------------------------------------------
# soft failures
# ------------------------------------------------------------------------------


@pytest.mark.parametrize("parallel", [True, False])
def test_failing_shape_task_is_absorbed(ttl, monkeypatch, caplog, parallel):
    real = validator.validate_shape

    def flaky(data_graph, shape, shape_map, options):
        if shape.id == EX.EmployeeShape:
            raise RuntimeError("boom")
        return real(data_graph, shape, shape_map, options)

    monkeypatch.setattr(validator, "validate_shape", flaky)
    with caplog.at_level(logging.ERROR, logger="shacl_engine"):
        report = run(ttl(DATA), ttl(SHAPES), ValidationOptions(parallel=parallel))

    assert EX.EmployeeShape not in {r.source_shape for r in report.results}
    assert len(report.results) == 5
    (diag,) = report.diagnostics
    assert diag.kind is DiagnosticKind.SHAPE_ERROR
    assert diag.shape_id == EX.EmployeeShape
    assert "RuntimeError: boom" in diag.message
    assert "Validation of shape <http://example.org/EmployeeShape> failed" in caplog.text


def test_slow_shape_task_times_out_without_stopping_the_run(ttl, monkeypatch, caplog):
    real = validator.validate_shape

    def slow(data_graph, shape, shape_map, options):
        if shape.id == EX.EmployeeShape:
            time.sleep(1.0)
        return real(data_graph, shape, shape_map, options)

    monkeypatch.setattr(validator, "validate_shape", slow)
    options = ValidationOptions(parallel=True, timeout_ms=100, max_concurrency=4)

    started = time.monotonic()
    with caplog.at_level(logging.WARNING, logger="shacl_engine"):
        report = run(ttl(DATA), ttl(SHAPES), options)
    elapsed = time.monotonic() - started

    assert elapsed < 0.9
    assert EX.EmployeeShape not in {r.source_shape for r in report.results}
    assert len(report.results) == 5
    (diag,) = report.diagnostics
    assert diag.kind is DiagnosticKind.SHAPE_TIMEOUT
    assert "timed out" in caplog.text


def test_timed_out_shape_frees_its_slot(ttl, monkeypatch):
    real = validator.validate_shape

    def slow(data_graph, shape, shape_map, options):
        if shape.id == EX.EmployeeShape:
            time.sleep(1.5)
        return real(data_graph, shape, shape_map, options)

    monkeypatch.setattr(validator, "validate_shape", slow)
    options = ValidationOptions(parallel=True, timeout_ms=100, max_concurrency=1)

    started = time.monotonic()
    report = run(ttl(DATA), ttl(SHAPES), options)
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert len(report.results) == 5
    assert [d.kind for d in report.diagnostics] == [DiagnosticKind.SHAPE_TIMEOUT]
