# tests/test_writer.py
"""
Tests for shacl_engine.writer.
"""

import pytest
from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import RDF

from shacl_engine import ValidationReport, ValidationResult, parse_report, to_graph, to_text, validate
from shacl_engine.model import Severity
from shacl_engine.vocabulary import MIN_COUNT, SH

EX = Namespace("http://example.org/")


def _result(**kw):
    base = dict(
        severity=Severity.VIOLATION,
        focus_node=EX.alice,
        path=EX.name,
        source_shape=EX.PersonShape,
        message="Property has too few values (expected at least 1, found 0)",
        details={"constraint_component": MIN_COUNT, "value": None},
    )
    base.update(kw)
    return ValidationResult(**base)


def _only(graph, subject, predicate):
    values = list(graph.objects(subject, predicate))
    assert len(values) == 1, values
    return values[0]


def test_empty_report_graph():
    graph = to_graph(ValidationReport())
    (report_node,) = graph.subjects(RDF.type, SH.ValidationReport)
    assert _only(graph, report_node, SH.conforms) == Literal(True)
    assert list(graph.objects(report_node, SH.result)) == []


def test_result_triples():
    graph = to_graph(ValidationReport.from_results([_result()]))
    (report_node,) = graph.subjects(RDF.type, SH.ValidationReport)
    assert _only(graph, report_node, SH.conforms) == Literal(False)

    node = _only(graph, report_node, SH.result)
    assert (node, RDF.type, SH.ValidationResult) in graph
    assert _only(graph, node, SH.focusNode) == EX.alice
    assert _only(graph, node, SH.resultPath) == EX.name
    assert _only(graph, node, SH.sourceShape) == EX.PersonShape
    assert _only(graph, node, SH.resultSeverity) == SH.Violation
    assert _only(graph, node, SH.sourceConstraintComponent) == MIN_COUNT
    assert str(_only(graph, node, SH.resultMessage)).startswith("Property has too few")
    assert list(graph.objects(node, SH.value)) == []


def test_optional_fields_are_omitted():
    result = _result(
        path=None,
        message=None,
        severity=Severity.WARNING,
        details={"constraint_component": None, "value": Literal("x")},
    )
    graph = to_graph(ValidationReport.from_results([result]))
    (report_node,) = graph.subjects(RDF.type, SH.ValidationReport)
    node = _only(graph, report_node, SH.result)

    assert list(graph.objects(node, SH.resultPath)) == []
    assert list(graph.objects(node, SH.resultMessage)) == []
    assert list(graph.objects(node, SH.sourceConstraintComponent)) == []
    assert _only(graph, node, SH.value) == Literal("x")
    assert _only(graph, report_node, SH.conforms) == Literal(True)


def test_to_graph_rejects_non_reports():
    with pytest.raises(TypeError, match=r"^report must be ValidationReport, got dict"):
        to_graph({"conforms": True})


def test_to_text_binds_prefixes():
    report = ValidationReport.from_results([_result()])
    text = to_text(report, prefixes={"ex": "http://example.org/"})
    assert "@prefix sh: <http://www.w3.org/ns/shacl#>" in text
    assert "@prefix ex: <http://example.org/>" in text
    assert "ex:alice" in text
    assert "sh:ValidationReport" in text


def test_to_text_accepts_a_graph():
    graph = to_graph(ValidationReport())
    text = to_text(graph, format="nt")
    assert "<http://www.w3.org/ns/shacl#ValidationReport>" in text


def test_to_text_rejects_other_inputs():
    with pytest.raises(TypeError, match=r"^graph_or_report must be Graph or ValidationReport"):
        to_text("report")


def test_written_report_reads_back(ttl):
    data = ttl('ex:x ex:age "a", "b" . ex:y ex:age 3 .')
    shapes = ttl(
        "ex:S a sh:NodeShape ; sh:targetNode ex:x, ex:y ; "
        "sh:property [ sh:path ex:age ; sh:datatype xsd:integer ; sh:maxCount 1 ] ."
    )
    report = validate(data, shapes, parallel=False)
    back = parse_report(to_text(report))

    assert back.conforms == report.conforms
    # the property shape is a blank node, so compare everything but source_shape
    def keys(rep):
        return sorted(
            (str(r.focus_node), str(r.path), str(r.constraint_component), str(r.value))
            for r in rep.results
        )

    assert len(report.results) == 3
    assert keys(back) == keys(report)
    assert isinstance(Graph().parse(data=to_text(report), format="turtle"), Graph)


def test_to_text_leaves_the_callers_bindings_alone():
    graph = to_graph(ValidationReport.from_results([_result()]))
    graph.bind("ex", "http://other.example/")

    text = to_text(graph, prefixes={"ex": "http://example.org/"})

    assert "@prefix ex: <http://example.org/>" in text
    assert dict(graph.namespaces())["ex"] == URIRef("http://other.example/")
