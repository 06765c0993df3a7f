# src/shacl_engine/report_parser.py
"""
Read SHACL validation report graphs back into ValidationReport objects.
"""

from __future__ import annotations

import logging
from typing import Union

from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF

from .exceptions import ReportParseError
from .graph import objects, parse_graph_text, unique
from .model import Severity, ValidationReport, ValidationResult
from .vocabulary import SH

LOG = logging.getLogger(__name__)


def parse_report(
    source: Union[str, Graph], format: str = "turtle"
) -> ValidationReport:
    """
    Parse a validation report.

    Parameters
    ----------
    source : str or Graph
        Report text, or a graph already holding the report.
    format : str, default="turtle"
        Parser used when source is text.

    Returns
    -------
    ValidationReport
        The report's results. Conformance is recomputed from them; a stated
        sh:conforms that disagrees is logged.

    Raises
    ------
    ReportParseError
        If there is not exactly one sh:ValidationReport node, or a result
        lacks its focus node, source shape or severity.
    """
    graph = source if isinstance(source, Graph) else parse_graph_text(source, format)

    reports = unique(graph.subjects(RDF.type, SH.ValidationReport))
    if len(reports) != 1:
        raise ReportParseError(
            f"Expected exactly one sh:ValidationReport, found {len(reports)}"
        )
    report_node = reports[0]

    results = []
    for node in objects(graph, report_node, SH.result):
        results.append(_parse_result(graph, node))
    report = ValidationReport.from_results(results)

    stated = graph.value(report_node, SH.conforms)
    if isinstance(stated, Literal) and stated.toPython() != report.conforms:
        LOG.warning(
            "Report states sh:conforms %s but its results imply %s",
            stated,
            report.conforms,
        )
    return report


def _required(graph: Graph, node, predicate: URIRef):
    value = graph.value(node, predicate)
    if value is None:
        raise ReportParseError(f"Validation result {node.n3()} has no {predicate}")
    return value


def _parse_result(graph: Graph, node) -> ValidationResult:
    try:
        severity = Severity.from_iri(_required(graph, node, SH.resultSeverity))
    except ValueError as e:
        raise ReportParseError(str(e)) from e

    message = graph.value(node, SH.resultMessage)
    return ValidationResult(
        severity=severity,
        focus_node=_required(graph, node, SH.focusNode),
        path=graph.value(node, SH.resultPath),
        source_shape=_required(graph, node, SH.sourceShape),
        message=str(message) if message is not None else None,
        details={
            "constraint_component": graph.value(node, SH.sourceConstraintComponent),
            "value": graph.value(node, SH.value),
        },
    )
