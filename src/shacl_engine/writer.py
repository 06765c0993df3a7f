# src/shacl_engine/writer.py
"""
Report writer.

Renders a ValidationReport as a SHACL validation report graph and as text.
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

from rdflib import BNode, Graph, Literal
from rdflib.namespace import RDF
from rdflib.term import Node

from .graph import write_graph
from .model import ValidationReport
from .vocabulary import DEFAULT_REPORT_PREFIXES, SH

__all__ = ["to_graph", "to_text"]


def to_graph(report: ValidationReport) -> Graph:
    """
    Build the sh:ValidationReport graph for a report.

    The report node carries sh:conforms and one sh:result per result.
    sh:resultPath and sh:resultMessage are omitted when unset;
    sh:sourceConstraintComponent and sh:value are written when the result's
    details hold them.

    Parameters
    ----------
    report : ValidationReport
        Report to render.

    Returns
    -------
    Graph
        A new graph holding only the report.

    Raises
    ------
    TypeError
        If report is not a ValidationReport.
    """
    if not isinstance(report, ValidationReport):
        raise TypeError(f"report must be ValidationReport, got {type(report).__name__}")

    graph = Graph()
    for prefix, namespace in DEFAULT_REPORT_PREFIXES.items():
        graph.bind(prefix, namespace)

    report_node = BNode()
    graph.add((report_node, RDF.type, SH.ValidationReport))
    graph.add((report_node, SH.conforms, Literal(report.conforms)))

    for result in report.results:
        node = BNode()
        graph.add((report_node, SH.result, node))
        graph.add((node, RDF.type, SH.ValidationResult))
        graph.add((node, SH.focusNode, result.focus_node))
        graph.add((node, SH.sourceShape, result.source_shape))
        graph.add((node, SH.resultSeverity, result.severity.value))
        if result.path is not None:
            graph.add((node, SH.resultPath, result.path))
        if result.message is not None:
            graph.add((node, SH.resultMessage, Literal(result.message)))
        if result.constraint_component is not None:
            graph.add((node, SH.sourceConstraintComponent, result.constraint_component))
        if isinstance(result.value, Node):
            graph.add((node, SH.value, result.value))

    return graph


def to_text(
    graph_or_report: Union[Graph, ValidationReport],
    prefixes: Optional[Mapping[str, str]] = None,
    format: str = "turtle",
) -> str:
    """
    Serialize a report (or an already-built report graph) to text.

    Parameters
    ----------
    graph_or_report : Graph or ValidationReport
        What to serialize. Reports are rendered with to_graph first.
    prefixes : Mapping[str, str] or None
        Namespace prefixes to bind, on top of sh, rdf, rdfs and xsd.
    format : str, default="turtle"
        Any rdflib serializer name.

    Returns
    -------
    str
        Serialized report.
    """
    if isinstance(graph_or_report, ValidationReport):
        graph = to_graph(graph_or_report)
    elif isinstance(graph_or_report, Graph):
        graph = graph_or_report
    else:
        raise TypeError(
            f"graph_or_report must be Graph or ValidationReport, "
            f"got {type(graph_or_report).__name__}"
        )
    merged = {**DEFAULT_REPORT_PREFIXES, **(prefixes or {})}
    return write_graph(graph, format=format, prefixes=merged)
