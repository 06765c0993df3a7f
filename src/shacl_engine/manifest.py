# src/shacl_engine/manifest.py
"""
Runner for W3C SHACL test-suite manifests.

A manifest lists sht:Validate entries. Each entry names a data graph and a
shapes graph (usually the manifest file itself, written <>) and the expected
report, or sht:Failure when the shapes are expected to be rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Union
from urllib.parse import unquote, urlparse

from rdflib import Graph, Literal
from rdflib.namespace import RDF, RDFS
from rdflib.term import Node

from .api import validate
from .config import ValidationOptions
from .exceptions import ShaclEngineError
from .graph import objects, read_graph, read_list
from .model import ValidationReport
from .vocabulary import MF, SH, SHT

LOG = logging.getLogger(__name__)

__all__ = ["ManifestCase", "CaseOutcome", "load_manifest", "run_case"]


@dataclass(frozen=True)
class ManifestCase:
    """One sht:Validate entry with its graphs loaded."""

    id: Node
    label: Optional[str]
    data_graph: Graph
    shapes_graph: Graph
    expect_failure: bool = False
    expected_conforms: Optional[bool] = None
    expected_result_count: int = 0


@dataclass(frozen=True)
class CaseOutcome:
    """Result of running one manifest case."""

    case: ManifestCase
    passed: bool
    report: Optional[ValidationReport] = None
    error: Optional[str] = None


def _uri_to_path(uri: Node) -> Optional[Path]:
    parsed = urlparse(str(uri))
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path)).resolve()


class _ManifestLoader:
    def __init__(self) -> None:
        self.graphs: Dict[Path, Graph] = {}
        self.visited: Set[Path] = set()

    def graph_for(self, path: Path) -> Graph:
        if path not in self.graphs:
            self.graphs[path] = read_graph(path)
        return self.graphs[path]

    def resolve(self, uri: Node) -> Graph:
        # <> in a manifest resolves to the manifest file, which is cached
        path = _uri_to_path(uri)
        if path is None:
            raise ShaclEngineError(f"Cannot load graph {uri}: only file IRIs are supported")
        return self.graph_for(path)

    def load(self, path: Path) -> List[ManifestCase]:
        path = path.resolve()
        if path in self.visited:
            return []
        self.visited.add(path)
        graph = self.graph_for(path)

        cases: List[ManifestCase] = []
        for manifest in graph.subjects(RDF.type, MF.Manifest):
            for include in objects(graph, manifest, MF.include):
                included = _uri_to_path(include)
                if included is not None:
                    cases.extend(self.load(included))
            for head in objects(graph, manifest, MF.entries):
                for entry in read_list(graph, head):
                    if (entry, RDF.type, SHT.Validate) in graph:
                        cases.append(self.case(graph, entry))
                    else:
                        LOG.debug("Skipping non-validate manifest entry %s", entry)
        return cases

    def case(self, graph: Graph, entry: Node) -> ManifestCase:
        action = graph.value(entry, MF.action)
        result = graph.value(entry, MF.result)
        if action is None or result is None:
            raise ShaclEngineError(f"Manifest entry {entry} needs mf:action and mf:result")

        data_uri = graph.value(action, SHT.dataGraph)
        shapes_uri = graph.value(action, SHT.shapesGraph)
        if data_uri is None or shapes_uri is None:
            raise ShaclEngineError(
                f"Manifest entry {entry} needs sht:dataGraph and sht:shapesGraph"
            )
        label = graph.value(entry, RDFS.label)

        if result == SHT.Failure:
            return ManifestCase(
                id=entry,
                label=str(label) if label is not None else None,
                data_graph=self.resolve(data_uri),
                shapes_graph=self.resolve(shapes_uri),
                expect_failure=True,
            )

        conforms = graph.value(result, SH.conforms)
        return ManifestCase(
            id=entry,
            label=str(label) if label is not None else None,
            data_graph=self.resolve(data_uri),
            shapes_graph=self.resolve(shapes_uri),
            expected_conforms=(
                bool(conforms.toPython()) if isinstance(conforms, Literal) else None
            ),
            expected_result_count=len(objects(graph, result, SH.result)),
        )


def load_manifest(path: Union[str, Path]) -> List[ManifestCase]:
    """
    Load every sht:Validate case from a manifest, following mf:include.

    Parameters
    ----------
    path : str or Path
        Manifest file.

    Returns
    -------
    List[ManifestCase]
        Cases in manifest order.

    Raises
    ------
    ShaclEngineError
        If an entry is incomplete or names a graph that is not a local file.
    """
    return _ManifestLoader().load(Path(path))


def run_case(
    case: ManifestCase, options: Optional[ValidationOptions] = None
) -> CaseOutcome:
    """
    Validate one case and compare with its expected outcome.

    A case passes when conformance and the number of results match, or, for
    an expected failure, when the engine rejects the shapes.
    """
    try:
        report = validate(case.data_graph, case.shapes_graph, options)
    except ShaclEngineError as e:
        return CaseOutcome(case, passed=case.expect_failure, error=str(e))

    if case.expect_failure:
        return CaseOutcome(case, passed=False, report=report)

    passed = len(report.results) == case.expected_result_count
    if case.expected_conforms is not None:
        passed = passed and report.conforms == case.expected_conforms
    if not passed:
        LOG.info(
            "Case %s: expected conforms=%s with %d result(s), got conforms=%s with %d",
            case.label or case.id,
            case.expected_conforms,
            case.expected_result_count,
            report.conforms,
            len(report.results),
        )
    return CaseOutcome(case, passed=passed, report=report)
