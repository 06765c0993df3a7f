# src/shacl_engine/graph.py
"""
Graph model helpers.

rdflib supplies the term and graph primitives: URIRef, BNode and Literal are
the three term kinds, and rdflib.Graph indexes triples by subject. This
module adds the lookups the reader and validators share, the bounded RDF
list traversal, and thin wrappers around rdflib's text codecs.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import RDF, XSD
from rdflib.term import Node
from rdflib.util import guess_format

from .config import DEFAULT_MAX_LIST_DEPTH
from .exceptions import ShapeParseError

Term = Union[URIRef, BNode, Literal]
ShapeId = Union[URIRef, BNode]
Number = Union[int, float, Decimal]

NUMERIC_DATATYPES = frozenset(
    {
        XSD.integer,
        XSD.decimal,
        XSD.float,
        XSD.double,
        XSD.int,
        XSD.long,
        XSD.short,
        XSD.byte,
        XSD.nonNegativeInteger,
        XSD.nonPositiveInteger,
        XSD.positiveInteger,
        XSD.negativeInteger,
        XSD.unsignedLong,
        XSD.unsignedInt,
        XSD.unsignedShort,
        XSD.unsignedByte,
    }
)


# ------------------------------------------------------------------------------
# lookups
# ------------------------------------------------------------------------------


def unique(terms: Iterable[Node]) -> List[Node]:
    """Drop repeated terms, keeping first-seen order."""
    seen: Set[Node] = set()
    out: List[Node] = []
    for term in terms:
        if term not in seen:
            seen.add(term)
            out.append(term)
    return out


def objects(graph: Graph, subject: Node, predicate: URIRef) -> List[Term]:
    """
    Return every object of (subject, predicate) as a list.

    A predicate stated once or many times reads the same way, so callers
    never branch on single versus multiple values.
    """
    return unique(graph.objects(subject, predicate))


def instances_of(graph: Graph, cls: URIRef) -> List[Term]:
    """Subjects with a direct rdf:type assertion to cls."""
    return unique(graph.subjects(RDF.type, cls))


def is_instance_of(graph: Graph, term: Node, cls: URIRef) -> bool:
    """
    Check a direct rdf:type assertion.

    Subclass reasoning is not performed and literals are never instances.
    """
    if isinstance(term, Literal):
        return False
    return (term, RDF.type, cls) in graph


def has_description(graph: Graph, subject: Node) -> bool:
    """True if the graph holds at least one triple about subject."""
    return next(iter(graph.predicate_objects(subject)), None) is not None


# ------------------------------------------------------------------------------
# literals
# ------------------------------------------------------------------------------


def effective_datatype(literal: Literal) -> URIRef:
    """
    Datatype of a literal with RDF 1.1 defaults applied.

    Language-tagged literals are rdf:langString and untyped literals are
    xsd:string.
    """
    if literal.datatype is not None:
        return literal.datatype
    if literal.language:
        return RDF.langString
    return XSD.string


def numeric_value(term: Node) -> Optional[Number]:
    """
    Python number for a well-typed numeric literal, else None.

    Booleans, non-numeric datatypes and ill-typed lexical forms such as
    "abc"^^xsd:integer are not numbers.
    """
    if not isinstance(term, Literal):
        return None
    if term.datatype not in NUMERIC_DATATYPES:
        return None
    if getattr(term, "ill_typed", False):
        return None
    value = term.toPython()
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    return value


def lexical_form(term: Node) -> str:
    """The string form used by length and pattern constraints."""
    return str(term)


# ------------------------------------------------------------------------------
# RDF lists
# ------------------------------------------------------------------------------


def read_list(
    graph: Graph, head: Node, max_depth: int = DEFAULT_MAX_LIST_DEPTH
) -> List[Term]:
    """
    Materialize an RDF collection as a Python list.

    The rdf:first / rdf:rest chain is walked iteratively and never more than
    max_depth cells deep.

    Parameters
    ----------
    graph : Graph
        Graph holding the list cells.
    head : Node
        First cell, or rdf:nil for the empty list.
    max_depth : int, default=100
        Maximum number of cells to read.

    Returns
    -------
    List[Term]
        Members in list order.

    Raises
    ------
    ShapeParseError
        If the list is longer than max_depth, a cell lacks rdf:first or
        rdf:rest, or the chain loops back on itself.
    """
    items: List[Term] = []
    visited: Set[Node] = set()
    cell = head
    while cell != RDF.nil:
        if len(items) >= max_depth:
            raise ShapeParseError(
                f"RDF list starting at {head.n3()} exceeds maximum depth {max_depth}"
            )
        if cell in visited:
            raise ShapeParseError(f"RDF list starting at {head.n3()} is cyclic")
        visited.add(cell)

        first = objects(graph, cell, RDF.first)
        rest = objects(graph, cell, RDF.rest)
        if len(first) != 1 or len(rest) != 1:
            raise ShapeParseError(
                f"Malformed RDF list cell {cell.n3()}: expected exactly one "
                f"rdf:first and one rdf:rest, found {len(first)} and {len(rest)}"
            )
        items.append(first[0])
        cell = rest[0]
    return items


# ------------------------------------------------------------------------------
# text codec
# ------------------------------------------------------------------------------


def parse_graph_text(text: str, format: str = "turtle") -> Graph:
    """
    Parse RDF text into a new graph.

    Raises
    ------
    TypeError
        If text is not a string.
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be str, got {type(text).__name__}")
    return Graph().parse(data=text, format=format)


def read_graph(path: Union[str, Path], format: Optional[str] = None) -> Graph:
    """
    Parse an RDF file into a new graph.

    The format is guessed from the file extension when not given, falling
    back to Turtle.
    """
    path = Path(path)
    fmt = format or guess_format(str(path)) or "turtle"
    return Graph().parse(source=str(path), format=fmt)


def write_graph(
    graph: Graph,
    format: str = "turtle",
    prefixes: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Serialize a graph to text with the given namespace prefixes bound.

    The prefixes are bound on a copy; the caller's graph keeps its own.
    """
    out = Graph()
    for prefix, namespace in graph.namespaces():
        out.bind(prefix, namespace, override=True, replace=True)
    for prefix, namespace in (prefixes or {}).items():
        out.bind(prefix, URIRef(namespace), override=True, replace=True)
    out += graph
    return out.serialize(format=format)


def bound_namespaces(graph: Graph) -> Dict[str, str]:
    """Prefix -> namespace mapping declared on a graph, empty prefix excluded."""
    return {prefix: str(ns) for prefix, ns in graph.namespaces() if prefix}
