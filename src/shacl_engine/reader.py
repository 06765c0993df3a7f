# src/shacl_engine/reader.py
"""
Shape reader.

Turns a shapes graph into NodeShape / PropertyShape descriptors. Parsing is
all-or-nothing: any malformed parameter aborts with ShapeParseError.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS
from rdflib.term import Node

from .config import DEFAULT_MAX_LIST_DEPTH
from .exceptions import ShapeParseError
from .graph import (
    ShapeId,
    Term,
    bound_namespaces,
    has_description,
    numeric_value,
    objects,
    read_list,
    unique,
)
from .model import NodeKind, NodeShape, PropertyShape, Severity, SparqlConstraint
from .vocabulary import SH

LOG = logging.getLogger(__name__)

__all__ = ["parse_shapes"]

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def parse_shapes(
    shapes_graph: Graph, *, max_list_depth: int = DEFAULT_MAX_LIST_DEPTH
) -> List[NodeShape]:
    """
    Parse every node shape in a shapes graph.

    Declared shapes (subjects typed sh:NodeShape) come first, followed by the
    shapes discovered through references from logical operators and
    qualified value shapes. Discovery repeats until no new ids appear, so
    inline sub-shapes nested at any level are found.

    Parameters
    ----------
    shapes_graph : Graph
        Graph holding the shape definitions.
    max_list_depth : int, default=100
        Maximum number of cells read from any RDF list.

    Returns
    -------
    List[NodeShape]
        All shapes, declared and discovered.

    Raises
    ------
    TypeError
        If shapes_graph is not an rdflib Graph.
    ShapeParseError
        If a shape is malformed, a pattern does not compile, a list is too
        deep or malformed, or a reference cannot be resolved.
    """
    if not isinstance(shapes_graph, Graph):
        raise TypeError(
            f"shapes_graph must be rdflib.Graph, got {type(shapes_graph).__name__}"
        )
    return _ShapeReader(shapes_graph, max_list_depth).read()


class _ShapeReader:
    def __init__(self, graph: Graph, max_list_depth: int) -> None:
        self.graph = graph
        self.max_list_depth = max_list_depth
        self.prefixes = bound_namespaces(graph)

    def read(self) -> List[NodeShape]:
        shapes: Dict[ShapeId, NodeShape] = {}
        for shape_id in unique(self.graph.subjects(RDF.type, SH.NodeShape)):
            if isinstance(shape_id, Literal):
                continue
            shapes[shape_id] = self.node_shape(shape_id, top_level=True)

        while True:
            pending = unique(
                ref
                for shape in list(shapes.values())
                for ref in shape.referenced_shapes()
                if ref not in shapes
            )
            if not pending:
                break
            for ref in pending:
                # A blank node with no triples is a valid empty shape;
                # an IRI nobody describes is a dangling reference.
                if isinstance(ref, URIRef) and not has_description(self.graph, ref):
                    raise ShapeParseError(f"Unresolvable shape reference: {ref.n3()}")
                LOG.debug("Discovered referenced shape %s", ref.n3())
                shapes[ref] = self.node_shape(ref, top_level=False)

        return list(shapes.values())

    # --------------------------------------------------------------------------
    # shapes
    # --------------------------------------------------------------------------

    def node_shape(self, shape_id: ShapeId, *, top_level: bool) -> NodeShape:
        implicit = None
        if isinstance(shape_id, URIRef) and (shape_id, RDF.type, RDFS.Class) in self.graph:
            implicit = shape_id

        return NodeShape(
            id=shape_id,
            top_level=top_level,
            target_classes=tuple(
                self.iri(shape_id, SH.targetClass, o)
                for o in objects(self.graph, shape_id, SH.targetClass)
            ),
            target_nodes=tuple(objects(self.graph, shape_id, SH.targetNode)),
            implicit_class_target=implicit,
            property_shapes=tuple(
                self.property_shape(shape_id, p)
                for p in objects(self.graph, shape_id, SH.property)
            ),
            and_shapes=self.shape_list(shape_id, SH["and"]),
            or_shapes=self.shape_list(shape_id, SH["or"]),
            xone_shapes=self.shape_list(shape_id, SH.xone),
            not_shape=self.shape_ref(shape_id, SH["not"]),
            sparql_constraints=tuple(
                self.sparql_constraint(shape_id, node)
                for node in objects(self.graph, shape_id, SH.sparql)
            ),
            **self.constraints(shape_id),
        )

    def property_shape(self, parent: ShapeId, shape_id: Node) -> PropertyShape:
        if isinstance(shape_id, Literal):
            raise ShapeParseError(
                f"sh:property of {parent.n3()} must be a shape node, got {shape_id.n3()}"
            )
        path = self.single(shape_id, SH.path)
        if path is None:
            raise ShapeParseError(
                f"Property shape {shape_id.n3()} is missing required sh:path"
            )
        if not isinstance(path, URIRef):
            raise ShapeParseError(
                f"Unsupported property path on {shape_id.n3()}: only a single "
                f"IRI predicate is supported, got {path.n3()}"
            )

        return PropertyShape(
            id=shape_id,
            path=path,
            min_count=self.count(shape_id, SH.minCount),
            max_count=self.count(shape_id, SH.maxCount),
            qualified_shape=self.shape_ref(shape_id, SH.qualifiedValueShape),
            qualified_min_count=self.count(shape_id, SH.qualifiedMinCount),
            qualified_max_count=self.count(shape_id, SH.qualifiedMaxCount),
            **self.constraints(shape_id),
        )

    def constraints(self, shape_id: ShapeId) -> Dict[str, Any]:
        node_kind = self.single(shape_id, SH.nodeKind)
        in_head = self.single(shape_id, SH["in"])
        languages = self.single(shape_id, SH.languageIn)
        datatype = self.single(shape_id, SH.datatype)
        class_ = self.single(shape_id, SH["class"])

        return {
            "datatype": self.iri(shape_id, SH.datatype, datatype) if datatype is not None else None,
            "class_": self.iri(shape_id, SH["class"], class_) if class_ is not None else None,
            "node_kind": self.node_kind(shape_id, node_kind) if node_kind is not None else None,
            "min_inclusive": self.number(shape_id, SH.minInclusive),
            "min_exclusive": self.number(shape_id, SH.minExclusive),
            "max_inclusive": self.number(shape_id, SH.maxInclusive),
            "max_exclusive": self.number(shape_id, SH.maxExclusive),
            "min_length": self.count(shape_id, SH.minLength),
            "max_length": self.count(shape_id, SH.maxLength),
            "pattern": self.pattern(shape_id),
            "in_values": (
                tuple(read_list(self.graph, in_head, self.max_list_depth))
                if in_head is not None
                else None
            ),
            "has_value": self.single(shape_id, SH.hasValue),
            "language_in": (
                self.language_tags(shape_id, languages) if languages is not None else None
            ),
            "message": self.message(shape_id),
            "severity": self.severity(shape_id),
            "deactivated": self.flag(shape_id, SH.deactivated),
        }

    def sparql_constraint(self, shape_id: ShapeId, node: Node) -> SparqlConstraint:
        select = self.single(node, SH.select)
        if not isinstance(select, Literal):
            raise ShapeParseError(
                f"SPARQL constraint on {shape_id.n3()} needs an sh:select string"
            )
        prefixes = dict(self.prefixes)
        for declaration_source in objects(self.graph, node, SH.prefixes):
            prefixes.update(self.declared_prefixes(declaration_source))
        return SparqlConstraint(
            query_text=str(select),
            message=self.message(node),
            prefixes=prefixes,
            deactivated=self.flag(node, SH.deactivated),
        )

    def declared_prefixes(self, source: Node) -> Dict[str, str]:
        declared: Dict[str, str] = {}
        for declaration in objects(self.graph, source, SH.declare):
            prefix = self.single(declaration, SH.prefix)
            namespace = self.single(declaration, SH.namespace)
            if prefix is None or namespace is None:
                raise ShapeParseError(
                    f"sh:declare {declaration.n3()} needs sh:prefix and sh:namespace"
                )
            declared[str(prefix)] = str(namespace)
        return declared

    # --------------------------------------------------------------------------
    # parameter readers
    # --------------------------------------------------------------------------

    def single(self, subject: Node, predicate: URIRef) -> Optional[Term]:
        values = objects(self.graph, subject, predicate)
        if not values:
            return None
        if len(values) > 1:
            raise ShapeParseError(
                f"{subject.n3()} has {len(values)} values for "
                f"{predicate.n3(self.graph.namespace_manager)}, expected at most one"
            )
        return values[0]

    def iri(self, subject: Node, predicate: URIRef, value: Node) -> URIRef:
        if not isinstance(value, URIRef):
            raise ShapeParseError(
                f"{predicate.n3(self.graph.namespace_manager)} of {subject.n3()} "
                f"must be an IRI, got {value.n3()}"
            )
        return value

    def shape_ref(self, subject: Node, predicate: URIRef) -> Optional[ShapeId]:
        value = self.single(subject, predicate)
        if value is None:
            return None
        if isinstance(value, Literal):
            raise ShapeParseError(
                f"{predicate.n3(self.graph.namespace_manager)} of {subject.n3()} "
                f"must reference a shape, got {value.n3()}"
            )
        return value

    def shape_list(self, subject: Node, predicate: URIRef) -> tuple:
        head = self.single(subject, predicate)
        if head is None:
            return ()
        members = read_list(self.graph, head, self.max_list_depth)
        for member in members:
            if isinstance(member, Literal):
                raise ShapeParseError(
                    f"{predicate.n3(self.graph.namespace_manager)} list of "
                    f"{subject.n3()} contains a literal {member.n3()}"
                )
        return tuple(members)

    def count(self, subject: Node, predicate: URIRef) -> Optional[int]:
        value = self.single(subject, predicate)
        if value is None:
            return None
        number = numeric_value(value)
        if not isinstance(number, int) or number < 0:
            raise ShapeParseError(
                f"{predicate.n3(self.graph.namespace_manager)} of {subject.n3()} "
                f"must be a non-negative integer, got {value.n3()}"
            )
        return int(number)

    def number(self, subject: Node, predicate: URIRef):
        value = self.single(subject, predicate)
        if value is None:
            return None
        number = numeric_value(value)
        if number is None:
            raise ShapeParseError(
                f"{predicate.n3(self.graph.namespace_manager)} of {subject.n3()} "
                f"must be a numeric literal, got {value.n3()}"
            )
        return number

    def flag(self, subject: Node, predicate: URIRef) -> bool:
        value = self.single(subject, predicate)
        if value is None:
            return False
        if not isinstance(value, Literal) or not isinstance(value.toPython(), bool):
            raise ShapeParseError(
                f"{predicate.n3(self.graph.namespace_manager)} of {subject.n3()} "
                f"must be a boolean literal, got {value.n3()}"
            )
        return value.toPython()

    def node_kind(self, subject: Node, value: Node) -> NodeKind:
        try:
            return NodeKind.from_iri(value)
        except ValueError as e:
            raise ShapeParseError(f"Invalid sh:nodeKind on {subject.n3()}: {e}") from e

    def severity(self, subject: Node) -> Severity:
        value = self.single(subject, SH.severity)
        if value is None:
            return Severity.VIOLATION
        try:
            return Severity.from_iri(value)
        except ValueError as e:
            raise ShapeParseError(f"Invalid sh:severity on {subject.n3()}: {e}") from e

    def message(self, subject: Node) -> Optional[str]:
        # Prefer an untagged or English message when several translations exist
        messages = [m for m in objects(self.graph, subject, SH.message) if isinstance(m, Literal)]
        if not messages:
            return None
        messages.sort(key=lambda m: (m.language not in (None, "en"), m.language or "", str(m)))
        return str(messages[0])

    def pattern(self, subject: Node) -> Optional[re.Pattern]:
        source = self.single(subject, SH.pattern)
        if source is None:
            return None
        if not isinstance(source, Literal):
            raise ShapeParseError(
                f"sh:pattern of {subject.n3()} must be a string literal, got {source.n3()}"
            )
        flags = 0
        flag_text = self.single(subject, SH.flags)
        if flag_text is not None:
            for char in str(flag_text):
                if char not in _REGEX_FLAGS:
                    raise ShapeParseError(
                        f"Unsupported sh:flags character {char!r} on {subject.n3()}"
                    )
                flags |= _REGEX_FLAGS[char]
        try:
            return re.compile(str(source), flags)
        except re.error as e:
            raise ShapeParseError(
                f"Invalid sh:pattern {str(source)!r} on {subject.n3()}: {e}"
            ) from e

    def language_tags(self, subject: Node, head: Node) -> tuple:
        tags = []
        for member in read_list(self.graph, head, self.max_list_depth):
            if not isinstance(member, Literal):
                raise ShapeParseError(
                    f"sh:languageIn of {subject.n3()} must list strings, got {member.n3()}"
                )
            tags.append(str(member))
        return tuple(tags)
