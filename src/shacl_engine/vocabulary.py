# src/shacl_engine/vocabulary.py
"""
SHACL vocabulary terms used by the reader, validators and report writer.
"""

from __future__ import annotations

from typing import Dict

from rdflib import Namespace
from rdflib.namespace import RDF, RDFS, XSD

SH = Namespace("http://www.w3.org/ns/shacl#")

# Test manifest vocabularies (W3C data-shapes test suite)
MF = Namespace("http://www.w3.org/2001/sw/DataAccess/tests/test-manifest#")
SHT = Namespace("http://www.w3.org/ns/shacl-test#")

# ------------------------------------------------------------------------------
# constraint components
# ------------------------------------------------------------------------------

MIN_COUNT = SH.MinCountConstraintComponent
MAX_COUNT = SH.MaxCountConstraintComponent
DATATYPE = SH.DatatypeConstraintComponent
CLASS = SH.ClassConstraintComponent
NODE_KIND = SH.NodeKindConstraintComponent
PATTERN = SH.PatternConstraintComponent
MIN_LENGTH = SH.MinLengthConstraintComponent
MAX_LENGTH = SH.MaxLengthConstraintComponent
LANGUAGE_IN = SH.LanguageInConstraintComponent
IN = SH.InConstraintComponent
HAS_VALUE = SH.HasValueConstraintComponent
MIN_INCLUSIVE = SH.MinInclusiveConstraintComponent
MIN_EXCLUSIVE = SH.MinExclusiveConstraintComponent
MAX_INCLUSIVE = SH.MaxInclusiveConstraintComponent
MAX_EXCLUSIVE = SH.MaxExclusiveConstraintComponent
QUALIFIED_MIN_COUNT = SH.QualifiedMinCountConstraintComponent
QUALIFIED_MAX_COUNT = SH.QualifiedMaxCountConstraintComponent
AND = SH.AndConstraintComponent
OR = SH.OrConstraintComponent
XONE = SH.XoneConstraintComponent
NOT = SH.NotConstraintComponent
SPARQL = SH.SPARQLConstraintComponent

# Prefixes bound when a report is written out as text.
DEFAULT_REPORT_PREFIXES: Dict[str, str] = {
    "sh": str(SH),
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "xsd": str(XSD),
}
