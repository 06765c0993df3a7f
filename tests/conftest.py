# tests/conftest.py
# Shared fixtures: inline Turtle parsed with the prefixes every test uses.
import pytest
from rdflib import Graph

PREFIXES = """
@prefix ex: <http://example.org/> .
@prefix sh: <http://www.w3.org/ns/shacl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
"""


@pytest.fixture
def ttl():
    """Parse a Turtle body (without prefix declarations) into a new graph."""

    def _parse(body: str) -> Graph:
        return Graph().parse(data=PREFIXES + body, format="turtle")

    return _parse
