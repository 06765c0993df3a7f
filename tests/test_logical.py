# tests/test_logical.py
"""
Tests for shacl_engine.validators.logical.
"""

import logging

from rdflib import Literal, Namespace

from shacl_engine import DiagnosticKind, validate
from shacl_engine.vocabulary import AND, NOT, OR, XONE

EX = Namespace("http://example.org/")

# ex:HasName and ex:HasAge are referenced by id; they have no targets of
# their own.
BASE_SHAPES = """
ex:HasName a sh:NodeShape ; sh:property [ sh:path ex:name ; sh:minCount 1 ] .
ex:HasAge a sh:NodeShape ; sh:property [ sh:path ex:age ; sh:minCount 1 ] .
"""


def _results(ttl, data, operator_clause, **options):
    shapes = BASE_SHAPES + f"ex:S a sh:NodeShape ; sh:targetNode ex:x ; {operator_clause} ."
    return validate(ttl(data), ttl(shapes), parallel=False, **options).results


# ------------------------------------------------------------------------------
# and / or
# ------------------------------------------------------------------------------


def test_and_all_conforming(ttl):
    data = 'ex:x ex:name "X" ; ex:age 3 .'
    assert _results(ttl, data, "sh:and ( ex:HasName ex:HasAge )") == ()


def test_and_with_one_failing_shape_gives_one_violation(ttl):
    (result,) = _results(ttl, 'ex:x ex:name "X" .', "sh:and ( ex:HasName ex:HasAge )")
    assert result.constraint_component == AND
    assert result.details["failing_shape"] == EX.HasAge
    assert result.path is None
    assert result.source_shape == EX.S


def test_and_stops_at_first_failure(ttl):
    (result,) = _results(ttl, "ex:x ex:other 1 .", "sh:and ( ex:HasName ex:HasAge )")
    assert result.details["failing_shape"] == EX.HasName


def test_or(ttl):
    clause = "sh:or ( ex:HasName ex:HasAge )"
    assert _results(ttl, "ex:x ex:age 3 .", clause) == ()
    (result,) = _results(ttl, "ex:x ex:other 1 .", clause)
    assert result.constraint_component == OR
    assert result.details["tested_shapes"] == [EX.HasName, EX.HasAge]


def test_or_over_anonymous_shapes(ttl):
    shapes = """
    ex:S a sh:NodeShape ;
        sh:targetNode "text", 42, ex:iri ;
        sh:or ( [ sh:datatype xsd:string ] [ sh:datatype xsd:integer ] ) .
    """
    (result,) = validate(ttl("ex:a ex:b ex:c ."), ttl(shapes), parallel=False).results
    assert result.focus_node == EX.iri


# ------------------------------------------------------------------------------
# xone
# ------------------------------------------------------------------------------


def test_xone_duplicate_reference_counts_twice(ttl):
    (result,) = _results(ttl, 'ex:x ex:name "X" .', "sh:xone ( ex:HasName ex:HasName )")
    assert result.constraint_component == XONE
    assert result.details["conforming_count"] == 2


def test_xone_duplicate_reference_with_no_pass(ttl):
    (result,) = _results(ttl, "ex:x ex:other 1 .", "sh:xone ( ex:HasName ex:HasName )")
    assert result.details["conforming_count"] == 0


def test_xone_exactly_one_of_distinct_shapes(ttl):
    clause = "sh:xone ( ex:HasName ex:HasAge )"
    assert _results(ttl, 'ex:x ex:name "X" .', clause) == ()
    (result,) = _results(ttl, 'ex:x ex:name "X" ; ex:age 1 .', clause)
    assert result.message == "XONE constraint failed: 2 shapes conform (expected exactly 1)"


# ------------------------------------------------------------------------------
# not
# ------------------------------------------------------------------------------


def test_not(ttl):
    assert _results(ttl, "ex:x ex:other 1 .", "sh:not ex:HasName") == ()
    (result,) = _results(ttl, 'ex:x ex:name "X" .', "sh:not ex:HasName")
    assert result.constraint_component == NOT
    assert result.details["negated_shape"] == EX.HasName
    assert result.value == EX.x


def test_not_with_literal_focus(ttl):
    shapes = """
    ex:S a sh:NodeShape ; sh:targetNode "abc" ; sh:not [ sh:minLength 5 ] .
    """
    assert validate(ttl(""), ttl(shapes), parallel=False).results == ()
    shapes = """
    ex:S a sh:NodeShape ; sh:targetNode "abc" ; sh:not [ sh:minLength 2 ] .
    """
    (result,) = validate(ttl(""), ttl(shapes), parallel=False).results
    assert result.focus_node == Literal("abc")


# ------------------------------------------------------------------------------
# cycles
# ------------------------------------------------------------------------------


def test_cyclic_not_terminates_with_logged_condition(ttl, caplog):
    shapes = """
    ex:A a sh:NodeShape ; sh:targetNode ex:x ; sh:not ex:B .
    ex:B a sh:NodeShape ; sh:not ex:A .
    """
    with caplog.at_level(logging.ERROR, logger="shacl_engine"):
        report = validate(ttl("ex:x ex:p 1 ."), ttl(shapes), parallel=False)

    kinds = {d.kind for d in report.diagnostics}
    assert kinds == {DiagnosticKind.RECURSION_LIMIT}
    assert "Maximum recursion depth 50 exceeded" in caplog.text
    # depth-limited branches never inject results of their own
    assert all(r.constraint_component == NOT for r in report.results)


def test_self_referencing_and_terminates(ttl):
    shapes = """
    ex:A a sh:NodeShape ; sh:targetNode ex:x ; sh:and ( ex:A ex:A ex:A ) .
    """
    report = validate(ttl("ex:x ex:p 1 ."), ttl(shapes), parallel=False, max_recursion_depth=10)
    assert report.conforms
    assert report.diagnostics
