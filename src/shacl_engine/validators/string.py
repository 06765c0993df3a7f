# src/shacl_engine/validators/string.py
"""
String constraints: sh:pattern, sh:minLength, sh:maxLength and sh:languageIn.
"""

from __future__ import annotations

from typing import List, Sequence

from rdflib import BNode, Literal

from ..graph import Term, lexical_form
from ..model import ValidationResult
from ..vocabulary import LANGUAGE_IN, MAX_LENGTH, MIN_LENGTH, PATTERN
from .base import ConstraintFamily, Shape, ShapeScope
from .common import make_result, value_nodes
from .registry import register


def language_matches(tag: str, allowed: Sequence[str]) -> bool:
    """True if tag is one of the allowed tags, ignoring case."""
    return tag.lower() in {lang.lower() for lang in allowed}


@register(ConstraintFamily.STRING)
class StringValidator:
    family = ConstraintFamily.STRING
    scopes = frozenset({ShapeScope.NODE, ShapeScope.PROPERTY})

    def validate(
        self, context, focus_node: Term, shape: Shape, depth: int = 0
    ) -> List[ValidationResult]:
        if (
            shape.pattern is None
            and shape.min_length is None
            and shape.max_length is None
            and shape.language_in is None
        ):
            return []

        results: List[ValidationResult] = []
        for value in value_nodes(context.data_graph, focus_node, shape):
            results.extend(self._check_pattern(focus_node, shape, value))
            results.extend(self._check_length(focus_node, shape, value))
            results.extend(self._check_language(focus_node, shape, value))
        return results

    def _check_pattern(self, focus_node, shape, value) -> List[ValidationResult]:
        if shape.pattern is None:
            return []
        if isinstance(value, Literal) and shape.pattern.search(lexical_form(value)):
            return []
        return [
            make_result(
                focus_node,
                shape,
                PATTERN,
                f"Value does not match required pattern {shape.pattern.pattern!r}",
                value,
            )
        ]

    def _check_length(self, focus_node, shape, value) -> List[ValidationResult]:
        if shape.min_length is None and shape.max_length is None:
            return []
        results = []
        # Blank nodes have no lexical form and fail either bound
        length = None if isinstance(value, BNode) else len(lexical_form(value))
        if shape.min_length is not None and (length is None or length < shape.min_length):
            results.append(
                make_result(
                    focus_node,
                    shape,
                    MIN_LENGTH,
                    f"Value is too short (expected at least {shape.min_length} "
                    f"characters, found {length})",
                    value,
                )
            )
        if shape.max_length is not None and (length is None or length > shape.max_length):
            results.append(
                make_result(
                    focus_node,
                    shape,
                    MAX_LENGTH,
                    f"Value is too long (expected at most {shape.max_length} "
                    f"characters, found {length})",
                    value,
                )
            )
        return results

    def _check_language(self, focus_node, shape, value) -> List[ValidationResult]:
        if shape.language_in is None:
            return []
        if not isinstance(value, Literal):
            message = "Value must be a literal with a language tag"
        elif not value.language:
            message = "Value must have a language tag"
        elif not language_matches(value.language, shape.language_in):
            message = f"Language tag {value.language!r} is not in the allowed list"
        else:
            return []
        return [make_result(focus_node, shape, LANGUAGE_IN, message, value)]
