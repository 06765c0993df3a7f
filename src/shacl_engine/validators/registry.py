# src/shacl_engine/validators/registry.py
"""
Registry of constraint family validators.

Provides:
- a @register(family) decorator binding a ConstraintFamily to a validator class,
- lookup by family,
- the dispatch table of validators applying to a shape scope.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from .base import ConstraintFamily, ConstraintValidator, ShapeScope

_REGISTRY: Dict[ConstraintFamily, Type[ConstraintValidator]] = {}


def register(family: ConstraintFamily):
    """
    Decorator to register a validator class for a constraint family.

    Parameters
    ----------
    family : ConstraintFamily
        The family the class implements.

    Raises
    ------
    ValueError
        If the family is already registered.
    TypeError
        If family is not a ConstraintFamily, or the decorated object is not a
        class implementing the validator protocol.

    Returns
    -------
    callable
        A class decorator that registers the validator.
    """
    if not isinstance(family, ConstraintFamily):
        raise TypeError(f"family must be ConstraintFamily, got {type(family).__name__}")

    def _wrap(cls: Type[ConstraintValidator]) -> Type[ConstraintValidator]:
        if family in _REGISTRY:
            raise ValueError(f"Validator already registered for family {family.value!r}")
        if not isinstance(cls, type):
            raise TypeError(
                f"Only classes can be registered as validators, got {type(cls)}"
            )
        if not callable(getattr(cls, "validate", None)) or not getattr(
            cls, "scopes", None
        ):
            raise TypeError(
                f"Class {cls.__name__} does not implement ConstraintValidator protocol"
            )

        _REGISTRY[family] = cls
        return cls

    return _wrap


def available_families() -> List[ConstraintFamily]:
    """
    List registered families in dispatch order.

    Returns
    -------
    List[ConstraintFamily]
        Registered families, ordered as declared on ConstraintFamily.
    """
    return [family for family in ConstraintFamily if family in _REGISTRY]


def get_validator(family: ConstraintFamily) -> Optional[ConstraintValidator]:
    """Instantiate the validator registered for family, or None."""
    cls = _REGISTRY.get(family)
    return cls() if cls else None


def validators_for(scope: ShapeScope) -> List[ConstraintValidator]:
    """
    Instantiate every registered validator that applies to scope.

    Returns
    -------
    List[ConstraintValidator]
        Validators in dispatch order.
    """
    return [
        _REGISTRY[family]()
        for family in available_families()
        if scope in _REGISTRY[family].scopes
    ]
