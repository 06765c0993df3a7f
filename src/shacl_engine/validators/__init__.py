# src/shacl_engine/validators/__init__.py
"""
Constraint family validators.

Every module in this package that defines a validator registers it with
@register(ConstraintFamily.X); load_all() imports them all.
"""

from __future__ import annotations

import importlib
import pkgutil
from typing import Iterable, Set

from .base import ConstraintFamily
from .registry import available_families

_SUPPORT_MODULES = {"base", "common", "registry"}
_DISCOVERED: Set[str] = set()


def _iter_modules() -> Iterable[str]:
    for _, name, _ in pkgutil.iter_modules(__path__, prefix=__name__ + "."):
        yield name


def load_all() -> None:
    """
    Import every validator module under shacl_engine.validators.

    Idempotent: safe to call multiple times.

    Raises
    ------
    RuntimeError
        If a ConstraintFamily has no registered validator after loading.
    """
    for modname in _iter_modules():
        if modname in _DISCOVERED:
            continue
        short = modname.rsplit(".", 1)[-1]
        if short.startswith("_") or short in _SUPPORT_MODULES:
            continue
        importlib.import_module(modname)
        _DISCOVERED.add(modname)

    missing = [f.value for f in ConstraintFamily if f not in available_families()]
    if missing:
        raise RuntimeError(f"No validator registered for: {', '.join(missing)}")


__all__ = ["load_all"]
