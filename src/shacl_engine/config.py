# src/shacl_engine/config.py
"""
Configuration utilities for shacl_engine.

Provides the immutable run options consumed by the validator and a loader
that reads them from YAML configuration files when present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MAX_RECURSION_DEPTH = 50
DEFAULT_MAX_LIST_DEPTH = 100


def _check_int(name: str, value: Any, *, minimum: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class ValidationOptions:
    """
    Immutable options for a validation run.

    Attributes
    ----------
    parallel : bool
        Validate top-level shapes on a worker pool (True) or one after
        another in the calling thread (False).
    max_concurrency : int or None
        Most shape tasks running at once. None means the number of
        available CPUs.
    timeout_ms : int or None
        Per-shape task timeout in milliseconds. None disables the timeout.
        Only enforced in parallel mode.
    max_recursion_depth : int
        Limit on nested shape references followed while evaluating logical
        and qualified constraints.
    max_list_depth : int
        Limit on the number of cells read from an RDF list in the shapes
        graph.
    """

    parallel: bool = True
    max_concurrency: Optional[int] = None
    timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS
    max_recursion_depth: int = DEFAULT_MAX_RECURSION_DEPTH
    max_list_depth: int = DEFAULT_MAX_LIST_DEPTH

    def __post_init__(self) -> None:
        if not isinstance(self.parallel, bool):
            raise TypeError(
                f"parallel must be bool, got {type(self.parallel).__name__}"
            )
        if self.max_concurrency is not None:
            _check_int("max_concurrency", self.max_concurrency, minimum=1)
        if self.timeout_ms is not None:
            _check_int("timeout_ms", self.timeout_ms, minimum=1)
        _check_int("max_recursion_depth", self.max_recursion_depth, minimum=0)
        _check_int("max_list_depth", self.max_list_depth, minimum=1)

    @property
    def workers(self) -> int:
        """Resolved worker pool size."""
        return self.max_concurrency or os.cpu_count() or 1

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Per-shape timeout in seconds, or None."""
        if self.timeout_ms is None:
            return None
        return self.timeout_ms / 1000.0

    def with_overrides(self, **overrides: Any) -> "ValidationOptions":
        """
        Return a copy with the given fields replaced.

        Raises
        ------
        TypeError
            If an override names an unknown option.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise TypeError(f"Unknown validation option(s): {', '.join(unknown)}")
        if not overrides:
            return self
        return replace(self, **overrides)


def load_config(path: Optional[Path]) -> ValidationOptions:
    """
    Load validation options from a YAML file.

    Parameters
    ----------
    path : Path or None
        Path to a YAML config file. If None, defaults are used.

    Returns
    -------
    ValidationOptions
        The loaded options.

    Raises
    ------
    TypeError
        If the YAML file does not parse to a mapping at the top level, or an
        option has the wrong type.
    ValueError
        If the mapping contains unknown keys or out-of-range values.
    yaml.YAMLError
        If the file is not valid YAML.
    """
    if path is None:
        return ValidationOptions()

    data: Any = yaml.safe_load(Path(path).read_text())

    if data is None:
        return ValidationOptions()

    if not isinstance(data, Mapping):
        raise TypeError(
            f"Config file must contain a mapping at top level, "
            f"got {type(data).__name__}. "
            f"Config file: {path}"
        )

    known = {f.name for f in fields(ValidationOptions)}
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ValueError(
            f"Unknown config key(s): {', '.join(unknown)}. Config file: {path}"
        )

    return ValidationOptions(**{str(k): v for k, v in data.items()})
