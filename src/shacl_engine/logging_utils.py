# src/shacl_engine/logging_utils.py
"""
Logging utilities for shacl_engine.

The engine never configures logging on import; applications call
configure_logging once to route the package logger to a stream.
"""

import logging
import sys
from typing import IO, Optional

PACKAGE_LOGGER = "shacl_engine"

_VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,  # any value >= 2 maps to DEBUG
}


def configure_logging(
    verbosity: int = 0, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """
    Configure logging for the shacl_engine package logger.

    Parameters
    ----------
    verbosity : int, default=0
        Verbosity level:
        - 0 -> WARNING (soft failures only)
        - 1 -> INFO
        - 2 or higher -> DEBUG (per-shape progress)
        Must be a non-negative integer.
    stream : IO[str] or None, default=None
        Target stream for the StreamHandler. Defaults to sys.stderr if None.

    Returns
    -------
    logging.Logger
        The configured "shacl_engine" logger.

    Raises
    ------
    TypeError
        If verbosity is not an int, or if a stream is provided that does not
        have a write method.
    ValueError
        If verbosity is negative.
    """
    # bool is an int subclass but not a verbosity
    if not isinstance(verbosity, int) or isinstance(verbosity, bool):
        raise TypeError(f"verbosity must be int, got {type(verbosity).__name__}")
    if verbosity < 0:
        raise ValueError(f"verbosity must be non-negative, got {verbosity}")

    level = _VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    if stream is None:
        stream = sys.stderr
    elif not hasattr(stream, "write"):
        raise TypeError("stream must be file-like (support .write(...))")

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    # Replace only StreamHandlers; FileHandlers and friends stay attached
    logger.handlers = [
        h
        for h in logger.handlers
        if not isinstance(h, logging.StreamHandler)
        or isinstance(h, logging.FileHandler)
    ]
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger
