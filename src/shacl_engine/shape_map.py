# src/shacl_engine/shape_map.py
"""
Shape map: id-indexed lookup of every parsed shape.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .graph import ShapeId
from .model import NodeShape

ShapeMap = Mapping[ShapeId, NodeShape]


def build_shape_map(shapes: Iterable[NodeShape]) -> ShapeMap:
    """
    Index shapes by id.

    The returned mapping is read-only so it can be shared by concurrent
    shape tasks.

    Parameters
    ----------
    shapes : Iterable[NodeShape]
        Declared and discovered shapes, as returned by parse_shapes.

    Returns
    -------
    Mapping[ShapeId, NodeShape]
        Read-only id -> shape mapping.

    Raises
    ------
    ValueError
        If two shapes share an id.
    """
    index = {}
    for shape in shapes:
        if shape.id in index:
            raise ValueError(f"Duplicate shape id {shape.id.n3()}")
        index[shape.id] = shape
    return MappingProxyType(index)
