"""
Type tree module.

Raw type descriptors, their classification into TypeTrees and the
primitive type table.
"""

from __future__ import annotations

from .builder import TypeTreeBuilder
from .nodes import Container, RawType, TypeTree, ValueKind
from .primitives import KnownFormat, PrimitiveMapper, SchemaType

__all__ = [
    "RawType",
    "TypeTree",
    "ValueKind",
    "Container",
    "TypeTreeBuilder",
    "PrimitiveMapper",
    "SchemaType",
    "KnownFormat",
]
