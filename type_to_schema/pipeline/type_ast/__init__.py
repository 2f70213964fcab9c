"""
Type AST module.

Definitions of records and unions and the parser reading them from a
type description document.
"""

from __future__ import annotations

from .nodes import FieldDef, FieldStyle, RecordDef, RootDef, Tagging, TypeCatalog, TypeDef, UnionDef, VariantDef
from .parser import TypeDescriptionParser

__all__ = [
    "FieldDef",
    "FieldStyle",
    "RecordDef",
    "RootDef",
    "Tagging",
    "TypeCatalog",
    "TypeDef",
    "UnionDef",
    "VariantDef",
    "TypeDescriptionParser",
]
