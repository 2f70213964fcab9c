"""
Analyzer module.

Contains the schema resolver, the enum representation selector and the
component registry.
"""

from __future__ import annotations

from .enums import EnumRepresentationSelector
from .registry import ComponentEntry, ComponentRegistry
from .resolver import ResolutionContext, SchemaResolver

__all__ = [
    "ComponentEntry",
    "ComponentRegistry",
    "EnumRepresentationSelector",
    "ResolutionContext",
    "SchemaResolver",
]
