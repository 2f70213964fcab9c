"""
Pipeline - type structure to OpenAPI schema resolution.

This module provides a multi-phase architecture for turning a program's
type structure into a normalized schema document:

1. Phase 1 (Parser): Parse the type description into a type catalog
2. Phase 2 (Type Tree): Classify each type occurrence into a TypeTree
3. Phase 3 (Resolver): Resolve trees into schemas and shared components,
   applying features and enum representations
4. Phase 4 (Generator): Assemble the document, refusing it on errors
5. Phase 5 (Renderer): Optional Markdown component reference
"""

from __future__ import annotations

from .analyzer import ComponentRegistry, ResolutionContext, SchemaResolver
from .config import OptionalEncoding, ResolverConfig, TaggingStrategy
from .errors import (
    Diagnostic,
    DiagnosticLevel,
    DiagnosticLog,
    NamingCollision,
    ResolutionFailed,
    StructuralError,
    TypeSchemaError,
    ValidationError,
)
from .generator import DocumentGenerator
from .renderer import MarkdownRenderer

__all__ = [
    "DocumentGenerator",
    "MarkdownRenderer",
    "SchemaResolver",
    "ResolutionContext",
    "ComponentRegistry",
    "ResolverConfig",
    "OptionalEncoding",
    "TaggingStrategy",
    "TypeSchemaError",
    "StructuralError",
    "NamingCollision",
    "ResolutionFailed",
    "ValidationError",
    "Diagnostic",
    "DiagnosticLevel",
    "DiagnosticLog",
]
