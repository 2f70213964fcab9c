"""Type to Schema

A Python package resolving a program's static type structure (records,
tagged unions, generic containers and primitives) into a normalized
OpenAPI 3.1 schema document with a deduplicated set of named components.
"""

__version__ = "0.1.0"

from .pipeline import (
    DocumentGenerator,
    MarkdownRenderer,
    ResolutionFailed,
    ResolverConfig,
    SchemaResolver,
    StructuralError,
    TypeSchemaError,
)

__all__ = [
    "DocumentGenerator",
    "MarkdownRenderer",
    "ResolverConfig",
    "SchemaResolver",
    "TypeSchemaError",
    "StructuralError",
    "ResolutionFailed",
]
