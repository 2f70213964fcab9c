"""
Schema module.

Resolved OpenAPI/JSON-Schema nodes and their JSON rendering.
"""

from __future__ import annotations

from .nodes import (
    AllOfSchema,
    AnySchema,
    ArraySchema,
    Discriminator,
    NullSchema,
    ObjectSchema,
    OneOfSchema,
    PrimitiveSchema,
    RawSchema,
    Reference,
    Schema,
    SchemaKind,
    SchemaOrRef,
    ref_path,
)

__all__ = [
    "Schema",
    "SchemaKind",
    "SchemaOrRef",
    "Reference",
    "PrimitiveSchema",
    "ObjectSchema",
    "ArraySchema",
    "OneOfSchema",
    "AllOfSchema",
    "AnySchema",
    "NullSchema",
    "RawSchema",
    "Discriminator",
    "ref_path",
]
