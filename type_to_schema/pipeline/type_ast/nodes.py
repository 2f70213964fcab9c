"""
Type definition node definitions.

These nodes describe the records and unions a program declares, as handed
to the resolver: fields with their raw types and features, variants,
tagging and generic parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..config import TaggingStrategy
from ..features.nodes import FeatureSet
from ..type_tree.nodes import RawType


class FieldStyle(Enum):
    """Shape of a record or variant body."""

    NAMED = "named"  # struct Pet { id: u64 }
    UNNAMED = "unnamed"  # struct Id(u64)
    UNIT = "unit"  # struct Marker;


@dataclass
class FieldDef:
    """A field of a record or variant."""

    name: str | None = None  # None for positional fields
    type: RawType = field(default_factory=RawType)
    features: FeatureSet = field(default_factory=FeatureSet)
    location: str = ""


@dataclass
class RecordDef:
    """A record (struct) definition."""

    name: str = ""
    generics: list[str] = field(default_factory=list)
    fields: list[FieldDef] = field(default_factory=list)
    style: FieldStyle = FieldStyle.NAMED
    features: FeatureSet = field(default_factory=FeatureSet)
    location: str = ""


@dataclass
class VariantDef:
    """A variant of a union."""

    name: str = ""
    fields: list[FieldDef] = field(default_factory=list)
    style: FieldStyle = FieldStyle.UNIT
    features: FeatureSet = field(default_factory=FeatureSet)
    location: str = ""

    @property
    def is_unit(self) -> bool:
        return self.style == FieldStyle.UNIT


@dataclass
class Tagging:
    """How a union marks which variant a value holds.

    `strategy` is None when the union does not declare one and the
    configured default applies.
    """

    strategy: TaggingStrategy | None = None
    tag: str | None = None
    content: str | None = None


@dataclass
class UnionDef:
    """A tagged union (enum) definition."""

    name: str = ""
    generics: list[str] = field(default_factory=list)
    variants: list[VariantDef] = field(default_factory=list)
    tagging: Tagging = field(default_factory=Tagging)
    features: FeatureSet = field(default_factory=FeatureSet)
    location: str = ""


TypeDef = Union[RecordDef, UnionDef]


@dataclass
class RootDef:
    """A type the document is built for."""

    name: str = ""
    type: RawType = field(default_factory=RawType)
    features: FeatureSet = field(default_factory=FeatureSet)


@dataclass
class TypeCatalog:
    """All definitions known to one document build, keyed by identifier."""

    definitions: dict[str, TypeDef] = field(default_factory=dict)
    roots: list[RootDef] = field(default_factory=list)

    def add(self, definition: TypeDef) -> None:
        self.definitions[definition.name] = definition

    def get(self, name: str) -> TypeDef | None:
        return self.definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)
