"""
Feature (overlay attribute) definitions.

A feature is one named attribute attached to a field, a record, a union or
a variant: a decoration (`default`, `example`, `title`...), a validation
constraint (`minimum`, `max_length`...), or an instruction to the resolver
(`inline`, `required`, `value_type`...). Features arrive already parsed;
`FeatureSet.from_dict` only maps names to feature classes and checks the
shape of their values.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from ..errors import StructuralError
from ..rename import RenameRule
from ..type_tree.nodes import RawType


@dataclass
class Feature:
    """Base class for all features."""

    # Attribute name as written by users, e.g. "min_length"
    name: ClassVar[str] = ""

    value: Any = None
    location: str = ""

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        """Build the feature from its raw value."""
        return cls(value=value, location=location)


class _BoolFeature(Feature):
    """A flag feature; a bare `true` enables it."""

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if not isinstance(value, bool):
            raise StructuralError(f"'{cls.name}' expects a boolean, got {value!r}", location)
        return cls(value=value, location=location)


class _StringFeature(Feature):
    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if not isinstance(value, str):
            raise StructuralError(f"'{cls.name}' expects a string, got {value!r}", location)
        return cls(value=value, location=location)


# Decorations


class Default(Feature):
    name = "default"


class Example(Feature):
    name = "example"


class Examples(Feature):
    name = "examples"

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if not isinstance(value, list):
            raise StructuralError(f"'{cls.name}' expects a list, got {value!r}", location)
        return cls(value=list(value), location=location)


class Format(_StringFeature):
    name = "format"


class Nullable(_BoolFeature):
    name = "nullable"


class ReadOnly(_BoolFeature):
    name = "read_only"


class WriteOnly(_BoolFeature):
    name = "write_only"


class Title(_StringFeature):
    name = "title"


class Description(_StringFeature):
    name = "description"


class Deprecated(_BoolFeature):
    name = "deprecated"


@dataclass
class Xml(Feature):
    """
    XML object metadata of a schema.

    `value` holds the `name`, `namespace` and `prefix` strings that were
    given. `wrapped` only makes sense on arrays: on a vector occurrence the
    feature is split so the array carries `wrapped` (and the wrapper name)
    while the items carry everything else.
    """

    name: ClassVar[str] = "xml"

    attribute: bool = False
    wrapped: bool = False
    wrap_name: str | None = None

    KEYS: ClassVar[tuple[str, ...]] = ("name", "namespace", "prefix")

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if not isinstance(value, dict):
            raise StructuralError(f"'{cls.name}' expects an object, got {value!r}", location)
        unknown = sorted(set(value) - {*cls.KEYS, "attribute", "wrapped"})
        if unknown:
            raise StructuralError(f"Unknown '{cls.name}' attribute(s): {', '.join(unknown)}", location)

        attrs: dict[str, str] = {}
        for key in cls.KEYS:
            if key in value:
                if not isinstance(value[key], str):
                    raise StructuralError(f"'{cls.name}' {key} expects a string, got {value[key]!r}", location)
                attrs[key] = value[key]

        attribute = value.get("attribute", False)
        if not isinstance(attribute, bool):
            raise StructuralError(f"'{cls.name}' attribute expects a boolean, got {attribute!r}", location)

        wrapped = value.get("wrapped", False)
        wrap_name = None
        if isinstance(wrapped, dict):
            wrap_name = wrapped.get("name")
            if not isinstance(wrap_name, str) or set(wrapped) != {"name"}:
                raise StructuralError(f"'{cls.name}' wrapped expects a boolean or {{name}}, got {wrapped!r}", location)
            wrapped = True
        elif not isinstance(wrapped, bool):
            raise StructuralError(f"'{cls.name}' wrapped expects a boolean or {{name}}, got {wrapped!r}", location)

        return cls(value=attrs, attribute=attribute, wrapped=wrapped, wrap_name=wrap_name, location=location)

    def split_for_vector(self) -> tuple[Xml | None, Xml | None]:
        """Return (array xml, items xml); either is None when it would be empty."""
        array_xml = None
        if self.wrapped:
            array_xml = Xml(value={}, wrapped=True, wrap_name=self.wrap_name, location=self.location)
        items_xml = None
        if self.value or self.attribute:
            items_xml = Xml(value=dict(self.value), attribute=self.attribute, location=self.location)
        return array_xml, items_xml

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        name = self.wrap_name or self.value.get("name")
        if name is not None:
            d["name"] = name
        for key in ("namespace", "prefix"):
            if key in self.value:
                d[key] = self.value[key]
        if self.attribute:
            d["attribute"] = True
        if self.wrapped:
            d["wrapped"] = True
        return d


# Naming


class Rename(_StringFeature):
    name = "rename"


class RenameAll(Feature):
    name = "rename_all"

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if isinstance(value, RenameRule):
            return cls(value=value, location=location)
        try:
            return cls(value=RenameRule.parse(value), location=location)
        except ValueError as e:
            raise StructuralError(str(e), location) from e


class As(_StringFeature):
    """Explicit component name override."""

    name = "as"


# Resolver instructions


class Inline(_BoolFeature):
    name = "inline"


class Required(_BoolFeature):
    name = "required"


class NoRecursion(_BoolFeature):
    name = "no_recursion"


class Skip(_BoolFeature):
    name = "skip"


class ValueType(Feature):
    """Resolve this occurrence as another type."""

    name = "value_type"

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if isinstance(value, RawType):
            return cls(value=value, location=location)
        if not isinstance(value, str):
            raise StructuralError(f"'{cls.name}' expects a type, got {value!r}", location)
        return cls(value=RawType.parse(value), location=location)


class SchemaWith(Feature):
    """Use a caller supplied schema: a JSON schema mapping or a callable returning one."""

    name = "schema_with"

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if not isinstance(value, dict) and not callable(value):
            raise StructuralError(f"'{cls.name}' expects a schema object or a callable, got {value!r}", location)
        return cls(value=value, location=location)

    def build(self) -> dict[str, Any]:
        payload = self.value() if callable(self.value) else self.value
        return dict(payload)


# Validation constraints


class Minimum(Feature):
    name = "minimum"


class Maximum(Feature):
    name = "maximum"


class ExclusiveMinimum(Feature):
    name = "exclusive_minimum"


class ExclusiveMaximum(Feature):
    name = "exclusive_maximum"


class MultipleOf(Feature):
    name = "multiple_of"


class MinLength(Feature):
    name = "min_length"


class MaxLength(Feature):
    name = "max_length"


class Pattern(Feature):
    name = "pattern"


class MinItems(Feature):
    name = "min_items"


class MaxItems(Feature):
    name = "max_items"


class MinProperties(Feature):
    name = "min_properties"


class MaxProperties(Feature):
    name = "max_properties"


# Object and union features


class AdditionalProperties(Feature):
    """`true`/`false`, or a type describing the values of unknown properties."""

    name = "additional_properties"

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if isinstance(value, (bool, RawType)):
            return cls(value=value, location=location)
        if isinstance(value, str):
            return cls(value=RawType.parse(value), location=location)
        raise StructuralError(f"'{cls.name}' expects a boolean or a type, got {value!r}", location)


@dataclass
class Discriminator(Feature):
    """Discriminator metadata for a oneOf: property name and value -> type mapping."""

    name: ClassVar[str] = "discriminator"

    mapping: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, value: Any, location: str = "") -> Feature:
        if isinstance(value, str):
            return cls(value=value, location=location)
        if isinstance(value, dict) and isinstance(value.get("property_name"), str):
            mapping = value.get("mapping", {})
            if not isinstance(mapping, dict):
                raise StructuralError(f"'{cls.name}' mapping must be an object", location)
            return cls(value=value["property_name"], mapping=dict(mapping), location=location)
        raise StructuralError(f"'{cls.name}' expects a property name or {{property_name, mapping}}, got {value!r}", location)


NUMERIC_CONSTRAINTS: tuple[type[Feature], ...] = (Minimum, Maximum, ExclusiveMinimum, ExclusiveMaximum, MultipleOf)
STRING_CONSTRAINTS: tuple[type[Feature], ...] = (MinLength, MaxLength, Pattern)
ARRAY_CONSTRAINTS: tuple[type[Feature], ...] = (MinItems, MaxItems)
OBJECT_CONSTRAINTS: tuple[type[Feature], ...] = (MinProperties, MaxProperties)
CONSTRAINTS = NUMERIC_CONSTRAINTS + STRING_CONSTRAINTS + ARRAY_CONSTRAINTS + OBJECT_CONSTRAINTS
DECORATIONS: tuple[type[Feature], ...] = (
    Default,
    Example,
    Examples,
    Format,
    Nullable,
    ReadOnly,
    WriteOnly,
    Title,
    Description,
    Deprecated,
    Xml,
)

ALL_FEATURES: tuple[type[Feature], ...] = (
    *DECORATIONS,
    Rename,
    RenameAll,
    As,
    Inline,
    Required,
    NoRecursion,
    Skip,
    ValueType,
    SchemaWith,
    *CONSTRAINTS,
    AdditionalProperties,
    Discriminator,
)

FEATURES_BY_NAME: dict[str, type[Feature]] = {cls.name: cls for cls in ALL_FEATURES}

F = TypeVar("F", bound=Feature)


class FeatureSet:
    """Ordered collection of features; each one is consumed at most once."""

    def __init__(self, features: Iterable[Feature] = ()):
        self._features: list[Feature] = list(features)

    @staticmethod
    def from_dict(d: dict[str, Any] | None, location: str = "") -> FeatureSet:
        """
        Build a feature set from ``{"feature_name": value}`` pairs.

        Raises:
            StructuralError: For unknown feature names or malformed values
        """
        features: list[Feature] = []
        for key, value in (d or {}).items():
            cls = FEATURES_BY_NAME.get(key)
            if cls is None:
                expected = ", ".join(sorted(FEATURES_BY_NAME))
                raise StructuralError(f"Unknown feature '{key}', expected one of: {expected}", location)
            features.append(cls.parse(value, location))
        return FeatureSet(features)

    def pop(self, cls: type[F]) -> F | None:
        """Remove and return the first feature of the given class."""
        for index, feature in enumerate(self._features):
            if type(feature) is cls:
                return self._features.pop(index)
        return None

    def pop_by(self, predicate: Callable[[Feature], bool]) -> list[Feature]:
        """Remove and return every feature matching `predicate`."""
        popped = [f for f in self._features if predicate(f)]
        self._features = [f for f in self._features if not predicate(f)]
        return popped

    def get(self, cls: type[F]) -> F | None:
        for feature in self._features:
            if type(feature) is cls:
                return feature
        return None

    def has(self, cls: type[Feature]) -> bool:
        return self.get(cls) is not None

    def is_enabled(self, cls: type[Feature]) -> bool:
        """Whether a flag feature is present and set."""
        feature = self.get(cls)
        return feature is not None and bool(feature.value)

    def copy(self) -> FeatureSet:
        return FeatureSet(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(list(self._features))

    def __len__(self) -> int:
        return len(self._features)

    def __bool__(self) -> bool:
        return bool(self._features)

    def __repr__(self) -> str:
        return f"FeatureSet({', '.join(f.name for f in self._features)})"
