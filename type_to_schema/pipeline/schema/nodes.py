"""
Output schema node definitions.

These nodes represent resolved OpenAPI/JSON-Schema shapes. Every node can
be rendered to the JSON form with `to_dict()`; references render as
`$ref` pointers into the components section.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from ..type_tree.primitives import SchemaType

COMPONENTS_PREFIX = "#/components/schemas/"


def ref_path(name: str) -> str:
    """Return the JSON pointer of a component."""
    return f"{COMPONENTS_PREFIX}{name}"


class SchemaKind(str, Enum):
    """Base kind of a schema, used to gate which features may decorate it."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"
    ONE_OF = "oneOf"
    ALL_OF = "allOf"
    ANY = "any"


@dataclass
class Reference:
    """A pointer to a named component."""

    name: str = ""

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.OBJECT

    def to_dict(self) -> dict[str, Any]:
        return {"$ref": ref_path(self.name)}


@dataclass
class Schema:
    """Base class for all resolved schemas, holding the decoration fields."""

    title: str | None = None
    description: str | None = None

    default: Any = None
    has_default: bool = False

    example: Any = None
    has_example: bool = False
    examples: list[Any] | None = None

    nullable: bool = False
    read_only: bool | None = None
    write_only: bool | None = None
    deprecated: bool | None = None
    xml: dict[str, Any] | None = None

    # JSON Schema validation keywords (e.g. "minLength": 1), in application order
    constraints: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ANY

    def _body(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Render this schema as a JSON-compatible dictionary."""
        body = self._body()
        if self.nullable:
            body = self._with_null(body)

        d: dict[str, Any] = {}
        if self.title is not None:
            d["title"] = self.title
        if self.description is not None:
            d["description"] = self.description
        d.update(body)
        d.update(self.constraints)
        if self.has_default:
            d["default"] = self.default
        if self.has_example:
            d["example"] = self.example
        if self.examples is not None:
            d["examples"] = list(self.examples)
        if self.read_only is not None:
            d["readOnly"] = self.read_only
        if self.write_only is not None:
            d["writeOnly"] = self.write_only
        if self.deprecated is not None:
            d["deprecated"] = self.deprecated
        if self.xml:
            d["xml"] = dict(self.xml)
        return d

    @staticmethod
    def _with_null(body: dict[str, Any]) -> dict[str, Any]:
        schema_type = body.get("type")
        if isinstance(schema_type, str):
            if schema_type == "null":
                return body
            body = dict(body)
            body["type"] = [schema_type, "null"]
            if "enum" in body and None not in body["enum"]:
                body["enum"] = [*body["enum"], None]
            return body
        if "oneOf" in body:
            body = dict(body)
            body["oneOf"] = [{"type": "null"}, *body["oneOf"]]
            return body
        if not body:
            return body
        return {"oneOf": [{"type": "null"}, body]}


@dataclass
class PrimitiveSchema(Schema):
    """A string, integer, number or boolean, optionally restricted to an enumeration."""

    schema_type: SchemaType = SchemaType.STRING
    format: str | None = None
    enum: list[Any] | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind(self.schema_type.value)

    def _body(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.schema_type.value}
        if self.format is not None:
            d["format"] = self.format
        if self.enum is not None:
            d["enum"] = list(self.enum)
        return d


@dataclass
class ObjectSchema(Schema):
    """An object with ordered properties."""

    properties: dict[str, SchemaOrRef] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)

    # None: unspecified, bool: allow/deny, schema: free-form values of that schema
    additional_properties: bool | SchemaOrRef | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.OBJECT

    def add_property(self, name: str, schema: SchemaOrRef, required: bool = False) -> None:
        self.properties[name] = schema
        if required:
            self.add_required(name)

    def add_required(self, name: str) -> None:
        if name not in self.required:
            self.required.append(name)

    def _body(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": "object"}
        if self.properties:
            d["properties"] = {name: schema.to_dict() for name, schema in self.properties.items()}
        if self.required:
            d["required"] = list(self.required)
        if isinstance(self.additional_properties, bool):
            d["additionalProperties"] = self.additional_properties
        elif self.additional_properties is not None:
            d["additionalProperties"] = self.additional_properties.to_dict()
        return d


@dataclass
class ArraySchema(Schema):
    """An array of items, or a positional tuple when `prefix_items` is set."""

    items: SchemaOrRef | None = None
    prefix_items: list[SchemaOrRef] | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ARRAY

    def _body(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": "array"}
        if self.prefix_items is not None:
            d["prefixItems"] = [item.to_dict() for item in self.prefix_items]
        if self.items is not None:
            d["items"] = self.items.to_dict()
        return d


@dataclass
class Discriminator:
    """Discriminator metadata attached to a oneOf."""

    property_name: str = ""
    # discriminator value -> component name
    mapping: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"propertyName": self.property_name}
        if self.mapping:
            d["mapping"] = {value: ref_path(name) for value, name in self.mapping.items()}
        return d


@dataclass
class OneOfSchema(Schema):
    """Exactly one of several alternatives."""

    variants: list[SchemaOrRef] = field(default_factory=list)
    discriminator: Discriminator | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ONE_OF

    def _body(self) -> dict[str, Any]:
        d: dict[str, Any] = {"oneOf": [variant.to_dict() for variant in self.variants]}
        if self.discriminator is not None:
            d["discriminator"] = self.discriminator.to_dict()
        return d


@dataclass
class AllOfSchema(Schema):
    """All of several schemas; also used to decorate a single reference."""

    items: list[SchemaOrRef] = field(default_factory=list)

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ALL_OF

    def _body(self) -> dict[str, Any]:
        return {"allOf": [item.to_dict() for item in self.items]}


@dataclass
class AnySchema(Schema):
    """Untyped schema accepting any value."""


@dataclass
class NullSchema(Schema):
    """The JSON null value."""

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.NULL

    def _body(self) -> dict[str, Any]:
        return {"type": "null"}


@dataclass
class RawSchema(Schema):
    """A caller supplied schema emitted as given."""

    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> SchemaKind:
        schema_type = self.payload.get("type")
        if isinstance(schema_type, str):
            try:
                return SchemaKind(schema_type)
            except ValueError:
                return SchemaKind.ANY
        return SchemaKind.ANY

    def _body(self) -> dict[str, Any]:
        return dict(self.payload)


SchemaOrRef = Union[Schema, Reference]
