"""
Primitive type mapping.

Maps primitive and well-known type identifiers to a schema type and an
optional format. Extension types (date/time, identifiers, decimals, URLs,
paths) are only primitive when their capability is enabled.
"""

from __future__ import annotations

from enum import Enum


class SchemaType(str, Enum):
    """JSON Schema `type` keyword values."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


class KnownFormat(str, Enum):
    """Format tokens understood by OpenAPI consumers."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    BYTE = "byte"
    BINARY = "binary"
    DATE = "date"
    DATE_TIME = "date-time"
    PASSWORD = "password"
    UUID = "uuid"
    ULID = "ulid"
    URI = "uri"

    @classmethod
    def values(cls) -> list[str]:
        return [f.value for f in cls]


# name -> (schema type, format)
_CORE_PRIMITIVES: dict[str, tuple[SchemaType, KnownFormat | None]] = {
    "String": (SchemaType.STRING, None),
    "str": (SchemaType.STRING, None),
    "char": (SchemaType.STRING, None),
    "bool": (SchemaType.BOOLEAN, None),
    "i8": (SchemaType.INTEGER, KnownFormat.INT32),
    "i16": (SchemaType.INTEGER, KnownFormat.INT32),
    "i32": (SchemaType.INTEGER, KnownFormat.INT32),
    "u8": (SchemaType.INTEGER, KnownFormat.INT32),
    "u16": (SchemaType.INTEGER, KnownFormat.INT32),
    "u32": (SchemaType.INTEGER, KnownFormat.INT32),
    "i64": (SchemaType.INTEGER, KnownFormat.INT64),
    "u64": (SchemaType.INTEGER, KnownFormat.INT64),
    "i128": (SchemaType.INTEGER, None),
    "u128": (SchemaType.INTEGER, None),
    "isize": (SchemaType.INTEGER, None),
    "usize": (SchemaType.INTEGER, None),
    "f32": (SchemaType.NUMBER, KnownFormat.FLOAT),
    "f64": (SchemaType.NUMBER, KnownFormat.DOUBLE),
    # Python spellings
    "int": (SchemaType.INTEGER, None),
    "float": (SchemaType.NUMBER, KnownFormat.DOUBLE),
    "bytes": (SchemaType.STRING, KnownFormat.BINARY),
}

# Width-specific formats used when strict widths are turned off
_NON_STRICT_FORMATS: dict[str, KnownFormat] = {
    "i8": KnownFormat.INT8,
    "u8": KnownFormat.UINT8,
    "i16": KnownFormat.INT16,
    "u16": KnownFormat.UINT16,
    "u32": KnownFormat.UINT32,
    "u64": KnownFormat.UINT64,
}

# capability -> name -> (schema type, format)
_EXTENSION_PRIMITIVES: dict[str, dict[str, tuple[SchemaType, KnownFormat | None]]] = {
    "datetime": {
        "DateTime": (SchemaType.STRING, KnownFormat.DATE_TIME),
        "NaiveDateTime": (SchemaType.STRING, KnownFormat.DATE_TIME),
        "OffsetDateTime": (SchemaType.STRING, KnownFormat.DATE_TIME),
        "PrimitiveDateTime": (SchemaType.STRING, KnownFormat.DATE_TIME),
        "Date": (SchemaType.STRING, KnownFormat.DATE),
        "NaiveDate": (SchemaType.STRING, KnownFormat.DATE),
        "NaiveTime": (SchemaType.STRING, None),
        "Duration": (SchemaType.STRING, None),
    },
    "uuid": {
        "Uuid": (SchemaType.STRING, KnownFormat.UUID),
        "UUID": (SchemaType.STRING, KnownFormat.UUID),
    },
    "ulid": {
        "Ulid": (SchemaType.STRING, KnownFormat.ULID),
    },
    "decimal": {
        "Decimal": (SchemaType.STRING, None),
    },
    "url": {
        "Url": (SchemaType.STRING, KnownFormat.URI),
    },
    "path": {
        "PathBuf": (SchemaType.STRING, None),
        "Path": (SchemaType.STRING, None),
    },
}


def capability_for(name: str) -> str | None:
    """Return the capability that would make `name` primitive, if any."""
    for capability, names in _EXTENSION_PRIMITIVES.items():
        if name in names:
            return capability
    return None


class PrimitiveMapper:
    """Static lookup from type identifier to schema type and format."""

    def __init__(self, capabilities: list[str] | tuple[str, ...] = (), non_strict_integers: bool = False):
        """
        Initialize the mapper.

        Args:
            capabilities: Enabled extension families (e.g. "datetime", "uuid")
            non_strict_integers: Give every integer width its own format
        """
        self.capabilities = tuple(capabilities)
        self.non_strict_integers = non_strict_integers

        self._table: dict[str, tuple[SchemaType, KnownFormat | None]] = dict(_CORE_PRIMITIVES)
        if non_strict_integers:
            for name, fmt in _NON_STRICT_FORMATS.items():
                self._table[name] = (SchemaType.INTEGER, fmt)
        for capability in self.capabilities:
            self._table.update(_EXTENSION_PRIMITIVES.get(capability, {}))

    def is_primitive(self, name: str) -> bool:
        return name in self._table

    def map(self, name: str) -> tuple[SchemaType, str | None] | None:
        """
        Look up a primitive.

        Args:
            name: The base type identifier

        Returns:
            (schema type, format token) or None when `name` is not primitive
        """
        entry = self._table.get(name)
        if entry is None:
            return None
        schema_type, fmt = entry
        return schema_type, fmt.value if fmt is not None else None
