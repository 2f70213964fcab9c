"""
Type description parser that builds the type catalog.

Reads the JSON type description document:

    {
        "types": {
            "Pet": {"kind": "record", "fields": [{"name": "id", "type": "u64"}]},
            "Status": {"kind": "union", "variants": [{"name": "Active"}], "tag": "type"}
        },
        "roots": ["Pet", {"name": "Pets", "type": "Vec<Pet>"}]
    }

Only the shape of the document is checked here; whether features fit the
types they decorate is decided during resolution.
"""

from __future__ import annotations

from typing import Any

from ..config import TaggingStrategy
from ..errors import StructuralError
from ..features.nodes import FeatureSet
from ..type_tree.nodes import RawType
from .nodes import FieldDef, FieldStyle, RecordDef, RootDef, Tagging, TypeCatalog, UnionDef, VariantDef


class TypeDescriptionParser:
    """Parses a type description document into a TypeCatalog."""

    KINDS = {"record", "union"}

    def parse(self, document: dict[str, Any]) -> TypeCatalog:
        """
        Parse a type description document.

        Args:
            document: The decoded JSON document

        Returns:
            TypeCatalog with every definition and root

        Raises:
            StructuralError: If the document is malformed
        """
        if not isinstance(document, dict):
            raise StructuralError("Type description must be a JSON object")

        catalog = TypeCatalog()
        types = document.get("types", {})
        if not isinstance(types, dict):
            raise StructuralError("'types' must be an object", "#/types")

        for name, body in types.items():
            # Skip comment entries
            if name.startswith("_comment"):
                continue
            location = f"#/types/{name}"
            catalog.add(self._parse_definition(name, body, location))

        roots = document.get("roots")
        if roots is None:
            roots = list(catalog.definitions)
        if not isinstance(roots, list):
            raise StructuralError("'roots' must be a list", "#/roots")
        for index, root in enumerate(roots):
            catalog.roots.append(self._parse_root(root, f"#/roots/{index}"))

        return catalog

    def _parse_definition(self, name: str, body: Any, location: str) -> RecordDef | UnionDef:
        if not isinstance(body, dict):
            raise StructuralError("Definition must be an object", location)

        kind = body.get("kind", "union" if "variants" in body else "record")
        if kind not in self.KINDS:
            raise StructuralError(f"Unknown definition kind '{kind}', expected record or union", location)

        generics = body.get("generics", [])
        if not isinstance(generics, list) or not all(isinstance(g, str) for g in generics):
            raise StructuralError("'generics' must be a list of identifiers", location)

        features = FeatureSet.from_dict(body.get("features"), location)

        if kind == "record":
            fields = self._parse_fields(body.get("fields", []), location)
            return RecordDef(
                name=name,
                generics=list(generics),
                fields=fields,
                style=self._style(body.get("style"), fields, location),
                features=features,
                location=location,
            )

        variants = body.get("variants", [])
        if not isinstance(variants, list):
            raise StructuralError("'variants' must be a list", location)
        return UnionDef(
            name=name,
            generics=list(generics),
            variants=[self._parse_variant(v, f"{location}/variants/{i}") for i, v in enumerate(variants)],
            tagging=self._parse_tagging(body, location),
            features=features,
            location=location,
        )

    def _parse_variant(self, body: Any, location: str) -> VariantDef:
        if isinstance(body, str):
            return VariantDef(name=body, location=location)
        if not isinstance(body, dict) or not isinstance(body.get("name"), str):
            raise StructuralError("Variant must be a name or an object with a 'name'", location)

        fields = self._parse_fields(body.get("fields", []), location)
        return VariantDef(
            name=body["name"],
            fields=fields,
            style=self._style(body.get("style"), fields, location),
            features=FeatureSet.from_dict(body.get("features"), location),
            location=location,
        )

    def _parse_fields(self, fields: Any, location: str) -> list[FieldDef]:
        if not isinstance(fields, list):
            raise StructuralError("'fields' must be a list", location)

        result = []
        for index, body in enumerate(fields):
            field_location = f"{location}/fields/{index}"
            if isinstance(body, str):
                # Shorthand for a positional field
                body = {"type": body}
            if not isinstance(body, dict) or not isinstance(body.get("type"), str):
                raise StructuralError("Field must be a type string or an object with a 'type'", field_location)

            name = body.get("name")
            if name is not None and not isinstance(name, str):
                raise StructuralError("Field 'name' must be a string", field_location)

            result.append(
                FieldDef(
                    name=name,
                    type=self._parse_type(body["type"], field_location),
                    features=FeatureSet.from_dict(body.get("features"), field_location),
                    location=field_location,
                )
            )
        return result

    def _style(self, style: Any, fields: list[FieldDef], location: str) -> FieldStyle:
        """Infer the body style from the fields unless it is declared."""
        named = [f for f in fields if f.name is not None]
        if style is not None:
            try:
                declared = FieldStyle(style)
            except ValueError:
                raise StructuralError(f"Unknown style '{style}', expected named, unnamed or unit", location) from None
            if declared == FieldStyle.UNIT and fields:
                raise StructuralError("A unit definition cannot have fields", location)
            if declared == FieldStyle.NAMED and len(named) != len(fields):
                raise StructuralError("Every field of a named definition needs a name", location)
            if declared == FieldStyle.UNNAMED and named:
                raise StructuralError("Fields of an unnamed definition cannot have names", location)
            return declared

        if not fields:
            return FieldStyle.UNIT
        if len(named) == len(fields):
            return FieldStyle.NAMED
        if not named:
            return FieldStyle.UNNAMED
        raise StructuralError("Cannot mix named and positional fields", location)

    def _parse_tagging(self, body: dict[str, Any], location: str) -> Tagging:
        tag = body.get("tag")
        content = body.get("content")
        untagged = body.get("untagged", False)

        for key, value in (("tag", tag), ("content", content)):
            if value is not None and not isinstance(value, str):
                raise StructuralError(f"'{key}' must be a string", location)
        if content is not None and tag is None:
            raise StructuralError("'content' requires 'tag'", location)
        if untagged and tag is not None:
            raise StructuralError("An untagged union cannot declare 'tag'", location)

        if untagged:
            return Tagging(strategy=TaggingStrategy.UNTAGGED)
        if tag is not None and content is not None:
            return Tagging(strategy=TaggingStrategy.ADJACENT, tag=tag, content=content)
        if tag is not None:
            return Tagging(strategy=TaggingStrategy.INTERNAL, tag=tag)
        if body.get("tagging") == TaggingStrategy.EXTERNAL.value:
            return Tagging(strategy=TaggingStrategy.EXTERNAL)
        return Tagging()

    def _parse_root(self, root: Any, location: str) -> RootDef:
        if isinstance(root, str):
            return RootDef(name=root, type=self._parse_type(root, location))
        if not isinstance(root, dict) or not isinstance(root.get("type"), str):
            raise StructuralError("Root must be a type string or an object with a 'type'", location)
        return RootDef(
            name=root.get("name", root["type"]),
            type=self._parse_type(root["type"], location),
            features=FeatureSet.from_dict(root.get("features"), location),
        )

    @staticmethod
    def _parse_type(text: str, location: str) -> RawType:
        try:
            return RawType.parse(text)
        except StructuralError as e:
            raise StructuralError(e.message, location) from e
