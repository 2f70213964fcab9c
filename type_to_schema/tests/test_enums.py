"""
Tests for union representations: string enums, external, internal,
adjacent and untagged layouts, discriminators and variant features.
"""

import unittest

from type_to_schema.pipeline.analyzer import ResolutionContext, SchemaResolver
from type_to_schema.pipeline.config import ResolverConfig, TaggingStrategy
from type_to_schema.pipeline.errors import DiagnosticLevel, StructuralError
from type_to_schema.pipeline.type_ast import TypeDescriptionParser

PET = {"fields": [{"name": "id", "type": "u64"}]}
PET_REF = {"$ref": "#/components/schemas/Pet"}

CIRCLE = {"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]}
SQUARE = {"name": "Square", "fields": ["f64"]}

RADIUS = {"type": "number", "format": "double"}


def name_enum(name):
    return {"type": "string", "enum": [name]}


class UnionTestCase(unittest.TestCase):
    """Resolves a union and returns its registered component"""

    def _resolve(self, union, config=None, **types):
        catalog = TypeDescriptionParser().parse({"types": {"Pet": PET, "Shape": union, **types}, "roots": []})
        self.resolver = SchemaResolver(ResolutionContext(catalog=catalog, config=config or ResolverConfig()))
        self.resolver.resolve("Shape")
        return self.resolver.registry["Shape"].schema.to_dict()


class TestStringEnums(UnionTestCase):
    def test_all_unit_variants(self):
        schema = self._resolve({"variants": ["Active", "Inactive"]})
        self.assertEqual(schema, {"type": "string", "enum": ["Active", "Inactive"]})

    def test_rename_all_and_rename(self):
        schema = self._resolve(
            {
                "features": {"rename_all": "snake_case"},
                "variants": ["InProgress", {"name": "Done", "features": {"rename": "finished"}}],
            }
        )
        self.assertEqual(schema["enum"], ["in_progress", "finished"])

    def test_skipped_variant(self):
        schema = self._resolve({"variants": ["Active", {"name": "Hidden", "features": {"skip": True}}]})
        self.assertEqual(schema["enum"], ["Active"])

    def test_one_payload_variant_switches_to_one_of(self):
        schema = self._resolve({"variants": ["Active", "Inactive", SQUARE]})
        self.assertNotIn("enum", schema)
        self.assertEqual(len(schema["oneOf"]), 3)

    def test_all_unit_untagged_is_null(self):
        schema = self._resolve({"untagged": True, "variants": ["Nothing"]})
        self.assertEqual(schema, {"type": "null"})

    def test_no_variants_is_an_error(self):
        schema = self._resolve({"variants": []})
        self.assertEqual(schema, {"oneOf": []})
        errors = self.resolver.diagnostics.validation_errors
        self.assertEqual([(e.feature, e.expected) for e in errors], [("variants", "at least one variant")])
        self.assertEqual(errors[0].location, "#/types/Shape")

    def test_all_variants_skipped_is_an_error(self):
        self._resolve({"variants": [{"name": "Hidden", "features": {"skip": True}}]})
        self.assertTrue(self.resolver.diagnostics.has_errors())


class TestUnionKind(UnionTestCase):
    """The kind known before resolution matches the kind of the finalized component"""

    def _assert_kind(self, union, expected, config=None):
        self._resolve(union, config)
        kind = self.resolver.enums.kind_of(self.resolver.context.catalog.get("Shape"))
        self.assertEqual(kind.value, expected)
        self.assertEqual(self.resolver.registry["Shape"].kind, kind)

    def test_string_enum(self):
        self._assert_kind({"variants": ["Active", {"name": "Hidden", "features": {"skip": True}, "fields": ["f64"]}]}, "string")

    def test_untagged_units(self):
        self._assert_kind({"untagged": True, "variants": ["Nothing"]}, "null")

    def test_data_variants(self):
        self._assert_kind({"variants": ["Active", SQUARE]}, "oneOf")

    def test_default_tagging(self):
        self._assert_kind({"variants": ["Active"]}, "null", config=ResolverConfig(default_tagging=TaggingStrategy.UNTAGGED))


class TestExternalTagging(UnionTestCase):
    def test_mixed_variants(self):
        schema = self._resolve({"variants": [CIRCLE, SQUARE, "Empty"]})
        self.assertEqual(
            schema,
            {
                "oneOf": [
                    {
                        "type": "object",
                        "properties": {
                            "Circle": {"type": "object", "properties": {"radius": RADIUS}, "required": ["radius"]}
                        },
                        "required": ["Circle"],
                    },
                    {"type": "object", "properties": {"Square": RADIUS}, "required": ["Square"]},
                    name_enum("Empty"),
                ]
            },
        )

    def test_variant_decorations(self):
        circle = {**CIRCLE, "features": {"description": "A circle", "deprecated": True}}
        schema = self._resolve({"variants": [circle, "Empty"]})
        self.assertEqual(schema["oneOf"][0]["description"], "A circle")
        self.assertTrue(schema["oneOf"][0]["deprecated"])

    def test_variant_field_rename_all(self):
        moved = {"name": "Moved", "features": {"rename_all": "camelCase"}, "fields": [{"name": "new_x", "type": "i32"}]}
        schema = self._resolve({"variants": [moved]})
        self.assertEqual(list(schema["oneOf"][0]["properties"]["Moved"]["properties"]), ["newX"])

    def test_unused_variant_feature_warns(self):
        self._resolve({"variants": [{**SQUARE, "features": {"inline": True}}]})
        self.assertEqual([d.level for d in self.resolver.diagnostics], [DiagnosticLevel.WARNING])

    def test_generic_union(self):
        catalog = TypeDescriptionParser().parse(
            {
                "types": {
                    "Pet": PET,
                    "Maybe": {"generics": ["T"], "variants": [{"name": "Some", "fields": ["T"]}, "Nothing"]},
                },
                "roots": [],
            }
        )
        resolver = SchemaResolver(ResolutionContext(catalog=catalog))
        resolver.resolve("Maybe<Pet>")
        self.assertEqual(
            resolver.registry["Maybe_Pet"].schema.to_dict()["oneOf"][0],
            {"type": "object", "properties": {"Some": PET_REF}, "required": ["Some"]},
        )


class TestInternalTagging(UnionTestCase):
    def test_named_and_unit_variants(self):
        schema = self._resolve({"tag": "type", "variants": [CIRCLE, "Empty"]})
        self.assertEqual(
            schema["oneOf"],
            [
                {
                    "type": "object",
                    "properties": {"radius": RADIUS, "type": name_enum("Circle")},
                    "required": ["radius", "type"],
                },
                {"type": "object", "properties": {"type": name_enum("Empty")}, "required": ["type"]},
            ],
        )

    def test_reference_payload(self):
        schema = self._resolve({"tag": "type", "variants": [{"name": "Pet", "fields": ["Pet"]}]})
        self.assertEqual(
            schema["oneOf"],
            [{"allOf": [PET_REF, {"type": "object", "properties": {"type": name_enum("Pet")}, "required": ["type"]}]}],
        )

    def test_primitive_payload_is_rejected(self):
        schema = self._resolve({"tag": "type", "variants": [SQUARE, "Empty"]})
        self.assertEqual(len(schema["oneOf"]), 1)
        errors = self.resolver.diagnostics.validation_errors
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].location, "#/types/Shape/variants/0")

    def test_discriminator(self):
        schema = self._resolve({"tag": "type", "features": {"discriminator": "type"}, "variants": [CIRCLE, "Empty"]})
        self.assertEqual(schema["discriminator"], {"propertyName": "type"})

    def test_discriminator_mapping(self):
        schema = self._resolve(
            {
                "tag": "type",
                "features": {"discriminator": {"property_name": "type", "mapping": {"pet": "Pet"}}},
                "variants": [{"name": "Pet", "fields": ["Pet"]}],
            }
        )
        self.assertEqual(schema["discriminator"], {"propertyName": "type", "mapping": {"pet": PET_REF["$ref"]}})

    def test_discriminator_on_string_enum(self):
        schema = self._resolve({"features": {"discriminator": "type"}, "variants": ["Active"]})
        self.assertNotIn("discriminator", schema)
        self.assertEqual([e.feature for e in self.resolver.diagnostics.validation_errors], ["discriminator"])

    def test_default_tagging_without_tag(self):
        with self.assertRaises(StructuralError):
            self._resolve({"variants": ["Active"]}, config=ResolverConfig(default_tagging=TaggingStrategy.INTERNAL))
        self.assertNotIn("Shape", self.resolver.registry)


class TestAdjacentTagging(UnionTestCase):
    def test_content_then_tag(self):
        schema = self._resolve({"tag": "t", "content": "c", "variants": [SQUARE, "Empty"]})
        self.assertEqual(
            schema["oneOf"],
            [
                {"type": "object", "properties": {"c": RADIUS, "t": name_enum("Square")}, "required": ["c", "t"]},
                {"type": "object", "properties": {"t": name_enum("Empty")}, "required": ["t"]},
            ],
        )
        self.assertEqual(list(schema["oneOf"][0]["properties"]), ["c", "t"])


class TestUntagged(UnionTestCase):
    def test_payloads_only(self):
        schema = self._resolve({"untagged": True, "variants": [SQUARE, {"name": "Pet", "fields": ["Pet"]}, "Empty"]})
        self.assertEqual(schema, {"oneOf": [RADIUS, PET_REF, {"type": "null"}]})


if __name__ == "__main__":
    unittest.main()
