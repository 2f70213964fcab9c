"""
Tests for feature parsing, validation gating and the overlay pass.
"""

from __future__ import annotations

import unittest

import pytest

from type_to_schema.pipeline.errors import DiagnosticLog, StructuralError
from type_to_schema.pipeline.features import FeatureOverlay, FeatureSet, validate_feature, validate_features
from type_to_schema.pipeline.features.nodes import (
    AdditionalProperties,
    Discriminator,
    Inline,
    MaxLength,
    Maximum,
    MinItems,
    MinLength,
    Minimum,
    MultipleOf,
    Pattern,
    RenameAll,
    Title,
    ValueType,
    Xml,
)
from type_to_schema.pipeline.rename import RenameRule
from type_to_schema.pipeline.schema.nodes import (
    AllOfSchema,
    ArraySchema,
    ObjectSchema,
    OneOfSchema,
    PrimitiveSchema,
    Reference,
    SchemaKind,
)
from type_to_schema.pipeline.type_tree import RawType, SchemaType


class TestFeatureSet(unittest.TestCase):
    """Building and consuming feature sets"""

    def test_from_dict(self):
        features = FeatureSet.from_dict({"title": "Pet", "min_length": 1, "rename_all": "camelCase"})
        self.assertEqual(len(features), 3)
        self.assertEqual(features.get(Title).value, "Pet")
        self.assertEqual(features.get(RenameAll).value, RenameRule.CAMEL)

    def test_unknown_feature(self):
        with self.assertRaises(StructuralError):
            FeatureSet.from_dict({"colour": "red"}, "#/types/Pet")

    def test_malformed_values(self):
        with self.assertRaises(StructuralError):
            FeatureSet.from_dict({"inline": "yes"})
        with self.assertRaises(StructuralError):
            FeatureSet.from_dict({"rename_all": "Title Case"})
        with self.assertRaises(StructuralError):
            FeatureSet.from_dict({"examples": 3})

    def test_typed_values(self):
        features = FeatureSet.from_dict({"value_type": "Vec<String>", "additional_properties": "i32"})
        self.assertEqual(features.get(ValueType).value, RawType.parse("Vec<String>"))
        self.assertEqual(features.get(AdditionalProperties).value, RawType(name="i32"))

    def test_discriminator(self):
        features = FeatureSet.from_dict({"discriminator": {"property_name": "kind", "mapping": {"cat": "Cat"}}})
        discriminator = features.get(Discriminator)
        self.assertEqual(discriminator.value, "kind")
        self.assertEqual(discriminator.mapping, {"cat": "Cat"})

    def test_xml(self):
        xml = FeatureSet.from_dict({"xml": {"name": "pet", "prefix": "p", "attribute": True}}).get(Xml)
        self.assertEqual(xml.value, {"name": "pet", "prefix": "p"})
        self.assertTrue(xml.attribute)
        self.assertFalse(xml.wrapped)
        self.assertEqual(xml.to_dict(), {"name": "pet", "prefix": "p", "attribute": True})

    def test_xml_split_for_vector(self):
        xml = FeatureSet.from_dict({"xml": {"name": "pet", "namespace": "https://pets", "wrapped": {"name": "pets"}}}).get(Xml)
        array_xml, items_xml = xml.split_for_vector()
        self.assertEqual(array_xml.to_dict(), {"name": "pets", "wrapped": True})
        self.assertEqual(items_xml.to_dict(), {"name": "pet", "namespace": "https://pets"})

        array_xml, items_xml = FeatureSet.from_dict({"xml": {"wrapped": True}}).get(Xml).split_for_vector()
        self.assertEqual(array_xml.to_dict(), {"wrapped": True})
        self.assertIsNone(items_xml)

    def test_malformed_xml(self):
        for value in ("pet", {"name": 1}, {"wrapped": "yes"}, {"wrapped": {"title": "pets"}}, {"nsp": "x"}):
            with self.assertRaises(StructuralError):
                FeatureSet.from_dict({"xml": value})

    def test_pop_consumes_once(self):
        features = FeatureSet.from_dict({"inline": True})
        self.assertIsNotNone(features.pop(Inline))
        self.assertIsNone(features.pop(Inline))
        self.assertFalse(features)

    def test_copy_is_independent(self):
        features = FeatureSet.from_dict({"inline": True})
        copy = features.copy()
        copy.pop(Inline)
        self.assertTrue(features.is_enabled(Inline))


class TestValidationGating:
    """Constraint features against schema kinds"""

    @pytest.mark.parametrize(
        "feature,kind",
        [
            (Minimum(value=1), SchemaKind.INTEGER),
            (Maximum(value=1.5), SchemaKind.NUMBER),
            (MultipleOf(value=2), SchemaKind.INTEGER),
            (MinLength(value=1), SchemaKind.STRING),
            (Pattern(value="^[a-z]+$"), SchemaKind.STRING),
            (MinItems(value=1), SchemaKind.ARRAY),
            (AdditionalProperties(value=False), SchemaKind.OBJECT),
            (Discriminator(value="kind"), SchemaKind.ONE_OF),
            (MinLength(value=1), SchemaKind.ANY),
            (Xml(value={}, wrapped=True), SchemaKind.ARRAY),
            (Xml(value={"name": "pet"}, attribute=True), SchemaKind.STRING),
        ],
    )
    def test_accepted(self, feature, kind):
        assert validate_feature(kind, feature) is None

    @pytest.mark.parametrize(
        "feature,kind,expected",
        [
            (MinLength(value=1), SchemaKind.INTEGER, "string"),
            (Minimum(value=1), SchemaKind.STRING, "number"),
            (MinItems(value=1), SchemaKind.OBJECT, "array"),
            (Discriminator(value="kind"), SchemaKind.STRING, "oneOf"),
            (Xml(value={}, wrapped=True), SchemaKind.OBJECT, "array"),
        ],
    )
    def test_rejected(self, feature, kind, expected):
        error = validate_feature(kind, feature)
        assert error is not None
        assert error.feature == feature.name
        assert error.expected == expected
        assert f"`{feature.name}` error" in error.message

    @pytest.mark.parametrize(
        "feature",
        [
            MultipleOf(value=0),
            MultipleOf(value=-2),
            MinLength(value=0),
            MaxLength(value=1.5),
            MinItems(value=True),
            Pattern(value="[a-"),
            Minimum(value="1"),
        ],
    )
    def test_invalid_values(self, feature):
        kind = SchemaKind.ANY
        assert validate_feature(kind, feature) is not None

    def test_minimum_above_maximum(self):
        errors = validate_features(SchemaKind.INTEGER, [Minimum(value=10), Maximum(value=1)])
        assert len(errors) == 1
        assert errors[0].feature == "maximum"

    def test_bounds_not_compared_after_gate_failure(self):
        errors = validate_features(SchemaKind.INTEGER, [MinLength(value=5), MaxLength(value=3)])
        assert [e.feature for e in errors] == ["min_length", "max_length"]


class TestFeatureOverlay(unittest.TestCase):
    """Applying decorations and constraints"""

    def setUp(self):
        self.diagnostics = DiagnosticLog()
        self.overlay = FeatureOverlay(self.diagnostics)

    def test_decorations_and_constraints(self):
        schema = PrimitiveSchema(schema_type=SchemaType.STRING)
        features = FeatureSet.from_dict({"title": "Name", "min_length": 1, "pattern": "^[A-Z]", "default": "Rex"})
        result = self.overlay.apply(schema, features)
        self.assertIs(result, schema)
        self.assertEqual(
            result.to_dict(),
            {"title": "Name", "type": "string", "minLength": 1, "pattern": "^[A-Z]", "default": "Rex"},
        )
        self.assertEqual(len(features), 0)
        self.assertEqual(len(self.diagnostics), 0)

    def test_min_length_on_integer_is_one_error(self):
        schema = PrimitiveSchema(schema_type=SchemaType.INTEGER, format="int32")
        result = self.overlay.apply(schema, FeatureSet.from_dict({"min_length": 1}), location="Pet.age")
        self.assertEqual(result.to_dict(), {"type": "integer", "format": "int32"})
        self.assertEqual(len(self.diagnostics.validation_errors), 1)
        error = self.diagnostics.validation_errors[0]
        self.assertEqual(error.feature, "min_length")
        self.assertEqual(error.expected, "string")
        self.assertEqual(error.location, "Pet.age")

    def test_item_count_on_array(self):
        schema = ArraySchema(items=PrimitiveSchema())
        self.overlay.apply(schema, FeatureSet.from_dict({"min_items": 1, "max_items": 5}))
        self.assertEqual(schema.to_dict(), {"type": "array", "items": {"type": "string"}, "minItems": 1, "maxItems": 5})

    def test_format_override(self):
        schema = PrimitiveSchema(schema_type=SchemaType.STRING)
        self.overlay.apply(schema, FeatureSet.from_dict({"format": "password"}))
        self.assertEqual(schema.to_dict(), {"type": "string", "format": "password"})

    def test_nullable_primitive(self):
        schema = PrimitiveSchema(schema_type=SchemaType.INTEGER)
        self.overlay.apply(schema, FeatureSet.from_dict({"nullable": True}))
        self.assertEqual(schema.to_dict(), {"type": ["integer", "null"]})

    def test_reference_with_decorations_is_wrapped(self):
        result = self.overlay.apply(Reference("Pet"), FeatureSet.from_dict({"description": "The pet"}))
        self.assertIsInstance(result, AllOfSchema)
        self.assertEqual(result.to_dict(), {"description": "The pet", "allOf": [{"$ref": "#/components/schemas/Pet"}]})

    def test_nullable_reference(self):
        result = self.overlay.apply(Reference("Pet"), FeatureSet.from_dict({"nullable": True}))
        self.assertIsInstance(result, OneOfSchema)
        self.assertEqual(result.to_dict(), {"oneOf": [{"type": "null"}, {"$ref": "#/components/schemas/Pet"}]})

    def test_reference_gated_by_target_kind(self):
        result = self.overlay.apply(Reference("Status"), FeatureSet.from_dict({"min_length": 2}), kind=SchemaKind.STRING)
        self.assertEqual(result.to_dict(), {"allOf": [{"$ref": "#/components/schemas/Status"}], "minLength": 2})

        result = self.overlay.apply(Reference("Pet"), FeatureSet.from_dict({"min_length": 2}), kind=SchemaKind.OBJECT)
        self.assertEqual(result, Reference("Pet"))
        self.assertEqual(len(self.diagnostics.validation_errors), 1)

    def test_xml_decoration(self):
        schema = self.overlay.apply(PrimitiveSchema(schema_type=SchemaType.STRING), FeatureSet.from_dict({"xml": {"name": "nick", "attribute": True}}))
        self.assertEqual(schema.to_dict(), {"type": "string", "xml": {"name": "nick", "attribute": True}})

    def test_wrapped_xml_outside_array(self):
        schema = self.overlay.apply(ObjectSchema(), FeatureSet.from_dict({"xml": {"wrapped": True}}))
        self.assertEqual(schema.to_dict(), {"type": "object"})
        self.assertEqual([(e.feature, e.expected) for e in self.diagnostics.validation_errors], [("xml", "array")])

    def test_resolver_features_are_left_alone(self):
        features = FeatureSet.from_dict({"inline": True, "title": "T"})
        self.overlay.apply(ObjectSchema(), features)
        self.assertTrue(features.is_enabled(Inline))
        self.assertEqual(len(features), 1)


if __name__ == "__main__":
    pytest.main([__file__])
