"""
Tests for the component registry.
"""

import unittest

from type_to_schema.pipeline.analyzer import ComponentRegistry
from type_to_schema.pipeline.errors import NamingCollision, TypeSchemaError
from type_to_schema.pipeline.schema.nodes import ObjectSchema, PrimitiveSchema, SchemaKind


class TestComponentRegistry(unittest.TestCase):
    """Placeholder registration, finalization and collisions"""

    def setUp(self):
        self.registry = ComponentRegistry()

    def test_placeholder_then_finalize(self):
        entry = self.registry.register_placeholder("Pet", "Pet")
        self.assertTrue(entry.is_placeholder)
        self.assertEqual(self.registry.placeholders(), ["Pet"])
        self.assertEqual(self.registry.schemas(), {})

        schema = ObjectSchema()
        self.registry.finalize("Pet", schema)
        self.assertFalse(self.registry["Pet"].is_placeholder)
        self.assertEqual(self.registry.schemas(), {"Pet": schema})
        self.assertEqual(self.registry.placeholders(), [])

    def test_lookup_same_identity(self):
        self.registry.register_placeholder("Page_Pet", "Page<Pet>")
        self.assertIsNotNone(self.registry.lookup("Page_Pet", "Page<Pet>"))
        self.assertIsNone(self.registry.lookup("Pet", "Pet"))

    def test_naming_collision(self):
        self.registry.register_placeholder("Page_Vec_Pet", "Page<Vec<Pet>>")
        with self.assertRaises(NamingCollision) as ctx:
            self.registry.lookup("Page_Vec_Pet", "Page_Vec<Pet>")
        self.assertEqual(ctx.exception.existing, "Page<Vec<Pet>>")
        self.assertEqual(ctx.exception.incoming, "Page_Vec<Pet>")

    def test_register_twice(self):
        self.registry.register_placeholder("Pet", "Pet")
        with self.assertRaises(TypeSchemaError):
            self.registry.register_placeholder("Pet", "Pet")

    def test_kind_of(self):
        self.assertEqual(self.registry.kind_of("Unknown"), SchemaKind.OBJECT)
        self.registry.register_placeholder("Status", "Status")
        self.assertEqual(self.registry.kind_of("Status"), SchemaKind.OBJECT)
        self.registry.finalize("Status", PrimitiveSchema(enum=["Active"]))
        self.assertEqual(self.registry.kind_of("Status"), SchemaKind.STRING)

    def test_discard_and_order(self):
        for name in ["B", "A", "C"]:
            self.registry.register_placeholder(name, name)
            self.registry.finalize(name, ObjectSchema())
        self.registry.discard("A")
        self.assertEqual(list(self.registry.schemas()), ["B", "C"])
        self.assertNotIn("A", self.registry)
        self.assertEqual(len(self.registry), 2)


if __name__ == "__main__":
    unittest.main()
