"""
Schema resolver.

Walks a TypeTree and produces its schema, or a reference to a shared
component. Object types are looked up in the type catalog, registered in
the component registry as placeholders, resolved field by field (or
variant by variant through the enum selector) and finalized.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace

from ..config import ResolverConfig
from ..errors import DiagnosticLog, StructuralError, TypeSchemaError
from ..features.nodes import (
    AdditionalProperties,
    As,
    FeatureSet,
    Inline,
    NoRecursion,
    Rename,
    RenameAll,
    Required,
    SchemaWith,
    Skip,
    ValueType,
    Xml,
)
from ..features.overlay import FeatureOverlay
from ..features.validation import validate_feature
from ..rename import RenameRule
from ..schema.nodes import (
    AnySchema,
    ArraySchema,
    NullSchema,
    ObjectSchema,
    OneOfSchema,
    PrimitiveSchema,
    RawSchema,
    Reference,
    Schema,
    SchemaKind,
    SchemaOrRef,
)
from ..type_ast.nodes import FieldDef, FieldStyle, RecordDef, RootDef, TypeCatalog, TypeDef
from ..type_tree.builder import TypeTreeBuilder
from ..type_tree.nodes import Container, RawType, TypeTree, ValueKind
from ..type_tree.primitives import PrimitiveMapper, capability_for
from .enums import EnumRepresentationSelector
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)

# ValueType targets that stand for a free-form value rather than a type
VIRTUAL_OBJECT = "Object"
VIRTUAL_VALUE = "Value"

# Resolver instructions that follow an occurrence into container elements
_ELEMENT_FEATURES = (Inline, NoRecursion)


@dataclass
class ResolutionContext:
    """Mutable state of one document build."""

    catalog: TypeCatalog = field(default_factory=TypeCatalog)
    config: ResolverConfig = field(default_factory=ResolverConfig)
    registry: ComponentRegistry = field(default_factory=ComponentRegistry)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    # Trees whose component was referenced through `no_recursion` and not resolved yet
    deferred: list[TypeTree] = field(default_factory=list)


class SchemaResolver:
    """Resolves type occurrences into schemas and shared components."""

    def __init__(self, context: ResolutionContext):
        """
        Initialize the resolver.

        Args:
            context: State of the document build; the registry and the
                diagnostic log are written to
        """
        self.context = context
        self.config = context.config
        self.registry = context.registry
        self.diagnostics = context.diagnostics
        self.primitives = PrimitiveMapper(self.config.capabilities, self.config.non_strict_integers)
        self.builder = TypeTreeBuilder(self.primitives)
        self.overlay = FeatureOverlay(self.diagnostics)
        self.enums = EnumRepresentationSelector(self)
        self._depth = 0

    # Entry points

    def resolve(self, tree: TypeTree | RawType | str, features: FeatureSet | None = None, location: str = "") -> SchemaOrRef:
        """
        Resolve one type occurrence.

        Args:
            tree: The occurrence, as a TypeTree or raw type
            features: Features of the occurrence; the caller's set is not modified
            location: Where the occurrence was declared, for diagnostics

        Returns:
            The schema of the occurrence, or a reference to its component

        Raises:
            StructuralError: If the input is malformed. Every entry registered
                by the failed resolution, finalized or not, is removed from
                the registry.
        """
        if not isinstance(tree, TypeTree):
            tree = self.builder.build(tree)
        features = features.copy() if features is not None else FeatureSet()

        if self._depth > 0:
            return self._resolve(tree, features, location)

        before = {entry.name for entry in self.registry}
        self._depth += 1
        try:
            schema = self._resolve(tree, features, location)
        except TypeSchemaError:
            for entry in self.registry:
                if entry.name not in before:
                    self.registry.discard(entry.name)
            raise
        finally:
            self._depth -= 1
        self._report_unused(features, schema, location)
        return schema

    def resolve_root(self, root: RootDef) -> SchemaOrRef:
        """Resolve a document root."""
        return self.resolve(self.builder.build(root.type), root.features, location=root.name)

    def resolve_deferred(self) -> None:
        """
        Resolve the components that were only referenced through `no_recursion`.

        Raises:
            StructuralError: If a deferred component is malformed. The failed
                tree has already been taken off the queue, so calling again
                carries on with the remaining ones.
        """
        while self.context.deferred:
            tree = self.context.deferred.pop(0)
            definition = self.context.catalog.get(tree.name)
            if definition is None or self._component_name(definition, tree) in self.registry:
                continue
            logger.debug("Resolving deferred component %s", tree.identity())
            self.resolve(tree)

    def kind_of(self, schema: SchemaOrRef) -> SchemaKind:
        """Base kind of a schema; references report the kind of their component."""
        if isinstance(schema, Reference):
            return self.registry.kind_of(schema.name)
        return schema.kind

    # Dispatch

    def _resolve(
        self,
        tree: TypeTree,
        features: FeatureSet,
        location: str,
        bindings: dict[str, TypeTree] | None = None,
    ) -> SchemaOrRef:
        schema_with = features.pop(SchemaWith)
        if schema_with is not None:
            return self.overlay.apply(RawSchema(payload=schema_with.build()), features, location=location)

        value_type = features.pop(ValueType)
        if value_type is not None:
            return self._resolve_value_type(value_type.value, features, location, bindings or {})

        tree = tree.unwrap_indirection()
        if tree.container == Container.OPTIONAL:
            return self._resolve_optional(tree, features, location)
        if tree.container == Container.VECTOR:
            return self._resolve_vector(tree, features, location)
        if tree.container == Container.MAP:
            return self._resolve_map(tree, features, location)
        if tree.kind == ValueKind.PRIMITIVE:
            return self._resolve_primitive(tree, features, location)
        if tree.kind == ValueKind.TUPLE:
            return self._resolve_tuple(tree, features, location)
        return self._resolve_object(tree, features, location)

    def _resolve_value_type(
        self, raw: RawType, features: FeatureSet, location: str, bindings: dict[str, TypeTree]
    ) -> SchemaOrRef:
        tree = self._value_type_tree(raw, bindings)
        if tree is None:
            schema = ObjectSchema() if raw.name == VIRTUAL_OBJECT else AnySchema()
            return self.overlay.apply(schema, features, location=location)
        return self._resolve(tree, features, location)

    def _value_type_tree(self, raw: RawType, bindings: dict[str, TypeTree]) -> TypeTree | None:
        """Tree a `value_type` stands for, or None for the free-form Object and Value targets."""
        virtual = not raw.args and raw.name in (VIRTUAL_OBJECT, VIRTUAL_VALUE)
        if virtual and raw.name not in self.context.catalog and raw.name not in bindings:
            return None
        return self.builder.build(raw).substitute(bindings)

    def _resolve_primitive(self, tree: TypeTree, features: FeatureSet, location: str) -> Schema:
        schema_type, fmt = self.primitives.map(tree.name)
        schema = PrimitiveSchema(schema_type=schema_type, format=fmt)
        return self.overlay.apply(schema, features, location=location)

    def _resolve_optional(self, tree: TypeTree, features: FeatureSet, location: str) -> SchemaOrRef:
        schema = self._resolve(tree.children[0], features, location)
        if self.config.optional_encoding.adds_null:
            schema = self.make_nullable(schema)
        return schema

    def _resolve_vector(self, tree: TypeTree, features: FeatureSet, location: str) -> Schema:
        element_features = self._element_features(features)
        array_xml = None
        xml = features.pop(Xml)
        if xml is not None:
            array_xml, items_xml = xml.split_for_vector()
            if items_xml is not None:
                element_features = FeatureSet([*element_features, items_xml])

        items = self._resolve(tree.children[0], element_features, location)
        schema = self.overlay.apply(ArraySchema(items=items), features, location=location)
        if array_xml is not None:
            schema = self.overlay.apply(schema, FeatureSet([array_xml]), location=location)
        return schema

    def _resolve_map(self, tree: TypeTree, features: FeatureSet, location: str) -> Schema:
        value = self._resolve(tree.children[-1], self._element_features(features), location)
        return self.overlay.apply(ObjectSchema(additional_properties=value), features, location=location)

    def _resolve_tuple(self, tree: TypeTree, features: FeatureSet, location: str) -> Schema:
        return self.overlay.apply(self._tuple_schema(list(tree.children), location), features, location=location)

    def _tuple_schema(self, members: list[TypeTree], location: str) -> ArraySchema:
        shapes = {self._primitive_shape(member) for member in members}
        if len(shapes) == 1 and None not in shapes:
            schema_type, fmt = shapes.pop()
            return ArraySchema(items=PrimitiveSchema(schema_type=schema_type, format=fmt))

        if not self.config.positional_tuples:
            return ArraySchema(items=AnySchema())

        prefix_items = [self._resolve(member, FeatureSet(), location) for member in members]
        schema = ArraySchema(prefix_items=prefix_items)
        schema.constraints["minItems"] = len(members)
        schema.constraints["maxItems"] = len(members)
        return schema

    def _primitive_shape(self, tree: TypeTree):
        tree = tree.unwrap_indirection()
        if tree.kind != ValueKind.PRIMITIVE or tree.container is not None:
            return None
        return self.primitives.map(tree.name)

    @staticmethod
    def _element_features(features: FeatureSet) -> FeatureSet:
        return FeatureSet(features.pop_by(lambda f: isinstance(f, _ELEMENT_FEATURES)))

    # Objects

    def _resolve_object(self, tree: TypeTree, features: FeatureSet, location: str) -> SchemaOrRef:
        inline = features.pop(Inline)
        no_recursion = features.pop(NoRecursion)

        definition = self.context.catalog.get(tree.name)
        if definition is None:
            return self._resolve_unknown(tree, features, location)

        name = self._component_name(definition, tree)
        identity = tree.strip_indirection().identity()
        entry = self.registry.lookup(name, identity)

        if entry is not None:
            if inline is not None and inline.value and not entry.is_placeholder:
                return self.overlay.apply(copy.deepcopy(entry.schema), features, location=location)
            self.registry.mark_referenced(name)
            return self._reference(name, features, location)

        if no_recursion is not None and no_recursion.value:
            self.context.deferred.append(tree.strip_indirection())
            return self._reference(name, features, location)

        bindings = self._bind_generics(definition, tree, location)
        self.registry.register_placeholder(name, identity, self._placeholder_kind(definition))
        schema = self._resolve_definition(definition, bindings, location)

        if inline is not None and inline.value:
            if self.registry[name].referenced:
                # Its own body refers back to it, so the component has to exist
                logger.debug("Keeping inlined component %s for its back-references", name)
                self.registry.finalize(name, schema)
                schema = copy.deepcopy(schema)
            else:
                self.registry.discard(name)
            return self.overlay.apply(schema, features, location=location)

        self.registry.finalize(name, schema)
        self.registry.mark_referenced(name)
        return self._reference(name, features, location)

    def _reference(self, name: str, features: FeatureSet, location: str) -> SchemaOrRef:
        return self.overlay.apply(Reference(name), features, kind=self.registry.kind_of(name), location=location)

    def _resolve_unknown(self, tree: TypeTree, features: FeatureSet, location: str) -> SchemaOrRef:
        message = f"No definition found for type '{tree.name}', emitting a reference"
        capability = capability_for(tree.name)
        if capability is not None:
            message += f"; enable the '{capability}' capability to map it to a primitive"
        if self.config.strict_references:
            self.diagnostics.error(message, location)
        else:
            logger.warning("%s (%s)", message, location or tree.identity())
            self.diagnostics.warning(message, location)
        name = "_".join(tree.name_segments())
        return self._reference(name, features, location)

    def _component_name(self, definition: TypeDef, tree: TypeTree) -> str:
        """Canonical component name, e.g. ``Page_Vec_Pet`` for ``Page<Vec<Pet>>``."""
        override = definition.features.get(As)
        segments = [override.value if override is not None else definition.name]
        for child in tree.unwrap_indirection().children:
            segments.extend(child.name_segments())
        return "_".join(segments)

    def _placeholder_kind(self, definition: TypeDef) -> SchemaKind:
        """Kind a definition resolves to, for gating back-references met while its body is resolved."""
        if not isinstance(definition, RecordDef):
            return self.enums.kind_of(definition)
        if definition.style != FieldStyle.UNNAMED:
            return SchemaKind.OBJECT
        fields = [f for f in definition.fields if not f.features.is_enabled(Skip)]
        if len(fields) > 1:
            return SchemaKind.ARRAY
        # A newtype takes the kind of its field, which is not known yet
        return SchemaKind.OBJECT if not fields else SchemaKind.ANY

    def _bind_generics(self, definition: TypeDef, tree: TypeTree, location: str) -> dict[str, TypeTree]:
        arguments = tree.unwrap_indirection().children
        if len(arguments) != len(definition.generics):
            raise StructuralError(
                f"'{definition.name}' expects {len(definition.generics)} generic argument(s), got {len(arguments)}",
                location or definition.location,
            )
        return dict(zip(definition.generics, arguments))

    def _resolve_definition(self, definition: TypeDef, bindings: dict[str, TypeTree], location: str) -> SchemaOrRef:
        features = definition.features.copy()
        features.pop(As)

        if isinstance(definition, RecordDef):
            schema = self._resolve_record(definition, bindings, features)
        else:
            schema = self.enums.select(definition, bindings, features)

        additional = features.pop(AdditionalProperties)
        if additional is not None:
            self._apply_additional_properties(schema, additional, definition.location, bindings)

        schema = self.overlay.apply(schema, features, kind=self.kind_of(schema), location=definition.location)
        self._report_unused(features, schema, definition.location)
        return schema

    def _resolve_record(self, record: RecordDef, bindings: dict[str, TypeTree], features: FeatureSet) -> SchemaOrRef:
        rename_all = features.pop(RenameAll)
        if record.style == FieldStyle.UNIT:
            return ObjectSchema()
        if record.style == FieldStyle.UNNAMED:
            return self.resolve_unnamed_fields(record.fields, bindings, record.location)
        return self.resolve_named_fields(record.fields, bindings, rename_all.value if rename_all else None)

    def _apply_additional_properties(
        self,
        schema: SchemaOrRef,
        feature: AdditionalProperties,
        location: str,
        bindings: dict[str, TypeTree],
    ) -> None:
        if not isinstance(schema, ObjectSchema):
            error = validate_feature(self.kind_of(schema), feature)
            if error is not None:
                self.diagnostics.add(replace(error, location=error.location or location))
            return
        if isinstance(feature.value, bool):
            schema.additional_properties = feature.value
        else:
            tree = self.builder.build(feature.value).substitute(bindings)
            schema.additional_properties = self._resolve(tree, FeatureSet(), location)

    # Fields

    def resolve_field(self, field_def: FieldDef, bindings: dict[str, TypeTree]) -> tuple[SchemaOrRef, bool]:
        """
        Resolve one field of a record or variant.

        Args:
            field_def: The field definition
            bindings: Generic parameters of the enclosing definition

        Returns:
            (schema, required)
        """
        features = field_def.features.copy()
        features.pop(Rename)
        features.pop(Skip)
        required = features.pop(Required)

        tree = self._field_tree(field_def, bindings)
        try:
            optional = self._is_optional(tree, features, bindings)
        except StructuralError as e:
            raise StructuralError(e.message, field_def.location) from e

        schema = self._resolve(tree, features, field_def.location, bindings)
        self._report_unused(features, schema, field_def.location)

        if required is not None:
            return schema, required.value
        return schema, not (optional and self.config.optional_encoding.drops_required)

    def _field_tree(self, field_def: FieldDef, bindings: dict[str, TypeTree]) -> TypeTree:
        try:
            return self.builder.build(field_def.type).substitute(bindings)
        except StructuralError as e:
            raise StructuralError(e.message, field_def.location) from e

    def _is_optional(self, tree: TypeTree, features: FeatureSet, bindings: dict[str, TypeTree]) -> bool:
        if features.has(SchemaWith):
            return False
        value_type = features.get(ValueType)
        if value_type is not None:
            tree = self._value_type_tree(value_type.value, bindings)
            if tree is None:
                return False
        return tree.unwrap_indirection().is_optional

    def resolve_named_fields(
        self,
        fields: list[FieldDef],
        bindings: dict[str, TypeTree],
        rename_all: RenameRule | None = None,
    ) -> ObjectSchema:
        """Resolve named fields into an object, in declaration order."""
        schema = ObjectSchema()
        for field_def in fields:
            if field_def.features.is_enabled(Skip):
                continue
            field_schema, required = self.resolve_field(field_def, bindings)
            schema.add_property(self.property_name(field_def, rename_all), field_schema, required)
        return schema

    def resolve_unnamed_fields(self, fields: list[FieldDef], bindings: dict[str, TypeTree], location: str) -> SchemaOrRef:
        """Resolve positional fields: one field is transparent, several form a tuple."""
        fields = [f for f in fields if not f.features.is_enabled(Skip)]
        if not fields:
            return ObjectSchema()
        if len(fields) == 1:
            schema, _ = self.resolve_field(fields[0], bindings)
            return schema
        members = [self._field_tree(f, bindings) for f in fields]
        return self._tuple_schema(members, location)

    @staticmethod
    def property_name(field_def: FieldDef, rename_all: RenameRule | None) -> str:
        rename = field_def.features.get(Rename)
        if rename is not None:
            return rename.value
        if rename_all is not None:
            return rename_all.rename(field_def.name)
        return field_def.name

    # Helpers

    def make_nullable(self, schema: SchemaOrRef) -> SchemaOrRef:
        """Add null to the accepted values of a schema."""
        if isinstance(schema, Reference):
            return OneOfSchema(variants=[NullSchema(), schema])
        if isinstance(schema, OneOfSchema) and schema.variants and isinstance(schema.variants[0], NullSchema):
            return schema
        if isinstance(schema, (AnySchema, NullSchema)):
            return schema
        schema.nullable = True
        return schema

    def _report_unused(self, features: FeatureSet, schema: SchemaOrRef, location: str) -> None:
        """Report features that nothing consumed: misplaced constraints as errors, the rest as warnings."""
        kind = self.kind_of(schema)
        for feature in features:
            error = validate_feature(kind, feature)
            if error is not None:
                self.diagnostics.add(replace(error, location=error.location or location))
            else:
                self.diagnostics.warning(f"Feature '{feature.name}' has no effect here", location)

