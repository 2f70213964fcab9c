"""
Enum representation selector.

Chooses how a union is laid out in the schema from the shape of its
variants and its tagging strategy:

- all unit variants, externally tagged: a string enumeration
- externally tagged: one single-property object per data variant
- internally tagged: the tag property merged into each variant payload
- adjacently tagged: ``{content: payload, tag: name}`` objects
- untagged: the payloads themselves
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ..config import TaggingStrategy
from ..errors import StructuralError, ValidationError
from ..features.nodes import (
    Default,
    Deprecated,
    Description,
    Discriminator,
    Example,
    Examples,
    FeatureSet,
    Rename,
    RenameAll,
    Skip,
    Title,
)
from ..features.validation import validate_feature
from ..rename import RenameRule
from ..schema.nodes import Discriminator as DiscriminatorSchema
from ..schema.nodes import (
    AllOfSchema,
    NullSchema,
    ObjectSchema,
    OneOfSchema,
    PrimitiveSchema,
    Reference,
    SchemaKind,
    SchemaOrRef,
)
from ..type_ast.nodes import FieldStyle, UnionDef, VariantDef
from ..type_tree.nodes import TypeTree
from ..type_tree.primitives import SchemaType

if TYPE_CHECKING:
    from .resolver import SchemaResolver

logger = logging.getLogger(__name__)

# Variant features that decorate the variant's alternative as a whole
_VARIANT_DECORATIONS = (Title, Description, Example, Examples, Default, Deprecated)


class EnumRepresentationSelector:
    """Builds the schema of a union definition."""

    def __init__(self, resolver: SchemaResolver):
        """
        Initialize the selector.

        Args:
            resolver: Resolver used for variant payloads
        """
        self.resolver = resolver

    def select(self, union: UnionDef, bindings: dict[str, TypeTree], features: FeatureSet) -> SchemaOrRef:
        """
        Build the schema of a union.

        Args:
            union: The union definition
            bindings: Generic parameters of the union, bound to concrete trees
            features: Union level features; consumed ones are popped

        Returns:
            The union schema: a string enum, a null schema or a oneOf

        Raises:
            StructuralError: If the tagging cannot be applied to the union
        """
        rename_all = features.pop(RenameAll)
        rule = rename_all.value if rename_all is not None else None
        discriminator = features.pop(Discriminator)

        strategy = self._strategy(union)
        tag = union.tagging.tag
        if strategy in (TaggingStrategy.INTERNAL, TaggingStrategy.ADJACENT) and tag is None:
            raise StructuralError(f"Union '{union.name}' uses {strategy.value} tagging but declares no tag", union.location)
        if strategy == TaggingStrategy.ADJACENT and union.tagging.content is None:
            raise StructuralError(f"Union '{union.name}' uses adjacent tagging but declares no content", union.location)

        variants = self._variants(union)
        if not variants:
            self.resolver.diagnostics.add(
                ValidationError(
                    message=f"Union '{union.name}' has no variant to represent",
                    location=union.location,
                    feature="variants",
                    expected="at least one variant",
                )
            )
            return OneOfSchema()
        all_unit = all(v.is_unit for v in variants)

        if all_unit and strategy == TaggingStrategy.EXTERNAL:
            schema: SchemaOrRef = PrimitiveSchema(
                schema_type=SchemaType.STRING,
                enum=[self.variant_name(v, rule) for v in variants],
            )
        elif all_unit and strategy == TaggingStrategy.UNTAGGED:
            schema = NullSchema()
        else:
            alternatives = []
            for variant in variants:
                alternative = self._alternative(union, variant, strategy, bindings, rule)
                if alternative is not None:
                    alternatives.append(alternative)
            schema = OneOfSchema(variants=alternatives)

        if discriminator is not None:
            self._attach_discriminator(schema, discriminator, union.location)
        return schema

    def kind_of(self, union: UnionDef) -> SchemaKind:
        """Kind of the schema `select` builds, known before any variant is resolved."""
        strategy = self._strategy(union)
        variants = self._variants(union)
        if variants and all(v.is_unit for v in variants):
            if strategy == TaggingStrategy.EXTERNAL:
                return SchemaKind.STRING
            if strategy == TaggingStrategy.UNTAGGED:
                return SchemaKind.NULL
        return SchemaKind.ONE_OF

    def _strategy(self, union: UnionDef) -> TaggingStrategy:
        return union.tagging.strategy or self.resolver.config.default_tagging

    @staticmethod
    def _variants(union: UnionDef) -> list[VariantDef]:
        return [v for v in union.variants if not v.features.is_enabled(Skip)]

    @staticmethod
    def variant_name(variant: VariantDef, rule: RenameRule | None) -> str:
        rename = variant.features.get(Rename)
        if rename is not None:
            return rename.value
        if rule is not None:
            return rule.rename_variant(variant.name)
        return variant.name

    def _alternative(
        self,
        union: UnionDef,
        variant: VariantDef,
        strategy: TaggingStrategy,
        bindings: dict[str, TypeTree],
        rule: RenameRule | None,
    ) -> SchemaOrRef | None:
        name = self.variant_name(variant, rule)
        features = variant.features.copy()
        features.pop(Rename)
        features.pop(Skip)
        field_rule = features.pop(RenameAll)

        if strategy == TaggingStrategy.EXTERNAL:
            if variant.is_unit:
                schema: SchemaOrRef | None = self._name_enum(name)
            else:
                schema = ObjectSchema()
                schema.add_property(name, self._payload(variant, bindings, field_rule), required=True)
        elif strategy == TaggingStrategy.INTERNAL:
            schema = self._internally_tagged(union, variant, name, bindings, field_rule)
        elif strategy == TaggingStrategy.ADJACENT:
            schema = ObjectSchema()
            if not variant.is_unit:
                schema.add_property(union.tagging.content, self._payload(variant, bindings, field_rule), required=True)
            schema.add_property(union.tagging.tag, self._name_enum(name), required=True)
        else:
            schema = NullSchema() if variant.is_unit else self._payload(variant, bindings, field_rule)

        if schema is None:
            return None

        decorations = FeatureSet(features.pop_by(lambda f: isinstance(f, _VARIANT_DECORATIONS)))
        if decorations:
            schema = self.resolver.overlay.apply(schema, decorations, kind=self.resolver.kind_of(schema), location=variant.location)
        for feature in features:
            self.resolver.diagnostics.warning(f"Feature '{feature.name}' has no effect on a variant", variant.location)
        return schema

    def _internally_tagged(
        self,
        union: UnionDef,
        variant: VariantDef,
        name: str,
        bindings: dict[str, TypeTree],
        field_rule: RenameAll | None,
    ) -> SchemaOrRef | None:
        tag = union.tagging.tag
        tag_schema = ObjectSchema()
        tag_schema.add_property(tag, self._name_enum(name), required=True)

        if variant.is_unit:
            return tag_schema

        if variant.style == FieldStyle.NAMED:
            payload = self.resolver.resolve_named_fields(variant.fields, bindings, field_rule.value if field_rule else None)
            payload.add_property(tag, self._name_enum(name), required=True)
            return payload

        fields = [f for f in variant.fields if not f.features.is_enabled(Skip)]
        if len(fields) == 1:
            payload, _ = self.resolver.resolve_field(fields[0], bindings)
            if isinstance(payload, Reference):
                return AllOfSchema(items=[payload, tag_schema])
            if isinstance(payload, ObjectSchema):
                payload.add_property(tag, self._name_enum(name), required=True)
                return payload

        self.resolver.diagnostics.add(
            ValidationError(
                message=f"Variant '{variant.name}' of '{union.name}' cannot be internally tagged: only unit, named or single object payloads can carry the tag",
                location=variant.location,
                feature="tag",
                expected="object payload",
            )
        )
        return None

    def _payload(self, variant: VariantDef, bindings: dict[str, TypeTree], field_rule: RenameAll | None) -> SchemaOrRef:
        if variant.style == FieldStyle.NAMED:
            return self.resolver.resolve_named_fields(variant.fields, bindings, field_rule.value if field_rule else None)
        return self.resolver.resolve_unnamed_fields(variant.fields, bindings, variant.location)

    @staticmethod
    def _name_enum(name: str) -> PrimitiveSchema:
        return PrimitiveSchema(schema_type=SchemaType.STRING, enum=[name])

    def _attach_discriminator(self, schema: SchemaOrRef, feature: Discriminator, location: str) -> None:
        error = validate_feature(self.resolver.kind_of(schema), feature)
        if error is not None or not isinstance(schema, OneOfSchema):
            if error is not None:
                self.resolver.diagnostics.add(replace(error, location=error.location or location))
            return
        schema.discriminator = DiscriminatorSchema(property_name=feature.value, mapping=dict(feature.mapping))
        logger.debug("Attached discriminator on '%s'", feature.value)
