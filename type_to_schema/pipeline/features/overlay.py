"""
Feature overlay.

Applies decoration and constraint features to an already resolved schema.
Constraints are validated first; a failing one is reported to the
diagnostic log and left off the schema.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import DiagnosticLog, ValidationError
from ..schema.nodes import AllOfSchema, NullSchema, OneOfSchema, PrimitiveSchema, Reference, Schema, SchemaKind, SchemaOrRef
from .nodes import (
    CONSTRAINTS,
    DECORATIONS,
    Default,
    Deprecated,
    Description,
    Example,
    Examples,
    ExclusiveMaximum,
    ExclusiveMinimum,
    Feature,
    FeatureSet,
    Format,
    Maximum,
    MaxItems,
    MaxLength,
    MaxProperties,
    Minimum,
    MinItems,
    MinLength,
    MinProperties,
    MultipleOf,
    Nullable,
    Pattern,
    ReadOnly,
    Title,
    WriteOnly,
    Xml,
)
from .validation import validate_feature, validate_features

logger = logging.getLogger(__name__)

# feature class -> JSON Schema keyword
CONSTRAINT_KEYWORDS: dict[type[Feature], str] = {
    Minimum: "minimum",
    Maximum: "maximum",
    ExclusiveMinimum: "exclusiveMinimum",
    ExclusiveMaximum: "exclusiveMaximum",
    MultipleOf: "multipleOf",
    MinLength: "minLength",
    MaxLength: "maxLength",
    Pattern: "pattern",
    MinItems: "minItems",
    MaxItems: "maxItems",
    MinProperties: "minProperties",
    MaxProperties: "maxProperties",
}


class FeatureOverlay:
    """Decorates schemas with the decoration and constraint features of an occurrence."""

    def __init__(self, diagnostics: DiagnosticLog):
        """
        Initialize the overlay.

        Args:
            diagnostics: Log receiving the validation errors of rejected features
        """
        self.diagnostics = diagnostics

    def apply(
        self,
        schema: SchemaOrRef,
        features: FeatureSet,
        kind: SchemaKind | None = None,
        location: str = "",
    ) -> SchemaOrRef:
        """
        Consume the decorations and constraints of `features` and apply them.

        Args:
            schema: The resolved schema or reference to decorate
            features: Feature set of the occurrence; applied features are popped
            kind: Base kind used for gating, defaults to the schema's own kind.
                References pass the kind of the registry entry they point to.
            location: Where the features were declared, for diagnostics

        Returns:
            The decorated schema. A reference with decorations comes back
            wrapped in an allOf, or in a oneOf with null when only nullable.
        """
        decorations = features.pop_by(lambda f: isinstance(f, DECORATIONS))
        constraints = features.pop_by(lambda f: isinstance(f, CONSTRAINTS))
        if not decorations and not constraints:
            return schema

        kind = kind or schema.kind
        accepted = self._check(kind, decorations, constraints, location)

        if isinstance(schema, Reference):
            wrapped = self._wrap_reference(schema, accepted)
            if not isinstance(wrapped, AllOfSchema):
                return wrapped
            schema = wrapped

        for feature in accepted:
            self._set(schema, feature)
        return schema

    def _check(self, kind: SchemaKind, decorations: list[Feature], constraints: list[Feature], location: str) -> list[Feature]:
        accepted: list[Feature] = []
        for feature in decorations:
            error = validate_feature(kind, feature)
            if error is not None:
                self._report(error, location)
            else:
                accepted.append(feature)

        errors = validate_features(kind, constraints)
        rejected = {error.feature for error in errors}
        for error in errors:
            self._report(error, location)
        accepted.extend(f for f in constraints if f.name not in rejected)
        return accepted

    def _report(self, error: ValidationError, location: str) -> None:
        if not error.location and location:
            error = replace(error, location=location)
        logger.debug("Rejected feature: %s", error)
        self.diagnostics.add(error)

    def _wrap_reference(self, reference: Reference, accepted: list[Feature]) -> SchemaOrRef:
        if not accepted:
            return reference
        only_nullable = all(isinstance(f, Nullable) for f in accepted)
        if only_nullable:
            if any(f.value for f in accepted):
                return OneOfSchema(variants=[NullSchema(), reference])
            return reference
        return AllOfSchema(items=[reference])

    @staticmethod
    def _set(schema: Schema, feature: Feature) -> None:
        value = feature.value
        if isinstance(feature, Default):
            schema.default = value
            schema.has_default = True
        elif isinstance(feature, Example):
            schema.example = value
            schema.has_example = True
        elif isinstance(feature, Examples):
            schema.examples = list(value)
        elif isinstance(feature, Format):
            if isinstance(schema, PrimitiveSchema):
                schema.format = value
            else:
                schema.constraints["format"] = value
        elif isinstance(feature, Nullable):
            schema.nullable = schema.nullable or value
        elif isinstance(feature, ReadOnly):
            schema.read_only = value
        elif isinstance(feature, WriteOnly):
            schema.write_only = value
        elif isinstance(feature, Title):
            schema.title = value
        elif isinstance(feature, Description):
            schema.description = value
        elif isinstance(feature, Deprecated):
            schema.deprecated = value
        elif isinstance(feature, Xml):
            schema.xml = feature.to_dict()
        else:
            schema.constraints[CONSTRAINT_KEYWORDS[type(feature)]] = value
