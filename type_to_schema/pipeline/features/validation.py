"""
Semantic validation of features against the schema they decorate.

Each constraint feature is only meaningful for some base kinds: numeric
bounds for numbers, length and pattern for strings, item counts for arrays
and property counts for objects. This module keeps that gating table in one
place and also checks the constraint values themselves.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from numbers import Real

from ..errors import ValidationError
from ..schema.nodes import SchemaKind
from ..type_tree.primitives import KnownFormat
from .nodes import (
    AdditionalProperties,
    Discriminator,
    ExclusiveMaximum,
    ExclusiveMinimum,
    Feature,
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
    Pattern,
    Xml,
)

_NUMERIC = frozenset({SchemaKind.INTEGER, SchemaKind.NUMBER})
_STRING = frozenset({SchemaKind.STRING})
_ARRAY = frozenset({SchemaKind.ARRAY})
_OBJECT = frozenset({SchemaKind.OBJECT})
_ONE_OF = frozenset({SchemaKind.ONE_OF})

# feature class -> (kinds it may decorate, human readable expectation)
VALIDATION_GATES: dict[type[Feature], tuple[frozenset[SchemaKind], str]] = {
    Minimum: (_NUMERIC, "number"),
    Maximum: (_NUMERIC, "number"),
    ExclusiveMinimum: (_NUMERIC, "number"),
    ExclusiveMaximum: (_NUMERIC, "number"),
    MultipleOf: (_NUMERIC, "number"),
    MinLength: (_STRING, "string"),
    MaxLength: (_STRING, "string"),
    Pattern: (_STRING, "string"),
    MinItems: (_ARRAY, "array"),
    MaxItems: (_ARRAY, "array"),
    MinProperties: (_OBJECT, "object"),
    MaxProperties: (_OBJECT, "object"),
    AdditionalProperties: (_OBJECT, "object"),
    Discriminator: (_ONE_OF, "oneOf"),
}

_POSITIVE_COUNTS = (MinLength, MaxLength, MinItems, MaxItems, MinProperties, MaxProperties)
_BOUNDS = (Minimum, Maximum, ExclusiveMinimum, ExclusiveMaximum)


def _error(feature: Feature, expected: str, message: str) -> ValidationError:
    return ValidationError(
        message=f"`{feature.name}` error: {message}",
        location=feature.location,
        feature=feature.name,
        expected=expected,
    )


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_feature(kind: SchemaKind, feature: Feature) -> ValidationError | None:
    """
    Check one feature against the kind of schema it would decorate.

    Args:
        kind: Base kind of the target schema
        feature: The feature to check

    Returns:
        A ValidationError, or None if the feature may be applied
    """
    gate = VALIDATION_GATES.get(type(feature))
    if gate is not None and kind != SchemaKind.ANY:
        kinds, expected = gate
        if kind not in kinds:
            return _error(feature, expected, f"can only be used with `{expected}` type, found `{kind.value}`")
    if isinstance(feature, Xml) and feature.wrapped and kind not in (SchemaKind.ARRAY, SchemaKind.ANY):
        return _error(feature, "array", f"cannot use `wrapped` on a non array type, found `{kind.value}`")
    return validate_value(feature)


def validate_value(feature: Feature) -> ValidationError | None:
    """Check the value carried by a feature, independent of its target."""
    value = feature.value
    if isinstance(feature, MultipleOf):
        if not _is_number(value) or value <= 0:
            return _error(feature, "number > 0", f"can only be above zero value, got {value!r}")
    elif isinstance(feature, _POSITIVE_COUNTS):
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            return _error(feature, "integer > 0", f"can only be a positive integer, got {value!r}")
    elif isinstance(feature, _BOUNDS):
        if not _is_number(value):
            return _error(feature, "number", f"expected a number, got {value!r}")
    elif isinstance(feature, Pattern):
        if not isinstance(value, str):
            return _error(feature, "regular expression", f"expected a string, got {value!r}")
        try:
            re.compile(value)
        except re.error as e:
            return _error(feature, "regular expression", f"invalid regular expression: {e}")
    elif isinstance(feature, Format):
        if not value.strip():
            return _error(feature, ", ".join(KnownFormat.values()), "format cannot be empty")
    return None


def validate_features(kind: SchemaKind, features: Iterable[Feature]) -> list[ValidationError]:
    """Validate several features together, including cross-feature bound checks."""
    features = list(features)
    errors: list[ValidationError] = []
    valid: list[Feature] = []
    for feature in features:
        error = validate_feature(kind, feature)
        if error is None:
            valid.append(feature)
        else:
            errors.append(error)

    by_class = {type(f): f for f in valid}
    errors.extend(
        _check_bounds(by_class, Minimum, Maximum)
        + _check_bounds(by_class, MinLength, MaxLength)
        + _check_bounds(by_class, MinItems, MaxItems)
        + _check_bounds(by_class, MinProperties, MaxProperties)
    )
    return errors


def _check_bounds(by_class: dict[type[Feature], Feature], lower_cls: type[Feature], upper_cls: type[Feature]) -> list[ValidationError]:
    lower = by_class.get(lower_cls)
    upper = by_class.get(upper_cls)
    if lower is None or upper is None:
        return []
    if not (_is_number(lower.value) and _is_number(upper.value)):
        return []
    if lower.value > upper.value:
        return [_error(upper, f">= {lower.value}", f"`{upper.name}` ({upper.value}) is lower than `{lower.name}` ({lower.value})")]
    return []
