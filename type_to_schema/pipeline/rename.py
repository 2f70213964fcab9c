"""
Case conversion rules for property names and union variant tags.

Field names are assumed to be snake_case already, variant names PascalCase,
so the two entry points convert from different starting points.
"""

from __future__ import annotations

from enum import Enum


class RenameRule(Enum):
    """One of the eight supported case conversions."""

    LOWER = "lowercase"
    UPPER = "UPPERCASE"
    PASCAL = "PascalCase"
    CAMEL = "camelCase"
    SNAKE = "snake_case"
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"
    KEBAB = "kebab-case"
    SCREAMING_KEBAB = "SCREAMING-KEBAB-CASE"

    @classmethod
    def parse(cls, value: str) -> RenameRule:
        """Parse a rule from its token, e.g. ``"camelCase"``."""
        for rule in cls:
            if rule.value == value:
                return rule
        expected = ", ".join(rule.value for rule in cls)
        raise ValueError(f"Unexpected rename rule: {value}, expected one of: {expected}")

    def rename(self, value: str) -> str:
        """Rename a snake_case field name.

        Examples:
            KEBAB: "multi_value" -> "multi-value"
            CAMEL: "multi_value" -> "multiValue"
            PASCAL: "multi_value" -> "MultiValue"
        """
        if self == RenameRule.LOWER:
            return value.lower()
        if self == RenameRule.UPPER:
            return value.upper()
        if self == RenameRule.CAMEL:
            return _remove_separators(value)
        if self == RenameRule.PASCAL:
            if not value:
                return value
            return value[:1].upper() + RenameRule.CAMEL.rename(value[1:])
        if self == RenameRule.SNAKE:
            return value
        if self == RenameRule.SCREAMING_SNAKE:
            return RenameRule.SNAKE.rename(value).upper()
        if self == RenameRule.KEBAB:
            return RenameRule.SNAKE.rename(value).replace("_", "-")
        return RenameRule.KEBAB.rename(value).upper()

    def rename_variant(self, variant: str) -> str:
        """Rename a PascalCase variant identifier.

        Examples:
            SNAKE: "MultiValue" -> "multi_value"
            CAMEL: "MultiValue" -> "multiValue"
            SCREAMING_KEBAB: "MultiValue" -> "MULTI-VALUE"
        """
        if self == RenameRule.LOWER:
            return variant.lower()
        if self == RenameRule.UPPER:
            return variant.upper()
        if self == RenameRule.CAMEL:
            return variant[:1].lower() + variant[1:]
        if self == RenameRule.PASCAL:
            return variant
        if self == RenameRule.SNAKE:
            return _insert_separators(variant).lower()
        if self == RenameRule.SCREAMING_SNAKE:
            return RenameRule.SNAKE.rename_variant(variant).upper()
        if self == RenameRule.KEBAB:
            return RenameRule.SNAKE.rename_variant(variant).replace("_", "-")
        return RenameRule.KEBAB.rename_variant(variant).upper()


def _remove_separators(value: str) -> str:
    """Drop underscores, upper-casing the letter that follows each one."""
    result = []
    upper = False
    for letter in value:
        if letter == "_":
            upper = True
            continue
        result.append(letter.upper() if upper else letter)
        upper = False
    return "".join(result)


def _insert_separators(value: str) -> str:
    """Insert an underscore before every upper-case letter except the first."""
    result = []
    for index, letter in enumerate(value):
        if index > 0 and letter.isupper():
            result.append("_")
        result.append(letter)
    return "".join(result)
