"""
Configuration for the schema resolution pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OptionalEncoding(str, Enum):
    """How an optional field is expressed in the schema.

    Controls what resolving ``Option<T>`` does to the surrounding object.
    """

    NOT_REQUIRED = "not_required"  # Default: drop the field from `required`
    NULLABLE = "nullable"  # Keep the field required, allow null
    NOT_REQUIRED_AND_NULLABLE = "not_required_and_nullable"

    @property
    def drops_required(self) -> bool:
        return self in (OptionalEncoding.NOT_REQUIRED, OptionalEncoding.NOT_REQUIRED_AND_NULLABLE)

    @property
    def adds_null(self) -> bool:
        return self in (OptionalEncoding.NULLABLE, OptionalEncoding.NOT_REQUIRED_AND_NULLABLE)


class TaggingStrategy(str, Enum):
    """Representation family of a union type."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    ADJACENT = "adjacent"
    UNTAGGED = "untagged"


# Optional primitive families, enabled by name in `capabilities`
KNOWN_CAPABILITIES = ("datetime", "uuid", "ulid", "decimal", "url", "path")


@dataclass
class ResolverConfig:
    """Configuration options for schema resolution."""

    # Optional<T> encoding
    optional_encoding: OptionalEncoding = OptionalEncoding.NOT_REQUIRED

    # Tagging strategy used for unions that do not declare one
    default_tagging: TaggingStrategy = TaggingStrategy.EXTERNAL

    # Give each integer width its own format instead of folding to int32/int64
    non_strict_integers: bool = False

    # Enabled extension primitive families (see KNOWN_CAPABILITIES)
    capabilities: list[str] = field(default_factory=list)

    # Emit prefixItems for heterogeneous tuples instead of an untyped item schema
    positional_tuples: bool = False

    # Report object types without a definition as errors instead of warnings
    strict_references: bool = False

    # Document info
    title: str = "Schemas"
    version: str = "0.1.0"

    # Add the generating command line to the document
    add_generation_comment: bool = False

    @staticmethod
    def from_dict(d: dict) -> ResolverConfig:
        """Create a config from a dictionary."""
        config = ResolverConfig()
        for k, v in d.items():
            if k == "optional_encoding":
                config.optional_encoding = OptionalEncoding(v)
            elif k == "default_tagging":
                config.default_tagging = TaggingStrategy(v)
            elif k == "capabilities":
                unknown = [c for c in v if c not in KNOWN_CAPABILITIES]
                if unknown:
                    raise ValueError(f"Unknown capabilities: {', '.join(unknown)}; expected any of {', '.join(KNOWN_CAPABILITIES)}")
                config.capabilities = list(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "optional_encoding": self.optional_encoding.value,
            "default_tagging": self.default_tagging.value,
            "non_strict_integers": self.non_strict_integers,
            "capabilities": self.capabilities,
            "positional_tuples": self.positional_tuples,
            "strict_references": self.strict_references,
            "title": self.title,
            "version": self.version,
            "add_generation_comment": self.add_generation_comment,
        }
