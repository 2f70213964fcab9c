"""
Component registry.

Arena of named component schemas for one document build. Entries are
registered as placeholders before their body is resolved, which is what
makes self-referential and mutually referential types terminate: a type
met again while its own body is being resolved finds its placeholder and
becomes a reference.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from ..errors import NamingCollision, TypeSchemaError
from ..schema.nodes import SchemaKind, SchemaOrRef

logger = logging.getLogger(__name__)


@dataclass
class ComponentEntry:
    """One registered component."""

    name: str = ""
    identity: str = ""  # Structural signature of the type, e.g. "Page<Pet>"
    schema: SchemaOrRef | None = None  # None while the entry is a placeholder
    kind: SchemaKind = SchemaKind.OBJECT  # Known before the body is resolved
    referenced: bool = False  # Whether a reference to it was handed out

    @property
    def is_placeholder(self) -> bool:
        return self.schema is None


class ComponentRegistry:
    """Ordered map of canonical component name to schema."""

    def __init__(self):
        self._entries: dict[str, ComponentEntry] = {}

    def lookup(self, name: str, identity: str) -> ComponentEntry | None:
        """
        Find the entry registered under `name`.

        Raises:
            NamingCollision: If `name` belongs to a different type
        """
        entry = self._entries.get(name)
        if entry is not None and entry.identity != identity:
            raise NamingCollision(name, entry.identity, identity)
        return entry

    def register_placeholder(self, name: str, identity: str, kind: SchemaKind = SchemaKind.OBJECT) -> ComponentEntry:
        """Reserve `name` for a type whose body is about to be resolved."""
        if self.lookup(name, identity) is not None:
            raise TypeSchemaError(f"Component '{name}' is already registered")
        entry = ComponentEntry(name=name, identity=identity, kind=kind)
        self._entries[name] = entry
        logger.debug("Registered placeholder %s for %s", name, identity)
        return entry

    def finalize(self, name: str, schema: SchemaOrRef) -> None:
        """Replace the placeholder registered under `name` with its resolved schema."""
        entry = self._entries[name]
        entry.schema = schema
        entry.kind = schema.kind
        logger.debug("Finalized component %s", name)

    def mark_referenced(self, name: str) -> None:
        self._entries[name].referenced = True

    def discard(self, name: str) -> None:
        """Drop an entry, e.g. the placeholder of an inlined or failed type."""
        if self._entries.pop(name, None) is not None:
            logger.debug("Discarded component %s", name)

    def kind_of(self, name: str) -> SchemaKind:
        entry = self._entries.get(name)
        return entry.kind if entry is not None else SchemaKind.OBJECT

    def placeholders(self) -> list[str]:
        return [name for name, entry in self._entries.items() if entry.is_placeholder]

    def schemas(self) -> dict[str, SchemaOrRef]:
        """Finalized components in registration order."""
        return {name: entry.schema for name, entry in self._entries.items() if entry.schema is not None}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __getitem__(self, name: str) -> ComponentEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[ComponentEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
