"""
Document generator.

Drives one document build:

1. Parse the type description into a type catalog
2. Resolve every root against a fresh component registry
3. Resolve components that were only referenced through `no_recursion`
4. Refuse to produce a document if any error was collected
5. Serialize roots and components to an OpenAPI 3.1 document
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .analyzer import ResolutionContext, SchemaResolver
from .config import ResolverConfig
from .errors import DiagnosticLog, ResolutionFailed, StructuralError
from .schema.nodes import SchemaOrRef
from .type_ast import TypeCatalog, TypeDescriptionParser

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"


class DocumentGenerator:
    """Builds a schema document from a type description."""

    def __init__(self, description: dict[str, Any] | TypeCatalog, config: ResolverConfig | None = None, comment: str | None = None):
        """
        Initialize the generator.

        Args:
            description: A type description document, or an already parsed catalog
            config: Resolver configuration
            comment: Optional note stored in the document info (e.g. the generating command)

        Raises:
            StructuralError: If the type description is malformed
        """
        self.config = config or ResolverConfig()
        if isinstance(description, TypeCatalog):
            self.catalog = description
        else:
            self.catalog = TypeDescriptionParser().parse(description)
        self.comment = comment

        self.context: ResolutionContext | None = None
        self.roots: dict[str, SchemaOrRef] = {}

    @property
    def diagnostics(self) -> DiagnosticLog:
        return self.context.diagnostics if self.context is not None else DiagnosticLog()

    def build(self) -> ResolutionContext:
        """
        Resolve all roots in a fresh context.

        Structural errors abort the root (or deferred component) they occur
        in and are recorded as error diagnostics, so independent roots still
        report their problems.

        Returns:
            The resolution context holding registry and diagnostics
        """
        self.context = ResolutionContext(catalog=self.catalog, config=self.config)
        self.roots = {}
        resolver = SchemaResolver(self.context)

        for root in self.catalog.roots:
            try:
                self.roots[root.name] = resolver.resolve_root(root)
            except StructuralError as e:
                logger.debug("Root %s failed: %s", root.name, e)
                self.context.diagnostics.error(e.message, e.location or root.name)

        while self.context.deferred:
            try:
                resolver.resolve_deferred()
            except StructuralError as e:
                logger.debug("Deferred component failed: %s", e)
                self.context.diagnostics.error(e.message, e.location)
        return self.context

    def generate(self) -> dict[str, Any]:
        """
        Build the document.

        Returns:
            The OpenAPI document as a JSON-compatible dictionary

        Raises:
            ResolutionFailed: If the build collected any error
            NamingCollision: If two different types share a component name
        """
        context = self.build()
        if context.diagnostics.has_errors():
            raise ResolutionFailed(list(context.diagnostics))

        for diagnostic in context.diagnostics:
            logger.info("%s", diagnostic)

        info: dict[str, Any] = {"title": self.config.title, "version": self.config.version}
        if self.comment:
            info["description"] = self.comment

        return {
            "openapi": OPENAPI_VERSION,
            "info": info,
            "components": {
                "schemas": {name: schema.to_dict() for name, schema in context.registry.schemas().items()},
            },
            "x-roots": {name: schema.to_dict() for name, schema in self.roots.items()},
        }

    def generate_json(self, indent: int = 2) -> str:
        """Build the document and serialize it to JSON."""
        return json.dumps(self.generate(), indent=indent) + "\n"
