"""
Markdown renderer for schema documents.

Turns the components of a generated document into a human readable
reference using the Jinja2 templates shipped with the package.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from .schema.nodes import COMPONENTS_PREFIX


class MarkdownRenderer:
    """Renders a schema document as a Markdown component reference."""

    TEMPLATE_LANG = "markdown"

    def __init__(self):
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["type_summary"] = type_summary
        self.components_template = self.jinja_env.get_template("components.md.jinja2")

    def render(self, document: dict[str, Any]) -> str:
        """
        Render a generated document.

        Args:
            document: Output of DocumentGenerator.generate()

        Returns:
            The Markdown text
        """
        components = []
        for name, schema in document.get("components", {}).get("schemas", {}).items():
            components.append(
                {
                    "name": name,
                    "summary": type_summary(schema),
                    "description": schema.get("description"),
                    "deprecated": schema.get("deprecated", False),
                    "properties": self._properties(schema),
                    "variants": [type_summary(v) for v in schema.get("oneOf", [])],
                    "values": schema.get("enum"),
                }
            )
        return self.components_template.render(
            info=document.get("info", {}),
            roots=document.get("x-roots", {}),
            components=components,
        )

    @staticmethod
    def _properties(schema: dict[str, Any]) -> list[dict[str, Any]]:
        required = set(schema.get("required", []))
        return [
            {
                "name": name,
                "type": type_summary(prop),
                "required": name in required,
                "description": prop.get("description", ""),
            }
            for name, prop in schema.get("properties", {}).items()
        ]


def type_summary(schema: dict[str, Any]) -> str:
    """Short, one-line description of a rendered schema, e.g. ``array of Pet``."""
    if "$ref" in schema:
        ref = schema["$ref"]
        return ref[len(COMPONENTS_PREFIX) :] if ref.startswith(COMPONENTS_PREFIX) else ref
    if "oneOf" in schema:
        return " | ".join(type_summary(v) for v in schema["oneOf"])
    if "allOf" in schema:
        return " & ".join(type_summary(v) for v in schema["allOf"])

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return " | ".join("null" if t == "null" else type_summary({**schema, "type": t}) for t in schema_type)
    if schema_type == "array":
        if "prefixItems" in schema:
            return "[" + ", ".join(type_summary(item) for item in schema["prefixItems"]) + "]"
        return f"array of {type_summary(schema.get('items', {}))}"
    if schema_type == "object" and isinstance(schema.get("additionalProperties"), dict) and "properties" not in schema:
        return f"map of {type_summary(schema['additionalProperties'])}"
    if schema_type is None:
        return "any"
    if "format" in schema:
        return f"{schema_type} ({schema['format']})"
    return str(schema_type)
