"""
Raw type descriptors and the normalized TypeTree.

A RawType is what the caller hands in: an identifier, its generic
arguments, or the members of a tuple. A TypeTree is the classified,
immutable form the resolver walks.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from ..errors import StructuralError


@dataclass(frozen=True)
class RawType:
    """An unclassified type occurrence: `name<args>` or a tuple of `members`."""

    name: str = ""
    args: tuple[RawType, ...] = ()
    members: tuple[RawType, ...] | None = None

    @property
    def is_tuple(self) -> bool:
        return self.members is not None

    @staticmethod
    def parse(text: str) -> RawType:
        """Parse the textual form of a type, e.g. ``Option<Vec<String>>`` or ``(i32, String)``."""
        return _RawTypeParser(text).parse()

    def __str__(self) -> str:
        if self.members is not None:
            return "(" + ", ".join(str(m) for m in self.members) + ")"
        if self.args:
            return f"{self.name}<{', '.join(str(a) for a in self.args)}>"
        return self.name


_TOKEN_PATTERN = re.compile(r"\s*(::|'[A-Za-z_]\w*|[A-Za-z_]\w*|\d+|[<>()\[\],;&])")


class _RawTypeParser:
    """Recursive descent parser for type strings."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    def _tokenize(self, text: str) -> list[str]:
        tokens = []
        pos = 0
        stripped = text.rstrip()
        while pos < len(stripped):
            match = _TOKEN_PATTERN.match(stripped, pos)
            if not match:
                raise StructuralError(f"Unexpected character {stripped[pos:].strip()[:1]!r} in type '{text}'")
            tokens.append(match.group(1))
            pos = match.end()
        return tokens

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise StructuralError(f"Unexpected end of type '{self.text}'")
        self.pos += 1
        return token

    def _expect(self, token: str) -> None:
        found = self._next()
        if found != token:
            raise StructuralError(f"Expected '{token}' but found '{found}' in type '{self.text}'")

    def parse(self) -> RawType:
        if not self.tokens:
            raise StructuralError("Empty type")
        raw = self._parse_type()
        if self._peek() is not None:
            raise StructuralError(f"Unexpected '{self._peek()}' in type '{self.text}'")
        return raw

    def _parse_type(self) -> RawType:
        token = self._peek()
        if token == "&":
            # References carry no schema meaning
            self._next()
            if self._peek() is not None and self._peek().startswith("'"):
                self._next()
            if self._peek() == "mut":
                self._next()
            return self._parse_type()
        if token == "(":
            return self._parse_tuple()
        if token == "[":
            return self._parse_slice()
        return self._parse_path()

    def _parse_tuple(self) -> RawType:
        self._expect("(")
        members, _ = self._parse_list(")")
        if not members:
            raise StructuralError(f"Empty tuple in type '{self.text}'")
        if len(members) == 1:
            return members[0]
        return RawType(members=tuple(members))

    def _parse_slice(self) -> RawType:
        self._expect("[")
        element = self._parse_type()
        if self._peek() == ";":
            self._next()
            self._next()  # array length
        self._expect("]")
        return RawType(name="Vec", args=(element,))

    def _parse_path(self) -> RawType:
        name = self._next()
        if not re.match(r"[A-Za-z_]\w*$", name):
            raise StructuralError(f"Expected a type name but found '{name}' in type '{self.text}'")
        while self._peek() == "::":
            self._next()
            name = self._next()
        args: list[RawType] = []
        if self._peek() in ("<", "["):
            closing = ">" if self._next() == "<" else "]"
            args, saw_lifetime = self._parse_list(closing)
            if not args and not saw_lifetime:
                raise StructuralError(f"Expected at least one generic argument for '{name}' in type '{self.text}'")
        return RawType(name=name, args=tuple(args))

    def _parse_list(self, closing: str) -> tuple[list[RawType], bool]:
        items: list[RawType] = []
        saw_lifetime = False
        while self._peek() != closing:
            if self._peek() is not None and self._peek().startswith("'"):
                # Lifetime arguments are ignored
                self._next()
                saw_lifetime = True
            else:
                items.append(self._parse_type())
            if self._peek() == ",":
                self._next()
            elif self._peek() != closing:
                raise StructuralError(f"Expected ',' or '{closing}' in type '{self.text}'")
        self._next()
        return items, saw_lifetime


class ValueKind(Enum):
    """Classification of a type occurrence."""

    PRIMITIVE = "primitive"
    OBJECT = "object"
    TUPLE = "tuple"


class Container(Enum):
    """Generic container wrapping a type occurrence."""

    VECTOR = "vector"
    MAP = "map"
    OPTIONAL = "optional"
    INDIRECTION = "indirection"  # Box, Rc, Cow... carries no schema meaning


@dataclass(frozen=True)
class TypeTree:
    """Normalized, immutable description of one type occurrence."""

    kind: ValueKind = ValueKind.OBJECT
    name: str = ""
    container: Container | None = None
    children: tuple[TypeTree, ...] = field(default_factory=tuple)

    @property
    def is_optional(self) -> bool:
        return self.container == Container.OPTIONAL

    @property
    def is_generic_parameter_candidate(self) -> bool:
        return self.kind == ValueKind.OBJECT and self.container is None and not self.children

    def unwrap_indirection(self) -> TypeTree:
        """Skip any chain of indirection wrappers at the top of this tree."""
        tree = self
        while tree.container == Container.INDIRECTION:
            tree = tree.children[0]
        return tree

    def strip_indirection(self) -> TypeTree:
        """Return an equivalent tree with every indirection wrapper removed."""
        tree = self.unwrap_indirection()
        if not tree.children:
            return tree
        return replace(tree, children=tuple(child.strip_indirection() for child in tree.children))

    def substitute(self, bindings: Mapping[str, TypeTree]) -> TypeTree:
        """Replace generic parameters named in `bindings` with concrete trees."""
        if not bindings:
            return self
        if self.is_generic_parameter_candidate and self.name in bindings:
            return bindings[self.name]
        if not self.children:
            return self
        return replace(self, children=tuple(child.substitute(bindings) for child in self.children))

    def identity(self) -> str:
        """Structural signature of this tree, e.g. ``Page<Vec<Pet>>``."""
        tree = self.unwrap_indirection()
        if tree.kind == ValueKind.TUPLE:
            return "(" + ", ".join(child.identity() for child in tree.children) + ")"
        if tree.children:
            return f"{tree.name}<{', '.join(child.identity() for child in tree.children)}>"
        return tree.name

    def name_segments(self) -> list[str]:
        """Identifier segments used to build component names for generic instantiations."""
        tree = self.unwrap_indirection()
        if tree.kind == ValueKind.TUPLE:
            segments = ["Tuple"]
        else:
            segments = [tree.name]
        for child in tree.children:
            segments.extend(child.name_segments())
        return segments
