"""
Errors and diagnostics raised or collected while resolving schemas.

Fatal problems (malformed input, naming collisions) are raised as
exceptions. Feature validation problems are collected as diagnostics so a
caller sees every violation of a document build in one pass.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum


class TypeSchemaError(Exception):
    """Base class for all errors raised by the resolution engine."""

    pass


class StructuralError(TypeSchemaError):
    """Raised when a type description is malformed.

    This can happen when:
    - A generic container has the wrong number of arguments
    - A type string cannot be parsed
    - A definition is missing a mandatory key or uses an unknown feature

    It indicates a bug in whatever produced the type description and
    aborts the current top-level resolution.
    """

    def __init__(self, message: str, location: str = ""):
        self.message = message
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)


class NamingCollision(TypeSchemaError):
    """Raised when two different types map to the same component name."""

    def __init__(self, name: str, existing: str, incoming: str):
        self.name = name
        self.existing = existing
        self.incoming = incoming
        super().__init__(f"Component name '{name}' is used by both '{existing}' and '{incoming}'")


class DiagnosticLevel(str, Enum):
    """Severity of a collected diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single message collected during resolution."""

    level: DiagnosticLevel
    message: str
    location: str = ""

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location else ""
        return f"{self.level.value}: {prefix}{self.message}"


@dataclass(frozen=True)
class ValidationError(Diagnostic):
    """A feature applied to a schema kind it cannot decorate, or with an out of range value."""

    level: DiagnosticLevel = DiagnosticLevel.ERROR
    message: str = ""
    location: str = ""
    feature: str = ""
    expected: str = ""


@dataclass
class DiagnosticLog:
    """Mutable collection of diagnostics for one document build."""

    items: list[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)

    def warning(self, message: str, location: str = "") -> None:
        self.items.append(Diagnostic(DiagnosticLevel.WARNING, message, location))

    def error(self, message: str, location: str = "") -> None:
        self.items.append(Diagnostic(DiagnosticLevel.ERROR, message, location))

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.items.extend(diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.items if d.level == DiagnosticLevel.ERROR]

    @property
    def validation_errors(self) -> list[ValidationError]:
        return [d for d in self.items if isinstance(d, ValidationError)]

    def has_errors(self) -> bool:
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class ResolutionFailed(TypeSchemaError):
    """Raised at the document boundary when a build collected errors.

    No document is produced; the diagnostics explain why.
    """

    def __init__(self, diagnostics: list[Diagnostic]):
        self.diagnostics = diagnostics
        errors = [d for d in diagnostics if d.level == DiagnosticLevel.ERROR]
        super().__init__(f"Schema resolution failed with {len(errors)} error(s)")
