"""Core data models shared across derivekit components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .errors import Location
from .syntax.nodes import Generics, TypeExpr


@dataclass(frozen=True)
class RepeatedElementName:
    """`#[builder(each = "name")]`: accumulate one element per accessor call."""

    name: str
    location: Location


@dataclass(frozen=True)
class FormatOverride:
    """`#[debug = "template"]`: render the field through a format template."""

    template: str
    location: Location


@dataclass(frozen=True)
class BoundOverride:
    """`#[debug(bound = "T::Value")]`: replaces inferred bounds with one predicate."""

    type_path: str
    location: Location
    bounds: Optional[str] = None


Directive = Union[RepeatedElementName, FormatOverride, BoundOverride]


@dataclass(frozen=True)
class FieldDescriptor:
    """A named record field with its parsed directive table."""

    name: str
    declared_type: TypeExpr
    location: Location
    directives: Tuple[Directive, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name[2:] if self.name.startswith("r#") else self.name

    @property
    def each_name(self) -> Optional[str]:
        for directive in self.directives:
            if isinstance(directive, RepeatedElementName):
                return directive.name
        return None

    @property
    def format_override(self) -> Optional[str]:
        for directive in self.directives:
            if isinstance(directive, FormatOverride):
                return directive.template
        return None


@dataclass(frozen=True)
class TypeDescriptor:
    """Normalized view of a record declaration."""

    name: str
    generics: Generics
    fields: Tuple[FieldDescriptor, ...]
    location: Location
    vis: str = ""
    type_directives: Tuple[Directive, ...] = ()

    @property
    def generic_parameters(self) -> List[Tuple[str, str]]:
        return [(param.name, param.bounds) for param in self.generics.params]

    @property
    def bound_override(self) -> Optional[BoundOverride]:
        for directive in self.type_directives:
            if isinstance(directive, BoundOverride):
                return directive
        return None


@dataclass
class Diagnostic:
    """A generation-time error surfaced to the user."""

    message: str
    location: Location
    path: Optional[str] = None

    def render(self) -> str:
        prefix = f"{self.path}:" if self.path else ""
        return f"{prefix}{self.location.line}:{self.location.column}: error: {self.message}"


__all__ = [
    "BoundOverride",
    "Diagnostic",
    "Directive",
    "FieldDescriptor",
    "FormatOverride",
    "RepeatedElementName",
    "TypeDescriptor",
]
