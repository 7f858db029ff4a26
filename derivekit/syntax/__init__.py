"""Rust syntax front end: tree-sitter item parser and node types."""

from __future__ import annotations

from .nodes import (
    Attribute,
    EnumItem,
    Field,
    FnItem,
    GenericParam,
    Generics,
    Item,
    MatchExpr,
    PathType,
    SourceFile,
    StructItem,
    TypeExpr,
    UnionItem,
)
from .parser import RustParser, parse_source, parse_type
from .tokens import Token

__all__ = [
    "Attribute",
    "EnumItem",
    "Field",
    "FnItem",
    "GenericParam",
    "Generics",
    "Item",
    "MatchExpr",
    "PathType",
    "RustParser",
    "SourceFile",
    "StructItem",
    "Token",
    "TypeExpr",
    "UnionItem",
    "parse_source",
    "parse_type",
]
