"""Typed syntax nodes produced by the Rust item parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from ..errors import Location
from .tokens import Token


@dataclass
class Attribute:
    """An outer (`#[...]`) or inner (`#![...]`) attribute."""

    path: str
    start: int
    end: int
    location: Location
    delimiter: Optional[str] = None
    args: List[Token] = field(default_factory=list)
    value: List[Token] = field(default_factory=list)
    has_eq: bool = False
    inner: bool = False

    @property
    def is_path_only(self) -> bool:
        return self.delimiter is None and not self.has_eq

    @property
    def is_list(self) -> bool:
        return self.delimiter is not None

    @property
    def is_name_value(self) -> bool:
        return self.has_eq


# -- type expressions ---------------------------------------------------------


@dataclass
class TypeExpr:
    """Base node for type expressions; `text` is the exact source slice."""

    text: str
    start: int
    end: int

    def children(self) -> Sequence["TypeExpr"]:
        return ()


@dataclass
class PathSegment:
    name: str
    args: List[TypeExpr] = field(default_factory=list)
    parenthesized: bool = False


@dataclass
class PathType(TypeExpr):
    segments: List[PathSegment] = field(default_factory=list)
    leading_colon: bool = False

    @property
    def head(self) -> PathSegment:
        return self.segments[-1]

    @property
    def names(self) -> List[str]:
        return [segment.name for segment in self.segments]

    def type_arguments(self) -> List[TypeExpr]:
        """Type arguments of the final segment, ignoring lifetimes and bindings."""
        if self.head.parenthesized:
            return []
        return [arg for arg in self.head.args if not isinstance(arg, (LifetimeArg, BindingArg, ConstArg))]

    def children(self) -> Sequence[TypeExpr]:
        return [arg for segment in self.segments for arg in segment.args]


@dataclass
class RefType(TypeExpr):
    inner: Optional[TypeExpr] = None
    lifetime: Optional[str] = None
    mutable: bool = False

    def children(self) -> Sequence[TypeExpr]:
        return [self.inner] if self.inner is not None else []


@dataclass
class PtrType(TypeExpr):
    inner: Optional[TypeExpr] = None
    mutable: bool = False

    def children(self) -> Sequence[TypeExpr]:
        return [self.inner] if self.inner is not None else []


@dataclass
class TupleType(TypeExpr):
    elements: List[TypeExpr] = field(default_factory=list)

    def children(self) -> Sequence[TypeExpr]:
        return self.elements


@dataclass
class ArrayType(TypeExpr):
    element: Optional[TypeExpr] = None
    length: str = ""

    def children(self) -> Sequence[TypeExpr]:
        return [self.element] if self.element is not None else []


@dataclass
class SliceType(TypeExpr):
    element: Optional[TypeExpr] = None

    def children(self) -> Sequence[TypeExpr]:
        return [self.element] if self.element is not None else []


@dataclass
class QualifiedPathType(TypeExpr):
    """`<Self as Trait>::Rest` paths."""

    self_type: Optional[TypeExpr] = None
    trait: Optional[TypeExpr] = None
    segments: List[PathSegment] = field(default_factory=list)

    def children(self) -> Sequence[TypeExpr]:
        nested = [arg for segment in self.segments for arg in segment.args]
        own = [node for node in (self.self_type, self.trait) if node is not None]
        return own + nested


@dataclass
class OpaqueType(TypeExpr):
    """Trait objects, `impl Trait`, fn pointers, `!`, `_` and type macros."""

    kind: str = "opaque"
    bounds: List[TypeExpr] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)

    def children(self) -> Sequence[TypeExpr]:
        return self.bounds


@dataclass
class LifetimeArg(TypeExpr):
    pass


@dataclass
class BindingArg(TypeExpr):
    """`Item = Type` associated type binding inside generic arguments."""

    name: str = ""
    value: Optional[TypeExpr] = None

    def children(self) -> Sequence[TypeExpr]:
        return [self.value] if self.value is not None else []


@dataclass
class ConstArg(TypeExpr):
    pass


# -- generics -----------------------------------------------------------------


@dataclass
class GenericParam:
    """A lifetime, type or const parameter with its declared bounds."""

    kind: str
    name: str
    bounds: str = ""
    default: Optional[str] = None
    const_type: Optional[str] = None

    def declaration(self, *, with_default: bool, extra_bounds: Sequence[str] = ()) -> str:
        if self.kind == "const":
            text = f"const {self.name}: {self.const_type}"
        else:
            bounds = [self.bounds] if self.bounds else []
            bounds.extend(extra_bounds)
            text = f"{self.name}: {' + '.join(bounds)}" if bounds else self.name
        if with_default and self.default is not None:
            text = f"{text} = {self.default}"
        return text


@dataclass
class Generics:
    params: List[GenericParam] = field(default_factory=list)
    where_predicates: List[str] = field(default_factory=list)

    @property
    def type_params(self) -> List[GenericParam]:
        return [param for param in self.params if param.kind == "type"]

    def declaration(self) -> str:
        """Parameter list as written on the item, defaults included."""
        if not self.params:
            return ""
        return "<" + ", ".join(p.declaration(with_default=True) for p in self.params) + ">"

    def impl_parameters(self, extra_bounds: Dict[str, List[str]] | None = None) -> str:
        """Parameter list for an `impl<...>` header, defaults removed."""
        if not self.params:
            return ""
        extra_bounds = extra_bounds or {}
        rendered = [
            p.declaration(with_default=False, extra_bounds=extra_bounds.get(p.name, ()))
            for p in self.params
        ]
        return "<" + ", ".join(rendered) + ">"

    def type_arguments(self) -> str:
        """Arguments used to name the item itself, e.g. `<'a, T, N>`."""
        if not self.params:
            return ""
        return "<" + ", ".join(p.name for p in self.params) + ">"

    def where_clause(self, extra: Sequence[str] = ()) -> str:
        predicates = list(self.where_predicates) + list(extra)
        if not predicates:
            return ""
        return " where " + ", ".join(predicates)


# -- items --------------------------------------------------------------------


@dataclass
class Field:
    name: Optional[str]
    ty: TypeExpr
    location: Location
    attrs: List[Attribute] = field(default_factory=list)
    vis: str = ""


@dataclass
class Variant:
    name: str
    location: Location
    attrs: List[Attribute] = field(default_factory=list)


@dataclass
class Pattern:
    """Just enough of a match arm pattern to give it a comparable name."""

    kind: str
    location: Location
    text: str
    path: List[str] = field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return self.kind == "wildcard"


@dataclass
class MatchArm:
    pattern: Pattern
    start: int
    end: int


@dataclass
class MatchExpr:
    location: Location
    start: int
    end: int
    attrs: List[Attribute] = field(default_factory=list)
    arms: List[MatchArm] = field(default_factory=list)


@dataclass
class Item:
    """Common shape of every parsed item."""

    kind: str
    name: str
    start: int
    end: int
    location: Location
    attrs: List[Attribute] = field(default_factory=list)
    vis: str = ""

    def walk(self) -> Iterator["Item"]:
        yield self


@dataclass
class StructItem(Item):
    generics: Generics = field(default_factory=Generics)
    fields: List[Field] = field(default_factory=list)
    style: str = "named"


@dataclass
class UnionItem(Item):
    generics: Generics = field(default_factory=Generics)
    fields: List[Field] = field(default_factory=list)


@dataclass
class EnumItem(Item):
    generics: Generics = field(default_factory=Generics)
    variants: List[Variant] = field(default_factory=list)


@dataclass
class FnItem(Item):
    matches: List[MatchExpr] = field(default_factory=list)
    has_body: bool = True


@dataclass
class BlockItem(Item):
    """`mod`, `impl`, `trait` and `extern` blocks containing nested items."""

    children: List[Item] = field(default_factory=list)

    def walk(self) -> Iterator[Item]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class SourceFile:
    source: str
    items: List[Item] = field(default_factory=list)

    def walk(self) -> Iterator[Item]:
        for item in self.items:
            yield from item.walk()


__all__ = [
    "ArrayType",
    "Attribute",
    "BindingArg",
    "BlockItem",
    "ConstArg",
    "EnumItem",
    "Field",
    "FnItem",
    "GenericParam",
    "Generics",
    "Item",
    "LifetimeArg",
    "MatchArm",
    "MatchExpr",
    "OpaqueType",
    "PathSegment",
    "PathType",
    "Pattern",
    "PtrType",
    "QualifiedPathType",
    "RefType",
    "SliceType",
    "SourceFile",
    "StructItem",
    "TupleType",
    "TypeExpr",
    "UnionItem",
    "Variant",
]
