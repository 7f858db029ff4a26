"""Structural classification of field types into bare, optional and repeated shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

from ..syntax.nodes import PathType, TypeExpr


class ShapeKind(Enum):
    BARE = "bare"
    OPTIONAL = "optional"
    REPEATED = "repeated"


@dataclass(frozen=True)
class ShapeClassification:
    """Shape of a field type; `inner` is the wrapped type for optional/repeated."""

    kind: ShapeKind
    declared: TypeExpr
    inner: Optional[TypeExpr] = None

    @property
    def is_bare(self) -> bool:
        return self.kind is ShapeKind.BARE

    @property
    def is_optional(self) -> bool:
        return self.kind is ShapeKind.OPTIONAL

    @property
    def is_repeated(self) -> bool:
        return self.kind is ShapeKind.REPEATED


WrapperPredicate = Callable[[TypeExpr], Optional[TypeExpr]]


def single_argument_wrapper(names: Iterable[str]) -> WrapperPredicate:
    """Build a predicate matching `Name<Inner>` for any of `names`.

    The match is purely structural: the final path segment must carry one of
    the names and exactly one type argument. Aliases are not resolved.
    """
    accepted: FrozenSet[str] = frozenset(names)

    def _match(ty: TypeExpr) -> Optional[TypeExpr]:
        if not isinstance(ty, PathType):
            return None
        if ty.head.name not in accepted:
            return None
        arguments = ty.type_arguments()
        if len(arguments) != 1 or len(ty.head.args) != 1:
            return None
        return arguments[0]

    return _match


@dataclass(frozen=True)
class WrapperSet:
    """The pluggable wrapper predicates used by :func:`classify`."""

    optional: WrapperPredicate
    repeated: WrapperPredicate

    @classmethod
    def from_names(cls, optional: Iterable[str], repeated: Iterable[str]) -> "WrapperSet":
        return cls(optional=single_argument_wrapper(optional), repeated=single_argument_wrapper(repeated))


DEFAULT_WRAPPERS = WrapperSet.from_names(optional=("Option",), repeated=("Vec",))


def classify(ty: TypeExpr, wrappers: WrapperSet = DEFAULT_WRAPPERS) -> ShapeClassification:
    """Classify a declared field type; the optional check wins over repeated."""
    inner = wrappers.optional(ty)
    if inner is not None:
        return ShapeClassification(ShapeKind.OPTIONAL, ty, inner)
    inner = wrappers.repeated(ty)
    if inner is not None:
        return ShapeClassification(ShapeKind.REPEATED, ty, inner)
    return ShapeClassification(ShapeKind.BARE, ty)


__all__ = [
    "DEFAULT_WRAPPERS",
    "ShapeClassification",
    "ShapeKind",
    "WrapperSet",
    "classify",
    "single_argument_wrapper",
]
