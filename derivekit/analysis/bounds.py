"""Inference of formatting-capability bounds for generic record parameters.

Each field type is classified recursively into one of a few tagged forms
(bare name, wrapper, associated path, phantom marker, compound). Walking
those forms yields how every generic parameter is used:

* ``value``: a value of the parameter is stored and will be formatted, so
  the parameter needs the formatting bound;
* ``phantom``: the parameter only appears under a phantom marker, so no
  value of it ever exists;
* ``assoc``: the parameter is only reached through an associated type such
  as ``T::Value``; the predicate goes on that path instead of ``T``.

A type-level bound override disables all of this and injects one predicate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from ..logging import get_logger
from ..models import TypeDescriptor
from ..syntax.nodes import OpaqueType, PathType, QualifiedPathType, TypeExpr

DEFAULT_TRAIT_PATH = "::std::fmt::Debug"
DEFAULT_PHANTOM_NAMES: FrozenSet[str] = frozenset({"PhantomData"})

logger = get_logger("analysis.bounds")


@dataclass(frozen=True)
class BareName:
    name: str


@dataclass(frozen=True)
class WrapperForm:
    head: str
    arguments: Tuple[TypeExpr, ...]


@dataclass(frozen=True)
class AssocPathForm:
    param: str
    path: str


@dataclass(frozen=True)
class PhantomForm:
    arguments: Tuple[TypeExpr, ...]


@dataclass(frozen=True)
class CompoundForm:
    parts: Tuple[TypeExpr, ...]
    mentions: Tuple[str, ...] = ()


TypeForm = Union[BareName, WrapperForm, AssocPathForm, PhantomForm, CompoundForm]


@dataclass(frozen=True)
class ParamUse:
    param: str
    role: str
    path: Optional[str] = None


@dataclass
class GeneratedPredicates:
    """Bounds to add per generic parameter plus extra where-clause predicates."""

    param_bounds: Dict[str, List[str]] = field(default_factory=dict)
    predicates: List[str] = field(default_factory=list)
    overridden: bool = False


def type_form(ty: TypeExpr, params: FrozenSet[str], phantom_names: FrozenSet[str]) -> TypeForm:
    """Classify one level of a type expression."""
    if isinstance(ty, PathType):
        first = ty.segments[0]
        if len(ty.segments) == 1 and not first.args:
            return BareName(first.name)
        if (
            len(ty.segments) > 1
            and not ty.leading_colon
            and first.name in params
            and not first.args
        ):
            return AssocPathForm(param=first.name, path=ty.text)
        arguments = tuple(ty.children())
        if ty.head.name in phantom_names:
            return PhantomForm(arguments)
        return WrapperForm(head=ty.head.name, arguments=arguments)
    if isinstance(ty, QualifiedPathType):
        self_type = ty.self_type
        if (
            isinstance(self_type, PathType)
            and len(self_type.segments) == 1
            and self_type.segments[0].name in params
        ):
            return AssocPathForm(param=self_type.segments[0].name, path=ty.text)
        return CompoundForm(tuple(ty.children()))
    if isinstance(ty, OpaqueType):
        return CompoundForm(tuple(ty.children()), tuple(ty.mentions))
    return CompoundForm(tuple(ty.children()))


def parameter_uses(
    ty: TypeExpr,
    params: FrozenSet[str],
    phantom_names: FrozenSet[str] = DEFAULT_PHANTOM_NAMES,
) -> Iterator[ParamUse]:
    """Yield every use of a generic parameter inside `ty`."""
    yield from _walk(ty, params, phantom_names, inside_phantom=False)


def _walk(
    ty: TypeExpr,
    params: FrozenSet[str],
    phantom_names: FrozenSet[str],
    *,
    inside_phantom: bool,
) -> Iterator[ParamUse]:
    form = type_form(ty, params, phantom_names)
    if isinstance(form, BareName):
        if form.name in params:
            yield ParamUse(form.name, "phantom" if inside_phantom else "value")
    elif isinstance(form, AssocPathForm):
        yield ParamUse(form.param, "phantom" if inside_phantom else "assoc", form.path)
    elif isinstance(form, PhantomForm):
        for argument in form.arguments:
            yield from _walk(argument, params, phantom_names, inside_phantom=True)
    elif isinstance(form, WrapperForm):
        for argument in form.arguments:
            yield from _walk(argument, params, phantom_names, inside_phantom=inside_phantom)
    else:
        found: List[ParamUse] = []
        for part in form.parts:
            found.extend(_walk(part, params, phantom_names, inside_phantom=inside_phantom))
        yield from found
        covered = {use.param for use in found}
        for name in form.mentions:
            if name in params and name not in covered:
                covered.add(name)
                yield ParamUse(name, "phantom" if inside_phantom else "value")


def infer_bounds(
    descriptor: TypeDescriptor,
    *,
    trait_path: str = DEFAULT_TRAIT_PATH,
    phantom_names: Iterable[str] = DEFAULT_PHANTOM_NAMES,
) -> GeneratedPredicates:
    """Decide which formatting bounds the generated implementation needs."""
    override = descriptor.bound_override
    if override is not None:
        bound = override.bounds or trait_path
        logger.debug("Bound inference disabled for %s by explicit bound", descriptor.name)
        return GeneratedPredicates(predicates=[f"{override.type_path}: {bound}"], overridden=True)

    phantoms = frozenset(phantom_names)
    params = frozenset(param.name for param in descriptor.generics.type_params)
    uses: List[ParamUse] = []
    for field_descriptor in descriptor.fields:
        uses.extend(parameter_uses(field_descriptor.declared_type, params, phantoms))

    result = GeneratedPredicates()
    for param in descriptor.generics.type_params:
        roles = {use.role for use in uses if use.param == param.name}
        if not roles or "value" in roles:
            result.param_bounds[param.name] = [trait_path]
        else:
            logger.debug("Skipping bound on %s::%s (used as %s)", descriptor.name, param.name, sorted(roles))

    for use in uses:
        if use.role != "assoc" or use.path is None:
            continue
        predicate = f"{use.path}: {trait_path}"
        if predicate not in result.predicates:
            result.predicates.append(predicate)
    return result


__all__ = [
    "AssocPathForm",
    "BareName",
    "CompoundForm",
    "DEFAULT_PHANTOM_NAMES",
    "DEFAULT_TRAIT_PATH",
    "GeneratedPredicates",
    "ParamUse",
    "PhantomForm",
    "WrapperForm",
    "infer_bounds",
    "parameter_uses",
    "type_form",
]
