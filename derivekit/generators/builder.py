"""Generator for `#[derive(Builder)]` companion builder types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..analysis.directives import BUILDER_ATTRIBUTE
from ..analysis.shapes import ShapeKind, WrapperSet, classify
from ..logging import get_logger
from ..models import FieldDescriptor, TypeDescriptor
from ..syntax.nodes import OpaqueType, PathType, RefType, TypeExpr
from ..syntax.tokens import quote_string
from .base import Generator

OPTION_PATH = "::std::option::Option"
DEFAULT_EXPR = "::std::default::Default::default()"

logger = get_logger("generators.builder")


@dataclass(frozen=True)
class BuilderSlot:
    """Storage slot on the builder for one record field."""

    name: str
    slot_type: str
    initial: str
    shape: ShapeKind


@dataclass(frozen=True)
class BuilderAccessor:
    """A chainable setter or per-element accessor."""

    name: str
    param: str
    param_type: str
    statement: str


@dataclass(frozen=True)
class AssemblyStep:
    """How `build` produces one field of the final record."""

    name: str
    expression: str
    required: bool


@dataclass
class BuilderPlan:
    """The companion type and its assembly operation, ready to render."""

    record: str
    builder: str
    vis: str
    declaration: str
    impl_params: str
    type_args: str
    where_clause: str
    slots: List[BuilderSlot] = field(default_factory=list)
    accessors: List[BuilderAccessor] = field(default_factory=list)
    assembly: List[AssemblyStep] = field(default_factory=list)

    @property
    def required_fields(self) -> List[str]:
        return [step.name for step in self.assembly if step.required]


class BuilderGenerator(Generator):
    """Emits `Record::builder()`, the builder struct, its setters and `build`.

    `build(&mut self)` clones every slot so one builder can produce several
    records. Every field type must therefore implement `Clone`; fields such as
    `Box<dyn Fn(i32) -> i32>` or `&mut T` make the generated code fail to
    compile, and a warning names them at generation time.
    """

    template_name = "builder.rs.j2"
    helper_attributes = frozenset({BUILDER_ATTRIBUTE})

    @property
    def derive(self) -> str:
        return self.config.builder.derive

    @property
    def wrappers(self) -> WrapperSet:
        names = self.config.wrappers
        return WrapperSet.from_names(optional=names.optional, repeated=names.repeated)

    def plan(self, descriptor: TypeDescriptor) -> BuilderPlan:
        generics = descriptor.generics
        plan = BuilderPlan(
            record=descriptor.name,
            builder=f"{descriptor.name}{self.config.builder.suffix}",
            vis=descriptor.vis,
            declaration=generics.declaration(),
            impl_params=generics.impl_parameters(),
            type_args=generics.type_arguments(),
            where_clause=generics.where_clause(),
        )
        wrappers = self.wrappers
        for field_descriptor in descriptor.fields:
            self._plan_field(plan, field_descriptor, wrappers)
        return plan

    def _plan_field(self, plan: BuilderPlan, item: FieldDescriptor, wrappers: WrapperSet) -> None:
        shape = classify(item.declared_type, wrappers)
        declared = item.declared_type.text
        uncloneable = uncloneable_part(item.declared_type)
        if uncloneable is not None:
            logger.warning(
                "%s.%s: `%s` does not implement Clone, which the generated `build` requires",
                plan.record,
                item.display_name,
                uncloneable,
            )
        each = item.each_name
        if each is not None and not shape.is_repeated:
            logger.warning(
                "Ignoring `each = \"%s\"` on %s.%s: field type `%s` is not a repeated wrapper",
                each,
                plan.record,
                item.display_name,
                declared,
            )
            each = None

        if shape.is_bare:
            plan.slots.append(
                BuilderSlot(item.name, f"{OPTION_PATH}<{declared}>", f"{OPTION_PATH}::None", shape.kind)
            )
            plan.accessors.append(
                BuilderAccessor(item.name, item.name, declared, f"self.{item.name} = {OPTION_PATH}::Some({item.name});")
            )
            message = quote_string(f"{item.display_name} must be set")
            plan.assembly.append(
                AssemblyStep(item.name, f"self.{item.name}.clone().ok_or({message})?", required=True)
            )
            return

        plan.slots.append(BuilderSlot(item.name, declared, DEFAULT_EXPR, shape.kind))
        plan.assembly.append(AssemblyStep(item.name, f"self.{item.name}.clone()", required=False))
        assert shape.inner is not None
        inner = shape.inner.text
        if shape.is_optional:
            plan.accessors.append(
                BuilderAccessor(item.name, item.name, inner, f"self.{item.name} = {OPTION_PATH}::Some({item.name});")
            )
        elif each is not None:
            plan.accessors.append(BuilderAccessor(each, each, inner, f"self.{item.name}.push({each});"))
        else:
            plan.accessors.append(BuilderAccessor(item.name, item.name, declared, f"self.{item.name} = {item.name};"))

    def generate(self, descriptor: TypeDescriptor) -> str:
        plan = self.plan(descriptor)
        logger.debug(
            "Generating %s for %s (%d fields, %d required)",
            plan.builder,
            plan.record,
            len(plan.slots),
            len(plan.required_fields),
        )
        return self.render(
            {
                "record": plan.record,
                "builder": plan.builder,
                "vis": plan.vis,
                "declaration": plan.declaration,
                "impl_params": plan.impl_params,
                "type_args": plan.type_args,
                "where_clause": plan.where_clause,
                "slots": plan.slots,
                "accessors": plan.accessors,
                "assembly": plan.assembly,
            }
        )


def uncloneable_part(ty: TypeExpr) -> Optional[str]:
    """First `&mut T` or boxed trait object inside `ty`; neither can be cloned."""
    stack = [ty]
    while stack:
        current = stack.pop()
        if isinstance(current, RefType) and current.mutable:
            return current.text
        if isinstance(current, PathType) and current.head.name == "Box":
            arguments = current.type_arguments()
            if arguments and isinstance(arguments[0], OpaqueType) and arguments[0].kind == "dyn":
                return current.text
        stack.extend(reversed(current.children()))
    return None


def generate_builder(descriptor: TypeDescriptor) -> BuilderPlan:
    """Plan the builder for `descriptor` using the default configuration."""
    return BuilderGenerator().plan(descriptor)


__all__ = [
    "AssemblyStep",
    "BuilderAccessor",
    "BuilderGenerator",
    "BuilderPlan",
    "BuilderSlot",
    "generate_builder",
    "uncloneable_part",
]