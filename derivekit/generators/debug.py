"""Generator for `#[derive(CustomDebug)]` formatting implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..analysis.bounds import GeneratedPredicates, infer_bounds
from ..analysis.directives import DEBUG_ATTRIBUTE
from ..logging import get_logger
from ..models import TypeDescriptor
from ..syntax.tokens import quote_string
from .base import Generator

logger = get_logger("generators.debug")


@dataclass(frozen=True)
class FormattedField:
    label: str
    value: str


class DebugGenerator(Generator):
    """Emits a `Debug` impl with inferred bounds and per-field format templates."""

    template_name = "debug.rs.j2"
    helper_attributes = frozenset({DEBUG_ATTRIBUTE})

    @property
    def derive(self) -> str:
        return self.config.debug.derive

    @property
    def trait_path(self) -> str:
        return self.config.debug.trait_path

    def predicates(self, descriptor: TypeDescriptor) -> GeneratedPredicates:
        return infer_bounds(
            descriptor,
            trait_path=self.trait_path,
            phantom_names=self.config.wrappers.phantom,
        )

    def formatted_fields(self, descriptor: TypeDescriptor) -> List[FormattedField]:
        fields: List[FormattedField] = []
        for item in descriptor.fields:
            template = item.format_override
            if template is None:
                value = f"&self.{item.name}"
            else:
                value = f"&format_args!({quote_string(template)}, &self.{item.name})"
            fields.append(FormattedField(label=quote_string(item.display_name), value=value))
        return fields

    def generate(self, descriptor: TypeDescriptor) -> str:
        return generate_formatter(self, descriptor, self.predicates(descriptor))


def generate_formatter(
    generator: DebugGenerator,
    descriptor: TypeDescriptor,
    predicates: GeneratedPredicates,
) -> str:
    """Render the formatting impl for `descriptor` under `predicates`."""
    generics = descriptor.generics
    logger.debug(
        "Generating %s for %s (bounds=%s, predicates=%s)",
        generator.trait_path,
        descriptor.name,
        predicates.param_bounds,
        predicates.predicates,
    )
    return generator.render(
        {
            "trait_path": generator.trait_path,
            "record": descriptor.name,
            "record_label": quote_string(descriptor.name),
            "impl_params": generics.impl_parameters(predicates.param_bounds),
            "type_args": generics.type_arguments(),
            "where_clause": generics.where_clause(predicates.predicates),
            "fields": generator.formatted_fields(descriptor),
        }
    )


__all__ = ["DebugGenerator", "FormattedField", "generate_formatter"]
