"""Extraction of normalized type descriptors from parsed record declarations."""

from __future__ import annotations

from typing import List

from ..errors import StructuralError
from ..models import FieldDescriptor, TypeDescriptor
from ..syntax.nodes import EnumItem, Item, StructItem, UnionItem
from .directives import field_directives, type_directives


def extract_descriptor(item: Item, *, derive: str) -> TypeDescriptor:
    """Convert a struct declaration into a descriptor, parsing directives eagerly.

    Raises :class:`StructuralError` for tuple structs, enums, unions and any
    other non-record item, and :class:`DirectiveSyntaxError` for malformed
    field or type directives.
    """
    if isinstance(item, EnumItem):
        raise StructuralError(
            f"#[derive({derive})] does not work for an enum",
            item.location,
            kind=StructuralError.UNSUPPORTED_KIND,
        )
    if isinstance(item, UnionItem):
        raise StructuralError(
            f"#[derive({derive})] does not work for a union",
            item.location,
            kind=StructuralError.UNSUPPORTED_KIND,
        )
    if not isinstance(item, StructItem):
        raise StructuralError(
            f"#[derive({derive})] does not work for a {item.kind or 'non-struct item'}",
            item.location,
            kind=StructuralError.UNSUPPORTED_KIND,
        )
    if any(field.name is None for field in item.fields):
        raise StructuralError(
            f"#[derive({derive})] does not work for a tuple struct",
            item.location,
            kind=StructuralError.TUPLE_RECORD,
        )

    fields: List[FieldDescriptor] = []
    for field in item.fields:
        assert field.name is not None
        fields.append(
            FieldDescriptor(
                name=field.name,
                declared_type=field.ty,
                location=field.location,
                directives=field_directives(field.attrs, field_name=field.name),
            )
        )

    return TypeDescriptor(
        name=item.name,
        generics=item.generics,
        fields=tuple(fields),
        location=item.location,
        vis=item.vis,
        type_directives=type_directives(item.attrs),
    )


__all__ = ["extract_descriptor"]
