"""Parsing and validation of field and type level directives."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..errors import DirectiveSyntaxError, Location
from ..logging import get_logger
from ..models import BoundOverride, Directive, FormatOverride, RepeatedElementName
from ..syntax.tokens import IDENT, STRING, Token
from ..syntax.nodes import Attribute

BUILDER_ATTRIBUTE = "builder"
DEBUG_ATTRIBUTE = "debug"
HELPER_ATTRIBUTES = frozenset({BUILDER_ATTRIBUTE, DEBUG_ATTRIBUTE})

_IDENTIFIER = re.compile(r"^(?:r#)?[A-Za-z_][A-Za-z0-9_]*$")
_BOUND_PATH = re.compile(r"^(?:::)?[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)*$")
_KEYWORDS = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else", "enum",
        "extern", "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod",
        "move", "mut", "pub", "ref", "return", "self", "Self", "static", "struct", "super",
        "trait", "true", "type", "unsafe", "use", "where", "while",
    }
)

logger = get_logger("analysis.directives")


def is_identifier(text: str) -> bool:
    if text == "_" or not _IDENTIFIER.match(text):
        return False
    return text.startswith("r#") or text not in _KEYWORDS


def parse_each_directive(attr: Attribute) -> RepeatedElementName:
    """Parse `#[builder(each = "name")]`."""
    args = list(attr.args) if attr.is_list else []
    keyword = _token_at(args, 0)
    if keyword is None or not keyword.is_ident("each"):
        raise DirectiveSyntaxError("expected `each`", _where(keyword, attr))
    equals = _token_at(args, 1)
    if equals is None or not equals.is_punct("="):
        raise DirectiveSyntaxError("expected `=`", _where(equals, keyword.location))
    literal = _token_at(args, 2)
    if literal is None or literal.kind != STRING or literal.value is None:
        raise DirectiveSyntaxError("expected string literal", _where(literal, equals.location))
    if len(args) > 3:
        raise DirectiveSyntaxError(f"unexpected token `{args[3].text}`", args[3].location)
    if not is_identifier(literal.value):
        raise DirectiveSyntaxError(f"`{literal.value}` is not a valid identifier", literal.location)
    return RepeatedElementName(name=literal.value, location=literal.location)


def parse_format_directive(attr: Attribute) -> Optional[FormatOverride]:
    """Parse `#[debug = "template"]`; other `debug` forms on a field are not directives."""
    if not attr.is_name_value:
        return None
    value = attr.value
    if len(value) != 1 or value[0].kind != STRING or value[0].value is None:
        raise DirectiveSyntaxError("rhs of debug should be a string literal", attr.location)
    return FormatOverride(template=value[0].value, location=attr.location)


def parse_bound_directive(attr: Attribute) -> Optional[BoundOverride]:
    """Parse `#[debug(bound = "T::Value")]` or `#[debug(bound = "T::Value: Debug")]`."""
    if not attr.is_list:
        return None
    args = list(attr.args)
    keyword = _token_at(args, 0)
    if keyword is None or keyword.kind != IDENT or keyword.text != "bound":
        raise DirectiveSyntaxError("expected `bound`", _where(keyword, attr))
    equals = _token_at(args, 1)
    if equals is None or not equals.is_punct("="):
        raise DirectiveSyntaxError("expected `=`", _where(equals, keyword.location))
    literal = _token_at(args, 2)
    if literal is None or literal.kind != STRING or literal.value is None:
        raise DirectiveSyntaxError("expected string literal", _where(literal, equals.location))
    if len(args) > 3:
        raise DirectiveSyntaxError(f"unexpected token `{args[3].text}`", args[3].location)

    type_path, bounds = _split_predicate(literal.value)
    if not _BOUND_PATH.match(type_path):
        raise DirectiveSyntaxError(f"invalid bound path `{literal.value}`", literal.location)
    return BoundOverride(type_path=type_path, bounds=bounds, location=literal.location)


def field_directives(attrs: Sequence[Attribute], *, field_name: str = "") -> Tuple[Directive, ...]:
    """Build the directive table for a single field."""
    directives: List[Directive] = []
    each: Optional[RepeatedElementName] = None
    fmt: Optional[FormatOverride] = None
    for attr in attrs:
        if attr.path == BUILDER_ATTRIBUTE:
            parsed_each = parse_each_directive(attr)
            if each is not None:
                logger.warning(
                    "Field `%s` declares `each` more than once; keeping `%s`", field_name, each.name
                )
                continue
            each = parsed_each
            directives.append(parsed_each)
        elif attr.path == DEBUG_ATTRIBUTE:
            parsed_fmt = parse_format_directive(attr)
            if parsed_fmt is None:
                continue
            if fmt is not None:
                raise DirectiveSyntaxError("debug attribute can only be applied once", attr.location)
            fmt = parsed_fmt
            directives.append(parsed_fmt)
    return tuple(directives)


def type_directives(attrs: Sequence[Attribute]) -> Tuple[Directive, ...]:
    """Build the directive table for the record type itself."""
    bound: Optional[BoundOverride] = None
    for attr in attrs:
        if attr.path != DEBUG_ATTRIBUTE:
            continue
        parsed = parse_bound_directive(attr)
        if parsed is None:
            continue
        if bound is not None:
            raise DirectiveSyntaxError("debug bound can only be applied once", attr.location)
        bound = parsed
    return (bound,) if bound is not None else ()


def _split_predicate(text: str) -> Tuple[str, Optional[str]]:
    """Split `Path: Bounds` on the first single colon, leaving `::` intact."""
    index = 0
    while index < len(text):
        if text.startswith("::", index):
            index += 2
            continue
        if text[index] == ":":
            bounds = text[index + 1 :].strip()
            return text[:index].strip(), bounds or None
        index += 1
    return text.strip(), None


def _token_at(tokens: Sequence[Token], index: int) -> Optional[Token]:
    return tokens[index] if index < len(tokens) else None


def _where(token: Optional[Token], fallback: "Attribute | Location") -> Location:
    if token is not None:
        return token.location
    if isinstance(fallback, Attribute):
        return fallback.location
    return fallback


__all__ = [
    "BUILDER_ATTRIBUTE",
    "DEBUG_ATTRIBUTE",
    "HELPER_ATTRIBUTES",
    "field_directives",
    "is_identifier",
    "parse_bound_directive",
    "parse_each_directive",
    "parse_format_directive",
    "type_directives",
]
