"""Tree-sitter powered Rust front end.

Source text is parsed with the tree-sitter Rust grammar and the concrete syntax
tree is mapped onto derivekit's item, type and match nodes. Tree-sitter works
in byte offsets; every span handed out here is a character offset into the
original text so edits can be applied to the Python string directly.
"""

from __future__ import annotations

import bisect
from typing import Iterable, Iterator, List, Optional, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from ..errors import Location, ParseError
from ..logging import get_logger
from .nodes import (
    ArrayType,
    Attribute,
    BindingArg,
    BlockItem,
    ConstArg,
    EnumItem,
    Field,
    FnItem,
    GenericParam,
    Generics,
    Item,
    LifetimeArg,
    MatchArm,
    MatchExpr,
    OpaqueType,
    PathSegment,
    PathType,
    Pattern,
    PtrType,
    QualifiedPathType,
    RefType,
    SliceType,
    SourceFile,
    StructItem,
    TupleType,
    TypeExpr,
    UnionItem,
    Variant,
)
from .tokens import CHAR, STRING, Token, leaf_kind, literal_value

RUST_LANGUAGE = Language(tree_sitter_rust.language())

_COMMENTS = frozenset({"line_comment", "block_comment"})
_SKIPPED = _COMMENTS | {"empty_statement", "inner_attribute_item", "shebang"}
_ATTRIBUTE_PATHS = frozenset({"identifier", "scoped_identifier", "self", "crate", "super", "metavariable"})
_LITERAL_LEAVES = frozenset({"string_literal", "raw_string_literal", "char_literal", "lifetime"})
_PATH_TYPES = frozenset(
    {
        "type_identifier",
        "primitive_type",
        "identifier",
        "scoped_type_identifier",
        "scoped_identifier",
        "generic_type",
        "generic_type_with_turbofish",
        "metavariable",
        "self",
    }
)
_CONST_ARGUMENTS = frozenset(
    {
        "integer_literal",
        "float_literal",
        "string_literal",
        "raw_string_literal",
        "char_literal",
        "boolean_literal",
        "negative_literal",
        "block",
    }
)
_MENTION_NODES = frozenset({"type_identifier", "identifier"})
_BLOCK_ITEMS = frozenset({"mod_item", "impl_item", "trait_item", "foreign_mod_item"})
_ITEM_KINDS = {
    "associated_type": "type",
    "const_item": "const",
    "extern_crate_declaration": "extern",
    "foreign_mod_item": "extern",
    "function_item": "fn",
    "function_signature_item": "fn",
    "impl_item": "impl",
    "macro_definition": "macro_rules",
    "macro_invocation": "macro",
    "mod_item": "mod",
    "static_item": "static",
    "trait_item": "trait",
    "type_item": "type",
    "use_declaration": "use",
}
_TYPE_PREFIX = "type Parsed = "

logger = get_logger("syntax.parser")


def parse_source(source: str) -> SourceFile:
    """Parse a Rust source file into derivekit items."""
    return RustParser().parse(source)


def parse_type(text: str) -> TypeExpr:
    """Parse a standalone type expression such as `Vec<T::Value>`."""
    return RustParser().parse_type(text)


class SourceText:
    """One parsed text with byte-to-character offset translation."""

    def __init__(self, source: str, origin: int = 0) -> None:
        self.source = source
        self.data = source.encode("utf-8")
        self.origin = origin
        self._chars: Optional[List[int]] = None
        if len(self.data) != len(source):
            self._chars = []
            for index, char in enumerate(source):
                self._chars.extend([index] * len(char.encode("utf-8")))
            self._chars.append(len(source))
        self._line_starts = [0] + [index + 1 for index, char in enumerate(source) if char == "\n"]

    def char_at(self, byte: int) -> int:
        return byte if self._chars is None else self._chars[byte]

    def offset(self, byte: int) -> int:
        return self.char_at(byte) - self.origin

    def span(self, node: Node) -> Tuple[int, int]:
        return self.offset(node.start_byte), self.offset(node.end_byte)

    def text(self, node: Node) -> str:
        return self.between(node.start_byte, node.end_byte)

    def between(self, start_byte: int, end_byte: int) -> str:
        return self.data[start_byte:end_byte].decode("utf-8")

    def location(self, node: Node, label: str | None = None) -> Location:
        char = self.char_at(node.start_byte)
        line = bisect.bisect_right(self._line_starts, char) - 1
        if label is None:
            label = self.text(node).split("\n", 1)[0]
        return Location(line + 1, char - self._line_starts[line] + 1, label)


class RustParser:
    """Builds derivekit nodes from a tree-sitter Rust syntax tree."""

    def __init__(self) -> None:
        self._parser = Parser(language=RUST_LANGUAGE)
        self.text = SourceText("")

    def parse(self, source: str) -> SourceFile:
        self.text = SourceText(source)
        tree = self._parser.parse(self.text.data)
        self._raise_first_error(tree.root_node)
        items = self._items(tree.root_node.children)
        logger.debug("Parsed %d top-level items", len(items))
        return SourceFile(source=source, items=items)

    def parse_type(self, text: str) -> TypeExpr:
        self.text = SourceText(f"{_TYPE_PREFIX}{text};", origin=len(_TYPE_PREFIX))
        tree = self._parser.parse(self.text.data)
        self._raise_first_error(tree.root_node)
        items = [node for node in tree.root_node.named_children if node.type not in _COMMENTS]
        type_node = None
        if len(items) == 1 and items[0].type == "type_item":
            type_node = items[0].child_by_field_name("type")
        if type_node is None:
            raise ParseError(f"expected a single type, found `{text}`", Location(1, 1))
        return self.type_expr(type_node)

    # -- errors -----------------------------------------------------------------

    def _raise_first_error(self, root: Node) -> None:
        if not root.has_error:
            return
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_missing:
                raise ParseError(f"expected `{node.type}`", self.text.location(node, node.type))
            if node.type == "ERROR":
                leaf = _first_leaf(node)
                snippet = self.text.text(leaf)
                raise ParseError(f"unexpected `{snippet}`", self.text.location(leaf, snippet))
            stack.extend(child for child in reversed(node.children) if child.has_error or child.is_missing)

    # -- items ------------------------------------------------------------------

    def _items(self, nodes: Iterable[Node]) -> List[Item]:
        items: List[Item] = []
        pending: List[Attribute] = []
        for node in nodes:
            if node.type == "attribute_item":
                pending.append(self.attribute(node))
                continue
            if not node.is_named or node.type in _SKIPPED:
                continue
            items.append(self.item(node, pending))
            pending = []
        return items

    def item(self, node: Node, attrs: List[Attribute]) -> Item:
        start = attrs[0].start if attrs else self.text.offset(node.start_byte)
        end = self.text.offset(node.end_byte)
        vis = self._visibility(node)
        if node.type == "struct_item":
            return self._struct(node, start, end, attrs, vis)
        if node.type == "union_item":
            return self._union(node, start, end, attrs, vis)
        if node.type == "enum_item":
            return self._enum(node, start, end, attrs, vis)
        if node.type in ("function_item", "function_signature_item"):
            return self._function(node, start, end, attrs, vis)

        kind = _ITEM_KINDS.get(node.type, node.type)
        name_node = node.child_by_field_name("name") if node.type != "impl_item" else None
        name = self.text.text(name_node) if name_node is not None else ""
        location = self.text.location(name_node) if name_node is not None else self._keyword_location(node)
        body = node.child_by_field_name("body")
        if node.type in _BLOCK_ITEMS and body is not None:
            return BlockItem(
                kind=kind,
                name=name,
                start=start,
                end=end,
                location=location,
                attrs=attrs,
                vis=vis,
                children=self._items(body.children),
            )
        return Item(kind=kind, name=name, start=start, end=end, location=location, attrs=attrs, vis=vis)

    def _struct(self, node: Node, start: int, end: int, attrs: List[Attribute], vis: str) -> StructItem:
        name = self._required(node, "name")
        body = node.child_by_field_name("body")
        style = "unit"
        fields: List[Field] = []
        if body is not None and body.type == "field_declaration_list":
            style = "named"
            fields = self._named_fields(body)
        elif body is not None:
            style = "tuple"
            fields = self._tuple_fields(body)
        return StructItem(
            kind="struct",
            name=self.text.text(name),
            start=start,
            end=end,
            location=self.text.location(name),
            attrs=attrs,
            vis=vis,
            generics=self.generics(node),
            fields=fields,
            style=style,
        )

    def _union(self, node: Node, start: int, end: int, attrs: List[Attribute], vis: str) -> UnionItem:
        name = self._required(node, "name")
        body = node.child_by_field_name("body")
        return UnionItem(
            kind="union",
            name=self.text.text(name),
            start=start,
            end=end,
            location=self.text.location(name),
            attrs=attrs,
            vis=vis,
            generics=self.generics(node),
            fields=self._named_fields(body) if body is not None else [],
        )

    def _enum(self, node: Node, start: int, end: int, attrs: List[Attribute], vis: str) -> EnumItem:
        name = self._required(node, "name")
        body = node.child_by_field_name("body")
        variants: List[Variant] = []
        pending: List[Attribute] = []
        for child in body.named_children if body is not None else []:
            if child.type == "attribute_item":
                pending.append(self.attribute(child))
            elif child.type == "enum_variant":
                variant_name = self._required(child, "name")
                variants.append(
                    Variant(name=self.text.text(variant_name), location=self.text.location(variant_name), attrs=pending)
                )
                pending = []
        return EnumItem(
            kind="enum",
            name=self.text.text(name),
            start=start,
            end=end,
            location=self.text.location(name),
            attrs=attrs,
            vis=vis,
            generics=self.generics(node),
            variants=variants,
        )

    def _function(self, node: Node, start: int, end: int, attrs: List[Attribute], vis: str) -> FnItem:
        name = self._required(node, "name")
        body = node.child_by_field_name("body")
        return FnItem(
            kind="fn",
            name=self.text.text(name),
            start=start,
            end=end,
            location=self.text.location(name),
            attrs=attrs,
            vis=vis,
            matches=self._matches(body) if body is not None else [],
            has_body=body is not None,
        )

    def _named_fields(self, body: Node) -> List[Field]:
        fields: List[Field] = []
        pending: List[Attribute] = []
        for child in body.named_children:
            if child.type == "attribute_item":
                pending.append(self.attribute(child))
                continue
            if child.type != "field_declaration":
                continue
            name = self._required(child, "name")
            fields.append(
                Field(
                    name=self.text.text(name),
                    ty=self.type_expr(self._required(child, "type")),
                    location=self.text.location(name),
                    attrs=pending,
                    vis=self._visibility(child),
                )
            )
            pending = []
        return fields

    def _tuple_fields(self, body: Node) -> List[Field]:
        fields: List[Field] = []
        pending: List[Attribute] = []
        vis = ""
        for child in body.named_children:
            if child.type == "attribute_item":
                pending.append(self.attribute(child))
            elif child.type == "visibility_modifier":
                vis = self.text.text(child) + " "
            elif child.type not in _COMMENTS:
                fields.append(
                    Field(name=None, ty=self.type_expr(child), location=self.text.location(child), attrs=pending, vis=vis)
                )
                pending = []
                vis = ""
        return fields

    def _visibility(self, node: Node) -> str:
        for child in node.children:
            if child.type == "visibility_modifier":
                return self.text.text(child) + " "
        return ""

    def _keyword_location(self, node: Node) -> Location:
        for child in node.children:
            if child.type != "visibility_modifier" and child.type not in _COMMENTS:
                return self.text.location(child)
        return self.text.location(node)

    def _required(self, node: Node, field_name: str) -> Node:
        child = node.child_by_field_name(field_name)
        if child is None:
            raise ParseError(f"expected {field_name} in {node.type}", self.text.location(node))
        return child

    # -- attributes -------------------------------------------------------------

    def attribute(self, node: Node) -> Attribute:
        start, end = self.text.span(node)
        attribute = Attribute(
            path="",
            start=start,
            end=end,
            location=self.text.location(node, "#"),
            inner=node.type == "inner_attribute_item",
        )
        body = next((child for child in node.named_children if child.type == "attribute"), None)
        if body is None:
            return attribute
        path = next((child for child in body.named_children if child.type in _ATTRIBUTE_PATHS), None)
        if path is not None:
            attribute.path = "".join(self.text.text(path).split()).lstrip(":")
        arguments = body.child_by_field_name("arguments")
        if arguments is not None:
            delimiters = arguments.children
            attribute.delimiter = delimiters[0].type if delimiters else "("
            attribute.args = list(self.tokens(delimiters[1:-1]))
        elif any(child.type == "=" for child in body.children):
            value = body.child_by_field_name("value")
            attribute.has_eq = True
            attribute.value = list(self.tokens([value])) if value is not None else []
        return attribute

    def tokens(self, nodes: Iterable[Node]) -> Iterator[Token]:
        """Flatten token-tree nodes into leaf tokens; literals stay whole."""
        for node in nodes:
            if node.type in _COMMENTS:
                continue
            if node.child_count == 0 or node.type in _LITERAL_LEAVES:
                yield self.token(node)
            else:
                yield from self.tokens(node.children)

    def token(self, node: Node) -> Token:
        text = self.text.text(node)
        kind = leaf_kind(node.type, text)
        start, end = self.text.span(node)
        location = self.text.location(node, text)
        return Token(
            kind=kind,
            text=text,
            start=start,
            end=end,
            line=location.line,
            column=location.column,
            value=literal_value(text) if kind in (STRING, CHAR) else None,
        )

    # -- generics ---------------------------------------------------------------

    def generics(self, node: Node) -> Generics:
        generics = Generics()
        parameters = node.child_by_field_name("type_parameters")
        if parameters is not None:
            for child in parameters.named_children:
                param = self._generic_param(child)
                if param is not None:
                    generics.params.append(param)
        for child in node.children:
            if child.type == "where_clause":
                generics.where_predicates.extend(
                    self.text.text(predicate).strip()
                    for predicate in child.named_children
                    if predicate.type == "where_predicate"
                )
        return generics

    def _generic_param(self, node: Node) -> Optional[GenericParam]:
        kind = node.type
        if kind == "lifetime":
            return GenericParam(kind="lifetime", name=self.text.text(node))
        if kind in ("type_identifier", "metavariable"):
            return GenericParam(kind="type", name=self.text.text(node))
        if kind in ("lifetime_parameter", "type_parameter", "constrained_type_parameter"):
            name = node.child_by_field_name("name") or node.child_by_field_name("left")
            if name is None:
                return None
            default = node.child_by_field_name("default_type")
            return GenericParam(
                kind="lifetime" if name.type == "lifetime" else "type",
                name=self.text.text(name),
                bounds=self._bounds_text(node.child_by_field_name("bounds")),
                default=self.text.text(default) if default is not None else None,
            )
        if kind == "optional_type_parameter":
            name = node.child_by_field_name("name")
            param = self._generic_param(name) if name is not None else None
            default = node.child_by_field_name("default_type")
            if param is not None and default is not None:
                param.default = self.text.text(default)
            return param
        if kind == "const_parameter":
            name = self._required(node, "name")
            const_type = self._required(node, "type")
            value = node.child_by_field_name("value")
            return GenericParam(
                kind="const",
                name=self.text.text(name),
                const_type=self.text.text(const_type),
                default=self.text.text(value) if value is not None else None,
            )
        return None

    def _bounds_text(self, bounds: Optional[Node]) -> str:
        """Source text of a `: A + B` bound list without its colon."""
        if bounds is None:
            return ""
        parts = [child for child in bounds.named_children if child.type not in _COMMENTS]
        if not parts:
            return ""
        return self.text.between(parts[0].start_byte, bounds.end_byte).strip()

    # -- types ------------------------------------------------------------------

    def type_expr(self, node: Node) -> TypeExpr:
        kind = node.type
        text = self.text.text(node)
        start, end = self.text.span(node)
        if kind in _PATH_TYPES:
            return self._path_type(node)
        if kind == "reference_type":
            lifetime = next((child for child in node.named_children if child.type == "lifetime"), None)
            return RefType(
                text=text,
                start=start,
                end=end,
                inner=self.type_expr(self._required(node, "type")),
                lifetime=self.text.text(lifetime) if lifetime is not None else None,
                mutable=_has_child(node, "mutable_specifier"),
            )
        if kind == "pointer_type":
            return PtrType(
                text=text,
                start=start,
                end=end,
                inner=self.type_expr(self._required(node, "type")),
                mutable=_has_child(node, "mutable_specifier"),
            )
        if kind in ("tuple_type", "unit_type"):
            elements = [self.type_expr(child) for child in node.named_children if child.type not in _COMMENTS]
            if len(elements) == 1 and not _has_child(node, ","):
                return elements[0]
            return TupleType(text=text, start=start, end=end, elements=elements)
        if kind == "array_type":
            element = self.type_expr(self._required(node, "element"))
            length = node.child_by_field_name("length")
            if length is None:
                return SliceType(text=text, start=start, end=end, element=element)
            return ArrayType(text=text, start=start, end=end, element=element, length=self.text.text(length).strip())
        if kind == "function_type":
            trait = node.child_by_field_name("trait")
            if trait is not None:
                path = self._path_type(trait)
                if isinstance(path, PathType):
                    path.head.parenthesized = True
                    path.head.args = self._signature_types(node)
                    return PathType(
                        text=text, start=start, end=end, segments=path.segments, leading_colon=path.leading_colon
                    )
            return OpaqueType(
                text=text, start=start, end=end, kind="fn", bounds=self._signature_types(node), mentions=self._mentions(node)
            )
        if kind in ("dynamic_type", "abstract_type", "bounded_type"):
            lead = text.split(None, 1)[0] if text else ""
            return OpaqueType(
                text=text,
                start=start,
                end=end,
                kind=lead if lead in ("dyn", "impl") else "bounds",
                bounds=self._bound_list(node),
                mentions=self._mentions(node),
            )
        if kind in ("higher_ranked_trait_bound", "removed_trait_bound"):
            inner = node.child_by_field_name("value") or _last_named(node)
            if inner is not None:
                return self.type_expr(inner)
        if kind == "lifetime":
            return LifetimeArg(text=text, start=start, end=end)
        if kind == "never_type":
            return OpaqueType(text=text, start=start, end=end, kind="never")
        if kind == "macro_invocation":
            return OpaqueType(text=text, start=start, end=end, kind="macro", mentions=self._mentions(node))
        return OpaqueType(text=text, start=start, end=end, kind=kind, mentions=self._mentions(node))

    def _path_type(self, node: Node) -> TypeExpr:
        leading_colon, segments, qualifier = self._segments(node)
        text = self.text.text(node)
        start, end = self.text.span(node)
        if qualifier is None:
            return PathType(text=text, start=start, end=end, segments=segments, leading_colon=leading_colon)
        inner = _last_named(qualifier)
        self_type: Optional[TypeExpr] = None
        trait: Optional[TypeExpr] = None
        if inner is not None and inner.type == "qualified_type":
            self_type = self.type_expr(self._required(inner, "type"))
            alias = inner.child_by_field_name("alias")
            trait = self.type_expr(alias) if alias is not None else None
        elif inner is not None:
            self_type = self.type_expr(inner)
        return QualifiedPathType(text=text, start=start, end=end, self_type=self_type, trait=trait, segments=segments)

    def _segments(self, node: Node) -> Tuple[bool, List[PathSegment], Optional[Node]]:
        """Split a path node into segments; a `<T as Trait>` head is returned separately."""
        kind = node.type
        if kind in ("generic_type", "generic_type_with_turbofish"):
            leading_colon, segments, qualifier = self._segments(self._required(node, "type"))
            arguments = node.child_by_field_name("type_arguments")
            if segments and arguments is not None:
                segments[-1].args = self._generic_args(arguments)
            return leading_colon, segments, qualifier
        if kind in ("scoped_identifier", "scoped_type_identifier"):
            path = node.child_by_field_name("path")
            name = node.child_by_field_name("name")
            if path is None:
                leading_colon, segments, qualifier = True, [], None
            elif path.type == "bracketed_type":
                leading_colon, segments, qualifier = False, [], path
            else:
                leading_colon, segments, qualifier = self._segments(path)
            if name is not None:
                segments.append(PathSegment(name=self.text.text(name)))
            return leading_colon, segments, qualifier
        return False, [PathSegment(name=self.text.text(node))], None

    def _generic_args(self, node: Node) -> List[TypeExpr]:
        args: List[TypeExpr] = []
        for child in node.named_children:
            kind = child.type
            if kind in _COMMENTS or kind == "trait_bounds":
                continue
            text = self.text.text(child)
            start, end = self.text.span(child)
            if kind == "lifetime":
                args.append(LifetimeArg(text=text, start=start, end=end))
            elif kind == "type_binding":
                name = child.child_by_field_name("name")
                value = child.child_by_field_name("type")
                args.append(
                    BindingArg(
                        text=text,
                        start=start,
                        end=end,
                        name=self.text.text(name) if name is not None else "",
                        value=self.type_expr(value) if value is not None else None,
                    )
                )
            elif kind in _CONST_ARGUMENTS:
                args.append(ConstArg(text=text, start=start, end=end))
            else:
                args.append(self.type_expr(child))
        return args

    def _signature_types(self, node: Node) -> List[TypeExpr]:
        types: List[TypeExpr] = []
        parameters = node.child_by_field_name("parameters")
        for child in parameters.named_children if parameters is not None else []:
            if child.type == "parameter":
                declared = child.child_by_field_name("type")
                if declared is not None:
                    types.append(self.type_expr(declared))
            elif child.type not in _COMMENTS and child.type not in ("attribute_item", "self_parameter", "variadic_parameter"):
                types.append(self.type_expr(child))
        returned = node.child_by_field_name("return_type")
        if returned is not None:
            types.append(self.type_expr(returned))
        return types

    def _bound_list(self, node: Node) -> List[TypeExpr]:
        if node.type == "bounded_type":
            bounds: List[TypeExpr] = []
            for child in node.named_children:
                if child.type not in _COMMENTS:
                    bounds.extend(self._bound_list(child))
            return bounds
        if node.type in ("dynamic_type", "abstract_type"):
            trait = node.child_by_field_name("trait")
            return self._bound_list(trait) if trait is not None else []
        return [self.type_expr(node)]

    def _mentions(self, node: Node) -> List[str]:
        names: List[str] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in _MENTION_NODES:
                names.append(self.text.text(current))
            stack.extend(reversed(current.named_children))
        return names

    # -- match expressions --------------------------------------------------------

    def _matches(self, body: Node) -> List[MatchExpr]:
        """Every `match` expression in a function body, outermost first."""
        found: List[MatchExpr] = []
        stack = [body]
        while stack:
            node = stack.pop()
            if node.type == "match_expression":
                found.append(self._match(node))
            stack.extend(reversed(node.named_children))
        return found

    def _match(self, node: Node) -> MatchExpr:
        arms: List[MatchArm] = []
        block = node.child_by_field_name("body")
        for arm in block.named_children if block is not None else []:
            if arm.type not in ("match_arm", "last_match_arm"):
                continue
            pattern = arm.child_by_field_name("pattern")
            if pattern is None:
                continue
            arms.append(
                MatchArm(
                    pattern=self._arm_pattern(pattern),
                    start=self.text.offset(pattern.start_byte),
                    end=self.text.offset(arm.end_byte),
                )
            )
        start, end = self.text.span(node)
        return MatchExpr(
            location=self.text.location(node, "match"),
            start=start,
            end=end,
            attrs=self._statement_attributes(node),
            arms=arms,
        )

    def _statement_attributes(self, node: Node) -> List[Attribute]:
        """Outer attributes written directly before the statement holding `node`."""
        anchor = node
        if anchor.parent is not None and anchor.parent.type == "expression_statement":
            anchor = anchor.parent
        attrs: List[Attribute] = []
        sibling = anchor.prev_sibling
        while sibling is not None and (sibling.type == "attribute_item" or sibling.type in _COMMENTS):
            if sibling.type == "attribute_item":
                attrs.append(self.attribute(sibling))
            sibling = sibling.prev_sibling
        attrs.reverse()
        return attrs

    def _arm_pattern(self, node: Node) -> Pattern:
        children = [child for child in node.children if child.type not in _COMMENTS]
        target = children[0] if children else node
        if target.type == "|" and len(children) > 1:
            target = children[1]
        return self._pattern(target)

    def _pattern(self, node: Node) -> Pattern:
        kind = node.type
        text = self.text.text(node)
        location = self.text.location(node)
        if kind == "_":
            return Pattern(kind="wildcard", location=location, text=text)
        if kind == "identifier":
            return Pattern(kind="ident", location=location, text=text, path=[text])
        if kind in ("scoped_identifier", "generic_type_with_turbofish"):
            return Pattern(kind="path", location=location, text=text, path=self._path_names(node))
        if kind == "tuple_struct_pattern":
            head = self._required(node, "type")
            return Pattern(kind="tuple_struct", location=self.text.location(head), text=text, path=self._path_names(head))
        if kind in ("captured_pattern", "ref_pattern", "mut_pattern"):
            binding = node.named_children[0] if kind == "captured_pattern" else _last_named(node)
            if binding is not None and binding.type == "identifier":
                name = self.text.text(binding)
                return Pattern(kind="ident", location=self.text.location(binding), text=text, path=[name])
        if kind == "or_pattern":
            alternatives = [child for child in node.named_children if child.type not in _COMMENTS]
            if len(alternatives) == 1:
                return self._pattern(alternatives[0])
        return Pattern(kind="other", location=location, text=text)

    def _path_names(self, node: Node) -> List[str]:
        return [segment.name for segment in self._segments(node)[1]]


def _first_leaf(node: Node) -> Node:
    while node.child_count:
        node = node.children[0]
    return node


def _last_named(node: Node) -> Optional[Node]:
    named = [child for child in node.named_children if child.type not in _COMMENTS]
    return named[-1] if named else None


def _has_child(node: Node, kind: str) -> bool:
    return any(child.type == kind for child in node.children)


__all__ = ["RUST_LANGUAGE", "RustParser", "SourceText", "parse_source", "parse_type"]
