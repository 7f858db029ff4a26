"""Token values carried by attribute arguments, plus Rust literal helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from ..errors import Location

IDENT = "ident"
LIFETIME = "lifetime"
STRING = "string"
CHAR = "char"
NUMBER = "number"
PUNCT = "punct"

_IDENTIFIER_TEXT = re.compile(r"^(?:r#)?[^\W\d]\w*$")
_RAW_STRING = re.compile(r'^[bc]?r(#*)"(.*)"\1$', re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "0": "\0", "'": "'", '"': '"'}
_QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


@dataclass
class Token:
    """A leaf of an attribute token tree with its source span."""

    kind: str
    text: str
    start: int
    end: int
    line: int
    column: int
    value: Optional[str] = None

    def is_punct(self, text: str) -> bool:
        return self.kind == PUNCT and self.text == text

    def is_ident(self, text: str | None = None) -> bool:
        if self.kind != IDENT:
            return False
        return text is None or self.text == text

    @property
    def location(self) -> Location:
        return Location(self.line, self.column, self.text)


def leaf_kind(node_type: str, text: str) -> str:
    """Token kind for a tree-sitter leaf or literal node."""
    if node_type in ("string_literal", "raw_string_literal"):
        return STRING
    if node_type == "char_literal":
        return CHAR
    if node_type in ("integer_literal", "float_literal"):
        return NUMBER
    if node_type == "lifetime":
        return LIFETIME
    if _IDENTIFIER_TEXT.match(text):
        return IDENT
    return PUNCT


def literal_value(text: str) -> str:
    """Decode the contents of a string or char literal as written in source."""
    raw = _RAW_STRING.match(text)
    if raw:
        return raw.group(2)
    body = text[1:] if text[:1] in ("b", "c") else text
    return unescape(body[1:-1])


def unescape(body: str) -> str:
    out: List[str] = []
    cursor = 0
    while cursor < len(body):
        char = body[cursor]
        if char != "\\":
            out.append(char)
            cursor += 1
            continue
        cursor += 1
        if cursor >= len(body):
            break
        code = body[cursor]
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
            cursor += 1
        elif code == "x":
            out.append(chr(int(body[cursor + 1 : cursor + 3], 16)))
            cursor += 3
        elif code == "u":
            close = body.index("}", cursor)
            out.append(chr(int(body[cursor + 2 : close].replace("_", ""), 16)))
            cursor = close + 1
        elif code == "\n":
            # line continuation swallows the newline and leading whitespace
            cursor += 1
            while cursor < len(body) and body[cursor] in " \t\r\n":
                cursor += 1
        else:
            out.append(code)
            cursor += 1
    return "".join(out)


def quote_string(value: str) -> str:
    """Render `value` as a Rust string literal."""
    out: List[str] = ['"']
    for char in value:
        if char in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{{{ord(char):x}}}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


__all__ = [
    "CHAR",
    "IDENT",
    "LIFETIME",
    "NUMBER",
    "PUNCT",
    "STRING",
    "Token",
    "leaf_kind",
    "literal_value",
    "quote_string",
    "unescape",
]
