"""Stripping of consumed attributes and splicing of generated code."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

from ..syntax.tokens import IDENT, PUNCT, Token
from ..syntax.nodes import Attribute

DERIVE_ATTRIBUTE = "derive"


@dataclass(frozen=True)
class SourceEdit:
    """Replace `source[start:end]` with `replacement` (insert when start == end)."""

    start: int
    end: int
    replacement: str = ""


def apply_edits(source: str, edits: Iterable[SourceEdit]) -> str:
    """Apply non-overlapping edits, back to front so offsets stay valid."""
    ordered = sorted(edits, key=lambda edit: (edit.start, edit.end), reverse=True)
    result = source
    boundary = len(source)
    for edit in ordered:
        if edit.end > boundary:
            raise ValueError(f"Overlapping source edits at offset {edit.start}")
        result = result[: edit.start] + edit.replacement + result[edit.end :]
        boundary = edit.start
    return result


def removal_span(source: str, start: int, end: int) -> Tuple[int, int]:
    """Widen an attribute span so removing it leaves no stray whitespace.

    An attribute alone on its line takes the whole line with it; otherwise the
    spaces following it are consumed.
    """
    line_start = source.rfind("\n", 0, start) + 1
    line_end = source.find("\n", end)
    if line_end == -1:
        line_end = len(source)
    before = source[line_start:start]
    after = source[end:line_end]
    if not before.strip() and not after.strip():
        return line_start, min(line_end + 1, len(source))
    cursor = end
    while cursor < len(source) and source[cursor] in " \t":
        cursor += 1
    return start, cursor


def derive_entries(attr: Attribute) -> List[List[Token]]:
    """Split the argument tokens of a `derive` attribute on top-level commas."""
    entries: List[List[Token]] = []
    current: List[Token] = []
    depth = 0
    for token in attr.args:
        if token.kind == PUNCT and token.text in ("(", "[", "{", "<"):
            depth += 1
        elif token.kind == PUNCT and token.text in (")", "]", "}", ">"):
            depth -= 1
        if token.is_punct(",") and depth == 0:
            if current:
                entries.append(current)
            current = []
            continue
        current.append(token)
    if current:
        entries.append(current)
    return entries


def entry_name(entry: List[Token]) -> str:
    """The final path segment of a derive entry, e.g. `Builder` for `my::Builder`."""
    idents = [token.text for token in entry if token.kind == IDENT]
    return idents[-1] if idents else ""


class MarkerStripper:
    """Collects attribute removals and code insertions for one source file."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.edits: List[SourceEdit] = []
        self._removed: Set[Tuple[int, int]] = set()

    def remove(self, attr: Attribute) -> None:
        key = (attr.start, attr.end)
        if key in self._removed:
            return
        self._removed.add(key)
        start, end = removal_span(self.source, attr.start, attr.end)
        self.edits.append(SourceEdit(start, end))

    def remove_all(self, attrs: Iterable[Attribute], paths: Iterable[str]) -> int:
        wanted = set(paths)
        removed = 0
        for attr in attrs:
            if attr.path in wanted:
                self.remove(attr)
                removed += 1
        return removed

    def rewrite_derive(self, attr: Attribute, consumed: Iterable[str]) -> None:
        """Drop consumed names from a `derive` list, removing it when it empties."""
        if (attr.start, attr.end) in self._removed:
            return
        dropped = set(consumed)
        entries = derive_entries(attr)
        kept = [entry for entry in entries if entry_name(entry) not in dropped]
        if len(kept) == len(entries):
            return
        if not kept:
            self.remove(attr)
            return
        names = ", ".join(self.source[entry[0].start : entry[-1].end] for entry in kept)
        prefix = "#![" if attr.inner else "#["
        self._removed.add((attr.start, attr.end))
        self.edits.append(SourceEdit(attr.start, attr.end, f"{prefix}{DERIVE_ATTRIBUTE}({names})]"))

    def insert_after(self, offset: int, text: str) -> None:
        self.edits.append(SourceEdit(offset, offset, text))

    def apply(self) -> str:
        return apply_edits(self.source, self.edits)


def strip_attributes(source: str, attrs: Iterable[Attribute]) -> str:
    """Remove `attrs` from `source` in one pass."""
    stripper = MarkerStripper(source)
    for attr in attrs:
        stripper.remove(attr)
    return stripper.apply()


__all__ = [
    "DERIVE_ATTRIBUTE",
    "MarkerStripper",
    "SourceEdit",
    "apply_edits",
    "derive_entries",
    "entry_name",
    "removal_span",
    "strip_attributes",
]
