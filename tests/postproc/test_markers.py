"""Tests for derivekit.postproc markers and diagnostics."""

from __future__ import annotations

from typing import List

import pytest

from derivekit.errors import Location
from derivekit.models import Diagnostic
from derivekit.postproc.diagnostics import DiagnosticLatch, render_compile_error
from derivekit.postproc.markers import (
    MarkerStripper,
    SourceEdit,
    apply_edits,
    removal_span,
    strip_attributes,
)
from derivekit.syntax.nodes import Attribute
from derivekit.syntax.parser import parse_source
from tests._fixtures.rust_sources import rust


def _attrs(source: str, path: str) -> List[Attribute]:
    found: List[Attribute] = []
    for item in parse_source(source).walk():
        found.extend(attr for attr in item.attrs if attr.path == path)
    return found


def test_apply_edits_back_to_front() -> None:
    source = "abcdef"
    edits = [SourceEdit(1, 2), SourceEdit(4, 4, "XY"), SourceEdit(5, 6, "!")]

    assert apply_edits(source, edits) == "acdXYe!"


def test_apply_edits_rejects_overlaps() -> None:
    with pytest.raises(ValueError):
        apply_edits("abcdef", [SourceEdit(0, 3), SourceEdit(2, 4)])


def test_removal_span_takes_whole_line_when_alone() -> None:
    source = "a\n    #[sorted]\nenum E {}\n"
    start = source.index("#")

    assert removal_span(source, start, start + len("#[sorted]")) == (2, 16)


def test_removal_span_consumes_trailing_spaces_inline() -> None:
    source = "#[sorted]  enum E {}"

    assert removal_span(source, 0, 9) == (0, 11)


def test_strip_attributes_is_idempotent() -> None:
    source = rust(
        """
        #[sorted]
        pub enum Error {
            A,
            B,
        }

        #[sorted] enum Inline { A }
        """
    )

    once = strip_attributes(source, _attrs(source, "sorted"))
    twice = strip_attributes(once, _attrs(once, "sorted"))

    assert once == "pub enum Error {\n    A,\n    B,\n}\n\nenum Inline { A }\n"
    assert twice == once


def test_rewrite_derive_drops_consumed_names() -> None:
    source = "#[derive(Debug, Builder, Clone)]\nstruct A { x: u8 }\n"
    (attr,) = _attrs(source, "derive")
    stripper = MarkerStripper(source)

    stripper.rewrite_derive(attr, ["Builder"])

    assert stripper.apply() == "#[derive(Debug, Clone)]\nstruct A { x: u8 }\n"


def test_rewrite_derive_removes_emptied_attribute() -> None:
    source = "#[derive(Builder, derive_more::CustomDebug)]\nstruct A { x: u8 }\n"
    (attr,) = _attrs(source, "derive")
    stripper = MarkerStripper(source)

    stripper.rewrite_derive(attr, ["Builder", "CustomDebug"])

    assert stripper.apply() == "struct A { x: u8 }\n"


def test_rewrite_derive_leaves_unrelated_lists_alone() -> None:
    source = "#[derive(Debug)]\nstruct A;\n"
    (attr,) = _attrs(source, "derive")
    stripper = MarkerStripper(source)

    stripper.rewrite_derive(attr, ["Builder"])

    assert stripper.edits == []


def test_removing_the_same_attribute_twice_is_a_single_edit() -> None:
    source = "#[sorted]\nenum E { A }\n"
    (attr,) = _attrs(source, "sorted")
    stripper = MarkerStripper(source)

    stripper.remove(attr)
    stripper.remove(attr)

    assert len(stripper.edits) == 1
    assert stripper.apply() == "enum E { A }\n"


def test_latch_keeps_first_diagnostic() -> None:
    latch = DiagnosticLatch(path="src/lib.rs")

    assert latch.report("first", Location(3, 1)) is True
    assert latch.report("second", Location(4, 1)) is False

    assert latch.latched
    assert latch.first == Diagnostic("first", Location(3, 1), "src/lib.rs")
    assert [diagnostic.message for diagnostic in latch.discarded] == ["second"]
    assert latch.first.render() == "src/lib.rs:3:1: error: first"


def test_render_compile_error_escapes_message() -> None:
    diagnostic = Diagnostic('bad "quote"', Location(1, 1))

    assert render_compile_error(diagnostic) == 'compile_error!("bad \\"quote\\"");'
