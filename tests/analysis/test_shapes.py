"""Tests for derivekit.analysis.shapes."""

from __future__ import annotations

import pytest

from derivekit.analysis.shapes import ShapeKind, WrapperSet, classify
from derivekit.syntax.parser import parse_type


@pytest.mark.parametrize(
    "declared, kind, inner",
    [
        ("String", ShapeKind.BARE, None),
        ("Option<String>", ShapeKind.OPTIONAL, "String"),
        ("Vec<u8>", ShapeKind.REPEATED, "u8"),
        ("Option<Vec<u8>>", ShapeKind.OPTIONAL, "Vec<u8>"),
        ("std::option::Option<u8>", ShapeKind.OPTIONAL, "u8"),
        ("Vec<T::Value>", ShapeKind.REPEATED, "T::Value"),
        ("Result<u8, Error>", ShapeKind.BARE, None),
        ("HashMap<K, V>", ShapeKind.BARE, None),
        ("Option", ShapeKind.BARE, None),
        ("Option<'a>", ShapeKind.BARE, None),
        ("&'a Option<u8>", ShapeKind.BARE, None),
        ("Vec<u8, Global>", ShapeKind.BARE, None),
    ],
)
def test_classify_by_head_name_and_single_argument(declared: str, kind: ShapeKind, inner: str | None) -> None:
    shape = classify(parse_type(declared))

    assert shape.kind is kind
    assert shape.declared.text == declared
    assert (shape.inner.text if shape.inner is not None else None) == inner


def test_classify_uses_pluggable_wrapper_names() -> None:
    wrappers = WrapperSet.from_names(optional=["Maybe"], repeated=["SmallVec", "Vec"])

    assert classify(parse_type("Maybe<u8>"), wrappers).is_optional
    assert classify(parse_type("SmallVec<[u8; 4]>"), wrappers).is_repeated
    assert classify(parse_type("Option<u8>"), wrappers).is_bare


def test_optional_check_takes_precedence() -> None:
    wrappers = WrapperSet.from_names(optional=["Wrap"], repeated=["Wrap"])

    assert classify(parse_type("Wrap<u8>"), wrappers).is_optional
