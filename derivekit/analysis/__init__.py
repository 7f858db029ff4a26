"""Structural analysis shared by the generators and the order checker."""

from __future__ import annotations

from .bounds import GeneratedPredicates, infer_bounds
from .descriptor import extract_descriptor
from .ordering import OrderingVerdict, check_enum, check_function, check_order
from .shapes import ShapeClassification, ShapeKind, WrapperSet, classify

__all__ = [
    "GeneratedPredicates",
    "OrderingVerdict",
    "ShapeClassification",
    "ShapeKind",
    "WrapperSet",
    "check_enum",
    "check_function",
    "check_order",
    "classify",
    "extract_descriptor",
    "infer_bounds",
]
