"""Source rewriting helpers applied after analysis and generation."""

from __future__ import annotations

from .diagnostics import DiagnosticLatch, render_compile_error
from .markers import MarkerStripper, SourceEdit, apply_edits

__all__ = [
    "DiagnosticLatch",
    "MarkerStripper",
    "SourceEdit",
    "apply_edits",
    "render_compile_error",
]
