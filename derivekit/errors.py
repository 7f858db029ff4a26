"""Exception taxonomy shared by the parser, analyzers and generators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Source position a diagnostic is bound to."""

    line: int
    column: int
    label: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class DeriveError(Exception):
    """Base class for generation-time failures bound to a source location."""

    def __init__(self, message: str, location: Location | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class ParseError(DeriveError):
    """Raised when Rust source cannot be parsed."""

    def __init__(self, message: str, location: Location | None = None, *, path: str | None = None) -> None:
        super().__init__(message, location)
        self.path = path

    def in_file(self, path: str) -> "ParseError":
        """Copy of this error attributed to the file at `path`."""
        return ParseError(self.message, self.location, path=path)

    def __str__(self) -> str:
        if self.path is None:
            return super().__str__()
        if self.location is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}:{self.location}: {self.message}"


class StructuralError(DeriveError):
    """Raised when a declaration has the wrong kind for the requested generator."""

    TUPLE_RECORD = "tuple_record"
    UNSUPPORTED_KIND = "unsupported_kind"

    def __init__(self, message: str, location: Location | None = None, *, kind: str) -> None:
        super().__init__(message, location)
        self.kind = kind


class DirectiveSyntaxError(DeriveError):
    """Raised when a field or type directive is malformed."""


class UnsupportedPatternError(DeriveError):
    """Raised when a match arm pattern cannot be given a comparable name."""


__all__ = [
    "DeriveError",
    "DirectiveSyntaxError",
    "Location",
    "ParseError",
    "StructuralError",
    "UnsupportedPatternError",
]
