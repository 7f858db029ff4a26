"""First-error latching and `compile_error!` rendering."""

from __future__ import annotations

from typing import List, Optional

from ..errors import DeriveError, Location
from ..models import Diagnostic
from ..syntax.tokens import quote_string


class DiagnosticLatch:
    """Keeps the first diagnostic reported for one item; later ones are recorded but not surfaced."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self.first: Optional[Diagnostic] = None
        self.discarded: List[Diagnostic] = []

    @property
    def latched(self) -> bool:
        return self.first is not None

    def report(self, message: str, location: Location) -> bool:
        diagnostic = Diagnostic(message=message, location=location, path=self.path)
        if self.first is None:
            self.first = diagnostic
            return True
        self.discarded.append(diagnostic)
        return False

    def report_error(self, error: DeriveError, fallback: Location) -> bool:
        return self.report(error.message, error.location or fallback)


def render_compile_error(diagnostic: Diagnostic) -> str:
    return f"compile_error!({quote_string(diagnostic.message)});"


__all__ = ["DiagnosticLatch", "render_compile_error"]
