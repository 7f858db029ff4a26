"""Base classes for derive generator plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, FrozenSet

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..analysis.descriptor import extract_descriptor
from ..config import DeriveKitConfig
from ..models import TypeDescriptor
from ..syntax.nodes import Item


class Generator(ABC):
    """Contract for generators that expand a record declaration into Rust code."""

    template_name: str = ""
    helper_attributes: FrozenSet[str] = frozenset()

    def __init__(
        self,
        config: DeriveKitConfig | None = None,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        self.config = config or DeriveKitConfig(root=Path.cwd())
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    @property
    @abstractmethod
    def derive(self) -> str:
        """Name inside `#[derive(...)]` that triggers this generator."""

    @abstractmethod
    def generate(self, descriptor: TypeDescriptor) -> str:
        """Return the Rust declarations to append after the record."""

    def expand(self, item: Item) -> str:
        """Extract the descriptor for `item` and generate code for it."""
        descriptor = extract_descriptor(item, derive=self.derive)
        return self.generate(descriptor)

    def render(self, context: Dict[str, Any]) -> str:
        template = self.env.get_template(self.template_name)
        return template.render(**context).rstrip() + "\n"


__all__ = ["Generator"]
