"""Derive generator implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, Sequence, Set

from ..config import DeriveKitConfig
from .base import Generator
from .builder import BuilderGenerator
from .debug import DebugGenerator

_ENTRY_POINT_GROUP = "derivekit.generators"

GeneratorFactory = Callable[[DeriveKitConfig | None], Generator]

_BUILTIN_FACTORIES: dict[str, GeneratorFactory] = {
    "builder": BuilderGenerator,
    "debug": DebugGenerator,
}


def discover_generators(
    config: DeriveKitConfig | None = None,
    enabled: Sequence[str] | None = None,
) -> Dict[str, Generator]:
    """Return instantiated generators keyed by the derive name that triggers them."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    generators: Dict[str, Generator] = {}
    seen: Set[str] = set()

    def _add(name: str, factory: GeneratorFactory) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory(config)
        if not isinstance(instance, Generator):
            raise TypeError(f"Generator factory for '{name}' did not return a Generator instance")
        if instance.derive in generators:
            raise ValueError(f"Derive name '{instance.derive}' is claimed by more than one generator")
        generators[instance.derive] = instance
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load generator entry point '{entry.name}': {exc}") from exc

        def _factory(cfg: DeriveKitConfig | None, obj: object = loaded) -> Generator:
            return _coerce_generator(obj, cfg)

        _add(entry.name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown generators requested: {missing}")

    return generators


def _coerce_generator(obj: object, config: DeriveKitConfig | None) -> Generator:
    if isinstance(obj, Generator):
        return obj
    if isinstance(obj, type) and issubclass(obj, Generator):
        return obj(config)
    if callable(obj):
        instance = obj(config)
        if isinstance(instance, Generator):
            return instance
    raise TypeError("Generator entry point must be a Generator subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BuilderGenerator",
    "DebugGenerator",
    "Generator",
    "discover_generators",
]
