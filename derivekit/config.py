"""Configuration loading for derivekit (.derivekit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".derivekit.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class WrapperConfig:
    """Type names recognised structurally as wrappers."""

    optional: List[str] = field(default_factory=lambda: ["Option"])
    repeated: List[str] = field(default_factory=lambda: ["Vec"])
    phantom: List[str] = field(default_factory=lambda: ["PhantomData"])


@dataclass
class BuilderConfig:
    """Settings for the builder generator."""

    derive: str = "Builder"
    suffix: str = "Builder"


@dataclass
class DebugConfig:
    """Settings for the debug-formatting generator."""

    derive: str = "CustomDebug"
    trait_path: str = "::std::fmt::Debug"


@dataclass
class SortedConfig:
    """Marker attribute names consumed by the order checker."""

    marker: str = "sorted"
    check_marker: str = "sorted::check"


@dataclass
class DeriveKitConfig:
    """Represents the settings defined in .derivekit.yml."""

    root: Path
    wrappers: WrapperConfig = field(default_factory=WrapperConfig)
    builder: BuilderConfig = field(default_factory=BuilderConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)
    sorted: SortedConfig = field(default_factory=SortedConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> DeriveKitConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DeriveKitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DeriveKitConfig(root=root)

    wrapper_data = _as_dict(data.get("wrappers"))
    if wrapper_data:
        config.wrappers = WrapperConfig(
            optional=_as_str_list(wrapper_data.get("optional")) or WrapperConfig().optional,
            repeated=_as_str_list(wrapper_data.get("repeated")) or WrapperConfig().repeated,
            phantom=_as_str_list(wrapper_data.get("phantom")) or WrapperConfig().phantom,
        )

    builder_data = _as_dict(data.get("builder"))
    if builder_data:
        defaults = BuilderConfig()
        config.builder = BuilderConfig(
            derive=_as_str(builder_data.get("derive")) or defaults.derive,
            suffix=_as_str(builder_data.get("suffix")) or defaults.suffix,
        )

    debug_data = _as_dict(data.get("debug"))
    if debug_data:
        defaults_debug = DebugConfig()
        config.debug = DebugConfig(
            derive=_as_str(debug_data.get("derive")) or defaults_debug.derive,
            trait_path=_as_str(debug_data.get("trait_path")) or defaults_debug.trait_path,
        )

    sorted_data = _as_dict(data.get("sorted"))
    if sorted_data:
        defaults_sorted = SortedConfig()
        config.sorted = SortedConfig(
            marker=_as_str(sorted_data.get("marker")) or defaults_sorted.marker,
            check_marker=_as_str(sorted_data.get("check_marker")) or defaults_sorted.check_marker,
        )

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME and config_path.suffix not in (".yml", ".yaml"):
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "BuilderConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DebugConfig",
    "DeriveKitConfig",
    "SortedConfig",
    "WrapperConfig",
    "load_config",
]
