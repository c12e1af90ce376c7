"""Configuration loading for capibara (.capibara.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .constants import CONFIG_FILENAME, DEFAULT_MARKER, DEFAULT_OUTPUT
from .errors import ConfigError


@dataclass
class CapibaraConfig:
    """Represents the settings defined in .capibara.yml."""

    root: Path
    marker: str = DEFAULT_MARKER
    output: Path = Path(DEFAULT_OUTPUT)
    reference_url: Optional[str] = None
    indent: Optional[int] = None
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> CapibaraConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CapibaraConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = CapibaraConfig(root=root)

    marker = _as_str(data.get("marker"))
    if marker:
        if "/" in marker:
            raise ConfigError("marker must be a bare filename")
        config.marker = marker

    output = _as_str(data.get("output"))
    if output:
        output_path = Path(output).expanduser()
        config.output = output_path if output_path.is_absolute() else root / output_path

    config.reference_url = _as_str(data.get("reference_url"))
    config.indent = _as_int(data.get("indent"))
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CapibaraConfig", "ConfigError", "load_config"]
