"""Configuration loading for wikisections (.wikisections.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import DEFAULT_SECTION_TITLE
from .sections.ids import ID_STRATEGIES
from .sections.markers import TITLE_STYLES

CONFIG_FILENAME = ".wikisections.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class StoreConfig:
    """Where the page store keeps its JSON document."""

    path: Path


@dataclass
class SectionsConfig:
    """Marker grammar and section defaults."""

    title_grammar: str = "extended"
    id_strategy: str = "counter"
    default_title: str = DEFAULT_SECTION_TITLE


@dataclass
class ServiceConfig:
    """Bind address for service mode."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class WikiConfig:
    """Represents the settings defined in .wikisections.yml."""

    root: Path
    store: StoreConfig
    sections: SectionsConfig = field(default_factory=SectionsConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


def default_config(root: Path) -> WikiConfig:
    return WikiConfig(root=root, store=StoreConfig(path=root / "wiki.json"))


def load_config(config_path: Path) -> WikiConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return default_config(root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = default_config(root)

    store_data = _as_dict(data.get("store"))
    store_path = _as_str(store_data.get("path"))
    if store_path:
        config.store.path = (root / Path(store_path).expanduser()).resolve()

    sections_data = _as_dict(data.get("sections"))
    if sections_data:
        title_grammar = _as_str(sections_data.get("title_grammar"))
        if title_grammar is not None:
            if title_grammar not in TITLE_STYLES:
                raise ConfigError(
                    f"sections.title_grammar must be one of {', '.join(TITLE_STYLES)}"
                )
            config.sections.title_grammar = title_grammar
        id_strategy = _as_str(sections_data.get("id_strategy"))
        if id_strategy is not None:
            if id_strategy not in ID_STRATEGIES:
                raise ConfigError(
                    f"sections.id_strategy must be one of {', '.join(ID_STRATEGIES)}"
                )
            config.sections.id_strategy = id_strategy
        default_title = _as_str(sections_data.get("default_title"))
        if default_title and default_title.strip():
            config.sections.default_title = default_title.strip()

    service_data = _as_dict(data.get("service"))
    if service_data:
        host = _as_str(service_data.get("host"))
        if host:
            config.service.host = host
        port = _as_int(service_data.get("port"))
        if port is not None:
            if not 0 < port < 65536:
                raise ConfigError("service.port must be between 1 and 65535")
            config.service.port = port

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
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


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
