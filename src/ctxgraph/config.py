"""Configuration management for ctxgraph."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ctxgraph.exceptions import ConfigError

CTXGRAPH_DIR = ".ctxgraph"
CONFIG_FILE = "config.json"


class ClassifierConfig(BaseModel):
    """Edge classifier configuration."""

    # Host-specific spellings mapped onto the four call kinds
    kind_aliases: dict[str, str] = Field(
        default_factory=lambda: {
            "interface": "virtual",
            "invokevirtual": "virtual",
            "invokeinterface": "virtual",
            "invokestatic": "static",
            "invokespecial": "special",
        }
    )
    strict: bool = False  # warn on every instruction degraded to "invalid"


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Closest directory at or above `start` holding a .ctxgraph directory."""
    here = (start or Path.cwd()).resolve()
    for candidate in (here, *here.parents):
        if (candidate / CTXGRAPH_DIR).is_dir():
            return candidate
    return None


def get_ctxgraph_dir(root: Path) -> Path:
    """Get the .ctxgraph directory for a project root."""
    return root / CTXGRAPH_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .ctxgraph/config.json."""
    config_path = get_ctxgraph_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return ProjectConfig(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
    return ProjectConfig(name=root.name)


def save_config(root: Path, config: ProjectConfig) -> Path:
    """Write `config` to .ctxgraph/config.json and return the file path."""
    config_path = get_ctxgraph_dir(root) / CONFIG_FILE
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(config.model_dump_json(indent=2))
    return config_path


def _section(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Resolve a dotted key to (containing dict, leaf name); KeyError if absent."""
    *parents, leaf = key.split(".")
    section = data
    for name in parents:
        section = section.get(name)
        if not isinstance(section, dict):
            raise KeyError(key)
    if leaf not in section:
        raise KeyError(key)
    return section, leaf


def get_config_value(config: ProjectConfig, key: str) -> Any:
    """Read a dotted key such as 'classifier.strict'."""
    section, leaf = _section(config.model_dump(), key)
    return section[leaf]


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Return a copy of `config` with the dotted `key` replaced by `value`.

    Raises:
        KeyError: `key` names no setting.
        ConfigError: `value` has the wrong type for that setting.
    """
    data = config.model_dump()
    section, leaf = _section(data, key)
    section[leaf] = value
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        reason = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"Invalid value {value!r} for {key}: {reason}") from e
