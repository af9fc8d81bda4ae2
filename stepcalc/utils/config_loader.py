"""Configuration loader for YAML-based engine settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = "configs/engine_config.yml"


@dataclass
class IntegrationSettings:
    grid_size: int = 100
    max_grid_size: int = 1000


@dataclass
class TaylorSettings:
    default_order: int = 4
    max_order: int = 12


@dataclass
class SecuritySettings:
    max_expression_length: int = 400


@dataclass
class ApiSettings:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class EngineConfig:
    version: str = "0.1.0"
    integration: IntegrationSettings = field(default_factory=IntegrationSettings)
    taylor: TaylorSettings = field(default_factory=TaylorSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    log_level: str = "INFO"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("Configuration file not found: {}".format(path))
    with path.open("r", encoding="utf-8") as handle:
        try:
            loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError("Invalid YAML in {}: {}".format(path, exc)) from exc
    if not isinstance(loaded, dict):
        raise ConfigError("Configuration root must be a mapping in {}".format(path))
    return loaded


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {}) or {}
    if not isinstance(section, dict):
        raise ConfigError("'{}' must be a mapping".format(name))
    return section


def load_engine_config(path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    data = _load_yaml(Path(path))
    integration = _section(data, "integration")
    taylor = _section(data, "taylor")
    security = _section(data, "security")
    api = _section(data, "api")
    logging_section = _section(data, "logging")

    config = EngineConfig(
        version=str(data.get("version", "0.1.0")),
        integration=IntegrationSettings(
            grid_size=int(integration.get("grid_size", 100)),
            max_grid_size=int(integration.get("max_grid_size", 1000)),
        ),
        taylor=TaylorSettings(
            default_order=int(taylor.get("default_order", 4)),
            max_order=int(taylor.get("max_order", 12)),
        ),
        security=SecuritySettings(
            max_expression_length=int(security.get("max_expression_length", 400)),
        ),
        api=ApiSettings(host=str(api.get("host", "0.0.0.0")), port=int(api.get("port", 8000))),
        log_level=str(logging_section.get("level", "INFO")),
    )

    if config.integration.grid_size <= 0:
        raise ConfigError("integration.grid_size must be positive")
    if config.taylor.max_order < 0:
        raise ConfigError("taylor.max_order must be non-negative")
    return config
