"""Utility helpers for stepcalc."""

from .config_loader import ConfigError, EngineConfig, load_engine_config
from .exporters import export_latex, export_notebook
from .logger import configure_logging, get_logger

__all__ = [
    "ConfigError",
    "EngineConfig",
    "load_engine_config",
    "export_latex",
    "export_notebook",
    "get_logger",
    "configure_logging",
]
