"""Core module initialization."""

from .config_manager import ConfigManager, ConfigurationError, PluginConfig
from .logging_config import redact, setup_logging

__all__ = [
    "ConfigManager",
    "ConfigurationError",
    "PluginConfig",
    "redact",
    "setup_logging",
]
