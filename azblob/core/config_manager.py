"""
Configuration management for azblob-plugin.

Handles loading, validation, and access to configuration settings.
"""

import os
import re
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from .logging_config import redact

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ConfigurationError(Exception):
    """Raised when the loaded configuration cannot be used to serve requests."""
    pass


# Azure container naming rules: 3-63 chars, lowercase letters, digits and
# single hyphens, starting and ending with a letter or digit.
CONTAINER_NAME_PATTERN = re.compile(r'^[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]$')


class StorageConfig(BaseModel):
    """Azure Storage connection settings."""
    connection_string: Optional[str] = Field(
        default=None,
        description="Azure Storage connection string; must carry an AccountKey to sign SAS tokens"
    )
    container_name: str = Field(
        default="plugin-blobs",
        description="Container that receives every provisioned blob"
    )

    @field_validator("container_name")
    @classmethod
    def validate_container_name(cls, v: str) -> str:
        """Validate container name against Azure rules."""
        if not CONTAINER_NAME_PATTERN.match(v):
            raise ValueError(
                "Container name must be 3-63 characters of lowercase letters, numbers, "
                "and single hyphens, and must start/end with letter or number"
            )
        return v


class RetryConfig(BaseModel):
    """Retry settings for container provisioning and append blob creation."""
    max_attempts: int = Field(default=3, ge=1)
    initial_backoff: float = Field(default=0.5, ge=0.0, description="Seconds")
    max_backoff: float = Field(default=8.0, ge=0.0, description="Seconds")
    backoff_multiplier: float = Field(default=2.0, ge=1.0)


class ProvisioningConfig(BaseModel):
    """Credential issuance policy."""
    max_ttl_minutes: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Optional upper bound on the requested TTL; unbounded when unset"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)


class ManifestConfig(BaseModel):
    """Static fields of the AI plugin manifest."""
    name_for_model: str = "azblob"
    name_for_human: str = "azblob"
    description_for_model: str = "Creates writeable azure blobs."
    description_for_human: str = "Creates Block, Page or Append blobs on Azure"
    contact_email: str = ""
    logo_url: str = ""
    legal_info_url: str = ""


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'azblob.services.blob': 'DEBUG'}"
    )

    model_config = ConfigDict(use_enum_values=True)


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 7071
    route_prefix: str = Field(
        default="api",
        description="Path prefix for the blob creation routes"
    )

    @field_validator("route_prefix")
    @classmethod
    def normalize_route_prefix(cls, v: str) -> str:
        """Strip surrounding slashes so the prefix can be joined safely."""
        return v.strip("/")


class PluginConfig(BaseModel):
    """Main azblob-plugin configuration schema."""

    storage: StorageConfig = Field(default_factory=StorageConfig)

    server: ServerConfig = Field(default_factory=ServerConfig)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    provisioning: ProvisioningConfig = Field(default_factory=ProvisioningConfig)

    manifest: ManifestConfig = Field(default_factory=ManifestConfig)

    model_config = ConfigDict(use_enum_values=True)


class ConfigManager:
    """
    Manages azblob-plugin configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (AZBLOB_*)
    3. Configuration file (YAML/JSON or Azure Functions local.settings.json)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[PluginConfig] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> PluginConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated PluginConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.info("Loading azblob-plugin configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.info(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = PluginConfig(**config_dict)
            logger.info("Configuration validated successfully")
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                data = json.load(f)
                if "Values" in data:
                    return self._from_function_settings(data["Values"])
                return data
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    @staticmethod
    def _from_function_settings(values: Dict[str, Any]) -> Dict[str, Any]:
        """Translate the Values block of an Azure Functions local.settings.json."""
        storage: Dict[str, Any] = {}
        if conn_str := values.get("StorageConnectionString"):
            storage["connection_string"] = conn_str
        if container := values.get("ContainerName"):
            storage["container_name"] = container
        return {"storage": storage} if storage else {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        # Storage configuration
        conn_str = os.getenv("AZBLOB_STORAGE_CONNECTION_STRING") or os.getenv("StorageConnectionString")
        if conn_str:
            config.setdefault("storage", {})["connection_string"] = conn_str
        container = os.getenv("AZBLOB_CONTAINER_NAME") or os.getenv("ContainerName")
        if container:
            config.setdefault("storage", {})["container_name"] = container

        # Server configuration
        if host := os.getenv("AZBLOB_HOST"):
            config.setdefault("server", {})["host"] = host
        if port := os.getenv("AZBLOB_PORT"):
            config.setdefault("server", {})["port"] = int(port)
        if (prefix := os.getenv("AZBLOB_ROUTE_PREFIX")) is not None:
            config.setdefault("server", {})["route_prefix"] = prefix

        # Logging configuration
        if log_level := os.getenv("AZBLOB_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_format := os.getenv("AZBLOB_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()
        if log_file := os.getenv("AZBLOB_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        # Provisioning policy
        if max_ttl := os.getenv("AZBLOB_MAX_TTL_MINUTES"):
            config.setdefault("provisioning", {})["max_ttl_minutes"] = float(max_ttl)

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration (with sensitive data redacted)."""
        if not self._config:
            return

        logger.info(f"Active configuration: {json.dumps(redact_config(self._config), indent=2)}")


def redact_config(config: PluginConfig) -> Dict[str, Any]:
    """Dump configuration with the storage account key masked."""
    config_dict = config.model_dump()

    conn_str = config_dict["storage"].get("connection_string")
    if conn_str:
        config_dict["storage"]["connection_string"] = redact(conn_str)

    return config_dict
