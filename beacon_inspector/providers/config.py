"""Configuration system for beacon decoding.

This module provides configuration management for provider selection and
output settings, including YAML loading, validation, and environment
variable overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from ..errors import ConfigurationError


logger = logging.getLogger(__name__)

ENV_PREFIX = "BEACON_INSPECTOR_"


class DecoderConfig(BaseModel):
    """Root configuration for beacon decoding."""

    enabled_providers: List[str] = Field(
        default_factory=list,
        description="Provider keys to decode (empty list means all providers)"
    )

    output_format: str = Field(
        default="json",
        description="Output format for decoded beacons"
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level"
    )

    @field_validator('output_format')
    @classmethod
    def validate_output_format(cls, v):
        """Validate output format."""
        v = v.lower()
        if v not in ['json', 'yaml', 'text']:
            raise ValueError("output_format must be one of: json, yaml, text")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate logging level name."""
        v = v.upper()
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError("log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v

    @field_validator('enabled_providers', mode='before')
    @classmethod
    def split_providers(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [key.strip() for key in v.split(",") if key.strip()]
        return v


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[DecoderConfig] = None
        self._overrides: Dict[str, Any] = {}

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> DecoderConfig:
        """Load configuration from file, environment and overrides.

        Args:
            config_path: Optional override for config file path

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        if config_path:
            self.config_path = Path(config_path)

        config_data: Dict[str, Any] = {}

        # Load from file if specified
        if self.config_path:
            if not self.config_path.exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            try:
                with open(self.config_path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e

            if not isinstance(config_data, dict):
                raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")
            logger.debug("Loaded configuration from %s", self.config_path)

        # Environment variables, then explicit overrides
        config_data.update(self._load_environment_variables())
        config_data.update(self._overrides)

        try:
            self._config = DecoderConfig(**config_data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return self._config

    def get_config(self) -> DecoderConfig:
        """Get current configuration, loading default if needed."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def set_override(self, key: str, value: Any) -> None:
        """Set a configuration override applied on the next load.

        Args:
            key: Configuration key to override
            value: Override value
        """
        self._overrides[key] = value
        self._config = None

    def validate_config(self, config_data: Dict[str, Any]) -> List[str]:
        """Validate configuration data without loading.

        Args:
            config_data: Configuration data to validate

        Returns:
            List of validation errors
        """
        errors = []

        try:
            DecoderConfig(**config_data)
        except (TypeError, ValueError) as e:
            errors.append(str(e))

        return errors

    def create_default_config(self, output_path: Union[str, Path]) -> None:
        """Create default configuration file.

        Args:
            output_path: Path where to write the default config
        """
        config_dict = DecoderConfig().model_dump()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}

        if env_providers := os.getenv(f'{ENV_PREFIX}PROVIDERS'):
            env_config['enabled_providers'] = env_providers

        if env_format := os.getenv(f'{ENV_PREFIX}FORMAT'):
            env_config['output_format'] = env_format

        if env_level := os.getenv(f'{ENV_PREFIX}LOG_LEVEL'):
            env_config['log_level'] = env_level

        return env_config


def load_config(config_path: Optional[Union[str, Path]] = None, **overrides: Any) -> DecoderConfig:
    """Load configuration from an optional file plus overrides.

    Args:
        config_path: Optional path to a YAML configuration file
        **overrides: Values taking precedence over file and environment

    Returns:
        Loaded configuration
    """
    manager = ConfigManager(config_path)
    for key, value in overrides.items():
        if value is not None:
            manager.set_override(key, value)
    return manager.load_config()
