"""
Configuration management for the directory crawler.
"""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional

from jsonschema import validate, ValidationError as SchemaValidationError

from directory_crawler.utils.errors import ConfigurationError, ValidationError


ENV_PREFIX = "DIRECTORY_CRAWLER_"


@dataclass(frozen=True)
class CrawlerConfig:
    """Crawler settings, immutable for the lifetime of one crawler."""
    parallelism: int = 5
    filter_pattern: str = "*"
    chunk_size: int = 64 * 1024

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValidationError: If configuration is invalid
        """
        errors = []

        if isinstance(self.parallelism, bool) or not isinstance(self.parallelism, int) or self.parallelism < 1:
            errors.append("parallelism must be a positive integer")

        if not isinstance(self.filter_pattern, str) or not self.filter_pattern:
            errors.append("filter_pattern must be a non-empty string")

        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            errors.append("chunk_size must be a positive integer")

        if errors:
            raise ValidationError(
                "Crawler configuration validation failed",
                {"errors": errors}
            )

    def replace(self, **changes) -> "CrawlerConfig":
        """Copy with some fields changed; the copy is validated again."""
        return dataclasses.replace(self, **changes)


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_output: bool = False
    retention_days: int = 7


@dataclass
class SystemConfig:
    """Main system configuration."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Configuration schema for validation
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "crawler": {
            "type": "object",
            "properties": {
                "parallelism": {"type": "integer", "minimum": 1},
                "filter_pattern": {"type": "string", "minLength": 1},
                "chunk_size": {"type": "integer", "minimum": 1}
            },
            "additionalProperties": False
        },
        "logging": {
            "type": "object",
            "properties": {
                "log_level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
                },
                "log_file": {"type": ["string", "null"]},
                "json_output": {"type": "boolean"},
                "retention_days": {"type": "integer", "minimum": 1, "maximum": 3650}
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}


class ConfigManager:
    """Configuration manager with schema validation and environment overrides."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[SystemConfig] = None

    def validate_config(self, config_data: Dict[str, Any]) -> None:
        """Validate configuration data against schema."""
        try:
            validate(instance=config_data, schema=CONFIG_SCHEMA)
        except SchemaValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e.message}")

    def load_config(self) -> SystemConfig:
        """Load configuration from file, then apply environment overrides."""
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")
            config_data = self._read_file()
            self.validate_config(config_data)
        else:
            config_data = {}

        config_data = self._override_with_env_vars(config_data)
        self.validate_config(config_data)

        try:
            self._config = self._dict_to_config(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e.message}", e.details)

        if self.config_path is not None:
            logging.info(f"Configuration loaded and validated from {self.config_path}")
        return self._config

    def _read_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")
        return config_data

    def _override_with_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Override configuration with environment variables."""
        data = {section: dict(values) for section, values in config_data.items()}
        crawler = data.setdefault("crawler", {})
        logging_section = data.setdefault("logging", {})

        parallelism = os.getenv(f"{ENV_PREFIX}PARALLELISM")
        if parallelism:
            try:
                crawler["parallelism"] = int(parallelism)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_PREFIX}PARALLELISM must be an integer, got '{parallelism}'"
                )

        if os.getenv(f"{ENV_PREFIX}FILTER"):
            crawler["filter_pattern"] = os.getenv(f"{ENV_PREFIX}FILTER")

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            logging_section["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL").upper()

        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            logging_section["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return data

    def _dict_to_config(self, data: Dict[str, Any]) -> SystemConfig:
        """Convert dictionary to SystemConfig object."""
        config = SystemConfig()

        if "crawler" in data:
            config.crawler = CrawlerConfig(**data["crawler"])

        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as dictionary."""
        if not self._config:
            return {}

        return {
            "crawler": asdict(self._config.crawler),
            "logging": asdict(self._config.logging)
        }

    def save_config(self, config_path: Optional[str] = None) -> None:
        """Save current configuration to file."""
        if not self._config:
            raise ConfigurationError("No configuration loaded to save")

        save_path = Path(config_path) if config_path else self.config_path
        if save_path is None:
            raise ConfigurationError("No configuration path to save to")

        config_dict = self.export_config()

        # Validate before saving
        self.validate_config(config_dict)

        with open(save_path, 'w', encoding='utf-8') as f:
            json.dump(config_dict, f, indent=2, ensure_ascii=False)

        logging.info(f"Configuration saved to {save_path}")


def get_config(config_path: Optional[str] = None) -> SystemConfig:
    """Load the system configuration."""
    return ConfigManager(config_path).load_config()
