"""Configuration Manager for Identifier Validation.

This module loads validation settings (national-ID type name, locale, field
length limits, plugin validator paths, logging) from environment variables or
a JSON file, and validates them before use.

Security Impact:
    - Configuration is validated before use (fail-fast)
    - Plugin validator paths are plain strings; they are only imported when an
      identifier type actually names the validator

Architecture:
    - Follows Hexagonal Architecture: Infrastructure layer isolated from domain
    - Type-safe configuration using Pydantic models
    - The domain pipeline receives plain values, never this manager
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "PIV_"


class ValidationConfig(BaseModel):
    """Identifier validation configuration.

    Parameters:
        national_id_type_name: Identifier type name that triggers the national-ID pre-pass
        default_locale: Locale used to render messages when none is requested
        identifier_max_length: Maximum length of identifier values
        void_reason_max_length: Maximum length of void reasons
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_json: Emit JSON log lines instead of human-readable ones
        validators: Validator name -> dotted import path of plugin validators
    """

    national_id_type_name: str = Field(default="CPF", description="National-ID identifier type name")
    default_locale: str = Field(default="en", description="Default message locale")
    identifier_max_length: int = Field(default=50, gt=0, description="Maximum identifier length")
    void_reason_max_length: int = Field(default=255, gt=0, description="Maximum void reason length")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Use JSON log formatting")
    validators: Dict[str, str] = Field(default_factory=dict, description="Plugin validator import paths")

    @field_validator("national_id_type_name")
    @classmethod
    def validate_national_id_type_name(cls, v: str) -> str:
        """Reject blank national-ID type names."""
        if not v or not v.strip():
            raise ValueError("National-ID type name cannot be blank")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        supported_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in supported_levels:
            raise ValueError(f"Unsupported log level: {v}. Supported: {supported_levels}")
        return v.upper()

    @field_validator("validators")
    @classmethod
    def validate_validator_paths(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate plugin validator paths look like importable references."""
        for name, path in v.items():
            if not path or ('.' not in path and ':' not in path):
                raise ValueError(f"Validator '{name}' needs a dotted import path, got: {path!r}")
        return v


def _parse_validator_paths(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``name=module:Class,other=module.Class`` into a dict."""
    paths = {}
    if not raw:
        return paths
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, path = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid validator entry (expected name=path): {item}")
        paths[name.strip()] = path.strip()
    return paths


class ConfigManager:
    """Configuration manager for identifier validation settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        validation_config = config.get_validation_config()

        # Load from file
        config = ConfigManager.from_file("validation.json")
        validation_config = config.get_validation_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._validation_config: Optional[ValidationConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - PIV_NATIONAL_ID_TYPE_NAME: National-ID identifier type name (default CPF)
            - PIV_DEFAULT_LOCALE: Default message locale (default en)
            - PIV_IDENTIFIER_MAX_LENGTH: Maximum identifier length (default 50)
            - PIV_VOID_REASON_MAX_LENGTH: Maximum void reason length (default 255)
            - PIV_LOG_LEVEL: Logging level (default INFO)
            - PIV_LOG_JSON: "true" for JSON log lines
            - PIV_VALIDATORS: Plugin validators as ``name=module:Class,...``

        Returns:
            ConfigManager instance

        Note:
            A .env file in the working directory is loaded first if present;
            variables already set in the environment take precedence.
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        validation: Dict[str, Any] = {}
        for key in (
            "national_id_type_name",
            "default_locale",
            "identifier_max_length",
            "void_reason_max_length",
            "log_level",
        ):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value is not None:
                validation[key] = value

        log_json = os.getenv(f"{ENV_PREFIX}LOG_JSON")
        if log_json is not None:
            validation["log_json"] = log_json.strip().lower() == "true"

        validators = os.getenv(f"{ENV_PREFIX}VALIDATORS")
        if validators:
            validation["validators"] = _parse_validator_paths(validators)

        return cls({"validation": validation})

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        The file holds a ``"validation"`` object with ValidationConfig fields.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        return cls(config_data)

    def get_validation_config(self) -> ValidationConfig:
        """Get validation configuration.

        Returns:
            ValidationConfig instance

        Raises:
            pydantic.ValidationError: If the configuration is invalid
        """
        if self._validation_config is None:
            self._validation_config = ValidationConfig(**self._config_data.get("validation", {}))
        return self._validation_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "validation.default_locale")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
