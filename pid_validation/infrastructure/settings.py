"""Application Settings and Wiring.

This module combines configuration from the configuration manager with the
factories that assemble the validation pipeline and its collaborators. It is
used by the CLI; library callers construct the pipeline themselves.
"""

from typing import Optional

from pid_validation.adapters.message_catalog import CatalogMessageRenderer
from pid_validation.adapters.validator_registry import ValidatorRegistry
from pid_validation.domain.ports import PatientRepositoryPort
from pid_validation.domain.services.pipeline import IdentifierValidationPipeline
from pid_validation.infrastructure.config_manager import ConfigManager, ValidationConfig

# Application metadata
APP_NAME = "pidval"
APP_VERSION = "1.0.0"


class Settings:
    """Application settings loaded from the configuration manager.

    Configuration is loaded lazily on first access, so importing this module
    never reads the environment.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize settings.

        Parameters:
            config_manager: Source of configuration (environment when None)
        """
        self._config_manager = config_manager
        self._validation_config: Optional[ValidationConfig] = None

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def validation_config(self) -> ValidationConfig:
        if self._validation_config is None:
            self._validation_config = self.config_manager.get_validation_config()
        return self._validation_config

    def reload(self, config_manager: Optional[ConfigManager] = None) -> None:
        """Drop cached configuration (and optionally switch its source)."""
        self._config_manager = config_manager
        self._validation_config = None

    def build_validator_registry(self) -> ValidatorRegistry:
        """Registry with the national-ID validator and configured plugin paths."""
        return ValidatorRegistry(paths=self.validation_config.validators)

    def build_message_renderer(self) -> CatalogMessageRenderer:
        return CatalogMessageRenderer(default_locale=self.validation_config.default_locale)

    def build_pipeline(self, repository: PatientRepositoryPort) -> IdentifierValidationPipeline:
        """Assemble the validation pipeline around ``repository``."""
        return IdentifierValidationPipeline(
            repository=repository,
            validator_registry=self.build_validator_registry(),
            national_id_type_name=self.validation_config.national_id_type_name,
        )


# Global settings instance
settings = Settings()
