"""Configuration resolution with precedence handling.

This module merges configuration from multiple sources according to the
documented precedence order:
Programmatic > Environment > Project file > Defaults
"""

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from target_response.exceptions import ConfigurationError

from .file_loader import FileConfigLoader
from .schema import ExtractorSettings
from .types import ConfigOrigin, ResolvedConfig

log = logging.getLogger(__name__)

ENV_PREFIX = "TARGET_RESPONSE_"


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence)
            project_root: Directory to search for pyproject.toml

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If the merged values fail validation.
            ConfigFileError: If the project file is malformed.
        """
        origin: dict[str, ConfigOrigin] = {}
        merged_config: dict[str, Any] = {}

        # Step 1: Start with schema defaults
        for field, info in ExtractorSettings.model_fields.items():
            merged_config[field] = info.default
            origin[field] = "default"

        # Step 2: Apply project file configuration
        for field, value in self.file_loader.load_project_config(project_root).items():
            if field in merged_config:  # Only override known fields
                merged_config[field] = value
                origin[field] = "file"
            else:
                log.debug("Ignoring unknown config field '%s' from file", field)

        # Step 3: Apply environment variables
        for field, value in self._load_env_config().items():
            merged_config[field] = value
            origin[field] = "env"

        # Step 4: Apply programmatic overrides
        if programmatic:
            for field, value in programmatic.items():
                if field in merged_config:
                    merged_config[field] = value
                    origin[field] = "programmatic"

        # Step 5: Validate the final configuration using Pydantic
        try:
            settings = ExtractorSettings.model_validate(merged_config)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        final_config = settings.to_dict()
        return ResolvedConfig(**final_config, origin=origin)

    def _load_env_config(self) -> dict[str, str]:
        """Collect raw TARGET_RESPONSE_* values for known fields."""
        env_values = {}
        for field in ExtractorSettings.model_fields:
            env_var = f"{ENV_PREFIX}{field.upper()}"
            if env_var in os.environ:
                env_values[field] = os.environ[env_var]
        return env_values


# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve extractor configuration from all sources.

    Example:
        config = resolve_config({"filter_in_place": True})
        extractor = ResponseExtractor(config.to_frozen())
    """
    return _resolver.resolve(programmatic, project_root=project_root)
