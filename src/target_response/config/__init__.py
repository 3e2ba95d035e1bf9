"""Configuration management for the response extractor.

Key components:
- ExtractorSettings: Pydantic schema with defaults and validation
- ResolvedConfig: Post-resolution configuration with origin metadata
- FrozenConfig: Immutable configuration held by the extractor
"""

from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver, resolve_config
from .schema import ExtractorSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [  # noqa: RUF022
    # Main API
    "resolve_config",
    # Core types
    "ResolvedConfig",
    "FrozenConfig",
    "SourceMap",
    "ConfigOrigin",
    # Advanced usage
    "ExtractorSettings",
    "ConfigResolver",
    "FileConfigLoader",
    "ConfigFileError",
]
