"""Response extraction for Target personalization responses."""

import importlib.metadata
import logging

from target_response.config import (
    ConfigFileError,
    ExtractorSettings,
    FrozenConfig,
    ResolvedConfig,
    resolve_config,
)
from target_response.exceptions import (
    ConfigurationError,
    ResponseParseError,
    TargetResponseError,
)
from target_response.extractor import ResponseExtractor
from target_response.json_values import JsonObject, JsonValue
from target_response.types import ExtractedResponse, MboxResponseMap

# Version handling
try:
    __version__ = importlib.metadata.version("target-response")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Extraction
    "ResponseExtractor",
    "ExtractedResponse",
    "MboxResponseMap",
    "JsonValue",
    "JsonObject",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    "ExtractorSettings",
    # Exceptions
    "TargetResponseError",
    "ResponseParseError",
    "ConfigurationError",
    "ConfigFileError",
]
