"""Basic exceptions for Target response extraction"""  # noqa: D415


class TargetResponseError(Exception):
    """Base exception for Target response extraction errors"""  # noqa: D415


class ResponseParseError(TargetResponseError):
    """Raised when a response document cannot be converted to a mapping tree"""  # noqa: D415


class ConfigurationError(TargetResponseError):
    """Raised when extractor settings fail validation"""  # noqa: D415
