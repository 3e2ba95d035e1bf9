"""File-based configuration loading.

Project-level settings live in the ``[tool.target_response]`` table of the
nearest ``pyproject.toml``.
"""

from pathlib import Path
import tomllib
from typing import Any

from target_response.exceptions import TargetResponseError

TOOL_SECTION = "target_response"


class ConfigFileError(TargetResponseError):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads extractor configuration from pyproject.toml."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load configuration from pyproject.toml in the project root.

        Args:
            project_root: Directory to search for pyproject.toml. If None,
                         searches current directory and parents.

        Returns:
            Dictionary of configuration values from the file.
            Empty dict if file doesn't exist or has no target_response section.

        Raises:
            ConfigFileError: If file exists but cannot be parsed or the section
                is not a table.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        tool_config = data.get("tool", {})
        if not isinstance(tool_config, dict):
            return {}

        section = tool_config.get(TOOL_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, f"[tool.{TOOL_SECTION}] must be a table"
            )
        return dict(section)

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            if current == current.parent:  # Filesystem root
                return None
            current = current.parent
