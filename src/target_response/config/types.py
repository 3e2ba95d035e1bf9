"""Core configuration data types for the response extractor.

Configuration follows a resolve-once, freeze-then-flow pattern: values are
merged into a ``ResolvedConfig`` (which remembers where each value came from)
and then frozen into the ``FrozenConfig`` the extractor holds on to.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from target_response.constants import (
    A4T_SESSION_ID,
    CACHED_MBOX_ACCEPTED_KEYS,
    MBOX_NAME,
)
from target_response.exceptions import ConfigurationError

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    cacheable_mbox_keys: tuple[str, ...]
    a4t_session_id_key: str
    filter_in_place: bool

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by the extractor."""
        return FrozenConfig(
            cacheable_mbox_keys=self.cacheable_mbox_keys,
            a4t_session_id_key=self.a4t_session_id_key,
            filter_in_place=self.filter_in_place,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Create a new ResolvedConfig with programmatic overrides applied.

        Unknown fields are ignored. Overridden fields are marked as
        ``programmatic`` in the origin map.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)

        for field, value in overrides.items():
            if field in new_values and field != "origin":
                new_values[field] = value
                new_origin[field] = "programmatic"

        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Human-readable report of each field's value and origin."""
        lines = []
        for field in ("cacheable_mbox_keys", "a4t_session_id_key", "filter_in_place"):
            if field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if field == "cacheable_mbox_keys":
                value = ",".join(value)
            if origin == "env":
                lines.append(f"{field}: env:TARGET_RESPONSE_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration held by a ``ResponseExtractor``.

    The defaults match the settings schema, so ``FrozenConfig()`` is the
    out-of-the-box behavior without consulting environment or files.
    """

    cacheable_mbox_keys: tuple[str, ...] = CACHED_MBOX_ACCEPTED_KEYS
    a4t_session_id_key: str = A4T_SESSION_ID
    filter_in_place: bool = False

    def __post_init__(self) -> None:
        """Reject settings that would strip the name cached mboxes are keyed by."""
        if MBOX_NAME not in self.cacheable_mbox_keys:
            raise ConfigurationError(
                f"cacheable_mbox_keys must include '{MBOX_NAME}', "
                f"got {list(self.cacheable_mbox_keys)}"
            )
        if not self.a4t_session_id_key:
            raise ConfigurationError("a4t_session_id_key must be a non-empty string")
