"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from various sources (environment, files, programmatic) into the correct
types with proper defaults.
"""

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from target_response.constants import (
    A4T_SESSION_ID,
    CACHED_MBOX_ACCEPTED_KEYS,
    MBOX_NAME,
)


class ExtractorSettings(BaseSettings):
    """Pydantic settings schema for the response extractor.

    This handles validation, type coercion, and default values for all
    configuration fields. It integrates with environment variables using
    the TARGET_RESPONSE_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="TARGET_RESPONSE_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars for forward compatibility
    )

    cacheable_mbox_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=CACHED_MBOX_ACCEPTED_KEYS,
        description="Fields a prefetched mbox keeps before it is cached",
    )

    a4t_session_id_key: str = Field(
        default=A4T_SESSION_ID,
        description="Key under which the session id is forwarded with A4T payloads",
        min_length=1,
    )

    filter_in_place: bool = Field(
        default=False,
        description="Trim prefetched mbox entries in the caller's document",
    )

    @field_validator("cacheable_mbox_keys", mode="before")
    @classmethod
    def parse_cacheable_keys(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a sequence."""
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        return v

    @field_validator("cacheable_mbox_keys")
    @classmethod
    def require_name_key(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Cached mboxes are looked up by name, so it must survive trimming."""
        if MBOX_NAME not in v:
            raise ValueError(
                f"cacheable_mbox_keys must include '{MBOX_NAME}', got {list(v)}"
            )
        return tuple(dict.fromkeys(v))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for origin annotation."""
        return {
            "cacheable_mbox_keys": self.cacheable_mbox_keys,
            "a4t_session_id_key": self.a4t_session_id_key,
            "filter_in_place": self.filter_in_place,
        }
