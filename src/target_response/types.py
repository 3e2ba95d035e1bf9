"""
Result containers for response extraction

This module defines the structure handed to downstream collaborators after a
whole response document has been extracted in one pass.
"""  # noqa: D212, D415

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

MboxResponseMap = dict[str, Mapping[str, Any]]


@dataclass
class ExtractedResponse:
    """Every piece of one response document the application consumes"""  # noqa: D415

    # Identity
    tnt_id: str | None = None
    edge_host: str = ""
    error_message: str | None = None

    # Mbox sections (None when the container was absent)
    prefetched_mboxes: MboxResponseMap | None = None
    batched_mboxes: MboxResponseMap | None = None
    prefetched_views: str | None = None

    # Per batched mbox, keyed by mbox name; absent values are omitted
    mbox_content: dict[str, str] = field(default_factory=dict)
    analytics_payloads: dict[str, dict[str, str]] = field(default_factory=dict)
    click_metric_payloads: dict[str, dict[str, str]] = field(default_factory=dict)
    response_tokens: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def has_error(self) -> bool:
        """True if the server reported an error message"""  # noqa: D415
        return bool(self.error_message)

    @property
    def has_prefetched_content(self) -> bool:
        """True if there is anything for the prefetch cache"""  # noqa: D415
        return bool(self.prefetched_mboxes) or self.prefetched_views is not None
