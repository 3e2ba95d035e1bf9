"""Response extractor for Target server responses

This module pulls the pieces the rest of the application needs out of one
decoded response document: prefetched and batched mboxes, prefetched views,
identity fields, A4T payloads, response tokens and rendered content. Every
accessor tolerates missing or mistyped fields and reports them as ``None``
(or the documented default) instead of raising; only
:meth:`ResponseExtractor.extract_raw_response` surfaces structural faults.
"""

from collections.abc import Iterator, Mapping, MutableMapping
import logging
from typing import Any

from . import constants as keys
from .config.types import FrozenConfig
from .json_values import (
    JsonObject,
    is_mapping,
    opt_mapping,
    opt_mapping_at,
    opt_sequence,
    opt_string,
    scalar_to_string,
    to_json_tree,
    to_string_map,
    try_json_text,
)
from .exceptions import ResponseParseError
from .types import ExtractedResponse, MboxResponseMap

log = logging.getLogger(__name__)


class ResponseExtractor:
    """Extracts and reshapes sections of a Target response document"""

    def __init__(self, config: FrozenConfig | None = None):
        """Initialize the extractor.

        Args:
            config: Frozen settings. Defaults apply when omitted, without
                consulting environment or files.
        """
        self.config = config or FrozenConfig()

    # --- Whole document -----------------------------------------------------

    def extract_raw_response(self, response: Any) -> JsonObject | None:
        """Convert a response document into plain dicts, lists and scalars.

        Returns ``None`` when ``response`` is ``None``.

        Raises:
            ResponseParseError: If the root is not a mapping or the tree holds
                values that have no JSON representation.
        """
        if response is None:
            return None
        if not is_mapping(response):
            raise ResponseParseError(
                f"Response root must be a JSON object, got {type(response).__name__}"
            )
        try:
            return to_json_tree(response)
        except RecursionError as e:
            raise ResponseParseError(
                "Response nesting exceeds the recursion limit"
            ) from e

    def extract(self, response: Any, session_id: str = "") -> ExtractedResponse:
        """Run every extraction over one response document.

        Batched mboxes are additionally expanded into rendered content, A4T
        payloads and response tokens keyed by mbox name.
        """
        if not is_mapping(response):
            log.debug("extract - response is not a JSON object, nothing to extract")
            return ExtractedResponse()

        result = ExtractedResponse(
            tnt_id=self.get_tnt_id(response),
            edge_host=self.get_edge_host(response),
            error_message=self.get_error_message(response),
            prefetched_mboxes=self.extract_prefetched_mboxes(response),
            batched_mboxes=self.extract_batched_mboxes(response),
            prefetched_views=self.extract_prefetched_views(response),
        )

        for name, mbox in (result.batched_mboxes or {}).items():
            result.mbox_content[name] = self.extract_mbox_content(mbox)

            payload = self.get_forwardable_analytics_payload(mbox, session_id)
            if payload is not None:
                result.analytics_payloads[name] = payload

            click_payload = self.extract_click_metric_analytics_payload(mbox)
            if click_payload is not None:
                result.click_metric_payloads[name] = click_payload

            tokens = self.get_response_tokens(mbox)
            if tokens is not None:
                result.response_tokens[name] = tokens

        log.debug(
            "Extracted response: %d batched, %d prefetched mbox(es), views=%s",
            len(result.batched_mboxes or {}),
            len(result.prefetched_mboxes or {}),
            result.prefetched_views is not None,
        )
        return result

    # --- Mbox sections ------------------------------------------------------

    def _mboxes_under(self, response: Any, container_key: str) -> list[Any] | None:
        """Return ``response[container_key].mboxes`` or ``None``."""
        container = opt_mapping(response, container_key)
        if container is None:
            log.debug(
                "Unable to retrieve mboxes from '%s', container is absent",
                container_key,
            )
            return None

        mboxes = opt_sequence(container, keys.MBOXES)
        if mboxes is None:
            log.debug(
                "Unable to retrieve mboxes from '%s', mboxes array is absent",
                container_key,
            )
            return None

        return list(mboxes)

    def _named_mboxes(
        self, mboxes: list[Any]
    ) -> Iterator[tuple[str, Mapping[str, Any]]]:
        """Yield ``(name, mbox)`` for mapping entries with a non-empty name."""
        for mbox in mboxes:
            if not is_mapping(mbox):
                continue
            name = opt_string(mbox, keys.MBOX_NAME, "")
            if not name:
                continue
            yield name, mbox

    def extract_batched_mboxes(self, response: Any) -> MboxResponseMap | None:
        """Map execute mbox names to their entries, unmodified.

        Returns ``None`` if the response has no ``execute.mboxes`` array.
        """
        mboxes = self._mboxes_under(response, keys.EXECUTE)
        if mboxes is None:
            return None
        return dict(self._named_mboxes(mboxes))

    def extract_prefetched_mboxes(self, response: Any) -> MboxResponseMap | None:
        """Map prefetch mbox names to their entries, trimmed for caching.

        Only the configured cacheable fields survive. Unless
        ``filter_in_place`` is set, trimmed copies are returned and the
        response document is left as it was.

        Returns ``None`` if the response has no ``prefetch.mboxes`` array.
        """
        mboxes = self._mboxes_under(response, keys.PREFETCH)
        if mboxes is None:
            return None

        return {
            name: self._cacheable_fields(mbox)
            for name, mbox in self._named_mboxes(mboxes)
        }

    def _cacheable_fields(self, mbox: Mapping[str, Any]) -> Mapping[str, Any]:
        accepted = self.config.cacheable_mbox_keys
        if self.config.filter_in_place and isinstance(mbox, MutableMapping):
            for key in [key for key in mbox if key not in accepted]:
                del mbox[key]
            return mbox
        return {key: value for key, value in mbox.items() if key in accepted}

    def extract_prefetched_views(self, response: Any) -> str | None:
        """Return ``prefetch.views`` serialized as JSON text, or ``None``."""
        if response is None:
            log.debug("Unable to extract prefetch views, response is absent")
            return None

        container = opt_mapping(response, keys.PREFETCH)
        if container is None:
            log.debug("Unable to extract prefetch views, prefetch container is absent")
            return None

        views = opt_sequence(container, keys.VIEWS)
        if not views:
            log.debug("Unable to extract prefetch views, views array is absent or empty")
            return None

        text = try_json_text(views)
        if text is None:
            log.debug("Unable to extract prefetch views, views are not serializable")
        return text

    # --- Identity -----------------------------------------------------------

    def get_tnt_id(self, response: Any) -> str | None:
        return opt_string(opt_mapping(response, keys.ID), keys.ID_TNT_ID)

    def get_edge_host(self, response: Any) -> str:
        """Return ``edgeHost``, or an empty string when it is missing."""
        return opt_string(response, keys.EDGE_HOST, "")

    def get_error_message(self, response: Any) -> str | None:
        return opt_string(response, keys.MESSAGE)

    # --- Analytics for Target ----------------------------------------------

    def get_analytics_for_target_payload(
        self, json: Any, session_id: str | None = None
    ) -> dict[str, str] | None:
        """Read ``analytics.payload`` from an mbox or metric.

        When ``session_id`` is given the payload is also converted into its
        forwardable form, see :meth:`preprocess_analytics_for_target_payload`.
        """
        if session_id is not None:
            return self.get_forwardable_analytics_payload(json, session_id)

        analytics = opt_mapping(json, keys.ANALYTICS_PARAMETERS)
        if analytics is None:
            return None

        payload = opt_mapping(analytics, keys.ANALYTICS_PAYLOAD)
        if payload is None:
            return None

        return to_string_map(payload)

    def get_forwardable_analytics_payload(
        self, mbox: Any, session_id: str
    ) -> dict[str, str] | None:
        """Read an mbox A4T payload and prepare it for the analytics pipeline."""
        payload = self.get_analytics_for_target_payload(mbox)
        return self.preprocess_analytics_for_target_payload(payload, session_id)

    def preprocess_analytics_for_target_payload(
        self, payload: Mapping[str, str] | None, session_id: str | None
    ) -> dict[str, str] | None:
        """Prefix A4T keys with ``&&`` and attach the session id.

        Returns a new mapping, or ``None`` if ``payload`` is absent or empty.
        The session id entry is only added for a non-empty ``session_id``.
        """
        if not payload:
            return None

        modified = {
            f"{keys.A4T_KEY_PREFIX}{key}": value for key, value in payload.items()
        }

        if session_id:
            modified[self.config.a4t_session_id_key] = session_id

        return modified

    def extract_click_metric_analytics_payload(
        self, mbox: Any
    ) -> dict[str, str] | None:
        """Return the A4T payload attached to the mbox click metric."""
        return self.get_analytics_for_target_payload(self.get_click_metric(mbox))

    def get_click_metric(self, mbox: Any) -> Mapping[str, Any] | None:
        """Return the first click metric carrying an event token.

        Metrics are scanned in document order; the first entry whose type is
        ``click`` and whose ``eventToken`` is non-empty wins.
        """
        metrics = opt_sequence(mbox, keys.METRICS)
        if not metrics:
            return None

        for metric in metrics:
            if not is_mapping(metric):
                continue
            if opt_string(metric, keys.METRIC_TYPE) != keys.METRIC_TYPE_CLICK:
                continue
            if not opt_string(metric, keys.METRIC_EVENT_TOKEN):
                continue
            return metric

        return None

    # --- Options ------------------------------------------------------------

    def get_response_tokens(self, mbox: Any) -> dict[str, str] | None:
        """Return response tokens from the mbox's first option.

        Only ``options[0]`` is read; an mbox carries a single option when
        response tokens are activated.
        """
        options = opt_sequence(mbox, keys.OPTIONS)
        if not options:
            return None

        option = opt_mapping_at(options, 0)
        if option is None:
            return None

        tokens = opt_mapping(option, keys.OPTION_RESPONSE_TOKENS)
        if tokens is None:
            return None

        return to_string_map(tokens)

    def extract_mbox_content(self, mbox: Any) -> str:
        """Concatenate the content of every html and json option, in order.

        Never returns ``None``: an absent mbox, a missing ``options`` array and
        options without content all yield an empty string.
        """
        if mbox is None:
            log.debug("Unable to extract mbox contents, mbox is absent")
            return ""

        options = opt_sequence(mbox, keys.OPTIONS)
        if options is None:
            log.debug("Unable to extract mbox contents, options array is absent")
            return ""

        parts = []
        for option in options:
            if not is_mapping(option):
                continue
            content = option.get(keys.OPTION_CONTENT)
            if not _has_content(content):
                continue

            option_type = opt_string(option, keys.OPTION_TYPE, "")
            if option_type == keys.HTML:
                text = scalar_to_string(content)
                if text is None:
                    text = try_json_text(content)
            elif option_type == keys.JSON and is_mapping(content):
                text = try_json_text(content)
            else:
                continue

            if text is None:
                log.debug(
                    "Skipping %s option, content is not JSON serializable", option_type
                )
                continue
            parts.append(text)

        return "".join(parts)


def _has_content(value: Any) -> bool:
    # Empty strings count as missing; empty objects still render as "{}".
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value)
    return True
