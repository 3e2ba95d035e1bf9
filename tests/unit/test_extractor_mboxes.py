"""Unit tests for mbox section extraction.

Covers raw response conversion, the execute and prefetch mbox maps and the
prefetched views payload.
"""

import copy
import logging
import sys

import pytest

from target_response import (
    ConfigurationError,
    FrozenConfig,
    ResponseExtractor,
    ResponseParseError,
)


class TestExtractRawResponse:
    """Structural conversion is the only extraction allowed to raise"""

    def test_none_yields_none(self, extractor):
        assert extractor.extract_raw_response(None) is None

    def test_returns_equal_but_independent_tree(self, extractor, response):
        raw = extractor.extract_raw_response(response)
        assert raw == response
        raw["execute"]["mboxes"].clear()
        assert response["execute"]["mboxes"]

    def test_does_not_filter(self, extractor, response):
        raw = extractor.extract_raw_response(response)
        assert "trace" in raw["prefetch"]["mboxes"][0]

    @pytest.mark.parametrize("root", [[{"a": 1}], "text", 42])
    def test_non_mapping_root_raises(self, extractor, root):
        with pytest.raises(ResponseParseError):
            extractor.extract_raw_response(root)

    def test_unconvertible_leaf_raises(self, extractor):
        with pytest.raises(ResponseParseError):
            extractor.extract_raw_response({"execute": {"mboxes": [{1, 2}]}})

    def test_self_referencing_document_raises(self, extractor):
        doc = {"execute": {}}
        doc["execute"]["self"] = doc
        with pytest.raises(ResponseParseError, match="Circular reference"):
            extractor.extract_raw_response(doc)

    def test_excessive_nesting_raises(self, extractor):
        doc = {}
        node = doc
        for _ in range(sys.getrecursionlimit() + 100):
            node["child"] = {}
            node = node["child"]
        with pytest.raises(ResponseParseError, match="recursion limit"):
            extractor.extract_raw_response(doc)


class TestBatchedMboxes:
    """execute.mboxes keyed by name, entries verbatim"""

    def test_entries_are_inserted_verbatim(self, extractor, response):
        mboxes = extractor.extract_batched_mboxes(response)
        assert list(mboxes) == ["homepage-hero"]
        assert mboxes["homepage-hero"] is response["execute"]["mboxes"][0]
        assert "trace" in mboxes["homepage-hero"]

    @pytest.mark.parametrize(
        "doc",
        [
            {},
            {"execute": None},
            {"execute": "oops"},
            {"execute": {}},
            {"execute": {"mboxes": {"name": "not-an-array"}}},
        ],
    )
    def test_missing_container_is_absent(self, extractor, doc, caplog):
        assert extractor.extract_batched_mboxes(doc) is None
        assert any(r.levelno == logging.DEBUG for r in caplog.records)

    def test_empty_array_yields_empty_map(self, extractor):
        assert extractor.extract_batched_mboxes({"execute": {"mboxes": []}}) == {}

    def test_skips_unnamed_and_malformed_entries(self, extractor):
        doc = {
            "execute": {
                "mboxes": [
                    None,
                    "junk",
                    {"options": []},
                    {"name": "", "options": []},
                    {"name": None},
                    {"name": "kept"},
                ]
            }
        }
        assert extractor.extract_batched_mboxes(doc) == {"kept": {"name": "kept"}}

    def test_last_duplicate_name_wins(self, extractor):
        doc = {
            "execute": {
                "mboxes": [
                    {"name": "dup", "index": 0},
                    {"name": "other", "index": 1},
                    {"name": "dup", "index": 2},
                ]
            }
        }
        mboxes = extractor.extract_batched_mboxes(doc)
        assert mboxes["dup"]["index"] == 2
        assert len(mboxes) == 2

    def test_repeated_calls_are_equal(self, extractor, response):
        first = extractor.extract_batched_mboxes(response)
        second = extractor.extract_batched_mboxes(response)
        assert first == second


class TestPrefetchedMboxes:
    """prefetch.mboxes keyed by name, trimmed to cacheable fields"""

    def test_keeps_only_cacheable_fields(self, extractor, response):
        mboxes = extractor.extract_prefetched_mboxes(response)
        assert set(mboxes["checkout-banner"]) == {
            "name",
            "state",
            "options",
            "metrics",
            "analytics",
        }

    def test_source_document_is_untouched_by_default(self, extractor, response):
        original = copy.deepcopy(response)
        extractor.extract_prefetched_mboxes(response)
        assert response == original

    def test_in_place_filtering_trims_caller_entries(self, response):
        extractor = ResponseExtractor(FrozenConfig(filter_in_place=True))
        entry = response["prefetch"]["mboxes"][0]

        mboxes = extractor.extract_prefetched_mboxes(response)

        assert mboxes["checkout-banner"] is entry
        assert "trace" not in entry
        assert "parameters" not in entry
        assert "index" not in entry

    @pytest.mark.parametrize("filter_in_place", [False, True])
    def test_second_pass_keeps_allow_listed_fields(self, response, filter_in_place):
        extractor = ResponseExtractor(FrozenConfig(filter_in_place=filter_in_place))
        first = extractor.extract_prefetched_mboxes(response)
        second = extractor.extract_prefetched_mboxes(
            {"prefetch": {"mboxes": list(first.values())}}
        )
        assert second == first

    def test_custom_allow_list(self, response):
        config = FrozenConfig(cacheable_mbox_keys=("name", "options"))
        mboxes = ResponseExtractor(config).extract_prefetched_mboxes(response)
        assert set(mboxes["checkout-banner"]) == {"name", "options"}

    @pytest.mark.parametrize("keys", [("options",), ("state", "metrics"), ()])
    def test_allow_list_without_name_is_rejected(self, keys):
        with pytest.raises(ConfigurationError, match="cacheable_mbox_keys"):
            FrozenConfig(cacheable_mbox_keys=keys)

    def test_empty_session_key_is_rejected(self):
        with pytest.raises(ConfigurationError, match="a4t_session_id_key"):
            FrozenConfig(a4t_session_id_key="")

    def test_unnamed_entries_are_dropped(self, extractor):
        doc = {"prefetch": {"mboxes": [{"name": ""}, {"state": "s"}, None]}}
        assert extractor.extract_prefetched_mboxes(doc) == {}

    def test_last_duplicate_name_wins(self, extractor):
        doc = {
            "prefetch": {
                "mboxes": [
                    {"name": "dup", "state": "first"},
                    {"name": "dup", "state": "second"},
                ]
            }
        }
        assert extractor.extract_prefetched_mboxes(doc) == {
            "dup": {"name": "dup", "state": "second"}
        }

    def test_missing_container_is_absent(self, extractor, response):
        del response["prefetch"]
        assert extractor.extract_prefetched_mboxes(response) is None

    def test_missing_mboxes_array_is_absent(self, extractor):
        assert extractor.extract_prefetched_mboxes({"prefetch": {"views": []}}) is None


class TestPrefetchedViews:
    """prefetch.views as opaque JSON text"""

    def test_views_are_serialized(self, extractor, response):
        views = extractor.extract_prefetched_views(response)
        assert views == (
            '[{"name":"home-view","key":"home-view",'
            '"options":[{"type":"actions","content":[{"type":"setHtml"}]}]}]'
        )

    @pytest.mark.parametrize(
        "doc",
        [
            None,
            {},
            {"prefetch": []},
            {"prefetch": {}},
            {"prefetch": {"views": []}},
            {"prefetch": {"views": {"name": "v"}}},
        ],
    )
    def test_absent_or_empty_views(self, extractor, doc):
        assert extractor.extract_prefetched_views(doc) is None

    def test_unserializable_views_are_absent(self, extractor, caplog):
        doc = {"prefetch": {"views": [{"name": "v", "blob": b"x"}]}}
        assert extractor.extract_prefetched_views(doc) is None
        assert "views are not serializable" in caplog.text
