"""Tests for the translation response normalizer."""

import json

import pytest

from assetstudio.core.exceptions import NormalizationFailed
from assetstudio.services.normalizer import (
    candidate_sources,
    coerce_text_list,
    collect_translations,
    normalize_translations,
)


class TestDocumentedShapes:
    def test_translations_field(self):
        payload = {"translations": {"es": ["Hola", "Mundo"]}}
        assert normalize_translations(payload, ["es"], 2) == {"es": ["Hola", "Mundo"]}

    def test_balanced_object_inside_output_string(self):
        payload = {"output": 'noise {"result":{"fr":["Un","Deux"]}} trailing'}
        assert normalize_translations(payload, ["fr"], 2) == {"fr": ["Un", "Deux"]}

    def test_length_mismatch_is_rejected(self):
        with pytest.raises(NormalizationFailed):
            normalize_translations({"es": ["OnlyOne"]}, ["es"], 2)
        assert collect_translations({"es": ["OnlyOne"]}, ["es"], 2) == {}


class TestCandidateLocations:
    @pytest.mark.parametrize("key", ["translations", "result", "data"])
    def test_nested_fields(self, key):
        assert normalize_translations({key: {"ja": ["一"]}}, ["ja"], 1) == {"ja": ["一"]}

    def test_nested_field_encoded_as_string(self):
        payload = {"data": json.dumps({"de": ["Eins"]})}
        assert normalize_translations(payload, ["de"], 1) == {"de": ["Eins"]}

    def test_content_string(self):
        payload = {"content": '```json\n{"translations": {"it": ["Uno"]}}\n```'}
        assert normalize_translations(payload, ["it"], 1) == {"it": ["Uno"]}

    def test_root_payload(self):
        assert normalize_translations({"ko": ["하나"]}, ["ko"], 1) == {"ko": ["하나"]}

    def test_nested_translations_inside_candidate(self):
        payload = {"result": {"translations": {"pt": ["Um"]}}}
        assert normalize_translations(payload, ["pt"], 1) == {"pt": ["Um"]}

    def test_later_candidate_fills_unresolved_language(self):
        payload = {"translations": {"es": ["Uno"]}, "fr": ["Un"]}
        result = normalize_translations(payload, ["es", "fr"], 1)
        assert result == {"es": ["Uno"], "fr": ["Un"]}

    def test_long_list_is_truncated(self):
        payload = {"translations": {"fr": ["Un", "Deux", "Trois"]}}
        assert normalize_translations(payload, ["fr"], 2) == {"fr": ["Un", "Deux"]}

    def test_short_list_falls_through_to_root(self):
        payload = {"translations": {"fr": []}, "fr": ["Un"]}
        assert normalize_translations(payload, ["fr"], 1) == {"fr": ["Un"]}

    def test_candidate_order(self):
        payload = {"output": '{"result": {}}', "translations": {}, "data": {}}
        locations = [location for location, _ in candidate_sources(payload)]
        assert locations == ["translations", "data", "output.result", "output.root", "root"]

    def test_non_object_payload(self):
        with pytest.raises(NormalizationFailed):
            normalize_translations(["es", "Hola"], ["es"], 1)


class TestCoerceTextList:
    def test_array_is_truncated_and_stringified(self):
        assert coerce_text_list(["a", None, 3, "extra"], 3) == ["a", "", "3"]

    @pytest.mark.parametrize("key", ["translations", "texts", "items"])
    def test_wrapper_arrays(self, key):
        assert coerce_text_list({key: ["x", "y"]}, 2) == ["x", "y"]

    def test_numeric_keys_sorted_numerically(self):
        value = {"10": "k", "2": "c", "0": "a", "1": "b"}
        assert coerce_text_list(value, 3) == ["a", "b", "c"]

    def test_tied_numeric_keys_keep_insertion_order(self):
        assert coerce_text_list({"1": "uno", "01": None}, 2) == ["uno", ""]
        assert coerce_text_list({"0": "a", "00": {"x": 1}}, 2) == ["a", "{\"x\": 1}"]

    def test_tied_numeric_keys_do_not_abort_the_search(self):
        payload = {"translations": {"es": {"1": "uno", "01": None}}, "fr": ["Un"]}
        assert normalize_translations(payload, ["es", "fr"], 1) == {"es": ["uno"], "fr": ["Un"]}

    def test_unusable_shapes(self):
        assert coerce_text_list("Hola", 1) is None
        assert coerce_text_list({"hello": "world"}, 1) is None


def test_result_keeps_requested_order_and_skips_missing():
    payload = {"translations": {"ja": ["三"], "es": ["tres"]}}
    assert list(normalize_translations(payload, ["es", "fr", "ja"], 1)) == ["es", "ja"]
