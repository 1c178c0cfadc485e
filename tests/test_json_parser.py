"""Tests for lenient JSON parsing of upstream bodies."""

from assetstudio.services.json_parser import extract_json_object, loads_lenient, parse_maybe_json


class TestExtractJsonObject:
    def test_handles_nested_objects(self):
        text = 'prefix {"a": {"b": 1}} suffix'
        assert extract_json_object(text) == '{"a": {"b": 1}}'

    def test_ignores_braces_inside_strings(self):
        text = 'x {"a": "}{", "b": "\\"}"} y'
        assert extract_json_object(text) == '{"a": "}{", "b": "\\"}"}'

    def test_unbalanced(self):
        assert extract_json_object('{"a": 1') is None

    def test_no_object(self):
        assert extract_json_object("plain text") is None


class TestLoadsLenient:
    def test_plain_json(self):
        assert loads_lenient('  {"ok": true} ') == {"ok": True}

    def test_array(self):
        assert loads_lenient("[1, 2]") == [1, 2]

    def test_object_wrapped_in_prose(self):
        assert loads_lenient('Sure! {"es": ["Hola"]} Hope this helps.') == {"es": ["Hola"]}

    def test_empty_and_garbage(self):
        assert loads_lenient("") is None
        assert loads_lenient("not json at all") is None
        assert loads_lenient("{not: valid}") is None


def test_parse_maybe_json_passes_non_strings_through():
    value = {"a": 1}
    assert parse_maybe_json(value) is value
    assert parse_maybe_json(None) is None
    assert parse_maybe_json('{"a": 1}') == {"a": 1}
