"""Tests for JSON extraction utilities."""

import pytest

from resume_insight.errors import InvalidLLMOutputError
from resume_insight.utils.json_parser import extract_json, extract_json_object, is_valid_json


class TestIsValidJson:
    def test_object(self):
        assert is_valid_json('{"a": 1}')

    def test_scalar_is_valid(self):
        assert is_valid_json("42")

    @pytest.mark.parametrize("text", ["", "   ", "{", "```json\n{}\n```", "Sure: {}"])
    def test_invalid(self, text):
        assert not is_valid_json(text)


class TestExtractJsonObject:
    def test_whole_response(self):
        assert extract_json_object('  {"a": 1}\n') == '{"a": 1}'

    def test_surrounding_prose(self):
        raw = 'Here is the resume:\n{"header": {"name": "Jane"}}\nLet me know!'
        assert extract_json_object(raw) == '{"header": {"name": "Jane"}}'

    def test_fenced_block(self):
        raw = '```json\n{"a": [1, 2]}\n```'
        assert extract_json_object(raw) == '{"a": [1, 2]}'

    def test_empty(self):
        with pytest.raises(InvalidLLMOutputError, match="empty llm response"):
            extract_json_object("  ")

    def test_no_braces(self):
        with pytest.raises(InvalidLLMOutputError, match="no json object found"):
            extract_json_object("I cannot do that")

    def test_reversed_braces(self):
        with pytest.raises(InvalidLLMOutputError, match="no json object found"):
            extract_json_object("} oops {")

    def test_invalid_span(self):
        with pytest.raises(InvalidLLMOutputError, match="invalid json object"):
            extract_json_object("prefix {not: valid} suffix")


class TestExtractJson:
    def test_direct_json(self):
        assert extract_json('{"name": "test"}') == {"name": "test"}

    def test_fenced_code_block(self):
        text = 'Here is the result:\n```json\n{"name": "test"}\n```\nDone.'
        assert extract_json(text) == {"name": "test"}

    def test_fenced_without_json_tag(self):
        assert extract_json('```\n{"key": "value"}\n```') == {"key": "value"}

    def test_embedded_json(self):
        text = 'The analysis is: {"score": 90, "pass": true} as shown above.'
        assert extract_json(text) == {"score": 90, "pass": True}

    def test_truncated_response_is_closed(self):
        text = '{"summary": {"strengths": ["Go", "Redis"'
        assert extract_json(text) == {"summary": {"strengths": ["Go", "Redis"]}}

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("no json here at all")

    def test_empty_string_raises(self):
        with pytest.raises(ValueError):
            extract_json("")
