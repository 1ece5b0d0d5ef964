"""
Unit tests for the structured-output repair chain.
"""
import json

import pytest

from src.core.exceptions import StructuredOutputError
from src.generation.json_repair import (
    extract_bracketed,
    parse_json_array,
    parse_json_object,
    remove_trailing_commas,
    strip_code_fences,
)

VALID_ARRAY = [
    {"id": "q-1", "type": "true-false", "questionText": "The sky is green.", "correctAnswer": "False"},
    {"id": "q-2", "type": "short-answer", "questionText": "Name the powerhouse of the cell.", "correctAnswer": "Mitochondria"},
]


class TestRepairSteps:
    """Each repair step on its own."""

    def test_strip_json_fence(self):
        assert strip_code_fences('```json\n[1, 2]\n```') == "[1, 2]"

    def test_strip_bare_fence(self):
        assert strip_code_fences("```\n[1]\n```") == "[1]"

    def test_strip_without_fence_is_noop(self):
        assert strip_code_fences("[1]") == "[1]"

    def test_remove_trailing_commas(self):
        assert remove_trailing_commas('[{"a": 1,}, 2,]') == '[{"a": 1}, 2]'

    def test_extract_bracketed(self):
        assert extract_bracketed("Here you go: [1, 2] hope it helps") == "[1, 2]"

    def test_extract_bracketed_missing(self):
        assert extract_bracketed("no array here") is None


class TestParseJsonArray:
    """Tests for parse_json_array."""

    @pytest.mark.parametrize(
        "raw",
        [
            json.dumps(VALID_ARRAY),
            json.dumps(VALID_ARRAY, indent=2),
            "[]",
            '[{"text": "commas, inside, strings,]"}]',
        ],
    )
    def test_valid_input_parses_like_json_loads(self, raw):
        assert parse_json_array(raw) == json.loads(raw)

    def test_fenced_array(self):
        raw = "```json\n" + json.dumps(VALID_ARRAY) + "\n```"
        assert parse_json_array(raw) == VALID_ARRAY

    def test_fenced_array_with_trailing_commas(self):
        raw = '```json\n[{"id": "q-1", "valid": true,},]\n```'
        assert parse_json_array(raw) == [{"id": "q-1", "valid": True}]

    def test_prose_around_array(self):
        raw = "Sure! Here are your questions:\n" + json.dumps(VALID_ARRAY) + "\nGood luck."
        assert parse_json_array(raw) == VALID_ARRAY

    def test_wrapped_in_questions_key(self):
        raw = json.dumps({"questions": VALID_ARRAY})
        assert parse_json_array(raw) == VALID_ARRAY

    def test_unrepairable_raises(self):
        with pytest.raises(StructuredOutputError) as exc_info:
            parse_json_array("I could not generate questions for this text.")

        assert exc_info.value.raw_excerpt.startswith("I could not")

    def test_object_without_array_raises(self):
        with pytest.raises(StructuredOutputError):
            parse_json_array('{"message": "nope"}')

    def test_empty_output_raises(self):
        with pytest.raises(StructuredOutputError):
            parse_json_array("   ")

    def test_deeply_nested_output_raises_structured_error(self):
        with pytest.raises(StructuredOutputError):
            parse_json_array("[" * 5000 + "]" * 5000)


class TestParseJsonObject:
    """Tests for parse_json_object."""

    def test_fenced_object(self):
        raw = '```json\n{"hints": ["a", "b"], "explanation": "c",}\n```'
        assert parse_json_object(raw) == {"hints": ["a", "b"], "explanation": "c"}

    def test_array_is_not_an_object(self):
        with pytest.raises(StructuredOutputError):
            parse_json_object("[1, 2]")
