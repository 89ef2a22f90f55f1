"""Tests for the detection output contract."""

import json

import pytest

from scriptran.core.exceptions import MalformedOutputError
from scriptran.translation.output_parser import (
    parse_detection_output,
    parse_detection_output_strict,
)


VALID = {
    "detectedLanguage": "Korean",
    "languageMismatch": True,
    "suggestedText": "",
    "translatedText": "Hello",
}


def test_parses_conforming_object():
    result = parse_detection_output(json.dumps(VALID))

    assert result is not None
    assert result.detected_language == "Korean"
    assert result.language_mismatch is True
    assert result.suggested_text == ""
    assert result.translated_text == "Hello"


def test_tolerates_wrapping_code_fence():
    raw = "```json\n" + json.dumps(VALID) + "\n```"

    assert parse_detection_output(raw) is not None


def test_extra_keys_do_not_matter():
    payload = dict(VALID, confidence=0.9)

    assert parse_detection_output(json.dumps(payload)) is not None


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "Hola",
    "Sure! Here is the JSON: {\"detectedLanguage\": \"English\"}",
    "[1, 2, 3]",
    "\"just a string\"",
    "null",
])
def test_rejects_non_objects_and_prose(raw):
    assert parse_detection_output(raw) is None


@pytest.mark.parametrize("missing", sorted(VALID))
def test_rejects_missing_field(missing):
    payload = {k: v for k, v in VALID.items() if k != missing}

    assert parse_detection_output(json.dumps(payload)) is None


@pytest.mark.parametrize("field_name, bad_value", [
    ("detectedLanguage", None),
    ("languageMismatch", "false"),
    ("languageMismatch", 0),
    ("suggestedText", None),
    ("translatedText", ["Hola"]),
])
def test_rejects_wrong_kinds(field_name, bad_value):
    payload = dict(VALID, **{field_name: bad_value})

    assert parse_detection_output(json.dumps(payload)) is None


def test_strict_variant_explains_failure():
    payload = dict(VALID, languageMismatch="yes")

    with pytest.raises(MalformedOutputError) as exc_info:
        parse_detection_output_strict(json.dumps(payload))

    assert "languageMismatch" in exc_info.value.message
    assert exc_info.value.raw_output


def test_no_semantic_validation():
    """A translation that is obviously not in the target language still parses."""
    payload = dict(VALID, translatedText="안녕하세요")

    assert parse_detection_output(json.dumps(payload)).translated_text == "안녕하세요"
