from typing import List

import pytest
from pydantic import BaseModel

from app.services.normalizer import (
    ARRAY_PATTERN, OBJECT_PATTERN, FALLBACK_ERROR, INVALID_SHAPE, UNPARSEABLE,
    Fallback, Parsed, extract_json, normalize, shape,
)

FALLBACK = {"accuracy": 50, "summary": "could not grade"}


class Point(BaseModel):
    x: int
    y: int


def test_strict_parse():
    result = normalize('{"a": 1}')
    assert result == Parsed(value={"a": 1})


def test_extracts_object_surrounded_by_prose():
    result = normalize('prefix text {"a":1} suffix', pattern=OBJECT_PATTERN)
    assert isinstance(result, Parsed)
    assert result.value == {"a": 1}


def test_extracts_array_from_markdown_fence():
    raw = 'Here you go:\n```json\n[1, 2, 3]\n```'
    assert normalize(raw, pattern=ARRAY_PATTERN).value == [1, 2, 3]


def test_default_pattern_takes_first_bracket_or_brace():
    assert extract_json('answer: [{"a": 1}] done') == [{"a": 1}]
    assert extract_json('answer: {"a": [1]} done') == {"a": [1]}


def test_no_json_gives_documented_fallback():
    raw = "Sorry, I cannot answer that."
    result = normalize(raw, fallback=FALLBACK)
    assert isinstance(result, Fallback)
    assert result.reason == UNPARSEABLE
    assert result.raw == raw
    assert result.value == {**FALLBACK, "raw": raw, "error": FALLBACK_ERROR}


def test_broken_json_in_braces_gives_fallback():
    result = normalize('{"a": 1,, }', pattern=OBJECT_PATTERN, fallback=FALLBACK)
    assert isinstance(result, Fallback)
    assert result.value["error"] == FALLBACK_ERROR


def test_fallback_value_is_none_without_placeholder():
    result = normalize("nothing here")
    assert isinstance(result, Fallback)
    assert result.value is None


def test_validator_result_is_returned():
    result = normalize('{"x": 1, "y": 2}', validate=shape(Point))
    assert isinstance(result, Parsed)
    assert result.value == Point(x=1, y=2)


def test_invalid_shape_is_a_fallback_with_detail():
    result = normalize('[{"x": 1}]', validate=shape(List[Point]), fallback=FALLBACK)
    assert isinstance(result, Fallback)
    assert result.reason == INVALID_SHAPE
    assert "y" in result.detail
    assert result.value["accuracy"] == 50


def test_plain_value_error_validator():
    def positive(value):
        if value <= 0:
            raise ValueError("must be positive")
        return value

    assert normalize("5", validate=positive) == Parsed(value=5)
    result = normalize("-1", validate=positive)
    assert isinstance(result, Fallback) and result.detail == "must be positive"


@pytest.mark.parametrize("raw", ["", "   ", "null-ish text"])
def test_empty_or_garbage(raw):
    assert isinstance(normalize(raw), Fallback)
