from __future__ import annotations

import pytest

from ngo_agent.core.extraction import Raw, Structured, extract_json


def test_object_surrounded_by_prose_is_extracted() -> None:
    result = extract_json('Sure! {"subject": "Thanks"} — hope that helps')
    assert result == Structured({"subject": "Thanks"})
    assert result.to_dict() == {"subject": "Thanks"}


def test_nested_objects_parse_with_greedy_span() -> None:
    text = 'Here:\n```json\n{"a": {"b": [1, 2, {"c": true}]}, "d": "x"}\n```'
    result = extract_json(text)
    assert isinstance(result, Structured)
    assert result.get("a") == {"b": [1, 2, {"c": True}]}
    assert result.get("d") == "x"


def test_braces_inside_string_literals_survive() -> None:
    result = extract_json('{"template": "Hello {name}, thanks {again}!"}')
    assert result.get("template") == "Hello {name}, thanks {again}!"


def test_stray_braces_in_prose_degrade_to_raw() -> None:
    text = 'Use {placeholders} like this: {"subject": "Hi"}'
    result = extract_json(text)
    assert result == Raw(text)
    assert result.to_dict() == {"raw": text}


@pytest.mark.parametrize(
    "text",
    [
        "I cannot help with that.",
        '{"subject": "unterminated"',
        "{not json at all}",
        "[1, 2, 3]",
    ],
)
def test_unparseable_text_is_kept_verbatim(text: str) -> None:
    result = extract_json(text)
    assert isinstance(result, Raw)
    assert result.text == text
    assert result.get("raw") == text


@pytest.mark.parametrize("text", ["", None])
def test_empty_reply_is_raw_empty_string(text: str | None) -> None:
    assert extract_json(text) == Raw("")


def test_raw_get_other_keys_returns_default() -> None:
    assert Raw("x").get("subject") is None
    assert Raw("x").get("tips", []) == []
