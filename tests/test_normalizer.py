from __future__ import annotations

from normalizer import normalize_transcript


class _Response:
    def __init__(self, text: object) -> None:
        self.text = text


def test_sequence_of_fragments_is_concatenated_in_order() -> None:
    assert normalize_transcript(["Hel", "lo", " world"]) == "Hello world"
    assert normalize_transcript(("a", "b")) == "ab"


def test_iterator_output_is_concatenated() -> None:
    assert normalize_transcript(iter(["Hal", "lo"])) == "Hallo"


def test_empty_sequence_gives_empty_string() -> None:
    assert normalize_transcript([]) == ""


def test_plain_text_is_returned_as_is() -> None:
    assert normalize_transcript("  Guten Tag ") == "  Guten Tag "


def test_text_field_with_fragments() -> None:
    assert normalize_transcript({"text": ["Hel", "lo"]}) == "Hello"


def test_text_field_with_plain_text() -> None:
    assert normalize_transcript({"text": "Hello"}) == "Hello"


def test_text_attribute_on_objects() -> None:
    assert normalize_transcript(_Response("Hello")) == "Hello"
    assert normalize_transcript(_Response(["He", "llo"])) == "Hello"


def test_unrecognized_object_is_serialized() -> None:
    assert normalize_transcript({"segments": [1, 2]}) == '{"segments": [1, 2]}'
    assert normalize_transcript(42) == "42"


def test_text_field_of_unknown_shape_falls_back_to_serialization() -> None:
    assert normalize_transcript({"text": None}) == '{"text": null}'


def test_unserializable_object_still_gives_a_string() -> None:
    result = normalize_transcript(object())

    assert isinstance(result, str)
    assert "object" in result


def test_absent_response_gives_empty_string() -> None:
    assert normalize_transcript(None) == ""


def test_list_of_non_text_items_is_serialized_not_stringified() -> None:
    assert normalize_transcript([{"text": "a"}]) == '[{"text": "a"}]'
    assert normalize_transcript(["a", 1]) == '["a", 1]'
    assert normalize_transcript(iter([{"text": "a"}])) == '[{"text": "a"}]'
