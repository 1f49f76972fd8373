from __future__ import annotations

import pytest

from src.orchestration.probes import (
    lookup,
    probe_finish_reason,
    probe_text,
    probe_text_with_label,
    text_from_candidate,
)


def test_primary_orchestration_path_wins_over_generic_choices() -> None:
    raw = {
        "orchestration_result": {"choices": [{"message": {"content": "A"}}]},
        "choices": [{"text": "B"}],
    }
    assert probe_text(raw) == "A"


@pytest.mark.parametrize(
    ("raw", "label"),
    [
        (
            {"orchestration_result": {"module_results": {"llm": {"choices": [{"message": {"content": "x"}}]}}}},
            "orchestration_result.module_results.llm.choices[0].message.content",
        ),
        ({"orchestration_result": {"response": "x"}}, "orchestration_result.response"),
        ({"choices": [{"message": {"content": "x"}}]}, "choices[0].message.content"),
        ({"choices": [{"text": "x"}]}, "choices[0].text"),
        ({"output_text": "x"}, "output_text"),
        ({"result": {"output_text": "x"}}, "result.output_text"),
        ({"completion": "x"}, "completion"),
        ({"reply": "x"}, "reply"),
        ({"message": "x"}, "message"),
    ],
)
def test_each_known_shape_is_recognized(raw: dict, label: str) -> None:
    assert probe_text_with_label(raw) == (label, "x")


def test_blank_primary_falls_through_to_next_shape() -> None:
    raw = {
        "orchestration_result": {
            "choices": [{"message": {"content": "   "}}],
            "response": "fallback text",
        }
    }
    assert probe_text(raw) == "fallback text"


def test_content_fragments_are_joined_and_trimmed() -> None:
    raw = {
        "choices": [
            {
                "message": {
                    "content": [
                        {"type": "text", "text": " first"},
                        "second",
                        {"content": "third"},
                        {"type": "image_url"},
                    ]
                }
            }
        ]
    }
    assert probe_text(raw) == "first\nsecond\nthird"


def test_unusable_candidates_are_rejected() -> None:
    assert text_from_candidate({"text": "nested"}) is None
    assert text_from_candidate(42) is None
    assert text_from_candidate([{"image": "x"}, 5]) is None
    assert text_from_candidate("  ") is None


def test_unknown_shape_is_unparsed() -> None:
    assert probe_text({"data": {"text": "hidden"}}) is None
    assert probe_text("just a string") is None
    assert probe_text(None) is None


def test_lookup_tolerates_type_mismatches() -> None:
    assert lookup({"choices": {"0": "x"}}, ("choices", 0)) is None
    assert lookup({"choices": []}, ("choices", 0, "text")) is None
    assert lookup({"choices": "abc"}, ("choices", 0)) is None
    assert lookup({"a": {"b": 1}}, ("a", "b")) == 1


def test_finish_reason_priority() -> None:
    raw = {
        "orchestration_result": {
            "choices": [{"finish_reason": "length"}],
            "module_results": {"llm": {"choices": [{"finish_reason": "stop"}]}},
        },
        "choices": [{"finish_reason": "content_filter"}],
    }
    assert probe_finish_reason(raw) == "length"


def test_finish_reason_from_nested_and_generic_paths() -> None:
    nested = {"orchestration_result": {"module_results": {"llm": {"choices": [{"finish_reason": "stop"}]}}}}
    generic = {"choices": [{"finish_reason": "length"}]}

    assert probe_finish_reason(nested) == "stop"
    assert probe_finish_reason(generic) == "length"
    assert probe_finish_reason({"finish_reason": "stop"}) is None
