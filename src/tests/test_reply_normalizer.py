from __future__ import annotations

import pytest

from src.orchestration import normalizer
from src.orchestration.normalizer import (
    NO_RESPONSE_MESSAGE,
    UNPARSED_MESSAGE,
    UPSTREAM_ERROR_MESSAGE,
    ReplyNormalizer,
    detect_answer_format,
    normalize_reply,
)
from src.orchestration.types import Citation


def orchestration_body(content: str, finish_reason: str = "stop", chunks: list | None = None) -> dict:
    return {
        "orchestration_result": {
            "choices": [{"message": {"content": content}, "finish_reason": finish_reason}],
            "module_results": {"grounding": {"grounding_chunks": chunks or []}},
        }
    }


def test_parsed_reply_with_citations() -> None:
    raw = orchestration_body(
        "The policy allows 20 days of leave.",
        chunks=[{"chunkId": "c1", "title": "HR handbook"}],
    )

    result = normalize_reply(raw)

    assert result.reply == "The policy allows 20 days of leave."
    assert result.parsed is True
    assert result.format == "plain"
    assert result.finish_reason == "stop"
    assert result.truncated is False
    assert result.ai_core_error is None
    assert [citation.title for citation in result.citations] == ["HR handbook"]


def test_length_finish_reason_marks_truncation() -> None:
    result = normalize_reply(orchestration_body("Partial answer", finish_reason="length"))

    assert result.parsed is True
    assert result.truncated is True
    assert result.reply == "Partial answer"


@pytest.mark.parametrize("raw", [None, {}, ""])
def test_empty_response(raw: object) -> None:
    result = normalize_reply(raw)

    assert result.reply == NO_RESPONSE_MESSAGE
    assert result.parsed is False
    assert result.format == "plain"
    assert result.ai_core_error is None
    assert result.citations == []


def test_error_body_surfaces_message() -> None:
    result = normalize_reply({"error": {"message": "quota exceeded"}})

    assert result.ai_core_error == "quota exceeded"
    assert result.reply == "quota exceeded"
    assert result.parsed is False
    assert result.citations == []
    assert result.finish_reason is None


def test_error_body_with_string_or_opaque_error() -> None:
    assert normalize_reply({"error": "bad deployment"}).ai_core_error == "bad deployment"
    assert normalize_reply({"error": {"code": 429}}).ai_core_error == UPSTREAM_ERROR_MESSAGE


def test_error_is_ignored_when_result_present() -> None:
    raw = orchestration_body("Answer")
    raw["error"] = {"message": "partial failure"}

    result = normalize_reply(raw)

    assert result.ai_core_error is None
    assert result.reply == "Answer"
    assert result.parsed is True


def test_error_body_skips_citation_extraction(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[object] = []

    def fake_extract(raw: object, default_source_type: str) -> list[Citation]:
        calls.append(raw)
        return [Citation("cit-1", None, default_source_type, None, "c1", None, None, None)]

    monkeypatch.setattr(normalizer, "extract_citations", fake_extract)

    error_result = normalize_reply({"error": {"message": "grounding failed"}})
    parsed_result = normalize_reply({"reply": "fine"})

    assert error_result.ai_core_error == "grounding failed"
    assert error_result.citations == []
    assert calls == [{"reply": "fine"}]
    assert [citation.chunk_id for citation in parsed_result.citations] == ["c1"]


@pytest.mark.parametrize("error", [0, 0.0, False, "", None])
def test_falsy_error_field_is_not_an_error_body(error: object) -> None:
    result = normalize_reply({"error": error, "reply": "hello"})

    assert result.ai_core_error is None
    assert result.parsed is True
    assert result.reply == "hello"


@pytest.mark.parametrize("error", [{}, [], 1, "boom"])
def test_truthy_error_field_without_result_is_an_error_body(error: object) -> None:
    result = normalize_reply({"error": error})

    assert result.parsed is False
    assert result.ai_core_error == (error if isinstance(error, str) else UPSTREAM_ERROR_MESSAGE)


def test_unparsed_response_keeps_finish_reason_and_citations() -> None:
    raw = {
        "orchestration_result": {
            "choices": [{"message": {"content": ""}, "finish_reason": "content_filter"}],
            "module_results": {"grounding": [{"chunkId": "c1"}]},
        }
    }

    result = normalize_reply(raw)

    assert result.reply == UNPARSED_MESSAGE
    assert result.parsed is False
    assert result.finish_reason == "content_filter"
    assert result.truncated is False
    assert [citation.chunk_id for citation in result.citations] == ["c1"]


def test_unparsed_non_mapping_response() -> None:
    result = normalize_reply(["not", "a", "body"])

    assert result.reply == UNPARSED_MESSAGE
    assert result.parsed is False
    assert result.citations == []


def test_citations_apply_to_generic_text_shapes() -> None:
    raw = {
        "orchestration_result": {"module_results": {"grounding": {"chunks": [{"documentId": "d1"}]}}},
        "choices": [{"text": "Generic answer"}],
    }

    result = normalize_reply(raw)

    assert result.reply == "Generic answer"
    assert result.finish_reason is None
    assert [citation.document_id for citation in result.citations] == ["d1"]


def test_normalize_is_idempotent() -> None:
    raw = orchestration_body("**Bold** answer", chunks=[{"chunkId": "c1"}, {"chunkId": "c2"}])

    first = normalize_reply(raw)
    second = normalize_reply(raw)

    assert first == second
    assert [citation.id for citation in second.citations] == ["cit-1", "cit-2"]


def test_custom_messages() -> None:
    normalizer = ReplyNormalizer(no_response_message="Nothing came back.")
    assert normalizer.normalize(None).reply == "Nothing came back."


@pytest.mark.parametrize(
    "text",
    [
        "# Title\nbody",
        "Some **bold** words",
        "See [the docs](https://example.com/docs)",
        "Steps:\n- first\n- second",
        "1. first\n2. second",
        "> quoted",
        "```python\nprint(1)\n```",
    ],
)
def test_markdown_detection(text: str) -> None:
    assert detect_answer_format(text) == "markdown"


@pytest.mark.parametrize("text", ["plain sentence.", "Costs rose 5 * 3 percent.", "#hashtag only"])
def test_plain_detection(text: str) -> None:
    assert detect_answer_format(text) == "plain"
