from __future__ import annotations

"""Response shape probing for orchestration and provider replies."""

from typing import Any, Mapping, Sequence

Path = tuple[str | int, ...]

# Evaluated in order; the first probe yielding text wins.
RESPONSE_SHAPE_PROBES: tuple[tuple[str, Path], ...] = (
    (
        "orchestration_result.choices[0].message.content",
        ("orchestration_result", "choices", 0, "message", "content"),
    ),
    (
        "orchestration_result.module_results.llm.choices[0].message.content",
        ("orchestration_result", "module_results", "llm", "choices", 0, "message", "content"),
    ),
    ("orchestration_result.response", ("orchestration_result", "response")),
    ("choices[0].message.content", ("choices", 0, "message", "content")),
    ("choices[0].text", ("choices", 0, "text")),
    ("output_text", ("output_text",)),
    ("result.output_text", ("result", "output_text")),
    ("completion", ("completion",)),
    ("reply", ("reply",)),
    ("message", ("message",)),
)

FINISH_REASON_PATHS: tuple[Path, ...] = (
    ("orchestration_result", "choices", 0, "finish_reason"),
    ("orchestration_result", "module_results", "llm", "choices", 0, "finish_reason"),
    ("choices", 0, "finish_reason"),
)


def lookup(data: Any, path: Path) -> Any:
    """Follow a path of mapping keys and list indices, or return None."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not _is_list(current) or step >= len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, Mapping):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def text_from_candidate(candidate: Any) -> str | None:
    """Extract text from a string or a list of content fragments."""
    if isinstance(candidate, str):
        text = candidate.strip()
        return text or None
    if _is_list(candidate):
        text = "\n".join(_fragment_text(item) for item in candidate).strip()
        return text or None
    return None


def probe_text_with_label(raw: Any) -> tuple[str, str] | None:
    """Return (label, text) for the first matching response shape."""
    for label, path in RESPONSE_SHAPE_PROBES:
        text = text_from_candidate(lookup(raw, path))
        if text:
            return label, text
    return None


def probe_text(raw: Any) -> str | None:
    """Return the reply text from the first matching response shape."""
    match = probe_text_with_label(raw)
    if match is None:
        return None
    return match[1]


def probe_finish_reason(raw: Any) -> str | None:
    """Return the first finish reason found on an orchestration-shaped path."""
    for path in FINISH_REASON_PATHS:
        value = lookup(raw, path)
        if isinstance(value, str) and value:
            return value
    return None


def _fragment_text(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        for key in ("text", "content"):
            value = item.get(key)
            if isinstance(value, str):
                return value
    return ""


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
