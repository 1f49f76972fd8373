from __future__ import annotations

"""Conversation history windowing for orchestration templates."""

from typing import Any, Sequence

from src.orchestration.types import ChatTurn

_CONVERSATIONAL_ROLES = {"user", "assistant"}


def window_history(history: Sequence[ChatTurn] | None, max_pairs: int) -> list[ChatTurn]:
    """Return the most recent complete user/assistant pairs.

    Pairs are read at even offsets of the filtered history. A position that
    is not exactly (user, assistant) is skipped rather than re-aligned, so a
    misaligned sequence drops turns. An unpaired trailing turn, usually the
    question being answered, is never included.
    """
    if max_pairs <= 0 or not history:
        return []
    relevant = [turn for turn in history if turn.role in _CONVERSATIONAL_ROLES]
    pairs: list[tuple[ChatTurn, ChatTurn]] = []
    for idx in range(0, len(relevant) - 1, 2):
        first, second = relevant[idx], relevant[idx + 1]
        if first.role == "user" and second.role == "assistant":
            pairs.append((first, second))
    return [turn for pair in pairs[-max_pairs:] for turn in pair]


def to_template_message(role: str, text: Any) -> dict[str, Any]:
    """Build a template message in orchestration content shape."""
    return {
        "role": role,
        "content": [{"type": "text", "text": "" if text is None else str(text)}],
    }


def window_history_messages(
    history: Sequence[ChatTurn] | None, max_pairs: int
) -> list[dict[str, Any]]:
    """Return the history window converted to template messages."""
    return [
        to_template_message(turn.role, turn.content)
        for turn in window_history(history, max_pairs)
    ]
