from __future__ import annotations

"""Value types shared by the orchestration adapter."""

from dataclasses import dataclass, field
from typing import Literal

ReplyFormat = Literal["markdown", "plain"]


@dataclass(frozen=True)
class ChatTurn:
    """Single conversational turn supplied by the caller."""
    role: str
    content: str


@dataclass(frozen=True)
class Citation:
    """Normalized reference to one grounding chunk."""
    id: str
    title: str | None
    source_type: str
    document_id: str | None
    chunk_id: str | None
    page: int | None
    uri: str | None
    score: float | None


@dataclass(frozen=True)
class NormalizedReply:
    """Canonical reply parsed from an orchestration response."""
    reply: str
    parsed: bool
    format: ReplyFormat = "plain"
    finish_reason: str | None = None
    truncated: bool = False
    ai_core_error: str | None = None
    citations: list[Citation] = field(default_factory=list)
