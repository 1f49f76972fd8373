from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ChatTurnIn(BaseModel):
    role: str
    content: str | None = None


class AskRequest(BaseModel):
    question: str
    repository_id: str | None = None
    conversation_id: str | None = None
    history: list[ChatTurnIn] = Field(default_factory=list)


class AnswerBody(BaseModel):
    format: Literal["markdown", "plain"]
    markdown: str | None = None
    plain_text: str


class CitationOut(BaseModel):
    id: str
    title: str | None = None
    source_type: str
    document_id: str | None = None
    chunk_id: str | None = None
    page: int | None = None
    uri: str | None = None
    score: float | None = None


class ModelInfo(BaseModel):
    name: str
    latency_ms: int


class AskResponse(BaseModel):
    conversation_id: str | None = None
    message_id: str | None = None
    answer: AnswerBody
    citations: list[CitationOut] = Field(default_factory=list)
    model: ModelInfo
    finish_reason: str | None = None
    truncated: bool = False
    technical_code: Literal["OK", "TRUNCATED", "PARTIAL", "LOCAL_FALLBACK"]
    correlation_id: str
