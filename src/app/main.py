from __future__ import annotations

"""FastAPI application entrypoint for the orchestration chat backend."""

import logging
import time
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from src.app.dependencies import (
    get_orchestration_client,
    get_payload_builder,
    get_reply_normalizer,
)
from src.app.metrics import metrics_middleware, metrics_response, record_reply
from src.app.schemas import AnswerBody, AskRequest, AskResponse, CitationOut, ModelInfo
from src.app.settings import settings
from src.orchestration.client import OrchestrationError
from src.orchestration.types import ChatTurn, NormalizedReply

logger = logging.getLogger(__name__)

app = FastAPI(title="Orchestration Chat Backend", version="0.1.0")

_LOGGED_PREFIXES = ("/v2", "/chat")
_PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def create_correlation_id() -> str:
    """Return a new correlation ID of the form corr-<time>-<random>."""
    return f"corr-{int(time.time() * 1000):x}-{uuid.uuid4().hex[:6]}"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or create_correlation_id()


def _technical_code(reply: NormalizedReply) -> str:
    if not reply.parsed:
        return "PARTIAL"
    if reply.truncated:
        return "TRUNCATED"
    return "OK"


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    """Attach or create a correlation ID and log inbound chat/proxy calls."""
    correlation_id = request.headers.get("x-correlation-id") or create_correlation_id()
    request.state.correlation_id = correlation_id
    if request.url.path.startswith(_LOGGED_PREFIXES):
        logger.info(
            "inbound_request",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
            },
        )
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/")
async def root() -> dict[str, bool]:
    """Liveness probe."""
    return {"ok": True}


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok", "service": settings.service_name}


@app.post("/chat/ask", response_model=AskResponse)
async def ask_question(request: AskRequest, http_request: Request) -> AskResponse:
    """Answer a question through the grounded orchestration service."""
    question = request.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="question is required")
    correlation_id = _correlation_id(http_request)

    if settings.force_local_fallback:
        record_reply("LOCAL_FALLBACK")
        return AskResponse(
            conversation_id=request.conversation_id,
            answer=AnswerBody(
                format="plain",
                markdown=None,
                plain_text=f"[local-fallback] {question}",
            ),
            model=ModelInfo(name="local-fallback", latency_ms=0),
            technical_code="LOCAL_FALLBACK",
            correlation_id=correlation_id,
        )

    builder = get_payload_builder()
    history = [ChatTurn(role=turn.role, content=turn.content or "") for turn in request.history]
    payload = builder.build(question, repository_id=request.repository_id, history=history)
    client = get_orchestration_client()
    started = time.monotonic()
    try:
        data = await client.complete(payload, correlation_id)
    except OrchestrationError as exc:
        logger.error(
            "chat_upstream_failed",
            extra={
                "correlation_id": correlation_id,
                "status_code": exc.status_code,
                "detail": str(exc),
            },
        )
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    upstream_seconds = time.monotonic() - started

    reply = get_reply_normalizer().normalize(data)
    if reply.ai_core_error:
        record_reply("ERROR", upstream_seconds)
        raise HTTPException(status_code=502, detail=reply.ai_core_error)

    technical_code = _technical_code(reply)
    record_reply(technical_code, upstream_seconds)
    logger.info(
        "chat_completed",
        extra={
            "correlation_id": correlation_id,
            "technical_code": technical_code,
            "finish_reason": reply.finish_reason,
            "reply_format": reply.format,
            "citations": len(reply.citations),
            "answer_length": len(reply.reply),
        },
    )
    return AskResponse(
        conversation_id=request.conversation_id,
        answer=AnswerBody(
            format=reply.format,
            markdown=reply.reply if reply.format == "markdown" else None,
            plain_text=reply.reply,
        ),
        citations=[CitationOut(**citation.__dict__) for citation in reply.citations],
        model=ModelInfo(
            name=builder.config.model_name,
            latency_ms=int(upstream_seconds * 1000),
        ),
        finish_reason=reply.finish_reason,
        truncated=reply.truncated,
        technical_code=technical_code,
        correlation_id=correlation_id,
    )


@app.api_route("/v2/{path:path}", methods=_PROXY_METHODS)
async def proxy_v2(path: str, http_request: Request) -> Response:
    """Forward raw /v2 calls to the upstream orchestration host."""
    correlation_id = _correlation_id(http_request)
    target = http_request.url.path
    if http_request.url.query:
        target = f"{target}?{http_request.url.query}"
    headers = {
        "accept": http_request.headers.get("accept") or "application/json",
        "content-type": http_request.headers.get("content-type") or "application/json",
        "ai-resource-group": http_request.headers.get("ai-resource-group") or "default",
    }
    body = None
    if http_request.method not in {"GET", "HEAD"}:
        body = await http_request.body() or b"{}"
    try:
        upstream = await get_orchestration_client().forward(
            http_request.method, target, body, headers
        )
    except OrchestrationError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "proxy_error": True,
                "status": exc.status_code,
                "data": {"message": str(exc)},
                "correlation_id": correlation_id,
            },
        )
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
    )
