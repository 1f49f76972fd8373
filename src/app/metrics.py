from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from src.app.settings import settings

UNMATCHED_ROUTE = "unmatched"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by route template",
    ["method", "route", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds by route template",
    ["method", "route"],
)
REPLY_COUNT = Counter(
    "orchestration_replies_total",
    "Normalized orchestration replies by technical code",
    ["technical_code"],
)
UPSTREAM_LATENCY = Histogram(
    "orchestration_upstream_seconds",
    "Orchestration upstream call duration in seconds",
)


def route_label(request: Request) -> str:
    """Return the matched route template so wildcard paths share one label."""
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if isinstance(template, str) and template:
        return template
    return UNMATCHED_ROUTE


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled or request.url.path == "/metrics":
        return await call_next(request)
    started = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        # The router fills in scope["route"] while handling the request.
        route = route_label(request)
        REQUEST_COUNT.labels(request.method, route, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, route).observe(time.monotonic() - started)


def record_reply(technical_code: str, upstream_seconds: float | None = None) -> None:
    """Count a chat reply and observe its upstream latency."""
    if not settings.metrics_enabled:
        return
    REPLY_COUNT.labels(technical_code).inc()
    if upstream_seconds is not None:
        UPSTREAM_LATENCY.observe(upstream_seconds)


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
