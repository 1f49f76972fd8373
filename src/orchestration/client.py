from __future__ import annotations

"""HTTP transport to the orchestration service."""

from dataclasses import dataclass
import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class OrchestrationError(RuntimeError):
    """Raised when the orchestration service cannot be reached or rejects a call."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class OrchestrationClient:
    """Posts payloads to the orchestration endpoint and forwards raw calls."""
    base_url: str
    endpoint: str
    resource_group: str = "default"
    timeout: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url.rstrip("/"),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def complete(self, payload: dict[str, Any], correlation_id: str) -> Any:
        """Post a payload and return the decoded response body."""
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "AI-Resource-Group": self.resource_group,
            "X-Correlation-ID": correlation_id,
        }
        try:
            async with self._client() as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error(
                "orchestration_request_failed",
                extra={"correlation_id": correlation_id, "detail": type(exc).__name__},
            )
            raise OrchestrationError("Orchestration request failed.") from exc
        data = _decode_body(response)
        if response.is_error:
            raise OrchestrationError(
                _upstream_error_message(data) or "Upstream proxy call failed.",
                status_code=response.status_code,
            )
        return data

    async def forward(
        self,
        method: str,
        path: str,
        body: bytes | None,
        headers: dict[str, str],
    ) -> httpx.Response:
        """Forward a raw request to the upstream base URL unchanged."""
        try:
            async with self._client() as client:
                response = await client.request(method, path, content=body, headers=headers)
                await response.aread()
                return response
        except httpx.HTTPError as exc:
            raise OrchestrationError(str(exc) or type(exc).__name__, status_code=500) from exc


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None when the body is not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _upstream_error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    return message if isinstance(message, str) and message else None
