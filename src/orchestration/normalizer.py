from __future__ import annotations

"""Normalization of raw orchestration responses into canonical replies."""

from dataclasses import dataclass
import logging
import math
import re
from typing import Any, Mapping

from src.orchestration.citations import DEFAULT_SOURCE_TYPE, extract_citations
from src.orchestration.probes import probe_finish_reason, probe_text_with_label
from src.orchestration.types import NormalizedReply, ReplyFormat

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "No response received from AI Core."
UNPARSED_MESSAGE = "Could not extract text from AI Core response."
UPSTREAM_ERROR_MESSAGE = "AI Core returned an error response."

_MARKDOWN_RE = re.compile(
    r"(?:^#{1,6}\s|[*_]{1,2}\S|\[.+\]\(https?://|^[-*+]\s|^\d+\.\s|^>\s|```)",
    re.MULTILINE,
)


def detect_answer_format(text: str) -> ReplyFormat:
    """Classify reply text as markdown or plain."""
    if _MARKDOWN_RE.search(text):
        return "markdown"
    return "plain"


@dataclass(frozen=True)
class ReplyNormalizer:
    """Turns raw orchestration bodies into NormalizedReply values."""
    no_response_message: str = NO_RESPONSE_MESSAGE
    unparsed_message: str = UNPARSED_MESSAGE
    upstream_error_message: str = UPSTREAM_ERROR_MESSAGE
    default_source_type: str = DEFAULT_SOURCE_TYPE

    def normalize(self, raw: Any) -> NormalizedReply:
        """Normalize a raw response; never raises for malformed data."""
        if not raw:
            return NormalizedReply(reply=self.no_response_message, parsed=False)

        if isinstance(raw, Mapping) and _is_error_body(raw):
            message = self._error_message(raw["error"])
            logger.warning("orchestration_upstream_error", extra={"detail": message})
            return NormalizedReply(reply=message, parsed=False, ai_core_error=message)

        finish_reason = probe_finish_reason(raw)
        citations = extract_citations(raw, self.default_source_type)
        match = probe_text_with_label(raw)
        if match is None:
            logger.warning(
                "orchestration_reply_unparsed",
                extra={"keys": sorted(str(key) for key in raw) if isinstance(raw, Mapping) else []},
            )
            return NormalizedReply(
                reply=self.unparsed_message,
                parsed=False,
                finish_reason=finish_reason,
                citations=citations,
            )
        label, text = match
        logger.debug("orchestration_reply_parsed", extra={"probe": label})
        return NormalizedReply(
            reply=text,
            parsed=True,
            format=detect_answer_format(text),
            finish_reason=finish_reason,
            truncated=finish_reason == "length",
            citations=citations,
        )

    def _error_message(self, error: Any) -> str:
        detail = error
        if isinstance(error, Mapping) and error.get("message") is not None:
            detail = error["message"]
        if isinstance(detail, str) and detail.strip():
            return detail
        return self.upstream_error_message


def _is_error_body(raw: Mapping[str, Any]) -> bool:
    """Return True when the body reports an error and carries no result."""
    error = raw.get("error")
    if error is None or error == "":
        return False
    if isinstance(error, (int, float)) and (not error or math.isnan(error)):
        return False
    return raw.get("orchestration_result") is None and raw.get("choices") is None


_default_normalizer = ReplyNormalizer()


def normalize_reply(raw: Any) -> NormalizedReply:
    """Normalize a raw response with the default messages."""
    return _default_normalizer.normalize(raw)
