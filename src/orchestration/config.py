from __future__ import annotations

"""Configuration value object for orchestration payloads."""

from dataclasses import dataclass
from typing import Mapping

from src.orchestration.coerce import parse_float, parse_int

DEFAULT_DEPLOYMENT_PATH = "/v2/inference/deployments/d0246f61c3352271/completion"

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful RAG assistant. Answer strictly based on the provided context. "
    "If the information is not in the context, say so clearly."
)

# Last-resort development repository; production supplies one per request or via env.
FALLBACK_REPOSITORY_ID = "c58a8c87-f12d-4712-a791-2295640dafd8"

DEFAULT_MODEL_NAME = "gemini-2.0-flash-lite"
DEFAULT_MODEL_VERSION = "001"
DEFAULT_MAX_CHUNK_COUNT = 6
DEFAULT_HISTORY_MAX_TURNS = 0
DEFAULT_MAX_OUTPUT_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.1


@dataclass(frozen=True)
class OrchestrationConfig:
    """Knobs consumed by the payload builder."""
    endpoint: str = DEFAULT_DEPLOYMENT_PATH
    repository_id: str | None = None
    max_chunk_count: int = DEFAULT_MAX_CHUNK_COUNT
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    history_max_turns: int = DEFAULT_HISTORY_MAX_TURNS
    model_name: str = DEFAULT_MODEL_NAME
    model_version: str = DEFAULT_MODEL_VERSION
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "OrchestrationConfig":
        """Build a config from environment-style string values.

        Empty values are treated as unset. Numeric values are parsed leniently
        and fall back to the default when they cannot be read.
        """
        return cls(
            endpoint=_text(env, "AI_CORE_ORCHESTRATION_ENDPOINT") or DEFAULT_DEPLOYMENT_PATH,
            repository_id=_text(env, "AI_CORE_VECTOR_REPOSITORY_ID"),
            max_chunk_count=_int(env, "AI_MAX_CHUNK_COUNT", DEFAULT_MAX_CHUNK_COUNT),
            system_prompt=_text(env, "AI_SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
            history_max_turns=_int(env, "AI_HISTORY_MAX_TURNS", DEFAULT_HISTORY_MAX_TURNS),
            model_name=_text(env, "AI_MODEL_NAME") or DEFAULT_MODEL_NAME,
            model_version=_text(env, "AI_MODEL_VERSION") or DEFAULT_MODEL_VERSION,
            max_output_tokens=_int(env, "AI_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS),
            temperature=_float(env, "AI_TEMPERATURE", DEFAULT_TEMPERATURE),
        )


def _text(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if not value:
        return None
    return value


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    parsed = parse_int(_text(env, key))
    return default if parsed is None else parsed


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    parsed = parse_float(_text(env, key))
    return default if parsed is None else parsed
