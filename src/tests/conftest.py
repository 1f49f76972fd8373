from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["RAG_METRICS_ENABLED"] = "true"
os.environ.pop("CHATBOT_FORCE_LOCAL_FALLBACK", None)
os.environ.pop("AI_CORE_VECTOR_REPOSITORY_ID", None)
os.environ.pop("AI_HISTORY_MAX_TURNS", None)
os.environ.setdefault("AI_CORE_PROXY_BASE_URL", "http://aicore.test")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
