from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from src.orchestration.coerce import parse_float
from src.orchestration.config import OrchestrationConfig

load_dotenv()

DEFAULT_PROXY_BASE_URL = "https://aicore-proxy-btp.cfapps.eu10-004.hana.ondemand.com"


@dataclass(frozen=True)
class Settings:
    service_name: str = os.getenv("SERVICE_NAME", "orchestration-chat-backend")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    metrics_enabled: bool = os.getenv("RAG_METRICS_ENABLED", "true").lower() in {"1", "true", "yes"}
    ai_core_base_url_raw: str = os.getenv("AI_CORE_PROXY_BASE_URL", DEFAULT_PROXY_BASE_URL)
    ai_resource_group_raw: str = os.getenv("AI_RESOURCE_GROUP", "default")
    ai_core_timeout_raw: str = os.getenv("AI_CORE_TIMEOUT", "60")
    force_local_fallback_raw: str = os.getenv("CHATBOT_FORCE_LOCAL_FALLBACK", "")

    @property
    def ai_core_base_url(self) -> str:
        return os.getenv("AI_CORE_PROXY_BASE_URL", self.ai_core_base_url_raw) or DEFAULT_PROXY_BASE_URL

    @property
    def ai_resource_group(self) -> str:
        return os.getenv("AI_RESOURCE_GROUP", self.ai_resource_group_raw) or "default"

    @property
    def ai_core_timeout(self) -> float:
        timeout = parse_float(os.getenv("AI_CORE_TIMEOUT", self.ai_core_timeout_raw))
        if timeout is None or timeout <= 0:
            return 60.0
        return timeout

    @property
    def force_local_fallback(self) -> bool:
        raw = os.getenv("CHATBOT_FORCE_LOCAL_FALLBACK", self.force_local_fallback_raw)
        return raw.strip().lower() == "true"

    @property
    def orchestration_config(self) -> OrchestrationConfig:
        return OrchestrationConfig.from_env(os.environ)


settings = Settings()
