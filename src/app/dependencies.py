from __future__ import annotations

from src.app.settings import settings
from src.orchestration.client import OrchestrationClient
from src.orchestration.normalizer import ReplyNormalizer
from src.orchestration.payload import OrchestrationPayloadBuilder


def get_payload_builder() -> OrchestrationPayloadBuilder:
    return OrchestrationPayloadBuilder(settings.orchestration_config)


def get_reply_normalizer() -> ReplyNormalizer:
    return ReplyNormalizer()


def get_orchestration_client() -> OrchestrationClient:
    return OrchestrationClient(
        base_url=settings.ai_core_base_url,
        endpoint=settings.orchestration_config.endpoint,
        resource_group=settings.ai_resource_group,
        timeout=settings.ai_core_timeout,
    )
