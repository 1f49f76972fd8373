from __future__ import annotations

"""Orchestration request payload builder."""

from dataclasses import dataclass, field
from typing import Any, Sequence

from src.orchestration.config import FALLBACK_REPOSITORY_ID, OrchestrationConfig
from src.orchestration.history import to_template_message, window_history_messages
from src.orchestration.types import ChatTurn

GROUNDING_MODULE_TYPE = "document_grounding_service"
GROUNDING_FILTER_ID = "filter1"
QUESTION_VARIABLE = "grounding_input_variable_1"
GROUNDING_OUTPUT_VARIABLE = "grounding_output_variable"
USER_TEMPLATE_TEXT = (
    "UserQuestion: {{?grounding_input_variable_1}}, "
    "Context: {{?grounding_output_variable}}"
)


@dataclass(frozen=True)
class OrchestrationPayloadBuilder:
    """Builds grounded completion requests for the orchestration service."""
    config: OrchestrationConfig = field(default_factory=OrchestrationConfig)

    def resolve_repository_id(self, repository_id: str | None) -> str:
        """Pick the request repository, then the configured one, then the dev default."""
        return repository_id or self.config.repository_id or FALLBACK_REPOSITORY_ID

    def build(
        self,
        message: str,
        repository_id: str | None = None,
        history: Sequence[ChatTurn] | None = None,
    ) -> dict[str, Any]:
        """Build a ready-to-post orchestration payload.

        The template is system prompt, then the history window, then the
        grounded user question. Template placeholders are left for the
        orchestration service to fill in.
        """
        config = self.config
        template = [
            to_template_message("system", config.system_prompt),
            *window_history_messages(history, config.history_max_turns),
            to_template_message("user", USER_TEMPLATE_TEXT),
        ]
        return {
            "orchestration_config": {
                "module_configurations": {
                    "grounding_module_config": {
                        "type": GROUNDING_MODULE_TYPE,
                        "config": {
                            "filters": [
                                {
                                    "id": GROUNDING_FILTER_ID,
                                    "search_config": {
                                        "max_chunk_count": config.max_chunk_count,
                                    },
                                    "data_repositories": [
                                        self.resolve_repository_id(repository_id)
                                    ],
                                    "data_repository_type": "vector",
                                }
                            ],
                            "input_params": [QUESTION_VARIABLE],
                            "output_param": GROUNDING_OUTPUT_VARIABLE,
                        },
                    },
                    "templating_module_config": {
                        "template": template,
                        "defaults": {QUESTION_VARIABLE: ""},
                    },
                    "llm_module_config": {
                        "model_name": config.model_name,
                        "model_params": {
                            "max_output_tokens": config.max_output_tokens,
                            "temperature": config.temperature,
                        },
                        "model_version": config.model_version,
                    },
                }
            },
            "input_params": {QUESTION_VARIABLE: message},
        }


def build_orchestration_payload(
    message: str,
    repository_id: str | None = None,
    history: Sequence[ChatTurn] | None = None,
    config: OrchestrationConfig | None = None,
) -> dict[str, Any]:
    """Build a payload with the given config, or the defaults."""
    builder = OrchestrationPayloadBuilder(config or OrchestrationConfig())
    return builder.build(message, repository_id=repository_id, history=history)
