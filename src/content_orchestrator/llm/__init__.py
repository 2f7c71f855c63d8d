"""Language-model service adapter."""

from content_orchestrator.llm.client import AnthropicMessagesClient, LLMClient, build_llm_client
from content_orchestrator.llm.parsing import parse_llm_json, require_complete
from content_orchestrator.llm.types import LLMRequest, LLMResponse, Usage

__all__ = [
    "AnthropicMessagesClient",
    "LLMClient",
    "LLMRequest",
    "LLMResponse",
    "Usage",
    "build_llm_client",
    "parse_llm_json",
    "require_complete",
]
