"""Anthropic Messages API adapter behind a small async client protocol."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Protocol
from urllib import error, request

from content_orchestrator.config.settings import Settings
from content_orchestrator.errors import LLMServiceError
from content_orchestrator.llm.types import LLMRequest, LLMResponse, Usage
from content_orchestrator.runtime.types import TextBlock, ToolUseBlock

logger = logging.getLogger(__name__)

_KNOWN_STOP_REASONS = {"end_turn", "tool_use", "max_tokens", "stop_sequence"}


class LLMClient(Protocol):
    """Interface for one model invocation."""

    async def create_message(self, llm_request: LLMRequest) -> LLMResponse: ...


class AnthropicMessagesClient:
    """Call ``POST /messages`` with retry and backoff on transport failures."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.anthropic.com/v1",
        api_version: str = "2023-06-01",
        timeout_s: float = 120.0,
        max_retries: int = 1,
        backoff_s: float = 0.5,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.backoff_s = max(0.0, backoff_s)

    async def create_message(self, llm_request: LLMRequest) -> LLMResponse:
        if not self.api_key:
            raise LLMServiceError("ANTHROPIC_API_KEY is missing")
        payload = build_request_payload(llm_request)
        response_json = await asyncio.to_thread(self._request_with_retry, payload)
        return parse_response(response_json)

    def _request_with_retry(self, payload: dict[str, Any]) -> dict[str, Any]:
        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                return self._request_once(payload)
            except (TimeoutError, LLMServiceError, error.URLError) as exc:
                last_error = exc
                logger.warning(
                    "Anthropic request failed attempt=%d/%d model=%s reason=%s",
                    attempt + 1,
                    self.max_retries + 1,
                    payload.get("model"),
                    exc,
                )
                if attempt < self.max_retries and self.backoff_s > 0:
                    time.sleep(self.backoff_s)
        if last_error is None:
            raise LLMServiceError("LLM request failed with unknown error")
        if isinstance(last_error, LLMServiceError):
            raise last_error
        raise LLMServiceError(f"LLM request failed: {last_error}") from last_error

    def _request_once(self, payload: dict[str, Any]) -> dict[str, Any]:
        req = request.Request(
            url=f"{self.base_url}/messages",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
                "content-type": "application/json",
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                raw = response.read().decode("utf-8")
        except error.HTTPError as exc:
            message = exc.read().decode("utf-8", errors="replace")
            raise LLMServiceError(
                f"Anthropic request failed with status {exc.code}: {message[:400]}"
            ) from exc

        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LLMServiceError("Anthropic API returned non-JSON response") from exc


def build_request_payload(llm_request: LLMRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": llm_request.model,
        "max_tokens": llm_request.max_tokens,
        "messages": [message.model_dump(mode="json") for message in llm_request.messages],
    }
    if llm_request.system:
        payload["system"] = llm_request.system
    if llm_request.tools:
        payload["tools"] = llm_request.tools
    return payload


def parse_response(response_json: dict[str, Any]) -> LLMResponse:
    blocks: list[TextBlock | ToolUseBlock] = []
    for raw in response_json.get("content") or []:
        if not isinstance(raw, dict):
            continue
        block_type = raw.get("type")
        if block_type == "text":
            blocks.append(TextBlock(text=str(raw.get("text", ""))))
        elif block_type == "tool_use":
            tool_input = raw.get("input")
            blocks.append(
                ToolUseBlock(
                    id=str(raw.get("id", "")),
                    name=str(raw.get("name", "")),
                    input=tool_input if isinstance(tool_input, dict) else {},
                )
            )

    stop_reason = response_json.get("stop_reason") or "end_turn"
    if stop_reason not in _KNOWN_STOP_REASONS:
        stop_reason = "end_turn"
    usage = response_json.get("usage") if isinstance(response_json.get("usage"), dict) else {}
    return LLMResponse(
        content=blocks,
        stop_reason=stop_reason,
        usage=Usage(
            input_tokens=int(usage.get("input_tokens") or 0),
            output_tokens=int(usage.get("output_tokens") or 0),
        ),
    )


def build_llm_client(settings: Settings) -> AnthropicMessagesClient:
    return AnthropicMessagesClient(
        api_key=settings.resolved_anthropic_api_key(),
        base_url=settings.llm_base_url,
        api_version=settings.llm_api_version,
        timeout_s=settings.llm_timeout_s,
        max_retries=settings.llm_max_retries,
        backoff_s=settings.llm_backoff_s,
    )
