"""Helpers for structured model output."""

from __future__ import annotations

import json
import re
from typing import Any

from content_orchestrator.errors import StructuredOutputError, TruncatedOutputError
from content_orchestrator.llm.types import LLMResponse

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_LINE_COMMENT = re.compile(r"//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_JSON_SPAN = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")


def require_complete(response: LLMResponse, *, context: str) -> LLMResponse:
    """Fail fast instead of parsing output that hit the size limit."""
    if response.truncated:
        raise TruncatedOutputError(f"LLM {context} output was truncated (max_tokens)")
    return response


def clean_json_string(text: str) -> str:
    cleaned = _TRAILING_COMMA.sub(r"\1", text)
    cleaned = _LINE_COMMENT.sub("", cleaned)
    return _BLOCK_COMMENT.sub("", cleaned)


def parse_llm_json(text: str) -> Any:
    """Parse JSON from model text, tolerating fences, trailing commas and comments."""
    candidate = text.strip()
    fenced = _CODE_FENCE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()

    for attempt in (candidate, clean_json_string(candidate)):
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue

    span = _JSON_SPAN.search(text)
    if span:
        try:
            return json.loads(clean_json_string(span.group(1)))
        except json.JSONDecodeError:
            pass
    raise StructuredOutputError("Failed to parse JSON from LLM response")
