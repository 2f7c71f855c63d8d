"""Concurrent, failure-isolated execution of the tool calls in one turn."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from content_orchestrator.errors import UnknownToolError
from content_orchestrator.runtime.types import ToolResultBlock, ToolUseBlock
from content_orchestrator.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Execute registered tools with input validation and per-call error capture.

    Every requested ``tool_use`` id gets exactly one ``tool_result``. A failing
    or unknown tool yields an ``is_error`` result and never affects siblings.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def dispatch(self, tool_uses: list[ToolUseBlock]) -> list[ToolResultBlock]:
        return list(await asyncio.gather(*(self.execute(block) for block in tool_uses)))

    async def execute(self, block: ToolUseBlock) -> ToolResultBlock:
        started_at = time.perf_counter()
        try:
            output = await self._execute_once(block.name, block.input)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Tool failed tool=%s id=%s duration_ms=%.2f error=%s",
                block.name,
                block.id,
                _duration_ms(started_at),
                exc,
            )
            return ToolResultBlock(
                tool_use_id=block.id,
                content=json.dumps({"error": _error_message(exc)}),
                is_error=True,
            )

        logger.info(
            "Tool ok tool=%s id=%s duration_ms=%.2f",
            block.name,
            block.id,
            _duration_ms(started_at),
        )
        return ToolResultBlock(tool_use_id=block.id, content=_encode(output))

    async def _execute_once(self, tool_name: str, args: dict[str, Any]) -> Any:
        spec = self.registry.get(tool_name)
        payload = spec.input_model.model_validate(args)
        return await spec.fn(payload)


def _encode(output: Any) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, default=str)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, UnknownToolError):
        return str(exc)
    if isinstance(exc, ValidationError):
        return f"Invalid tool input: {exc.errors(include_url=False)}"
    return str(exc) or "Tool execution failed"


def _duration_ms(started_at: float) -> float:
    return round((time.perf_counter() - started_at) * 1000.0, 2)
