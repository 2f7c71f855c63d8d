"""Scratchpad tools: a per-entity key-value namespace shared between agent runs."""

from __future__ import annotations

from typing import Any

from content_orchestrator.storage.base import StateStore
from content_orchestrator.tools.registry import ToolSpec
from content_orchestrator.tools.schemas import ReadScratchpadInput, WriteScratchpadInput


def scratchpad_key(entity_id: str, key: str) -> str:
    return f"scratchpad:{entity_id}:{key}"


def create_scratchpad_tools(store: StateStore, entity_id: str) -> list[ToolSpec]:
    async def _read(payload: ReadScratchpadInput) -> dict[str, Any]:
        value = await store.get(scratchpad_key(entity_id, payload.key))
        return {"key": payload.key, "value": value}

    async def _write(payload: WriteScratchpadInput) -> dict[str, Any]:
        await store.set(scratchpad_key(entity_id, payload.key), payload.value, None)
        return {"success": True}

    return [
        ToolSpec(
            name="read_scratchpad",
            description=(
                "Read a value from the shared scratchpad for this entity. "
                "Other agents can write here too."
            ),
            input_model=ReadScratchpadInput,
            fn=_read,
        ),
        ToolSpec(
            name="write_scratchpad",
            description=(
                "Write a value to the shared scratchpad for this entity. "
                "Other agents can read it later."
            ),
            input_model=WriteScratchpadInput,
            fn=_write,
        ),
    ]
