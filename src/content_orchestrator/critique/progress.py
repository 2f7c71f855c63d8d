"""Pipeline progress record kept in the state store for status polling."""

from __future__ import annotations

import logging
from typing import Callable

from content_orchestrator.critique.models import PipelineProgress
from content_orchestrator.storage.base import StateStore

logger = logging.getLogger(__name__)


def progress_key(run_id: str) -> str:
    return f"pipeline_progress:{run_id}"


async def get_progress(store: StateStore, run_id: str) -> PipelineProgress | None:
    raw = await store.get(progress_key(run_id))
    if raw is None:
        return None
    return PipelineProgress.model_validate_json(raw)


class ProgressTracker:
    def __init__(self, store: StateStore, run_id: str, *, ttl_s: int) -> None:
        self.store = store
        self.run_id = run_id
        self.ttl_s = ttl_s

    async def save(self, progress: PipelineProgress) -> None:
        await self.store.set(progress_key(self.run_id), progress.model_dump_json(), self.ttl_s)

    async def load(self) -> PipelineProgress | None:
        return await get_progress(self.store, self.run_id)

    async def update(self, mutate: Callable[[PipelineProgress], None]) -> None:
        """Apply ``mutate`` to the stored record; a missing record is left alone."""
        progress = await self.load()
        if progress is None:
            return
        mutate(progress)
        await self.save(progress)

    async def on_event(self, event: str, detail: str | None) -> None:
        logger.info("[content-critique] run_id=%s %s: %s", self.run_id, event, detail or "")

        def _apply(progress: PipelineProgress) -> None:
            if event == "tool_call" and detail:
                progress.current_step = detail
            elif event == "complete":
                progress.status = "complete"
                progress.current_step = "Content pipeline complete!"
            elif event == "paused":
                progress.status = "paused"
                progress.current_step = detail or "Paused, will resume"
            elif event == "error":
                progress.status = "error"
                progress.current_step = detail or "Pipeline failed"

        await self.update(_apply)
