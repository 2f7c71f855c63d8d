"""Run checkpoints and the active-run index on top of a ``StateStore``."""

from __future__ import annotations

import logging

from content_orchestrator.runtime.types import AgentRun
from content_orchestrator.storage.base import StateStore

logger = logging.getLogger(__name__)

DEFAULT_STATE_TTL_S = 7200


def state_key(run_id: str) -> str:
    return f"agent_state:{run_id}"


def active_run_key(agent_kind: str, entity_id: str) -> str:
    return f"active_run:{agent_kind}:{entity_id}"


class RunStore:
    """Persist serialized runs and the (agent kind, entity) -> run id mapping.

    Both records share one TTL, long enough to span several pause/resume
    cycles.
    """

    def __init__(self, store: StateStore, *, ttl_s: int = DEFAULT_STATE_TTL_S) -> None:
        self.store = store
        self.ttl_s = ttl_s

    async def save_run(self, run: AgentRun) -> None:
        await self.store.set(state_key(run.run_id), run.model_dump_json(), self.ttl_s)

    async def get_run(self, run_id: str) -> AgentRun | None:
        raw = await self.store.get(state_key(run_id))
        if raw is None:
            return None
        return AgentRun.model_validate_json(raw)

    async def delete_run(self, run_id: str) -> None:
        await self.store.delete(state_key(run_id))

    async def save_active_run(self, agent_kind: str, entity_id: str, run_id: str) -> None:
        await self.store.set(active_run_key(agent_kind, entity_id), run_id, self.ttl_s)

    async def get_active_run_id(self, agent_kind: str, entity_id: str) -> str | None:
        raw = await self.store.get(active_run_key(agent_kind, entity_id))
        if not raw:
            return None
        return raw

    async def clear_active_run(self, agent_kind: str, entity_id: str) -> None:
        await self.store.delete(active_run_key(agent_kind, entity_id))
        logger.debug("Cleared active run agent_kind=%s entity_id=%s", agent_kind, entity_id)
