"""Find-and-resume wrapper around the agent loop for one (agent kind, entity)."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from content_orchestrator.errors import AgentPausedError, AgentRunError
from content_orchestrator.runtime.loop import AgentConfig, resume_agent, run_agent
from content_orchestrator.runtime.types import AgentRun
from content_orchestrator.storage.runs import RunStore

logger = logging.getLogger(__name__)

MakeConfig = Callable[[str, bool, AgentRun | None], Awaitable[AgentConfig]]
MakeInitialMessage = Callable[[], str]


def new_run_id(agent_kind: str, entity_id: str) -> str:
    return f"{agent_kind}-{entity_id}-{int(time.time() * 1000)}"


async def find_paused_run(run_store: RunStore, agent_kind: str, entity_id: str) -> AgentRun | None:
    run_id = await run_store.get_active_run_id(agent_kind, entity_id)
    if run_id is None:
        return None
    run = await run_store.get_run(run_id)
    if run is None or run.status != "paused":
        return None
    return run


async def run_agent_lifecycle(
    agent_kind: str,
    entity_id: str,
    make_config: MakeConfig,
    make_initial_message: MakeInitialMessage,
    run_store: RunStore,
) -> AgentRun:
    """Resume the entity's paused run or start a fresh one, then settle the index.

    Returns the completed run. Raises ``AgentPausedError`` when the run paused
    again (the caller should re-invoke later) and ``AgentRunError`` when it
    ended in error. The check-then-act on the active-run index assumes one
    invocation per entity at a time.
    """
    paused = await find_paused_run(run_store, agent_kind, entity_id)

    if paused is not None:
        run_id = paused.run_id
        config = await make_config(run_id, True, paused)
        logger.info(
            "Resuming paused run run_id=%s agent_kind=%s resume=%d",
            run_id,
            agent_kind,
            paused.resume_count + 1,
        )
        run = await resume_agent(config, paused)
    else:
        run_id = new_run_id(agent_kind, entity_id)
        config = await make_config(run_id, False, None)
        run = await run_agent(config, make_initial_message())

    if run.status == "paused":
        await run_store.save_active_run(agent_kind, entity_id, run.run_id)
        raise AgentPausedError(run_id=run.run_id, agent_kind=agent_kind, entity_id=entity_id)

    await run_store.clear_active_run(agent_kind, entity_id)
    await run_store.delete_run(run.run_id)

    if run.status == "error":
        raise AgentRunError(run.error or f"{agent_kind} run failed", run_id=run.run_id)
    return run
