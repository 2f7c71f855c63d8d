"""Resumable agent execution loop.

Each turn: check the time budget, call the model with the full history and
tool schemas, append the assistant message, dispatch any requested tools
concurrently, append their results as one user message and checkpoint. The
loop pauses only at the top of a turn, never mid-call, so a paused run can be
resumed later from its stored history.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable

from content_orchestrator.errors import RunStateError
from content_orchestrator.llm.client import LLMClient
from content_orchestrator.llm.types import LLMRequest
from content_orchestrator.runtime.types import (
    AgentRun,
    Message,
    ToolUseBlock,
    extract_final_text,
)
from content_orchestrator.storage.runs import RunStore
from content_orchestrator.tools.gateway import ToolDispatcher
from content_orchestrator.tools.registry import ToolRegistry, ToolSpec

logger = logging.getLogger(__name__)

MAX_RESUME_COUNT = 5
# 30 s safety margin below a 300 s host execution ceiling.
TIME_BUDGET_S = 270.0

ProgressCallback = Callable[[str, str | None], Awaitable[None]]
RunToolFactory = Callable[[AgentRun], Iterable[ToolSpec]]


@dataclass
class AgentConfig:
    agent_kind: str
    run_id: str
    entity_id: str
    llm: LLMClient
    run_store: RunStore
    system_prompt: str
    model: str
    max_tokens: int = 4096
    max_turns: int = 30
    tools: list[ToolSpec] = field(default_factory=list)
    # Factories receive the live run so tools such as the plan tools can
    # mutate it by reference.
    run_tools: list[RunToolFactory] = field(default_factory=list)
    on_progress: ProgressCallback | None = None
    time_budget_s: float = TIME_BUDGET_S
    max_resume_count: int = MAX_RESUME_COUNT
    clock: Callable[[], float] = time.monotonic


async def run_agent(config: AgentConfig, initial_message: str) -> AgentRun:
    run = AgentRun(
        run_id=config.run_id,
        agent_kind=config.agent_kind,
        entity_id=config.entity_id,
        messages=[Message(role="user", content=initial_message)],
    )
    logger.info(
        "Starting run run_id=%s agent_kind=%s entity_id=%s",
        run.run_id,
        run.agent_kind,
        run.entity_id,
    )
    return await _agent_loop(config, run)


async def resume_agent(config: AgentConfig, run: AgentRun) -> AgentRun:
    if run.status != "paused":
        raise RunStateError(f"Run {run.run_id} is {run.status}, only paused runs can resume")

    if run.resume_count >= config.max_resume_count:
        run.mark_error(f"Max resume count ({config.max_resume_count}) exceeded")
        logger.warning("Run %s refused resume: %s", run.run_id, run.error)
        await config.run_store.save_run(run)
        await _emit(config, "error", run.error)
        return run

    run.status = "running"
    run.resume_count += 1
    logger.info(
        "Resuming run run_id=%s resume=%d turn_count=%d",
        run.run_id,
        run.resume_count,
        run.turn_count,
    )
    return await _agent_loop(config, run)


def build_run_registry(config: AgentConfig, run: AgentRun) -> ToolRegistry:
    registry = ToolRegistry(config.tools)
    for factory in config.run_tools:
        for spec in factory(run):
            registry.register(spec)
    return registry


async def _agent_loop(config: AgentConfig, run: AgentRun) -> AgentRun:
    loop_start = config.clock()

    try:
        registry = build_run_registry(config, run)
        dispatcher = ToolDispatcher(registry)
        tool_schemas = registry.schemas()

        while run.turn_count < config.max_turns:
            if config.clock() - loop_start > config.time_budget_s:
                run.status = "paused"
                logger.info(
                    "Run paused on time budget run_id=%s turn_count=%d",
                    run.run_id,
                    run.turn_count,
                )
                await config.run_store.save_run(run)
                await _emit(config, "paused", "Time budget reached, will resume")
                return run

            response = await config.llm.create_message(
                LLMRequest(
                    system=config.system_prompt,
                    messages=run.messages,
                    tools=tool_schemas,
                    model=config.model,
                    max_tokens=config.max_tokens,
                )
            )
            run.turn_count += 1
            run.total_input_tokens += response.usage.input_tokens
            run.total_output_tokens += response.usage.output_tokens
            if response.truncated:
                logger.warning(
                    "Model output truncated run_id=%s turn=%d", run.run_id, run.turn_count
                )

            blocks = list(response.content)
            run.append(Message(role="assistant", content=blocks))

            tool_uses = [block for block in blocks if isinstance(block, ToolUseBlock)]
            if not tool_uses:
                run.mark_complete(extract_final_text(blocks))
                logger.info(
                    "Run complete run_id=%s turns=%d", run.run_id, run.turn_count
                )
                await config.run_store.save_run(run)
                await _emit(config, "complete", (run.final_output or "")[:200])
                return run

            run.last_tool_call = ", ".join(block.name for block in tool_uses)
            await _emit(config, "tool_call", run.last_tool_call)
            results = await dispatcher.dispatch(tool_uses)
            run.append(Message(role="user", content=results))
            await config.run_store.save_run(run)

        run.mark_error(f"Exceeded max turns ({config.max_turns})")
        logger.warning("Run %s stopped: %s", run.run_id, run.error)
        await config.run_store.save_run(run)
        await _emit(config, "error", run.error)
        return run
    except Exception as exc:  # noqa: BLE001
        run.mark_error(str(exc) or exc.__class__.__name__)
        logger.warning("Run %s failed: %s", run.run_id, run.error)
        try:
            await config.run_store.save_run(run)
            await _emit(config, "error", run.error)
        except Exception:  # noqa: BLE001
            logger.exception("Could not record failure for run %s", run.run_id)
        return run


async def _emit(config: AgentConfig, event: str, detail: str | None) -> None:
    if config.on_progress is not None:
        await config.on_progress(event, detail)
