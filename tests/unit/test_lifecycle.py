import asyncio

import pytest

from content_orchestrator.errors import AgentPausedError, AgentRunError
from content_orchestrator.runtime.lifecycle import new_run_id, run_agent_lifecycle
from content_orchestrator.runtime.loop import AgentConfig
from content_orchestrator.runtime.types import AgentRun
from content_orchestrator.storage.runs import RunStore
from fakes import FakeLLMClient, text_response

KIND = "test-agent"
ENTITY = "entity-1"


def _make_config_factory(llm: FakeLLMClient, run_store: RunStore, calls: list, **overrides):
    async def make_config(run_id: str, is_resume: bool, paused: AgentRun | None) -> AgentConfig:
        calls.append((run_id, is_resume, paused.run_id if paused else None))
        params = {
            "agent_kind": KIND,
            "run_id": run_id,
            "entity_id": ENTITY,
            "llm": llm,
            "run_store": run_store,
            "system_prompt": "system",
            "model": "test-model",
        }
        params.update(overrides)
        return AgentConfig(**params)

    return make_config


def test_new_run_id_has_kind_entity_and_millis() -> None:
    run_id = new_run_id("content-critique", "idea-7")

    prefix, _, millis = run_id.rpartition("-")
    assert prefix == "content-critique-idea-7"
    assert millis.isdigit() and len(millis) >= 13


def test_fresh_run_completes_and_cleans_up(run_store: RunStore) -> None:
    llm = FakeLLMClient([text_response("done")])
    calls: list = []

    run = asyncio.run(
        run_agent_lifecycle(
            KIND, ENTITY, _make_config_factory(llm, run_store, calls), lambda: "hello", run_store
        )
    )

    assert run.status == "complete"
    assert calls[0][1:] == (False, None)
    assert run.messages[0].content == "hello"
    assert asyncio.run(run_store.get_run(run.run_id)) is None
    assert asyncio.run(run_store.get_active_run_id(KIND, ENTITY)) is None


def test_paused_run_registers_active_run_and_resumes_next_call(run_store: RunStore) -> None:
    llm = FakeLLMClient([])
    calls: list = []
    ticks = iter([0.0, 999.0])

    with pytest.raises(AgentPausedError) as excinfo:
        asyncio.run(
            run_agent_lifecycle(
                KIND,
                ENTITY,
                _make_config_factory(llm, run_store, calls, clock=lambda: next(ticks)),
                lambda: "hello",
                run_store,
            )
        )

    paused_id = excinfo.value.run_id
    assert str(excinfo.value).startswith("AGENT_PAUSED")
    assert not isinstance(excinfo.value, AgentRunError)
    assert asyncio.run(run_store.get_active_run_id(KIND, ENTITY)) == paused_id

    llm.script = [text_response("resumed")]
    initial_messages: list[str] = []

    def make_initial_message() -> str:
        initial_messages.append("called")
        return "should not be used"

    run = asyncio.run(
        run_agent_lifecycle(
            KIND,
            ENTITY,
            _make_config_factory(llm, run_store, calls),
            make_initial_message,
            run_store,
        )
    )

    assert run.run_id == paused_id
    assert run.resume_count == 1
    assert run.final_output == "resumed"
    assert calls[-1] == (paused_id, True, paused_id)
    assert initial_messages == []
    assert asyncio.run(run_store.get_active_run_id(KIND, ENTITY)) is None


def test_stale_active_entry_for_finished_run_starts_fresh(run_store: RunStore) -> None:
    finished = AgentRun(run_id="old-run", agent_kind=KIND, entity_id=ENTITY, status="complete")
    asyncio.run(run_store.save_run(finished))
    asyncio.run(run_store.save_active_run(KIND, ENTITY, "old-run"))
    llm = FakeLLMClient([text_response("fresh")])
    calls: list = []

    run = asyncio.run(
        run_agent_lifecycle(
            KIND, ENTITY, _make_config_factory(llm, run_store, calls), lambda: "hi", run_store
        )
    )

    assert run.run_id != "old-run"
    assert calls[0][1] is False


def test_error_run_raises_with_run_error_and_cleans_up(run_store: RunStore) -> None:
    llm = FakeLLMClient([RuntimeError("model exploded")])

    with pytest.raises(AgentRunError, match="model exploded") as excinfo:
        asyncio.run(
            run_agent_lifecycle(
                KIND, ENTITY, _make_config_factory(llm, run_store, []), lambda: "hi", run_store
            )
        )

    assert asyncio.run(run_store.get_run(excinfo.value.run_id)) is None
    assert asyncio.run(run_store.get_active_run_id(KIND, ENTITY)) is None
