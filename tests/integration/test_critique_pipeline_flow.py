import asyncio

import pytest

from content_orchestrator.config.settings import Settings
from content_orchestrator.critique.pipeline import (
    AGENT_KIND,
    build_system_prompt,
    run_content_critique_pipeline,
)
from content_orchestrator.critique.advisors import DEFAULT_ADVISORS
from content_orchestrator.critique.progress import get_progress
from content_orchestrator.critique.recipes import RECIPES
from content_orchestrator.errors import AgentPausedError, AgentRunError, LLMServiceError
from content_orchestrator.llm.types import LLMRequest, LLMResponse
from content_orchestrator.storage.memory import InMemoryStateStore
from content_orchestrator.storage.runs import RunStore
from fakes import FakeLLMClient, pipeline_router, text_response, tool_call, tool_response

ROUND_ONE = [
    {
        "advisor_id": "seo-expert",
        "name": "SEO Expert",
        "score": 5,
        "pass": False,
        "issues": [
            {
                "severity": "high",
                "description": "Primary keyword missing from H1",
                "suggestion": "Put the keyword in the H1",
            }
        ],
    }
]
ROUND_TWO = [{"advisor_id": "seo-expert", "name": "SEO Expert", "score": 8, "pass": True, "issues": []}]
BRIEF = "[HIGH] (SEO Expert) Primary keyword missing from H1"


def _two_round_script(final_quality: str = "approved") -> list[LLMResponse]:
    return [
        tool_response(
            tool_call(
                "create_plan",
                {"steps": [{"description": "Draft and critique", "rationale": "Recipe order"}]},
            ),
            tool_call("generate_draft", {"content_context": "Invoicing for freelancers"}),
        ),
        tool_response(tool_call("run_critiques", {})),
        tool_response(tool_call("editor_decision", {"critiques": ROUND_ONE})),
        tool_response(
            tool_call(
                "summarize_round",
                {"round": 1, "critiques": ROUND_ONE, "editor_decision": "revise", "brief": BRIEF},
            )
        ),
        tool_response(tool_call("revise_draft", {"brief": BRIEF})),
        tool_response(tool_call("run_critiques", {})),
        tool_response(tool_call("editor_decision", {"critiques": ROUND_TWO})),
        tool_response(
            tool_call(
                "summarize_round",
                {"round": 2, "critiques": ROUND_TWO, "editor_decision": "approve"},
            )
        ),
        tool_response(tool_call("save_content", {"quality": final_quality})),
        text_response("Content saved."),
    ]


def _settings(**overrides) -> Settings:
    params = {"anthropic_api_key": "k", "llm_model": "test-model"}
    params.update(overrides)
    return Settings(**params)


def test_two_round_pipeline_revises_then_approves_and_saves() -> None:
    store = InMemoryStateStore()
    llm = FakeLLMClient(
        pipeline_router(_two_round_script(), drafts=["DRAFT v1", "DRAFT v2"])
    )

    result = asyncio.run(
        run_content_critique_pipeline(
            "idea-1",
            "blog-post",
            "Invoicing for freelancers",
            llm=llm,
            state_store=store,
            settings=_settings(),
        )
    )

    assert result.run_id.startswith(f"{AGENT_KIND}-idea-1-")
    assert result.final_output == "Content saved."
    assert result.content is not None
    assert result.content.content == "DRAFT v2"
    assert result.content.quality == "approved"

    runs = RunStore(store)
    assert asyncio.run(runs.get_run(result.run_id)) is None
    assert asyncio.run(runs.get_active_run_id(AGENT_KIND, "idea-1")) is None

    progress = asyncio.run(get_progress(store, result.run_id))
    assert progress is not None
    assert progress.status == "complete"
    assert progress.quality == "approved"
    assert [critic.advisor_id for critic in progress.selected_critics] == ["seo-expert"]
    assert [item.fixed_items for item in progress.critique_history] == [
        [],
        ["Primary keyword missing from H1"],
    ]

    orchestrator_requests = [
        request for request in llm.requests if request.system and "orchestrator" in request.system
    ]
    assert len(orchestrator_requests) == 10
    tool_names = {tool["name"] for tool in orchestrator_requests[0].tools}
    assert {
        "create_plan",
        "update_plan",
        "read_scratchpad",
        "write_scratchpad",
        "evaluate_content",
        "generate_draft",
        "run_critiques",
        "editor_decision",
        "revise_draft",
        "summarize_round",
        "save_content",
    } == tool_names
    revision_request = next(
        request
        for request in llm.requests
        if not request.tools and "REVISION BRIEF" in str(request.messages[0].content)
    )
    assert "CURRENT DRAFT:\nDRAFT v1" in revision_request.messages[0].content


def test_round_limit_still_saves_tagged_artifact() -> None:
    store = InMemoryStateStore()
    llm = FakeLLMClient(pipeline_router(_two_round_script("max-rounds-reached")))

    result = asyncio.run(
        run_content_critique_pipeline(
            "idea-2", "social-post", "ctx", llm=llm, state_store=store, settings=_settings()
        )
    )

    assert result.content is not None
    assert result.content.quality == "max-rounds-reached"
    assert result.content.content_type == "social-post"


def test_unknown_content_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown content type: newsletter"):
        asyncio.run(
            run_content_critique_pipeline(
                "idea-3",
                "newsletter",
                "ctx",
                llm=FakeLLMClient([]),
                state_store=InMemoryStateStore(),
                settings=_settings(),
            )
        )


def test_model_failure_surfaces_as_run_error() -> None:
    store = InMemoryStateStore()
    llm = FakeLLMClient(pipeline_router([LLMServiceError("overloaded")]))

    with pytest.raises(AgentRunError, match="overloaded") as excinfo:
        asyncio.run(
            run_content_critique_pipeline(
                "idea-4", "blog-post", "ctx", llm=llm, state_store=store, settings=_settings()
            )
        )

    progress = asyncio.run(get_progress(store, excinfo.value.run_id))
    assert progress is not None
    assert progress.status == "error"


class SlowOrchestratorLLM(FakeLLMClient):
    async def create_message(self, llm_request: LLMRequest) -> LLMResponse:
        if llm_request.system and "orchestrator" in llm_request.system:
            await asyncio.sleep(0.05)
        return await super().create_message(llm_request)


def test_paused_pipeline_resumes_with_session_state_on_next_call() -> None:
    store = InMemoryStateStore()
    llm = SlowOrchestratorLLM(
        pipeline_router(_two_round_script(), drafts=["DRAFT v1", "DRAFT v2"])
    )

    with pytest.raises(AgentPausedError) as excinfo:
        asyncio.run(
            run_content_critique_pipeline(
                "idea-5",
                "blog-post",
                "ctx",
                llm=llm,
                state_store=store,
                settings=_settings(time_budget_s=0.01),
            )
        )

    paused_id = excinfo.value.run_id
    paused_progress = asyncio.run(get_progress(store, paused_id))
    assert paused_progress is not None and paused_progress.status == "paused"
    assert asyncio.run(RunStore(store).get_active_run_id(AGENT_KIND, "idea-5")) == paused_id

    result = asyncio.run(
        run_content_critique_pipeline(
            "idea-5", "blog-post", "ctx", llm=llm, state_store=store, settings=_settings()
        )
    )

    assert result.run_id == paused_id
    assert result.content is not None
    assert result.content.content == "DRAFT v2"
    progress = asyncio.run(get_progress(store, paused_id))
    assert progress.critique_history[-1].fixed_items == ["Primary keyword missing from H1"]


def test_system_prompt_carries_recipe_limits_and_critics() -> None:
    prompt = build_system_prompt(RECIPES["website"], DEFAULT_ADVISORS)

    for section in ("Your goal", "TOOLS AVAILABLE", "EDITOR RUBRIC", "AVAILABLE CRITICS", "CONSTRAINTS"):
        assert section in prompt
    assert "within 3 critique rounds" in prompt
    assert "average score >= 4" in prompt
    assert "Oli Gardner (oli-gardner), always included" in prompt
    assert "quality='max-rounds-reached'" in prompt
    assert "You decide the sequence" in prompt
