import asyncio

from content_orchestrator.runtime.types import AgentRun
from content_orchestrator.storage.memory import InMemoryStateStore
from content_orchestrator.tools.evaluation import (
    check_heading_hierarchy,
    check_keyword_presence,
    check_meta_description,
    check_word_count,
    create_evaluation_tools,
)
from content_orchestrator.tools.plan import create_plan_tools
from content_orchestrator.tools.schemas import (
    CreatePlanInput,
    EvaluateContentInput,
    ReadScratchpadInput,
    UpdatePlanInput,
    WriteScratchpadInput,
)
from content_orchestrator.tools.scratchpad import create_scratchpad_tools


def _run() -> AgentRun:
    return AgentRun(run_id="run-1", agent_kind="test-agent", entity_id="entity-1")


def _tools_by_name(specs):
    return {spec.name: spec for spec in specs}


def test_create_and_update_plan_mutates_the_run() -> None:
    run = _run()
    tools = _tools_by_name(create_plan_tools(run))

    created = asyncio.run(
        tools["create_plan"].fn(
            CreatePlanInput.model_validate(
                {
                    "steps": [
                        {"description": "Draft", "rationale": "Need content"},
                        {"description": "Critique", "rationale": "Need feedback"},
                    ]
                }
            )
        )
    )
    assert created == {"success": True, "step_count": 2}

    updated = asyncio.run(
        tools["update_plan"].fn(
            UpdatePlanInput.model_validate(
                {
                    "step_index": 0,
                    "status": "complete",
                    "new_steps": [{"description": "Research", "rationale": "Found a gap"}],
                }
            )
        )
    )

    assert updated["success"] is True
    assert [step.description for step in run.plan] == ["Draft", "Research", "Critique"]
    assert [step.status for step in run.plan] == ["complete", "pending", "pending"]


def test_update_plan_out_of_range_returns_error_payload() -> None:
    run = _run()
    tools = _tools_by_name(create_plan_tools(run))

    result = asyncio.run(
        tools["update_plan"].fn(UpdatePlanInput(step_index=3, status="complete"))
    )

    assert result == {"error": "Step index 3 out of range (0--1)"}
    assert run.plan == []


def test_plans_are_scoped_to_their_own_run() -> None:
    first, second = _run(), _run()
    first_tools = _tools_by_name(create_plan_tools(first))
    _tools_by_name(create_plan_tools(second))

    asyncio.run(
        first_tools["create_plan"].fn(
            CreatePlanInput.model_validate({"steps": [{"description": "a", "rationale": "b"}]})
        )
    )

    assert len(first.plan) == 1
    assert second.plan == []


def test_scratchpad_is_shared_per_entity() -> None:
    store = InMemoryStateStore()
    writer = _tools_by_name(create_scratchpad_tools(store, "entity-1"))
    reader = _tools_by_name(create_scratchpad_tools(store, "entity-1"))
    other = _tools_by_name(create_scratchpad_tools(store, "entity-2"))

    asyncio.run(
        writer["write_scratchpad"].fn(WriteScratchpadInput(key="keywords", value="a,b"))
    )

    assert asyncio.run(reader["read_scratchpad"].fn(ReadScratchpadInput(key="keywords"))) == {
        "key": "keywords",
        "value": "a,b",
    }
    assert asyncio.run(other["read_scratchpad"].fn(ReadScratchpadInput(key="keywords"))) == {
        "key": "keywords",
        "value": None,
    }
    assert store.keys() == ["scratchpad:entity-1:keywords"]


def test_keyword_presence_scores_by_ratio() -> None:
    result = check_keyword_presence("Fast invoicing for freelancers", ["invoicing", "payroll"])

    assert result.passed is False
    assert result.score == 5
    assert result.issues == ['Missing keyword: "payroll"']


def test_heading_hierarchy_flags_missing_and_duplicate_h1() -> None:
    assert check_heading_hierarchy("<h1>Title</h1><h2>Part</h2>").passed is True

    result = check_heading_hierarchy("<h1>One</h1><h1>Two</h1>")
    assert result.passed is False
    assert "Found 2 H1 tags, should be exactly 1" in result.issues
    assert "No H2 tags found" in result.issues
    assert result.score == 4


def test_word_count_and_meta_description() -> None:
    assert check_word_count("one two three", min_words=6).score == 5
    assert check_word_count("one two three", min_words=1, max_words=2).passed is False

    meta = check_meta_description("Short description", "invoicing")
    assert meta.passed is False
    assert len(meta.issues) == 2


def test_evaluate_content_tool_combines_checks_with_pass_alias() -> None:
    tool = create_evaluation_tools()[0]

    result = asyncio.run(
        tool.fn(
            EvaluateContentInput(
                text="<h1>Invoicing</h1><h2>Why</h2> invoicing made simple",
                keywords=["invoicing"],
                check_headings=True,
            )
        )
    )

    assert result["pass"] is True
    assert result["score"] == 10
    assert result["issues"] == []
