import asyncio
import json

import pytest
from pydantic import BaseModel

from content_orchestrator.errors import UnknownToolError
from content_orchestrator.runtime.types import ToolUseBlock
from content_orchestrator.tools.gateway import ToolDispatcher
from content_orchestrator.tools.registry import ToolRegistry, ToolSpec


class CountInput(BaseModel):
    count: int


async def _double(payload: CountInput) -> dict[str, int]:
    return {"value": payload.count * 2}


async def _explode(payload: CountInput) -> dict[str, int]:
    raise RuntimeError("downstream service unavailable")


async def _plain_text(payload: CountInput) -> str:
    return f"count={payload.count}"


def _registry() -> ToolRegistry:
    return ToolRegistry(
        [
            ToolSpec(name="double", description="Double a number", input_model=CountInput, fn=_double),
            ToolSpec(name="explode", description="Always fails", input_model=CountInput, fn=_explode),
            ToolSpec(name="plain", description="Returns text", input_model=CountInput, fn=_plain_text),
        ]
    )


def test_registry_rejects_duplicate_names() -> None:
    registry = _registry()
    with pytest.raises(ValueError, match="Duplicate tool name: double"):
        registry.register(
            ToolSpec(name="double", description="again", input_model=CountInput, fn=_double)
        )


def test_registry_unknown_tool_raises() -> None:
    with pytest.raises(UnknownToolError, match="Unknown tool: nope"):
        _registry().get("nope")


def test_schemas_expose_json_schema_without_title() -> None:
    schemas = _registry().schemas()

    assert [schema["name"] for schema in schemas] == ["double", "explode", "plain"]
    input_schema = schemas[0]["input_schema"]
    assert "title" not in input_schema
    assert input_schema["type"] == "object"
    assert input_schema["required"] == ["count"]


def test_dispatch_isolates_failures_and_returns_one_result_per_id() -> None:
    dispatcher = ToolDispatcher(_registry())
    blocks = [
        ToolUseBlock(id="a", name="double", input={"count": 2}),
        ToolUseBlock(id="b", name="explode", input={"count": 1}),
        ToolUseBlock(id="c", name="unknown", input={}),
        ToolUseBlock(id="d", name="double", input={"count": "not-a-number"}),
        ToolUseBlock(id="e", name="plain", input={"count": 3}),
    ]

    results = asyncio.run(dispatcher.dispatch(blocks))
    by_id = {result.tool_use_id: result for result in results}

    assert sorted(by_id) == ["a", "b", "c", "d", "e"]
    assert by_id["a"].is_error is False
    assert json.loads(by_id["a"].content) == {"value": 4}
    assert by_id["b"].is_error is True
    assert json.loads(by_id["b"].content) == {"error": "downstream service unavailable"}
    assert by_id["c"].is_error is True
    assert json.loads(by_id["c"].content) == {"error": "Unknown tool: unknown"}
    assert by_id["d"].is_error is True
    assert json.loads(by_id["d"].content)["error"].startswith("Invalid tool input")
    assert by_id["e"].content == "count=3"


def test_dispatch_runs_calls_concurrently() -> None:
    started: list[str] = []
    release = asyncio.Event()

    class WaitInput(BaseModel):
        name: str

    async def _wait(payload: WaitInput) -> str:
        started.append(payload.name)
        if len(started) == 2:
            release.set()
        await asyncio.wait_for(release.wait(), timeout=1.0)
        return payload.name

    dispatcher = ToolDispatcher(
        ToolRegistry([ToolSpec(name="wait", description="", input_model=WaitInput, fn=_wait)])
    )
    blocks = [
        ToolUseBlock(id="1", name="wait", input={"name": "first"}),
        ToolUseBlock(id="2", name="wait", input={"name": "second"}),
    ]

    results = asyncio.run(dispatcher.dispatch(blocks))

    assert [result.content for result in results] == ["first", "second"]
    assert all(not result.is_error for result in results)
