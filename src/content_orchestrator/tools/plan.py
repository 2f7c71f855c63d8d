"""Plan tools: let the agent declare and revise its own step list.

The plan lives on the run itself, so it is checkpointed with the rest of the
run state and survives pause/resume.
"""

from __future__ import annotations

from typing import Any

from content_orchestrator.runtime.types import AgentRun, PlanStep
from content_orchestrator.tools.registry import ToolSpec
from content_orchestrator.tools.schemas import CreatePlanInput, UpdatePlanInput


def create_plan_tools(run: AgentRun) -> list[ToolSpec]:
    async def _create_plan(payload: CreatePlanInput) -> dict[str, Any]:
        run.plan = [
            PlanStep(description=step.description, rationale=step.rationale)
            for step in payload.steps
        ]
        return {"success": True, "step_count": len(run.plan)}

    async def _update_plan(payload: UpdatePlanInput) -> dict[str, Any]:
        idx = payload.step_index
        if idx < 0 or idx >= len(run.plan):
            return {"error": f"Step index {idx} out of range (0-{len(run.plan) - 1})"}

        run.plan[idx].status = payload.status
        inserted = [
            PlanStep(description=step.description, rationale=step.rationale)
            for step in payload.new_steps
        ]
        run.plan[idx + 1 : idx + 1] = inserted
        return {"success": True, "plan": [step.model_dump() for step in run.plan]}

    return [
        ToolSpec(
            name="create_plan",
            description=(
                "Create a step-by-step plan before starting work. Each step has a "
                "description and rationale. Call this at the beginning of your task."
            ),
            input_model=CreatePlanInput,
            fn=_create_plan,
        ),
        ToolSpec(
            name="update_plan",
            description=(
                "Mark a plan step as complete, in_progress, or skipped. Optionally add "
                "new steps discovered during execution."
            ),
            input_model=UpdatePlanInput,
            fn=_update_plan,
        ),
    ]
