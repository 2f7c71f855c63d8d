"""Strict Pydantic schemas for the shared utility tools."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class StrictModel(BaseModel):
    """Base model for strict schema validation."""

    model_config = ConfigDict(extra="forbid")


class PlanStepInput(StrictModel):
    description: str
    rationale: str


class CreatePlanInput(StrictModel):
    steps: list[PlanStepInput]


class UpdatePlanInput(StrictModel):
    step_index: int = Field(description="The 0-based index of the step to update")
    status: Literal["in_progress", "complete", "skipped"]
    new_steps: list[PlanStepInput] = Field(
        default_factory=list,
        description="Optional new steps to insert after the updated step",
    )


class ReadScratchpadInput(StrictModel):
    key: str = Field(min_length=1)


class WriteScratchpadInput(StrictModel):
    key: str = Field(min_length=1)
    value: str


class EvaluateContentInput(StrictModel):
    text: str
    keywords: list[str] = Field(default_factory=list)
    min_words: int | None = Field(default=None, ge=1)
    max_words: int | None = Field(default=None, ge=1)
    check_headings: bool = False
    meta_description: str | None = None
    primary_keyword: str | None = None
