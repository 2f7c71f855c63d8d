"""Tool input schemas for the critique pipeline."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from content_orchestrator.critique.models import AdvisorCritique, CritiqueIssue, Decision, Quality
from content_orchestrator.tools.schemas import StrictModel


class GenerateDraftInput(StrictModel):
    content_context: str = Field(
        description="Content-specific context (research data, keywords, etc.)"
    )


class RunCritiquesInput(StrictModel):
    advisor_ids: list[str] | None = Field(
        default=None,
        description="Optional subset of the selected critics to run this round",
    )


class EditorDecisionInput(StrictModel):
    critiques: list[AdvisorCritique] = Field(
        description="Critique objects exactly as returned by run_critiques"
    )


class ReviseDraftInput(StrictModel):
    brief: str = Field(description="Editor revision brief focusing on high/medium issues")


class SummarizeRoundInput(StrictModel):
    round: int = Field(ge=1)
    critiques: list[AdvisorCritique]
    editor_decision: Decision
    brief: str = ""


class SaveContentInput(StrictModel):
    quality: Quality


class SubmitCritiqueInput(StrictModel):
    """Structured verdict each critic returns through the submit_critique tool."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    score: float = Field(ge=1, le=10)
    passed: bool = Field(alias="pass")
    issues: list[CritiqueIssue] = Field(default_factory=list)
