"""Advisors, recipes and the per-round critique records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Severity = Literal["high", "medium", "low"]
Decision = Literal["approve", "revise"]
Quality = Literal["approved", "max-rounds-reached"]
AdvisorRole = Literal["author", "critic", "editor", "strategist"]


class Advisor(BaseModel):
    """An advisor persona. Expertise text drives critic selection only."""

    id: str
    name: str
    role: AdvisorRole
    system_prompt: str
    evaluation_expertise: str | None = None
    does_not_evaluate: str | None = None
    context_docs: list[str] = Field(default_factory=list)


class ContentRecipe(BaseModel):
    content_type: str
    author_advisor: str
    author_framework: str | None = None
    author_context_docs: list[str] = Field(default_factory=list)
    named_critics: list[str] = Field(default_factory=list)
    evaluation_needs: str
    evaluation_emphasis: str | None = None
    min_aggregate_score: float = Field(ge=0, le=10)
    max_revision_rounds: int = Field(ge=1)


class CritiqueIssue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    severity: Severity
    description: str
    suggestion: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AdvisorCritique(BaseModel):
    """One critic's verdict for one round. ``error`` marks a failed critic call."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    advisor_id: str
    name: str
    score: float = Field(default=0, ge=0, le=10)
    passed: bool = Field(default=False, alias="pass")
    issues: list[CritiqueIssue] = Field(default_factory=list)
    error: str | None = None

    def payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EditorDecision(BaseModel):
    decision: Decision
    brief: str
    avg_score: float
    high_issue_count: int


class CritiqueRound(BaseModel):
    round: int
    critiques: list[AdvisorCritique]
    editor_decision: Decision
    revision_brief: str | None = None
    fixed_items: list[str] = Field(default_factory=list)
    well_scored_aspects: list[str] = Field(default_factory=list)


class RoundSummary(BaseModel):
    """Compact per-round record returned to the orchestrating model."""

    round: int
    avg_score: float
    high_issue_count: int
    editor_decision: Decision
    brief: str
    fixed_items: list[str]
    well_scored_aspects: list[str]


class SelectedCritic(BaseModel):
    advisor_id: str
    name: str


class PipelineProgress(BaseModel):
    status: Literal["running", "paused", "complete", "error"] = "running"
    content_type: str
    current_step: str = "Starting content generation..."
    round: int = 0
    max_rounds: int
    quality: Quality | None = None
    selected_critics: list[SelectedCritic] = Field(default_factory=list)
    critique_history: list[RoundSummary] = Field(default_factory=list)


class SavedContent(BaseModel):
    content: str
    quality: Quality
    content_type: str
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
