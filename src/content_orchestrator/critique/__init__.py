"""Write-critique-revise pipeline built on the generic agent loop."""

from content_orchestrator.critique.advisors import DEFAULT_ADVISORS, get_advisor_system_prompt
from content_orchestrator.critique.documents import DocumentProvider, StaticDocumentProvider
from content_orchestrator.critique.editor import (
    apply_editor_rubric,
    find_fixed_items,
    find_well_scored_aspects,
)
from content_orchestrator.critique.models import (
    Advisor,
    AdvisorCritique,
    ContentRecipe,
    CritiqueIssue,
    CritiqueRound,
    EditorDecision,
    PipelineProgress,
    RoundSummary,
    SavedContent,
)
from content_orchestrator.critique.pipeline import (
    AGENT_KIND,
    PipelineResult,
    build_system_prompt,
    run_content_critique_pipeline,
)
from content_orchestrator.critique.progress import get_progress
from content_orchestrator.critique.recipes import RECIPES, get_recipe, select_critics
from content_orchestrator.critique.tools import CritiqueSession, create_critique_tools

__all__ = [
    "AGENT_KIND",
    "Advisor",
    "AdvisorCritique",
    "ContentRecipe",
    "CritiqueIssue",
    "CritiqueRound",
    "CritiqueSession",
    "DEFAULT_ADVISORS",
    "DocumentProvider",
    "EditorDecision",
    "PipelineProgress",
    "PipelineResult",
    "RECIPES",
    "RoundSummary",
    "SavedContent",
    "StaticDocumentProvider",
    "apply_editor_rubric",
    "build_system_prompt",
    "create_critique_tools",
    "find_fixed_items",
    "find_well_scored_aspects",
    "get_advisor_system_prompt",
    "get_progress",
    "get_recipe",
    "run_content_critique_pipeline",
    "select_critics",
]
