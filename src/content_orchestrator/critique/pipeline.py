"""Content critique pipeline: the generic agent loop driven by a critique toolset."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from content_orchestrator.config.settings import Settings, get_settings
from content_orchestrator.critique.advisors import DEFAULT_ADVISORS, advisor_map
from content_orchestrator.critique.documents import DocumentProvider
from content_orchestrator.critique.models import Advisor, ContentRecipe, PipelineProgress, SavedContent
from content_orchestrator.critique.progress import ProgressTracker
from content_orchestrator.critique.recipes import get_recipe, selection_candidates
from content_orchestrator.critique.tools import content_key, create_critique_tools
from content_orchestrator.llm.client import LLMClient
from content_orchestrator.runtime.lifecycle import run_agent_lifecycle
from content_orchestrator.runtime.loop import AgentConfig
from content_orchestrator.runtime.types import AgentRun
from content_orchestrator.storage.base import StateStore
from content_orchestrator.storage.runs import RunStore
from content_orchestrator.tools.evaluation import create_evaluation_tools
from content_orchestrator.tools.plan import create_plan_tools
from content_orchestrator.tools.scratchpad import create_scratchpad_tools

logger = logging.getLogger(__name__)

AGENT_KIND = "content-critique"


class PipelineResult(BaseModel):
    run_id: str
    final_output: str | None = None
    content: SavedContent | None = None


def build_system_prompt(recipe: ContentRecipe, advisors: list[Advisor]) -> str:
    by_id = advisor_map(advisors)
    critic_lines: list[str] = []
    for advisor_id in recipe.named_critics:
        advisor = by_id.get(advisor_id)
        if advisor is not None:
            critic_lines.append(f"- {advisor.name} ({advisor.id}), always included")
    for advisor in selection_candidates(recipe, advisors):
        if advisor.id not in recipe.named_critics:
            critic_lines.append(f"- {advisor.name} ({advisor.id}): {advisor.evaluation_expertise}")
    critics = "\n".join(critic_lines) or "- none registered; critique rounds will be empty"

    return f"""You are a content pipeline orchestrator running a write-critique-revise cycle.

Your goal: produce {recipe.content_type} content that passes the editor rubric, within {recipe.max_revision_rounds} critique rounds, and save it.

TOOLS AVAILABLE:
- generate_draft: write the first draft from the content context. Call it once, first.
- run_critiques: evaluate the current draft with the selected critics. Optional advisor_ids limits a round to a subset.
- editor_decision: pass the critiques exactly as returned; returns approve or revise with a brief.
- summarize_round: record the round (number, critiques, decision, brief); returns the do-not-regress lists.
- revise_draft: revise the draft against the brief.
- save_content: save the current draft with quality 'approved' or 'max-rounds-reached'.
- create_plan / update_plan, read_scratchpad / write_scratchpad, evaluate_content: optional helpers.

EDITOR RUBRIC (applied by editor_decision, do not second-guess it):
- Any high-severity issue means revise.
- Average score lower than the previous round means approve.
- No high-severity issues and average score >= {recipe.min_aggregate_score:g} means approve.
- Otherwise revise.

AVAILABLE CRITICS:
{critics}

CONSTRAINTS:
- Call summarize_round after every editor_decision.
- Revision briefs cover HIGH and MEDIUM issues only and must carry the do-not-regress list from summarize_round.
- After {recipe.max_revision_rounds} rounds without approval, call save_content with quality='max-rounds-reached'.
- When the editor approves, call save_content with quality='approved'.

You decide the sequence. Do NOT narrate your reasoning. Call the tools."""


def initial_progress(recipe: ContentRecipe) -> PipelineProgress:
    return PipelineProgress(content_type=recipe.content_type, max_rounds=recipe.max_revision_rounds)


async def run_content_critique_pipeline(
    entity_id: str,
    content_type: str,
    content_context: str,
    *,
    llm: LLMClient,
    state_store: StateStore,
    settings: Settings | None = None,
    advisors: list[Advisor] | None = None,
    document_provider: DocumentProvider | None = None,
) -> PipelineResult:
    """Run, or resume, the critique pipeline for one entity.

    Raises ``ValueError`` for an unknown content type, ``AgentPausedError``
    when the time budget ran out (call again to resume) and ``AgentRunError``
    when the run failed.
    """
    recipe = get_recipe(content_type)
    if recipe is None:
        raise ValueError(f"Unknown content type: {content_type}")

    settings = settings or get_settings()
    advisors = DEFAULT_ADVISORS if advisors is None else advisors
    run_store = RunStore(state_store, ttl_s=settings.state_ttl_s)
    system_prompt = build_system_prompt(recipe, advisors)

    async def make_config(run_id: str, is_resume: bool, paused: AgentRun | None) -> AgentConfig:
        progress = ProgressTracker(state_store, run_id, ttl_s=settings.state_ttl_s)
        existing = await progress.load() if is_resume else None
        if existing is None:
            await progress.save(initial_progress(recipe))
        else:
            existing.status = "running"
            existing.current_step = f"Resuming (resume #{paused.resume_count + 1 if paused else 1})"
            await progress.save(existing)

        tools = [
            *create_scratchpad_tools(state_store, entity_id),
            *create_evaluation_tools(),
            *create_critique_tools(
                run_id,
                entity_id,
                recipe,
                llm=llm,
                store=state_store,
                settings=settings,
                advisors=advisors,
                document_provider=document_provider,
                progress=progress,
            ),
        ]
        return AgentConfig(
            agent_kind=AGENT_KIND,
            run_id=run_id,
            entity_id=entity_id,
            llm=llm,
            run_store=run_store,
            system_prompt=system_prompt,
            model=settings.llm_model,
            max_tokens=settings.agent_max_tokens,
            max_turns=settings.critique_max_turns,
            tools=tools,
            run_tools=[create_plan_tools],
            on_progress=progress.on_event,
            time_budget_s=settings.time_budget_s,
            max_resume_count=settings.max_resume_count,
        )

    def make_initial_message() -> str:
        return (
            f"Generate {content_type} content for entity {entity_id}.\n\n"
            f"Content context:\n{content_context}"
        )

    run = await run_agent_lifecycle(
        AGENT_KIND, entity_id, make_config, make_initial_message, run_store
    )

    raw = await state_store.get(content_key(run.run_id))
    content = SavedContent.model_validate_json(raw) if raw else None
    if content is None:
        logger.warning("Run %s completed without saving content", run.run_id)
    return PipelineResult(run_id=run.run_id, final_output=run.final_output, content=content)
