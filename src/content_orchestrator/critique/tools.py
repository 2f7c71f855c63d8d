"""Write-critique-revise tools handed to the orchestrating agent.

Drafts, round records and the saved artifact live in the state store keyed by
run id, never in the message history, so turns stay small. Cross-round state
(selected critics, previous round, do-not-regress accumulators) is kept in a
``CritiqueSession`` that is persisted after every change and reloaded when a
paused run resumes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from pydantic import BaseModel, Field

from content_orchestrator.config.settings import Settings
from content_orchestrator.critique.advisors import advisor_map
from content_orchestrator.critique.documents import DocumentProvider, load_reference_docs
from content_orchestrator.critique.editor import (
    apply_editor_rubric,
    average_score,
    count_high_issues,
    find_fixed_items,
    find_well_scored_aspects,
)
from content_orchestrator.critique.models import (
    Advisor,
    AdvisorCritique,
    ContentRecipe,
    CritiqueRound,
    PipelineProgress,
    RoundSummary,
    SavedContent,
    SelectedCritic,
)
from content_orchestrator.critique.progress import ProgressTracker
from content_orchestrator.critique.recipes import get_framework_prompt, select_critics
from content_orchestrator.critique.schemas import (
    EditorDecisionInput,
    GenerateDraftInput,
    ReviseDraftInput,
    RunCritiquesInput,
    SaveContentInput,
    SubmitCritiqueInput,
    SummarizeRoundInput,
)
from content_orchestrator.errors import LLMServiceError, StructuredOutputError
from content_orchestrator.llm.client import LLMClient
from content_orchestrator.llm.parsing import require_complete
from content_orchestrator.llm.types import LLMRequest
from content_orchestrator.runtime.types import Message
from content_orchestrator.storage.base import StateStore
from content_orchestrator.tools.registry import ToolSpec

logger = logging.getLogger(__name__)

CRITIC_MAX_TOKENS = 1024
NO_DRAFT_ERROR = "No draft found, call generate_draft first"


def draft_key(run_id: str) -> str:
    return f"draft:{run_id}"


def round_key(run_id: str, round_number: int) -> str:
    return f"critique_round:{run_id}:{round_number}"


def content_key(run_id: str) -> str:
    return f"approved_content:{run_id}"


def session_key(run_id: str) -> str:
    return f"critique_session:{run_id}"


class CritiqueSession(BaseModel):
    selected_critic_ids: list[str] | None = None
    previous_round_critiques: list[AdvisorCritique] = Field(default_factory=list)
    previous_avg_score: float | None = None
    fixed_items: list[str] = Field(default_factory=list)
    well_scored_aspects: list[str] = Field(default_factory=list)

    def do_not_regress(self) -> list[str]:
        return [*self.fixed_items, *self.well_scored_aspects]

    def accumulate(self, fixed: list[str], well_scored: list[str]) -> None:
        """Union new items into the accumulators; they never shrink."""
        for item in fixed:
            if item not in self.fixed_items:
                self.fixed_items.append(item)
        for item in well_scored:
            if item not in self.well_scored_aspects:
                self.well_scored_aspects.append(item)


def submit_critique_tool() -> dict[str, Any]:
    schema = SubmitCritiqueInput.model_json_schema()
    schema.pop("title", None)
    schema.pop("description", None)
    return {
        "name": "submit_critique",
        "description": "Submit your structured evaluation of the content.",
        "input_schema": schema,
    }


def failed_critique(advisor: Advisor, message: str) -> AdvisorCritique:
    return AdvisorCritique(
        advisor_id=advisor.id, name=advisor.name, score=0, passed=False, error=message
    )


class CritiqueToolkit:
    """Tool implementations bound to one run."""

    def __init__(
        self,
        run_id: str,
        entity_id: str,
        recipe: ContentRecipe,
        *,
        llm: LLMClient,
        store: StateStore,
        settings: Settings,
        advisors: list[Advisor],
        document_provider: DocumentProvider | None = None,
        progress: ProgressTracker | None = None,
    ) -> None:
        self.run_id = run_id
        self.entity_id = entity_id
        self.recipe = recipe
        self.llm = llm
        self.store = store
        self.settings = settings
        self.advisors = advisors
        self.advisors_by_id = advisor_map(advisors)
        self.document_provider = document_provider
        self.progress = progress or ProgressTracker(store, run_id, ttl_s=settings.state_ttl_s)
        self._session: CritiqueSession | None = None
        self._session_lock = asyncio.Lock()

    async def session(self) -> CritiqueSession:
        # Tools in one turn run concurrently and must share a single session object.
        async with self._session_lock:
            return await self._load_session()

    async def _load_session(self) -> CritiqueSession:
        if self._session is None:
            raw = await self.store.get(session_key(self.run_id))
            self._session = (
                CritiqueSession.model_validate_json(raw) if raw else CritiqueSession()
            )
        return self._session

    async def save_session(self) -> None:
        async with self._session_lock:
            session = await self._load_session()
            await self.store.set(
                session_key(self.run_id), session.model_dump_json(), self.settings.state_ttl_s
            )

    async def _get_draft(self) -> str | None:
        return await self.store.get(draft_key(self.run_id))

    async def _set_draft(self, draft: str) -> None:
        await self.store.set(draft_key(self.run_id), draft, self.settings.state_ttl_s)

    def _author_system_prompt(self, *, with_framework: bool) -> str:
        author = self.advisors_by_id.get(self.recipe.author_advisor)
        if author is None:
            raise KeyError(f"Unknown advisor: {self.recipe.author_advisor}")
        system_prompt = author.system_prompt
        if with_framework and self.recipe.author_framework:
            framework = get_framework_prompt(self.recipe.author_framework)
            if framework:
                system_prompt += "\n\n## FRAMEWORK\n" + framework
        return system_prompt

    async def _author_call(self, system_prompt: str, prompt: str, *, context: str) -> str:
        response = await self.llm.create_message(
            LLMRequest(
                system=system_prompt,
                messages=[Message(role="user", content=prompt)],
                model=self.settings.llm_model,
                max_tokens=self.settings.agent_max_tokens,
            )
        )
        if response.truncated:
            logger.warning("Author %s hit max_tokens run_id=%s", context, self.run_id)
        return response.text()

    async def generate_draft(self, payload: GenerateDraftInput) -> dict[str, Any]:
        docs = await load_reference_docs(
            self.document_provider, self.entity_id, self.recipe.author_context_docs
        )
        prompt = f"Write {self.recipe.content_type} content for this product.\n\n"
        prompt += f"CONTEXT:\n{payload.content_context}\n\n"
        if docs:
            prompt += "REFERENCE DOCUMENTS:\n" + "\n\n".join(docs) + "\n\n"
        prompt += "Write the complete content now."

        draft = await self._author_call(
            self._author_system_prompt(with_framework=True), prompt, context="draft"
        )
        await self._set_draft(draft)
        await self.progress.update(_set_step("Draft generated"))
        return {"success": True, "draft_length": len(draft), "draft": draft}

    async def _resolve_critics(self) -> list[Advisor]:
        session = await self.session()
        if session.selected_critic_ids is not None:
            return [
                self.advisors_by_id[advisor_id]
                for advisor_id in session.selected_critic_ids
                if advisor_id in self.advisors_by_id
            ]

        named: list[Advisor] = []
        for advisor_id in self.recipe.named_critics:
            advisor = self.advisors_by_id.get(advisor_id)
            if advisor is None:
                logger.warning(
                    "Named critic %s is not in the advisor registry, skipping", advisor_id
                )
                continue
            named.append(advisor)

        try:
            dynamic = await select_critics(
                self.recipe, self.advisors, llm=self.llm, model=self.settings.llm_model
            )
        except (StructuredOutputError, LLMServiceError) as exc:
            if not named:
                raise
            logger.warning(
                "Critic selection failed, using named critics only run_id=%s reason=%s",
                self.run_id,
                exc,
            )
            dynamic = []

        critics = list(named)
        for advisor in dynamic:
            if advisor.id not in {critic.id for critic in critics}:
                critics.append(advisor)

        session.selected_critic_ids = [critic.id for critic in critics]
        await self.save_session()

        selected = [SelectedCritic(advisor_id=c.id, name=c.name) for c in critics]

        def _apply(progress: PipelineProgress) -> None:
            progress.selected_critics = selected

        await self.progress.update(_apply)
        return critics

    async def critique_with(self, advisor: Advisor, draft: str) -> AdvisorCritique:
        docs = await load_reference_docs(
            self.document_provider, self.entity_id, advisor.context_docs
        )
        prompt = (
            f"You are evaluating this content as {advisor.name}.\n\n"
            f"Your evaluation focus:\n{advisor.evaluation_expertise}\n\n"
        )
        if self.recipe.evaluation_emphasis:
            prompt += f"EMPHASIS FOR THIS CONTENT TYPE:\n{self.recipe.evaluation_emphasis}\n\n"
        if docs:
            prompt += "REFERENCE DOCUMENTS:\n" + "\n\n".join(docs) + "\n\n"
        prompt += (
            f"CONTENT TO EVALUATE:\n{draft}\n\n"
            "Use the submit_critique tool to provide your structured evaluation."
        )

        response = await self.llm.create_message(
            LLMRequest(
                system=advisor.system_prompt,
                messages=[Message(role="user", content=prompt)],
                tools=[submit_critique_tool()],
                model=self.settings.llm_model,
                max_tokens=CRITIC_MAX_TOKENS,
            )
        )
        require_complete(response, context=f"critique by {advisor.id}")
        tool_use = response.first_tool_use("submit_critique")
        if tool_use is None:
            return failed_critique(advisor, "Critic did not use submit_critique tool")

        verdict = SubmitCritiqueInput.model_validate(tool_use.input)
        return AdvisorCritique(
            advisor_id=advisor.id,
            name=advisor.name,
            score=verdict.score,
            passed=verdict.passed,
            issues=verdict.issues,
        )

    async def run_critiques(self, payload: RunCritiquesInput) -> dict[str, Any]:
        draft = await self._get_draft()
        if not draft:
            return {"error": NO_DRAFT_ERROR}

        critics = await self._resolve_critics()
        if payload.advisor_ids is not None:
            wanted = set(payload.advisor_ids)
            critics = [critic for critic in critics if critic.id in wanted]
            if not critics:
                return {
                    "error": "None of the requested advisors are selected critics: "
                    + ", ".join(payload.advisor_ids)
                }
        if not critics:
            return {"critiques": [], "message": "No matching critics found"}

        limit = asyncio.Semaphore(self.settings.critic_concurrency)

        async def _bounded(advisor: Advisor) -> AdvisorCritique:
            async with limit:
                try:
                    return await self.critique_with(advisor, draft)
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "Critic failed advisor=%s run_id=%s reason=%s",
                        advisor.id,
                        self.run_id,
                        exc,
                    )
                    return failed_critique(advisor, str(exc) or "Critic call failed")

        critiques = await asyncio.gather(*(_bounded(advisor) for advisor in critics))
        await self.progress.update(_set_step(f"Critiques complete ({len(critiques)} critics)"))
        return {"critiques": [critique.payload() for critique in critiques]}

    async def editor_decision(self, payload: EditorDecisionInput) -> dict[str, Any]:
        session = await self.session()
        result = apply_editor_rubric(
            payload.critiques, self.recipe.min_aggregate_score, session.previous_avg_score
        )
        session.previous_avg_score = result.avg_score
        await self.save_session()
        return result.model_dump()

    async def revise_draft(self, payload: ReviseDraftInput) -> dict[str, Any]:
        draft = await self._get_draft()
        if not draft:
            return {"error": NO_DRAFT_ERROR}

        session = await self.session()
        do_not_regress = session.do_not_regress()
        prompt = f"REVISION BRIEF:\nAddress these issues:\n{payload.brief}\n\n"
        if do_not_regress:
            prompt += (
                "DO NOT REGRESS. These aspects scored well or were fixed in previous rounds:\n"
                + "\n".join(f"- {item}" for item in do_not_regress)
                + "\n\nAddress only the listed issues. "
                'Do not change aspects on the "do not regress" list.\n\n'
            )
        prompt += f"CURRENT DRAFT:\n{draft}\n\nRevise the draft now."

        revised = await self._author_call(
            self._author_system_prompt(with_framework=False), prompt, context="revision"
        )
        await self._set_draft(revised)
        return {"success": True, "revised_draft_length": len(revised), "revised_draft": revised}

    async def summarize_round(self, payload: SummarizeRoundInput) -> dict[str, Any]:
        session = await self.session()
        critiques = payload.critiques

        newly_fixed = find_fixed_items(session.previous_round_critiques, critiques)
        session.accumulate(newly_fixed, find_well_scored_aspects(critiques))
        session.previous_round_critiques = critiques
        await self.save_session()

        record = CritiqueRound(
            round=payload.round,
            critiques=critiques,
            editor_decision=payload.editor_decision,
            revision_brief=payload.brief or None,
            fixed_items=list(session.fixed_items),
            well_scored_aspects=list(session.well_scored_aspects),
        )
        await self.store.set(
            round_key(self.run_id, payload.round),
            record.model_dump_json(by_alias=True),
            self.settings.state_ttl_s,
        )

        summary = RoundSummary(
            round=payload.round,
            avg_score=average_score(critiques),
            high_issue_count=count_high_issues(critiques),
            editor_decision=payload.editor_decision,
            brief=payload.brief,
            fixed_items=list(session.fixed_items),
            well_scored_aspects=list(session.well_scored_aspects),
        )

        def _apply(progress: PipelineProgress) -> None:
            progress.round = payload.round
            progress.critique_history.append(summary)

        await self.progress.update(_apply)
        logger.info(
            "Round summarized run_id=%s round=%d decision=%s avg=%.2f",
            self.run_id,
            payload.round,
            payload.editor_decision,
            summary.avg_score,
        )
        return summary.model_dump()

    async def save_content(self, payload: SaveContentInput) -> dict[str, Any]:
        draft = await self._get_draft()
        if not draft:
            return {"error": NO_DRAFT_ERROR}

        saved = SavedContent(
            content=draft, quality=payload.quality, content_type=self.recipe.content_type
        )
        await self.store.set(
            content_key(self.run_id), saved.model_dump_json(), self.settings.state_ttl_s
        )

        def _apply(progress: PipelineProgress) -> None:
            progress.quality = payload.quality
            progress.current_step = "Content saved"

        await self.progress.update(_apply)
        return {"success": True, "quality": payload.quality, "content_length": len(draft)}

    def specs(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                name="generate_draft",
                description=(
                    "Generate the initial content draft using the recipe's author advisor. "
                    "Call this first."
                ),
                input_model=GenerateDraftInput,
                fn=self.generate_draft,
            ),
            ToolSpec(
                name="run_critiques",
                description=(
                    "Run the selected critics against the current draft. Critics are "
                    "selected on the first call. Returns one critique per critic."
                ),
                input_model=RunCritiquesInput,
                fn=self.run_critiques,
            ),
            ToolSpec(
                name="editor_decision",
                description=(
                    "Apply the mechanical editor rubric to critique results. Returns "
                    "approve or revise with a brief."
                ),
                input_model=EditorDecisionInput,
                fn=self.editor_decision,
            ),
            ToolSpec(
                name="revise_draft",
                description=(
                    "Revise the current draft based on the editor brief. Protects the "
                    "do-not-regress list."
                ),
                input_model=ReviseDraftInput,
                fn=self.revise_draft,
            ),
            ToolSpec(
                name="summarize_round",
                description=(
                    "Save the full round record and return a compact summary. Tracks "
                    "fixed items and well-scored aspects across rounds."
                ),
                input_model=SummarizeRoundInput,
                fn=self.summarize_round,
            ),
            ToolSpec(
                name="save_content",
                description=(
                    "Save the current draft with a quality status. Call after the editor "
                    "approves or when the round limit is reached."
                ),
                input_model=SaveContentInput,
                fn=self.save_content,
            ),
        ]


def create_critique_tools(
    run_id: str,
    entity_id: str,
    recipe: ContentRecipe,
    *,
    llm: LLMClient,
    store: StateStore,
    settings: Settings,
    advisors: list[Advisor],
    document_provider: DocumentProvider | None = None,
    progress: ProgressTracker | None = None,
) -> list[ToolSpec]:
    toolkit = CritiqueToolkit(
        run_id,
        entity_id,
        recipe,
        llm=llm,
        store=store,
        settings=settings,
        advisors=advisors,
        document_provider=document_provider,
        progress=progress,
    )
    return toolkit.specs()


def _set_step(step: str) -> Callable[[PipelineProgress], None]:
    def _apply(progress: PipelineProgress) -> None:
        progress.current_step = step

    return _apply
