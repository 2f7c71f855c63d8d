"""Content recipes and critic selection."""

from __future__ import annotations

import logging

from content_orchestrator.critique.models import Advisor, ContentRecipe
from content_orchestrator.errors import CriticSelectionError, StructuredOutputError
from content_orchestrator.llm.client import LLMClient
from content_orchestrator.llm.parsing import parse_llm_json, require_complete
from content_orchestrator.llm.types import LLMRequest
from content_orchestrator.runtime.types import Message

logger = logging.getLogger(__name__)

SELECTION_MAX_TOKENS = 256

RECIPES: dict[str, ContentRecipe] = {
    "website": ContentRecipe(
        content_type="website",
        author_advisor="julian-shapiro",
        author_framework="landing-page-assembly",
        author_context_docs=["positioning", "brand-voice", "seo-strategy"],
        named_critics=["oli-gardner", "joanna-wiebe", "shirin-oreizy", "copywriter"],
        evaluation_needs=(
            "This is website landing page copy. Needs review for: conversion-centered "
            "design (attention ratio, page focus, directional cues), conversion "
            "copywriting quality (headline effectiveness, CTA clarity, voice-of-customer "
            "alignment), behavioral science (CTA friction, cognitive load, conversion "
            "psychology), and brand voice consistency."
        ),
        evaluation_emphasis=(
            'Focus especially on the hero section: does it communicate the "why now" '
            "and competitive differentiation within the first viewport? Are CTAs "
            "low-friction and high-clarity?"
        ),
        min_aggregate_score=4,
        max_revision_rounds=3,
    ),
    "blog-post": ContentRecipe(
        content_type="blog-post",
        author_advisor="copywriter",
        author_context_docs=["positioning", "brand-voice", "seo-strategy"],
        evaluation_needs=(
            "This is a blog post. Needs review for: positioning consistency (reinforces "
            "brand positioning without being a sales pitch), SEO optimization (keyword "
            "placement, heading structure, PAA coverage), and narrative quality "
            "(compelling arc, opens with a shift not a pitch)."
        ),
        evaluation_emphasis=(
            "Focus on whether the post reinforces market category positioning without "
            "reading like marketing copy. The narrative should educate, not sell."
        ),
        min_aggregate_score=4,
        max_revision_rounds=3,
    ),
    "social-post": ContentRecipe(
        content_type="social-post",
        author_advisor="copywriter",
        author_context_docs=["positioning", "brand-voice", "social-media-strategy"],
        evaluation_needs=(
            "This is a social media post. Needs review for: positioning consistency "
            "and hook effectiveness."
        ),
        min_aggregate_score=4,
        max_revision_rounds=2,
    ),
}

FRAMEWORKS: dict[str, str] = {
    "landing-page-assembly": (
        "Assemble the page in this order: hero (value proposition, why now, primary "
        "CTA), problem, solution and how it works, differentiation against the "
        "alternatives, social proof, objection handling, final CTA. Every section "
        "must earn the next scroll."
    ),
}


def get_recipe(content_type: str) -> ContentRecipe | None:
    return RECIPES.get(content_type)


def get_framework_prompt(framework: str) -> str | None:
    return FRAMEWORKS.get(framework)


def selection_candidates(recipe: ContentRecipe, advisors: list[Advisor]) -> list[Advisor]:
    return [
        advisor
        for advisor in advisors
        if advisor.evaluation_expertise and advisor.id != recipe.author_advisor
    ]


async def select_critics(
    recipe: ContentRecipe,
    advisors: list[Advisor],
    *,
    llm: LLMClient,
    model: str,
) -> list[Advisor]:
    """Ask the model which candidates match the recipe's evaluation needs.

    An empty candidate list returns ``[]`` without a model call. Output that is
    truncated or not a JSON array raises ``CriticSelectionError`` so it is never
    confused with a legitimate zero-match answer.
    """
    candidates = selection_candidates(recipe, advisors)
    if not candidates:
        return []

    descriptions = "\n".join(
        f"- {advisor.id}: EVALUATES: {advisor.evaluation_expertise} "
        f"DOES NOT EVALUATE: {advisor.does_not_evaluate or 'N/A'}"
        for advisor in candidates
    )
    prompt = (
        f"Content type: {recipe.content_type}\n"
        f"Evaluation needs: {recipe.evaluation_needs}\n\n"
        f"Available advisors:\n{descriptions}\n\n"
        "Select the advisors whose expertise matches these evaluation needs. "
        'Exclude advisors whose "does not evaluate" conflicts with the needs. '
        'Return a JSON array of advisor IDs, e.g. ["april-dunford", "seo-expert"].'
    )
    response = await llm.create_message(
        LLMRequest(
            system=(
                "You select which advisors should review content. "
                "Return only a JSON array of advisor IDs."
            ),
            messages=[Message(role="user", content=prompt)],
            model=model,
            max_tokens=SELECTION_MAX_TOKENS,
        )
    )

    try:
        require_complete(response, context="critic selection")
        text = response.text().strip()
        if not text:
            raise StructuredOutputError("empty LLM response")
        selected = parse_llm_json(text)
    except StructuredOutputError as exc:
        raise CriticSelectionError(f"Critic selection failed: {exc}") from exc
    if not isinstance(selected, list):
        raise CriticSelectionError(
            "Critic selection failed: could not parse LLM response as JSON array"
        )

    selected_ids = {str(item) for item in selected}
    chosen = [advisor for advisor in candidates if advisor.id in selected_ids]
    logger.info(
        "Selected critics content_type=%s critics=%s",
        recipe.content_type,
        [advisor.id for advisor in chosen],
    )
    return chosen
