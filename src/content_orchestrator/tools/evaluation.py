"""Deterministic content checks agents can run without a model call."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field

from content_orchestrator.tools.registry import ToolSpec
from content_orchestrator.tools.schemas import EvaluateContentInput


class Evaluation(BaseModel):
    passed: bool = Field(serialization_alias="pass")
    score: int
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


def check_keyword_presence(text: str, keywords: list[str]) -> Evaluation:
    lower = text.lower()
    missing = [kw for kw in keywords if kw.lower() not in lower]
    found = len(keywords) - len(missing)
    ratio = found / len(keywords) if keywords else 1.0
    return Evaluation(
        passed=ratio >= 0.6,
        score=round(ratio * 10),
        issues=[f'Missing keyword: "{kw}"' for kw in missing],
        suggestions=[f'Incorporate "{kw}" naturally into the text' for kw in missing],
    )


def check_heading_hierarchy(html: str) -> Evaluation:
    issues: list[str] = []
    suggestions: list[str] = []

    h1_count = len(re.findall(r"<h1[\s>]", html, flags=re.IGNORECASE))
    if h1_count == 0:
        issues.append("No H1 tag found")
        suggestions.append("Add exactly one H1 containing the primary keyword")
    elif h1_count > 1:
        issues.append(f"Found {h1_count} H1 tags, should be exactly 1")
        suggestions.append("Convert extra H1 tags to H2")

    if not re.search(r"<h2[\s>]", html, flags=re.IGNORECASE):
        issues.append("No H2 tags found")
        suggestions.append("Add H2 headings for major sections")

    return Evaluation(
        passed=not issues,
        score=max(0, 10 - len(issues) * 3),
        issues=issues,
        suggestions=suggestions,
    )


def check_word_count(text: str, min_words: int, max_words: int | None = None) -> Evaluation:
    words = len(text.split())
    issues: list[str] = []
    suggestions: list[str] = []

    if words < min_words:
        issues.append(f"Word count {words} is below minimum {min_words}")
        suggestions.append(f"Expand content to at least {min_words} words")
    if max_words and words > max_words:
        issues.append(f"Word count {words} exceeds maximum {max_words}")
        suggestions.append(f"Trim content to under {max_words} words")

    score = 10 if words >= min_words else round(words / min_words * 10)
    return Evaluation(passed=not issues, score=score, issues=issues, suggestions=suggestions)


def check_meta_description(description: str, primary_keyword: str) -> Evaluation:
    issues: list[str] = []
    suggestions: list[str] = []
    length = len(description)

    if length < 140:
        issues.append(f"Meta description too short ({length} chars, need 140+)")
        suggestions.append("Expand to 150-160 characters")
    if length > 165:
        issues.append(f"Meta description too long ({length} chars, max 160)")
        suggestions.append("Trim to 150-160 characters")
    if primary_keyword.lower() not in description.lower():
        issues.append(f'Primary keyword "{primary_keyword}" not found in meta description')
        suggestions.append(f'Include "{primary_keyword}" naturally')

    return Evaluation(
        passed=not issues,
        score=max(0, 10 - len(issues) * 3),
        issues=issues,
        suggestions=suggestions,
    )


def combine_evaluations(evaluations: list[Evaluation]) -> Evaluation:
    if not evaluations:
        return Evaluation(passed=True, score=10)
    return Evaluation(
        passed=all(item.passed for item in evaluations),
        score=round(sum(item.score for item in evaluations) / len(evaluations)),
        issues=[issue for item in evaluations for issue in item.issues],
        suggestions=[tip for item in evaluations for tip in item.suggestions],
    )


def create_evaluation_tools() -> list[ToolSpec]:
    async def _evaluate(payload: EvaluateContentInput) -> dict[str, Any]:
        checks: list[Evaluation] = []
        if payload.keywords:
            checks.append(check_keyword_presence(payload.text, payload.keywords))
        if payload.min_words is not None:
            checks.append(check_word_count(payload.text, payload.min_words, payload.max_words))
        if payload.check_headings:
            checks.append(check_heading_hierarchy(payload.text))
        if payload.meta_description is not None and payload.primary_keyword:
            checks.append(
                check_meta_description(payload.meta_description, payload.primary_keyword)
            )
        return combine_evaluations(checks).model_dump(by_alias=True)

    return [
        ToolSpec(
            name="evaluate_content",
            description=(
                "Run deterministic checks on text: keyword presence, word count, "
                "heading hierarchy and meta description. Returns pass, score, issues "
                "and suggestions."
            ),
            input_model=EvaluateContentInput,
            fn=_evaluate,
        )
    ]
