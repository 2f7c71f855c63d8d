"""Mechanical editor rubric and round-over-round comparison.

No model judgment here: the same critiques and previous average always give
the same decision.
"""

from __future__ import annotations

from content_orchestrator.critique.models import AdvisorCritique, EditorDecision

FIXED_ITEM_PREFIX_WORDS = 3


def average_score(critiques: list[AdvisorCritique]) -> float:
    if not critiques:
        return 0.0
    return sum(critique.score for critique in critiques) / len(critiques)


def count_high_issues(critiques: list[AdvisorCritique]) -> int:
    return sum(
        1 for critique in critiques for issue in critique.issues if issue.severity == "high"
    )


def build_revision_brief(critiques: list[AdvisorCritique]) -> str:
    lines: list[str] = []
    for severity in ("high", "medium"):
        for critique in critiques:
            for issue in critique.issues:
                if issue.severity == severity:
                    lines.append(f"[{severity.upper()}] ({critique.name}) {issue.description}")
    return "\n".join(lines)


def apply_editor_rubric(
    critiques: list[AdvisorCritique],
    min_aggregate_score: float,
    previous_avg_score: float | None = None,
) -> EditorDecision:
    """Decide approve or revise.

    Rules, first match wins:
    1. no critiques: approve, there is nothing to gate on
    2. any high-severity issue: revise
    3. average below the previous round's average: approve (oscillation guard)
    4. average at or above the threshold: approve
    5. otherwise revise
    """
    if not critiques:
        return EditorDecision(decision="approve", brief="", avg_score=0.0, high_issue_count=0)

    avg = average_score(critiques)
    high_count = count_high_issues(critiques)
    brief = build_revision_brief(critiques)

    if high_count > 0:
        decision = "revise"
    elif previous_avg_score is not None and avg < previous_avg_score:
        decision = "approve"
    elif avg >= min_aggregate_score:
        decision = "approve"
    else:
        decision = "revise"

    return EditorDecision(
        decision=decision, brief=brief, avg_score=avg, high_issue_count=high_count
    )


def _description_prefix(description: str) -> str:
    return " ".join(description.lower().split(" ")[:FIXED_ITEM_PREFIX_WORDS])


def find_fixed_items(
    previous: list[AdvisorCritique], current: list[AdvisorCritique]
) -> list[str]:
    """Previous non-low issues that no longer appear for the same advisor.

    Matching is approximate: an issue counts as still present when any current
    non-low issue from that advisor contains the first few words of its
    description. Advisors missing from the current round are skipped.
    """
    by_advisor = {critique.advisor_id: critique for critique in current}
    fixed: list[str] = []
    for prev in previous:
        now = by_advisor.get(prev.advisor_id)
        if now is None:
            continue
        for issue in prev.issues:
            if issue.severity == "low":
                continue
            prefix = _description_prefix(issue.description)
            still_present = any(
                other.severity != "low" and prefix in other.description.lower()
                for other in now.issues
            )
            if not still_present:
                fixed.append(issue.description)
    return fixed


def find_well_scored_aspects(critiques: list[AdvisorCritique]) -> list[str]:
    return [
        f"{critique.name}'s evaluation domain"
        for critique in critiques
        if not any(issue.severity in ("high", "medium") for issue in critique.issues)
    ]
