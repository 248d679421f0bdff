"""Follow-up prompts driven by typed score conditions."""
from __future__ import annotations

from typing import Optional
from uuid import uuid4

from assessment.types import FollowUpCondition, FollowUpTrigger, Question, ScoreAbove, ScoreBelow

RESPONSE_PLACEHOLDER = "{response}"


def condition_met(condition: FollowUpCondition, score: float) -> bool:
    if isinstance(condition, ScoreBelow):
        return score < condition.threshold
    if isinstance(condition, ScoreAbove):
        return score > condition.threshold
    raise TypeError(f"Unsupported follow-up condition: {condition!r}")


def render_template(template: str, response: str) -> str:
    return template.replace(RESPONSE_PLACEHOLDER, response.strip())


def matching_trigger(question: Question, score: float) -> Optional[FollowUpTrigger]:
    """First trigger (in declaration order) whose condition holds."""

    for trigger in question.follow_ups:
        if condition_met(trigger.condition, score):
            return trigger
    return None


def suggest_follow_up(question: Question, response: str, score: float) -> Optional[str]:
    trigger = matching_trigger(question, score)
    if trigger is None:
        return None
    return render_template(trigger.question_template, response)


def build_follow_up(question: Question, response: str, score: float) -> Optional[Question]:
    """Derive a follow-up question sharing the parent's category and rubric.

    Follow-ups carry no expected patterns, so they are always scored by the
    AI tier or the partial-credit rules of the parent rubric.
    """

    text = suggest_follow_up(question, response, score)
    if text is None:
        return None
    return Question(
        question_id=f"{question.question_id}-FU-{uuid4().hex[:8]}",
        category=question.category,
        difficulty=question.difficulty,
        text=text,
        expected_answers=[],
        rubric=question.rubric,
        follow_ups=[],
        tags=[*question.tags, "follow-up"],
    )


__all__ = [
    "condition_met",
    "render_template",
    "matching_trigger",
    "suggest_follow_up",
    "build_follow_up",
]
