"""Hybrid answer evaluation: deterministic rubric rules, then AI judgement."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from assessment.errors import AssessmentError, EvaluationTimeout, JudgeFailure
from assessment.types import EvaluationContext, EvaluationResult, JudgeVerdict, PartialCredit, Question
from config.registry import JUDGE_KEY, get_model
from config.settings import settings
from observability.logger import log_event
from observability.tracing import span

from .followups import suggest_follow_up

EXACT_MATCH_CONFIDENCE = 0.9
PARTIAL_CONFIDENCE = 0.7
EMPTY_ANSWER_SCORE = 0.0

_EXECUTOR: Optional[ThreadPoolExecutor] = None
_EXECUTOR_GUARD = threading.Lock()


def _executor() -> ThreadPoolExecutor:
    global _EXECUTOR
    with _EXECUTOR_GUARD:
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(
                max_workers=settings.JUDGE_WORKERS,
                thread_name_prefix="answer-judge",
            )
    return _EXECUTOR


def normalize(text: str) -> str:
    return text.strip().lower()


def rubric_text(question: Question) -> str:
    """Plain-text rendering of the rubric handed to the AI judge."""

    rubric = question.rubric
    lines = [f"Max Score: {rubric.max_score:g}", "Criteria:"]
    lines.extend(
        f"- {criterion.name} ({criterion.weight * 100:.0f}%): {criterion.description}"
        for criterion in rubric.criteria
    )
    if rubric.common_mistakes:
        lines.append("Common Mistakes to Watch For:")
        lines.extend(
            f"- {mistake.pattern}: -{mistake.deduction:g} points ({mistake.feedback})"
            for mistake in rubric.common_mistakes
        )
    if rubric.partial_credit_rules:
        lines.append("Partial Credit:")
        lines.extend(
            f"- {rule.condition}: {rule.credit_percentage:g}% ({rule.feedback})"
            for rule in rubric.partial_credit_rules
        )
    return "\n".join(lines)


def empty_answer_result(question: Question, answer_text: str) -> EvaluationResult:
    return EvaluationResult(
        question_id=question.question_id,
        category=question.category,
        answer_text=answer_text,
        score=EMPTY_ANSWER_SCORE,
        confidence=1.0,
        rationale="No answer provided",
        partial_credits=[PartialCredit(criterion="Empty Answer", points=0.0, reasoning="No answer provided")],
        source="policy",
    )


def rule_tier(question: Question, answer_text: str) -> Optional[EvaluationResult]:
    """Score ``answer_text`` from the question's patterns and rubric alone.

    Returns ``None`` when nothing in the rubric matched.
    """

    normalized = normalize(answer_text)
    matches = [
        expected
        for expected in question.expected_answers
        if expected.pattern.strip() and normalize(expected.pattern) in normalized
    ]
    if matches:
        best = max(matches, key=lambda expected: expected.score)
        return EvaluationResult(
            question_id=question.question_id,
            category=question.category,
            answer_text=answer_text,
            score=best.score,
            confidence=EXACT_MATCH_CONFIDENCE,
            rationale=f"Response matches expected pattern: {best.pattern}",
            partial_credits=[
                PartialCredit(
                    criterion="Exact Match",
                    points=best.score,
                    reasoning=best.explanation or "Response contains the expected formula or concept",
                )
            ],
            source="rule",
        )

    rubric = question.rubric
    credits: List[PartialCredit] = []
    for mistake in rubric.common_mistakes:
        if normalize(mistake.pattern) in normalized:
            credits.append(
                PartialCredit(criterion="Common Mistake", points=-mistake.deduction, reasoning=mistake.feedback)
            )
    for rule in rubric.partial_credit_rules:
        if normalize(rule.condition) in normalized:
            credits.append(
                PartialCredit(
                    criterion="Partial Credit",
                    points=rubric.max_score * rule.credit_percentage / 100.0,
                    reasoning=rule.feedback,
                )
            )
    if not credits:
        return None

    total = sum(credit.points for credit in credits)
    return EvaluationResult(
        question_id=question.question_id,
        category=question.category,
        answer_text=answer_text,
        score=max(0.0, min(100.0, total)),
        confidence=PARTIAL_CONFIDENCE,
        rationale="Rule-based evaluation with pattern matching",
        partial_credits=credits,
        source="rule",
    )


def judge_context(question: Question, context: EvaluationContext) -> Dict[str, Any]:
    return {
        "session_id": context.session_id,
        "role_level": context.role_level.value,
        "rubric": rubric_text(question),
        "skill_scores": {
            category.value: score for category, score in context.skill_scores.categories.items()
        },
        "overall_score": context.skill_scores.overall,
    }


def _call_judge(
    question: Question,
    answer_text: str,
    context: EvaluationContext,
    timeout_s: float,
) -> Any:
    try:
        judge = get_model(JUDGE_KEY)
    except KeyError as exc:
        raise JudgeFailure(f"No answer judge bound at {JUDGE_KEY}") from exc

    future = _executor().submit(
        judge,
        question=question,
        answer_text=answer_text,
        context=judge_context(question, context),
        timeout_s=timeout_s,
    )
    try:
        return future.result(timeout=timeout_s)
    except FutureTimeout as exc:
        future.cancel()
        raise EvaluationTimeout(question.question_id, timeout_s) from exc
    except AssessmentError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise JudgeFailure(
            f"Answer judge failed: {exc}",
            retryable=bool(getattr(exc, "retryable", False)),
        ) from exc


def _parse_verdict(raw: Any, session_id: str, question_id: str) -> JudgeVerdict:
    try:
        return JudgeVerdict.model_validate(raw)
    except ValidationError as exc:
        log_event(
            "judge_schema_invalid",
            session_id,
            level=logging.WARNING,
            question_id=question_id,
            reason=str(exc).splitlines()[0],
        )
        raise JudgeFailure("Answer judge returned malformed output", retryable=True) from exc


def evaluate(
    question: Question,
    answer_text: str,
    context: Optional[EvaluationContext] = None,
    *,
    timeout_s: Optional[float] = None,
) -> EvaluationResult:
    """Score one answer to ``question``.

    Raises:
        EvaluationTimeout: The AI judge did not answer within ``timeout_s``.
        JudgeFailure: The AI judge is unbound, raised, or returned output that
            does not fit the verdict schema (retryable).
    """

    ctx = context or EvaluationContext()

    if not answer_text or not answer_text.strip():
        result = empty_answer_result(question, answer_text or "")
        log_event("evaluation", ctx.session_id, question_id=question.question_id, score=result.score, source="policy")
        return result

    rule = rule_tier(question, answer_text)
    if rule is not None and rule.confidence > settings.RULE_CONFIDENCE_GATE:
        result = rule.model_copy(
            update={"suggested_follow_up": suggest_follow_up(question, answer_text, rule.score)}
        )
        log_event(
            "evaluation",
            ctx.session_id,
            question_id=question.question_id,
            score=result.score,
            confidence=result.confidence,
            source="rule",
        )
        return result

    bound = settings.AI_TIMEOUT_SECONDS if timeout_s is None else timeout_s
    with span(ctx.session_id, "ai_judge", question_id=question.question_id):
        raw = _call_judge(question, answer_text, ctx, bound)
    verdict = _parse_verdict(raw, ctx.session_id, question.question_id)

    credits = list(verdict.partial_credits)
    confidence = verdict.confidence
    if rule is not None:
        credits.extend(rule.partial_credits)
        confidence = max(confidence, rule.confidence)

    result = EvaluationResult(
        question_id=question.question_id,
        category=question.category,
        answer_text=answer_text,
        score=verdict.score,
        confidence=confidence,
        rationale=verdict.rationale,
        partial_credits=credits,
        suggested_follow_up=verdict.suggested_follow_up or suggest_follow_up(question, answer_text, verdict.score),
        source="ai",
    )
    log_event(
        "evaluation",
        ctx.session_id,
        question_id=question.question_id,
        score=result.score,
        confidence=result.confidence,
        source="ai",
    )
    return result


__all__ = [
    "EXACT_MATCH_CONFIDENCE",
    "PARTIAL_CONFIDENCE",
    "normalize",
    "rubric_text",
    "rule_tier",
    "judge_context",
    "evaluate",
]
