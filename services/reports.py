"""Final report generation and baseline comparison."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from assessment.errors import InsufficientDataError, InvalidTransition
from assessment.types import (
    ComparisonResult,
    DetailedFeedback,
    EvaluationResult,
    Recommendation,
    Report,
    Session,
    SkillScores,
)
from config.settings import settings
from observability.logger import log_event
from skills.taxonomy import CATEGORY_ORDER, RoleLevel, SkillCategory, label

from .scoring import recompute

STRENGTH_CUTOFF = 80.0
IMPROVEMENT_CUTOFF = 60.0

# (strong_hire, hire) cutoffs on the overall score.
RECOMMENDATION_THRESHOLDS: Dict[RoleLevel, Tuple[float, float]] = {
    RoleLevel.BASIC: (85.0, 70.0),
    RoleLevel.INTERMEDIATE: (90.0, 75.0),
    RoleLevel.ADVANCED: (95.0, 85.0),
}

OVERALL_BASELINE: Dict[RoleLevel, float] = {
    RoleLevel.BASIC: 60.0,
    RoleLevel.INTERMEDIATE: 75.0,
    RoleLevel.ADVANCED: 85.0,
}

CATEGORY_BASELINES: Dict[RoleLevel, Dict[SkillCategory, float]] = {
    RoleLevel.BASIC: {
        SkillCategory.BASIC_FORMULAS: 70.0,
        SkillCategory.DATA_MANIPULATION: 60.0,
        SkillCategory.PIVOT_TABLES: 50.0,
        SkillCategory.ADVANCED_FUNCTIONS: 40.0,
        SkillCategory.DATA_VISUALIZATION: 45.0,
        SkillCategory.MACROS_VBA: 30.0,
        SkillCategory.DATA_MODELING: 35.0,
    },
    RoleLevel.INTERMEDIATE: {
        SkillCategory.BASIC_FORMULAS: 85.0,
        SkillCategory.DATA_MANIPULATION: 80.0,
        SkillCategory.PIVOT_TABLES: 75.0,
        SkillCategory.ADVANCED_FUNCTIONS: 70.0,
        SkillCategory.DATA_VISUALIZATION: 65.0,
        SkillCategory.MACROS_VBA: 50.0,
        SkillCategory.DATA_MODELING: 60.0,
    },
    RoleLevel.ADVANCED: {
        SkillCategory.BASIC_FORMULAS: 90.0,
        SkillCategory.DATA_MANIPULATION: 90.0,
        SkillCategory.PIVOT_TABLES: 85.0,
        SkillCategory.ADVANCED_FUNCTIONS: 85.0,
        SkillCategory.DATA_VISUALIZATION: 80.0,
        SkillCategory.MACROS_VBA: 75.0,
        SkillCategory.DATA_MODELING: 80.0,
    },
}

# Minimum difference from baseline -> percentile, checked top down.
PERCENTILE_LADDER: Tuple[Tuple[float, int], ...] = (
    (15.0, 90),
    (10.0, 80),
    (5.0, 70),
    (0.0, 60),
    (-5.0, 50),
    (-10.0, 40),
    (-15.0, 30),
)
PERCENTILE_FLOOR = 20

BENCHMARK_LABELS: Tuple[Tuple[int, str], ...] = (
    (80, "Top performer"),
    (70, "Above average"),
    (50, "Average performer"),
    (30, "Below average"),
)
BENCHMARK_FLOOR = "Needs significant improvement"


def percentile_for(difference: float) -> int:
    for minimum, percentile in PERCENTILE_LADDER:
        if difference >= minimum:
            return percentile
    return PERCENTILE_FLOOR


def benchmark_for(percentile: int) -> str:
    for minimum, benchmark in BENCHMARK_LABELS:
        if percentile >= minimum:
            return benchmark
    return BENCHMARK_FLOOR


def compare_to_baseline(scores: SkillScores, role_level: RoleLevel | str) -> ComparisonResult:
    """Place ``scores.overall`` against the fixed baseline for ``role_level``."""

    baseline = OVERALL_BASELINE[RoleLevel(role_level)]
    difference = scores.overall - baseline
    percentile = percentile_for(difference)

    if difference >= 10:
        recommendation = "Exceeds role requirements - consider for advanced positions"
    elif difference >= 0:
        recommendation = "Meets role requirements - good candidate"
    elif difference >= -10:
        recommendation = "Close to requirements - consider with additional training"
    else:
        recommendation = "Does not meet minimum requirements for this role"

    return ComparisonResult(percentile=percentile, benchmark=benchmark_for(percentile), recommendation=recommendation)


def category_gaps(scores: SkillScores, role_level: RoleLevel | str) -> Dict[SkillCategory, float]:
    """Per-category difference from the role baseline."""

    baselines = CATEGORY_BASELINES[RoleLevel(role_level)]
    return {category: round(scores.get(category) - baselines[category], 1) for category in CATEGORY_ORDER}


def recommend(overall: float, role_level: RoleLevel | str, completion_rate: float) -> Recommendation:
    if completion_rate < settings.MIN_COMPLETION_RATE:
        return "insufficient_data"
    strong_hire, hire = RECOMMENDATION_THRESHOLDS[RoleLevel(role_level)]
    if overall >= strong_hire:
        return "strong_hire"
    if overall >= hire:
        return "hire"
    return "no_hire"


def completion_rate(
    session: Session,
    history: Sequence[EvaluationResult],
    max_questions: Optional[int] = None,
) -> float:
    """Answered share of the planned questions, as a percentage.

    The plan is the limit recorded when the session completed, falling back to
    ``MAX_QUESTIONS``. When the catalog ran out, the plan shrinks to what was
    actually delivered.
    """

    if session.metadata.get("completion_reason") == "exhausted":
        planned = len(session.asked_questions())
    elif max_questions is not None:
        planned = max_questions
    else:
        planned = int(session.metadata.get("planned_questions") or settings.MAX_QUESTIONS)
    if planned <= 0:
        return 0.0
    return round(min(100.0, 100.0 * len(history) / planned), 1)


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(item for item in items if item))


def build_feedback(evaluation: EvaluationResult) -> DetailedFeedback:
    strengths = [credit.reasoning for credit in evaluation.partial_credits if credit.points > 0]
    improvements = [credit.reasoning for credit in evaluation.partial_credits if credit.points < 0]

    if evaluation.score >= 90:
        strengths.append("Excellent understanding of Excel concepts and syntax")
    elif evaluation.score >= 70:
        strengths.append("Good grasp of Excel fundamentals")
        improvements.append("Focus on syntax precision and advanced features")
    elif evaluation.score >= 50:
        improvements.append("Review basic Excel formulas and functions")
        improvements.append("Practice with real-world Excel scenarios")
    else:
        improvements.append("Strengthen foundational Excel knowledge")
        improvements.append("Consider taking an Excel basics course")

    return DetailedFeedback(
        question_id=evaluation.question_id,
        response=evaluation.answer_text,
        score=evaluation.score,
        strengths=_dedupe(strengths),
        improvements=_dedupe(improvements),
        specific_feedback=evaluation.rationale or "No specific feedback available",
    )


def analyze_performance(scores: SkillScores, history: Sequence[EvaluationResult]) -> Tuple[List[str], List[str]]:
    strengths: List[str] = []
    improvements: List[str] = []

    answered = {evaluation.category for evaluation in history}
    for category in CATEGORY_ORDER:
        if category not in answered:
            continue
        score = scores.get(category)
        if score >= STRENGTH_CUTOFF:
            strengths.append(f"Excellent {label(category)} skills")
        elif score < IMPROVEMENT_CUTOFF:
            improvements.append(f"Strengthen {label(category)} knowledge")

    average_score = sum(evaluation.score for evaluation in history) / len(history)
    average_confidence = sum(evaluation.confidence for evaluation in history) / len(history)

    if average_confidence >= 0.8:
        strengths.append("Consistent and confident responses")
    elif average_confidence < 0.6:
        improvements.append("Build confidence in Excel knowledge")

    if average_score >= 85:
        strengths.append("Strong overall Excel proficiency")
    elif average_score < 65:
        improvements.append("Focus on fundamental Excel concepts")

    return strengths, improvements


def generate(session: Session, history: Optional[Sequence[EvaluationResult]] = None) -> Report:
    """Build the final report for a completed session.

    Raises:
        InvalidTransition: The session is not completed.
        InsufficientDataError: No evaluations were recorded.
    """

    if session.status != "completed":
        raise InvalidTransition("generate_report", session.status)
    evaluations = list(session.evaluations if history is None else history)
    if not evaluations:
        raise InsufficientDataError(f"No evaluations recorded for session {session.session_id}")

    scores = recompute(evaluations, session.role_level)
    rate = completion_rate(session, evaluations)
    strengths, improvements = analyze_performance(scores, evaluations)
    ended_at = session.ended_at or session.started_at
    duration = max(0, int((ended_at - session.started_at).total_seconds()))

    report = Report(
        session_id=session.session_id,
        candidate_id=session.candidate_id,
        role_level=session.role_level,
        overall_score=scores.overall,
        skill_breakdown=scores,
        strengths=strengths,
        improvement_areas=improvements,
        hiring_recommendation=recommend(scores.overall, session.role_level, rate),
        detailed_feedback=[build_feedback(evaluation) for evaluation in evaluations],
        interview_duration=duration,
        completion_rate=rate,
        baseline=compare_to_baseline(scores, session.role_level),
    )
    log_event(
        "report_generated",
        session.session_id,
        score=report.overall_score,
        reason=report.hiring_recommendation,
    )
    return report


__all__ = [
    "RECOMMENDATION_THRESHOLDS",
    "OVERALL_BASELINE",
    "CATEGORY_BASELINES",
    "percentile_for",
    "benchmark_for",
    "compare_to_baseline",
    "category_gaps",
    "recommend",
    "completion_rate",
    "build_feedback",
    "analyze_performance",
    "generate",
]
