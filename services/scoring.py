"""Skill score aggregation over evaluation history."""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence

from assessment.types import EvaluationResult, SkillScores
from skills.taxonomy import CATEGORY_ORDER, RoleLevel, SkillCategory, role_weights


def _round1(value: float) -> float:
    """Round a float to one decimal place with stable formatting."""
    return float(f"{value:.1f}")


def scores_by_category(history: Sequence[EvaluationResult]) -> Dict[SkillCategory, List[float]]:
    grouped: Dict[SkillCategory, List[float]] = defaultdict(list)
    for evaluation in history:
        grouped[evaluation.category].append(float(evaluation.score))
    return grouped


def recent_scores(
    history: Sequence[EvaluationResult],
    category: SkillCategory,
    limit: int,
) -> List[float]:
    """The last ``limit`` scores recorded for ``category``, oldest first."""

    scores = [float(evaluation.score) for evaluation in history if evaluation.category == category]
    return scores[-limit:] if limit > 0 else []


def recompute(history: Sequence[EvaluationResult], role_level: RoleLevel | str) -> SkillScores:
    """Rebuild skill scores from scratch.

    Unanswered categories read 0 and are left out of the weighted overall, so
    probing one area never gets diluted by areas that were not reached.
    """

    weights = role_weights(role_level)
    grouped = scores_by_category(history)

    categories: Dict[SkillCategory, float] = {}
    weighted_sum = 0.0
    total_weight = 0.0
    for category in CATEGORY_ORDER:
        scores = grouped.get(category, [])
        if not scores:
            categories[category] = 0.0
            continue
        mean = sum(scores) / len(scores)
        categories[category] = _round1(mean)
        weight = weights.get(category, 0.0)
        if weight > 0.0:
            weighted_sum += mean * weight
            total_weight += weight

    overall = _round1(weighted_sum / total_weight) if total_weight > 0 else 0.0
    return SkillScores(categories=categories, overall=overall)


__all__ = ["recompute", "recent_scores", "scores_by_category"]
