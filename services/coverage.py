"""Skill coverage tracking over a session's delivered questions."""
from __future__ import annotations

import math
from collections import Counter
from typing import Dict, Mapping, Optional

from assessment.types import Session, SkillCoverage
from config.settings import settings
from skills.taxonomy import SkillCategory, weighted_categories


def expected_questions(weight: float, question_budget: int) -> int:
    """Number of questions a category should receive from the budget."""

    return math.ceil(question_budget * weight)


def asked_per_category(session: Session) -> Counter:
    return Counter(question.category for question in session.asked_questions())


def coverage(
    session: Session,
    role_weights: Mapping[SkillCategory, float],
    question_budget: Optional[int] = None,
) -> SkillCoverage:
    """Compute per-category and overall coverage for ``session``.

    Only categories with a nonzero weight are reported. Ratios are capped at
    1.0 so over-asking one category never inflates the overall figure.
    """

    budget = settings.QUESTION_BUDGET if question_budget is None else question_budget
    asked = asked_per_category(session)

    ratios: Dict[SkillCategory, float] = {}
    weighted_sum = 0.0
    total_weight = 0.0
    for category in weighted_categories(role_weights):
        weight = float(role_weights[category])
        expected = expected_questions(weight, budget)
        ratio = min(asked[category] / expected, 1.0) if expected > 0 else 0.0
        ratios[category] = ratio
        weighted_sum += ratio * weight
        total_weight += weight

    overall = weighted_sum / total_weight if total_weight > 0 else 0.0
    missing = [
        category for category, ratio in ratios.items() if ratio < settings.COVERAGE_MISSING_THRESHOLD
    ]
    return SkillCoverage(categories=ratios, overall_coverage=overall, missing_areas=missing)


__all__ = ["coverage", "expected_questions", "asked_per_category"]
