"""Adaptive next-question selection."""
from __future__ import annotations

import random
from typing import List, Optional, Tuple

from assessment.errors import ExhaustionError
from assessment.types import Question, Session, SkillCoverage
from catalog.repository import QuestionCatalog
from config.settings import settings
from observability.logger import log_event
from skills.taxonomy import CATEGORY_ORDER, Difficulty, SkillCategory, role_weights

from .coverage import coverage
from .scoring import recent_scores

ADVANCED_CUTOFF = 80.0
INTERMEDIATE_CUTOFF = 60.0


def category_priorities(session: Session, snapshot: SkillCoverage) -> List[Tuple[SkillCategory, float]]:
    """Categories ranked by ``weight * (1 - coverage)``, highest first.

    Ties keep taxonomy enumeration order (``CATEGORY_ORDER``); ``sorted`` is
    stable, so equal priorities never reorder.
    """

    weights = role_weights(session.role_level)
    ranked = [
        (category, weights.get(category, 0.0) * (1.0 - snapshot.categories.get(category, 0.0)))
        for category in CATEGORY_ORDER
    ]
    return sorted(ranked, key=lambda item: -item[1])


def select_category(session: Session, snapshot: SkillCoverage) -> SkillCategory:
    return category_priorities(session, snapshot)[0][0]


def adapt_difficulty(session: Session, category: SkillCategory) -> Difficulty:
    """Pick a tier from the candidate's recent scores in ``category``."""

    scores = recent_scores(session.evaluations, category, settings.RECENT_SCORE_WINDOW)
    if not scores:
        return Difficulty.BASIC
    average = sum(scores) / len(scores)
    if average >= ADVANCED_CUTOFF:
        return Difficulty.ADVANCED
    if average >= INTERMEDIATE_CUTOFF:
        return Difficulty.INTERMEDIATE
    return Difficulty.BASIC


def candidate_questions(
    catalog: QuestionCatalog,
    category: SkillCategory,
    difficulty: Difficulty,
    exclude_ids: List[str],
) -> Tuple[List[Question], str]:
    """Unused questions for the target, broadening in three steps."""

    exact = catalog.find_by_category_and_difficulty(category, difficulty, exclude_ids)
    if exact:
        return exact, "exact"
    remaining = catalog.find_any(exclude_ids)
    in_category = [question for question in remaining if question.category == category]
    if in_category:
        return in_category, "category"
    return remaining, "any"


def next_question(
    session: Session,
    catalog: QuestionCatalog,
    rng: Optional[random.Random] = None,
) -> Question:
    """Choose the next question for ``session``.

    Raises:
        ExhaustionError: If every catalog question has already been asked.
    """

    snapshot = coverage(session, role_weights(session.role_level))
    category = select_category(session, snapshot)
    difficulty = adapt_difficulty(session, category)
    asked_ids = session.asked_question_ids()

    candidates, scope = candidate_questions(catalog, category, difficulty, asked_ids)
    if not candidates:
        raise ExhaustionError(f"No unused questions remain for session {session.session_id}")

    chooser = rng or random
    selected = candidates[chooser.randrange(len(candidates))]
    log_event(
        "question_selected",
        session.session_id,
        question_id=selected.question_id,
        category=selected.category.value,
        difficulty=selected.difficulty.value,
        reason=scope,
        coverage=round(snapshot.overall_coverage, 3),
    )
    return selected


__all__ = [
    "category_priorities",
    "select_category",
    "adapt_difficulty",
    "candidate_questions",
    "next_question",
]
