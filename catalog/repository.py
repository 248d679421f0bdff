"""Read-only question catalog access."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Collection, Dict, Iterable, List, Optional, Protocol

from pydantic import BaseModel, Field

from assessment.types import Question
from skills.taxonomy import Difficulty, SkillCategory, supports

logger = logging.getLogger(__name__)


class QuestionCatalog(Protocol):
    """Query contract consumed by the selector."""

    def find_by_category_and_difficulty(
        self,
        category: SkillCategory,
        difficulty: Difficulty,
        exclude_ids: Collection[str],
    ) -> List[Question]: ...

    def find_any(self, exclude_ids: Collection[str]) -> List[Question]: ...


class CatalogFile(BaseModel):
    questions: List[Question] = Field(default_factory=list)


class InMemoryCatalog:
    """Catalog over a fixed list of questions, preserving insertion order."""

    def __init__(self, questions: Iterable[Question]) -> None:
        self._questions: Dict[str, Question] = {}
        for question in questions:
            if question.question_id in self._questions:
                raise ValueError(f"Duplicate question id: {question.question_id}")
            if not supports(question.category, question.difficulty):
                logger.warning(
                    "Question %s uses difficulty %s outside the %s progression",
                    question.question_id,
                    question.difficulty.value,
                    question.category.value,
                )
            self._questions[question.question_id] = question

    def __len__(self) -> int:
        return len(self._questions)

    def get(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def find_by_category_and_difficulty(
        self,
        category: SkillCategory,
        difficulty: Difficulty,
        exclude_ids: Collection[str],
    ) -> List[Question]:
        excluded = set(exclude_ids)
        return [
            question
            for question in self._questions.values()
            if question.category == category
            and question.difficulty == difficulty
            and question.question_id not in excluded
        ]

    def find_any(self, exclude_ids: Collection[str]) -> List[Question]:
        excluded = set(exclude_ids)
        return [question for question in self._questions.values() if question.question_id not in excluded]


def load_catalog(path: Path) -> InMemoryCatalog:
    """Load a JSON catalog file shaped as ``{"questions": [...]}``."""

    data = Path(path).read_text(encoding="utf-8")
    parsed = CatalogFile.model_validate_json(data)
    logger.info("Loaded %d questions from %s", len(parsed.questions), path)
    return InMemoryCatalog(parsed.questions)


def default_catalog(path: Optional[str] = None) -> InMemoryCatalog:
    """Catalog from ``path`` (or ``settings.CATALOG_PATH``), else the built-in bank."""

    from config.settings import settings

    from .bank import QUESTION_BANK

    source = path or settings.CATALOG_PATH
    if source:
        return load_catalog(Path(source))
    return InMemoryCatalog(QUESTION_BANK)


__all__ = ["QuestionCatalog", "CatalogFile", "InMemoryCatalog", "load_catalog", "default_catalog"]
