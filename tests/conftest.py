import os
import random
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from assessment.types import (
    ExpectedAnswer,
    FollowUpTrigger,
    PartialCreditRule,
    Question,
    Rubric,
    RubricCriterion,
    ScoreBelow,
)
from catalog.repository import InMemoryCatalog
from config.registry import JUDGE_KEY, bind_model, unbind_model
from config.settings import settings
from skills.taxonomy import Difficulty, SkillCategory
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture(autouse=True)
def reset_judge():
    yield
    unbind_model(JUDGE_KEY)


class FakeJudge:
    """Records calls and replies with a fixed verdict payload."""

    def __init__(self, reply=None, score=40.0):
        self.calls = []
        self.reply = reply
        self.score = score

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.reply is not None:
            return self.reply(**kwargs) if callable(self.reply) else self.reply
        return {
            "score": self.score,
            "confidence": 0.6,
            "reasoning": "judged",
            "partialCredits": [{"criterion": "Concept", "points": self.score, "reasoning": "ok"}],
        }


@pytest.fixture
def fake_judge():
    judge = FakeJudge()
    bind_model(JUDGE_KEY, judge)
    try:
        yield judge
    finally:
        unbind_model(JUDGE_KEY)


@pytest.fixture
def no_judge():
    unbind_model(JUDGE_KEY)
    return None


def make_question(
    question_id,
    category=SkillCategory.BASIC_FORMULAS,
    difficulty=Difficulty.BASIC,
    *,
    patterns=(),
    partial_rules=(),
    follow_ups=(),
):
    return Question(
        question_id=question_id,
        category=category,
        difficulty=difficulty,
        text=f"Question {question_id}",
        expected_answers=[ExpectedAnswer(pattern=pattern, score=score) for pattern, score in patterns],
        rubric=Rubric(
            max_score=100,
            criteria=[RubricCriterion(name="Accuracy", weight=1.0, description="Correct result")],
            partial_credit_rules=[
                PartialCreditRule(condition=condition, credit_percentage=pct, feedback=f"{condition} credit")
                for condition, pct in partial_rules
            ],
        ),
        follow_ups=list(follow_ups),
    )


@pytest.fixture
def sum_question():
    return make_question(
        "SUM-1",
        patterns=[("=SUM(A1:A10)", 100.0), ("SUM(A1:A10)", 80.0)],
        partial_rules=[("mentions SUM function", 50.0)],
        follow_ups=[FollowUpTrigger(condition=ScoreBelow(threshold=60), question_template="Why '{response}'?")],
    )


@pytest.fixture
def small_catalog():
    return InMemoryCatalog(
        [
            make_question("BF-1", SkillCategory.BASIC_FORMULAS, Difficulty.BASIC, patterns=[("=SUM(A1:A10)", 100.0)]),
            make_question("BF-2", SkillCategory.BASIC_FORMULAS, Difficulty.INTERMEDIATE),
            make_question("DM-1", SkillCategory.DATA_MANIPULATION, Difficulty.BASIC),
            make_question("PT-1", SkillCategory.PIVOT_TABLES, Difficulty.INTERMEDIATE),
            make_question("DV-1", SkillCategory.DATA_VISUALIZATION, Difficulty.BASIC),
        ]
    )


@pytest.fixture
def rng():
    return random.Random(7)
