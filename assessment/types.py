"""Shared type definitions for the assessment pipeline."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, Field, field_validator

from skills.taxonomy import CATEGORY_ORDER, Difficulty, RoleLevel, SkillCategory

TurnKind = Literal["question", "response", "system"]
SessionStatus = Literal["active", "paused", "completed"]
EvaluationSource = Literal["rule", "ai", "policy"]
Recommendation = Literal["strong_hire", "hire", "no_hire", "insufficient_data"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


# Catalog models ---------------------------------------------------------------


class ExpectedAnswer(BaseModel):
    pattern: str
    score: float = Field(default=100.0, ge=0.0, le=100.0)
    explanation: str = ""

    model_config = {"frozen": True}


class RubricCriterion(BaseModel):
    name: str
    weight: float = Field(ge=0.0, le=1.0)
    description: str = ""

    model_config = {"frozen": True}


class CommonMistake(BaseModel):
    pattern: str
    deduction: float = Field(ge=0.0)
    feedback: str = ""

    model_config = {"frozen": True}


class PartialCreditRule(BaseModel):
    condition: str
    credit_percentage: float = Field(ge=0.0, le=100.0)
    feedback: str = ""

    model_config = {"frozen": True}


class Rubric(BaseModel):
    max_score: float = Field(default=100.0, gt=0.0)
    criteria: List[RubricCriterion] = Field(default_factory=list)
    common_mistakes: List[CommonMistake] = Field(default_factory=list)
    partial_credit_rules: List[PartialCreditRule] = Field(default_factory=list)

    model_config = {"frozen": True}


class ScoreBelow(BaseModel):
    kind: Literal["score_below"] = "score_below"
    threshold: float

    model_config = {"frozen": True}


class ScoreAbove(BaseModel):
    kind: Literal["score_above"] = "score_above"
    threshold: float

    model_config = {"frozen": True}


FollowUpCondition = Annotated[Union[ScoreBelow, ScoreAbove], Field(discriminator="kind")]


class FollowUpTrigger(BaseModel):
    condition: FollowUpCondition
    question_template: str

    model_config = {"frozen": True}


class Question(BaseModel):
    """One assessable prompt; immutable once issued."""

    question_id: str
    category: SkillCategory
    difficulty: Difficulty
    text: str
    expected_answers: List[ExpectedAnswer] = Field(default_factory=list)
    rubric: Rubric = Field(default_factory=Rubric)
    follow_ups: List[FollowUpTrigger] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def expected_patterns(self) -> List[str]:
        return [answer.pattern for answer in self.expected_answers]


# Evaluation models ------------------------------------------------------------


class PartialCredit(BaseModel):
    criterion: str
    points: float
    reasoning: str = ""

    model_config = {"frozen": True}


class EvaluationResult(BaseModel):
    """One scored answer. Corrections create a new record."""

    evaluation_id: str = Field(default_factory=_new_id)
    question_id: str
    category: SkillCategory
    answer_text: str = ""
    score: float = Field(ge=0.0, le=100.0)
    confidence: float = Field(ge=0.0, le=1.0)
    rationale: str = ""
    partial_credits: List[PartialCredit] = Field(default_factory=list)
    suggested_follow_up: Optional[str] = None
    source: EvaluationSource = "rule"
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}


class JudgeVerdict(BaseModel):
    """Shape returned by the AI judgement capability."""

    score: float
    confidence: float
    rationale: str = Field(default="", validation_alias=AliasChoices("rationale", "reasoning"))
    partial_credits: List[PartialCredit] = Field(
        default_factory=list,
        validation_alias=AliasChoices("partial_credits", "partialCredits"),
    )
    suggested_follow_up: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("suggested_follow_up", "suggestedFollowUp"),
    )

    # Runs after float coercion, so non-numeric input is a ValidationError.
    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return max(0.0, min(100.0, value))

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))


# Scores and coverage ----------------------------------------------------------


def _zero_categories() -> Dict[SkillCategory, float]:
    return {category: 0.0 for category in CATEGORY_ORDER}


class SkillScores(BaseModel):
    categories: Dict[SkillCategory, float] = Field(default_factory=_zero_categories)
    overall: float = 0.0

    def get(self, category: SkillCategory | str) -> float:
        return self.categories.get(SkillCategory(category), 0.0)


class SkillCoverage(BaseModel):
    categories: Dict[SkillCategory, float] = Field(default_factory=dict)
    overall_coverage: float = 0.0
    missing_areas: List[SkillCategory] = Field(default_factory=list)


class EvaluationContext(BaseModel):
    """Context handed to the evaluator alongside the answer."""

    session_id: str = "adhoc"
    role_level: RoleLevel = RoleLevel.INTERMEDIATE
    skill_scores: SkillScores = Field(default_factory=SkillScores)
    asked_question_ids: List[str] = Field(default_factory=list)


# Session ----------------------------------------------------------------------


class ConversationTurn(BaseModel):
    turn_id: str = Field(default_factory=_new_id)
    kind: TurnKind
    text: str
    timestamp: datetime = Field(default_factory=utcnow)
    question: Optional[Question] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """One candidate's attempt, mutated only through the state machine."""

    session_id: str = Field(default_factory=_new_id)
    candidate_id: str
    role_level: RoleLevel
    status: SessionStatus = "active"
    current_question_index: int = 0
    conversation_history: List[ConversationTurn] = Field(default_factory=list)
    evaluations: List[EvaluationResult] = Field(default_factory=list)
    skill_scores: SkillScores = Field(default_factory=SkillScores)
    started_at: datetime = Field(default_factory=utcnow)
    ended_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def asked_questions(self) -> List[Question]:
        return [
            turn.question
            for turn in self.conversation_history
            if turn.kind == "question" and turn.question is not None
        ]

    def asked_question_ids(self) -> List[str]:
        return [question.question_id for question in self.asked_questions()]

    def pending_question(self) -> Optional[Question]:
        """The most recent delivered question that has no response yet."""

        for turn in reversed(self.conversation_history):
            if turn.kind == "response":
                return None
            if turn.kind == "question":
                return turn.question
        return None


# Reporting --------------------------------------------------------------------


class DetailedFeedback(BaseModel):
    question_id: str
    response: str
    score: float
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    specific_feedback: str = ""


class ComparisonResult(BaseModel):
    percentile: int
    benchmark: str
    recommendation: str


class Report(BaseModel):
    session_id: str
    candidate_id: str
    role_level: RoleLevel
    overall_score: float
    skill_breakdown: SkillScores
    strengths: List[str]
    improvement_areas: List[str]
    hiring_recommendation: Recommendation
    detailed_feedback: List[DetailedFeedback]
    interview_duration: int
    completion_rate: float
    baseline: ComparisonResult

    model_config = {"frozen": True}


__all__ = [
    "TurnKind",
    "SessionStatus",
    "EvaluationSource",
    "Recommendation",
    "utcnow",
    "ExpectedAnswer",
    "RubricCriterion",
    "CommonMistake",
    "PartialCreditRule",
    "Rubric",
    "ScoreBelow",
    "ScoreAbove",
    "FollowUpCondition",
    "FollowUpTrigger",
    "Question",
    "PartialCredit",
    "EvaluationResult",
    "JudgeVerdict",
    "SkillScores",
    "SkillCoverage",
    "EvaluationContext",
    "ConversationTurn",
    "Session",
    "DetailedFeedback",
    "ComparisonResult",
    "Report",
]
