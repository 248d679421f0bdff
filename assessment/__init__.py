"""Domain types and errors for the interview assessment core."""
from .errors import (
    AssessmentError,
    ConcurrentModificationError,
    EvaluationTimeout,
    ExhaustionError,
    InsufficientDataError,
    InvalidTransition,
    JudgeFailure,
)
from .types import (
    ConversationTurn,
    EvaluationContext,
    EvaluationResult,
    JudgeVerdict,
    Question,
    Report,
    Session,
    SkillCoverage,
    SkillScores,
)

__all__ = [
    "AssessmentError",
    "ConcurrentModificationError",
    "EvaluationTimeout",
    "ExhaustionError",
    "InsufficientDataError",
    "InvalidTransition",
    "JudgeFailure",
    "ConversationTurn",
    "EvaluationContext",
    "EvaluationResult",
    "JudgeVerdict",
    "Question",
    "Report",
    "Session",
    "SkillCoverage",
    "SkillScores",
]
