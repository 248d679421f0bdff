"""Error taxonomy for the assessment pipeline.

Each error carries a ``retryable`` flag the orchestrating layer reads to decide
whether to try the same call again.
"""
from __future__ import annotations

from typing import Optional


class AssessmentError(Exception):
    retryable: bool = False


class InvalidTransition(AssessmentError):
    """Session is not in a state that allows the attempted transition."""

    def __init__(self, transition: str, state: str, detail: Optional[str] = None) -> None:
        self.transition = transition
        self.state = state
        message = f"Cannot {transition} while session is {state}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ExhaustionError(AssessmentError):
    """No unused question remains; the interview is naturally complete."""


class EvaluationTimeout(AssessmentError):
    retryable = True

    def __init__(self, question_id: str, timeout_s: float) -> None:
        self.question_id = question_id
        self.timeout_s = timeout_s
        super().__init__(f"AI evaluation for question {question_id} exceeded {timeout_s:.2f}s")


class JudgeFailure(AssessmentError):
    """The AI judgement capability failed; ``retryable`` mirrors the judge."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        self.retryable = retryable
        super().__init__(message)


class InsufficientDataError(AssessmentError):
    pass


class ConcurrentModificationError(AssessmentError):
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} is already being modified by another call")


__all__ = [
    "AssessmentError",
    "InvalidTransition",
    "ExhaustionError",
    "EvaluationTimeout",
    "JudgeFailure",
    "InsufficientDataError",
    "ConcurrentModificationError",
]
