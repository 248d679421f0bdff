"""Completion policy applied between turns."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from assessment.errors import ExhaustionError
from assessment.types import Question, Session
from config.settings import settings

from .sessions import InterviewStateMachine

StepAction = Literal["continue", "complete"]


class InterviewStep(BaseModel):
    """Decision payload returned to the delivery layer."""

    action: StepAction
    question: Optional[Question] = None
    message: str = ""


def next_step(
    machine: InterviewStateMachine,
    session: Session,
    *,
    max_questions: Optional[int] = None,
) -> InterviewStep:
    """Deliver the next question or complete the session.

    The session completes once ``max_questions`` answers are recorded or the
    catalog runs dry.
    """

    limit = settings.MAX_QUESTIONS if max_questions is None else max_questions
    if session.current_question_index >= limit:
        machine.complete(session, reason="max_questions", planned_questions=limit)
        return InterviewStep(action="complete", message="Question limit reached")
    try:
        question = machine.deliver_next_question(session)
    except ExhaustionError:
        machine.complete(session, reason="exhausted", planned_questions=limit)
        return InterviewStep(action="complete", message="No questions remain")
    return InterviewStep(action="continue", question=question, message="Next question ready")


__all__ = ["InterviewStep", "StepAction", "next_step"]
