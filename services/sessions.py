"""Interview session lifecycle: creation, delivery, intake, pause/resume, completion."""
from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from typing import Callable, Collection, Dict, Iterator, Optional

from assessment.errors import AssessmentError, ConcurrentModificationError, InvalidTransition
from assessment.types import (
    ConversationTurn,
    EvaluationContext,
    EvaluationResult,
    Question,
    Session,
    utcnow,
)
from catalog.repository import QuestionCatalog
from observability.logger import log_event
from observability.tracing import span
from skills.taxonomy import RoleLevel
from storage.sessions import SessionStore

from .evaluator import evaluate
from .followups import build_follow_up
from .scoring import recompute
from .selector import next_question

Evaluator = Callable[..., EvaluationResult]

OPEN_STATES = ("active", "paused")


class InterviewStateMachine:
    """Owns session transitions and drives selection, evaluation and scoring.

    Sessions are independent; each one admits a single mutating call at a
    time and a concurrent caller is rejected rather than queued.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        *,
        store: Optional[SessionStore] = None,
        rng: Optional[random.Random] = None,
        evaluator: Evaluator = evaluate,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._rng = rng
        self._evaluate = evaluator
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    # Lookup -------------------------------------------------------------------

    def get(self, session_id: str) -> Optional[Session]:
        with self._guard:
            session = self._sessions.get(session_id)
            if session is None and self._store is not None:
                session = self._store.load_session(session_id)
                if session is not None:
                    self._sessions[session_id] = session
        return session

    def _open_session_for(self, candidate_id: str) -> Optional[Session]:
        for session in self._sessions.values():
            if session.candidate_id == candidate_id and session.status in OPEN_STATES:
                return session
        if self._store is not None:
            return self._store.find_open_session(candidate_id)
        return None

    # Guards -------------------------------------------------------------------

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
        return lock

    @contextmanager
    def _exclusive(self, session: Session) -> Iterator[None]:
        lock = self._lock_for(session.session_id)
        if not lock.acquire(blocking=False):
            raise ConcurrentModificationError(session.session_id)
        try:
            yield
        finally:
            lock.release()

    @staticmethod
    def _require(session: Session, transition: str, allowed: Collection[str]) -> None:
        if session.status not in allowed:
            raise InvalidTransition(transition, session.status)

    def _persist(self, session: Session, evaluation: Optional[EvaluationResult] = None) -> None:
        if self._store is None:
            return
        if evaluation is not None:
            self._store.save_evaluation(session.session_id, evaluation)
        self._store.save_session(session)

    # Transitions --------------------------------------------------------------

    def start(self, candidate_id: str, role_level: RoleLevel | str) -> Session:
        """Open a new active session for ``candidate_id``."""

        level = RoleLevel(role_level)
        with self._guard:
            existing = self._open_session_for(candidate_id)
            if existing is not None:
                raise InvalidTransition(
                    "start",
                    existing.status,
                    f"candidate {candidate_id} already holds session {existing.session_id}",
                )
            session = Session(candidate_id=candidate_id, role_level=level)
            self._sessions[session.session_id] = session
        self._persist(session)
        log_event("session_started", session.session_id, transition="start", status=session.status)
        return session

    def deliver_next_question(self, session: Session) -> Question:
        """Append the next question turn and return the question.

        A question still awaiting its response is handed back unchanged.

        Raises:
            ExhaustionError: Nothing left to ask; callers treat this as the
                natural end of the interview.
        """

        with self._exclusive(session):
            self._require(session, "deliver_next_question", ("active",))
            pending = session.pending_question()
            if pending is not None:
                log_event("question_redelivered", session.session_id, question_id=pending.question_id)
                return pending

            question = next_question(session, self._catalog, self._rng).model_copy(deep=True)
            self._append_question(session, question)
            self._persist(session)
            return question

    def deliver_follow_up(self, session: Session) -> Optional[Question]:
        """Ask the follow-up triggered by the latest evaluation, if any."""

        with self._exclusive(session):
            self._require(session, "deliver_follow_up", ("active",))
            if session.pending_question() is not None:
                raise InvalidTransition("deliver_follow_up", session.status, "a question is awaiting a response")
            if not session.evaluations:
                return None
            last = session.evaluations[-1]
            parent = next(
                (question for question in reversed(session.asked_questions()) if question.question_id == last.question_id),
                None,
            )
            if parent is None:
                return None
            follow_up = build_follow_up(parent, last.answer_text, last.score)
            if follow_up is None:
                return None
            self._append_question(session, follow_up, follow_up_of=parent.question_id)
            self._persist(session)
            return follow_up

    def _append_question(self, session: Session, question: Question, **extra: str) -> None:
        session.conversation_history.append(
            ConversationTurn(
                kind="question",
                text=question.text,
                question=question,
                metadata={
                    "question_index": session.current_question_index,
                    "category": question.category.value,
                    "difficulty": question.difficulty.value,
                    **extra,
                },
            )
        )
        log_event(
            "question_delivered",
            session.session_id,
            question_id=question.question_id,
            category=question.category.value,
            difficulty=question.difficulty.value,
        )

    def submit_response(
        self,
        session: Session,
        text: str,
        *,
        timeout_s: Optional[float] = None,
    ) -> EvaluationResult:
        """Evaluate ``text`` against the pending question and record it.

        Nothing is appended until evaluation succeeds, so a timed-out or
        failed attempt can be retried with the same text.
        """

        with self._exclusive(session):
            self._require(session, "submit_response", ("active",))
            question = session.pending_question()
            if question is None:
                raise InvalidTransition("submit_response", session.status, "no question is awaiting a response")

            context = EvaluationContext(
                session_id=session.session_id,
                role_level=session.role_level,
                skill_scores=session.skill_scores.model_copy(deep=True),
                asked_question_ids=session.asked_question_ids(),
            )
            try:
                with span(session.session_id, "evaluate", question_id=question.question_id):
                    result = self._evaluate(question, text, context, timeout_s=timeout_s)
            except AssessmentError as exc:
                log_event(
                    "evaluation_failed",
                    session.session_id,
                    level=logging.WARNING,
                    question_id=question.question_id,
                    reason=type(exc).__name__,
                    retryable=exc.retryable,
                )
                raise

            session.conversation_history.append(
                ConversationTurn(
                    kind="response",
                    text=text,
                    metadata={
                        "question_id": question.question_id,
                        "question_index": session.current_question_index,
                        "evaluation_id": result.evaluation_id,
                    },
                )
            )
            session.evaluations.append(result)
            session.skill_scores = recompute(session.evaluations, session.role_level)
            session.current_question_index += 1
            self._persist(session, result)
            log_event(
                "response_recorded",
                session.session_id,
                question_id=question.question_id,
                score=result.score,
                source=result.source,
            )
            return result

    def pause(self, session: Session) -> Session:
        with self._exclusive(session):
            self._require(session, "pause", ("active",))
            session.status = "paused"
            session.metadata["paused_at"] = utcnow().isoformat()
            self._persist(session)
        log_event("session_paused", session.session_id, transition="pause", status=session.status)
        return session

    def resume(self, session: Session) -> Session:
        with self._exclusive(session):
            self._require(session, "resume", ("paused",))
            session.status = "active"
            session.metadata["resumed_at"] = utcnow().isoformat()
            self._persist(session)
        log_event("session_resumed", session.session_id, transition="resume", status=session.status)
        return session

    def complete(
        self,
        session: Session,
        reason: str = "policy",
        *,
        planned_questions: Optional[int] = None,
    ) -> Session:
        """Close the session and freeze its scores.

        ``planned_questions`` records the question limit the session ran under,
        which the report uses as the completion-rate denominator.
        """

        with self._exclusive(session):
            self._require(session, "complete", OPEN_STATES)
            session.skill_scores = recompute(session.evaluations, session.role_level)
            session.ended_at = utcnow()
            session.status = "completed"
            session.metadata["completion_reason"] = reason
            if planned_questions is not None:
                session.metadata["planned_questions"] = planned_questions
            session.conversation_history.append(
                ConversationTurn(kind="system", text=f"Interview completed ({reason})", timestamp=session.ended_at)
            )
            self._persist(session)
        log_event(
            "session_completed",
            session.session_id,
            transition="complete",
            status=session.status,
            reason=reason,
            score=session.skill_scores.overall,
        )
        return session


__all__ = ["InterviewStateMachine", "OPEN_STATES"]
