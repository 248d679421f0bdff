"""Create-or-update persistence for sessions and evaluation results."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional, Protocol

from assessment.types import EvaluationResult, Session

from .sqlite import get_conn


class SessionStore(Protocol):
    def save_session(self, session: Session) -> None: ...

    def load_session(self, session_id: str) -> Optional[Session]: ...

    def find_open_session(self, candidate_id: str) -> Optional[Session]: ...

    def save_evaluation(self, session_id: str, result: EvaluationResult) -> None: ...

    def list_evaluations(self, session_id: str) -> List[EvaluationResult]: ...


class SqliteSessionStore:
    """SQLite-backed store keyed by session and evaluation id."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path

    def save_session(self, session: Session) -> None:
        """Insert or replace the session row."""

        now = dt.datetime.now(dt.timezone.utc).isoformat()
        with get_conn(self._db_path) as conn:
            conn.execute(
                """INSERT INTO interview_sessions
                   (session_id, candidate_id, role_level, status, current_question_index,
                    overall_score, started_at, ended_at, updated_at, payload_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(session_id) DO UPDATE SET
                     status = excluded.status,
                     current_question_index = excluded.current_question_index,
                     overall_score = excluded.overall_score,
                     ended_at = excluded.ended_at,
                     updated_at = excluded.updated_at,
                     payload_json = excluded.payload_json""",
                (
                    session.session_id,
                    session.candidate_id,
                    session.role_level.value,
                    session.status,
                    session.current_question_index,
                    session.skill_scores.overall,
                    session.started_at.isoformat(),
                    session.ended_at.isoformat() if session.ended_at else None,
                    now,
                    session.model_dump_json(),
                ),
            )

    def load_session(self, session_id: str) -> Optional[Session]:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                "SELECT payload_json FROM interview_sessions WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if row is None:
            return None
        return Session.model_validate_json(row["payload_json"])

    def find_open_session(self, candidate_id: str) -> Optional[Session]:
        """Most recently started active or paused session for ``candidate_id``."""

        with get_conn(self._db_path) as conn:
            row = conn.execute(
                """SELECT payload_json FROM interview_sessions
                   WHERE candidate_id = ? AND status IN ('active', 'paused')
                   ORDER BY started_at DESC LIMIT 1""",
                (candidate_id,),
            ).fetchone()
        if row is None:
            return None
        return Session.model_validate_json(row["payload_json"])

    def save_evaluation(self, session_id: str, result: EvaluationResult) -> None:
        with get_conn(self._db_path) as conn:
            conn.execute(
                """INSERT OR REPLACE INTO evaluation_results
                   (evaluation_id, session_id, question_id, category, score, confidence,
                    source, created_at, payload_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    result.evaluation_id,
                    session_id,
                    result.question_id,
                    result.category.value,
                    result.score,
                    result.confidence,
                    result.source,
                    result.created_at.isoformat(),
                    result.model_dump_json(),
                ),
            )

    def list_evaluations(self, session_id: str) -> List[EvaluationResult]:
        with get_conn(self._db_path) as conn:
            rows = conn.execute(
                """SELECT payload_json FROM evaluation_results
                   WHERE session_id = ? ORDER BY created_at, rowid""",
                (session_id,),
            ).fetchall()
        return [EvaluationResult.model_validate_json(row["payload_json"]) for row in rows]


__all__ = ["SessionStore", "SqliteSessionStore"]
