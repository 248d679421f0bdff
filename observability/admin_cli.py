"""Lightweight CLI helpers for inspecting persisted interview sessions."""
from __future__ import annotations

import argparse
import sqlite3
from typing import Optional

from config.settings import settings


def tail_sessions(limit: int = 20, db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, session_id, candidate_id, role_level, status, current_question_index, overall_score
            FROM interview_sessions
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, candidate_id, role_level, status, index, overall = row
            print(f"[{ts}] {session_id}/{candidate_id} {role_level} -> {status} q={index} overall={overall:.1f}")
    finally:
        conn.close()


def tail_evaluations(limit: int = 20, session_id: Optional[str] = None, db_path: Optional[str] = None) -> None:
    conn = sqlite3.connect(db_path or settings.DB_PATH)
    try:
        cursor = conn.cursor()
        query = """
            SELECT created_at, session_id, question_id, category, score, confidence, source
            FROM evaluation_results
        """
        params: tuple = ()
        if session_id:
            query += " WHERE session_id = ?"
            params = (session_id,)
        query += " ORDER BY created_at DESC LIMIT ?"
        cursor.execute(query, params + (limit,))
        for row in cursor.fetchall():
            ts, sid, question_id, category, score, confidence, source = row
            print(f"[{ts}] {sid} {category}:{question_id} score={score:.1f} conf={confidence:.2f} source={source}")
    finally:
        conn.close()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the most recently updated sessions")
    parser.add_argument("--tail-evaluations", type=int, help="Show the latest evaluation results")
    parser.add_argument("--session", help="Restrict evaluations to one session id")
    args = parser.parse_args(argv)

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.tail_evaluations:
        tail_evaluations(args.tail_evaluations, session_id=args.session)
    if not args.tail_sessions and not args.tail_evaluations:
        parser.print_help()


if __name__ == "__main__":
    main()
