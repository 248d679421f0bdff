"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  session_id TEXT PRIMARY KEY,
  candidate_id TEXT NOT NULL,
  role_level TEXT NOT NULL,
  status TEXT NOT NULL,
  current_question_index INTEGER NOT NULL,
  overall_score REAL NOT NULL,
  started_at TEXT NOT NULL,
  ended_at TEXT,
  updated_at TEXT NOT NULL,
  payload_json TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_sessions_candidate_status
  ON interview_sessions (candidate_id, status);
""",
    """
CREATE TABLE IF NOT EXISTS evaluation_results (
  evaluation_id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL,
  question_id TEXT NOT NULL,
  category TEXT NOT NULL,
  score REAL NOT NULL,
  confidence REAL NOT NULL,
  source TEXT NOT NULL,
  created_at TEXT NOT NULL,
  payload_json TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_evaluations_session
  ON evaluation_results (session_id, created_at);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
