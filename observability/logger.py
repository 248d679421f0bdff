"""Structured logging utilities for the assessment pipeline."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/assessment.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger = logging.getLogger("assessment")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False

# Fields surfaced on the human-readable line, in display order.
_HUMAN_KEYS = (
    "transition",
    "status",
    "question_id",
    "category",
    "difficulty",
    "score",
    "confidence",
    "source",
    "reason",
    "node",
    "ms",
)


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    human_console = logging.StreamHandler(stream=sys.stdout)
    human_console.setLevel(LOG_LEVEL)
    human_console.setFormatter(logging.Formatter(HUMAN_FORMAT, datefmt=DATE_FORMAT))
    human_console.addFilter(lambda record: getattr(record, "is_json", False) is not True)
    _logger.addHandler(human_console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # JSON lines
    json_file = logging.handlers.RotatingFileHandler(
        LOG_FILE,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
    )
    json_file.setLevel(LOG_LEVEL)
    json_file.setFormatter(logging.Formatter("%(message)s"))
    json_file.addFilter(lambda record: getattr(record, "is_json", False) is True)
    _logger.addHandler(json_file)

    root, ext = os.path.splitext(LOG_FILE)
    human_file = logging.handlers.RotatingFileHandler(
        f"{root}-human{ext or '.log'}",
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
    )
    human_file.setLevel(LOG_LEVEL)
    human_file.setFormatter(logging.Formatter(HUMAN_FORMAT, datefmt=DATE_FORMAT))
    human_file.addFilter(lambda record: getattr(record, "is_json", False) is not True)
    _logger.addHandler(human_file)


def _format_human(evt: dict[str, Any]) -> str:
    base = f"session={evt.get('session_id')} kind={evt.get('kind')}"
    extras = [f"{key}={evt[key]}" for key in _HUMAN_KEYS if key in evt]
    return base + (" " + " ".join(extras) if extras else "")


def _emit(level: int, message: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(
        name=_logger.name,
        level=level,
        fn="",
        lno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a human line to console and JSON/human lines to the log files."""

    _ensure_handlers()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "session_id": session_id,
    }
    payload.update(fields)

    _emit(level, _format_human(payload), is_json=False)

    if not ENABLE_FILE_LOGS:
        return

    _emit(level, json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["log_event"]
