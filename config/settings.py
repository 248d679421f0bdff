"""Application settings and configuration management."""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    CATALOG_PATH: Optional[str] = None
    LLM_CONFIG_PATH: Optional[str] = None

    MAX_QUESTIONS: int = Field(default=15, ge=1)
    QUESTION_BUDGET: int = Field(default=15, ge=1)
    RECENT_SCORE_WINDOW: int = Field(default=3, ge=1)
    COVERAGE_MISSING_THRESHOLD: float = Field(default=0.5, ge=0.0, le=1.0)

    RULE_CONFIDENCE_GATE: float = Field(default=0.8, ge=0.0, le=1.0)
    AI_TIMEOUT_SECONDS: float = Field(default=20.0, gt=0.0)
    JUDGE_WORKERS: int = Field(default=4, ge=1)

    MIN_COMPLETION_RATE: float = Field(default=50.0, ge=0.0, le=100.0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
