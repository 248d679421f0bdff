"""LLM routing configuration loaded from JSON."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str = "/v1/chat/completions"
    model: str
    timeout_s: float = Field(default=20.0, ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)
    api_key_env: str | None = None
    response_format: str | None = "json_object"
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False
    enforce_json: bool = True


class AppConfig(BaseModel):
    """Application configuration root: named routes plus target bindings."""

    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str] = Field(default_factory=dict)


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = Path(path).read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, target: str) -> LlmRoute:
    """Return the route bound to ``target`` in the registry section."""

    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]
