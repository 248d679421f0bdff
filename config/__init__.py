"""Configuration package for the interview assessment core."""
from .registry import JUDGE_KEY, bind_model, get_model, unbind_model
from .routes import AppConfig, LlmRoute, load_config, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_route",
    "JUDGE_KEY",
    "bind_model",
    "get_model",
    "unbind_model",
    "Settings",
    "settings",
]
