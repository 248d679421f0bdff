from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
import threading
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config.routes import LlmRoute

logger = logging.getLogger(__name__)  # Module logger setup


_MODEL_LOCKS: Dict[str, threading.Lock] = {}
_MODEL_LOCKS_GUARD = threading.Lock()

RETRYABLE_STATUS = {408, 409, 429}


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Gateway error carrying a transient/fatal flag
    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _MODEL_LOCKS_GUARD:
        lock = _MODEL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _MODEL_LOCKS[key] = lock
    return lock


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    timeout_s: Optional[float] = None,
) -> T:
    """Send ``messages`` on ``cfg`` and validate the reply against ``schema``.

    Validation failures are retried up to ``cfg.max_retries`` times with a
    corrective system hint; transport and HTTP failures are raised at once.
    """

    timeout = min(cfg.timeout_s, timeout_s) if timeout_s else cfg.timeout_s

    def _execute() -> T:
        base_messages: list[Dict[str, str]] = []
        if cfg.enforce_json:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            system_prompt = "Reply with a single JSON object matching this schema:\n" + schema_json
            base_messages.append({"role": "system", "content": system_prompt})
        base_messages.extend(_normalize_messages(messages))
        attempts = cfg.max_retries + 1
        last_error: Optional[Exception] = None
        last_error_text: Optional[str] = None
        logger.info("LLM request start route=%s model=%s attempts=%d", cfg.name, cfg.model, attempts)
        for attempt in range(attempts):
            attempt_messages = list(base_messages)
            if attempt > 0:
                attempt_messages.append({"role": "system", "content": _retry_hint(last_error_text, cfg.enforce_json)})
            payload: Dict[str, Any] = {
                "model": cfg.model,
                "messages": attempt_messages,
                "temperature": cfg.temperature,
                "max_tokens": cfg.max_tokens,
            }
            if cfg.response_format:
                payload["response_format"] = {"type": cfg.response_format}
            data = _post(f"{cfg.base_url}{cfg.endpoint}", payload, _headers(cfg), timeout, client)
            content = _extract_content(data)
            try:
                parsed = _validate(schema, content)
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("LLM output validation failed route=%s attempt=%d: %s", cfg.name, attempt + 1, exc)
                last_error = exc
                last_error_text = str(exc)
                continue
            logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
            return parsed
        raise LlmGatewayError("LLM output validation failed", retryable=True) from last_error

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    client: Optional[HttpClient],
) -> Any:  # Dispatch HTTP request and decode JSON body
    try:
        if client is not None:
            response = client.post(url, json=payload, headers=headers, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as http_client:
                response = http_client.post(url, json=payload, headers=headers)
    except httpx.TimeoutException as exc:
        logger.error("LLM request timed out after %.1fs", timeout)
        raise LlmGatewayError("LLM request timed out", retryable=True) from exc
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure: %s", exc)
        raise LlmGatewayError("LLM transport failed", retryable=True) from exc

    status = response.status_code
    if status >= 400:
        logger.error("LLM error status: %s", status)
        raise LlmGatewayError(
            f"LLM returned status {status}",
            retryable=status >= 500 or status in RETRYABLE_STATUS,
        )
    try:
        return response.json()
    except ValueError as exc:
        logger.error("Invalid JSON payload from LLM: %s", exc)
        raise LlmGatewayError("LLM payload was not JSON", retryable=True) from exc


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _extract_content(data: Any) -> str:  # Extract message content from an OpenAI-style reply
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content", retryable=True)


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(_strip_code_fences(content))


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    while lines and not lines[-1].strip():
        lines.pop()
    if lines and lines[-1].strip() == "```":
        lines.pop()
    return "\n".join(lines).strip()


def _retry_hint(error_text: Optional[str], enforce_json: bool) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    if enforce_json:
        return base + " Return a single JSON object that matches the schema."
    return base + " Follow the requested format precisely."
