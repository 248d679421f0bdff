import json
from types import SimpleNamespace

import httpx
import pytest

from ai_judge import bind_llm_judge, build_prompt, make_llm_judge
from assessment.types import JudgeVerdict
from config.registry import JUDGE_KEY, get_model
from config.routes import LlmRoute
from llm_gateway import LlmGatewayError, chat
from services.evaluator import evaluate


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload)

    def json(self):
        return self._payload


class FakeClient:
    """Returns queued responses and records posted payloads."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.posts = []

    def post(self, url, *, json, headers, timeout):
        self.posts.append(SimpleNamespace(url=url, json=json, headers=headers, timeout=timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _reply(content):
    return FakeResponse(payload={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def route():
    return LlmRoute(name="judge", base_url="http://llm.local", model="excel-judge", timeout_s=5.0, max_retries=1)


def test_prompt_includes_rubric_and_context(sum_question):
    prompt = build_prompt(
        sum_question,
        "=A1+A2",
        {"role_level": "basic", "rubric": "Max Score: 100", "skill_scores": {"basic_formulas": 70.0}},
    )
    assert "Question: Question SUM-1" in prompt
    assert "- =SUM(A1:A10)" in prompt
    assert "Max Score: 100" in prompt
    assert "Level: basic" in prompt
    assert '"=A1+A2"' in prompt


def test_judge_parses_verdict(route, sum_question):
    verdict = {"score": 72, "confidence": 0.8, "reasoning": "close", "partialCredits": [], "suggestedFollowUp": "Why?"}
    client = FakeClient(_reply(json.dumps(verdict)))
    judge = make_llm_judge(route, client=client)

    result = judge(question=sum_question, answer_text="=A1+A2", context={}, timeout_s=2.0)

    assert isinstance(result, JudgeVerdict)
    assert result.score == 72
    assert result.suggested_follow_up == "Why?"
    sent = client.posts[0]
    assert sent.url == "http://llm.local/v1/chat/completions"
    assert sent.json["model"] == "excel-judge"
    assert sent.timeout == 2.0


def test_gateway_retries_invalid_json(route):
    client = FakeClient(_reply("not json"), _reply("```json\n{\"score\": 10, \"confidence\": 0.4}\n```"))

    verdict = chat([{"role": "user", "content": "hi"}], JudgeVerdict, cfg=route, client=client)

    assert verdict.score == 10
    assert len(client.posts) == 2
    assert "failed validation" in client.posts[1].json["messages"][-1]["content"]


def test_gateway_retries_null_score(route):
    client = FakeClient(_reply('{"score": null, "confidence": 0.5}'), _reply('{"score": 55, "confidence": 0.6}'))

    verdict = chat([{"role": "user", "content": "hi"}], JudgeVerdict, cfg=route, client=client)

    assert verdict.score == 55
    assert len(client.posts) == 2


def test_gateway_gives_up_after_retries(route):
    client = FakeClient(_reply("nope"), _reply("still nope"))
    with pytest.raises(LlmGatewayError) as excinfo:
        chat([{"role": "user", "content": "hi"}], JudgeVerdict, cfg=route, client=client)
    assert excinfo.value.retryable is True


@pytest.mark.parametrize(
    "response, retryable",
    [
        (FakeResponse(status_code=503, payload={}), True),
        (FakeResponse(status_code=429, payload={}), True),
        (FakeResponse(status_code=400, payload={}), False),
        (httpx.ConnectError("refused"), True),
        (httpx.ReadTimeout("slow"), True),
    ],
)
def test_gateway_error_classification(route, response, retryable):
    client = FakeClient(response)
    with pytest.raises(LlmGatewayError) as excinfo:
        chat([{"role": "user", "content": "hi"}], JudgeVerdict, cfg=route, client=client)
    assert excinfo.value.retryable is retryable


def test_bound_llm_judge_drives_evaluator(tmp_path, sum_question):
    config = {
        "llm_routes": {"judge": {"name": "judge", "base_url": "http://llm.local", "model": "m"}},
        "registry": {"answer_judge": "judge"},
    }
    path = tmp_path / "llm.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    client = FakeClient(_reply(json.dumps({"score": 64, "confidence": 0.75, "reasoning": "partial"})))

    route = bind_llm_judge(path, client=client)

    assert route.model == "m"
    assert callable(get_model(JUDGE_KEY))
    result = evaluate(sum_question, "I would use the autosum button")
    assert result.source == "ai"
    assert result.score == 64


def test_fatal_gateway_error_surfaces_as_judge_failure(route, sum_question):
    from assessment.errors import JudgeFailure
    from config.registry import bind_model

    bind_model(JUDGE_KEY, make_llm_judge(route, client=FakeClient(FakeResponse(status_code=401, payload={}))))
    with pytest.raises(JudgeFailure) as excinfo:
        evaluate(sum_question, "something else")
    assert excinfo.value.retryable is False


def test_bind_requires_config_path(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "LLM_CONFIG_PATH", None)
    with pytest.raises(ValueError):
        bind_llm_judge()
