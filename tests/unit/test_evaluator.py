import time

import pytest

import services.evaluator as evaluator
from assessment.errors import EvaluationTimeout, JudgeFailure
from assessment.types import EvaluationContext
from config.registry import JUDGE_KEY, bind_model
from skills.taxonomy import RoleLevel


class TransientError(RuntimeError):
    retryable = True


def test_exact_match_skips_ai(sum_question, fake_judge):
    result = evaluator.evaluate(sum_question, "=SUM(A1:A10)")

    assert result.score >= 95
    assert result.confidence > 0.8
    assert result.source == "rule"
    assert fake_judge.calls == []


def test_best_matching_pattern_wins(sum_question, fake_judge):
    # "=sum(a1:a10)" contains both patterns
    result = evaluator.evaluate(sum_question, "  =sum(a1:a10)  ")
    assert result.score == 100.0

    partial = evaluator.evaluate(sum_question, "I would type SUM(A1:A10) somewhere")
    assert partial.score == 80.0
    assert fake_judge.calls == []


def test_ambiguous_answer_calls_ai_once(sum_question, fake_judge):
    context = EvaluationContext(session_id="s1", role_level=RoleLevel.ADVANCED)

    result = evaluator.evaluate(sum_question, "I would add them up by hand", context)

    assert len(fake_judge.calls) == 1
    call = fake_judge.calls[0]
    assert call["context"]["role_level"] == "advanced"
    assert "Max Score: 100" in call["context"]["rubric"]
    assert result.source == "ai"
    assert result.score == 40.0
    assert result.confidence == 0.6


@pytest.mark.parametrize("answer", ["", "   ", "\n\t"])
def test_empty_answer_is_policy_zero(sum_question, fake_judge, answer):
    result = evaluator.evaluate(sum_question, answer)

    assert result.score == 0.0
    assert result.confidence == 1.0
    assert result.source == "policy"
    assert fake_judge.calls == []


def test_partial_credit_rule_is_merged_with_ai(sum_question, fake_judge):
    rule = evaluator.rule_tier(sum_question, "It mentions SUM function somewhere")
    assert rule is not None
    assert rule.score == 50.0
    assert rule.confidence == 0.7

    result = evaluator.evaluate(sum_question, "It mentions SUM function somewhere")

    assert len(fake_judge.calls) == 1
    assert result.score == 40.0
    assert result.confidence == 0.7
    criteria = [credit.criterion for credit in result.partial_credits]
    assert criteria == ["Concept", "Partial Credit"]


def test_rule_tier_without_mistakes_or_rules(fake_judge):
    from conftest import make_question

    question = make_question("BARE", patterns=[("=AVERAGE(B:B)", 100.0)])
    assert evaluator.rule_tier(question, "no idea") is None
    assert evaluator.evaluate(question, "=average(b:b)").source == "rule"


def test_follow_up_suggested_from_trigger(sum_question):
    bind_model(JUDGE_KEY, lambda **_: {"score": 30, "confidence": 0.5, "reasoning": "weak"})

    result = evaluator.evaluate(sum_question, "plus signs")

    assert result.suggested_follow_up == "Why 'plus signs'?"


def test_judge_timeout(sum_question):
    def slow(**_):
        time.sleep(0.5)
        return {"score": 90, "confidence": 0.9}

    bind_model(JUDGE_KEY, slow)
    with pytest.raises(EvaluationTimeout) as excinfo:
        evaluator.evaluate(sum_question, "something else", timeout_s=0.05)
    assert excinfo.value.retryable is True


def test_judge_failure_keeps_retryable_flag(sum_question):
    def broken(**_):
        raise TransientError("upstream 503")

    bind_model(JUDGE_KEY, broken)
    with pytest.raises(JudgeFailure) as excinfo:
        evaluator.evaluate(sum_question, "something else")
    assert excinfo.value.retryable is True

    def fatal(**_):
        raise ValueError("bad request")

    bind_model(JUDGE_KEY, fatal)
    with pytest.raises(JudgeFailure) as excinfo:
        evaluator.evaluate(sum_question, "something else")
    assert excinfo.value.retryable is False


def test_unbound_judge_is_a_failure(sum_question, no_judge):
    with pytest.raises(JudgeFailure):
        evaluator.evaluate(sum_question, "something else")


def test_malformed_verdict_is_a_retryable_failure(sum_question, monkeypatch):
    events = []
    monkeypatch.setattr(evaluator, "log_event", lambda kind, session_id, **fields: events.append((kind, fields)))
    bind_model(JUDGE_KEY, lambda **_: {"verdict": "looks fine"})

    with pytest.raises(JudgeFailure) as excinfo:
        evaluator.evaluate(sum_question, "something else")

    assert excinfo.value.retryable is True
    assert any(kind == "judge_schema_invalid" for kind, _ in events)


@pytest.mark.parametrize("verdict", [{"score": None, "confidence": 0.5}, {"score": 80, "confidence": None}])
def test_null_verdict_fields_are_a_retryable_failure(sum_question, verdict):
    bind_model(JUDGE_KEY, lambda **_: dict(verdict, rationale="missing number"))

    with pytest.raises(JudgeFailure) as excinfo:
        evaluator.evaluate(sum_question, "something else")

    assert excinfo.value.retryable is True


def test_judge_scores_are_clamped(sum_question):
    bind_model(JUDGE_KEY, lambda **_: {"score": 140, "confidence": 3, "rationale": "generous"})

    result = evaluator.evaluate(sum_question, "something else")

    assert result.score == 100.0
    assert result.confidence == 1.0
