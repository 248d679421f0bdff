import threading
import time

import pytest

from assessment.errors import (
    ConcurrentModificationError,
    EvaluationTimeout,
    ExhaustionError,
    InvalidTransition,
    JudgeFailure,
)
from assessment.types import EvaluationResult
from config.registry import JUDGE_KEY, bind_model
from services.sessions import InterviewStateMachine
from storage.sessions import SqliteSessionStore

from conftest import make_question


@pytest.fixture
def machine(small_catalog, rng):
    return InterviewStateMachine(small_catalog, rng=rng)


def test_start_creates_active_session(machine):
    session = machine.start("cand-1", "intermediate")

    assert session.status == "active"
    assert session.current_question_index == 0
    assert machine.get(session.session_id) is session


def test_second_open_session_rejected(machine):
    first = machine.start("cand-1", "basic")
    with pytest.raises(InvalidTransition) as excinfo:
        machine.start("cand-1", "basic")
    assert first.session_id in str(excinfo.value)

    machine.complete(first)
    assert machine.start("cand-1", "basic").status == "active"


def test_deliver_and_submit_advance_index(machine, fake_judge):
    session = machine.start("cand-1", "intermediate")

    question = machine.deliver_next_question(session)
    assert session.current_question_index == 0
    assert session.pending_question() == question

    result = machine.submit_response(session, "an answer")

    assert result.question_id == question.question_id
    assert session.current_question_index == 1
    assert session.pending_question() is None
    assert [turn.kind for turn in session.conversation_history] == ["question", "response"]
    assert session.skill_scores.get(question.category) == result.score


def test_redelivery_returns_pending_question(machine):
    session = machine.start("cand-1", "intermediate")
    first = machine.deliver_next_question(session)
    again = machine.deliver_next_question(session)

    assert again == first
    assert len(session.conversation_history) == 1


def test_submit_without_question_rejected(machine):
    session = machine.start("cand-1", "intermediate")
    with pytest.raises(InvalidTransition):
        machine.submit_response(session, "anything")


def test_paused_session_rejects_submit_and_pause(machine):
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)
    machine.pause(session)

    with pytest.raises(InvalidTransition):
        machine.submit_response(session, "answer")
    with pytest.raises(InvalidTransition):
        machine.pause(session)
    with pytest.raises(InvalidTransition):
        machine.deliver_next_question(session)


def test_pause_resume_preserves_progress(machine, fake_judge):
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)
    machine.submit_response(session, "answer")
    pending = machine.deliver_next_question(session)
    history_before = list(session.conversation_history)
    index_before = session.current_question_index

    machine.pause(session)
    machine.resume(session)
    machine.pause(session)
    machine.resume(session)

    assert session.status == "active"
    assert session.current_question_index == index_before
    assert session.conversation_history == history_before
    assert session.pending_question() == pending
    assert "paused_at" in session.metadata and "resumed_at" in session.metadata


def test_resume_requires_paused(machine):
    session = machine.start("cand-1", "intermediate")
    with pytest.raises(InvalidTransition):
        machine.resume(session)


def test_completed_session_is_terminal(machine):
    session = machine.start("cand-1", "intermediate")
    machine.complete(session, reason="max_questions")

    assert session.status == "completed"
    assert session.ended_at is not None
    assert session.metadata["completion_reason"] == "max_questions"
    for call in (machine.pause, machine.resume, machine.complete, machine.deliver_next_question):
        with pytest.raises(InvalidTransition):
            call(session)


def test_paused_session_can_complete(machine):
    session = machine.start("cand-1", "intermediate")
    machine.pause(session)
    assert machine.complete(session).status == "completed"


def test_failed_evaluation_leaves_session_unchanged(small_catalog, rng):
    attempts = []

    def flaky(question, text, context, *, timeout_s=None):
        attempts.append(text)
        if len(attempts) == 1:
            raise EvaluationTimeout(question.question_id, 0.01)
        return EvaluationResult(question_id=question.question_id, category=question.category, score=75, confidence=0.9)

    machine = InterviewStateMachine(small_catalog, rng=rng, evaluator=flaky)
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)

    with pytest.raises(EvaluationTimeout):
        machine.submit_response(session, "answer")
    assert session.current_question_index == 0
    assert len(session.conversation_history) == 1
    assert session.evaluations == []

    result = machine.submit_response(session, "answer")
    assert result.score == 75
    assert session.current_question_index == 1
    assert len(session.evaluations) == 1


def test_malformed_judge_output_leaves_session_unchanged(machine):
    bind_model(JUDGE_KEY, lambda **_: {"verdict": "looks fine"})
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)

    with pytest.raises(JudgeFailure) as excinfo:
        machine.submit_response(session, "answer")
    assert excinfo.value.retryable is True
    assert session.current_question_index == 0
    assert session.evaluations == []
    assert len(session.conversation_history) == 1



def test_concurrent_submit_rejected(small_catalog, rng):
    entered = threading.Event()
    release = threading.Event()

    def blocking(question, text, context, *, timeout_s=None):
        entered.set()
        release.wait(timeout=5)
        return EvaluationResult(question_id=question.question_id, category=question.category, score=60, confidence=0.9)

    machine = InterviewStateMachine(small_catalog, rng=rng, evaluator=blocking)
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)

    worker = threading.Thread(target=machine.submit_response, args=(session, "first"))
    worker.start()
    try:
        assert entered.wait(timeout=5)
        with pytest.raises(ConcurrentModificationError):
            machine.submit_response(session, "second")
    finally:
        release.set()
        worker.join(timeout=5)

    assert len(session.evaluations) == 1
    assert session.current_question_index == 1


def test_exhaustion_propagates(fake_judge, rng):
    from catalog.repository import InMemoryCatalog

    machine = InterviewStateMachine(InMemoryCatalog([make_question("ONLY")]), rng=rng)
    session = machine.start("cand-1", "basic")
    machine.deliver_next_question(session)
    machine.submit_response(session, "answer")

    with pytest.raises(ExhaustionError):
        machine.deliver_next_question(session)


def test_follow_up_delivery(fake_judge, sum_question, rng):
    from catalog.repository import InMemoryCatalog

    machine = InterviewStateMachine(InMemoryCatalog([sum_question]), rng=rng)
    session = machine.start("cand-1", "basic")
    machine.deliver_next_question(session)
    machine.submit_response(session, "add them")

    follow_up = machine.deliver_follow_up(session)

    assert follow_up is not None
    assert follow_up.text == "Why 'add them'?"
    assert session.pending_question() == follow_up
    assert session.conversation_history[-1].metadata["follow_up_of"] == "SUM-1"


def test_store_round_trip(small_catalog, rng, fake_judge, tmp_db):
    store = SqliteSessionStore(tmp_db)
    machine = InterviewStateMachine(small_catalog, store=store, rng=rng)
    session = machine.start("cand-1", "intermediate")
    machine.deliver_next_question(session)
    result = machine.submit_response(session, "answer")
    machine.pause(session)

    loaded = store.load_session(session.session_id)
    assert loaded.status == "paused"
    assert loaded.current_question_index == 1
    assert [ev.evaluation_id for ev in store.list_evaluations(session.session_id)] == [result.evaluation_id]

    fresh = InterviewStateMachine(small_catalog, store=store, rng=rng)
    restored = fresh.get(session.session_id)
    assert restored.conversation_history == session.conversation_history
    with pytest.raises(InvalidTransition):
        fresh.start("cand-1", "intermediate")


class SlowStore(SqliteSessionStore):
    """Stalls loads so two lookups overlap."""

    def load_session(self, session_id):
        time.sleep(0.05)
        return super().load_session(session_id)


def test_concurrent_get_shares_one_session(small_catalog, rng, tmp_db):
    store = SqliteSessionStore(tmp_db)
    session = InterviewStateMachine(small_catalog, store=store, rng=rng).start("cand-1", "basic")

    fresh = InterviewStateMachine(small_catalog, store=SlowStore(tmp_db), rng=rng)
    barrier = threading.Barrier(2)
    found = []

    def lookup():
        barrier.wait(timeout=5)
        found.append(fresh.get(session.session_id))

    workers = [threading.Thread(target=lookup) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=5)

    assert len(found) == 2
    assert found[0] is found[1]
    assert fresh.get(session.session_id) is found[0]
