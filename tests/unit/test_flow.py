from catalog.repository import InMemoryCatalog
from services.flow import next_step
from services.reports import generate
from services.sessions import InterviewStateMachine

from conftest import make_question


def test_next_step_completes_at_question_limit(small_catalog, rng, fake_judge):
    machine = InterviewStateMachine(small_catalog, rng=rng)
    session = machine.start("c1", "intermediate")

    step = next_step(machine, session, max_questions=1)
    assert step.action == "continue"
    machine.submit_response(session, "answer")

    step = next_step(machine, session, max_questions=1)
    assert step.action == "complete"
    assert session.status == "completed"
    assert session.metadata["completion_reason"] == "max_questions"


def test_next_step_completes_when_catalog_runs_dry(rng, fake_judge):
    machine = InterviewStateMachine(InMemoryCatalog([make_question("ONLY")]), rng=rng)
    session = machine.start("c1", "basic")

    assert next_step(machine, session).question.question_id == "ONLY"
    machine.submit_response(session, "answer")

    step = next_step(machine, session)
    assert step.action == "complete"
    assert session.metadata["completion_reason"] == "exhausted"


def test_report_uses_the_limit_the_session_ran_under(small_catalog, rng, fake_judge):
    machine = InterviewStateMachine(small_catalog, rng=rng)
    session = machine.start("c1", "intermediate")

    while next_step(machine, session, max_questions=3).action == "continue":
        machine.submit_response(session, "answer")

    assert session.metadata["completion_reason"] == "max_questions"
    assert session.metadata["planned_questions"] == 3
    report = generate(session)
    assert report.completion_rate == 100.0
    assert report.hiring_recommendation != "insufficient_data"
