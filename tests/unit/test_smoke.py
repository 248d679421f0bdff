import observability.logger as logger_mod


def test_packages_import():
    import ai_judge  # noqa: F401
    import assessment  # noqa: F401
    import catalog  # noqa: F401
    import config  # noqa: F401
    import llm_gateway  # noqa: F401
    import observability  # noqa: F401
    import services.flow  # noqa: F401
    import services.reports  # noqa: F401
    import session_reports  # noqa: F401
    import skills  # noqa: F401
    import storage.sessions  # noqa: F401


def test_log_event_and_span(monkeypatch):
    from observability import log_event, span

    lines = []
    monkeypatch.setattr(logger_mod, "_emit", lambda level, message, *, is_json: lines.append(message))

    log_event("smoke", "s-1", question_id="Q1", score=88.0)
    with span("s-1", "noop"):
        pass

    assert lines[0] == "session=s-1 kind=smoke question_id=Q1 score=88.0"
    assert "kind=span node=noop ms=" in lines[1]
