from domain.interaction import GATEWAY_NAME, InteractionLogs


def test_enter_archives_previous_span():
    logs = InteractionLogs()
    first = logs.enter("login")
    first.set_request('{"username":"u"}', "https://stbl.test/login")
    first.set_status(201)
    logs.enter("payment")

    assert len(logs) == 2
    archived = logs.into_inner()
    assert [log.kind for log in archived] == ["login", "payment"]
    assert archived[0].status == 201
    assert archived[0].request.url == "https://stbl.test/login"
    assert archived[0].gateway == GATEWAY_NAME


def test_into_inner_includes_open_span_and_is_idempotent():
    logs = InteractionLogs()
    span = logs.enter("status")
    span.set_response('{"id":"1"}')

    first = logs.into_inner()
    second = logs.into_inner()
    assert len(first) == 1
    assert first == second
    assert first[0].response == '{"id":"1"}'
    assert first[0].duration >= 0


def test_empty_logs():
    logs = InteractionLogs()
    assert logs.into_inner() == []
    assert len(logs) == 0


def test_spans_without_request_serialize_without_it():
    logs = InteractionLogs()
    logs.enter("refresh_token")
    dumped = logs.into_inner()[0].model_dump(mode="json", exclude_none=True)
    assert "request" not in dumped
    assert dumped["kind"] == "refresh_token"
    assert dumped["gateway"] == "stbl"
