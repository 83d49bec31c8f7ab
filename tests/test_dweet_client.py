from unittest.mock import Mock

import pytest
import requests

from dweetr.clients.dweet_client import LISTEN_TIMEOUT, DweetClient, DweetClientError


def make_response(status_code=200, body=None):
    resp = Mock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = str(body)
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def dweet_client(session):
    return DweetClient("http://dweetr.test/", session=session)


def test_publish_private_sets_flag(dweet_client, session):
    session.get.return_value = make_response(body={"status": "success", "token": "t"})

    result = dweet_client.publish("room1", private=True, temp="23")

    assert result["token"] == "t"
    session.get.assert_called_once_with(
        "http://dweetr.test/dweet/for/room1",
        params={"temp": "23", "private": "1"},
        timeout=10,
    )


def test_get_latest_unwraps_this(dweet_client, session):
    session.get.return_value = make_response(body={"this": {"id": 3}})

    assert dweet_client.get_latest("room1", auth="tok") == {"id": 3}
    assert session.get.call_args.kwargs["params"] == {"auth": "tok"}


def test_error_response_raises(dweet_client, session):
    session.get.return_value = make_response(400, {"status": "error", "message": "No data provided"})

    with pytest.raises(DweetClientError) as exc_info:
        dweet_client.publish("room1")

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "No data provided"


def test_listen_uses_long_timeout(dweet_client, session):
    session.get.return_value = make_response(body={"this": None, "message": "No new dweets"})

    assert dweet_client.listen("room1", since=7) is None
    assert session.get.call_args.kwargs == {"params": {"since": 7}, "timeout": LISTEN_TIMEOUT}


def test_follow_seeds_cursor_and_advances(dweet_client, session):
    session.get.side_effect = [
        make_response(body={"this": {"id": 10}}),        # latest
        make_response(body={"this": None}),              # listen timeout
        make_response(body={"this": {"id": 11, "content": {"n": "a"}}}),
        make_response(body={"this": {"id": 12, "content": {"n": "b"}}}),
    ]

    follower = dweet_client.follow("room1")
    got = [next(follower), next(follower)]

    assert [d["id"] for d in got] == [11, 12]
    since_values = [c.kwargs["params"].get("since") for c in session.get.call_args_list[1:]]
    assert since_values == [10, 10, 11]


def test_follow_retries_after_network_error(dweet_client, session, monkeypatch):
    monkeypatch.setattr("dweetr.clients.dweet_client.time.sleep", lambda s: None)
    session.get.side_effect = [
        requests.ConnectionError("down"),
        make_response(body={"this": {"id": 1}}),
    ]

    assert next(dweet_client.follow("room1", since=0))["id"] == 1
