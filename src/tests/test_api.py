from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from snooze_tui.api import SnoozeAPI
from snooze_tui.errors import (
    AuthenticationError,
    RemoteRejectedError,
    RemoteUnavailableError,
)

from conftest import story_record, user_record


def _response(status_code=200, payload=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def client():
    return SnoozeAPI(base_url="https://api.test/")


def test_session_mounts_retry_adapter(client):
    adapter = client.session.get_adapter("https://api.test/stories")
    assert adapter.max_retries.total == 3
    assert 503 in adapter.max_retries.status_forcelist


def test_get_stories(client):
    payload = {"stories": [story_record("1"), story_record("2")]}
    with patch("requests.Session.request", return_value=_response(payload=payload)) as mock_request:
        stories = client.get_stories(limit=10)
    assert [s["storyId"] for s in stories] == ["1", "2"]
    method, url = mock_request.call_args.args
    assert method == "GET"
    assert url == "https://api.test/stories"
    assert mock_request.call_args.kwargs["params"] == {"skip": 0, "limit": 10}


def test_add_story_sends_token_and_story(client):
    payload = {"story": story_record("new")}
    with patch("requests.Session.request", return_value=_response(201, payload)) as mock_request:
        record = client.add_story("tok", "Title", "Author", "https://example.com")
    assert record["storyId"] == "new"
    assert mock_request.call_args.kwargs["json"] == {
        "token": "tok",
        "story": {"title": "Title", "author": "Author", "url": "https://example.com"},
    }


def test_delete_story_hits_story_url(client):
    with patch("requests.Session.request", return_value=_response(payload={"message": "ok"})) as mock_request:
        client.delete_story("tok", "abc")
    method, url = mock_request.call_args.args
    assert (method, url) == ("DELETE", "https://api.test/stories/abc")
    assert mock_request.call_args.kwargs["json"] == {"token": "tok"}


def test_favorite_urls(client):
    with patch("requests.Session.request", return_value=_response(payload={})) as mock_request:
        client.add_favorite("tok", "alice", "abc")
        client.remove_favorite("tok", "alice", "abc")
    calls = [c.args for c in mock_request.call_args_list]
    assert calls == [
        ("POST", "https://api.test/users/alice/favorites/abc"),
        ("DELETE", "https://api.test/users/alice/favorites/abc"),
    ]


def _no_content():
    resp = requests.Response()
    resp.status_code = 204
    resp._content = b""
    return resp


def test_calls_without_payload_accept_empty_response(client):
    with patch("requests.Session.request", side_effect=lambda *a, **kw: _no_content()):
        assert client.delete_story("tok", "abc") is None
        assert client.add_favorite("tok", "alice", "abc") is None
        assert client.remove_favorite("tok", "alice", "abc") is None


def test_empty_response_is_still_malformed_where_a_payload_is_expected(client):
    with patch("requests.Session.request", return_value=_no_content()):
        with pytest.raises(RemoteUnavailableError):
            client.get_stories()


def test_path_segments_are_quoted(client):
    with patch("requests.Session.request", return_value=_response(payload={"user": user_record()})) as mock_request:
        client.get_user("tok", "a/b?c")
        client.add_favorite("tok", "a/b?c", "../x#y")
        client.delete_story("tok", "../x#y")
    urls = [c.args[1] for c in mock_request.call_args_list]
    assert urls == [
        "https://api.test/users/a%2Fb%3Fc",
        "https://api.test/users/a%2Fb%3Fc/favorites/..%2Fx%23y",
        "https://api.test/stories/..%2Fx%23y",
    ]


def test_login_returns_user_and_token(client):
    payload = {"user": user_record(), "token": "tok"}
    with patch("requests.Session.request", return_value=_response(payload=payload)):
        user, token = client.login("alice", "pw")
    assert user["username"] == "alice"
    assert token == "tok"


def test_rejection_carries_server_message(client):
    payload = {"error": {"status": 403, "title": "Forbidden", "message": "Not your story"}}
    with patch("requests.Session.request", return_value=_response(403, payload, "Forbidden")):
        with pytest.raises(RemoteRejectedError) as excinfo:
            client.delete_story("tok", "abc")
    assert excinfo.value.reason == "Not your story"
    assert excinfo.value.status == 403


def test_rejection_without_json_body_uses_http_reason(client):
    resp = _response(404, ValueError("no json"), "Not Found")
    with patch("requests.Session.request", return_value=resp):
        with pytest.raises(RemoteRejectedError) as excinfo:
            client.delete_story("tok", "abc")
    assert excinfo.value.reason == "Not Found"


def test_login_rejection_is_authentication_error(client):
    payload = {"error": {"status": 401, "message": "Invalid password"}}
    with patch("requests.Session.request", return_value=_response(401, payload)):
        with pytest.raises(AuthenticationError, match="Invalid password"):
            client.login("alice", "wrong")


def test_signup_conflict_is_authentication_error(client):
    payload = {"error": {"status": 409, "message": "Username taken"}}
    with patch("requests.Session.request", return_value=_response(409, payload)):
        with pytest.raises(AuthenticationError):
            client.signup("alice", "pw", "Alice")


def test_server_error_is_unavailable(client):
    with patch("requests.Session.request", return_value=_response(500, {}, "Server Error")):
        with pytest.raises(RemoteUnavailableError):
            client.get_stories()


def test_transport_error_is_unavailable(client):
    with patch("requests.Session.request", side_effect=requests.ConnectionError("boom")):
        with pytest.raises(RemoteUnavailableError):
            client.get_stories()


def test_non_json_success_is_unavailable(client):
    with patch("requests.Session.request", return_value=_response(200, ValueError("bad"))):
        with pytest.raises(RemoteUnavailableError):
            client.get_stories()


def test_unexpected_shape_is_unavailable(client):
    with patch("requests.Session.request", return_value=_response(payload={"items": []})):
        with pytest.raises(RemoteUnavailableError):
            client.get_stories()
