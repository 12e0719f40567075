from __future__ import annotations

from unittest.mock import patch

import pytest
import requests

from snooze_tui.api import SnoozeAPI
from snooze_tui.datamodels import Identity
from snooze_tui.errors import (
    InvalidArgumentError,
    InvalidStoryDataError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from snooze_tui.feed import StoryFeed
from snooze_tui.session import Session

from conftest import story_record


def test_load_builds_stories(api):
    api.get_stories.return_value = [story_record("1"), story_record("2")]
    feed = StoryFeed.load(api, limit=25)
    assert [s.id for s in feed.stories] == ["1", "2"]
    api.get_stories.assert_called_once_with(limit=25)


def test_load_with_malformed_record_returns_nothing(api):
    api.get_stories.return_value = [story_record("1"), story_record("2", url="nope")]
    with pytest.raises(RemoteUnavailableError):
        StoryFeed.load(api)


def test_load_propagates_transport_failure(api):
    api.get_stories.side_effect = RemoteUnavailableError("down")
    with pytest.raises(RemoteUnavailableError):
        StoryFeed.load(api)


def test_find(api, make_story):
    feed = StoryFeed(api, [make_story("1"), make_story("2")])
    assert feed.find("2").id == "2"
    assert feed.find("3") is None


def test_create_prepends_to_feed_and_authored(api, session, make_story):
    feed = StoryFeed(api, [make_story("1")])
    api.add_story.return_value = story_record("new", title="Fresh")

    story = feed.create(session, "Fresh", "Ada", "https://example.com/new")

    assert story.id == "new"
    assert feed.stories[0] == story
    assert [s.id for s in feed.stories].count("new") == 1
    assert session.authored_stories[0] == story
    assert [s.id for s in session.authored_stories].count("new") == 1
    api.add_story.assert_called_once_with(
        "secret-token", "Fresh", "Ada", "https://example.com/new"
    )


def test_create_with_empty_title_never_calls_api(api, session):
    feed = StoryFeed(api)
    with pytest.raises(InvalidStoryDataError):
        feed.create(session, "", "Ada", "https://example.com")
    assert api.add_story.call_count == 0


def test_create_with_bad_url_never_calls_api(api, session):
    feed = StoryFeed(api)
    with pytest.raises(InvalidStoryDataError):
        feed.create(session, "Title", "Ada", "example dot com")
    assert api.add_story.call_count == 0


def test_create_failure_leaves_lists_untouched(api, session, make_story):
    feed = StoryFeed(api, [make_story("1")])
    before_feed, before_authored = feed.stories, session.authored_stories
    api.add_story.side_effect = RemoteRejectedError("Invalid token", 401)

    with pytest.raises(RemoteRejectedError):
        feed.create(session, "Title", "Ada", "https://example.com")

    assert feed.stories == before_feed
    assert session.authored_stories == before_authored


def test_create_with_malformed_response(api, session):
    feed = StoryFeed(api)
    api.add_story.return_value = {"title": "no id"}
    with pytest.raises(RemoteUnavailableError):
        feed.create(session, "Title", "Ada", "https://example.com")
    assert feed.stories == ()
    assert session.authored_stories == ()


def test_remove_clears_every_collection(api, make_story):
    a, b = make_story("1"), make_story("2")
    identity = Identity.from_record({"username": "alice", "createdAt": "2024-01-01T00:00:00Z"})
    session = Session(api, identity, "tok", authored_stories=[b], favorite_stories=[b])
    feed = StoryFeed(api, [a, b])

    feed.remove(session, "2")

    assert feed.stories == (a,)
    assert session.authored_stories == ()
    assert session.favorite_stories == ()
    api.delete_story.assert_called_once_with("tok", "2")


def test_remove_accepts_empty_server_reply(make_story):
    api = SnoozeAPI(base_url="https://api.test")
    a, b = make_story("1"), make_story("2")
    identity = Identity.from_record({"username": "alice", "createdAt": "2024-01-01T00:00:00Z"})
    session = Session(api, identity, "tok", authored_stories=[b], favorite_stories=[b])
    feed = StoryFeed(api, [a, b])
    reply = requests.Response()
    reply.status_code = 204
    reply._content = b""

    with patch("requests.Session.request", return_value=reply) as mock_request:
        feed.remove(session, "2")

    assert mock_request.call_args.args == ("DELETE", "https://api.test/stories/2")
    assert feed.stories == (a,)
    assert session.authored_stories == ()
    assert session.favorite_stories == ()


def test_remove_favorited_story_scenario(api, session, make_story):
    a, b = make_story("1"), make_story("2")
    feed = StoryFeed(api, [a, b])
    session.add_favorite(b)

    feed.remove(session, "2")

    assert feed.stories == (a,)
    assert session.favorite_stories == ()


def test_remove_failure_leaves_everything(api, make_story):
    b = make_story("2")
    identity = Identity.from_record({"username": "alice", "createdAt": "2024-01-01T00:00:00Z"})
    session = Session(api, identity, "tok", authored_stories=[b], favorite_stories=[b])
    feed = StoryFeed(api, [b])
    api.delete_story.side_effect = RemoteRejectedError("not owner", 403)

    with pytest.raises(RemoteRejectedError):
        feed.remove(session, "2")

    assert feed.stories == (b,)
    assert session.authored_stories == (b,)
    assert session.favorite_stories == (b,)


def test_remove_unknown_id_is_local_noop(api, session, make_story):
    feed = StoryFeed(api, [make_story("1")])
    feed.remove(session, "999")
    assert [s.id for s in feed.stories] == ["1"]


def test_remove_rejects_empty_id(api, session):
    feed = StoryFeed(api)
    with pytest.raises(InvalidArgumentError):
        feed.remove(session, "")
    assert api.delete_story.call_count == 0


def test_snapshot_is_stable_across_mutation(api, session, make_story):
    feed = StoryFeed(api, [make_story("1"), make_story("2")])
    snapshot = feed.stories
    feed.remove(session, "1")
    assert [s.id for s in snapshot] == ["1", "2"]
    assert [s.id for s in feed.stories] == ["2"]
