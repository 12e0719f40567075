from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from snooze_tui.api import SnoozeAPI
from snooze_tui.datamodels import Identity, Story
from snooze_tui.session import Session


def story_record(story_id: str, **overrides):
    record = {
        "storyId": story_id,
        "title": f"Story {story_id}",
        "author": "Ada Lovelace",
        "url": f"https://example.com/{story_id}",
        "username": "alice",
        "createdAt": "2024-09-25T12:00:00.000Z",
    }
    record.update(overrides)
    return record


def user_record(favorites=(), stories=(), **overrides):
    record = {
        "username": "alice",
        "name": "Alice",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "favorites": list(favorites),
        "stories": list(stories),
    }
    record.update(overrides)
    return record


@pytest.fixture
def api():
    return MagicMock(spec=SnoozeAPI)


@pytest.fixture
def make_story():
    def _make(story_id: str, **overrides) -> Story:
        return Story.from_record(story_record(story_id, **overrides))

    return _make


@pytest.fixture
def session(api):
    identity = Identity.from_record(user_record())
    return Session(api, identity, "secret-token")
