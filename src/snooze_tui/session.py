from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Mapping, Optional, Tuple

from .api import SnoozeAPI
from .datamodels import Identity, Story
from .errors import (
    AlreadyFavoritedError,
    InvalidArgumentError,
    InvalidStoryDataError,
    NotFavoritedError,
    RemoteUnavailableError,
    SnoozeError,
)
from .transaction import rollback_on_failure

logger = logging.getLogger("snooze")


class Session:
    """
    The logged-in user together with the stories they wrote and the stories
    they starred.

    ``authored_stories`` and ``favorite_stories`` are tuples. Every mutation
    replaces the tuple instead of editing it, so a reference taken for a
    render pass never changes underneath the renderer.
    """

    def __init__(
        self,
        api: SnoozeAPI,
        identity: Identity,
        token: str,
        authored_stories: Iterable[Story] = (),
        favorite_stories: Iterable[Story] = (),
    ):
        self.api = api
        self.identity = identity
        self._token = token
        self._authored: Tuple[Story, ...] = tuple(authored_stories)
        self._favorites: Tuple[Story, ...] = _dedupe(favorite_stories)
        # one mutation in flight per session/feed pair; reentrant for toggle_favorite
        self.mutation_lock = threading.RLock()

    def __repr__(self) -> str:
        return (
            f"Session(username={self.username!r}, authored={len(self._authored)}, "
            f"favorites={len(self._favorites)})"
        )

    @property
    def username(self) -> str:
        return self.identity.username

    @property
    def display_name(self) -> str:
        return self.identity.display_name

    @property
    def token(self) -> str:
        return self._token

    @property
    def authored_stories(self) -> Tuple[Story, ...]:
        return self._authored

    @property
    def favorite_stories(self) -> Tuple[Story, ...]:
        return self._favorites

    # --- construction ---
    @classmethod
    def from_user_record(cls, api: SnoozeAPI, user: Mapping[str, Any], token: str) -> "Session":
        """Build a session from an API user record, rejecting anything malformed."""
        try:
            identity = Identity.from_record(user)
            favorites = [Story.from_record(s) for s in _story_list(user, "favorites")]
            authored = [Story.from_record(s) for s in _story_list(user, "stories")]
        except InvalidStoryDataError as e:
            raise RemoteUnavailableError(f"Malformed user record: {e}") from e
        return cls(api, identity, token, authored, favorites)

    @classmethod
    def sign_up(
        cls, api: SnoozeAPI, username: str, password: str, display_name: str
    ) -> "Session":
        user, token = api.signup(username, password, display_name)
        session = cls.from_user_record(api, user, token)
        logger.info("Signed up as %s", session.username)
        return session

    @classmethod
    def log_in(cls, api: SnoozeAPI, username: str, password: str) -> "Session":
        user, token = api.login(username, password)
        session = cls.from_user_record(api, user, token)
        logger.info("Logged in as %s", session.username)
        return session

    @classmethod
    def restore(cls, api: SnoozeAPI, token: str, username: str) -> "Session":
        """Rebuild a session from a stored token, raising on any failure."""
        user = api.get_user(token, username)
        session = cls.from_user_record(api, user, token)
        logger.info("Resumed session for %s", session.username)
        return session

    @classmethod
    def resume(cls, api: SnoozeAPI, token: str, username: str) -> Optional["Session"]:
        """
        Like restore(), but a stale token, a network error or a bad payload
        all mean "not logged in" and return None.
        """
        try:
            return cls.restore(api, token, username)
        except SnoozeError as e:
            logger.error("Resuming session for %s failed: %s", username, e)
            return None

    # --- favorites ---
    def is_favorite(self, story: Story) -> bool:
        return any(s.id == story.id for s in self._favorites)

    def add_favorite(self, story: Story) -> None:
        _check_story(story)
        with self.mutation_lock:
            if self.is_favorite(story):
                raise AlreadyFavoritedError(f"Story {story.id} is already a favorite")
            logger.debug("Adding favorite %s", story.id)
            with rollback_on_failure(self, "_favorites"):
                self._favorites = self._favorites + (story,)
                self.api.add_favorite(self._token, self.username, story.id)

    def remove_favorite(self, story: Story) -> None:
        _check_story(story)
        with self.mutation_lock:
            if not self.is_favorite(story):
                raise NotFavoritedError(f"Story {story.id} is not a favorite")
            logger.debug("Removing favorite %s", story.id)
            with rollback_on_failure(self, "_favorites"):
                self._favorites = tuple(s for s in self._favorites if s.id != story.id)
                self.api.remove_favorite(self._token, self.username, story.id)

    def toggle_favorite(self, story: Story) -> bool:
        """Star or unstar ``story``. Returns True when it ends up a favorite."""
        _check_story(story)
        with self.mutation_lock:
            if self.is_favorite(story):
                self.remove_favorite(story)
                return False
            self.add_favorite(story)
            return True

    # --- called by StoryFeed while it holds mutation_lock ---
    def _prepend_authored(self, story: Story) -> None:
        self._authored = (story,) + self._authored

    def _forget_story(self, story_id: str) -> None:
        self._authored = tuple(s for s in self._authored if s.id != story_id)
        self._favorites = tuple(s for s in self._favorites if s.id != story_id)


def _check_story(story: Any) -> None:
    if not isinstance(story, Story):
        raise InvalidArgumentError(f"Expected a Story, got {type(story).__name__}")
    if not story.id:
        raise InvalidArgumentError("Story has no id")


def _story_list(user: Mapping[str, Any], key: str) -> list:
    value = user.get(key, [])
    if not isinstance(value, list):
        raise InvalidStoryDataError(f"User record field {key!r} is not a list")
    return value


def _dedupe(stories: Iterable[Story]) -> Tuple[Story, ...]:
    seen = set()
    out = []
    for s in stories:
        if s.id not in seen:
            seen.add(s.id)
            out.append(s)
    return tuple(out)
