from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from .api import SnoozeAPI
from .datamodels import Story, validate_story_input
from .errors import InvalidArgumentError, InvalidStoryDataError, RemoteUnavailableError
from .session import Session

logger = logging.getLogger("snooze")


class StoryFeed:
    """
    The shared list of stories, newest submissions first.

    Creation and deletion are pessimistic: the API has to confirm before
    the local lists change. ``stories`` is a tuple that is replaced, never
    edited, on every change.
    """

    def __init__(self, api: SnoozeAPI, stories: Iterable[Story] = ()):
        self.api = api
        self._stories: Tuple[Story, ...] = tuple(stories)

    def __len__(self) -> int:
        return len(self._stories)

    def __iter__(self):
        return iter(self._stories)

    @property
    def stories(self) -> Tuple[Story, ...]:
        return self._stories

    @classmethod
    def load(cls, api: SnoozeAPI, limit: Optional[int] = None) -> "StoryFeed":
        """Fetch the current stories. Either every record parses or nothing is returned."""
        records = api.get_stories(limit=limit)
        try:
            stories = [Story.from_record(r) for r in records]
        except InvalidStoryDataError as e:
            raise RemoteUnavailableError(f"Malformed story in feed: {e}") from e
        logger.info("Loaded %d stories", len(stories))
        return cls(api, stories)

    def find(self, story_id: str) -> Optional[Story]:
        for s in self._stories:
            if s.id == story_id:
                return s
        return None

    def create(self, session: Session, title: str, author: str, url: str) -> Story:
        """Submit a story as ``session``'s user and put it at the top of both lists."""
        validate_story_input(title, author, url)
        with session.mutation_lock:
            record = self.api.add_story(
                session.token, title.strip(), author.strip(), url.strip()
            )
            try:
                story = Story.from_record(record)
            except InvalidStoryDataError as e:
                raise RemoteUnavailableError(f"Malformed story in response: {e}") from e
            self._stories = (story,) + self._stories
            session._prepend_authored(story)
        logger.info("Created story %s", story.id)
        return story

    def remove(self, session: Session, story_id: str) -> None:
        """
        Delete a story and drop it from the feed, the user's own stories and
        their favorites. An id we do not hold locally is fine once the API
        has accepted the delete.
        """
        if not isinstance(story_id, str) or not story_id:
            raise InvalidArgumentError("story_id must be a non-empty string")
        with session.mutation_lock:
            self.api.delete_story(session.token, story_id)
            self._stories = tuple(s for s in self._stories if s.id != story_id)
            session._forget_story(story_id)
        logger.info("Removed story %s", story_id)
