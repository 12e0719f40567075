from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Union
from urllib.parse import urlparse

from .errors import InvalidStoryDataError, MalformedUrlError


def _parse_timestamp(value: Union[str, datetime], field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise InvalidStoryDataError(f"{field_name} must be a timestamp")
    try:
        # the API sends "2020-11-18T21:06:07.826Z"
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidStoryDataError(f"{field_name} is not a valid timestamp: {value!r}") from e


def _is_absolute_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
        parsed.port
    except ValueError:
        return False
    if any(c.isspace() for c in parsed.netloc):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def validate_story_input(title: Any, author: Any, url: Any) -> None:
    """Check user-supplied story fields before anything is sent to the API."""
    for name, value in (("title", title), ("author", author), ("url", url)):
        if not isinstance(value, str) or not value.strip():
            raise InvalidStoryDataError(f"{name} must not be empty")
    if not _is_absolute_url(url.strip()):
        raise InvalidStoryDataError(f"url is not a valid absolute URL: {url!r}")


# --- Data models ---
@dataclass(frozen=True, eq=False)
class Story:
    """A single shared story. Two stories are the same story when their ids match."""

    id: str
    title: str
    author_name: str
    url: str
    submitter_username: str
    created_at: datetime

    def __post_init__(self) -> None:
        for name in ("id", "title", "author_name", "url", "submitter_username"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidStoryDataError(f"Story.{name} must be a non-empty string")
        if not _is_absolute_url(self.url):
            raise InvalidStoryDataError(f"Story.url is not a valid absolute URL: {self.url!r}")
        object.__setattr__(
            self, "created_at", _parse_timestamp(self.created_at, "Story.created_at")
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Story):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Story":
        """Build a Story from an API story record."""
        if not isinstance(record, Mapping):
            raise InvalidStoryDataError(f"Story record must be a mapping, got {type(record).__name__}")
        try:
            return cls(
                id=record["storyId"],
                title=record["title"],
                author_name=record["author"],
                url=record["url"],
                submitter_username=record["username"],
                created_at=record["createdAt"],
            )
        except KeyError as e:
            raise InvalidStoryDataError(f"Story record is missing {e.args[0]!r}") from e

    def hostname(self) -> str:
        """Return the network host of the story's url, including any port."""
        try:
            parsed = urlparse(self.url)
            host = parsed.hostname
            port = parsed.port
        except ValueError as e:
            raise MalformedUrlError(f"Cannot parse url {self.url!r}: {e}") from e
        if not host:
            raise MalformedUrlError(f"No host in url {self.url!r}")
        return f"{host}:{port}" if port is not None else host


@dataclass(frozen=True)
class Identity:
    username: str
    display_name: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Identity":
        username = record.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidStoryDataError("User record has no username")
        return cls(
            username=username,
            display_name=record.get("name") or username,
            created_at=_parse_timestamp(record.get("createdAt"), "User.createdAt"),
        )
