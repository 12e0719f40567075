from __future__ import annotations

from typing import Optional


class SnoozeError(Exception):
    """Base class for every error raised by the snooze client."""


# --- Local validation (never reaches the remote authority) ---
class InvalidStoryDataError(SnoozeError, ValueError):
    pass


class InvalidArgumentError(SnoozeError, TypeError):
    pass


class MalformedUrlError(SnoozeError, ValueError):
    pass


class AlreadyFavoritedError(SnoozeError):
    pass


class NotFavoritedError(SnoozeError):
    pass


class SessionStateError(SnoozeError):
    pass


# --- Remote authority ---
class RemoteError(SnoozeError):
    def __init__(self, reason: str, status: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status = status


class RemoteRejectedError(RemoteError):
    """The API understood the request but refused it."""


class RemoteUnavailableError(RemoteError):
    """Transport failure or a response we could not make sense of."""


class AuthenticationError(RemoteError):
    """Credentials rejected, or the username is already taken."""
