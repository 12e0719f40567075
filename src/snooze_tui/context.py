from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .api import SnoozeAPI
from .config import CredentialStore
from .feed import StoryFeed
from .session import Session
from .errors import (
    AuthenticationError,
    RemoteRejectedError,
    SessionStateError,
    SnoozeError,
)

logger = logging.getLogger("snooze")


class SessionState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    LOGGED_OUT = "logged_out"


class AppContext:
    """
    Everything the UI needs: the API client, the current feed snapshot and
    the current session. Handed to the app instead of living in globals.
    """

    def __init__(
        self,
        api: SnoozeAPI,
        credentials: CredentialStore,
        feed_limit: Optional[int] = None,
    ):
        self.api = api
        self.credentials = credentials
        self.feed_limit = feed_limit
        self.feed = StoryFeed(api)
        self.session: Optional[Session] = None
        self.state = SessionState.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.session is not None

    def _set_state(self, state: SessionState) -> None:
        logger.debug("Session state %s -> %s", self.state.value, state.value)
        self.state = state

    def require_session(self) -> Session:
        if not self.is_authenticated:
            raise SessionStateError("You need to log in first.")
        return self.session

    def load_feed(self) -> StoryFeed:
        self.feed = StoryFeed.load(self.api, limit=self.feed_limit)
        return self.feed

    # --- authentication ---
    def _authenticate(self, attempt: Callable[[], Optional[Session]]) -> Optional[Session]:
        if self.state is not SessionState.UNAUTHENTICATED:
            raise SessionStateError(f"Cannot authenticate while {self.state.value}")
        self._set_state(SessionState.AUTHENTICATING)
        try:
            session = attempt()
        except BaseException:
            self._set_state(SessionState.UNAUTHENTICATED)
            raise
        if session is None:
            self._set_state(SessionState.UNAUTHENTICATED)
            return None
        self.session = session
        self._set_state(SessionState.AUTHENTICATED)
        return session

    def log_in(self, username: str, password: str) -> Session:
        session = self._authenticate(lambda: Session.log_in(self.api, username, password))
        self.credentials.save(session.token, session.username)
        return session

    def sign_up(self, username: str, password: str, display_name: str) -> Session:
        session = self._authenticate(
            lambda: Session.sign_up(self.api, username, password, display_name)
        )
        self.credentials.save(session.token, session.username)
        return session

    def resume(self) -> Optional[Session]:
        """
        Pick up the stored session, if there is one that still works.

        Only a rejected token forgets the stored credentials. A network error
        or a garbled reply keeps them for the next start.
        """
        stored = self.credentials.load()
        if not stored:
            return None
        username = stored["username"]
        try:
            return self._authenticate(
                lambda: Session.restore(self.api, stored["token"], username)
            )
        except SessionStateError:
            raise
        except (AuthenticationError, RemoteRejectedError) as e:
            logger.info("Stored session for %s was rejected: %s", username, e)
            self.credentials.clear()
        except SnoozeError as e:
            logger.error("Resuming session for %s failed: %s", username, e)
        return None

    def log_out(self) -> None:
        username = self.session.username if self.session else None
        self.session = None
        self.credentials.clear()
        self._set_state(SessionState.LOGGED_OUT)
        logger.info("Logged out %s", username)
        self._set_state(SessionState.UNAUTHENTICATED)
