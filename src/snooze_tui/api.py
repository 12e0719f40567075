from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import (
    BASE_URL,
    HTTP_TIMEOUT,
    REQUEST_HEADERS,
    RETRY_BACKOFF,
    RETRY_STATUS_FORCELIST,
    RETRY_TOTAL,
)
from .errors import (
    AuthenticationError,
    RemoteRejectedError,
    RemoteUnavailableError,
)

logger = logging.getLogger("snooze")


class SnoozeAPI:
    """
    Thin client for the hack-or-snooze API. Every method either returns the
    payload the caller asked for or raises one of the RemoteError types.
    """

    def __init__(self, base_url: str = BASE_URL, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=RETRY_TOTAL,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUS_FORCELIST,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        auth_endpoint: bool = False,
        expect_body: bool = True,
    ) -> Any:
        url = f"{self.base_url}{path}"
        # params may carry the token, so only the path is logged
        logger.debug("%s %s", method, path)
        try:
            resp = self.session.request(
                method, url, json=json, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteUnavailableError(f"Could not reach the server: {e}") from e

        status = resp.status_code
        if status >= 500:
            logger.warning("%s %s returned %d", method, path, status)
            raise RemoteUnavailableError(_error_reason(resp), status)
        if status >= 400:
            reason = _error_reason(resp)
            logger.info("%s %s rejected (%d): %s", method, path, status, reason)
            if auth_endpoint:
                raise AuthenticationError(reason, status)
            raise RemoteRejectedError(reason, status)

        if not expect_body:
            logger.debug("%s %s OK (%d)", method, path, status)
            return None

        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteUnavailableError(f"Server sent a non-JSON response to {method} {path}") from e
        logger.debug("%s %s OK", method, path)
        return data

    # --- stories ---
    def get_stories(self, skip: int = 0, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"skip": skip}
        if limit is not None:
            params["limit"] = limit
        data = self._request("GET", "/stories", params=params)
        return _expect(data, "stories", list)

    def add_story(self, token: str, title: str, author: str, url: str) -> Dict[str, Any]:
        data = self._request(
            "POST",
            "/stories",
            json={"token": token, "story": {"title": title, "author": author, "url": url}},
        )
        return _expect(data, "story", dict)

    def delete_story(self, token: str, story_id: str) -> None:
        self._request(
            "DELETE",
            f"/stories/{_segment(story_id)}",
            json={"token": token},
            expect_body=False,
        )

    # --- users ---
    def signup(self, username: str, password: str, name: str) -> Tuple[Dict[str, Any], str]:
        data = self._request(
            "POST",
            "/signup",
            json={"user": {"username": username, "password": password, "name": name}},
            auth_endpoint=True,
        )
        return _expect(data, "user", dict), _expect(data, "token", str)

    def login(self, username: str, password: str) -> Tuple[Dict[str, Any], str]:
        data = self._request(
            "POST",
            "/login",
            json={"user": {"username": username, "password": password}},
            auth_endpoint=True,
        )
        return _expect(data, "user", dict), _expect(data, "token", str)

    def get_user(self, token: str, username: str) -> Dict[str, Any]:
        data = self._request(
            "GET", f"/users/{_segment(username)}", params={"token": token}, auth_endpoint=True
        )
        return _expect(data, "user", dict)

    # --- favorites ---
    def add_favorite(self, token: str, username: str, story_id: str) -> None:
        self._request(
            "POST",
            f"/users/{_segment(username)}/favorites/{_segment(story_id)}",
            json={"token": token},
            expect_body=False,
        )

    def remove_favorite(self, token: str, username: str, story_id: str) -> None:
        self._request(
            "DELETE",
            f"/users/{_segment(username)}/favorites/{_segment(story_id)}",
            json={"token": token},
            expect_body=False,
        )


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _error_reason(resp: requests.Response) -> str:
    try:
        error = resp.json().get("error", {})
        message = error.get("message")
        if message:
            return str(message)
    except (ValueError, AttributeError):
        pass
    return resp.reason or f"HTTP {resp.status_code}"


def _expect(data: Any, key: str, kind: type) -> Any:
    if not isinstance(data, dict) or not isinstance(data.get(key), kind):
        raise RemoteUnavailableError(f"Unexpected response: missing {key!r}")
    return data[key]
