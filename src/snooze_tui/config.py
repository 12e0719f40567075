from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
BASE_URL = "https://hack-or-snooze-v3.herokuapp.com"
HTTP_TIMEOUT = 15
DEFAULT_FEED_LIMIT = 25

CONFIG_PATH = os.path.expanduser("~/.config/snooze/config.json")
CREDENTIALS_FILE = os.path.expanduser("~/.config/snooze/credentials.json")

REQUEST_HEADERS = {
    "User-Agent": "snooze-tui/0.1",
    "Accept": "application/json",
}
RETRY_TOTAL = 3
RETRY_BACKOFF = 0.3
RETRY_STATUS_FORCELIST = [429, 500, 502, 503, 504]

# Default UI settings
UI_DEFAULTS = {
    "statusbar_keybindings": (
        "[b {color}]f[/] favorite, [b {color}]n[/] new story, [b {color}]l[/] log in"
    ),
}

# --- Logging ---
logger = logging.getLogger("snooze")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/snooze_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def load_config() -> Dict[str, Any]:
    """Load the main configuration file."""
    if not os.path.exists(CONFIG_PATH):
        logger.info("Config file not found at %s, using defaults.", CONFIG_PATH)
        return {}
    try:
        with open(CONFIG_PATH, "r") as f:
            config = json.load(f)
        if not isinstance(config, dict):
            logger.error("Config at %s is not a JSON object, ignoring it.", CONFIG_PATH)
            return {}
        logger.info("Loaded config from %s", CONFIG_PATH)
        return config
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", CONFIG_PATH, e)
        return {}


class CredentialStore:
    """
    Remembers the token and username of the last login so the next start can
    resume the session without asking for a password.

    Schema: {"token": "...", "username": "..."}
    """

    def __init__(self, path: str = CREDENTIALS_FILE):
        self.path = path

    def load(self) -> Optional[Dict[str, str]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.warning("Failed to read credentials from %s: %s", self.path, e)
            return None
        if not isinstance(data, dict):
            return None
        token, username = data.get("token"), data.get("username")
        if not isinstance(token, str) or not isinstance(username, str):
            return None
        if not token or not username:
            return None
        return {"token": token, "username": username}

    def save(self, token: str, username: str) -> None:
        tmp = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"token": token, "username": username}, f)
            os.replace(tmp, self.path)
            logger.debug("Stored credentials for %s", username)
        except OSError as e:
            logger.error("Failed to store credentials in %s: %s", self.path, e)

    def clear(self) -> None:
        try:
            os.unlink(self.path)
            logger.debug("Cleared stored credentials at %s", self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to delete credentials file %s: %s", self.path, e)
