#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from .api import SnoozeAPI
from .app import SnoozeApp
from .config import (
    BASE_URL,
    DEFAULT_FEED_LIMIT,
    CredentialStore,
    load_config,
    setup_logging,
)
from .context import AppContext

logger = logging.getLogger("snooze")


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Hack or Snooze terminal client")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--theme", type=str, help="Set theme for this run (e.g. dracula, nord)")
    parser.add_argument("--base-url", type=str, help="API base URL")
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    theme_name = args.theme or config.get("theme") or "dracula"
    base_url = args.base_url or config.get("base_url") or BASE_URL
    feed_limit = config.get("feed_limit", DEFAULT_FEED_LIMIT)

    logger.info("Using API at %s with theme %s", base_url, theme_name)

    context = AppContext(SnoozeAPI(base_url), CredentialStore(), feed_limit=feed_limit)
    try:
        app = SnoozeApp(context, theme=theme_name, config=config)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)


if __name__ == "__main__":
    main()
