from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

logger = logging.getLogger("snooze")


@contextmanager
def rollback_on_failure(owner: Any, attr: str) -> Iterator[Any]:
    """
    Snapshot ``owner.attr``, run the body, and put the snapshot back if the
    body raises. The attribute must hold an immutable value (the collections
    here are tuples) so the snapshot cannot be changed underneath us.
    """
    snapshot = getattr(owner, attr)
    try:
        yield snapshot
    except BaseException:
        logger.debug("Rolling back %s.%s", type(owner).__name__, attr)
        setattr(owner, attr, snapshot)
        raise
