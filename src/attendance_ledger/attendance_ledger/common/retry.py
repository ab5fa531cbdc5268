from __future__ import annotations

import logging
from typing import Callable, TypeVar

from ..core.exceptions import ConcurrentModification

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_conflict(operation: Callable[[], T], *, attempts: int, label: str) -> T:
    """Run `operation`, re-running it when a versioned write loses a race.

    The operation must re-read everything it depends on; after `attempts`
    failures the last ConcurrentModification propagates to the caller.
    """

    attempts = max(1, int(attempts))
    for attempt in range(1, attempts):
        try:
            return operation()
        except ConcurrentModification:
            logger.info("%s: concurrent modification, retrying (%d/%d)", label, attempt, attempts)
    try:
        return operation()
    except ConcurrentModification:
        logger.warning("%s: giving up after %d conflicting attempts", label, attempts)
        raise
