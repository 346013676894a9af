"""Loop-safe draining of paged AWS API results."""

import logging
import threading
from typing import Callable, Optional

from ec2_pricing.errors import (
    PageLimitExceededError,
    RepeatedCursorError,
    RetrievalCancelledError,
)

logger = logging.getLogger("ec2_pricing.aws.pagination")

PAGINATION_LIMIT = 1000

# Receives the previous cursor (None on the first call), stores its page and
# returns the next cursor. An empty or None cursor ends the iteration.
PageFn = Callable[[Optional[str]], Optional[str]]


def check_cancelled(cancel_event: Optional[threading.Event], step: str) -> None:
    """Raise RetrievalCancelledError if ``cancel_event`` is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise RetrievalCancelledError(f"Cancelled {step}")


def paginate(
    page_fn: PageFn,
    limit: int = PAGINATION_LIMIT,
    cancel_event: Optional[threading.Event] = None,
) -> int:
    """Call ``page_fn`` until it stops returning a cursor.

    Every cursor seen is remembered, so an API that cycles back to any
    earlier cursor fails instead of looping forever. The page limit bounds
    both the number of calls and the memory used by the seen set.

    Args:
        page_fn: Page fetch callable, see PageFn
        limit: Maximum number of pages to request
        cancel_event: Optional shared signal checked before each page

    Returns:
        Number of pages fetched

    Raises:
        RepeatedCursorError: If a cursor is returned twice
        PageLimitExceededError: If ``limit`` pages were fetched without the
            API signalling the end
        RetrievalCancelledError: If ``cancel_event`` is set
    """
    cursor: Optional[str] = None
    seen_cursors: set[str] = set()

    for page in range(1, limit + 1):
        check_cancelled(cancel_event, f"before page {page}")

        cursor = page_fn(cursor)
        if not cursor:
            return page

        if cursor in seen_cursors:
            raise RepeatedCursorError(cursor, page)
        seen_cursors.add(cursor)

    raise PageLimitExceededError(limit)
