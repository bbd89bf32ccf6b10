"""Draining paginated GitHub listings."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from github_keys.models import Page
from github_keys.retry import RetryPolicy, retry_call

logger = logging.getLogger(__name__)

T = TypeVar("T")


def collect_pages(
    fetch_page: Callable[[int], Page[T]],
    *,
    policy: Optional[RetryPolicy] = None,
    operation: str = "list page",
    missing_ok: bool = False,
) -> List[T]:
    """Follow ``next_page`` cursors from page 1 until none remain.

    Each page is retried on its own, so a failure on page 3 does not
    refetch pages 1 and 2. Items are returned in page order.

    With ``missing_ok`` a 404 ends the listing and the items collected so
    far are returned; otherwise the ``NotFoundError`` propagates.
    """
    items: List[T] = []
    page_number: Optional[int] = 1
    while page_number is not None:
        current = page_number
        page = retry_call(
            lambda: fetch_page(current),
            policy=policy,
            operation=f"{operation} (page {current})",
            **({"not_found": None} if missing_ok else {}),
        )
        if page is None:
            logger.warning("failed to %s: not found, keeping %d items", operation, len(items))
            break
        items.extend(page.items)
        page_number = page.next_page
    return items
