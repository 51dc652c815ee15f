"""Page arithmetic shared by the paginated directory clients."""
from __future__ import annotations

import math
from enum import Enum


class PageRangePolicy(str, Enum):
    """Which pages to walk once the total page count is known.

    ``EXCLUSIVE`` stops one page short of the reported total. The deal listing
    has always been read that way and the final page is never requested.
    ``INCLUSIVE`` walks every reported page.
    """

    EXCLUSIVE = "exclusive"
    INCLUSIVE = "inclusive"


def total_pages(total_items: int, page_size: int) -> int:
    """Return ``ceil(total_items / page_size)``."""

    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if total_items <= 0:
        return 0
    return math.ceil(total_items / page_size)


def page_numbers(total: int, policy: PageRangePolicy = PageRangePolicy.INCLUSIVE) -> range:
    """Return the 1-based page numbers to request for ``total`` pages."""

    if policy is PageRangePolicy.EXCLUSIVE:
        return range(1, max(total, 1))
    return range(1, max(total, 0) + 1)
