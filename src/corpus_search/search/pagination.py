"""Page slicing of sorted result lists."""

from __future__ import annotations

from collections.abc import Sequence
import math

from corpus_search.domain.search import SearchHit, SearchPage


def clamp_page(page: int | None) -> int:
    """Pages are 1-based; anything missing or below 1 becomes 1."""
    if page is None or page < 1:
        return 1
    return page


def clamp_page_size(page_size: int | None, *, default: int, maximum: int) -> int:
    """Clamp a requested page size into ``1..maximum``; ``None`` means ``default``."""
    if page_size is None:
        page_size = default
    return min(max(page_size, 1), maximum)


def paginate(results: Sequence[SearchHit], page: int, page_size: int) -> SearchPage:
    """Slice one page out of ``results``.

    Totals always describe the whole list; a page past the end is empty.
    """
    total = len(results)
    start = (page - 1) * page_size
    return SearchPage(
        results=list(results[start : start + page_size]),
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size),
        page_size=page_size,
    )


def empty_page(page: int, page_size: int) -> SearchPage:
    return SearchPage(results=[], total=0, page=page, total_pages=0, page_size=page_size)
