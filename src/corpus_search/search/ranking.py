"""Match decision and relevance score for a single document.

For every group the best occurrence count of any alternative is taken,
separately for the title and the content. Title hits weigh 20 times a
content hit, and a geometric mean over the groups keeps one very frequent
group from dominating a multi-group query::

    rank = round(title_rank ** (1 / G) * 20) + round(content_rank ** (1 / G))

where ``title_rank`` and ``content_rank`` are the products of
``best_count + 1`` over the ``G`` groups.
"""

from __future__ import annotations

from collections.abc import Sequence
import math

from corpus_search.domain.model import Document
from corpus_search.search.query import QueryGroup


TITLE_WEIGHT = 20


def count_occurrences(source: str, term: str) -> int:
    """Count literal, non-overlapping occurrences of ``term`` scanning left to right."""
    if not source or not term:
        return 0
    return source.count(term)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def score_document(document: Document, lowered_groups: Sequence[QueryGroup], *, title_only: bool = False) -> int | None:
    """Return the rank of ``document`` for the query, or ``None`` when it does not match.

    ``lowered_groups`` must already be lowercased; they are compared against
    the precomputed lowercase title and content.
    """
    if not lowered_groups:
        return None

    title_rank = 1
    content_rank = 1
    for group in lowered_groups:
        best_title = 0
        best_content = 0
        for term in group:
            best_title = max(best_title, count_occurrences(document.title_lower, term))
            if not title_only:
                best_content = max(best_content, count_occurrences(document.content_lower, term))

        if best_title == 0 and best_content == 0:
            return None

        title_rank *= best_title + 1
        content_rank *= best_content + 1

    exponent = 1 / len(lowered_groups)
    rank = round_half_up(title_rank**exponent * TITLE_WEIGHT)
    if not title_only:
        rank += round_half_up(content_rank**exponent)
    return rank
