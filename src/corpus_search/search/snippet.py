"""Preview extraction for search results.

The preview is a fixed-size window of the document content centred on the
earliest occurrence of any query term. Ellipsis markers show where the
window was clipped.
"""

from __future__ import annotations

from collections.abc import Sequence
import math

from corpus_search.domain.model import normalize_line_endings


ELLIPSIS = "…"
DEFAULT_PREVIEW_LENGTH = 600


def find_first_match(text_lower: str, terms: Sequence[str]) -> tuple[int, str]:
    """Return ``(position, term)`` of the earliest term found in ``text_lower``.

    Position is -1 and the term empty when no term occurs. Ties keep the
    term listed first.
    """
    best_match_pos = -1
    best_match_term = ""
    for term in terms:
        if not term:
            continue
        pos = text_lower.find(term.lower())
        if pos != -1 and (best_match_pos == -1 or pos < best_match_pos):
            best_match_pos = pos
            best_match_term = term
    return best_match_pos, best_match_term


def build_preview(text: str, terms: Sequence[str], max_length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Build a preview of at most ``max_length`` characters (plus ellipses).

    Args:
        text: The full content to extract the preview from.
        terms: Query terms in any case; the earliest occurrence wins.
        max_length: Window size in characters.

    Returns:
        The window, prefixed with ``…`` when it does not start at the
        beginning and suffixed with ``…`` when it stops before the end.
    """
    if not text:
        return ""
    normalized = normalize_line_endings(text)

    best_match_pos, best_match_term = find_first_match(normalized.lower(), terms)
    if best_match_pos == -1:
        truncated = normalized[:max_length]
        return truncated + ELLIPSIS if len(normalized) > max_length else truncated

    half_window = max((max_length - len(best_match_term)) / 2, 0)
    start = max(0, math.floor(best_match_pos - half_window))
    end = min(len(normalized), start + max_length)

    snippet = normalized[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(normalized):
        snippet = snippet + ELLIPSIS
    return snippet
