"""Index-based pruning of the search space before ranking.

Only a group made of a single indexable alternative (ASCII alphanumeric,
minimum token length) can be answered by a single bucket lookup. Groups with
several alternatives or CJK terms never shrink the candidate set; the ranker
still makes every final match decision.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from corpus_search.search.analyzers import is_indexable_term
from corpus_search.search.index import TokenIndex
from corpus_search.search.query import QueryGroup


class SelectionKind(Enum):
    UNCONSTRAINED = "unconstrained"
    RESTRICTED = "restricted"
    EMPTY = "empty"


@dataclass(frozen=True)
class CandidateSelection:
    """Tagged result of candidate selection.

    ``UNCONSTRAINED`` means the whole store must be scanned, ``RESTRICTED``
    carries an upper bound of the matching IDs and ``EMPTY`` means nothing
    can match.
    """

    kind: SelectionKind
    ids: frozenset[int] = frozenset()

    @classmethod
    def unconstrained(cls) -> CandidateSelection:
        return cls(SelectionKind.UNCONSTRAINED)

    @classmethod
    def empty(cls) -> CandidateSelection:
        return cls(SelectionKind.EMPTY)

    @classmethod
    def restricted(cls, ids: Iterable[int]) -> CandidateSelection:
        frozen = frozenset(ids)
        if not frozen:
            return cls.empty()
        return cls(SelectionKind.RESTRICTED, frozen)

    @property
    def is_empty(self) -> bool:
        return self.kind is SelectionKind.EMPTY

    def search_space(self, store_size: int) -> list[int]:
        """IDs to rank, in ascending order."""
        if self.kind is SelectionKind.UNCONSTRAINED:
            return list(range(store_size))
        return sorted(self.ids)


def indexable_term(group: QueryGroup) -> str | None:
    """Return the term of a lowercase single-alternative group when the index can answer it."""
    if len(group) == 1 and is_indexable_term(group[0]):
        return group[0]
    return None


def select_candidates(
    lowered_groups: Iterable[QueryGroup],
    index: TokenIndex,
    base_indexes: frozenset[int] | None = None,
) -> CandidateSelection:
    """Narrow the documents worth ranking for ``lowered_groups``.

    ``base_indexes`` restricts the result to a caller-supplied subset.
    """
    candidates: frozenset[int] | None = None
    for group in lowered_groups:
        term = indexable_term(group)
        if term is None:
            continue
        bucket = index.lookup(term)
        if not bucket:
            return CandidateSelection.empty()
        if base_indexes is not None:
            bucket = bucket & base_indexes
        candidates = bucket if candidates is None else candidates & bucket
        if not candidates:
            return CandidateSelection.empty()

    if candidates is None:
        if base_indexes is None:
            return CandidateSelection.unconstrained()
        return CandidateSelection.restricted(base_indexes)
    return CandidateSelection.restricted(candidates)
