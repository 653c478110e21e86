"""Token index and the immutable corpus snapshot it belongs to."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging

from corpus_search.domain.model import Document
from corpus_search.search.analyzers import extract_tokens


logger = logging.getLogger(__name__)

_EMPTY: frozenset[int] = frozenset()


class TokenIndex:
    """Inverted index mapping a token to the IDs of documents containing it.

    Built once from a finalized document list and read-only afterward. A
    document ID is in a bucket iff the token occurs at least once in that
    document's title or content; buckets are never empty.
    """

    def __init__(self, buckets: Mapping[str, frozenset[int]] | None = None) -> None:
        self._buckets: dict[str, frozenset[int]] = dict(buckets or {})

    @classmethod
    def build(cls, documents: Sequence[Document]) -> TokenIndex:
        staging: dict[str, set[int]] = {}
        for document in documents:
            for token in extract_tokens(f"{document.title_lower} {document.content_lower}"):
                bucket = staging.get(token)
                if bucket is None:
                    bucket = set()
                    staging[token] = bucket
                bucket.add(document.id)
        return cls({token: frozenset(ids) for token, ids in staging.items()})

    def lookup(self, token: str) -> frozenset[int]:
        """Return the IDs of documents containing ``token`` (empty when unseen)."""
        return self._buckets.get(token, _EMPTY)

    def __contains__(self, token: object) -> bool:
        return token in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)


@dataclass(frozen=True)
class CorpusSnapshot:
    """Everything a query reads, bundled so it can be swapped atomically.

    ``generation`` increases with every load so that results computed from an
    older snapshot can be told apart from current ones.
    """

    documents: tuple[Document, ...] = ()
    index: TokenIndex = field(default_factory=TokenIndex)
    categories: frozenset[str] = frozenset()
    generation: int = 0

    @classmethod
    def build(
        cls,
        records: Iterable[Mapping[str, object]],
        *,
        generation: int,
        path_prefix: str,
        default_category: str,
    ) -> CorpusSnapshot:
        documents: list[Document] = []
        for record in records:
            documents.append(
                Document.create(
                    len(documents),
                    content=record.get("content"),
                    title=record.get("title"),
                    path=record.get("path"),
                    path_prefix=path_prefix,
                    default_category=default_category,
                )
            )
        # Derived structures are built only after the store is final.
        store = tuple(documents)
        categories = frozenset({default_category, *(document.category for document in store)})
        index = TokenIndex.build(store)
        logger.debug(
            "Built corpus snapshot generation=%d documents=%d tokens=%d", generation, len(store), len(index)
        )
        return cls(documents=store, index=index, categories=categories, generation=generation)

    def __len__(self) -> int:
        return len(self.documents)

    def get(self, doc_id: int) -> Document | None:
        if 0 <= doc_id < len(self.documents):
            return self.documents[doc_id]
        return None
