"""Search engine - the single entry point of the retrieval core.

Hides the whole query pipeline behind ``search()``:
- keyword parsing into AND-of-OR groups
- result cache lookup by query signature
- candidate pruning through the token index
- ranking, preview building and sorting
- pagination

A corpus is published as one immutable ``CorpusSnapshot``. ``load()`` builds
the replacement off to the side and swaps the reference in a single
assignment, so a query always sees one complete snapshot. Every cache key
carries the snapshot generation, which keeps results computed against an
older corpus from ever answering a query on the new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
import logging
import re
import threading
import time
import unicodedata

from pypinyin import Style, lazy_pinyin

from corpus_search.config import Settings
from corpus_search.domain.model import Document, display_title_for, source_path_for
from corpus_search.domain.search import CategoryListing, DocumentContent, EngineStats, SearchHit, SearchPage
from corpus_search.observability import CACHE_LOOKUPS, CORPUS_SIZE, SEARCH_LATENCY, create_span
from corpus_search.search.cache import ResultCache
from corpus_search.search.candidates import select_candidates
from corpus_search.search.index import CorpusSnapshot
from corpus_search.search.pagination import clamp_page, clamp_page_size, empty_page, paginate
from corpus_search.search.query import ParsedQuery
from corpus_search.search.ranking import score_document
from corpus_search.search.snippet import build_preview


logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

_HAN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")

CacheKey = tuple[int, bool, tuple[tuple[str, ...], ...], tuple[int, ...] | None, str | None]


def normalize_category_filter(category: str | None) -> str | None:
    """Return the category to filter on, or ``None`` when filtering is off."""
    if not category:
        return None
    stripped = category.strip()
    if not stripped or stripped.lower() == ALL_CATEGORIES:
        return None
    return stripped


@lru_cache(maxsize=4096)
def _han_reading(char: str) -> str:
    return lazy_pinyin(char, style=Style.TONE3)[0]


def collation_key(value: str) -> tuple[tuple[tuple[int, str, str], ...], str]:
    """Simplified Chinese collation: case and accents ignored, ties broken by the raw string.

    Han characters order by toned pinyin reading and sort ahead of every other
    script; other characters compare by their case-folded base form.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(char for char in decomposed if not unicodedata.combining(char)).casefold()
    weights = tuple((0, _han_reading(char), char) if _HAN.match(char) else (1, char, "") for char in base)
    return weights, value


class SearchEngine:
    """In-memory full-text search over one loaded corpus."""

    def __init__(self, settings: Settings | None = None, *, clock=time.monotonic) -> None:
        self.settings = settings or Settings()
        self._cache: ResultCache[tuple[SearchHit, ...]] = ResultCache(
            max_entries=self.settings.cache_max_entries,
            ttl_seconds=self.settings.cache_ttl_seconds,
            clock=clock,
        )
        self._snapshot = CorpusSnapshot(categories=frozenset({self.settings.default_category}))
        self._load_lock = threading.Lock()

    @property
    def snapshot(self) -> CorpusSnapshot:
        return self._snapshot

    def load(self, records: Iterable[Mapping[str, object]]) -> int:
        """Replace the corpus with ``records`` and return the number of documents.

        Each record provides ``content``, ``title`` and ``path``. Document IDs
        issued for the previous corpus are no longer valid afterwards.
        """
        with self._load_lock:
            snapshot = CorpusSnapshot.build(
                records,
                generation=self._snapshot.generation + 1,
                path_prefix=self.settings.path_prefix,
                default_category=self.settings.default_category,
            )
            self._snapshot = snapshot
            self._cache.clear()

        CORPUS_SIZE.labels(kind="documents").set(len(snapshot))
        CORPUS_SIZE.labels(kind="tokens").set(len(snapshot.index))
        CORPUS_SIZE.labels(kind="categories").set(len(snapshot.categories))
        logger.info(
            "Loaded %d documents (%d tokens, %d categories)",
            len(snapshot),
            len(snapshot.index),
            len(snapshot.categories),
        )
        return len(snapshot)

    def search(
        self,
        raw_keyword: str | None,
        *,
        title_only: bool = False,
        page: int | None = 1,
        page_size: int | None = None,
        base_indexes: Iterable[int] | None = None,
        category: str | None = None,
    ) -> SearchPage:
        """Search the corpus and return one page of ranked hits.

        Args:
            raw_keyword: Keywords; quoted phrases stay whole, ``a|b`` means either.
            title_only: Match and rank on titles only.
            page: 1-based page number.
            page_size: Requested page size, clamped to ``1..max_page_size``.
            base_indexes: Restrict results to these document IDs; IDs outside
                the corpus are ignored and a restriction with no valid ID
                matches nothing.
            category: Only return documents of this category; ``"all"`` or
                blank disables the filter.

        Returns:
            SearchPage with totals computed over the full result list.
        """
        page = clamp_page(page)
        size = clamp_page_size(
            page_size, default=self.settings.default_page_size, maximum=self.settings.max_page_size
        )
        snapshot = self._snapshot

        query = ParsedQuery.parse(raw_keyword)
        if query.is_empty:
            return empty_page(page, size)

        base: frozenset[int] | None = None
        if base_indexes is not None:
            base = frozenset(idx for idx in base_indexes if isinstance(idx, int) and 0 <= idx < len(snapshot))
            if not base:
                return empty_page(page, size)

        category_filter = normalize_category_filter(category)
        key: CacheKey = (
            snapshot.generation,
            title_only,
            query.lowered,
            tuple(sorted(base)) if base is not None else None,
            category_filter,
        )

        started = time.perf_counter()
        results = self._cache.get(key)
        outcome = "hit"
        if results is None:
            outcome = "miss"
            with create_span(
                "search.rank",
                attributes={"search.groups": len(query.groups), "search.title_only": title_only},
            ):
                results = self._rank(snapshot, query, title_only=title_only, base=base, category=category_filter)
            self._cache.put(key, results)
        CACHE_LOOKUPS.labels(result=outcome).inc()
        SEARCH_LATENCY.labels(cache=outcome).observe(time.perf_counter() - started)

        return paginate(results, page, size)

    def _rank(
        self,
        snapshot: CorpusSnapshot,
        query: ParsedQuery,
        *,
        title_only: bool,
        base: frozenset[int] | None,
        category: str | None,
    ) -> tuple[SearchHit, ...]:
        selection = select_candidates(query.lowered, snapshot.index, base)
        if selection.is_empty:
            return ()

        documents = (snapshot.documents[idx] for idx in selection.search_space(len(snapshot)))
        if category is not None:
            documents = (document for document in documents if document.category == category)

        preview_terms = query.preview_terms
        scored: list[tuple[int, Document]] = []
        for document in documents:
            rank = score_document(document, query.lowered, title_only=title_only)
            if rank is not None:
                scored.append((rank, document))

        scored.sort(key=lambda item: (-item[0], item[1].id))
        return tuple(self._build_hit(document, rank, preview_terms) for rank, document in scored)

    def _build_hit(self, document: Document, rank: int, preview_terms: list[str]) -> SearchHit:
        source_path = source_path_for(document.path, self.settings.path_prefix)
        return SearchHit(
            id=document.id,
            title=display_title_for(document.title, source_path, fallback=self.settings.untitled_title),
            raw_title=document.title,
            path=document.path,
            source_path=source_path,
            rank=rank,
            preview=build_preview(document.content, preview_terms, self.settings.preview_max_length),
            content=document.content,
            category=document.category,
        )

    def get_document(self, doc_id: int) -> DocumentContent | None:
        """Return the stored text of one document, or ``None`` when the ID is out of range."""
        document = self._snapshot.get(doc_id)
        if document is None:
            return None
        return DocumentContent(content=document.content, title=document.title, path=document.path)

    def list_categories(self) -> CategoryListing:
        return CategoryListing(
            categories=sorted(self._snapshot.categories, key=collation_key),
            default_category=self.settings.default_category,
        )

    def stats(self) -> EngineStats:
        snapshot = self._snapshot
        return EngineStats(
            documents=len(snapshot),
            tokens=len(snapshot.index),
            categories=len(snapshot.categories),
            cached_queries=len(self._cache),
            generation=snapshot.generation,
        )
