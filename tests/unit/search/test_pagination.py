"""Unit tests for page clamping and slicing."""

import pytest

from corpus_search.domain.search import SearchHit
from corpus_search.search.pagination import clamp_page, clamp_page_size, empty_page, paginate


def _hit(doc_id: int) -> SearchHit:
    return SearchHit(
        id=doc_id,
        title=f"Doc {doc_id}",
        raw_title=f"Doc {doc_id}",
        path=f"topics/misc/{doc_id}.html",
        source_path=f"misc/{doc_id}.html",
        rank=10,
        preview="",
        content="",
        category="misc",
    )


@pytest.mark.unit
class TestClamping:
    @pytest.mark.parametrize(("page", "expected"), [(None, 1), (0, 1), (-3, 1), (1, 1), (7, 7)])
    def test_clamp_page(self, page, expected):
        assert clamp_page(page) == expected

    @pytest.mark.parametrize(("size", "expected"), [(None, 20), (0, 1), (-5, 1), (1, 1), (50, 50), (100, 100), (500, 100)])
    def test_clamp_page_size(self, size, expected):
        assert clamp_page_size(size, default=20, maximum=100) == expected


@pytest.mark.unit
class TestPaginate:
    def test_second_page_of_size_one(self):
        hits = [_hit(0), _hit(1), _hit(2)]
        page = paginate(hits, 2, 1)
        assert [hit.id for hit in page.results] == [1]
        assert page.total == 3
        assert page.total_pages == 3
        assert page.page == 2
        assert page.page_size == 1

    def test_total_pages_rounds_up(self):
        page = paginate([_hit(i) for i in range(5)], 1, 2)
        assert page.total_pages == 3
        assert [hit.id for hit in page.results] == [0, 1]

    def test_page_past_the_end_is_empty_with_totals(self):
        page = paginate([_hit(0), _hit(1)], 5, 1)
        assert page.results == []
        assert page.total == 2
        assert page.total_pages == 2

    def test_empty_results(self):
        page = paginate([], 1, 20)
        assert page.total == 0
        assert page.total_pages == 0

    def test_empty_page_wire_format(self):
        assert empty_page(3, 10).to_wire() == {
            "results": [],
            "total": 0,
            "page": 3,
            "totalPages": 0,
            "pageSize": 10,
        }
