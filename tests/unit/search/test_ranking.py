"""Unit tests for the match decision and rank formula."""

import pytest

from corpus_search.domain.model import Document
from corpus_search.search.ranking import count_occurrences, round_half_up, score_document


def _document(title: str, content: str, path: str = "topics/basics/page.html") -> Document:
    return Document.create(
        0,
        content=content,
        title=title,
        path=path,
        path_prefix="topics/",
        default_category="uncategorized",
    )


@pytest.mark.unit
class TestCountOccurrences:
    def test_non_overlapping_left_to_right(self):
        assert count_occurrences("aaaa", "aa") == 2

    def test_literal_match_without_regex_semantics(self):
        assert count_occurrences("a.b a+b", "a.b") == 1
        assert count_occurrences("axb", "a.b") == 0

    def test_empty_inputs_count_zero(self):
        assert count_occurrences("", "x") == 0
        assert count_occurrences("text", "") == 0


@pytest.mark.unit
class TestRoundHalfUp:
    @pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (1.49, 1), (2.5, 3), (42.5, 43), (3.0, 3)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


@pytest.mark.unit
class TestScoreDocument:
    def test_title_and_content_hits(self):
        document = _document("Intro Guide", "guide guide tutorial")
        assert score_document(document, [("guide",)]) == 43

    def test_title_only_ignores_content(self):
        document = _document("Intro Guide", "guide guide tutorial")
        assert score_document(document, [("guide",)], title_only=True) == 40

    def test_title_only_requires_title_match(self):
        document = _document("Intro", "guide guide")
        assert score_document(document, [("guide",)], title_only=True) is None

    def test_every_group_must_match(self):
        document = _document("Intro Guide", "guide guide tutorial")
        assert score_document(document, [("guide",), ("missing",)]) is None

    def test_alternatives_take_best_count(self):
        document = _document("Intro Guide", "guide guide tutorial")
        assert score_document(document, [("guide", "tutorial")]) == 43

    def test_geometric_mean_over_groups(self):
        document = _document("Intro Guide", "guide guide tutorial")
        # title_rank = 2 * 1, content_rank = 3 * 2 over two groups
        assert score_document(document, [("guide",), ("tutorial",)]) == 28 + 2

    def test_content_only_match(self):
        document = _document("Other", "one guide here")
        assert score_document(document, [("guide",)]) == 20 + 2

    def test_phrase_matches_literally(self):
        document = _document("Hello World", "say hello world twice: hello world")
        assert score_document(document, [("hello world",)]) == 40 + 3

    def test_rank_grows_with_occurrences(self):
        ranks = [score_document(_document("Title", "term " * count), [("term",)]) for count in range(1, 6)]
        assert ranks == sorted(ranks)
        assert ranks[0] < ranks[-1]

    def test_no_groups_never_match(self):
        assert score_document(_document("Guide", "guide"), []) is None
