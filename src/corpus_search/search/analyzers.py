"""Text analysis for the token index.

An ``Analyzer`` runs a tokenizer and then a chain of token filters. The index
analyzer keeps maximal runs of ASCII letters, digits and CJK ideographs,
lowercases them and drops runs shorter than ``MIN_TOKEN_LENGTH``. There is no
stemming and there are no stopwords.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
import re


MIN_TOKEN_LENGTH = 2

# CJK Unified Ideographs are limited to U+4E00..U+9FA5
TOKEN_PATTERN = re.compile(r"[a-zA-Z0-9\u4e00-\u9fa5]+")

_ASCII_TERM = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class Token:
    text: str
    position: int
    start: int
    end: int


TokenStream = Iterable[Token]
TokenFilter = Callable[[TokenStream], TokenStream]


def regex_tokens(text: str, pattern: re.Pattern[str] = TOKEN_PATTERN) -> Iterator[Token]:
    """Every maximal ``pattern`` match, with offsets into ``text``."""
    for position, match in enumerate(pattern.finditer(text)):
        yield Token(match.group(0), position, match.start(), match.end())


def lowercase(tokens: TokenStream) -> Iterator[Token]:
    for token in tokens:
        lowered = token.text.lower()
        yield token if lowered == token.text else replace(token, text=lowered)


def min_length(limit: int) -> TokenFilter:
    """Filter factory dropping tokens shorter than ``limit`` characters."""

    def keep_long(tokens: TokenStream) -> Iterator[Token]:
        return (token for token in tokens if len(token.text) >= limit)

    return keep_long


class Analyzer:
    """Tokenizer followed by filters; positions are renumbered after filtering."""

    def __init__(
        self,
        tokenizer: Callable[[str], TokenStream] = regex_tokens,
        filters: Iterable[TokenFilter] = (),
    ) -> None:
        self.tokenizer = tokenizer
        self.filters = tuple(filters)

    def __call__(self, text: str) -> list[Token]:
        stream = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return [replace(token, position=index) for index, token in enumerate(stream)]


INDEX_ANALYZER = Analyzer(filters=(lowercase, min_length(MIN_TOKEN_LENGTH)))


def extract_tokens(text: str) -> set[str]:
    """Distinct index tokens of ``text``."""
    if not text:
        return set()
    return {token.text for token in INDEX_ANALYZER(text)}


def is_indexable_term(term: str) -> bool:
    """True when a lowercase query term can be answered by a single index bucket."""
    return len(term) >= MIN_TOKEN_LENGTH and _ASCII_TERM.fullmatch(term) is not None
