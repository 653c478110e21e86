"""Keyword parsing into AND-of-OR query groups.

``"hello world" foo|bar`` parses into two groups, ``("hello world",)`` and
``("foo", "bar")``: a document must match every group and, within a group,
at least one alternative.
"""

from __future__ import annotations

from dataclasses import dataclass
import re


_RAW_TOKEN = re.compile(r'"([^"]+)"|(\S+)')

QueryGroup = tuple[str, ...]


def parse_keywords(raw_keyword: str | None) -> list[QueryGroup]:
    """Split a raw keyword string into ordered OR-groups.

    Quoted phrases are kept whole; every raw token is split on ``|`` and
    blank alternatives are dropped. Returns an empty list when nothing
    usable remains.
    """
    if not raw_keyword:
        return []
    groups: list[QueryGroup] = []
    for match in _RAW_TOKEN.finditer(raw_keyword):
        token = (match.group(1) or match.group(2) or "").strip()
        if not token:
            continue
        alternatives = tuple(part.strip() for part in token.split("|") if part.strip())
        if alternatives:
            groups.append(alternatives)
    return groups


@dataclass(frozen=True)
class ParsedQuery:
    """Parsed keyword groups in display case and in matching (lower) case."""

    groups: tuple[QueryGroup, ...]
    lowered: tuple[QueryGroup, ...]

    @classmethod
    def parse(cls, raw_keyword: str | None) -> ParsedQuery:
        groups = tuple(parse_keywords(raw_keyword))
        lowered = tuple(tuple(term.lower() for term in group) for group in groups)
        return cls(groups=groups, lowered=lowered)

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def preview_terms(self) -> list[str]:
        """Every alternative of every group, in query order."""
        return [term for group in self.groups for term in group]
