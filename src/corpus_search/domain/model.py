"""Document model and the text normalization applied at load time.

A ``Document`` is created once per record while a corpus is loaded and is
never mutated afterward. The lowercase projections are computed here so that
query-time matching never has to case-fold the corpus again.
"""

from __future__ import annotations

from dataclasses import dataclass
import re


_BACKSLASH_RUN = re.compile(r"\\+")
_HTML_SUFFIX = re.compile(r"\.(html?|htm)$", re.IGNORECASE)


def normalize_line_endings(text: str) -> str:
    """Collapse ``\\r\\n``, ``\\n\\r`` and lone ``\\r`` into ``\\n``."""
    return text.replace("\r\n", "\n").replace("\n\r", "\n").replace("\r", "\n")


def normalize_path(raw_path: str) -> str:
    """Convert every run of backslashes into a single forward slash."""
    return _BACKSLASH_RUN.sub("/", raw_path)


def strip_path_prefix(path: str, prefix: str) -> str:
    """Remove ``prefix`` from the start of ``path``, ignoring case."""
    if prefix and path[: len(prefix)].lower() == prefix.lower():
        return path[len(prefix) :]
    return path


def derive_category(path: str, *, prefix: str, default: str) -> str:
    """Return the first path segment after ``prefix``, or ``default`` when there is none."""
    if not path:
        return default
    remainder = strip_path_prefix(path, prefix).strip()
    if not remainder:
        return default
    return remainder.split("/")[0].strip() or default


def source_path_for(path: str, prefix: str) -> str:
    if not path:
        return ""
    return strip_path_prefix(normalize_path(path), prefix)


def display_title_for(raw_title: str, source_path: str, *, fallback: str) -> str:
    """First non-blank line of the title, else the page file name without its extension."""
    if raw_title:
        normalized = normalize_line_endings(raw_title).strip()
        if normalized:
            first_line = normalized.split("\n")[0].strip()
            if first_line:
                return first_line
    if source_path:
        last = source_path.split("/")[-1]
        return _HTML_SUFFIX.sub("", last) or fallback
    return fallback


@dataclass(frozen=True)
class Document:
    """One normalized corpus entry; ``id`` is its position in the store."""

    id: int
    title: str
    content: str
    path: str
    title_lower: str
    content_lower: str
    category: str

    @classmethod
    def create(
        cls,
        doc_id: int,
        *,
        content: object,
        title: object,
        path: object,
        path_prefix: str,
        default_category: str,
    ) -> Document:
        """Build a document from a raw record, normalizing every text field.

        Missing values (``None``) become empty strings; anything else is
        converted with ``str()`` the way the loader receives it.
        """
        normalized_content = normalize_line_endings(_as_text(content))
        normalized_title = normalize_line_endings(_as_text(title)).strip()
        sanitized_path = normalize_path(_as_text(path))
        return cls(
            id=doc_id,
            title=normalized_title,
            content=normalized_content,
            path=sanitized_path,
            title_lower=normalized_title.lower(),
            content_lower=normalized_content.lower(),
            category=derive_category(sanitized_path, prefix=path_prefix, default=default_category),
        )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
