"""Reading raw corpus records from disk.

Three source layouts are understood:

- a chunk directory holding ``manifest.json`` (``{"chunks": [...]}``) and the
  listed ``chunk-NNN.json`` files, each a JSON array of
  ``{"content", "title", "path"}`` objects
- a single ``.json`` file holding either such an array of objects or a flat
  ``[content, title, path, content, title, path, ...]`` array
- a legacy ``data.js`` script assigning a flat array to ``contents``; the
  array literal must be valid JSON
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import re
from typing import TYPE_CHECKING, Any

import orjson

from corpus_search.errors import CorpusLoadError


if TYPE_CHECKING:
    from corpus_search.search.engine import SearchEngine


logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
RECORD_FIELDS = ("content", "title", "path")

_CONTENTS_ASSIGNMENT = re.compile(r"\bcontents\s*=\s*\[")

Record = dict[str, str]


def group_flat_entries(values: Sequence[Any]) -> list[Record]:
    """Group a flat ``[content, title, path, ...]`` array into records.

    An incomplete trailing group is ignored; missing values become empty
    strings.
    """
    records: list[Record] = []
    for start in range(0, len(values) - 2, 3):
        content, title, path = values[start : start + 3]
        records.append({"content": _text(content), "title": _text(title), "path": _text(path)})
    return records


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _records_from_array(values: Any, source: Path) -> list[Record]:
    if not isinstance(values, list):
        raise CorpusLoadError(f"{source} does not contain a JSON array")
    if all(isinstance(item, dict) for item in values):
        return [{name: _text(item.get(name)) for name in RECORD_FIELDS} for item in values]
    if any(isinstance(item, (dict, list)) for item in values):
        raise CorpusLoadError(f"{source} mixes records with flat values")
    return group_flat_entries(values)


def _read_json(path: Path) -> Any:
    try:
        return orjson.loads(path.read_bytes())
    except FileNotFoundError as exc:
        raise CorpusLoadError(f"Corpus file not found: {path}") from exc
    except OSError as exc:
        raise CorpusLoadError(f"Cannot read {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise CorpusLoadError(f"Malformed JSON in {path}: {exc}") from exc


def _load_chunk_directory(directory: Path) -> list[Record]:
    manifest = _read_json(directory / MANIFEST_NAME)
    chunks = manifest.get("chunks") if isinstance(manifest, dict) else None
    if not isinstance(chunks, list) or not all(isinstance(name, str) for name in chunks):
        raise CorpusLoadError(f"{directory / MANIFEST_NAME} has no valid 'chunks' list")

    records: list[Record] = []
    for name in chunks:
        chunk_path = directory / name
        chunk_records = _records_from_array(_read_json(chunk_path), chunk_path)
        logger.debug("Read %d records from %s", len(chunk_records), chunk_path)
        records.extend(chunk_records)
    return records


def extract_contents_literal(script: str) -> str:
    """Return the array literal assigned to ``contents`` in a legacy data script."""
    match = _CONTENTS_ASSIGNMENT.search(script)
    if match is None:
        raise CorpusLoadError("No 'contents = [...]' assignment found")

    start = match.end() - 1
    depth = 0
    in_string: str | None = None
    escaped = False
    for position in range(start, len(script)):
        char = script[position]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == in_string:
                in_string = None
            continue
        if char in "\"'`":
            in_string = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return script[start : position + 1]
    raise CorpusLoadError("Unterminated 'contents' array")


def _load_legacy_script(path: Path) -> list[Record]:
    try:
        script = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CorpusLoadError(f"Corpus file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusLoadError(f"Cannot read {path}: {exc}") from exc
    literal = extract_contents_literal(script)
    try:
        values = orjson.loads(literal)
    except orjson.JSONDecodeError as exc:
        raise CorpusLoadError(f"'contents' in {path} is not a JSON-compatible array: {exc}") from exc
    return _records_from_array(values, path)


def load_records(source: Path | str) -> list[Record]:
    """Read every record from ``source``.

    Raises:
        CorpusLoadError: the source is missing, of an unknown kind, or malformed.
    """
    path = Path(source)
    if path.is_dir():
        return _load_chunk_directory(path)
    if not path.exists():
        raise CorpusLoadError(f"Corpus source not found: {path}")
    if path.suffix.lower() == ".json":
        return _records_from_array(_read_json(path), path)
    if path.suffix.lower() == ".js":
        return _load_legacy_script(path)
    raise CorpusLoadError(f"Unsupported corpus source: {path}")


def load_corpus(engine: SearchEngine, source: Path | str) -> int:
    """Load ``source`` into ``engine`` and return the document count.

    A source that cannot be read is logged and replaced by an empty corpus,
    so the service still starts and answers every query with no results.
    """
    try:
        records = load_records(source)
    except CorpusLoadError:
        logger.error("Failed to load corpus from %s; starting with 0 documents", source, exc_info=True)
        records = []
    return engine.load(records)
