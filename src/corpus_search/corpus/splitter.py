"""Splitting a corpus into size-bounded JSON chunks plus a manifest."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
import logging
from pathlib import Path
import shutil

import orjson

from corpus_search.corpus.loader import MANIFEST_NAME
from corpus_search.domain.model import normalize_line_endings, normalize_path
from corpus_search.errors import ChunkTooLargeError


logger = logging.getLogger(__name__)

MAX_CHUNK_BYTES = 10 * 1024 * 1024


def chunk_file_name(index: int) -> str:
    return f"chunk-{index:03d}.json"


def _encode_record(record: Mapping[str, object]) -> bytes:
    content = record.get("content")
    title = record.get("title")
    path = record.get("path")
    return orjson.dumps(
        {
            "content": normalize_line_endings("" if content is None else str(content)),
            "title": "" if title is None else str(title),
            "path": normalize_path("" if path is None else str(path)),
        }
    )


def split_records(
    records: Iterable[Mapping[str, object]],
    output_dir: Path | str,
    *,
    max_chunk_bytes: int = MAX_CHUNK_BYTES,
) -> list[str]:
    """Write ``records`` as ``chunk-NNN.json`` files and return the chunk names.

    The output directory is recreated from scratch. Each chunk is a JSON
    array whose encoded size never exceeds ``max_chunk_bytes``; records keep
    their order across chunks. ``manifest.json`` lists the chunks in order.

    Raises:
        ChunkTooLargeError: a single record does not fit in one chunk.
    """
    directory = Path(output_dir)
    shutil.rmtree(directory, ignore_errors=True)
    directory.mkdir(parents=True, exist_ok=True)

    chunk_names: list[str] = []
    pending: list[bytes] = []
    pending_size = 2  # the surrounding brackets

    def flush() -> None:
        nonlocal pending, pending_size
        if not pending:
            return
        name = chunk_file_name(len(chunk_names))
        (directory / name).write_bytes(b"[" + b",".join(pending) + b"]")
        chunk_names.append(name)
        pending = []
        pending_size = 2

    for position, record in enumerate(records):
        encoded = _encode_record(record)
        if len(encoded) + 2 > max_chunk_bytes:
            raise ChunkTooLargeError(
                f"Record {position} is {len(encoded)} bytes and cannot fit in a {max_chunk_bytes}-byte chunk"
            )
        separator = 1 if pending else 0
        if pending_size + separator + len(encoded) > max_chunk_bytes:
            flush()
            separator = 0
        pending.append(encoded)
        pending_size += separator + len(encoded)
    flush()

    manifest = {"chunks": chunk_names, "generatedAt": datetime.now(timezone.utc).isoformat()}
    (directory / MANIFEST_NAME).write_bytes(orjson.dumps(manifest, option=orjson.OPT_INDENT_2))
    logger.info("Split corpus into %d chunks in %s", len(chunk_names), directory)
    return chunk_names
