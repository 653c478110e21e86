"""Command line entry point: serve the search API or split a corpus into chunks."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from corpus_search.config import Settings
from corpus_search.corpus.loader import load_records
from corpus_search.corpus.splitter import MAX_CHUNK_BYTES, split_records
from corpus_search.errors import CorpusSearchError


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corpus-search",
        description="In-memory full-text search over a static documentation corpus",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP search service")
    serve.add_argument("--host", help="Bind host (default: HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, help="Bind port (default: PORT or 13000)")
    serve.add_argument(
        "--data-path",
        help="Chunk directory, .json file or legacy data.js to load (default: DATA_PATH or data_chunks)",
    )

    split = subparsers.add_parser("split", help="Split a corpus into size-bounded JSON chunks")
    split.add_argument("source", type=Path, help="Corpus to split: data.js, a .json file or a chunk directory")
    split.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data_chunks"),
        help="Directory to (re)create with the chunks and manifest.json (default: data_chunks)",
    )
    split.add_argument(
        "--max-chunk-bytes",
        type=int,
        default=MAX_CHUNK_BYTES,
        help=f"Maximum size of one chunk file in bytes (default: {MAX_CHUNK_BYTES})",
    )
    return parser


def _configure_logging() -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def _serve(args: argparse.Namespace) -> int:
    from corpus_search.app import run_server

    overrides = {
        name: value
        for name, value in (("host", args.host), ("port", args.port), ("data_path", args.data_path))
        if value is not None
    }
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1
    run_server(settings)
    return 0


def _split(args: argparse.Namespace) -> int:
    if args.max_chunk_bytes < 1:
        logger.error("--max-chunk-bytes must be positive, got %d", args.max_chunk_bytes)
        return 1
    try:
        records = load_records(args.source)
        chunks = split_records(records, args.output_dir, max_chunk_bytes=args.max_chunk_bytes)
    except CorpusSearchError as exc:
        logger.error("Split failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Cannot write %s: %s", args.output_dir, exc)
        return 1
    logger.info("Wrote %d records into %d chunks under %s", len(records), len(chunks), args.output_dir)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    _configure_logging()
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    if args.command == "serve":
        return _serve(args)
    return _split(args)


if __name__ == "__main__":
    sys.exit(main())
