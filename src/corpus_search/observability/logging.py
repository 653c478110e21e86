"""Structured JSON logging correlated with the current trace."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from corpus_search.observability.context import current_trace


# Attributes every LogRecord carries; anything else was passed through ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_SENSITIVE_MARKERS = ("password", "secret", "token", "api_key", "authorization")

_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Fields: ``timestamp``, ``level``, ``logger``, ``message``, the trace and
    span IDs of the running request, its ``route`` when bound, ``exception``
    when one is attached, and any ``extra=`` fields. Extra fields whose name
    looks sensitive are replaced by ``[REDACTED]`` and long strings are cut.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        ids = current_trace()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ids.trace_id,
            "span_id": ids.span_id,
        }
        if ids.route:
            entry["route"] = ids.route
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(self._extra_fields(record))
        return orjson.dumps(entry, default=_to_jsonable).decode("utf-8")

    def _extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
                fields[key] = "[REDACTED]"
            elif isinstance(value, str):
                fields[key] = _clip(value, self.MAX_FIELD_LEN)
            else:
                fields[key] = value
        return fields


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (Path, Exception)):
        return str(value)
    return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
    access_log: bool = False,
) -> None:
    """Send every log record to stdout through a single root handler.

    Args:
        level: Root log level name, case-insensitive
        json_output: Use ``JsonFormatter``; plain text otherwise
        logger_levels: Per-logger level overrides (logger name -> level name)
        access_log: Keep uvicorn access lines; they are limited to WARNING otherwise
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_level_name(level))

    overrides = dict(logger_levels or {})
    if not access_log:
        overrides.setdefault("uvicorn.access", "WARNING")
    for name, name_level in overrides.items():
        logging.getLogger(name).setLevel(_level_name(name_level))


def _level_name(level: str) -> str:
    """Upper-cased level name; unknown names fall back to INFO."""
    name = level.upper()
    return name if name in _LEVELS else "INFO"

