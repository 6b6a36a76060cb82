"""
Record rendering for sinks.

Sinks write bytes, so rendering happens once per record before any lock is
taken. Two line formats are supported:

- ``text``: ``2024-01-15 10:30:45.000+0000 INFO  [source] message``
- ``json``: one sorted-key JSON object per line, produced by orjson without
  an intermediate ``str``.
"""

from __future__ import annotations

from datetime import timezone
from typing import Callable, Literal

import orjson

from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    RotalogError,
    create_error_context,
)
from .records import LogRecord

LineFormat = Literal["text", "json"]
Renderer = Callable[[LogRecord], bytes]


def _format_timestamp(record: LogRecord) -> str:
    ts = record.timestamp.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%d %H:%M:%S.") + f"{ts.microsecond // 1000:03d}+0000"


def render_text(record: LogRecord) -> bytes:
    """Render a record as a single human-readable line."""
    try:
        prefix = f"{_format_timestamp(record)} {record.level:<5} "
        if record.source:
            prefix += f"[{record.source}] "
        # Indent continuation lines; only a record's first line starts at column 0
        message = record.message.replace("\r\n", "\n").replace("\n", "\n    ")
        return (prefix + message + "\n").encode("utf-8", errors="replace")
    except Exception as e:
        context = create_error_context(ErrorCategory.SERIALIZATION, ErrorSeverity.HIGH)
        raise RotalogError(
            "Text rendering failed",
            category=ErrorCategory.SERIALIZATION,
            error_context=context,
            cause=e,
        ) from e


def render_json(record: LogRecord) -> bytes:
    """Render a record as one JSON line using orjson."""
    try:
        return orjson.dumps(
            record.to_dict(),
            option=orjson.OPT_SORT_KEYS | orjson.OPT_APPEND_NEWLINE,
        )
    except TypeError as e:
        context = create_error_context(ErrorCategory.SERIALIZATION, ErrorSeverity.HIGH)
        raise RotalogError(
            "Serialization failed",
            category=ErrorCategory.SERIALIZATION,
            error_context=context,
            cause=e,
        ) from e


_RENDERERS: dict[str, Renderer] = {
    "text": render_text,
    "json": render_json,
}


def get_renderer(line_format: str) -> Renderer:
    """Return the renderer for ``line_format``."""
    try:
        return _RENDERERS[line_format]
    except KeyError:
        raise ConfigurationError(
            f"Unknown log format '{line_format}'",
            line_format=line_format,
        ) from None
