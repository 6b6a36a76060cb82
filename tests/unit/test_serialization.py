from __future__ import annotations

from datetime import datetime, timedelta, timezone

import orjson
import pytest

from rotalog.core.errors import ConfigurationError
from rotalog.core.records import LogRecord
from rotalog.core.serialization import (
    get_renderer,
    render_json,
    render_text,
)

_TS = datetime(2024, 1, 15, 10, 30, 45, 7000, tzinfo=timezone.utc)


def test_text_line_layout() -> None:
    record = LogRecord(level="INFO", message="ready", source="server", timestamp=_TS)

    assert render_text(record) == b"2024-01-15 10:30:45.007+0000 INFO  [server] ready\n"


def test_text_without_source_has_no_brackets() -> None:
    record = LogRecord(level="ERROR", message="boom", timestamp=_TS)

    assert render_text(record) == b"2024-01-15 10:30:45.007+0000 ERROR boom\n"


def test_text_converts_to_utc() -> None:
    local = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    record = LogRecord(level="INFO", message="x", timestamp=local)

    assert render_text(record).startswith(b"2024-01-15 10:00:00.000+0000")


def test_text_indents_continuation_lines() -> None:
    record = LogRecord(level="WARN", message="first\nsecond\r\nthird", timestamp=_TS)

    rendered = render_text(record).decode()

    assert rendered.endswith("first\n    second\n    third\n")
    assert rendered.count("2024-01-15") == 1


def test_text_encodes_unicode() -> None:
    record = LogRecord(level="INFO", message="café", timestamp=_TS)

    assert render_text(record).endswith("café\n".encode())


def test_json_line() -> None:
    record = LogRecord(level="INFO", message="ready", source="server", timestamp=_TS)

    rendered = render_json(record)

    assert rendered.endswith(b"\n")
    assert rendered.count(b"\n") == 1
    assert orjson.loads(rendered) == {
        "level": "INFO",
        "message": "ready",
        "source": "server",
        "timestamp": "2024-01-15T10:30:45.007+00:00",
    }
    # Keys are sorted
    assert rendered.index(b'"level"') < rendered.index(b'"message"')


def test_get_renderer() -> None:
    assert get_renderer("text") is render_text
    assert get_renderer("json") is render_json
    with pytest.raises(ConfigurationError):
        get_renderer("xml")
