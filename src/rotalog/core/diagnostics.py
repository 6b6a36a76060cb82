"""
Internal diagnostics for non-fatal library problems.

Sinks cannot report their own trouble through themselves, so recoverable
problems (a rotation that failed and fell back to the old file, an archive
that could not be evicted) are written as a single JSON line to stderr.

Emission is gated by ``CoreSettings.internal_logging_enabled``. The value is
read once and cached in ``_internal_logging_enabled``; tests reset the cache.
Nothing in this module ever raises.
"""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timezone
from typing import Any

import orjson

_internal_logging_enabled: bool | None = None
_write_lock = threading.Lock()


def _enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().core.internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = True
    return _internal_logging_enabled


def configure(*, enabled: bool) -> None:
    """Override the cached enablement (used by the bootstrap)."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        "level": level,
        "logger": f"rotalog.{component}",
        "message": message,
    }
    if fields:
        payload["diagnostics"] = fields
    try:
        line = orjson.dumps(payload, default=str, option=orjson.OPT_APPEND_NEWLINE)
        with _write_lock:
            sys.stderr.write(line.decode("utf-8"))
            sys.stderr.flush()
    except Exception:
        # Diagnostics are best-effort
        return


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)
