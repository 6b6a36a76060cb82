"""Forward records from the stdlib ``logging`` module into a log service.

Third-party libraries log through ``logging``; installing the bridge on the
root logger makes their output follow the same lifecycle and rotation as the
application's own records.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .errors import ServiceClosedError
from .levels import level_from_stdlib
from .records import LogRecord

if TYPE_CHECKING:
    from .lifecycle import LogLifecycleService

_OWN_LOGGER = "rotalog"


class StdlibBridgeHandler(logging.Handler):
    """``logging.Handler`` that converts stdlib records to :class:`LogRecord`."""

    def __init__(
        self, service: LogLifecycleService, level: int = logging.NOTSET
    ) -> None:
        super().__init__(level)
        self._service = service
        self._exc_formatter = logging.Formatter()

    def emit(self, record: logging.LogRecord) -> None:
        # Loop prevention: never feed our own records back in
        if record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + "."):
            return
        try:
            message = record.getMessage()
            if record.exc_info:
                message += "\n" + self._exc_formatter.formatException(record.exc_info)
            self._service.log(
                LogRecord(
                    level=level_from_stdlib(record.levelno),
                    message=message,
                    source=record.name,
                    timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
                )
            )
        except ServiceClosedError:
            # Late library output after shutdown has nowhere to go
            return
        except Exception:
            self.handleError(record)


def enable_stdlib_bridge(
    service: LogLifecycleService,
    *,
    level: int = logging.WARNING,
    logger_name: str | None = None,
    remove_existing_handlers: bool = False,
) -> StdlibBridgeHandler:
    """Attach a bridge handler to ``logger_name`` (root by default)."""
    target = logging.getLogger(logger_name)
    if remove_existing_handlers:
        for handler in list(target.handlers):
            target.removeHandler(handler)
    bridge = StdlibBridgeHandler(service)
    target.addHandler(bridge)
    target.setLevel(level)
    return bridge


def disable_stdlib_bridge(
    bridge: StdlibBridgeHandler, *, logger_name: str | None = None
) -> None:
    logging.getLogger(logger_name).removeHandler(bridge)
