from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.records import LogRecord


@runtime_checkable
class Sink(Protocol):
    """Destination that accepts records and can be closed.

    ``write`` returns None on success and raises a ``SinkError`` subclass on
    failure. ``close`` must be idempotent.
    """

    name: str

    def write(self, record: LogRecord) -> None:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...
