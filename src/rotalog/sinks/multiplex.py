from __future__ import annotations

import threading

from ..core.errors import (
    ConfigurationError,
    PartialWriteFailure,
    SinkCloseFailure,
    SinkError,
    WriteFailedError,
)
from ..core.records import LogRecord
from .base import Sink


def _as_sink_error(
    sink: Sink, error: Exception, kind: type[SinkError] = WriteFailedError
) -> SinkError:
    if isinstance(error, SinkError):
        return error
    return kind(
        f"{type(error).__name__}: {error}", sink_name=sink.name, cause=error
    )


class MultiplexSink:
    """Fan each record out to an ordered set of member sinks.

    Members are written in registration order. A failing member never stops
    the others from receiving the record; failures are collected and raised
    together as ``PartialWriteFailure`` once every member has been tried.
    """

    def __init__(
        self, sinks: list[Sink] | None = None, *, name: str = "multiplex"
    ) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._members: dict[str, Sink] = {}
        self._closed = False
        for sink in sinks or []:
            self.add(sink)

    @property
    def names(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._members)

    def __contains__(self, sink_id: object) -> bool:
        with self._lock:
            return sink_id in self._members

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)

    def add(self, sink: Sink) -> str:
        """Register ``sink`` after the existing members; returns its id."""
        with self._lock:
            if sink.name in self._members:
                raise ConfigurationError(
                    f"sink '{sink.name}' is already registered", sink=sink.name
                )
            self._members[sink.name] = sink
            return sink.name

    def remove(self, sink_id: str) -> Sink:
        """Detach a member without closing it and hand it back to the caller.

        Raises:
            KeyError: If no member has that id.
        """
        with self._lock:
            return self._members.pop(sink_id)

    def write(self, record: LogRecord) -> None:
        failures: list[tuple[str, SinkError]] = []
        with self._lock:
            for sink_id, sink in self._members.items():
                try:
                    sink.write(record)
                except Exception as e:
                    failures.append((sink_id, _as_sink_error(sink, e)))
        if failures:
            raise PartialWriteFailure(
                "write failed for sinks", failures, sink_name=self.name
            )

    def close(self) -> None:
        """Close every member in registration order, then report failures."""
        failures: list[tuple[str, SinkError]] = []
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for sink_id, sink in self._members.items():
                try:
                    sink.close()
                except Exception as e:
                    failures.append((sink_id, _as_sink_error(sink, e, SinkError)))
        if failures:
            raise SinkCloseFailure(
                "close failed for sinks", failures, sink_name=self.name
            )
