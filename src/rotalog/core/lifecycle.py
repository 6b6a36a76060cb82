"""
Log lifecycle service.

The service owns the process's sink tree and decides which sinks receive
records in each lifecycle phase:

- ``STARTING``: every record goes to the console and, when configured, to
  the log file, so startup problems are visible on the terminal.
- ``RUNNING``: once startup completes the console is detached (never closed)
  if a file sink exists; without one the console stays the only sink.
- ``SHUTTING_DOWN``/``STOPPED``: every remaining sink is closed once; later
  ``log`` calls raise :class:`~rotalog.core.errors.ServiceClosedError`.

Phases only move forward and each transition applies at most once. ``log``
and both transitions share one lock, so a close never races a write.
"""

from __future__ import annotations

import threading
import time
import types
from enum import Enum
from typing import BinaryIO, Callable

from ..metrics.metrics import SinkTracer, create_tracer
from ..sinks.base import Sink
from ..sinks.console import ConsoleSink
from ..sinks.multiplex import MultiplexSink
from ..sinks.rotating_file import RotatingFileSink
from .errors import PartialWriteFailure, ServiceClosedError, WriteFailedError
from .filesystem import FileSystem
from .levels import is_enabled_for, normalize_level
from .records import LogRecord
from .serialization import get_renderer
from .settings import Settings


class LifecyclePhase(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class SourceLogger:
    """Convenience front end that stamps records with a fixed source."""

    def __init__(self, service: LogLifecycleService, source: str) -> None:
        self._service = service
        self.source = source

    def log(self, level: str, message: str) -> None:
        self._service.log(LogRecord(level=level, message=message, source=self.source))

    def debug(self, message: str) -> None:
        self.log("DEBUG", message)

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def warn(self, message: str) -> None:
        self.log("WARN", message)

    warning = warn

    def error(self, message: str) -> None:
        self.log("ERROR", message)


class LogLifecycleService:
    """Process-wide logging entry point with startup and shutdown edges."""

    def __init__(
        self,
        console: Sink,
        file_sink: Sink | None = None,
        *,
        min_level: str = "DEBUG",
        tracer: SinkTracer | None = None,
    ) -> None:
        self._console = console
        self._file_sink = file_sink
        members: list[Sink] = [console]
        if file_sink is not None:
            members.append(file_sink)
        self._multiplexer = MultiplexSink(members, name="log-service")
        self._min_level = normalize_level(min_level)
        self._tracer = tracer
        self._phase = LifecyclePhase.STARTING
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        console_stream: BinaryIO | None = None,
        fs: FileSystem | None = None,
        clock: Callable[[], float] = time.monotonic,
        tracer: SinkTracer | None = None,
    ) -> LogLifecycleService:
        """Build the sink tree described by ``settings``.

        Raises:
            SinkConfigurationError: If the log file cannot be opened.
            ConfigurationError: If the configured format is unknown.
        """
        if settings is None:
            settings = Settings()
        renderer = get_renderer(settings.core.format)
        if tracer is None:
            tracer = create_tracer(enabled=settings.core.enable_metrics)

        console = ConsoleSink(console_stream, renderer=renderer, tracer=tracer)
        file_sink: RotatingFileSink | None = None
        if settings.file_logging_enabled:
            assert settings.log.file_path is not None
            file_sink = RotatingFileSink(
                settings.log.file_path,
                settings.rotation_policy(),
                renderer=renderer,
                fs=fs,
                clock=clock,
                tracer=tracer,
            )
        return cls(
            console,
            file_sink,
            min_level=settings.core.log_level,
            tracer=tracer,
        )

    # Accessors -------------------------------------------------------------

    @property
    def phase(self) -> LifecyclePhase:
        with self._lock:
            return self._phase

    @property
    def has_file_sink(self) -> bool:
        return self._file_sink is not None

    @property
    def file_sink(self) -> Sink | None:
        return self._file_sink

    @property
    def console(self) -> Sink:
        return self._console

    @property
    def tracer(self) -> SinkTracer | None:
        return self._tracer

    @property
    def active_sinks(self) -> tuple[str, ...]:
        """Ids of the sinks currently receiving records."""
        return self._multiplexer.names

    def get_logger(self, source: str) -> SourceLogger:
        return SourceLogger(self, source)

    # Logging ---------------------------------------------------------------

    def log(self, record: LogRecord) -> None:
        """Write ``record`` to every active sink.

        Raises:
            ServiceClosedError: After shutdown; no I/O is attempted.
            PartialWriteFailure: Some sinks failed, others got the record.
            WriteFailedError: No sink accepted the record; it is lost.
        """
        with self._lock:
            if self._phase is LifecyclePhase.STOPPED:
                raise ServiceClosedError(
                    "log service is stopped", sink_name=self._multiplexer.name
                )
            if not is_enabled_for(record.level, self._min_level):
                return
            try:
                self._multiplexer.write(record)
            except PartialWriteFailure as e:
                if len(e.failures) < len(self._multiplexer):
                    raise
                raise WriteFailedError(
                    "record lost, every sink failed",
                    sink_name=self._multiplexer.name,
                    cause=e,
                ) from e

    # Transitions -----------------------------------------------------------

    def on_startup_complete(self) -> None:
        """Enter RUNNING; detach the console when a file sink carries output."""
        with self._lock:
            if self._phase is not LifecyclePhase.STARTING:
                return
            if self._file_sink is not None:
                console = self._multiplexer.remove(self._console.name)
                flush = getattr(console, "flush", None)
                if callable(flush):
                    flush()
            self._phase = LifecyclePhase.RUNNING

    def on_shutdown(self) -> None:
        """Close every remaining sink once and enter STOPPED.

        Raises:
            SinkCloseFailure: After all sinks were closed, if any close failed.
        """
        with self._lock:
            if self._phase in (LifecyclePhase.SHUTTING_DOWN, LifecyclePhase.STOPPED):
                return
            self._phase = LifecyclePhase.SHUTTING_DOWN
            try:
                self._multiplexer.close()
            finally:
                self._phase = LifecyclePhase.STOPPED

    def __enter__(self) -> LogLifecycleService:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        self.on_shutdown()
