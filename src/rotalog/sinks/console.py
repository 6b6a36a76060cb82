from __future__ import annotations

import sys
import threading
from typing import BinaryIO

from ..core.errors import WriteFailedError
from ..core.records import LogRecord
from ..core.serialization import Renderer, render_text
from ..metrics.metrics import NULL_TRACER, SinkTracer


class ConsoleSink:
    """Sink that writes rendered lines to an already-open byte stream.

    - Defaults to the process's ``sys.stdout.buffer``, resolved on each write
      so redirected stdout is honoured
    - ``close()`` flushes but never closes the underlying stream; the runtime
      may still need it
    - Write failures are raised as ``WriteFailedError``
    """

    def __init__(
        self,
        stream: BinaryIO | None = None,
        *,
        name: str = "console",
        renderer: Renderer = render_text,
        tracer: SinkTracer = NULL_TRACER,
    ) -> None:
        self.name = name
        self._stream = stream
        self._render = renderer
        self._tracer = tracer
        self._lock = threading.Lock()
        self._closed = False

    def _target(self) -> BinaryIO:
        if self._stream is not None:
            return self._stream
        return sys.stdout.buffer

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, record: LogRecord) -> None:
        try:
            data = self._render(record)
        except Exception as e:
            self._tracer.write_failed(self.name)
            raise WriteFailedError(
                "could not render record", sink_name=self.name, cause=e
            ) from e
        with self._lock:
            if self._closed:
                raise WriteFailedError("console sink is closed", sink_name=self.name)
            try:
                stream = self._target()
                stream.write(data)
                stream.flush()
            except Exception as e:
                self._tracer.write_failed(self.name)
                raise WriteFailedError(
                    "console write failed", sink_name=self.name, cause=e
                ) from e
        self._tracer.record_written(self.name, len(data))

    def flush(self) -> None:
        with self._lock:
            try:
                self._target().flush()
            except (OSError, ValueError):
                # Stream already torn down by the runtime
                pass

    def close(self) -> None:
        self.flush()
        with self._lock:
            self._closed = True
