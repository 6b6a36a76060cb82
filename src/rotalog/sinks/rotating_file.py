"""
Size-based rotating file sink.

The sink owns one file at a fixed path. Before each append it asks the
:class:`~rotalog.core.rotation.RotationPolicy` whether the incoming bytes
require a rotation. Rotating renames the file to ``<name>.<N>`` (next unused
generation), opens a fresh file at the original path and evicts the oldest
archives beyond ``max_archives``.

All state lives behind one lock per sink. A writer arriving during a
rotation waits and then appends to the fresh file, so lines are never
interleaved and per-file ordering matches lock acquisition order.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import BinaryIO, Callable

from ..core import diagnostics
from ..core.errors import (
    RotationFailedError,
    SinkConfigurationError,
    SinkError,
    WriteFailedError,
)
from ..core.filesystem import FileSystem, OsFileSystem
from ..core.records import LogRecord
from ..core.rotation import (
    RotationPolicy,
    RotationState,
    archive_generation,
    evict,
    next_archive_name,
    sort_archives,
)
from ..core.serialization import Renderer, render_text
from ..metrics.metrics import NULL_TRACER, SinkTracer


def _os_reason(error: OSError) -> str:
    return error.strerror or str(error)


class RotatingFileSink:
    """File sink that rotates by size and keeps a bounded set of archives."""

    def __init__(
        self,
        path: str | Path,
        policy: RotationPolicy | None = None,
        *,
        name: str = "file",
        renderer: Renderer = render_text,
        fs: FileSystem | None = None,
        clock: Callable[[], float] = time.monotonic,
        tracer: SinkTracer = NULL_TRACER,
    ) -> None:
        self.name = name
        self._path = Path(path)
        self._policy = policy if policy is not None else RotationPolicy()
        self._render = renderer
        self._fs: FileSystem = fs if fs is not None else OsFileSystem()
        self._clock = clock
        self._tracer = tracer
        self._lock = threading.Lock()
        self._closed = False

        # Fail fast on misconfiguration instead of on the first write
        self._file: BinaryIO = self._open_initial()
        try:
            existing_size = self._fs.size(self._path)
            siblings = self._fs.list_dir(self._path.parent)
        except OSError as e:
            self._close_quietly(self._file)
            raise SinkConfigurationError(
                f"{self._path} ({_os_reason(e)})", sink_name=self.name, cause=e
            ) from e
        self._state = RotationState(bytes_written=existing_size)
        self._state.archives = sort_archives(self._path.name, siblings)
        if self._policy.enabled:
            self._evict()

    # Accessors -------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def policy(self) -> RotationPolicy:
        return self._policy

    @property
    def archives(self) -> tuple[str, ...]:
        """Archive file names, oldest first."""
        with self._lock:
            return tuple(self._state.archives)

    @property
    def archive_paths(self) -> tuple[Path, ...]:
        return tuple(self._path.with_name(n) for n in self.archives)

    @property
    def bytes_written(self) -> int:
        with self._lock:
            return self._state.bytes_written

    @property
    def closed(self) -> bool:
        return self._closed

    # Sink protocol ---------------------------------------------------------

    def write(self, record: LogRecord) -> None:
        try:
            data = self._render(record)
        except Exception as e:
            self._tracer.write_failed(self.name)
            raise WriteFailedError(
                f"could not render record for {self._path}",
                sink_name=self.name,
                cause=e,
            ) from e
        with self._lock:
            if self._closed:
                raise WriteFailedError(
                    f"file sink {self._path} is closed", sink_name=self.name
                )
            now = self._clock()
            if self._policy.should_rotate(self._state, len(data), now):
                try:
                    self._rotate(now)
                except RotationFailedError as e:
                    self._tracer.rotation_failed(self.name)
                    # Back off for min_delay before attempting again
                    self._state.last_rotation = now
                    diagnostics.warn(
                        "sink",
                        "rotation failed, writing to current file",
                        sink=self.name,
                        path=str(self._path),
                        detail=e.message,
                    )
            self._append(data)

    def flush(self) -> None:
        with self._lock:
            if self._closed:
                return
            try:
                self._file.flush()
            except OSError as e:
                raise WriteFailedError(
                    f"flush of {self._path} failed: {_os_reason(e)}",
                    sink_name=self.name,
                    cause=e,
                ) from e

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._file.flush()
            except OSError as e:
                self._close_quietly(self._file)
                raise SinkError(
                    f"flush of {self._path} on close failed: {_os_reason(e)}",
                    sink_name=self.name,
                    cause=e,
                ) from e
            try:
                self._file.close()
            except OSError as e:
                raise SinkError(
                    f"close of {self._path} failed: {_os_reason(e)}",
                    sink_name=self.name,
                    cause=e,
                ) from e

    # Internals (called with the lock held) ---------------------------------

    def _open_initial(self) -> BinaryIO:
        if self._fs.is_dir(self._path):
            raise SinkConfigurationError(
                f"{self._path} (Is a directory)", sink_name=self.name
            )
        try:
            self._fs.makedirs(self._path.parent)
            return self._fs.open_append(self._path)
        except OSError as e:
            raise SinkConfigurationError(
                f"{self._path} ({_os_reason(e)})", sink_name=self.name, cause=e
            ) from e

    def _append(self, data: bytes) -> None:
        try:
            self._file.write(data)
            self._file.flush()
        except Exception as e:
            self._tracer.write_failed(self.name)
            raise WriteFailedError(
                f"write to {self._path} failed", sink_name=self.name, cause=e
            ) from e
        # Count only after the bytes reached the file
        self._state.bytes_written += len(data)
        self._tracer.record_written(self.name, len(data))

    def _next_free_archive(self) -> str:
        base = self._path.name
        candidate = next_archive_name(base, self._state.archives)
        # Skip names created behind our back
        while self._fs.exists(self._path.with_name(candidate)):
            generation = archive_generation(base, candidate) or 0
            candidate = f"{base}.{generation + 1}"
        return candidate

    def _rotate(self, now: float) -> None:
        try:
            self._file.flush()
            archive = self._next_free_archive()
        except OSError as e:
            raise RotationFailedError(
                f"could not prepare rotation of {self._path}: {_os_reason(e)}",
                sink_name=self.name,
                cause=e,
            ) from e
        archive_path = self._path.with_name(archive)

        try:
            self._fs.rename(self._path, archive_path)
        except OSError as e:
            raise RotationFailedError(
                f"could not rename {self._path} to {archive}: {_os_reason(e)}",
                sink_name=self.name,
                cause=e,
            ) from e

        try:
            fresh = self._fs.open_append(self._path)
        except OSError as e:
            self._rollback_rename(archive_path)
            raise RotationFailedError(
                f"could not reopen {self._path}: {_os_reason(e)}",
                sink_name=self.name,
                cause=e,
            ) from e

        self._close_quietly(self._file)
        self._file = fresh
        self._state.archives.append(archive)
        self._state.bytes_written = 0
        self._state.last_rotation = now
        self._tracer.rotation(self.name)
        self._evict()

    def _rollback_rename(self, archive_path: Path) -> None:
        try:
            self._fs.rename(archive_path, self._path)
        except OSError as e:
            # The open handle still follows the renamed file, so no data is lost
            diagnostics.warn(
                "sink",
                "rotation rollback failed",
                sink=self.name,
                path=str(self._path),
                archive=str(archive_path),
                detail=_os_reason(e),
            )

    def _evict(self) -> None:
        for victim in evict(self._state.archives, self._policy.max_archives):
            try:
                self._fs.delete(self._path.with_name(victim))
            except FileNotFoundError:
                pass
            except OSError as e:
                diagnostics.warn(
                    "sink",
                    "archive eviction failed",
                    sink=self.name,
                    archive=victim,
                    detail=_os_reason(e),
                )
            self._state.archives.remove(victim)
            self._tracer.archive_evicted(self.name)

    def _close_quietly(self, handle: BinaryIO) -> None:
        try:
            handle.close()
        except OSError as e:
            diagnostics.warn(
                "sink", "closing log file failed", sink=self.name, detail=_os_reason(e)
            )
