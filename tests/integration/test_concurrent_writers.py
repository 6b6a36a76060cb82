"""
Many threads logging into one rotating file, through the service and directly.
"""

from __future__ import annotations

import io
import re
import threading
from pathlib import Path

import pytest

from rotalog.core.lifecycle import LogLifecycleService
from rotalog.core.records import LogRecord
from rotalog.core.rotation import RotationPolicy
from rotalog.core.settings import Settings
from rotalog.sinks.rotating_file import RotatingFileSink

pytestmark = pytest.mark.integration

THREADS = 50
WRITES_PER_THREAD = 100
_LINE = re.compile(r"^\S+ \S+ INFO  \[worker-(\d+)\] message (\d+) of thread$")


def _hammer(service: LogLifecycleService) -> None:
    barrier = threading.Barrier(THREADS)

    def worker(tid: int) -> None:
        log = service.get_logger(f"worker-{tid}")
        barrier.wait()
        for i in range(WRITES_PER_THREAD):
            log.info(f"message {i} of thread")

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    assert not any(t.is_alive() for t in threads)


def _read_lines(sink: RotatingFileSink) -> list[str]:
    """All lines in write order: archives oldest first, then the live file."""
    lines: list[str] = []
    for path in (*sink.archive_paths, sink.path):
        lines.extend(path.read_text().splitlines())
    return lines


def _assert_intact_and_ordered(lines: list[str]) -> None:
    assert len(lines) == THREADS * WRITES_PER_THREAD
    last_seen: dict[int, int] = {}
    for text in lines:
        match = _LINE.match(text)
        assert match is not None, f"interleaved or torn line: {text!r}"
        tid, seq = int(match.group(1)), int(match.group(2))
        # Each thread's records keep their order across files
        assert seq == last_seen.get(tid, -1) + 1
        last_seen[tid] = seq
    assert set(last_seen) == set(range(THREADS))


def _service(tmp_path: Path, **log_settings: object) -> LogLifecycleService:
    settings = Settings(
        log={"file_path": str(tmp_path / "server.log"), **log_settings},
    )
    service = LogLifecycleService.from_settings(settings, console_stream=io.BytesIO())
    service.on_startup_complete()
    return service


def test_without_rotation_every_line_is_intact(tmp_path: Path) -> None:
    service = _service(tmp_path, rotation_threshold=0)
    try:
        _hammer(service)
    finally:
        service.on_shutdown()

    sink = service.file_sink
    assert isinstance(sink, RotatingFileSink)
    assert sink.archives == ()
    _assert_intact_and_ordered(_read_lines(sink))


def test_rotation_under_contention_loses_nothing(tmp_path: Path) -> None:
    service = _service(
        tmp_path,
        rotation_threshold=4096,
        rotation_delay_seconds=0,
        max_archives=10_000,
    )
    try:
        _hammer(service)
    finally:
        service.on_shutdown()

    sink = service.file_sink
    assert isinstance(sink, RotatingFileSink)
    assert len(sink.archives) > 10
    for archive in sink.archive_paths:
        assert archive.stat().st_size <= 4096
    _assert_intact_and_ordered(_read_lines(sink))


def test_retention_bounds_archives_under_contention(tmp_path: Path) -> None:
    service = _service(
        tmp_path,
        rotation_threshold=2048,
        rotation_delay_seconds=0,
        max_archives=3,
    )
    try:
        _hammer(service)
    finally:
        service.on_shutdown()

    sink = service.file_sink
    assert isinstance(sink, RotatingFileSink)
    on_disk = sorted(p.name for p in tmp_path.iterdir() if p.name != "server.log")
    assert len(on_disk) == 3
    assert on_disk == sorted(sink.archives)


def test_direct_writers_contend_on_the_sink_lock(tmp_path: Path) -> None:
    sink = RotatingFileSink(
        tmp_path / "server.log",
        RotationPolicy(size_threshold=4096, min_delay=0, max_archives=10_000),
    )
    barrier = threading.Barrier(THREADS)

    def worker(tid: int) -> None:
        barrier.wait()
        for i in range(WRITES_PER_THREAD):
            sink.write(
                LogRecord(
                    level="INFO",
                    message=f"message {i} of thread",
                    source=f"worker-{tid}",
                )
            )

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(THREADS)]
    try:
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)
        assert not any(t.is_alive() for t in threads)
    finally:
        sink.close()

    assert len(sink.archives) > 10
    for archive in sink.archive_paths:
        assert archive.stat().st_size <= 4096
    _assert_intact_and_ordered(_read_lines(sink))
