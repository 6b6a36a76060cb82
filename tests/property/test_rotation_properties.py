from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rotalog.core.records import LogRecord
from rotalog.core.rotation import (
    RotationPolicy,
    RotationState,
    archive_generation,
    evict,
    next_archive_name,
    sort_archives,
)
from rotalog.sinks.rotating_file import RotatingFileSink

pytestmark = pytest.mark.property

BASE = "server.log"

generations = st.lists(st.integers(min_value=1, max_value=10_000), unique=True)
line_sizes = st.lists(st.integers(min_value=1, max_value=64), min_size=1, max_size=60)


def _raw(record: LogRecord) -> bytes:
    return record.message.encode("ascii") + b"\n"


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@given(gens=generations)
def test_next_archive_is_newer_than_all(gens: list[int]) -> None:
    names = [f"{BASE}.{g}" for g in gens]

    fresh = next_archive_name(BASE, names)

    generation = archive_generation(BASE, fresh)
    assert generation is not None
    assert all(generation > g for g in gens)
    assert fresh not in names


@given(gens=generations)
def test_sort_archives_is_oldest_first(gens: list[int]) -> None:
    names = [f"{BASE}.{g}" for g in gens] + ["other.txt", BASE]

    ordered = sort_archives(BASE, names)

    assert [archive_generation(BASE, n) for n in ordered] == sorted(gens)


@given(gens=generations, bound=st.integers(min_value=1, max_value=20))
def test_evict_keeps_newest_within_bound(gens: list[int], bound: int) -> None:
    archives = sort_archives(BASE, [f"{BASE}.{g}" for g in gens])

    victims = evict(archives, bound)
    kept = [a for a in archives if a not in victims]

    assert len(kept) == min(bound, len(archives))
    assert kept == archives[len(archives) - len(kept) :]


@given(
    threshold=st.integers(min_value=0, max_value=1_000),
    written=st.integers(min_value=0, max_value=2_000),
    incoming=st.integers(min_value=0, max_value=500),
    delay=st.floats(min_value=0, max_value=600),
    elapsed=st.floats(min_value=0, max_value=1_200),
)
def test_should_rotate_matches_definition(
    threshold: int, written: int, incoming: int, delay: float, elapsed: float
) -> None:
    policy = RotationPolicy(size_threshold=threshold, min_delay=delay, max_archives=1)
    state = RotationState(bytes_written=written, last_rotation=0.0)

    expected = threshold > 0 and written + incoming > threshold and elapsed >= delay

    assert policy.should_rotate(state, incoming, now=elapsed) is expected


@settings(max_examples=40, deadline=None)
@given(
    sizes=line_sizes,
    threshold=st.integers(min_value=64, max_value=400),
    max_archives=st.integers(min_value=1, max_value=4),
)
def test_sink_preserves_bounds(
    sizes: list[int], threshold: int, max_archives: int
) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / BASE
        policy = RotationPolicy(
            size_threshold=threshold, min_delay=0, max_archives=max_archives
        )
        sink = RotatingFileSink(path, policy, renderer=_raw, clock=_Clock())
        try:
            for size in sizes:
                sink.write(LogRecord(level="INFO", message="x" * (size - 1)))
                assert sink.bytes_written == path.stat().st_size
                assert sink.bytes_written <= threshold
                assert len(sink.archives) <= max_archives
        finally:
            sink.close()

        on_disk = sorted(p.name for p in Path(tmp).iterdir() if p.name != BASE)
        assert on_disk == sorted(sink.archives)
        for archive in sink.archive_paths:
            assert archive.stat().st_size <= threshold
