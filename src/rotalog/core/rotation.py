"""
Rotation decisions for file sinks.

This module is pure: it decides *whether* to rotate, *what* to call the next
archive and *which* archives to evict. The file sink owns the I/O.

Archives are named ``<base>.<N>`` where ``N`` is a generation counter that
only ever increases, so a larger suffix is always a newer archive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .errors import ConfigurationError


@dataclass(frozen=True)
class RotationPolicy:
    """Immutable rotation configuration.

    Attributes:
        size_threshold: Rotate once the file would grow past this many bytes.
            ``0`` disables rotation entirely, whatever ``min_delay`` says.
        min_delay: Minimum seconds between two rotations. While it has not
            elapsed, writes go into the oversized file instead of rotating.
        max_archives: Number of archives kept; the oldest beyond it are
            deleted during the rotation that created them.
    """

    size_threshold: int = 20 * 1024 * 1024
    min_delay: float = 300.0
    max_archives: int = 7

    def __post_init__(self) -> None:
        if self.size_threshold < 0:
            raise ConfigurationError(
                "size_threshold must be >= 0", size_threshold=self.size_threshold
            )
        if self.min_delay < 0:
            raise ConfigurationError("min_delay must be >= 0", min_delay=self.min_delay)
        if self.max_archives < 1:
            raise ConfigurationError(
                "max_archives must be >= 1", max_archives=self.max_archives
            )

    @classmethod
    def disabled(cls) -> RotationPolicy:
        """Policy that never rotates."""
        return cls(size_threshold=0, min_delay=0.0, max_archives=1)

    @property
    def enabled(self) -> bool:
        return self.size_threshold > 0

    def should_rotate(
        self, state: RotationState, incoming_bytes: int, now: float
    ) -> bool:
        """Return True when writing ``incoming_bytes`` now must rotate first."""
        if not self.enabled:
            return False
        if state.bytes_written + incoming_bytes <= self.size_threshold:
            return False
        if state.last_rotation is None:
            return True
        return (now - state.last_rotation) >= self.min_delay


@dataclass
class RotationState:
    """Mutable rotation bookkeeping owned by exactly one file sink."""

    bytes_written: int = 0
    last_rotation: float | None = None
    archives: list[str] = field(default_factory=list)  # oldest first


def archive_generation(base_name: str, name: str) -> int | None:
    """Return the generation of archive ``name`` or None if it is not one."""
    prefix = base_name + "."
    if not name.startswith(prefix):
        return None
    suffix = name[len(prefix) :]
    if not suffix.isdigit():
        return None
    return int(suffix)


def sort_archives(base_name: str, names: Iterable[str]) -> list[str]:
    """Filter ``names`` down to archives of ``base_name``, oldest first."""
    found: list[tuple[int, str]] = []
    for name in names:
        generation = archive_generation(base_name, name)
        if generation is not None:
            found.append((generation, name))
    return [name for _, name in sorted(found)]


def next_archive_name(base_name: str, existing_archives: Sequence[str]) -> str:
    """Name for the next archive, one generation above every existing one."""
    generations = [
        g
        for g in (archive_generation(base_name, n) for n in existing_archives)
        if g is not None
    ]
    return f"{base_name}.{max(generations, default=0) + 1}"


def evict(archives: Sequence[str], max_archives: int) -> list[str]:
    """Archives to delete, oldest first, so at most ``max_archives`` remain."""
    excess = len(archives) - max_archives
    if excess <= 0:
        return []
    return list(archives[:excess])
