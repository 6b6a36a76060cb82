"""
Log record type for rotalog.

A :class:`LogRecord` is the immutable unit handed to sinks. Callers build
it (usually through :class:`~rotalog.core.lifecycle.SourceLogger`) and no
component mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .levels import normalize_level


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogRecord:
    """One rendered log line with its severity, origin and time."""

    level: str
    message: str
    source: str = ""
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate and normalise the record after initialization."""
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "level", normalize_level(self.level))

        if not isinstance(self.timestamp, datetime):
            raise ValueError("Timestamp must be a datetime object")
        if self.timestamp.tzinfo is None:
            object.__setattr__(
                self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc)
            )

    @classmethod
    def create(cls, level: str, message: str, source: str = "") -> LogRecord:
        """Create a record stamped with the current UTC time."""
        return cls(level=level, message=message, source=source)

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for serialization."""
        return {
            "timestamp": self.timestamp.isoformat(timespec="milliseconds"),
            "level": self.level,
            "source": self.source,
            "message": self.message,
        }
