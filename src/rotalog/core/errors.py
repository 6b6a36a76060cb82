"""
Error hierarchy for rotalog.

Every error raised by the library derives from :class:`RotalogError` and
carries an :class:`ErrorContext` (id, UTC timestamp, category, severity and
free-form metadata) so callers can report failures uniformly.

Sink failures are raised as :class:`SinkError` subclasses. They are the
library's rendition of an explicit result: a sink call either returns ``None``
or raises one of these to its caller, and nothing in the library lets them
escape further or terminate the process.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    CONFIGURATION = "configuration"
    IO = "io"
    ROTATION = "rotation"
    SERIALIZATION = "serialization"
    LIFECYCLE = "lifecycle"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Context captured when an error is created."""

    category: ErrorCategory
    severity: ErrorSeverity
    error_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "severity": self.severity.value,
            "metadata": dict(self.metadata),
        }


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    **metadata: Any,
) -> ErrorContext:
    """Create an error context with the given classification."""
    return ErrorContext(category=category, severity=severity, metadata=metadata)


class RotalogError(Exception):
    """Base exception for all rotalog errors."""

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        error_context: ErrorContext | None = None,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if error_context is None:
            error_context = create_error_context(
                category or self.default_category,
                severity or self.default_severity,
                **metadata,
            )
        self.context = error_context
        if cause is not None and self.__cause__ is None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class ConfigurationError(RotalogError):
    """Invalid configuration; fatal for whatever was being built."""

    default_category = ErrorCategory.CONFIGURATION
    default_severity = ErrorSeverity.HIGH


class SinkError(RotalogError):
    """Base class for failures reported by a sink."""

    default_category = ErrorCategory.IO

    def __init__(
        self,
        message: str,
        *,
        sink_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        if sink_name is not None:
            kwargs.setdefault("sink", sink_name)
        super().__init__(message, **kwargs)
        self.sink_name = sink_name


class SinkConfigurationError(SinkError, ConfigurationError):
    """A sink could not be constructed, e.g. its path is a directory."""

    default_category = ErrorCategory.CONFIGURATION
    default_severity = ErrorSeverity.CRITICAL


class RotationFailedError(SinkError):
    """Renaming or reopening during rotation failed; the old file is kept."""

    default_category = ErrorCategory.ROTATION


class WriteFailedError(SinkError):
    """A record could not be written and is lost."""

    default_severity = ErrorSeverity.HIGH


class _AggregateSinkError(SinkError):
    def __init__(
        self,
        message: str,
        failures: list[tuple[str, SinkError]],
        **kwargs: Any,
    ) -> None:
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{message}: {names}", **kwargs)
        self.failures = list(failures)

    @property
    def failed_sinks(self) -> list[str]:
        return [name for name, _ in self.failures]


class PartialWriteFailure(_AggregateSinkError):
    """One or more multiplexed sinks failed; the others received the record."""


class SinkCloseFailure(_AggregateSinkError):
    """One or more sinks failed to close; every sink was still closed."""


class ServiceClosedError(SinkError):
    """A record was logged after the service reached the stopped phase."""

    default_category = ErrorCategory.LIFECYCLE
    default_severity = ErrorSeverity.LOW
