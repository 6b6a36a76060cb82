"""Core types: records, errors, rotation policy and configuration."""

from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    PartialWriteFailure,
    RotalogError,
    RotationFailedError,
    ServiceClosedError,
    SinkCloseFailure,
    SinkConfigurationError,
    SinkError,
    WriteFailedError,
    create_error_context,
)
from .records import LogRecord
from .rotation import RotationPolicy, RotationState

__all__ = [
    # Records
    "LogRecord",
    # Rotation
    "RotationPolicy",
    "RotationState",
    # Errors
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "PartialWriteFailure",
    "RotalogError",
    "RotationFailedError",
    "ServiceClosedError",
    "SinkCloseFailure",
    "SinkConfigurationError",
    "SinkError",
    "WriteFailedError",
    "create_error_context",
]
