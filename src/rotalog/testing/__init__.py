"""
Testing utilities for rotalog sinks.

Example:
    from rotalog.testing import RecordingSink, validate_sink

    def test_my_sink():
        result = validate_sink(MySink())
        assert result.valid
"""

from .mocks import FaultyFileSystem, RecordingSink
from .validators import ProtocolViolationError, ValidationResult, validate_sink

__all__ = [
    # Mocks
    "RecordingSink",
    "FaultyFileSystem",
    # Validators
    "ProtocolViolationError",
    "ValidationResult",
    "validate_sink",
]
