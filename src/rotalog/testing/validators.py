"""
Protocol validators for testing rotalog sinks.

Provides utilities to validate that custom sinks implement the sink protocol.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ValidationResult:
    """Result of protocol validation."""

    valid: bool
    plugin_type: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise ProtocolViolationError(
                f"Sink violates {self.plugin_type} protocol: " + "; ".join(self.errors)
            )


class ProtocolViolationError(Exception):
    """Raised when a sink violates its protocol."""

    pass


def validate_sink(sink: Any) -> ValidationResult:
    """Validate that a sink implements the Sink protocol correctly.

    Checks:
    - Required 'name' attribute exists and is a non-empty string
    - ``write`` and ``close`` exist and are plain (not async) callables
    - ``write`` accepts a record parameter
    """
    errors: list[str] = []
    warnings: list[str] = []

    # Check name attribute
    name = getattr(sink, "name", None)
    if name is None:
        errors.append("Missing required 'name' attribute")
    elif not isinstance(name, str):
        errors.append("'name' attribute must be a string")
    elif not name:
        errors.append("'name' attribute must not be empty")

    for method_name in ("write", "close"):
        method = getattr(sink, method_name, None)
        if method is None:
            errors.append(f"Missing required method: {method_name}")
            continue
        if not callable(method):
            errors.append(f"{method_name} must be callable")
        elif inspect.iscoroutinefunction(method):
            errors.append(f"{method_name} must be synchronous")

    # Check write signature
    write = getattr(sink, "write", None)
    if callable(write):
        params = list(inspect.signature(write).parameters)
        if not params:
            errors.append("write must accept a record parameter")

    if not hasattr(sink, "flush"):
        warnings.append("flush is recommended so the console can be detached cleanly")

    return ValidationResult(
        valid=len(errors) == 0,
        plugin_type="Sink",
        errors=errors,
        warnings=warnings,
    )
