"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising several components together",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the `internal_logging_enabled` setting at
    first access, and the bootstrap overrides it. Resetting keeps tests from
    inheriting each other's state.
    """
    import rotalog.core.diagnostics as diag

    diag._internal_logging_enabled = None
    yield
    diag._internal_logging_enabled = None


@pytest.fixture(autouse=True)
def reset_shutdown_hooks() -> Generator[None, None, None]:
    """Drop shutdown hooks registered by a test so atexit stays clean."""
    from rotalog.core import shutdown

    shutdown._reset_for_tests()
    yield
    shutdown._reset_for_tests()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
