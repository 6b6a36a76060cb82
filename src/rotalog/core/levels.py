"""Log level names and priorities.

Levels are plain upper-case strings on records. Priorities follow the stdlib
``logging`` numbers so the stdlib bridge can map levels in both directions.
"""

from __future__ import annotations

from typing import Final

_DEFAULT_LEVELS: Final[dict[str, int]] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARN": 30,
    "WARNING": 30,  # alias
    "ERROR": 40,
    "CRITICAL": 50,
    "FATAL": 50,  # alias
}

_ALIASES: Final[dict[str, str]] = {
    "WARNING": "WARN",
    "FATAL": "CRITICAL",
}


def normalize_level(level: str) -> str:
    """Return the canonical upper-case name of ``level``.

    Raises:
        ValueError: If the level is unknown.
    """
    level_upper = level.strip().upper()
    if level_upper not in _DEFAULT_LEVELS:
        raise ValueError(f"Unknown log level '{level}'")
    return _ALIASES.get(level_upper, level_upper)


def get_level_priority(level: str) -> int:
    """Get priority for a level name.

    Unknown levels default to INFO (20).
    """
    return _DEFAULT_LEVELS.get(level.strip().upper(), 20)


def level_from_stdlib(levelno: int) -> str:
    """Map a stdlib ``logging`` level number to the closest level name."""
    if levelno >= 50:
        return "CRITICAL"
    if levelno >= 40:
        return "ERROR"
    if levelno >= 30:
        return "WARN"
    if levelno >= 20:
        return "INFO"
    return "DEBUG"


def is_enabled_for(level: str, minimum: str) -> bool:
    return get_level_priority(level) >= get_level_priority(minimum)
