"""
Configuration models for rotalog using Pydantic v2 Settings.

Settings can come from environment variables (``ROTALOG_LOG__FILE_PATH``,
``ROTALOG_CORE__LOG_LEVEL`` ...), from keyword arguments, or from a
properties file through :func:`load_settings`.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .errors import ConfigurationError
from .levels import normalize_level
from .rotation import RotationPolicy

_BYTE_SIZE = re.compile(r"^(\d+)\s*([kmg]?)(?:i?b)?$")
_BYTE_UNITS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3}

# Properties-file keys and the nested settings field each one sets
PROPERTY_KEYS: dict[str, tuple[str, str]] = {
    "log.name": ("log", "file_path"),
    "log.rotation_threshold": ("log", "rotation_threshold"),
    "log.rotation_delay": ("log", "rotation_delay_seconds"),
    "log.max_archives": ("log", "max_archives"),
    "log.foreground": ("log", "foreground"),
    "log.level": ("core", "log_level"),
    "log.format": ("core", "format"),
    "app.name": ("core", "app_name"),
    "metrics.enabled": ("core", "enable_metrics"),
}


def parse_byte_size(value: Any) -> Any:
    """Parse ``"20m"``, ``"512k"``, ``"1g"`` or plain integers into bytes."""
    if isinstance(value, str):
        match = _BYTE_SIZE.match(value.strip().lower())
        if match is None:
            raise ValueError(f"invalid byte size '{value}'")
        number, unit = match.groups()
        return int(number) * _BYTE_UNITS[unit]
    return value


class CoreSettings(BaseModel):
    """Output format, minimum level and internal toggles."""

    app_name: str = Field(default="rotalog", description="Logical application name")
    log_level: str = Field(
        default="INFO",
        description="Records below this level are discarded",
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Line format written by every sink",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Count sink activity in Prometheus-compatible counters",
    )
    internal_logging_enabled: bool = Field(
        default=True,
        description="Emit diagnostics such as rotation failures to stderr",
    )

    @field_validator("app_name")
    @classmethod
    def _ensure_app_name_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("app_name must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return normalize_level(value)


class LogSettings(BaseModel):
    """Log file destination and rotation."""

    file_path: Path | None = Field(
        default=None,
        description="Log file path; unset means console output only",
    )
    rotation_threshold: int = Field(
        default=20 * 1024 * 1024,
        ge=0,
        description="Rotate once the file would exceed this many bytes; 0 disables",
    )
    rotation_delay_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="Minimum seconds between two rotations",
    )
    max_archives: int = Field(
        default=7,
        ge=1,
        description="Number of rotated archives to keep",
    )
    foreground: bool = Field(
        default=False,
        description="Keep output on the console even when a file is configured",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("rotation_threshold", mode="before")
    @classmethod
    def _parse_threshold(cls, value: Any) -> Any:
        return parse_byte_size(value)


class Settings(BaseSettings):
    """Top-level configuration model."""

    core: CoreSettings = Field(
        default_factory=CoreSettings,
        description="Application name, level, format and internal toggles",
    )
    log: LogSettings = Field(
        default_factory=LogSettings,
        description="Log file destination and rotation limits",
    )

    model_config = SettingsConfigDict(
        env_prefix="ROTALOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def rotation_policy(self) -> RotationPolicy:
        return RotationPolicy(
            size_threshold=self.log.rotation_threshold,
            min_delay=self.log.rotation_delay_seconds,
            max_archives=self.log.max_archives,
        )

    @property
    def file_logging_enabled(self) -> bool:
        return self.log.file_path is not None and not self.log.foreground


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines; ``#`` and ``!`` start comments."""
    result: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        positions = [p for p in (line.find("="), line.find(":")) if p >= 0]
        if not positions:
            result[line] = ""
            continue
        sep = min(positions)
        result[line[:sep].strip()] = line[sep + 1 :].strip()
    return result


def load_settings(path: str | Path, **overrides: Any) -> Settings:
    """Build :class:`Settings` from a properties file.

    Relative ``log.name`` values are resolved against the file's directory.
    Keyword ``overrides`` are nested dicts merged over the file values.

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"{config_path} ({e.strerror or e})", path=str(config_path), cause=e
        ) from e

    data: dict[str, dict[str, Any]] = {"core": {}, "log": {}}
    for key, value in parse_properties(text).items():
        target = PROPERTY_KEYS.get(key)
        if target is None:
            continue
        group, field_name = target
        data[group][field_name] = value

    file_path = data["log"].get("file_path")
    if file_path and not Path(file_path).is_absolute():
        data["log"]["file_path"] = str(config_path.parent / file_path)

    for group, values in overrides.items():
        data.setdefault(group, {}).update(values)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"{config_path}: {e.error_count()} invalid value(s): "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ),
            path=str(config_path),
            cause=e,
        ) from e
