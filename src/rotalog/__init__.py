"""
rotalog - lifecycle-aware logging with size-based file rotation.

Records go to the console and the log file while a server starts, to the
log file alone once startup completes, and nowhere after shutdown.

Example:
    from rotalog import LogLifecycleService, Settings

    service = LogLifecycleService.from_settings(
        Settings(log={"file_path": "log/server.log"})
    )
    log = service.get_logger("server")
    log.info("starting")
    service.on_startup_complete()
    ...
    service.on_shutdown()
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    ConfigurationError,
    PartialWriteFailure,
    RotalogError,
    RotationFailedError,
    ServiceClosedError,
    SinkCloseFailure,
    SinkConfigurationError,
    SinkError,
    WriteFailedError,
)
from .core.lifecycle import LifecyclePhase, LogLifecycleService, SourceLogger
from .core.records import LogRecord
from .core.rotation import RotationPolicy
from .core.settings import Settings, load_settings
from .core.stdlib_bridge import enable_stdlib_bridge
from .sinks import ConsoleSink, MultiplexSink, RotatingFileSink, Sink

__all__ = [
    "__version__",
    "VERSION",
    # Service
    "LifecyclePhase",
    "LogLifecycleService",
    "SourceLogger",
    "LogRecord",
    "enable_stdlib_bridge",
    # Configuration
    "RotationPolicy",
    "Settings",
    "load_settings",
    # Sinks
    "Sink",
    "ConsoleSink",
    "MultiplexSink",
    "RotatingFileSink",
    # Errors
    "ConfigurationError",
    "PartialWriteFailure",
    "RotalogError",
    "RotationFailedError",
    "ServiceClosedError",
    "SinkCloseFailure",
    "SinkConfigurationError",
    "SinkError",
    "WriteFailedError",
]

# Version info for compatibility
VERSION = __version__
