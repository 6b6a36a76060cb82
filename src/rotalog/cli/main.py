"""
Command-line bootstrap for rotalog.

``rotalog [-h] [-f] conffile`` reads a properties file, opens the log
service, runs the startup checks, marks startup complete and registers a
shutdown hook that closes every sink. With ``-f`` output stays on the
console for the whole run instead of moving to the log file.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from typing import BinaryIO, Callable, Iterable, Sequence, TextIO

from ..core import diagnostics
from ..core.errors import ConfigurationError, SinkError
from ..core.filesystem import FileSystem
from ..core.lifecycle import LogLifecycleService, SourceLogger
from ..core.settings import load_settings
from ..core.shutdown import register_hook
from ..core.stdlib_bridge import disable_stdlib_bridge, enable_stdlib_bridge

EXIT_SUCCESS = 0
EXIT_GENERAL_FAILURE = 1

USAGE = "rotalog [-h] [-f] conffile"

StartupCheck = Callable[[SourceLogger], None]
ShutdownHookRegistrar = Callable[[Callable[[], None]], None]


class _UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    # argparse exits on errors; the bootstrap reports and returns a code instead
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="rotalog", usage=USAGE, add_help=False)
    parser.add_argument(
        "-h", "--help", action="store_true", help="Display this help text"
    )
    parser.add_argument(
        "-f",
        "--foreground",
        action="store_true",
        help=(
            "Output logs to stdout rather than the log file "
            "(otherwise stdout stops receiving logs after startup)"
        ),
    )
    parser.add_argument("conffile", nargs="?", help="Configuration properties file")
    return parser


def _log_quietly(log: SourceLogger, level: str, message: str) -> None:
    try:
        log.log(level, message)
    except SinkError as e:
        diagnostics.warn("bootstrap", "lifecycle message not logged", detail=e.message)


class Bootstrap:
    """Wire configuration, the log service and process shutdown together.

    Collaborators are injected so tests can capture output and shutdown
    hooks instead of touching the real process.
    """

    def __init__(
        self,
        *,
        stdout: TextIO,
        stderr: TextIO,
        console: BinaryIO | None = None,
        fs: FileSystem | None = None,
        clock: Callable[[], float] = time.monotonic,
        add_shutdown_hook: ShutdownHookRegistrar = register_hook,
        startup_checks: Iterable[StartupCheck] = (),
        bridge_stdlib: bool = True,
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._console = console
        self._fs = fs
        self._clock = clock
        self._add_shutdown_hook = add_shutdown_hook
        self._startup_checks = list(startup_checks)
        self._bridge_stdlib = bridge_stdlib
        self._parser = build_parser()
        self.service: LogLifecycleService | None = None

    def _print_help(self, out: TextIO) -> None:
        self._parser.print_help(out)
        out.flush()

    def start(self, argv: Sequence[str]) -> int:
        try:
            args = self._parser.parse_args(list(argv))
        except _UsageError as e:
            print(e, file=self._stderr)
            self._print_help(self._stderr)
            return EXIT_GENERAL_FAILURE

        if args.help:
            self._print_help(self._stdout)
            return EXIT_SUCCESS

        if not args.conffile:
            print("No configuration file specified", file=self._stderr)
            self._print_help(self._stderr)
            return EXIT_GENERAL_FAILURE

        # load config
        overrides = {"log": {"foreground": True}} if args.foreground else {}
        try:
            settings = load_settings(args.conffile, **overrides)
        except ConfigurationError as e:
            print(f"Reading configuration failed: {e.message}", file=self._stderr)
            return EXIT_GENERAL_FAILURE
        diagnostics.configure(enabled=settings.core.internal_logging_enabled)

        # start logging
        try:
            service = LogLifecycleService.from_settings(
                settings, console_stream=self._console, fs=self._fs, clock=self._clock
            )
        except ConfigurationError as e:
            print(f"Failed to open output log file: {e.message}", file=self._stderr)
            return EXIT_GENERAL_FAILURE
        self.service = service
        bridge = enable_stdlib_bridge(service) if self._bridge_stdlib else None
        log = service.get_logger(settings.core.app_name)

        for check in self._startup_checks:
            try:
                check(log)
            except Exception as e:
                name = getattr(check, "__name__", type(check).__name__)
                _log_quietly(log, "ERROR", f"startup check {name} failed: {e}")

        _log_quietly(log, "INFO", f"{settings.core.app_name} startup complete")
        service.on_startup_complete()

        def _on_shutdown() -> None:
            _log_quietly(log, "INFO", f"{settings.core.app_name} shutdown complete")
            if bridge is not None:
                disable_stdlib_bridge(bridge)
            service.on_shutdown()

        self._add_shutdown_hook(_on_shutdown)
        return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bootstrap against the real process streams."""
    bootstrap = Bootstrap(stdout=sys.stdout, stderr=sys.stderr)
    return bootstrap.start(sys.argv[1:] if argv is None else argv)


def cli_main() -> None:
    """Console-script entry: start, then idle until interrupted or terminated."""
    code = main()
    if code != EXIT_SUCCESS:
        sys.exit(code)
    logging.captureWarnings(True)
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    sys.exit(EXIT_SUCCESS)


if __name__ == "__main__":
    cli_main()
