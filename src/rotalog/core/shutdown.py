"""Process shutdown hooks.

This module provides:
- An atexit handler that runs registered hooks on normal exit
- A SIGTERM handler that runs the same hooks, then hands the signal to the
  handler installed before ours (or re-raises it under that disposition)

Hooks run at most once, in registration order. A failing hook does not stop
the others.
"""

from __future__ import annotations

import atexit
import signal
import sys
import threading
from typing import TYPE_CHECKING, Any, Callable

from . import diagnostics

if TYPE_CHECKING:
    from types import FrameType


# Module-level state
_hooks: list[Callable[[], None]] = []
_hooks_lock = threading.Lock()
_shutdown_in_progress: bool = False
_installed: bool = False
_original_sigterm_handler: Any = None


def register_hook(hook: Callable[[], None]) -> None:
    """Run ``hook`` once when the process exits normally or gets SIGTERM."""
    with _hooks_lock:
        _hooks.append(hook)
    _install()


def unregister_hook(hook: Callable[[], None]) -> None:
    with _hooks_lock:
        try:
            _hooks.remove(hook)
        except ValueError:
            pass


def run_hooks() -> None:
    """Run and forget every registered hook.

    Called by atexit and by the signal handler; never raises.
    """
    global _shutdown_in_progress

    with _hooks_lock:
        if _shutdown_in_progress:
            return
        _shutdown_in_progress = True
        hooks = list(_hooks)
        _hooks.clear()

    for hook in hooks:
        try:
            hook()
        except Exception as e:
            diagnostics.warn(
                "shutdown",
                "shutdown hook failed",
                hook=getattr(hook, "__name__", repr(hook)),
                error=type(e).__name__,
                detail=str(e),
            )


def _signal_handler(signum: int, frame: FrameType | None) -> None:
    run_hooks()

    previous = _original_sigterm_handler
    if callable(previous):
        # Chain to the handler the host installed before us
        previous(signum, frame)
        return

    # Restore the previous disposition and re-raise the signal
    try:
        signal.signal(signum, signal.SIG_DFL if previous is None else previous)
        signal.raise_signal(signum)
    except Exception:  # pragma: no cover - rare signal error
        sys.exit(128 + signum)


def _install() -> None:
    global _installed, _original_sigterm_handler

    if _installed:
        return
    _installed = True
    atexit.register(run_hooks)

    # SIGTERM is not available on Windows; handlers only install on main thread
    on_main_thread = threading.current_thread() is threading.main_thread()
    if hasattr(signal, "SIGTERM") and on_main_thread:
        try:
            _original_sigterm_handler = signal.signal(signal.SIGTERM, _signal_handler)
        except Exception:  # pragma: no cover - rare signal error
            pass


def _reset_for_tests() -> None:
    """Reset module state (for testing only)."""
    global _shutdown_in_progress
    with _hooks_lock:
        _hooks.clear()
        _shutdown_in_progress = False
