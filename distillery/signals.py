"""Shutdown signal handling: the first signal requests a stop, the second exits."""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading

logger = logging.getLogger(__name__)

if sys.platform == "win32":
    SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT,)
else:
    SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

_setup_lock = threading.Lock()
_shutdown: threading.Event | None = None
_received = 0


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


def _handle(signum: int, frame: object = None) -> None:
    global _received
    _received += 1
    if _received == 1:
        logger.warning("signal received: %r, canceling context...", _signal_name(signum))
        if _shutdown is not None:
            _shutdown.set()
    elif _received == 2:
        logger.warning("second signal received: %r, exiting...", _signal_name(signum))
        os._exit(1)


def setup_signal_context() -> threading.Event:
    """Install handlers for the shutdown signals and return the event they set.

    The first signal sets the event; a second one ends the process with exit
    code 1. May be called only once per process, together with
    :func:`setup_signal_handler`.
    """
    global _shutdown
    with _setup_lock:
        if _shutdown is not None:
            raise RuntimeError("signal handler already set up")
        _shutdown = threading.Event()
        for signum in SHUTDOWN_SIGNALS:
            signal.signal(signum, _handle)
        return _shutdown


def setup_signal_handler() -> threading.Event:
    """Same as :func:`setup_signal_context`; the returned event marks the stop."""
    return setup_signal_context()


def request_shutdown() -> bool:
    """Act as if a shutdown signal had arrived; report whether a handler was notified."""
    if _shutdown is None:
        return False
    _handle(SHUTDOWN_SIGNALS[0])
    return True