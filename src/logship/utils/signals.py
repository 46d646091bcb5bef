"""Signal helpers for graceful shutdown."""

from __future__ import annotations

import signal
from typing import Any, Callable

from logship.utils.logging import get_logger

logger = get_logger(__name__)

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _make_handler(callback: Callable[[], None]) -> Callable[[int, Any], None]:
    def handler(signum: int, _frame: Any) -> None:
        logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        callback()

    return handler


def setup_signal_handlers(on_stop: Any) -> dict[int, Any]:
    """
    Register SIGINT/SIGTERM handlers.

    The `on_stop` object can provide a `stop`, `shutdown` or `close` method;
    otherwise the handler only logs the signal. Handlers run on the main
    thread between bytecodes, so the method must not block or take locks;
    `S3Uploader.stop` is written for this. Must be called from the main
    thread. Returns the previous handlers for `restore_signal_handlers`.
    """

    def _stop() -> None:
        for method_name in ("stop", "shutdown", "close"):
            method = getattr(on_stop, method_name, None)
            if callable(method):
                method()
                break

    handler = _make_handler(_stop)
    previous: dict[int, Any] = {}
    for sig in _SIGNALS:
        previous[sig] = signal.getsignal(sig)
        signal.signal(sig, handler)
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    """Reinstate handlers returned by `setup_signal_handlers`."""
    for sig, handler in previous.items():
        if handler is not None:
            signal.signal(sig, handler)
