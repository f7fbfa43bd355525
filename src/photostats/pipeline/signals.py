"""Scan cancellation, optionally driven by Ctrl+C / SIGTERM."""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Any, Iterator

_SCAN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancelToken:
    """Cancellation flag checked by the scan loop between pages.

    The first ``cancel`` wins and its reason ends up in the ScanResult.
    Safe to set from signal handlers or other threads.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()


@contextmanager
def cancel_on_signals(token: CancelToken) -> Iterator[CancelToken]:
    """Cancel ``token`` on SIGINT/SIGTERM while the block runs.

    A second signal during the same scan raises KeyboardInterrupt so a stuck
    page can still be abandoned. Off the main thread handlers cannot be
    installed and the token is yielded untouched.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    previous: dict[int, Any] = {}

    def _on_signal(signum: int, frame: object) -> None:
        if token.cancelled:
            for sig in previous:
                signal.signal(sig, signal.SIG_DFL)
            raise KeyboardInterrupt
        token.cancel(f"received {signal.Signals(signum).name}")

    for sig in _SCAN_SIGNALS:
        previous[sig] = signal.getsignal(sig)
        signal.signal(sig, _on_signal)
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            # getsignal() returns None for handlers installed outside Python
            if handler is not None:
                signal.signal(sig, handler)
