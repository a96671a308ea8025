"""Cancellation token for abandoning blocking permit waits from another thread."""

from __future__ import annotations

import threading
from typing import Callable


class CancellationToken:
    """One-shot, thread-safe cancellation signal.

    Blocking operations register a callback so they are woken as soon as
    ``cancel()`` is called rather than at their next timeout.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback invoked on cancellation.

        The callback runs immediately if the token is already cancelled.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            run_now = self._event.is_set()
            if not run_now:
                self._callbacks.append(callback)

        if run_now:
            callback()

        def _remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _remove

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)
