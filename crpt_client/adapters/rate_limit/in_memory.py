"""In-memory fixed-window admission controller for threaded callers.

Notes:
- Per-process only: every process that builds a controller gets its own budget.
- Thread-safe: acquisitions and refills serialize through one condition.
- Reset-to-full: each refill restores exactly the permits that are missing,
  so unused capacity never carries over into the next window.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from crpt_client.adapters.rate_limit.base import (
    AbstractAdmissionController,
    PermitSnapshot,
    validate_rate_limit,
)
from crpt_client.adapters.rate_limit.cancellation import CancellationToken
from crpt_client.core.errors import CancellationAppError, ConfigurationAppError

logger = logging.getLogger(__name__)


class InMemoryAdmissionController(AbstractAdmissionController):
    """Permit pool replenished to full capacity on a fixed-delay schedule.

    The controller starts with ``request_limit`` permits. A daemon thread
    refills the pool every ``window_seconds``; the first refill happens one
    full window after construction. Callers that find the pool empty block
    until a refill, and are served in arrival order.

    Important:
        Call ``shutdown()`` (or use the controller as a context manager) when
        done, otherwise the refill thread keeps firing for the life of the
        process.
    """

    def __init__(
        self,
        *,
        request_limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the pool and start the refill schedule.

        Args:
            request_limit: Permits granted per window.
            window_seconds: Refill period in seconds.
            clock: Monotonic time source used for acquire timeouts.

        Raises:
            ConfigurationAppError: If the limits are invalid or the refill
                thread cannot be started.
        """
        validate_rate_limit(request_limit, window_seconds)

        self._limit = request_limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._condition = threading.Condition(threading.Lock())
        self._available = request_limit
        self._waiters: deque[object] = deque()
        self._refills = 0
        self._granted = 0
        self._closed = False
        self._stopped = threading.Event()
        self._refill_thread = threading.Thread(
            target=self._run_refill_schedule,
            name="admission-refill",
            daemon=True,
        )
        try:
            self._refill_thread.start()
        except RuntimeError as exc:
            raise ConfigurationAppError(
                code="refill_schedule_unavailable",
                message="Could not start the permit refill schedule",
                details={"error_type": type(exc).__name__},
            ) from exc

        logger.debug(
            "admission.started",
            extra={"request_limit": request_limit, "window_s": window_seconds},
        )

    def __enter__(self) -> "InMemoryAdmissionController":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @property
    def request_limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _run_refill_schedule(self) -> None:
        # Fixed delay: the next window starts after the previous refill ran.
        while not self._stopped.wait(self._window_seconds):
            self.refill()

    def _raise_if_abandoned(self, cancellation: CancellationToken | None) -> None:
        if self._closed:
            raise CancellationAppError(
                code="admission_controller_closed",
                message="Admission controller has been shut down",
            )
        if cancellation is not None and cancellation.cancelled:
            raise CancellationAppError(
                code="acquire_cancelled",
                message="Permit wait was cancelled",
            )

    def _take_permit_locked(self) -> None:
        self._available -= 1
        self._granted += 1

    def _wake_waiters(self) -> None:
        with self._condition:
            self._condition.notify_all()

    def acquire(
        self,
        *,
        cancellation: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> None:
        """Take one permit, blocking until a refill makes one available.

        Args:
            cancellation: Token that abandons the wait when cancelled.
            timeout: Maximum seconds to wait (None waits indefinitely).

        Raises:
            CancellationAppError: If the wait is cancelled, times out, or the
                controller is shut down. The pool is left untouched.
        """
        started = self._clock()
        deadline = None if timeout is None else started + timeout
        unregister = (
            cancellation.add_callback(self._wake_waiters) if cancellation is not None else None
        )
        try:
            with self._condition:
                self._raise_if_abandoned(cancellation)
                waited = not (self._available > 0 and not self._waiters)
                if waited:
                    remaining = self._wait_for_turn_locked(cancellation, deadline, started)
                else:
                    self._take_permit_locked()
                    remaining = self._available
        finally:
            if unregister is not None:
                unregister()

        logger.debug(
            "admission.acquired",
            extra={
                "remaining": remaining,
                "waited": waited,
                "waited_s": round(self._clock() - started, 4),
            },
        )

    def _wait_for_turn_locked(
        self,
        cancellation: CancellationToken | None,
        deadline: float | None,
        started: float,
    ) -> int:
        ticket = object()
        self._waiters.append(ticket)
        try:
            while True:
                self._raise_if_abandoned(cancellation)
                if self._available > 0 and self._waiters[0] is ticket:
                    self._take_permit_locked()
                    return self._available

                wait_for = None
                if deadline is not None:
                    wait_for = deadline - self._clock()
                    if wait_for <= 0:
                        raise CancellationAppError(
                            code="acquire_timeout",
                            message="Timed out waiting for a permit",
                            details={
                                "timeout_seconds": deadline - started,
                                "request_limit": self._limit,
                                "window_seconds": self._window_seconds,
                            },
                        )
                self._condition.wait(wait_for)
        finally:
            self._waiters.remove(ticket)
            # Either the next waiter is now at the head or a permit is still free
            self._condition.notify_all()

    def try_acquire(self) -> bool:
        with self._condition:
            if self._closed or self._available == 0 or self._waiters:
                return False
            self._take_permit_locked()
            return True

    def refill(self) -> int:
        """Restore the pool to ``request_limit`` permits.

        Returns:
            Number of permits added back (0 when nothing was consumed).
        """
        with self._condition:
            missing = self._limit - self._available
            if missing:
                self._available += missing
                self._condition.notify_all()
            self._refills += 1
            waiting = len(self._waiters)

        logger.debug(
            "admission.refill",
            extra={"restored": missing, "waiting": waiting, "request_limit": self._limit},
        )
        return missing

    def snapshot(self) -> PermitSnapshot:
        with self._condition:
            return PermitSnapshot(
                request_limit=self._limit,
                available_permits=self._available,
                waiting=len(self._waiters),
                window_seconds=self._window_seconds,
                refills=self._refills,
                granted=self._granted,
                closed=self._closed,
            )

    def shutdown(self) -> None:
        """Stop the refill thread and fail any blocked acquisitions.

        Safe to call more than once.
        """
        with self._condition:
            if self._closed:
                return
            self._closed = True
            self._condition.notify_all()

        self._stopped.set()
        if self._refill_thread is not threading.current_thread():
            self._refill_thread.join()

        logger.debug("admission.shutdown", extra={"granted": self._granted})
