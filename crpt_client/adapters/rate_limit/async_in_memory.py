"""In-memory fixed-window admission controller for asyncio callers.

Same reset-to-full semantics as the threaded controller, with the refill
schedule running as a task on the event loop that built the controller.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque

from crpt_client.adapters.rate_limit.base import (
    AbstractAsyncAdmissionController,
    PermitSnapshot,
    validate_rate_limit,
)
from crpt_client.core.errors import CancellationAppError, ConfigurationAppError

logger = logging.getLogger(__name__)


class AsyncInMemoryAdmissionController(AbstractAsyncAdmissionController):
    """Permit pool for coroutines, refilled by a background task.

    Must be constructed inside a running event loop; the refill task is
    created immediately and first fires one full window later. Waiting
    coroutines are served in arrival order.
    """

    def __init__(self, *, request_limit: int, window_seconds: float) -> None:
        """Initialize the pool and schedule the refill task.

        Raises:
            ConfigurationAppError: If the limits are invalid or there is no
                running event loop to host the refill task.
        """
        validate_rate_limit(request_limit, window_seconds)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise ConfigurationAppError(
                code="refill_schedule_unavailable",
                message="AsyncInMemoryAdmissionController requires a running event loop",
                details={"hint": "Create the controller from within a coroutine"},
            ) from exc

        self._limit = request_limit
        self._window_seconds = window_seconds
        self._condition = asyncio.Condition()
        self._available = request_limit
        self._waiters: deque[object] = deque()
        self._refills = 0
        self._granted = 0
        self._closed = False
        self._refill_task = loop.create_task(
            self._run_refill_schedule(), name="admission-refill"
        )

    async def __aenter__(self) -> "AsyncInMemoryAdmissionController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def request_limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    async def _run_refill_schedule(self) -> None:
        while True:
            await asyncio.sleep(self._window_seconds)
            await self.refill()

    def _raise_if_closed(self) -> None:
        if self._closed:
            raise CancellationAppError(
                code="admission_controller_closed",
                message="Admission controller has been shut down",
            )

    async def acquire(self, *, timeout: float | None = None) -> None:
        """Take one permit, suspending until a refill makes one available.

        Args:
            timeout: Maximum seconds to wait (None waits indefinitely).

        Raises:
            CancellationAppError: On timeout or when the controller is closed.
            asyncio.CancelledError: When the awaiting task is cancelled; no
                permit is consumed.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = None if timeout is None else started + timeout

        async with self._condition:
            self._raise_if_closed()
            if self._available > 0 and not self._waiters:
                self._available -= 1
                self._granted += 1
                return

            ticket = object()
            self._waiters.append(ticket)
            try:
                while True:
                    self._raise_if_closed()
                    if self._available > 0 and self._waiters[0] is ticket:
                        self._available -= 1
                        self._granted += 1
                        break

                    if deadline is None:
                        await self._condition.wait()
                        continue

                    try:
                        await asyncio.wait_for(self._condition.wait(), deadline - loop.time())
                    except asyncio.TimeoutError as exc:
                        raise CancellationAppError(
                            code="acquire_timeout",
                            message="Timed out waiting for a permit",
                            details={
                                "timeout_seconds": timeout,
                                "request_limit": self._limit,
                                "window_seconds": self._window_seconds,
                            },
                        ) from exc
            finally:
                self._waiters.remove(ticket)
                self._condition.notify_all()

        logger.debug(
            "admission.acquired",
            extra={"waited": True, "waited_s": round(loop.time() - started, 4)},
        )

    def try_acquire(self) -> bool:
        if self._closed or self._available == 0 or self._waiters:
            return False
        self._available -= 1
        self._granted += 1
        return True

    async def refill(self) -> int:
        """Restore the pool to ``request_limit`` permits.

        Returns:
            Number of permits added back.
        """
        async with self._condition:
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
        return PermitSnapshot(
            request_limit=self._limit,
            available_permits=self._available,
            waiting=len(self._waiters),
            window_seconds=self._window_seconds,
            refills=self._refills,
            granted=self._granted,
            closed=self._closed,
        )

    async def aclose(self) -> None:
        """Cancel the refill task and fail any suspended acquisitions."""
        if self._closed:
            return

        async with self._condition:
            self._closed = True
            self._condition.notify_all()

        self._refill_task.cancel()
        await asyncio.wait({self._refill_task})

        logger.debug("admission.shutdown", extra={"granted": self._granted})
