"""Admission controller interfaces.

Submission services depend on these abstractions (not the concrete
implementations) so the permit pool can be swapped without changing callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from crpt_client.adapters.rate_limit.cancellation import CancellationToken
from crpt_client.core.errors import ConfigurationAppError


@dataclass(frozen=True)
class PermitSnapshot:
    """Point-in-time view of an admission controller's permit pool.

    Attributes:
        request_limit: Permits granted per window.
        available_permits: Permits that can be acquired right now.
        waiting: Callers currently blocked in acquire.
        window_seconds: Refill period in seconds.
        refills: Number of refills performed since construction.
        granted: Total permits handed out since construction.
        closed: Whether the controller has been shut down.
    """

    request_limit: int
    available_permits: int
    waiting: int
    window_seconds: float
    refills: int
    granted: int
    closed: bool


def validate_rate_limit(request_limit: int, window_seconds: float) -> None:
    """Reject configurations that cannot produce a working controller.

    Raises:
        ConfigurationAppError: If request_limit or window_seconds is not positive.
    """
    if request_limit <= 0:
        raise ConfigurationAppError(
            code="invalid_request_limit",
            message="request_limit must be a positive integer",
            details={"request_limit": request_limit},
        )
    if window_seconds <= 0:
        raise ConfigurationAppError(
            code="invalid_window",
            message="window_seconds must be greater than zero",
            details={"window_seconds": window_seconds},
        )


class AbstractAdmissionController(ABC):
    """Interface for blocking, thread-safe admission controllers."""

    @abstractmethod
    def acquire(
        self,
        *,
        cancellation: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> None:
        """Take one permit, blocking until one is available.

        Args:
            cancellation: Token that abandons the wait when cancelled.
            timeout: Maximum seconds to wait (None waits indefinitely).

        Raises:
            CancellationAppError: If the wait is cancelled, times out, or the
                controller is shut down. No permit is consumed.
        """
        raise NotImplementedError

    @abstractmethod
    def try_acquire(self) -> bool:
        """Take a permit only if one is available without waiting."""
        raise NotImplementedError

    @abstractmethod
    def refill(self) -> int:
        """Restore the pool to full capacity and return the permits added."""
        raise NotImplementedError

    @abstractmethod
    def snapshot(self) -> PermitSnapshot:
        raise NotImplementedError

    @abstractmethod
    def shutdown(self) -> None:
        """Stop the refill schedule and release blocked callers."""
        raise NotImplementedError


class AbstractAsyncAdmissionController(ABC):
    """Interface for admission controllers used from asyncio code."""

    @abstractmethod
    async def acquire(self, *, timeout: float | None = None) -> None:
        """Take one permit, suspending until one is available.

        Raises:
            CancellationAppError: On timeout or when the controller is closed.
            asyncio.CancelledError: When the awaiting task is cancelled.
        """
        raise NotImplementedError

    @abstractmethod
    def try_acquire(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def refill(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def snapshot(self) -> PermitSnapshot:
        raise NotImplementedError

    @abstractmethod
    async def aclose(self) -> None:
        raise NotImplementedError
